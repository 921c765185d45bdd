from asha_assist.models.user import User
from asha_assist.models.patient import Patient
from asha_assist.models.visit import Visit
from asha_assist.models.medical_record import MedicalRecord

__all__ = ["User", "Patient", "Visit", "MedicalRecord"]
