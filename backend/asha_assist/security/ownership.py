from asha_assist.exceptions import AccessDenied
from asha_assist.models.visit import Visit
from asha_assist.security.principal import Principal


def ensure_can_read_visit(visit: Visit, principal: Principal) -> None:
    """Only the creating worker or an admin may read a visit's clinical content."""
    if principal.username == visit.owner_username or principal.is_admin:
        return
    raise AccessDenied("You are not authorized to view this visit.")
