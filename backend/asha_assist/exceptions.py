class AshaAssistError(Exception):
    """Base class for errors raised by the visit and account services."""

    status_code = 500

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class MissingRequiredField(AshaAssistError):
    status_code = 400

    def __init__(self, field: str, message: str = None):
        self.field = field
        super().__init__(message or f"{field} is required")


class DeliveryFailed(AshaAssistError):
    status_code = 502


class NotFound(AshaAssistError):
    status_code = 404


class AccessDenied(AshaAssistError):
    status_code = 403


class VerificationFailed(AshaAssistError):
    status_code = 400

    def __init__(self, message: str = "Invalid or expired OTP."):
        super().__init__(message)


class UsernameTaken(AshaAssistError):
    status_code = 400

    def __init__(self, username: str):
        self.username = username
        super().__init__("Username is already taken!")


class InvalidCredentials(AshaAssistError):
    status_code = 401

    def __init__(self, message: str = "Invalid username or password"):
        super().__init__(message)


class TranscriptionFailed(AshaAssistError):
    status_code = 502
