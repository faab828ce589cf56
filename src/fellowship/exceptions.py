"""Errors raised by the registration services.

Each error carries the HTTP status it maps to, a stable machine-readable
``code`` and a short message that is safe to show on the public form.
"""

import enum
from typing import Any, Dict


class RejectionReason(str, enum.Enum):
    """Why a form is not accepting submissions"""

    EXPIRED = "expired"
    FULL = "full"
    INACTIVE = "inactive"


REJECTION_MESSAGES = {
    RejectionReason.EXPIRED: "This registration form has expired",
    RejectionReason.FULL: "This registration form is full",
    RejectionReason.INACTIVE: "This registration form is not active",
}


class RegistrationError(Exception):
    """Base class for registration errors surfaced to API callers"""

    status_code = 400
    code = "REGISTRATION_ERROR"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_detail(self) -> Dict[str, Any]:
        return {"success": False, "message": self.message, "code": self.code}


class FormNotFoundError(RegistrationError):
    """Form does not exist, or exists but is not owned by the caller"""

    status_code = 404
    code = "NOT_FOUND"

    def __init__(self, message: str = "Registration form not found"):
        super().__init__(message)


class FormNotAcceptingError(RegistrationError):
    code = "NOT_ACCEPTING"

    def __init__(self, reason: RejectionReason):
        super().__init__(REJECTION_MESSAGES[reason])
        self.reason = reason

    def to_detail(self) -> Dict[str, Any]:
        detail = super().to_detail()
        detail["reason"] = self.reason.value
        return detail


class MissingFieldError(RegistrationError):
    code = "VALIDATION_ERROR"

    def __init__(self, field: str):
        super().__init__(f"{field.capitalize()} is required")
        self.field = field

    def to_detail(self) -> Dict[str, Any]:
        detail = super().to_detail()
        detail["field"] = self.field
        return detail


class DuplicateEmailError(RegistrationError):
    code = "DUPLICATE_EMAIL"

    def __init__(self, message: str = "A member with this email already exists"):
        super().__init__(message)


class StorageError(RegistrationError):
    """Persistence failed. The message never includes driver error text."""

    status_code = 500
    code = "STORAGE_ERROR"
