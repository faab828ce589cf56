"""Database models for the fellowship registration server"""

from fellowship.models.member import Member, MemberStatus
from fellowship.models.registration_form import FormSubmission, RegistrationForm

__all__ = [
    "Member",
    "MemberStatus",
    "RegistrationForm",
    "FormSubmission",
]
