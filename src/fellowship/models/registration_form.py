"""SQLModel RegistrationForm and FormSubmission models.

A registration form is a shareable public intake gate bounded by an expiry
time and a submission capacity. Whether it currently accepts submissions is
always computed from the stored fields and the current time; it is never
stored.
"""

import secrets
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

from sqlalchemy import CheckConstraint, Column, DateTime, Integer
from sqlmodel import Field, SQLModel

from fellowship.exceptions import RejectionReason

DEFAULT_TITLE = "Fellowship Registration Form"
DEFAULT_DESCRIPTION = (
    "Welcome to MMU RHSF Fellowship! Please fill out this form to join our community."
)
DEFAULT_MAX_SUBMISSIONS = 100
DEFAULT_EXPIRES_IN_DAYS = 30


def generate_form_id() -> str:
    """32 hex chars from 16 random bytes"""
    return secrets.token_hex(16)


def as_utc(value: datetime) -> datetime:
    """Attach UTC to naive datetimes (SQLite drops tzinfo on read)"""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class RegistrationForm(SQLModel, table=True):
    """Registration form model"""

    __tablename__ = "registration_forms"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    form_id: str = Field(
        default_factory=generate_form_id, unique=True, index=True, max_length=64
    )
    title: str = Field(default=DEFAULT_TITLE)
    description: str = Field(default=DEFAULT_DESCRIPTION)
    is_active: bool = Field(default=True)
    expires_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc)
        + timedelta(days=DEFAULT_EXPIRES_IN_DAYS),
        sa_column=Column(DateTime(timezone=True), nullable=False),
    )
    max_submissions: int = Field(
        default=DEFAULT_MAX_SUBMISSIONS,
        sa_column=Column(Integer, nullable=False, server_default="100"),
    )
    current_submissions: int = Field(
        default=0,
        sa_column=Column(Integer, nullable=False, server_default="0"),
    )
    created_by: str = Field(index=True)
    created_at: Optional[datetime] = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        sa_column=Column(DateTime(timezone=True)),
    )
    updated_at: Optional[datetime] = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        sa_column=Column(DateTime(timezone=True)),
    )

    __table_args__ = (
        CheckConstraint(
            "current_submissions >= 0", name="ck_registration_forms_current_ge_0"
        ),
        CheckConstraint(
            "current_submissions <= max_submissions",
            name="ck_registration_forms_current_le_max",
        ),
    )


class FormSubmission(SQLModel, table=True):
    """Receipt for one accepted submission, kept for audit"""

    __tablename__ = "form_submissions"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    registration_form_id: uuid.UUID = Field(
        foreign_key="registration_forms.id", ondelete="CASCADE", index=True
    )
    member_id: uuid.UUID = Field(foreign_key="members.id", index=True)
    submitted_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        sa_column=Column(DateTime(timezone=True), nullable=False),
    )
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None


@dataclass(frozen=True)
class AcceptanceState:
    is_active: bool
    is_expired: bool
    is_full: bool

    @property
    def can_accept_submissions(self) -> bool:
        return self.is_active and not self.is_expired and not self.is_full

    @property
    def rejection_reason(self) -> Optional[RejectionReason]:
        """First matching reason: expired, then full, then inactive"""
        if self.is_expired:
            return RejectionReason.EXPIRED
        if self.is_full:
            return RejectionReason.FULL
        if not self.is_active:
            return RejectionReason.INACTIVE
        return None


def evaluate_acceptance(
    form: RegistrationForm, now: Optional[datetime] = None
) -> AcceptanceState:
    """Compute the acceptance state of a form at ``now`` (defaults to current UTC time)."""
    now_utc = as_utc(now) if now else datetime.now(timezone.utc)
    return AcceptanceState(
        is_active=bool(form.is_active),
        is_expired=now_utc > as_utc(form.expires_at),
        is_full=form.current_submissions >= form.max_submissions,
    )
