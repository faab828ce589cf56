"""Submission service: public self-registration against a registration form.

A submission creates one Member and one receipt on the form. Both writes and
the counter increment happen in a single transaction, and the counter is only
incremented by a conditional UPDATE that re-checks the form's acceptance
conditions, so a form never admits more than max_submissions members.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlmodel import Session

from fellowship.exceptions import (
    DuplicateEmailError,
    FormNotAcceptingError,
    FormNotFoundError,
    MissingFieldError,
    RejectionReason,
    StorageError,
)
from fellowship.models.registration_form import (
    FormSubmission,
    as_utc,
    evaluate_acceptance,
)
from fellowship.services.member_service import MemberService
from fellowship.services.registration_form_service import RegistrationFormService

logger = logging.getLogger(__name__)

# Checked in this order; the first empty one is reported
REQUIRED_FIELDS = ("name", "email", "phone", "department")


class AddressInput(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    street: str = ""
    city: str = ""
    state: str = ""
    zip_code: str = Field(default="", alias="zipCode")


class EmergencyContactInput(BaseModel):
    model_config = ConfigDict(extra="ignore")

    name: str = ""
    phone: str = ""
    relationship: str = ""


class MemberSubmission(BaseModel):
    """Data a prospective member submits on the public form.

    Required fields are optional here so that a missing one is reported by
    name with a 400, rather than as a generic 422 body validation error.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    department: Optional[str] = None
    address: Optional[AddressInput] = None
    emergency_contact: Optional[EmergencyContactInput] = Field(
        default=None, alias="emergencyContact"
    )
    notes: Optional[str] = None


class SubmissionService:
    """Service for accepting public registration submissions"""

    def __init__(self, db_session: Session):
        self.db = db_session
        self.form_service = RegistrationFormService(db_session)
        self.member_service = MemberService(db_session)

    def submit(
        self,
        form_id: str,
        payload: MemberSubmission,
        remote_address: Optional[str] = None,
        user_agent: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> Dict[str, Any]:
        """
        Register a new member through a public form.

        All checks run before anything is written. The member insert, the
        counter increment and the receipt are committed together.

        Args:
            form_id: Public form_id from the form URL
            payload: Submitted member data
            remote_address: Client address, kept on the receipt for audit
            user_agent: Client User-Agent, kept on the receipt for audit
            now: Submission time (defaults to current UTC time)

        Returns:
            Dictionary with the new member's memberId, name and email

        Raises:
            FormNotFoundError: No form with this form_id
            FormNotAcceptingError: Form is expired, full or inactive
            MissingFieldError: A required field is empty
            DuplicateEmailError: A member with this email already exists
            StorageError: The database write failed
        """
        now_utc = as_utc(now) if now else datetime.now(timezone.utc)

        form = self.form_service.get_form_by_form_id(form_id)
        if not form:
            raise FormNotFoundError()

        state = evaluate_acceptance(form, now_utc)
        if not state.can_accept_submissions:
            logger.info(
                f"Rejected submission to form {form_id}: {state.rejection_reason.value}"
            )
            raise FormNotAcceptingError(state.rejection_reason)

        values = self._required_values(payload)

        if self.member_service.get_member_by_email(values["email"]):
            logger.info(f"Rejected submission to form {form_id}: duplicate email")
            raise DuplicateEmailError()

        try:
            member = self.member_service.add_member(
                name=values["name"],
                email=values["email"],
                phone=values["phone"],
                department=values["department"],
                address=(
                    payload.address.model_dump(by_alias=True)
                    if payload.address
                    else None
                ),
                emergency_contact=(
                    payload.emergency_contact.model_dump()
                    if payload.emergency_contact
                    else None
                ),
                notes=payload.notes,
            )
        except IntegrityError as e:
            # Lost a race with a concurrent submission using the same email
            self.db.rollback()
            logger.warning(f"Email uniqueness violation on form {form_id}: {e}")
            raise DuplicateEmailError() from e
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Error creating member for form {form_id}: {e}")
            raise StorageError("Failed to submit registration") from e

        result = {
            "memberId": str(member.id),
            "name": member.name,
            "email": member.email,
        }

        try:
            claimed = self.form_service.claim_submission_slot(form, now_utc)
            if claimed:
                self.db.add(
                    FormSubmission(
                        registration_form_id=form.id,
                        member_id=member.id,
                        submitted_at=now_utc,
                        ip_address=remote_address,
                        user_agent=user_agent,
                    )
                )
                self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Error recording submission on form {form_id}: {e}")
            raise StorageError("Failed to submit registration") from e

        if not claimed:
            # Another submission took the last slot, or the form changed since it was read
            self.db.rollback()
            current = self.form_service.get_form_by_form_id(form_id)
            if not current:
                logger.info(f"Form {form_id} was deleted during submission")
                raise FormNotFoundError()
            reason = (
                evaluate_acceptance(current, now_utc).rejection_reason
                or RejectionReason.FULL
            )
            logger.info(
                f"Rejected submission to form {form_id} at commit: {reason.value}"
            )
            raise FormNotAcceptingError(reason)

        logger.info(f"Member {result['memberId']} registered through form {form_id}")
        return result

    def _required_values(self, payload: MemberSubmission) -> Dict[str, str]:
        values = {}
        for field in REQUIRED_FIELDS:
            value = (getattr(payload, field) or "").strip()
            if not value:
                raise MissingFieldError(field)
            values[field] = value
        return values
