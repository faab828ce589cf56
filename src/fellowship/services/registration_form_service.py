"""RegistrationForm Service - Handles registration form database operations"""

import logging
import uuid
from collections import defaultdict
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

from sqlalchemy import delete, update
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from fellowship.config import config
from fellowship.exceptions import (
    FormNotAcceptingError,
    FormNotFoundError,
    StorageError,
)
from fellowship.models.member import Member
from fellowship.models.registration_form import (
    DEFAULT_DESCRIPTION,
    DEFAULT_EXPIRES_IN_DAYS,
    DEFAULT_MAX_SUBMISSIONS,
    DEFAULT_TITLE,
    FormSubmission,
    RegistrationForm,
    as_utc,
    evaluate_acceptance,
)

logger = logging.getLogger(__name__)


def build_form_url(form_id: str) -> str:
    """Public URL the frontend serves the form at"""
    return f"{config['frontend_url'].rstrip('/')}/register/{form_id}"


class RegistrationFormService:
    """Service for creating, querying and administering registration forms"""

    def __init__(self, db_session: Session):
        self.db = db_session

    def create_form(
        self,
        owner_id: str,
        title: Optional[str] = None,
        description: Optional[str] = None,
        max_submissions: Optional[int] = None,
        expires_in_days: Optional[int] = None,
        now: Optional[datetime] = None,
    ) -> RegistrationForm:
        """
        Create a new registration form owned by ``owner_id``.

        Missing or empty values fall back to the defaults: the standard title
        and welcome text, 100 submissions, expiry 30 days after creation.

        Raises:
            StorageError: If the form could not be saved
        """
        created_at = now or datetime.now(timezone.utc)
        days = expires_in_days or DEFAULT_EXPIRES_IN_DAYS

        form = RegistrationForm(
            title=title or DEFAULT_TITLE,
            description=description or DEFAULT_DESCRIPTION,
            max_submissions=max_submissions or DEFAULT_MAX_SUBMISSIONS,
            expires_at=created_at + timedelta(days=days),
            created_by=owner_id,
            created_at=created_at,
            updated_at=created_at,
        )

        try:
            self.db.add(form)
            self.db.commit()
            self.db.refresh(form)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Error creating registration form for {owner_id}: {e}")
            raise StorageError("Failed to generate registration form") from e

        logger.info(
            f"Registration form {form.form_id} created by {owner_id} "
            f"(max {form.max_submissions}, expires {form.expires_at.isoformat()})"
        )
        return form

    def get_form_by_form_id(self, form_id: str) -> Optional[RegistrationForm]:
        """Retrieve a form by its public form_id, regardless of its state"""
        stmt = select(RegistrationForm).where(RegistrationForm.form_id == form_id)
        return self.db.exec(stmt).first()

    def get_owned_form(self, form_id: str, owner_id: str) -> RegistrationForm:
        """
        Retrieve a form only if ``owner_id`` created it.

        A form owned by someone else is reported exactly like a missing one.

        Raises:
            FormNotFoundError: If no form matches both form_id and owner
        """
        stmt = select(RegistrationForm).where(
            RegistrationForm.form_id == form_id,
            RegistrationForm.created_by == owner_id,
        )
        form = self.db.exec(stmt).first()
        if not form:
            raise FormNotFoundError()
        return form

    def list_forms(self, owner_id: str) -> List[RegistrationForm]:
        """All forms created by ``owner_id``, newest first"""
        stmt = (
            select(RegistrationForm)
            .where(RegistrationForm.created_by == owner_id)
            .order_by(RegistrationForm.created_at.desc())
        )
        return list(self.db.exec(stmt).all())

    def get_submissions(
        self, form_ids: List[uuid.UUID]
    ) -> Dict[uuid.UUID, List[Dict[str, Any]]]:
        """Receipts for the given forms (by internal id), oldest first, with member summaries"""
        if not form_ids:
            return {}

        stmt = (
            select(FormSubmission, Member)
            .join(Member, Member.id == FormSubmission.member_id)
            .where(FormSubmission.registration_form_id.in_(form_ids))
            .order_by(FormSubmission.submitted_at.asc())
        )
        receipts: Dict[uuid.UUID, List[Dict[str, Any]]] = defaultdict(list)
        for submission, member in self.db.exec(stmt).all():
            receipts[submission.registration_form_id].append(
                {
                    "member": {
                        "id": str(member.id),
                        "name": member.name,
                        "email": member.email,
                        "department": member.department,
                    },
                    "submittedAt": as_utc(submission.submitted_at).isoformat(),
                    "ipAddress": submission.ip_address,
                    "userAgent": submission.user_agent,
                }
            )
        return receipts

    def list_forms_with_status(
        self, owner_id: str, now: Optional[datetime] = None
    ) -> List[Dict[str, Any]]:
        """Owner's forms serialized with URL, derived acceptance fields and receipts"""
        forms = self.list_forms(owner_id)
        receipts = self.get_submissions([form.id for form in forms])
        return [
            self.serialize_form(form, now, submissions=receipts.get(form.id, []))
            for form in forms
        ]

    def serialize_form(
        self,
        form: RegistrationForm,
        now: Optional[datetime] = None,
        submissions: Optional[List[Dict[str, Any]]] = None,
    ) -> Dict[str, Any]:
        """Administrator view of a form. Derived fields are computed on every call."""
        state = evaluate_acceptance(form, now)
        data = {
            "id": str(form.id),
            "formId": form.form_id,
            "formUrl": build_form_url(form.form_id),
            "title": form.title,
            "description": form.description,
            "isActive": form.is_active,
            "expiresAt": as_utc(form.expires_at).isoformat(),
            "maxSubmissions": form.max_submissions,
            "currentSubmissions": form.current_submissions,
            "createdBy": form.created_by,
            "createdAt": as_utc(form.created_at).isoformat()
            if form.created_at
            else None,
            "isExpired": state.is_expired,
            "isFull": state.is_full,
            "canAcceptSubmissions": state.can_accept_submissions,
        }
        if submissions is not None:
            data["submissions"] = submissions
        return data

    def get_public_summary(
        self, form_id: str, now: Optional[datetime] = None
    ) -> Dict[str, Any]:
        """
        Public view of a form for the self-registration page.

        Carries no owner or submitter data.

        Raises:
            FormNotFoundError: If the form does not exist
            FormNotAcceptingError: If the form is expired, full or inactive
        """
        form = self.get_form_by_form_id(form_id)
        if not form:
            raise FormNotFoundError()

        state = evaluate_acceptance(form, now)
        if not state.can_accept_submissions:
            raise FormNotAcceptingError(state.rejection_reason)

        return {
            "formId": form.form_id,
            "title": form.title,
            "description": form.description,
            "currentSubmissions": form.current_submissions,
            "maxSubmissions": form.max_submissions,
        }

    def claim_submission_slot(
        self, form: RegistrationForm, now: Optional[datetime] = None
    ) -> bool:
        """
        Increment the form's counter only if it still accepts submissions.

        The acceptance conditions are re-checked by the database in the same
        UPDATE statement, so two callers racing for the last slot cannot both
        win. Note: This does NOT commit - caller must handle transaction

        Returns:
            True if a slot was claimed, False if the form is no longer accepting
        """
        now_utc = as_utc(now) if now else datetime.now(timezone.utc)
        stmt = (
            update(RegistrationForm)
            .where(
                RegistrationForm.id == form.id,
                RegistrationForm.is_active == True,
                RegistrationForm.current_submissions
                < RegistrationForm.max_submissions,
                RegistrationForm.expires_at >= now_utc,
            )
            .values(
                current_submissions=RegistrationForm.current_submissions + 1,
                updated_at=now_utc,
            )
            .execution_options(synchronize_session=False)
        )
        result = self.db.execute(stmt)
        return result.rowcount == 1

    def deactivate_form(self, form_id: str, owner_id: str) -> RegistrationForm:
        """
        Stop a form from accepting submissions.

        Raises:
            FormNotFoundError: If the caller does not own a form with this id
            StorageError: If the update could not be saved
        """
        form = self.get_owned_form(form_id, owner_id)

        try:
            form.is_active = False
            form.updated_at = datetime.now(timezone.utc)
            self.db.add(form)
            self.db.commit()
            self.db.refresh(form)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Error deactivating registration form {form_id}: {e}")
            raise StorageError("Failed to deactivate form") from e

        logger.info(f"Registration form {form_id} deactivated by {owner_id}")
        return form

    def delete_form(self, form_id: str, owner_id: str) -> None:
        """
        Delete a form and its submission receipts. Members created through
        the form are kept.

        Raises:
            FormNotFoundError: If the caller does not own a form with this id
            StorageError: If the delete could not be saved
        """
        form = self.get_owned_form(form_id, owner_id)

        try:
            self.db.execute(
                delete(FormSubmission).where(
                    FormSubmission.registration_form_id == form.id
                )
            )
            self.db.delete(form)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Error deleting registration form {form_id}: {e}")
            raise StorageError("Failed to delete form") from e

        logger.info(f"Registration form {form_id} deleted by {owner_id}")
