"""Registration form endpoints: admin form management and public submission"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request, status
from pydantic import BaseModel, ConfigDict, Field
from sqlmodel import Session

from fellowship.auth.dependencies import get_current_admin
from fellowship.auth.models import User
from fellowship.exceptions import RegistrationError, StorageError
from fellowship.models.database import get_db
from fellowship.models.registration_form import as_utc
from fellowship.rate_limit import limiter, submission_rate_limit
from fellowship.services.registration_form_service import (
    RegistrationFormService,
    build_form_url,
)
from fellowship.services.submission_service import MemberSubmission, SubmissionService

router = APIRouter(prefix="/api/registration", tags=["Registration"])

logger = logging.getLogger(__name__)

# Ten years; larger values overflow datetime arithmetic
MAX_EXPIRES_IN_DAYS = 3650


class GenerateFormRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    title: Optional[str] = Field(
        None,
        description="Form title shown to registrants",
        json_schema_extra={"example": "Fellowship Registration Form"},
    )
    description: Optional[str] = Field(
        None, description="Welcome text shown above the form"
    )
    max_submissions: Optional[int] = Field(
        None,
        alias="maxSubmissions",
        ge=0,
        description="Maximum accepted submissions (default 100)",
    )
    expires_in_days: Optional[int] = Field(
        None,
        alias="expiresInDays",
        ge=0,
        le=MAX_EXPIRES_IN_DAYS,
        description="Days until the form expires (default 30)",
    )


def _http_error(error: RegistrationError) -> HTTPException:
    return HTTPException(status_code=error.status_code, detail=error.to_detail())


def _server_error(message: str) -> HTTPException:
    return _http_error(StorageError(message))


@router.post("/generate", status_code=status.HTTP_201_CREATED)
async def generate_registration_form(
    request_body: Optional[GenerateFormRequest] = None,
    user: User = Depends(get_current_admin),
    db: Session = Depends(get_db),
):
    """Create a new shareable registration form owned by the caller"""
    request_body = request_body or GenerateFormRequest()
    form_service = RegistrationFormService(db)

    try:
        form = form_service.create_form(
            owner_id=user.user_id,
            title=request_body.title,
            description=request_body.description,
            max_submissions=request_body.max_submissions,
            expires_in_days=request_body.expires_in_days,
        )
    except RegistrationError as e:
        raise _http_error(e)
    except Exception as e:
        logger.error(f"Error generating registration form: {type(e).__name__}: {e}")
        raise _server_error("Failed to generate registration form")

    return {
        "success": True,
        "message": "Registration form created successfully",
        "data": {
            "formId": form.form_id,
            "formUrl": build_form_url(form.form_id),
            "title": form.title,
            "description": form.description,
            "expiresAt": as_utc(form.expires_at).isoformat(),
            "maxSubmissions": form.max_submissions,
        },
    }


@router.get("/forms")
async def list_registration_forms(
    user: User = Depends(get_current_admin),
    db: Session = Depends(get_db),
):
    """List the caller's forms, newest first, with live acceptance state"""
    form_service = RegistrationFormService(db)

    try:
        forms = form_service.list_forms_with_status(user.user_id)
    except Exception as e:
        logger.error(f"Error fetching registration forms: {type(e).__name__}: {e}")
        raise _server_error("Failed to fetch registration forms")

    return {"success": True, "data": forms}


@router.get("/forms/{form_id}")
async def get_public_registration_form(form_id: str, db: Session = Depends(get_db)):
    """Public form details for the self-registration page"""
    form_service = RegistrationFormService(db)

    try:
        summary = form_service.get_public_summary(form_id)
    except RegistrationError as e:
        raise _http_error(e)
    except Exception as e:
        logger.error(f"Error fetching form {form_id}: {type(e).__name__}: {e}")
        raise _server_error("Failed to fetch form details")

    return {"success": True, "data": summary}


@router.post("/forms/{form_id}/submit", status_code=status.HTTP_201_CREATED)
@limiter.limit(submission_rate_limit)
async def submit_registration_form(
    request: Request,
    form_id: str,
    payload: MemberSubmission,
    db: Session = Depends(get_db),
):
    """Handle a public registration submission"""
    submission_service = SubmissionService(db)

    try:
        member = submission_service.submit(
            form_id=form_id,
            payload=payload,
            remote_address=request.client.host if request.client else None,
            user_agent=request.headers.get("user-agent"),
        )
    except RegistrationError as e:
        raise _http_error(e)
    except Exception as e:
        logger.error(f"Error submitting registration: {type(e).__name__}: {e}")
        raise _server_error("Failed to submit registration")

    return {
        "success": True,
        "message": "Registration submitted successfully! Welcome to the fellowship.",
        "data": member,
    }


@router.patch("/forms/{form_id}/deactivate")
async def deactivate_registration_form(
    form_id: str,
    user: User = Depends(get_current_admin),
    db: Session = Depends(get_db),
):
    """Stop one of the caller's forms from accepting submissions"""
    form_service = RegistrationFormService(db)

    try:
        form_service.deactivate_form(form_id, user.user_id)
    except RegistrationError as e:
        raise _http_error(e)
    except Exception as e:
        logger.error(f"Error deactivating form {form_id}: {type(e).__name__}: {e}")
        raise _server_error("Failed to deactivate form")

    return {"success": True, "message": "Registration form deactivated successfully"}


@router.delete("/forms/{form_id}")
async def delete_registration_form(
    form_id: str,
    user: User = Depends(get_current_admin),
    db: Session = Depends(get_db),
):
    """Delete one of the caller's forms"""
    form_service = RegistrationFormService(db)

    try:
        form_service.delete_form(form_id, user.user_id)
    except RegistrationError as e:
        raise _http_error(e)
    except Exception as e:
        logger.error(f"Error deleting form {form_id}: {type(e).__name__}: {e}")
        raise _server_error("Failed to delete form")

    return {"success": True, "message": "Registration form deleted successfully"}
