"""Authentication dependencies for FastAPI"""

from typing import Optional

from authlib.jose.errors import InvalidTokenError
from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from fellowship.auth.jwt_utils import jwt_utils
from fellowship.auth.models import User, is_admin
from fellowship.logging_config import get_logger

# auto_error=False so the ?token= query parameter can be used instead
security = HTTPBearer(auto_error=False)

logger = get_logger(__name__)


def _unauthorized(detail: str, code: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail={"success": False, "message": detail, "code": code},
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> User:
    """
    FastAPI dependency to extract and validate the caller from a Bearer token

    The token is read from the Authorization header, or from the ``token``
    query parameter when no header is sent.

    Returns:
        User with user ID and role extracted from a valid token

    Raises:
        HTTPException: 401 if token is missing, invalid, or expired
    """
    token = credentials.credentials if credentials else request.query_params.get("token")

    if not token:
        raise _unauthorized("Access denied. No token provided.", "NO_TOKEN")

    try:
        return await jwt_utils.extract_user(token)

    except InvalidTokenError as e:
        logger.info(f"Rejected token: {e}")
        raise _unauthorized("Invalid or expired token.", "INVALID_TOKEN")


async def get_current_admin(user: User = Depends(get_current_user)) -> User:
    """
    FastAPI dependency that requires the authenticated caller to be an admin

    Raises:
        HTTPException: 403 if the token's role is not admin
    """
    if not is_admin(user):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail={
                "success": False,
                "message": "Access denied. Administrator role required.",
                "code": "INSUFFICIENT_PERMISSIONS",
            },
        )
    return user
