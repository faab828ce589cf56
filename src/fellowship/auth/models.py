"""Authentication models for FastAPI"""

from typing import Optional

from pydantic import BaseModel

ADMIN_ROLE = "admin"


class User(BaseModel):
    user_id: str
    role: Optional[str] = None
    claims: dict


def is_admin(user: User) -> bool:
    """True if the token that identified this user carries the admin role"""
    return user.role == ADMIN_ROLE
