"""SQLModel Member model"""

import enum
import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import JSON, Column, DateTime
from sqlalchemy import Enum as SAEnum
from sqlmodel import Field, SQLModel


class MemberStatus(str, enum.Enum):
    ACTIVE = "Active"
    INACTIVE = "Inactive"


class Member(SQLModel, table=True):
    """A fellowship member. Email is unique across all members."""

    __tablename__ = "members"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    name: str
    email: str = Field(unique=True, index=True)
    phone: str
    department: str = Field(index=True)
    # {"street", "city", "state", "zipCode"}
    address: dict = Field(default_factory=dict, sa_column=Column(JSON))
    # {"name", "phone", "relationship"}
    emergency_contact: dict = Field(default_factory=dict, sa_column=Column(JSON))
    notes: str = Field(default="", sa_column_kwargs={"server_default": ""})
    status: MemberStatus = Field(
        default=MemberStatus.ACTIVE,
        sa_column=Column(
            SAEnum(
                MemberStatus,
                name="member_status",
                values_callable=lambda enum: [e.value for e in enum],
            ),
            nullable=False,
            server_default=MemberStatus.ACTIVE.value,
        ),
    )
    join_date: Optional[datetime] = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        sa_column=Column(DateTime(timezone=True)),
    )
    created_at: Optional[datetime] = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        sa_column=Column(DateTime(timezone=True)),
    )
    updated_at: Optional[datetime] = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        sa_column=Column(DateTime(timezone=True)),
    )
