"""Member Service - Handles member record lookups and creation"""

import logging
from typing import Optional

from sqlmodel import Session, select

from fellowship.models.member import Member, MemberStatus

logger = logging.getLogger(__name__)


class MemberService:
    """Service for member records"""

    def __init__(self, db_session: Session):
        self.db = db_session

    def get_member_by_email(self, email: str) -> Optional[Member]:
        """
        Find a member by email. Comparison is exact (case-sensitive) against
        the stored value.
        """
        stmt = select(Member).where(Member.email == email)
        return self.db.exec(stmt).first()

    def add_member(
        self,
        name: str,
        email: str,
        phone: str,
        department: str,
        address: Optional[dict] = None,
        emergency_contact: Optional[dict] = None,
        notes: Optional[str] = None,
    ) -> Member:
        """
        Stage a new active member in the current transaction and flush it so
        the email unique constraint is checked immediately.
        Note: This does NOT commit - caller must handle transaction

        Raises:
            sqlalchemy.exc.IntegrityError: If the email is already taken
        """
        member = Member(
            name=name,
            email=email,
            phone=phone,
            department=department,
            address=address or {},
            emergency_contact=emergency_contact or {},
            notes=notes or "",
            status=MemberStatus.ACTIVE,
        )
        self.db.add(member)
        self.db.flush()

        logger.info(f"Staged member {member.id} for {department}")
        return member
