"""Init registration schema: members, registration_forms, form_submissions

Revision ID: 3f9c2a7d1e04
Revises:
Create Date: 2026-10-19

"""

from typing import Sequence, Union

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "3f9c2a7d1e04"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

member_status = sa.Enum("Active", "Inactive", name="member_status")


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        "members",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("email", sa.String(), nullable=False),
        sa.Column("phone", sa.String(), nullable=False),
        sa.Column("department", sa.String(), nullable=False),
        sa.Column("address", sa.JSON(), nullable=True),
        sa.Column("emergency_contact", sa.JSON(), nullable=True),
        sa.Column("notes", sa.String(), nullable=False, server_default=""),
        sa.Column(
            "status", member_status, nullable=False, server_default="Active"
        ),
        sa.Column("join_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    # Store-level guarantee behind the duplicate email check
    op.create_index("ix_members_email", "members", ["email"], unique=True)
    op.create_index("ix_members_department", "members", ["department"])

    op.create_table(
        "registration_forms",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("form_id", sa.String(length=64), nullable=False),
        sa.Column("title", sa.String(), nullable=False),
        sa.Column("description", sa.String(), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column(
            "max_submissions", sa.Integer(), nullable=False, server_default="100"
        ),
        sa.Column(
            "current_submissions", sa.Integer(), nullable=False, server_default="0"
        ),
        sa.Column("created_by", sa.String(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint(
            "current_submissions >= 0", name="ck_registration_forms_current_ge_0"
        ),
        sa.CheckConstraint(
            "current_submissions <= max_submissions",
            name="ck_registration_forms_current_le_max",
        ),
    )
    op.create_index(
        "ix_registration_forms_form_id", "registration_forms", ["form_id"], unique=True
    )
    op.create_index(
        "ix_registration_forms_created_by", "registration_forms", ["created_by"]
    )

    op.create_table(
        "form_submissions",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("registration_form_id", sa.Uuid(), nullable=False),
        sa.Column("member_id", sa.Uuid(), nullable=False),
        sa.Column("submitted_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("ip_address", sa.String(), nullable=True),
        sa.Column("user_agent", sa.String(), nullable=True),
        sa.ForeignKeyConstraint(
            ["registration_form_id"], ["registration_forms.id"], ondelete="CASCADE"
        ),
        sa.ForeignKeyConstraint(["member_id"], ["members.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_form_submissions_registration_form_id",
        "form_submissions",
        ["registration_form_id"],
    )
    op.create_index(
        "ix_form_submissions_member_id", "form_submissions", ["member_id"]
    )


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_index("ix_form_submissions_member_id", table_name="form_submissions")
    op.drop_index(
        "ix_form_submissions_registration_form_id", table_name="form_submissions"
    )
    op.drop_table("form_submissions")
    op.drop_index("ix_registration_forms_created_by", table_name="registration_forms")
    op.drop_index("ix_registration_forms_form_id", table_name="registration_forms")
    op.drop_table("registration_forms")
    op.drop_index("ix_members_department", table_name="members")
    op.drop_index("ix_members_email", table_name="members")
    op.drop_table("members")
    member_status.drop(op.get_bind(), checkfirst=True)
