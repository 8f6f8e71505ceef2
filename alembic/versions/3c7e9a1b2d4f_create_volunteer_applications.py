"""create volunteer_applications

Revision ID: 3c7e9a1b2d4f
Revises:
Create Date: 2026-10-19 10:00:00.000000

Creates the volunteer_applications table and its status enum. Indexes
back the admin review queries: status filter, newest-first ordering and
lookups by applicant email.
"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "3c7e9a1b2d4f"
down_revision: str | Sequence[str] | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None

STATUS_VALUES = ("pending", "reviewed", "shortlisted", "rejected")


def upgrade() -> None:
    """Create volunteer_applications with its enum and indexes."""
    status_enum = postgresql.ENUM(*STATUS_VALUES, name="volunteer_application_status")
    status_enum.create(op.get_bind(), checkfirst=True)

    op.create_table(
        "volunteer_applications",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("full_name", sa.String(length=200), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("phone", sa.String(length=50), nullable=True),
        sa.Column("role_interest", sa.String(length=100), nullable=True),
        sa.Column("country", sa.String(length=100), nullable=True),
        sa.Column("city", sa.String(length=100), nullable=True),
        sa.Column("availability", sa.Text(), nullable=True),
        sa.Column("motivation", sa.Text(), nullable=True),
        sa.Column("cv_url", sa.String(length=2048), nullable=True),
        sa.Column(
            "status",
            postgresql.ENUM(*STATUS_VALUES, name="volunteer_application_status", create_type=False),
            nullable=False,
            server_default="pending",
        ),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
    )

    op.create_index("ix_volunteer_applications_status", "volunteer_applications", ["status"])
    op.create_index(
        "ix_volunteer_applications_created_at", "volunteer_applications", ["created_at"]
    )
    op.create_index("ix_volunteer_applications_email", "volunteer_applications", ["email"])


def downgrade() -> None:
    """Drop volunteer_applications and its enum."""
    op.drop_index("ix_volunteer_applications_email", table_name="volunteer_applications")
    op.drop_index("ix_volunteer_applications_created_at", table_name="volunteer_applications")
    op.drop_index("ix_volunteer_applications_status", table_name="volunteer_applications")
    op.drop_table("volunteer_applications")

    postgresql.ENUM(name="volunteer_application_status").drop(op.get_bind(), checkfirst=True)
