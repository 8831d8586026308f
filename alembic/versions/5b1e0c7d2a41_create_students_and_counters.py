"""create students and counters

Revision ID: 5b1e0c7d2a41
Revises:
Create Date: 2025-10-02 21:14:37.512904

"""

from collections.abc import Sequence

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "5b1e0c7d2a41"
down_revision: str | Sequence[str] | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None

DISTRICTS = (
    "Central",
    "North",
    "South",
    "East",
    "West",
    "North East",
    "North West",
    "South East",
    "South West",
    "Coastal",
)


def upgrade() -> None:
    op.create_table(
        "counters",
        sa.Column("name", sa.String(length=40), primary_key=True),
        sa.Column("seq", sa.Integer(), nullable=False, server_default=sa.text("0")),
    )

    op.create_table(
        "students",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("code", sa.String(length=20), nullable=False),
        sa.Column("first_name", sa.String(length=50), nullable=False),
        sa.Column("middle_name", sa.String(length=50), nullable=True),
        sa.Column("last_name", sa.String(length=50), nullable=False),
        sa.Column("birth_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("address_line1", sa.String(length=200), nullable=False),
        sa.Column("address_line2", sa.String(length=100), nullable=True),
        sa.Column("city", sa.String(length=100), nullable=False),
        sa.Column(
            "district", sa.Enum(*DISTRICTS, name="district_enum"), nullable=False
        ),
        sa.Column("contact_number", sa.String(length=10), nullable=False),
        sa.Column("email", sa.String(length=254), nullable=True),
        sa.Column("deleted_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.UniqueConstraint("code", name="uq_students_code"),
        # NULL não colide: unicidade "esparsa" de email
        sa.UniqueConstraint("email", name="uq_students_email"),
    )
    op.create_index("ix_students_district", "students", ["district"])
    op.create_index("ix_students_deleted_at", "students", ["deleted_at"])
    op.create_index("ix_students_created_at", "students", ["created_at"])


def downgrade() -> None:
    op.drop_index("ix_students_created_at", table_name="students")
    op.drop_index("ix_students_deleted_at", table_name="students")
    op.drop_index("ix_students_district", table_name="students")
    op.drop_table("students")
    op.drop_table("counters")
    bind = op.get_bind()
    if bind.dialect.name == "postgresql":
        sa.Enum(name="district_enum").drop(bind, checkfirst=True)
