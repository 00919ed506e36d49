"""create users, shifts, registrations and waitlist

Revision ID: 3c1e9a7f5b20
Revises:
Create Date: 2026-10-18 10:12:03.481192
"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "3c1e9a7f5b20"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

VOLUNTEER_TYPE = ("stage_a", "stage_b")


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("full_name", sa.String(length=50), nullable=False),
        sa.Column("email", sa.String(length=50), nullable=False),
        sa.Column("phone", sa.String(length=15), nullable=False),
        sa.Column("password_hash", sa.String(length=255), nullable=False),
        sa.Column("role", sa.Enum("volunteer", "officer", name="user_role"), nullable=False),
        sa.Column("service_number", sa.String(length=9), nullable=False),
        sa.Column("gender", sa.Enum("male", "female", name="gender"), nullable=False),
        sa.Column("is_active", sa.Boolean(), server_default=sa.text("true"), nullable=False),
        sa.Column("volunteer_type", sa.Enum(*VOLUNTEER_TYPE, name="volunteer_type"), nullable=True),
        sa.Column("has_driver_license", sa.Boolean(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("email"),
        sa.UniqueConstraint("service_number"),
    )

    op.create_table(
        "shifts",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column(
            "shift_type",
            sa.Enum("morning", "afternoon", "night", "extended_morning", "extended_night", name="shift_type"),
            nullable=False,
        ),
        sa.Column(
            "unit",
            sa.Enum("patrol", "traffic", "investigations", "community", "operations", name="unit"),
            nullable=False,
        ),
        sa.Column("required_volunteers", sa.Integer(), nullable=False),
        sa.Column("status", sa.Enum("open", "published", "locked", name="shift_status"), nullable=False),
        sa.Column("shift_note", sa.Text(), nullable=True),
        sa.Column("shared_note", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("version", sa.Integer(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_shifts_date", "shifts", ["date"])
    op.create_index("ix_shifts_unit_date", "shifts", ["unit", "date"])

    # volunteer_type enum already exists after "users" on Postgres
    if op.get_bind().dialect.name == "postgresql":
        vt_existing = postgresql.ENUM(*VOLUNTEER_TYPE, name="volunteer_type", create_type=False)
    else:
        vt_existing = sa.Enum(*VOLUNTEER_TYPE, name="volunteer_type")

    op.create_table(
        "shift_registrations",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("shift_id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("volunteer_type", vt_existing, nullable=False),
        sa.Column("arrival_time", sa.String(length=5), nullable=False),
        sa.Column("leaving_time", sa.String(length=5), nullable=False),
        sa.Column("note", sa.Text(), nullable=True),
        sa.Column("approved", sa.Boolean(), nullable=False),
        sa.Column("waitlist", sa.Boolean(), nullable=False),
        sa.ForeignKeyConstraint(["shift_id"], ["shifts.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("shift_id", "user_id", name="uq_registration_shift_user"),
    )
    op.create_index("ix_shift_registrations_shift_id", "shift_registrations", ["shift_id"])
    op.create_index("ix_shift_registrations_user_id", "shift_registrations", ["user_id"])

    op.create_table(
        "shift_waitlist_entries",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("shift_id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("volunteer_type", vt_existing, nullable=False),
        sa.Column("registered_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["shift_id"], ["shifts.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("shift_id", "user_id", name="uq_waitlist_shift_user"),
    )
    op.create_index("ix_shift_waitlist_entries_shift_id", "shift_waitlist_entries", ["shift_id"])
    op.create_index("ix_shift_waitlist_entries_user_id", "shift_waitlist_entries", ["user_id"])


def downgrade() -> None:
    op.drop_index("ix_shift_waitlist_entries_user_id", table_name="shift_waitlist_entries")
    op.drop_index("ix_shift_waitlist_entries_shift_id", table_name="shift_waitlist_entries")
    op.drop_table("shift_waitlist_entries")
    op.drop_index("ix_shift_registrations_user_id", table_name="shift_registrations")
    op.drop_index("ix_shift_registrations_shift_id", table_name="shift_registrations")
    op.drop_table("shift_registrations")
    op.drop_index("ix_shifts_unit_date", table_name="shifts")
    op.drop_index("ix_shifts_date", table_name="shifts")
    op.drop_table("shifts")
    op.drop_table("users")

    bind = op.get_bind()
    for name in ("volunteer_type", "shift_status", "unit", "shift_type", "gender", "user_role"):
        sa.Enum(name=name).drop(bind, checkfirst=True)
