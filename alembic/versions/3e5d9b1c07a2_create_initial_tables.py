"""Create initial tables

Revision ID: 3e5d9b1c07a2
Revises:
Create Date: 2026-09-28 10:12:41.508113

"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "3e5d9b1c07a2"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


WEEKDAY = sa.Enum(
    "MONDAY",
    "TUESDAY",
    "WEDNESDAY",
    "THURSDAY",
    "FRIDAY",
    "SATURDAY",
    "SUNDAY",
    name="weekday",
)
SLOT_TYPE = sa.Enum("ACADEMY", "RENTAL", name="slottype")
PURPOSE = sa.Enum("RENTAL", "TRAINING", "MATCH", "OTHER", name="bookingpurpose")
STATUS = sa.Enum("PENDING", "CONFIRMED", "CANCELLED", "COMPLETED", name="bookingstatus")
PAYMENT = sa.Enum("UNPAID", "PAID", "REFUNDED", name="paymentstatus")


def upgrade() -> None:
    """Upgrade schema."""
    # Create courts table
    op.create_table(
        "courts",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("description", sa.String(), nullable=True),
        sa.Column("location", sa.String(), nullable=True),
        sa.Column("sport_type", sa.String(), nullable=True),
        sa.Column("hourly_rate", sa.Numeric(10, 2), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_courts_id"), "courts", ["id"], unique=False)

    # Create court_availability_slots table
    op.create_table(
        "court_availability_slots",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("court_id", sa.Integer(), nullable=False),
        sa.Column("weekday", WEEKDAY, nullable=False),
        sa.Column("start_time", sa.Time(), nullable=False),
        sa.Column("end_time", sa.Time(), nullable=False),
        sa.Column("slot_type", SLOT_TYPE, nullable=True),
        sa.ForeignKeyConstraint(["court_id"], ["courts.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        op.f("ix_court_availability_slots_id"),
        "court_availability_slots",
        ["id"],
        unique=False,
    )
    op.create_index(
        op.f("ix_court_availability_slots_court_id"),
        "court_availability_slots",
        ["court_id"],
        unique=False,
    )

    # Create recurring_schedules table
    op.create_table(
        "recurring_schedules",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("court_id", sa.Integer(), nullable=False),
        sa.Column("team_id", sa.Integer(), nullable=True),
        sa.Column("created_by", sa.Integer(), nullable=True),
        sa.Column("purpose", PURPOSE, nullable=True),
        sa.Column("days_of_week", sa.JSON(), nullable=False),
        sa.Column("start_time_of_day", sa.Time(), nullable=False),
        sa.Column("end_time_of_day", sa.Time(), nullable=False),
        sa.Column("effective_from", sa.Date(), nullable=False),
        sa.Column("effective_until", sa.Date(), nullable=True),
        sa.Column("horizon_weeks", sa.Integer(), nullable=False),
        sa.Column("notes", sa.String(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        op.f("ix_recurring_schedules_id"), "recurring_schedules", ["id"], unique=False
    )
    op.create_index(
        op.f("ix_recurring_schedules_court_id"),
        "recurring_schedules",
        ["court_id"],
        unique=False,
    )

    # Create recurring_schedule_exceptions table
    op.create_table(
        "recurring_schedule_exceptions",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("schedule_id", sa.Integer(), nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("reason", sa.String(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(["schedule_id"], ["recurring_schedules.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("schedule_id", "date", name="uq_schedule_exception_date"),
    )
    op.create_index(
        op.f("ix_recurring_schedule_exceptions_id"),
        "recurring_schedule_exceptions",
        ["id"],
        unique=False,
    )
    op.create_index(
        op.f("ix_recurring_schedule_exceptions_schedule_id"),
        "recurring_schedule_exceptions",
        ["schedule_id"],
        unique=False,
    )

    # Create bookings table (court_id sin foreign key)
    op.create_table(
        "bookings",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("court_id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=True),
        sa.Column("team_id", sa.Integer(), nullable=True),
        sa.Column("recurring_schedule_id", sa.Integer(), nullable=True),
        sa.Column("start_time", sa.DateTime(), nullable=False),
        sa.Column("end_time", sa.DateTime(), nullable=False),
        sa.Column("purpose", PURPOSE, nullable=True),
        sa.Column("status", STATUS, nullable=True),
        sa.Column("payment_status", PAYMENT, nullable=True),
        sa.Column("total_price", sa.Numeric(10, 2), nullable=False),
        sa.Column("is_guest_booking", sa.Boolean(), nullable=True),
        sa.Column("guest_name", sa.String(), nullable=True),
        sa.Column("guest_email", sa.String(), nullable=True),
        sa.Column("guest_phone", sa.String(), nullable=True),
        sa.Column("booking_reference", sa.String(), nullable=True),
        sa.Column("notes", sa.String(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(["recurring_schedule_id"], ["recurring_schedules.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_bookings_id"), "bookings", ["id"], unique=False)
    op.create_index(
        op.f("ix_bookings_court_id"), "bookings", ["court_id"], unique=False
    )
    op.create_index(op.f("ix_bookings_user_id"), "bookings", ["user_id"], unique=False)
    op.create_index(
        op.f("ix_bookings_booking_reference"),
        "bookings",
        ["booking_reference"],
        unique=True,
    )
    op.create_index(
        "ix_bookings_court_window",
        "bookings",
        ["court_id", "start_time", "end_time"],
        unique=False,
    )
    op.create_index(
        "uq_active_booking_court_start",
        "bookings",
        ["court_id", "start_time"],
        unique=True,
        postgresql_where=sa.text("status IN ('PENDING', 'CONFIRMED')"),
    )


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_index("uq_active_booking_court_start", table_name="bookings")
    op.drop_index("ix_bookings_court_window", table_name="bookings")
    op.drop_index(op.f("ix_bookings_booking_reference"), table_name="bookings")
    op.drop_index(op.f("ix_bookings_user_id"), table_name="bookings")
    op.drop_index(op.f("ix_bookings_court_id"), table_name="bookings")
    op.drop_index(op.f("ix_bookings_id"), table_name="bookings")
    op.drop_table("bookings")
    op.drop_index(
        op.f("ix_recurring_schedule_exceptions_schedule_id"),
        table_name="recurring_schedule_exceptions",
    )
    op.drop_index(
        op.f("ix_recurring_schedule_exceptions_id"),
        table_name="recurring_schedule_exceptions",
    )
    op.drop_table("recurring_schedule_exceptions")
    op.drop_index(
        op.f("ix_recurring_schedules_court_id"), table_name="recurring_schedules"
    )
    op.drop_index(op.f("ix_recurring_schedules_id"), table_name="recurring_schedules")
    op.drop_table("recurring_schedules")
    op.drop_index(
        op.f("ix_court_availability_slots_court_id"),
        table_name="court_availability_slots",
    )
    op.drop_index(
        op.f("ix_court_availability_slots_id"), table_name="court_availability_slots"
    )
    op.drop_table("court_availability_slots")
    op.drop_index(op.f("ix_courts_id"), table_name="courts")
    op.drop_table("courts")

    for enum_type in (PAYMENT, STATUS, PURPOSE, SLOT_TYPE, WEEKDAY):
        enum_type.drop(op.get_bind(), checkfirst=True)
