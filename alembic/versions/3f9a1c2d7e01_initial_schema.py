"""initial_schema

Revision ID: 3f9a1c2d7e01
Revises:
Create Date: 2026-10-18 09:12:31.402118

"""

from typing import Sequence, Union

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "3f9a1c2d7e01"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

user_role = sa.Enum("VIEWER", "STAFF", name="userrole")
room_status = sa.Enum(
    "AVAILABLE", "OCCUPIED", "MAINTENANCE", "RESERVED", name="roomstatus"
)
booking_status = sa.Enum(
    "NEW", "CONFIRMED", "CHECKED_IN", "CHECKED_OUT", "CANCELLED", name="bookingstatus"
)
payment_method = sa.Enum(
    "VISA", "MASTERCARD", "AMEX", "BANK_TRANSFER", name="paymentmethod"
)
payment_status = sa.Enum(
    "UNPAID", "PROCESSING", "PAID", "FAILED", name="paymentstatus"
)


def upgrade() -> None:
    """Create users, rooms, guests, bookings and payments."""
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("username", sa.String(), nullable=False),
        sa.Column("email", sa.String(), nullable=False, unique=True),
        sa.Column("full_name", sa.String(), nullable=True),
        sa.Column("hashed_password", sa.String(), nullable=False),
        sa.Column("role", user_role, nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_users_id", "users", ["id"])
    op.create_index("ix_users_username", "users", ["username"], unique=True)

    op.create_table(
        "room_categories",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("base_price", sa.Numeric(10, 2), nullable=False),
        sa.Column("capacity", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_room_categories_id", "room_categories", ["id"])

    op.create_table(
        "rooms",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("room_number", sa.String(), nullable=False, unique=True),
        sa.Column(
            "category_id",
            sa.Integer(),
            sa.ForeignKey("room_categories.id"),
            nullable=False,
        ),
        sa.Column("status", room_status, nullable=False),
        sa.Column("floor", sa.Integer(), nullable=False),
        sa.Column("has_wifi", sa.Boolean(), nullable=False),
        sa.Column("has_ac", sa.Boolean(), nullable=False),
        sa.Column("has_minibar", sa.Boolean(), nullable=False),
        sa.Column("has_room_service", sa.Boolean(), nullable=False),
        sa.Column("has_tv", sa.Boolean(), nullable=False),
        sa.Column("has_balcony", sa.Boolean(), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_rooms_id", "rooms", ["id"])

    op.create_table(
        "guests",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("email", sa.String(), nullable=False),
        sa.Column("phone", sa.String(), nullable=False),
        sa.Column("address", sa.String(), nullable=True),
        sa.Column("city", sa.String(), nullable=True),
        sa.Column("country", sa.String(), nullable=True),
        sa.Column("id_type", sa.String(), nullable=True),
        sa.Column("id_number", sa.String(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_guests_id", "guests", ["id"])
    op.create_index("ix_guests_email", "guests", ["email"], unique=True)

    op.create_table(
        "bookings",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("booking_number", sa.String(20), nullable=False),
        sa.Column("guest_id", sa.Integer(), sa.ForeignKey("guests.id"), nullable=False),
        sa.Column("room_id", sa.Integer(), sa.ForeignKey("rooms.id"), nullable=False),
        sa.Column("status", booking_status, nullable=False),
        sa.Column("check_in_date", sa.Date(), nullable=False),
        sa.Column("check_out_date", sa.Date(), nullable=False),
        sa.Column("adults", sa.Integer(), nullable=False),
        sa.Column("children", sa.Integer(), nullable=False),
        sa.Column("total_price", sa.Numeric(10, 2), nullable=False),
        sa.Column("special_requests", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.CheckConstraint("check_in_date < check_out_date", name="ck_bookings_dates"),
        sa.CheckConstraint("adults >= 1", name="ck_bookings_adults"),
        sa.CheckConstraint("children >= 0", name="ck_bookings_children"),
    )
    op.create_index("ix_bookings_id", "bookings", ["id"])
    op.create_index(
        "ix_bookings_booking_number", "bookings", ["booking_number"], unique=True
    )
    op.create_index("ix_bookings_room_id", "bookings", ["room_id"])
    # Availability lookups filter by room and date range
    op.create_index(
        "idx_bookings_room_dates",
        "bookings",
        ["room_id", "check_in_date", "check_out_date"],
    )

    op.create_table(
        "payments",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "booking_id", sa.Integer(), sa.ForeignKey("bookings.id"), nullable=False
        ),
        sa.Column("transaction_id", sa.String(), nullable=True, unique=True),
        sa.Column("gateway_invoice_id", sa.String(), nullable=True, unique=True),
        sa.Column("amount", sa.Numeric(10, 2), nullable=False),
        sa.Column("payment_method", payment_method, nullable=False),
        sa.Column("status", payment_status, nullable=False),
        sa.Column("card_last_four", sa.String(4), nullable=True),
        sa.Column("payment_date", sa.DateTime(), nullable=True),
        sa.Column("failure_reason", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_payments_id", "payments", ["id"])
    op.create_index("ix_payments_booking_id", "payments", ["booking_id"])


def downgrade() -> None:
    """Drop every table and enum type."""
    op.drop_table("payments")
    op.drop_table("bookings")
    op.drop_table("guests")
    op.drop_table("rooms")
    op.drop_table("room_categories")
    op.drop_table("users")

    bind = op.get_bind()
    for enum_type in (
        payment_status,
        payment_method,
        booking_status,
        room_status,
        user_role,
    ):
        enum_type.drop(bind, checkfirst=True)
