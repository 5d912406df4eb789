"""Users, activities, per-day slot overrides and bookings.

Revision ID: 0001
Revises:
Create Date: 2026-10-19
"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op

revision = "0001"
down_revision = None
branch_labels = None
depends_on = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
    ]


def upgrade() -> None:
    user_role_enum = sa.Enum(
        "ADMIN",
        "WILDLIFE_OFFICER",
        "VET",
        "TOUR_GUIDE",
        "SAFARI_DRIVER",
        "TOURIST",
        "CALL_OPERATOR",
        "EMERGENCY_OFFICER",
        name="userrole",
    )
    user_status_enum = sa.Enum(
        "ACTIVE", "INACTIVE", "PENDING", "SUSPENDED", name="userstatus"
    )
    activity_status_enum = sa.Enum(
        "active", "inactive", "suspended", name="activitystatus"
    )
    activity_category_enum = sa.Enum(
        "safari",
        "wildlife-tour",
        "bird-watching",
        "nature-walk",
        "photography",
        "adventure",
        "educational",
        name="activitycategory",
    )
    activity_difficulty_enum = sa.Enum(
        "easy", "moderate", "hard", name="activitydifficulty"
    )
    booking_type_enum = sa.Enum(
        "activity", "safari", "tour", "accommodation", name="bookingtype"
    )
    booking_status_enum = sa.Enum(
        "pending",
        "confirmed",
        "in_progress",
        "completed",
        "cancelled",
        "refunded",
        name="bookingstatus",
    )
    payment_status_enum = sa.Enum(
        "pending", "paid", "partial", "refunded", "failed", name="paymentstatus"
    )

    op.create_table(
        "users",
        sa.Column("id", sa.Uuid(as_uuid=True), primary_key=True),
        sa.Column("email", sa.String(length=320), nullable=False, unique=True),
        sa.Column("first_name", sa.String(length=120), nullable=False),
        sa.Column("last_name", sa.String(length=120), nullable=False),
        sa.Column("phone_number", sa.String(length=32)),
        sa.Column("role", user_role_enum, nullable=False),
        sa.Column("status", user_status_enum, nullable=False),
        sa.Column("is_available", sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
    )

    op.create_table(
        "activities",
        sa.Column("id", sa.Uuid(as_uuid=True), primary_key=True),
        sa.Column("title", sa.String(length=100), nullable=False),
        sa.Column("description", sa.String(length=1000), nullable=False),
        sa.Column("price", sa.Numeric(10, 2), nullable=False),
        sa.Column("duration", sa.Integer(), nullable=False),
        sa.Column("location", sa.String(length=255), nullable=False),
        sa.Column("image_url", sa.String(length=1024)),
        sa.Column("max_participants", sa.Integer(), nullable=False),
        sa.Column("daily_slots", sa.Integer(), nullable=False),
        sa.Column("status", activity_status_enum, nullable=False),
        sa.Column("category", activity_category_enum, nullable=False),
        sa.Column("difficulty", activity_difficulty_enum, nullable=False),
        sa.Column("requirements", sa.JSON(), nullable=False),
        sa.Column("includes", sa.JSON(), nullable=False),
        sa.Column("excludes", sa.JSON(), nullable=False),
        sa.Column("cancellation_policy", sa.Text(), nullable=False),
        sa.Column(
            "created_by_id",
            sa.Uuid(as_uuid=True),
            sa.ForeignKey("users.id", ondelete="SET NULL"),
        ),
        sa.Column(
            "updated_by_id",
            sa.Uuid(as_uuid=True),
            sa.ForeignKey("users.id", ondelete="SET NULL"),
        ),
        *_timestamps(),
        sa.CheckConstraint("daily_slots >= 1", name="ck_activities_daily_slots_min"),
        sa.CheckConstraint("price >= 0", name="ck_activities_price_non_negative"),
    )
    op.create_index("ix_activities_title", "activities", ["title"])
    op.create_index("ix_activities_status", "activities", ["status"])
    op.create_index("ix_activities_category", "activities", ["category"])

    op.create_table(
        "activity_slot_overrides",
        sa.Column("id", sa.Uuid(as_uuid=True), primary_key=True),
        sa.Column(
            "activity_id",
            sa.Uuid(as_uuid=True),
            sa.ForeignKey("activities.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("slot_date", sa.Date(), nullable=False),
        sa.Column("slots", sa.Integer(), nullable=False),
        sa.UniqueConstraint(
            "activity_id", "slot_date", name="uq_slot_override_activity_date"
        ),
        sa.CheckConstraint("slots >= 0", name="ck_slot_override_slots_non_negative"),
    )
    op.create_index(
        "ix_activity_slot_overrides_activity_id",
        "activity_slot_overrides",
        ["activity_id"],
    )
    op.create_index(
        "ix_activity_slot_overrides_slot_date",
        "activity_slot_overrides",
        ["slot_date"],
    )

    op.create_table(
        "bookings",
        sa.Column("id", sa.Uuid(as_uuid=True), primary_key=True),
        sa.Column("booking_ref", sa.String(length=40), nullable=False, unique=True),
        sa.Column(
            "customer_id",
            sa.Uuid(as_uuid=True),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "activity_id",
            sa.Uuid(as_uuid=True),
            sa.ForeignKey("activities.id", ondelete="SET NULL"),
        ),
        sa.Column("booking_type", booking_type_enum, nullable=False),
        sa.Column("status", booking_status_enum, nullable=False),
        sa.Column("booking_date", sa.Date(), nullable=False),
        sa.Column("start_time", sa.String(length=5), nullable=False),
        sa.Column("duration", sa.Integer(), nullable=False),
        sa.Column("number_of_adults", sa.Integer(), nullable=False),
        sa.Column("number_of_children", sa.Integer(), nullable=False),
        sa.Column("total_participants", sa.Integer(), nullable=False),
        sa.Column("location_name", sa.String(length=255), nullable=False),
        sa.Column("adult_price", sa.Numeric(10, 2), nullable=False),
        sa.Column("child_price", sa.Numeric(10, 2), nullable=False),
        sa.Column("guide_price", sa.Numeric(10, 2), nullable=False),
        sa.Column("vehicle_price", sa.Numeric(10, 2), nullable=False),
        sa.Column("total_price", sa.Numeric(12, 2), nullable=False),
        sa.Column("currency", sa.String(length=3), nullable=False),
        sa.Column("payment_status", payment_status_enum, nullable=False),
        sa.Column("paid_amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("request_tour_guide", sa.Boolean(), nullable=False),
        sa.Column(
            "tour_guide_id",
            sa.Uuid(as_uuid=True),
            sa.ForeignKey("users.id", ondelete="SET NULL"),
        ),
        sa.Column(
            "driver_id",
            sa.Uuid(as_uuid=True),
            sa.ForeignKey("users.id", ondelete="SET NULL"),
        ),
        sa.Column("special_requests", sa.String(length=500)),
        sa.Column("contact_name", sa.String(length=255)),
        sa.Column("contact_email", sa.String(length=320)),
        sa.Column("contact_phone", sa.String(length=32)),
        sa.Column("notes", sa.String(length=1000)),
        sa.Column("confirmation_date", sa.DateTime(timezone=True)),
        sa.Column("cancellation_date", sa.DateTime(timezone=True)),
        sa.Column("completion_date", sa.DateTime(timezone=True)),
        sa.Column("cancellation_reason", sa.String(length=500)),
        sa.Column(
            "slots_released", sa.Boolean(), nullable=False, server_default=sa.false()
        ),
        *_timestamps(),
    )
    for column in (
        "customer_id",
        "activity_id",
        "booking_type",
        "status",
        "booking_date",
        "tour_guide_id",
        "driver_id",
    ):
        op.create_index(f"ix_bookings_{column}", "bookings", [column])


def downgrade() -> None:
    op.drop_table("bookings")
    op.drop_table("activity_slot_overrides")
    op.drop_table("activities")
    op.drop_table("users")

    bind = op.get_bind()
    for enum_name in (
        "paymentstatus",
        "bookingstatus",
        "bookingtype",
        "activitydifficulty",
        "activitycategory",
        "activitystatus",
        "userstatus",
        "userrole",
    ):
        sa.Enum(name=enum_name).drop(bind, checkfirst=True)
