"""Initial schema: users, device subscriptions, notification preferences.

Revision ID: 001
Revises: None
Create Date: 2026-09-28
"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects.postgresql import UUID

revision: str = "001"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("email", sa.String(255), unique=True, nullable=False),
        sa.Column("is_active", sa.Boolean(), default=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("ix_users_email", "users", ["email"])

    op.create_table(
        "device_subscriptions",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("user_id", UUID(as_uuid=True), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("endpoint", sa.Text(), nullable=False, unique=True),
        sa.Column("p256dh", sa.String(255), server_default=""),
        sa.Column("auth", sa.String(255), server_default=""),
        sa.Column("device_type", sa.String(50), server_default=""),
        sa.Column("device_name", sa.String(255), server_default=""),
        sa.Column("browser", sa.String(100), server_default=""),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("ix_device_subscriptions_user_id", "device_subscriptions", ["user_id"])
    op.create_index("ix_device_subscriptions_is_active", "device_subscriptions", ["is_active"])

    op.create_table(
        "notification_preferences",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column(
            "user_id", UUID(as_uuid=True), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, unique=True
        ),
        sa.Column("push_enabled", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("new_listings", sa.Boolean(), server_default=sa.true()),
        sa.Column("price_changes", sa.Boolean(), server_default=sa.true()),
        sa.Column("booking_updates", sa.Boolean(), server_default=sa.true()),
        sa.Column("messages", sa.Boolean(), server_default=sa.true()),
        sa.Column("promotions", sa.Boolean(), server_default=sa.true()),
        sa.Column("system_alerts", sa.Boolean(), server_default=sa.true()),
        sa.Column("quiet_hours_enabled", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("quiet_start_time", sa.String(8), nullable=True),
        sa.Column("quiet_end_time", sa.String(8), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )


def downgrade() -> None:
    op.drop_table("notification_preferences")
    op.drop_index("ix_device_subscriptions_is_active", table_name="device_subscriptions")
    op.drop_index("ix_device_subscriptions_user_id", table_name="device_subscriptions")
    op.drop_table("device_subscriptions")
    op.drop_index("ix_users_email", table_name="users")
    op.drop_table("users")
