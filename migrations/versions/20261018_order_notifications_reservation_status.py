"""Add order notification outbox and reservation status tracking

Revision ID: 20261018_order_notifications_reservation_status
Revises: 20261017_create_ordering_tables
Create Date: 2026-10-18 00:00:00.000000
"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "20261018_order_notifications_reservation_status"
down_revision = "20261017_create_ordering_tables"
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "order_notifications",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("order_id", sa.Integer, sa.ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True),
        sa.Column("notification_type", sa.String(40), nullable=False),
        sa.Column("channel", sa.String(10), nullable=False),
        sa.Column("recipient", sa.String(150), nullable=False),
        sa.Column("payload", sa.JSON, nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default="pending", index=True),
        sa.Column("scheduled_for", sa.DateTime(timezone=True), nullable=False, index=True),
        sa.Column("attempts", sa.Integer, nullable=False, server_default="0"),
        sa.Column("sent_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("external_id", sa.String(100), nullable=True),
        sa.Column("error_message", sa.Text, nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
    )

    op.add_column("reservations", sa.Column("status_changed_at", sa.DateTime(timezone=True), nullable=True))
    op.add_column("reservations", sa.Column("status_changed_by", sa.String(100), nullable=True))


def downgrade() -> None:
    op.drop_column("reservations", "status_changed_by")
    op.drop_column("reservations", "status_changed_at")
    op.drop_table("order_notifications")
