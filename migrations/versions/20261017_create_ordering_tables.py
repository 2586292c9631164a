"""Create catalog, cart, order, recovery and reservation tables

Revision ID: 20261017_create_ordering_tables
Revises: 
Create Date: 2026-10-17 00:00:00.000000
"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "20261017_create_ordering_tables"
down_revision = None
branch_labels = None
depends_on = None


def _timestamps():
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
    ]


def upgrade() -> None:
    # catalog
    op.create_table(
        "products",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(150), nullable=False),
        sa.Column("slug", sa.String(170), nullable=True, unique=True, index=True),
        sa.Column("sku", sa.String(50), nullable=True, index=True),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("category", sa.String(60), nullable=True, index=True),
        sa.Column("image_url", sa.String(500), nullable=True),
        sa.Column("price", sa.Numeric(10, 2), nullable=False, server_default="0"),
        sa.Column("product_type", sa.String(20), nullable=False, server_default="simple"),
        sa.Column("single_unit", sa.Boolean, nullable=False, server_default=sa.text("false")),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default=sa.text("true")),
        *_timestamps(),
    )

    op.create_table(
        "flavors",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("surcharge", sa.Numeric(10, 2), nullable=False, server_default="0"),
        sa.Column("flavor_type", sa.String(20), nullable=False, server_default="all_time"),
        sa.Column("flavor_category", sa.String(60), nullable=False, server_default="wings", index=True),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default=sa.text("true")),
        sa.Column("is_available", sa.Boolean, nullable=False, server_default=sa.text("true")),
        sa.Column("sort_order", sa.Integer, nullable=False, server_default="0"),
        *_timestamps(),
    )

    op.create_table(
        "product_flavor_rules",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("product_id", sa.Integer, sa.ForeignKey("products.id", ondelete="CASCADE"),
                  nullable=False, unique=True, index=True),
        sa.Column("total_units", sa.Integer, nullable=False, server_default="6"),
        sa.Column("units_per_flavor", sa.Integer, nullable=False, server_default="3"),
        sa.Column("max_flavors", sa.Integer, nullable=True),
        sa.Column("min_flavors", sa.Integer, nullable=True),
        sa.Column("allow_special_flavors", sa.Boolean, nullable=False, server_default=sa.text("true")),
        sa.Column("surcharge_policy", sa.String(30), nullable=True),
        *_timestamps(),
    )

    op.create_table(
        "bundle_components",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("bundle_product_id", sa.Integer, sa.ForeignKey("products.id", ondelete="CASCADE"),
                  nullable=False, index=True),
        sa.Column("component_product_id", sa.Integer, sa.ForeignKey("products.id", ondelete="RESTRICT"),
                  nullable=False, index=True),
        sa.Column("total_units", sa.Integer, nullable=True),
        sa.Column("units_per_flavor", sa.Integer, nullable=True),
        sa.Column("has_flavor_selection", sa.Boolean, nullable=False, server_default=sa.text("false")),
        sa.Column("flavor_category", sa.String(60), nullable=False, server_default="wings"),
        sa.Column("sort_order", sa.Integer, nullable=False, server_default="0"),
    )

    op.create_table(
        "settings",
        sa.Column("key", sa.String(80), primary_key=True),
        sa.Column("value", sa.JSON, nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
    )

    # cart
    op.create_table(
        "cart_snapshots",
        sa.Column("session_id", sa.String(64), primary_key=True),
        sa.Column("items", sa.JSON, nullable=False),
        sa.Column("saved_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("welcome_shown", sa.Boolean, nullable=False, server_default=sa.text("false")),
    )

    # orders
    op.create_table(
        "customers",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(150), nullable=False),
        sa.Column("phone", sa.String(20), nullable=True, index=True),
        sa.Column("email", sa.String(150), nullable=True, index=True),
        sa.Column("total_orders", sa.Integer, nullable=False, server_default="0"),
        sa.Column("total_spent", sa.Numeric(12, 2), nullable=False, server_default="0"),
        sa.Column("last_order_date", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
    )

    op.create_table(
        "orders",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("order_number", sa.String(30), nullable=False, unique=True, index=True),
        sa.Column("customer_id", sa.Integer, sa.ForeignKey("customers.id", ondelete="SET NULL"),
                  nullable=True, index=True),
        sa.Column("order_type", sa.String(20), nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default="pending"),
        sa.Column("payment_method", sa.String(10), nullable=False),
        sa.Column("subtotal", sa.Numeric(12, 2), nullable=False, server_default="0"),
        sa.Column("delivery_fee", sa.Numeric(10, 2), nullable=True),
        sa.Column("delivery_distance_km", sa.Numeric(6, 1), nullable=True),
        sa.Column("total_amount", sa.Numeric(12, 2), nullable=False, server_default="0"),
        sa.Column("delivery_address", sa.Text, nullable=True),
        sa.Column("pickup_date", sa.Date, nullable=True),
        sa.Column("pickup_time", sa.String(20), nullable=True),
        sa.Column("notes", sa.String(500), nullable=True),
        sa.Column("internal_notes", sa.Text, nullable=True),
        sa.Column("status_changed_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
    )

    op.create_table(
        "order_items",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("order_id", sa.Integer, sa.ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True),
        sa.Column("product_id", sa.Integer, sa.ForeignKey("products.id", ondelete="SET NULL"), nullable=True),
        sa.Column("product_name", sa.String(150), nullable=False),
        sa.Column("product_sku", sa.String(50), nullable=True),
        sa.Column("quantity", sa.Integer, nullable=False),
        sa.Column("unit_price", sa.Numeric(10, 2), nullable=False),
        sa.Column("subtotal", sa.Numeric(12, 2), nullable=False),
        sa.Column("flavor_surcharge_total", sa.Numeric(10, 2), nullable=False, server_default="0"),
        sa.Column("line_total", sa.Numeric(12, 2), nullable=False),
        sa.CheckConstraint("quantity > 0", name="ck_order_items_quantity_positive"),
    )

    op.create_table(
        "order_item_flavors",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("order_item_id", sa.Integer, sa.ForeignKey("order_items.id", ondelete="CASCADE"),
                  nullable=False, index=True),
        sa.Column("flavor_id", sa.Integer, sa.ForeignKey("flavors.id", ondelete="SET NULL"), nullable=True),
        sa.Column("flavor_name", sa.String(100), nullable=False),
        sa.Column("quantity", sa.Integer, nullable=False),
        sa.Column("surcharge_applied", sa.Numeric(10, 2), nullable=False, server_default="0"),
    )

    op.create_table(
        "payment_proofs",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("order_id", sa.Integer, sa.ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True),
        sa.Column("image_url", sa.String(500), nullable=False),
        sa.Column("uploaded_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
    )

    # cart recovery
    op.create_table(
        "abandoned_checkouts",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("customer_name", sa.String(150), nullable=True),
        sa.Column("customer_phone", sa.String(20), nullable=True, index=True),
        sa.Column("customer_email", sa.String(150), nullable=True),
        sa.Column("cart_items", sa.JSON, nullable=False),
        sa.Column("cart_total", sa.Numeric(12, 2), nullable=False, server_default="0"),
        sa.Column("order_type", sa.String(20), nullable=True),
        sa.Column("delivery_address", sa.Text, nullable=True),
        sa.Column("delivery_city", sa.String(100), nullable=True),
        sa.Column("delivery_barangay", sa.String(100), nullable=True),
        sa.Column("last_section", sa.String(50), nullable=True),
        sa.Column("session_id", sa.String(64), nullable=True, index=True),
        sa.Column("device_info", sa.JSON, nullable=True),
        sa.Column("status", sa.String(20), nullable=False, server_default="abandoned", index=True),
        sa.Column("recovery_started_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("next_reminder_scheduled_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("last_reminder_sent_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("sms_attempts", sa.Integer, nullable=False, server_default="0"),
        sa.Column("email_attempts", sa.Integer, nullable=False, server_default="0"),
        sa.Column("recovered_order_id", sa.Integer, sa.ForeignKey("orders.id", ondelete="SET NULL"), nullable=True),
        *_timestamps(),
    )

    op.create_table(
        "abandoned_checkout_reminders",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("abandoned_checkout_id", sa.Integer,
                  sa.ForeignKey("abandoned_checkouts.id", ondelete="CASCADE"), nullable=False, index=True),
        sa.Column("scheduled_for", sa.DateTime(timezone=True), nullable=False, index=True),
        sa.Column("channel", sa.String(10), nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default="pending", index=True),
        sa.Column("attempts", sa.Integer, nullable=False, server_default="0"),
        sa.Column("sent_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("error_message", sa.Text, nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
    )

    op.create_table(
        "abandoned_checkout_events",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("abandoned_checkout_id", sa.Integer,
                  sa.ForeignKey("abandoned_checkouts.id", ondelete="CASCADE"), nullable=False, index=True),
        sa.Column("event_type", sa.String(40), nullable=False),
        sa.Column("metadata", sa.JSON, nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
    )

    # reservations
    op.create_table(
        "reservations",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("reservation_code", sa.String(20), nullable=False, unique=True),
        sa.Column("customer_id", sa.Integer, sa.ForeignKey("customers.id", ondelete="SET NULL"), nullable=True),
        sa.Column("name", sa.String(150), nullable=False),
        sa.Column("phone", sa.String(20), nullable=False),
        sa.Column("email", sa.String(150), nullable=True),
        sa.Column("pax", sa.Integer, nullable=False),
        sa.Column("reservation_date", sa.Date, nullable=False),
        sa.Column("reservation_time", sa.Time, nullable=False),
        sa.Column("notes", sa.Text, nullable=True),
        sa.Column("preorder_items", sa.JSON, nullable=True),
        sa.Column("status", sa.String(20), nullable=False, server_default="pending"),
        sa.Column("idempotency_hash", sa.String(64), nullable=True, unique=True),
        *_timestamps(),
    )
    op.create_index("idx_reservations_date_time", "reservations", ["reservation_date", "reservation_time"])


def downgrade() -> None:
    op.drop_index("idx_reservations_date_time", table_name="reservations")
    for table in (
        "reservations",
        "abandoned_checkout_events",
        "abandoned_checkout_reminders",
        "abandoned_checkouts",
        "payment_proofs",
        "order_item_flavors",
        "order_items",
        "orders",
        "customers",
        "cart_snapshots",
        "settings",
        "bundle_components",
        "product_flavor_rules",
        "flavors",
        "products",
    ):
        op.drop_table(table)
