from sqlalchemy import inspect, text

from .db_connection import engine, Base, SessionLocal
from app.config.settings import STORE_TIMEZONE
from app.utils.logger import logger

DEFAULT_SETTINGS = {
    "store_hours": {"open": "10:00", "close": "21:00", "timezone": STORE_TIMEZONE},
    "reservation_settings": {
        "store_open": "11:00",
        "store_close": "21:00",
        "slot_duration_minutes": 30,
        "max_pax_per_slot": 40,
        "booking_window_days": 30,
        "no_show_grace_minutes": 30,
    },
}

REQUIRED_TABLES = (
    "products", "flavors", "product_flavor_rules", "bundle_components", "settings",
    "customers", "orders", "order_items", "order_item_flavors", "payment_proofs",
    "abandoned_checkouts", "abandoned_checkout_events", "abandoned_checkout_reminders",
    "reservations", "cart_snapshots", "order_notifications",
)


def import_models():
    """Registers every model on Base.metadata."""
    # ─── Catalog ────────────────────────────────────────────
    from app.api.catalog.models import (  # noqa: F401
        ProductModel, FlavorModel, ProductFlavorRuleModel, BundleComponentModel, SettingModel,
    )
    # ─── Cart / Orders ─────────────────────────────────────
    from app.api.cart.models.model_cart_snapshot import CartSnapshotModel  # noqa: F401
    from app.api.orders.models import (  # noqa: F401
        CustomerModel, OrderModel, OrderItemModel, OrderItemFlavorModel, PaymentProofModel,
    )
    # ─── Recovery / Reservations / Notifications ───────────
    from app.api.recovery.models import (  # noqa: F401
        AbandonedCheckoutModel, AbandonedCheckoutEventModel, AbandonedCheckoutReminderModel,
    )
    from app.api.reservations.models import ReservationModel  # noqa: F401
    from app.api.notifications.models import OrderNotificationModel  # noqa: F401
    logger.info("[InitDB] Models imported")


def configure_timezone():
    if engine.dialect.name != "postgresql":
        return
    try:
        with engine.begin() as conn:
            conn.execute(text(f"SET timezone = '{STORE_TIMEZONE}'"))
            logger.info(f"[InitDB] Database timezone: {conn.execute(text('SHOW timezone')).scalar()}")
    except Exception as e:
        logger.warning(f"[InitDB] Could not set database timezone: {e}")


def create_tables():
    import_models()
    Base.metadata.create_all(bind=engine, checkfirst=True)
    logger.info("[InitDB] Tables created/verified")


def check_database_initialized() -> bool:
    existing = set(inspect(engine).get_table_names())
    missing = [t for t in REQUIRED_TABLES if t not in existing]
    if missing:
        logger.error(f"[InitDB] Missing tables: {', '.join(missing)}")
        return False
    return True


def create_default_settings():
    """Inserts default settings rows. Existing values are never overwritten."""
    from app.api.catalog.repositories.repo_setting import SettingRepository

    with SessionLocal() as session:
        repo = SettingRepository(session)
        for key, value in DEFAULT_SETTINGS.items():
            if repo.get_value(key) is None and value is not None:
                repo.set_value(key, value)
                logger.info(f"[InitDB] Default setting '{key}' created")
        session.commit()


def initialize_database():
    logger.info("[InitDB] Step 1/3: timezone")
    configure_timezone()

    logger.info("[InitDB] Step 2/3: tables")
    create_tables()
    if not check_database_initialized():
        logger.error("[InitDB] Database not initialized, skipping seed")
        return

    logger.info("[InitDB] Step 3/3: default settings")
    create_default_settings()
    logger.info("[InitDB] Database ready")
