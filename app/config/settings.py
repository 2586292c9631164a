import os
from dotenv import load_dotenv
from pathlib import Path

# Load .env manually when running outside Docker
if not os.getenv("RUNNING_IN_DOCKER"):
    dotenv_path = Path(__file__).resolve().parents[2] / ".env"
    load_dotenv(dotenv_path=dotenv_path)


def _env_list(name: str, default: str) -> list[str]:
    return [v.strip() for v in os.getenv(name, default).split(",") if v.strip()]


def _env_bool(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).lower() in ("1", "true", "yes")


# Database
# DATABASE_URL wins; otherwise the Postgres URL is assembled from DB_*
DATABASE_URL = os.getenv("DATABASE_URL")
DB_CONFIG = {
    'database': os.getenv('DB_NAME'),
    'user': os.getenv('DB_USER'),
    'password': os.getenv('DB_PASSWORD'),
    'host': os.getenv('DB_HOST'),
    'port': int(os.getenv('DB_PORT', 5432)),
}
DB_SSL_MODE = os.getenv('DB_SSL_MODE')  # ex.: require, verify-ca, verify-full
SQLITE_FALLBACK_PATH = os.getenv("SQLITE_FALLBACK_PATH", "arw_orders.db")

# JWT issued by the external auth provider
SECRET_KEY = os.getenv("SECRET_KEY", "change-me")
ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
ADMIN_ROLES = _env_list("ADMIN_ROLES", "owner,manager,cashier")

# CORS
CORS_ORIGINS = _env_list("CORS_ORIGINS", "")
CORS_ALLOW_ALL = _env_bool("CORS_ALLOW_ALL")

# FastAPI / App
BASE_URL = os.getenv("BASE_URL", "")
PUBLIC_SITE_URL = os.getenv("PUBLIC_SITE_URL", "https://arwings.ph")
ENABLE_DOCS = _env_bool("ENABLE_DOCS", "true")
STORE_TIMEZONE = os.getenv("STORE_TIMEZONE", "Asia/Manila")

# Google Maps (Geocoding + Routes)
GOOGLE_MAPS_API_KEY = os.getenv("GOOGLE_MAPS_API_KEY")

# Delivery
DELIVERY_ALLOWED_CITIES = _env_list("DELIVERY_ALLOWED_CITIES", "Floridablanca,Lubao,Guagua,Porac")
DELIVERY_BASE_FEE = os.getenv("DELIVERY_BASE_FEE", "39")
DELIVERY_BASE_KM = os.getenv("DELIVERY_BASE_KM", "3")
DELIVERY_RATE_PER_KM = os.getenv("DELIVERY_RATE_PER_KM", "15")
DELIVERY_MAX_DISTANCE_KM = os.getenv("DELIVERY_MAX_DISTANCE_KM", "25")
RESTAURANT_LAT = float(os.getenv("RESTAURANT_LAT", "14.972683712714007"))
RESTAURANT_LNG = float(os.getenv("RESTAURANT_LNG", "120.53207910676976"))

# Cart
CART_EXPIRY_HOURS = int(os.getenv("CART_EXPIRY_HOURS", 72))
DEFAULT_SURCHARGE_POLICY = os.getenv("DEFAULT_SURCHARGE_POLICY", "per_slot")

# Abandoned cart recovery
REMINDER_INTERVAL_HOURS = int(os.getenv("REMINDER_INTERVAL_HOURS", 3))
REMINDER_MAX_COUNT = int(os.getenv("REMINDER_MAX_COUNT", 3))
REMINDER_START_HOUR = int(os.getenv("REMINDER_START_HOUR", 12))
REMINDER_END_HOUR = int(os.getenv("REMINDER_END_HOUR", 19))
REMINDER_MAX_ATTEMPTS = int(os.getenv("REMINDER_MAX_ATTEMPTS", 3))
REMINDER_RETRY_MINUTES = int(os.getenv("REMINDER_RETRY_MINUTES", 15))
REMINDER_BATCH_SIZE = int(os.getenv("REMINDER_BATCH_SIZE", 50))

# Order notifications (SMS/email outbox)
ORDER_NOTIFICATION_MAX_ATTEMPTS = int(os.getenv("ORDER_NOTIFICATION_MAX_ATTEMPTS", 3))
ORDER_NOTIFICATION_RETRY_MINUTES = int(os.getenv("ORDER_NOTIFICATION_RETRY_MINUTES", 5))
ORDER_NOTIFICATION_BATCH_SIZE = int(os.getenv("ORDER_NOTIFICATION_BATCH_SIZE", 50))
STAFF_NOTIFICATION_EMAILS = [e.strip() for e in os.getenv("STAFF_NOTIFICATION_EMAILS", "").split(",") if e.strip()]

# SMS (Semaphore) / Email (Resend)
SEMAPHORE_API_KEY = os.getenv("SEMAPHORE_API_KEY")
SEMAPHORE_SENDER_NAME = os.getenv("SEMAPHORE_SENDER_NAME", "ARWings")
RESEND_API_KEY = os.getenv("RESEND_API_KEY")
RESEND_FROM = os.getenv("RESEND_FROM", "ARWings <orders@arwings.ph>")

# MinIO / S3
MINIO_ENDPOINT = os.getenv("MINIO_ENDPOINT", "minio:9000")
MINIO_PUBLIC_ENDPOINT = os.getenv("MINIO_PUBLIC_ENDPOINT", "")
MINIO_ROOT_USER = os.getenv("MINIO_ROOT_USER", "")
MINIO_ROOT_PASSWORD = os.getenv("MINIO_ROOT_PASSWORD", "")
PAYMENT_PROOFS_BUCKET = os.getenv("PAYMENT_PROOFS_BUCKET", "payment-proofs")
