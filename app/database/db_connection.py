# app/database/db_connection.py

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base
from sqlalchemy.pool import StaticPool

from ..config.settings import DATABASE_URL, DB_CONFIG, DB_SSL_MODE, SQLITE_FALLBACK_PATH, STORE_TIMEZONE
from app.utils.logger import logger

# Single declarative base for every model
Base = declarative_base()


def _build_connection_string() -> str:
    if DATABASE_URL:
        # Hosted providers still hand out postgres:// URLs; SQLAlchemy wants postgresql://
        if DATABASE_URL.startswith("postgres://"):
            return DATABASE_URL.replace("postgres://", "postgresql://", 1)
        return DATABASE_URL

    missing = [k for k in ('database', 'user', 'password', 'host') if not DB_CONFIG.get(k)]
    if missing:
        logger.warning(
            f"[Database] Missing {', '.join(missing)}; falling back to SQLite at {SQLITE_FALLBACK_PATH}"
        )
        return f"sqlite:///{SQLITE_FALLBACK_PATH}"

    ssl_query = f"?sslmode={DB_SSL_MODE}" if DB_SSL_MODE else ""
    return (
        f"postgresql://{DB_CONFIG['user']}:{DB_CONFIG['password']}"
        f"@{DB_CONFIG['host']}:{DB_CONFIG['port']}/{DB_CONFIG['database']}{ssl_query}"
    )


connection_string = _build_connection_string()

if connection_string.startswith("sqlite"):
    engine_kwargs = {"connect_args": {"check_same_thread": False}}
    # In-memory databases must share one connection or every session sees an empty schema
    if connection_string in ("sqlite://", "sqlite:///:memory:"):
        engine_kwargs["poolclass"] = StaticPool
else:
    engine_kwargs = {
        "pool_pre_ping": True,
        "connect_args": {"options": f"-c timezone={STORE_TIMEZONE}"},
    }

engine = create_engine(connection_string, **engine_kwargs)

SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
)


# FastAPI dependency
def get_db():
    db = SessionLocal()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()
