from fastapi import FastAPI, HTTPException
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.openapi.utils import get_openapi

from app.config.settings import CORS_ORIGINS, CORS_ALLOW_ALL, BASE_URL, ENABLE_DOCS
from app.core.exception_handlers import (
    validation_exception_handler,
    http_exception_handler,
    general_exception_handler,
)
from app.utils.logger import logger
from app.utils.prometheus_metrics import PrometheusMiddleware

# ───────────────────────────
# Routers (importing them registers every model on Base)
# ───────────────────────────
from app.api.catalog.router.router import router as catalog_router
from app.api.cart.router.router_cart import router as cart_router
from app.api.delivery.router.router_delivery import router as delivery_router
from app.api.orders.router.router import router as orders_router
from app.api.recovery.router.router import router as recovery_router
from app.api.notifications.router.router_notifications_admin import router as notifications_router
from app.api.reservations.router.router import router as reservations_router
from app.api.monitoring.router import router as monitoring_router, router_public as monitoring_router_public

# ──────────────────────────
# FastAPI instance
# ──────────────────────────
app = FastAPI(
    title="ARW Ordering API",
    version="1.0.0",
    description="Menu, cart pricing, delivery fees, checkout, cart recovery and reservations",
    docs_url=("/swagger" if ENABLE_DOCS else None),
    redoc_url=("/redoc" if ENABLE_DOCS else None),
    openapi_url=("/openapi.json" if ENABLE_DOCS else None),
    servers=[{"url": BASE_URL, "description": "Environment base URL"}] if BASE_URL else None,
    # no 307 redirect when the path has no trailing slash
    redirect_slashes=False,
)

# ───────────────────────────
# Global exception handlers
# ───────────────────────────
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(HTTPException, http_exception_handler)
app.add_exception_handler(Exception, general_exception_handler)

# ───────────────────────────
# Middlewares (last added runs first)
# ───────────────────────────
app.add_middleware(PrometheusMiddleware)

# CORS_ALLOW_ALL=true => any origin, no credentials.
# Otherwise credentials only when origins are listed explicitly.
if CORS_ALLOW_ALL:
    allowed_origins = ["*"]
    allow_credentials = False
else:
    allowed_origins = CORS_ORIGINS or ["*"]
    allow_credentials = bool(CORS_ORIGINS)
app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed_origins,
    allow_credentials=allow_credentials,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ───────────────────────────
# Startup / shutdown
# ───────────────────────────
@app.on_event("startup")
async def startup():
    from app.database.init_db import initialize_database

    logger.info("[App] Starting API and database...")
    initialize_database()
    logger.info("[App] API started.")


@app.on_event("shutdown")
async def shutdown():
    logger.info("[App] API stopped.")


@app.get("/")
async def root():
    return {"status": "ok", "message": "API is running"}


@app.get("/health")
async def health():
    return {"status": "healthy"}


# ───────────────────────────
# Routes
# ───────────────────────────
app.include_router(monitoring_router_public)
app.include_router(monitoring_router)
app.include_router(catalog_router)
app.include_router(cart_router)
app.include_router(delivery_router)
app.include_router(orders_router)
app.include_router(recovery_router)
app.include_router(notifications_router)
app.include_router(reservations_router)


# ───────────────────────────
# OpenAPI: bearer auth in Swagger
# ───────────────────────────
def custom_openapi():
    if app.openapi_schema:
        return app.openapi_schema
    openapi_schema = get_openapi(
        title=app.title,
        version=app.version,
        description=app.description,
        routes=app.routes,
        servers=app.servers,
    )

    components = openapi_schema.setdefault("components", {})
    components.setdefault("securitySchemes", {})["bearerAuth"] = {
        "type": "http",
        "scheme": "bearer",
        "bearerFormat": "JWT",
    }

    # only admin routes ask for a token
    for path, methods in openapi_schema.get("paths", {}).items():
        if "/admin" in path or path.startswith("/api/monitoring/logs"):
            for method_obj in methods.values():
                method_obj["security"] = [{"bearerAuth": []}]

    app.openapi_schema = openapi_schema
    return app.openapi_schema


app.openapi = custom_openapi
