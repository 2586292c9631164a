from fastapi import APIRouter

from app.api.catalog.router.public.router_catalog import router as router_catalog, router_store

router = APIRouter()

router.include_router(router_catalog)
router.include_router(router_store)
