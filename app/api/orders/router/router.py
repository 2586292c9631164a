from fastapi import APIRouter

from app.api.orders.router.admin.router_orders_admin import router as router_orders_admin
from app.api.orders.router.public.router_checkout import router as router_checkout

router = APIRouter()

router.include_router(router_checkout)
router.include_router(router_orders_admin)
