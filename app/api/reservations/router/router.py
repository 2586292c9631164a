from fastapi import APIRouter

from app.api.reservations.router.admin.router_reservations_admin import router as router_reservations_admin
from app.api.reservations.router.public.router_reservations import router as router_reservations

router = APIRouter()

# admin routes before "/{code}", which also matches "/admin"
router.include_router(router_reservations_admin)
router.include_router(router_reservations)
