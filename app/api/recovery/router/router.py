from fastapi import APIRouter

from app.api.recovery.router.admin.router_recovery_admin import router as router_recovery_admin
from app.api.recovery.router.public.router_recovery import router as router_recovery

router = APIRouter()

router.include_router(router_recovery)
router.include_router(router_recovery_admin)
