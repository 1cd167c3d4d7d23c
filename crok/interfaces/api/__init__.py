from fastapi import APIRouter

from ...infrastructure.config.settings import settings
from .v1 import router as v1_router

router = APIRouter(prefix=settings.API_PREFIX)
router.include_router(v1_router)
