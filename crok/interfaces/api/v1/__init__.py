from fastapi import APIRouter

from .auth import router as auth_router
from .document import router as document_router
from .upload import router as upload_router

router = APIRouter(prefix="/v1")
router.include_router(auth_router)
router.include_router(document_router)
router.include_router(upload_router)


@router.get(
    "/health",
    summary="API Health Check",
    description="Simple health check endpoint for monitoring and container orchestration.",
    responses={
        200: {"description": "API is healthy and responding"},
    },
)
async def health_check():
    """Health check endpoint for Docker health checks."""
    return {"status": "healthy", "message": "Crok Documents API is running"}
