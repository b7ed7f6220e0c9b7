"""Health check router."""

from fastapi import APIRouter, Depends

from ..services.context import get_context

router = APIRouter(prefix="/api", tags=["health"])


@router.get("/health")
def health_check(context=Depends(get_context)):
    """Basic health check: verifies store connectivity."""
    if context.client.ping():
        return {"status": "healthy", "store": "connected"}
    return {"status": "degraded", "store": "unreachable"}
