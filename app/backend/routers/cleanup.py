"""Cleanup router: available types, eligible counts, preview and run."""

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from config.settings import ErrorKind

from ..services.context import envelope, get_context

router = APIRouter(prefix="/api/cleanup", tags=["cleanup"])


class CleanupRequest(BaseModel):
    type: str


def _status_code(result) -> int:
    if result.success:
        return 200
    return 400 if result.error == ErrorKind.INVALID_CATEGORY else 500


@router.get("/types")
def cleanup_types(context=Depends(get_context)):
    return envelope(True, context.cleanup.get_available_types())


@router.get("/counts")
def cleanup_counts(context=Depends(get_context)):
    """Eligible item count per type. A type whose count fails reports 0."""
    return envelope(True, context.cleanup.get_all_counts())


@router.post("/preview")
def cleanup_preview(request: CleanupRequest, context=Depends(get_context)):
    result = context.cleanup.preview(request.type)
    return envelope(result.success, result.to_dict(), result.message, _status_code(result))


@router.post("/run")
def cleanup_run(request: CleanupRequest, context=Depends(get_context)):
    result = context.cleanup.execute(request.type)
    return envelope(result.success, result.to_dict(), result.message, _status_code(result))
