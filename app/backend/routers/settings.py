"""Settings router: read and update runtime settings stored with the store."""

from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from ..services.context import envelope, get_context, read_or_error

router = APIRouter(prefix="/api", tags=["settings"])


class SettingsUpdate(BaseModel):
    cleanup_revisions_keep: Optional[int] = None


@router.get("/settings")
def get_settings(context=Depends(get_context)):
    data, error = read_or_error(context, "get_runtime_settings", context.get_runtime_settings)
    return error if error is not None else envelope(True, data)


@router.post("/settings")
def update_settings(update: SettingsUpdate, context=Depends(get_context)):
    """Merge the given fields over the stored settings. cleanup_revisions_keep is clamped to 0..50."""
    changes = update.model_dump(exclude_none=True)
    data, error = read_or_error(context, "update_runtime_settings", context.update_runtime_settings, changes=changes)
    return error if error is not None else envelope(True, data, "Settings saved.")
