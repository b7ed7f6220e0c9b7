from .base import CleanupOperation
from .transients import TransientCleaner
from .sessions import SessionCleaner
from .orphaned_meta import OrphanedMetaCleaner
from .revisions import RevisionCleaner
from .trash import TrashCleaner
from .manager import CleanupManager, PreviewResult, ExecuteResult

__all__ = [
    "CleanupOperation", "TransientCleaner", "SessionCleaner", "OrphanedMetaCleaner",
    "RevisionCleaner", "TrashCleaner", "CleanupManager", "PreviewResult", "ExecuteResult",
]
