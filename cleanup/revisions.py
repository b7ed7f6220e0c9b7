"""Excess post revisions beyond the newest `keep` per parent."""

from __future__ import annotations

import logging
from typing import Callable, Optional

from config.settings import REVISIONS_DELETE_ALL
from sql import queries

from .base import CleanupOperation

logger = logging.getLogger("storehealth.cleanup")


def chunked(items: list, size: int):
    for i in range(0, len(items), size):
        yield items[i:i + size]


class RevisionCleaner(CleanupOperation):
    """
    Keeps the newest `keep` revisions of each parent (by post_date, then ID).
    keep=0 removes every parented revision; keep=REVISIONS_DELETE_ALL removes
    every revision, including those without a parent.

    keep_provider, when given, overrides keep and is read on every call.
    """

    name = "Post Revisions"
    description = "Remove excess post revisions."
    preview_unit = "revision"
    execute_unit = "revision"

    def __init__(self, client, keep: int = 5,
                 keep_provider: Optional[Callable[[], int]] = None, **kwargs):
        super().__init__(client, **kwargs)
        self._keep = keep
        self.keep_provider = keep_provider

    @property
    def keep(self) -> int:
        keep = int(self.keep_provider()) if self.keep_provider else self._keep
        return REVISIONS_DELETE_ALL if keep < 0 else keep

    @property
    def delete_all(self) -> bool:
        return self.keep == REVISIONS_DELETE_ALL

    def preview(self) -> int:
        keep = self.keep
        if keep == REVISIONS_DELETE_ALL:
            return self.client.fetch_count(queries.REVISION_COUNT)
        rows = self.client.execute_query(queries.REVISIONS_PER_PARENT)
        return sum(max(int(row["revision_count"]) - keep, 0) for row in rows)

    def execute(self) -> int:
        keep = self.keep
        deleted = self._delete_all() if keep == REVISIONS_DELETE_ALL else self._delete_surplus(keep)
        logger.info(f"Deleted {deleted} revisions (keep={keep})")
        return deleted

    def _delete_ids(self, revision_ids: list) -> int:
        """Metadata first, then the revision rows."""
        self.client.delete_in(queries.DELETE_POSTMETA_BY_POST, revision_ids)
        return self.client.delete_in(queries.DELETE_POSTS_BY_ID, revision_ids)

    def _delete_surplus(self, keep: int) -> int:
        total = 0
        for row in self.client.execute_query(queries.REVISIONS_PER_PARENT):
            if int(row["revision_count"]) <= keep:
                continue
            revision_ids = self.client.fetch_column(queries.REVISION_IDS_FOR_PARENT, (row["parent_id"],))
            for chunk in chunked(revision_ids[keep:], self.batch_size):
                total += self._delete_ids(chunk)
        return total

    def _delete_all(self) -> int:
        total = 0
        while True:
            revision_ids = self.client.fetch_column(queries.ALL_REVISION_IDS_BATCH, (self.batch_size,))
            if not revision_ids:
                break
            total += self._delete_ids(revision_ids)
            if len(revision_ids) < self.batch_size:
                break
        return total
