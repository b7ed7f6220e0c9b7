"""Orphaned postmeta: metadata rows whose post no longer exists."""

from __future__ import annotations

import logging

from sql import queries

from .base import CleanupOperation

logger = logging.getLogger("storehealth.cleanup")


class OrphanedMetaCleaner(CleanupOperation):
    name = "Orphaned Post Meta"
    description = "Remove meta data for deleted posts."

    def preview(self) -> int:
        return self.client.fetch_count(queries.ORPHANED_POSTMETA_COUNT)

    def execute(self) -> int:
        """Delete in batch_size chunks until a batch comes back short."""
        total_deleted = 0
        batches = 0
        while True:
            meta_ids = self.client.fetch_column(queries.ORPHANED_POSTMETA_BATCH, (self.batch_size,))
            if not meta_ids:
                break
            total_deleted += self.client.delete_in(queries.DELETE_POSTMETA_BY_ID, meta_ids)
            batches += 1
            if len(meta_ids) < self.batch_size:
                break

        logger.info(f"Deleted {total_deleted} orphaned postmeta rows in {batches} batches")
        return total_deleted
