"""Trashed posts, removed with everything they own."""

from __future__ import annotations

import logging

from sql import queries

from .base import CleanupOperation

logger = logging.getLogger("storehealth.cleanup")


class TrashCleaner(CleanupOperation):
    """
    Permanently deletes trashed posts one at a time, cascading to owned rows:
    child revisions and their meta, term relationships, comments and their
    meta, and the post's own meta. Non-revision children are reparented to
    the deleted post's parent. A post that fails to delete is logged and skipped.
    """

    name = "Trashed Posts"
    description = "Permanently delete trashed posts."
    preview_unit = "post"
    execute_unit = "post"

    def preview(self) -> int:
        return self.client.fetch_count(queries.TRASHED_POSTS_COUNT)

    def execute(self) -> int:
        total_deleted = 0
        skipped = 0
        last_id = 0

        while True:
            rows = self.client.execute_query(queries.TRASHED_POST_IDS_BATCH, (last_id, self.batch_size))
            if not rows:
                break
            for row in rows:
                post_id = int(row["post_id"])
                try:
                    if self.delete_post(post_id, int(row["parent_id"] or 0)):
                        total_deleted += 1
                except Exception as e:
                    skipped += 1
                    logger.warning(f"Skipping trashed post {post_id}: {e}")
            last_id = int(rows[-1]["post_id"])
            if len(rows) < self.batch_size:
                break

        logger.info(f"Deleted {total_deleted} trashed posts ({skipped} skipped)")
        return total_deleted

    def delete_post(self, post_id: int, parent_id: int = 0) -> bool:
        """Full logical delete of one post. Returns True if the post row was removed."""
        revision_ids = self.client.fetch_column(queries.CHILD_REVISION_IDS, (post_id,))
        if revision_ids:
            self.client.delete_in(queries.DELETE_POSTMETA_BY_POST, revision_ids)
            self.client.delete_in(queries.DELETE_POSTS_BY_ID, revision_ids)

        self.client.execute_statement(queries.REPARENT_CHILDREN, (parent_id, post_id))

        if self.client.table_exists(self.tables.term_relationships):
            self.client.execute_statement(queries.DELETE_TERM_RELATIONSHIPS, (post_id,))

        if self.client.table_exists(self.tables.comments):
            comment_ids = self.client.fetch_column(queries.COMMENT_IDS_FOR_POST, (post_id,))
            if comment_ids and self.client.table_exists(self.tables.commentmeta):
                self.client.delete_in(queries.DELETE_COMMENTMETA, comment_ids)
            self.client.execute_statement(queries.DELETE_COMMENTS_FOR_POST, (post_id,))

        self.client.delete_in(queries.DELETE_POSTMETA_BY_POST, [post_id])
        return self.client.execute_statement(queries.DELETE_POST, (post_id,)) > 0
