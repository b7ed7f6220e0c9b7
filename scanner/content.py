"""Posts and postmeta metrics: content volume, revisions, trash, orphaned metadata."""

from __future__ import annotations

from sql import queries


def safe_ratio(numerator, denominator) -> float:
    """numerator / denominator rounded to 2 places; 0.0 when the denominator is 0."""
    if not denominator:
        return 0.0
    return round(float(numerator) / denominator, 2)


class ContentMetricsMixin:
    """Mixin for metrics read from the posts and postmeta tables."""

    def get_total_posts(self) -> int:
        return self.client.fetch_count(queries.TOTAL_POSTS)

    def get_revision_count(self) -> int:
        return self.client.fetch_count(queries.REVISION_COUNT)

    def get_trashed_posts_count(self) -> int:
        return self.client.fetch_count(queries.TRASHED_POSTS_COUNT)

    def get_postmeta_count(self) -> int:
        return self.client.fetch_count(queries.POSTMETA_COUNT)

    def get_orphaned_postmeta_count(self) -> int:
        """Postmeta rows whose post no longer exists."""
        return self.client.fetch_count(queries.ORPHANED_POSTMETA_COUNT)

    def get_revisions_per_post(self, total_posts: int = None, total_revisions: int = None) -> float:
        if total_posts is None:
            total_posts = self.get_total_posts()
        if total_revisions is None:
            total_revisions = self.get_revision_count()
        return safe_ratio(total_revisions, total_posts)
