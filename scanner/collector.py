"""
MetricsCollector: read-only aggregate queries producing one MetricSet per scan.

Getters are independent of one another; optional tables (sessions, orders)
read as empty rather than failing.
"""

from __future__ import annotations

import logging
import time
from typing import Callable

from config.settings import OrderStorage

from .commerce import CommerceMetricsMixin
from .content import ContentMetricsMixin, safe_ratio
from .models import MetricSet
from .options import OptionsMetricsMixin

logger = logging.getLogger("storehealth.scanner")


class MetricsCollector(OptionsMetricsMixin, ContentMetricsMixin, CommerceMetricsMixin):
    """Collects store bloat and usage indicators through a StoreClient."""

    def __init__(self, client, order_storage: OrderStorage = OrderStorage.AUTO,
                 clock: Callable[[], float] = time.time):
        self.client = client
        self.order_storage = OrderStorage(order_storage)
        self.clock = clock

    def collect_all(self) -> MetricSet:
        """Run every metric getter once and return a fresh MetricSet."""
        start = time.time()

        total_posts = self.get_total_posts()
        total_revisions = self.get_revision_count()
        total_products = self.get_product_count()

        metrics = MetricSet({
            # Options
            "autoload_size": self.get_autoload_size(),
            "autoload_count": self.get_autoload_count(),
            "total_options": self.get_total_options(),
            # Transients
            "transient_count": self.get_transient_count(),
            "expired_transients": self.get_expired_transient_count(),
            # Posts
            "total_posts": total_posts,
            "total_revisions": total_revisions,
            "trashed_posts": self.get_trashed_posts_count(),
            # Postmeta
            "postmeta_rows": self.get_postmeta_count(),
            "orphaned_postmeta": self.get_orphaned_postmeta_count(),
            # Store
            "total_products": total_products,
            "total_variations": self.get_variation_count(),
            "total_orders": self.get_order_count(),
            "wc_sessions": self.get_wc_session_count(),
            "expired_wc_sessions": self.get_expired_wc_session_count(),
            # Ratios
            "meta_per_product": self.get_meta_per_product(total_products),
            "revisions_per_post": safe_ratio(total_revisions, total_posts),
        })

        logger.info(f"Collected {len(metrics)} metrics in {time.time() - start:.2f}s")
        return metrics
