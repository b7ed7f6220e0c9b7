"""Store metrics: products, variations, orders and customer sessions."""

from __future__ import annotations

import logging

from config.settings import HPOS_ENABLED_OPTION, OrderStorage
from sql import queries

from .content import safe_ratio

logger = logging.getLogger("storehealth.scanner")


class CommerceMetricsMixin:
    """Mixin for product, order and session metrics."""

    def get_product_count(self) -> int:
        return self.client.fetch_count(queries.PRODUCT_COUNT)

    def get_variation_count(self) -> int:
        return self.client.fetch_count(queries.VARIATION_COUNT)

    def get_meta_per_product(self, total_products: int = None) -> float:
        if total_products is None:
            total_products = self.get_product_count()
        if total_products == 0:
            return 0.0
        product_meta = self.client.fetch_count(queries.PRODUCT_META_COUNT)
        return safe_ratio(product_meta, total_products)

    # --- Orders ---

    def uses_order_table(self) -> bool:
        """Whether orders live in the dedicated orders table (HPOS) rather than posts."""
        if self.order_storage == OrderStorage.POSTS:
            return False
        if not self.client.table_exists(self.client.tables.orders):
            if self.order_storage == OrderStorage.HPOS:
                logger.warning("Order storage set to hpos but the orders table is missing; counting posts")
            return False
        if self.order_storage == OrderStorage.HPOS:
            return True
        flag = self.client.fetch_scalar(queries.OPTION_VALUE, (HPOS_ENABLED_OPTION,), default="no")
        return str(flag).lower() == "yes"

    def get_order_count(self) -> int:
        if self.uses_order_table():
            return self.client.fetch_count(queries.ORDER_COUNT_HPOS)
        return self.client.fetch_count(queries.ORDER_COUNT_POSTS)

    # --- Sessions (optional table) ---

    def _has_sessions_table(self) -> bool:
        return self.client.table_exists(self.client.tables.sessions)

    def get_wc_session_count(self) -> int:
        if not self._has_sessions_table():
            return 0
        return self.client.fetch_count(queries.SESSION_COUNT)

    def get_expired_wc_session_count(self) -> int:
        if not self._has_sessions_table():
            return 0
        return self.client.fetch_count(queries.EXPIRED_SESSION_COUNT, (int(self.clock()),))

    # --- Variation-heavy products ---

    def get_high_variation_groups(self, threshold: int = 50, n: int = 10) -> list[dict]:
        """
        Products with at least `threshold` variations, most variations first,
        limited to n. Each entry: {id, title, variation_count}.
        """
        if n <= 0:
            return []
        rows = self.client.execute_query(queries.HIGH_VARIATION_PRODUCTS, (int(threshold), int(n)))
        return [
            {
                "id": int(row["product_id"]),
                "title": row["title"],
                "variation_count": int(row["variation_count"]),
            }
            for row in rows
        ]
