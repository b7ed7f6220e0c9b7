"""
ScoreCalculator: MetricSet -> weighted 0-100 health score, breakdown and recommendations.

Each category maps its raw value through a step function (100/70/50/30),
the final score is the weight-normalized mean rounded half-up, and every
category scoring below 70 yields one recommendation.
"""

from __future__ import annotations

import logging
import math
from typing import Callable, Iterable, Optional

from config.settings import (
    CATEGORY_AUTOLOAD, CATEGORY_EXPIRED_TRANSIENTS, CATEGORY_META_PER_PRODUCT,
    CATEGORY_ORPHANED_META, CATEGORY_REVISIONS, CATEGORY_SESSIONS,
    SCORE_CATEGORIES, SCORE_RANGES, HealthStatus, RecommendationType,
    ScoreThreshold, ScoringConfig,
)
from utils.formatting import format_bytes

from .models import BreakdownEntry, MetricSet, Recommendation, ScoreResult

logger = logging.getLogger("storehealth.scanner")

RECOMMENDATION_CUTOFF = 70

RecommendationFilter = Callable[[list, MetricSet, dict], list]


def step_score(value: float, threshold: ScoreThreshold) -> int:
    """Non-increasing step function of value: 100, 70, 50 (only with a fair tier), 30."""
    if value <= threshold.excellent:
        return 100
    if value <= threshold.good:
        return 70
    if threshold.fair is not None and value <= threshold.fair:
        return 50
    return 30


def metric_status(score: int) -> HealthStatus:
    if score >= 90:
        return HealthStatus.EXCELLENT
    if score >= 70:
        return HealthStatus.GOOD
    if score >= 40:
        return HealthStatus.WARNING
    return HealthStatus.CRITICAL


def round_half_up(value: float) -> int:
    # round(., 6) absorbs float noise such as 82.49999999999999
    return int(math.floor(round(value, 6) + 0.5))


def score_band(score: int) -> dict:
    """Label/color band containing score. Bands are closed and cover 0..100."""
    for band in SCORE_RANGES:
        if band["min"] <= score <= band["max"]:
            return band
    return {"label": "Unknown", "color": "gray"}


def _metric(metrics, key: str, default=0):
    value = metrics.get(key, default)
    return default if value is None else value


class ScoreCalculator:
    """
    Deterministic scorer. Weights, thresholds and severe cutovers come from
    ScoringConfig; recommendation_filters may rewrite the recommendation list.
    """

    def __init__(self, config: Optional[ScoringConfig] = None,
                 recommendation_filters: Iterable[RecommendationFilter] = ()):
        self.config = config or ScoringConfig()
        self.recommendation_filters = list(recommendation_filters)

    @property
    def weights(self) -> dict:
        return self.config.weights

    # --- Scoring ---

    def category_inputs(self, metrics: MetricSet) -> dict[str, dict]:
        """Per category: the value scored, the raw value reported, and display fields."""
        autoload_size = int(_metric(metrics, "autoload_size"))
        orphaned = int(_metric(metrics, "orphaned_postmeta"))
        postmeta_rows = int(_metric(metrics, "postmeta_rows"))
        orphaned_ratio = orphaned / postmeta_rows if postmeta_rows else 0.0
        revisions_per_post = float(_metric(metrics, "revisions_per_post"))

        return {
            CATEGORY_AUTOLOAD: {
                "value": autoload_size,
                "raw": autoload_size,
                "display": format_bytes(autoload_size),
            },
            CATEGORY_ORPHANED_META: {
                "value": orphaned_ratio,
                "raw": orphaned,
                "display": str(orphaned),
                "ratio": f"{round(orphaned_ratio * 100, 2):g}%",
            },
            CATEGORY_EXPIRED_TRANSIENTS: {
                "value": int(_metric(metrics, "expired_transients")),
                "raw": int(_metric(metrics, "expired_transients")),
                "display": str(int(_metric(metrics, "expired_transients"))),
            },
            CATEGORY_SESSIONS: {
                "value": int(_metric(metrics, "wc_sessions")),
                "raw": int(_metric(metrics, "wc_sessions")),
                "display": str(int(_metric(metrics, "wc_sessions"))),
                "detail": {"expired": int(_metric(metrics, "expired_wc_sessions"))},
            },
            CATEGORY_META_PER_PRODUCT: {
                "value": float(_metric(metrics, "meta_per_product")),
                "raw": float(_metric(metrics, "meta_per_product")),
                "display": f"{float(_metric(metrics, 'meta_per_product')):g}",
            },
            CATEGORY_REVISIONS: {
                "value": revisions_per_post,
                "raw": int(_metric(metrics, "total_revisions")),
                "display": str(int(_metric(metrics, "total_revisions"))),
                "ratio": f"{revisions_per_post:g}",
            },
        }

    def calculate(self, metrics: MetricSet) -> ScoreResult:
        breakdown: dict[str, BreakdownEntry] = {}
        total_score = 0.0
        total_weight = 0.0

        inputs = self.category_inputs(metrics)
        for category in SCORE_CATEGORIES:
            item = inputs[category]
            weight = float(self.weights.get(category, 0.0))
            score = step_score(item["value"], self.config.thresholds[category])
            breakdown[category] = BreakdownEntry(
                score=score,
                weight=weight,
                raw_value=item["raw"],
                status=metric_status(score),
                display_value=item["display"],
                ratio=item.get("ratio"),
                detail=item.get("detail", {}),
            )
            total_score += score * weight
            total_weight += weight

        final = round_half_up(total_score / total_weight) if total_weight > 0 else 0
        final = max(0, min(100, final))
        band = score_band(final)
        logger.debug(f"Health score {final} ({band['label']}) from total weight {total_weight:.2f}")
        return ScoreResult(score=final, label=band["label"], color=band["color"], breakdown=breakdown)

    # --- Recommendations ---

    def _severity(self, category: str, raw_value) -> RecommendationType:
        if category == CATEGORY_META_PER_PRODUCT:
            return RecommendationType.INFO
        cutover = self.config.severe_cutovers.get(category)
        if cutover is not None and raw_value > cutover:
            return RecommendationType.CRITICAL
        return RecommendationType.WARNING

    def _recommend(self, category: str, metrics: MetricSet) -> Recommendation:
        if category == CATEGORY_AUTOLOAD:
            size = int(_metric(metrics, "autoload_size"))
            return Recommendation(
                type=self._severity(category, size),
                area="autoload",
                message=f"Autoload data size is {format_bytes(size)}. "
                        "Consider reviewing large autoloaded options.",
                action="Review top autoloaded options in the dashboard.",
            )
        if category == CATEGORY_ORPHANED_META:
            count = int(_metric(metrics, "orphaned_postmeta"))
            return Recommendation(
                type=self._severity(category, count),
                area="orphaned_meta",
                message=f"Found {count} orphaned postmeta entries.",
                action="Run the orphaned postmeta cleanup.",
            )
        if category == CATEGORY_EXPIRED_TRANSIENTS:
            count = int(_metric(metrics, "expired_transients"))
            return Recommendation(
                type=self._severity(category, count),
                area="transients",
                message=f"Found {count} expired transients.",
                action="Run the expired transients cleanup.",
            )
        if category == CATEGORY_SESSIONS:
            count = int(_metric(metrics, "wc_sessions"))
            expired = int(_metric(metrics, "expired_wc_sessions"))
            return Recommendation(
                type=self._severity(category, count),
                area="sessions",
                message=f"Found {count} WooCommerce sessions ({expired} expired).",
                action="Run the WooCommerce sessions cleanup.",
            )
        if category == CATEGORY_META_PER_PRODUCT:
            avg = float(_metric(metrics, "meta_per_product"))
            return Recommendation(
                type=self._severity(category, avg),
                area="product_meta",
                message=f"Average of {avg:,.1f} meta entries per product. This may indicate plugin bloat.",
                action="Review installed plugins for excessive meta storage.",
            )
        count = int(_metric(metrics, "total_revisions"))
        return Recommendation(
            type=self._severity(category, count),
            area="revisions",
            message=f"Found {count} post revisions.",
            action="Run the revisions cleanup or limit revisions in wp-config.php.",
        )

    def generate_recommendations(self, metrics: MetricSet,
                                 breakdown: dict[str, BreakdownEntry]) -> list[Recommendation]:
        """One recommendation per category scoring below 70, in category order."""
        recommendations = [
            self._recommend(category, metrics)
            for category in SCORE_CATEGORIES
            if category in breakdown and breakdown[category].score < RECOMMENDATION_CUTOFF
        ]
        for rec_filter in self.recommendation_filters:
            recommendations = list(rec_filter(recommendations, metrics, breakdown))
        return recommendations
