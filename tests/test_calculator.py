"""Tests for ScoreCalculator: step scores, weighting, bands and recommendations."""

import pytest

from config.settings import (
    CATEGORY_AUTOLOAD, CATEGORY_META_PER_PRODUCT, CATEGORY_ORPHANED_META, SCORE_CATEGORIES,
    HealthStatus, RecommendationType, ScoreThreshold, ScoringConfig,
)
from scanner.calculator import ScoreCalculator, metric_status, round_half_up, score_band, step_score
from scanner.models import MetricSet

HEALTHY = {
    "autoload_size": 100_000,
    "orphaned_postmeta": 0,
    "postmeta_rows": 10_000,
    "expired_transients": 0,
    "wc_sessions": 10,
    "expired_wc_sessions": 0,
    "meta_per_product": 10.0,
    "revisions_per_post": 1.0,
    "total_revisions": 10,
}


def metrics(**overrides) -> MetricSet:
    return MetricSet({**HEALTHY, **overrides})


class TestStepScore:
    def test_autoload_four_tiers(self):
        threshold = ScoringConfig().thresholds[CATEGORY_AUTOLOAD]
        assert step_score(500_000, threshold) == 100
        assert step_score(500_001, threshold) == 70
        assert step_score(1_000_001, threshold) == 50
        assert step_score(2_000_000, threshold) == 50
        assert step_score(2_000_001, threshold) == 30

    def test_three_tiers_without_fair(self):
        threshold = ScoreThreshold(excellent=50, good=200)
        assert [step_score(v, threshold) for v in (0, 50, 51, 200, 201)] == [100, 100, 70, 70, 30]

    @pytest.mark.parametrize("category", SCORE_CATEGORIES)
    def test_non_increasing(self, category):
        threshold = ScoringConfig().thresholds[category]
        top = (threshold.fair or threshold.good) * 3
        values = [top * i / 200 for i in range(201)]
        scores = [step_score(v, threshold) for v in values]
        assert all(a >= b for a, b in zip(scores, scores[1:]))
        assert set(scores) <= {100, 70, 50, 30}


class TestStatusAndBands:
    def test_metric_status_boundaries(self):
        assert metric_status(100) == HealthStatus.EXCELLENT
        assert metric_status(90) == HealthStatus.EXCELLENT
        assert metric_status(70) == HealthStatus.GOOD
        assert metric_status(50) == HealthStatus.WARNING
        assert metric_status(30) == HealthStatus.CRITICAL

    def test_band_boundaries(self):
        assert (score_band(80)["label"], score_band(80)["color"]) == ("Excellent", "green")
        assert (score_band(79)["label"], score_band(79)["color"]) == ("Good", "yellow")
        assert score_band(59)["label"] == "Needs Attention"
        assert score_band(39)["color"] == "red"
        assert score_band(0)["label"] == "Critical"

    def test_round_half_up(self):
        assert round_half_up(82.5) == 83
        assert round_half_up(82.49) == 82
        assert round_half_up(7.5 + 20 + 15 + 15 + 15 + 10) == 83


class TestCalculate:
    def test_worked_example(self):
        """Autoload over 2MB scores 30, everything else 100: 82.5 rounds to 83."""
        result = ScoreCalculator().calculate(MetricSet({
            "autoload_size": 2_500_000,
            "orphaned_postmeta": 50,
            "postmeta_rows": 10_000,
            "expired_transients": 10,
            "wc_sessions": 50,
            "meta_per_product": 30,
            "revisions_per_post": 2,
        }))
        assert result.breakdown[CATEGORY_AUTOLOAD].score == 30
        assert result.breakdown[CATEGORY_ORPHANED_META].score == 100
        assert result.breakdown[CATEGORY_ORPHANED_META].ratio == "0.5%"
        assert all(result.breakdown[c].score == 100 for c in SCORE_CATEGORIES if c != CATEGORY_AUTOLOAD)
        assert result.score == 83
        assert result.label == "Excellent"
        assert result.color == "green"

    def test_breakdown_in_category_order(self):
        result = ScoreCalculator().calculate(metrics())
        assert list(result.breakdown) == list(SCORE_CATEGORIES)

    def test_orphan_ratio_zero_when_no_postmeta(self):
        result = ScoreCalculator().calculate(metrics(orphaned_postmeta=0, postmeta_rows=0))
        assert result.breakdown[CATEGORY_ORPHANED_META].score == 100
        assert result.breakdown[CATEGORY_ORPHANED_META].ratio == "0%"

    def test_missing_metrics_read_as_zero(self):
        result = ScoreCalculator().calculate(MetricSet({}))
        assert result.score == 100

    def test_weights_are_normalized(self):
        doubled = {c: w * 2 for c, w in ScoringConfig().weights.items()}
        m = metrics(autoload_size=3_000_000, expired_transients=500)
        assert ScoreCalculator(ScoringConfig(weights=doubled)).calculate(m).score == \
            ScoreCalculator().calculate(m).score

    def test_only_weighted_category_decides(self):
        weights = {c: 0.0 for c in SCORE_CATEGORIES}
        weights[CATEGORY_AUTOLOAD] = 1.0
        result = ScoreCalculator(ScoringConfig(weights=weights)).calculate(metrics(autoload_size=3_000_000))
        assert result.score == 30
        assert result.label == "Critical"

    def test_zero_total_weight_scores_zero(self):
        weights = {c: 0.0 for c in SCORE_CATEGORIES}
        assert ScoreCalculator(ScoringConfig(weights=weights)).calculate(metrics()).score == 0

    def test_score_always_in_range(self):
        worst = metrics(autoload_size=10**9, orphaned_postmeta=10**6, postmeta_rows=10**6,
                        expired_transients=10**6, wc_sessions=10**6,
                        meta_per_product=10**4, revisions_per_post=10**3)
        result = ScoreCalculator().calculate(worst)
        assert result.score == 30
        assert 0 <= result.score <= 100


class TestRecommendations:
    def _recommend(self, m, calculator=None):
        calculator = calculator or ScoreCalculator()
        return calculator.generate_recommendations(m, calculator.calculate(m).breakdown)

    def test_healthy_store_has_none(self):
        assert self._recommend(metrics()) == []

    def test_critical_autoload_above_cutover(self):
        recs = self._recommend(metrics(autoload_size=2_500_000))
        assert len(recs) == 1
        assert recs[0].type == RecommendationType.CRITICAL
        assert recs[0].area == "autoload"
        assert "2.38 MB" in recs[0].message

    def test_score_70_does_not_recommend(self):
        assert self._recommend(metrics(autoload_size=900_000)) == []

    def test_orphaned_warning_below_cutover(self):
        recs = self._recommend(metrics(orphaned_postmeta=900, postmeta_rows=1000))
        assert [(r.area, r.type) for r in recs] == [("orphaned_meta", RecommendationType.WARNING)]
        assert recs[0].message == "Found 900 orphaned postmeta entries."

    def test_meta_per_product_is_info(self):
        recs = self._recommend(metrics(meta_per_product=1500.0))
        assert recs[0].area == "product_meta"
        assert recs[0].type == RecommendationType.INFO
        assert "1,500.0 meta entries" in recs[0].message

    def test_declaration_order(self):
        recs = self._recommend(metrics(
            autoload_size=3_000_000, orphaned_postmeta=5000, postmeta_rows=10_000,
            expired_transients=500, wc_sessions=900, expired_wc_sessions=12,
            meta_per_product=500.0, revisions_per_post=50.0, total_revisions=4000,
        ))
        assert [r.area for r in recs] == [
            "autoload", "orphaned_meta", "transients", "sessions", "product_meta", "revisions",
        ]
        assert recs[3].message == "Found 900 WooCommerce sessions (12 expired)."

    def test_custom_cutover(self):
        config = ScoringConfig(severe_cutovers={CATEGORY_META_PER_PRODUCT: 1, "expired_transients": 100})
        recs = self._recommend(metrics(expired_transients=500, meta_per_product=500.0),
                               ScoreCalculator(config))
        assert [r.type for r in recs] == [RecommendationType.CRITICAL, RecommendationType.INFO]

    def test_filters_rewrite_list(self):
        def only_critical(recs, m, breakdown):
            return [r for r in recs if r.type == RecommendationType.CRITICAL]

        calculator = ScoreCalculator(recommendation_filters=[only_critical])
        recs = self._recommend(metrics(autoload_size=3_000_000, expired_transients=500), calculator)
        assert [r.area for r in recs] == ["autoload"]
