from .models import MetricSet, BreakdownEntry, Recommendation, ScanResult, ScoreResult
from .collector import MetricsCollector
from .calculator import ScoreCalculator
from .health import HealthScanner

__all__ = [
    "MetricSet", "BreakdownEntry", "Recommendation", "ScanResult", "ScoreResult",
    "MetricsCollector", "ScoreCalculator", "HealthScanner",
]
