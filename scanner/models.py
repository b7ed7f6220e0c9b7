"""Scan data model: metric sets, score breakdown entries, recommendations, scan results."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime, timezone
from types import MappingProxyType
from typing import Any, Iterator, Optional, Union

from config.settings import HealthStatus, RecommendationType

Number = Union[int, float]


class MetricSet(Mapping):
    """
    Immutable mapping of metric name -> numeric value.

    Each scan builds a fresh set; filters return new sets via with_values().
    """

    def __init__(self, values: Optional[Mapping] = None):
        self._values = MappingProxyType(dict(values or {}))

    def __getitem__(self, key: str) -> Number:
        return self._values[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self):
        return f"MetricSet({dict(self._values)!r})"

    def __eq__(self, other):
        if isinstance(other, Mapping):
            return dict(self._values) == dict(other)
        return NotImplemented

    __hash__ = None

    def with_values(self, **updates: Number) -> "MetricSet":
        return MetricSet({**self._values, **updates})

    def to_dict(self) -> dict:
        return dict(self._values)


@dataclass(frozen=True)
class BreakdownEntry:
    """Per-category score detail."""
    score: int
    weight: float
    raw_value: Number
    status: HealthStatus
    display_value: str = ""
    ratio: Optional[str] = None
    detail: dict = field(default_factory=dict)

    def to_dict(self) -> dict:
        data = {
            "score": self.score,
            "weight": self.weight,
            "raw_value": self.raw_value,
            "value": self.display_value,
            "status": self.status.value,
        }
        if self.ratio is not None:
            data["ratio"] = self.ratio
        data.update(self.detail)
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "BreakdownEntry":
        known = {"score", "weight", "raw_value", "value", "status", "ratio"}
        return cls(
            score=int(data["score"]),
            weight=float(data["weight"]),
            raw_value=data.get("raw_value", 0),
            status=HealthStatus(data["status"]),
            display_value=str(data.get("value", "")),
            ratio=data.get("ratio"),
            detail={k: v for k, v in data.items() if k not in known},
        )


@dataclass(frozen=True)
class Recommendation:
    type: RecommendationType
    area: str
    message: str
    action: str

    def to_dict(self) -> dict:
        return {"type": self.type.value, "area": self.area, "message": self.message, "action": self.action}

    @classmethod
    def from_dict(cls, data: dict) -> "Recommendation":
        return cls(
            type=RecommendationType(data["type"]),
            area=data["area"],
            message=data["message"],
            action=data["action"],
        )


@dataclass(frozen=True)
class ScoreResult:
    """Output of ScoreCalculator.calculate()."""
    score: int
    label: str
    color: str
    breakdown: dict[str, BreakdownEntry]


@dataclass(frozen=True)
class ScanResult:
    """
    One complete health scan. At most one is persisted at a time;
    a new scan fully replaces the previous record.
    """
    scanned_at: datetime
    health_score: int
    score_label: str
    score_color: str
    metrics: MetricSet
    breakdown: dict[str, BreakdownEntry]
    recommendations: list[Recommendation]

    def to_dict(self) -> dict[str, Any]:
        return {
            "scanned_at": self.scanned_at.isoformat(),
            "health_score": self.health_score,
            "score_label": self.score_label,
            "score_color": self.score_color,
            "metrics": self.metrics.to_dict(),
            "breakdown": {name: entry.to_dict() for name, entry in self.breakdown.items()},
            "recommendations": [r.to_dict() for r in self.recommendations],
        }

    @classmethod
    def from_dict(cls, data: dict) -> "ScanResult":
        scanned_at = datetime.fromisoformat(data["scanned_at"])
        if scanned_at.tzinfo is None:
            scanned_at = scanned_at.replace(tzinfo=timezone.utc)
        return cls(
            scanned_at=scanned_at,
            health_score=int(data["health_score"]),
            score_label=data["score_label"],
            score_color=data["score_color"],
            metrics=MetricSet(data.get("metrics", {})),
            breakdown={k: BreakdownEntry.from_dict(v) for k, v in data.get("breakdown", {}).items()},
            recommendations=[Recommendation.from_dict(r) for r in data.get("recommendations", [])],
        )
