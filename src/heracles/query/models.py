"""
Query data models.

Value types shared by the span resolver, the backend connectors and the
result normalizer. Every QueryResult variant serializes to the externally
tagged form the dashboard renderer reads, e.g. ``{"Series": [...]}``.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import TYPE_CHECKING, Any, ClassVar, Dict, Tuple, Union

if TYPE_CHECKING:
    from heracles.dashboards.models import PlotMeta

LabelSet = Dict[str, str]


class Backend(str, Enum):
    """Query protocol spoken by a plot or log stream source."""

    PROMETHEUS = "prometheus"
    LOKI = "loki"
    LOGSQL = "logsql"


class PanelKind(str, Enum):
    """The panel a connector result is rendered in."""

    METRICS = "metrics"
    LOGS = "logs"


class QueryType(str, Enum):
    """How a query is evaluated by its backend."""

    RANGE = "Range"  # sampled over [start, end] at step resolution
    SCALAR = "Scalar"  # evaluated once at end


@dataclass(frozen=True)
class TimeSpan:
    """A closed query window [end - duration, end] sampled every step."""

    end: datetime
    duration: timedelta
    step: timedelta

    @property
    def start(self) -> datetime:
        return self.end - self.duration

    @property
    def step_seconds(self) -> float:
        return self.step.total_seconds()

    def query_window(self) -> tuple[int, int, float]:
        """Return (start, end) as epoch seconds and the step in float seconds."""
        return int(self.start.timestamp()), int(self.end.timestamp()), self.step_seconds


@dataclass(frozen=True)
class DataPoint:
    timestamp: float
    value: float

    def to_dict(self) -> dict[str, Any]:
        # JSON has no NaN or Inf; the renderer treats null as a gap.
        value = self.value if math.isfinite(self.value) else None
        return {"timestamp": self.timestamp, "value": value}


@dataclass(frozen=True)
class LogLine:
    # Nanoseconds since the epoch for every log backend.
    timestamp: float
    line: str

    def to_dict(self) -> dict[str, Any]:
        return {"timestamp": self.timestamp, "line": self.line}


@dataclass(frozen=True)
class SeriesResult:
    """Range metrics: many samples per label set."""

    kind: ClassVar[str] = "Series"
    entries: Tuple[Tuple[LabelSet, "PlotMeta", Tuple[DataPoint, ...]], ...]

    def to_dict(self) -> dict[str, Any]:
        return {
            self.kind: [
                [dict(labels), meta.to_dict(), [point.to_dict() for point in points]]
                for labels, meta, points in self.entries
            ]
        }


@dataclass(frozen=True)
class ScalarResult:
    """Instant metrics: one sample per label set."""

    kind: ClassVar[str] = "Scalar"
    entries: Tuple[Tuple[LabelSet, "PlotMeta", DataPoint], ...]

    def to_dict(self) -> dict[str, Any]:
        return {
            self.kind: [
                [dict(labels), meta.to_dict(), point.to_dict()]
                for labels, meta, point in self.entries
            ]
        }


@dataclass(frozen=True)
class StreamInstantResult:
    """Instant log query: one line per label set."""

    kind: ClassVar[str] = "StreamInstant"
    entries: Tuple[Tuple[LabelSet, LogLine], ...]

    def to_dict(self) -> dict[str, Any]:
        return {self.kind: [[dict(labels), line.to_dict()] for labels, line in self.entries]}


@dataclass(frozen=True)
class StreamResult:
    """Range log query: many lines per label set."""

    kind: ClassVar[str] = "Stream"
    entries: Tuple[Tuple[LabelSet, Tuple[LogLine, ...]], ...]

    def to_dict(self) -> dict[str, Any]:
        return {
            self.kind: [
                [dict(labels), [line.to_dict() for line in lines]]
                for labels, lines in self.entries
            ]
        }


QueryResult = Union[SeriesResult, ScalarResult, StreamInstantResult, StreamResult]
