"""
Query layer: span resolution, filter substitution, backend connectors and
result normalization.

The orchestrator lives in ``heracles.query.orchestrator``; it is not
re-exported here because it depends on the dashboard models, which in
turn depend on the query models.
"""

from heracles.query.duration import parse_duration
from heracles.query.filters import build_query
from heracles.query.models import (
    DataPoint,
    LabelSet,
    LogLine,
    QueryResult,
    QueryType,
    ScalarResult,
    SeriesResult,
    StreamInstantResult,
    StreamResult,
    TimeSpan,
)
from heracles.query.span import resolve_query_window, resolve_span

__all__ = [
    "DataPoint",
    "LabelSet",
    "LogLine",
    "QueryResult",
    "QueryType",
    "ScalarResult",
    "SeriesResult",
    "StreamInstantResult",
    "StreamResult",
    "TimeSpan",
    "build_query",
    "parse_duration",
    "resolve_query_window",
    "resolve_span",
]
