"""
Time span resolution.

A query window can be declared at three levels: on the request (query
parameters), on the panel and on the dashboard. The first level whose
duration and step both parse wins entirely; levels are never mixed. When no
level resolves the default trailing ten minute window sampled every thirty
seconds is used.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import TYPE_CHECKING

import structlog

from heracles.core.errors import DurationOutOfRange, DurationParseError
from heracles.query.duration import parse_duration
from heracles.query.models import TimeSpan

if TYPE_CHECKING:
    from heracles.dashboards.models import SpanConfig

logger = structlog.get_logger()

DEFAULT_DURATION = timedelta(minutes=10)
DEFAULT_STEP = timedelta(seconds=30)
NOW = "now"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def parse_end(end: str, now: datetime) -> datetime:
    """Resolve a span end: the literal "now" or an RFC 3339 timestamp.

    An unparsable end degrades to ``now`` with a warning.
    """
    if end.strip() == NOW:
        return now
    try:
        parsed = datetime.fromisoformat(end.strip().replace("Z", "+00:00"))
    except ValueError:
        logger.warning("span_end_invalid", end=end, fallback="now")
        return now
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def span_from_config(span: SpanConfig, now: datetime) -> TimeSpan:
    """Build a TimeSpan from one configured candidate.

    Raises:
        DurationParseError: If the duration or the step does not parse, or
            the window would start before the earliest representable instant
    """
    duration = parse_duration(span.duration)
    step = parse_duration(span.step_duration)
    resolved = TimeSpan(end=parse_end(span.end, now), duration=duration, step=step)
    try:
        resolved.query_window()
    except OverflowError as exc:
        raise DurationOutOfRange(
            f"duration {span.duration!r} reaches back past the earliest representable time",
            {"duration": span.duration, "end": span.end},
        ) from exc
    return resolved


def resolve_span(
    query_span: SpanConfig | None = None,
    panel_span: SpanConfig | None = None,
    dashboard_span: SpanConfig | None = None,
    now: datetime | None = None,
) -> TimeSpan:
    """
    Pick the effective query window.

    Precedence, highest first: query parameters, panel, dashboard, default.

    Args:
        query_span: Span supplied with the request
        panel_span: Span declared on the panel
        dashboard_span: Span declared on the dashboard
        now: Reference instant (defaults to the current UTC time)

    Returns:
        The resolved TimeSpan
    """
    if now is None:
        now = utc_now()

    candidates = (
        ("query", query_span),
        ("panel", panel_span),
        ("dashboard", dashboard_span),
    )
    for level, candidate in candidates:
        if candidate is None:
            continue
        try:
            span = span_from_config(candidate, now)
        except DurationParseError as exc:
            logger.warning(
                "span_candidate_invalid",
                level=level,
                error=exc.message,
                **exc.details,
            )
            continue
        logger.debug("span_resolved", level=level, end=span.end.isoformat())
        return span

    return TimeSpan(end=now, duration=DEFAULT_DURATION, step=DEFAULT_STEP)


def resolve_query_window(
    query_span: SpanConfig | None = None,
    panel_span: SpanConfig | None = None,
    dashboard_span: SpanConfig | None = None,
    now: datetime | None = None,
) -> tuple[int, int, float]:
    """Resolve the span and return (start, end, step_seconds)."""
    return resolve_span(query_span, panel_span, dashboard_span, now).query_window()
