"""Request boundary helpers: query span and label filters from query parameters."""

from __future__ import annotations

from typing import Mapping

from heracles.dashboards.models import SpanConfig

FILTER_PREFIX = "filter-"


def span_from_params(params: Mapping[str, str]) -> SpanConfig | None:
    """Return the request span, only when end, duration and step_duration are all set."""
    end = params.get("end")
    duration = params.get("duration")
    step = params.get("step_duration")
    if not end or not duration or not step:
        return None
    return SpanConfig(end=end, duration=duration, step_duration=step)


def filters_from_params(params: Mapping[str, str]) -> dict[str, str] | None:
    """Collect ``filter-<label>=<pattern>`` pairs into a label to pattern mapping."""
    filters = {
        key[len(FILTER_PREFIX):]: value
        for key, value in params.items()
        if key.startswith(FILTER_PREFIX) and len(key) > len(FILTER_PREFIX)
    }
    return filters or None
