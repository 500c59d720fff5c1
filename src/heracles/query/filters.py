"""
Label filter substitution for metrics query templates.

Templates mark where request filters go with one of three placeholder
tokens. They are checked in this order so adjacent commas come out right:

    FILTERS,   filters followed by a comma when any are rendered
    ,FILTERS   a comma followed by filters when any are rendered
    FILTERS    filters with no adjacent comma

Only the first token form found is substituted. A template without any
token is returned as is and the filters are dropped.
"""

from __future__ import annotations

from typing import Mapping

import structlog

logger = structlog.get_logger()

FILTER_PLACEHOLDER = "FILTERS"
FILTER_PLACEHOLDER_COMMA = "FILTERS,"
FILTER_COMMA_PLACEHOLDER = ",FILTERS"


def render_filters(filters: Mapping[str, str] | None) -> str:
    """Render filters as comma separated ``label=~"pattern"`` matchers."""
    if not filters:
        return ""
    return ",".join(f'{label}=~"{pattern}"' for label, pattern in filters.items())


def build_query(template: str, filters: Mapping[str, str] | None = None) -> str:
    """
    Substitute request filters into a query template.

    Args:
        template: Query text possibly containing a filter placeholder
        filters: Mapping of label name to regex match pattern

    Returns:
        The query with the placeholder replaced
    """
    rendered = render_filters(filters)

    if FILTER_PLACEHOLDER_COMMA in template:
        return template.replace(FILTER_PLACEHOLDER_COMMA, f"{rendered}," if rendered else "")
    if FILTER_COMMA_PLACEHOLDER in template:
        return template.replace(FILTER_COMMA_PLACEHOLDER, f",{rendered}" if rendered else "")
    if FILTER_PLACEHOLDER in template:
        return template.replace(FILTER_PLACEHOLDER, rendered)

    if rendered:
        # TODO: decide whether a template without a placeholder should reject filters
        logger.debug("filters_dropped_no_placeholder", filters=dict(filters or {}))
    return template
