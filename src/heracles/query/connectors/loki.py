"""
Loki connector for log panels.

Scalar panels use the instant query endpoint, range panels the range
endpoint with an explicit end, a lookback (``since``) and a step.
"""

from __future__ import annotations

from datetime import timedelta
from typing import Any

import httpx

from heracles.core.errors import BackendMalformedResponse
from heracles.query.connectors.base import BaseConnector
from heracles.query.models import QueryType

SCALAR_API_PATH = "/loki/api/v1/query"
RANGE_API_PATH = "/loki/api/v1/query_range"

# vector: query endpoint, matrix: query_range endpoint, streams: both
RESULT_TYPES = ("vector", "matrix", "streams")


def lookback(duration: timedelta) -> str:
    """Render a duration for the ``since`` parameter in the coarsest exact unit."""
    micros = duration // timedelta(microseconds=1)
    if micros % 1_000_000 == 0:
        return f"{micros // 1_000_000}s"
    if micros % 1000 == 0:
        return f"{micros // 1000}ms"
    return f"{micros}us"


class LokiConnector(BaseConnector):
    """LogQL queries against the Loki HTTP API."""

    name = "loki"

    def build_request(self) -> httpx.Request:
        params: dict[str, Any] = {"query": self._query}
        if self._limit is not None:
            params["limit"] = self._limit

        span = self.span
        _, end, step = span.query_window()

        if self._query_type is QueryType.SCALAR:
            params["time"] = end
            return self._request("GET", SCALAR_API_PATH, params=params)

        params["end"] = end
        params["since"] = lookback(span.duration)
        params["step"] = step
        return self._request("GET", RANGE_API_PATH, params=params)

    def parse_response(self, response: httpx.Response) -> dict[str, Any]:
        """Return the ``data`` member with a validated result type."""
        data = self._decode_json(response)
        if data["resultType"] not in RESULT_TYPES:
            raise BackendMalformedResponse(
                f"loki returned unsupported result type {data['resultType']!r}",
                {"backend": self.name},
            )
        if not isinstance(data["result"], list):
            raise BackendMalformedResponse(
                "loki result must be a list", {"backend": self.name}
            )
        return data
