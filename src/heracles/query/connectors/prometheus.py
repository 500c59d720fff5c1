"""
Prometheus connector for metrics panels.

Works against any server exposing the Prometheus HTTP query API
(Prometheus, VictoriaMetrics, Mimir, Thanos).
"""

from __future__ import annotations

from typing import Any

import httpx

from heracles.query.connectors.base import BaseConnector
from heracles.query.filters import build_query
from heracles.query.models import QueryType

INSTANT_API_PATH = "/api/v1/query"
RANGE_API_PATH = "/api/v1/query_range"


class PrometheusConnector(BaseConnector):
    """Instant and range PromQL queries."""

    name = "prometheus"

    @property
    def query(self) -> str:
        """The query text with request filters substituted."""
        return build_query(self._query, self._filters)

    def build_request(self) -> httpx.Request:
        start, end, step = self.span.query_window()

        if self._query_type is QueryType.SCALAR:
            return self._request(
                "GET",
                INSTANT_API_PATH,
                params={"query": self.query, "time": end},
            )

        return self._request(
            "GET",
            RANGE_API_PATH,
            params={
                "query": self.query,
                "start": start,
                "end": end,
                "step": step,
            },
        )

    def parse_response(self, response: httpx.Response) -> dict[str, Any]:
        """Return the ``data`` member: ``{"resultType": ..., "result": ...}``."""
        return self._decode_json(response)
