"""
Shared connector contract.

A connector turns (source, query, kind, span) into one outbound HTTP call
and returns the backend specific raw payload. Each request gets a fresh
connector; connectors hold no state across requests.
"""

from __future__ import annotations

import json
from typing import Any, Mapping, Protocol

import httpx
import structlog

from heracles.core.errors import (
    BackendHTTPError,
    BackendMalformedResponse,
    BackendUnreachable,
)
from heracles.query.models import QueryType, TimeSpan
from heracles.query.span import resolve_span

logger = structlog.get_logger()

DEFAULT_TIMEOUT = 30.0
DEFAULT_USER_AGENT = "heracles/0.1.0"


class QueryConnector(Protocol):
    """Contract implemented by every backend connector."""

    name: str

    def build_request(self) -> httpx.Request:
        ...

    def parse_response(self, response: httpx.Response) -> Any:
        ...

    async def execute(self) -> Any:
        ...


class BaseConnector:
    """HTTP plumbing shared by the backend connectors."""

    name = "base"

    def __init__(
        self,
        source: str,
        query: str,
        query_type: QueryType,
        *,
        span: TimeSpan | None = None,
        filters: Mapping[str, str] | None = None,
        limit: int | None = None,
        timeout: float = DEFAULT_TIMEOUT,
        user_agent: str = DEFAULT_USER_AGENT,
    ) -> None:
        self._base_url = source.rstrip("/")
        self._query = query
        self._query_type = query_type
        self._span = span
        self._filters = dict(filters) if filters else None
        self._limit = limit
        self._timeout = timeout
        self._user_agent = user_agent

    @property
    def query_type(self) -> QueryType:
        return self._query_type

    @property
    def span(self) -> TimeSpan:
        """The configured span, or the default window when none was given."""
        if self._span is None:
            return resolve_span()
        return self._span

    def build_request(self) -> httpx.Request:
        raise NotImplementedError

    def parse_response(self, response: httpx.Response) -> Any:
        raise NotImplementedError

    async def execute(self) -> Any:
        """Send the request and return the parsed backend payload."""
        request = self.build_request()
        logger.debug(
            "backend_query",
            backend=self.name,
            method=request.method,
            url=str(request.url),
        )
        response = await self._send(request)
        return self.parse_response(response)

    def _request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        data: dict[str, Any] | None = None,
    ) -> httpx.Request:
        return httpx.Request(
            method,
            f"{self._base_url}{path}",
            params=params,
            data=data,
            headers={"User-Agent": self._user_agent},
        )

    async def _send(self, request: httpx.Request) -> httpx.Response:
        """Execute the request, mapping transport failures onto backend errors."""
        url = str(request.url).split("?", 1)[0]
        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                response = await client.send(request)
        except httpx.TimeoutException as exc:
            raise BackendUnreachable(
                f"Timeout querying {self.name} at {url}: {exc}",
                {"backend": self.name, "url": url},
            ) from exc
        except httpx.TransportError as exc:
            raise BackendUnreachable(
                f"Failed to connect to {self.name} at {url}: {exc}",
                {"backend": self.name, "url": url},
            ) from exc

        if response.is_error:
            raise BackendHTTPError(
                f"{self.name} returned HTTP {response.status_code}: {response.text[:200]}",
                status=response.status_code,
                details={"backend": self.name, "url": url},
            )
        return response

    def _decode_json(self, response: httpx.Response) -> dict[str, Any]:
        """Decode a ``{"status": ..., "data": ...}`` API envelope and return data."""
        try:
            payload = response.json()
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise BackendMalformedResponse(
                f"{self.name} returned invalid JSON: {exc}", {"backend": self.name}
            ) from exc

        if not isinstance(payload, dict):
            raise BackendMalformedResponse(
                f"{self.name} returned a non-object payload", {"backend": self.name}
            )

        status = payload.get("status")
        if status != "success":
            error = payload.get("error", "Unknown error")
            raise BackendMalformedResponse(
                f"{self.name} API error: {error}", {"backend": self.name, "status": status}
            )

        data = payload.get("data")
        if not isinstance(data, dict) or "resultType" not in data or "result" not in data:
            raise BackendMalformedResponse(
                f"{self.name} response is missing data.resultType or data.result",
                {"backend": self.name},
            )
        return data
