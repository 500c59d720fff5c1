"""Dashboard configuration models.

Typed, immutable views of the dashboards YAML. The parsed list is loaded
once and shared read-only by every request.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Optional, Tuple

from heracles.core.errors import ConfigurationError
from heracles.query.connectors import backends_for
from heracles.query.models import Backend, PanelKind, QueryType


def _expect_mapping(data: Any, where: str) -> dict[str, Any]:
    if not isinstance(data, dict):
        raise ConfigurationError(f"{where} must be a mapping", {"location": where})
    return data


def _require_str(data: dict[str, Any], key: str, where: str) -> str:
    value = data.get(key)
    if value is None:
        raise ConfigurationError(f"{where}.{key} is required", {"location": where})
    if not isinstance(value, (str, int, float)) or isinstance(value, bool):
        raise ConfigurationError(f"{where}.{key} must be a string", {"location": where})
    return str(value)


def _optional_str(data: dict[str, Any], key: str, where: str) -> Optional[str]:
    if data.get(key) is None:
        return None
    return _require_str(data, key, where)


def _expect_list(data: dict[str, Any], key: str, where: str) -> list[Any]:
    value = data.get(key)
    if value is None:
        return []
    if not isinstance(value, list):
        raise ConfigurationError(f"{where}.{key} must be a list", {"location": where})
    return value


def _parse_query_type(data: dict[str, Any], where: str) -> QueryType:
    raw = data.get("query_type")
    if raw is None:
        raise ConfigurationError(f"{where}.query_type is required", {"location": where})
    try:
        return QueryType(raw)
    except ValueError as exc:
        raise ConfigurationError(
            f"{where}.query_type must be one of Range, Scalar (got {raw!r})",
            {"location": where},
        ) from exc


def _parse_backend(
    data: dict[str, Any],
    default: Backend,
    panel: PanelKind,
    where: str,
) -> Backend:
    raw = data.get("backend")
    if raw is None:
        return default
    try:
        backend = Backend(str(raw).lower())
    except ValueError as exc:
        raise ConfigurationError(
            f"{where}.backend {raw!r} is not supported", {"location": where}
        ) from exc
    allowed = backends_for(panel)
    if backend not in allowed:
        raise ConfigurationError(
            f"{where}.backend must be one of {', '.join(b.value for b in allowed)}",
            {"location": where},
        )
    return backend


@dataclass(frozen=True)
class SpanConfig:
    """An unresolved span: end ("now" or RFC 3339), duration and step strings."""

    end: str
    duration: str
    step_duration: str

    @classmethod
    def from_dict(cls, data: Any, where: str = "span") -> SpanConfig:
        data = _expect_mapping(data, where)
        end = data.get("end")
        # YAML loads unquoted RFC 3339 values as datetimes.
        if isinstance(end, datetime):
            if end.tzinfo is None:
                end = end.replace(tzinfo=timezone.utc)
            end = end.isoformat()
        return cls(
            end=_require_str({"end": end}, "end", where),
            duration=_require_str(data, "duration", where),
            step_duration=_require_str(data, "step_duration", where),
        )

    @classmethod
    def from_optional(cls, data: Any, where: str) -> Optional[SpanConfig]:
        if data is None:
            return None
        return cls.from_dict(data, where)


@dataclass(frozen=True)
class PlotMeta:
    """Display hints for one sub-plot. Passed through to the renderer untouched."""

    name_format: Optional[str] = None
    fill: Optional[str] = None
    yaxis: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Any, where: str = "config") -> PlotMeta:
        if data is None:
            return cls()
        data = _expect_mapping(data, where)
        return cls(
            name_format=_optional_str(data, "name_format", where),
            fill=_optional_str(data, "fill", where),
            yaxis=_optional_str(data, "yaxis", where),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            key: value
            for key, value in (
                ("name_format", self.name_format),
                ("fill", self.fill),
                ("yaxis", self.yaxis),
            )
            if value is not None
        }


@dataclass(frozen=True)
class AxisDefinition:
    """A plotly y axis definition."""

    anchor: Optional[str] = None
    overlaying: Optional[str] = None
    side: Optional[str] = None
    tickformat: Optional[str] = None
    type: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Any, where: str = "yaxes") -> AxisDefinition:
        data = _expect_mapping(data, where)
        return cls(
            anchor=_optional_str(data, "anchor", where),
            overlaying=_optional_str(data, "overlaying", where),
            side=_optional_str(data, "side", where),
            tickformat=_optional_str(data, "tickformat", where),
            type=_optional_str(data, "type", where),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            key: value
            for key, value in (
                ("anchor", self.anchor),
                ("overlaying", self.overlaying),
                ("side", self.side),
                ("tickformat", self.tickformat),
                ("type", self.type),
            )
            if value is not None
        }


@dataclass(frozen=True)
class SubPlot:
    """One query inside a metrics panel."""

    source: str
    query: str
    meta: PlotMeta = field(default_factory=PlotMeta)
    backend: Backend = Backend.PROMETHEUS

    @classmethod
    def from_dict(cls, data: Any, where: str = "plot") -> SubPlot:
        data = _expect_mapping(data, where)
        return cls(
            source=_require_str(data, "source", where),
            query=_require_str(data, "query", where),
            meta=PlotMeta.from_dict(data.get("config"), f"{where}.config"),
            backend=_parse_backend(data, Backend.PROMETHEUS, PanelKind.METRICS, where),
        )


@dataclass(frozen=True)
class Graph:
    """A metrics panel with one or more sub-plots."""

    title: str
    plots: Tuple[SubPlot, ...]
    query_type: QueryType
    legend_orientation: Optional[str] = None
    yaxes: Tuple[AxisDefinition, ...] = ()
    span: Optional[SpanConfig] = None
    d3_tickformat: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Any, where: str = "graph") -> Graph:
        data = _expect_mapping(data, where)
        plots = tuple(
            SubPlot.from_dict(plot, f"{where}.plots[{idx}]")
            for idx, plot in enumerate(_expect_list(data, "plots", where))
        )
        if not plots:
            raise ConfigurationError(f"{where}.plots must not be empty", {"location": where})
        return cls(
            title=_require_str(data, "title", where),
            plots=plots,
            query_type=_parse_query_type(data, where),
            legend_orientation=_optional_str(data, "legend_orientation", where),
            yaxes=tuple(
                AxisDefinition.from_dict(axis, f"{where}.yaxes[{idx}]")
                for idx, axis in enumerate(_expect_list(data, "yaxes", where))
            ),
            span=SpanConfig.from_optional(data.get("span"), f"{where}.span"),
            d3_tickformat=_optional_str(data, "d3_tickformat", where),
        )


@dataclass(frozen=True)
class LogStream:
    """A log panel backed by a single query."""

    title: str
    source: str
    query: str
    query_type: QueryType
    backend: Backend = Backend.LOKI
    legend_orientation: Optional[str] = None
    span: Optional[SpanConfig] = None
    limit: Optional[int] = None

    @classmethod
    def from_dict(cls, data: Any, where: str = "log") -> LogStream:
        data = _expect_mapping(data, where)
        limit = data.get("limit")
        if limit is not None and (isinstance(limit, bool) or not isinstance(limit, int) or limit < 0):
            raise ConfigurationError(
                f"{where}.limit must be a non-negative integer", {"location": where}
            )
        return cls(
            title=_require_str(data, "title", where),
            source=_require_str(data, "source", where),
            query=_require_str(data, "query", where),
            query_type=_parse_query_type(data, where),
            backend=_parse_backend(data, Backend.LOKI, PanelKind.LOGS, where),
            legend_orientation=_optional_str(data, "legend_orientation", where),
            span=SpanConfig.from_optional(data.get("span"), f"{where}.span"),
            limit=limit,
        )


@dataclass(frozen=True)
class Dashboard:
    """A titled collection of metrics panels and log panels."""

    title: str
    graphs: Tuple[Graph, ...] = ()
    logs: Tuple[LogStream, ...] = ()
    span: Optional[SpanConfig] = None

    @classmethod
    def from_dict(cls, data: Any, where: str = "dashboard") -> Dashboard:
        data = _expect_mapping(data, where)
        return cls(
            title=_require_str(data, "title", where),
            graphs=tuple(
                Graph.from_dict(graph, f"{where}.graphs[{idx}]")
                for idx, graph in enumerate(_expect_list(data, "graphs", where))
            ),
            logs=tuple(
                LogStream.from_dict(log, f"{where}.logs[{idx}]")
                for idx, log in enumerate(_expect_list(data, "logs", where))
            ),
            span=SpanConfig.from_optional(data.get("span"), f"{where}.span"),
        )
