"""
Result normalization.

Maps each backend's raw payload onto the QueryResult variants. The shape
tag carried by the payload decides the variant, not the kind the panel
asked for: a range panel whose backend answers with a vector gets a
ScalarResult.

Metric samples without a usable timestamp or value fail the whole query.
Log lines with an unparsable timestamp are kept with timestamp 0 and the
failure is logged. Log timestamps are nanoseconds since the epoch for
every backend.
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Any, Iterable

import structlog

from heracles.core.errors import BackendMalformedResponse, MissingResultField
from heracles.query.models import (
    DataPoint,
    LabelSet,
    LogLine,
    QueryResult,
    ScalarResult,
    SeriesResult,
    StreamInstantResult,
    StreamResult,
)

if TYPE_CHECKING:
    from heracles.dashboards.models import PlotMeta
    from heracles.query.connectors.logsql import LogsqlRecord

logger = structlog.get_logger()

NANOS_PER_SECOND = 1_000_000_000


def _labels(entry: dict[str, Any], *keys: str) -> LabelSet:
    for key in keys:
        labels = entry.get(key)
        if isinstance(labels, dict):
            return {str(k): str(v) for k, v in labels.items()}
    return {}


def _data_point(sample: Any) -> DataPoint:
    try:
        timestamp, value = sample
        return DataPoint(timestamp=float(timestamp), value=float(value))
    except (TypeError, ValueError) as exc:
        raise BackendMalformedResponse(
            f"invalid metric sample {sample!r}", {"sample": repr(sample)}
        ) from exc


def normalize_metrics(data: dict[str, Any], meta: PlotMeta) -> QueryResult:
    """
    Normalize a Prometheus ``data`` member.

    Args:
        data: ``{"resultType": ..., "result": ...}``
        meta: Display hints attached to every returned entry

    Returns:
        SeriesResult for matrices, ScalarResult for vectors and scalars

    Raises:
        BackendMalformedResponse: On an unknown result type or a bad sample
    """
    result_type = data.get("resultType")
    result = data.get("result")

    if result_type == "matrix":
        return SeriesResult(
            entries=tuple(
                (
                    _labels(entry, "metric"),
                    meta,
                    tuple(_data_point(sample) for sample in entry.get("values") or ()),
                )
                for entry in _entries(result)
            )
        )

    if result_type == "vector":
        return ScalarResult(
            entries=tuple(
                (_labels(entry, "metric"), meta, _data_point(entry.get("value")))
                for entry in _entries(result)
            )
        )

    if result_type == "scalar":
        return ScalarResult(entries=(({}, meta, _data_point(result)),))

    raise BackendMalformedResponse(
        f"unsupported metrics result type {result_type!r}", {"result_type": result_type}
    )


def _entries(result: Any) -> Iterable[dict[str, Any]]:
    if not isinstance(result, list):
        raise BackendMalformedResponse("result must be a list")
    for entry in result:
        if not isinstance(entry, dict):
            raise BackendMalformedResponse(f"result entry is not an object: {entry!r}")
        yield entry


def _log_timestamp(raw: Any, scale: int) -> float:
    """Convert a backend timestamp to nanoseconds, 0.0 when unparsable."""
    try:
        return float(raw) * scale
    except (TypeError, ValueError):
        logger.error("log_timestamp_invalid", timestamp=repr(raw))
        return 0.0


def _log_line(pair: Any, scale: int) -> LogLine:
    try:
        raw_timestamp, line = pair
    except (TypeError, ValueError) as exc:
        raise BackendMalformedResponse(f"invalid log value {pair!r}") from exc
    return LogLine(timestamp=_log_timestamp(raw_timestamp, scale), line=str(line))


def normalize_loki(data: dict[str, Any]) -> QueryResult:
    """
    Normalize a Loki ``data`` member.

    vector results become a StreamInstantResult, matrix and streams results
    a StreamResult. Entries with neither ``value`` nor ``values`` are dropped.
    """
    result_type = data.get("resultType")
    # streams carry nanosecond strings, vector and matrix carry float seconds
    scale = 1 if result_type == "streams" else NANOS_PER_SECOND

    instant: list[tuple[LabelSet, LogLine]] = []
    streams: list[tuple[LabelSet, tuple[LogLine, ...]]] = []
    for idx, entry in enumerate(_entries(data.get("result"))):
        labels = _labels(entry, "metric", "stream")
        try:
            value, values = _value_or_values(entry, idx)
        except MissingResultField as exc:
            logger.error("loki_result_missing_values", error=exc.message, **exc.details)
            continue

        if result_type == "vector":
            if value is None:
                # A vector entry that only carries values: keep its first line.
                value = values[0]
            instant.append((labels, _log_line(value, scale)))
        else:
            pairs = values if values is not None else [value]
            streams.append((labels, tuple(_log_line(pair, scale) for pair in pairs)))

    if result_type == "vector":
        return StreamInstantResult(entries=tuple(instant))
    if result_type in ("matrix", "streams"):
        return StreamResult(entries=tuple(streams))
    raise BackendMalformedResponse(
        f"unsupported loki result type {result_type!r}", {"result_type": result_type}
    )


def _value_or_values(entry: dict[str, Any], idx: int) -> tuple[Any, Any]:
    value = entry.get("value") or None
    values = entry.get("values") or None
    if value is None and values is None:
        raise MissingResultField(
            "result entry has neither value nor values", {"index": idx}
        )
    return value, values


def normalize_logsql(records: Iterable[LogsqlRecord]) -> StreamInstantResult:
    """
    Normalize LogsQL records.

    Each record becomes one (labels, line) pair. Labels are the stream
    identifier plus every string valued extra field.
    """
    entries: list[tuple[LabelSet, LogLine]] = []
    for record in records:
        labels: LabelSet = {"stream": record.stream}
        for key, value in record.fields.items():
            if isinstance(value, str):
                labels[key] = value
        entries.append((labels, LogLine(timestamp=_rfc3339_nanos(record.time), line=record.msg)))
    return StreamInstantResult(entries=tuple(entries))


def _rfc3339_nanos(raw: str) -> float:
    """Parse an RFC 3339 timestamp with up to nanosecond precision."""
    text = raw.strip().replace("Z", "+00:00")
    fraction_nanos = 0
    if "." in text:
        # datetime only keeps microseconds; carry the full fraction separately.
        head, _, rest = text.partition(".")
        digits = ""
        while rest and rest[0].isdigit():
            digits, rest = digits + rest[0], rest[1:]
        if digits:
            fraction_nanos = int(digits[:9].ljust(9, "0"))
        text = head + rest
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        logger.error("log_timestamp_invalid", timestamp=raw)
        return 0.0
    if parsed.tzinfo is None:
        logger.error("log_timestamp_invalid", timestamp=raw, reason="missing timezone")
        return 0.0
    return float(int(parsed.timestamp()) * NANOS_PER_SECOND + fraction_nanos)
