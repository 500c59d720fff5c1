"""
LogsQL connector (VictoriaLogs).

Every query is a form encoded POST to a single endpoint; the time range
travels as explicit RFC 3339 start/end fields. The response body is JSON
lines, one record per log entry.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any

import httpx
import structlog

from heracles.core.errors import MalformedLogRecord
from heracles.query.connectors.base import BaseConnector

logger = structlog.get_logger()

QUERY_API_PATH = "/select/logsql/query"


@dataclass(frozen=True)
class LogsqlRecord:
    """One decoded LogsQL result line."""

    msg: str
    stream: str
    time: str
    fields: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_line(cls, line: str) -> LogsqlRecord:
        """
        Decode a single JSON line.

        Raises:
            MalformedLogRecord: If the line is not a JSON object with _msg, _stream and _time
        """
        try:
            obj = json.loads(line)
        except json.JSONDecodeError as exc:
            raise MalformedLogRecord(f"invalid JSON: {exc}", {"line": line}) from exc
        if not isinstance(obj, dict):
            raise MalformedLogRecord("record is not a JSON object", {"line": line})

        missing = [key for key in ("_msg", "_stream", "_time") if key not in obj]
        if missing:
            raise MalformedLogRecord(
                f"record is missing {', '.join(missing)}", {"line": line}
            )

        extra = {k: v for k, v in obj.items() if k not in ("_msg", "_stream", "_time")}
        return cls(
            msg=str(obj["_msg"]),
            stream=str(obj["_stream"]),
            time=str(obj["_time"]),
            fields=extra,
        )


class LogsqlConnector(BaseConnector):
    """LogsQL queries; the query kind does not change the wire call."""

    name = "logsql"

    def build_request(self) -> httpx.Request:
        form: dict[str, Any] = {"query": self._query}
        if self._limit is not None:
            form["limit"] = str(self._limit)
        if self._span is not None:
            form["start"] = self._span.start.isoformat()
            form["end"] = self._span.end.isoformat()
        return self._request("POST", QUERY_API_PATH, data=form)

    def parse_response(self, response: httpx.Response) -> list[LogsqlRecord]:
        records: list[LogsqlRecord] = []
        for line in response.text.splitlines():
            if not line.strip():
                continue
            try:
                records.append(LogsqlRecord.from_line(line))
            except MalformedLogRecord as exc:
                logger.error("logsql_record_malformed", error=exc.message, **exc.details)
        return records
