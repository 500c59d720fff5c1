"""Backend query connectors and their registry."""

from heracles.query.connectors.base import BaseConnector, QueryConnector
from heracles.query.connectors.logsql import LogsqlConnector, LogsqlRecord
from heracles.query.connectors.loki import LokiConnector
from heracles.query.connectors.prometheus import PrometheusConnector
from heracles.query.connectors.registry import (
    ConnectorRegistry,
    backends_for,
    connector_registry,
    create_connector,
    register_connector,
)
from heracles.query.models import Backend, PanelKind

register_connector(Backend.PROMETHEUS, PrometheusConnector, [PanelKind.METRICS])
register_connector(Backend.LOKI, LokiConnector, [PanelKind.LOGS])
register_connector(Backend.LOGSQL, LogsqlConnector, [PanelKind.LOGS])

__all__ = [
    "BaseConnector",
    "ConnectorRegistry",
    "QueryConnector",
    "PrometheusConnector",
    "LokiConnector",
    "LogsqlConnector",
    "LogsqlRecord",
    "backends_for",
    "connector_registry",
    "create_connector",
    "register_connector",
]
