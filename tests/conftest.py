"""Root test configuration."""

import logging
from datetime import datetime, timezone

import pytest
import structlog
from heracles.dashboards.models import (
    AxisDefinition,
    Dashboard,
    Graph,
    LogStream,
    PlotMeta,
    SpanConfig,
    SubPlot,
)
from heracles.query.models import QueryType

PROM_URL = "http://prometheus.test:9090"
LOKI_URL = "http://loki.test:3100"
LOGSQL_URL = "http://victorialogs.test:9428"


def pytest_configure(config):
    """Configure structlog for tests to suppress debug/info output."""
    logging.basicConfig(level=logging.WARNING, force=True)
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.processors.add_log_level,
            structlog.processors.format_exc_info,
            structlog.dev.ConsoleRenderer(),
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )


@pytest.fixture
def now():
    return datetime(2024, 2, 10, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def cpu_graph():
    return Graph(
        title="Node cpu",
        query_type=QueryType.RANGE,
        legend_orientation="h",
        d3_tickformat="~s",
        yaxes=(AxisDefinition(anchor="y", side="left", tickformat="~%"),),
        plots=(
            SubPlot(
                source=PROM_URL,
                query='rate(node_cpu_seconds_total{FILTERS, mode="system"}[5m])',
                meta=PlotMeta(name_format="`${labels.instance} system`", yaxis="y"),
            ),
            SubPlot(
                source=PROM_URL,
                query='rate(node_cpu_seconds_total{FILTERS, mode="user"}[5m])',
                meta=PlotMeta(name_format="`${labels.instance} user`", yaxis="y2"),
            ),
        ),
    )


@pytest.fixture
def loki_stream():
    return LogStream(
        title="Systemd Service Logs",
        source=LOKI_URL,
        query='{job="systemd-journal"}',
        query_type=QueryType.RANGE,
        limit=100,
    )


@pytest.fixture
def dashboard(cpu_graph, loki_stream):
    return Dashboard(
        title="Node Overview",
        graphs=(cpu_graph,),
        logs=(loki_stream,),
        span=SpanConfig(end="2024-02-10T00:00:00Z", duration="1h", step_duration="1m"),
    )
