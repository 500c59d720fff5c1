"""Tests for the dashboards API."""

import pytest
import respx
from heracles.api.main import create_app
from heracles.config import Settings
from httpx import ASGITransport, AsyncClient, ConnectError, Response

PROM_URL = "http://prometheus.test:9090"
LOKI_URL = "http://loki.test:3100"


def matrix(*instances):
    return {
        "status": "success",
        "data": {
            "resultType": "matrix",
            "result": [
                {"metric": {"instance": name}, "values": [[1707523200, "1"]]} for name in instances
            ],
        },
    }


@pytest.fixture
def app(dashboard):
    return create_app(Settings(_env_file=None), dashboard_list=[dashboard])


class TestHealth:
    """Tests for health endpoints."""

    @pytest.mark.asyncio
    async def test_health(self, app):
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
            response = await client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    @pytest.mark.asyncio
    async def test_ready_counts_dashboards(self, app):
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
            response = await client.get("/ready")
        assert response.json() == {"status": "ready", "dashboards": 1}

    @pytest.mark.asyncio
    async def test_not_ready_before_load(self):
        app = create_app(Settings(_env_file=None))
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
            response = await client.get("/ready")
        assert response.status_code == 503


class TestListDashboards:
    """Tests for GET /api/dashboards."""

    @pytest.mark.asyncio
    async def test_lists_panel_titles(self, app):
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
            response = await client.get("/api/dashboards")
        assert response.status_code == 200
        assert response.json() == [
            {
                "index": 0,
                "title": "Node Overview",
                "graphs": [{"index": 0, "title": "Node cpu"}],
                "logs": [{"index": 0, "title": "Systemd Service Logs"}],
            }
        ]


class TestGraphQuery:
    """Tests for GET /api/dash/{dash}/graph/{graph}."""

    @pytest.mark.asyncio
    @respx.mock
    async def test_metrics_payload(self, app):
        respx.get(f"{PROM_URL}/api/v1/query_range").mock(
            return_value=Response(200, json=matrix("node-a"))
        )

        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
            response = await client.get("/api/dash/0/graph/0")

        assert response.status_code == 200
        metrics = response.json()["Metrics"]
        assert metrics["legend_orientation"] == "h"
        assert metrics["d3_tickformat"] == "~s"
        assert metrics["yaxes"] == [{"anchor": "y", "side": "left", "tickformat": "~%"}]
        assert len(metrics["plots"]) == 2
        labels, meta, points = metrics["plots"][0]["Series"][0]
        assert labels == {"instance": "node-a"}
        assert meta == {"name_format": "`${labels.instance} system`", "yaxis": "y"}
        assert points == [{"timestamp": 1707523200.0, "value": 1.0}]

    @pytest.mark.asyncio
    @respx.mock
    async def test_query_span_and_filters(self, app):
        route = respx.get(f"{PROM_URL}/api/v1/query_range").mock(
            return_value=Response(200, json=matrix())
        )

        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
            response = await client.get(
                "/api/dash/0/graph/0",
                params={
                    "end": "2024-01-01T00:00:00Z",
                    "duration": "2h",
                    "step_duration": "5m",
                    "filter-instance": "web-.*",
                },
            )

        assert response.status_code == 200
        params = route.calls.last.request.url.params
        assert params["end"] == "1704067200"
        assert params["start"] == str(1704067200 - 7200)
        assert float(params["step"]) == 300.0
        assert 'instance=~"web-.*"' in params["query"]

    @pytest.mark.asyncio
    @respx.mock
    async def test_out_of_range_query_span_falls_through(self, app):
        route = respx.get(f"{PROM_URL}/api/v1/query_range").mock(
            return_value=Response(200, json=matrix())
        )

        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
            response = await client.get(
                "/api/dash/0/graph/0",
                params={"end": "now", "duration": "5000y", "step_duration": "1m"},
            )

        assert response.status_code == 200
        params = route.calls.last.request.url.params
        assert params["end"] == "1707523200"
        assert params["start"] == str(1707523200 - 3600)

    @pytest.mark.asyncio
    async def test_unknown_dashboard(self, app):
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
            response = await client.get("/api/dash/5/graph/0")
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_unknown_graph(self, app):
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
            response = await client.get("/api/dash/0/graph/3")
        assert response.status_code == 404

    @pytest.mark.asyncio
    @respx.mock
    async def test_backend_http_error_is_bad_gateway(self, app):
        respx.get(f"{PROM_URL}/api/v1/query_range").mock(return_value=Response(500, text="down"))

        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
            response = await client.get("/api/dash/0/graph/0")

        assert response.status_code == 502
        body = response.json()
        assert body["type"] == "BackendHTTPError"
        assert body["backend_status"] == 500

    @pytest.mark.asyncio
    @respx.mock
    async def test_unreachable_backend_is_gateway_timeout(self, app):
        respx.get(f"{PROM_URL}/api/v1/query_range").mock(side_effect=ConnectError("refused"))

        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
            response = await client.get("/api/dash/0/graph/0")

        assert response.status_code == 504
        assert response.json()["type"] == "BackendUnreachable"


class TestLogQuery:
    """Tests for GET /api/dash/{dash}/log/{log}."""

    @pytest.mark.asyncio
    @respx.mock
    async def test_logs_payload(self, app):
        respx.get(f"{LOKI_URL}/loki/api/v1/query_range").mock(
            return_value=Response(
                200,
                json={
                    "status": "success",
                    "data": {
                        "resultType": "streams",
                        "result": [
                            {"stream": {"unit": "sshd"}, "values": [["1707523200000000000", "hi"]]}
                        ],
                    },
                },
            )
        )

        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
            response = await client.get("/api/dash/0/log/0")

        assert response.status_code == 200
        logs = response.json()["Logs"]
        assert logs["lines"] == {
            "Stream": [[{"unit": "sshd"}, [{"timestamp": 1.7075232e18, "line": "hi"}]]]
        }

    @pytest.mark.asyncio
    async def test_unknown_log(self, app):
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
            response = await client.get("/api/dash/0/log/1")
        assert response.status_code == 404
