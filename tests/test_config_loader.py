"""Tests for config/loader.py and config/settings.py."""

from pathlib import Path

import pytest
from heracles.config import Settings, load_dashboards, parse_dashboards
from heracles.core.errors import ConfigurationError, ExitCode
from heracles.dashboards.models import Backend, SpanConfig
from heracles.query.models import QueryType

EXAMPLE_DASHBOARDS = Path(__file__).parent.parent / "examples" / "dashboards.yaml"

DASHBOARDS_YAML = """\
---
- title: Test Dashboard 1
  graphs:
    - title: Node cpu
      query_type: Range
      plots:
        - source: http://prom:9090
          query: 'rate(node_cpu_seconds_total{FILTERS, job="node"}[5m])'
          config:
            name_format: "`${labels.instance}`"
- title: Test Dashboard 2
  span:
    end: 2024-02-10T00:00:00.00Z
    duration: 2 days
    step_duration: 1 minute
  logs:
    - title: Journal
      query_type: Range
      source: http://loki:3100
      query: '{job="systemd-journal"}'
"""


class TestLoadDashboards:
    """Tests for load_dashboards."""

    def test_loads_yaml_file(self, tmp_path):
        path = tmp_path / "dashboards.yaml"
        path.write_text(DASHBOARDS_YAML)

        dashboards = load_dashboards(path)

        assert [d.title for d in dashboards] == ["Test Dashboard 1", "Test Dashboard 2"]
        graph = dashboards[0].graphs[0]
        assert graph.query_type is QueryType.RANGE
        assert graph.plots[0].meta.name_format == "`${labels.instance}`"
        assert dashboards[1].logs[0].backend is Backend.LOKI

    def test_unquoted_timestamp_end(self, tmp_path):
        path = tmp_path / "dashboards.yaml"
        path.write_text(DASHBOARDS_YAML)

        span = load_dashboards(path)[1].span

        assert span == SpanConfig(
            end="2024-02-10T00:00:00+00:00", duration="2 days", step_duration="1 minute"
        )

    def test_accepts_string_path(self, tmp_path):
        path = tmp_path / "dashboards.yaml"
        path.write_text(DASHBOARDS_YAML)
        assert len(load_dashboards(str(path))) == 2

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigurationError, match="not found") as exc_info:
            load_dashboards(tmp_path / "missing.yaml")
        assert exc_info.value.exit_code == ExitCode.CONFIG_ERROR

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "broken.yaml"
        path.write_text("- title: [unterminated\n")
        with pytest.raises(ConfigurationError, match="invalid YAML"):
            load_dashboards(path)

    def test_top_level_must_be_list(self, tmp_path):
        path = tmp_path / "mapping.yaml"
        path.write_text("title: Not a list\n")
        with pytest.raises(ConfigurationError, match="list of dashboards"):
            load_dashboards(path)

    def test_empty_file(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("")
        assert load_dashboards(path) == ()

    def test_example_dashboards_parse(self):
        dashboards = load_dashboards(EXAMPLE_DASHBOARDS)
        assert len(dashboards) == 3
        assert dashboards[2].logs[1].backend is Backend.LOGSQL


class TestParseDashboards:
    """Tests for parse_dashboards."""

    def test_error_location(self):
        with pytest.raises(ConfigurationError) as exc_info:
            parse_dashboards([{"title": "Ok"}, {"title": "Bad", "logs": [{"title": "x"}]}])
        assert exc_info.value.details["location"] == "dashboards[1].logs[0]"


class TestSettings:
    """Tests for Settings."""

    def test_defaults(self, monkeypatch):
        for name in (
            "HERACLES_DASHBOARDS_PATH",
            "HERACLES_LISTEN_HOST",
            "HERACLES_LISTEN_PORT",
            "HERACLES_REQUEST_TIMEOUT",
            "HERACLES_LOG_LEVEL",
        ):
            monkeypatch.delenv(name, raising=False)
        settings = Settings(_env_file=None)
        assert settings.dashboards_path == "dashboards.yaml"
        assert settings.listen_host == "127.0.0.1"
        assert settings.listen_port == 3000
        assert settings.request_timeout == 30.0

    def test_env_prefix(self, monkeypatch):
        monkeypatch.setenv("HERACLES_DASHBOARDS_PATH", "/etc/heracles/dashboards.yaml")
        monkeypatch.setenv("HERACLES_LISTEN_PORT", "8080")
        settings = Settings(_env_file=None)
        assert settings.dashboards_path == "/etc/heracles/dashboards.yaml"
        assert settings.listen_port == 8080
