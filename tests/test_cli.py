"""Tests for the heracles command line."""

import pytest
from heracles.cli.main import build_parser, main, settings_from_args
from heracles.config import Settings
from heracles.core.errors import ExitCode, QueryValidationError

DASHBOARDS_YAML = """\
- title: Test
  graphs:
    - title: Up
      query_type: Scalar
      plots:
        - source: http://prom:9090
          query: up
"""


@pytest.fixture(autouse=True)
def quiet_logging(monkeypatch):
    monkeypatch.setattr("heracles.cli.main.configure_logging", lambda level: None)


@pytest.fixture
def base_settings():
    return Settings(_env_file=None)


@pytest.fixture
def dashboards_file(tmp_path):
    path = tmp_path / "dashboards.yaml"
    path.write_text(DASHBOARDS_YAML)
    return path


class TestBuildParser:
    """Tests for argument parsing."""

    def test_serve_listen(self):
        args = build_parser().parse_args(["serve", "--listen", "0.0.0.0:8080"])
        assert args.command == "serve"
        assert args.listen == ("0.0.0.0", 8080)

    def test_bad_listen(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["serve", "--listen", "nope"])

    def test_global_options(self):
        args = build_parser().parse_args(["--dashboards", "d.yaml", "--timeout", "5", "validate"])
        assert args.command == "validate"
        assert args.dashboards == "d.yaml"
        assert args.timeout == 5.0


class TestSettingsFromArgs:
    """Tests for settings_from_args."""

    def test_overrides(self, base_settings):
        args = build_parser().parse_args(
            ["--dashboards", "d.yaml", "--log-level", "debug", "serve", "--listen", "::1:9000"]
        )
        settings = settings_from_args(args, base_settings)
        assert settings.dashboards_path == "d.yaml"
        assert settings.log_level == "debug"
        assert settings.listen_host == "::1"
        assert settings.listen_port == 9000

    def test_keeps_defaults(self, base_settings):
        args = build_parser().parse_args(["validate"])
        assert settings_from_args(args, base_settings) == base_settings

    def test_rejects_non_positive_timeout(self, base_settings):
        from heracles.core.errors import ConfigurationError

        args = build_parser().parse_args(["--timeout", "0", "validate"])
        with pytest.raises(ConfigurationError):
            settings_from_args(args, base_settings)


class TestMain:
    """Tests for the main entry point."""

    def test_no_command_prints_help(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main([])
        assert exc_info.value.code == 2
        assert "usage" in capsys.readouterr().out

    def test_validate_success(self, dashboards_file, monkeypatch):
        async def fake_validate(dashboards, *, timeout):
            assert len(dashboards) == 1
            return 1

        monkeypatch.setattr("heracles.cli.validate.validate_dashboards", fake_validate)

        with pytest.raises(SystemExit) as exc_info:
            main(["--dashboards", str(dashboards_file), "validate"])
        assert exc_info.value.code == ExitCode.SUCCESS

    def test_validate_failure_exit_code(self, dashboards_file, monkeypatch):
        async def fake_validate(dashboards, *, timeout):
            raise QueryValidationError("query for panel 'Up' failed", {"dashboard": 0, "panel": 0})

        monkeypatch.setattr("heracles.cli.validate.validate_dashboards", fake_validate)

        with pytest.raises(SystemExit) as exc_info:
            main(["--dashboards", str(dashboards_file), "validate"])
        assert exc_info.value.code == ExitCode.VALIDATION_ERROR

    def test_missing_dashboards_file(self, tmp_path):
        with pytest.raises(SystemExit) as exc_info:
            main(["--dashboards", str(tmp_path / "missing.yaml"), "validate"])
        assert exc_info.value.code == ExitCode.CONFIG_ERROR

    def test_serve_runs_uvicorn(self, dashboards_file, monkeypatch):
        calls = {}

        def fake_run(app, **kwargs):
            calls["app"] = app
            calls.update(kwargs)

        monkeypatch.setattr("heracles.cli.serve.uvicorn.run", fake_run)

        with pytest.raises(SystemExit) as exc_info:
            main(
                ["--dashboards", str(dashboards_file), "serve", "--listen", "127.0.0.1:3100"]
            )

        assert exc_info.value.code == 0
        assert calls["host"] == "127.0.0.1"
        assert calls["port"] == 3100
        assert len(calls["app"].state.dashboards) == 1
