"""Tests for the glidequery command line."""

import json
import logging

import httpx
import pytest
from httpx import Request, Response
from typer.testing import CliRunner

from glidequery_core.cli.main import app

runner = CliRunner()

READ_SCRIPT = "new GlideQuery('incident').where('active', true).select('number')"


class RecordingTransport(httpx.AsyncBaseTransport):
    """Returns a fixed script result and keeps the posted bodies."""

    def __init__(self, body: dict):
        self._body = body
        self.scripts: list[str] = []

    async def handle_async_request(self, request: Request) -> Response:
        self.scripts.append(json.loads(request.content)["script"])
        return Response(status_code=200, json=self._body, request=request)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in [
        "SERVICENOW_INSTANCE_URL",
        "SERVICENOW_USERNAME",
        "SERVICENOW_PASSWORD",
        "SERVICENOW_SCRIPT_ENDPOINT",
        "GLIDEQUERY_TIMEOUT",
        "GLIDEQUERY_MAX_SCRIPT_LENGTH",
        "GLIDEQUERY_TEST_MAX_RESULTS",
        "LOG_LEVEL",
    ]:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture(autouse=True)
def restore_package_level():
    """The CLI callback sets the package logger level; undo it after each test."""
    package_logger = logging.getLogger("glidequery_core")
    previous = package_logger.level
    yield
    package_logger.setLevel(previous)


@pytest.fixture
def instance_env(monkeypatch):
    monkeypatch.setenv("SERVICENOW_INSTANCE_URL", "https://dev12345.service-now.com")
    monkeypatch.setenv("SERVICENOW_USERNAME", "admin")
    monkeypatch.setenv("SERVICENOW_PASSWORD", "secret")


@pytest.fixture
def script_file(tmp_path):
    def _write(content: str) -> str:
        path = tmp_path / "query.js"
        path.write_text(content)
        return str(path)

    return _write


def use_transport(monkeypatch, transport: httpx.AsyncBaseTransport) -> None:
    """Route the CLI's HTTP client through a mock transport."""

    def fake_client(settings):
        return httpx.AsyncClient(
            transport=transport, base_url=settings.servicenow.instance_url
        )

    monkeypatch.setattr("glidequery_core.cli.commands.create_http_client", fake_client)


class TestValidateCommand:
    def test_valid_script(self, script_file):
        result = runner.invoke(app, ["validate", script_file(READ_SCRIPT)])
        assert result.exit_code == 0
        assert "Script is valid" in result.output

    def test_reads_stdin(self):
        result = runner.invoke(app, ["validate", "-"], input=READ_SCRIPT)
        assert result.exit_code == 0
        assert "Script is valid" in result.output

    def test_invalid_script(self, script_file):
        result = runner.invoke(
            app, ["validate", script_file("new GlideQuery('incident').selectAll()")]
        )
        assert result.exit_code == 1
        assert "selectAll" in result.output

    def test_warnings_printed(self, script_file):
        result = runner.invoke(
            app, ["validate", script_file("new GlideQuery('incident').select('a$NOPE')")]
        )
        assert result.exit_code == 0
        assert "warning:" in result.output


class TestScreenCommand:
    def test_dangerous_operation_listed(self, script_file):
        result = runner.invoke(
            app, ["screen", script_file("new GlideQuery('incident').deleteMultiple()")]
        )
        assert result.exit_code == 0
        assert "requires confirmation:" in result.output
        assert "deleteMultiple" in result.output

    def test_blacklisted_script(self, script_file):
        result = runner.invoke(app, ["screen", script_file("eval('1 + 1')")])
        assert result.exit_code == 1
        assert "violation:" in result.output

    def test_configured_length_limit(self, script_file, monkeypatch):
        monkeypatch.setenv("GLIDEQUERY_MAX_SCRIPT_LENGTH", "100")
        result = runner.invoke(app, ["screen", script_file("x" * 150)])
        assert result.exit_code == 1


class TestExecuteCommands:
    def test_missing_configuration(self, script_file):
        result = runner.invoke(app, ["execute", script_file(READ_SCRIPT)])
        assert result.exit_code == 2
        assert "Configuration error" in result.output

    def test_execute(self, script_file, instance_env, monkeypatch):
        transport = RecordingTransport(
            {"result": {"success": True, "value": [{"number": "INC1"}], "logs": []}}
        )
        use_transport(monkeypatch, transport)

        result = runner.invoke(app, ["execute", script_file(READ_SCRIPT)])

        assert result.exit_code == 0
        assert transport.scripts == [READ_SCRIPT]
        output = json.loads(result.output)
        assert output["success"] is True
        assert output["data"] == [{"number": "INC1"}]
        assert output["record_count"] == 1

    def test_execute_failure_exit_code(self, script_file, instance_env, monkeypatch):
        transport = RecordingTransport(
            {"result": {"success": False, "error": {"message": "boom"}}}
        )
        use_transport(monkeypatch, transport)

        result = runner.invoke(app, ["execute", script_file(READ_SCRIPT)])

        assert result.exit_code == 1
        assert '"error": "boom"' in result.output

    def test_test_mode(self, script_file, instance_env, monkeypatch):
        transport = RecordingTransport(
            {
                "result": {
                    "success": True,
                    "value": {
                        "__testMode": True,
                        "__truncated": False,
                        "__originalCount": 1,
                        "data": [{"number": "INC1"}],
                    },
                }
            }
        )
        use_transport(monkeypatch, transport)

        result = runner.invoke(app, ["test", script_file(READ_SCRIPT), "--max-results", "5"])

        assert result.exit_code == 0
        assert "var __testModeMaxResults = 5;" in transport.scripts[0]
        output = json.loads(result.output)
        assert output["data"] == [{"number": "INC1"}]
        assert output["truncated"] is False

    def test_test_mode_uses_configured_cap(self, script_file, instance_env, monkeypatch):
        monkeypatch.setenv("GLIDEQUERY_TEST_MAX_RESULTS", "15")
        transport = RecordingTransport({"result": {"success": True, "value": []}})
        use_transport(monkeypatch, transport)

        result = runner.invoke(app, ["test", script_file(READ_SCRIPT)])

        assert result.exit_code == 0
        assert "var __testModeMaxResults = 15;" in transport.scripts[0]

    def test_max_results_out_of_range(self, script_file):
        result = runner.invoke(app, ["test", script_file(READ_SCRIPT), "-n", "5000"])
        assert result.exit_code == 2

    @pytest.mark.parametrize("command", ["execute", "test"])
    def test_timeout_must_be_positive(self, script_file, command):
        result = runner.invoke(app, [command, script_file(READ_SCRIPT), "--timeout", "0"])
        assert result.exit_code == 2
        assert result.exception is None or isinstance(result.exception, SystemExit)


class TestLogging:
    def test_log_level_from_environment(self, script_file, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "debug")

        result = runner.invoke(app, ["validate", script_file(READ_SCRIPT)])

        assert result.exit_code == 0
        assert logging.getLogger("glidequery_core").level == logging.DEBUG

    def test_default_log_level_is_info(self, script_file):
        result = runner.invoke(app, ["validate", script_file(READ_SCRIPT)])

        assert result.exit_code == 0
        assert logging.getLogger("glidequery_core").level == logging.INFO

    def test_option_overrides_environment(self, script_file, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "debug")

        result = runner.invoke(
            app, ["--log-level", "error", "validate", script_file(READ_SCRIPT)]
        )

        assert result.exit_code == 0
        assert logging.getLogger("glidequery_core").level == logging.ERROR

    def test_warn_alias(self, script_file, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "warn")

        runner.invoke(app, ["validate", script_file(READ_SCRIPT)])

        assert logging.getLogger("glidequery_core").level == logging.WARNING

    def test_invalid_log_level(self, script_file, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "loud")

        result = runner.invoke(app, ["validate", script_file(READ_SCRIPT)])

        assert result.exit_code == 2
        assert "Configuration error" in result.output
