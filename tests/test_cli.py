import json
from unittest.mock import AsyncMock, patch

from typer.testing import CliRunner

from covreport.cli import app
from covreport.collector import CollectedData, ErrorRecord
from covreport.orchestrator import InitializationError, PipelineResult

runner = CliRunner()


def test_cli_help():
    res = runner.invoke(app, ["--help"])
    assert res.exit_code == 0
    assert "Staged coverage report runner" in res.stdout


def test_cli_version():
    res = runner.invoke(app, ["--version"])
    assert res.exit_code == 0
    assert "covreport version" in res.stdout


def test_run_help():
    res = runner.invoke(app, ["run", "--help"])
    assert res.exit_code == 0


def test_doctor_smoke():
    res = runner.invoke(app, ["doctor"])
    assert res.exit_code in [0, 2]
    assert "covreport doctor" in res.stdout


def test_run_ok():
    result = PipelineResult(status="OK", data=CollectedData())
    with patch("covreport.cli.run_pipeline", new_callable=AsyncMock, return_value=result):
        res = runner.invoke(app, ["run"])
    assert res.exit_code == 0
    assert "status: OK" in res.stdout


def test_run_initialization_failure_exits_1():
    err = InitializationError("Initialization failed: no token", errors=(ErrorRecord("initialize", "x"),))
    with patch("covreport.cli.run_pipeline", new_callable=AsyncMock, side_effect=err):
        res = runner.invoke(app, ["run"])
    assert res.exit_code == 1


def test_run_failure_exit_code_follows_host():
    async def fake_run_pipeline(*, env, host, run_id):
        host.set_failed("failed")
        return PipelineResult(
            status="FAIL", data=CollectedData(errors=(ErrorRecord("publishReport", "403"),))
        )

    with patch("covreport.cli.run_pipeline", side_effect=fake_run_pipeline):
        res = runner.invoke(app, ["run"])
    assert res.exit_code == 1
    assert "publishReport" in res.stdout


def test_status_reads_run_status(tmp_path):
    run_dir = tmp_path / "r1"
    run_dir.mkdir()
    (run_dir / "RUN_STATUS.json").write_text(json.dumps({"run_id": "r1", "status": "OK"}))
    res = runner.invoke(app, ["status", "--run", "r1", "--artifacts-dir", str(tmp_path)])
    assert res.exit_code == 0
    assert '"status": "OK"' in res.stdout


def test_status_missing(tmp_path):
    res = runner.invoke(app, ["status", "--run", "nope", "--artifacts-dir", str(tmp_path)])
    assert res.exit_code != 0


def test_run_malformed_event_reports_initialization_failure(tmp_path):
    event = tmp_path / "event.json"
    event.write_text("{not json")
    res = runner.invoke(
        app,
        ["run", "--working-directory", str(tmp_path)],
        env={"GITHUB_EVENT_PATH": str(event), "GITHUB_TOKEN": "t"},
    )
    assert res.exit_code == 1
    assert "Initialization failed" in res.stdout
    assert not isinstance(res.exception, ValueError)
