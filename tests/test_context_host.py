import io
import json

import pytest

from covreport.context import GitHubContext
from covreport.host import ActionsHost, escape_workflow_command


def test_context_from_pull_request_event(tmp_path):
    event = tmp_path / "event.json"
    event.write_text(
        json.dumps({"pull_request": {"number": 3, "base": {"ref": "main"}, "head": {"ref": "f", "sha": "h1"}}})
    )
    ctx = GitHubContext.from_env(
        {
            "GITHUB_EVENT_NAME": "pull_request",
            "GITHUB_EVENT_PATH": str(event),
            "GITHUB_REPOSITORY": "octo/repo",
            "GITHUB_SHA": "m1",
            "GITHUB_RUN_ID": "99",
        }
    )
    assert ctx.is_pull_request
    assert ctx.base_ref == "main"
    assert ctx.head_sha == "h1"
    assert (ctx.owner, ctx.repo) == ("octo", "repo")
    assert ctx.run_url() == "https://github.com/octo/repo/actions/runs/99"


def test_context_outside_actions():
    ctx = GitHubContext.from_env({})
    assert not ctx.is_pull_request
    assert ctx.base_ref is None
    assert ctx.head_sha == ""
    assert ctx.run_url() is None


def test_context_invalid_payload(tmp_path):
    event = tmp_path / "event.json"
    event.write_text("{not json")
    with pytest.raises(ValueError, match="Invalid event payload"):
        GitHubContext.from_env({"GITHUB_EVENT_PATH": str(event)})


def test_escape_workflow_command():
    assert escape_workflow_command("50%\nnext\r") == "50%25%0Anext%0D"


def test_set_failed_writes_error_command():
    stream = io.StringIO()
    host = ActionsHost(stream=stream)
    assert not host.failed
    host.set_failed("it broke\ntwice")
    assert host.exit_code == 1
    assert stream.getvalue() == "::error::it broke%0Atwice\n"


def test_set_output_multiline(tmp_path):
    out = tmp_path / "out"
    host = ActionsHost(output_path=out, stream=io.StringIO())
    host.set_output("report", "line1\nline2")
    lines = out.read_text().splitlines()
    assert lines[0].startswith("report<<ghadelimiter_")
    assert lines[1:3] == ["line1", "line2"]
    assert lines[3] == lines[0].split("<<", 1)[1]


def test_set_output_without_file_is_noop():
    host = ActionsHost(output_path=None, stream=io.StringIO())
    host.set_output("report", "x")
    assert host.exit_code == 0
