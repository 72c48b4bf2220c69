from pathlib import Path

import pytest

from covreport.collector import CollectedData, DataCollector, ErrorRecord
from covreport.config import ActionOptions
from covreport.context import GitHubContext
from covreport.report import build_run_report, create_report, render, report_marker

OPTS = ActionOptions(token="t")
CTX = GitHubContext(repository="octo/repo", run_id="5")


def test_run_report_counts():
    rr = build_run_report({"numTotalTests": 4, "numFailedTests": 1, "numPassedTests": 3, "success": False})
    assert not rr.success
    assert rr.failures == 1
    assert rr.title == "1 of 4 tests failed"

    rr = build_run_report({"numTotalTests": 2, "numFailedTests": 0, "numPassedTests": 2, "success": True})
    assert rr.success
    assert rr.title == "2 tests passed"


def test_run_report_without_tests():
    rr = build_run_report({})
    assert rr.success
    assert "No test results" in rr.title


def test_marker_depends_on_working_directory():
    assert report_marker(OPTS) != report_marker(ActionOptions(token="t", working_directory=Path("pkg/a")))


def test_render_without_head_raises():
    with pytest.raises(ValueError, match="Head coverage"):
        render(CollectedData(), OPTS, CTX)


def test_render_lists_failed_stages_and_run_link():
    data = CollectedData(
        head_coverage={"numTotalTests": 1, "numPassedTests": 1},
        errors=(ErrorRecord("baseCoverage", RuntimeError("no base")),),
    )
    text = render(data, OPTS, CTX).text
    assert text.startswith(report_marker(OPTS))
    assert "## Coverage report\n" in text
    assert "- `baseCoverage`: RuntimeError: no base" in text
    assert "Base coverage was not collected" in text
    assert "https://github.com/octo/repo/actions/runs/5" in text


def test_custom_title_and_directory_title():
    data = CollectedData(head_coverage={})
    assert "## Mine" in render(data, ActionOptions(token="t", custom_title="Mine"), CTX).text
    text = render(data, ActionOptions(token="t", working_directory=Path("web")), CTX).text
    assert "## Coverage report for `web`" in text


def test_create_report_reads_collector():
    c = DataCollector()
    c.add(head_coverage={"numTotalTests": 1, "numPassedTests": 1}, base_coverage={})
    summary = create_report(c, OPTS, CTX)
    assert summary.run_report.success
    assert "Base coverage collected" in summary.text
