from __future__ import annotations

"""Report content.

CONTRACT
- Inputs: CollectedData (head/base coverage, errors), ActionOptions, GitHubContext
- Outputs (required):
  - SummaryReport(text, run_report)
- Invariants:
  - text starts with the hidden marker used to find the existing PR comment
  - Marker is keyed on working directory so several reports can coexist on one PR
- Failure:
  - Raises ValueError when there is no head coverage to report on
"""

from dataclasses import dataclass
from typing import Any

from .collector import CollectedData, DataCollector
from .config import ActionOptions
from .context import GitHubContext
from .messages import i18n


@dataclass(frozen=True)
class RunReport:
    success: bool
    title: str
    summary: str
    failures: int = 0


@dataclass(frozen=True)
class SummaryReport:
    text: str
    run_report: RunReport


def report_marker(options: ActionOptions) -> str:
    return f"<!-- covreport-marker:{options.working_directory.as_posix()} -->"


def _test_counts(report: dict[str, Any]) -> tuple[int, int, int]:
    total = int(report.get("numTotalTests") or 0)
    failed = int(report.get("numFailedTests") or 0)
    passed = int(report.get("numPassedTests") or 0)
    return total, failed, passed


def build_run_report(head: dict[str, Any], locale: str | None = None) -> RunReport:
    total, failed, passed = _test_counts(head)
    if total == 0:
        title = i18n("noTestResults", locale)
        return RunReport(success=bool(head.get("success", True)), title=title, summary="")
    if failed:
        title = i18n("testsFailed", locale, failed=failed, total=total)
    else:
        title = i18n("testsPassed", locale, passed=passed)
    success = bool(head.get("success", failed == 0)) and failed == 0
    return RunReport(success=success, title=title, summary=title, failures=failed)


def render(data: CollectedData, options: ActionOptions, context: GitHubContext) -> SummaryReport:
    head = data.head_coverage
    if head is None:
        raise ValueError("Head coverage is missing; cannot build a report")

    locale = options.locale
    run_report = build_run_report(head, locale)

    if options.custom_title:
        title = options.custom_title
    elif options.working_directory.as_posix() not in (".", ""):
        title = i18n("reportTitleFor", locale, directory=options.working_directory.as_posix())
    else:
        title = i18n("reportTitle", locale)

    status = "✅" if run_report.success else "❌"
    lines = [report_marker(options), f"## {title}", "", f"{status} {run_report.title}", ""]

    if data.base_coverage is not None:
        lines.append(i18n("baseCoverageAvailable", locale))
    else:
        lines.append(i18n("baseCoverageMissing", locale))

    if data.errors:
        lines += ["", f"### {i18n('stagesFailed', locale)}", ""]
        lines += [f"- `{e.stage}`: {e.describe()}" for e in data.errors]

    url = context.run_url()
    if url:
        lines += ["", i18n("runLink", locale, url=url)]

    return SummaryReport(text="\n".join(lines) + "\n", run_report=run_report)


def create_report(
    collector: DataCollector, options: ActionOptions, context: GitHubContext
) -> SummaryReport:
    return render(collector.get(), options, context)
