from __future__ import annotations

"""Check-run annotations for failed tests and uncovered statements.

CONTRACT
- Inputs: head JSON report (testResults / coverageMap), repo root for relative paths
- Outputs:
  - list[Annotation]; check-run payload dicts for the GitHub API
- Invariants:
  - Paths are repo-relative POSIX paths when they live under the root
  - A payload carries at most MAX_ANNOTATIONS annotations
- Failure:
  - Malformed entries are skipped; nothing here raises on partial reports
"""

import re
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any

from .messages import i18n
from .report import RunReport

MAX_ANNOTATIONS = 50

_ANSI_RE = re.compile(r"\x1b\[[0-9;]*m")


@dataclass(frozen=True)
class Annotation:
    path: str
    start_line: int
    end_line: int
    annotation_level: str
    title: str
    message: str

    def to_payload(self) -> dict[str, Any]:
        return asdict(self)


def _relative(path: str, root: Path | None) -> str:
    p = Path(path)
    if root is not None and p.is_absolute():
        try:
            return p.relative_to(root.resolve()).as_posix()
        except ValueError:
            pass
    return p.as_posix()


def create_failed_tests_annotations(
    head: dict[str, Any], root: Path | None = None
) -> list[Annotation]:
    out: list[Annotation] = []
    for suite in head.get("testResults") or []:
        file_path = _relative(str(suite.get("name") or ""), root)
        for assertion in suite.get("assertionResults") or []:
            if assertion.get("status") != "failed":
                continue
            line = int((assertion.get("location") or {}).get("line") or 1)
            message = "\n".join(assertion.get("failureMessages") or []) or "Test failed"
            out.append(
                Annotation(
                    path=file_path,
                    start_line=line,
                    end_line=line,
                    annotation_level="failure",
                    title=str(assertion.get("fullName") or assertion.get("title") or "test"),
                    message=_ANSI_RE.sub("", message),
                )
            )
    return out


def create_coverage_annotations(
    head: dict[str, Any], root: Path | None = None
) -> list[Annotation]:
    out: list[Annotation] = []
    for file_name, file_cov in (head.get("coverageMap") or {}).items():
        if not isinstance(file_cov, dict):
            continue
        # Newer jest wraps the istanbul object in {"data": ...}
        file_cov = file_cov.get("data", file_cov)
        statements = file_cov.get("statementMap") or {}
        hits = file_cov.get("s") or {}
        path = _relative(str(file_cov.get("path") or file_name), root)
        for key, count in hits.items():
            if count:
                continue
            loc = statements.get(key) or {}
            start = int((loc.get("start") or {}).get("line") or 1)
            end = int((loc.get("end") or {}).get("line") or start)
            out.append(
                Annotation(
                    path=path,
                    start_line=start,
                    end_line=end,
                    annotation_level="warning",
                    title="Statement is not covered",
                    message="Warning! Not covered statement",
                )
            )
    return out


def _check_run(
    head_sha: str,
    title: str,
    summary: str,
    conclusion: str,
    annotations: list[Annotation],
    locale: str | None,
) -> dict[str, Any]:
    return {
        "name": i18n("checkRunName", locale),
        "head_sha": head_sha,
        "status": "completed",
        "conclusion": conclusion,
        "output": {
            "title": title,
            "summary": summary,
            "annotations": [a.to_payload() for a in annotations[:MAX_ANNOTATIONS]],
        },
    }


def format_failed_tests_annotations(
    head_sha: str,
    run_report: RunReport | None,
    annotations: list[Annotation],
    locale: str | None = None,
) -> dict[str, Any]:
    title = i18n("failedTestsTitle", locale, count=len(annotations))
    summary = run_report.summary if run_report else title
    return _check_run(head_sha, title, summary, "failure", annotations, locale)


def format_coverage_annotations(
    head_sha: str, annotations: list[Annotation], locale: str | None = None
) -> dict[str, Any]:
    title = i18n("coverageTitle", locale, count=len(annotations))
    return _check_run(head_sha, title, title, "neutral", annotations, locale)
