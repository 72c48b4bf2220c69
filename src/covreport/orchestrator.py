from __future__ import annotations

"""Coverage report pipeline.

CONTRACT
- Inputs: environment (Actions inputs + GITHUB_*), optional pre-built collector/context/host
- Outputs (required):
  - PipelineResult (status, collected data, stage outcomes, run_dir)
  - Artifacts in <artifacts_dir>/<run_id>/: RUN_STATUS.json, events.jsonl, REPORT.md, logs/
- Invariants:
  - Stages run strictly in order, one at a time, each through run_stage
  - Only `initialize` can abort the run (InitializationError); every later stage
    failure is recorded on the collector and the pipeline moves on
  - Base coverage inner errors go to a disposable collector and never fail the run
  - The host is told the run failed iff the main collector has errors at the end
- Failure:
  - Raises InitializationError when the run id, event context or options cannot be resolved
"""

import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from loguru import logger

from .annotations import (
    create_coverage_annotations,
    create_failed_tests_annotations,
    format_coverage_annotations,
    format_failed_tests_annotations,
)
from .artifacts.schemas import ErrorEntry, RunStatus, StageEntry
from .artifacts.store import ArtifactStore
from .collector import CollectedData, DataCollector, ErrorRecord
from .config import ActionOptions, get_options, should_run_test_script
from .context import GitHubContext
from .coverage import get_coverage
from .git import checkout, current_ref, switch_branch
from .github import GitHubClient
from .host import ActionsHost
from .messages import LOCALE_ENV, i18n
from .publish import generate_commit_report, generate_pr_report
from .report import SummaryReport, create_report
from .stages.runner import StageOutcome, run_stage
from .util.events import EventLog
from .util.ids import new_run_id, validate_run_id


class InitializationError(RuntimeError):
    def __init__(self, message: str, errors: tuple[ErrorRecord, ...] = ()):
        super().__init__(message)
        self.errors = errors


@dataclass(frozen=True)
class PipelineResult:
    status: str
    data: CollectedData
    stages: list[StageOutcome] = field(default_factory=list)
    run_dir: Path | None = None

    @property
    def ok(self) -> bool:
        return self.status == "OK"

    def outcome(self, name: str) -> StageOutcome | None:
        for o in self.stages:
            if o.name == name:
                return o
        return None


def _log_errors(collector: DataCollector, label: str) -> None:
    errors = collector.get().errors
    if errors:
        logger.warning(f"{len(errors)} error(s) after {label}: " + "; ".join(
            f"{e.stage}: {e.describe()}" for e in errors
        ))


def _write_artifacts(
    store: ArtifactStore,
    run_id: str,
    data: CollectedData,
    outcomes: list[StageOutcome],
    status: str,
    message: str,
) -> None:
    try:
        if data.report is not None:
            store.write_report(data.report.text)
        store.write_status(
            RunStatus(
                run_id=run_id,
                status=status,
                message=message,
                stages=[StageEntry(name=o.name, status=o.status.value) for o in outcomes],
                errors=[ErrorEntry.from_record(e) for e in data.errors],
                has_head_coverage=data.head_coverage is not None,
                has_base_coverage=data.base_coverage is not None,
            )
        )
    except OSError as exc:
        logger.warning(f"Could not write run artifacts to {store.run_dir}: {exc}")


async def run_pipeline(
    *,
    env: Mapping[str, str] | None = None,
    collector: DataCollector | None = None,
    context: GitHubContext | None = None,
    host: ActionsHost | None = None,
    run_id: str | None = None,
) -> PipelineResult:
    env = os.environ if env is None else env
    collector = collector if collector is not None else DataCollector()
    host = host if host is not None else ActionsHost.from_env(dict(env))
    workspace = Path(env.get("GITHUB_WORKSPACE") or ".")

    outcomes: list[StageOutcome] = []
    events: EventLog | None = None

    async def stage(name, body) -> StageOutcome:
        outcome = await run_stage(name, collector, body, events=events)
        outcomes.append(outcome)
        return outcome

    def initialize(skip) -> tuple[ActionOptions, GitHubContext, ArtifactStore, str]:
        rid = validate_run_id(run_id or new_run_id(dict(env)))
        ctx = context if context is not None else GitHubContext.from_env(env)
        opts = get_options(env)
        st = ArtifactStore.for_run(opts.artifacts_dir, rid)
        st.ensure()
        return opts, ctx, st, rid

    is_initialized, init_value = await stage("initialize", initialize)
    if not is_initialized or init_value is None:
        errors = collector.get().errors
        details = errors[-1].describe() if errors else "unknown error"
        raise InitializationError(
            i18n("initFailed", locale=env.get(LOCALE_ENV), details=details), errors=errors
        )

    options, context, store, run_id = init_value
    repo = options.working_directory
    events = EventLog(store.events_path, run_id=run_id)
    events.emit(stage="initialize", action="completed")

    # Head coverage

    async def head_coverage(skip):
        return await get_coverage(
            collector, options, options.coverage_file, logs_dir=store.log_dir("head")
        )

    is_head_coverage_generated, head = await stage("headCoverage", head_coverage)
    if head is not None:
        collector.add(head_coverage=head)

    # Base coverage (optional comparison)

    is_switched = True
    previous_ref: str | None = None
    switch_outcome: StageOutcome | None = None

    if not options.base_coverage_file and should_run_test_script(options.skip_step):
        logger.info("Switching to base branch")

        def switch_to_base(skip) -> str | None:
            base_branch = context.base_ref
            if not context.is_pull_request or not base_branch:
                skip("not running in a pull request with a base branch")
            ref = current_ref(repo)
            switch_branch(repo, base_branch)
            return ref

        switch_outcome = await stage("switchToBase", switch_to_base)
        is_switched, previous_ref = switch_outcome
    else:
        logger.info("Staying on branch")

    ignore_collector = DataCollector(name="base")

    async def base_coverage(skip):
        if not is_switched:
            skip("base branch is not checked out")
        return await get_coverage(
            ignore_collector, options, options.base_coverage_file, logs_dir=store.log_dir("base")
        )

    _, base = await stage("baseCoverage", base_coverage)
    if base is not None:
        collector.add(base_coverage=base)
    for record in ignore_collector.get().errors:
        logger.warning(f"base coverage ({record.stage}) ignored error: {record.describe()}")

    def switch_back(skip) -> None:
        if switch_outcome is None or not switch_outcome.completed or not previous_ref:
            skip()
        checkout(repo, previous_ref)

    await stage("switchBack", switch_back)
    _log_errors(collector, "base coverage")

    # Report

    def generate_report_content(skip) -> SummaryReport:
        return create_report(collector, options, context)

    is_report_content_generated, summary_report = await stage(
        "generateReportContent", generate_report_content
    )
    if summary_report is not None:
        collector.add(report=summary_report)
    _log_errors(collector, "report creation")

    client = GitHubClient(
        token=options.token, owner=context.owner, repo=context.repo, cwd=repo
    )

    def publish_report(skip) -> None:
        if not is_report_content_generated or "comment" not in options.output:
            skip()
        if context.is_pull_request:
            generate_pr_report(summary_report.text, options, context.pull_request or {}, client)
        else:
            generate_commit_report(summary_report.text, context.sha, client)

    await stage("publishReport", publish_report)

    def set_report_output(skip) -> None:
        if not is_report_content_generated or "report-markdown" not in options.output:
            skip()
        host.set_output("report", summary_report.text)

    await stage("setReportOutput", set_report_output)
    _log_errors(collector, "report publishing")

    # Annotations

    def failed_tests_annotations(skip) -> None:
        if not is_head_coverage_generated or options.annotations not in ("all", "failed-tests"):
            skip()
        annotations = create_failed_tests_annotations(head, root=workspace)
        if not annotations:
            skip("no failed tests")
        client.create_check_run(
            format_failed_tests_annotations(
                context.head_sha,
                summary_report.run_report if summary_report else None,
                annotations,
                locale=options.locale,
            )
        )

    await stage("failedTestsAnnotations", failed_tests_annotations)
    _log_errors(collector, "failed tests annotations")

    def coverage_annotations(skip) -> None:
        if not is_head_coverage_generated or options.annotations not in ("all", "coverage"):
            skip()
        annotations = create_coverage_annotations(head, root=workspace)
        if not annotations:
            skip("no uncovered statements")
        client.create_check_run(
            format_coverage_annotations(context.head_sha, annotations, locale=options.locale)
        )

    await stage("coverageAnnotations", coverage_annotations)

    # Final decision

    data = collector.get()
    if data.errors:
        _log_errors(collector, "coverage annotations")
        host.set_failed(i18n("failed", options.locale))
        status, message = "FAIL", f"{len(data.errors)} stage error(s)"
    else:
        status, message = "OK", "completed"

    _write_artifacts(store, run_id, data, outcomes, status, message)
    return PipelineResult(status=status, data=data, stages=outcomes, run_dir=store.run_dir)
