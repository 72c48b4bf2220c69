from __future__ import annotations

"""Coverage collection.

CONTRACT
- Inputs: DataCollector (main or disposable), ActionOptions, optional pre-built coverage file
- Outputs (required):
  - The JSON report (test results + coverageMap) as an opaque dict
- Invariants:
  - Inner steps (install, runTest, loadCoverage) run as stages on the collector passed in,
    so a disposable collector keeps their errors away from the run outcome
  - A non-zero test exit is not an error while the report file is produced
- Failure:
  - Raises RuntimeError when no report could be loaded
"""

import json
from pathlib import Path

from loguru import logger

from .collector import DataCollector, JsonReport
from .config import ActionOptions, should_install_deps, should_run_test_script
from .stages.runner import run_stage
from .util.shell import run_cmd

REPORT_FILE_NAME = "report.json"

INSTALL_COMMANDS = {
    "npm": "npm install",
    "yarn": "yarn install",
    "pnpm": "pnpm install",
    "bun": "bun install",
}


def build_test_command(options: ActionOptions, output_file: str = REPORT_FILE_NAME) -> str:
    return (
        f"{options.test_script} --ci --json --coverage --testLocationInResults "
        f"--outputFile={output_file}"
    )


def load_report(path: Path) -> JsonReport:
    data = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(data, dict):
        raise ValueError(f"Coverage report {path} is not a JSON object")
    return data


async def get_coverage(
    collector: DataCollector,
    options: ActionOptions,
    coverage_file: str | None = None,
    logs_dir: Path | None = None,
) -> JsonReport:
    cwd = options.working_directory

    def _log(name: str) -> Path | None:
        return logs_dir / name if logs_dir else None

    def install(skip) -> None:
        if coverage_file or not should_install_deps(options.skip_step):
            skip()
        res = run_cmd(
            INSTALL_COMMANDS[options.package_manager],
            cwd=cwd,
            stdout_path=_log("install.stdout.log"),
            stderr_path=_log("install.stderr.log"),
            timeout_s=1800,
        )
        if not res.ok:
            raise RuntimeError(f"Dependency install failed (rc={res.returncode})")

    await run_stage("install", collector, install)

    def run_test(skip) -> int:
        if coverage_file or not should_run_test_script(options.skip_step):
            skip()
        res = run_cmd(
            build_test_command(options),
            cwd=cwd,
            stdout_path=_log("test.stdout.log"),
            stderr_path=_log("test.stderr.log"),
            timeout_s=3600,
        )
        if not res.ok:
            collector.info(f"Test script exited with {res.returncode}")
        return res.returncode

    await run_stage("runTest", collector, run_test)

    def load_coverage(skip) -> JsonReport:
        path = cwd / (coverage_file or REPORT_FILE_NAME)
        if not path.exists():
            raise FileNotFoundError(f"Coverage report not found: {path}")
        return load_report(path)

    loaded, report = await run_stage("loadCoverage", collector, load_coverage)
    if not loaded or report is None:
        raise RuntimeError("Coverage report is unavailable")

    logger.debug(f"Loaded coverage report with {len(report.get('coverageMap') or {})} files")
    return report
