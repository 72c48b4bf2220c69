from __future__ import annotations

"""Environment health checks.

CONTRACT
- Inputs: Working directory, environment
- Outputs (required):
  - DoctorReport (ok=bool, items=[(name, status, details)])
- Invariants:
  - Checks: git repo, git binary, gh cli, token, config file, coverage file
  - Does not modify system state (read-only checks)
- Failure:
  - Returns DoctorReport with ok=False if critical checks fail (git binary, git repo)
"""

import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from .config import CONFIG_FILE_NAME, load_config_file
from .git import is_git_repo
from .util.shell import run_cmd, which


@dataclass(frozen=True)
class DoctorItem:
    name: str
    status: str
    details: str


@dataclass(frozen=True)
class DoctorReport:
    ok: bool
    items: list[DoctorItem]


def doctor_report(repo: Path, env: Mapping[str, str] | None = None) -> DoctorReport:
    env = os.environ if env is None else env
    items: list[DoctorItem] = []
    ok = True

    # 1. Critical: git
    git_bin = which("git")
    if git_bin:
        items.append(DoctorItem("git binary", "OK", git_bin))
    else:
        ok = False
        items.append(DoctorItem("git binary", "FAIL", "git not found in PATH"))

    if is_git_repo(repo):
        items.append(DoctorItem("git repo", "OK", str(repo)))
    else:
        ok = False
        items.append(DoctorItem("git repo", "FAIL", "Not a git repo (required for base branch switching)."))

    # 2. Publishing
    gh_bin = which("gh")
    if gh_bin:
        res = run_cmd([gh_bin, "--version"], cwd=repo, timeout_s=5)
        first = res.stdout_text().splitlines()[0] if res.ok and res.stdout_text() else gh_bin
        items.append(DoctorItem("gh cli", "OK", first))
    else:
        items.append(DoctorItem("gh cli", "WARN", "gh not found; report publishing and annotations will fail"))

    if env.get("INPUT_GITHUB-TOKEN") or env.get("INPUT_GITHUB_TOKEN") or env.get("GITHUB_TOKEN"):
        items.append(DoctorItem("token", "OK", "github token present"))
    else:
        items.append(DoctorItem("token", "WARN", "No github-token input or GITHUB_TOKEN; initialize will fail"))

    # 3. Config
    config_path = repo / CONFIG_FILE_NAME
    if config_path.exists():
        try:
            data = load_config_file(config_path)
            items.append(DoctorItem("config file", "OK", f"{len(data)} keys"))
        except Exception as e:
            items.append(DoctorItem("config file", "WARN", str(e)))
    else:
        items.append(DoctorItem("config file", "OK", f"no {CONFIG_FILE_NAME} (defaults + inputs)"))

    coverage_file = env.get("INPUT_COVERAGE-FILE") or env.get("INPUT_COVERAGE_FILE")
    if coverage_file:
        if (repo / coverage_file).exists():
            items.append(DoctorItem("coverage file", "OK", coverage_file))
        else:
            items.append(DoctorItem("coverage file", "WARN", f"{coverage_file} does not exist yet"))

    return DoctorReport(ok=ok, items=items)
