from __future__ import annotations

"""Subprocess execution for collaborators (git, gh, test scripts).

CONTRACT
- Inputs: Command (str for shell, list[str] for exec), cwd, optional log paths, timeout
- Outputs (required):
  - CmdResult(returncode, stdout_path, stderr_path, elapsed_s, byte counts)
- Invariants:
  - stdout/stderr always land in files (temp files when no path is given)
  - Timeout maps to returncode 124 with a note appended to stderr
- Failure:
  - Never raises for non-zero exit; callers inspect returncode and raise their own errors
"""

import os
import subprocess
import tempfile
import time
from dataclasses import dataclass
from pathlib import Path

TIMEOUT_EXIT_CODE = 124


def which(cmd: str) -> str | None:
    for p in os.environ.get("PATH", "").split(os.pathsep):
        candidate = Path(p) / cmd
        if candidate.exists() and os.access(candidate, os.X_OK):
            return str(candidate)
    return None


@dataclass(frozen=True)
class CmdResult:
    cmd: str
    returncode: int
    stdout_path: Path
    stderr_path: Path
    elapsed_s: float
    stdout_bytes: int
    stderr_bytes: int

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    def stdout_text(self) -> str:
        if not self.stdout_path.exists():
            return ""
        return self.stdout_path.read_text(encoding="utf-8", errors="replace")

    def stderr_text(self) -> str:
        if not self.stderr_path.exists():
            return ""
        return self.stderr_path.read_text(encoding="utf-8", errors="replace")


def _temp_log(prefix: str) -> Path:
    tf = tempfile.NamedTemporaryFile(delete=False, prefix=prefix)
    tf.close()
    return Path(tf.name)


def run_cmd(
    cmd: str | list[str],
    cwd: Path,
    stdout_path: Path | None = None,
    stderr_path: Path | None = None,
    env: dict[str, str] | None = None,
    timeout_s: float | None = None,
    stdin_text: str | None = None,
) -> CmdResult:
    """Run a command and store stdout/stderr to files.

    A str command runs with shell=True, a list with shell=False. ``stdin_text``
    is fed to the process when given (used for `gh api --input -`).
    """
    if stdout_path is None:
        stdout_path = _temp_log("covreport_stdout_")
    if stderr_path is None:
        stderr_path = _temp_log("covreport_stderr_")

    stdout_path.parent.mkdir(parents=True, exist_ok=True)
    stderr_path.parent.mkdir(parents=True, exist_ok=True)

    use_shell = isinstance(cmd, str)

    start_t = time.time()
    with (
        stdout_path.open("w", encoding="utf-8") as out_f,
        stderr_path.open("w", encoding="utf-8") as err_f,
    ):
        try:
            p = subprocess.run(
                cmd,
                cwd=str(cwd),
                shell=use_shell,
                env=(os.environ | env) if env else None,
                input=stdin_text,
                stdout=out_f,
                stderr=err_f,
                timeout=timeout_s,
                text=True,
            )
            rc = p.returncode
        except subprocess.TimeoutExpired:
            rc = TIMEOUT_EXIT_CODE
            err_f.write("\nTimeout expired.\n")
        except OSError as e:
            rc = 127
            err_f.write(f"\nException: {e}\n")

    elapsed = time.time() - start_t

    return CmdResult(
        cmd=cmd if isinstance(cmd, str) else " ".join(cmd),
        returncode=rc,
        stdout_path=stdout_path,
        stderr_path=stderr_path,
        elapsed_s=elapsed,
        stdout_bytes=stdout_path.stat().st_size if stdout_path.exists() else 0,
        stderr_bytes=stderr_path.stat().st_size if stderr_path.exists() else 0,
    )
