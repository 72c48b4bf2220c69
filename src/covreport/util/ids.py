from __future__ import annotations

"""Run ID generation and validation.

CONTRACT
- Inputs: Run IDs
- Outputs (required):
  - new_run_id() returns a time-sortable string
  - validate_run_id() returns the validated ID or raises
- Invariants:
  - Run IDs match `[A-Za-z0-9][A-Za-z0-9_.-]{0,63}`
- Failure:
  - Raises ValueError on invalid IDs
"""

import datetime
import os
import random
import re
import string

_RUN_ID_RE = re.compile(r"^[A-Za-z0-9][A-Za-z0-9_.-]{0,63}$")


def new_run_id(env: dict[str, str] | None = None) -> str:
    env = os.environ if env is None else env
    # Inside Actions, reuse the workflow run id so artifacts line up with the run page.
    gh_run = env.get("GITHUB_RUN_ID")
    attempt = env.get("GITHUB_RUN_ATTEMPT", "1")
    if gh_run and _RUN_ID_RE.fullmatch(f"gh_{gh_run}_{attempt}"):
        return f"gh_{gh_run}_{attempt}"
    # YYYYMMDD_HHMMSS_<rand4>
    ts = datetime.datetime.now(datetime.timezone.utc).strftime("%Y%m%d_%H%M%S")
    suffix = "".join(random.choice(string.ascii_lowercase + string.digits) for _ in range(4))
    return f"{ts}_{suffix}"


def validate_run_id(run_id: str) -> str:
    if not _RUN_ID_RE.fullmatch(run_id):
        raise ValueError(
            "Invalid run id. Use 1-64 chars: letters/digits, plus '._-'. Must start with a letter "
            "or digit."
        )
    return run_id
