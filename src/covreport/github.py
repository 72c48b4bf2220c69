from __future__ import annotations

"""GitHub REST access through the `gh` CLI.

CONTRACT
- Inputs: token, repo owner/name, JSON payloads
- Outputs:
  - Parsed JSON responses (dict or list)
- Invariants:
  - Token is passed as GH_TOKEN in the subprocess env only
  - Payloads go through stdin (`--input -`), never through argv
- Failure:
  - Raises GitHubApiError on non-zero `gh` exit or non-JSON output
"""

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from loguru import logger

from .util.shell import run_cmd, which


class GitHubApiError(RuntimeError):
    pass


@dataclass
class GitHubClient:
    token: str
    owner: str
    repo: str
    gh_cmd: str = "gh"
    cwd: Path = Path(".")

    def request(self, method: str, endpoint: str, payload: dict[str, Any] | None = None) -> Any:
        if which(self.gh_cmd) is None:
            raise GitHubApiError(f"{self.gh_cmd} CLI not found in PATH")
        cmd = [self.gh_cmd, "api", "-X", method, endpoint, "-H", "Accept: application/vnd.github+json"]
        if payload is not None:
            cmd += ["--input", "-"]
        res = run_cmd(
            cmd,
            cwd=self.cwd,
            env={"GH_TOKEN": self.token},
            timeout_s=60,
            stdin_text=json.dumps(payload) if payload is not None else None,
        )
        if not res.ok:
            raise GitHubApiError(
                f"gh api {method} {endpoint} failed (rc={res.returncode}): {res.stderr_text().strip()}"
            )
        out = res.stdout_text().strip()
        logger.debug(f"gh api {method} {endpoint}: {len(out)} bytes")
        if not out:
            return None
        try:
            return json.loads(out)
        except json.JSONDecodeError as e:
            raise GitHubApiError(f"gh api {method} {endpoint} returned non-JSON output") from e

    def _repo_path(self) -> str:
        return f"repos/{self.owner}/{self.repo}"

    def list_issue_comments(self, number: int) -> list[dict[str, Any]]:
        data = self.request("GET", f"{self._repo_path()}/issues/{number}/comments?per_page=100")
        return data if isinstance(data, list) else []

    def create_issue_comment(self, number: int, body: str) -> dict[str, Any]:
        return self.request("POST", f"{self._repo_path()}/issues/{number}/comments", {"body": body})

    def update_issue_comment(self, comment_id: int, body: str) -> dict[str, Any]:
        return self.request(
            "PATCH", f"{self._repo_path()}/issues/comments/{comment_id}", {"body": body}
        )

    def create_commit_comment(self, sha: str, body: str) -> dict[str, Any]:
        return self.request("POST", f"{self._repo_path()}/commits/{sha}/comments", {"body": body})

    def create_check_run(self, payload: dict[str, Any]) -> dict[str, Any]:
        return self.request("POST", f"{self._repo_path()}/check-runs", payload)
