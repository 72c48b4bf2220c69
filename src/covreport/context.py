from __future__ import annotations

"""GitHub Actions run context.

CONTRACT
- Inputs: GITHUB_* environment variables and the event payload at GITHUB_EVENT_PATH
- Outputs:
  - GitHubContext (event name, payload, owner/repo, sha, run link)
- Invariants:
  - Missing variables degrade to empty values; nothing here raises for a local run
- Failure:
  - Raises ValueError only when GITHUB_EVENT_PATH points at invalid JSON
"""

import json
import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any


@dataclass(frozen=True)
class GitHubContext:
    event_name: str = ""
    payload: dict[str, Any] = field(default_factory=dict)
    repository: str = ""
    sha: str = ""
    server_url: str = "https://github.com"
    run_id: str | None = None

    @classmethod
    def from_env(cls, env: Mapping[str, str] | None = None) -> GitHubContext:
        env = os.environ if env is None else env
        payload: dict[str, Any] = {}
        event_path = env.get("GITHUB_EVENT_PATH")
        if event_path and Path(event_path).exists():
            try:
                payload = json.loads(Path(event_path).read_text(encoding="utf-8")) or {}
            except json.JSONDecodeError as e:
                raise ValueError(f"Invalid event payload at {event_path}: {e}") from e
        return cls(
            event_name=env.get("GITHUB_EVENT_NAME", ""),
            payload=payload,
            repository=env.get("GITHUB_REPOSITORY", ""),
            sha=env.get("GITHUB_SHA", ""),
            server_url=env.get("GITHUB_SERVER_URL", "https://github.com"),
            run_id=env.get("GITHUB_RUN_ID"),
        )

    @property
    def is_pull_request(self) -> bool:
        return self.event_name == "pull_request"

    @property
    def pull_request(self) -> dict[str, Any] | None:
        pr = self.payload.get("pull_request")
        return pr if isinstance(pr, dict) else None

    @property
    def base_ref(self) -> str | None:
        pr = self.pull_request or {}
        return (pr.get("base") or {}).get("ref") or None

    @property
    def head_ref(self) -> str | None:
        pr = self.pull_request or {}
        return (pr.get("head") or {}).get("ref") or None

    @property
    def head_sha(self) -> str:
        pr = self.pull_request or {}
        return (pr.get("head") or {}).get("sha") or self.sha

    @property
    def owner(self) -> str:
        return self.repository.split("/", 1)[0] if "/" in self.repository else ""

    @property
    def repo(self) -> str:
        return self.repository.split("/", 1)[1] if "/" in self.repository else ""

    def run_url(self) -> str | None:
        if not (self.repository and self.run_id):
            return None
        return f"{self.server_url}/{self.repository}/actions/runs/{self.run_id}"
