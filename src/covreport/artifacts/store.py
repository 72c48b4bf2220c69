from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from .schemas import RunStatus

REPORT_NAME = "REPORT.md"
STATUS_NAME = "RUN_STATUS.json"
EVENTS_NAME = "events.jsonl"


@dataclass(frozen=True)
class ArtifactStore:
    """Files of one covreport run.

    CONTRACT
    - Inputs: Run directory (<artifacts_dir>/<run_id>)
    - Outputs:
      - RUN_STATUS.json, REPORT.md, events.jsonl, logs/<label>/ command logs
    - Invariants:
      - Every access stays inside run_dir
      - Writers create parent directories
    - Failure:
      - Raises ValueError on a path outside run_dir, OSError on I/O
    """
    run_dir: Path

    @classmethod
    def for_run(cls, artifacts_dir: Path, run_id: str) -> ArtifactStore:
        return cls(artifacts_dir / run_id)

    def ensure(self) -> None:
        (self.run_dir / "logs").mkdir(parents=True, exist_ok=True)

    def path(self, *parts: str) -> Path:
        p = self.run_dir.joinpath(*parts)
        try:
            p.resolve(strict=False).relative_to(self.run_dir.resolve(strict=False))
        except ValueError as exc:
            raise ValueError(f"Refusing to access path outside run_dir: {p}") from exc
        return p

    def log_dir(self, label: str) -> Path:
        """Directory for the stdout/stderr files of one coverage collection (head, base)."""
        return self.path("logs", label)

    @property
    def events_path(self) -> Path:
        return self.path(EVENTS_NAME)

    def _write(self, rel: str, text: str) -> Path:
        p = self.path(rel)
        p.parent.mkdir(parents=True, exist_ok=True)
        p.write_text(text, encoding="utf-8")
        return p

    def write_json(self, rel: str, data: Any) -> Path:
        return self._write(rel, json.dumps(data, indent=2, ensure_ascii=False) + "\n")

    def read_json(self, rel: str) -> Any:
        return json.loads(self.path(rel).read_text(encoding="utf-8"))

    def write_report(self, text: str) -> Path:
        return self._write(REPORT_NAME, text)

    def write_status(self, status: RunStatus) -> Path:
        return self.write_json(STATUS_NAME, status.model_dump())

    def read_status(self) -> RunStatus:
        return RunStatus(**self.read_json(STATUS_NAME))
