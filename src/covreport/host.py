from __future__ import annotations

"""Host (GitHub Actions runner) signalling.

CONTRACT
- Inputs: failure messages, step outputs, warnings
- Outputs:
  - `::error::` / `::warning::` workflow commands on stderr
  - step outputs appended to $GITHUB_OUTPUT
  - exit_code (0 until set_failed is called, then 1)
- Invariants:
  - Workflow command payloads escape %, CR and LF
  - Multiline outputs use the `name<<DELIM` form
- Failure:
  - Raises OSError if $GITHUB_OUTPUT is set but not writable
"""

import os
import sys
import uuid
from dataclasses import dataclass, field
from pathlib import Path
from typing import TextIO

from loguru import logger


def escape_workflow_command(value: str) -> str:
    # https://docs.github.com/actions/using-workflows/workflow-commands-for-github-actions
    if value is None:
        return ""
    return str(value).replace("%", "%25").replace("\r", "%0D").replace("\n", "%0A")


@dataclass
class ActionsHost:
    output_path: Path | None = None
    stream: TextIO = field(default_factory=lambda: sys.stderr)
    exit_code: int = 0
    failure_message: str | None = None

    @classmethod
    def from_env(cls, env: dict[str, str] | None = None) -> ActionsHost:
        env = dict(os.environ) if env is None else env
        out = env.get("GITHUB_OUTPUT")
        return cls(output_path=Path(out) if out else None)

    def _command(self, level: str, message: str, title: str | None = None) -> None:
        props = f" title={escape_workflow_command(title)}" if title else ""
        self.stream.write(f"::{level}{props}::{escape_workflow_command(message)}\n")
        self.stream.flush()

    def set_failed(self, message: str) -> None:
        self.exit_code = 1
        self.failure_message = message
        self._command("error", message)

    def warning(self, message: str, title: str | None = None) -> None:
        self._command("warning", message, title=title)

    def set_output(self, name: str, value: str) -> None:
        if self.output_path is None:
            logger.info(f"GITHUB_OUTPUT not set; output {name} ({len(value)} chars) not exported")
            return
        delimiter = f"ghadelimiter_{uuid.uuid4()}"
        with self.output_path.open("a", encoding="utf-8") as f:
            f.write(f"{name}<<{delimiter}\n{value}\n{delimiter}\n")

    @property
    def failed(self) -> bool:
        return self.exit_code != 0
