from __future__ import annotations

"""Artifact schemas.

CONTRACT
- Inputs: Pydantic models
- Outputs:
  - Validated JSON-serializable objects (RUN_STATUS.json)
- Invariants:
  - All schemas have schema_version int field
  - Error causes are stored as text; the exception objects stay in memory
- Failure:
  - Raises ValidationError on schema mismatch
"""

from typing import Any, Literal

from pydantic import BaseModel, Field

from ..collector import ErrorRecord


class ErrorEntry(BaseModel):
    stage: str
    cause: str

    @classmethod
    def from_record(cls, record: ErrorRecord) -> ErrorEntry:
        return cls(stage=record.stage, cause=record.describe())


class StageEntry(BaseModel):
    name: str
    status: Literal["completed", "skipped", "failed"]


class RunStatus(BaseModel):
    schema_version: int = 1
    run_id: str
    status: Literal["RUNNING", "OK", "FAIL", "ABORTED"]
    message: str = ""
    stages: list[StageEntry] = Field(default_factory=list)
    errors: list[ErrorEntry] = Field(default_factory=list)
    has_head_coverage: bool = False
    has_base_coverage: bool = False


def validate_run_status(data: dict[str, Any]) -> tuple[bool, RunStatus | None, str]:
    """Validate RUN_STATUS.json against schema."""
    try:
        status = RunStatus(**data)
        return True, status, ""
    except Exception as e:
        return False, None, str(e)
