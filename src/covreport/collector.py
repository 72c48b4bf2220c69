from __future__ import annotations

"""Run-scoped result accumulator.

CONTRACT
- Inputs: Partial results (head_coverage, base_coverage, report), error records, info lines
- Outputs:
  - CollectedData snapshot via get()
- Invariants:
  - errors are append-only; nothing removes or rewrites a recorded error
  - Result fields are last-write-wins per field
  - `errors` / `messages` can never be written through add()
- Failure:
  - add() raises ValueError on unknown or reserved field names
  - add_error() and info() never raise
"""

from collections.abc import Mapping
from dataclasses import dataclass, field, fields, replace
from typing import TYPE_CHECKING, Any

from loguru import logger

if TYPE_CHECKING:
    from .report import SummaryReport

JsonReport = dict[str, Any]

_RESERVED = frozenset({"errors", "messages"})


@dataclass(frozen=True)
class ErrorRecord:
    stage: str
    cause: BaseException | str

    def describe(self) -> str:
        if isinstance(self.cause, BaseException):
            text = str(self.cause) or type(self.cause).__name__
            return f"{type(self.cause).__name__}: {text}"
        return str(self.cause)


@dataclass(frozen=True)
class CollectedData:
    head_coverage: JsonReport | None = None
    base_coverage: JsonReport | None = None
    report: SummaryReport | None = None
    errors: tuple[ErrorRecord, ...] = ()
    messages: tuple[str, ...] = ()


RESULT_FIELDS = frozenset(f.name for f in fields(CollectedData)) - _RESERVED


@dataclass
class DataCollector:
    """Mutable aggregate threaded through the pipeline.

    One instance is owned by the run. A second, disposable instance may be
    created for a stage whose errors must not affect the run outcome.
    """

    name: str = "main"
    _state: CollectedData = field(default_factory=CollectedData, repr=False)
    _errors: list[ErrorRecord] = field(default_factory=list, repr=False)
    _messages: list[str] = field(default_factory=list, repr=False)

    def add(self, partial: Mapping[str, Any] | None = None, **fields_: Any) -> None:
        updates = dict(partial or {})
        updates.update(fields_)
        bad = set(updates) - RESULT_FIELDS
        if bad:
            raise ValueError(f"Unknown or reserved result field(s): {', '.join(sorted(bad))}")
        self._state = replace(self._state, **updates)
        logger.debug(f"[{self.name}] merged fields: {', '.join(sorted(updates)) or '-'}")

    def add_error(self, stage: str, cause: BaseException | str) -> ErrorRecord:
        record = ErrorRecord(stage=stage, cause=cause)
        self._errors.append(record)
        return record

    def info(self, message: str) -> None:
        self._messages.append(message)

    def get(self) -> CollectedData:
        return replace(self._state, errors=tuple(self._errors), messages=tuple(self._messages))

    @property
    def has_errors(self) -> bool:
        return bool(self._errors)
