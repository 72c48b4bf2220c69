from __future__ import annotations

"""Stage runner.

CONTRACT
- Inputs: Stage name, DataCollector, body(skip) returning a value or an awaitable
- Outputs (required):
  - StageOutcome, unpackable as (completed, value)
- Invariants:
  - Normal return -> COMPLETED with the value, no error recorded
  - skip() -> SKIPPED, rest of the body does not run, no error recorded
  - Exception -> FAILED, exactly one ErrorRecord(name, exc) on the collector
  - StageSkipped is never recorded as a failure
  - Exceptions never escape run_stage (other BaseException such as cancellation does)
- Failure:
  - None propagated; failures become data on the collector
"""

import inspect
from collections.abc import Awaitable, Callable, Iterator
from dataclasses import dataclass
from enum import Enum
from typing import Any, Generic, NoReturn, TypeVar

from loguru import logger

from ..collector import DataCollector
from ..util.events import EventLog

T = TypeVar("T")

SkipFn = Callable[..., NoReturn]
StageBody = Callable[[SkipFn], "T | Awaitable[T]"]


class StageSkipped(BaseException):
    """Raised by skip(); caught only by run_stage.

    Not an Exception, so `except Exception` inside a stage body cannot turn a
    skip into a normal return.
    """

    def __init__(self, stage: str, reason: str | None = None):
        super().__init__(reason or f"stage {stage} skipped")
        self.stage = stage
        self.reason = reason


class StageStatus(str, Enum):
    COMPLETED = "completed"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass(frozen=True)
class StageOutcome(Generic[T]):
    name: str
    status: StageStatus
    value: T | None = None
    error: BaseException | None = None

    @property
    def completed(self) -> bool:
        return self.status is StageStatus.COMPLETED

    @property
    def skipped(self) -> bool:
        return self.status is StageStatus.SKIPPED

    @property
    def failed(self) -> bool:
        return self.status is StageStatus.FAILED

    def __iter__(self) -> Iterator[Any]:
        # `completed, value = await run_stage(...)`
        yield self.completed
        yield self.value


def _make_skip(name: str) -> SkipFn:
    def skip(reason: str | None = None) -> NoReturn:
        raise StageSkipped(name, reason)

    return skip


def _emit(events: EventLog | None, **event: Any) -> None:
    if events is None:
        return
    try:
        events.emit(**event)
    except OSError as exc:
        logger.warning(f"could not write stage event: {exc}")


async def run_stage(
    name: str,
    collector: DataCollector,
    body: StageBody,
    *,
    events: EventLog | None = None,
) -> StageOutcome:
    """Run one stage body with the uniform completed/skipped/failed contract."""
    logger.info(f"stage {name}: start")
    try:
        result = body(_make_skip(name))
        if inspect.isawaitable(result):
            result = await result
    except StageSkipped as sk:
        logger.info(f"stage {name}: skipped" + (f" ({sk.reason})" if sk.reason else ""))
        _emit(events, stage=name, action="skipped", reason=sk.reason)
        return StageOutcome(name=name, status=StageStatus.SKIPPED)
    except Exception as exc:
        collector.add_error(name, exc)
        logger.opt(exception=exc).warning(f"stage {name}: failed: {exc}")
        _emit(events, stage=name, action="failed", error=f"{type(exc).__name__}: {exc}")
        return StageOutcome(name=name, status=StageStatus.FAILED, error=exc)

    logger.info(f"stage {name}: completed")
    _emit(events, stage=name, action="completed")
    return StageOutcome(name=name, status=StageStatus.COMPLETED, value=result)
