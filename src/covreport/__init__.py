"""covreport package.

Simple API for CI scripts:

    import covreport

    result = covreport.run()
    if result["status"] != "OK":
        ...
"""

import asyncio
from collections.abc import Mapping
from typing import Optional

from .collector import CollectedData, DataCollector, ErrorRecord
from .orchestrator import InitializationError, PipelineResult, run_pipeline
from .stages.runner import StageOutcome, StageSkipped, StageStatus, run_stage

__version__ = "0.1.0"


def run(
    *,
    env: Optional[Mapping[str, str]] = None,
    run_id: Optional[str] = None,
) -> dict:
    """Run the coverage report pipeline. Returns a structured result.

    Args:
        env: Environment mapping (defaults to os.environ)
        run_id: Optional custom run ID (derived from GITHUB_RUN_ID or generated)

    Returns:
        dict with keys: status, run_dir, errors, stages

    Raises:
        InitializationError: options could not be resolved
    """
    result = asyncio.run(run_pipeline(env=env, run_id=run_id))
    return {
        "status": result.status,
        "run_dir": str(result.run_dir) if result.run_dir else None,
        "errors": [{"stage": e.stage, "cause": e.describe()} for e in result.data.errors],
        "stages": {o.name: o.status.value for o in result.stages},
    }


__all__ = [
    "run",
    "run_pipeline",
    "run_stage",
    "CollectedData",
    "DataCollector",
    "ErrorRecord",
    "InitializationError",
    "PipelineResult",
    "StageOutcome",
    "StageSkipped",
    "StageStatus",
]
