"""
PipelineRunner - Executes stages strictly in program order.

This module provides the PipelineRunner class that orchestrates stage
execution. Stages run one after another on the calling thread; parallelism
only exists inside the external tools. The first failing stage stops the
run and its error is returned in the :class:`PipelineResult`.
"""

import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Set, Union

import pandas as pd

from .artifacts import ArtifactStore
from .context import PipelineContext
from .error_handling import PipelineError
from .stage import Stage, StageResult, StageStatus

logger = logging.getLogger(__name__)

SUMMARY_COLUMNS = ["stage", "kind", "output", "status", "elapsed_s", "error"]


def expand_plan(stages: List[Stage]) -> List[Stage]:
    """Insert prerequisite and companion stages around each stage.

    Prerequisites are placed immediately before the stage that needs them,
    companions immediately after. A stage whose output is already produced by
    an earlier planned stage is dropped, so a shared prerequisite (the
    reference index) only appears once.

    Parameters
    ----------
    stages : List[Stage]
        Stages in program order

    Returns
    -------
    List[Stage]
        The flattened execution plan
    """
    plan: List[Stage] = []
    planned_outputs: Set[str] = set()

    def add(stage: Stage) -> None:
        for prerequisite in stage.prerequisites():
            add(prerequisite)
        if stage.output is not None:
            if stage.output in planned_outputs:
                return
            planned_outputs.add(stage.output)
        plan.append(stage)
        for companion in stage.companions():
            add(companion)

    for stage in stages:
        add(stage)

    names = [stage.name for stage in plan]
    if len(set(names)) != len(names):
        raise ValueError("Duplicate stage names detected")
    return plan


@dataclass
class PipelineResult:
    """Outcome of a pipeline run.

    Attributes
    ----------
    results : List[StageResult]
        One entry per stage that was called, in order
    elapsed : float
        Total wall time in seconds
    """

    results: List[StageResult] = field(default_factory=list)
    elapsed: float = 0.0

    @property
    def ok(self) -> bool:
        return all(result.ok for result in self.results)

    @property
    def failed(self) -> Optional[StageResult]:
        for result in self.results:
            if not result.ok:
                return result
        return None

    @property
    def error(self) -> Optional[PipelineError]:
        failed = self.failed
        return failed.error if failed else None

    @property
    def executed(self) -> List[str]:
        """Names of stages that ran their operation."""
        return [r.stage for r in self.results if r.status is StageStatus.EXECUTED]

    @property
    def reused(self) -> List[str]:
        """Names of stages skipped because their output existed."""
        return [r.stage for r in self.results if r.status is StageStatus.REUSED]

    def raise_for_status(self) -> None:
        """Raise the error of the failed stage, if any."""
        if self.error is not None:
            raise self.error

    def to_dataframe(self) -> pd.DataFrame:
        """Tabulate the stage results."""
        rows = [
            {
                "stage": r.stage,
                "kind": r.kind,
                "output": r.output or "",
                "status": r.status.value,
                "elapsed_s": round(r.elapsed, 3),
                "error": str(r.error) if r.error else "",
            }
            for r in self.results
        ]
        return pd.DataFrame(rows, columns=SUMMARY_COLUMNS)

    def write_summary(self, path: Union[str, Path]) -> Path:
        """Write the stage results as a tab-separated table."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        self.to_dataframe().to_csv(path, sep="\t", index=False)
        logger.info(f"Run summary written to {path}")
        return path


class PipelineRunner:
    """Executes stages sequentially, stopping at the first failure."""

    def run(self, stages: List[Stage], context: PipelineContext) -> PipelineResult:
        """Execute all stages in order.

        Parameters
        ----------
        stages : List[Stage]
            Stages in program order; prerequisites and companions are added
        context : PipelineContext
            Pipeline context for this run

        Returns
        -------
        PipelineResult
            Results of every stage called; a failed run ends with the failed
            stage
        """
        start_time = time.time()
        plan = expand_plan(stages)
        logger.info(f"Starting pipeline execution with {len(plan)} stages")

        result = PipelineResult()
        for stage in plan:
            stage_result = stage(context)
            result.results.append(stage_result)
            if not stage_result.ok:
                logger.error(f"Aborting pipeline: stage '{stage.name}' failed")
                break

        result.elapsed = time.time() - start_time
        if result.ok:
            logger.info(f"Pipeline execution completed in {result.elapsed:.1f}s")
        self._log_execution_summary(result)
        return result

    def dry_run(self, stages: List[Stage], store: ArtifactStore) -> pd.DataFrame:
        """Show the execution plan and the checkpoint state of each stage.

        Nothing is executed. A stage is reported ``pending`` when its output
        is missing or any earlier stage in the plan is pending, since a run
        would re-create its inputs.

        Parameters
        ----------
        stages : List[Stage]
            Stages in program order
        store : ArtifactStore
            Store to check for existing outputs

        Returns
        -------
        pd.DataFrame
            One row per planned stage with columns stage, kind, output, state
        """
        rows = []
        pending_outputs: Set[str] = set()
        for stage in expand_plan(stages):
            if stage.output is None:
                state = "always"
            elif not store.exists(stage.output) or pending_outputs & set(stage.inputs):
                state = "pending"
                pending_outputs.add(stage.output)
            else:
                state = "exists"
            rows.append(
                {
                    "stage": stage.name,
                    "kind": stage.kind,
                    "output": stage.output or "",
                    "state": state,
                }
            )
        return pd.DataFrame(rows, columns=["stage", "kind", "output", "state"])

    def _log_execution_summary(self, result: PipelineResult) -> None:
        """Log summary of stage execution times."""
        if not result.results:
            return

        logger.info("=" * 60)
        logger.info("Stage Execution Summary")
        logger.info("=" * 60)
        for stage_result in result.results:
            logger.info(
                f"{stage_result.stage:30s} {stage_result.status.value:9s} "
                f"{stage_result.elapsed:6.1f}s"
            )
        logger.info("-" * 60)
        logger.info(
            f"{len(result.executed)} executed, {len(result.reused)} reused, "
            f"total {result.elapsed:.1f}s"
        )
        logger.info("=" * 60)
