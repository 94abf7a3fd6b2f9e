"""
Stage - Base class for all checkpointed pipeline stages.

A stage wraps one external operation. It declares the artifacts it consumes
and the artifact it produces, and calling it:

- fails fast if a required input is missing
- skips the work if its output already exists (checkpoint reuse)
- otherwise runs the operation and checks that the output appeared

Calling a stage never raises pipeline errors. The outcome, including any
error, is returned as a :class:`StageResult`.
"""

import logging
import subprocess
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import List, Optional, Sequence

from .context import PipelineContext
from .error_handling import (
    MissingInputError,
    PipelineError,
    StageExecutionError,
    ToolExecutionError,
)

logger = logging.getLogger(__name__)


class StageStatus(Enum):
    """Outcome of calling a stage."""

    EXECUTED = "executed"
    REUSED = "reused"
    FAILED = "failed"


@dataclass
class StageResult:
    """Result of one stage invocation.

    Attributes
    ----------
    stage : str
        Stage name
    kind : str
        Operation kind (consensus, snp-call, phase, ...)
    output : str, optional
        Artifact the stage produces
    status : StageStatus
        Whether the stage ran, reused its output or failed
    elapsed : float
        Wall time in seconds
    error : PipelineError, optional
        The failure, set only when ``status`` is FAILED
    """

    stage: str
    kind: str
    output: Optional[str]
    status: StageStatus
    elapsed: float = 0.0
    error: Optional[PipelineError] = None

    @property
    def ok(self) -> bool:
        return self.status is not StageStatus.FAILED


class Stage(ABC):
    """Abstract base class for all pipeline stages.

    Subclasses set :attr:`kind`, provide a unique :attr:`name` and implement
    :meth:`_process`, which receives the resolved output path and must create
    the output there (usually by running an external tool).

    Parameters
    ----------
    inputs : sequence of str
        Artifact names that must exist before the stage may run
    output : str, optional
        Artifact name produced by the stage; stages without an output are
        never skipped
    options : sequence of str
        Opaque extra flags passed through to the external tool
    """

    kind = "stage"

    def __init__(
        self,
        inputs: Sequence[str] = (),
        output: Optional[str] = None,
        options: Sequence[str] = (),
    ):
        self.inputs: List[str] = [str(i) for i in inputs]
        self.output: Optional[str] = str(output) if output is not None else None
        self.options: List[str] = list(options)

    @property
    @abstractmethod
    def name(self) -> str:
        """Unique identifier for the stage.

        Returns
        -------
        str
            The stage name used for logging and reporting
        """

    @property
    def description(self) -> str:
        """Human-readable description for logging."""
        if self.output:
            return f"{self.kind} stage '{self.name}' -> {self.output}"
        return f"{self.kind} stage '{self.name}'"

    def prerequisites(self) -> List["Stage"]:
        """Stages that must run immediately before this one (e.g. reference index)."""
        return []

    def companions(self) -> List["Stage"]:
        """Stages that must run immediately after this one (e.g. an alignment index)."""
        return []

    def __call__(self, context: PipelineContext) -> StageResult:
        """Run the stage with input checks and checkpoint handling.

        Parameters
        ----------
        context : PipelineContext
            The pipeline context

        Returns
        -------
        StageResult
            EXECUTED, REUSED or FAILED (with the error attached)
        """
        start_time = time.time()
        store = context.store

        for artifact in self.inputs:
            if not store.exists(artifact):
                missing = MissingInputError(str(store.path(artifact)), self.name)
                return self._fail(missing, start_time)

        if self.output is None:
            logger.info(f"Executing {self.description}")
            error = self._run(context, None)
            if error:
                return self._fail(error, start_time)
            return self._succeed(context, StageStatus.EXECUTED, start_time)

        output_path = store.path(self.output)
        stale_inputs = [artifact for artifact in self.inputs if context.was_produced(artifact)]
        if store.exists(self.output):
            if not stale_inputs:
                logger.info(f"Not running {self.name}: reusing existing output {output_path}")
                return self._succeed(context, StageStatus.REUSED, start_time)
            logger.warning(
                f"Inputs of '{self.name}' were re-created in this run "
                f"({', '.join(stale_inputs)}); replacing {output_path}"
            )
            try:
                store.delete(self.output)
            except OSError as e:
                return self._fail(StageExecutionError(self.name, e, self.output), start_time)

        logger.info(f"Executing {self.description}")
        error = self._run(context, self.output)
        if error:
            return self._fail(error, start_time)

        if not store.exists(self.output):
            missing = FileNotFoundError(f"expected output {output_path} was not created")
            return self._fail(StageExecutionError(self.name, missing, self.output), start_time)

        context.mark_produced(self.output)
        return self._succeed(context, StageStatus.EXECUTED, start_time)

    def _run(self, context: PipelineContext, output: Optional[str]) -> Optional[PipelineError]:
        """Invoke the operation and translate failures into pipeline errors."""
        try:
            if output is None:
                self._process(context, None)
            else:
                context.store.write(output, lambda path: self._process(context, path))
        except subprocess.CalledProcessError as e:
            return ToolExecutionError(self.name, output or self.name, e)
        except PipelineError as e:
            if e.stage is None:
                e.stage = self.name
            return e
        except OSError as e:
            return StageExecutionError(self.name, e, output)
        return None

    def _succeed(
        self, context: PipelineContext, status: StageStatus, start_time: float
    ) -> StageResult:
        elapsed = time.time() - start_time
        context.mark_complete(self.name)
        if status is StageStatus.EXECUTED:
            logger.info(f"Stage '{self.name}' completed successfully in {elapsed:.1f}s")
        return StageResult(self.name, self.kind, self.output, status, elapsed)

    def _fail(self, error: PipelineError, start_time: float) -> StageResult:
        elapsed = time.time() - start_time
        logger.error(f"Stage '{self.name}' failed after {elapsed:.1f}s: {error}")
        return StageResult(self.name, self.kind, self.output, StageStatus.FAILED, elapsed, error)

    @abstractmethod
    def _process(self, context: PipelineContext, output_path: Optional[Path]) -> None:
        """Core processing logic - must be implemented by subclasses.

        Parameters
        ----------
        context : PipelineContext
            The pipeline context
        output_path : Path or None
            Where the output artifact must be created, None for stages
            without an output
        """

    def __repr__(self) -> str:
        """Return string representation of the stage."""
        return f"{self.__class__.__name__}(name='{self.name}', output={self.output!r})"
