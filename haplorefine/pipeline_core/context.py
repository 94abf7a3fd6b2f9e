"""
PipelineContext - State that flows through one pipeline run.

The persistent state of the pipeline is the set of artifacts in the store.
The context only carries what a single run needs on top of that: the
configuration, the store, the stages that completed and the artifacts
that were produced during this run.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Set

from .artifacts import ArtifactStore

logger = logging.getLogger(__name__)


@dataclass
class PipelineContext:
    """Container for the configuration and per-run bookkeeping.

    Attributes
    ----------
    config : Dict[str, Any]
        Merged configuration from file and CLI
    store : ArtifactStore
        Where artifacts are looked up and written
    start_time : datetime
        Pipeline execution start time
    produced : Set[str]
        Artifacts written (not reused) during this run
    completed_stages : Set[str]
        Names of stages that finished, executed or reused
    """

    config: Dict[str, Any]
    store: ArtifactStore
    start_time: datetime = field(default_factory=datetime.now)

    produced: Set[str] = field(default_factory=set)
    completed_stages: Set[str] = field(default_factory=set)

    def mark_complete(self, stage_name: str) -> None:
        """Mark a stage as complete."""
        self.completed_stages.add(stage_name)
        logger.debug(f"Stage '{stage_name}' marked as complete")

    def mark_produced(self, artifact: str) -> None:
        """Record that ``artifact`` was (re)written during this run."""
        self.produced.add(artifact)

    def was_produced(self, artifact: str) -> bool:
        """Check whether ``artifact`` was (re)written during this run."""
        return artifact in self.produced

    def get_execution_time(self) -> float:
        """Get the elapsed execution time in seconds."""
        return (datetime.now() - self.start_time).total_seconds()

    def __repr__(self) -> str:
        """Return string representation showing key state information."""
        return (
            f"PipelineContext("
            f"stages_completed={len(self.completed_stages)}, "
            f"artifacts_produced={len(self.produced)}, "
            f"execution_time={self.get_execution_time():.1f}s)"
        )
