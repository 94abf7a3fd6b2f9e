"""
Pipeline infrastructure for haplorefine.

This package provides the core abstractions of the checkpointed pipeline:
- ArtifactStore / Workspace: existence-keyed store of pipeline artifacts
- PipelineContext: Configuration and per-run bookkeeping
- Stage: Abstract base class for all checkpointed stages
- PipelineRunner: Sequential stage execution with fail-fast results
"""

from .artifacts import ArtifactStore, Workspace
from .context import PipelineContext
from .runner import PipelineResult, PipelineRunner
from .stage import Stage, StageResult, StageStatus

__all__ = [
    "ArtifactStore",
    "PipelineContext",
    "PipelineResult",
    "PipelineRunner",
    "Stage",
    "StageResult",
    "StageStatus",
    "Workspace",
]
