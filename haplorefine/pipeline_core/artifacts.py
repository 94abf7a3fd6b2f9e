"""
Artifact stores - the persistent memo table of the pipeline.

Every stage is keyed by the name of the artifact it produces. Before a stage
runs, the store is asked whether that artifact already exists; if it does the
stage is skipped. Existence alone is the cache key: there is no content hash
and no timestamp comparison, so an output file that was truncated by a crash
is still treated as complete on the next run, and a file placed by hand makes
the pipeline skip the stage that would have produced it.

Running two pipelines against the same output directory at the same time is
not supported. Existence checks of the two processes race with each other.
"""

import logging
import os
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Callable, List, Union

from .error_handling import validate_output_directory

logger = logging.getLogger(__name__)

Producer = Callable[[Path], object]


class ArtifactStore(ABC):
    """Key-value view of the files a pipeline run reads and writes.

    Artifact names are either relative (artifacts produced by the pipeline,
    placed in the store) or absolute paths (caller-provided inputs such as the
    alignment and the reference, which are used where they are).
    """

    @abstractmethod
    def exists(self, name: str) -> bool:
        """Return True if the artifact is present."""

    @abstractmethod
    def path(self, name: str) -> Path:
        """Return the location of the artifact."""

    @abstractmethod
    def write(self, name: str, producer: Producer) -> Path:
        """Materialise an artifact by calling ``producer`` with its location.

        Exceptions raised by the producer propagate unchanged; a partially
        written artifact is left in place.
        """

    @abstractmethod
    def delete(self, name: str) -> bool:
        """Remove the artifact; return False if it did not exist."""


class Workspace(ArtifactStore):
    """File-system artifact store rooted at the pipeline output directory.

    Attributes
    ----------
    output_dir : Path
        Directory holding every artifact produced by the pipeline
    """

    def __init__(self, output_dir: Union[str, Path], create: bool = True):
        """Initialize the workspace.

        Parameters
        ----------
        output_dir : str or Path
            Main output directory path
        create : bool
            Create the output directory if it is missing; when False a
            missing directory raises PipelineError
        """
        self.output_dir = validate_output_directory(output_dir, create=create).resolve()
        logger.debug(f"Workspace initialized: output_dir={self.output_dir}")

    def path(self, name: str) -> Path:
        """Resolve an artifact name; absolute names are returned unchanged."""
        return self.output_dir / name

    def exists(self, name: str) -> bool:
        """Check whether the artifact file exists."""
        return self.path(name).exists()

    def write(self, name: str, producer: Producer) -> Path:
        """Run the producer against the artifact path."""
        target = self.path(name)
        producer(target)
        return target

    def delete(self, name: str) -> bool:
        """Delete the artifact file if present.

        Raises
        ------
        OSError
            If the file exists but cannot be removed
        """
        target = self.path(name)
        if not target.exists():
            return False
        os.remove(target)
        logger.debug(f"Deleted {target}")
        return True

    def list_outputs(self) -> List[Path]:
        """List all files in the output directory.

        Returns
        -------
        list
            Sorted list of Path objects for all output files
        """
        return sorted(p for p in self.output_dir.iterdir() if p.is_file())

    def __repr__(self) -> str:
        """Return string representation of the workspace."""
        return f"Workspace(output_dir='{self.output_dir}')"
