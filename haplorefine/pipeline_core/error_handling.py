"""
Error types and validation helpers for the haplotyping pipeline.

This module provides:
- Custom exception classes for the three failure categories of a run
  (missing inputs, failing external tools, failing cleanup)
- A helper to validate the output directory

Stage errors are not raised across the pipeline. Stages catch them and hand
them back inside a ``StageResult`` so the runner can stop at the first
failure and report which stage and artifact were affected.
"""

import logging
import subprocess
from pathlib import Path
from typing import Dict, Optional, Union

logger = logging.getLogger(__name__)


class PipelineError(Exception):
    """Base exception for all pipeline errors."""

    def __init__(self, message: str, stage: Optional[str] = None, details: Optional[Dict] = None):
        """Initialize pipeline error.

        Parameters
        ----------
        message : str
            Error message
        stage : str, optional
            Stage where error occurred
        details : dict, optional
            Additional error details
        """
        super().__init__(message)
        self.stage = stage
        self.details = details or {}


class MissingInputError(PipelineError):
    """Raised when an artifact a stage consumes does not exist."""

    def __init__(self, file_path: str, stage: Optional[str] = None):
        """Initialize missing input error."""
        message = f"Required file not found: {file_path}"
        super().__init__(message, stage, {"file": str(file_path)})
        self.file_path = str(file_path)


class ToolNotFoundError(PipelineError):
    """Raised when a required external tool is not found."""

    def __init__(self, tool: str, stage: Optional[str] = None):
        """Initialize tool not found error."""
        message = f"Required tool '{tool}' not found in PATH"
        super().__init__(message, stage, {"tool": tool})


class ToolExecutionError(PipelineError):
    """Raised when an external tool exits with a non-zero status."""

    def __init__(self, stage_name: str, artifact: str, error: subprocess.CalledProcessError):
        """Initialize tool execution error from the failed process."""
        stderr = (error.stderr or "").strip() if isinstance(error.stderr, str) else ""
        message = (
            f"Stage '{stage_name}' failed while producing {artifact}: "
            f"command exited with status {error.returncode}"
        )
        if stderr:
            message += f" ({stderr.splitlines()[-1]})"
        super().__init__(
            message,
            stage_name,
            {
                "artifact": str(artifact),
                "returncode": error.returncode,
                "command": error.cmd,
                "stderr": stderr,
            },
        )
        self.artifact = str(artifact)
        self.returncode = error.returncode


class StageExecutionError(PipelineError):
    """Raised when a stage fails to execute properly."""

    def __init__(self, stage_name: str, original_error: Exception, artifact: Optional[str] = None):
        """Initialize stage execution error."""
        message = f"Stage '{stage_name}' failed: {str(original_error)}"
        super().__init__(
            message,
            stage_name,
            {
                "original_error": str(original_error),
                "error_type": type(original_error).__name__,
                "artifact": artifact,
            },
        )
        self.original_error = original_error
        self.artifact = artifact

    def __reduce__(self):
        """Custom pickling to keep the constructor arguments."""
        return (
            self.__class__,
            (self.stage, self.original_error, self.artifact),
            self.__dict__,
        )


class CleanupError(PipelineError):
    """Raised when an intermediate artifact cannot be deleted."""

    def __init__(self, file_path: str, original_error: Exception, stage: Optional[str] = None):
        """Initialize cleanup error."""
        message = f"Failed to delete intermediate file {file_path}: {original_error}"
        super().__init__(message, stage, {"file": str(file_path)})
        self.original_error = original_error


def validate_output_directory(output_dir: Union[str, Path], create: bool = True) -> Path:
    """Validate output directory.

    Parameters
    ----------
    output_dir : str or Path
        Output directory path
    create : bool
        Whether to create directory if it doesn't exist

    Returns
    -------
    Path
        Validated directory path

    Raises
    ------
    PipelineError
        If the path exists but is not a directory, or is missing and
        ``create`` is False
    """
    path = Path(output_dir)

    if path.exists():
        if not path.is_dir():
            raise PipelineError(f"Output path is not a directory: {path}")
    elif create:
        path.mkdir(parents=True, exist_ok=True)
        logger.debug(f"Created output directory {path}")
    else:
        raise PipelineError(f"Output directory does not exist: {path}")

    return path
