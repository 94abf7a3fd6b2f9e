"""
Cleanup stage - removes intermediate artifacts after a successful run.
"""

import logging
from pathlib import Path
from typing import Optional, Sequence

from ..pipeline_core import PipelineContext, Stage
from ..pipeline_core.error_handling import CleanupError

logger = logging.getLogger(__name__)


class CleanupStage(Stage):
    """Delete intermediate artifacts, keeping the final variant calls.

    The final artifacts are declared as inputs, so nothing is deleted unless
    the run actually produced them. Intermediates that are already gone are
    skipped. The first file that cannot be removed aborts the cleanup with a
    :class:`CleanupError`.

    Parameters
    ----------
    intermediates : sequence of str
        Artifact names to delete
    keep : sequence of str
        Final artifacts that must exist and are never deleted
    """

    kind = "cleanup"

    def __init__(self, intermediates: Sequence[str], keep: Sequence[str]):
        super().__init__(inputs=keep)
        self.keep = set(keep)
        self.intermediates = [name for name in intermediates if name not in self.keep]

    @property
    def name(self) -> str:
        """Return the stage name."""
        return "cleanup"

    def _process(self, context: PipelineContext, output_path: Optional[Path]) -> None:
        deleted = 0
        for name in self.intermediates:
            try:
                if context.store.delete(name):
                    deleted += 1
            except OSError as e:
                raise CleanupError(str(context.store.path(name)), e, self.name)
        logger.info(
            f"Deleted {deleted} intermediate file(s); kept {', '.join(sorted(self.keep))}"
        )
