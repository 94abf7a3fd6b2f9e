"""Test fixtures and factory functions."""

from pathlib import Path
from typing import Dict, Optional

from haplorefine.config import load_config
from haplorefine.pipeline_core import ArtifactStore, PipelineContext

from .artifact_store import MemoryArtifactStore


def create_test_inputs(directory: Path, with_index: bool = True) -> Dict[str, str]:
    """Create a placeholder alignment, index and reference in ``directory``.

    Returns
    -------
    dict
        Paths under the keys "bam" and "reference"
    """
    directory.mkdir(parents=True, exist_ok=True)
    bam = directory / "sample.bam"
    bam.write_bytes(b"BAM\x01")
    if with_index:
        (directory / "sample.bam.bai").write_bytes(b"BAI\x01")
    reference = directory / "ref.fasta"
    reference.write_text(">chr1\nACGTACGTACGT\n")
    return {"bam": str(bam), "reference": str(reference)}


def create_test_context(
    store: Optional[ArtifactStore] = None,
    config_overrides: Optional[dict] = None,
) -> PipelineContext:
    """Create a PipelineContext with the packaged default configuration.

    Parameters
    ----------
    store : ArtifactStore, optional
        Store to use (an empty in-memory store if not given)
    config_overrides : dict, optional
        Config values to override

    Returns
    -------
    PipelineContext
        Configured test context
    """
    config = load_config()
    config.update(
        {"bam": "/data/sample.bam", "reference": "/data/ref.fasta", "output_dir": "/virtual"}
    )
    config.update(config_overrides or {})
    return PipelineContext(config=config, store=store or MemoryArtifactStore())
