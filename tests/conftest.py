"""Shared pytest fixtures for all test modules."""

from typing import Any, Dict

import pytest

from haplorefine.config import load_config
from tests.mocks import MemoryArtifactStore, create_test_inputs

INPUT_BAM = "/data/sample.bam"
INPUT_REFERENCE = "/data/ref.fasta"


@pytest.fixture
def memory_config() -> Dict[str, Any]:
    """Default configuration pointing at virtual inputs."""
    cfg = load_config()
    cfg.update(
        {
            "bam": INPUT_BAM,
            "reference": INPUT_REFERENCE,
            "output_dir": "/virtual",
            "threshold": 0.04,
        }
    )
    return cfg


@pytest.fixture
def memory_store() -> MemoryArtifactStore:
    """In-memory store seeded with the alignment, its index and the reference."""
    return MemoryArtifactStore([INPUT_BAM, INPUT_BAM + ".bai", INPUT_REFERENCE])


@pytest.fixture
def disk_config(tmp_path) -> Dict[str, Any]:
    """Default configuration with real placeholder inputs under tmp_path."""
    cfg = load_config()
    cfg.update(create_test_inputs(tmp_path / "inputs"))
    cfg["output_dir"] = str(tmp_path / "out")
    cfg["threshold"] = 0.04
    return cfg
