"""Tests for the cleanup stage."""

from haplorefine.pipeline_core import StageStatus
from haplorefine.pipeline_core.error_handling import CleanupError, MissingInputError
from haplorefine.stages import CleanupStage
from tests.mocks import MemoryArtifactStore, create_test_context

FINALS = ["round_2_final_unphased.vcf", "round_2_final_phased.vcf"]


def test_deletes_intermediates_and_keeps_finals():
    intermediates = ["a.hdf", "a.vcf", "b.bam", "b.bam.bai"]
    store = MemoryArtifactStore(intermediates + FINALS)
    stage = CleanupStage(intermediates + FINALS, FINALS)

    result = stage(create_test_context(store))

    assert result.status is StageStatus.EXECUTED
    assert sorted(store.artifacts) == sorted(FINALS)
    assert store.deleted == intermediates


def test_already_missing_intermediates_are_ignored():
    store = MemoryArtifactStore(["a.hdf"] + FINALS)

    result = CleanupStage(["a.hdf", "gone.vcf"], FINALS)(create_test_context(store))

    assert result.ok
    assert store.deleted == ["a.hdf"]


def test_requires_final_outputs():
    store = MemoryArtifactStore(["a.hdf", FINALS[0]])

    result = CleanupStage(["a.hdf"], FINALS)(create_test_context(store))

    assert isinstance(result.error, MissingInputError)
    assert store.exists("a.hdf")


def test_undeletable_file_fails_cleanup():
    store = MemoryArtifactStore(["a.hdf", "b.hdf"] + FINALS)
    store.undeletable.add("a.hdf")

    result = CleanupStage(["a.hdf", "b.hdf"], FINALS)(create_test_context(store))

    assert result.status is StageStatus.FAILED
    assert isinstance(result.error, CleanupError)
    assert result.error.stage == "cleanup"
    assert "a.hdf" in str(result.error)
    assert store.exists("b.hdf")
