"""Test mocks and fixtures for haplorefine tests."""

from .artifact_store import MemoryArtifactStore
from .external_tools import FakeToolchain
from .fixtures import create_test_context, create_test_inputs

__all__ = [
    "FakeToolchain",
    "MemoryArtifactStore",
    "create_test_context",
    "create_test_inputs",
]
