"""Unit tests for the file-system artifact store."""

from pathlib import Path
from unittest.mock import patch

import pytest

from haplorefine.pipeline_core import Workspace
from haplorefine.pipeline_core.error_handling import PipelineError


class TestWorkspace:
    """Test suite for Workspace."""

    @pytest.fixture
    def workspace(self, tmp_path):
        """Create a test Workspace."""
        return Workspace(tmp_path / "out")

    def test_initialization_creates_directory(self, tmp_path):
        workspace = Workspace(tmp_path / "a" / "b")
        assert workspace.output_dir == (tmp_path / "a" / "b").resolve()
        assert workspace.output_dir.is_dir()

    def test_no_create_leaves_missing_directory_alone(self, tmp_path):
        with pytest.raises(PipelineError, match="does not exist"):
            Workspace(tmp_path / "missing", create=False)
        assert not (tmp_path / "missing").exists()

    def test_no_create_accepts_existing_directory(self, tmp_path):
        workspace = Workspace(tmp_path, create=False)
        assert workspace.output_dir == tmp_path.resolve()

    def test_output_path_not_a_directory(self, tmp_path):
        file_path = tmp_path / "file.txt"
        file_path.write_text("x")
        with pytest.raises(PipelineError, match="not a directory"):
            Workspace(file_path)

    def test_relative_and_absolute_names(self, workspace, tmp_path):
        assert workspace.path("round_0_hap_mixed_probs.hdf") == (
            workspace.output_dir / "round_0_hap_mixed_probs.hdf"
        )
        absolute = str(tmp_path / "inputs" / "sample.bam")
        assert workspace.path(absolute) == Path(absolute)

    def test_exists_is_the_only_check(self, workspace):
        assert not workspace.exists("a.vcf")
        # An empty (e.g. truncated) file counts as present
        (workspace.output_dir / "a.vcf").touch()
        assert workspace.exists("a.vcf")

    def test_write_calls_producer_with_path(self, workspace):
        seen = []

        def producer(path):
            seen.append(path)
            path.write_text("data")

        result = workspace.write("b.vcf", producer)
        assert seen == [workspace.output_dir / "b.vcf"]
        assert result.read_text() == "data"

    def test_write_propagates_producer_errors(self, workspace):
        def producer(path):
            path.write_text("partial")
            raise RuntimeError("tool crashed")

        with pytest.raises(RuntimeError):
            workspace.write("c.vcf", producer)
        # Partial output is left in place
        assert workspace.exists("c.vcf")

    def test_delete(self, workspace):
        (workspace.output_dir / "d.hdf").write_text("x")
        assert workspace.delete("d.hdf") is True
        assert not workspace.exists("d.hdf")
        assert workspace.delete("d.hdf") is False

    def test_delete_failure_raises(self, workspace):
        (workspace.output_dir / "e.hdf").write_text("x")
        with patch("haplorefine.pipeline_core.artifacts.os.remove", side_effect=PermissionError):
            with pytest.raises(OSError):
                workspace.delete("e.hdf")

    def test_list_outputs(self, workspace):
        (workspace.output_dir / "b.vcf").write_text("x")
        (workspace.output_dir / "a.vcf").write_text("x")
        (workspace.output_dir / "sub").mkdir()
        assert [p.name for p in workspace.list_outputs()] == ["a.vcf", "b.vcf"]

    def test_repr(self, workspace):
        assert "Workspace(output_dir=" in repr(workspace)
