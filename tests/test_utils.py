"""Tests for utility helpers."""

import subprocess
from unittest.mock import MagicMock, patch

import pytest

from haplorefine.utils import (
    check_external_tools,
    get_tool_version,
    remove_alignment_extensions,
    run_command,
)


class TestRunCommand:
    """Test run_command."""

    @patch("haplorefine.utils.subprocess.run")
    def test_returns_stdout(self, mock_run):
        mock_run.return_value = MagicMock(returncode=0, stdout=b"hello\n", stderr=b"")

        assert run_command(["echo", "hello"]) == "hello\n"
        mock_run.assert_called_once_with(
            ["echo", "hello"], stdout=subprocess.PIPE, stderr=subprocess.PIPE
        )

    @patch("haplorefine.utils.subprocess.run")
    def test_writes_stdout_to_file(self, mock_run, tmp_path):
        mock_run.return_value = MagicMock(returncode=0, stdout=None, stderr=b"")
        target = tmp_path / "out.vcf.gz"

        assert run_command(["bgzip", "-c", "in.vcf"], output_file=str(target)) == str(target)
        assert target.exists()
        assert mock_run.call_args[1]["stderr"] == subprocess.PIPE

    @patch("haplorefine.utils.subprocess.run")
    def test_failure_raises_with_stderr(self, mock_run):
        mock_run.return_value = MagicMock(returncode=2, stdout=b"", stderr=b"bad input\n")

        with pytest.raises(subprocess.CalledProcessError) as exc_info:
            run_command(["medaka", "snp"])

        assert exc_info.value.returncode == 2
        assert exc_info.value.stderr == "bad input\n"
        assert exc_info.value.cmd == ["medaka", "snp"]


class TestToolChecks:
    """Test check_external_tools and get_tool_version."""

    @patch("haplorefine.utils.shutil.which")
    def test_all_tools_found(self, mock_which):
        mock_which.side_effect = lambda tool: f"/usr/bin/{tool}"
        assert check_external_tools(["samtools", "tabix"])

    @patch("haplorefine.utils.shutil.which")
    def test_missing_tool(self, mock_which):
        mock_which.side_effect = lambda tool: None if tool == "whatshap" else f"/usr/bin/{tool}"
        assert not check_external_tools(["samtools", "whatshap"])

    @patch("haplorefine.utils.subprocess.run")
    def test_samtools_version(self, mock_run):
        mock_run.return_value = MagicMock(
            stdout="samtools 1.19\nUsing htslib 1.19\n", stderr="", returncode=0
        )
        assert get_tool_version("samtools") == "samtools 1.19"

    @patch("haplorefine.utils.subprocess.run")
    def test_medaka_version_uses_executable(self, mock_run):
        mock_run.return_value = MagicMock(stdout="", stderr="medaka 1.11.3\n", returncode=0)
        assert get_tool_version("medaka", "/opt/medaka") == "medaka 1.11.3"
        assert mock_run.call_args[0][0] == ["/opt/medaka", "--version"]

    def test_unknown_tool(self):
        assert get_tool_version("unknown_tool") == "N/A"

    @patch("haplorefine.utils.subprocess.run", side_effect=FileNotFoundError("no such file"))
    def test_version_of_missing_executable(self, mock_run):
        assert get_tool_version("tabix") == "N/A"


@pytest.mark.parametrize(
    "filename,expected",
    [
        ("/data/sample.bam", "sample"),
        ("reads.cram", "reads"),
        ("reads.sorted.bam", "reads.sorted"),
        ("noext", "noext"),
    ],
)
def test_remove_alignment_extensions(filename, expected):
    assert remove_alignment_extensions(filename) == expected
