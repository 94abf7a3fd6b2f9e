# File: haplorefine/utils.py
# Location: haplorefine/haplorefine/utils.py

"""
Utility functions module.

Provides helper functions for running commands, checking tool availability,
and retrieving tool versions.
"""

import logging
import os
import shutil
import subprocess
from typing import List, Optional

logger = logging.getLogger("haplorefine")


def check_external_tools(tools: List[str]) -> bool:
    """
    Check if external tools are available in PATH.

    Parameters
    ----------
    tools : List[str]
        List of tool names to check for availability

    Returns
    -------
    bool
        True if all tools are available, False otherwise
    """
    for tool in tools:
        if not shutil.which(tool):
            logger.error(f"Required tool not found in PATH: {tool}")
            return False
        logger.debug(f"Found tool in PATH: {tool}")
    return True


def run_command(cmd: list, output_file: Optional[str] = None) -> str:
    """
    Run an external command and write stdout to output_file if provided, else return stdout.

    Stdout is written to ``output_file`` as raw bytes, so binary streams such as
    block-compressed VCF produced by ``bgzip -c`` are preserved.

    Parameters
    ----------
    cmd : list of str
        Command and its arguments.
    output_file : str, optional
        Path to a file where stdout should be written. If None,
        returns stdout as a string.

    Returns
    -------
    str
        If output_file is None, returns the command stdout as a string.
        If output_file is provided, returns output_file after completion.

    Raises
    ------
    subprocess.CalledProcessError
        If the command returns a non-zero exit code.
    """
    cmd = [str(c) for c in cmd]
    logger.debug("Running command: %s", " ".join(cmd))
    if output_file:
        with open(output_file, "wb") as out_f:
            result = subprocess.run(cmd, stdout=out_f, stderr=subprocess.PIPE)
        stdout = ""
    else:
        result = subprocess.run(cmd, stdout=subprocess.PIPE, stderr=subprocess.PIPE)
        stdout = result.stdout.decode("utf-8", errors="replace")

    stderr = result.stderr.decode("utf-8", errors="replace") if result.stderr else ""
    if result.returncode != 0:
        logger.error("Command failed: %s\nError: %s", " ".join(cmd), stderr)
        raise subprocess.CalledProcessError(result.returncode, cmd, stdout, stderr)

    logger.debug("Command completed successfully.")
    if output_file:
        return output_file
    return stdout


def get_tool_version(tool_name: str, executable: Optional[str] = None) -> str:
    """
    Retrieve the version of a given tool.

    Supported tools:

    - medaka
    - whatshap
    - samtools
    - bgzip
    - tabix

    Parameters
    ----------
    tool_name : str
        Name of the tool to retrieve version for.
    executable : str, optional
        Executable to call instead of ``tool_name``.

    Returns
    -------
    str
        Version string or 'N/A' if not found or cannot be retrieved.
    """

    def first_line(stdout, stderr):
        for line in (stdout + "\n" + stderr).splitlines():
            if line.strip():
                return line.strip()
        return "N/A"

    def htslib_line(stdout, stderr):
        for line in stdout.splitlines():
            if line.lower().startswith(tool_name.lower()):
                return line.strip()
        return "N/A"

    tool_map = {
        "medaka": {"args": ["--version"], "parse_func": first_line},
        "whatshap": {"args": ["--version"], "parse_func": first_line},
        "samtools": {"args": ["--version"], "parse_func": htslib_line},
        "bgzip": {"args": ["--version"], "parse_func": htslib_line},
        "tabix": {"args": ["--version"], "parse_func": htslib_line},
    }

    if tool_name not in tool_map:
        logger.warning("No version retrieval logic for %s. Returning 'N/A'.", tool_name)
        return "N/A"

    cmd = [executable or tool_name] + tool_map[tool_name]["args"]
    parse_func = tool_map[tool_name]["parse_func"]

    try:
        result = subprocess.run(
            cmd, stdout=subprocess.PIPE, stderr=subprocess.PIPE, text=True, check=False
        )
        version = parse_func(result.stdout, result.stderr)
        if version == "N/A":
            logger.warning("Could not parse version for %s. Returning 'N/A'.", tool_name)
        return version
    except OSError as e:
        logger.warning("Failed to retrieve version for %s: %s", tool_name, e)
        return "N/A"


def remove_alignment_extensions(filename: str) -> str:
    """
    Remove common alignment extensions from a filename.

    Parameters
    ----------
    filename : str
        The input filename, possibly ending in .bam, .cram or .sam.

    Returns
    -------
    str
        The filename base without alignment-related extensions.
    """
    base = os.path.basename(filename)
    for ext in (".bam", ".cram", ".sam"):
        if base.endswith(ext):
            return base[: -len(ext)]
    return base
