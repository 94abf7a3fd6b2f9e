# File: haplorefine/indexing.py
# Location: haplorefine/haplorefine/indexing.py

"""
Alignment, sequence and VCF indexing module.

Thin wrappers around samtools and htslib utilities used to filter alignments
to regions, build companion indices and block-compress VCF files.
"""

import logging
from typing import Any, Dict, Sequence

from .config import tool_path
from .utils import run_command

logger = logging.getLogger("haplorefine")


def extract_regions(
    bam_file: str, regions: Sequence[str], output_file: str, cfg: Dict[str, Any]
) -> str:
    """
    Write the reads of ``bam_file`` overlapping ``regions`` to a new BAM.

    The phasing tool cannot restrict itself to a region, so the pipeline feeds
    it an alignment that has already been filtered.
    """
    cmd = [
        tool_path(cfg, "samtools"),
        "view",
        "-b",
        "-@",
        str(cfg.get("threads", 1)),
        "-o",
        str(output_file),
        str(bam_file),
    ] + list(regions)
    logger.debug("Extracting %d region(s) from %s", len(regions), bam_file)
    run_command(cmd)
    return str(output_file)


def index_alignment(bam_file: str, cfg: Dict[str, Any]) -> str:
    """Create the ``.bai`` index next to ``bam_file`` and return its path."""
    run_command(
        [tool_path(cfg, "samtools"), "index", "-@", str(cfg.get("threads", 1)), str(bam_file)]
    )
    return f"{bam_file}.bai"


def index_reference(fasta_file: str, cfg: Dict[str, Any]) -> str:
    """Create the ``.fai`` index next to ``fasta_file`` and return its path."""
    run_command([tool_path(cfg, "samtools"), "faidx", str(fasta_file)])
    return f"{fasta_file}.fai"


def compress_vcf(vcf_file: str, output_file: str, cfg: Dict[str, Any]) -> str:
    """Block-compress ``vcf_file`` into ``output_file`` with bgzip."""
    cmd = [tool_path(cfg, "bgzip"), "-c", "-@", str(cfg.get("threads", 1)), str(vcf_file)]
    run_command(cmd, output_file=str(output_file))
    return str(output_file)


def index_vcf(vcf_gz_file: str, cfg: Dict[str, Any]) -> str:
    """Create the tabix ``.tbi`` index of a compressed VCF and return its path."""
    run_command([tool_path(cfg, "tabix"), "-f", "-p", "vcf", str(vcf_gz_file)])
    return f"{vcf_gz_file}.tbi"
