# File: haplorefine/phasing.py
# Location: haplorefine/haplorefine/phasing.py

"""
Read-based phasing module.

Wraps ``whatshap phase`` and ``whatshap haplotag``. Read-group information is
always ignored so that every read is treated as coming from a single sample.
"""

import logging
from typing import Any, Dict

from .config import tool_path
from .utils import run_command

logger = logging.getLogger("haplorefine")


def phase_variants(
    reference: str, vcf_file: str, bam_file: str, output_file: str, cfg: Dict[str, Any]
) -> str:
    """
    Phase an unphased VCF using read evidence from an alignment.

    Parameters
    ----------
    reference : str
        Reference FASTA; its ``.fai`` index must already exist.
    vcf_file : str
        Unphased variant calls.
    bam_file : str
        Indexed alignment providing the read evidence.
    output_file : str
        Phased VCF to write.
    cfg : dict
        Configuration dictionary (tool paths).

    Returns
    -------
    str
        The ``output_file`` path.
    """
    cmd = [
        tool_path(cfg, "whatshap"),
        "phase",
        "--ignore-read-groups",
        "--reference",
        str(reference),
        "-o",
        str(output_file),
        str(vcf_file),
        str(bam_file),
    ]
    logger.debug("Phasing %s against %s", vcf_file, bam_file)
    run_command(cmd)
    return str(output_file)


def haplotag_reads(
    reference: str, phased_vcf_gz: str, bam_file: str, output_file: str, cfg: Dict[str, Any]
) -> str:
    """Annotate every read of ``bam_file`` with its haplotype of origin."""
    cmd = [
        tool_path(cfg, "whatshap"),
        "haplotag",
        "--ignore-read-groups",
        "--reference",
        str(reference),
        "-o",
        str(output_file),
        str(phased_vcf_gz),
        str(bam_file),
    ]
    logger.debug("Haplotagging %s with %s", bam_file, phased_vcf_gz)
    run_command(cmd)
    return str(output_file)
