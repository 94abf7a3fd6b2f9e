# File: haplorefine/consensus.py
# Location: haplorefine/haplorefine/consensus.py

"""
Consensus and variant calling module.

This module wraps the medaka commands used by the pipeline:
``medaka consensus`` to compute per-position class probabilities from an
alignment, ``medaka snp`` to call variants from those probabilities, and
``medaka tools haploid2diploid`` to merge two haploid call sets into one
diploid call set.
"""

import logging
from typing import Any, Dict, List, Optional, Sequence

from .config import tool_path
from .utils import run_command

logger = logging.getLogger("haplorefine")


def compute_consensus(
    bam_file: str,
    output_file: str,
    cfg: Dict[str, Any],
    regions: Optional[Sequence[str]] = None,
    extra_options: Sequence[str] = (),
) -> str:
    """
    Run ``medaka consensus`` on an alignment and write a probability file.

    Parameters
    ----------
    bam_file : str
        Indexed alignment to compute consensus from.
    output_file : str
        Path of the probability (.hdf) file to create.
    cfg : dict
        Configuration dictionary.
        - "model": str
            Model identifier passed through to medaka.
        - "batch_size": int
            Inference batch size.
        - "threads": int
            Worker threads for medaka.
    regions : sequence of str, optional
        Region descriptors (``chr:start-end``) restricting the computation.
    extra_options : sequence of str
        Opaque flags appended as-is, e.g. the haplotype tag filter.

    Returns
    -------
    str
        The ``output_file`` path.

    Raises
    ------
    subprocess.CalledProcessError
        If medaka exits with a non-zero status.
    """
    cmd: List[str] = [
        tool_path(cfg, "medaka"),
        "consensus",
        str(bam_file),
        str(output_file),
        "--model",
        str(cfg["model"]),
        "--batch_size",
        str(cfg.get("batch_size", 100)),
        "--threads",
        str(cfg.get("threads", 1)),
    ]
    if regions:
        cmd += ["--regions"] + list(regions)
    cmd += list(extra_options)

    logger.debug("Computing consensus probabilities into %s", output_file)
    run_command(cmd)
    return str(output_file)


def call_variants(
    reference: str, probs_file: str, output_file: str, threshold: float, cfg: Dict[str, Any]
) -> str:
    """
    Run ``medaka snp`` on a probability file.

    The threshold is the minimum probability an alternative call needs to be
    emitted; a threshold of 1.0 accepts every called alternate allele.
    """
    cmd = [
        tool_path(cfg, "medaka"),
        "snp",
        "--threshold",
        str(threshold),
        str(reference),
        str(probs_file),
        str(output_file),
    ]
    logger.debug("Calling variants from %s at threshold %s", probs_file, threshold)
    run_command(cmd)
    return str(output_file)


def merge_haploid_calls(
    hap1_vcf: str, hap2_vcf: str, reference: str, output_file: str, cfg: Dict[str, Any]
) -> str:
    """Merge two haploid VCFs into one unphased diploid VCF."""
    cmd = [
        tool_path(cfg, "medaka"),
        "tools",
        "haploid2diploid",
        str(hap1_vcf),
        str(hap2_vcf),
        str(reference),
        str(output_file),
    ]
    logger.debug("Merging %s and %s into %s", hap1_vcf, hap2_vcf, output_file)
    run_command(cmd)
    return str(output_file)
