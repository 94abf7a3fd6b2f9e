# File: haplorefine/pipeline.py
# Location: haplorefine/haplorefine/pipeline.py

"""
Pipeline driver for the two-round haplotyping workflow.

The workflow, in program order:

1. Validate the alignment, its index and the reference.
2. Optionally restrict the alignment to the requested regions; the filtered
   alignment replaces the input for every later stage.
3. Round 0: consensus on all reads, variant calling at the heterozygous
   threshold, phasing, compression and haplotagging.
4. Round 1: consensus and haploid calling (threshold 1.0) per haplotype from
   the round 0 tagged alignment, diploid merge, re-phasing and haplotagging.
5. Round 2: per-haplotype consensus and calling from the round 1 tagged
   alignment, final diploid merge and final phasing.
6. Optionally delete the intermediate artifacts.

The round count is fixed. The two files of record are
``round_2_final_unphased.vcf`` and ``round_2_final_phased.vcf``.
"""

import logging
import os
from typing import Any, Dict, List, Optional

import pandas as pd

from .pipeline_core import (
    ArtifactStore,
    PipelineContext,
    PipelineResult,
    PipelineRunner,
    Workspace,
)
from .pipeline_core.rounds import (
    ROUNDS,
    RoundArtifacts,
    expected_artifacts,
    final_artifacts,
    haplotype_contexts,
)
from .pipeline_core.stage import Stage
from .stages import (
    CleanupStage,
    CompressVcfStage,
    ConsensusStage,
    DiploidMergeStage,
    HaplotagStage,
    InputValidationStage,
    PhaseStage,
    RegionExtractionStage,
    VariantCallStage,
)
from .utils import remove_alignment_extensions

logger = logging.getLogger("haplorefine")


def region_bam_name(bam: str) -> str:
    """Name of the region-filtered copy of ``bam`` inside the output directory."""
    return f"{remove_alignment_extensions(bam)}.regions.bam"


def build_pipeline_stages(cfg: Dict[str, Any]) -> List[Stage]:
    """Build the fixed stage sequence of the workflow.

    Parameters
    ----------
    cfg : dict
        Run configuration. Required keys: "bam", "reference", "model",
        "threshold". Optional: "regions", "delete_intermediates",
        "tag_name", "tag_keep_missing".

    Returns
    -------
    List[Stage]
        Stages in program order; indexing prerequisites and companions are
        added by the runner
    """
    bam = os.path.abspath(cfg["bam"])
    reference = os.path.abspath(cfg["reference"])
    regions = list(cfg.get("regions") or [])
    het_threshold = float(cfg["threshold"])
    tag_name = cfg.get("tag_name", "HP")
    keep_missing = bool(cfg.get("tag_keep_missing", False))

    stages: List[Stage] = [InputValidationStage(bam, reference)]

    alignment = bam
    region_bam = None
    if regions:
        region_bam = region_bam_name(bam)
        stages.append(RegionExtractionStage(bam, regions, region_bam))
        alignment = region_bam

    tagged_bam = alignment
    for round_number in ROUNDS:
        contexts = haplotype_contexts(round_number)
        consensus_bam = alignment if round_number == 0 else tagged_bam

        stages += [
            ConsensusStage(ctx, consensus_bam, regions, tag_name, keep_missing)
            for ctx in contexts
        ]
        stages += [VariantCallStage(ctx, reference, het_threshold) for ctx in contexts]

        lineage = RoundArtifacts(round_number)
        if round_number > 0:
            hap1, hap2 = contexts
            stages.append(DiploidMergeStage(lineage, hap1.vcf, hap2.vcf, reference))
        stages.append(PhaseStage(lineage, alignment, reference))

        if not lineage.is_final:
            stages.append(CompressVcfStage(lineage.phased_vcf))
            stages.append(HaplotagStage(lineage, alignment, reference))
            tagged_bam = lineage.tagged_bam

    if cfg.get("delete_intermediates"):
        stages.append(CleanupStage(expected_artifacts(region_bam), final_artifacts()))

    return stages


def _open_store(
    cfg: Dict[str, Any], store: Optional[ArtifactStore], create: bool = True
) -> ArtifactStore:
    if store is not None:
        return store
    return Workspace(cfg.get("output_dir") or ".", create=create)


def run_pipeline(cfg: Dict[str, Any], store: Optional[ArtifactStore] = None) -> PipelineResult:
    """Run the haplotyping workflow.

    Re-running against the same output directory resumes after the last
    stage whose output exists. Outputs are only checked for existence, so a
    file left truncated by an interrupted stage is reused as if complete and
    must be removed by hand.

    Parameters
    ----------
    cfg : dict
        Run configuration, see :func:`build_pipeline_stages`; "output_dir"
        selects the output directory when no store is given
    store : ArtifactStore, optional
        Artifact store to use instead of a workspace on "output_dir"

    Returns
    -------
    PipelineResult
        Per-stage results; ``result.ok`` is False if any stage failed
    """
    store = _open_store(cfg, store)
    logger.info(
        f"Running haplotyping pipeline on {cfg['bam']} against {cfg['reference']} "
        f"(model={cfg['model']}, threshold={cfg['threshold']}, "
        f"threads={cfg.get('threads', 1)}, batch_size={cfg.get('batch_size', 100)})"
    )
    if cfg.get("regions"):
        logger.info(f"Restricting to regions: {' '.join(cfg['regions'])}")

    context = PipelineContext(config=cfg, store=store)
    stages = build_pipeline_stages(cfg)
    result = PipelineRunner().run(stages, context)

    if result.ok:
        for name in final_artifacts():
            logger.info(f"Final output: {store.path(name)}")
        if isinstance(store, Workspace):
            logger.debug(f"{len(store.list_outputs())} file(s) in {store.output_dir}")
    return result


def describe_plan(cfg: Dict[str, Any], store: Optional[ArtifactStore] = None) -> pd.DataFrame:
    """Report which stage outputs exist without running anything.

    Parameters
    ----------
    cfg : dict
        Run configuration
    store : ArtifactStore, optional
        Artifact store to inspect instead of a workspace on "output_dir"

    Returns
    -------
    pd.DataFrame
        One row per planned stage with its checkpoint state

    Raises
    ------
    PipelineError
        If the output directory does not exist; it is never created here
    """
    store = _open_store(cfg, store, create=False)
    return PipelineRunner().dry_run(build_pipeline_stages(cfg), store)
