"""
Consensus and variant calling stages.

These stages are parameterised by a :class:`HaplotypeContext`, which fixes
the artifact names, the read tag filter and the calling threshold of one
(round, haplotype) combination.
"""

import logging
from pathlib import Path
from typing import Optional, Sequence

from ..consensus import call_variants, compute_consensus, merge_haploid_calls
from ..pipeline_core import PipelineContext, Stage
from ..pipeline_core.rounds import HaplotypeContext, RoundArtifacts
from .alignment_stages import bai

logger = logging.getLogger(__name__)


class ConsensusStage(Stage):
    """Compute consensus probabilities for the reads of one haplotype context."""

    kind = "consensus"

    def __init__(
        self,
        hap_context: HaplotypeContext,
        bam: str,
        regions: Optional[Sequence[str]] = None,
        tag_name: str = "HP",
        tag_keep_missing: bool = False,
    ):
        super().__init__(
            inputs=[bam, bai(bam)],
            output=hap_context.probs,
            options=hap_context.tag_options(tag_name, tag_keep_missing),
        )
        self.hap_context = hap_context
        self.bam = bam
        self.regions = list(regions or [])

    @property
    def name(self) -> str:
        """Return the stage name."""
        return f"consensus_{self.hap_context.prefix}"

    def _process(self, context: PipelineContext, output_path: Optional[Path]) -> None:
        compute_consensus(
            str(context.store.path(self.bam)),
            str(output_path),
            context.config,
            regions=self.regions,
            extra_options=self.options,
        )


class VariantCallStage(Stage):
    """Call variants from a probability artifact.

    Mixed-read calls use the configured heterozygous threshold; haploid
    calls always use 1.0.
    """

    kind = "snp-call"

    def __init__(self, hap_context: HaplotypeContext, reference: str, het_threshold: float):
        super().__init__(inputs=[hap_context.probs, reference], output=hap_context.vcf)
        self.hap_context = hap_context
        self.reference = reference
        self.threshold = hap_context.threshold(het_threshold)

    @property
    def name(self) -> str:
        """Return the stage name."""
        return f"variant_call_{self.hap_context.prefix}"

    def _process(self, context: PipelineContext, output_path: Optional[Path]) -> None:
        store = context.store
        call_variants(
            str(store.path(self.reference)),
            str(store.path(self.hap_context.probs)),
            str(output_path),
            self.threshold,
            context.config,
        )


class DiploidMergeStage(Stage):
    """Merge the two haploid call sets of a round into unphased diploid calls."""

    kind = "diploid-merge"

    def __init__(self, lineage: RoundArtifacts, hap1_vcf: str, hap2_vcf: str, reference: str):
        super().__init__(inputs=[hap1_vcf, hap2_vcf, reference], output=lineage.unphased_vcf)
        self.lineage = lineage
        self.hap1_vcf = hap1_vcf
        self.hap2_vcf = hap2_vcf
        self.reference = reference

    @property
    def name(self) -> str:
        """Return the stage name."""
        return f"diploid_merge_round_{self.lineage.round}"

    def _process(self, context: PipelineContext, output_path: Optional[Path]) -> None:
        store = context.store
        merge_haploid_calls(
            str(store.path(self.hap1_vcf)),
            str(store.path(self.hap2_vcf)),
            str(store.path(self.reference)),
            str(output_path),
            context.config,
        )
