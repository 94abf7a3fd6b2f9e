"""
Phasing and VCF compression stages.
"""

import logging
from pathlib import Path
from typing import List, Optional

from ..indexing import compress_vcf, index_vcf
from ..phasing import phase_variants
from ..pipeline_core import PipelineContext, Stage
from ..pipeline_core.rounds import RoundArtifacts
from .alignment_stages import ReferenceIndexStage, bai, fai

logger = logging.getLogger(__name__)


class PhaseStage(Stage):
    """Phase the unphased calls of a round against the working alignment."""

    kind = "phase"

    def __init__(self, lineage: RoundArtifacts, bam: str, reference: str):
        super().__init__(
            inputs=[lineage.unphased_vcf, bam, bai(bam), reference, fai(reference)],
            output=lineage.phased_vcf,
        )
        self.lineage = lineage
        self.bam = bam
        self.reference = reference

    @property
    def name(self) -> str:
        """Return the stage name."""
        return f"phase_round_{self.lineage.round}"

    def prerequisites(self) -> List[Stage]:
        """Make sure the reference carries its .fai index."""
        return [ReferenceIndexStage(self.reference)]

    def _process(self, context: PipelineContext, output_path: Optional[Path]) -> None:
        store = context.store
        phase_variants(
            str(store.path(self.reference)),
            str(store.path(self.lineage.unphased_vcf)),
            str(store.path(self.bam)),
            str(output_path),
            context.config,
        )


class CompressVcfStage(Stage):
    """Block-compress a VCF; the tabix index follows as a companion stage."""

    kind = "compress"

    def __init__(self, vcf: str):
        super().__init__(inputs=[vcf], output=f"{vcf}.gz")
        self.vcf = vcf

    @property
    def name(self) -> str:
        """Return the stage name."""
        return f"compress_{Path(self.vcf).name}"

    def companions(self) -> List[Stage]:
        return [VcfIndexStage(self.output)]

    def _process(self, context: PipelineContext, output_path: Optional[Path]) -> None:
        compress_vcf(str(context.store.path(self.vcf)), str(output_path), context.config)


class VcfIndexStage(Stage):
    """Create the tabix index of a compressed VCF."""

    kind = "index"

    def __init__(self, vcf_gz: str):
        super().__init__(inputs=[vcf_gz], output=f"{vcf_gz}.tbi")
        self.vcf_gz = vcf_gz

    @property
    def name(self) -> str:
        """Return the stage name."""
        return f"index_{Path(self.vcf_gz).name}"

    def _process(self, context: PipelineContext, output_path: Optional[Path]) -> None:
        index_vcf(str(context.store.path(self.vcf_gz)), context.config)
