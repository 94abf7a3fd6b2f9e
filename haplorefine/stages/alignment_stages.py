"""
Alignment and reference stages.

This module contains stages that validate the run inputs and produce or
index alignment and reference artifacts:
- Input validation (alignment, alignment index, reference)
- Region extraction
- Alignment (.bai) and reference (.fai) indexing
- Haplotagging of reads with a phased VCF
"""

import logging
from pathlib import Path
from typing import List, Optional, Sequence

from ..indexing import extract_regions, index_alignment, index_reference
from ..phasing import haplotag_reads
from ..pipeline_core import PipelineContext, Stage
from ..pipeline_core.rounds import RoundArtifacts

logger = logging.getLogger(__name__)


def bai(bam: str) -> str:
    """Name of the companion index of an alignment artifact."""
    return f"{bam}.bai"


def fai(fasta: str) -> str:
    """Name of the companion index of a reference artifact."""
    return f"{fasta}.fai"


class InputValidationStage(Stage):
    """Check that the alignment, its index and the reference all exist.

    The stage has no output, so it runs on every invocation, and its inputs
    are checked before anything else in the pipeline.
    """

    kind = "validate-inputs"

    def __init__(self, bam: str, reference: str):
        super().__init__(inputs=[bam, bai(bam), reference])

    @property
    def name(self) -> str:
        """Return the stage name."""
        return "input_validation"

    def _process(self, context: PipelineContext, output_path: Optional[Path]) -> None:
        logger.info(f"Input files validated: {', '.join(self.inputs)}")


class RegionExtractionStage(Stage):
    """Filter an alignment down to the reads overlapping the requested regions."""

    kind = "extract-region"

    def __init__(self, bam: str, regions: Sequence[str], output: str):
        super().__init__(inputs=[bam, bai(bam)], output=output)
        self.bam = bam
        self.regions = list(regions)

    @property
    def name(self) -> str:
        """Return the stage name."""
        return "region_extraction"

    def companions(self) -> List[Stage]:
        """Index the filtered alignment."""
        return [AlignmentIndexStage(self.output)]

    def _process(self, context: PipelineContext, output_path: Optional[Path]) -> None:
        extract_regions(
            str(context.store.path(self.bam)), self.regions, str(output_path), context.config
        )


class AlignmentIndexStage(Stage):
    """Create the .bai index of an alignment produced by the pipeline."""

    kind = "index"

    def __init__(self, bam: str):
        super().__init__(inputs=[bam], output=bai(bam))
        self.bam = bam

    @property
    def name(self) -> str:
        """Return the stage name."""
        return f"index_{Path(self.bam).name}"

    def _process(self, context: PipelineContext, output_path: Optional[Path]) -> None:
        index_alignment(str(context.store.path(self.bam)), context.config)


class ReferenceIndexStage(Stage):
    """Create the .fai index of the reference sequence."""

    kind = "index"

    def __init__(self, reference: str):
        super().__init__(inputs=[reference], output=fai(reference))
        self.reference = reference

    @property
    def name(self) -> str:
        """Return the stage name."""
        return "reference_index"

    def _process(self, context: PipelineContext, output_path: Optional[Path]) -> None:
        index_reference(str(context.store.path(self.reference)), context.config)


class HaplotagStage(Stage):
    """Tag each read of the working alignment with its haplotype of origin.

    Consumes the compressed and indexed phased VCF of a round and produces
    that round's tagged alignment, which drives the per-haplotype consensus
    of the next round.
    """

    kind = "haplotag"

    def __init__(self, lineage: RoundArtifacts, bam: str, reference: str):
        super().__init__(
            inputs=[
                lineage.phased_vcf_gz,
                lineage.phased_vcf_tbi,
                bam,
                bai(bam),
                reference,
                fai(reference),
            ],
            output=lineage.tagged_bam,
        )
        self.lineage = lineage
        self.bam = bam
        self.reference = reference

    @property
    def name(self) -> str:
        """Return the stage name."""
        return f"haplotag_round_{self.lineage.round}"

    def prerequisites(self) -> List[Stage]:
        return [ReferenceIndexStage(self.reference)]

    def companions(self) -> List[Stage]:
        """Index the tagged alignment."""
        return [AlignmentIndexStage(self.output)]

    def _process(self, context: PipelineContext, output_path: Optional[Path]) -> None:
        store = context.store
        haplotag_reads(
            str(store.path(self.reference)),
            str(store.path(self.lineage.phased_vcf_gz)),
            str(store.path(self.bam)),
            str(output_path),
            context.config,
        )
