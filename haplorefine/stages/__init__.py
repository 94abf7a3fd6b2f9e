"""
Pipeline stages for haplorefine.

This package contains the concrete stages of the haplotyping workflow,
organized by category:
- alignment_stages: Input validation, region extraction, indexing, haplotagging
- calling_stages: Consensus computation, variant calling, diploid merge
- phasing_stages: Phasing, VCF compression and indexing
- cleanup_stages: Removal of intermediate artifacts
"""

from .alignment_stages import (
    AlignmentIndexStage,
    HaplotagStage,
    InputValidationStage,
    ReferenceIndexStage,
    RegionExtractionStage,
)
from .calling_stages import ConsensusStage, DiploidMergeStage, VariantCallStage
from .cleanup_stages import CleanupStage
from .phasing_stages import CompressVcfStage, PhaseStage, VcfIndexStage

__all__ = [
    # Alignment stages
    "InputValidationStage",
    "RegionExtractionStage",
    "AlignmentIndexStage",
    "ReferenceIndexStage",
    "HaplotagStage",
    # Calling stages
    "ConsensusStage",
    "VariantCallStage",
    "DiploidMergeStage",
    # Phasing stages
    "PhaseStage",
    "CompressVcfStage",
    "VcfIndexStage",
    # Cleanup stages
    "CleanupStage",
]
