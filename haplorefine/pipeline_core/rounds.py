"""
Rounds and haplotype contexts of the refinement workflow.

The workflow runs three generations of calls. Round 0 calls variants on the
mixed (untagged) reads, rounds 1 and 2 call each haplotype separately from a
haplotagged alignment and merge the two haploid call sets. Every artifact
name is derived here from the round number and haplotype, so the naming of a
whole run is a pure function that can be checked without running anything.
"""

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional

ROUNDS = (0, 1, 2)
FINAL_ROUND = 2

# Reads are already partitioned by haplotype, so every called alt allele is kept.
HAPLOID_THRESHOLD = 1.0


class Haplotype(Enum):
    """Which reads a consensus/variant calling invocation pertains to."""

    MIXED = "mixed"
    HAP1 = "1"
    HAP2 = "2"

    @property
    def tag_value(self) -> Optional[int]:
        """Haplotype tag value selecting the reads, None for mixed reads."""
        if self is Haplotype.MIXED:
            return None
        return int(self.value)


def _check_round(round_number: int) -> None:
    if round_number not in ROUNDS:
        raise ValueError(f"Round must be one of {ROUNDS}, got {round_number}")


@dataclass(frozen=True)
class HaplotypeContext:
    """A (round, haplotype) pair and the artifact names and options it implies."""

    round: int
    haplotype: Haplotype

    def __post_init__(self):
        _check_round(self.round)
        if (self.haplotype is Haplotype.MIXED) != (self.round == 0):
            raise ValueError(
                f"Round {self.round} cannot use haplotype context '{self.haplotype.value}'"
            )

    @property
    def prefix(self) -> str:
        return f"round_{self.round}_hap_{self.haplotype.value}"

    @property
    def probs(self) -> str:
        """Probability artifact written by consensus computation."""
        return f"{self.prefix}_probs.hdf"

    @property
    def vcf(self) -> str:
        """Variant calls made from :attr:`probs`."""
        if self.haplotype is Haplotype.MIXED:
            return f"{self.prefix}_unphased.vcf"
        return f"{self.prefix}.vcf"

    def threshold(self, het_threshold: float) -> float:
        """Calling threshold: ``het_threshold`` for mixed reads, 1.0 otherwise."""
        if self.haplotype is Haplotype.MIXED:
            return float(het_threshold)
        return HAPLOID_THRESHOLD

    def tag_options(self, tag_name: str = "HP", keep_missing: bool = False) -> List[str]:
        """Consensus options selecting the reads of this haplotype."""
        if self.haplotype is Haplotype.MIXED:
            return []
        options = ["--tag_name", tag_name, "--tag_value", str(self.haplotype.tag_value)]
        if keep_missing:
            options.append("--tag_keep_missing")
        return options


def haplotype_contexts(round_number: int) -> List[HaplotypeContext]:
    """Return the contexts called in a round (mixed in round 0, both haplotypes after)."""
    _check_round(round_number)
    if round_number == 0:
        return [HaplotypeContext(0, Haplotype.MIXED)]
    return [
        HaplotypeContext(round_number, Haplotype.HAP1),
        HaplotypeContext(round_number, Haplotype.HAP2),
    ]


@dataclass(frozen=True)
class RoundArtifacts:
    """Merged and phased lineage of one round.

    Round 0 has no merge: its unphased calls are the mixed calls. Rounds 1 and
    2 start from the diploid merge of the two haploid call sets. The final
    round stops after phasing, so it has no compressed VCF or tagged BAM.
    """

    round: int

    def __post_init__(self):
        _check_round(self.round)

    @property
    def prefix(self) -> str:
        if self.round == 0:
            return HaplotypeContext(0, Haplotype.MIXED).prefix
        if self.round == FINAL_ROUND:
            return f"round_{self.round}_final"
        return f"round_{self.round}"

    @property
    def unphased_vcf(self) -> str:
        return f"{self.prefix}_unphased.vcf"

    @property
    def phased_vcf(self) -> str:
        return f"{self.prefix}_phased.vcf"

    @property
    def phased_vcf_gz(self) -> str:
        return f"{self.phased_vcf}.gz"

    @property
    def phased_vcf_tbi(self) -> str:
        return f"{self.phased_vcf_gz}.tbi"

    @property
    def tagged_bam(self) -> str:
        return f"{self.prefix}_phased.bam"

    @property
    def tagged_bai(self) -> str:
        return f"{self.tagged_bam}.bai"

    @property
    def is_final(self) -> bool:
        return self.round == FINAL_ROUND


def final_artifacts() -> List[str]:
    """The two files of record: final unphased and final phased diploid calls."""
    final = RoundArtifacts(FINAL_ROUND)
    return [final.unphased_vcf, final.phased_vcf]


def expected_artifacts(region_bam: Optional[str] = None) -> List[str]:
    """List every artifact of a complete run in production order.

    Parameters
    ----------
    region_bam : str, optional
        Name of the region-filtered alignment when regions were requested

    Returns
    -------
    List[str]
        Artifact names relative to the output directory
    """
    names: List[str] = []
    if region_bam:
        names += [region_bam, f"{region_bam}.bai"]

    for round_number in ROUNDS:
        contexts = haplotype_contexts(round_number)
        names += [ctx.probs for ctx in contexts]
        names += [ctx.vcf for ctx in contexts]

        lineage = RoundArtifacts(round_number)
        if round_number > 0:
            names.append(lineage.unphased_vcf)
        names.append(lineage.phased_vcf)
        if not lineage.is_final:
            names += [
                lineage.phased_vcf_gz,
                lineage.phased_vcf_tbi,
                lineage.tagged_bam,
                lineage.tagged_bai,
            ]
    return names
