"""Unit tests for round and haplotype context naming."""

import pytest

from haplorefine.pipeline_core.rounds import (
    HAPLOID_THRESHOLD,
    Haplotype,
    HaplotypeContext,
    RoundArtifacts,
    expected_artifacts,
    final_artifacts,
    haplotype_contexts,
)


class TestHaplotypeContext:
    """Test suite for HaplotypeContext."""

    def test_mixed_context_names(self):
        ctx = HaplotypeContext(0, Haplotype.MIXED)
        assert ctx.prefix == "round_0_hap_mixed"
        assert ctx.probs == "round_0_hap_mixed_probs.hdf"
        assert ctx.vcf == "round_0_hap_mixed_unphased.vcf"

    def test_haploid_context_names(self):
        ctx = HaplotypeContext(2, Haplotype.HAP1)
        assert ctx.probs == "round_2_hap_1_probs.hdf"
        assert ctx.vcf == "round_2_hap_1.vcf"

    @pytest.mark.parametrize("het_threshold", [0.0, 0.04, 0.5, 1.0])
    def test_threshold_depends_only_on_mixed_context(self, het_threshold):
        assert HaplotypeContext(0, Haplotype.MIXED).threshold(het_threshold) == het_threshold
        for round_number in (1, 2):
            for hap in (Haplotype.HAP1, Haplotype.HAP2):
                ctx = HaplotypeContext(round_number, hap)
                assert ctx.threshold(het_threshold) == HAPLOID_THRESHOLD == 1.0

    def test_tag_options(self):
        assert HaplotypeContext(0, Haplotype.MIXED).tag_options() == []
        assert HaplotypeContext(1, Haplotype.HAP2).tag_options() == [
            "--tag_name",
            "HP",
            "--tag_value",
            "2",
        ]
        assert HaplotypeContext(1, Haplotype.HAP1).tag_options("PS", keep_missing=True) == [
            "--tag_name",
            "PS",
            "--tag_value",
            "1",
            "--tag_keep_missing",
        ]

    def test_invalid_contexts(self):
        with pytest.raises(ValueError):
            HaplotypeContext(3, Haplotype.HAP1)
        with pytest.raises(ValueError):
            HaplotypeContext(1, Haplotype.MIXED)
        with pytest.raises(ValueError):
            HaplotypeContext(0, Haplotype.HAP1)

    def test_haplotype_contexts_per_round(self):
        assert haplotype_contexts(0) == [HaplotypeContext(0, Haplotype.MIXED)]
        assert [c.haplotype for c in haplotype_contexts(1)] == [Haplotype.HAP1, Haplotype.HAP2]
        with pytest.raises(ValueError):
            haplotype_contexts(-1)


class TestRoundArtifacts:
    """Test suite for the merged/phased lineage names."""

    def test_round_zero_continues_mixed_calls(self):
        lineage = RoundArtifacts(0)
        assert lineage.unphased_vcf == HaplotypeContext(0, Haplotype.MIXED).vcf
        assert lineage.phased_vcf == "round_0_hap_mixed_phased.vcf"
        assert lineage.phased_vcf_gz == "round_0_hap_mixed_phased.vcf.gz"
        assert lineage.phased_vcf_tbi == "round_0_hap_mixed_phased.vcf.gz.tbi"
        assert lineage.tagged_bam == "round_0_hap_mixed_phased.bam"
        assert lineage.tagged_bai == "round_0_hap_mixed_phased.bam.bai"
        assert not lineage.is_final

    def test_round_one(self):
        lineage = RoundArtifacts(1)
        assert lineage.unphased_vcf == "round_1_unphased.vcf"
        assert lineage.phased_vcf == "round_1_phased.vcf"
        assert lineage.tagged_bam == "round_1_phased.bam"

    def test_final_round(self):
        lineage = RoundArtifacts(2)
        assert lineage.is_final
        assert final_artifacts() == ["round_2_final_unphased.vcf", "round_2_final_phased.vcf"]


class TestExpectedArtifacts:
    """Test suite for the full artifact lineage."""

    def test_full_lineage_in_order(self):
        assert expected_artifacts() == [
            "round_0_hap_mixed_probs.hdf",
            "round_0_hap_mixed_unphased.vcf",
            "round_0_hap_mixed_phased.vcf",
            "round_0_hap_mixed_phased.vcf.gz",
            "round_0_hap_mixed_phased.vcf.gz.tbi",
            "round_0_hap_mixed_phased.bam",
            "round_0_hap_mixed_phased.bam.bai",
            "round_1_hap_1_probs.hdf",
            "round_1_hap_2_probs.hdf",
            "round_1_hap_1.vcf",
            "round_1_hap_2.vcf",
            "round_1_unphased.vcf",
            "round_1_phased.vcf",
            "round_1_phased.vcf.gz",
            "round_1_phased.vcf.gz.tbi",
            "round_1_phased.bam",
            "round_1_phased.bam.bai",
            "round_2_hap_1_probs.hdf",
            "round_2_hap_2_probs.hdf",
            "round_2_hap_1.vcf",
            "round_2_hap_2.vcf",
            "round_2_final_unphased.vcf",
            "round_2_final_phased.vcf",
        ]

    def test_region_bam_comes_first(self):
        names = expected_artifacts("sample.regions.bam")
        assert names[:2] == ["sample.regions.bam", "sample.regions.bam.bai"]
        assert len(names) == len(set(names))
