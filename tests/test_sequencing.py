from __future__ import annotations

import random

import pytest

from wetlab import bioinformatics
from wetlab.errors import InvalidRegion, WarningCode, has_warning
from wetlab.genome import DigitalGenome
from wetlab.sequencing import (
    TECHNOLOGY_PROFILES,
    SequencingRead,
    TechnologyProfile,
    VariantType,
    calculate_n50,
    call_variants,
    resolve_profile,
    run_sequencing,
)


def _genome(length: int, seed: int = 1) -> DigitalGenome:
    return DigitalGenome.from_string(bioinformatics.random_sequence(random.Random(seed), length), name="rand")


def test_profile_table_matches_reference_values() -> None:
    pe150 = TECHNOLOGY_PROFILES["ILLUMINA_PE150"]
    assert (pe150.read_length, pe150.paired_end, pe150.error_rate, pe150.avg_quality) == (150, True, 0.001, 35)
    assert TECHNOLOGY_PROFILES["SANGER"].avg_quality == 50
    assert TECHNOLOGY_PROFILES["NANOPORE_R10"].supports_indels
    assert not pe150.supports_indels
    assert resolve_profile(" pacbio_hifi ") is TECHNOLOGY_PROFILES["PACBIO_HIFI"]
    with pytest.raises(ValueError):
        resolve_profile("ILLUMINA_PE999")


def test_paired_end_30x_quality_profile() -> None:
    genome = _genome(10_000)
    profile = TECHNOLOGY_PROFILES["ILLUMINA_PE150"]
    result = run_sequencing(genome, profile, 30, rng=random.Random(2024))
    stats = result.stats
    assert result.success
    # 1000 pairs; mates that would run off the genome end are dropped
    assert 1900 <= stats.total_reads <= 2000
    assert 25.0 <= stats.mean_quality <= 35.0
    # the position-decay model puts roughly 45% of bases at Q30 or better
    assert 30.0 <= stats.q30_percentage <= 60.0
    assert stats.coverage_depth == pytest.approx(stats.total_bases / 10_000)
    assert 0.45 <= stats.gc_content <= 0.55
    assert stats.mean_read_length == pytest.approx(150.0)
    assert stats.additional_metrics["n50"] == 150
    assert has_warning(result.warnings, WarningCode.LOW_QUALITY)
    assert not has_warning(result.warnings, WarningCode.LOW_COVERAGE)
    assert "SEQUENCING QUALITY REPORT" in result.report
    assert "Low quality data" in result.report


def test_at_only_genome_flags_gc_content() -> None:
    genome = DigitalGenome.from_string("AT" * 2000, name="at_rich")
    result = run_sequencing(genome, TECHNOLOGY_PROFILES["ILLUMINA_SE150"], 30, rng=random.Random(3))
    assert result.success
    assert result.stats.gc_content < 0.01
    assert [warning.code for warning in result.warnings] == [WarningCode.LOW_QUALITY, WarningCode.UNUSUAL_GC_CONTENT]


def test_paired_reads_link_mates() -> None:
    genome = _genome(3000)
    result = run_sequencing(genome, TECHNOLOGY_PROFILES["ILLUMINA_PE150"], 10, rng=random.Random(5))
    by_id = {read.id: read for read in result.reads}
    paired = unpaired = 0
    for read in result.reads:
        if read.id.endswith("/1"):
            assert not read.is_reversed
            mate = by_id.get(read.id[:-2] + "/2")
            if mate is None:
                # mate ran off the genome end
                assert read.mate_id is None
                unpaired += 1
                continue
            assert read.mate_id == mate.id
            assert mate.is_reversed
            assert mate.mate_id == read.id
            insert = mate.reference_position + 150 - read.reference_position
            assert 300 <= insert < 500
            paired += 1
    assert paired and unpaired
    assert all(read.mate_id is None or read.mate_id in by_id for read in result.reads)


def test_single_end_reads_are_oriented_randomly_and_match_reference() -> None:
    genome = _genome(4000)
    profile = TechnologyProfile("PERFECT", 100, False, 0.0, 40, "error-free test profile")
    result = run_sequencing(genome, profile, 20, rng=random.Random(9))
    assert len(result.reads) == 800
    reversed_share = sum(read.is_reversed for read in result.reads) / len(result.reads)
    assert 0.4 <= reversed_share <= 0.6
    for read in result.reads:
        assert read.id.startswith("READ_") and read.mate_id is None
        expected = genome.get_sequence(read.reference_position, 100)
        if read.is_reversed:
            expected = bioinformatics.reverse_complement(expected)
        assert read.sequence == expected
        assert all(2 <= q <= 41 for q in read.quality_scores)


def test_sanger_qualities_are_capped() -> None:
    genome = _genome(4000)
    result = run_sequencing(genome, TECHNOLOGY_PROFILES["SANGER"], 2, rng=random.Random(3))
    qualities = [q for read in result.reads for q in read.quality_scores]
    assert max(qualities) == 41
    assert min(qualities) >= 2


def test_region_bounds_and_whole_genome_default() -> None:
    genome = _genome(2000)
    profile = TECHNOLOGY_PROFILES["ILLUMINA_SE150"]
    result = run_sequencing(genome, profile, 15, region_start=500, region_length=600, rng=random.Random(1))
    assert len(result.reads) == 600 * 15 // 150
    for read in result.reads:
        assert 500 <= read.reference_position <= 500 + 600 - 150
    clipped = run_sequencing(genome, profile, 15, region_start=1500, region_length=5000, rng=random.Random(1))
    assert len(clipped.reads) == 500 * 15 // 150
    with pytest.raises(InvalidRegion):
        run_sequencing(genome, profile, 15, region_start=0, region_length=0, rng=random.Random(1))
    with pytest.raises(InvalidRegion):
        run_sequencing(genome, profile, 15, region_start=2000, region_length=10, rng=random.Random(1))
    with pytest.raises(ValueError):
        run_sequencing(genome, profile, -1, rng=random.Random(1))


def test_zero_coverage_fails_softly() -> None:
    result = run_sequencing(_genome(500), TECHNOLOGY_PROFILES["ILLUMINA_SE50"], 0, rng=random.Random(0))
    assert not result.success
    assert result.reads == ()
    assert has_warning(result.warnings, WarningCode.LOW_COVERAGE)


def test_sequencing_is_reproducible() -> None:
    genome = _genome(2500)
    profile = TECHNOLOGY_PROFILES["ILLUMINA_PE300"]
    first = run_sequencing(genome, profile, 8, rng=random.Random(77))
    second = run_sequencing(genome, profile, 8, rng=random.Random(77))
    assert first == second


def test_indel_capable_profiles_change_read_lengths() -> None:
    genome = _genome(1000)
    noisy = TechnologyProfile("NOISY", 200, False, 1.0, 30, "every base errs", True)
    result = run_sequencing(genome, noisy, 5, rng=random.Random(4))
    lengths = {len(read.sequence) for read in result.reads}
    assert lengths != {200}
    for read in result.reads:
        assert len(read.quality_scores) == len(read.sequence)
    substitution_only = TechnologyProfile("NOISY_SUB", 200, False, 1.0, 30, "every base errs", False)
    result = run_sequencing(genome, substitution_only, 5, rng=random.Random(4))
    assert {len(read.sequence) for read in result.reads} == {200}


def test_fastq_helpers() -> None:
    read = SequencingRead("READ_00000001", "ACGT", (40, 30, 20, 2), 10, False)
    assert read.quality_string() == "I?5#"
    assert read.average_quality() == pytest.approx(23.0)
    assert read.to_fastq() == "@READ_00000001\nACGT\n+\nI?5#"


def test_calculate_n50() -> None:
    def reads(*lengths):
        return [SequencingRead(f"r{i}", "A" * n, (30,) * n, 0, False) for i, n in enumerate(lengths)]

    assert calculate_n50(reads(100, 50, 30, 20)) == 100
    assert calculate_n50(reads(40, 30, 20, 10)) == 30
    assert calculate_n50([]) == 0


def _pileup_reads(reference: str, alt_position: int, alt_base: str, total: int, carriers: int):
    reads = []
    for index in range(total):
        sequence = list(reference)
        if index < carriers:
            sequence[alt_position] = alt_base
        forward = "".join(sequence)
        is_reversed = index % 2 == 1
        if is_reversed:
            stored = bioinformatics.reverse_complement(forward)
            qualities = tuple(reversed([35] * len(forward)))
        else:
            stored = forward
            qualities = (35,) * len(forward)
        reads.append(SequencingRead(f"r{index}", stored, qualities, 0, is_reversed))
    return reads


def test_call_variants_reports_snp_across_strands() -> None:
    reference = DigitalGenome.from_string("ACGTACGTAC")
    reads = _pileup_reads(reference.sequence, 2, "T", total=12, carriers=6)
    variants = call_variants(reads, reference, min_depth=10, min_quality=20)
    assert len(variants) == 1
    variant = variants[0]
    assert (variant.position, variant.ref_allele, variant.alt_allele) == (2, "G", "T")
    assert variant.type is VariantType.SNP
    assert variant.depth == 12
    assert variant.allele_frequency == pytest.approx(0.5)
    assert variant.quality == pytest.approx(35.0)


def test_call_variants_thresholds() -> None:
    reference = DigitalGenome.from_string("ACGTACGTAC")
    shallow = _pileup_reads(reference.sequence, 2, "T", total=8, carriers=4)
    assert call_variants(shallow, reference, min_depth=10) == []
    rare = _pileup_reads(reference.sequence, 2, "T", total=12, carriers=2)
    assert call_variants(rare, reference, min_depth=10) == []
    assert call_variants(rare, reference, min_depth=10, min_quality=40) == []
    with pytest.raises(ValueError):
        call_variants(rare, reference, min_depth=-1)
