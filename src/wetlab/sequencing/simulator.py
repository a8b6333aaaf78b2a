"""
Next-generation sequencing simulation.

Reads are sampled uniformly over a region, qualities decay along the read
with Gaussian noise, and per-base errors follow the technology profile.
A pileup caller reports SNPs from the simulated reads.
"""
from __future__ import annotations

import logging
import random
from collections import Counter, defaultdict
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

import numpy as np

from .. import bioinformatics
from ..errors import InvalidRegion, SimulationWarning, WarningCode
from ..genome import SequenceAccessor
from .model import (
    SequencingRead,
    SequencingResult,
    SequencingStats,
    TechnologyProfile,
    Variant,
    VariantType,
)
from .report import generate_report

LOGGER = logging.getLogger(__name__)

MIN_PHRED = 2
MAX_PHRED = 41
ERROR_PHRED_CAP = 10
QUALITY_DECAY = 0.3
QUALITY_NOISE_SD = 5.0
SUBSTITUTION_FRACTION = 0.9
MIN_INSERT_SIZE = 300
INSERT_SIZE_SPREAD = 200

LOW_COVERAGE_THRESHOLD = 10.0
LOW_Q30_THRESHOLD = 80.0
GC_RANGE = (0.35, 0.65)
MIN_ALLELE_FREQUENCY = 0.1


def _resolve_region(genome_length: int, region_start: int, region_length: Optional[int]) -> Tuple[int, int]:
    if region_length is None:
        return 0, genome_length
    if region_length <= 0:
        raise InvalidRegion(f"Region length must be positive, got {region_length}.")
    if region_start < 0 or region_start >= genome_length:
        raise InvalidRegion(f"Region start {region_start} outside genome of length {genome_length}.")
    return region_start, min(region_length, genome_length - region_start)


def _clamp_phred(value: int) -> int:
    return max(MIN_PHRED, min(MAX_PHRED, value))


def generate_read(
    genome: SequenceAccessor,
    position: int,
    profile: TechnologyProfile,
    read_id: str,
    reversed_strand: bool,
    mate_id: Optional[str],
    rng: random.Random,
) -> SequencingRead:
    read_length = profile.read_length
    sequence = bioinformatics.normalize_sequence(genome.get_sequence(position, read_length))
    if reversed_strand:
        sequence = bioinformatics.reverse_complement(sequence)

    bases: List[str] = []
    qualities: List[int] = []
    for i, base in enumerate(sequence):
        position_effect = 1.0 - i / read_length * QUALITY_DECAY
        quality = int(profile.avg_quality * position_effect)
        quality = _clamp_phred(int(quality + rng.gauss(0.0, QUALITY_NOISE_SD)))
        if rng.random() < profile.error_rate:
            error_type = rng.random()
            if error_type < SUBSTITUTION_FRACTION:
                base = bioinformatics.substitute_base(rng, base)
                quality = min(quality, ERROR_PHRED_CAP)
            elif profile.supports_indels:
                quality = min(quality, ERROR_PHRED_CAP)
                if error_type < SUBSTITUTION_FRACTION + (1 - SUBSTITUTION_FRACTION) / 2:
                    continue
                bases.append(base)
                qualities.append(quality)
                base = bioinformatics.random_sequence(rng, 1)
        bases.append(base)
        qualities.append(quality)
    return SequencingRead(
        id=read_id,
        sequence="".join(bases),
        quality_scores=tuple(qualities),
        reference_position=position,
        is_reversed=reversed_strand,
        mate_id=mate_id,
    )


def calculate_n50(reads: Iterable[SequencingRead]) -> int:
    lengths = sorted((len(read.sequence) for read in reads), reverse=True)
    half = sum(lengths) // 2
    cumulative = 0
    for length in lengths:
        cumulative += length
        if cumulative >= half:
            return length
    return 0


def calculate_stats(
    reads: Sequence[SequencingRead], region_length: int, profile: TechnologyProfile
) -> SequencingStats:
    if not reads:
        return SequencingStats()
    qualities = np.fromiter(
        (q for read in reads for q in read.quality_scores), dtype=np.int64
    )
    codes = bioinformatics.encode_sequence_to_uint8("".join(read.sequence for read in reads))
    total_bases = int(codes.size)
    if total_bases == 0:
        return SequencingStats(total_reads=len(reads))
    coverage = total_bases / region_length
    return SequencingStats(
        total_reads=len(reads),
        total_bases=total_bases,
        mean_read_length=total_bases / len(reads),
        mean_quality=float(qualities.sum()) / total_bases,
        q30_percentage=float(np.count_nonzero(qualities >= 30)) / total_bases * 100,
        coverage_depth=coverage,
        gc_content=float(np.count_nonzero((codes == 1) | (codes == 2))) / total_bases,
        estimated_variants=int(region_length * 0.001 * (coverage / 30)),
        additional_metrics={
            "technology": profile.description,
            "read_length": profile.read_length,
            "paired_end": profile.paired_end,
            "n50": calculate_n50(reads),
        },
    )


def _quality_warnings(stats: SequencingStats) -> List[SimulationWarning]:
    warnings: List[SimulationWarning] = []
    if stats.coverage_depth < LOW_COVERAGE_THRESHOLD:
        warnings.append(SimulationWarning(WarningCode.LOW_COVERAGE, "Low coverage: <10x may miss variants"))
    if stats.q30_percentage < LOW_Q30_THRESHOLD:
        warnings.append(SimulationWarning(WarningCode.LOW_QUALITY, "Low quality: <80% bases at Q30"))
    if not GC_RANGE[0] <= stats.gc_content <= GC_RANGE[1]:
        warnings.append(
            SimulationWarning(
                WarningCode.UNUSUAL_GC_CONTENT, "Unusual GC content may indicate contamination or bias"
            )
        )
    return warnings


def run_sequencing(
    genome: SequenceAccessor,
    profile: TechnologyProfile,
    target_coverage: int = 30,
    region_start: int = 0,
    region_length: Optional[int] = None,
    *,
    rng: random.Random,
) -> SequencingResult:
    """
    Sequence ``region_length`` bases from ``region_start`` (whole genome when
    ``region_length`` is None) to ``target_coverage`` depth.
    """

    if target_coverage < 0:
        raise ValueError(f"target_coverage must be >= 0, got {target_coverage}.")
    genome_length = genome.total_length()
    if genome_length == 0:
        raise InvalidRegion("Cannot sequence an empty genome.")
    region_start, region_length = _resolve_region(genome_length, region_start, region_length)

    read_length = profile.read_length
    num_reads = int(region_length * target_coverage // read_length)
    if profile.paired_end:
        num_reads //= 2
    LOGGER.debug(
        "run_sequencing technology=%s region=%s+%s coverage=%s reads=%s",
        profile.name,
        region_start,
        region_length,
        target_coverage,
        num_reads,
    )

    reads: List[SequencingRead] = []
    for counter in range(num_reads):
        position = region_start + int(rng.random() * (region_length - read_length))
        position = max(region_start, min(position, region_start + region_length - read_length))
        if profile.paired_end:
            insert_size = MIN_INSERT_SIZE + rng.randrange(INSERT_SIZE_SPREAD)
            first_id = f"READ_{counter:08d}/1"
            second_id = f"READ_{counter:08d}/2"
            mate_position = position + insert_size - read_length
            has_mate = mate_position > 0 and mate_position + read_length <= genome_length
            reads.append(
                generate_read(genome, position, profile, first_id, False, second_id if has_mate else None, rng)
            )
            if has_mate:
                reads.append(generate_read(genome, mate_position, profile, second_id, True, first_id, rng))
        else:
            reversed_strand = rng.random() < 0.5
            reads.append(
                generate_read(genome, position, profile, f"READ_{counter:08d}", reversed_strand, None, rng)
            )
        if LOGGER.isEnabledFor(logging.DEBUG) and (counter + 1) % 10000 == 0:
            LOGGER.debug("run_sequencing progress: %s/%s fragments", counter + 1, num_reads)

    stats = calculate_stats(reads, region_length, profile)
    warnings = _quality_warnings(stats)
    LOGGER.debug(
        "run_sequencing completed: reads=%s mean_quality=%.2f q30=%.1f coverage=%.1f",
        stats.total_reads,
        stats.mean_quality,
        stats.q30_percentage,
        stats.coverage_depth,
    )
    return SequencingResult(
        reads=tuple(reads),
        stats=stats,
        technology=profile,
        warnings=tuple(warnings),
        report=generate_report(stats, profile, warnings),
        success=bool(reads),
    )


def _forward_orientation(read: SequencingRead) -> Tuple[str, Sequence[int]]:
    if read.is_reversed:
        return bioinformatics.reverse_complement(read.sequence), read.quality_scores[::-1]
    return read.sequence, read.quality_scores


def call_variants(
    reads: Iterable[SequencingRead],
    reference: SequenceAccessor,
    min_depth: int = 10,
    min_quality: float = 20.0,
) -> List[Variant]:
    """
    Minimal pileup SNP caller.

    An alternate allele is reported when it is seen at least
    ``min_depth // 3`` times, its mean base quality reaches ``min_quality``
    and its frequency is at least 0.1.
    """

    if min_depth < 0:
        raise ValueError(f"min_depth must be >= 0, got {min_depth}.")
    pileup: Dict[int, List[Tuple[str, int]]] = defaultdict(list)
    for read in reads:
        sequence, qualities = _forward_orientation(read)
        for offset, (base, quality) in enumerate(zip(sequence, qualities)):
            pileup[read.reference_position + offset].append((base, quality))

    min_alt_count = min_depth // 3
    variants: List[Variant] = []
    for position in sorted(pileup):
        observations = pileup[position]
        depth = len(observations)
        if depth < min_depth:
            continue
        ref_base = reference.get_sequence(position, 1).upper()
        if not ref_base or ref_base == "N":
            continue
        counts = Counter(base for base, _ in observations)
        for alt_base in sorted(counts):
            count = counts[alt_base]
            if alt_base in (ref_base, "N") or count < min_alt_count:
                continue
            alt_qualities = [quality for base, quality in observations if base == alt_base]
            avg_quality = sum(alt_qualities) / len(alt_qualities)
            frequency = count / depth
            if avg_quality >= min_quality and frequency >= MIN_ALLELE_FREQUENCY:
                variants.append(
                    Variant(
                        position=position,
                        ref_allele=ref_base,
                        alt_allele=alt_base,
                        type=VariantType.SNP,
                        depth=depth,
                        allele_frequency=frequency,
                        quality=avg_quality,
                    )
                )
    LOGGER.debug("call_variants positions=%s variants=%s", len(pileup), len(variants))
    return variants


__all__ = [
    "generate_read",
    "calculate_n50",
    "calculate_stats",
    "run_sequencing",
    "call_variants",
]
