"""
PCR primer design and amplification simulation.

Primer candidates are scored with simple thermodynamic heuristics; a run
locates both binding sites on the template, derives a per-cycle efficiency
from the primer pair and reaction setup, grows copies exponentially and
injects polymerase substitution errors with the caller's ``rng``.
"""
from __future__ import annotations

import logging
import random
from typing import List, Tuple

from .. import bioinformatics
from ..errors import InvalidRegion, SimulationWarning, WarningCode
from ..genome import SequenceAccessor
from .model import PcrQualityMetrics, PcrResult, Primer, ReactionParameters
from .rules import (
    design_primer,
    find_k_mismatch_hit,
    is_primer_acceptable,
    primers_complementary,
    score_primer_pair,
)

LOGGER = logging.getLogger(__name__)

FLANK_EXTRA = 50
SEARCH_CHUNK_SIZE = 10_000
MAX_BINDING_MISMATCHES = 2
MAX_STANDARD_AMPLICON = 10_000
MAX_TM_DIFFERENCE = 5.0

BASE_EFFICIENCY = 0.95
MIN_EFFICIENCY = 0.5
MAX_EFFICIENCY = 1.0


def design_primers(
    genome: SequenceAccessor,
    target_start: int,
    target_end: int,
    primer_length: int = 20,
) -> List[Primer]:
    """
    Return ``[forward, reverse]`` flanking the target, or ``[]`` if no
    acceptable pair exists.
    """

    if primer_length <= 0:
        raise ValueError(f"primer_length must be positive, got {primer_length}.")
    total = genome.total_length()
    if target_start < 0 or target_end <= target_start or target_end > total:
        raise InvalidRegion(f"Invalid target region [{target_start}, {target_end}) for genome of length {total}.")

    flank = primer_length + FLANK_EXTRA
    upstream_start = max(0, target_start - flank)
    upstream = bioinformatics.normalize_sequence(
        genome.get_sequence(upstream_start, target_start - upstream_start)
    )
    downstream = bioinformatics.normalize_sequence(genome.get_sequence(target_end, flank))

    forward: List[Primer] = []
    for i in range(len(upstream) - primer_length + 1):
        primer = design_primer(upstream[i : i + primer_length], True)
        if is_primer_acceptable(primer):
            forward.append(primer)
    reverse: List[Primer] = []
    for i in range(len(downstream) - primer_length + 1):
        window = downstream[i : i + primer_length]
        primer = design_primer(bioinformatics.reverse_complement(window), False)
        if is_primer_acceptable(primer):
            reverse.append(primer)

    LOGGER.debug(
        "design_primers target=[%s,%s) forward_candidates=%s reverse_candidates=%s",
        target_start,
        target_end,
        len(forward),
        len(reverse),
    )
    if not forward or not reverse:
        return []

    best_f, best_r = forward[0], reverse[0]
    best_score = 0.0
    for f_primer in forward:
        for r_primer in reverse:
            score = score_primer_pair(f_primer, r_primer)
            if score > best_score:
                best_score = score
                best_f, best_r = f_primer, r_primer
    return [best_f, best_r]


def find_primer_binding_site(genome: SequenceAccessor, primer: Primer, start: int, end: int) -> int:
    """First template position where the primer anneals (exact, then <=2 mismatches), or -1."""

    query = primer.sequence if primer.is_forward else bioinformatics.reverse_complement(primer.sequence)
    step = max(1, SEARCH_CHUNK_SIZE - len(primer.sequence))
    pos = start
    while pos < end:
        chunk_len = min(SEARCH_CHUNK_SIZE, end - pos)
        chunk = bioinformatics.normalize_sequence(genome.get_sequence(pos, chunk_len))
        idx = chunk.find(query)
        if idx >= 0:
            return pos + idx
        idx = find_k_mismatch_hit(chunk, query, MAX_BINDING_MISMATCHES)
        if idx >= 0:
            return pos + idx
        pos += step
    return -1


def calculate_efficiency(forward: Primer, reverse: Primer, params: ReactionParameters) -> float:
    efficiency = BASE_EFFICIENCY
    if abs(forward.melting_temperature - reverse.melting_temperature) > MAX_TM_DIFFERENCE:
        efficiency -= 0.1
    optimal_annealing = (forward.melting_temperature + reverse.melting_temperature) / 2 - 5
    if abs(params.annealing_temp - optimal_annealing) > 5:
        efficiency -= 0.15
    for primer in (forward, reverse):
        if not 0.4 <= primer.gc_content <= 0.6:
            efficiency -= 0.05
        if primer.has_self_complementarity:
            efficiency -= 0.1
    return max(MIN_EFFICIENCY, min(MAX_EFFICIENCY, efficiency))


def copy_estimate(efficiency: float, cycles: int) -> float:
    return (1.0 + efficiency) ** cycles


def introduce_errors(
    template: str, error_rate: float, cycles: int, rng: random.Random
) -> Tuple[str, List[str]]:
    """Substitute each base with probability ``error_rate * cycles``; log ``index:orig>new``."""

    per_base = error_rate * cycles
    bases = list(template)
    mutations: List[str] = []
    for i, original in enumerate(bases):
        if rng.random() < per_base:
            new_base = bioinformatics.substitute_base(rng, original)
            bases[i] = new_base
            mutations.append(f"{i}:{original}>{new_base}")
    return "".join(bases), mutations


def run_pcr(
    genome: SequenceAccessor,
    forward: Primer,
    reverse: Primer,
    params: ReactionParameters | None = None,
    *,
    rng: random.Random,
) -> PcrResult:
    """Amplify the region between ``forward`` and ``reverse`` on ``genome``."""

    params = params or ReactionParameters.standard()
    warnings: List[SimulationWarning] = []

    tm_diff = abs(forward.melting_temperature - reverse.melting_temperature)
    if tm_diff > MAX_TM_DIFFERENCE:
        warnings.append(
            SimulationWarning(WarningCode.PRIMER_TM_MISMATCH, f"Primer Tm difference too large: {tm_diff:.1f}°C")
        )
    if primers_complementary(forward.sequence, reverse.sequence):
        warnings.append(
            SimulationWarning(WarningCode.PRIMER_COMPLEMENTARITY, "Primers may form dimers with each other")
        )

    total = genome.total_length()
    forward_site = find_primer_binding_site(genome, forward, 0, total)
    if forward_site < 0:
        warnings.append(
            SimulationWarning(WarningCode.PRIMER_BINDING_NOT_FOUND, "Forward primer binding site not found")
        )
        LOGGER.debug("run_pcr failed: forward primer %s does not bind", forward.sequence)
        return PcrResult.failed(warnings)
    reverse_site = find_primer_binding_site(genome, reverse, forward_site, total)
    if reverse_site < 0:
        warnings.append(
            SimulationWarning(WarningCode.PRIMER_BINDING_NOT_FOUND, "Reverse primer binding site not found")
        )
        LOGGER.debug("run_pcr failed: reverse primer %s does not bind", reverse.sequence)
        return PcrResult.failed(warnings)

    length = reverse_site - forward_site + len(reverse.sequence)
    if length > MAX_STANDARD_AMPLICON:
        warnings.append(
            SimulationWarning(WarningCode.AMPLICON_TOO_LONG, f"Amplicon too long for standard PCR: {length}bp")
        )
    template = bioinformatics.normalize_sequence(genome.get_sequence(forward_site, length))

    efficiency = calculate_efficiency(forward, reverse, params)
    copies = copy_estimate(efficiency, params.cycles)
    error_rate = params.polymerase_error_rate
    amplicon, mutations = introduce_errors(template, error_rate, params.cycles, rng)

    pair_specificity = (forward.specificity + reverse.specificity) / 2
    has_dimers = forward.has_dimer_risk or reverse.has_dimer_risk
    has_non_specific = rng.random() < (1 - pair_specificity)
    quality = PcrQualityMetrics(
        efficiency=efficiency,
        specificity=pair_specificity,
        has_primer_dimers=has_dimers,
        has_non_specific_bands=has_non_specific,
        estimated_purity=0.7 if has_dimers or has_non_specific else 0.95,
    )
    if has_dimers:
        warnings.append(SimulationWarning(WarningCode.PRIMER_DIMER, "Primer dimers detected"))
    if has_non_specific:
        warnings.append(
            SimulationWarning(WarningCode.NON_SPECIFIC_AMPLIFICATION, "Non-specific amplification detected")
        )
    if mutations:
        warnings.append(SimulationWarning(WarningCode.PCR_ERRORS, f"PCR errors introduced: {len(mutations)}"))

    LOGGER.debug(
        "run_pcr amplicon=%sbp start=%s efficiency=%.3f cycles=%s mutations=%s",
        length,
        forward_site,
        efficiency,
        params.cycles,
        len(mutations),
    )
    return PcrResult(
        success=True,
        amplicon=amplicon,
        length=length,
        relative_yield=efficiency,
        copy_estimate=copies,
        error_rate=error_rate,
        mutations=tuple(mutations),
        warnings=tuple(warnings),
        quality=quality,
        template_start=forward_site,
    )


__all__ = [
    "design_primers",
    "find_primer_binding_site",
    "calculate_efficiency",
    "copy_estimate",
    "introduce_errors",
    "run_pcr",
]
