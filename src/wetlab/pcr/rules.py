"""Primer heuristics: melting temperature, specificity and complementarity checks."""
from __future__ import annotations

from typing import List

from .. import bioinformatics
from .model import Primer

TM_BASE = 64.9
TM_GC_CONTRIB = 0.41
TM_LENGTH_PENALTY = 600.0

MIN_PRIMER_TM = 55.0
MAX_PRIMER_TM = 65.0
MIN_PRIMER_GC = 0.4
MAX_PRIMER_GC = 0.6


def melting_temperature(sequence: str) -> float:
    """Tm = 64.9 + 0.41 * (GC - 16.4) * 100 / N - 600 / N."""

    length = len(sequence)
    if length == 0:
        raise ValueError("Cannot compute Tm of an empty primer.")
    gc = bioinformatics.gc_count(sequence)
    return TM_BASE + TM_GC_CONTRIB * (gc - 16.4) * 100 / length - TM_LENGTH_PENALTY / length


def has_repeats(sequence: str) -> bool:
    """True if any 5' prefix of length 3..N/2 reappears later in the primer."""

    for size in range(3, len(sequence) // 2 + 1):
        if sequence.find(sequence[:size], size) != -1:
            return True
    return False


def specificity(sequence: str) -> float:
    score = 0.8
    if has_repeats(sequence):
        score -= 0.2
    if len(set(sequence)) < 4:
        score -= 0.1
    return max(0.0, min(1.0, score))


def has_self_complementarity(sequence: str) -> bool:
    """The 3' hexamer anneals somewhere on the primer's own reverse complement."""

    return sequence[-6:] in bioinformatics.reverse_complement(sequence)


def has_dimer_risk(sequence: str) -> bool:
    return bioinformatics.reverse_complement(sequence[-4:]) in sequence


def primers_complementary(first: str, second: str) -> bool:
    second_end_comp = bioinformatics.reverse_complement(second[-4:])
    return second_end_comp in first or first[-4:] == second_end_comp


def design_primer(sequence: str, is_forward: bool) -> Primer:
    """Build a :class:`Primer` with all derived properties filled in."""

    normalized = bioinformatics.normalize_sequence(sequence)
    if not normalized:
        raise ValueError("Primer sequence must not be empty.")
    return Primer(
        sequence=normalized,
        is_forward=is_forward,
        melting_temperature=melting_temperature(normalized),
        gc_content=bioinformatics.gc_content(normalized),
        specificity=specificity(normalized),
        has_self_complementarity=has_self_complementarity(normalized),
        has_dimer_risk=has_dimer_risk(normalized),
    )


def is_primer_acceptable(primer: Primer) -> bool:
    if not MIN_PRIMER_TM <= primer.melting_temperature <= MAX_PRIMER_TM:
        return False
    if not MIN_PRIMER_GC <= primer.gc_content <= MAX_PRIMER_GC:
        return False
    if primer.has_self_complementarity and primer.specificity < 0.5:
        return False
    return True


def score_primer_pair(forward: Primer, reverse: Primer) -> float:
    score = max(0.0, 10.0 - abs(forward.melting_temperature - reverse.melting_temperature))
    score += (1.0 - abs(forward.gc_content - 0.5)) * 5.0
    score += (1.0 - abs(reverse.gc_content - 0.5)) * 5.0
    score += forward.specificity * 10.0
    score += reverse.specificity * 10.0
    if forward.has_self_complementarity:
        score -= 5.0
    if reverse.has_self_complementarity:
        score -= 5.0
    if forward.has_dimer_risk:
        score -= 3.0
    if reverse.has_dimer_risk:
        score -= 3.0
    return score


def find_k_mismatch_hit(seq: str, query: str, k: int) -> int:
    """Index of the first window within ``k`` mismatches of ``query``, or -1."""

    n, m = len(seq), len(query)
    if m == 0 or n < m:
        return -1
    for i in range(0, n - m + 1):
        mismatches = 0
        for j in range(m):
            if seq[i + j] != query[j]:
                mismatches += 1
                if mismatches > k:
                    break
        if mismatches <= k:
            return i
    return -1


__all__ = [
    "melting_temperature",
    "has_repeats",
    "specificity",
    "has_self_complementarity",
    "has_dimer_risk",
    "primers_complementary",
    "design_primer",
    "is_primer_acceptable",
    "score_primer_pair",
    "find_k_mismatch_hit",
]
