"""
CRISPR-Cas9 editing simulation.

PAM discovery, heuristic on/off-target scoring and a repair model that
branches between no edit, homology-directed repair and non-homologous end
joining. Every stochastic draw comes from the ``rng`` passed by the caller,
so a seeded generator reproduces a call exactly.
"""
from __future__ import annotations

import logging
import random
from typing import Dict, List, Optional

from .. import bioinformatics
from ..errors import InvalidRegion, UnsupportedPamPattern
from ..genome import DigitalGenome, SequenceAccessor, read_window
from .model import (
    EditingQualityMetrics,
    EditingResult,
    EditOutcome,
    EditType,
    RepairPathway,
    TargetSite,
)

LOGGER = logging.getLogger(__name__)

SPCAS9_PAM = "NGG"
SACAS9_PAM = "NNGRRT"
CAS12A_PAM = "TTTN"

PROTOSPACER_LENGTH = 20
SEED_LENGTH = 12
CUT_OFFSET = 3
MIN_PAM_LENGTH = 3
MAX_PAM_LENGTH = 6

NO_EDIT_PROBABILITY = 0.05
HDR_PROBABILITY = 0.10
DELETION_PROBABILITY = 0.75
BYPRODUCT_COUNT = 5

MAX_DELETION_SIZE = 30
MAX_INSERTION_SIZE = 10

REPETITIVE_MOTIFS = ("AAAA", "TTTT", "GGGG", "CCCC", "ATAT", "GCGC")
PREFERRED_PAMS = frozenset({"AGG", "TGG"})
_PAM_ALPHABET = frozenset("ACGT") | frozenset(bioinformatics.IUPAC_CODES)

OUTCOME_DISTRIBUTIONS: Dict[RepairPathway, Dict[str, float]] = {
    RepairPathway.NONE: {"no_edit": 1.0},
    RepairPathway.HDR: {
        "hdr_success": 0.10,
        "partial_hdr": 0.05,
        "nhej_background": 0.85,
    },
    RepairPathway.NHEJ: {
        "deletion_1bp": 0.25,
        "deletion_2-5bp": 0.30,
        "deletion_6-20bp": 0.20,
        "insertion_1bp": 0.15,
        "insertion_2-5bp": 0.05,
        "complex_indel": 0.05,
    },
}


def validate_pam_pattern(pattern: str) -> str:
    """Return the upper-cased pattern or raise UnsupportedPamPattern."""

    normalized = (pattern or "").strip().upper()
    if not MIN_PAM_LENGTH <= len(normalized) <= MAX_PAM_LENGTH:
        raise UnsupportedPamPattern(
            f"PAM pattern must be {MIN_PAM_LENGTH}-{MAX_PAM_LENGTH} bases, got {pattern!r}."
        )
    invalid = set(normalized) - _PAM_ALPHABET
    if invalid:
        raise UnsupportedPamPattern(
            f"PAM pattern {pattern!r} uses unsupported codes: {''.join(sorted(invalid))}."
        )
    return normalized


def has_low_complexity(sequence: str) -> bool:
    """True when fewer than 8 distinct dinucleotides occur."""

    dimers = {sequence[i : i + 2] for i in range(len(sequence) - 1)}
    return len(dimers) < 8


def on_target_base_score(protospacer: str, pam: str) -> float:
    score = 0.5
    if protospacer.endswith("G"):
        score += 0.1
    seed_gc = bioinformatics.gc_content(protospacer[:SEED_LENGTH])
    if 0.4 <= seed_gc <= 0.7:
        score += 0.15
    if "TTTT" not in protospacer:
        score += 0.1
    if pam in PREFERRED_PAMS:
        score += 0.05
    return score


def on_target_score(protospacer: str, pam: str, rng: random.Random) -> float:
    jitter = rng.random() * 0.1
    return min(1.0, max(0.0, on_target_base_score(protospacer, pam) + jitter))


def off_target_risk(protospacer: str) -> float:
    risk = 0.1
    if has_low_complexity(protospacer):
        risk += 0.2
    for motif in REPETITIVE_MOTIFS:
        if motif in protospacer:
            risk += 0.05
    return min(1.0, max(0.0, risk))


def find_pam_sites(
    genome: SequenceAccessor,
    start: int,
    length: int,
    pam_pattern: str = SPCAS9_PAM,
    *,
    rng: random.Random,
) -> List[TargetSite]:
    """
    Scan ``[start, start + length)`` for PAM matches with a full protospacer upstream.

    Positions in the returned sites are absolute PAM starts.
    """

    pattern = validate_pam_pattern(pam_pattern)
    sequence = read_window(genome, start, length)
    pam_len = len(pattern)
    LOGGER.debug("find_pam_sites start=%s length=%s pam=%s", start, len(sequence), pattern)

    sites: List[TargetSite] = []
    for idx in range(PROTOSPACER_LENGTH, len(sequence) - pam_len + 1):
        candidate = sequence[idx : idx + pam_len]
        if not bioinformatics.matches_pattern(candidate, pattern):
            continue
        protospacer = sequence[idx - PROTOSPACER_LENGTH : idx]
        sites.append(
            TargetSite(
                position=start + idx,
                protospacer=protospacer,
                pam_sequence=candidate,
                on_target_score=on_target_score(protospacer, candidate, rng),
                off_target_risk=off_target_risk(protospacer),
            )
        )
    LOGGER.debug("find_pam_sites found %s sites", len(sites))
    return sites


def sample_indel_size(rng: random.Random, is_deletion: bool) -> int:
    """Draw an indel size: 40% 1bp, 30% 2-5bp, 20% 6-15bp, 10% 16bp up to the cap."""

    max_size = MAX_DELETION_SIZE if is_deletion else MAX_INSERTION_SIZE
    roll = rng.random()
    if roll < 0.4:
        size = 1
    elif roll < 0.7:
        size = rng.randint(2, 5)
    elif roll < 0.9:
        size = rng.randint(6, 15)
    elif max_size >= 16:
        size = rng.randint(16, max_size)
    else:
        size = max_size
    return min(size, max_size)


def _cut_site(site: TargetSite) -> int:
    return max(0, site.position - CUT_OFFSET)


def _nhej_repair(site: TargetSite, rng: random.Random) -> EditOutcome:
    cut_site = _cut_site(site)
    if rng.random() < DELETION_PROBABILITY:
        size = sample_indel_size(rng, is_deletion=True)
        return EditOutcome.deletion(cut_site, size, f"NHEJ-mediated deletion of {size}bp")
    size = sample_indel_size(rng, is_deletion=False)
    inserted = bioinformatics.random_sequence(rng, size)
    return EditOutcome.insertion(cut_site, inserted, f"NHEJ-mediated insertion of {size}bp")


def _hdr_repair(site: TargetSite, template: str) -> EditOutcome:
    return EditOutcome.replacement(_cut_site(site), template, "HDR-mediated precise integration")


def _quality_metrics(
    primary: EditOutcome, byproducts: List[EditOutcome], pathway: RepairPathway
) -> EditingQualityMetrics:
    outcomes = [primary, *byproducts]
    count = len(outcomes)
    return EditingQualityMetrics(
        indel_frequency=sum(1 for outcome in outcomes if outcome.is_indel) / count,
        frameshift_probability=sum(1 for outcome in outcomes if outcome.is_frameshift) / count,
        average_indel_size=sum(outcome.size for outcome in outcomes) / count,
        mosaicism_level=len({outcome.size for outcome in outcomes}) / count,
        outcome_distribution=dict(OUTCOME_DISTRIBUTIONS[pathway]),
    )


def perform_editing(
    genome: SequenceAccessor,
    target_site: TargetSite,
    hdr_template: Optional[str] = None,
    *,
    rng: random.Random,
) -> EditingResult:
    """Simulate cutting at ``target_site`` and repairing the break."""

    total = genome.total_length()
    if not 0 <= target_site.position <= total:
        raise InvalidRegion(f"Target position {target_site.position} outside genome of length {total}.")
    template = None
    if hdr_template is not None:
        template = bioinformatics.normalize_sequence(hdr_template)
        if not template:
            raise ValueError("HDR template must not be empty.")

    roll = rng.random()
    if roll < NO_EDIT_PROBABILITY:
        pathway = RepairPathway.NONE
        primary = EditOutcome.no_change(target_site.position)
    elif template is not None and roll < NO_EDIT_PROBABILITY + HDR_PROBABILITY:
        pathway = RepairPathway.HDR
        primary = _hdr_repair(target_site, template)
    else:
        pathway = RepairPathway.NHEJ
        primary = _nhej_repair(target_site, rng)

    byproducts = [_nhej_repair(target_site, rng) for _ in range(BYPRODUCT_COUNT)]
    off_target = rng.random() < target_site.off_target_risk
    LOGGER.debug(
        "perform_editing position=%s pathway=%s primary=%s off_target=%s",
        target_site.position,
        pathway.value,
        primary.type.value,
        off_target,
    )
    return EditingResult(
        primary_outcome=primary,
        byproducts=tuple(byproducts),
        editing_efficiency=target_site.on_target_score,
        has_off_target_effects=off_target,
        repair_pathway=pathway,
        quality_metrics=_quality_metrics(primary, byproducts, pathway),
    )


def apply_outcome(genome: SequenceAccessor, outcome: EditOutcome, name: str | None = None) -> DigitalGenome:
    """Materialize an edit outcome into a new genome."""

    sequence = genome.get_sequence(0, genome.total_length())
    pos = min(outcome.position, len(sequence))
    if outcome.type is EditType.DELETION:
        edited = sequence[:pos] + sequence[pos + outcome.size :]
    elif outcome.type is EditType.INSERTION:
        edited = sequence[:pos] + outcome.sequence + sequence[pos:]
    elif outcome.type is EditType.POINT_MUTATION:
        edited = sequence[:pos] + outcome.sequence + sequence[pos + 1 :]
    elif outcome.type in (EditType.REPLACEMENT, EditType.COMPLEX_INDEL):
        edited = sequence[:pos] + outcome.sequence + sequence[pos + outcome.size :]
    else:
        edited = sequence
    base_name = getattr(genome, "name", "genome")
    return DigitalGenome(sequence=edited, name=name or f"{base_name}:edited")


__all__ = [
    "SPCAS9_PAM",
    "SACAS9_PAM",
    "CAS12A_PAM",
    "PROTOSPACER_LENGTH",
    "validate_pam_pattern",
    "on_target_score",
    "off_target_risk",
    "find_pam_sites",
    "sample_indel_size",
    "perform_editing",
    "apply_outcome",
]
