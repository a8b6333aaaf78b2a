"""CRISPR target-site and edit-outcome records."""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Tuple


@dataclass(frozen=True)
class TargetSite:
    """PAM-adjacent protospacer found by a PAM search."""

    position: int  # absolute PAM start
    protospacer: str
    pam_sequence: str
    on_target_score: float
    off_target_risk: float


class EditType(str, Enum):
    NO_CHANGE = "no_change"
    DELETION = "deletion"
    INSERTION = "insertion"
    REPLACEMENT = "replacement"
    POINT_MUTATION = "point_mutation"
    COMPLEX_INDEL = "complex_indel"


class RepairPathway(str, Enum):
    NONE = "NONE"
    NHEJ = "NHEJ"
    HDR = "HDR"


@dataclass(frozen=True)
class EditOutcome:
    """
    Molecular result of an editing attempt.

    Build instances through the per-variant constructors so every variant
    carries a consistent size/sequence pair.
    """

    type: EditType
    position: int
    size: int
    sequence: str = ""
    description: str = ""

    def __post_init__(self) -> None:
        if self.position < 0:
            raise ValueError(f"Outcome position must be >= 0, got {self.position}.")
        if self.size < 0:
            raise ValueError(f"Outcome size must be >= 0, got {self.size}.")

    @classmethod
    def no_change(cls, position: int, description: str = "No double-strand break induced") -> "EditOutcome":
        return cls(EditType.NO_CHANGE, position, 0, "", description)

    @classmethod
    def deletion(cls, position: int, size: int, description: str | None = None) -> "EditOutcome":
        return cls(EditType.DELETION, position, size, "", description or f"Deletion of {size}bp")

    @classmethod
    def insertion(cls, position: int, sequence: str, description: str | None = None) -> "EditOutcome":
        size = len(sequence)
        return cls(EditType.INSERTION, position, size, sequence, description or f"Insertion of {size}bp")

    @classmethod
    def replacement(cls, position: int, sequence: str, description: str | None = None) -> "EditOutcome":
        return cls(
            EditType.REPLACEMENT,
            position,
            len(sequence),
            sequence,
            description or f"Replacement of {len(sequence)}bp",
        )

    @classmethod
    def point_mutation(cls, position: int, base: str, description: str | None = None) -> "EditOutcome":
        if len(base) != 1:
            raise ValueError("Point mutations carry exactly one base.")
        return cls(EditType.POINT_MUTATION, position, 1, base, description or f"Point mutation to {base}")

    @classmethod
    def complex_indel(
        cls, position: int, deleted: int, inserted: str, description: str | None = None
    ) -> "EditOutcome":
        return cls(
            EditType.COMPLEX_INDEL,
            position,
            deleted,
            inserted,
            description or f"Complex indel (-{deleted}bp/+{len(inserted)}bp)",
        )

    @property
    def is_indel(self) -> bool:
        return self.type in (EditType.DELETION, EditType.INSERTION, EditType.COMPLEX_INDEL)

    @property
    def is_frameshift(self) -> bool:
        return self.size % 3 != 0


@dataclass(frozen=True)
class EditingQualityMetrics:
    indel_frequency: float
    frameshift_probability: float
    average_indel_size: float
    mosaicism_level: float
    outcome_distribution: Dict[str, float] = field(default_factory=dict)


@dataclass(frozen=True)
class EditingResult:
    primary_outcome: EditOutcome
    byproducts: Tuple[EditOutcome, ...]
    editing_efficiency: float
    has_off_target_effects: bool
    repair_pathway: RepairPathway
    quality_metrics: EditingQualityMetrics

    @property
    def outcomes(self) -> Tuple[EditOutcome, ...]:
        return (self.primary_outcome, *self.byproducts)


__all__ = [
    "TargetSite",
    "EditType",
    "RepairPathway",
    "EditOutcome",
    "EditingQualityMetrics",
    "EditingResult",
]
