"""Sequencing technology profiles, reads, stats and variant records."""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Tuple

from ..errors import SimulationWarning


@dataclass(frozen=True)
class TechnologyProfile:
    name: str
    read_length: int
    paired_end: bool
    error_rate: float
    avg_quality: int
    description: str
    supports_indels: bool = False


TECHNOLOGY_PROFILES: Dict[str, TechnologyProfile] = {
    profile.name: profile
    for profile in (
        TechnologyProfile("ILLUMINA_SE50", 50, False, 0.001, 40, "Illumina Short-read 50bp SE"),
        TechnologyProfile("ILLUMINA_SE150", 150, False, 0.001, 35, "Illumina Short-read 150bp SE"),
        TechnologyProfile("ILLUMINA_PE150", 150, True, 0.001, 35, "Illumina Short-read 150bp PE"),
        TechnologyProfile("ILLUMINA_PE300", 300, True, 0.002, 30, "Illumina MiSeq 300bp PE"),
        TechnologyProfile("PACBIO_HIFI", 15000, False, 0.001, 30, "PacBio HiFi Long-read"),
        TechnologyProfile("PACBIO_CLR", 20000, False, 0.10, 10, "PacBio CLR Long-read", True),
        TechnologyProfile("NANOPORE_R10", 30000, False, 0.05, 15, "Oxford Nanopore R10", True),
        TechnologyProfile("SANGER", 800, False, 0.0001, 50, "Sanger Sequencing"),
    )
}


def resolve_profile(name: str) -> TechnologyProfile:
    key = (name or "").strip().upper()
    try:
        return TECHNOLOGY_PROFILES[key]
    except KeyError as exc:
        raise ValueError(
            f"Unknown sequencing technology: {name}. Choose from {', '.join(TECHNOLOGY_PROFILES)}."
        ) from exc


@dataclass(frozen=True)
class SequencingRead:
    id: str
    sequence: str
    quality_scores: Tuple[int, ...]
    reference_position: int
    is_reversed: bool
    mate_id: Optional[str] = None

    def quality_string(self) -> str:
        """Phred+33 encoded qualities."""
        return "".join(chr(q + 33) for q in self.quality_scores)

    def average_quality(self) -> float:
        if not self.quality_scores:
            return 0.0
        return sum(self.quality_scores) / len(self.quality_scores)

    def to_fastq(self) -> str:
        return f"@{self.id}\n{self.sequence}\n+\n{self.quality_string()}"


@dataclass(frozen=True)
class SequencingStats:
    total_reads: int = 0
    total_bases: int = 0
    mean_read_length: float = 0.0
    mean_quality: float = 0.0
    q30_percentage: float = 0.0
    coverage_depth: float = 0.0
    gc_content: float = 0.0
    estimated_variants: int = 0
    additional_metrics: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class SequencingResult:
    reads: Tuple[SequencingRead, ...]
    stats: SequencingStats
    technology: TechnologyProfile
    warnings: Tuple[SimulationWarning, ...]
    report: str
    success: bool = True


class VariantType(str, Enum):
    SNP = "SNP"
    INSERTION = "INSERTION"
    DELETION = "DELETION"
    COMPLEX = "COMPLEX"


@dataclass(frozen=True)
class Variant:
    position: int
    ref_allele: str
    alt_allele: str
    type: VariantType
    depth: int
    allele_frequency: float
    quality: float


__all__ = [
    "TechnologyProfile",
    "TECHNOLOGY_PROFILES",
    "resolve_profile",
    "SequencingRead",
    "SequencingStats",
    "SequencingResult",
    "VariantType",
    "Variant",
]
