"""Read simulation, run statistics and pileup variant calling."""
from __future__ import annotations

from .model import (
    TECHNOLOGY_PROFILES,
    SequencingRead,
    SequencingResult,
    SequencingStats,
    TechnologyProfile,
    Variant,
    VariantType,
    resolve_profile,
)
from .report import generate_report, quality_tier
from .simulator import calculate_n50, calculate_stats, call_variants, generate_read, run_sequencing

__all__ = [
    "TECHNOLOGY_PROFILES",
    "TechnologyProfile",
    "resolve_profile",
    "SequencingRead",
    "SequencingStats",
    "SequencingResult",
    "Variant",
    "VariantType",
    "generate_report",
    "quality_tier",
    "generate_read",
    "calculate_n50",
    "calculate_stats",
    "run_sequencing",
    "call_variants",
]
