"""PCR primer design and amplification simulation."""
from __future__ import annotations

from .model import (
    HIGH_FIDELITY_ERROR_RATE,
    TAQ_ERROR_RATE,
    PcrQualityMetrics,
    PcrResult,
    Primer,
    ReactionParameters,
)
from .rules import design_primer, melting_temperature, score_primer_pair
from .simulator import (
    calculate_efficiency,
    copy_estimate,
    design_primers,
    find_primer_binding_site,
    run_pcr,
)

__all__ = [
    "TAQ_ERROR_RATE",
    "HIGH_FIDELITY_ERROR_RATE",
    "Primer",
    "ReactionParameters",
    "PcrQualityMetrics",
    "PcrResult",
    "design_primer",
    "melting_temperature",
    "score_primer_pair",
    "design_primers",
    "find_primer_binding_site",
    "calculate_efficiency",
    "copy_estimate",
    "run_pcr",
]
