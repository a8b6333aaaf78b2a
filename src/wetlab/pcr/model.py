"""PCR simulation data models."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

from ..errors import SimulationWarning

TAQ_ERROR_RATE = 1e-4
HIGH_FIDELITY_ERROR_RATE = 1e-5


@dataclass(frozen=True)
class Primer:
    """
    Digital primer with the properties used to score and run a reaction.

    ``sequence`` is 5'->3'; reverse primers are stored as the reverse
    complement of the downstream template strand.
    """

    sequence: str
    is_forward: bool
    melting_temperature: float
    gc_content: float
    specificity: float
    has_self_complementarity: bool
    has_dimer_risk: bool


@dataclass(frozen=True)
class ReactionParameters:
    """Thermal-cycling and buffer setup for one reaction."""

    cycles: int = 30
    annealing_temp: float = 55.0
    extension_time: float = 60.0  # seconds per kb
    use_high_fidelity: bool = False
    mg_mM: float = 1.5
    dntp_uM: float = 200.0

    def __post_init__(self) -> None:
        if self.cycles < 0:
            raise ValueError(f"cycles must be >= 0, got {self.cycles}.")

    @classmethod
    def standard(cls) -> "ReactionParameters":
        return cls(30, 55.0, 60.0, False, 1.5, 200.0)

    @classmethod
    def high_fidelity(cls) -> "ReactionParameters":
        return cls(30, 58.0, 30.0, True, 2.0, 200.0)

    @property
    def polymerase_error_rate(self) -> float:
        return HIGH_FIDELITY_ERROR_RATE if self.use_high_fidelity else TAQ_ERROR_RATE


@dataclass(frozen=True)
class PcrQualityMetrics:
    efficiency: float = 0.0
    specificity: float = 0.0
    has_primer_dimers: bool = False
    has_non_specific_bands: bool = False
    estimated_purity: float = 0.0


@dataclass(frozen=True)
class PcrResult:
    success: bool
    amplicon: str
    length: int
    relative_yield: float
    copy_estimate: float
    error_rate: float
    mutations: Tuple[str, ...]
    warnings: Tuple[SimulationWarning, ...]
    quality: PcrQualityMetrics
    template_start: int = -1

    @classmethod
    def failed(cls, warnings) -> "PcrResult":
        return cls(
            success=False,
            amplicon="",
            length=0,
            relative_yield=0.0,
            copy_estimate=0.0,
            error_rate=0.0,
            mutations=(),
            warnings=tuple(warnings),
            quality=PcrQualityMetrics(),
        )


__all__ = [
    "TAQ_ERROR_RATE",
    "HIGH_FIDELITY_ERROR_RATE",
    "Primer",
    "ReactionParameters",
    "PcrQualityMetrics",
    "PcrResult",
]
