"""Gel electrophoresis samples, settings, bands and results."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

from ..errors import SimulationWarning


@dataclass(frozen=True)
class GelSetting:
    """Agarose percentage plus the fragment range it resolves well."""

    name: str
    concentration: float
    min_optimal_size: int
    max_optimal_size: int

    def __post_init__(self) -> None:
        if self.concentration <= 0:
            raise ValueError(f"Gel concentration must be positive, got {self.concentration}.")

    def is_optimal(self, size_bp: int) -> bool:
        return self.min_optimal_size <= size_bp <= self.max_optimal_size


@dataclass(frozen=True)
class DnaFragment:
    size_bp: int
    relative_abundance: float = 1.0

    def __post_init__(self) -> None:
        if self.size_bp <= 0:
            raise ValueError(f"Fragment size must be positive, got {self.size_bp}.")
        if self.relative_abundance < 0:
            raise ValueError("Fragment abundance must be >= 0.")


@dataclass(frozen=True)
class DnaSample:
    name: str
    fragments: Tuple[DnaFragment, ...]
    concentration: float  # ng/uL

    def __post_init__(self) -> None:
        object.__setattr__(self, "fragments", tuple(self.fragments))
        if self.concentration < 0:
            raise ValueError(f"Sample concentration must be >= 0, got {self.concentration}.")

    @classmethod
    def single(cls, name: str, size_bp: int, concentration: float) -> "DnaSample":
        return cls(name, (DnaFragment(size_bp, 1.0),), concentration)

    @classmethod
    def ladder(cls, name: str, sizes: Sequence[int]) -> "DnaSample":
        if not sizes:
            raise ValueError("A ladder needs at least one size.")
        share = 1.0 / len(sizes)
        return cls(name, tuple(DnaFragment(size, share) for size in sizes), 100.0)


@dataclass(frozen=True)
class GelBand:
    migration_distance: float
    estimated_size_bp: int
    intensity: float
    is_sharp: bool
    annotation: Optional[str] = None


@dataclass(frozen=True)
class GelQualityMetrics:
    resolution: float = 0.0
    band_sharpness: float = 0.0
    has_smearing: bool = False
    has_overloading: bool = False
    overall_quality: float = 0.0


@dataclass(frozen=True)
class GelResult:
    lanes: Tuple[Tuple[GelBand, ...], ...]
    gel_length_mm: int
    setting: GelSetting
    run_time_minutes: float
    voltage: float
    interpretations: Tuple[str, ...]
    quality: GelQualityMetrics
    success: bool = True
    warnings: Tuple[SimulationWarning, ...] = ()


__all__ = [
    "GelSetting",
    "DnaFragment",
    "DnaSample",
    "GelBand",
    "GelQualityMetrics",
    "GelResult",
]
