"""Exceptions and warning records shared by the wetlab engines."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class WetlabError(ValueError):
    """Base class for malformed-input errors raised by the engines."""


class InvalidRegion(WetlabError):
    """Raised when a requested genome window is out of bounds or has a non-positive length."""


class UnsupportedPamPattern(WetlabError):
    """Raised when a PAM pattern cannot be searched."""


class ExperimentSpecError(WetlabError):
    """Raised when a pipeline config is invalid."""


class WarningCode(str, Enum):
    PRIMER_BINDING_NOT_FOUND = "primer_binding_not_found"
    AMPLICON_TOO_LONG = "amplicon_too_long"
    PRIMER_TM_MISMATCH = "primer_tm_mismatch"
    PRIMER_COMPLEMENTARITY = "primer_complementarity"
    PRIMER_DIMER = "primer_dimer"
    NON_SPECIFIC_AMPLIFICATION = "non_specific_amplification"
    PCR_ERRORS = "pcr_errors"
    LOW_COVERAGE = "low_coverage"
    LOW_QUALITY = "low_quality"
    UNUSUAL_GC_CONTENT = "unusual_gc_content"
    NO_SAMPLES = "no_samples"


@dataclass(frozen=True)
class SimulationWarning:
    """Non-fatal condition attached to a result record."""

    code: WarningCode
    message: str

    def __str__(self) -> str:
        return self.message


def has_warning(warnings, code: WarningCode) -> bool:
    return any(warning.code is code for warning in warnings)


__all__ = [
    "WetlabError",
    "InvalidRegion",
    "UnsupportedPamPattern",
    "ExperimentSpecError",
    "WarningCode",
    "SimulationWarning",
    "has_warning",
]
