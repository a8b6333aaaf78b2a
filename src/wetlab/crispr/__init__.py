"""CRISPR PAM search and repair-outcome simulation."""
from __future__ import annotations

from .model import (
    EditingQualityMetrics,
    EditingResult,
    EditOutcome,
    EditType,
    RepairPathway,
    TargetSite,
)
from .simulator import (
    CAS12A_PAM,
    PROTOSPACER_LENGTH,
    SACAS9_PAM,
    SPCAS9_PAM,
    apply_outcome,
    find_pam_sites,
    off_target_risk,
    on_target_score,
    perform_editing,
    sample_indel_size,
    validate_pam_pattern,
)

__all__ = [
    "TargetSite",
    "EditType",
    "RepairPathway",
    "EditOutcome",
    "EditingQualityMetrics",
    "EditingResult",
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
