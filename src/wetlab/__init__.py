"""wetlab core package."""

from importlib import metadata

try:  # pragma: no cover - metadata only at runtime
    __version__ = metadata.version("wetlab")
except metadata.PackageNotFoundError:  # pragma: no cover - source tree / editable installs
    __version__ = "0.0.0"

from . import bioinformatics, crispr, gel, pcr, sequencing
from .crispr import EditingResult, EditOutcome, TargetSite, apply_outcome, find_pam_sites, perform_editing
from .errors import ExperimentSpecError, InvalidRegion, SimulationWarning, UnsupportedPamPattern, WarningCode, WetlabError
from .gel import DnaSample, GelResult, estimate_size, render_gel_text, run_gel
from .genome import DigitalGenome, SequenceAccessor
from .pcr import PcrResult, Primer, ReactionParameters, design_primers, run_pcr
from .sequencing import TECHNOLOGY_PROFILES, SequencingResult, call_variants, run_sequencing

__all__ = [
    "bioinformatics",
    "crispr",
    "gel",
    "pcr",
    "sequencing",
    "DigitalGenome",
    "SequenceAccessor",
    "TargetSite",
    "EditOutcome",
    "EditingResult",
    "find_pam_sites",
    "perform_editing",
    "apply_outcome",
    "Primer",
    "ReactionParameters",
    "PcrResult",
    "design_primers",
    "run_pcr",
    "TECHNOLOGY_PROFILES",
    "SequencingResult",
    "run_sequencing",
    "call_variants",
    "DnaSample",
    "GelResult",
    "run_gel",
    "estimate_size",
    "render_gel_text",
    "WetlabError",
    "InvalidRegion",
    "UnsupportedPamPattern",
    "ExperimentSpecError",
    "WarningCode",
    "SimulationWarning",
    "__version__",
]
