"""Agarose gel electrophoresis simulation and rendering."""
from __future__ import annotations

from .ladders import (
    GEL_SETTINGS,
    LADDER_1KB,
    LADDER_1KB_PLUS,
    LADDER_100BP,
    LADDERS,
    resolve_gel_setting,
    resolve_ladder,
)
from .model import DnaFragment, DnaSample, GelBand, GelQualityMetrics, GelResult, GelSetting
from .render import render_gel_text
from .simulator import assess_quality, estimate_size, interpret_lanes, run_gel

__all__ = [
    "GEL_SETTINGS",
    "LADDERS",
    "LADDER_100BP",
    "LADDER_1KB",
    "LADDER_1KB_PLUS",
    "resolve_gel_setting",
    "resolve_ladder",
    "GelSetting",
    "DnaFragment",
    "DnaSample",
    "GelBand",
    "GelQualityMetrics",
    "GelResult",
    "render_gel_text",
    "run_gel",
    "estimate_size",
    "interpret_lanes",
    "assess_quality",
]
