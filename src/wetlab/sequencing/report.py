"""Plain-text quality report for a sequencing run."""
from __future__ import annotations

from typing import Iterable, List

from ..errors import SimulationWarning
from .model import SequencingStats, TechnologyProfile


def quality_tier(stats: SequencingStats) -> str:
    if stats.q30_percentage >= 90 and stats.coverage_depth >= 30:
        return "high"
    if stats.q30_percentage >= 80 and stats.coverage_depth >= 15:
        return "moderate"
    return "low"


_TIER_LINES = {
    "high": "[ok] High quality data suitable for variant calling",
    "moderate": "[~] Moderate quality data - may miss some variants",
    "low": "[x] Low quality data - consider re-sequencing",
}


def generate_report(
    stats: SequencingStats, profile: TechnologyProfile, warnings: Iterable[SimulationWarning]
) -> str:
    lines: List[str] = [
        "=== SEQUENCING QUALITY REPORT ===",
        "",
        f"Technology: {profile.description}",
        f"Total Reads: {stats.total_reads:,}",
        f"Total Bases: {stats.total_bases:,}",
        f"Mean Read Length: {stats.mean_read_length:.1f} bp",
        f"Mean Quality Score: Q{stats.mean_quality:.1f}",
        f"Q30 Bases: {stats.q30_percentage:.1f}%",
        f"Coverage Depth: {stats.coverage_depth:.1f}x",
        f"GC Content: {stats.gc_content * 100:.1f}%",
        f"Estimated Variants: ~{stats.estimated_variants}",
    ]
    warnings = list(warnings)
    if warnings:
        lines += ["", "--- WARNINGS ---"]
        lines += [f"! {warning}" for warning in warnings]
    lines += ["", "--- QUALITY ASSESSMENT ---", _TIER_LINES[quality_tier(stats)]]
    return "\n".join(lines) + "\n"


__all__ = ["quality_tier", "generate_report"]
