"""ASCII rendering of a gel run."""
from __future__ import annotations

from typing import List

from .model import GelResult

ROWS = 20
LANE_WIDTH = 7
BAND_WINDOW = 0.05


def _band_glyph(intensity: float) -> str:
    if intensity > 0.7:
        return "######"
    if intensity > 0.4:
        return "======"
    return "------"


def render_gel_text(result: GelResult, rows: int = ROWS) -> str:
    """Draw lanes top (wells) to bottom; band glyphs encode intensity."""

    width = len(result.lanes) * LANE_WIDTH + 3
    lines: List[str] = ["=" * width]
    lines.append("| " + "".join(f"L{index + 1:<5d} " for index in range(len(result.lanes))) + "|")
    lines.append("-" * width)
    for row in range(rows):
        row_position = row / rows
        cells = []
        for lane in result.lanes:
            cell = " " * (LANE_WIDTH - 1)
            for band in lane:
                if abs(band.migration_distance - row_position) < BAND_WINDOW:
                    cell = _band_glyph(band.intensity)
                    break
            cells.append(cell + " ")
        lines.append("| " + "".join(cells) + "|")
    lines.append("=" * width)
    lines.append("Bands: ##=strong, ==medium, --=weak")
    return "\n".join(lines) + "\n"


__all__ = ["render_gel_text"]
