"""Matplotlib rendering of a gel run."""
from __future__ import annotations

from pathlib import Path
from typing import Optional, Union

import matplotlib

matplotlib.use("Agg")
import matplotlib.pyplot as plt

from .. import __version__
from .model import GelResult

RC = {
    "figure.dpi": 120,
    "savefig.dpi": 120,
    "font.size": 9,
    "axes.grid": False,
    "axes.facecolor": "#111111",
}


def apply_rc() -> None:
    for key, value in RC.items():
        plt.rcParams[key] = value


def plot_gel(result: GelResult, *, title: Optional[str] = None):
    """Draw each band as a horizontal bar whose brightness tracks intensity."""
    apply_rc()
    lane_count = max(1, len(result.lanes))
    fig, ax = plt.subplots(figsize=(max(3.0, 1.0 * lane_count + 1.0), 5.0))
    for index, lane in enumerate(result.lanes):
        for band in lane:
            ax.hlines(
                band.migration_distance,
                index + 0.6,
                index + 1.4,
                colors="#f2f2f2",
                linewidth=4 if band.is_sharp else 7,
                alpha=max(0.15, band.intensity),
            )
            if band.annotation:
                ax.text(0.45, band.migration_distance, band.annotation, ha="right", va="center", fontsize=7)
    ax.set_xlim(0, lane_count + 1)
    ax.set_ylim(1.0, 0.0)
    ax.set_xticks(range(1, lane_count + 1))
    ax.set_xticklabels([f"L{index}" for index in range(1, lane_count + 1)])
    ax.set_ylabel("Migration (fraction of gel)")
    ax.set_title(title or f"{result.setting.name} agarose, {result.run_time_minutes:g} min @ {result.voltage:g} V")
    fig.text(0.01, 0.01, f"wetlab {__version__}", fontsize=7, color="#555555", ha="left", va="bottom")
    return fig


def save_gel_png(result: GelResult, path: Union[str, Path], *, title: Optional[str] = None) -> Path:
    fig = plot_gel(result, title=title)
    out = Path(path)
    try:
        fig.savefig(out, bbox_inches="tight", facecolor="white")
    finally:
        plt.close(fig)
    return out


__all__ = ["apply_rc", "plot_gel", "save_gel_png"]
