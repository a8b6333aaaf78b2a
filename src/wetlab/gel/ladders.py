"""Reference ladders and agarose settings."""
from __future__ import annotations

from typing import Dict, Tuple, Union

from .model import GelSetting

LADDER_100BP: Tuple[int, ...] = (100, 200, 300, 400, 500, 600, 700, 800, 900, 1000, 1200, 1500)
LADDER_1KB: Tuple[int, ...] = (250, 500, 750, 1000, 1500, 2000, 2500, 3000, 4000, 5000, 6000, 8000, 10000)
LADDER_1KB_PLUS: Tuple[int, ...] = (
    100, 200, 300, 400, 500, 650, 850, 1000, 1650, 2000, 3000, 4000, 5000, 6000, 8000, 10000, 12000,
)

LADDERS: Dict[str, Tuple[int, ...]] = {
    "100bp": LADDER_100BP,
    "1kb": LADDER_1KB,
    "1kb_plus": LADDER_1KB_PLUS,
}

GEL_SETTINGS: Dict[str, GelSetting] = {
    setting.name: setting
    for setting in (
        GelSetting("0.5%", 0.5, 1000, 30000),
        GelSetting("1.0%", 1.0, 500, 10000),
        GelSetting("1.5%", 1.5, 200, 3000),
        GelSetting("2.0%", 2.0, 100, 2000),
        GelSetting("3.0%", 3.0, 50, 1000),
    )
}


def resolve_gel_setting(value: Union[str, float, GelSetting]) -> GelSetting:
    """Look up a setting by name (``"1.0%"``) or agarose percentage (``1`` / ``"1.5"``)."""

    if isinstance(value, GelSetting):
        return value
    if isinstance(value, str) and value.strip() in GEL_SETTINGS:
        return GEL_SETTINGS[value.strip()]
    try:
        percent = float(str(value).strip().rstrip("%"))
    except ValueError as exc:
        raise ValueError(f"Unknown gel setting: {value!r}.") from exc
    for setting in GEL_SETTINGS.values():
        if abs(setting.concentration - percent) < 1e-9:
            return setting
    raise ValueError(f"Unknown gel setting: {value!r}. Choose from {', '.join(GEL_SETTINGS)}.")


def resolve_ladder(name: str) -> Tuple[int, ...]:
    try:
        return LADDERS[name.strip().lower()]
    except KeyError as exc:
        raise ValueError(f"Unknown ladder: {name!r}. Choose from {', '.join(LADDERS)}.") from exc


__all__ = [
    "LADDER_100BP",
    "LADDER_1KB",
    "LADDER_1KB_PLUS",
    "LADDERS",
    "GEL_SETTINGS",
    "resolve_gel_setting",
    "resolve_ladder",
]
