"""wetlab runtime configuration helpers."""

from __future__ import annotations

import logging
import os
import random

_SEED_ENV = "WETLAB_SEED"
_LOG_LEVEL_ENV = "WETLAB_LOG_LEVEL"
_LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

DEFAULT_SEED = 0

LOGGER = logging.getLogger(__name__)


def _env_int(name: str, default: int | None = None) -> int | None:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw.strip())
    except ValueError:
        LOGGER.warning("Ignoring non-integer %s=%r", name, raw)
        return default


def resolve_seed(preferred: int | None = None) -> int:
    """CLI/config seed first, then ``WETLAB_SEED``, then ``DEFAULT_SEED``."""

    if preferred is not None:
        seed = int(preferred)
        source = "explicit"
    else:
        env_seed = _env_int(_SEED_ENV)
        seed = DEFAULT_SEED if env_seed is None else env_seed
        source = "env" if env_seed is not None else "default"
    LOGGER.debug("resolve_seed seed=%s source=%s", seed, source)
    return seed


def make_rng(seed: int | None = None) -> random.Random:
    return random.Random(resolve_seed(seed))


def resolve_log_level(preferred: str | None = None) -> int:
    name = (preferred or os.getenv(_LOG_LEVEL_ENV) or "WARNING").strip().upper()
    level = logging.getLevelName(name)
    if not isinstance(level, int):
        raise ValueError(f"Unknown log level: {name}.")
    return level


def configure_logging(preferred: str | None = None) -> int:
    level = resolve_log_level(preferred)
    logging.basicConfig(level=level, format=_LOG_FORMAT)
    logging.getLogger("wetlab").setLevel(level)
    return level


__all__ = [
    "DEFAULT_SEED",
    "resolve_seed",
    "make_rng",
    "resolve_log_level",
    "configure_logging",
]
