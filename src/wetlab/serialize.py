"""Plain JSON-ready payloads for result records."""
from __future__ import annotations

import dataclasses
from enum import Enum
from pathlib import Path
from typing import Any, Iterable, Optional

SPEC_VERSION = "1.0"


def to_payload(value: Any, *, exclude: Optional[Iterable[str]] = None) -> Any:
    """
    Convert dataclasses, enums, tuples and paths into dicts, strings and lists.

    ``exclude`` drops top-level dataclass fields (e.g. ``("reads",)``).
    """

    skipped = set(exclude or ())
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return {
            field.name: to_payload(getattr(value, field.name))
            for field in dataclasses.fields(value)
            if field.name not in skipped
        }
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, Path):
        return str(value)
    if isinstance(value, dict):
        return {str(key): to_payload(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_payload(item) for item in value]
    return value


def envelope(kind: str, data: Any, **meta: Any) -> dict:
    """Wrap ``data`` with a schema header the way every CLI command reports."""

    return {
        "schema": {"kind": kind, "spec_version": SPEC_VERSION},
        "meta": {key: to_payload(item) for key, item in meta.items()},
        "data": to_payload(data),
    }


__all__ = ["SPEC_VERSION", "to_payload", "envelope"]
