"""Sequence helpers shared by the wetlab engines."""
from __future__ import annotations

import random
import re

import numpy as np

DNA_BASES = "ACGT"
DNA_ALPHABET = frozenset("ACGTN")

IUPAC_CODES = {
    "N": frozenset("ACGTN"),
    "R": frozenset("AG"),
    "Y": frozenset("CT"),
    "S": frozenset("GC"),
    "W": frozenset("AT"),
    "K": frozenset("GT"),
    "M": frozenset("AC"),
}

_COMPLEMENT = str.maketrans("ACGTN", "TGCAN")
_WHITESPACE_RE = re.compile(r"\s+")

ASCII_TO_BASE = np.full(256, 4, dtype=np.uint8)
ASCII_TO_BASE[ord("A")] = 0
ASCII_TO_BASE[ord("C")] = 1
ASCII_TO_BASE[ord("G")] = 2
ASCII_TO_BASE[ord("T")] = 3


def normalize_sequence(sequence: str, *, allow_ambiguous: bool = True) -> str:
    """
    Upper-case a DNA string, strip whitespace and validate the alphabet.

    Raises ValueError when a character outside {A,C,G,T,N} is present
    (or outside {A,C,G,T} when ``allow_ambiguous`` is False).
    """

    cleaned = _WHITESPACE_RE.sub("", sequence or "").upper()
    allowed = DNA_ALPHABET if allow_ambiguous else frozenset(DNA_BASES)
    invalid = set(cleaned) - allowed
    if invalid:
        raise ValueError(f"Invalid DNA characters: {''.join(sorted(invalid))}")
    return cleaned


def reverse_complement(sequence: str) -> str:
    """Return the reverse complement; characters outside ACGT map to N."""

    upper = sequence.upper()
    translated = "".join(base if base in DNA_ALPHABET else "N" for base in upper)
    return translated.translate(_COMPLEMENT)[::-1]


def gc_count(sequence: str) -> int:
    upper = sequence.upper()
    return upper.count("G") + upper.count("C")


def gc_content(sequence: str) -> float:
    """GC fraction of ``sequence``; 0.0 for an empty string."""

    if not sequence:
        return 0.0
    return gc_count(sequence) / len(sequence)


def encode_sequence_to_uint8(sequence: str) -> np.ndarray:
    """Return a uint8 array (A=0, C=1, G=2, T=3, other=4)."""

    if not sequence:
        return np.zeros((0,), dtype=np.uint8)
    raw = np.frombuffer(sequence.upper().encode("ascii"), dtype=np.uint8)
    return ASCII_TO_BASE[raw]


def matches_iupac(base: str, code: str) -> bool:
    """Match one base against an IUPAC code (N, R, Y, S, W, K, M or an exact base)."""

    base = base.upper()
    code = code.upper()
    allowed = IUPAC_CODES.get(code)
    if allowed is None:
        return base == code
    return base in allowed


def matches_pattern(sequence: str, pattern: str) -> bool:
    if len(sequence) != len(pattern):
        return False
    return all(matches_iupac(base, code) for base, code in zip(sequence, pattern))


def random_sequence(rng: random.Random, length: int) -> str:
    return "".join(DNA_BASES[rng.randrange(4)] for _ in range(length))


def substitute_base(rng: random.Random, original: str) -> str:
    """Draw a base different from ``original``."""

    original = original.upper()
    while True:
        base = DNA_BASES[rng.randrange(4)]
        if base != original:
            return base


__all__ = [
    "DNA_BASES",
    "DNA_ALPHABET",
    "IUPAC_CODES",
    "normalize_sequence",
    "reverse_complement",
    "gc_count",
    "gc_content",
    "encode_sequence_to_uint8",
    "matches_iupac",
    "matches_pattern",
    "random_sequence",
    "substitute_base",
]
