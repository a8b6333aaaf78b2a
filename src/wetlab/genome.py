"""Sequence accessor protocol and the in-memory digital genome."""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Protocol, runtime_checkable

from . import bioinformatics
from .errors import InvalidRegion


@runtime_checkable
class SequenceAccessor(Protocol):
    """Read-only view over a contiguous DNA sequence."""

    def get_sequence(self, position: int, length: int) -> str:
        ...

    def total_length(self) -> int:
        ...


def read_window(genome: SequenceAccessor, position: int, length: int) -> str:
    """Fetch and normalize a window, failing fast on a malformed request."""

    if position < 0 or length <= 0:
        raise InvalidRegion(f"Invalid region position={position} length={length}.")
    total = genome.total_length()
    if position >= total:
        raise InvalidRegion(f"Region start {position} is beyond the genome end ({total}).")
    return bioinformatics.normalize_sequence(genome.get_sequence(position, length))


@dataclass(frozen=True)
class DigitalGenome:
    """
    Immutable in-memory genome.

    Stores one upper-case DNA string; windows past the end are truncated.
    """

    sequence: str
    name: str = "genome"

    def __post_init__(self) -> None:
        object.__setattr__(self, "sequence", bioinformatics.normalize_sequence(self.sequence))

    @classmethod
    def from_string(cls, sequence: str, name: str = "genome") -> "DigitalGenome":
        return cls(sequence=sequence, name=name)

    @classmethod
    def from_fasta(cls, path: str | Path, record: Optional[str] = None) -> "DigitalGenome":
        """
        Load one record of a FASTA file.

        The first record is used unless ``record`` names another one.
        """

        fasta_path = Path(path)
        if not fasta_path.exists():
            raise FileNotFoundError(f"Genome FASTA '{fasta_path}' not found.")
        sequences: Dict[str, str] = {}
        current_name: str | None = None
        buffer: List[str] = []
        with fasta_path.open("r", encoding="utf-8") as handle:
            for raw_line in handle:
                line = raw_line.strip()
                if not line:
                    continue
                if line.startswith(">"):
                    if current_name is not None:
                        sequences[current_name] = "".join(buffer)
                    header = line[1:].strip()
                    current_name = header.split()[0] if header else f"sequence_{len(sequences) + 1}"
                    buffer = []
                else:
                    buffer.append(line)
            if current_name is not None:
                sequences[current_name] = "".join(buffer)
        if not sequences:
            raise ValueError(f"No sequences were found in {fasta_path}.")
        if record is None:
            name = next(iter(sequences))
        elif record in sequences:
            name = record
        else:
            raise KeyError(f"Record '{record}' not found in {fasta_path}.")
        return cls(sequence=sequences[name], name=name)

    def get_sequence(self, position: int, length: int) -> str:
        if position < 0 or length < 0:
            raise InvalidRegion(f"Invalid window position={position} length={length}.")
        return self.sequence[position : position + length]

    def total_length(self) -> int:
        return len(self.sequence)


__all__ = ["SequenceAccessor", "DigitalGenome", "read_window"]
