"""
Pipeline configuration helpers (YAML → structured config).
"""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

import yaml

from ..errors import ExperimentSpecError

PIPELINE_KIND = "wetlab.pipeline.v1"


def _resolve_path(base: Path, value: str) -> Path:
    path = Path(value.strip())
    if not path.is_absolute():
        path = (base / path).resolve()
    return path


def _section(data: Dict[str, Any], key: str) -> Optional[Dict[str, Any]]:
    section = data.get(key)
    if section is None:
        return None
    if not isinstance(section, dict):
        raise ExperimentSpecError(f"'{key}' section must be a mapping.")
    return section


def _optional_int(section: Dict[str, Any], key: str) -> Optional[int]:
    value = section.get(key)
    return None if value is None else int(value)


@dataclass(frozen=True)
class GenomeSpec:
    fasta: Optional[Path] = None
    sequence: Optional[str] = None
    record: Optional[str] = None
    name: str = "genome"


@dataclass(frozen=True)
class CrisprStageSpec:
    start: int = 0
    length: Optional[int] = None
    pam: str = "NGG"
    site_index: int = 0
    hdr_template: Optional[str] = None


@dataclass(frozen=True)
class PcrStageSpec:
    target_start: int
    target_end: int
    primer_length: int = 20
    high_fidelity: bool = False
    cycles: Optional[int] = None
    annealing_temp: Optional[float] = None


@dataclass(frozen=True)
class SequencingStageSpec:
    technology: str = "ILLUMINA_PE150"
    coverage: int = 30
    region_start: int = 0
    region_length: Optional[int] = None
    call_variants: bool = True
    min_depth: int = 10
    min_quality: float = 20.0


@dataclass(frozen=True)
class GelStageSpec:
    setting: str = "1.0%"
    ladder: str = "1kb"
    run_time_minutes: float = 45.0
    voltage: float = 100.0
    sample_concentration: float = 50.0
    extra_samples: Tuple[Tuple[str, int], ...] = ()


@dataclass(frozen=True)
class PipelineSpec:
    kind: str
    name: str
    description: Optional[str]
    seed: Optional[int]
    genome: GenomeSpec
    crispr: Optional[CrisprStageSpec] = None
    pcr: Optional[PcrStageSpec] = None
    sequencing: Optional[SequencingStageSpec] = None
    gel: Optional[GelStageSpec] = None


def load_pipeline_spec(path: Path) -> PipelineSpec:
    cfg_path = Path(path)
    if not cfg_path.exists():
        raise ExperimentSpecError(f"Pipeline config '{cfg_path}' not found.")
    try:
        data = yaml.safe_load(cfg_path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        raise ExperimentSpecError(f"Pipeline config '{cfg_path}' is not valid YAML: {exc}") from exc
    return parse_pipeline_spec(data, base_dir=cfg_path.parent)


def parse_pipeline_spec(data: Any, *, base_dir: Path | None = None) -> PipelineSpec:
    if not isinstance(data, dict):
        raise ExperimentSpecError("Pipeline config must be a YAML mapping.")
    kind = str(data.get("kind", "")).strip()
    if kind != PIPELINE_KIND:
        raise ExperimentSpecError(f"Unknown pipeline kind. Supported kinds: '{PIPELINE_KIND}'.")
    base = Path(base_dir) if base_dir is not None else Path.cwd()
    try:
        seed = data.get("seed")
        spec = PipelineSpec(
            kind=PIPELINE_KIND,
            name=str(data.get("name") or "unnamed_pipeline"),
            description=str(data.get("description") or "").strip() or None,
            seed=None if seed is None else int(seed),
            genome=_parse_genome(base, data),
            crispr=_parse_crispr(_section(data, "crispr")),
            pcr=_parse_pcr(_section(data, "pcr")),
            sequencing=_parse_sequencing(_section(data, "sequencing")),
            gel=_parse_gel(_section(data, "gel")),
        )
    except ExperimentSpecError:
        raise
    except (TypeError, ValueError) as exc:
        raise ExperimentSpecError(f"Invalid pipeline config: {exc}") from exc
    if not any((spec.crispr, spec.pcr, spec.sequencing, spec.gel)):
        raise ExperimentSpecError("Pipeline config must enable at least one stage.")
    return spec


def _parse_genome(base: Path, data: Dict[str, Any]) -> GenomeSpec:
    genome = _section(data, "genome")
    if genome is None:
        raise ExperimentSpecError("Pipeline config requires a 'genome' section.")
    fasta = genome.get("fasta")
    sequence = genome.get("sequence")
    if bool(fasta) == bool(sequence):
        raise ExperimentSpecError("Genome section requires exactly one of 'fasta' or 'sequence'.")
    record = str(genome["record"]).strip() if genome.get("record") else None
    name = str(genome.get("name") or record or "genome")
    if fasta:
        fasta_path = _resolve_path(base, str(fasta))
        if not fasta_path.exists():
            raise ExperimentSpecError(f"Genome FASTA '{fasta_path}' not found.")
        return GenomeSpec(fasta=fasta_path, record=record, name=name)
    return GenomeSpec(sequence="".join(str(sequence).split()).upper(), name=name)


def _parse_crispr(section: Optional[Dict[str, Any]]) -> Optional[CrisprStageSpec]:
    if section is None:
        return None
    template = section.get("hdr_template")
    return CrisprStageSpec(
        start=int(section.get("start", 0)),
        length=_optional_int(section, "length"),
        pam=str(section.get("pam", "NGG")).strip().upper(),
        site_index=int(section.get("site_index", 0)),
        hdr_template=str(template).strip().upper() if template else None,
    )


def _parse_pcr(section: Optional[Dict[str, Any]]) -> Optional[PcrStageSpec]:
    if section is None:
        return None
    if "target_start" not in section or "target_end" not in section:
        raise ExperimentSpecError("PCR stage requires 'target_start' and 'target_end'.")
    annealing = section.get("annealing_temp")
    return PcrStageSpec(
        target_start=int(section["target_start"]),
        target_end=int(section["target_end"]),
        primer_length=int(section.get("primer_length", 20)),
        high_fidelity=bool(section.get("high_fidelity", False)),
        cycles=_optional_int(section, "cycles"),
        annealing_temp=None if annealing is None else float(annealing),
    )


def _parse_sequencing(section: Optional[Dict[str, Any]]) -> Optional[SequencingStageSpec]:
    if section is None:
        return None
    return SequencingStageSpec(
        technology=str(section.get("technology", "ILLUMINA_PE150")).strip().upper(),
        coverage=int(section.get("coverage", 30)),
        region_start=int(section.get("region_start", 0)),
        region_length=_optional_int(section, "region_length"),
        call_variants=bool(section.get("call_variants", True)),
        min_depth=int(section.get("min_depth", 10)),
        min_quality=float(section.get("min_quality", 20.0)),
    )


def _parse_gel(section: Optional[Dict[str, Any]]) -> Optional[GelStageSpec]:
    if section is None:
        return None
    extras = []
    for entry in section.get("samples") or []:
        if not isinstance(entry, dict) or "size" not in entry:
            raise ExperimentSpecError("Gel samples require a 'size' entry.")
        extras.append((str(entry.get("name") or f"sample_{len(extras) + 1}"), int(entry["size"])))
    return GelStageSpec(
        setting=str(section.get("setting", "1.0%")).strip(),
        ladder=str(section.get("ladder", "1kb")).strip(),
        run_time_minutes=float(section.get("run_time_minutes", 45.0)),
        voltage=float(section.get("voltage", 100.0)),
        sample_concentration=float(section.get("sample_concentration", 50.0)),
        extra_samples=tuple(extras),
    )


__all__ = [
    "PIPELINE_KIND",
    "GenomeSpec",
    "CrisprStageSpec",
    "PcrStageSpec",
    "SequencingStageSpec",
    "GelStageSpec",
    "PipelineSpec",
    "load_pipeline_spec",
    "parse_pipeline_spec",
]
