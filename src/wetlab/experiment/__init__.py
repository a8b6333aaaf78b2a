"""Pipeline config loading."""

from .spec import (
    PIPELINE_KIND,
    CrisprStageSpec,
    GelStageSpec,
    GenomeSpec,
    PcrStageSpec,
    PipelineSpec,
    SequencingStageSpec,
    load_pipeline_spec,
    parse_pipeline_spec,
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
