"""
Bench-order pipeline: edit, amplify, sequence, run a gel.

Every stage draws from one ``random.Random`` seeded once, so a config plus a
seed replays the same run. Stages that are absent from the config are
skipped; downstream stages fall back to the most recent genome.
"""
from __future__ import annotations

import logging
import random
from dataclasses import dataclass, replace
from typing import List, Optional, Tuple

from . import config
from .crispr import EditingResult, EditOutcome, TargetSite, apply_outcome, find_pam_sites, perform_editing
from .errors import ExperimentSpecError
from .experiment.spec import GelStageSpec, GenomeSpec, PcrStageSpec, PipelineSpec, SequencingStageSpec
from .gel import DnaSample, GelResult, resolve_gel_setting, resolve_ladder, run_gel
from .genome import DigitalGenome
from .pcr import PcrResult, Primer, ReactionParameters, design_primers, run_pcr
from .sequencing import SequencingResult, Variant, call_variants, resolve_profile, run_sequencing

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class PipelineResult:
    name: str
    seed: int
    genome_name: str
    genome_length: int
    target_sites: Tuple[TargetSite, ...] = ()
    editing: Optional[EditingResult] = None
    edited_genome_length: Optional[int] = None
    primers: Tuple[Primer, ...] = ()
    pcr: Optional[PcrResult] = None
    sequencing: Optional[SequencingResult] = None
    variants: Tuple[Variant, ...] = ()
    gel: Optional[GelResult] = None

    @property
    def edit(self) -> Optional[EditOutcome]:
        """The edit applied before amplification; variants never restate it."""
        return self.editing.primary_outcome if self.editing is not None else None


def load_genome(spec: GenomeSpec) -> DigitalGenome:
    if spec.fasta is not None:
        try:
            return DigitalGenome.from_fasta(spec.fasta, record=spec.record)
        except KeyError as exc:
            raise ExperimentSpecError(str(exc.args[0])) from exc
    return DigitalGenome.from_string(spec.sequence or "", name=spec.name)


def _pcr_stage(genome: DigitalGenome, stage: PcrStageSpec, rng: random.Random):
    primers = design_primers(genome, stage.target_start, stage.target_end, stage.primer_length)
    if not primers:
        LOGGER.info("pipeline: no acceptable primer pair for [%s,%s)", stage.target_start, stage.target_end)
        return (), None
    base = ReactionParameters.high_fidelity() if stage.high_fidelity else ReactionParameters.standard()
    params = ReactionParameters(
        cycles=base.cycles if stage.cycles is None else stage.cycles,
        annealing_temp=base.annealing_temp if stage.annealing_temp is None else stage.annealing_temp,
        extension_time=base.extension_time,
        use_high_fidelity=base.use_high_fidelity,
        mg_mM=base.mg_mM,
        dntp_uM=base.dntp_uM,
    )
    forward, reverse = primers
    return tuple(primers), run_pcr(genome, forward, reverse, params, rng=rng)


def _sequencing_stage(
    target: DigitalGenome, reference: DigitalGenome, stage: SequencingStageSpec, rng: random.Random
):
    profile = resolve_profile(stage.technology)
    result = run_sequencing(
        target,
        profile,
        stage.coverage,
        stage.region_start,
        stage.region_length,
        rng=rng,
    )
    variants: Tuple[Variant, ...] = ()
    if stage.call_variants and result.reads:
        variants = tuple(call_variants(result.reads, reference, stage.min_depth, stage.min_quality))
    return result, variants


def _gel_stage(stage: GelStageSpec, pcr: Optional[PcrResult], rng: random.Random) -> GelResult:
    samples: List[DnaSample] = [DnaSample.ladder(f"{stage.ladder} ladder", resolve_ladder(stage.ladder))]
    if pcr is not None and pcr.success:
        samples.append(DnaSample.single("PCR product", pcr.length, stage.sample_concentration))
    for name, size in stage.extra_samples:
        samples.append(DnaSample.single(name, size, stage.sample_concentration))
    return run_gel(
        samples,
        resolve_gel_setting(stage.setting),
        stage.run_time_minutes,
        stage.voltage,
        rng=rng,
    )


def run_pipeline(spec: PipelineSpec, *, seed: int | None = None) -> PipelineResult:
    """Run every configured stage; ``seed`` overrides the config's seed."""

    resolved_seed = config.resolve_seed(seed if seed is not None else spec.seed)
    rng = random.Random(resolved_seed)
    original = load_genome(spec.genome)
    LOGGER.info(
        "pipeline %s: genome=%s length=%s seed=%s",
        spec.name,
        original.name,
        original.total_length(),
        resolved_seed,
    )

    genome = original
    sites: Tuple[TargetSite, ...] = ()
    editing: Optional[EditingResult] = None
    if spec.crispr is not None:
        stage = spec.crispr
        window = stage.length if stage.length is not None else original.total_length() - stage.start
        sites = tuple(find_pam_sites(original, stage.start, window, stage.pam, rng=rng))
        if not sites:
            LOGGER.info("pipeline: no %s sites in [%s,+%s)", stage.pam, stage.start, window)
        elif not 0 <= stage.site_index < len(sites):
            raise ExperimentSpecError(f"crispr.site_index {stage.site_index} out of range (found {len(sites)} sites).")
        else:
            editing = perform_editing(original, sites[stage.site_index], stage.hdr_template, rng=rng)
            genome = apply_outcome(original, editing.primary_outcome, name=f"{original.name}_edited")

    primers: Tuple[Primer, ...] = ()
    pcr: Optional[PcrResult] = None
    if spec.pcr is not None:
        primers, pcr = _pcr_stage(genome, spec.pcr, rng)

    sequencing: Optional[SequencingResult] = None
    variants: Tuple[Variant, ...] = ()
    if spec.sequencing is not None:
        # reads are called against the edited template, so only PCR and read
        # errors come back; positions are edited-genome coordinates
        if pcr is not None and pcr.success:
            target = DigitalGenome(pcr.amplicon, name="amplicon")
            reference = DigitalGenome(
                genome.get_sequence(pcr.template_start, pcr.length), name=f"{genome.name}_template"
            )
            offset = pcr.template_start
        else:
            target, reference, offset = genome, genome, 0
        sequencing, variants = _sequencing_stage(target, reference, spec.sequencing, rng)
        if offset:
            variants = tuple(replace(variant, position=variant.position + offset) for variant in variants)

    gel: Optional[GelResult] = None
    if spec.gel is not None:
        gel = _gel_stage(spec.gel, pcr, rng)

    return PipelineResult(
        name=spec.name,
        seed=resolved_seed,
        genome_name=original.name,
        genome_length=original.total_length(),
        target_sites=sites,
        editing=editing,
        edited_genome_length=genome.total_length() if editing is not None else None,
        primers=primers,
        pcr=pcr,
        sequencing=sequencing,
        variants=variants,
        gel=gel,
    )


__all__ = ["PipelineResult", "load_genome", "run_pipeline"]
