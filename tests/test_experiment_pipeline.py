import random
from pathlib import Path

import pytest
import yaml

from wetlab import bioinformatics
from wetlab.crispr import EditType
from wetlab.errors import ExperimentSpecError
from wetlab.experiment import PIPELINE_KIND, load_pipeline_spec, parse_pipeline_spec
from wetlab.pipeline import run_pipeline
from wetlab.serialize import to_payload

SITE_BLOCK = "ACGTACGTACGTACGTACGTAGG"


def pipeline_genome() -> str:
    # repeat flanks make 40-mer primers land in the accepted Tm window
    rng = random.Random(5)
    return (
        bioinformatics.random_sequence(rng, 310)
        + "GCAGT" * 18
        + SITE_BLOCK * 4
        + "ACGTACGT"
        + "ACTGC" * 30
        + bioinformatics.random_sequence(rng, 350)
    )


def pipeline_config(**overrides):
    data = {
        "kind": PIPELINE_KIND,
        "name": "edit_and_verify",
        "seed": 11,
        "genome": {"sequence": pipeline_genome(), "name": "demo"},
        "crispr": {"start": 400, "length": 100},
        "pcr": {"target_start": 400, "target_end": 500, "primer_length": 40},
        "sequencing": {"technology": "ILLUMINA_SE150", "coverage": 20},
        "gel": {"ladder": "1kb", "setting": "1.5%"},
    }
    data.update(overrides)
    return data


def _write_config(tmp_path: Path, data) -> Path:
    path = tmp_path / "pipeline.yaml"
    path.write_text(yaml.safe_dump(data, sort_keys=False), encoding="utf-8")
    return path


def test_load_pipeline_spec_parses_stages(tmp_path):
    spec = load_pipeline_spec(_write_config(tmp_path, pipeline_config()))
    assert spec.name == "edit_and_verify"
    assert spec.seed == 11
    assert spec.genome.name == "demo"
    assert len(spec.genome.sequence) == 1000
    assert spec.crispr.pam == "NGG"
    assert spec.crispr.length == 100
    assert spec.pcr.primer_length == 40
    assert spec.pcr.cycles is None
    assert spec.sequencing.technology == "ILLUMINA_SE150"
    assert spec.sequencing.call_variants is True
    assert spec.gel.setting == "1.5%"
    assert spec.gel.extra_samples == ()


def test_fasta_paths_resolve_relative_to_config(tmp_path):
    (tmp_path / "genomes").mkdir()
    (tmp_path / "genomes" / "demo.fa").write_text(">chrA\nACGTACGT\n", encoding="utf-8")
    data = pipeline_config(genome={"fasta": "genomes/demo.fa", "record": "chrA"})
    spec = load_pipeline_spec(_write_config(tmp_path, data))
    assert spec.genome.fasta == (tmp_path / "genomes" / "demo.fa").resolve()
    assert spec.genome.record == "chrA"
    assert spec.genome.name == "chrA"


def test_gel_extra_samples():
    data = pipeline_config(gel={"samples": [{"name": "control", "size": 750}, {"size": 3000}]})
    spec = parse_pipeline_spec(data)
    assert spec.gel.extra_samples == (("control", 750), ("sample_2", 3000))


@pytest.mark.parametrize(
    "overrides,message",
    [
        ({"kind": "wetlab.pipeline.v0"}, "pipeline kind"),
        ({"genome": {"sequence": "ACGT", "fasta": "x.fa"}}, "exactly one"),
        ({"genome": None}, "genome"),
        ({"pcr": {"target_start": 10}}, "target_end"),
        ({"sequencing": {"coverage": "deep"}}, "Invalid pipeline config"),
        ({"gel": {"samples": [{"name": "no size"}]}}, "size"),
        ({"crispr": "yes"}, "mapping"),
    ],
)
def test_parse_pipeline_spec_errors(overrides, message):
    with pytest.raises(ExperimentSpecError, match=message):
        parse_pipeline_spec(pipeline_config(**overrides))


def test_pipeline_requires_a_stage():
    data = {"kind": PIPELINE_KIND, "genome": {"sequence": "ACGT"}}
    with pytest.raises(ExperimentSpecError, match="at least one stage"):
        parse_pipeline_spec(data)


def test_load_pipeline_spec_reports_bad_files(tmp_path):
    with pytest.raises(ExperimentSpecError, match="not found"):
        load_pipeline_spec(tmp_path / "missing.yaml")
    broken = tmp_path / "broken.yaml"
    broken.write_text("kind: [unclosed\n", encoding="utf-8")
    with pytest.raises(ExperimentSpecError, match="not valid YAML"):
        load_pipeline_spec(broken)
    with pytest.raises(ExperimentSpecError, match="not found"):
        parse_pipeline_spec(pipeline_config(genome={"fasta": "nowhere.fa"}), base_dir=tmp_path)


def test_run_pipeline_end_to_end():
    spec = parse_pipeline_spec(pipeline_config())
    result = run_pipeline(spec)
    assert result.seed == 11
    assert result.genome_length == 1000
    assert [site.position for site in result.target_sites][:4] == [420, 443, 466, 489]
    assert result.editing is not None
    assert result.edited_genome_length is not None
    assert len(result.primers) == 2
    assert result.pcr is not None and result.pcr.success
    assert result.pcr.length > 150
    assert result.sequencing is not None
    assert result.sequencing.success
    assert len(result.sequencing.reads) == result.pcr.length * 20 // 150
    assert result.gel is not None
    assert len(result.gel.lanes) == 2
    assert len(result.gel.lanes[1]) == 1


def test_run_pipeline_is_reproducible_and_seed_overrides_config():
    spec = parse_pipeline_spec(pipeline_config())
    first = run_pipeline(spec)
    second = run_pipeline(spec)
    assert to_payload(first) == to_payload(second)
    assert run_pipeline(spec, seed=12).seed == 12


def test_run_pipeline_skips_missing_stages():
    data = pipeline_config()
    for stage in ("crispr", "pcr", "sequencing"):
        data.pop(stage)
    result = run_pipeline(parse_pipeline_spec(data))
    assert result.editing is None and result.pcr is None and result.sequencing is None
    assert len(result.gel.lanes) == 1


def test_run_pipeline_rejects_out_of_range_site():
    spec = parse_pipeline_spec(pipeline_config(crispr={"start": 400, "length": 100, "site_index": 50}))
    with pytest.raises(ExperimentSpecError, match="site_index"):
        run_pipeline(spec)


def _pcr_mutation_positions(pcr) -> set:
    return {pcr.template_start + int(mutation.split(":", 1)[0]) for mutation in pcr.mutations}


def test_indel_edit_does_not_shift_variant_calls():
    spec = parse_pipeline_spec(pipeline_config())
    result = run_pipeline(spec)
    edit = result.edit
    assert edit is result.editing.primary_outcome
    assert edit.type is EditType.DELETION
    assert edit.size == 1
    assert edit.position == 417
    assert result.edited_genome_length == 999
    # only bases mutated during amplification may come back as calls
    pcr = result.pcr
    allowed = _pcr_mutation_positions(pcr)
    for variant in result.variants:
        assert pcr.template_start <= variant.position < pcr.template_start + pcr.length
        assert variant.position in allowed


@pytest.mark.parametrize("seed", [12, 13, 14, 15])
def test_variant_calls_stay_clean_across_seeds(seed):
    result = run_pipeline(parse_pipeline_spec(pipeline_config()), seed=seed)
    if result.pcr is None or not result.pcr.success:
        pytest.skip("no amplicon for this seed")
    assert {variant.position for variant in result.variants} <= _pcr_mutation_positions(result.pcr)
