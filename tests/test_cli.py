import json
import os
import random
import subprocess
import sys
from pathlib import Path

import yaml

import wetlab
from wetlab import bioinformatics

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"

SCENARIO = "ACGTACGTACGTACGTACGTAGG"


def run_cli(*args: str, check: bool = True) -> subprocess.CompletedProcess[str]:
    env = os.environ.copy()
    existing = env.get("PYTHONPATH", "")
    path_entries = [str(SRC)]
    if existing:
        path_entries.append(existing)
    env["PYTHONPATH"] = os.pathsep.join(path_entries)
    env.pop("WETLAB_SEED", None)
    result = subprocess.run(
        [sys.executable, "-m", "wetlab.cli", *args],
        cwd=ROOT,
        capture_output=True,
        text=True,
        env=env,
    )
    if check and result.returncode != 0:
        raise AssertionError(f"Command failed: {result.stderr}")
    return result


def test_cli_crispr_sites_reports_trailing_pam():
    result = run_cli("crispr", "sites", "--sequence", SCENARIO, "--seed", "3")
    payload = json.loads(result.stdout)
    assert payload["schema"]["kind"] == "wetlab.crispr.sites"
    assert payload["meta"]["seed"] == 3
    assert payload["meta"]["wetlab_version"] == wetlab.__version__
    assert [site["position"] for site in payload["data"]] == [20]
    assert payload["data"][0]["pam_sequence"] == "AGG"


def test_cli_crispr_edit_writes_edited_fasta(tmp_path: Path):
    fasta = tmp_path / "edited.fa"
    out = tmp_path / "edit.json"
    run_cli(
        "crispr",
        "edit",
        "--sequence",
        SCENARIO * 3,
        "--edited-fasta",
        str(fasta),
        "--json",
        str(out),
    )
    payload = json.loads(out.read_text(encoding="utf-8"))
    assert payload["schema"]["kind"] == "wetlab.crispr.edit"
    assert payload["data"]["site"]["position"] == 20
    assert payload["data"]["result"]["repair_pathway"] in {"NHEJ", "HDR", "NONE"}
    header, sequence = fasta.read_text(encoding="utf-8").splitlines()
    assert header == ">inline:edited"
    assert set(sequence) <= set("ACGT")


def test_cli_rejects_unsupported_pam():
    result = run_cli("crispr", "sites", "--sequence", SCENARIO, "--pam", "NG", check=False)
    assert result.returncode == 2
    assert "PAM pattern" in result.stderr


def test_cli_gel_run_sizes_sample(tmp_path: Path):
    png = tmp_path / "gel.png"
    result = run_cli(
        "gel", "run", "--sample", "amplicon:1000", "--time", "100", "--migration-noise", "0", "--text", "--png", str(png)
    )
    payload = json.loads(result.stdout)
    assert payload["schema"]["kind"] == "wetlab.gel.run"
    data = payload["data"]
    assert len(data["result"]["lanes"]) == 2
    [[estimate]] = data["estimated_sizes"]
    assert abs(estimate - 1000) <= 100
    assert "Bands:" in result.stderr
    assert png.exists()


def test_cli_seq_run_summarizes_reads(tmp_path: Path):
    genome = bioinformatics.random_sequence(random.Random(1), 1500)
    fastq = tmp_path / "reads.fq"
    result = run_cli(
        "seq",
        "run",
        "--sequence",
        genome,
        "--technology",
        "ILLUMINA_SE150",
        "--coverage",
        "15",
        "--call-variants",
        "--fastq",
        str(fastq),
        "--report",
    )
    payload = json.loads(result.stdout)
    data = payload["data"]
    assert "reads" not in data
    assert data["stats"]["total_reads"] == 150
    assert data["technology"]["name"] == "ILLUMINA_SE150"
    assert isinstance(data["variants"], list)
    assert len(fastq.read_text(encoding="utf-8").splitlines()) == 4 * 150
    assert "SEQUENCING QUALITY REPORT" in result.stderr


def test_cli_pcr_design_and_run():
    genome = "GCAGT" * 200
    design = json.loads(
        run_cli(
            "pcr", "design", "--sequence", genome, "--target-start", "400", "--target-end", "600", "--primer-length", "40"
        ).stdout
    )
    forward, reverse = design["data"]
    run = json.loads(
        run_cli(
            "pcr", "run", "--sequence", genome, "--forward", forward["sequence"], "--reverse", reverse["sequence"]
        ).stdout
    )
    assert run["schema"]["kind"] == "wetlab.pcr.result"
    assert run["data"]["result"]["success"] is True


def test_cli_pipeline_run(tmp_path: Path):
    config = {
        "kind": "wetlab.pipeline.v1",
        "name": "smoke",
        "seed": 2,
        "genome": {"sequence": bioinformatics.random_sequence(random.Random(9), 1200)},
        "sequencing": {"technology": "ILLUMINA_SE150", "coverage": 12},
        "gel": {"samples": [{"name": "control", "size": 1500}]},
    }
    config_path = tmp_path / "pipeline.yaml"
    config_path.write_text(yaml.safe_dump(config), encoding="utf-8")
    out = tmp_path / "result.json"
    run_cli("pipeline", "run", "--config", str(config_path), "--json", str(out))
    payload = json.loads(out.read_text(encoding="utf-8"))
    assert payload["schema"]["kind"] == "wetlab.pipeline.result"
    assert payload["meta"]["seed"] == 2
    data = payload["data"]
    assert data["name"] == "smoke"
    assert "reads" not in data["sequencing"]
    assert data["sequencing"]["stats"]["total_reads"] == 1200 * 12 // 150
    assert len(data["gel"]["lanes"]) == 2


def test_cli_pipeline_reports_bad_config(tmp_path: Path):
    config_path = tmp_path / "pipeline.yaml"
    config_path.write_text("kind: something.else\n", encoding="utf-8")
    result = run_cli("pipeline", "run", "--config", str(config_path), check=False)
    assert result.returncode == 2
    assert "pipeline kind" in result.stderr
