"""wetlab CLI: PAM search, editing, PCR, sequencing, gels and YAML pipelines."""
from __future__ import annotations

import argparse
import json
import shlex
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from . import __version__, config
from .crispr import apply_outcome, find_pam_sites, perform_editing
from .experiment import load_pipeline_spec
from .gel import (
    GEL_SETTINGS,
    LADDERS,
    DnaSample,
    estimate_size,
    render_gel_text,
    resolve_gel_setting,
    resolve_ladder,
    run_gel,
)
from .genome import DigitalGenome
from .pcr import ReactionParameters, design_primer, design_primers, run_pcr
from .pipeline import run_pipeline
from .sequencing import TECHNOLOGY_PROFILES, call_variants, resolve_profile, run_sequencing
from .serialize import envelope, to_payload


def current_command_str() -> str:
    return " ".join(shlex.quote(part) for part in ["wetlab", *sys.argv[1:]])


def _meta(args: argparse.Namespace, **extra: Any) -> Dict[str, Any]:
    meta: Dict[str, Any] = {"wetlab_version": __version__, "command": current_command_str()}
    if hasattr(args, "seed"):
        meta["seed"] = args.resolved_seed
    meta.update(extra)
    return meta


def _write_json_output(payload: Dict[str, Any], output_path: Optional[Path]) -> None:
    text = json.dumps(payload, indent=2)
    if output_path:
        out_path = Path(output_path)
        out_path.parent.mkdir(parents=True, exist_ok=True)
        out_path.write_text(text + "\n", encoding="utf-8")
    else:
        print(text)


def _load_genome(args: argparse.Namespace) -> DigitalGenome:
    if args.sequence and args.genome:
        raise ValueError("Provide either --sequence or --genome, not both.")
    if args.genome:
        try:
            return DigitalGenome.from_fasta(args.genome, record=args.record)
        except (FileNotFoundError, KeyError) as exc:
            raise ValueError(str(exc.args[0])) from exc
    if args.sequence:
        return DigitalGenome.from_string(args.sequence, name="inline")
    raise ValueError("Missing genome data; provide --sequence or --genome.")


def _rng(args: argparse.Namespace):
    args.resolved_seed = config.resolve_seed(args.seed)
    return config.make_rng(args.resolved_seed)


def _window_length(genome: DigitalGenome, start: int, length: Optional[int]) -> int:
    return length if length is not None else genome.total_length() - start


def command_crispr_sites(args: argparse.Namespace) -> None:
    genome = _load_genome(args)
    rng = _rng(args)
    sites = find_pam_sites(genome, args.start, _window_length(genome, args.start, args.length), args.pam, rng=rng)
    if args.top is not None:
        sites = sorted(sites, key=lambda site: site.on_target_score, reverse=True)[: args.top]
    payload = envelope("wetlab.crispr.sites", sites, **_meta(args, genome=genome.name, pam=args.pam))
    _write_json_output(payload, args.json)


def command_crispr_edit(args: argparse.Namespace) -> None:
    genome = _load_genome(args)
    rng = _rng(args)
    sites = find_pam_sites(genome, args.start, _window_length(genome, args.start, args.length), args.pam, rng=rng)
    if not sites:
        raise ValueError(f"No {args.pam} sites found in the requested window.")
    if not 0 <= args.site_index < len(sites):
        raise ValueError(f"--site-index {args.site_index} out of range (found {len(sites)} sites).")
    site = sites[args.site_index]
    result = perform_editing(genome, site, args.hdr_template, rng=rng)
    if args.edited_fasta:
        edited = apply_outcome(genome, result.primary_outcome)
        args.edited_fasta.parent.mkdir(parents=True, exist_ok=True)
        args.edited_fasta.write_text(f">{edited.name}\n{edited.sequence}\n", encoding="utf-8")
    payload = envelope(
        "wetlab.crispr.edit",
        {"site": site, "result": result},
        **_meta(args, genome=genome.name),
    )
    _write_json_output(payload, args.json)


def command_pcr_design(args: argparse.Namespace) -> None:
    genome = _load_genome(args)
    primers = design_primers(genome, args.target_start, args.target_end, args.primer_length)
    if not primers:
        print("No acceptable primer pair found for the target.", file=sys.stderr)
    payload = envelope("wetlab.pcr.primers", primers, **_meta(args, genome=genome.name))
    _write_json_output(payload, args.json)


def _reaction_params(args: argparse.Namespace) -> ReactionParameters:
    base = ReactionParameters.high_fidelity() if args.high_fidelity else ReactionParameters.standard()
    return ReactionParameters(
        cycles=args.cycles if args.cycles is not None else base.cycles,
        annealing_temp=args.annealing_temp if args.annealing_temp is not None else base.annealing_temp,
        extension_time=base.extension_time,
        use_high_fidelity=base.use_high_fidelity,
        mg_mM=base.mg_mM,
        dntp_uM=base.dntp_uM,
    )


def command_pcr_run(args: argparse.Namespace) -> None:
    genome = _load_genome(args)
    rng = _rng(args)
    forward = design_primer(args.forward, True)
    reverse = design_primer(args.reverse, False)
    result = run_pcr(genome, forward, reverse, _reaction_params(args), rng=rng)
    payload = envelope(
        "wetlab.pcr.result",
        {"forward": forward, "reverse": reverse, "result": result},
        **_meta(args, genome=genome.name),
    )
    _write_json_output(payload, args.json)


def command_seq_run(args: argparse.Namespace) -> None:
    genome = _load_genome(args)
    rng = _rng(args)
    profile = resolve_profile(args.technology)
    result = run_sequencing(genome, profile, args.coverage, args.region_start, args.region_length, rng=rng)
    data: Dict[str, Any] = to_payload(result, exclude=() if args.include_reads else ("reads",))
    if args.call_variants:
        data["variants"] = to_payload(call_variants(result.reads, genome, args.min_depth, args.min_quality))
    if args.fastq:
        args.fastq.parent.mkdir(parents=True, exist_ok=True)
        with args.fastq.open("w", encoding="utf-8") as handle:
            for read in result.reads:
                handle.write(read.to_fastq() + "\n")
    if args.report:
        print(result.report, file=sys.stderr)
    _write_json_output(envelope("wetlab.sequencing.run", data, **_meta(args, genome=genome.name)), args.json)


def _parse_sample(raw: str) -> tuple[str, int]:
    name, sep, size = raw.rpartition(":")
    if not sep:
        name, size = f"{raw} bp", raw
    try:
        return name, int(size)
    except ValueError as exc:
        raise ValueError(f"Gel samples are NAME:SIZE or SIZE, got {raw!r}.") from exc


def command_gel_run(args: argparse.Namespace) -> None:
    rng = _rng(args)
    samples: List[DnaSample] = [DnaSample.ladder(f"{args.ladder} ladder", resolve_ladder(args.ladder))]
    for raw in args.sample or []:
        name, size = _parse_sample(raw)
        samples.append(DnaSample.single(name, size, args.concentration))
    result = run_gel(
        samples,
        resolve_gel_setting(args.setting),
        args.time,
        args.voltage,
        rng=rng,
        migration_noise=args.migration_noise,
    )
    ladder = result.lanes[0] if result.lanes else ()
    estimates = [
        [estimate_size(band.migration_distance, ladder) for band in lane] for lane in result.lanes[1:]
    ]
    if args.text:
        print(render_gel_text(result), file=sys.stderr)
    if args.png:
        from .gel.viz import save_gel_png

        save_gel_png(result, args.png)
    payload = envelope(
        "wetlab.gel.run",
        {"result": result, "estimated_sizes": estimates},
        **_meta(args),
    )
    _write_json_output(payload, args.json)


def command_pipeline_run(args: argparse.Namespace) -> None:
    spec = load_pipeline_spec(args.config)
    result = run_pipeline(spec, seed=args.seed)
    args.resolved_seed = result.seed
    data = to_payload(result)
    if result.sequencing is not None and not args.include_reads:
        data["sequencing"].pop("reads", None)
    payload = envelope("wetlab.pipeline.result", data, **_meta(args, config=args.config))
    _write_json_output(payload, args.json)


def _add_genome_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--sequence", help="Inline DNA string.")
    parser.add_argument("--genome", type=Path, help="Path to a FASTA file.")
    parser.add_argument("--record", help="FASTA record to load (default: first).")


def _add_seed_arg(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--seed", type=int, help="Deterministic seed (default: $WETLAB_SEED or 0).")


def _add_json_arg(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--json", type=Path, help="Optional JSON output path (default: stdout).")


def build_parser() -> argparse.ArgumentParser:
    description = (
        "wetlab CLI for simulated molecular-biology workflows.\n\n"
        "Simulation only: wetlab operates on digital sequences and does not control lab equipment "
        "or prescribe wet-lab procedures."
    )
    parser = argparse.ArgumentParser(
        prog="wetlab",
        description=description,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--log-level", help="Logging level (default: $WETLAB_LOG_LEVEL or WARNING).")
    subparsers = parser.add_subparsers(dest="command", required=True)

    crispr = subparsers.add_parser("crispr", help="PAM search and repair-outcome simulation.")
    crispr_sub = crispr.add_subparsers(dest="crispr_command", required=True)
    for name, func, help_text in (
        ("sites", command_crispr_sites, "List PAM sites with on/off-target scores."),
        ("edit", command_crispr_edit, "Cut at a PAM site and simulate repair."),
    ):
        sub = crispr_sub.add_parser(name, help=help_text)
        _add_genome_args(sub)
        sub.add_argument("--start", type=int, default=0, help="Window start (default: 0).")
        sub.add_argument("--length", type=int, help="Window length (default: to the genome end).")
        sub.add_argument("--pam", default="NGG", help="IUPAC PAM pattern (default: NGG).")
        _add_seed_arg(sub)
        _add_json_arg(sub)
        sub.set_defaults(func=func)
        if name == "sites":
            sub.add_argument("--top", type=int, help="Keep only the N best on-target sites.")
        else:
            sub.add_argument("--site-index", type=int, default=0, help="Site to edit (default: 0).")
            sub.add_argument("--hdr-template", help="Donor template enabling HDR.")
            sub.add_argument("--edited-fasta", type=Path, help="Write the edited genome to this FASTA path.")

    pcr = subparsers.add_parser("pcr", help="Primer design and amplification.")
    pcr_sub = pcr.add_subparsers(dest="pcr_command", required=True)
    pcr_design = pcr_sub.add_parser("design", help="Design a primer pair flanking a target.")
    _add_genome_args(pcr_design)
    pcr_design.add_argument("--target-start", type=int, required=True)
    pcr_design.add_argument("--target-end", type=int, required=True)
    pcr_design.add_argument("--primer-length", type=int, default=20, help="Primer length (default: 20).")
    _add_json_arg(pcr_design)
    pcr_design.set_defaults(func=command_pcr_design)

    pcr_run = pcr_sub.add_parser("run", help="Amplify with a primer pair.")
    _add_genome_args(pcr_run)
    pcr_run.add_argument("--forward", required=True, help="Forward primer 5'->3'.")
    pcr_run.add_argument("--reverse", required=True, help="Reverse primer 5'->3'.")
    pcr_run.add_argument("--cycles", type=int, help="Cycle count (default: preset).")
    pcr_run.add_argument("--annealing-temp", type=float, help="Annealing temperature in C (default: preset).")
    pcr_run.add_argument("--high-fidelity", action="store_true", help="Use the high-fidelity preset.")
    _add_seed_arg(pcr_run)
    _add_json_arg(pcr_run)
    pcr_run.set_defaults(func=command_pcr_run)

    seq = subparsers.add_parser("seq", help="Sequencing simulation.")
    seq_sub = seq.add_subparsers(dest="seq_command", required=True)
    seq_run = seq_sub.add_parser("run", help="Simulate reads and run statistics.")
    _add_genome_args(seq_run)
    seq_run.add_argument(
        "--technology",
        default="ILLUMINA_PE150",
        help=f"Technology profile ({', '.join(TECHNOLOGY_PROFILES)}; default: ILLUMINA_PE150).",
    )
    seq_run.add_argument("--coverage", type=int, default=30, help="Target coverage (default: 30).")
    seq_run.add_argument("--region-start", type=int, default=0)
    seq_run.add_argument("--region-length", type=int, help="Region length (default: whole genome).")
    seq_run.add_argument("--call-variants", action="store_true", help="Run the pileup SNP caller.")
    seq_run.add_argument("--min-depth", type=int, default=10)
    seq_run.add_argument("--min-quality", type=float, default=20.0)
    seq_run.add_argument("--include-reads", action="store_true", help="Embed reads in the JSON payload.")
    seq_run.add_argument("--fastq", type=Path, help="Write reads to this FASTQ path.")
    seq_run.add_argument("--report", action="store_true", help="Print the text report to stderr.")
    _add_seed_arg(seq_run)
    _add_json_arg(seq_run)
    seq_run.set_defaults(func=command_seq_run)

    gel = subparsers.add_parser("gel", help="Gel electrophoresis simulation.")
    gel_sub = gel.add_subparsers(dest="gel_command", required=True)
    gel_run = gel_sub.add_parser("run", help="Run samples next to a ladder.")
    gel_run.add_argument("--sample", action="append", help="Sample as NAME:SIZE or SIZE (repeatable).")
    gel_run.add_argument("--ladder", default="1kb", help=f"Ladder ({', '.join(LADDERS)}; default: 1kb).")
    settings_help = ", ".join(GEL_SETTINGS).replace("%", "%%")
    gel_run.add_argument("--setting", default="1.0%", help=f"Agarose ({settings_help}; default: 1.0%%).")
    gel_run.add_argument("--time", type=float, default=45.0, help="Run time in minutes (default: 45).")
    gel_run.add_argument("--voltage", type=float, default=100.0, help="Voltage (default: 100).")
    gel_run.add_argument("--concentration", type=float, default=50.0, help="Sample ng/uL (default: 50).")
    gel_run.add_argument(
        "--migration-noise", type=float, default=0.01, help="Half-width of band position jitter (default: 0.01)."
    )
    gel_run.add_argument("--text", action="store_true", help="Print an ASCII gel to stderr.")
    gel_run.add_argument("--png", type=Path, help="Save a PNG rendering to this path.")
    _add_seed_arg(gel_run)
    _add_json_arg(gel_run)
    gel_run.set_defaults(func=command_gel_run)

    pipeline = subparsers.add_parser("pipeline", help="YAML-driven multi-stage runs.")
    pipeline_sub = pipeline.add_subparsers(dest="pipeline_command", required=True)
    pipeline_run = pipeline_sub.add_parser("run", help="Run a wetlab.pipeline.v1 config.")
    pipeline_run.add_argument("--config", type=Path, required=True, help="Pipeline YAML path.")
    pipeline_run.add_argument("--include-reads", action="store_true", help="Embed reads in the JSON payload.")
    _add_seed_arg(pipeline_run)
    _add_json_arg(pipeline_run)
    pipeline_run.set_defaults(func=command_pipeline_run)

    return parser


def main(argv: Sequence[str] | None = None) -> None:
    parser = build_parser()
    try:
        args = parser.parse_args(argv)
        config.configure_logging(args.log_level)
        args.func(args)
    except ValueError as exc:
        parser.error(str(exc))


if __name__ == "__main__":  # pragma: no cover - manual invocation path
    main()
