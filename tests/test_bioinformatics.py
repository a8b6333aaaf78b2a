import random

import numpy as np
import pytest

from wetlab import bioinformatics
from wetlab.errors import InvalidRegion
from wetlab.genome import DigitalGenome, read_window


def test_reverse_complement_involution():
    rng = random.Random(3)
    for length in (0, 1, 7, 64):
        seq = bioinformatics.random_sequence(rng, length)
        assert bioinformatics.reverse_complement(bioinformatics.reverse_complement(seq)) == seq
    assert bioinformatics.reverse_complement("AACGN") == "NCGTT"


def test_normalize_sequence_rejects_unknown_characters():
    assert bioinformatics.normalize_sequence(" ac gt\nn ") == "ACGTN"
    with pytest.raises(ValueError):
        bioinformatics.normalize_sequence("ACGU")
    with pytest.raises(ValueError):
        bioinformatics.normalize_sequence("ACGN", allow_ambiguous=False)


@pytest.mark.parametrize(
    "code,allowed",
    [
        ("N", "ACGT"),
        ("R", "AG"),
        ("Y", "CT"),
        ("S", "CG"),
        ("W", "AT"),
        ("K", "GT"),
        ("M", "AC"),
        ("G", "G"),
    ],
)
def test_matches_iupac_code_table(code, allowed):
    matched = {base for base in "ACGT" if bioinformatics.matches_iupac(base, code)}
    assert matched == set(allowed)
    assert bioinformatics.matches_iupac(allowed[0].lower(), code.lower())


def test_matches_pattern_requires_equal_length():
    assert bioinformatics.matches_pattern("TGG", "NGG")
    assert not bioinformatics.matches_pattern("TGC", "NGG")
    assert not bioinformatics.matches_pattern("TG", "NGG")
    assert bioinformatics.matches_pattern("AAGAGT", "NNGRRT")


def test_gc_and_encoding():
    assert bioinformatics.gc_content("") == 0.0
    assert bioinformatics.gc_content("GGCA") == pytest.approx(0.75)
    codes = bioinformatics.encode_sequence_to_uint8("ACGTN")
    assert codes.dtype == np.uint8
    assert codes.tolist() == [0, 1, 2, 3, 4]


def test_substitute_base_always_changes_the_base():
    rng = random.Random(0)
    for base in "ACGT" * 25:
        assert bioinformatics.substitute_base(rng, base) != base


def test_digital_genome_windows_truncate_and_validate():
    genome = DigitalGenome.from_string("acgtacgtNN", name="demo")
    assert genome.sequence == "ACGTACGTNN"
    assert genome.total_length() == 10
    assert genome.get_sequence(8, 5) == "NN"
    assert genome.get_sequence(20, 5) == ""
    with pytest.raises(InvalidRegion):
        genome.get_sequence(-1, 3)
    with pytest.raises(ValueError):
        DigitalGenome.from_string("ACGX")


def test_read_window_fails_fast():
    genome = DigitalGenome.from_string("ACGTACGT")
    assert read_window(genome, 2, 3) == "GTA"
    for position, length in ((-1, 3), (0, 0), (8, 2)):
        with pytest.raises(InvalidRegion):
            read_window(genome, position, length)


def test_digital_genome_from_fasta(tmp_path):
    fasta = tmp_path / "demo.fa"
    fasta.write_text(">chr1 first\nACGT\nACGT\n>chr2\nggcc\n", encoding="utf-8")
    first = DigitalGenome.from_fasta(fasta)
    assert first.name == "chr1"
    assert first.sequence == "ACGTACGT"
    second = DigitalGenome.from_fasta(fasta, record="chr2")
    assert second.sequence == "GGCC"
    with pytest.raises(KeyError):
        DigitalGenome.from_fasta(fasta, record="chr3")
    with pytest.raises(FileNotFoundError):
        DigitalGenome.from_fasta(tmp_path / "missing.fa")
