import logging

import pytest

from wetlab import config


def test_resolve_seed_precedence(monkeypatch):
    monkeypatch.setenv("WETLAB_SEED", "41")
    assert config.resolve_seed(7) == 7
    assert config.resolve_seed() == 41
    monkeypatch.setenv("WETLAB_SEED", "not-a-number")
    assert config.resolve_seed() == config.DEFAULT_SEED
    monkeypatch.delenv("WETLAB_SEED")
    assert config.resolve_seed() == config.DEFAULT_SEED


def test_make_rng_is_seeded(monkeypatch):
    monkeypatch.delenv("WETLAB_SEED", raising=False)
    assert config.make_rng(3).random() == config.make_rng(3).random()


def test_resolve_log_level(monkeypatch):
    monkeypatch.delenv("WETLAB_LOG_LEVEL", raising=False)
    assert config.resolve_log_level() == logging.WARNING
    monkeypatch.setenv("WETLAB_LOG_LEVEL", "debug")
    assert config.resolve_log_level() == logging.DEBUG
    assert config.resolve_log_level("info") == logging.INFO
    with pytest.raises(ValueError):
        config.resolve_log_level("chatty")
