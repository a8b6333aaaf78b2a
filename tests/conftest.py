import random
import sys
from pathlib import Path

import matplotlib
import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))


def pytest_sessionstart(session):  # noqa: D401
    matplotlib.use("Agg")


class ScriptedRandom(random.Random):
    """``random()`` replays scripted values first, then falls back to the seeded stream."""

    def __init__(self, values, seed: int = 0):
        super().__init__(seed)
        self._values = list(values)

    def random(self):
        if self._values:
            return self._values.pop(0)
        return super().random()


@pytest.fixture
def scripted_rng():
    return ScriptedRandom
