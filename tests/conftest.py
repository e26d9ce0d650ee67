"""Shared pytest setup for the DigitScope suite."""

from __future__ import annotations

import sys
from pathlib import Path

import numpy as np
import pytest

# Make `digitscope` importable from src/ without an editable install.
SRC = Path(__file__).resolve().parents[1] / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))


@pytest.fixture
def rng() -> np.random.Generator:
    return np.random.default_rng(1234)
