import os
import sys
from pathlib import Path

import numpy as np
import pandas as pd
import pytest

# headless matplotlib for every test
os.environ.setdefault("MPLBACKEND", "Agg")

# Ensure repo root on path (so "import application.*" works)
PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

CUTS = ["Fair", "Good", "Very Good", "Premium", "Ideal"]
COLORS = ["J", "I", "H", "G", "F", "E", "D"]
CLARITIES = ["I1", "SI2", "SI1", "VS2", "VS1", "VVS2", "VVS1", "IF"]


def make_diamonds(n: int = 1000, seed: int = 7) -> pd.DataFrame:
    """
    Deterministic synthetic diamonds with a known signal: price = 100 + 50 * carat + noise.
    Grades, depth and table are pure noise; x/y/z track carat like real stones.
    """
    rng = np.random.default_rng(seed)
    carat = rng.uniform(0.2, 2.5, n)
    x = 6.5 * np.cbrt(carat) + rng.normal(0, 0.05, n)
    return pd.DataFrame(
        {
            "carat": carat,
            "cut": rng.choice(CUTS, n),
            "color": rng.choice(COLORS, n),
            "clarity": rng.choice(CLARITIES, n),
            "depth": rng.normal(61.7, 1.4, n),
            "table": rng.normal(57.5, 2.2, n),
            "price": 100 + 50 * carat + rng.normal(0, 2, n),
            "x": x,
            "y": x + rng.normal(0, 0.05, n),
            "z": 0.62 * x + rng.normal(0, 0.03, n),
        }
    )


@pytest.fixture
def raw_diamonds():
    return make_diamonds()


@pytest.fixture
def diamonds(raw_diamonds):
    """Schema-checked frame (ordered categorical grades) with log_price appended."""
    from application.dataset.io.loader import prepare_frame
    from application.dataset.processing import add_log_price

    return add_log_price(prepare_frame(raw_diamonds))


@pytest.fixture
def train_test(diamonds):
    from application.dataset.io.splitter import split_data

    return split_data(diamonds, train_size=0.9, seed=44)


@pytest.fixture
def artifact_dir(tmp_path, monkeypatch):
    from core.settings import settings

    out = tmp_path / "artifacts"
    monkeypatch.setattr(settings, "ARTIFACT_DIR", str(out))
    return out


@pytest.fixture
def diamond_factory():
    return make_diamonds
