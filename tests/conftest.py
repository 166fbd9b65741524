import sys
from pathlib import Path

import pytest

# Make the src/ layout and the app/ entry points importable while running
# tests without an install.
repo_root = Path(__file__).resolve().parents[1]
src_dir = repo_root / "src"
for path in (src_dir, repo_root):
    if str(path) not in sys.path:
        sys.path.insert(0, str(path))

from effort_estimation.constants import nominal_scale_factors  # noqa: E402
from effort_estimation.history_store import HistoryStore, MemoryBackend  # noqa: E402


@pytest.fixture
def nominal():
    """Every scale factor at Nominal (sum 18.97)."""
    return nominal_scale_factors()


@pytest.fixture
def store():
    return HistoryStore(MemoryBackend())


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    # Point the process-wide config at a throwaway history file
    from effort_estimation import config

    for name in (
        "EE_HISTORY_BACKEND",
        "EE_COCOMO_PARAMS_PATH",
        "EE_STRICT_SCALE_FACTORS",
        "EE_R2_MIN_SAMPLES",
        "EE_LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("EE_HISTORY_PATH", str(tmp_path / "history.json"))
    monkeypatch.setattr(config, "_DEFAULT_CONFIG", None)
