import json
from pathlib import Path

import pytest

from effort_estimation.config import (
    CocomoParameters,
    Config,
    get_config,
    load_cocomo_parameters,
    save_cocomo_parameters,
)


def test_defaults_from_empty_environment():
    cfg = Config.from_env()
    assert cfg.history_backend == "file"
    assert cfg.strict_scale_factors is True
    assert cfg.r2_min_samples == 1
    assert cfg.cocomo_params_path is None
    assert cfg.cocomo_parameters() == CocomoParameters()


def test_environment_overrides(tmp_path, monkeypatch):
    monkeypatch.setenv("EE_HISTORY_BACKEND", " Memory ")
    monkeypatch.setenv("EE_STRICT_SCALE_FACTORS", "no")
    monkeypatch.setenv("EE_R2_MIN_SAMPLES", "2")
    monkeypatch.setenv("EE_LOG_LEVEL", "debug")
    monkeypatch.setenv("EE_HISTORY_PATH", str(tmp_path / "h.json"))

    cfg = Config.from_env()
    assert cfg.history_backend == "memory"
    assert cfg.strict_scale_factors is False
    assert cfg.r2_min_samples == 2
    assert cfg.log_level == "DEBUG"
    assert cfg.history_path == Path(tmp_path / "h.json")


def test_bad_integer_falls_back_to_default(monkeypatch):
    monkeypatch.setenv("EE_R2_MIN_SAMPLES", "two")
    assert Config.from_env().r2_min_samples == 1


def test_get_config_is_cached_until_reload(monkeypatch):
    first = get_config()
    monkeypatch.setenv("EE_R2_MIN_SAMPLES", "3")
    assert get_config() is first
    assert get_config(force_reload=True).r2_min_samples == 3


def test_cocomo_parameters_file_round_trip(tmp_path):
    path = tmp_path / "params" / "cocomo.json"
    params = CocomoParameters(a=2.5, base_exponent=0.9)
    save_cocomo_parameters(params, path)
    assert load_cocomo_parameters(path) == params


def test_partial_parameters_file_keeps_defaults(tmp_path, monkeypatch):
    path = tmp_path / "cocomo.json"
    path.write_text(json.dumps({"a": 3.1, "note": "calibrated 2024"}), encoding="utf-8")
    monkeypatch.setenv("EE_COCOMO_PARAMS_PATH", str(path))

    params = Config.from_env().cocomo_parameters()
    assert params.a == 3.1
    assert params.c == CocomoParameters().c


def test_missing_parameters_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_cocomo_parameters(tmp_path / "nope.json")
