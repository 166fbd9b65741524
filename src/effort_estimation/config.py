"""
Configuration module for the estimation engine.

Single source of truth for:
- History storage settings (local JSON file or Azure Blob)
- COCOMO II model parameters and scale-factor handling
- Accuracy reporting policy

All values can be overridden via environment variables.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
import json
import logging
import os
from pathlib import Path
from typing import Optional

from .constants import (
    COCOMO_A,
    COCOMO_BASE_EXPONENT,
    COCOMO_C,
    COCOMO_TDEV_BASE,
    COCOMO_TDEV_SCALE,
)

logger = logging.getLogger(__name__)

DEFAULT_HISTORY_PATH = Path.home() / ".effort_estimation" / "history.json"
DEFAULT_HISTORY_BLOB_NAME = "estimation/history.json"


def _get_env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "y", "on"}


def _get_env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


@dataclass(frozen=True)
class CocomoParameters:
    """
    Calibration constants of the COCOMO II effort and schedule equations.

        Effort = a * KSLOC^B            B = base_exponent + 0.01 * sum(SF)
        TDEV   = c * Effort^F           F = tdev_base + tdev_scale * (B - base_exponent)
    """

    a: float = COCOMO_A
    base_exponent: float = COCOMO_BASE_EXPONENT
    c: float = COCOMO_C
    tdev_base: float = COCOMO_TDEV_BASE
    tdev_scale: float = COCOMO_TDEV_SCALE


def load_cocomo_parameters(path: Path) -> CocomoParameters:
    """
    Load a COCOMO parameter set from a JSON file.

    Expected keys (all optional): a, base_exponent, c, tdev_base, tdev_scale.
    Missing keys keep their default value; unknown keys are ignored.
    """
    if not path.exists():
        raise FileNotFoundError(f"COCOMO parameters file not found at {path}.")
    data = json.loads(path.read_text(encoding="utf-8"))
    defaults = asdict(CocomoParameters())
    known = {key: float(data[key]) for key in defaults if key in data}
    ignored = sorted(set(data) - set(defaults))
    if ignored:
        logger.warning("Ignoring unknown COCOMO parameter keys: %s", ", ".join(ignored))
    return CocomoParameters(**known)


def save_cocomo_parameters(params: CocomoParameters, path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(asdict(params), indent=2), encoding="utf-8")


@dataclass
class Config:
    """
    Runtime configuration for the estimation engine.

    All fields default from environment variables but can be overridden
    programmatically by constructing Config(...) manually if needed.
    """

    # History storage: "file", "azure" or "memory"
    history_backend: str = "file"
    history_path: Path = DEFAULT_HISTORY_PATH

    # Azure Blob Storage
    azure_blob_connection_string: Optional[str] = None
    azure_blob_container_name: Optional[str] = None
    history_blob_name: str = DEFAULT_HISTORY_BLOB_NAME

    # Only sum the five known scale factor ids when computing exponent B
    strict_scale_factors: bool = True
    cocomo_params_path: Optional[Path] = None

    # Smallest sample for which R² is reported
    r2_min_samples: int = 1

    log_level: str = "WARNING"

    @classmethod
    def from_env(cls) -> "Config":
        """
        Construct a Config object by reading environment variables.

        Environment variables (all optional):
        - EE_HISTORY_BACKEND            (file / azure / memory)
        - EE_HISTORY_PATH
        - EE_AZURE_BLOB_CONNECTION_STRING
        - EE_AZURE_BLOB_CONTAINER_NAME
        - EE_HISTORY_BLOB_NAME
        - EE_STRICT_SCALE_FACTORS       (true/false)
        - EE_COCOMO_PARAMS_PATH
        - EE_R2_MIN_SAMPLES             (int)
        - EE_LOG_LEVEL
        """
        params_path = os.getenv("EE_COCOMO_PARAMS_PATH")
        return cls(
            history_backend=os.getenv("EE_HISTORY_BACKEND", "file").strip().lower(),
            history_path=Path(os.getenv("EE_HISTORY_PATH", str(DEFAULT_HISTORY_PATH))),
            azure_blob_connection_string=os.getenv(
                "EE_AZURE_BLOB_CONNECTION_STRING"
            ),
            azure_blob_container_name=os.getenv(
                "EE_AZURE_BLOB_CONTAINER_NAME"
            ),
            history_blob_name=os.getenv(
                "EE_HISTORY_BLOB_NAME", DEFAULT_HISTORY_BLOB_NAME
            ),
            strict_scale_factors=_get_env_bool("EE_STRICT_SCALE_FACTORS", default=True),
            cocomo_params_path=Path(params_path) if params_path else None,
            r2_min_samples=_get_env_int("EE_R2_MIN_SAMPLES", default=1),
            log_level=os.getenv("EE_LOG_LEVEL", "WARNING").upper(),
        )

    def cocomo_parameters(self) -> CocomoParameters:
        """Parameters from cocomo_params_path, or the published defaults."""
        if self.cocomo_params_path is None:
            return CocomoParameters()
        return load_cocomo_parameters(self.cocomo_params_path)


# Convenience singleton-style accessor if you want a shared config
_DEFAULT_CONFIG: Optional[Config] = None


def get_config(force_reload: bool = False) -> Config:
    """
    Return a process-wide Config instance.

    Use `force_reload=True` if environment variables changed at runtime
    and you want to refresh.
    """
    global _DEFAULT_CONFIG
    if _DEFAULT_CONFIG is None or force_reload:
        _DEFAULT_CONFIG = Config.from_env()
    return _DEFAULT_CONFIG
