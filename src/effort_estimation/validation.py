"""
Boundary validation for calculator inputs.

The calculators accept anything numeric and let bad values turn into
NaN / inf. Entry points (CLI, API, history store) call these checks first
so users get an error message instead of a nonsense estimate.
"""

from __future__ import annotations

import math
from numbers import Real
from typing import Any, Mapping

from .constants import (
    FP_COMPONENTS,
    GSC_IDS,
    GSC_MAX_RATING,
    GSC_MIN_RATING,
    SCALE_FACTORS_BY_ID,
)
from .schema import CocomoInputs, FPInputs


class InvalidInputError(ValueError):
    """Raised when estimation inputs are rejected at the boundary."""


def _is_number(value: Any) -> bool:
    return isinstance(value, Real) and not isinstance(value, bool)


def require_finite_number(name: str, value: Any) -> float:
    if not _is_number(value) or not math.isfinite(value):
        raise InvalidInputError(f"{name} must be a finite number, got {value!r}")
    return value


def validate_fp_inputs(fp_inputs: FPInputs) -> FPInputs:
    """Every component count must be a finite number >= 0."""
    for component in FP_COMPONENTS:
        value = require_finite_number(component, getattr(fp_inputs, component))
        if value < 0:
            raise InvalidInputError(f"{component} must be >= 0, got {value!r}")
    return fp_inputs


def validate_gsc_inputs(gsc_inputs: Mapping[str, Any]) -> Mapping[str, Any]:
    """
    Ratings of known GSC ids must be whole numbers in [0, 5].

    Unknown ids and missing ids are allowed; the calculator ignores the
    former and counts the latter as 0.
    """
    for gsc_id in GSC_IDS:
        rating = gsc_inputs.get(gsc_id)
        if rating is None:
            continue
        require_finite_number(gsc_id, rating)
        if rating != int(rating) or not GSC_MIN_RATING <= rating <= GSC_MAX_RATING:
            raise InvalidInputError(
                f"{gsc_id} must be an integer between {GSC_MIN_RATING} and "
                f"{GSC_MAX_RATING}, got {rating!r}"
            )
    return gsc_inputs


def validate_cocomo_inputs(inputs: CocomoInputs) -> CocomoInputs:
    """
    KSLOC must be finite and > 0. Scale factors must name exactly the five
    known ids, each set to one of that factor's published level values.
    """
    ksloc = require_finite_number("ksloc", inputs.ksloc)
    if ksloc <= 0:
        raise InvalidInputError(f"ksloc must be > 0, got {ksloc!r}")

    unknown = sorted(set(inputs.scale_factors) - set(SCALE_FACTORS_BY_ID))
    if unknown:
        raise InvalidInputError(
            f"Unknown scale factor ids: {', '.join(unknown)}. "
            f"Expected {', '.join(SCALE_FACTORS_BY_ID)}."
        )
    missing = [sf for sf in SCALE_FACTORS_BY_ID if sf not in inputs.scale_factors]
    if missing:
        raise InvalidInputError(f"Missing scale factors: {', '.join(missing)}")

    for factor_id, value in inputs.scale_factors.items():
        require_finite_number(factor_id, value)
        allowed = SCALE_FACTORS_BY_ID[factor_id].values
        if not any(math.isclose(value, v, abs_tol=1e-9) for v in allowed):
            raise InvalidInputError(
                f"{factor_id} value {value!r} is not one of the level values "
                f"{list(allowed)}"
            )
    return inputs


def validate_actual_value(name: str, value: Any) -> Any:
    """Actual outcomes must be finite and >= 0 (None clears the field)."""
    if value is None:
        return None
    value = require_finite_number(name, value)
    if value < 0:
        raise InvalidInputError(f"{name} must be >= 0, got {value!r}")
    return value
