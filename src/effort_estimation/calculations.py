"""
Pure math for function point and COCOMO II estimation.

No I/O, no storage. Just:
- Fixed 2-decimal rounding of derived values
- Function points: UFP, TDI, VAF, AFP
- COCOMO II: exponent B, effort, development time
- Derived ratios (productivity, average staffing)

Inputs are not validated here (see validation.py). Invalid numbers flow
through the arithmetic and come out as NaN / inf instead of raising.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Context, Decimal
import math
from typing import Dict, Mapping, Optional

from .config import CocomoParameters
from .constants import (
    COCOMO_EAF,
    FP_COMPONENTS,
    GSC_IDS,
    SCALE_FACTORS_BY_ID,
    SIMPLE_WEIGHTS,
    VAF_BASE,
    VAF_STEP,
)
from .schema import (
    CocomoCalculationResult,
    CocomoInputs,
    FPCalculationResult,
    FPInputs,
    GSCInputs,
)

_TWO_PLACES = Decimal("0.01")
# Wide enough to quantize any finite double to 2 places
_ROUNDING_CONTEXT = Context(prec=400, rounding=ROUND_HALF_UP)


def round2(value: float) -> float:
    """
    Round to 2 decimal places, halves away from zero.

    Rounds the shortest decimal representation of the float, so 1.005
    becomes 1.01 and -2.675 becomes -2.68. NaN and infinities are returned
    unchanged.
    """
    value = float(value)
    if not math.isfinite(value):
        return value
    return float(Decimal(repr(value)).quantize(_TWO_PLACES, context=_ROUNDING_CONTEXT))


def _pow(base: float, exponent: float) -> float:
    # math.pow raises where IEEE arithmetic would give NaN / inf
    if base == 0 and exponent < 0:
        return math.inf
    try:
        return math.pow(base, exponent)
    except ValueError:
        return math.nan
    except OverflowError:
        return math.inf


# --- Function points ---------------------------------------------------------


def unadjusted_function_points(fp_inputs: FPInputs) -> float:
    """UFP = sum of each component count times its average weight."""
    return sum(
        getattr(fp_inputs, component) * SIMPLE_WEIGHTS[component]
        for component in FP_COMPONENTS
    )


def fp_component_breakdown(fp_inputs: FPInputs) -> Dict[str, float]:
    """Weighted contribution of each component type to UFP."""
    return {
        component: getattr(fp_inputs, component) * SIMPLE_WEIGHTS[component]
        for component in FP_COMPONENTS
    }


def total_degree_of_influence(gsc_inputs: Mapping[str, Optional[float]]) -> float:
    """
    Sum the ratings of the 14 known GSC ids.

    Missing or None ratings count as 0. Unknown ids are ignored.
    """
    tdi = 0.0
    for gsc_id in GSC_IDS:
        rating = gsc_inputs.get(gsc_id)
        if rating is not None:
            tdi += rating
    return tdi


def value_adjustment_factor(tdi: float) -> float:
    """VAF = 0.65 + 0.01 * TDI, in [0.65, 1.35] for valid ratings."""
    return VAF_BASE + VAF_STEP * tdi


def calculate_function_points(
    fp_inputs: FPInputs,
    gsc_inputs: GSCInputs,
) -> FPCalculationResult:
    """
    Compute UFP, VAF and AFP.

    AFP is computed from the unrounded UFP and VAF; all three values are
    rounded only at the end. Inputs are echoed on the result as given.
    """
    ufp = unadjusted_function_points(fp_inputs)
    vaf = value_adjustment_factor(total_degree_of_influence(gsc_inputs))
    afp = ufp * vaf

    return FPCalculationResult(
        ufp=round2(ufp),
        vaf=round2(vaf),
        afp=round2(afp),
        inputs=fp_inputs,
        gsc=gsc_inputs,
    )


# --- COCOMO II ---------------------------------------------------------------


def sum_scale_factors(
    scale_factors: Mapping[str, float],
    *,
    strict: bool = True,
) -> float:
    """
    Sum the exponent contributions of the scale factors.

    With strict=True only PREC, FLEX, RESL, TEAM and PMAT are summed and any
    other key is skipped. With strict=False every entry counts.
    """
    total = 0.0
    for factor_id, value in scale_factors.items():
        if strict and factor_id not in SCALE_FACTORS_BY_ID:
            continue
        total += value
    return total


def scale_exponent(
    scale_factors: Mapping[str, float],
    params: Optional[CocomoParameters] = None,
    *,
    strict: bool = True,
) -> float:
    """B = base_exponent + 0.01 * sum of scale factor values."""
    params = params or CocomoParameters()
    return params.base_exponent + 0.01 * sum_scale_factors(scale_factors, strict=strict)


def calculate_cocomo_ii(
    inputs: CocomoInputs,
    params: Optional[CocomoParameters] = None,
    *,
    strict: bool = True,
) -> CocomoCalculationResult:
    """
    Estimate effort (person-months) and development time (months).

        B      = 0.91 + 0.01 * sum(SF)
        Effort = 2.94 * KSLOC^B * EAF          (EAF fixed at 1.0)
        F      = 0.28 + 0.2 * (B - 0.91)
        TDEV   = 3.67 * Effort^F

    ksloc <= 0 is not rejected: 0 gives zero effort and time, negative
    sizes give NaN.
    """
    params = params or CocomoParameters()

    b = scale_exponent(inputs.scale_factors, params, strict=strict)
    effort = params.a * _pow(inputs.ksloc, b) * COCOMO_EAF

    f = params.tdev_base + params.tdev_scale * (b - params.base_exponent)
    dev_time = params.c * _pow(effort, f)

    return CocomoCalculationResult(
        effort=round2(effort),
        dev_time=round2(dev_time),
        inputs=inputs,
    )


def productivity(result: CocomoCalculationResult) -> Optional[float]:
    """
    Delivered SLOC per person-month, or None when effort is 0 or not finite.
    """
    effort = result.effort
    if not math.isfinite(effort) or effort == 0:
        return None
    return round2(result.inputs.ksloc * 1000 / effort)


def average_staffing(result: CocomoCalculationResult) -> Optional[float]:
    """
    Average team size (effort / development time), or None when development
    time is 0 or not finite.
    """
    dev_time = result.dev_time
    if not math.isfinite(dev_time) or dev_time == 0:
        return None
    return round2(result.effort / dev_time)
