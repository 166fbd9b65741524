"""
Accuracy metrics for comparing estimates with actual outcomes.

Responsibilities:
- MAE, RMSE and R² over (estimated, actual) pairs
- Signal "no data" / "not applicable" with None, never with 0

None of these functions raise; order of the pairs does not matter.
"""

from __future__ import annotations

from typing import Iterable, Optional, Sequence, Tuple

import numpy as np

from .calculations import round2
from .schema import AccuracyDataPoint


def _as_arrays(
    data: Iterable[AccuracyDataPoint],
) -> Tuple[np.ndarray, np.ndarray]:
    """Split pairs into (estimated, actual) float arrays."""
    points = list(data)
    estimated = np.asarray([p.estimated for p in points], dtype=float)
    actual = np.asarray([p.actual for p in points], dtype=float)
    return estimated, actual


def calculate_mae(data: Sequence[AccuracyDataPoint]) -> Optional[float]:
    """Mean absolute error, or None for an empty sample."""
    estimated, actual = _as_arrays(data)
    if actual.size == 0:
        return None
    return round2(float(np.abs(actual - estimated).mean()))


def calculate_rmse(data: Sequence[AccuracyDataPoint]) -> Optional[float]:
    """Root mean squared error, or None for an empty sample."""
    estimated, actual = _as_arrays(data)
    if actual.size == 0:
        return None
    mse = float(((actual - estimated) ** 2).mean())
    return round2(float(np.sqrt(mse)))


def calculate_r2_score(
    data: Sequence[AccuracyDataPoint],
    *,
    min_samples: int = 1,
) -> Optional[float]:
    """
    Coefficient of determination R² = 1 - ssRes / ssTot.

    Returns None when:
    - the sample is empty or smaller than `min_samples`
    - every actual value is the same (ssTot = 0) and the estimates miss it

    When every actual value is the same and every estimate matches it
    exactly, the fit is perfect and 1.0 is returned. A single pair always
    lands in this constant-actual case.
    """
    estimated, actual = _as_arrays(data)
    n = actual.size
    if n == 0 or n < min_samples:
        return None

    ss_res = float(((actual - estimated) ** 2).sum())

    # Compare values directly: a float mean of identical values can be off
    # by one ulp and give a tiny non-zero ssTot.
    ss_tot = float(((actual - actual.mean()) ** 2).sum())
    if np.all(actual == actual[0]) or ss_tot == 0.0:
        return 1.0 if ss_res == 0.0 else None

    return round2(1.0 - ss_res / ss_tot)
