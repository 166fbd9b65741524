"""
Trends and accuracy reports built from the calculation history.

Responsibilities:
- Chronological series of AFP (FP entries) and effort (COCOMO entries)
- (estimated, actual) pairs for entries that have an actual recorded
- MAE / RMSE / R² summaries per metric
"""

from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Dict, Iterable, List, Optional, Tuple

from .accuracy import calculate_mae, calculate_r2_score, calculate_rmse
from .schema import AccuracyDataPoint, HistoryEntry

logger = logging.getLogger(__name__)

# Smallest number of points worth drawing as a trend
MIN_TREND_POINTS = 2

# metric -> (entry type, estimate attribute, actual attribute)
METRICS: Dict[str, Tuple[str, str, str]] = {
    "afp": ("FP", "afp", "actual_afp"),
    "effort": ("COCOMO", "effort", "actual_effort"),
    "devTime": ("COCOMO", "dev_time", "actual_dev_time"),
}

# entry type -> attribute plotted on its trend
TREND_VALUES: Dict[str, str] = {
    "FP": "afp",
    "COCOMO": "effort",
}


@dataclass(frozen=True)
class TrendPoint:
    timestamp: int
    value: float


@dataclass(frozen=True)
class AccuracyReport:
    metric: str
    n: int
    mae: Optional[float]
    rmse: Optional[float]
    r2: Optional[float]

    def to_dict(self) -> Dict[str, object]:
        return {
            "metric": self.metric,
            "n": self.n,
            "mae": self.mae,
            "rmse": self.rmse,
            "r2": self.r2,
        }


def _entries_of_type(
    entries: Iterable[HistoryEntry],
    entry_type: str,
) -> List[HistoryEntry]:
    return sorted(
        (e for e in entries if e.type == entry_type),
        key=lambda e: e.timestamp,
    )


def trend_series(
    entries: Iterable[HistoryEntry],
    entry_type: str,
) -> List[TrendPoint]:
    """AFP (FP) or effort (COCOMO) over time, oldest first."""
    if entry_type not in TREND_VALUES:
        raise ValueError(f"Unknown entry type: {entry_type!r}")
    attr = TREND_VALUES[entry_type]
    return [
        TrendPoint(timestamp=e.timestamp, value=getattr(e.data, attr))
        for e in _entries_of_type(entries, entry_type)
    ]


def has_sufficient_trend_data(series: List[TrendPoint]) -> bool:
    return len(series) >= MIN_TREND_POINTS


def accuracy_pairs(
    entries: Iterable[HistoryEntry],
    metric: str,
) -> List[AccuracyDataPoint]:
    """
    Pairs for one metric ('afp', 'effort' or 'devTime'), oldest first.

    Entries without an actual value for the metric are skipped.
    """
    if metric not in METRICS:
        raise ValueError(
            f"Unknown metric {metric!r}. Use one of: {', '.join(METRICS)}"
        )
    entry_type, estimate_attr, actual_attr = METRICS[metric]

    pairs: List[AccuracyDataPoint] = []
    for e in _entries_of_type(entries, entry_type):
        actual = getattr(e.data, actual_attr)
        if actual is None:
            continue
        pairs.append(
            AccuracyDataPoint(estimated=getattr(e.data, estimate_attr), actual=actual)
        )
    return pairs


def accuracy_report(
    entries: Iterable[HistoryEntry],
    metric: str,
    *,
    min_r2_samples: int = 1,
) -> AccuracyReport:
    pairs = accuracy_pairs(entries, metric)
    report = AccuracyReport(
        metric=metric,
        n=len(pairs),
        mae=calculate_mae(pairs),
        rmse=calculate_rmse(pairs),
        r2=calculate_r2_score(pairs, min_samples=min_r2_samples),
    )
    logger.debug("Accuracy for %s: %s", metric, report)
    return report


def accuracy_reports(
    entries: Iterable[HistoryEntry],
    *,
    min_r2_samples: int = 1,
) -> Dict[str, AccuracyReport]:
    """One AccuracyReport per metric, keyed by metric name."""
    entries = list(entries)
    return {
        metric: accuracy_report(entries, metric, min_r2_samples=min_r2_samples)
        for metric in METRICS
    }
