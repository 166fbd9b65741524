"""
Reference tables for the estimation engine.

Single source of truth for:
- The 14 General System Characteristics (GSC) used by the VAF
- The 5 COCOMO II scale factors and their per-level exponent values
- Function point weights
- COCOMO II model constants

Everything here is built once at import and is read-only.
"""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping, Tuple


@dataclass(frozen=True)
class GSCFactor:
    id: str
    name: str
    description: str


@dataclass(frozen=True)
class ScaleFactor:
    """
    A COCOMO II scale factor.

    values[i] is the exponent contribution for levels[i].
    """

    id: str
    name: str
    levels: Tuple[str, ...]
    values: Tuple[float, ...]

    def value_for(self, level: str) -> float:
        """
        Look up the exponent contribution for a rating level name.

        Matching ignores case and surrounding whitespace.
        """
        wanted = level.strip().lower()
        for name, value in zip(self.levels, self.values):
            if name.lower() == wanted:
                return value
        raise KeyError(f"Unknown level {level!r} for scale factor {self.id}")


GSC_FACTORS: Tuple[GSCFactor, ...] = (
    GSCFactor(
        "dataCommunications",
        "Data Communications",
        "The data and control information used in the application are sent "
        "or received over communication facilities.",
    ),
    GSCFactor(
        "distributedDataProcessing",
        "Distributed Data Processing",
        "Distributed data or processing functions are a characteristic of "
        "the application.",
    ),
    GSCFactor(
        "performance",
        "Performance",
        "Application performance objectives, stated or approved by the user, "
        "in either response or throughput, influence the design, development, "
        "installation, and support of the application.",
    ),
    GSCFactor(
        "heavilyUsedConfiguration",
        "Heavily Used Configuration",
        "A heavily used operational configuration is a characteristic of the "
        "application.",
    ),
    GSCFactor(
        "transactionRate",
        "Transaction Rate",
        "The transaction rate is high and influences the design, development, "
        "installation, and support of the application.",
    ),
    GSCFactor(
        "onlineDataEntry",
        "Online Data Entry",
        "Online data entry and control functions are provided in the "
        "application.",
    ),
    GSCFactor(
        "endUserEfficiency",
        "End-User Efficiency",
        "The online functions provided emphasize end-user efficiency.",
    ),
    GSCFactor(
        "onlineUpdate",
        "Online Update",
        "The application provides online update for the ILFs.",
    ),
    GSCFactor(
        "complexProcessing",
        "Complex Processing",
        "Complex processing is a characteristic of the application.",
    ),
    GSCFactor(
        "reusability",
        "Reusability",
        "The application and the code in the application have been "
        "specifically designed, developed, and supported to be usable in "
        "other applications.",
    ),
    GSCFactor(
        "installationEase",
        "Installation Ease",
        "Conversion and installation ease are characteristics of the "
        "application.",
    ),
    GSCFactor(
        "operationalEase",
        "Operational Ease",
        "Operational ease is a characteristic of the application.",
    ),
    GSCFactor(
        "multipleSites",
        "Multiple Sites",
        "The application has been specifically designed, developed, and "
        "supported to be installed at multiple sites for multiple "
        "organizations.",
    ),
    GSCFactor(
        "facilitateChange",
        "Facilitate Change",
        "The application has been specifically designed, developed, and "
        "supported to facilitate change.",
    ),
)

GSC_IDS: Tuple[str, ...] = tuple(f.id for f in GSC_FACTORS)

GSC_MIN_RATING = 0
GSC_MAX_RATING = 5


SCALE_FACTOR_LEVELS: Tuple[str, ...] = (
    "Very Low",
    "Low",
    "Nominal",
    "High",
    "Very High",
    "Extra High",
)

COCOMO_SCALE_FACTORS: Tuple[ScaleFactor, ...] = (
    ScaleFactor(
        "PREC", "Precedentedness", SCALE_FACTOR_LEVELS,
        (6.20, 4.96, 3.72, 2.48, 1.24, 0.00),
    ),
    ScaleFactor(
        "FLEX", "Development Flexibility", SCALE_FACTOR_LEVELS,
        (5.07, 4.05, 3.04, 2.03, 1.01, 0.00),
    ),
    ScaleFactor(
        "RESL", "Risk Resolution", SCALE_FACTOR_LEVELS,
        (7.07, 5.65, 4.24, 2.83, 1.41, 0.00),
    ),
    ScaleFactor(
        "TEAM", "Team Cohesion", SCALE_FACTOR_LEVELS,
        (5.48, 4.38, 3.29, 2.19, 1.10, 0.00),
    ),
    ScaleFactor(
        "PMAT", "Process Maturity", SCALE_FACTOR_LEVELS,
        (7.80, 6.24, 4.68, 3.12, 1.56, 0.00),
    ),
)

SCALE_FACTORS_BY_ID: Mapping[str, ScaleFactor] = MappingProxyType(
    {sf.id: sf for sf in COCOMO_SCALE_FACTORS}
)

SCALE_FACTOR_IDS: Tuple[str, ...] = tuple(SCALE_FACTORS_BY_ID)


# Average-complexity weights used by the scalar UFP formula.
SIMPLE_WEIGHTS: Mapping[str, int] = MappingProxyType(
    {"ei": 4, "eo": 5, "eq": 4, "ilf": 10, "eif": 7}
)

FP_COMPONENTS: Tuple[str, ...] = tuple(SIMPLE_WEIGHTS)

# Full IFPUG complexity matrix. Kept as reference data; the scalar UFP
# formula only uses the average column (SIMPLE_WEIGHTS).
FP_COMPLEXITY_WEIGHTS: Mapping[str, Mapping[str, int]] = MappingProxyType(
    {
        "EI": MappingProxyType({"low": 3, "average": 4, "high": 6}),
        "EO": MappingProxyType({"low": 4, "average": 5, "high": 7}),
        "EQ": MappingProxyType({"low": 3, "average": 4, "high": 6}),
        "ILF": MappingProxyType({"low": 7, "average": 10, "high": 15}),
        "EIF": MappingProxyType({"low": 5, "average": 7, "high": 10}),
    }
)

VAF_BASE = 0.65
VAF_STEP = 0.01

# COCOMO II Post-Architecture constants
COCOMO_A = 2.94
COCOMO_BASE_EXPONENT = 0.91
COCOMO_C = 3.67
COCOMO_TDEV_BASE = 0.28
COCOMO_TDEV_SCALE = 0.2
COCOMO_EAF = 1.0


def nominal_scale_factors() -> dict[str, float]:
    """Return a fresh {id: value} map with every scale factor at Nominal."""
    return {sf.id: sf.value_for("Nominal") for sf in COCOMO_SCALE_FACTORS}
