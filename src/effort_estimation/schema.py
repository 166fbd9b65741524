"""
Data schemas for the estimation engine.

Defines:
- FPInputs / FPCalculationResult: function point inputs and results
- CocomoInputs / CocomoCalculationResult: COCOMO II inputs and results
- HistoryEntry: a saved calculation, tagged by type
- AccuracyDataPoint: one (estimated, actual) pair
- DocumentAnalysis: an AI suggestion payload with nullable fields

Every persisted type has to_dict()/from_dict() for the stored JSON format.
Keys are camelCase and optional fields that are unset are left out of the
output entirely, so a read-then-write cycle keeps stored data unchanged.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Literal, Mapping, Optional, Tuple, Union

from .constants import FP_COMPONENTS, GSC_IDS

EntryType = Literal["FP", "COCOMO"]

# GSC id -> rating (0-5)
GSCInputs = Dict[str, float]

# Stored key of each actual-value field, per entry type
ACTUAL_FIELDS: Dict[str, Tuple[str, ...]] = {
    "FP": ("actualAfp",),
    "COCOMO": ("actualEffort", "actualDevTime"),
}


def _put_optional(out: Dict[str, Any], key: str, value: Any) -> None:
    if value is not None:
        out[key] = value


@dataclass
class FPInputs:
    """
    Raw function point component counts.

    Values are kept exactly as supplied (no coercion or clamping) so a
    result echoes its inputs verbatim.
    """

    ei: float = 0
    eo: float = 0
    eq: float = 0
    ilf: float = 0
    eif: float = 0

    def to_dict(self) -> Dict[str, float]:
        return {name: getattr(self, name) for name in FP_COMPONENTS}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "FPInputs":
        return cls(**{name: data.get(name, 0) for name in FP_COMPONENTS})


@dataclass
class FPCalculationResult:
    ufp: float
    vaf: float
    afp: float
    inputs: FPInputs
    gsc: GSCInputs
    actual_afp: Optional[float] = None
    file_name: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "ufp": self.ufp,
            "vaf": self.vaf,
            "afp": self.afp,
            "inputs": self.inputs.to_dict(),
            "gsc": dict(self.gsc),
        }
        _put_optional(out, "actualAfp", self.actual_afp)
        _put_optional(out, "fileName", self.file_name)
        return out

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "FPCalculationResult":
        return cls(
            ufp=data["ufp"],
            vaf=data["vaf"],
            afp=data["afp"],
            inputs=FPInputs.from_dict(data.get("inputs") or {}),
            gsc=dict(data.get("gsc") or {}),
            actual_afp=data.get("actualAfp"),
            file_name=data.get("fileName"),
        )


@dataclass
class CocomoInputs:
    """
    COCOMO II inputs.

    scale_factors maps a factor id (PREC, FLEX, RESL, TEAM, PMAT) to the
    exponent value of the chosen level, not to the level index.
    cost_drivers is carried for stored-format compatibility only and never
    enters the calculation.
    """

    ksloc: float
    scale_factors: Dict[str, float] = field(default_factory=dict)
    cost_drivers: Optional[Dict[str, float]] = None

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "ksloc": self.ksloc,
            "scaleFactors": dict(self.scale_factors),
        }
        if self.cost_drivers is not None:
            out["costDrivers"] = dict(self.cost_drivers)
        return out

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "CocomoInputs":
        cost_drivers = data.get("costDrivers")
        return cls(
            ksloc=data["ksloc"],
            scale_factors=dict(data.get("scaleFactors") or {}),
            cost_drivers=dict(cost_drivers) if cost_drivers is not None else None,
        )


@dataclass
class CocomoCalculationResult:
    effort: float  # person-months
    dev_time: float  # months
    inputs: CocomoInputs
    actual_effort: Optional[float] = None
    actual_dev_time: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "effort": self.effort,
            "devTime": self.dev_time,
            "inputs": self.inputs.to_dict(),
        }
        _put_optional(out, "actualEffort", self.actual_effort)
        _put_optional(out, "actualDevTime", self.actual_dev_time)
        return out

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "CocomoCalculationResult":
        return cls(
            effort=data["effort"],
            dev_time=data["devTime"],
            inputs=CocomoInputs.from_dict(data["inputs"]),
            actual_effort=data.get("actualEffort"),
            actual_dev_time=data.get("actualDevTime"),
        )


CalculationResult = Union[FPCalculationResult, CocomoCalculationResult]

_RESULT_TYPES = {
    "FP": FPCalculationResult,
    "COCOMO": CocomoCalculationResult,
}


@dataclass
class HistoryEntry:
    """
    A saved calculation.

    `type` decides the class of `data`. The timestamp is epoch milliseconds
    and is never changed after creation.
    """

    id: str
    type: EntryType
    timestamp: int
    data: CalculationResult

    def __post_init__(self) -> None:
        expected = _RESULT_TYPES.get(self.type)
        if expected is None:
            raise ValueError(f"Unknown history entry type: {self.type!r}")
        if not isinstance(self.data, expected):
            raise ValueError(
                f"History entry {self.id!r} of type {self.type} carries "
                f"{type(self.data).__name__}, expected {expected.__name__}"
            )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type,
            "timestamp": self.timestamp,
            "data": self.data.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "HistoryEntry":
        entry_type = data.get("type")
        result_cls = _RESULT_TYPES.get(entry_type)  # type: ignore[arg-type]
        if result_cls is None:
            raise ValueError(f"Unknown history entry type: {entry_type!r}")
        return cls(
            id=str(data["id"]),
            type=entry_type,  # type: ignore[arg-type]
            timestamp=data["timestamp"],
            data=result_cls.from_dict(data["data"]),
        )


@dataclass(frozen=True)
class AccuracyDataPoint:
    estimated: float
    actual: float


# --- AI suggestion payload ---------------------------------------------------


@dataclass
class FunctionPointDetail:
    """What the analysis found for one component type."""

    description: str = ""
    count: Optional[int] = None


@dataclass
class DocumentAnalysis:
    """
    Best-effort suggestion produced by document analysis.

    Any number may be None when the analysis could not determine it. The
    suggestion itself never fills in zeros; defaults are applied by the
    code that turns it into calculator inputs.
    """

    potential_function_points: Dict[str, FunctionPointDetail] = field(
        default_factory=dict
    )
    gsc_ratings: Dict[str, Optional[int]] = field(default_factory=dict)
    estimated_ufp: Optional[float] = None
    estimated_vaf: Optional[float] = None
    estimated_afp: Optional[float] = None

    def count_for(self, component: str) -> Optional[int]:
        """Suggested count for a component ('ei' or 'EI'), or None."""
        detail = self.potential_function_points.get(component.upper())
        return detail.count if detail is not None else None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "DocumentAnalysis":
        raw_fps = data.get("potentialFunctionPoints") or {}
        fps: Dict[str, FunctionPointDetail] = {}
        for component in FP_COMPONENTS:
            raw = raw_fps.get(component.upper())
            if raw is None:
                continue
            fps[component.upper()] = FunctionPointDetail(
                description=raw.get("description") or "",
                count=raw.get("count"),
            )

        raw_gsc = data.get("gscRatings") or {}
        gsc = {gsc_id: raw_gsc[gsc_id] for gsc_id in GSC_IDS if gsc_id in raw_gsc}

        return cls(
            potential_function_points=fps,
            gsc_ratings=gsc,
            estimated_ufp=data.get("estimatedUfp"),
            estimated_vaf=data.get("estimatedVaf"),
            estimated_afp=data.get("estimatedAfp"),
        )
