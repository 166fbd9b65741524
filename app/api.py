"""
FastAPI app for the estimation engine.

Endpoints:
- POST   /fp                 function points (optionally saved)
- POST   /cocomo             COCOMO II effort / schedule (optionally saved)
- POST   /prefill            inputs suggested by a document analysis
- GET    /history            saved calculations
- PATCH  /history/{entry_id} attach or clear actual outcomes
- DELETE /history/{entry_id}
- DELETE /history
- GET    /comparison         trends and estimate-vs-actual accuracy
- GET    /reference          GSC factors, scale factors and weights
"""

from __future__ import annotations

import logging
import sys
from dataclasses import asdict
from pathlib import Path
from typing import Any, Dict, List, Optional

# --- Make src/ importable ----------------------------------------------------

REPO_ROOT = Path(__file__).resolve().parents[1]
SRC_PATH = REPO_ROOT / "src"
if str(SRC_PATH) not in sys.path:
    sys.path.insert(0, str(SRC_PATH))

from fastapi import Depends, FastAPI, HTTPException
from pydantic import BaseModel, ConfigDict, Field

from effort_estimation.calculations import (
    average_staffing,
    calculate_cocomo_ii,
    calculate_function_points,
    fp_component_breakdown,
    productivity,
    total_degree_of_influence,
)
from effort_estimation.comparison import accuracy_reports, trend_series
from effort_estimation.config import get_config
from effort_estimation.constants import (
    COCOMO_SCALE_FACTORS,
    FP_COMPLEXITY_WEIGHTS,
    GSC_FACTORS,
    SIMPLE_WEIGHTS,
    nominal_scale_factors,
)
from effort_estimation.history_store import (
    HistoryEntryNotFound,
    HistoryStore,
    backend_from_config,
)
from effort_estimation.schema import CocomoInputs, DocumentAnalysis, FPInputs
from effort_estimation.suggestions import (
    fp_result_from_analysis,
    prefill_fp_inputs,
    prefill_gsc_inputs,
)
from effort_estimation.validation import (
    InvalidInputError,
    validate_cocomo_inputs,
    validate_fp_inputs,
    validate_gsc_inputs,
)

logger = logging.getLogger(__name__)

app = FastAPI(title="Estimation API")


# --- Helpers -----------------------------------------------------------------


def get_store() -> HistoryStore:
    """
    History store for the configured backend.

    Tests replace this through app.dependency_overrides.
    """
    return HistoryStore(backend_from_config(get_config()))


def _invalid(e: InvalidInputError) -> HTTPException:
    logger.info("Rejected request: %s", e)
    return HTTPException(status_code=422, detail=str(e))


def _not_found(entry_id: str) -> HTTPException:
    return HTTPException(status_code=404, detail=f"No history entry with id {entry_id}")


# --- Request / Response schemas ----------------------------------------------


class FPInputsPayload(BaseModel):
    ei: float = Field(0, ge=0)
    eo: float = Field(0, ge=0)
    eq: float = Field(0, ge=0)
    ilf: float = Field(0, ge=0)
    eif: float = Field(0, ge=0)


class FPRequest(BaseModel):
    """
    Body for /fp.

    Example:
    {
      "inputs": {"ei": 10, "eo": 8, "eq": 5, "ilf": 4, "eif": 2},
      "gsc": {"performance": 3, "reusability": 2},
      "save": true
    }
    """

    model_config = ConfigDict(populate_by_name=True)

    inputs: FPInputsPayload = Field(default_factory=FPInputsPayload)
    gsc: Dict[str, int] = Field(default_factory=dict)
    file_name: Optional[str] = Field(None, alias="fileName")
    save: bool = False


class FPResponse(BaseModel):
    result: dict
    tdi: float
    breakdown: Dict[str, float]
    entry_id: Optional[str] = None


class CocomoRequest(BaseModel):
    """
    Body for /cocomo.

    scaleFactors holds level values (e.g. PREC: 3.72). Factors left out
    default to Nominal.
    """

    model_config = ConfigDict(populate_by_name=True)

    ksloc: float = Field(..., gt=0)
    scale_factors: Dict[str, float] = Field(default_factory=dict, alias="scaleFactors")
    save: bool = False


class CocomoResponse(BaseModel):
    result: dict
    productivity: Optional[float]
    average_staffing: Optional[float]
    entry_id: Optional[str] = None


class FunctionPointDetailPayload(BaseModel):
    description: str = ""
    count: Optional[int] = Field(None, ge=0)


class PrefillRequest(BaseModel):
    """
    Document analysis output plus the form's current values.

    Null suggestions leave the current value in place.
    """

    model_config = ConfigDict(populate_by_name=True)

    potential_function_points: Dict[str, FunctionPointDetailPayload] = Field(
        default_factory=dict, alias="potentialFunctionPoints"
    )
    gsc_ratings: Dict[str, Optional[int]] = Field(
        default_factory=dict, alias="gscRatings"
    )
    estimated_ufp: Optional[float] = Field(None, alias="estimatedUfp")
    estimated_vaf: Optional[float] = Field(None, alias="estimatedVaf")
    estimated_afp: Optional[float] = Field(None, alias="estimatedAfp")

    current_inputs: Optional[FPInputsPayload] = Field(None, alias="currentInputs")
    current_gsc: Dict[str, int] = Field(default_factory=dict, alias="currentGsc")
    file_name: Optional[str] = Field(None, alias="fileName")
    save: bool = False


class PrefillResponse(BaseModel):
    inputs: Dict[str, float]
    gsc: Dict[str, float]
    entry_id: Optional[str] = None


class ActualsPayload(BaseModel):
    """
    Fields to change on a history entry. Send null to clear a value;
    fields left out are not touched.
    """

    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    actual_afp: Optional[float] = Field(None, alias="actualAfp")
    actual_effort: Optional[float] = Field(None, alias="actualEffort")
    actual_dev_time: Optional[float] = Field(None, alias="actualDevTime")


# --- Endpoints ---------------------------------------------------------------


@app.post("/fp", response_model=FPResponse)
def fp(payload: FPRequest, store: HistoryStore = Depends(get_store)) -> FPResponse:
    fp_inputs = FPInputs(**payload.inputs.model_dump())
    try:
        validate_fp_inputs(fp_inputs)
        validate_gsc_inputs(payload.gsc)
    except InvalidInputError as e:
        raise _invalid(e)

    result = calculate_function_points(fp_inputs, dict(payload.gsc))
    result.file_name = payload.file_name

    entry_id = None
    if payload.save:
        entry_id = store.save_fp(result).id

    return FPResponse(
        result=result.to_dict(),
        tdi=total_degree_of_influence(payload.gsc),
        breakdown=fp_component_breakdown(fp_inputs),
        entry_id=entry_id,
    )


@app.post("/cocomo", response_model=CocomoResponse)
def cocomo(
    payload: CocomoRequest,
    store: HistoryStore = Depends(get_store),
) -> CocomoResponse:
    cfg = get_config()
    scale_factors = nominal_scale_factors()
    scale_factors.update(payload.scale_factors)
    inputs = CocomoInputs(ksloc=payload.ksloc, scale_factors=scale_factors)
    try:
        validate_cocomo_inputs(inputs)
    except InvalidInputError as e:
        raise _invalid(e)

    try:
        params = cfg.cocomo_parameters()
    except FileNotFoundError as e:
        logger.error("COCOMO parameters unavailable: %s", e)
        raise HTTPException(status_code=500, detail=str(e))

    result = calculate_cocomo_ii(inputs, params, strict=cfg.strict_scale_factors)

    entry_id = None
    if payload.save:
        entry_id = store.save_cocomo(result).id

    return CocomoResponse(
        result=result.to_dict(),
        productivity=productivity(result),
        average_staffing=average_staffing(result),
        entry_id=entry_id,
    )


@app.post("/prefill", response_model=PrefillResponse)
def prefill(
    payload: PrefillRequest,
    store: HistoryStore = Depends(get_store),
) -> PrefillResponse:
    analysis = DocumentAnalysis.from_dict(payload.model_dump(by_alias=True))
    current = (
        FPInputs(**payload.current_inputs.model_dump())
        if payload.current_inputs is not None
        else None
    )
    try:
        fp_inputs = prefill_fp_inputs(analysis, current)
        gsc = prefill_gsc_inputs(analysis, payload.current_gsc)
    except InvalidInputError as e:
        raise _invalid(e)

    entry_id = None
    if payload.save:
        if not payload.file_name:
            raise HTTPException(status_code=422, detail="fileName is required to save")
        try:
            result = fp_result_from_analysis(analysis, payload.file_name)
        except InvalidInputError as e:
            raise _invalid(e)
        entry_id = store.save_fp(result).id

    return PrefillResponse(inputs=fp_inputs.to_dict(), gsc=gsc, entry_id=entry_id)


@app.get("/history")
def list_history(store: HistoryStore = Depends(get_store)) -> List[Dict[str, Any]]:
    return [entry.to_dict() for entry in store.list()]


@app.patch("/history/{entry_id}")
def update_actuals(
    entry_id: str,
    payload: ActualsPayload,
    store: HistoryStore = Depends(get_store),
) -> Dict[str, Any]:
    actuals = payload.model_dump(by_alias=True, exclude_unset=True)
    try:
        entry = store.update_actuals(entry_id, actuals)
    except HistoryEntryNotFound:
        raise _not_found(entry_id)
    except InvalidInputError as e:
        raise _invalid(e)
    return entry.to_dict()


@app.delete("/history/{entry_id}")
def delete_entry(entry_id: str, store: HistoryStore = Depends(get_store)) -> Dict[str, str]:
    try:
        store.remove(entry_id)
    except HistoryEntryNotFound:
        raise _not_found(entry_id)
    return {"status": "ok"}


@app.delete("/history")
def clear_history(store: HistoryStore = Depends(get_store)) -> Dict[str, str]:
    store.clear()
    return {"status": "ok"}


@app.get("/comparison")
def comparison(store: HistoryStore = Depends(get_store)) -> Dict[str, Any]:
    cfg = get_config()
    entries = store.list()
    return {
        "trends": {
            entry_type: [asdict(p) for p in trend_series(entries, entry_type)]
            for entry_type in ("FP", "COCOMO")
        },
        "accuracy": {
            metric: report.to_dict()
            for metric, report in accuracy_reports(
                entries, min_r2_samples=cfg.r2_min_samples
            ).items()
        },
    }


@app.get("/reference")
def reference() -> Dict[str, Any]:
    return {
        "gscFactors": [asdict(f) for f in GSC_FACTORS],
        "scaleFactors": [
            {
                "id": sf.id,
                "name": sf.name,
                "levels": list(sf.levels),
                "values": list(sf.values),
            }
            for sf in COCOMO_SCALE_FACTORS
        ],
        "simpleWeights": dict(SIMPLE_WEIGHTS),
        "complexityWeights": {k: dict(v) for k, v in FP_COMPLEXITY_WEIGHTS.items()},
    }


# Convenience for local dev:
# uvicorn app.api:app --reload
if __name__ == "__main__":
    import uvicorn

    uvicorn.run("app.api:app", host="0.0.0.0", port=8000, reload=True)
