"""
Turn a document-analysis suggestion into calculator inputs.

A suggestion keeps None wherever the analysis had no answer. Two different
defaults apply downstream and are kept apart here:
- prefill_*: a None leaves the user's current value untouched
- fp_result_from_analysis: a None count is calculated as 0

Every function here runs the same boundary checks as typed input and
raises InvalidInputError on a bad suggestion.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Dict, Mapping, Optional

from .calculations import calculate_function_points
from .constants import FP_COMPONENTS, GSC_IDS
from .schema import DocumentAnalysis, FPCalculationResult, FPInputs, GSCInputs
from .validation import validate_fp_inputs, validate_gsc_inputs


def prefill_fp_inputs(
    analysis: DocumentAnalysis,
    current: Optional[FPInputs] = None,
) -> FPInputs:
    """Overwrite counts in `current` with every non-null suggested count."""
    current = current or FPInputs()
    suggested = {}
    for component in FP_COMPONENTS:
        count = analysis.count_for(component)
        if count is not None:
            suggested[component] = count
    return validate_fp_inputs(replace(current, **suggested))


def prefill_gsc_inputs(
    analysis: DocumentAnalysis,
    current: Optional[Mapping[str, float]] = None,
) -> GSCInputs:
    """Overwrite ratings in `current` with every non-null suggested rating."""
    merged: Dict[str, float] = dict(current or {})
    for gsc_id in GSC_IDS:
        rating = analysis.gsc_ratings.get(gsc_id)
        if rating is not None:
            merged[gsc_id] = rating
    validate_gsc_inputs(merged)
    return merged


def fp_result_from_analysis(
    analysis: DocumentAnalysis,
    file_name: str,
) -> FPCalculationResult:
    """
    Calculate function points straight from an analysed document.

    Missing counts are taken as 0 and every GSC is rated 0, so the AFP is
    the most conservative reading of the document. The file name is kept on
    the result.
    """
    fp_inputs = FPInputs(
        **{
            component: (analysis.count_for(component) or 0)
            for component in FP_COMPONENTS
        }
    )
    validate_fp_inputs(fp_inputs)
    gsc_inputs: GSCInputs = {gsc_id: 0 for gsc_id in GSC_IDS}
    result = calculate_function_points(fp_inputs, gsc_inputs)
    result.file_name = file_name
    return result
