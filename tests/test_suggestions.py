import pytest

from effort_estimation.constants import GSC_IDS
from effort_estimation.schema import DocumentAnalysis, FPInputs
from effort_estimation.suggestions import (
    fp_result_from_analysis,
    prefill_fp_inputs,
    prefill_gsc_inputs,
)
from effort_estimation.validation import InvalidInputError

ANALYSIS = DocumentAnalysis.from_dict(
    {
        "potentialFunctionPoints": {
            "EI": {"description": "Customer and order forms", "count": 6},
            "EO": {"description": "Monthly reports", "count": 3},
            "EQ": {"description": "Order lookup", "count": None},
            "ILF": {"description": "Customers, orders", "count": 2},
            "EIF": {"description": "Payment gateway", "count": None},
        },
        "gscRatings": {"performance": 4, "transactionRate": None, "reusability": 1},
        "estimatedUfp": 59,
        "estimatedVaf": None,
    }
)


def test_prefill_overrides_only_suggested_counts():
    current = FPInputs(ei=1, eo=1, eq=9, ilf=1, eif=7)
    prefilled = prefill_fp_inputs(ANALYSIS, current)

    assert prefilled == FPInputs(ei=6, eo=3, eq=9, ilf=2, eif=7)
    # the form's own values are untouched
    assert current.ei == 1


def test_prefill_counts_without_current_values():
    assert prefill_fp_inputs(ANALYSIS) == FPInputs(ei=6, eo=3, eq=0, ilf=2, eif=0)


def test_prefill_gsc_keeps_current_rating_when_suggestion_is_null():
    current = {"transactionRate": 3, "performance": 1}
    assert prefill_gsc_inputs(ANALYSIS, current) == {
        "transactionRate": 3,
        "performance": 4,
        "reusability": 1,
    }


def test_suggestion_itself_is_not_defaulted():
    prefill_fp_inputs(ANALYSIS)
    prefill_gsc_inputs(ANALYSIS)
    assert ANALYSIS.count_for("eq") is None
    assert ANALYSIS.gsc_ratings["transactionRate"] is None


def test_fp_result_from_analysis_counts_missing_as_zero():
    result = fp_result_from_analysis(ANALYSIS, "requirements.pdf")

    # 6*4 + 3*5 + 2*10, every GSC rated 0
    assert result.ufp == 59
    assert result.vaf == 0.65
    assert result.afp == 38.35
    assert result.gsc == {gsc_id: 0 for gsc_id in GSC_IDS}
    assert result.file_name == "requirements.pdf"
    assert result.to_dict()["fileName"] == "requirements.pdf"


def test_fp_result_from_empty_analysis():
    result = fp_result_from_analysis(DocumentAnalysis(), "empty.txt")
    assert result.ufp == 0
    assert result.afp == 0


def analysis_with(count=None, rating=None):
    return DocumentAnalysis.from_dict(
        {
            "potentialFunctionPoints": {"EI": {"description": "forms", "count": count}},
            "gscRatings": {"performance": rating},
        }
    )


@pytest.mark.parametrize("count", [-5, "6", float("nan"), True])
def test_bad_suggested_counts_are_rejected(count):
    analysis = analysis_with(count=count)
    with pytest.raises(InvalidInputError):
        prefill_fp_inputs(analysis)
    with pytest.raises(InvalidInputError):
        fp_result_from_analysis(analysis, "doc.pdf")


@pytest.mark.parametrize("rating", [9, -1, 2.5])
def test_bad_suggested_ratings_are_rejected(rating):
    with pytest.raises(InvalidInputError):
        prefill_gsc_inputs(analysis_with(rating=rating))
