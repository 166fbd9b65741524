import csv
import json

import pytest

from app.cli import main
from effort_estimation.config import get_config
from effort_estimation.history_store import HistoryStore, JsonFileBackend


def saved_entries():
    return HistoryStore(JsonFileBackend(get_config().history_path)).list()


def test_fp_prints_results(capsys):
    main(["fp", "--ei", "10", "--eo", "10", "--eq", "10", "--ilf", "10", "--eif", "10"])
    out = capsys.readouterr().out
    assert "[fp] UFP: 300.00" in out
    assert "[fp] VAF: 0.65" in out
    assert "[fp] AFP: 195.00" in out
    assert saved_entries() == []


def test_fp_with_gsc_and_save(capsys):
    main(["fp", "--ei", "5", "--gsc", "performance=3", "--save"])
    out = capsys.readouterr().out
    assert "[fp] AFP: 13.60" in out

    (entry,) = saved_entries()
    assert entry.type == "FP"
    assert entry.data.gsc == {"performance": 3}


@pytest.mark.parametrize(
    "argv",
    [
        ["fp", "--ei", "-1"],
        ["fp", "--gsc", "performance=9"],
        ["fp", "--gsc", "performance"],
        ["fp", "--gsc", "performance=high"],
    ],
)
def test_fp_rejects_invalid_input(argv):
    with pytest.raises(SystemExit):
        main(argv)


def test_cocomo_nominal(capsys):
    main(["cocomo", "--ksloc", "10", "--save"])
    out = capsys.readouterr().out
    assert "Effort: 36.99 person-months" in out
    assert "Development time: 11.57 months" in out
    assert "Productivity: 270.34 SLOC/PM" in out

    (entry,) = saved_entries()
    assert entry.data.inputs.scale_factors["PREC"] == 3.72


def test_cocomo_ratings_by_level_name(capsys):
    main(
        [
            "cocomo", "--ksloc", "100",
            "--rating", "PREC=Extra High", "--rating", "flex=extra high",
            "--rating", "RESL=Extra High", "--rating", "TEAM=Extra High",
            "--rating", "PMAT=Extra High",
        ]
    )
    assert "Effort: 194.24 person-months" in capsys.readouterr().out


@pytest.mark.parametrize(
    "argv",
    [
        ["cocomo", "--ksloc", "0"],
        ["cocomo", "--ksloc", "10", "--rating", "SPEED=High"],
        ["cocomo", "--ksloc", "10", "--rating", "PREC=Huge"],
    ],
)
def test_cocomo_rejects_invalid_input(argv):
    with pytest.raises(SystemExit):
        main(argv)


def test_prefill_and_save(tmp_path, capsys):
    analysis = tmp_path / "analysis.json"
    analysis.write_text(
        json.dumps(
            {
                "potentialFunctionPoints": {
                    "EI": {"description": "forms", "count": 6},
                    "EO": {"description": "reports", "count": None},
                },
                "gscRatings": {"performance": 4},
            }
        ),
        encoding="utf-8",
    )
    main(["prefill", str(analysis), "--file-name", "brief.pdf", "--save"])
    out = capsys.readouterr().out
    assert '"ei": 6' in out
    assert '"performance": 4' in out

    (entry,) = saved_entries()
    assert entry.data.file_name == "brief.pdf"
    assert entry.data.ufp == 24


@pytest.mark.parametrize(
    "analysis",
    [
        {"potentialFunctionPoints": {"EI": {"count": -5}}},
        {"potentialFunctionPoints": {"EI": {"count": "6"}}},
        {"gscRatings": {"performance": 9}},
    ],
)
def test_prefill_rejects_invalid_suggestions(tmp_path, analysis):
    path = tmp_path / "analysis.json"
    path.write_text(json.dumps(analysis), encoding="utf-8")
    with pytest.raises(SystemExit, match=r"\[prefill\]"):
        main(["prefill", str(path), "--save"])
    assert saved_entries() == []


def test_history_workflow(tmp_path, capsys):
    main(["cocomo", "--ksloc", "10", "--save"])
    main(["fp", "--ei", "10", "--save"])
    cocomo_id, fp_id = [e.id for e in saved_entries()]
    capsys.readouterr()

    main(["history", "actuals", cocomo_id, "--actual-effort", "40", "--actual-dev-time", "12"])
    main(["history", "actuals", fp_id, "--actual-afp", "30"])
    main(["history", "list"])
    out = capsys.readouterr().out
    assert "actual effort=40.00" in out
    assert "actual=30.00" in out

    main(["compare"])
    out = capsys.readouterr().out
    assert "afp: n=1" in out
    assert "effort: n=1  MAE=3.01" in out
    assert "R2=N/A" in out

    csv_path = tmp_path / "out.csv"
    main(["history", "export", str(csv_path)])
    with open(csv_path, newline="", encoding="utf-8") as f:
        assert len(list(csv.DictReader(f))) == 2

    main(["history", "actuals", fp_id, "--clear", "actualAfp"])
    assert saved_entries()[1].data.actual_afp is None

    main(["history", "remove", fp_id])
    assert [e.id for e in saved_entries()] == [cocomo_id]

    with pytest.raises(SystemExit):
        main(["history", "clear"])
    main(["history", "clear", "--yes"])
    assert saved_entries() == []


def test_history_errors():
    with pytest.raises(SystemExit):
        main(["history", "remove", "missing"])
    with pytest.raises(SystemExit):
        main(["history", "actuals", "missing", "--actual-afp", "1"])
    with pytest.raises(SystemExit):
        main(["history", "actuals", "missing"])


def test_compare_without_history(capsys):
    main(["compare"])
    assert "No calculation history" in capsys.readouterr().out
