"""
CLI for the estimation engine.

Usage examples:

    # Function points from component counts and GSC ratings
    python -m app.cli fp --ei 10 --eo 8 --eq 5 --ilf 4 --eif 2 --gsc performance=3 --save

    # COCOMO II with every scale factor at Nominal except team cohesion
    python -m app.cli cocomo --ksloc 25 --rating TEAM=High --save

    # Pre-fill from a document analysis JSON and save the result
    python -m app.cli prefill analysis.json --file-name brief.pdf --save

    # Record actual outcomes, then compare estimates with them
    python -m app.cli history actuals <id> --actual-effort 40
    python -m app.cli compare
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Dict, List

# --- Make src/ importable ----------------------------------------------------

REPO_ROOT = Path(__file__).resolve().parents[1]
SRC_PATH = REPO_ROOT / "src"
if str(SRC_PATH) not in sys.path:
    sys.path.insert(0, str(SRC_PATH))

from effort_estimation.calculations import (
    average_staffing,
    calculate_cocomo_ii,
    calculate_function_points,
    productivity,
)
from effort_estimation.comparison import (
    accuracy_reports,
    has_sufficient_trend_data,
    trend_series,
)
from effort_estimation.config import get_config
from effort_estimation.constants import SCALE_FACTORS_BY_ID, nominal_scale_factors
from effort_estimation.history_store import (
    HistoryEntryNotFound,
    HistoryStore,
    backend_from_config,
    export_history_csv,
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


def _open_store() -> HistoryStore:
    return HistoryStore(backend_from_config(get_config()))


def _parse_pairs(pairs: List[str], label: str) -> Dict[str, str]:
    out: Dict[str, str] = {}
    for pair in pairs or []:
        if "=" not in pair:
            raise SystemExit(f"[{label}] Expected KEY=VALUE, got {pair!r}")
        key, value = pair.split("=", 1)
        out[key.strip()] = value.strip()
    return out


def _fmt(value) -> str:
    return "N/A" if value is None else f"{value:.2f}"


# --- Commands ----------------------------------------------------------------


def cmd_fp(args: argparse.Namespace) -> None:
    """
    Compute UFP / VAF / AFP from component counts and GSC ratings.
    """
    fp_inputs = FPInputs(ei=args.ei, eo=args.eo, eq=args.eq, ilf=args.ilf, eif=args.eif)
    gsc = {}
    for gsc_id, rating in _parse_pairs(args.gsc, "fp").items():
        try:
            gsc[gsc_id] = int(rating)
        except ValueError:
            raise SystemExit(f"[fp] GSC rating for {gsc_id} must be an integer, got {rating!r}")

    try:
        validate_fp_inputs(fp_inputs)
        validate_gsc_inputs(gsc)
    except InvalidInputError as e:
        raise SystemExit(f"[fp] {e}")

    result = calculate_function_points(fp_inputs, gsc)

    print(f"[fp] UFP: {result.ufp:.2f}")
    print(f"[fp] VAF: {result.vaf:.2f}")
    print(f"[fp] AFP: {result.afp:.2f}")

    if args.save:
        entry = _open_store().save_fp(result)
        print(f"[fp] Saved to history as {entry.id}")


def cmd_cocomo(args: argparse.Namespace) -> None:
    """
    Estimate effort and schedule with COCOMO II.
    """
    cfg = get_config()
    scale_factors = nominal_scale_factors()
    for factor_id, level in _parse_pairs(args.rating, "cocomo").items():
        factor = SCALE_FACTORS_BY_ID.get(factor_id.upper())
        if factor is None:
            raise SystemExit(f"[cocomo] Unknown scale factor: {factor_id}")
        try:
            scale_factors[factor.id] = factor.value_for(level)
        except KeyError as e:
            raise SystemExit(f"[cocomo] {e.args[0]}")

    inputs = CocomoInputs(ksloc=args.ksloc, scale_factors=scale_factors)
    try:
        validate_cocomo_inputs(inputs)
    except InvalidInputError as e:
        raise SystemExit(f"[cocomo] {e}")

    result = calculate_cocomo_ii(
        inputs,
        cfg.cocomo_parameters(),
        strict=cfg.strict_scale_factors,
    )

    print(f"[cocomo] Effort: {result.effort:.2f} person-months")
    print(f"[cocomo] Development time: {result.dev_time:.2f} months")
    print(f"[cocomo] Productivity: {_fmt(productivity(result))} SLOC/PM")
    print(f"[cocomo] Average staffing: {_fmt(average_staffing(result))} people")

    if args.save:
        entry = _open_store().save_cocomo(result)
        print(f"[cocomo] Saved to history as {entry.id}")


def cmd_prefill(args: argparse.Namespace) -> None:
    """
    Read a document-analysis JSON and show the inputs it suggests.
    """
    analysis_path = Path(args.analysis_json_path).resolve()
    if not analysis_path.exists():
        raise SystemExit(f"[prefill] Analysis JSON file not found: {analysis_path}")

    analysis = DocumentAnalysis.from_dict(
        json.loads(analysis_path.read_text(encoding="utf-8"))
    )
    try:
        fp_inputs = prefill_fp_inputs(analysis)
        gsc = prefill_gsc_inputs(analysis)
    except InvalidInputError as e:
        raise SystemExit(f"[prefill] {e}")

    print("[prefill] Suggested counts:")
    print(json.dumps(fp_inputs.to_dict(), indent=2))
    print("[prefill] Suggested GSC ratings:")
    print(json.dumps(gsc, indent=2))

    if args.save:
        result = fp_result_from_analysis(analysis, args.file_name or analysis_path.name)
        entry = _open_store().save_fp(result)
        print(f"[prefill] AFP {result.afp:.2f} saved to history as {entry.id}")


def cmd_history_list(args: argparse.Namespace) -> None:
    entries = sorted(_open_store().list(), key=lambda e: e.timestamp, reverse=True)
    if not entries:
        print("[history] No saved calculations.")
        return
    for entry in entries:
        when = datetime.fromtimestamp(entry.timestamp / 1000).strftime("%Y-%m-%d %H:%M")
        if args.json:
            print(json.dumps(entry.to_dict()))
        elif entry.type == "FP":
            print(
                f"{entry.id}  {when}  FP      AFP={entry.data.afp:.2f}"
                f"  actual={_fmt(entry.data.actual_afp)}"
            )
        else:
            print(
                f"{entry.id}  {when}  COCOMO  effort={entry.data.effort:.2f}"
                f"  devTime={entry.data.dev_time:.2f}"
                f"  actual effort={_fmt(entry.data.actual_effort)}"
                f"  actual devTime={_fmt(entry.data.actual_dev_time)}"
            )


def cmd_history_actuals(args: argparse.Namespace) -> None:
    actuals = {}
    for key, value in (
        ("actualAfp", args.actual_afp),
        ("actualEffort", args.actual_effort),
        ("actualDevTime", args.actual_dev_time),
    ):
        if value is not None:
            actuals[key] = value
    for key in args.clear or []:
        actuals[key] = None
    if not actuals:
        raise SystemExit("[actuals] Nothing to update.")

    try:
        entry = _open_store().update_actuals(args.entry_id, actuals)
    except HistoryEntryNotFound:
        raise SystemExit(f"[actuals] No history entry with id {args.entry_id}")
    except InvalidInputError as e:
        raise SystemExit(f"[actuals] {e}")
    print(json.dumps(entry.to_dict(), indent=2))


def cmd_history_remove(args: argparse.Namespace) -> None:
    try:
        _open_store().remove(args.entry_id)
    except HistoryEntryNotFound:
        raise SystemExit(f"[remove] No history entry with id {args.entry_id}")
    print(f"[remove] Removed {args.entry_id}")


def cmd_history_clear(args: argparse.Namespace) -> None:
    if not args.yes:
        raise SystemExit("[clear] Refusing to clear history without --yes.")
    _open_store().clear()
    print("[clear] History cleared.")


def cmd_history_export(args: argparse.Namespace) -> None:
    dest_path = Path(args.dest_path).resolve()
    dest_path.parent.mkdir(parents=True, exist_ok=True)
    entries = _open_store().list()
    export_history_csv(entries, str(dest_path))
    print(f"[export] Wrote {len(entries)} entries to {dest_path}")


def cmd_compare(args: argparse.Namespace) -> None:
    """
    Show trend sizes and estimate-vs-actual accuracy from the history.
    """
    cfg = get_config()
    entries = _open_store().list()
    if not entries:
        print("[compare] No calculation history to compare.")
        return

    for entry_type, label in (("FP", "AFP"), ("COCOMO", "Effort")):
        series = trend_series(entries, entry_type)
        if has_sufficient_trend_data(series):
            values = ", ".join(f"{p.value:.2f}" for p in series)
            print(f"[compare] {label} trend ({len(series)} points): {values}")
        else:
            print(f"[compare] Not enough {label} data points for a trend (minimum 2).")

    reports = accuracy_reports(entries, min_r2_samples=cfg.r2_min_samples)
    for metric, report in reports.items():
        if report.n == 0:
            print(f"[compare] {metric}: no actual values recorded.")
            continue
        print(
            f"[compare] {metric}: n={report.n}  MAE={_fmt(report.mae)}"
            f"  RMSE={_fmt(report.rmse)}  R2={_fmt(report.r2)}"
        )


# --- Main --------------------------------------------------------------------


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Estimation CLI – function points, COCOMO II, history, accuracy."
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Log debug output to stderr.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    # fp
    fp_p = subparsers.add_parser(
        "fp",
        help="Compute function points from component counts.",
    )
    for name, label in (
        ("ei", "External Inputs"),
        ("eo", "External Outputs"),
        ("eq", "External Inquiries"),
        ("ilf", "Internal Logical Files"),
        ("eif", "External Interface Files"),
    ):
        fp_p.add_argument(f"--{name}", type=float, default=0, help=f"{label} count.")
    fp_p.add_argument(
        "--gsc",
        action="append",
        metavar="ID=RATING",
        help="GSC rating 0-5, e.g. performance=3. Repeatable; unrated GSCs count as 0.",
    )
    fp_p.add_argument("--save", action="store_true", help="Save the result to history.")
    fp_p.set_defaults(func=cmd_fp)

    # cocomo
    co_p = subparsers.add_parser(
        "cocomo",
        help="Estimate effort and development time with COCOMO II.",
    )
    co_p.add_argument("--ksloc", type=float, required=True, help="Size in thousands of SLOC.")
    co_p.add_argument(
        "--rating",
        action="append",
        metavar="FACTOR=LEVEL",
        help="Scale factor level, e.g. PREC='Very High'. Repeatable; default Nominal.",
    )
    co_p.add_argument("--save", action="store_true", help="Save the result to history.")
    co_p.set_defaults(func=cmd_cocomo)

    # prefill
    pre_p = subparsers.add_parser(
        "prefill",
        help="Show the inputs suggested by a document analysis JSON.",
    )
    pre_p.add_argument("analysis_json_path", help="Path to the analysis JSON.")
    pre_p.add_argument("--file-name", help="Document name to store with the result.")
    pre_p.add_argument(
        "--save",
        action="store_true",
        help="Calculate FP from the analysis and save it to history.",
    )
    pre_p.set_defaults(func=cmd_prefill)

    # history
    hist_p = subparsers.add_parser("history", help="Manage saved calculations.")
    hist_sub = hist_p.add_subparsers(dest="history_command", required=True)

    list_p = hist_sub.add_parser("list", help="List saved calculations, newest first.")
    list_p.add_argument("--json", action="store_true", help="Print entries as JSON lines.")
    list_p.set_defaults(func=cmd_history_list)

    act_p = hist_sub.add_parser("actuals", help="Record actual outcomes on an entry.")
    act_p.add_argument("entry_id")
    act_p.add_argument("--actual-afp", type=float)
    act_p.add_argument("--actual-effort", type=float)
    act_p.add_argument("--actual-dev-time", type=float)
    act_p.add_argument(
        "--clear",
        action="append",
        choices=["actualAfp", "actualEffort", "actualDevTime"],
        help="Remove a recorded actual value. Repeatable.",
    )
    act_p.set_defaults(func=cmd_history_actuals)

    rm_p = hist_sub.add_parser("remove", help="Delete one entry.")
    rm_p.add_argument("entry_id")
    rm_p.set_defaults(func=cmd_history_remove)

    clear_p = hist_sub.add_parser("clear", help="Delete every entry.")
    clear_p.add_argument("--yes", action="store_true", help="Confirm deletion.")
    clear_p.set_defaults(func=cmd_history_clear)

    exp_p = hist_sub.add_parser("export", help="Export the history to CSV.")
    exp_p.add_argument("dest_path", help="Destination CSV path.")
    exp_p.set_defaults(func=cmd_history_export)

    # compare
    cmp_p = subparsers.add_parser(
        "compare",
        help="Show trends and estimate-vs-actual accuracy.",
    )
    cmp_p.set_defaults(func=cmd_compare)

    return parser


def main(argv: list[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    level = logging.DEBUG if args.verbose else get_config().log_level
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")
    args.func(args)


if __name__ == "__main__":
    main()
