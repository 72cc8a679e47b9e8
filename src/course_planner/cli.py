"""
Command-line interface for the course planner.

Usage examples:
    python -m course_planner.cli generate --catalog catalog.json --request request.json
    python -m course_planner.cli generate --catalog catalog.json --request request.json --out plan.json --diagnose
    python -m course_planner.cli validate --catalog catalog.json --plan plan.json --request request.json
    python -m course_planner.cli check-course --catalog catalog.json --plan plan.json --course "CSC 340" --semester "2025 Fall"

Exit codes:
    0  plan complete / plan valid / course can be added
    1  bad arguments, unreadable input, precheck errors or a prerequisite cycle
    2  plan generated with unplaced courses / plan or course has errors
"""

from __future__ import annotations

import argparse
import sys
from typing import List, NoReturn, Optional

from course_planner.engine.api import (diagnose_request, generate_for_request,
    validate_for_request)
from course_planner.engine.graph import PrerequisiteCycleError
from course_planner.engine.precheck import PrecheckError, precheck
from course_planner.engine.result import ValidationWarning
from course_planner.engine.validator import validate_course_addition
from course_planner.io_json import (ConfigError, load_catalog, load_plan, load_request,
    save_json)
from course_planner.log_setup import setup_logging
from course_planner.models import PlanRequest
from course_planner.semesters import sort_semesters


def _fail(msg: str) -> NoReturn:
    print(f"[ERROR] {msg}", file=sys.stderr)
    sys.exit(1)


def _print_warning(w: ValidationWarning) -> None:
    where = " / ".join(x for x in (w.semester, w.course_code) if x)
    tag = "ERROR" if w.is_error else "WARNING"
    print(f"  [{tag}] {w.type:<13} {where}: {w.message}")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="course-planner",
        description="Semester course planner: generate and validate degree plans",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "examples:\n"
            "  course-planner generate --catalog catalog.json --request request.json\n"
            "  course-planner validate --catalog catalog.json --plan plan.json\n"
        ),
    )
    parser.add_argument("--log-level", default=None, metavar="LEVEL",
                        help="DEBUG, INFO, WARNING or ERROR "
                             "(default: $COURSE_PLANNER_LOG_LEVEL or INFO)")
    parser.add_argument("--log-file", default=None, metavar="FILE",
                        help="also write logs to this rotating file")
    sub = parser.add_subparsers(dest="command", required=True)

    gen = sub.add_parser("generate", help="generate a semester-by-semester plan")
    gen.add_argument("--catalog", required=True, metavar="FILE", help="catalog JSON")
    gen.add_argument("--request", required=True, metavar="FILE", help="plan request JSON")
    gen.add_argument("--out", default=None, metavar="FILE",
                     help="write the generation result JSON to this path; its 'items' "
                          "array doubles as a --plan file (optional)")
    gen.add_argument("--diagnose", action="store_true",
                     help="if courses are left unplaced, check whether any "
                          "assignment could fit them (OR-Tools CP-SAT)")

    val = sub.add_parser("validate", help="validate an existing plan")
    val.add_argument("--catalog", required=True, metavar="FILE", help="catalog JSON")
    val.add_argument("--plan", required=True, metavar="FILE", help="plan JSON with an 'items' array")
    val.add_argument("--request", default=None, metavar="FILE",
                     help="request JSON supplying program, prior credit and credit cap")
    val.add_argument("--out", default=None, metavar="FILE",
                     help="write the validation result JSON to this path (optional)")

    chk = sub.add_parser("check-course", help="check adding one course to a plan")
    chk.add_argument("--catalog", required=True, metavar="FILE", help="catalog JSON")
    chk.add_argument("--plan", required=True, metavar="FILE", help="plan JSON with an 'items' array")
    chk.add_argument("--course", required=True, help='course code, e.g. "CSC 340"')
    chk.add_argument("--semester", required=True, help='target semester, e.g. "2025 Fall"')
    chk.add_argument("--request", default=None, metavar="FILE",
                     help="request JSON supplying prior credit and credit cap")
    return parser


def _load_optional_request(path: Optional[str]) -> PlanRequest:
    return load_request(path) if path else PlanRequest()


def _cmd_generate(args: argparse.Namespace) -> int:
    # ── 1. load inputs ────────────────────────────────────────────────────────
    catalog = load_catalog(args.catalog)
    request = load_request(args.request)

    # ── 2. precheck: catch unusable requests before scheduling ──────────────
    errors, warnings = precheck(catalog, request)
    for w in warnings:
        print(f"[WARNING] {w}")
    if errors:
        print(
            f"\n[ERROR] {len(errors)} precheck error(s) found; "
            "a plan cannot be produced until these are fixed:\n",
            file=sys.stderr,
        )
        for i, err in enumerate(errors, 1):
            print(f"  {i}. {err}", file=sys.stderr)
        return 1

    # ── 3. generate ───────────────────────────────────────────────────────────
    result = generate_for_request(catalog, request)

    # ── 4. print summary ──────────────────────────────────────────────────────
    for k, v in result.stats.items():
        print(f"  {k}: {v}")
    for d in result.diagnostics:
        print(f"[DIAG] {d}")
    for code, prereqs in result.assumed_prerequisites.items():
        print(f"[ASSUMED] {code} needs {', '.join(prereqs)} (not in plan or prior credit)")

    grouped = result.by_semester()
    print(f"\nPlan ({len(result.items)} courses):")
    for semester in sort_semesters(grouped):
        items   = grouped[semester]
        credits = sum(item.credits or 0 for item in items)
        codes   = ", ".join(
            f"{item.course_code}{' (locked)' if item.is_locked else ''}" for item in items
        )
        print(f"  {semester:<12} {credits:>4g} cr  {codes}")

    payload = result.to_dict()
    if result.unplaced:
        print(f"\n[WARNING] Could not place: {', '.join(result.unplaced)}")
        if args.diagnose:
            feas = diagnose_request(catalog, request)
            payload["feasibility"] = feas.to_dict()
            print(f"[DIAG] Horizon feasibility: {feas.status}")
            for d in feas.diagnostics:
                print(f"[DIAG] {d}")
            if feas.is_feasible:
                print(f"[DIAG] A plan fitting every course exists, ending {feas.last_semester}.")

    # ── 5. write output file (optional) ──────────────────────────────────────
    if args.out:
        save_json(payload, args.out)
        print(f"\nPlan written to: {args.out}")

    return 0 if result.is_complete else 2


def _cmd_validate(args: argparse.Namespace) -> int:
    catalog = load_catalog(args.catalog)
    items   = load_plan(args.plan)
    request = _load_optional_request(args.request)

    result = validate_for_request(catalog, request, items)

    print(f"Valid     : {result.is_valid}")
    print(f"Errors    : {len(result.errors)}")
    print(f"Findings  : {len(result.warnings)}")
    for w in result.warnings:
        _print_warning(w)

    progress = result.requirements_progress
    if progress is not None:
        print(
            f"\nRequirements: {progress.completed_requirements}/"
            f"{progress.total_requirements} complete, "
            f"{progress.in_progress_requirements} in progress "
            f"({progress.percentage_complete}%)"
        )
        for d in progress.details:
            mark = "x" if d.is_complete else " "
            print(f"  [{mark}] {d.group_name}: remaining {', '.join(d.remaining) or '-'}")

    if args.out:
        save_json(result.to_dict(), args.out)
        print(f"\nResult written to: {args.out}")

    return 0 if result.is_valid else 2


def _cmd_check_course(args: argparse.Namespace) -> int:
    catalog = load_catalog(args.catalog)
    items   = load_plan(args.plan)
    request = _load_optional_request(args.request)

    warnings = validate_course_addition(
        catalog,
        args.course,
        args.semester,
        items,
        prior_completed = request.preferences.completed_courses,
        credit_cap      = request.limits.credit_cap,
    )
    if not warnings:
        print(f"{args.course} can be added to {args.semester}.")
        return 0
    for w in warnings:
        _print_warning(w)
    return 2 if any(w.is_error for w in warnings) else 0


def main(argv: Optional[List[str]] = None) -> None:
    args = _build_parser().parse_args(argv)
    setup_logging(level=args.log_level, log_file=args.log_file)

    commands = {
        "generate":     _cmd_generate,
        "validate":     _cmd_validate,
        "check-course": _cmd_check_course,
    }
    try:
        code = commands[args.command](args)
    except FileNotFoundError as e:
        _fail(f"File not found: {e.filename}")
    except ConfigError as e:
        _fail(f"Could not load input: {e}")
    except PrerequisiteCycleError as e:
        _fail(str(e))
    except PrecheckError as e:
        _fail(str(e))
    sys.exit(code)


if __name__ == "__main__":
    main()
