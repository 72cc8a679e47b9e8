"""
Pre-generation checks that run before the scheduler is invoked.

Catching unusable requests here means the student sees plain-English error
messages rather than a half-empty plan. Warnings describe things the
scheduler will work around (catalog gaps, locked items outside the
horizon) but that the student may want to fix.
"""

from __future__ import annotations

from datetime import date
from typing import Dict, List, Sequence, Tuple

from ..catalog import Catalog, flatten_requirements
from ..models import PlanRequest
from ..semesters import (generate_semesters, is_offered_in_term, is_prior_bucket,
    parse_semester, same_semester)


class PrecheckError(ValueError):
    """Raised by ensure_ok() when hard errors are present."""


def build_semester_index(semesters: Sequence[str]) -> Dict[str, int]:
    return {label: i for i, label in enumerate(semesters)}


def resolve_start_year(request: PlanRequest) -> int:
    return request.start_year if request.start_year is not None else date.today().year


def resolve_required(catalog: Catalog, request: PlanRequest) -> List[str]:
    """Explicit required_courses, else every course the program's groups name."""
    if request.required_courses:
        return list(dict.fromkeys(request.required_courses))
    if request.program_id:
        program = catalog.program(request.program_id)
        if program is not None:
            return flatten_requirements(program.requirement_groups)
    return []


def precheck(catalog: Catalog, request: PlanRequest) -> Tuple[List[str], List[str]]:
    """Return (errors, warnings). errors = the request cannot be planned."""
    errors:   List[str] = []
    warnings: List[str] = []

    limits     = request.limits
    prefs      = request.preferences
    start_year = resolve_start_year(request)

    if limits.credit_cap < 1:
        errors.append(f"credit_cap ({limits.credit_cap:g}) must be at least 1.")
    if limits.credit_min > limits.credit_cap:
        errors.append(
            f"credit_min ({limits.credit_min:g}) exceeds "
            f"credit_cap ({limits.credit_cap:g})."
        )
    if limits.max_courses_per_semester < 1:
        errors.append(
            f"max_courses_per_semester ({limits.max_courses_per_semester}) must be at least 1."
        )

    target = prefs.target_graduation_year
    if target is not None and target < start_year:
        errors.append(
            f"Target graduation year {target} is before the start year {start_year}."
        )

    if request.program_id and catalog.program(request.program_id) is None:
        errors.append(f"Unknown program '{request.program_id}'.")

    required = resolve_required(catalog, request)
    if not required and not errors:
        errors.append("Nothing to schedule: no required courses and no program requirements.")

    semesters = generate_semesters(start_year, target, limits.horizon_years)

    abroad = prefs.study_abroad
    if abroad is not None:
        sem = parse_semester(abroad.label)
        if sem is None or sem.term.lower() not in ("fall", "spring"):
            errors.append(
                f"Study abroad term '{abroad.term}' must be Fall or Spring."
            )
        elif not any(same_semester(s, abroad.label) for s in semesters):
            warnings.append(
                f"Study abroad semester {abroad.label} is outside the planning "
                f"horizon ({semesters[0]} to {semesters[-1]}) and has no effect."
            )

    completed = set(prefs.completed_courses)
    for code in required:
        if code in completed:
            continue
        course = catalog.get(code)
        if course is None:
            warnings.append(
                f"Required course '{code}' is not in the catalog; a "
                f"{limits.placeholder_credits:g}-credit placeholder will be scheduled."
            )
            continue
        if not any(is_offered_in_term(course.term_offered, s) for s in semesters):
            warnings.append(
                f"Required course '{code}' is offered in '{course.term_offered}', "
                f"which matches no semester in the horizon; it cannot be placed."
            )

    for item in request.locked_items():
        if is_prior_bucket(item.semester):
            continue
        if not any(same_semester(s, item.semester) for s in semesters):
            warnings.append(
                f"Locked course '{item.course_code}' is in {item.semester}, "
                f"outside the planning horizon; it is kept but not counted "
                f"against any planned semester."
            )

    return errors, warnings


def ensure_ok(catalog: Catalog, request: PlanRequest) -> None:
    errors, _ = precheck(catalog, request)
    if errors:
        raise PrecheckError("\n".join(errors))
