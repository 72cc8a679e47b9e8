from __future__ import annotations

from typing import Optional, Sequence

from ..catalog import Catalog
from ..models import PlanItem, PlanRequest
from .feasibility import check_feasibility
from .precheck import ensure_ok, resolve_required, resolve_start_year
from .result import FeasibilityResult, GenerationResult, ValidationResult
from .scheduler import generate_plan
from .validator import validate_plan


def generate_for_request(catalog: Catalog, request: PlanRequest) -> GenerationResult:
    ensure_ok(catalog, request)
    return generate_plan(
        catalog,
        resolve_required(catalog, request),
        existing_plan = request.existing_plan,
        preferences   = request.preferences,
        start_year    = resolve_start_year(request),
        limits        = request.limits,
    )


def diagnose_request(
    catalog: Catalog,
    request: PlanRequest,
    time_limit_s: float = 10.0,
) -> FeasibilityResult:
    ensure_ok(catalog, request)
    return check_feasibility(
        catalog,
        resolve_required(catalog, request),
        existing_plan = request.existing_plan,
        preferences   = request.preferences,
        start_year    = resolve_start_year(request),
        limits        = request.limits,
        time_limit_s  = time_limit_s,
    )


def validate_for_request(
    catalog: Catalog,
    request: PlanRequest,
    items: Optional[Sequence[PlanItem]] = None,
) -> ValidationResult:
    """Validate `items` (default: the request's existing plan) against its program."""
    groups = None
    if request.program_id:
        program = catalog.program(request.program_id)
        if program is not None:
            groups = program.requirement_groups
    return validate_plan(
        catalog,
        request.existing_plan if items is None else items,
        requirement_groups = groups,
        prior_completed    = request.preferences.completed_courses,
        credit_cap         = request.limits.credit_cap,
    )
