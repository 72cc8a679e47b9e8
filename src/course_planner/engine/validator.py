"""
Validator — checks an arbitrary semester assignment against the catalog.

Two modes:
  validate_plan             whole plan, plus optional requirements progress
  validate_course_addition  one course dropped into an existing plan

Nothing here raises for bad data. Every finding becomes a ValidationWarning
with severity "error" (the plan is wrong) or "warning" (advisory: term data
and credit caps are often incomplete or negotiable).
"""

from __future__ import annotations

import math
from typing import Dict, Iterable, List, Optional, Sequence, Set

from ..catalog import Catalog
from ..models import PlanItem, RequirementGroup
from ..semesters import (canonical_label, is_before, is_offered_in_term, same_semester,
    sort_semesters)
from .result import (ERROR, WARNING, RequirementDetail, RequirementsProgress,
    ValidationResult, ValidationWarning)


def _fmt(credits: float) -> str:
    return f"{credits:g}"


def _group_by_semester(items: Iterable[PlanItem]) -> Dict[str, List[PlanItem]]:
    grouped: Dict[str, List[PlanItem]] = {}
    for item in items:
        grouped.setdefault(canonical_label(item.semester), []).append(item)
    return grouped


def _item_credits(catalog: Catalog, item: PlanItem) -> float:
    return catalog.credits_of(item.course_code, item.credits if item.credits is not None else 0)


def _unknown_course(code: str, semester: Optional[str], plan_item_id: Optional[str] = None) -> ValidationWarning:
    return ValidationWarning(
        type         = "requirement",
        severity     = WARNING,
        message      = f"Course {code} not found in catalog",
        course_code  = code,
        semester     = semester,
        plan_item_id = plan_item_id,
    )


def _term_warning(code: str, semester: str, plan_item_id: Optional[str] = None) -> ValidationWarning:
    return ValidationWarning(
        type         = "term_offered",
        severity     = WARNING,
        message      = f"{code} may not be offered in {semester}",
        course_code  = code,
        semester     = semester,
        plan_item_id = plan_item_id,
    )


def _prereq_error(code: str, semester: str, missing: List[str],
                  plan_item_id: Optional[str] = None) -> ValidationWarning:
    return ValidationWarning(
        type         = "prerequisite",
        severity     = ERROR,
        message      = f"{code} requires: {', '.join(missing)}",
        course_code  = code,
        semester     = semester,
        plan_item_id = plan_item_id,
        details      = {"missing_prerequisites": missing},
    )


def validate_plan(
    catalog:            Catalog,
    items:              Sequence[PlanItem],
    requirement_groups: Optional[Sequence[RequirementGroup]] = None,
    prior_completed:    Optional[Iterable[str]]              = None,
    credit_cap:         float                                = 16,
) -> ValidationResult:
    warnings: List[ValidationWarning] = []
    prior = list(prior_completed or ())
    completed: Set[str] = set(prior)

    by_semester = _group_by_semester(items)

    for semester in sort_semesters(by_semester):
        sem_items = by_semester[semester]

        seen: Set[str] = set()
        for item in sem_items:
            if item.course_code in seen:
                warnings.append(ValidationWarning(
                    type         = "duplicate",
                    severity     = ERROR,
                    message      = f"Duplicate course {item.course_code} in {semester}",
                    course_code  = item.course_code,
                    semester     = semester,
                    plan_item_id = item.plan_item_id,
                ))
            seen.add(item.course_code)

        for item in sem_items:
            course = catalog.get(item.course_code)
            if course is None:
                warnings.append(_unknown_course(item.course_code, semester, item.plan_item_id))
                continue

            # `completed` holds prior credit plus every earlier semester
            missing = [p for p in course.prerequisites if p not in completed]
            if missing:
                warnings.append(_prereq_error(item.course_code, semester, missing, item.plan_item_id))

            if not is_offered_in_term(course.term_offered, semester):
                warnings.append(_term_warning(item.course_code, semester, item.plan_item_id))

        total = sum(_item_credits(catalog, item) for item in sem_items)
        if total > credit_cap:
            warnings.append(ValidationWarning(
                type     = "credit_cap",
                severity = WARNING,
                message  = f"{semester} has {_fmt(total)} credits (cap: {_fmt(credit_cap)})",
                semester = semester,
                details  = {"total_credits": total, "credit_cap": credit_cap},
            ))

        completed.update(item.course_code for item in sem_items)

    # Plan-wide: the same course in more than one semester
    semesters_of: Dict[str, List[str]] = {}
    for item in items:
        semesters_of.setdefault(item.course_code, []).append(item.semester)
    for code, sems in semesters_of.items():
        if len(sems) > 1:
            warnings.append(ValidationWarning(
                type        = "duplicate",
                severity    = ERROR,
                message     = f"{code} appears in multiple semesters: {', '.join(sems)}",
                course_code = code,
                details     = {"semesters": sems},
            ))

    progress = None
    if requirement_groups:
        progress = compute_requirements_progress(
            items, requirement_groups, prior
        )

    return ValidationResult(
        is_valid              = not any(w.is_error for w in warnings),
        warnings              = warnings,
        requirements_progress = progress,
    )


def _group_is_complete(group: RequirementGroup, done: int, remaining: int) -> bool:
    if group.type == "all":
        return remaining == 0
    return done >= max(group.courses_needed, 1)


def _group_fraction(group: RequirementGroup, done: int) -> float:
    if group.type == "all":
        needed = len(group.courses)
    else:
        needed = min(max(group.courses_needed, 1), len(group.courses))
    if needed == 0:
        return 1.0
    return min(done / needed, 1.0)


def compute_requirements_progress(
    items:              Iterable[PlanItem],
    requirement_groups: Sequence[RequirementGroup],
    prior_completed:    Iterable[str] = (),
) -> RequirementsProgress:
    """
    Completed = prior credit, planned = in the plan but not prior credit,
    remaining = neither. A group counts towards completed_requirements only
    when it is complete with nothing remaining; a satisfied choice group with
    unplanned options left counts as in progress.
    """
    planned_codes = {item.course_code for item in items}
    prior = set(prior_completed)

    details: List[RequirementDetail] = []
    complete_count = 0
    in_progress    = 0

    for group in requirement_groups:
        completed = [c for c in group.courses if c in prior]
        planned   = [c for c in group.courses if c not in prior and c in planned_codes]
        remaining = [c for c in group.courses if c not in prior and c not in planned_codes]
        done = len(completed) + len(planned)

        is_complete = _group_is_complete(group, done, len(remaining))
        details.append(RequirementDetail(
            group_name        = group.name,
            type              = group.type,
            required_courses  = list(group.courses),
            completed         = completed,
            planned           = planned,
            remaining         = remaining,
            is_complete       = is_complete,
            fraction_complete = _group_fraction(group, done),
        ))

        if is_complete and not remaining:
            complete_count += 1
        elif planned:
            in_progress += 1

    total = len(details)
    # round half up
    percentage = int(math.floor(complete_count / total * 100 + 0.5)) if total else 0

    return RequirementsProgress(
        total_requirements       = total,
        completed_requirements   = complete_count,
        in_progress_requirements = in_progress,
        remaining_requirements   = total - complete_count - in_progress,
        percentage_complete      = percentage,
        details                  = details,
    )


def validate_course_addition(
    catalog:         Catalog,
    course_code:     str,
    semester:        str,
    existing_plan:   Sequence[PlanItem],
    prior_completed: Optional[Iterable[str]] = None,
    credit_cap:      float                   = 16,
) -> List[ValidationWarning]:
    """Check a single course about to be added to `semester`."""
    warnings: List[ValidationWarning] = []

    if any(item.course_code == course_code for item in existing_plan):
        warnings.append(ValidationWarning(
            type        = "duplicate",
            severity    = ERROR,
            message     = f"{course_code} is already in your plan",
            course_code = course_code,
            semester    = semester,
        ))

    course = catalog.get(course_code)
    if course is None:
        warnings.append(_unknown_course(course_code, semester))
        return warnings

    completed: Set[str] = set(prior_completed or ())
    completed.update(
        item.course_code for item in existing_plan if is_before(item.semester, semester)
    )

    missing = [p for p in course.prerequisites if p not in completed]
    if missing:
        warnings.append(_prereq_error(course_code, semester, missing))

    current = sum(
        _item_credits(catalog, item) for item in existing_plan if same_semester(item.semester, semester)
    )
    total = current + course.credits
    if total > credit_cap:
        warnings.append(ValidationWarning(
            type        = "credit_cap",
            severity    = WARNING,
            message     = (f"Adding {course_code} would exceed credit cap "
                           f"({_fmt(total)}/{_fmt(credit_cap)})"),
            course_code = course_code,
            semester    = semester,
            details     = {
                "current_credits": current,
                "course_credits":  course.credits,
                "total":           total,
                "credit_cap":      credit_cap,
            },
        ))

    if not is_offered_in_term(course.term_offered, semester):
        warnings.append(_term_warning(course_code, semester))

    return warnings


def validate_course_move(
    catalog:         Catalog,
    course_code:     str,
    semester:        str,
    existing_plan:   Sequence[PlanItem],
    prior_completed: Optional[Iterable[str]] = None,
    credit_cap:      float                   = 16,
) -> List[ValidationWarning]:
    """Like validate_course_addition, with the course lifted out of its old slot first."""
    remaining = [item for item in existing_plan if item.course_code != course_code]
    return validate_course_addition(
        catalog, course_code, semester, remaining, prior_completed, credit_cap
    )
