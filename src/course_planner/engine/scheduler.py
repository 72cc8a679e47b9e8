"""
Scheduler — first-fit placement of required courses into semesters.

Steps:
  1. drop pre-completed and locked courses from the set to schedule
  2. build the in-set prerequisite graph, reject cycles
  3. order courses so prerequisites come first (stable w.r.t. input order)
  4. reserve locked items in their semesters
  5. give each course the earliest semester that is not the study-abroad
     term, follows all of its prerequisites, offers the course and has room

A course that fits nowhere is reported in GenerationResult.unplaced and
logged; it never aborts the rest of the plan. A prerequisite cycle is the one
fatal condition.

The course-count limit (4 by default) is the capacity the scheduler enforces.
Credit cap and minimum are advisory here; overruns are only noted in
diagnostics, and the validator reports them as warnings.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date
from typing import Dict, Iterable, List, Optional, Set, Tuple

from ..catalog import Catalog
from ..models import Course, PlanItem, PlanningLimits, Preferences
from ..semesters import (SortKey, canonical_label, generate_semesters,
    is_offered_in_term, same_semester, semester_sort_key)
from .graph import PrereqGraph, build_graph, ensure_acyclic, topological_order
from .result import GenerationResult

logger = logging.getLogger(__name__)


def _prerequisites_met(
    course:    Course,
    key:       SortKey,
    graph:     PrereqGraph,
    placed_at: Dict[str, SortKey],
    completed: Set[str],
) -> bool:
    for prereq in course.prerequisites:
        if prereq in completed:
            continue
        at = placed_at.get(prereq)
        if at is not None:
            if not at < key:
                return False
        elif prereq in graph:
            # in-set but not placed (yet, or at all)
            return False
    return True


def _fmt(credits: float) -> str:
    return f"{credits:g}"


def partition_courses(
    required_courses: Iterable[str],
    existing_plan:    Iterable[PlanItem],
    preferences:      Preferences,
) -> Tuple[List[str], Dict[str, PlanItem], List[str]]:
    """
    Split the request into (to_schedule, locked, unlocked).

    to_schedule: required courses minus pre-completed ones, input order, no repeats
    locked:      course code -> its locked item (first one wins)
    unlocked:    to_schedule minus locked courses
    """
    completed = set(preferences.completed_courses)
    to_schedule = [c for c in dict.fromkeys(required_courses) if c not in completed]

    locked: Dict[str, PlanItem] = {}
    for item in existing_plan:
        if not item.is_locked:
            continue
        if item.course_code in locked:
            logger.warning(
                "%s is locked into both %s and %s; keeping %s",
                item.course_code, locked[item.course_code].semester,
                item.semester, locked[item.course_code].semester,
            )
            continue
        locked[item.course_code] = item
    unlocked = [c for c in to_schedule if c not in locked]
    return to_schedule, locked, unlocked


def generate_plan(
    catalog:          Catalog,
    required_courses: Iterable[str],
    existing_plan:    Iterable[PlanItem]       = (),
    preferences:      Optional[Preferences]    = None,
    credit_cap:       Optional[float]          = None,
    credit_min:       Optional[float]          = None,
    start_year:       Optional[int]            = None,
    limits:           Optional[PlanningLimits] = None,
) -> GenerationResult:
    """
    Produce a semester assignment for `required_courses`.

    Locked items of `existing_plan` are kept where they are and returned
    alongside the newly placed courses. Raises PrerequisiteCycleError if the
    courses to schedule require each other.
    """
    prefs  = preferences or Preferences()
    limits = (limits or PlanningLimits()).with_credits(credit_cap, credit_min)
    if start_year is None:
        start_year = date.today().year

    completed: Set[str] = set(prefs.completed_courses)
    to_schedule, locked, unlocked = partition_courses(
        required_courses, existing_plan, prefs
    )

    graph = build_graph(catalog, to_schedule)
    ensure_acyclic(graph)
    order = topological_order(graph, unlocked)

    semesters = generate_semesters(
        start_year, prefs.target_graduation_year, limits.horizon_years
    )
    abroad = prefs.study_abroad.label if prefs.study_abroad else None

    courses_in: Dict[str, List[str]] = {s: [] for s in semesters}
    credits_in: Dict[str, float]     = {s: 0 for s in semesters}
    placed_at:  Dict[str, SortKey]   = {}

    result = GenerationResult(semesters=list(semesters))

    # ── 1. locked items reserve their semester first ─────────────────────────
    for code, item in locked.items():
        course = catalog.get(code)
        if course is not None:
            credits = course.credits
        elif item.credits is not None:
            credits = item.credits
        else:
            credits = limits.placeholder_credits
        label = canonical_label(item.semester)
        courses_in.setdefault(label, []).append(code)
        credits_in[label] = credits_in.get(label, 0) + credits
        placed_at[code] = semester_sort_key(label)
        result.items.append(replace(item, semester=label, credits=credits, is_locked=True))

    # ── 2. first-fit placement in topological order ──────────────────────────
    placed = 0
    for code in order:
        if code in locked:
            continue

        course = catalog.get(code)
        if course is None:
            course = catalog.course_or_placeholder(code, limits.placeholder_credits)
            logger.warning("Course not found in catalog: %s, using placeholder", code)
            result.diagnostics.append(
                f"{code} is not in the catalog; scheduled as a "
                f"{_fmt(course.credits)}-credit placeholder offered every term."
            )

        assumed = [
            p for p in course.prerequisites
            if p not in completed and p not in graph and p not in locked
        ]
        if assumed:
            result.assumed_prerequisites[code] = assumed

        target: Optional[str] = None
        for label in semesters:
            if abroad is not None and same_semester(label, abroad):
                logger.debug("%s: skipping %s (study abroad)", code, label)
                continue
            if not _prerequisites_met(course, semester_sort_key(label), graph, placed_at, completed):
                logger.debug("%s: skipping %s (prerequisites not met)", code, label)
                continue
            if not is_offered_in_term(course.term_offered, label):
                logger.debug("%s: skipping %s (not offered this term)", code, label)
                continue
            if len(courses_in[label]) >= limits.max_courses_per_semester:
                logger.debug(
                    "%s: skipping %s (already has %d courses)",
                    code, label, limits.max_courses_per_semester,
                )
                continue
            target = label
            break

        if target is None:
            logger.warning(
                "Could not place course %s between %s and %s",
                code, semesters[0] if semesters else "?", semesters[-1] if semesters else "?",
            )
            result.unplaced.append(code)
            continue

        logger.debug("%s: placing in %s", code, target)
        courses_in[target].append(code)
        credits_in[target] += course.credits
        placed_at[code] = semester_sort_key(target)
        result.items.append(PlanItem(
            course_code = code,
            semester    = target,
            is_locked   = False,
            credits     = course.credits,
        ))
        placed += 1

    # ── 3. advisory credit bounds ────────────────────────────────────────────
    used = [s for s in semesters if courses_in[s]]
    for label in used:
        total = credits_in[label]
        if total > limits.credit_cap:
            result.diagnostics.append(
                f"{label}: {_fmt(total)} credits exceeds the "
                f"{_fmt(limits.credit_cap)}-credit cap."
            )
        elif total < limits.credit_min:
            result.diagnostics.append(
                f"{label}: {_fmt(total)} credits is below the "
                f"{_fmt(limits.credit_min)}-credit minimum."
            )

    result.stats = {
        "placed":         placed,
        "skipped":        len(result.unplaced),
        "locked":         len(locked),
        "semesters_used": len(used),
    }
    logger.info(
        "Plan generation complete: %d courses placed, %d courses skipped",
        placed, len(result.unplaced),
    )
    return result
