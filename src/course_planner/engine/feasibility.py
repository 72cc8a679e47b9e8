"""
Horizon feasibility — can every required course fit the planning horizon?

The scheduler is first-fit: it commits each course to the earliest slot and
never revisits the choice, so it can leave a course unplaced even when some
other assignment would fit everything. This module answers the question
exactly with a CP-SAT model, and returns a compact witness plan when one
exists.

OR-Tools CP-SAT API used here:
  new_bool_var()      create a 0/1 decision variable
  add()               post a linear constraint
  only_enforce_if()   conditional constraint, active only when a BoolVar is 1

Reference: OR-Tools CP-SAT Python API
https://developers.google.com/optimization/reference/python/sat/python/cp_model

Model:
  x[c, t] = 1  iff  course c is taken in semester t
  each course exactly once, in a semester it is allowed in
  per-semester course count <= limit minus locked items already there
  x[c, t] = 1  implies  every in-set prerequisite is taken before t
  objective: minimise the index of the last used semester
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Dict, Iterable, List, Optional

from ortools.sat.python import cp_model

from ..catalog import Catalog
from ..models import PlanItem, PlanningLimits, Preferences
from ..semesters import (generate_semesters, is_offered_in_term, parse_semester,
    same_semester, semester_sort_key)
from .graph import build_graph, ensure_acyclic
from .precheck import build_semester_index
from .result import FeasibilityResult
from .scheduler import partition_courses

logger = logging.getLogger(__name__)


def _status_str(s: object) -> str:
    """Convert a CP-SAT solver status value to a readable string."""
    mapping = {
        int(cp_model.OPTIMAL):       "OPTIMAL",
        int(cp_model.FEASIBLE):      "FEASIBLE",
        int(cp_model.INFEASIBLE):    "INFEASIBLE",
        int(cp_model.MODEL_INVALID): "MODEL_INVALID",
    }
    return mapping.get(int(s), "UNKNOWN")  # type: ignore[call-overload]


def check_feasibility(
    catalog:          Catalog,
    required_courses: Iterable[str],
    existing_plan:    Iterable[PlanItem]       = (),
    preferences:      Optional[Preferences]    = None,
    start_year:       Optional[int]            = None,
    limits:           Optional[PlanningLimits] = None,
    time_limit_s:     float                    = 10.0,
    num_workers:      int                      = 0,
) -> FeasibilityResult:
    prefs  = preferences or Preferences()
    limits = limits or PlanningLimits()
    if start_year is None:
        start_year = date.today().year

    completed = set(prefs.completed_courses)
    to_schedule, locked, unlocked = partition_courses(
        required_courses, list(existing_plan), prefs
    )
    graph = build_graph(catalog, to_schedule)
    ensure_acyclic(graph)

    semesters = generate_semesters(
        start_year, prefs.target_graduation_year, limits.horizon_years
    )
    idx    = build_semester_index(semesters)
    abroad = prefs.study_abroad.label if prefs.study_abroad else None

    locked_key = {code: semester_sort_key(item.semester) for code, item in locked.items()}
    locked_count = [0] * len(semesters)
    for item in locked.values():
        sem = parse_semester(item.semester)
        if sem is not None and sem.label in idx:
            locked_count[idx[sem.label]] += 1

    # ── allowed semesters per course ─────────────────────────────────────────
    allowed: Dict[str, List[int]] = {}
    diagnostics: List[str] = []
    for code in unlocked:
        course = catalog.course_or_placeholder(code, limits.placeholder_credits)
        sems: List[int] = []
        for t, label in enumerate(semesters):
            if abroad is not None and same_semester(label, abroad):
                continue
            if not is_offered_in_term(course.term_offered, label):
                continue
            key = semester_sort_key(label)
            if any(p in locked_key and not locked_key[p] < key
                   for p in course.prerequisites if p not in completed):
                continue
            sems.append(t)
        if not sems:
            diagnostics.append(
                f"{code} has no semester in {semesters[0]}..{semesters[-1]} "
                f"that offers it, is not the study-abroad term and follows its "
                f"locked prerequisites."
            )
        allowed[code] = sems

    if diagnostics:
        return FeasibilityResult(status="INFEASIBLE", diagnostics=diagnostics)
    if not unlocked:
        return FeasibilityResult(status="OPTIMAL", stats={"courses": 0})

    model = cp_model.CpModel()

    x = {
        (c, t): model.new_bool_var(f"x_{i}_t{t}")
        for i, c in enumerate(unlocked) for t in allowed[c]
    }

    # Each course is scheduled exactly once
    for c in unlocked:
        model.add(sum(x[c, t] for t in allowed[c]) == 1)

    # Course-count capacity net of locked items
    for t in range(len(semesters)):
        here = [x[c, t] for c in unlocked if (c, t) in x]
        if here:
            room = max(limits.max_courses_per_semester - locked_count[t], 0)
            model.add(sum(here) <= room)

    # Strict precedence for in-set, unlocked prerequisites
    unlocked_set = set(unlocked)
    for c in unlocked:
        for p in graph[c].prerequisites:
            if p not in unlocked_set:
                continue
            for t in allowed[c]:
                earlier = [x[p, u] for u in allowed[p] if u < t]
                if earlier:
                    model.add(sum(earlier) >= 1).only_enforce_if(x[c, t])
                else:
                    model.add(x[c, t] == 0)

    # Soft objective: compact plan, minimise the index of the last used semester.
    last_t = model.new_int_var(0, max(len(semesters) - 1, 0), "last_t")
    for (c, t), var in x.items():
        model.add(last_t >= t).only_enforce_if(var)
    model.minimize(last_t)

    solver = cp_model.CpSolver()
    solver.parameters.max_time_in_seconds = time_limit_s
    solver.parameters.num_workers         = num_workers
    status = solver.solve(model)
    name   = _status_str(status)
    logger.info("Feasibility check over %d courses: %s", len(unlocked), name)

    if name not in ("OPTIMAL", "FEASIBLE"):
        return FeasibilityResult(
            status      = name,
            diagnostics = [
                f"No assignment of {len(unlocked)} course(s) fits "
                f"{semesters[0]}..{semesters[-1]} with at most "
                f"{limits.max_courses_per_semester} courses per semester."
            ],
        )

    assignment = {
        c: semesters[t]
        for (c, t), var in x.items()
        if solver.value(var) == 1
    }
    last = int(solver.value(last_t))
    return FeasibilityResult(
        status        = name,
        assignment    = {c: assignment[c] for c in unlocked},
        last_semester = semesters[last],
        stats         = {
            "courses":       len(unlocked),
            "num_conflicts": solver.num_conflicts,
            "wall_time_s":   round(solver.wall_time, 3),
        },
    )
