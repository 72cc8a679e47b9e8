"""
JSON serialisation / deserialisation for catalogs, plan requests and plans.

Uses only the Python standard-library json module.  The docs warn that
parsing large or deeply nested JSON from untrusted sources can be expensive,
so basic structural validation is applied before domain objects are built.

Reference: Python docs — json
https://docs.python.org/3/library/json.html
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List, Optional

from course_planner.catalog import Catalog
from course_planner.models import (REQUIREMENT_TYPES, Course, PlanItem, PlanningLimits,
    PlanRequest, Preferences, Program, RequirementGroup, StudyAbroad)


class ConfigError(ValueError):
    """Raised when an input JSON file is structurally invalid."""


def _require(obj: Dict[str, Any], key: str, ctx: str) -> Any:
    if key not in obj:
        raise ConfigError(f"Missing required key '{key}' in {ctx}")
    return obj[key]


def _as_list(obj: Any, ctx: str) -> List[Any]:
    if not isinstance(obj, list):
        raise ConfigError(f"Expected a JSON array in {ctx}, got {type(obj).__name__}")
    return obj


def _as_dict(obj: Any, ctx: str) -> Dict[str, Any]:
    if not isinstance(obj, dict):
        raise ConfigError(
            f"Expected a JSON object in {ctx}, got {type(obj).__name__}"
        )
    return obj


def _as_number(obj: Any, ctx: str) -> float:
    try:
        return float(obj)
    except (TypeError, ValueError):
        raise ConfigError(f"Expected a number in {ctx}, got {obj!r}") from None


def _optional_int(obj: Any, ctx: str) -> Optional[int]:
    if obj is None:
        return None
    try:
        return int(obj)
    except (TypeError, ValueError):
        raise ConfigError(f"Expected an integer in {ctx}, got {obj!r}") from None


def _check_unique(values: List[str], ctx: str) -> None:
    seen: set = set()
    dupes: set = set()
    for value in values:
        if not value:
            raise ConfigError(f"Empty or missing identifier in {ctx}")
        if value in seen:
            dupes.add(value)
        seen.add(value)
    if dupes:
        raise ConfigError(f"Duplicate ids in {ctx}: {sorted(dupes)}")


def _read_json(path: str | Path) -> Dict[str, Any]:
    with Path(path).open("r", encoding="utf-8") as f:
        try:
            raw = json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigError(f"Invalid JSON in {path}: {e}") from e
    return _as_dict(raw, "root")


# ── catalog ───────────────────────────────────────────────────────────────────

def course_from_dict(c: Dict[str, Any], ctx: str) -> Course:
    c = _as_dict(c, ctx)
    credits = _as_number(c.get("credits", 1), f"{ctx}.credits")
    if credits <= 0:
        raise ConfigError(f"{ctx}.credits must be > 0, got {credits:g}")
    term = c.get("term_offered")
    return Course(
        code          = str(_require(c, "code", ctx)).strip(),
        title         = str(c.get("title", "")),
        credits       = credits,
        prerequisites = tuple(str(p).strip() for p in
                              _as_list(c.get("prerequisites") or [], f"{ctx}.prerequisites")),
        term_offered  = str(term) if term else None,
    )


def group_from_dict(g: Dict[str, Any], ctx: str) -> RequirementGroup:
    g = _as_dict(g, ctx)
    gtype = str(g.get("type", "all")).lower()
    if gtype not in REQUIREMENT_TYPES:
        raise ConfigError(f"{ctx}.type must be one of {REQUIREMENT_TYPES}, got {gtype!r}")
    credits_needed = g.get("credits_needed")
    return RequirementGroup(
        name           = str(_require(g, "name", ctx)),
        type           = gtype,
        courses        = tuple(str(x).strip() for x in
                               _as_list(g.get("courses") or [], f"{ctx}.courses")),
        courses_needed = int(g.get("courses_needed", 1)),
        credits_needed = (_as_number(credits_needed, f"{ctx}.credits_needed")
                          if credits_needed is not None else None),
    )


def program_from_dict(p: Dict[str, Any], ctx: str) -> Program:
    p = _as_dict(p, ctx)
    groups_raw = _as_list(p.get("requirement_groups") or [], f"{ctx}.requirement_groups")
    return Program(
        program_id = str(_require(p, "program_id", ctx)),
        name       = str(p.get("name", "")),
        type       = str(p.get("type", "major")),
        requirement_groups = tuple(
            group_from_dict(g, f"{ctx}.requirement_groups[{i}]")
            for i, g in enumerate(groups_raw)
        ),
    )


def load_catalog(path: str | Path) -> Catalog:
    """Load and validate a Catalog from a JSON file."""
    raw = _read_json(path)

    courses_raw  = _as_list(_require(raw, "courses", "root"), "courses")
    programs_raw = _as_list(raw.get("programs") or [], "programs")

    courses  = [course_from_dict(c, f"courses[{i}]") for i, c in enumerate(courses_raw)]
    programs = [program_from_dict(p, f"programs[{i}]") for i, p in enumerate(programs_raw)]

    _check_unique([c.code for c in courses], "courses")
    _check_unique([p.program_id for p in programs], "programs")
    return Catalog(courses, programs)


# ── plans and requests ────────────────────────────────────────────────────────

def plan_item_from_dict(it: Dict[str, Any], ctx: str) -> PlanItem:
    it = _as_dict(it, ctx)
    credits = it.get("credits")
    item_id = it.get("plan_item_id")
    return PlanItem(
        course_code  = str(_require(it, "course_code", ctx)).strip(),
        semester     = str(_require(it, "semester", ctx)).strip(),
        is_locked    = bool(it.get("is_locked", False)),
        credits      = _as_number(credits, f"{ctx}.credits") if credits is not None else None,
        plan_item_id = str(item_id) if item_id is not None else None,
    )


def _preferences_from_dict(p: Dict[str, Any]) -> Preferences:
    abroad_raw = p.get("study_abroad")
    abroad = None
    if abroad_raw:
        abroad_raw = _as_dict(abroad_raw, "preferences.study_abroad")
        abroad = StudyAbroad(
            term = str(_require(abroad_raw, "term", "preferences.study_abroad")),
            year = int(_require(abroad_raw, "year", "preferences.study_abroad")),
        )
    return Preferences(
        completed_courses = [str(x).strip() for x in
                             _as_list(p.get("completed_courses") or [],
                                      "preferences.completed_courses")],
        target_graduation_year = _optional_int(
            p.get("target_graduation_year"), "preferences.target_graduation_year"
        ),
        study_abroad = abroad,
    )


def _limits_from_dict(raw: Dict[str, Any]) -> PlanningLimits:
    defaults = PlanningLimits()
    return PlanningLimits(
        credit_cap               = _as_number(raw.get("credit_cap", defaults.credit_cap), "limits.credit_cap"),
        credit_min               = _as_number(raw.get("credit_min", defaults.credit_min), "limits.credit_min"),
        max_courses_per_semester = int(raw.get("max_courses_per_semester", defaults.max_courses_per_semester)),
        horizon_years            = int(raw.get("horizon_years", defaults.horizon_years)),
        placeholder_credits      = _as_number(raw.get("placeholder_credits", defaults.placeholder_credits),
                                              "limits.placeholder_credits"),
    )


def load_request(path: str | Path) -> PlanRequest:
    """Load and validate a PlanRequest from a JSON file."""
    raw = _read_json(path)

    existing_raw = _as_list(raw.get("existing_plan") or [], "existing_plan")
    prefs_raw    = _as_dict(raw.get("preferences") or {}, "preferences")
    limits_raw   = _as_dict(raw.get("limits") or {}, "limits")
    program_id   = raw.get("program_id")

    request = PlanRequest(
        required_courses = [str(x).strip() for x in
                            _as_list(raw.get("required_courses") or [], "required_courses")],
        program_id       = str(program_id) if program_id else None,
        existing_plan    = [plan_item_from_dict(it, f"existing_plan[{i}]")
                            for i, it in enumerate(existing_raw)],
        preferences      = _preferences_from_dict(prefs_raw),
        limits           = _limits_from_dict(limits_raw),
        start_year       = _optional_int(raw.get("start_year"), "start_year"),
    )
    try:
        request.validate()
    except ValueError as e:
        raise ConfigError(str(e)) from e
    return request


def load_plan(path: str | Path) -> List[PlanItem]:
    """Load the "items" array of a plan file."""
    raw = _read_json(path)
    items_raw = _as_list(_require(raw, "items", "root"), "items")
    return [plan_item_from_dict(it, f"items[{i}]") for i, it in enumerate(items_raw)]


def save_json(payload: Dict[str, Any], path: str | Path) -> None:
    """Write a result dict to JSON, creating parent directories if needed."""
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    with p.open("w", encoding="utf-8") as f:
        # ensure_ascii=False preserves accented course titles.
        json.dump(payload, f, ensure_ascii=False, indent=2)

