"""Tests for plan generation: ordering, capacity, locks and graceful skips."""
import logging

import pytest

from course_planner.engine.graph import PrerequisiteCycleError
from course_planner.engine.scheduler import generate_plan
from course_planner.engine.validator import validate_plan
from course_planner.models import PlanItem, PlanningLimits, Preferences, StudyAbroad
from course_planner.semesters import semester_sort_key

from helpers import catalog, course, math_catalog


def _placements(result) -> dict:
    return {item.course_code: item.semester for item in result.items}


def _cs_catalog():
    return catalog(
        course("CSC121"),
        course("CSC221", prereqs=["CSC121"]),
        course("CSC231", prereqs=["CSC121"]),
        course("CSC340", prereqs=["CSC221", "CSC231"], term="Fall"),
        course("CSC350", prereqs=["CSC340"]),
        course("MATH151"),
        course("MATH152", prereqs=["MATH151"]),
        course("MATH223", prereqs=["MATH152"], term="Spring"),
        course("ENG101", credits=3),
        course("HIST101", credits=3),
    )


def test_prerequisite_placed_strictly_earlier() -> None:
    result = generate_plan(math_catalog(), ["MATH152", "MATH151"], start_year=2024)
    placed = _placements(result)
    assert placed["MATH151"] == "2024 Fall"
    assert placed["MATH152"] == "2025 Spring"
    assert result.unplaced == []


def test_generation_is_deterministic() -> None:
    required = ["CSC350", "MATH223", "ENG101", "CSC121", "HIST101", "CSC231"]
    first  = generate_plan(_cs_catalog(), required, start_year=2024)
    second = generate_plan(_cs_catalog(), required, start_year=2024)
    assert first.items == second.items
    assert first.unplaced == second.unplaced


def test_prerequisite_soundness() -> None:
    cat = _cs_catalog()
    required = [c.code for c in cat]
    result = generate_plan(cat, required, start_year=2024)
    placed = _placements(result)
    for code, semester in placed.items():
        for prereq in cat.get(code).prerequisites:
            if prereq in required:
                assert semester_sort_key(placed[prereq]) < semester_sort_key(semester)


def test_no_duplicate_placement() -> None:
    result = generate_plan(_cs_catalog(), ["CSC121", "CSC121", "MATH151"], start_year=2024)
    codes = [item.course_code for item in result.items]
    assert sorted(codes) == ["CSC121", "MATH151"]


def test_cycle_aborts_generation() -> None:
    cat = catalog(
        course("A", prereqs=["B"]),
        course("B", prereqs=["C"]),
        course("C", prereqs=["A"]),
    )
    with pytest.raises(PrerequisiteCycleError):
        generate_plan(cat, ["A", "B", "C"], start_year=2024)


def test_capacity_bound_of_four_courses() -> None:
    cat = catalog(*[course(f"GEN{i:03d}") for i in range(10)])
    result = generate_plan(cat, [c.code for c in cat], start_year=2024)
    grouped = result.by_semester()
    assert all(len(items) <= 4 for items in grouped.values())
    assert [len(grouped[s]) for s in ("2024 Fall", "2025 Spring", "2025 Fall")] == [4, 4, 2]


def test_capacity_ignores_credit_weight() -> None:
    cat = catalog(*[course(f"LAB{i}", credits=6) for i in range(4)])
    result = generate_plan(cat, [c.code for c in cat], start_year=2024)
    assert set(_placements(result).values()) == {"2024 Fall"}
    assert any("exceeds the 16-credit cap" in d for d in result.diagnostics)


def test_study_abroad_semester_left_empty() -> None:
    cat = catalog(*[course(f"GEN{i:03d}") for i in range(10)])
    prefs = Preferences(study_abroad=StudyAbroad(term="Fall", year=2025))
    result = generate_plan(cat, [c.code for c in cat], preferences=prefs, start_year=2024)
    grouped = result.by_semester()
    assert "2025 Fall" not in grouped
    assert len(grouped["2026 Spring"]) == 2


def test_term_offering_respected() -> None:
    cat = catalog(course("SPR1", term="Spring"), course("FAL1", term="fall"))
    placed = _placements(generate_plan(cat, ["SPR1", "FAL1"], start_year=2024))
    assert placed == {"SPR1": "2025 Spring", "FAL1": "2024 Fall"}


def test_completed_courses_are_not_scheduled() -> None:
    prefs = Preferences(completed_courses=["MATH151"])
    result = generate_plan(math_catalog(), ["MATH151", "MATH152"], preferences=prefs, start_year=2024)
    assert _placements(result) == {"MATH152": "2024 Fall"}


def test_locked_items_reserve_capacity_and_are_returned() -> None:
    cat = _cs_catalog()
    existing = [PlanItem("CSC121", "2024 Fall", is_locked=True)]
    result = generate_plan(
        cat, ["CSC221", "ENG101", "HIST101", "MATH151", "CSC121"],
        existing_plan=existing, start_year=2024,
    )
    locked = [item for item in result.items if item.is_locked]
    assert locked == [PlanItem("CSC121", "2024 Fall", is_locked=True, credits=4)]

    placed = _placements(result)
    assert placed["CSC221"] == "2025 Spring"
    assert [placed[c] for c in ("ENG101", "HIST101", "MATH151")] == ["2024 Fall"] * 3
    assert len(result.by_semester()["2024 Fall"]) == 4
    assert result.stats["locked"] == 1


def test_locked_item_label_is_normalised() -> None:
    existing = [PlanItem("MATH151", "Fall 2024", is_locked=True)]
    result = generate_plan(math_catalog(), ["MATH151", "MATH152"],
                           existing_plan=existing, start_year=2024)
    assert result.items[0] == PlanItem("MATH151", "2024 Fall", is_locked=True, credits=4)
    assert sorted(result.by_semester()) == ["2024 Fall", "2025 Spring"]
    assert validate_plan(math_catalog(), result.items).is_valid


def test_locked_prerequisite_counts_only_after_its_semester() -> None:
    existing = [PlanItem("CSC121", "2025 Fall", is_locked=True)]
    result = generate_plan(_cs_catalog(), ["CSC221"], existing_plan=existing, start_year=2024)
    assert _placements(result)["CSC221"] == "2026 Spring"


def test_unlocked_existing_items_are_replanned() -> None:
    existing = [PlanItem("MATH151", "2026 Fall")]
    result = generate_plan(math_catalog(), ["MATH151"], existing_plan=existing, start_year=2024)
    assert result.items == [PlanItem("MATH151", "2024 Fall", credits=4)]


def test_unknown_course_becomes_placeholder() -> None:
    result = generate_plan(catalog(), ["XYZ 999"], start_year=2024)
    assert result.items == [PlanItem("XYZ 999", "2024 Fall", credits=1)]
    assert any("placeholder" in d for d in result.diagnostics)


def test_unplaceable_course_is_skipped_not_fatal(caplog) -> None:
    cat = catalog(course("SUM100", term="Summer"), course("ENG101"))
    caplog.set_level(logging.WARNING, logger="course_planner")
    result = generate_plan(cat, ["SUM100", "ENG101"], start_year=2024)
    assert result.unplaced == ["SUM100"]
    assert _placements(result) == {"ENG101": "2024 Fall"}
    assert result.stats["skipped"] == 1
    assert "Could not place course SUM100" in caplog.text


def test_chain_longer_than_horizon() -> None:
    cat = catalog(
        course("A"),
        course("B", prereqs=["A"]),
        course("C", prereqs=["B"]),
        course("D", prereqs=["C"]),
    )
    limits = PlanningLimits(horizon_years=1)
    result = generate_plan(cat, ["D", "C", "B", "A"], start_year=2024, limits=limits)
    assert _placements(result) == {"A": "2024 Fall", "B": "2025 Spring"}
    assert result.unplaced == ["C", "D"]
    assert result.semesters == ["2024 Fall", "2025 Spring"]


def test_target_year_extends_horizon() -> None:
    prefs = Preferences(target_graduation_year=2030)
    result = generate_plan(math_catalog(), ["MATH151"], preferences=prefs, start_year=2024)
    assert len(result.semesters) == 12


def test_external_prerequisites_are_reported() -> None:
    cat = catalog(course("CSC340", prereqs=["CSC221", "MATH151"]))
    prefs = Preferences(completed_courses=["MATH151"])
    result = generate_plan(cat, ["CSC340"], preferences=prefs, start_year=2024)
    assert _placements(result) == {"CSC340": "2024 Fall"}
    assert result.assumed_prerequisites == {"CSC340": ["CSC221"]}


def test_credit_arguments_override_limits() -> None:
    cat = catalog(*[course(f"GEN{i}", credits=4) for i in range(3)])
    result = generate_plan(cat, [c.code for c in cat], credit_cap=10, start_year=2024)
    assert any("exceeds the 10-credit cap" in d for d in result.diagnostics)


def test_generated_plan_passes_prerequisite_validation() -> None:
    cat = _cs_catalog()
    result = generate_plan(cat, [c.code for c in cat], start_year=2024)
    report = validate_plan(cat, result.items)
    assert [w for w in report.warnings if w.type == "prerequisite"] == []
    assert [w for w in report.warnings if w.type == "duplicate"] == []
