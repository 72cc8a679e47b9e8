"""Tests for semester labels, calendar ordering and term matching."""
from course_planner.semesters import (canonical_label, generate_semesters, is_before,
    is_offered_in_term, parse_semester, same_semester, sort_semesters)


def test_parse_both_word_orders() -> None:
    assert parse_semester("2024 Fall") == parse_semester("Fall 2024")
    assert parse_semester("2024 fall").label == "2024 Fall"
    assert parse_semester("Transfer") is None
    assert parse_semester("2024 Autumnish") is None


def test_canonical_label() -> None:
    assert canonical_label("Fall 2024") == "2024 Fall"
    assert canonical_label("2025 spring") == "2025 Spring"
    assert canonical_label("Transfer") == "Transfer"


def test_fall_precedes_next_spring() -> None:
    assert is_before("2024 Fall", "2025 Spring")
    assert is_before("2025 Spring", "2025 Fall")
    assert not is_before("2025 Fall", "2025 Fall")


def test_spring_before_fall_within_a_year() -> None:
    # plain string order would put "2025 Fall" first
    assert sort_semesters(["2025 Fall", "2025 Spring", "2025 Summer"]) == [
        "2025 Spring", "2025 Summer", "2025 Fall",
    ]


def test_buckets_sort_first_and_unknown_labels_last() -> None:
    labels = ["2025 Spring", "Someday", "Transfer", "2024 Fall"]
    assert sort_semesters(labels) == ["Transfer", "2024 Fall", "2025 Spring", "Someday"]


def test_same_semester_ignores_spelling() -> None:
    assert same_semester("2025 fall", "Fall 2025")
    assert not same_semester("2025 Fall", "2026 Fall")


def test_generate_default_four_years() -> None:
    sems = generate_semesters(2024)
    assert len(sems) == 8
    assert sems[:3] == ["2024 Fall", "2025 Spring", "2025 Fall"]
    assert sems[-1] == "2028 Spring"


def test_generate_extends_to_target_year() -> None:
    sems = generate_semesters(2024, target_year=2030)
    assert len(sems) == 12
    assert sems[-1] == "2030 Spring"


def test_generate_never_shorter_than_horizon() -> None:
    assert generate_semesters(2024, target_year=2026) == generate_semesters(2024)


def test_term_offered_matching() -> None:
    assert is_offered_in_term(None, "2024 Fall")
    assert is_offered_in_term("", "2025 Spring")
    assert is_offered_in_term("Fall, Spring", "2025 Spring")
    assert is_offered_in_term("FALL", "2024 Fall")
    assert not is_offered_in_term("Fall", "2025 Spring")
    assert not is_offered_in_term("Spring", "2025 Summer")
    assert is_offered_in_term("Fall", "Transfer")
