"""Tests for the prerequisite graph: edges, cycle detection, ordering."""
import pytest

from course_planner.engine.graph import (PrerequisiteCycleError, build_graph,
    ensure_acyclic, find_cycle, topological_order)

from helpers import catalog, course


def test_edges_only_within_the_set() -> None:
    cat = catalog(
        course("A"),
        course("B", prereqs=["A", "OUTSIDE"]),
    )
    graph = build_graph(cat, ["B", "A"])
    assert graph["B"].prerequisites == ("A",)
    assert graph["A"].prerequisites == ()


def test_unknown_codes_get_bare_nodes() -> None:
    graph = build_graph(catalog(), ["NEW 100"])
    assert graph["NEW 100"].prerequisites == ()


def test_dag_has_no_cycle() -> None:
    cat = catalog(course("A"), course("B", prereqs=["A"]), course("C", prereqs=["A", "B"]))
    assert find_cycle(build_graph(cat, ["C", "B", "A"])) is None


def test_three_course_cycle_is_named() -> None:
    cat = catalog(
        course("A", prereqs=["B"]),
        course("B", prereqs=["C"]),
        course("C", prereqs=["A"]),
    )
    graph = build_graph(cat, ["A", "B", "C"])
    assert find_cycle(graph) == ["A", "B", "C", "A"]
    with pytest.raises(PrerequisiteCycleError, match="A -> B -> C -> A") as exc:
        ensure_acyclic(graph)
    assert exc.value.cycle == ["A", "B", "C", "A"]


def test_self_prerequisite_is_a_cycle() -> None:
    graph = build_graph(catalog(course("A", prereqs=["A"])), ["A"])
    assert find_cycle(graph) == ["A", "A"]


def test_repeated_traversals_agree() -> None:
    cat = catalog(course("A", prereqs=["B"]), course("B", prereqs=["A"]))
    graph = build_graph(cat, ["A", "B"])
    assert find_cycle(graph) == find_cycle(graph)


def test_topological_order_is_stable() -> None:
    cat = catalog(course("C"), course("A"), course("B"))
    graph = build_graph(cat, ["C", "A", "B"])
    assert topological_order(graph, ["C", "A", "B"]) == ["C", "A", "B"]


def test_prerequisites_come_first() -> None:
    cat = catalog(
        course("ADV", prereqs=["MID"]),
        course("MID", prereqs=["INTRO"]),
        course("INTRO"),
        course("OTHER"),
    )
    codes = ["ADV", "OTHER", "MID", "INTRO"]
    assert topological_order(build_graph(cat, codes), codes) == ["INTRO", "MID", "ADV", "OTHER"]
