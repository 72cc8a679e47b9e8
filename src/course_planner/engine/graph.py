"""
Prerequisite graph over the courses being scheduled.

The graph is an arena: a dict from course code to an immutable node holding
the node's in-set prerequisite codes. Traversal state (visited, on-stack)
lives in sets local to each traversal call.

Edges point from a course to its prerequisites. Prerequisites outside the
node set are not edges: the scheduler treats them as already satisfiable.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Set, Tuple

from ..catalog import Catalog


class PrerequisiteCycleError(ValueError):
    """Courses in the scheduling set require each other."""

    def __init__(self, cycle: List[str]) -> None:
        self.cycle = list(cycle)
        super().__init__(
            "Prerequisite cycle detected: " + " -> ".join(self.cycle) + ". "
            "These courses are listed as prerequisites of each other, so no "
            "order can satisfy them; correct the catalog prerequisites."
        )


@dataclass(frozen=True)
class CourseNode:
    code:          str
    prerequisites: Tuple[str, ...]


PrereqGraph = Dict[str, CourseNode]


def build_graph(catalog: Catalog, codes: Iterable[str]) -> PrereqGraph:
    """
    One node per code, in the given order. Codes missing from the catalog get
    a node with no prerequisites (they are scheduled as placeholders).
    """
    ordered = list(dict.fromkeys(codes))
    members = set(ordered)

    graph: PrereqGraph = {}
    for code in ordered:
        course = catalog.get(code)
        prereqs = course.prerequisites if course is not None else ()
        in_set = tuple(dict.fromkeys(p for p in prereqs if p in members))
        graph[code] = CourseNode(code=code, prerequisites=in_set)
    return graph


def find_cycle(graph: PrereqGraph) -> Optional[List[str]]:
    """
    Depth-first search with an explicit recursion stack.

    Returns the first cycle found as a closed path, e.g. ["A", "B", "C", "A"]
    for A requires B requires C requires A, or None for a DAG.
    """
    done:     Set[str]  = set()
    stack:    List[str] = []
    on_stack: Set[str]  = set()

    def visit(code: str) -> Optional[List[str]]:
        if code in on_stack:
            return stack[stack.index(code):] + [code]
        if code in done:
            return None

        stack.append(code)
        on_stack.add(code)
        for prereq in graph[code].prerequisites:
            cycle = visit(prereq)
            if cycle is not None:
                return cycle
        stack.pop()
        on_stack.discard(code)
        done.add(code)
        return None

    for code in graph:
        if code not in done:
            cycle = visit(code)
            if cycle is not None:
                return cycle
    return None


def ensure_acyclic(graph: PrereqGraph) -> None:
    cycle = find_cycle(graph)
    if cycle is not None:
        raise PrerequisiteCycleError(cycle)


def topological_order(graph: PrereqGraph, codes: Iterable[str]) -> List[str]:
    """
    Postorder DFS: every course comes after its in-set prerequisites.

    Roots are visited in the order of `codes`, so courses with no ordering
    constraint between them keep their input order. Codes absent from the
    graph are skipped. The graph must be acyclic.
    """
    order: List[str] = []
    seen:  Set[str]  = set()

    def visit(code: str) -> None:
        if code in seen or code not in graph:
            return
        seen.add(code)
        for prereq in graph[code].prerequisites:
            visit(prereq)
        order.append(code)

    for code in codes:
        visit(code)
    return order
