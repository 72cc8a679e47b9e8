"""
Read-only course and program directory used by the engine.

Built once from externally supplied data and never mutated afterwards, so a
single Catalog can back any number of generate/validate calls.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Dict, Iterable, Iterator, List, Mapping, Optional

from .models import Course, Program, RequirementGroup


class Catalog:
    def __init__(
        self,
        courses: Iterable[Course],
        programs: Iterable[Program] = (),
    ) -> None:
        by_code: Dict[str, Course] = {}
        for course in courses:
            by_code[course.code] = course
        self._courses: Mapping[str, Course] = MappingProxyType(by_code)
        self._programs: Mapping[str, Program] = MappingProxyType(
            {p.program_id: p for p in programs}
        )

    def __contains__(self, code: object) -> bool:
        return code in self._courses

    def __len__(self) -> int:
        return len(self._courses)

    def __iter__(self) -> Iterator[Course]:
        return iter(self._courses.values())

    def get(self, code: str) -> Optional[Course]:
        return self._courses.get(code)

    def credits_of(self, code: str, default: float = 0) -> float:
        course = self._courses.get(code)
        return course.credits if course is not None else default

    def course_or_placeholder(self, code: str, credits: float = 1) -> Course:
        """Catalog entry, or a no-prerequisite, every-term stand-in for a gap."""
        course = self._courses.get(code)
        if course is not None:
            return course
        return Course(code=code, title=f"{code} Course", credits=credits)

    def program(self, program_id: str) -> Optional[Program]:
        return self._programs.get(program_id)


def flatten_requirements(groups: Iterable[RequirementGroup]) -> List[str]:
    """Every course named by any group, first occurrence order, no repeats.

    Elective groups are included too: the scheduler plans every listed
    option and leaves choosing among them to the student.
    """
    seen: Dict[str, None] = {}
    for group in groups:
        for code in group.courses:
            seen.setdefault(code, None)
    return list(seen)
