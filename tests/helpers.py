"""Small catalog builders shared by the test modules."""
from course_planner.catalog import Catalog
from course_planner.models import Course


def course(code: str, credits: float = 4, prereqs=(), term=None) -> Course:
    return Course(code=code, title=f"{code} title", credits=credits,
                  prerequisites=tuple(prereqs), term_offered=term)


def catalog(*courses: Course, programs=()) -> Catalog:
    return Catalog(courses, programs)


def math_catalog() -> Catalog:
    return catalog(
        course("MATH151"),
        course("MATH152", prereqs=["MATH151"]),
    )
