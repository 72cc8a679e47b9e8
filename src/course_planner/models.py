"""
Data model layer for the course planner.

Every domain object is a plain Python dataclass. The @dataclass decorator
generates __init__, __repr__ and __eq__ automatically from field declarations.

Reference: Python Software Foundation. "dataclasses — Data Classes."
https://docs.python.org/3/library/dataclasses.html

Design note — flat entities with code references:
  Courses reference their prerequisites by course code rather than by
  embedding other Course objects, and plan items reference courses the same
  way. The catalog is the only place a code is resolved to a Course.

Per-call configuration:
  PlanningLimits is frozen and passed explicitly into every engine call.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Optional, Tuple

REQUIREMENT_TYPES = ("all", "any", "choice")


@dataclass(frozen=True)
class Course:
    """One catalog course, e.g. CSC 340 (4 credits, Fall only)."""
    code:          str
    title:         str             = ""
    credits:       float           = 1
    prerequisites: Tuple[str, ...] = ()
    term_offered:  Optional[str]   = None   # "Fall", "Fall, Spring"; None = every term


@dataclass(frozen=True)
class RequirementGroup:
    name:    str
    type:    str             = "all"      # all | any | choice
    courses: Tuple[str, ...] = ()
    # any/choice only: how many listed courses satisfy the group
    courses_needed: int            = 1
    credits_needed: Optional[float] = None


@dataclass(frozen=True)
class Program:
    program_id: str
    name:       str
    type:       str                          = "major"   # major | minor
    requirement_groups: Tuple[RequirementGroup, ...] = ()


@dataclass(frozen=True)
class PlanItem:
    course_code:  str
    semester:     str
    is_locked:    bool            = False
    credits:      Optional[float] = None
    plan_item_id: Optional[str]   = None


@dataclass(frozen=True)
class StudyAbroad:
    term: str
    year: int

    @property
    def label(self) -> str:
        return f"{self.year} {self.term}"


@dataclass
class Preferences:
    completed_courses:      List[str]             = field(default_factory=list)
    target_graduation_year: Optional[int]         = None
    study_abroad:           Optional[StudyAbroad] = None


@dataclass(frozen=True)
class PlanningLimits:
    """Per-semester bounds. credit_cap/credit_min are advisory for generation."""
    credit_cap:               float = 16
    credit_min:               float = 12
    max_courses_per_semester: int   = 4
    horizon_years:            int   = 4
    placeholder_credits:      float = 1

    def with_credits(
        self,
        credit_cap: Optional[float] = None,
        credit_min: Optional[float] = None,
    ) -> "PlanningLimits":
        changes: Dict[str, Any] = {}
        if credit_cap is not None:
            changes["credit_cap"] = credit_cap
        if credit_min is not None:
            changes["credit_min"] = credit_min
        return replace(self, **changes) if changes else self


@dataclass
class PlanRequest:
    """Everything needed to generate (or validate) one student's plan."""
    required_courses: List[str]      = field(default_factory=list)
    program_id:       Optional[str]  = None
    existing_plan:    List[PlanItem] = field(default_factory=list)
    preferences:      Preferences    = field(default_factory=Preferences)
    limits:           PlanningLimits = field(default_factory=PlanningLimits)
    start_year:       Optional[int]  = None

    def validate(self) -> None:
        if self.limits.credit_cap <= 0:
            raise ValueError("limits.credit_cap must be > 0")
        if self.limits.credit_min < 0:
            raise ValueError("limits.credit_min must be >= 0")
        if self.limits.max_courses_per_semester < 1:
            raise ValueError("limits.max_courses_per_semester must be >= 1")
        if self.limits.horizon_years < 1:
            raise ValueError("limits.horizon_years must be >= 1")

    def locked_items(self) -> List[PlanItem]:
        return [item for item in self.existing_plan if item.is_locked]
