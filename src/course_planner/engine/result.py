from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional

from ..models import PlanItem

ERROR   = "error"
WARNING = "warning"


@dataclass(frozen=True)
class ValidationWarning:
    type:         str                    # prerequisite/duplicate/credit_cap/term_offered/requirement
    severity:     str                    # error/warning
    message:      str
    course_code:  Optional[str]  = None
    semester:     Optional[str]  = None
    plan_item_id: Optional[str]  = None
    details:      Dict[str, Any] = field(default_factory=dict)

    @property
    def is_error(self) -> bool:
        return self.severity == ERROR


@dataclass
class RequirementDetail:
    group_name:        str
    type:              str
    required_courses:  List[str]
    completed:         List[str] = field(default_factory=list)
    planned:           List[str] = field(default_factory=list)
    remaining:         List[str] = field(default_factory=list)
    is_complete:       bool      = False
    fraction_complete: float     = 0.0


@dataclass
class RequirementsProgress:
    total_requirements:       int
    completed_requirements:   int
    in_progress_requirements: int
    remaining_requirements:   int
    percentage_complete:      int
    details: List[RequirementDetail] = field(default_factory=list)


@dataclass
class ValidationResult:
    is_valid: bool
    warnings: List[ValidationWarning]         = field(default_factory=list)
    requirements_progress: Optional[RequirementsProgress] = None

    @property
    def errors(self) -> List[ValidationWarning]:
        return [w for w in self.warnings if w.is_error]

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class GenerationResult:
    items:       List[PlanItem]       = field(default_factory=list)
    unplaced:    List[str]            = field(default_factory=list)
    # course -> prerequisites outside the required set that are not pre-completed
    assumed_prerequisites: Dict[str, List[str]] = field(default_factory=dict)
    semesters:   List[str]            = field(default_factory=list)
    diagnostics: List[str]            = field(default_factory=list)
    stats:       Dict[str, Any]       = field(default_factory=dict)

    @property
    def is_complete(self) -> bool:
        return not self.unplaced

    def by_semester(self) -> Dict[str, List[PlanItem]]:
        grouped: Dict[str, List[PlanItem]] = {}
        for item in self.items:
            grouped.setdefault(item.semester, []).append(item)
        return grouped

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class FeasibilityResult:
    status:        str                     # OPTIMAL/FEASIBLE/INFEASIBLE/MODEL_INVALID/UNKNOWN
    assignment:    Dict[str, str] = field(default_factory=dict)
    last_semester: Optional[str]  = None
    diagnostics:   List[str]      = field(default_factory=list)
    stats:         Dict[str, Any] = field(default_factory=dict)

    @property
    def is_feasible(self) -> bool:
        return self.status in ("OPTIMAL", "FEASIBLE")

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
