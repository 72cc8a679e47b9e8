"""
Semester labels and their calendar order.

Labels look like "2024 Fall" (or "Fall 2024"). Ordering is by (year, term
rank), never by plain string comparison: "2024 Fall" < "2025 Spring" even
though "F" sorts before "S" only by luck, and "2025 Summer" would sort after
"2025 Spring" but before "2025 Fall" regardless of spelling.

Pseudo buckets such as "Transfer" or "Completed" hold credit earned outside
the plan; they sort before every real semester. Anything else that does not
parse sorts after every real semester.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Tuple

TERM_RANK = {"winter": 0, "spring": 1, "summer": 2, "fall": 3}

PRIOR_BUCKETS = frozenset({"completed", "transfer", "prior", "prior credit", "ap"})

SortKey = Tuple[int, int, int, str]


@dataclass(frozen=True, order=True)
class Semester:
    year: int
    rank: int
    term: str = field(compare=False)

    @property
    def label(self) -> str:
        return f"{self.year} {self.term}"


def parse_semester(label: str) -> Optional[Semester]:
    """Parse "2024 Fall" / "Fall 2024". Returns None for anything else."""
    parts = (label or "").split()
    if len(parts) != 2:
        return None
    a, b = parts
    if a.isdigit():
        year_s, term_s = a, b
    elif b.isdigit():
        year_s, term_s = b, a
    else:
        return None
    rank = TERM_RANK.get(term_s.lower())
    if rank is None:
        return None
    return Semester(year=int(year_s), rank=rank, term=term_s.capitalize())


def canonical_label(label: str) -> str:
    """Normalise "Fall 2024" to "2024 Fall". Labels that do not parse come back unchanged."""
    sem = parse_semester(label)
    return sem.label if sem is not None else label


def is_prior_bucket(label: str) -> bool:
    return (label or "").strip().lower() in PRIOR_BUCKETS


def semester_sort_key(label: str) -> SortKey:
    sem = parse_semester(label)
    if sem is not None:
        return (1, sem.year, sem.rank, "")
    if is_prior_bucket(label):
        return (0, 0, 0, label)
    return (2, 0, 0, label)


def sort_semesters(labels: Iterable[str]) -> List[str]:
    return sorted(labels, key=semester_sort_key)


def is_before(a: str, b: str) -> bool:
    """True if semester `a` is strictly earlier than semester `b`."""
    return semester_sort_key(a) < semester_sort_key(b)


def same_semester(a: str, b: str) -> bool:
    pa, pb = parse_semester(a), parse_semester(b)
    if pa is not None and pb is not None:
        return pa == pb
    return (a or "").strip().lower() == (b or "").strip().lower()


def generate_semesters(
    start_year: int,
    target_year: Optional[int] = None,
    horizon_years: int = 4,
) -> List[str]:
    """
    Fall/Spring sequence starting at `start_year` Fall.

    Covers `horizon_years` academic years, or through `target_year` when that
    is further out. The horizon is never shorter than `horizon_years`.
    """
    years = horizon_years
    if target_year is not None:
        years = max(target_year - start_year, horizon_years)

    semesters: List[str] = []
    for year in range(start_year, start_year + years):
        semesters.append(f"{year} Fall")
        semesters.append(f"{year + 1} Spring")
    return semesters


def is_offered_in_term(term_offered: Optional[str], semester: str) -> bool:
    """
    Substring match of the semester's term against the catalog's
    term-offering text, case-insensitive.

    Missing term data is always compatible, and so is a label without a term
    (a "Transfer" bucket is not taught in any term).
    """
    if not term_offered:
        return True
    sem = parse_semester(semester)
    if sem is None:
        return True
    return sem.term.lower() in term_offered.lower()
