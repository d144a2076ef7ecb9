"""
services/grading.py

Grade & ranking rules. Pure functions only: no DB session, no settings lookups
inside the math, so the same inputs always give the same result.

- Score aggregation: component scores -> weighted total, per course midterm policy
- Makeup eligibility:
    * per grade, at upload time: total < passing score (persisted as needs_makeup)
    * per student, at ranking time: semester average < passing score AND bottom 5% of
      the year-level cohort (advisory only, never persisted)
- Cohort ranking: average per student, descending order, ties broken by student id
"""

import math
from dataclasses import dataclass
from typing import Iterable, List, Optional

from utils.errors import InvalidInputError, NotFoundError

PASSING_SCORE = 60.0
BOTTOM_PERCENTILE = 5.0

# (regular, midterm, final)
WEIGHTS_WITH_MIDTERM = (0.3, 0.3, 0.4)
# (regular, final)
WEIGHTS_WITHOUT_MIDTERM = (0.4, 0.6)

MIN_SCORE = 0.0
MAX_SCORE = 100.0


# ==========================================================
# [1] Score aggregation
# ==========================================================

def validate_score(name: str, value) -> float:
    """Component scores must be real numbers in [0, 100]."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise InvalidInputError(f"{name} must be a number")
    value = float(value)
    if math.isnan(value) or not (MIN_SCORE <= value <= MAX_SCORE):
        raise InvalidInputError(f"{name} must be between {MIN_SCORE:g} and {MAX_SCORE:g}")
    return value


def compute_total_score(regular: float, midterm: Optional[float], final: float, has_midterm: bool) -> float:
    """
    Weighted total of the component scores.

    with midterm:    0.3 * regular + 0.3 * midterm + 0.4 * final
    without midterm: 0.4 * regular + 0.6 * final   (midterm is ignored)
    """
    regular = validate_score("regularScore", regular)
    final = validate_score("finalScore", final)

    if has_midterm:
        if midterm is None:
            raise InvalidInputError("midtermScore is required for a course with a midterm exam")
        midterm = validate_score("midtermScore", midterm)
        w_regular, w_midterm, w_final = WEIGHTS_WITH_MIDTERM
        return w_regular * regular + w_midterm * midterm + w_final * final

    w_regular, w_final = WEIGHTS_WITHOUT_MIDTERM
    return w_regular * regular + w_final * final


def needs_makeup(total_score: float, passing_score: float = PASSING_SCORE) -> bool:
    """Absolute per-course rule, independent of the cohort."""
    return total_score < passing_score


@dataclass(frozen=True)
class ScoreResult:
    """What gets persisted on the grade row for one score submission."""
    regular_score: float
    midterm_score: Optional[float]
    final_score: float
    total_score: float
    needs_makeup: bool


def aggregate(regular: float, midterm: Optional[float], final: float, has_midterm: bool,
              passing_score: float = PASSING_SCORE) -> ScoreResult:
    total = compute_total_score(regular, midterm, final, has_midterm)
    return ScoreResult(
        regular_score=float(regular),
        # midterm is stored only when the course has one
        midterm_score=float(midterm) if has_midterm else None,
        final_score=float(final),
        total_score=total,
        needs_makeup=needs_makeup(total, passing_score),
    )


# ==========================================================
# [2] Cohort ranking
# ==========================================================

@dataclass(frozen=True)
class CohortEntry:
    """One cohort member: semester average over graded courses (0 when ungraded)."""
    student_id: int
    avg_score: float
    course_count: int = 0
    name: Optional[str] = None
    student_number: Optional[str] = None


@dataclass(frozen=True)
class RankingResult:
    rank: int
    total_students: int
    percentile: float
    avg_score: float
    requires_makeup: bool
    is_bottom_5_percent: bool


@dataclass(frozen=True)
class RankedEntry:
    entry: CohortEntry
    ranking: RankingResult


def sort_cohort(entries: Iterable[CohortEntry]) -> List[CohortEntry]:
    """Highest average first; equal averages fall back to ascending student id."""
    return sorted(entries, key=lambda e: (-e.avg_score, e.student_id))


def percentile_for(rank: int, total_students: int) -> float:
    """Share of the cohort ranked at or below the student: (N - rank) / N * 100, 2 decimals."""
    if total_students <= 0:
        return 0.0
    return round((total_students - rank) / total_students * 100, 2)


def is_bottom_percentile(percentile: float, cutoff: float = BOTTOM_PERCENTILE) -> bool:
    return percentile <= cutoff


def requires_makeup(avg_score: float, percentile: float,
                    passing_score: float = PASSING_SCORE, cutoff: float = BOTTOM_PERCENTILE) -> bool:
    """Advisory rule: failing average AND bottom of the cohort. Both must hold."""
    return avg_score < passing_score and is_bottom_percentile(percentile, cutoff)


def _ranking(rank: int, total: int, avg_score: float, passing_score: float, cutoff: float) -> RankingResult:
    percentile = percentile_for(rank, total)
    return RankingResult(
        rank=rank,
        total_students=total,
        percentile=percentile,
        avg_score=avg_score,
        requires_makeup=requires_makeup(avg_score, percentile, passing_score, cutoff),
        is_bottom_5_percent=is_bottom_percentile(percentile, cutoff),
    )


def rank_cohort(entries: Iterable[CohortEntry], passing_score: float = PASSING_SCORE,
                cutoff: float = BOTTOM_PERCENTILE) -> List[RankedEntry]:
    """Ranks every member. Ranks are 1..N with no gaps, in sorted order."""
    ordered = sort_cohort(entries)
    total = len(ordered)
    return [
        RankedEntry(entry=e, ranking=_ranking(idx, total, e.avg_score, passing_score, cutoff))
        for idx, e in enumerate(ordered, start=1)
    ]


def rank_student(entries: Iterable[CohortEntry], student_id: int, passing_score: float = PASSING_SCORE,
                 cutoff: float = BOTTOM_PERCENTILE) -> RankingResult:
    """Ranking of one student inside the cohort. NotFoundError when the student is not a member."""
    for ranked in rank_cohort(entries, passing_score, cutoff):
        if ranked.entry.student_id == student_id:
            return ranked.ranking
    raise NotFoundError("Student not found in cohort")
