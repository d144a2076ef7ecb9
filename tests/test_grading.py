"""Weighted totals, makeup eligibility and cohort ranking (no database)."""

import itertools
import random

import pytest

from services import grading
from services.grading import CohortEntry
from utils.errors import InvalidInputError, NotFoundError


class TestScoreAggregation:
    def test_course_with_midterm(self):
        result = grading.aggregate(80, 70, 50, has_midterm=True)
        assert result.total_score == pytest.approx(68.0)
        assert result.needs_makeup is False
        assert result.midterm_score == 70.0

    def test_course_without_midterm(self):
        result = grading.aggregate(50, None, 40, has_midterm=False)
        assert result.total_score == pytest.approx(44.0)
        assert result.needs_makeup is True
        assert result.midterm_score is None

    def test_midterm_ignored_without_midterm_policy(self):
        result = grading.aggregate(50, 99, 40, has_midterm=False)
        assert result.total_score == pytest.approx(44.0)
        assert result.midterm_score is None

    @pytest.mark.parametrize("regular,midterm,final", [
        (0, 0, 0), (100, 100, 100), (59.5, 61.25, 60), (33, 90, 12.5),
    ])
    def test_with_midterm_weights(self, regular, midterm, final):
        expected = 0.3 * regular + 0.3 * midterm + 0.4 * final
        assert grading.compute_total_score(regular, midterm, final, True) == pytest.approx(expected)

    @pytest.mark.parametrize("regular,final", [(0, 0), (100, 100), (75, 45.5), (10, 95)])
    def test_without_midterm_weights(self, regular, final):
        expected = 0.4 * regular + 0.6 * final
        assert grading.compute_total_score(regular, None, final, False) == pytest.approx(expected)

    def test_same_inputs_same_total(self):
        first = grading.aggregate(71, 64, 58, has_midterm=True)
        for _ in range(5):
            assert grading.aggregate(71, 64, 58, has_midterm=True) == first

    def test_missing_midterm_is_rejected(self):
        with pytest.raises(InvalidInputError):
            grading.compute_total_score(80, None, 70, True)

    @pytest.mark.parametrize("bad", [-1, 100.5, float("nan"), "90", None, True])
    def test_out_of_range_scores_rejected(self, bad):
        with pytest.raises(InvalidInputError):
            grading.compute_total_score(bad, 50, 50, True)

    def test_needs_makeup_threshold(self):
        assert grading.needs_makeup(59.99) is True
        assert grading.needs_makeup(60.0) is False
        assert grading.needs_makeup(55, passing_score=50) is False


class TestRequiresMakeup:
    @pytest.mark.parametrize("avg,percentile,expected", [
        (50, 50, False),
        (70, 3, False),
        (50, 3, True),
        (59.99, 5.0, True),
        (60, 0, False),
    ])
    def test_truth_table(self, avg, percentile, expected):
        assert grading.requires_makeup(avg, percentile) is expected

    def test_bottom_percentile_boundary(self):
        assert grading.is_bottom_percentile(5.0) is True
        assert grading.is_bottom_percentile(5.01) is False


class TestCohortRanking:
    def _cohort(self, size):
        return [CohortEntry(student_id=i, avg_score=100 - i * 2.5) for i in range(1, size + 1)]

    def test_twenty_students_rank_nineteen_is_bottom_five_percent(self):
        result = grading.rank_student(self._cohort(20), student_id=19)
        assert result.rank == 19
        assert result.total_students == 20
        assert result.percentile == 5.0
        assert result.is_bottom_5_percent is True
        # average 52.5 is below the passing score
        assert result.requires_makeup is True

    def test_ranks_are_a_permutation(self):
        entries = self._cohort(13)
        random.Random(7).shuffle(entries)
        ranked = grading.rank_cohort(entries)
        assert sorted(r.ranking.rank for r in ranked) == list(range(1, 14))
        assert [r.entry.student_id for r in ranked] == list(range(1, 14))

    def test_first_place_percentile(self):
        ranked = grading.rank_cohort(self._cohort(8))
        assert ranked[0].ranking.percentile == pytest.approx(7 / 8 * 100)
        assert ranked[-1].ranking.percentile == 0.0

    def test_ties_break_on_student_id(self):
        entries = [
            CohortEntry(student_id=9, avg_score=80.0),
            CohortEntry(student_id=3, avg_score=80.0),
            CohortEntry(student_id=5, avg_score=90.0),
        ]
        for perm in itertools.permutations(entries):
            ranked = grading.rank_cohort(perm)
            assert [r.entry.student_id for r in ranked] == [5, 3, 9]

    def test_percentile_rounds_to_two_decimals(self):
        assert grading.percentile_for(1, 3) == 66.67

    def test_empty_cohort(self):
        assert grading.rank_cohort([]) == []
        assert grading.percentile_for(1, 0) == 0.0

    def test_student_outside_cohort(self):
        with pytest.raises(NotFoundError):
            grading.rank_student(self._cohort(3), student_id=42)

    def test_single_student_cohort(self):
        result = grading.rank_student([CohortEntry(student_id=1, avg_score=40.0)], student_id=1)
        assert result.rank == 1
        assert result.percentile == 0.0
        assert result.requires_makeup is True
