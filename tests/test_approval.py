from types import SimpleNamespace

import pytest

from services import approval
from services.approval import MakeupState
from utils.errors import InvalidInputError, UnauthorizedError


def make_grade(**overrides):
    fields = dict(
        teacher_id=1, needs_makeup=True, makeup_approved=None,
        makeup_score=None, makeup_passed=None, makeup_approved_final=None,
    )
    fields.update(overrides)
    return SimpleNamespace(**fields)


class TestCurrentState:
    @pytest.mark.parametrize("overrides,expected", [
        (dict(needs_makeup=False), MakeupState.NOT_REQUESTED),
        (dict(), MakeupState.REQUEST_PENDING),
        (dict(makeup_approved=False), MakeupState.REQUEST_REJECTED),
        (dict(makeup_approved=True), MakeupState.REQUEST_APPROVED),
        (dict(makeup_approved=True, makeup_score=70), MakeupState.SCORE_PENDING),
        (dict(makeup_approved=True, makeup_score=70, makeup_approved_final=True), MakeupState.SCORE_APPROVED),
        (dict(makeup_approved=True, makeup_score=70, makeup_approved_final=False), MakeupState.SCORE_REJECTED),
    ])
    def test_states(self, overrides, expected):
        assert approval.current_state(make_grade(**overrides)) is expected


class TestApplyMakeupScore:
    def test_rejected_request_blocks_score(self):
        grade = make_grade(makeup_approved=False)
        with pytest.raises(UnauthorizedError):
            approval.apply_makeup_score(grade, teacher_id=1, makeup_score=80)
        assert grade.makeup_score is None

    def test_pending_request_blocks_score(self):
        with pytest.raises(UnauthorizedError):
            approval.apply_makeup_score(make_grade(), teacher_id=1, makeup_score=80)

    def test_other_teacher_blocked(self):
        with pytest.raises(UnauthorizedError):
            approval.apply_makeup_score(make_grade(makeup_approved=True), teacher_id=2, makeup_score=80)

    def test_passed_defaults_to_passing_score(self):
        grade = make_grade(makeup_approved=True)
        state = approval.apply_makeup_score(grade, teacher_id=1, makeup_score=60)
        assert grade.makeup_passed is True
        assert state is MakeupState.SCORE_PENDING

        approval.apply_makeup_score(grade, teacher_id=1, makeup_score=59)
        assert grade.makeup_passed is False

    def test_explicit_passed_flag_wins(self):
        grade = make_grade(makeup_approved=True)
        approval.apply_makeup_score(grade, teacher_id=1, makeup_score=40, makeup_passed=True)
        assert grade.makeup_passed is True

    def test_resubmission_resets_final_decision(self):
        grade = make_grade(makeup_approved=True, makeup_score=50, makeup_approved_final=False)
        approval.apply_makeup_score(grade, teacher_id=1, makeup_score=75)
        assert grade.makeup_approved_final is None
        assert grade.makeup_score == 75.0

    def test_score_out_of_range(self):
        with pytest.raises(InvalidInputError):
            approval.apply_makeup_score(make_grade(makeup_approved=True), teacher_id=1, makeup_score=120)


class TestAdminDecisionChecks:
    def test_request_decision_requires_failing_grade(self):
        with pytest.raises(InvalidInputError):
            approval.check_request_decision(make_grade(needs_makeup=False))
        approval.check_request_decision(make_grade())

    def test_score_decision_requires_submitted_score(self):
        with pytest.raises(InvalidInputError):
            approval.check_score_decision(make_grade(makeup_approved=True))
        with pytest.raises(InvalidInputError):
            approval.check_score_decision(make_grade(makeup_approved=False, makeup_score=70))
        approval.check_score_decision(make_grade(makeup_approved=True, makeup_score=70))
