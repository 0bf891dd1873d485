import asyncio
from datetime import timedelta

import pytest

from candidex.core.exceptions import (
    AdmissionRejectedError,
    InvalidSubmissionError,
    PerQuestionMismatchError,
    SessionNotFoundError,
)
from candidex.core.interview_orchestrator import rank_questions
from candidex.models.analytics import Trend
from candidex.models.evaluation import PerQuestionScore
from candidex.models.interview import Difficulty, PromptType

from conftest import QUESTIONS, FakeProvider, evaluation_payload

ANSWERS = ["A thorough answer with a concrete example."] * 5


def _score(value):
    return PerQuestionScore(clarity=value, correctness=value, communication=value, feedback="ok")


def varied_payload():
    payload = evaluation_payload(5, 70)
    for i, value in enumerate([60, 90, 45, 90, 45]):
        entry = payload["perQuestionEvaluations"][i]
        entry["clarityScore"] = entry["correctnessScore"] = entry["communicationScore"] = value
    return payload


# ============================================================================
# START
# ============================================================================

def test_start_interview_creates_session(make_orchestrator):
    orchestrator, provider = make_orchestrator()

    session = asyncio.run(orchestrator.start_interview("alice", "  Backend Engineer ", "MEDIUM"))

    assert session.role == "Backend Engineer"
    assert session.difficulty == Difficulty.MEDIUM
    assert session.questions == QUESTIONS
    assert session.user_id == "alice"
    assert not session.is_evaluated
    assert [u.prompt_type for u in session.ai_usage] == [PromptType.QUESTION_GENERATION]
    assert session.ai_usage[0].model == "gpt-4o-mini"
    assert orchestrator.get_session(session.session_id, "alice") is session
    assert len(provider.calls) == 1


def test_start_interview_with_fallback_records_empty_model(make_orchestrator):
    orchestrator, _ = make_orchestrator(FakeProvider(error=RuntimeError("down")))

    session = asyncio.run(orchestrator.start_interview("alice", "Designer", "easy"))

    assert len(session.questions) == 5
    assert session.ai_usage[0].model == ""


@pytest.mark.parametrize("role, difficulty", [("", "easy"), ("   ", "easy"), ("Engineer", ""), ("Engineer", "expert")])
def test_start_interview_rejects_invalid_input(make_orchestrator, role, difficulty):
    orchestrator, provider = make_orchestrator()

    with pytest.raises(InvalidSubmissionError):
        asyncio.run(orchestrator.start_interview("alice", role, difficulty))
    assert provider.calls == []


def test_start_interview_rejected_when_budget_exhausted(make_orchestrator):
    orchestrator, provider = make_orchestrator(max_requests=1)
    asyncio.run(orchestrator.start_interview("alice", "Engineer", "easy"))

    with pytest.raises(AdmissionRejectedError) as exc_info:
        asyncio.run(orchestrator.start_interview("alice", "Engineer", "easy"))

    assert exc_info.value.max_requests == 1
    assert exc_info.value.retry_after == 60
    assert len(provider.calls) == 1


def test_unauthenticated_callers_bypass_admission(make_orchestrator):
    orchestrator, provider = make_orchestrator(max_requests=1)
    for _ in range(3):
        asyncio.run(orchestrator.start_interview(None, "Engineer", "easy"))
    assert len(provider.calls) == 3


# ============================================================================
# SUBMIT
# ============================================================================

def test_submit_interview_scores_session(make_orchestrator):
    orchestrator, _ = make_orchestrator(FakeProvider(evaluation=varied_payload()))
    session = asyncio.run(orchestrator.start_interview("alice", "Engineer", "easy"))

    result = asyncio.run(orchestrator.submit_interview("alice", session.session_id, ANSWERS))

    assert result.is_evaluated
    assert result.answers == ANSWERS
    assert result.overall_score == 70
    assert result.strongest_question_index == 1
    assert result.weakest_question_index == 2
    assert [u.prompt_type for u in result.ai_usage] == [
        PromptType.QUESTION_GENERATION,
        PromptType.EVALUATION,
    ]


def test_submit_interview_with_fallback_has_no_question_ranking(make_orchestrator):
    orchestrator, _ = make_orchestrator(FakeProvider(evaluation="not json"))
    session = asyncio.run(orchestrator.start_interview("alice", "Engineer", "easy"))

    result = asyncio.run(orchestrator.submit_interview("alice", session.session_id, ANSWERS))

    assert result.is_evaluated
    assert result.evaluation.per_question == []
    assert result.strongest_question_index is None
    assert result.weakest_question_index is None
    assert 40 <= result.overall_score <= 100


@pytest.mark.parametrize("count", [0, 4, 6])
def test_submit_interview_rejects_wrong_answer_count(make_orchestrator, count):
    orchestrator, provider = make_orchestrator()
    session = asyncio.run(orchestrator.start_interview("alice", "Engineer", "easy"))

    with pytest.raises(InvalidSubmissionError):
        asyncio.run(orchestrator.submit_interview("alice", session.session_id, ["x"] * count))
    assert len(provider.calls) == 1


def test_submit_interview_unknown_or_foreign_session(make_orchestrator):
    orchestrator, _ = make_orchestrator()
    session = asyncio.run(orchestrator.start_interview("alice", "Engineer", "easy"))

    with pytest.raises(SessionNotFoundError):
        asyncio.run(orchestrator.submit_interview("alice", "missing", ANSWERS))
    with pytest.raises(SessionNotFoundError):
        asyncio.run(orchestrator.submit_interview("mallory", session.session_id, ANSWERS))


def test_submit_interview_twice_is_rejected(make_orchestrator):
    orchestrator, _ = make_orchestrator()
    session = asyncio.run(orchestrator.start_interview("alice", "Engineer", "easy"))
    asyncio.run(orchestrator.submit_interview("alice", session.session_id, ANSWERS))

    with pytest.raises(InvalidSubmissionError):
        asyncio.run(orchestrator.submit_interview("alice", session.session_id, ANSWERS))


def test_submit_interview_rejected_when_budget_exhausted(make_orchestrator):
    orchestrator, provider = make_orchestrator(max_requests=1)
    session = asyncio.run(orchestrator.start_interview("alice", "Engineer", "easy"))

    with pytest.raises(AdmissionRejectedError):
        asyncio.run(orchestrator.submit_interview("alice", session.session_id, ANSWERS))
    assert len(provider.calls) == 1
    assert not orchestrator.get_session(session.session_id, "alice").is_evaluated


def test_submit_interview_per_question_mismatch_leaves_session_open(make_orchestrator):
    orchestrator, _ = make_orchestrator(FakeProvider(evaluation=evaluation_payload(3)))
    session = asyncio.run(orchestrator.start_interview("alice", "Engineer", "easy"))

    with pytest.raises(PerQuestionMismatchError):
        asyncio.run(orchestrator.submit_interview("alice", session.session_id, ANSWERS))

    stored = orchestrator.get_session(session.session_id, "alice")
    assert not stored.is_evaluated
    assert stored.answers == []


# ============================================================================
# RANKING, HISTORY & ANALYTICS
# ============================================================================

def test_rank_questions_ties_go_to_first_occurrence():
    scores = [_score(v) for v in (50, 80, 80, 30, 30)]
    assert rank_questions(scores) == (1, 3)
    assert rank_questions([_score(70)] * 5) == (0, 0)
    assert rank_questions([]) == (None, None)


def test_history_is_per_user_and_newest_first(make_orchestrator):
    orchestrator, _ = make_orchestrator()
    first = asyncio.run(orchestrator.start_interview("alice", "Engineer", "easy"))
    second = asyncio.run(orchestrator.start_interview("alice", "Engineer", "hard"))
    asyncio.run(orchestrator.start_interview("bob", "Engineer", "easy"))
    second.created_at = first.created_at + timedelta(minutes=5)

    history = orchestrator.get_history("alice")

    assert [s.session_id for s in history] == [second.session_id, first.session_id]
    assert len(orchestrator.get_history("bob")) == 1
    assert orchestrator.get_history("carol") == []


def test_analytics_covers_only_evaluated_sessions(make_orchestrator):
    orchestrator, provider = make_orchestrator(max_requests=100)
    scores = [50, 50, 90, 90]
    base = None
    for i, score in enumerate(scores):
        provider.evaluation = evaluation_payload(5, score)
        session = asyncio.run(orchestrator.start_interview("alice", "Engineer", "easy"))
        base = base or session.created_at
        session.created_at = base + timedelta(days=i)
        asyncio.run(orchestrator.submit_interview("alice", session.session_id, ANSWERS))
    asyncio.run(orchestrator.start_interview("alice", "Engineer", "easy"))

    summary = orchestrator.get_analytics("alice")

    assert summary.total_interviews == 4
    assert summary.average_score == 70
    assert summary.trend == Trend.IMPROVING
    assert [p.score for p in summary.last_five] == [90, 90, 50, 50]
    assert orchestrator.get_analytics("bob").total_interviews == 0


def test_concurrent_submits_evaluate_once(make_orchestrator):
    orchestrator, provider = make_orchestrator(FakeProvider(delay=0.05), max_requests=3)
    session = asyncio.run(orchestrator.start_interview("alice", "Engineer", "easy"))

    async def submit_twice():
        return await asyncio.gather(
            orchestrator.submit_interview("alice", session.session_id, ANSWERS),
            orchestrator.submit_interview("alice", session.session_id, ANSWERS),
            return_exceptions=True,
        )

    first, second = asyncio.run(submit_twice())

    assert first.is_evaluated
    assert isinstance(second, InvalidSubmissionError)
    assert len(provider.calls) == 2  # one start, one evaluation
    # start and one evaluation used two of three slots
    assert orchestrator.admission.try_admit("alice") is True
    assert orchestrator.admission.try_admit("alice") is False
    assert not orchestrator._submitting


def test_failed_submit_can_be_retried(make_orchestrator):
    provider = FakeProvider(evaluation=evaluation_payload(3))
    orchestrator, _ = make_orchestrator(provider)
    session = asyncio.run(orchestrator.start_interview("alice", "Engineer", "easy"))

    with pytest.raises(PerQuestionMismatchError):
        asyncio.run(orchestrator.submit_interview("alice", session.session_id, ANSWERS))

    provider.evaluation = evaluation_payload(5)
    result = asyncio.run(orchestrator.submit_interview("alice", session.session_id, ANSWERS))
    assert result.is_evaluated
