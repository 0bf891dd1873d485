"""
Interview API endpoints

Handles the interview lifecycle:
- Starting a session (question generation)
- Submitting answers (evaluation)
- Listing history
- History analytics
"""

from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from candidex.api.dependencies import get_orchestrator, get_user_id
from candidex.core.exceptions import (
    AdmissionRejectedError,
    InvalidSubmissionError,
    PerQuestionMismatchError,
    SessionNotFoundError,
)
from candidex.core.interview_orchestrator import InterviewOrchestrator
from candidex.models.analytics import AnalyticsSummary
from candidex.models.evaluation import Evaluation

router = APIRouter()


# ============================================================================
# REQUEST/RESPONSE MODELS
# ============================================================================

class StartRequest(BaseModel):
    """Request model for starting an interview."""
    role: str
    difficulty: str


class StartResponse(BaseModel):
    """Response after starting an interview."""
    session_id: str
    role: str
    difficulty: str
    questions: list[str]
    created_at: datetime


class SubmitRequest(BaseModel):
    """Request model for submitting answers."""
    session_id: str
    answers: list[str]


class SubmitResponse(BaseModel):
    """Response after submitting answers."""
    session_id: str
    overall_score: int
    evaluation: Evaluation
    strongest_question_index: int | None = None
    weakest_question_index: int | None = None
    submitted_at: datetime


class HistoryItem(BaseModel):
    """One entry of the interview history."""
    session_id: str
    role: str
    difficulty: str
    overall_score: int
    created_at: datetime


def _too_many_requests(e: AdmissionRejectedError) -> HTTPException:
    return HTTPException(
        status_code=429,
        detail=str(e),
        headers={"Retry-After": str(e.retry_after)},
    )


# ============================================================================
# REST ENDPOINTS
# ============================================================================

@router.post("/start", response_model=StartResponse, status_code=201)
async def start_interview(
    request: StartRequest,
    user_id: str | None = Depends(get_user_id),
    orchestrator: InterviewOrchestrator = Depends(get_orchestrator),
) -> StartResponse:
    """
    Start a new interview session.

    Generates five questions for the role and difficulty.
    """
    try:
        session = await orchestrator.start_interview(
            user_id=user_id,
            role=request.role,
            difficulty=request.difficulty,
        )
    except InvalidSubmissionError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except AdmissionRejectedError as e:
        raise _too_many_requests(e)

    return StartResponse(
        session_id=session.session_id,
        role=session.role,
        difficulty=session.difficulty.value,
        questions=session.questions,
        created_at=session.created_at,
    )


@router.post("/submit", response_model=SubmitResponse)
async def submit_interview(
    request: SubmitRequest,
    user_id: str | None = Depends(get_user_id),
    orchestrator: InterviewOrchestrator = Depends(get_orchestrator),
) -> SubmitResponse:
    """
    Submit answers for a session and get the evaluation.
    """
    try:
        session = await orchestrator.submit_interview(
            user_id=user_id,
            session_id=request.session_id,
            answers=request.answers,
        )
    except SessionNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except InvalidSubmissionError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except AdmissionRejectedError as e:
        raise _too_many_requests(e)
    except PerQuestionMismatchError:
        raise HTTPException(
            status_code=502,
            detail="Evaluation could not be aligned with the submitted questions. Please try again.",
        )

    return SubmitResponse(
        session_id=session.session_id,
        overall_score=session.overall_score,
        evaluation=session.evaluation,
        strongest_question_index=session.strongest_question_index,
        weakest_question_index=session.weakest_question_index,
        submitted_at=datetime.utcnow(),
    )


@router.get("/history", response_model=list[HistoryItem])
async def get_interview_history(
    user_id: str | None = Depends(get_user_id),
    orchestrator: InterviewOrchestrator = Depends(get_orchestrator),
) -> list[HistoryItem]:
    """Get the caller's interview history, newest first."""
    return [
        HistoryItem(
            session_id=s.session_id,
            role=s.role,
            difficulty=s.difficulty.value,
            overall_score=s.overall_score,
            created_at=s.created_at,
        )
        for s in orchestrator.get_history(user_id)
    ]


@router.get("/analytics", response_model=AnalyticsSummary)
async def get_interview_analytics(
    user_id: str | None = Depends(get_user_id),
    orchestrator: InterviewOrchestrator = Depends(get_orchestrator),
) -> AnalyticsSummary:
    """Get score analytics over the caller's evaluated interviews."""
    return orchestrator.get_analytics(user_id)
