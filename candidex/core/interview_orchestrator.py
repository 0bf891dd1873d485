"""
Interview Orchestrator - coordinates the interview lifecycle.

Start: admission check, question generation, session creation.
Submit: validation, admission check, evaluation, score roll-up.
History and analytics are served from the stored sessions.
"""

import logging

from candidex.core.ai_gateway import AIGatewayClient
from candidex.core.analytics import AnalyticsAggregator
from candidex.core.exceptions import (
    AdmissionRejectedError,
    InvalidSubmissionError,
    SessionNotFoundError,
)
from candidex.core.rate_limiter import AdmissionController
from candidex.models.analytics import AnalyticsSummary, HistoricalSession
from candidex.models.evaluation import PerQuestionScore
from candidex.models.interview import (
    AIUsage,
    Difficulty,
    InterviewSession,
    PromptType,
)

logger = logging.getLogger(__name__)


def rank_questions(per_question: list[PerQuestionScore]) -> tuple[int | None, int | None]:
    """
    Find the strongest and weakest question by mean sub-score.

    Ties go to the first occurrence. Returns (None, None) when there is no
    per-question detail.
    """
    if not per_question:
        return None, None

    strongest = weakest = 0
    for i, score in enumerate(per_question):
        if score.average > per_question[strongest].average:
            strongest = i
        if score.average < per_question[weakest].average:
            weakest = i
    return strongest, weakest


class InterviewOrchestrator:
    """
    Coordinates the admission controller, AI gateway and analytics.

    Sessions are held in memory; a durable store can replace ``_sessions``
    without changing the public methods.
    """

    def __init__(
        self,
        gateway: AIGatewayClient,
        admission: AdmissionController,
        analytics: AnalyticsAggregator | None = None,
    ):
        """
        Initialize the orchestrator with component dependencies.

        Args:
            gateway: AI gateway for questions and evaluation
            admission: Per-user AI request budget
            analytics: History aggregator
        """
        self.gateway = gateway
        self.admission = admission
        self.analytics = analytics or AnalyticsAggregator()

        # Session storage (in-memory)
        self._sessions: dict[str, InterviewSession] = {}
        # Sessions with an evaluation in flight
        self._submitting: set[str] = set()

    # =========================================================================
    # SESSION MANAGEMENT
    # =========================================================================

    def get_session(self, session_id: str, user_id: str | None = None) -> InterviewSession:
        """Get a session owned by the given user."""
        session = self._sessions.get(session_id)
        if session is None or session.user_id != user_id:
            raise SessionNotFoundError("Interview session not found")
        return session

    def _admit(self, user_id: str | None) -> None:
        if not self.admission.try_admit(user_id):
            raise AdmissionRejectedError(
                max_requests=self.admission.max_requests,
                retry_after=self.admission.retry_after(user_id),
            )

    # =========================================================================
    # INTERVIEW FLOW
    # =========================================================================

    async def start_interview(
        self,
        user_id: str | None,
        role: str,
        difficulty: str
    ) -> InterviewSession:
        """
        Start a new interview session.

        Args:
            user_id: Caller identity, or None if unauthenticated
            role: Job role to interview for
            difficulty: easy, medium or hard (case-insensitive)

        Returns:
            The stored InterviewSession with its five questions
        """
        role = (role or "").strip()
        if not role or not difficulty:
            raise InvalidSubmissionError("Please provide role and difficulty")

        try:
            level = Difficulty.parse(difficulty)
        except ValueError:
            raise InvalidSubmissionError("Difficulty must be one of: easy, medium, hard")

        self._admit(user_id)

        result = await self.gateway.generate_questions(role, level.value)

        session = InterviewSession(
            user_id=user_id,
            role=role,
            difficulty=level,
            questions=list(result.payload.questions),
        )
        session.ai_usage.append(
            AIUsage(model=result.model or "", prompt_type=PromptType.QUESTION_GENERATION)
        )

        self._sessions[session.session_id] = session

        logger.info(
            f"Created interview session {session.session_id} "
            f"({role}/{level.value}, fallback={result.used_fallback})"
        )
        return session

    async def submit_interview(
        self,
        user_id: str | None,
        session_id: str,
        answers: list[str]
    ) -> InterviewSession:
        """
        Evaluate the answers for a session and store the results.

        Args:
            user_id: Caller identity, or None if unauthenticated
            session_id: Session being answered
            answers: One answer per question, in question order

        Returns:
            The updated InterviewSession

        Raises:
            SessionNotFoundError: Unknown session or not owned by the caller
            InvalidSubmissionError: Wrong answer count, already evaluated or
                a submission for the session is still in progress
            AdmissionRejectedError: AI request budget exhausted
            PerQuestionMismatchError: Provider scores could not be aligned
        """
        session = self.get_session(session_id, user_id)

        if session.is_evaluated:
            raise InvalidSubmissionError("Interview has already been submitted")

        if len(answers) != len(session.questions):
            raise InvalidSubmissionError(
                f"Expected {len(session.questions)} answers, got {len(answers)}"
            )

        if session_id in self._submitting:
            raise InvalidSubmissionError("Interview submission is already in progress")

        self._submitting.add(session_id)
        try:
            self._admit(user_id)

            result = await self.gateway.evaluate(
                role=session.role,
                difficulty=session.difficulty.value,
                questions=session.questions,
                answers=answers,
            )
        finally:
            self._submitting.discard(session_id)

        evaluation = result.payload
        strongest, weakest = rank_questions(evaluation.per_question)

        session.answers = list(answers)
        session.evaluation = evaluation
        session.overall_score = evaluation.overall_score
        session.strongest_question_index = strongest
        session.weakest_question_index = weakest
        session.ai_usage.append(
            AIUsage(model=result.model or "", prompt_type=PromptType.EVALUATION)
        )

        logger.info(
            f"Evaluated session {session.session_id}: score={session.overall_score}, "
            f"fallback={result.used_fallback}"
        )
        return session

    # =========================================================================
    # HISTORY & ANALYTICS
    # =========================================================================

    def get_history(self, user_id: str | None) -> list[InterviewSession]:
        """All sessions for a user, newest first."""
        sessions = [s for s in self._sessions.values() if s.user_id == user_id]
        return sorted(sessions, key=lambda s: s.created_at, reverse=True)

    def get_analytics(self, user_id: str | None) -> AnalyticsSummary:
        """Summary statistics over the user's evaluated sessions."""
        evaluated = sorted(
            (s for s in self._sessions.values() if s.user_id == user_id and s.is_evaluated),
            key=lambda s: s.created_at,
        )
        history = [
            HistoricalSession(
                overall_score=s.overall_score,
                evaluation=s.evaluation,
                created_at=s.created_at,
            )
            for s in evaluated
        ]
        return self.analytics.summarize(history)
