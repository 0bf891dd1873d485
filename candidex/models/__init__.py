"""
Data models and schemas for Candidex

Contains Pydantic models for:
- Interview sessions and question sets
- Evaluation results and gateway outcomes
- History analytics
"""

from candidex.models.interview import (
    InterviewSession,
    QuestionSet,
    Difficulty,
    RoleCategory,
    PromptType,
    AIUsage,
    QUESTIONS_PER_INTERVIEW,
)
from candidex.models.evaluation import (
    Evaluation,
    PerQuestionScore,
    GatewayResult,
    Skill,
)
from candidex.models.analytics import (
    AnalyticsSummary,
    HistoricalSession,
    ScorePoint,
    Trend,
)

__all__ = [
    # Interview
    "InterviewSession",
    "QuestionSet",
    "Difficulty",
    "RoleCategory",
    "PromptType",
    "AIUsage",
    "QUESTIONS_PER_INTERVIEW",
    # Evaluation
    "Evaluation",
    "PerQuestionScore",
    "GatewayResult",
    "Skill",
    # Analytics
    "AnalyticsSummary",
    "HistoricalSession",
    "ScorePoint",
    "Trend",
]
