"""
Analytics models for Candidex
"""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field

from candidex.models.evaluation import Evaluation, Skill


class Trend(str, Enum):
    """Direction of a user's scores over time."""

    IMPROVING = "improving"
    DECLINING = "declining"
    STABLE = "stable"


class HistoricalSession(BaseModel):
    """A previously evaluated interview, as read back from storage."""

    overall_score: int
    evaluation: Evaluation | None = None
    created_at: datetime


class ScorePoint(BaseModel):
    """One entry of the recent-scores list."""

    score: int
    date: datetime


class AnalyticsSummary(BaseModel):
    """Summary statistics over a user's interview history."""

    total_interviews: int = 0
    average_score: float = 0.0
    strongest_skill: Skill | None = None
    last_five: list[ScorePoint] = Field(default_factory=list)
    trend: Trend = Trend.STABLE
