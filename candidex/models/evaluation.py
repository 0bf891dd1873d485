"""
Evaluation models for Candidex

Defines the scoring structures returned for a submitted interview.
"""

import math
from enum import Enum
from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field

T = TypeVar("T")


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero for positives."""
    return int(math.floor(value + 0.5))


def clamp_score(value: float, low: float = 0, high: float = 100) -> int:
    """Clamp a score into [low, high] and round it to an integer."""
    return round_half_up(max(low, min(high, value)))


class Skill(str, Enum):
    """The three scored dimensions of an answer."""

    CLARITY = "clarity"
    CORRECTNESS = "correctness"
    COMMUNICATION = "communication"


class PerQuestionScore(BaseModel):
    """Scores and feedback for one question/answer pair."""

    clarity: int = Field(..., ge=0, le=100)
    correctness: int = Field(..., ge=0, le=100)
    communication: int = Field(..., ge=0, le=100)
    feedback: str = Field(..., min_length=1)

    @property
    def average(self) -> float:
        return (self.clarity + self.correctness + self.communication) / 3


class Evaluation(BaseModel):
    """Complete evaluation of a submitted interview."""

    # Overall scores (each 0-100)
    clarity: int = Field(
        ..., ge=0, le=100,
        description="How clearly the answers were articulated"
    )
    correctness: int = Field(
        ..., ge=0, le=100,
        description="Accuracy of the answers"
    )
    communication: int = Field(
        ..., ge=0, le=100,
        description="How well ideas were explained"
    )

    # Feedback
    strengths: list[str] = Field(default_factory=list)
    areas_for_improvement: list[str] = Field(default_factory=list)
    overall_feedback: str = ""

    # One entry per question; empty when produced by the fallback engine
    per_question: list[PerQuestionScore] = Field(default_factory=list)

    @property
    def overall_score(self) -> int:
        """Rounded mean of the three sub-scores."""
        return round_half_up((self.clarity + self.correctness + self.communication) / 3)

    def skill_score(self, skill: Skill) -> int:
        return getattr(self, skill.value)


class GatewayResult(BaseModel, Generic[T]):
    """Outcome of one gateway call, immutable once returned."""

    model_config = ConfigDict(frozen=True)

    payload: T
    used_fallback: bool = False
    model: str | None = None
