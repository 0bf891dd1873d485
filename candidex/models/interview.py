"""
Interview session models for Candidex
"""

from datetime import datetime
from enum import Enum
from uuid import uuid4

from pydantic import BaseModel, Field, field_validator

from candidex.models.evaluation import Evaluation

QUESTIONS_PER_INTERVIEW = 5


class Difficulty(str, Enum):
    """Interview difficulty levels."""

    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"

    @classmethod
    def parse(cls, value: str) -> "Difficulty":
        """Parse a difficulty case-insensitively. Raises ValueError if unknown."""
        return cls(value.strip().lower())


class RoleCategory(str, Enum):
    """Coarse role families used to pick fallback questions."""

    TECHNICAL = "technical"
    BUSINESS = "business"
    GENERAL = "general"


class PromptType(str, Enum):
    """Kinds of AI calls recorded against a session."""

    QUESTION_GENERATION = "question_generation"
    EVALUATION = "evaluation"


class QuestionSet(BaseModel):
    """The ordered questions of one interview."""

    questions: list[str] = Field(
        ...,
        min_length=QUESTIONS_PER_INTERVIEW,
        max_length=QUESTIONS_PER_INTERVIEW,
        description="Exactly five non-empty questions"
    )

    @field_validator("questions")
    @classmethod
    def _non_empty(cls, value: list[str]) -> list[str]:
        if any(not q.strip() for q in value):
            raise ValueError("questions must be non-empty strings")
        return value

    def __len__(self) -> int:
        return len(self.questions)


class AIUsage(BaseModel):
    """A single AI provider call made on behalf of a session."""

    model: str = ""
    prompt_type: PromptType
    timestamp: datetime = Field(default_factory=datetime.utcnow)


class InterviewSession(BaseModel):
    """Complete interview session record."""

    # Identification
    session_id: str = Field(default_factory=lambda: str(uuid4()))
    user_id: str | None = None

    # Setup
    role: str
    difficulty: Difficulty

    # Questions & answers
    questions: list[str] = Field(default_factory=list)
    answers: list[str] = Field(default_factory=list)

    # Results
    evaluation: Evaluation | None = None
    overall_score: int = Field(default=0, ge=0, le=100)
    strongest_question_index: int | None = None
    weakest_question_index: int | None = None

    # Timing
    created_at: datetime = Field(default_factory=datetime.utcnow)

    # Internal, never returned by the API
    ai_usage: list[AIUsage] = Field(default_factory=list, exclude=True)

    @property
    def is_evaluated(self) -> bool:
        return self.evaluation is not None
