"""
Fallback Engine for Candidex

Deterministic, provider-independent question selection and answer scoring.
Used by the AI gateway whenever the provider times out, errors, or returns
a payload that fails validation. Never performs I/O and never raises.
"""

import logging
import random

from candidex.core.response_normalizer import DEFAULT_STRENGTH
from candidex.models.evaluation import Evaluation, round_half_up
from candidex.models.interview import (
    QUESTIONS_PER_INTERVIEW,
    Difficulty,
    QuestionSet,
    RoleCategory,
)

logger = logging.getLogger(__name__)


TECHNICAL_KEYWORDS = ("developer", "engineer", "programmer", "software", "technical")
BUSINESS_KEYWORDS = ("manager", "business", "product", "analyst")

# Static question bank by difficulty and role category (5 per entry)
FALLBACK_QUESTIONS: dict[Difficulty, dict[RoleCategory, list[str]]] = {
    Difficulty.EASY: {
        RoleCategory.GENERAL: [
            "Tell me about yourself and your background.",
            "What interests you most about this role?",
            "What are your key strengths?",
            "Where do you see yourself in 5 years?",
            "Why should we consider you for this position?",
        ],
        RoleCategory.TECHNICAL: [
            "What programming languages are you most comfortable with?",
            "Describe a project you recently worked on.",
            "How do you approach problem-solving?",
            "What development tools do you use regularly?",
            "How do you stay updated with technology trends?",
        ],
        RoleCategory.BUSINESS: [
            "What experience do you have in this industry?",
            "How do you handle tight deadlines?",
            "Describe a time you worked in a team.",
            "What motivates you in your work?",
            "How do you prioritize your tasks?",
        ],
    },
    Difficulty.MEDIUM: {
        RoleCategory.GENERAL: [
            "Describe a challenging project you worked on. How did you handle it?",
            "How do you stay updated with industry trends?",
            "Can you explain a time when you had to work under pressure?",
            "What tools and technologies are you most comfortable with?",
            "How do you handle feedback and criticism?",
        ],
        RoleCategory.TECHNICAL: [
            "Explain a complex technical problem you solved recently.",
            "How do you ensure code quality in your projects?",
            "Describe your experience with version control and collaboration.",
            "What is your approach to debugging complex issues?",
            "How do you balance technical debt with feature delivery?",
        ],
        RoleCategory.BUSINESS: [
            "Describe a situation where you had to make a difficult decision.",
            "How do you handle conflicting priorities?",
            "Explain a time you had to learn something new quickly.",
            "How do you communicate technical concepts to non-technical stakeholders?",
            "Describe your experience with agile methodologies.",
        ],
    },
    Difficulty.HARD: {
        RoleCategory.GENERAL: [
            "Design a scalable system for a specific challenge. Walk me through your approach.",
            "How would you optimize a performance bottleneck? Discuss trade-offs.",
            "Describe a time when you had to make a difficult technical decision. What was your process?",
            "How do you approach architecting a new system from scratch?",
            "Explain how you would mentor a junior team member.",
        ],
        RoleCategory.TECHNICAL: [
            "How would you design a distributed system to handle high traffic?",
            "Explain your approach to database optimization and scaling.",
            "Describe how you would implement a microservices architecture.",
            "How do you handle system reliability and fault tolerance?",
            "Explain your approach to security in application development.",
        ],
        RoleCategory.BUSINESS: [
            "How would you lead a team through a major technical migration?",
            "Describe your approach to technical strategy and planning.",
            "How do you balance innovation with stability in production systems?",
            "Explain how you would handle a critical production incident.",
            "Describe your experience with cost optimization in cloud infrastructure.",
        ],
    },
}

# Score rule tables
SCORE_JITTER = 7
MIN_FALLBACK_SCORE = 40
STRONG_THRESHOLD = 70

STRENGTH_RULES = {
    "clarity": "Clear and articulate communication",
    "correctness": "Demonstrated knowledge in responses",
    "communication": "Effective explanation of concepts",
}
IMPROVEMENT_RULES = {
    "clarity": "Work on articulating thoughts more clearly",
    "correctness": "Enhance technical depth and accuracy",
    "communication": "Improve communication and explanation skills",
}
DEFAULT_FALLBACK_IMPROVEMENT = "Continue practicing to maintain high performance"

FEEDBACK_BANDS = (
    (80, "Good performance overall. You demonstrated solid understanding and communication skills."),
    (65, "Adequate performance. There is room for improvement in clarity, correctness, and communication."),
    (0, "Your responses need improvement. Focus on providing more detailed answers and enhancing communication clarity."),
)


def classify_role(role: str) -> RoleCategory:
    """Classify a free-text role into a question category."""
    normalized = role.lower()
    if any(keyword in normalized for keyword in TECHNICAL_KEYWORDS):
        return RoleCategory.TECHNICAL
    if any(keyword in normalized for keyword in BUSINESS_KEYWORDS):
        return RoleCategory.BUSINESS
    return RoleCategory.GENERAL


def answer_quality(answer: str | None) -> float:
    """Map an answer to a quality weight by its trimmed length."""
    length = len(answer.strip()) if answer else 0
    if length < 10:
        return 0.3
    elif length < 50:
        return 0.5
    elif length < 150:
        return 0.75
    else:
        return 0.9


class FallbackEngine:
    """
    Heuristic substitute for the AI provider.

    Question selection is fully deterministic. Evaluation adds bounded
    random jitter to a length-based base score; pass a seeded
    ``random.Random`` to make it reproducible.
    """

    def __init__(self, rng: random.Random | None = None):
        self.rng = rng or random.Random()

    # =========================================================================
    # QUESTIONS
    # =========================================================================

    def fallback_questions(self, role: str, difficulty: str) -> QuestionSet:
        """
        Pick the static question set for a role and difficulty.

        Unknown difficulties fall back to easy.
        """
        try:
            level = Difficulty.parse(difficulty)
        except ValueError:
            logger.info(f"Unknown difficulty '{difficulty}', using easy fallback questions")
            level = Difficulty.EASY

        category = classify_role(role)
        questions = FALLBACK_QUESTIONS[level][category]
        return QuestionSet(questions=questions[:QUESTIONS_PER_INTERVIEW])

    # =========================================================================
    # EVALUATION
    # =========================================================================

    def fallback_evaluation(self, answers: list[str]) -> Evaluation:
        """
        Score answers from their lengths.

        Produces overall scores only; ``per_question`` is left empty.
        """
        weights = [answer_quality(a) for a in answers] or [answer_quality("")]
        average_quality = sum(weights) / len(weights)
        base_score = round_half_up(50 + average_quality * 40)

        scores = {
            skill: self._jitter(base_score)
            for skill in ("clarity", "correctness", "communication")
        }

        strengths = [
            STRENGTH_RULES[skill] for skill, score in scores.items()
            if score >= STRONG_THRESHOLD
        ]
        areas = [
            IMPROVEMENT_RULES[skill] for skill, score in scores.items()
            if score < STRONG_THRESHOLD
        ]

        overall = round_half_up(sum(scores.values()) / 3)
        overall_feedback = next(text for floor, text in FEEDBACK_BANDS if overall >= floor)

        return Evaluation(
            clarity=scores["clarity"],
            correctness=scores["correctness"],
            communication=scores["communication"],
            strengths=strengths or [DEFAULT_STRENGTH],
            areas_for_improvement=areas or [DEFAULT_FALLBACK_IMPROVEMENT],
            overall_feedback=overall_feedback,
            per_question=[],
        )

    def _jitter(self, base_score: int) -> int:
        score = base_score + self.rng.randint(-SCORE_JITTER, SCORE_JITTER)
        return min(100, max(MIN_FALLBACK_SCORE, score))
