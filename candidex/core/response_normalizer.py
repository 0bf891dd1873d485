"""
Response Normalizer for Candidex

Validates raw AI provider output and converts it into the canonical
QuestionSet / Evaluation models:
- Strips markdown code fences before JSON decoding
- Rejects structurally invalid payloads
- Clamps scores into range and fills empty feedback with defaults
"""

import json
import math
import re
from numbers import Real
from typing import Any

from candidex.core.exceptions import PerQuestionMismatchError, ResponseValidationError
from candidex.models.evaluation import Evaluation, PerQuestionScore, clamp_score
from candidex.models.interview import QUESTIONS_PER_INTERVIEW, QuestionSet

DEFAULT_STRENGTH = "Demonstrated effort in responses"
DEFAULT_IMPROVEMENT = "Continue practicing to improve"
DEFAULT_OVERALL_FEEDBACK = (
    "Thank you for your responses. Keep practicing to improve your interview skills."
)
DEFAULT_QUESTION_FEEDBACK = "No specific feedback provided."

_FENCE_RE = re.compile(r"^```[a-zA-Z]*\s*|\s*```$")


def strip_code_fences(text: str) -> str:
    """Remove a surrounding ```/```json fence, if present."""
    text = text.strip()
    if text.startswith("```"):
        text = _FENCE_RE.sub("", text).strip()
    return text


def _reject_constant(token: str) -> Any:
    raise ResponseValidationError(f"Response contains non-JSON constant {token}")


def _load_object(raw: str | dict[str, Any]) -> dict[str, Any]:
    """Decode provider content into a JSON object."""
    if isinstance(raw, dict):
        return raw
    if not isinstance(raw, str):
        raise ResponseValidationError(f"Unsupported payload type: {type(raw).__name__}")

    try:
        # NaN/Infinity are accepted by json.loads but are not JSON
        data = json.loads(strip_code_fences(raw), parse_constant=_reject_constant)
    except ValueError as e:
        # JSONDecodeError, or an integer literal past the digit limit
        raise ResponseValidationError(f"Response is not valid JSON: {e}") from e

    if not isinstance(data, dict):
        raise ResponseValidationError("Response must be a JSON object")
    return data


def _require_score(data: dict[str, Any], key: str, where: str = "") -> int:
    value = data.get(key)
    # bool is a Real subclass, but true/false is never a score
    if isinstance(value, bool) or not isinstance(value, Real):
        raise ResponseValidationError(f"{where}{key} must be a number")
    if isinstance(value, float) and not math.isfinite(value):
        raise ResponseValidationError(f"{where}{key} must be a finite number")
    # clamp before any float conversion so huge integers cannot overflow
    return clamp_score(max(0, min(100, value)))


def _string_list(data: dict[str, Any], key: str, default: str) -> list[str]:
    value = data.get(key)
    if not isinstance(value, list):
        raise ResponseValidationError(f"{key} must be an array")
    items = [str(item).strip() for item in value if item is not None]
    items = [item for item in items if item]
    return items or [default]


def _text(value: Any, key: str, default: str) -> str:
    if not isinstance(value, str):
        raise ResponseValidationError(f"{key} must be a string")
    return value.strip() or default


# =========================================================================
# QUESTIONS
# =========================================================================

def normalize_questions(raw: str | dict[str, Any]) -> QuestionSet:
    """
    Validate a question-generation payload.

    Args:
        raw: Provider text content (or a decoded mapping)

    Returns:
        QuestionSet with exactly five trimmed questions

    Raises:
        ResponseValidationError: wrong count, non-string or empty entries
    """
    data = _load_object(raw)
    questions = data.get("questions")

    if not isinstance(questions, list):
        raise ResponseValidationError("Invalid response format: questions array not found")

    if len(questions) != QUESTIONS_PER_INTERVIEW:
        raise ResponseValidationError(
            f"Expected {QUESTIONS_PER_INTERVIEW} questions, got {len(questions)}"
        )

    cleaned = [q.strip() for q in questions if isinstance(q, str) and q.strip()]
    if len(cleaned) != QUESTIONS_PER_INTERVIEW:
        raise ResponseValidationError("Some questions are invalid or empty")

    return QuestionSet(questions=cleaned)


# =========================================================================
# EVALUATION
# =========================================================================

def normalize_evaluation(raw: str | dict[str, Any], question_count: int) -> Evaluation:
    """
    Validate and clamp an evaluation payload.

    Out-of-range scores are clamped, never rejected. A per-question list whose
    length differs from ``question_count`` raises PerQuestionMismatchError,
    since scores could no longer be matched to their questions.

    Args:
        raw: Provider text content (or a decoded mapping)
        question_count: Number of questions that were answered

    Returns:
        Normalized Evaluation

    Raises:
        ResponseValidationError: missing/non-numeric scores, wrong field types
        PerQuestionMismatchError: per-question length mismatch
    """
    data = _load_object(raw)

    clarity = _require_score(data, "clarityScore")
    correctness = _require_score(data, "correctnessScore")
    communication = _require_score(data, "communicationScore")

    strengths = _string_list(data, "strengths", DEFAULT_STRENGTH)
    areas = _string_list(data, "areasForImprovement", DEFAULT_IMPROVEMENT)
    overall_feedback = _text(data.get("overallFeedback"), "overallFeedback", DEFAULT_OVERALL_FEEDBACK)

    per_question_raw = data.get("perQuestionEvaluations")
    if not isinstance(per_question_raw, list):
        raise ResponseValidationError("perQuestionEvaluations must be an array")
    if len(per_question_raw) != question_count:
        raise PerQuestionMismatchError(question_count, len(per_question_raw))

    per_question = []
    for i, entry in enumerate(per_question_raw):
        where = f"perQuestionEvaluations[{i}]."
        if not isinstance(entry, dict):
            raise ResponseValidationError(f"perQuestionEvaluations[{i}] must be an object")
        per_question.append(
            PerQuestionScore(
                clarity=_require_score(entry, "clarityScore", where),
                correctness=_require_score(entry, "correctnessScore", where),
                communication=_require_score(entry, "communicationScore", where),
                feedback=_text(entry.get("feedback"), f"{where}feedback", DEFAULT_QUESTION_FEEDBACK),
            )
        )

    return Evaluation(
        clarity=clarity,
        correctness=correctness,
        communication=communication,
        strengths=strengths,
        areas_for_improvement=areas,
        overall_feedback=overall_feedback,
        per_question=per_question,
    )
