"""
AI Interviewer Prompt Templates

Contains the prompt used to generate the question set for a new
interview session.
"""

from candidex.models.interview import QUESTIONS_PER_INTERVIEW


class InterviewerPrompts:
    """
    Prompt templates for the AI interviewer.

    Key principles:
    - Questions appropriate to the role and difficulty
    - One self-contained question per entry
    - Strict JSON output so the response can be validated
    """

    SYSTEM_CONTEXT = (
        "You are an expert interview question generator. "
        "Always return valid JSON only, no markdown or additional text."
    )

    DIFFICULTY_GUIDANCE = {
        "easy": "Warm-up and background questions a candidate can answer from experience.",
        "medium": "Situational and practical questions that require concrete examples.",
        "hard": "Design, trade-off and leadership questions that probe depth of judgement.",
    }

    def generate_questions_prompt(self, role: str, difficulty: str) -> str:
        """Generate prompt for a fresh set of interview questions."""

        guidance = self.DIFFICULTY_GUIDANCE.get(difficulty, self.DIFFICULTY_GUIDANCE["easy"])

        return f"""Generate {QUESTIONS_PER_INTERVIEW} {difficulty} level interview questions for a {role}.

Difficulty guidance: {guidance}

Return ONLY valid JSON in the format: {{ "questions": [ ... ] }}
The "questions" array must contain exactly {QUESTIONS_PER_INTERVIEW} non-empty strings."""
