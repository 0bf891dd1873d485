"""
AI Evaluator Prompt Templates

Contains the prompt for scoring a completed interview.

Evaluation dimensions:
- Clarity
- Correctness
- Communication
"""


class EvaluatorPrompts:
    """
    Prompt templates for AI evaluation of a submitted interview.

    Key principles:
    - Objective, rubric-based scoring on a 0-100 scale
    - Identify both strengths and gaps
    - One feedback entry per question, in question order
    """

    SYSTEM_CONTEXT = (
        "You are an expert interview evaluator. "
        "Always return valid JSON only, no markdown or additional text."
    )

    SCORING_RUBRIC = """
=== SCORING RUBRIC (0-100 scale) ===

CLARITY: Is the answer easy to follow and well structured?
CORRECTNESS: Is the content accurate and relevant to the question?
COMMUNICATION: Are ideas explained convincingly, with examples where useful?
"""

    def generate_evaluation_prompt(
        self,
        role: str,
        difficulty: str,
        questions: list[str],
        answers: list[str]
    ) -> str:
        """Generate prompt for evaluating a full set of answers."""

        questions_text = "\n".join(f"{i + 1}. {q}" for i, q in enumerate(questions))
        answers_text = "\n".join(f"{i + 1}. {a}" for i, a in enumerate(answers))

        return f"""Evaluate the following interview responses for a {role} position at {difficulty} difficulty level.

{self.SCORING_RUBRIC}

Questions:
{questions_text}

Answers:
{answers_text}

Evaluate the candidate's responses and return ONLY valid JSON with this exact structure:
{{
  "clarityScore": number (0-100),
  "correctnessScore": number (0-100),
  "communicationScore": number (0-100),
  "strengths": [string],
  "areasForImprovement": [string],
  "overallFeedback": string,
  "perQuestionEvaluations": [
    {{
      "clarityScore": number (0-100),
      "correctnessScore": number (0-100),
      "communicationScore": number (0-100),
      "feedback": string
    }}
  ]
}}

The perQuestionEvaluations array must have exactly {len(questions)} items, one for each question-answer pair, in the same order. Provide detailed, constructive feedback for each answer."""
