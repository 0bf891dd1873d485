"""
AI prompt templates for Candidex

Contains structured prompts for:
- Question generation
- Answer evaluation
"""

from candidex.prompts.interviewer import InterviewerPrompts
from candidex.prompts.evaluator import EvaluatorPrompts

__all__ = [
    "InterviewerPrompts",
    "EvaluatorPrompts",
]
