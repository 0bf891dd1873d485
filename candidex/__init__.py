"""
Candidex - AI Mock Interview Platform

Generates interview questions for a role and difficulty, scores free-text
answers through an AI provider with deterministic local fallbacks, and
tracks score trends across a user's interview history.
"""

__version__ = "0.1.0"
__author__ = "Candidex Team"
