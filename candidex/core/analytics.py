"""
Analytics Aggregator for Candidex

Computes summary statistics over a user's evaluated interview history:
average score, strongest skill, the five most recent scores and the
overall score trend.
"""

import logging
from collections.abc import Sequence

from candidex.models.analytics import (
    AnalyticsSummary,
    HistoricalSession,
    ScorePoint,
    Trend,
)
from candidex.models.evaluation import Skill

logger = logging.getLogger(__name__)


class AnalyticsAggregator:
    """
    Pure aggregation over already-persisted sessions.

    Trend rules:
    - At least ``min_sessions_for_trend`` sessions are required
    - Sessions are split chronologically into an older and a newer half
    - The newer half must beat (or trail) the older half by more than
      ``trend_threshold`` points to count as improving (or declining)
    """

    def __init__(
        self,
        recent_count: int = 5,
        min_sessions_for_trend: int = 4,
        trend_threshold: float = 5.0,
    ):
        self.recent_count = recent_count
        self.min_sessions_for_trend = min_sessions_for_trend
        self.trend_threshold = trend_threshold

    def summarize(self, sessions: Sequence[HistoricalSession]) -> AnalyticsSummary:
        """
        Summarize a user's interview history.

        Args:
            sessions: Evaluated sessions, oldest first

        Returns:
            AnalyticsSummary (all-zero/stable for an empty history)
        """
        if not sessions:
            return AnalyticsSummary()

        average = sum(s.overall_score for s in sessions) / len(sessions)
        logger.debug(f"Summarizing {len(sessions)} sessions, average={average:.2f}")

        return AnalyticsSummary(
            total_interviews=len(sessions),
            average_score=round(average, 2),
            strongest_skill=self.strongest_skill(sessions),
            last_five=self.recent_scores(sessions),
            trend=self.trend(sessions),
        )

    def strongest_skill(self, sessions: Sequence[HistoricalSession]) -> Skill | None:
        """Skill with the highest mean across evaluated sessions; ties go to the earlier skill."""
        evaluations = [s.evaluation for s in sessions if s.evaluation is not None]
        if not evaluations:
            return None

        best: Skill | None = None
        best_mean = float("-inf")
        for skill in Skill:
            mean = sum(e.skill_score(skill) for e in evaluations) / len(evaluations)
            if mean > best_mean:
                best, best_mean = skill, mean
        return best

    def recent_scores(self, sessions: Sequence[HistoricalSession]) -> list[ScorePoint]:
        """The most recent sessions, newest first."""
        newest_first = sorted(sessions, key=lambda s: s.created_at, reverse=True)
        return [
            ScorePoint(score=s.overall_score, date=s.created_at)
            for s in newest_first[:self.recent_count]
        ]

    def trend(self, sessions: Sequence[HistoricalSession]) -> Trend:
        """Compare the newer half of the history against the older half."""
        if len(sessions) < self.min_sessions_for_trend:
            return Trend.STABLE

        # Stable sort keeps the given order for equal timestamps
        ordered = sorted(sessions, key=lambda s: s.created_at)
        midpoint = len(ordered) // 2
        older = [s.overall_score for s in ordered[:midpoint]]
        newer = [s.overall_score for s in ordered[midpoint:]]

        older_avg = sum(older) / len(older)
        newer_avg = sum(newer) / len(newer)

        if newer_avg > older_avg + self.trend_threshold:
            return Trend.IMPROVING
        elif newer_avg < older_avg - self.trend_threshold:
            return Trend.DECLINING
        return Trend.STABLE
