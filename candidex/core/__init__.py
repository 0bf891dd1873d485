"""
Core business logic modules for Candidex

Contains:
- AI Gateway: Provider calls with timeout and fallback
- Response Normalizer: Validation of provider output
- Fallback Engine: Heuristic questions and scoring
- Admission Controller: Per-user AI request budget
- Analytics Aggregator: History statistics
- Interview Orchestrator: Session lifecycle
"""

from candidex.core.ai_gateway import AIGatewayClient, ProviderClient, ProviderReply
from candidex.core.fallback_engine import FallbackEngine
from candidex.core.rate_limiter import AdmissionController
from candidex.core.analytics import AnalyticsAggregator
from candidex.core.interview_orchestrator import InterviewOrchestrator

__all__ = [
    "AIGatewayClient",
    "ProviderClient",
    "ProviderReply",
    "FallbackEngine",
    "AdmissionController",
    "AnalyticsAggregator",
    "InterviewOrchestrator",
]
