"""
API Dependencies

Provides dependency injection for API endpoints.
Manages the process-wide instances of core components.
"""

from fastapi import Header

from candidex.config.settings import get_settings
from candidex.core.ai_gateway import AIGatewayClient, ProviderClient, build_langfuse
from candidex.core.analytics import AnalyticsAggregator
from candidex.core.fallback_engine import FallbackEngine
from candidex.core.interview_orchestrator import InterviewOrchestrator
from candidex.core.rate_limiter import AdmissionController


# ============================================================================
# SINGLETON INSTANCES
# ============================================================================

_gateway: AIGatewayClient | None = None
_admission: AdmissionController | None = None
_orchestrator: InterviewOrchestrator | None = None


def get_gateway() -> AIGatewayClient:
    """
    Get the AI gateway, building the provider client on first use.

    Raises:
        ConfigurationError: If the provider API key is missing
    """
    global _gateway

    if _gateway is None:
        settings = get_settings()
        provider = ProviderClient(settings)
        _gateway = AIGatewayClient(
            provider=provider,
            fallback_engine=FallbackEngine(),
            timeout_seconds=settings.provider_timeout_seconds,
            langfuse=build_langfuse(settings),
        )

    return _gateway


def get_admission_controller() -> AdmissionController:
    """Get the admission controller singleton."""
    global _admission

    if _admission is None:
        settings = get_settings()
        _admission = AdmissionController(
            max_requests=settings.rate_limit_max_requests,
            window_seconds=settings.rate_limit_window_seconds,
            sweep_interval_seconds=settings.rate_limit_sweep_seconds,
        )

    return _admission


def get_orchestrator() -> InterviewOrchestrator:
    """
    Get the interview orchestrator singleton.

    Lazily initializes all required components.
    """
    global _orchestrator

    if _orchestrator is None:
        _orchestrator = InterviewOrchestrator(
            gateway=get_gateway(),
            admission=get_admission_controller(),
            analytics=AnalyticsAggregator(),
        )

    return _orchestrator


def get_user_id(x_user_id: str | None = Header(default=None)) -> str | None:
    """
    Caller identity as forwarded by the authentication layer.

    A missing header means the request is unauthenticated.
    """
    if x_user_id is None:
        return None
    return x_user_id.strip() or None


async def cleanup():
    """Cleanup resources on shutdown."""
    global _gateway, _admission, _orchestrator

    if _admission:
        await _admission.stop()
        _admission = None

    if _gateway:
        await _gateway.close()
        _gateway = None

    _orchestrator = None
