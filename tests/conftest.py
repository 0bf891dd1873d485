import asyncio
import json
import random
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from candidex.core.ai_gateway import AIGatewayClient, ProviderReply
from candidex.core.exceptions import ProviderError
from candidex.core.fallback_engine import FallbackEngine
from candidex.core.interview_orchestrator import InterviewOrchestrator
from candidex.core.rate_limiter import AdmissionController
from candidex.prompts.evaluator import EvaluatorPrompts

QUESTIONS = [
    "What is a REST API?",
    "Explain the difference between a process and a thread.",
    "How do you approach code review?",
    "Describe a bug you fixed recently.",
    "How would you design a URL shortener?",
]


def evaluation_payload(count=5, score=80):
    return {
        "clarityScore": score,
        "correctnessScore": score,
        "communicationScore": score,
        "strengths": ["Structured answers"],
        "areasForImprovement": ["Add more examples"],
        "overallFeedback": "Solid interview.",
        "perQuestionEvaluations": [
            {
                "clarityScore": score,
                "correctnessScore": score,
                "communicationScore": score,
                "feedback": f"Feedback {i + 1}",
            }
            for i in range(count)
        ],
    }


class FakeProvider:
    """Stand-in for ProviderClient returning canned content per prompt type."""

    def __init__(self, questions=None, evaluation=None, error=None, delay=0.0, model="gpt-4o-mini"):
        self.questions = {"questions": QUESTIONS} if questions is None else questions
        self.evaluation = evaluation_payload() if evaluation is None else evaluation
        self.error = error
        self.delay = delay
        self.model = model
        self.calls = []
        self.closed = False

    async def complete(self, system_prompt, prompt):
        self.calls.append((system_prompt, prompt))
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        content = self.evaluation if system_prompt == EvaluatorPrompts.SYSTEM_CONTEXT else self.questions
        if content is None:
            raise ProviderError("no canned content")
        if not isinstance(content, str):
            content = json.dumps(content)
        return ProviderReply(content=content, model=self.model)

    async def close(self):
        self.closed = True


class FakeClock:
    def __init__(self, now=1000.0):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def make_gateway():
    def _make(provider=None, timeout_seconds=1.0, seed=7):
        return AIGatewayClient(
            provider=provider or FakeProvider(),
            fallback_engine=FallbackEngine(rng=random.Random(seed)),
            timeout_seconds=timeout_seconds,
        )
    return _make


@pytest.fixture
def make_orchestrator(make_gateway, clock):
    def _make(provider=None, max_requests=5):
        provider = provider or FakeProvider()
        orchestrator = InterviewOrchestrator(
            gateway=make_gateway(provider),
            admission=AdmissionController(max_requests=max_requests, window_seconds=60, clock=clock),
        )
        return orchestrator, provider
    return _make
