"""
AI Gateway for Candidex

Handles all AI-powered operations:
- Question generation
- Answer evaluation

Every call makes a single provider attempt raced against a hard timeout.
Provider output is validated by the response normalizer; on timeout,
provider error or invalid output the deterministic fallback engine is used
instead, so callers always receive a complete result.

Integrated with Langfuse for observability and tracing when configured.
"""

import asyncio
import logging
from typing import Any, NamedTuple

import httpx

from candidex.config.settings import Settings, get_settings
from candidex.core.exceptions import (
    ConfigurationError,
    PerQuestionMismatchError,
    ProviderError,
)
from candidex.core.fallback_engine import FallbackEngine
from candidex.core.response_normalizer import normalize_evaluation, normalize_questions
from candidex.models.evaluation import Evaluation, GatewayResult
from candidex.models.interview import QuestionSet
from candidex.prompts.evaluator import EvaluatorPrompts
from candidex.prompts.interviewer import InterviewerPrompts

logger = logging.getLogger(__name__)

# Langfuse imports
try:
    from langfuse import Langfuse
    LANGFUSE_AVAILABLE = True
except ImportError:
    LANGFUSE_AVAILABLE = False
    Langfuse = None
    logger.info("Langfuse not installed. Tracing disabled.")


DEFAULT_TIMEOUT_SECONDS = 9.0


class ProviderReply(NamedTuple):
    """Raw text returned by the provider and the model that produced it."""

    content: str
    model: str


def build_langfuse(settings: Settings) -> Any:
    """Create a Langfuse client if tracing is enabled and configured."""
    if not (LANGFUSE_AVAILABLE and settings.langfuse_enabled):
        return None
    if not (settings.langfuse_secret_key and settings.langfuse_public_key):
        logger.info("Langfuse keys not configured, tracing disabled")
        return None
    try:
        langfuse = Langfuse(
            secret_key=settings.langfuse_secret_key,
            public_key=settings.langfuse_public_key,
            host=settings.langfuse_base_url,
        )
        logger.info("Langfuse initialized for LLM observability")
        return langfuse
    except Exception as e:
        logger.warning(f"Failed to initialize Langfuse: {e}")
        return None


class ProviderClient:
    """
    Thin client for an OpenAI-compatible chat completions API.

    Construct once per process and share; the underlying httpx client keeps
    a connection pool.
    """

    def __init__(self, settings: Settings | None = None):
        """
        Initialize the provider client.

        Raises:
            ConfigurationError: If no API key is configured
        """
        self.settings = settings or get_settings()

        if not self.settings.openai_api_key:
            raise ConfigurationError(
                "OPENAI_API_KEY is not set in environment variables. Please check your .env file."
            )

        self.model = self.settings.openai_model
        self.client = httpx.AsyncClient(
            base_url=self.settings.openai_base_url.rstrip("/") + "/",
            headers={
                "Authorization": f"Bearer {self.settings.openai_api_key}",
                "Content-Type": "application/json",
            },
            # The gateway enforces the real deadline; this only bounds stragglers
            timeout=self.settings.provider_timeout_seconds * 2,
        )

    async def close(self):
        """Close the HTTP client."""
        await self.client.aclose()

    def _extract_content(self, result: dict) -> str:
        """Extract text content from API response, handling list/dict formats."""
        choices = result.get("choices") or [{}]
        content = choices[0].get("message", {}).get("content", "")

        # Handle case where content is a list (multi-part response)
        if isinstance(content, list):
            text_parts = []
            for part in content:
                if isinstance(part, str):
                    text_parts.append(part)
                elif isinstance(part, dict) and "text" in part:
                    text_parts.append(part["text"])
            content = "".join(text_parts)

        return content if isinstance(content, str) else str(content or "")

    async def complete(self, system_prompt: str, prompt: str) -> ProviderReply:
        """
        Send one chat completion request.

        Args:
            system_prompt: System instructions
            prompt: User prompt

        Returns:
            ProviderReply with the text content and model name

        Raises:
            ProviderError: On network errors, non-2xx status or empty content
        """
        payload = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": prompt},
            ],
            "response_format": {"type": "json_object"},
            "temperature": self.settings.provider_temperature,
        }

        try:
            response = await self.client.post("chat/completions", json=payload)
            response.raise_for_status()
            result = response.json()
        except httpx.HTTPError as e:
            raise ProviderError(f"Provider API error: {e}") from e
        except ValueError as e:
            raise ProviderError(f"Provider returned malformed JSON: {e}") from e

        content = self._extract_content(result) if isinstance(result, dict) else ""
        if not content.strip():
            raise ProviderError("No response content from provider")

        return ProviderReply(content=content, model=result.get("model") or self.model)


class AIGatewayClient:
    """
    Resilient entry point for AI question generation and evaluation.

    Neither operation raises for provider or validation failures; both
    return a GatewayResult whose ``used_fallback`` flag tells the caller
    which path produced the payload. The single exception is a per-question
    count mismatch in an evaluation, which is re-raised.
    """

    def __init__(
        self,
        provider: Any,  # ProviderClient
        fallback_engine: FallbackEngine | None = None,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        langfuse: Any = None,
    ):
        """
        Initialize the gateway.

        Args:
            provider: Object exposing ``async complete(system_prompt, prompt)``
            fallback_engine: Heuristic engine used when the provider path fails
            timeout_seconds: Hard deadline for each provider call
            langfuse: Optional Langfuse client for tracing
        """
        self.provider = provider
        self.fallback_engine = fallback_engine or FallbackEngine()
        self.timeout_seconds = timeout_seconds
        self.langfuse = langfuse

        # Prompt templates
        self.interviewer_prompts = InterviewerPrompts()
        self.evaluator_prompts = EvaluatorPrompts()

        # Provider calls that lost the race but have not settled yet
        self._abandoned: set[asyncio.Future] = set()

    async def close(self):
        """Close the provider client and flush Langfuse."""
        if hasattr(self.provider, "close"):
            await self.provider.close()
        if self.langfuse:
            try:
                self.langfuse.flush()
            except Exception as e:
                logger.warning(f"Failed to flush Langfuse: {e}")

    # =========================================================================
    # PROVIDER RACE
    # =========================================================================

    async def _call_with_timeout(self, system_prompt: str, prompt: str) -> ProviderReply:
        """
        Race one provider call against the timeout.

        The losing provider call is not cancelled; it is left to finish on
        its own and whatever it produces is discarded.
        """
        task = asyncio.ensure_future(self.provider.complete(system_prompt, prompt))

        try:
            done, _ = await asyncio.wait({task}, timeout=self.timeout_seconds)
        except asyncio.CancelledError:
            self._abandon(task)
            raise

        if task not in done:
            self._abandon(task)
            raise ProviderError(f"Request timeout after {int(self.timeout_seconds * 1000)}ms")

        return task.result()

    def _abandon(self, task: asyncio.Future) -> None:
        self._abandoned.add(task)
        task.add_done_callback(self._discard_late_result)

    def _discard_late_result(self, task: asyncio.Future) -> None:
        self._abandoned.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error:
            logger.debug(f"Late provider call failed after timeout: {error}")
        else:
            logger.debug("Discarded late provider reply received after timeout")

    # =========================================================================
    # TRACING
    # =========================================================================

    def _start_span(self, name: str, metadata: dict[str, Any]) -> Any:
        if not self.langfuse:
            return None
        try:
            return self.langfuse.start_span(name=name, metadata=metadata)
        except Exception as lf_err:
            logger.warning(f"Langfuse span start failed: {lf_err}")
            return None

    def _end_span(self, span: Any, output: dict[str, Any]) -> None:
        if not span:
            return
        try:
            span.update(output=output)
            span.end()
        except Exception as lf_err:
            logger.warning(f"Langfuse span end failed: {lf_err}")

    # =========================================================================
    # QUESTION GENERATION
    # =========================================================================

    async def generate_questions(self, role: str, difficulty: str) -> GatewayResult[QuestionSet]:
        """
        Generate the five questions for a new interview.

        Args:
            role: Free-text job role
            difficulty: easy, medium or hard (case-insensitive)

        Returns:
            GatewayResult wrapping a QuestionSet
        """
        difficulty = difficulty.strip().lower()
        span = self._start_span("generate_questions", {"role": role, "difficulty": difficulty})

        prompt = self.interviewer_prompts.generate_questions_prompt(role, difficulty)

        try:
            reply = await self._call_with_timeout(self.interviewer_prompts.SYSTEM_CONTEXT, prompt)
            question_set = normalize_questions(reply.content)
        except Exception as e:
            logger.warning(
                f"[FALLBACK] Question generation failed for {role}/{difficulty}: "
                f"{type(e).__name__}: {e}. Using fallback questions."
            )
            self._end_span(span, {"fallback_used": True, "reason": type(e).__name__})
            return GatewayResult[QuestionSet](
                payload=self.fallback_engine.fallback_questions(role, difficulty),
                used_fallback=True,
            )

        logger.info(f"Generated {len(question_set)} questions for {role}/{difficulty} via {reply.model}")
        self._end_span(span, {"fallback_used": False, "model": reply.model})

        return GatewayResult[QuestionSet](payload=question_set, used_fallback=False, model=reply.model)

    # =========================================================================
    # EVALUATION
    # =========================================================================

    async def evaluate(
        self,
        role: str,
        difficulty: str,
        questions: list[str],
        answers: list[str]
    ) -> GatewayResult[Evaluation]:
        """
        Evaluate a full set of answers.

        Args:
            role: Free-text job role
            difficulty: easy, medium or hard (case-insensitive)
            questions: The questions that were asked
            answers: Candidate answers, positionally aligned with questions

        Returns:
            GatewayResult wrapping an Evaluation

        Raises:
            PerQuestionMismatchError: If the provider's per-question scores
                cannot be aligned with the questions
        """
        difficulty = difficulty.strip().lower()
        span = self._start_span(
            "evaluate",
            {"role": role, "difficulty": difficulty, "question_count": len(questions)},
        )

        prompt = self.evaluator_prompts.generate_evaluation_prompt(role, difficulty, questions, answers)

        try:
            reply = await self._call_with_timeout(self.evaluator_prompts.SYSTEM_CONTEXT, prompt)
            evaluation = normalize_evaluation(reply.content, len(questions))
        except PerQuestionMismatchError as e:
            logger.error(f"Evaluation for {role}/{difficulty} could not be aligned with questions: {e}")
            self._end_span(span, {"fallback_used": False, "error": "per_question_mismatch"})
            raise
        except Exception as e:
            logger.warning(
                f"[FALLBACK] Evaluation failed for {role}/{difficulty}: "
                f"{type(e).__name__}: {e}. Using fallback evaluation."
            )
            self._end_span(span, {"fallback_used": True, "reason": type(e).__name__})
            return GatewayResult[Evaluation](
                payload=self.fallback_engine.fallback_evaluation(answers),
                used_fallback=True,
            )

        logger.info(
            f"Evaluation complete for {role}/{difficulty}: "
            f"score={evaluation.overall_score} via {reply.model}"
        )
        self._end_span(span, {"fallback_used": False, "model": reply.model})

        # Log score to Langfuse
        if self.langfuse:
            try:
                self.langfuse.create_score(
                    name="overall_score",
                    value=evaluation.overall_score,
                    comment=f"Role: {role}, Difficulty: {difficulty}",
                )
            except Exception as lf_err:
                logger.warning(f"Langfuse score failed: {lf_err}")

        return GatewayResult[Evaluation](payload=evaluation, used_fallback=False, model=reply.model)
