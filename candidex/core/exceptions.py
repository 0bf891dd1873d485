"""
Error types raised by the Candidex core.

Provider and validation errors are normally absorbed by the AI gateway and
turned into fallback results; the remaining errors reach the API layer and
are mapped to distinct HTTP responses there.
"""


class CandidexError(Exception):
    """Base class for all Candidex errors."""
    pass


class ConfigurationError(CandidexError):
    """Raised when required configuration (e.g. the provider key) is missing."""
    pass


class ProviderError(CandidexError):
    """Raised when the AI provider call fails or returns no usable content."""
    pass


class ResponseValidationError(CandidexError):
    """Raised when a provider payload does not match the expected shape."""
    pass


class PerQuestionMismatchError(ResponseValidationError):
    """Raised when per-question scores cannot be aligned with the questions."""

    def __init__(self, expected: int, received: int):
        super().__init__(
            f"perQuestionEvaluations must have exactly {expected} items, got {received}"
        )
        self.expected = expected
        self.received = received


class AdmissionRejectedError(CandidexError):
    """Raised when a user has exhausted their AI request budget."""

    def __init__(self, max_requests: int, retry_after: int):
        super().__init__(
            f"Rate limit exceeded. Maximum {max_requests} AI requests per minute. "
            "Please try again later."
        )
        self.max_requests = max_requests
        self.retry_after = retry_after


class SessionNotFoundError(CandidexError):
    """Raised when an interview session does not exist for the caller."""
    pass


class InvalidSubmissionError(CandidexError):
    """Raised when interview input fails validation."""
    pass
