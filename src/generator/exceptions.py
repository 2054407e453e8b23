"""Custom exceptions for the generator module."""

from typing import Optional


class GeneratorError(Exception):
    """Base exception for generator errors."""

    pass


class LLMConnectionError(GeneratorError):
    """Failed to connect to LLM provider."""

    pass


class LLMTimeoutError(LLMConnectionError):
    """LLM provider did not answer within the configured timeout."""

    pass


class LLMRateLimitError(GeneratorError):
    """Rate limit exceeded on LLM provider.

    Attributes:
        retry_after: Seconds to wait before retrying, if provided by the API.
    """

    def __init__(self, message: str, retry_after: Optional[float] = None):
        super().__init__(message)
        self.retry_after = retry_after


class LLMResponseError(GeneratorError):
    """LLM provider answered with a non-success status or an error payload.

    Attributes:
        raw_response: The original response body, if any.
    """

    def __init__(self, message: str, raw_response: Optional[str] = None):
        super().__init__(message)
        self.raw_response = raw_response


class LLMAuthenticationError(GeneratorError):
    """Authentication failed with LLM provider."""

    pass


class GenerationError(GeneratorError):
    """A reply could not be generated for a request.

    This is the single failure type surfaced by EmailReplyGenerator. The
    underlying provider exception is chained as ``__cause__``.

    Attributes:
        cause: Message of the underlying failure.
    """

    def __init__(self, cause: str):
        self.cause = cause
        super().__init__(f"Failed to generate reply: {cause}")
