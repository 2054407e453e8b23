"""Abstract interface for generation provider adapters."""

from abc import ABC, abstractmethod

from .models import GenerationConfig


class GenerationAdapter(ABC):
    """Abstract base class for LLM provider adapters.

    Implementations should handle:
    - API authentication
    - Request formatting for the specific provider
    - An explicit timeout on every call
    - Error handling and translation to custom exceptions

    The adapter returns the provider's response envelope untouched. Text
    recovery is the job of the extractor, so an adapter never needs to
    understand the envelope format beyond detecting transport failures.

    Example usage:
        adapter = GeminiAdapter(api_key="...")
        envelope = adapter.generate(prompt, GenerationConfig.for_mode(mode))
    """

    @abstractmethod
    def generate(self, prompt: str, config: GenerationConfig) -> str:
        """Send a prompt to the provider and return the raw response body.

        Args:
            prompt: Instruction text.
            config: Sampling parameters.

        Returns:
            The provider's response envelope (usually JSON text).

        Raises:
            LLMConnectionError: Failed to connect to provider.
            LLMTimeoutError: Provider did not answer in time.
            LLMRateLimitError: Rate limit exceeded.
            LLMAuthenticationError: Invalid credentials.
            LLMResponseError: Non-success response from provider.
        """
        pass

    @property
    @abstractmethod
    def model_name(self) -> str:
        """Return the name of the model being used."""
        pass

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Return the name of the LLM provider."""
        pass
