"""OpenAI GPT adapter implementation."""

import json
import logging
import os
import threading
from typing import Optional

from openai import (
    APIConnectionError,
    APIError,
    APITimeoutError,
    AuthenticationError,
    OpenAI,
    RateLimitError,
)

from .adapter import GenerationAdapter
from .exceptions import (
    LLMAuthenticationError,
    LLMConnectionError,
    LLMRateLimitError,
    LLMResponseError,
    LLMTimeoutError,
)
from .models import GenerationConfig

logger = logging.getLogger(__name__)


class OpenAIAdapter(GenerationAdapter):
    """Generation adapter for OpenAI chat models.

    The completion text is wrapped in an ``{"output": ...}`` envelope so it
    goes through the same extractor as every other provider. ``top_k`` has
    no OpenAI counterpart and is not sent.

    Example usage:
        adapter = OpenAIAdapter()  # Uses OPENAI_API_KEY env var
        adapter = OpenAIAdapter(api_key="sk-...", model="gpt-4o")
    """

    DEFAULT_MODEL = "gpt-4o-mini"
    DEFAULT_TIMEOUT = 30.0

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        organization: Optional[str] = None,
        timeout: Optional[float] = None,
    ):
        """Initialize the OpenAI adapter.

        Args:
            api_key: OpenAI API key. Defaults to OPENAI_API_KEY env var.
            model: Model to use. Defaults to OPENAI_MODEL env var or gpt-4o-mini.
            organization: Optional OpenAI organization ID.
            timeout: Seconds to wait for the provider. Defaults to
                OPENAI_TIMEOUT_SECONDS env var or 30.

        Raises:
            LLMAuthenticationError: If no API key is available.
            ValueError: If the timeout is not a number.
        """
        self._api_key = api_key or os.getenv("OPENAI_API_KEY")
        if not self._api_key:
            raise LLMAuthenticationError(
                "OpenAI API key not provided. Set OPENAI_API_KEY environment variable "
                "or pass api_key parameter."
            )
        self._model = model or os.getenv("OPENAI_MODEL") or self.DEFAULT_MODEL
        self._organization = organization
        raw_timeout = (
            timeout if timeout is not None
            else os.getenv("OPENAI_TIMEOUT_SECONDS", self.DEFAULT_TIMEOUT)
        )
        try:
            self._timeout = float(raw_timeout)
        except (TypeError, ValueError) as e:
            raise ValueError(f"Invalid OpenAI timeout: {raw_timeout!r}") from e
        self._client: Optional[OpenAI] = None
        self._client_lock = threading.Lock()

    def _get_client(self) -> OpenAI:
        """Get or create OpenAI client (lazy initialization)."""
        with self._client_lock:
            if self._client is None:
                self._client = OpenAI(
                    api_key=self._api_key,
                    organization=self._organization,
                    timeout=self._timeout,
                    max_retries=0,
                )
            return self._client

    def generate(self, prompt: str, config: GenerationConfig) -> str:
        """Send a prompt to OpenAI and return an ``output`` envelope.

        Args:
            prompt: Instruction text.
            config: Sampling parameters.

        Returns:
            JSON text of the form ``{"output": "<completion>"}``.

        Raises:
            LLMTimeoutError: No answer within the timeout.
            LLMConnectionError: Failed to connect to OpenAI.
            LLMRateLimitError: Rate limit exceeded.
            LLMAuthenticationError: Invalid API key.
            LLMResponseError: Invalid response from OpenAI.
        """
        client = self._get_client()
        logger.debug(
            "Sending request to OpenAI model=%s temperature=%s",
            self._model, config.temperature,
        )

        try:
            response = client.chat.completions.create(
                model=self._model,
                messages=[{"role": "user", "content": prompt}],
                temperature=config.temperature,
                max_tokens=config.max_output_tokens,
                top_p=config.top_p,
            )
        except AuthenticationError as e:
            raise LLMAuthenticationError(f"OpenAI authentication failed: {e}") from e
        except RateLimitError as e:
            retry_after = None
            if getattr(e, "response", None) is not None:
                retry_header = e.response.headers.get("retry-after")
                if retry_header:
                    try:
                        retry_after = float(retry_header)
                    except ValueError:
                        retry_after = None
            raise LLMRateLimitError(
                f"OpenAI rate limit exceeded: {e}", retry_after
            ) from e
        except APITimeoutError as e:
            raise LLMTimeoutError(
                f"OpenAI did not respond within {self._timeout:g}s: {e}"
            ) from e
        except APIConnectionError as e:
            raise LLMConnectionError(f"Failed to connect to OpenAI: {e}") from e
        except APIError as e:
            raise LLMResponseError(f"OpenAI API error: {e}") from e

        if not response.choices:
            raise LLMResponseError("No choices in OpenAI response")

        content = response.choices[0].message.content
        if content is None:
            raise LLMResponseError("Empty content in OpenAI response")

        if response.usage:
            logger.debug(
                "OpenAI response received (prompt=%d, completion=%d tokens)",
                response.usage.prompt_tokens, response.usage.completion_tokens,
            )

        return json.dumps({"output": content})

    @property
    def model_name(self) -> str:
        """Return the model name."""
        return self._model

    @property
    def provider_name(self) -> str:
        """Return the provider name."""
        return "OpenAI"
