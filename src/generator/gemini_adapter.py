"""Google Gemini REST adapter implementation."""

import logging
import os
import threading
from typing import Optional

import httpx

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


def _retry_after(response: httpx.Response) -> Optional[float]:
    header = response.headers.get("retry-after")
    if not header:
        return None
    try:
        return float(header)
    except ValueError:
        return None


class GeminiAdapter(GenerationAdapter):
    """Generation adapter for the Gemini ``generateContent`` REST endpoint.

    Uses lazy initialization for the HTTP client. Every call carries an
    explicit timeout, separate from whatever timeout the caller applies to
    its own request.

    Example usage:
        adapter = GeminiAdapter()  # Uses GEMINI_API_KEY env var
        adapter = GeminiAdapter(api_key="...", model="gemini-2.5-pro", timeout=60)
    """

    DEFAULT_MODEL = "gemini-2.5-flash"
    DEFAULT_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"
    DEFAULT_TIMEOUT = 30.0

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        """Initialize the Gemini adapter.

        Args:
            api_key: Gemini API key. Defaults to GEMINI_API_KEY env var.
            model: Model to use. Defaults to GEMINI_MODEL env var or gemini-2.5-flash.
            base_url: API root. Defaults to GEMINI_API_URL env var.
            timeout: Seconds to wait for the provider. Defaults to
                GEMINI_TIMEOUT_SECONDS env var or 30.
            transport: Optional httpx transport, mainly for tests.

        Raises:
            LLMAuthenticationError: If no API key is available.
            ValueError: If the timeout is not a number.
        """
        self._api_key = api_key or os.getenv("GEMINI_API_KEY")
        if not self._api_key:
            raise LLMAuthenticationError(
                "Gemini API key not provided. Set GEMINI_API_KEY environment variable "
                "or pass api_key parameter."
            )
        self._model = model or os.getenv("GEMINI_MODEL") or self.DEFAULT_MODEL
        self._base_url = (base_url or os.getenv("GEMINI_API_URL") or self.DEFAULT_BASE_URL).rstrip("/")
        raw_timeout = (
            timeout if timeout is not None
            else os.getenv("GEMINI_TIMEOUT_SECONDS", self.DEFAULT_TIMEOUT)
        )
        try:
            self._timeout = float(raw_timeout)
        except (TypeError, ValueError) as e:
            raise ValueError(f"Invalid Gemini timeout: {raw_timeout!r}") from e
        self._transport = transport
        self._client: Optional[httpx.Client] = None
        self._client_lock = threading.Lock()

    def _get_client(self) -> httpx.Client:
        """Get or create the HTTP client (lazy initialization)."""
        with self._client_lock:
            if self._client is None:
                self._client = httpx.Client(
                    base_url=self._base_url,
                    timeout=self._timeout,
                    headers={"x-goog-api-key": self._api_key},
                    transport=self._transport,
                )
            return self._client

    def generate(self, prompt: str, config: GenerationConfig) -> str:
        """Send a prompt to Gemini and return the raw JSON body.

        Args:
            prompt: Instruction text.
            config: Sampling parameters.

        Returns:
            The response body as text.

        Raises:
            LLMTimeoutError: No answer within the timeout.
            LLMConnectionError: Failed to connect to Gemini.
            LLMRateLimitError: Rate limit exceeded.
            LLMAuthenticationError: Invalid API key.
            LLMResponseError: Any other non-success status.
        """
        client = self._get_client()
        body = {
            "contents": [{"parts": [{"text": prompt}]}],
            "generationConfig": config.to_dict(),
        }
        logger.debug(
            "Sending request to Gemini model=%s temperature=%s",
            self._model, config.temperature,
        )

        try:
            response = client.post(f"/models/{self._model}:generateContent", json=body)
            response.raise_for_status()
        except httpx.TimeoutException as e:
            raise LLMTimeoutError(
                f"Gemini did not respond within {self._timeout:g}s: {e}"
            ) from e
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            if status in (401, 403):
                raise LLMAuthenticationError(f"Gemini authentication failed: HTTP {status}") from e
            if status == 429:
                raise LLMRateLimitError(
                    f"Gemini rate limit exceeded: HTTP {status}", _retry_after(e.response)
                ) from e
            raise LLMResponseError(
                f"Gemini API error: HTTP {status}", raw_response=e.response.text
            ) from e
        except httpx.TransportError as e:
            raise LLMConnectionError(f"Failed to connect to Gemini: {e}") from e
        except httpx.HTTPError as e:
            # Undecodable bodies, redirect loops and the like
            raise LLMConnectionError(f"Gemini request failed: {e}") from e

        logger.debug("Gemini response received (%d bytes)", len(response.content))
        return response.text

    def close(self) -> None:
        """Close the underlying HTTP client, if one was created."""
        with self._client_lock:
            if self._client is not None:
                self._client.close()
                self._client = None

    @property
    def model_name(self) -> str:
        """Return the model name."""
        return self._model

    @property
    def provider_name(self) -> str:
        """Return the provider name."""
        return "Gemini"
