"""Main EmailReplyGenerator class for drafting replies with an LLM."""

import logging
import os
import threading
from typing import Optional

from .adapter import GenerationAdapter
from .exceptions import GenerationError, GeneratorError
from .extractor import extract
from .gemini_adapter import GeminiAdapter
from .models import EmailRequest, GenerationConfig, GenerationMode, ParsedResult
from .openai_adapter import OpenAIAdapter
from .prompts import build_prompt
from .segmenter import segment

logger = logging.getLogger(__name__)

PROVIDERS = {
    "gemini": GeminiAdapter,
    "openai": OpenAIAdapter,
}

CONNECTION_TEST_REQUEST = EmailRequest(
    subject="Test",
    content="This is a test email",
    tone="professional",
)


def create_adapter(provider: Optional[str] = None) -> GenerationAdapter:
    """Create the adapter named by ``provider`` or GENERATION_PROVIDER.

    Args:
        provider: ``gemini`` or ``openai``. Defaults to the
            GENERATION_PROVIDER env var, then ``gemini``.

    Raises:
        ValueError: Unknown provider name.
        LLMAuthenticationError: The provider's API key is missing.
    """
    name = (provider or os.getenv("GENERATION_PROVIDER") or "gemini").strip().lower()
    try:
        adapter_cls = PROVIDERS[name]
    except KeyError:
        raise ValueError(
            f"Unknown generation provider {name!r}; expected one of {sorted(PROVIDERS)}"
        ) from None
    return adapter_cls()


class EmailReplyGenerator:
    """Drafts email replies and a summary using an LLM.

    Each call builds a prompt, sends it to the provider once, recovers the
    text from the response envelope and segments it into a ParsedResult.
    Provider failures surface as a single GenerationError and are never
    retried here. The generator holds no per-request state and can be
    shared between threads; the default adapter is created once under a
    lock.

    Example usage:
        generator = EmailReplyGenerator()  # Uses Gemini by default
        result = generator.generate(EmailRequest(subject="Hi", content="..."))
        print(result.summary)
        print(result.reply)

    With a custom adapter:
        generator = EmailReplyGenerator(adapter=OpenAIAdapter(api_key="..."))
    """

    def __init__(self, adapter: Optional[GenerationAdapter] = None):
        """Initialize the EmailReplyGenerator.

        Args:
            adapter: Provider adapter to use. Defaults to the adapter
                named by GENERATION_PROVIDER (Gemini if unset).
        """
        self._adapter = adapter
        self._adapter_lock = threading.Lock()

    def _get_adapter(self) -> GenerationAdapter:
        """Get provider adapter, creating default if needed (lazy init)."""
        with self._adapter_lock:
            if self._adapter is None:
                self._adapter = create_adapter()
            return self._adapter

    def _log_context(self, mode: GenerationMode) -> dict:
        adapter = self._get_adapter()
        return {"mode": mode.value, "provider": adapter.provider_name, "model": adapter.model_name}

    def _call_provider(self, prompt: str, config: GenerationConfig) -> str:
        try:
            adapter = self._get_adapter()
        except (GeneratorError, ValueError) as e:
            logger.error("Generation provider is not configured: %s", e)
            raise GenerationError(str(e)) from e

        try:
            envelope = adapter.generate(prompt, config)
        except GeneratorError as e:
            logger.error("%s generation call failed: %s", adapter.provider_name, e)
            raise GenerationError(str(e)) from e

        extraction = extract(envelope)
        if extraction.is_error:
            raise GenerationError(f"{adapter.provider_name} API error: {extraction.error}")
        return extraction.text

    def generate(
        self,
        request: EmailRequest,
        mode: GenerationMode = GenerationMode.SINGLE_REPLY,
    ) -> ParsedResult:
        """Generate reply drafts and a summary for an email.

        Args:
            request: Email to reply to.
            mode: One reply or three reply variants.

        Returns:
            ParsedResult with ``mode.reply_count`` replies.

        Raises:
            GenerationError: The provider call failed or returned an error. Also
                raised when the default provider cannot be created.
        """
        prompt = build_prompt(request, mode)
        config = GenerationConfig.for_mode(mode, regenerate=request.regenerate)
        logger.debug("Built %s prompt:\n%s", mode.value, prompt)

        text = self._call_provider(prompt, config)
        logger.debug("Provider text: %s", text[:1000])

        result = segment(text, mode)
        if result.used_fallback:
            logger.warning(
                "Provider response only partially parsed; fallback values used",
                extra=self._log_context(mode),
            )
        else:
            logger.info(
                "Generated %d reply(ies)", len(result.replies),
                extra=self._log_context(mode),
            )
        return result

    def generate_reply(self, request: EmailRequest) -> ParsedResult:
        """Generate a single reply draft."""
        return self.generate(request, GenerationMode.SINGLE_REPLY)

    def generate_replies(self, request: EmailRequest) -> ParsedResult:
        """Generate three reply variants."""
        return self.generate(request, GenerationMode.MULTIPLE_REPLIES)

    def check_connection(self) -> str:
        """Send a fixed test email and return the provider's raw text.

        Raises:
            GenerationError: The provider could not be reached.
        """
        mode = GenerationMode.SINGLE_REPLY
        prompt = build_prompt(CONNECTION_TEST_REQUEST, mode)
        return self._call_provider(prompt, GenerationConfig.for_mode(mode))

    @property
    def adapter(self) -> GenerationAdapter:
        """Access the provider adapter."""
        return self._get_adapter()
