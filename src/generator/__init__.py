"""Email reply generator module.

Builds prompts for an LLM provider and recovers a summary plus one or
three reply drafts from the provider's free-form answer.

Public API:
    - EmailReplyGenerator: Main class for generating replies
    - EmailRequest: Email to reply to, with tone and language
    - GenerationMode: Single reply or three reply variants
    - ParsedResult: Summary and reply drafts
    - build_prompt, extract, extract_text, segment: The pure building blocks
    - GenerationAdapter: Interface for LLM providers (for custom implementations)
    - GeminiAdapter, OpenAIAdapter: Provider implementations

Example:
    from src.generator import EmailReplyGenerator, EmailRequest, GenerationMode

    generator = EmailReplyGenerator()
    result = generator.generate(
        EmailRequest(subject="Invoice", content="Could you resend it?", tone="friendly"),
        GenerationMode.MULTIPLE_REPLIES,
    )
    for reply in result.replies:
        print(reply)
"""

from .adapter import GenerationAdapter
from .email_generator import EmailReplyGenerator, create_adapter
from .exceptions import (
    GenerationError,
    GeneratorError,
    LLMAuthenticationError,
    LLMConnectionError,
    LLMRateLimitError,
    LLMResponseError,
    LLMTimeoutError,
)
from .extractor import extract, extract_text
from .gemini_adapter import GeminiAdapter
from .models import (
    EmailRequest,
    Extraction,
    GenerationConfig,
    GenerationMode,
    ParsedResult,
)
from .openai_adapter import OpenAIAdapter
from .prompts import build_prompt
from .segmenter import segment

__all__ = [
    # Main classes
    "EmailReplyGenerator",
    "GenerationAdapter",
    "GeminiAdapter",
    "OpenAIAdapter",
    "create_adapter",
    # Building blocks
    "build_prompt",
    "extract",
    "extract_text",
    "segment",
    # Models
    "EmailRequest",
    "Extraction",
    "GenerationConfig",
    "GenerationMode",
    "ParsedResult",
    # Exceptions
    "GenerationError",
    "GeneratorError",
    "LLMAuthenticationError",
    "LLMConnectionError",
    "LLMRateLimitError",
    "LLMResponseError",
    "LLMTimeoutError",
]
