"""Data models for the generator module."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

DEFAULT_TONE = "professional"
DEFAULT_LANGUAGE = "en"

FALLBACK_SUMMARY = "Summary not available"
FALLBACK_MULTI_SUMMARY = "Email received and understood."
FILLER_REPLY = "Thank you for your message. I will review and respond shortly."

PARSE_FAILURE_SUMMARY = "Unable to parse summary"
PARSE_FAILURE_REPLIES = (
    FILLER_REPLY,
    "I appreciate you reaching out. I will consider and respond soon.",
    "I've received your email and will follow up soon.",
)

LANGUAGE_NAMES = {
    "en": "English",
    "es": "Spanish",
    "fr": "French",
    "de": "German",
    "it": "Italian",
    "pt": "Portuguese",
    "nl": "Dutch",
    "hi": "Hindi",
    "ja": "Japanese",
    "zh": "Chinese",
    "ko": "Korean",
    "ar": "Arabic",
    "ru": "Russian",
}

_TRUTHY = {"1", "true", "yes", "on"}


def _text(value: Any) -> str:
    if value is None:
        return ""
    return str(value)


def _flag(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return value.strip().lower() in _TRUTHY
    return bool(value)


class GenerationMode(Enum):
    """Selects the prompt template and the segmentation strategy."""

    SINGLE_REPLY = "single"
    MULTIPLE_REPLIES = "multiple"

    @property
    def reply_count(self) -> int:
        """Number of reply variants a result in this mode carries."""
        return 1 if self == GenerationMode.SINGLE_REPLY else 3


@dataclass(frozen=True)
class EmailRequest:
    """An email to reply to, plus the desired reply style.

    Blank tone and language fall back to ``professional`` and ``en``;
    ``None`` subject or content become empty strings.

    Attributes:
        subject: Subject of the original email (may be empty).
        content: Body of the original email.
        tone: Desired reply tone (formal, casual, friendly, ...).
        language: Target language code or name.
        regenerate: Ask the provider for output different from a prior call.
    """

    subject: str = ""
    content: str = ""
    tone: str = DEFAULT_TONE
    language: str = DEFAULT_LANGUAGE
    regenerate: bool = False

    def __post_init__(self) -> None:
        object.__setattr__(self, "subject", _text(self.subject))
        object.__setattr__(self, "content", _text(self.content))
        object.__setattr__(self, "tone", _text(self.tone).strip() or DEFAULT_TONE)
        object.__setattr__(
            self, "language", _text(self.language).strip() or DEFAULT_LANGUAGE
        )
        object.__setattr__(self, "regenerate", _flag(self.regenerate))

    @property
    def language_name(self) -> str:
        """Human-readable language name used inside prompts."""
        return LANGUAGE_NAMES.get(self.language.lower(), self.language)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "EmailRequest":
        """Build a request from a caller-facing mapping.

        Args:
            data: Mapping with subject, content (or emailContent), tone,
                language and regenerate keys. All keys are optional.

        Returns:
            EmailRequest instance.
        """
        content = data.get("content")
        if content is None:
            content = data.get("emailContent")
        return cls(
            subject=data.get("subject"),
            content=content,
            tone=data.get("tone"),
            language=data.get("language"),
            regenerate=data.get("regenerate", False),
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialize request to dictionary."""
        return {
            "subject": self.subject,
            "content": self.content,
            "tone": self.tone,
            "language": self.language,
            "regenerate": self.regenerate,
        }


@dataclass(frozen=True)
class GenerationConfig:
    """Sampling parameters sent with every generation call."""

    temperature: float
    max_output_tokens: int
    top_p: float
    top_k: int

    @classmethod
    def for_mode(cls, mode: GenerationMode, regenerate: bool = False) -> "GenerationConfig":
        """Return the fixed configuration for a mode.

        Regeneration raises the temperature to encourage variation.
        """
        if mode == GenerationMode.MULTIPLE_REPLIES:
            return cls(
                temperature=0.9 if regenerate else 0.75,
                max_output_tokens=2048,
                top_p=0.95,
                top_k=40,
            )
        return cls(
            temperature=0.9 if regenerate else 0.7,
            max_output_tokens=1024,
            top_p=0.8,
            top_k=40,
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the provider's ``generationConfig`` body."""
        return {
            "temperature": self.temperature,
            "maxOutputTokens": self.max_output_tokens,
            "topP": self.top_p,
            "topK": self.top_k,
        }


@dataclass(frozen=True)
class Extraction:
    """Candidate text recovered from a provider envelope.

    Attributes:
        text: Recovered text, an ``API Error: ...`` string, or the raw envelope.
        source: Which lookup produced the text (candidates, candidate_parts,
            output, raw, error or empty).
        error: Provider error message when the envelope carried one.
    """

    text: str
    source: str
    error: Optional[str] = None

    @property
    def is_error(self) -> bool:
        return self.error is not None


@dataclass(frozen=True)
class ParsedResult:
    """Structured reply drafts recovered from provider text.

    Attributes:
        summary: Short summary of the original email, never empty.
        replies: Exactly ``mode.reply_count`` reply drafts.
        mode: Mode the text was segmented with.
        used_fallback: True if any fallback value was substituted.
        raw_text: The text that was segmented, for debugging.
    """

    summary: str
    replies: tuple[str, ...]
    mode: GenerationMode = GenerationMode.SINGLE_REPLY
    used_fallback: bool = False
    raw_text: str = field(default="", repr=False)

    @property
    def reply(self) -> str:
        """First (or only) reply draft."""
        return self.replies[0]

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the caller-facing response shape."""
        if self.mode == GenerationMode.SINGLE_REPLY:
            return {"summary": self.summary, "reply": self.reply}
        return {"summary": self.summary, "replies": list(self.replies)}
