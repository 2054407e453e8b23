"""Recovers the generated text from a provider response envelope."""

import json
import logging
from typing import Any, Callable, Optional

from .models import Extraction

logger = logging.getLogger(__name__)

API_ERROR_PREFIX = "API Error: "


def _first(value: Any) -> Any:
    if isinstance(value, list) and value:
        return value[0]
    return None


def _first_candidate(root: dict) -> dict:
    candidate = _first(root.get("candidates"))
    return candidate if isinstance(candidate, dict) else {}


def _candidate_text(root: dict) -> Optional[str]:
    """candidates[0].content.parts[0].text"""
    content = _first_candidate(root).get("content")
    if not isinstance(content, dict):
        return None
    part = _first(content.get("parts"))
    if isinstance(part, dict) and isinstance(part.get("text"), str):
        return part["text"]
    return None


def _candidate_parts_text(root: dict) -> Optional[str]:
    """First non-thought text part, or a text field on the candidate itself."""
    candidate = _first_candidate(root)
    content = candidate.get("content")
    parts = content.get("parts") if isinstance(content, dict) else None
    for part in parts if isinstance(parts, list) else []:
        if isinstance(part, dict) and not part.get("thought") and isinstance(part.get("text"), str):
            return part["text"]
    for key in ("text", "output"):
        if isinstance(candidate.get(key), str):
            return candidate[key]
    return None


def _output_text(root: dict) -> Optional[str]:
    """Top-level ``output`` field."""
    output = root.get("output")
    return output if isinstance(output, str) else None


# Tried in order; the first lookup that resolves wins.
_LOOKUPS: tuple[tuple[str, Callable[[dict], Optional[str]]], ...] = (
    ("candidates", _candidate_text),
    ("candidate_parts", _candidate_parts_text),
    ("output", _output_text),
)


def _error_message(root: dict) -> Optional[str]:
    error = root.get("error")
    if error is not None:
        if isinstance(error, dict):
            return str(error.get("message") or error.get("status") or "unknown error")
        return str(error)

    if not root.get("candidates"):
        feedback = root.get("promptFeedback")
        if isinstance(feedback, dict) and feedback.get("blockReason"):
            return f"prompt blocked ({feedback['blockReason']})"
    return None


def extract(envelope: Optional[str]) -> Extraction:
    """Recover candidate text from a provider envelope.

    Never raises. An envelope that is not JSON, or in which no lookup
    resolves, is returned unchanged so that segmentation can still work
    on it.

    Args:
        envelope: Raw response body from the provider.

    Returns:
        Extraction holding the trimmed text and where it came from.
    """
    if envelope is None or not envelope.strip():
        return Extraction(text="", source="empty")

    try:
        root = json.loads(envelope)
    except (ValueError, RecursionError) as e:
        logger.warning("Unable to parse provider response as JSON, using raw text: %s", e)
        logger.debug("Raw response that failed to parse: %s", envelope[:1000])
        return Extraction(text=envelope, source="raw")

    if not isinstance(root, dict):
        return Extraction(text=envelope, source="raw")

    message = _error_message(root)
    if message is not None:
        logger.error("Provider returned an error: %s", message)
        return Extraction(text=API_ERROR_PREFIX + message, source="error", error=message)

    for source, lookup in _LOOKUPS:
        text = lookup(root)
        if text is not None:
            return Extraction(text=text.strip(), source=source)

    logger.warning("No text found in provider response, using raw envelope")
    return Extraction(text=envelope, source="raw")


def extract_text(envelope: Optional[str]) -> str:
    """Return only the text of :func:`extract`."""
    return extract(envelope).text
