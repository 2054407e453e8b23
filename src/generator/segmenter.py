"""Splits free-form provider text into a summary and reply drafts.

Providers are asked for labeled sections but do not always honor the
format: labels go missing, sections come back reordered, and newer models
wrap labels in markdown emphasis. Segmentation is purely syntactic and
always produces a usable ParsedResult.
"""

import logging
import re
from enum import Enum
from typing import Callable, Optional

from .models import (
    FALLBACK_MULTI_SUMMARY,
    FALLBACK_SUMMARY,
    FILLER_REPLY,
    PARSE_FAILURE_REPLIES,
    PARSE_FAILURE_SUMMARY,
    GenerationMode,
    ParsedResult,
)

logger = logging.getLogger(__name__)

Split = tuple[str, str]

_MARKUP = "*#"

_REPLY_MARKER = re.compile(r"reply:", re.IGNORECASE)
_SUMMARY_MARKER = re.compile(r"summary:", re.IGNORECASE)
_SUMMARY_LABEL = re.compile(r"^[\s*#]*(?:1[.)])?[\s*#]*summary\s*:", re.IGNORECASE)
_SUMMARY_ENUMERATOR = re.compile(r"^1[.)]")
_HEADER_LINE = re.compile(r"^[ \t*]*(?:subject|to|from):.*(?:\n|$)", re.IGNORECASE | re.MULTILINE)

# (marker, is_label). Label markers are dropped from the reply text,
# conversational ones ("Then, ...") belong to the reply itself.
ALTERNATE_REPLY_MARKERS: tuple[tuple[str, bool], ...] = (
    ("2)", True),
    ("2.", True),
    ("reply:", True),
    ("response:", True),
    ("then,", False),
    ("second,", False),
)

_SUMMARY_LINE = re.compile(r"^summary:(.*)$", re.IGNORECASE)
_REPLY_LINE = re.compile(r"^reply\s*[123]:(.*)$", re.IGNORECASE)


def _tidy(text: str) -> str:
    return text.strip().strip(_MARKUP).strip()


def _split_on_reply_marker(text: str) -> Optional[Split]:
    match = _REPLY_MARKER.search(text)
    if match is None:
        return None
    return text[: match.start()], text[match.end():]


def _split_on_alternate_marker(text: str) -> Optional[Split]:
    if _SUMMARY_MARKER.search(text) is None:
        return None
    # Marker priority decides, not position in the text.
    for marker, is_label in ALTERNATE_REPLY_MARKERS:
        match = re.search(re.escape(marker), text, re.IGNORECASE)
        if match is not None:
            reply_start = match.end() if is_label else match.start()
            return text[: match.start()], text[reply_start:]
    return None


def _split_on_paragraph(text: str) -> Optional[Split]:
    parts = text.split("\n\n", 1)
    if len(parts) < 2:
        return None
    return parts[0], parts[1]


_SINGLE_REPLY_ATTEMPTS: tuple[Callable[[str], Optional[Split]], ...] = (
    _split_on_reply_marker,
    _split_on_alternate_marker,
    _split_on_paragraph,
)


def _clean_summary(candidate: str) -> str:
    summary = _SUMMARY_LABEL.sub("", candidate, count=1).strip()
    summary = _SUMMARY_ENUMERATOR.sub("", _tidy(summary), count=1)
    return _tidy(summary)


def _clean_reply(candidate: str) -> str:
    """Drop stray header lines the provider sometimes includes."""
    return _tidy(_HEADER_LINE.sub("", candidate))


def segment_single(text: str) -> ParsedResult:
    """Split text into one summary and one reply.

    Args:
        text: Candidate text recovered from the provider.

    Returns:
        ParsedResult with exactly one reply.
    """
    text = (text or "").replace("\r\n", "\n")
    summary, reply = "", ""
    for attempt in _SINGLE_REPLY_ATTEMPTS:
        split = attempt(text)
        if split is not None:
            logger.debug("Single reply split with %s", attempt.__name__)
            summary, reply = _clean_summary(split[0]), _clean_reply(split[1])
            break

    used_fallback = False
    if not summary:
        summary = FALLBACK_SUMMARY
        used_fallback = True
    if not reply:
        reply = text.strip() or FILLER_REPLY
        used_fallback = True

    return ParsedResult(
        summary=summary,
        replies=(reply,),
        mode=GenerationMode.SINGLE_REPLY,
        used_fallback=used_fallback,
        raw_text=text,
    )


class _State(Enum):
    IDLE = "idle"
    IN_SUMMARY = "in_summary"
    IN_REPLY = "in_reply"


def segment_multiple(text: str) -> ParsedResult:
    """Split text into a summary and exactly three reply variants.

    Lines are scanned in order. ``SUMMARY:`` and ``REPLY n:`` lines open a
    section; other lines extend the open section and are dropped before
    the first one.

    Args:
        text: Candidate text recovered from the provider.

    Returns:
        ParsedResult with three replies, padded with a filler reply or
        truncated as needed.
    """
    text = text or ""
    state = _State.IDLE
    summary_lines: list[str] = []
    current: list[str] = []
    replies: list[str] = []

    for raw_line in text.splitlines():
        line = raw_line.strip()
        bare = line.lstrip(_MARKUP).strip()

        summary_match = _SUMMARY_LINE.match(bare)
        reply_match = None if summary_match else _REPLY_LINE.match(bare)
        if summary_match or reply_match:
            if state == _State.IN_REPLY and current:
                replies.append(" ".join(current))
            remainder = _tidy((summary_match or reply_match).group(1))
            if summary_match:
                state = _State.IN_SUMMARY
                summary_lines = [remainder] if remainder else []
                current = []
            else:
                state = _State.IN_REPLY
                current = [remainder] if remainder else []
            continue

        if not line:
            continue
        if state == _State.IN_REPLY:
            current.append(line)
        elif state == _State.IN_SUMMARY:
            summary_lines.append(line)

    if state == _State.IN_REPLY and current:
        replies.append(" ".join(current))

    used_fallback = len(replies) < 3
    if len(replies) > 3:
        logger.debug("Dropping %d extra reply sections", len(replies) - 3)
    replies = replies[:3] + [FILLER_REPLY] * (3 - len(replies))

    summary = " ".join(summary_lines)
    if not summary:
        summary = FALLBACK_MULTI_SUMMARY
        used_fallback = True

    return ParsedResult(
        summary=summary,
        replies=tuple(replies),
        mode=GenerationMode.MULTIPLE_REPLIES,
        used_fallback=used_fallback,
        raw_text=text,
    )


def segment(text: str, mode: GenerationMode) -> ParsedResult:
    """Segment provider text for the given mode. Never raises.

    Args:
        text: Candidate text recovered from the provider.
        mode: Mode the prompt was built for.

    Returns:
        ParsedResult. If segmentation fails unexpectedly, a generic
        result with ``used_fallback`` set.
    """
    try:
        if mode == GenerationMode.MULTIPLE_REPLIES:
            return segment_multiple(text)
        return segment_single(text)
    except Exception:
        logger.exception("Failed to segment %s response", mode.value)
        return ParsedResult(
            summary=PARSE_FAILURE_SUMMARY,
            replies=PARSE_FAILURE_REPLIES[: mode.reply_count],
            mode=mode,
            used_fallback=True,
            raw_text=text if isinstance(text, str) else "",
        )
