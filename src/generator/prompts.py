"""Prompt templates and the prompt builder for reply generation.

Field values are interpolated verbatim. Nothing is escaped, so the email
text reaches the provider exactly as the caller supplied it.
"""

from datetime import datetime, timezone
from typing import Optional

from .models import EmailRequest, GenerationMode

SINGLE_REPLY_PROMPT_TEMPLATE = """You are a professional email assistant. Analyze the following email and provide a short Summary and a single Reply body in {language}.

Instructions:
1. Write a brief summary (1-2 sentences) of what the email is about
2. Write the email reply body ONLY (3-5 sentences)
3. Do NOT include a subject line, greeting, or signature in the reply

Format your response EXACTLY like this:
Summary: [1-2 sentences]

Reply: [3-5 sentences, body only]

EMAIL:
Subject: {subject}
Content: {content}
Tone: {tone}
"""

MULTIPLE_REPLIES_PROMPT_TEMPLATE = """You are an expert email assistant. Generate three different email replies.
IMPORTANT: Generate the replies in {language}.

Use a {tone} tone.

Original Email Subject: {subject}
Original Email Content:
{content}

Please provide:
1. Three different reply variations (marked as REPLY 1:, REPLY 2:, REPLY 3:)
2. A brief summary of the key points addressed (marked as SUMMARY:)
"""

REGENERATE_INSTRUCTION = """
IMPORTANT: Generate completely new content, different from any previous response. Timestamp: {timestamp}
"""


def build_prompt(
    request: EmailRequest,
    mode: GenerationMode,
    now: Optional[datetime] = None,
) -> str:
    """Build the instruction text sent to the generation provider.

    Without ``regenerate`` the output depends only on the request and the
    mode. With it, a timestamped instruction is appended so that repeated
    calls differ.

    Args:
        request: Email to reply to.
        mode: Single reply or three reply variants.
        now: Timestamp for the regenerate instruction. Defaults to the
            current UTC time.

    Returns:
        Prompt text.
    """
    template = (
        MULTIPLE_REPLIES_PROMPT_TEMPLATE
        if mode == GenerationMode.MULTIPLE_REPLIES
        else SINGLE_REPLY_PROMPT_TEMPLATE
    )
    prompt = template.format(
        language=request.language_name,
        subject=request.subject,
        content=request.content,
        tone=request.tone,
    )

    if request.regenerate:
        timestamp = (now or datetime.now(timezone.utc)).isoformat()
        prompt += REGENERATE_INSTRUCTION.format(timestamp=timestamp)

    return prompt
