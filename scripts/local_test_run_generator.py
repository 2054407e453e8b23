#!/usr/bin/env python3
"""Local smoke test for run_generator.py.

Validates that the selected provider's API key is present, then sends one
sample email in each generation mode and prints the parsed result.

Run from project root:
    python scripts/local_test_run_generator.py
"""

import os
import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parent.parent

sys.path.insert(0, str(PROJECT_ROOT))
from dotenv import load_dotenv

load_dotenv(PROJECT_ROOT / ".env")

REQUIRED_ENV_VARS = {
    "gemini": "GEMINI_API_KEY",
    "openai": "OPENAI_API_KEY",
}

SAMPLE_SUBJECT = "Rescheduling our Thursday sync"
SAMPLE_CONTENT = (
    "Hi,\n\nSomething came up on Thursday afternoon. Could we move our sync "
    "to Friday morning, or early next week if that works better?\n\nThanks,\nSam"
)


def check_prerequisites(provider: str) -> list[str]:
    var = REQUIRED_ENV_VARS.get(provider)
    if var is None:
        return [f"Unknown GENERATION_PROVIDER: {provider}"]
    if not os.environ.get(var):
        return [f"Missing env var: {var}"]
    return []


def main() -> int:
    provider = os.getenv("GENERATION_PROVIDER", "gemini").lower()
    print(f"Checking prerequisites for provider '{provider}' ...\n")
    errors = check_prerequisites(provider)

    if errors:
        for err in errors:
            print(f"  ✗ {err}")
        print(
            "\nSetup instructions:"
            "\n  1. Copy .env.example to .env"
            "\n  2. Set GEMINI_API_KEY (or OPENAI_API_KEY with GENERATION_PROVIDER=openai)"
        )
        return 1

    print(f"  ✓ {REQUIRED_ENV_VARS[provider]}")
    print("\nAll prerequisites met. Generating replies ...\n")

    from src.generator import EmailReplyGenerator, EmailRequest, GenerationError, GenerationMode
    from src.logging_config import configure_logging

    configure_logging()
    generator = EmailReplyGenerator()
    request = EmailRequest(subject=SAMPLE_SUBJECT, content=SAMPLE_CONTENT, tone="friendly")

    failed = False
    for mode in GenerationMode:
        print(f"--- {mode.value} ---")
        try:
            result = generator.generate(request, mode)
        except GenerationError as e:
            print(f"  FAILED: {e}")
            failed = True
            continue
        print(f"  summary: {result.summary}")
        for reply in result.replies:
            print(f"  reply: {reply}")
        if result.used_fallback:
            print("  (fallback values used)")

    print(f"\nResult: {'FAIL' if failed else 'PASS'}")
    return 1 if failed else 0


if __name__ == "__main__":
    sys.exit(main())
