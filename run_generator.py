"""CLI entry point for the email reply generator."""

import argparse
import json
import sys

from dotenv import load_dotenv

from src.generator import (
    EmailReplyGenerator,
    EmailRequest,
    GenerationMode,
    GeneratorError,
)
from src.logging_config import configure_logging


def _read_content(args: argparse.Namespace) -> str:
    if args.content_file == "-":
        return sys.stdin.read()
    if args.content_file:
        with open(args.content_file, encoding="utf-8") as f:
            return f.read()
    return args.content or ""


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Draft replies to an email with an LLM")
    parser.add_argument("--subject", default="", help="Subject of the email to reply to")
    content = parser.add_mutually_exclusive_group()
    content.add_argument("--content", help="Body of the email to reply to")
    content.add_argument(
        "--content-file",
        metavar="PATH",
        help="Read the email body from a file ('-' for stdin)",
    )
    parser.add_argument(
        "--tone",
        default="professional",
        help="Reply tone, e.g. professional, casual, formal, friendly (default: professional)",
    )
    parser.add_argument(
        "--language",
        default="en",
        help="Reply language code or name (default: en)",
    )
    parser.add_argument(
        "--multiple",
        action="store_true",
        help="Generate three reply variants instead of one",
    )
    parser.add_argument(
        "--regenerate",
        action="store_true",
        help="Ask for output different from previous runs",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print the result as JSON",
    )
    parser.add_argument(
        "--check-connection",
        action="store_true",
        help="Send a test email to the provider and print its answer",
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=None,
        help="Set logging level (overrides LOG_LEVEL env var)",
    )
    parser.add_argument(
        "--log-format",
        choices=["text", "json"],
        default=None,
        help="Set log output format (overrides LOG_FORMAT env var)",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    load_dotenv()

    args = build_parser().parse_args(argv)
    configure_logging(level_override=args.log_level, format_override=args.log_format)

    try:
        generator = EmailReplyGenerator()

        if args.check_connection:
            print(generator.check_connection())
            return 0

        request = EmailRequest(
            subject=args.subject,
            content=_read_content(args),
            tone=args.tone,
            language=args.language,
            regenerate=args.regenerate,
        )
        mode = GenerationMode.MULTIPLE_REPLIES if args.multiple else GenerationMode.SINGLE_REPLY
        result = generator.generate(request, mode)
    except (GeneratorError, ValueError, OSError) as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1

    if args.json:
        print(json.dumps(result.to_dict(), ensure_ascii=False, indent=2))
        return 0

    print("--- Summary ---")
    print(result.summary)
    for i, reply in enumerate(result.replies, start=1):
        heading = f"Reply {i}" if len(result.replies) > 1 else "Reply"
        print(f"\n--- {heading} ---")
        print(reply)

    return 0


if __name__ == "__main__":
    sys.exit(main())
