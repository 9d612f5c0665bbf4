"""CLI for formula completion."""

from __future__ import annotations

from pathlib import Path
from typing import Optional, Sequence, TextIO
import argparse
import asyncio
import json
import logging
import sys

from formula_assist import __version__
from formula_assist.config.settings import SettingsError, load_settings, settings_summary
from formula_assist.llm.errors import CompletionError
from formula_assist.llm.requester import CompletionRequester


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Request an AI formula completion")
    parser.add_argument(
        "prompt",
        nargs="?",
        help="Prompt text. Read from stdin when omitted.",
    )
    parser.add_argument(
        "--config",
        type=Path,
        help="Path to JSON config file. Environment variables override file values.",
    )
    parser.add_argument(
        "--check",
        action="store_true",
        help="Validate settings and print a redacted summary.",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"formula-assist {__version__}",
    )
    return parser


def configure_logging(log_level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, log_level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )


def main(
    argv: Optional[Sequence[str]] = None,
    *,
    stdin: TextIO | None = None,
    requester_factory=CompletionRequester,
) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        settings = load_settings(config_path=args.config)
    except SettingsError as exc:
        print(f"Configuration error: {exc}", file=sys.stderr)
        return 2

    if args.check:
        print(json.dumps(settings_summary(settings), indent=2, sort_keys=True))
        return 0

    configure_logging(settings.log_level)
    prompt = args.prompt if args.prompt is not None else (stdin or sys.stdin).read()

    requester = requester_factory(settings)
    try:
        completion = asyncio.run(requester.send_for_completion(prompt))
    except CompletionError as exc:
        print(f"Completion error: {exc}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        return 130

    print(completion)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
