"""Command-line entry point.

With no arguments an interactive shell starts. ``-e`` evaluates a single
expression and ``--serve`` runs the HTTP API.
"""

import argparse
import logging
from typing import List, Optional

from pydantic import ValidationError

from stepcalc.config import Settings, configure_logging
from stepcalc.shell import Shell, render_result, split_details

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="stepcalc",
        description="Console calculator with step-by-step evaluation.",
    )
    parser.add_argument(
        "-e", "--eval",
        dest="expression",
        type=str,
        help="Evaluate a single expression and exit.",
    )
    parser.add_argument(
        "--details",
        action="store_true",
        help="Show the step-by-step evaluation (with --eval).",
    )
    parser.add_argument(
        "--serve",
        action="store_true",
        help="Run the HTTP API instead of the interactive shell.",
    )
    parser.add_argument("--host", type=str, help="Host for --serve (default: 127.0.0.1).")
    parser.add_argument("--port", type=int, help="Port for --serve (default: 8000).")
    parser.add_argument(
        "--log-level",
        type=str,
        help="Logging level: DEBUG, INFO, WARNING, ERROR or CRITICAL (default: WARNING).",
    )
    return parser


def load_settings(args: argparse.Namespace) -> Settings:
    """Environment settings with command-line overrides applied."""
    settings = Settings.from_env()
    overrides = {
        "host": args.host,
        "port": args.port,
        "log_level": args.log_level,
    }
    overrides = {k: v for k, v in overrides.items() if v is not None}
    if not overrides:
        return settings
    return Settings(**{**settings.model_dump(), **overrides})


def run_once(expression: str, detailed: bool) -> int:
    keyword_detailed, expression = split_details(expression.strip())
    if not expression:
        print("Please enter a valid expression")
        return 1
    ok, out = render_result(expression, detailed or keyword_detailed)
    print(out)
    return 0 if ok else 1


def serve(settings: Settings) -> None:
    import uvicorn

    from stepcalc.api import app

    logger.info(f"Serving on {settings.host}:{settings.port}")
    uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        settings = load_settings(args)
    except ValidationError as e:
        parser.error(f"invalid settings: {e.errors()[0]['msg']}")
    configure_logging(settings.log_level)

    if args.expression is not None:
        return run_once(args.expression, args.details)
    if args.serve:
        serve(settings)
        return 0
    Shell(prompt=settings.prompt).run()
    return 0
