"""Command-line entry point for the interactive session."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from typing import Any

from cli_agent import __version__
from cli_agent.config import THEME_NAMES, Settings, load_settings
from cli_agent.errors import StartupError
from cli_agent.log_utils import build_log_config, configure_logging
from cli_agent.tui.runtime import Backend, SessionRunner
from cli_agent.tui.spinner import SPINNERS
from cli_agent.tui.terminal import TerminalBackend

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cli-agent",
        description="Interactive terminal session with an async task spinner.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--title", help="Title shown on the first line.")
    parser.add_argument("--task-delay", type=float, help="Simulated task latency in seconds.")
    parser.add_argument("--tick-interval", type=float, help="Seconds between counter ticks.")
    parser.add_argument("--spinner", choices=sorted(SPINNERS), help="Spinner animation preset.")
    parser.add_argument("--theme", choices=THEME_NAMES, help="Colour palette.")
    parser.add_argument(
        "--no-alt-screen",
        dest="alt_screen",
        action="store_false",
        default=None,
        help="Draw on the main screen instead of the alternate screen.",
    )
    parser.add_argument(
        "--demo",
        dest="demo_messages",
        action="store_true",
        default=None,
        help="Seed the transcript with a sample conversation.",
    )
    return parser


def _overrides(args: argparse.Namespace) -> dict[str, Any]:
    keys = ("title", "task_delay", "tick_interval", "spinner", "theme", "alt_screen", "demo_messages")
    return {key: getattr(args, key) for key in keys}


async def run_app(settings: Settings, backend: Backend | None = None) -> int:
    """Run one session; returns the process exit code."""

    if backend is None:
        backend = TerminalBackend(alt_screen=settings.alt_screen)
    await SessionRunner(backend, settings).run()
    return 0


async def main(argv: list[str]) -> int:
    args = build_parser().parse_args(argv[1:])
    try:
        configure_logging(build_log_config())
        settings = load_settings(**_overrides(args))
        return await run_app(settings)
    except StartupError as exc:
        logger.error("Startup failed: %s", exc)
        print(f"Error: {exc}", file=sys.stderr)
        return 1


def run() -> None:
    """Console-script entry point."""
    try:
        raise SystemExit(asyncio.run(main(sys.argv)))
    except KeyboardInterrupt:
        raise SystemExit(130)
