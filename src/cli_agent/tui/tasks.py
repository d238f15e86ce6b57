"""The background task started for each submission."""

from __future__ import annotations

import asyncio

from cli_agent.errors import UserInputError
from cli_agent.tui.events import AsyncResult

EMPTY_INPUT_MESSAGE = "input was empty"


async def simulate_work(text: str, *, delay: float) -> str:
    """Stand-in for a remote model call: wait, then echo the text uppercased."""
    await asyncio.sleep(delay)
    if not text.strip():
        raise UserInputError(EMPTY_INPUT_MESSAGE)
    return text.upper()


async def run_task(text: str, *, delay: float) -> AsyncResult:
    try:
        output = await simulate_work(text, delay=delay)
    except UserInputError as exc:
        return AsyncResult.failure(str(exc))
    return AsyncResult.success(output)
