"""Interactive session loop: reducer, renderer and asyncio runner."""

from cli_agent.tui.events import AsyncResult, KeyPress, Resize, SpinnerTick, TimerTick
from cli_agent.tui.runtime import SessionRunner, run_session
from cli_agent.tui.state import SessionState
from cli_agent.tui.update import handle, initialize
from cli_agent.tui.view import render

__all__ = [
    "AsyncResult",
    "KeyPress",
    "Resize",
    "SessionRunner",
    "SessionState",
    "SpinnerTick",
    "TimerTick",
    "handle",
    "initialize",
    "render",
    "run_session",
]
