from __future__ import annotations

import asyncio
from typing import Callable

from cli_agent.tui.events import Event, Resize
from cli_agent.tui.runtime import SessionRunner
from cli_agent.tui.state import SessionState


class RecordingBackend:
    """Headless backend: records frames and lets tests post input events."""

    color_system = None

    def __init__(self, width: int = 80, height: int = 24) -> None:
        self.width = width
        self.height = height
        self.frames: list[str] = []
        self.started = False
        self.closed = False
        self._post: Callable[[Event], None] | None = None

    def start(self, post: Callable[[Event], None]) -> None:
        self.started = True
        self._post = post
        post(Resize(self.width, self.height))

    def draw(self, frame: str) -> None:
        self.frames.append(frame)

    def close(self) -> None:
        self.closed = True

    def send(self, *events: Event) -> None:
        assert self._post is not None, "backend not started"
        for event in events:
            self._post(event)


async def wait_for(
    runner: SessionRunner,
    predicate: Callable[[SessionState], bool],
    timeout: float = 2.0,
) -> SessionState:
    """Poll the runner's latest rendered state until ``predicate`` holds."""

    async def _poll() -> SessionState:
        while True:
            state = runner.state
            if state is not None and predicate(state):
                return state
            await asyncio.sleep(0.005)

    return await asyncio.wait_for(_poll(), timeout)


async def start_runner(runner: SessionRunner) -> asyncio.Task[SessionState]:
    """Start ``runner.run()`` and wait until the backend's initial resize is applied."""

    run = asyncio.create_task(runner.run())
    await wait_for(runner, lambda s: s.width > 0)
    return run
