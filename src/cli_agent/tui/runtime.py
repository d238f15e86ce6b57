"""Event loop that drives the session reducer.

One coroutine pulls events off an ``asyncio.Queue`` strictly in arrival
order, applies ``handle``, renders, and only then executes the returned
actions. Timers re-post events via ``loop.call_later`` and the background
task reports back by posting a single ``AsyncResult``; neither touches the
session state directly.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from typing import Awaitable, Callable, Protocol
from uuid import uuid4

from cli_agent.config import Settings
from cli_agent.log_utils import log_context, log_event
from cli_agent.tui.events import Action, AsyncResult, Event, Quit, Schedule, StartTask, iter_actions
from cli_agent.tui.state import SessionState
from cli_agent.tui.tasks import run_task
from cli_agent.tui.theme import Theme, get_theme
from cli_agent.tui.update import handle, initialize
from cli_agent.tui.view import ColorSystem, render

logger = logging.getLogger(__name__)

TaskRunner = Callable[..., Awaitable[AsyncResult]]
Post = Callable[[Event], None]


class Backend(Protocol):
    """Terminal surface the runner draws to and receives input events from."""

    color_system: ColorSystem

    def start(self, post: Post) -> None: ...

    def draw(self, frame: str) -> None: ...

    def close(self) -> None: ...


class SessionRunner:
    def __init__(
        self,
        backend: Backend,
        settings: Settings | None = None,
        *,
        task_runner: TaskRunner = run_task,
        theme: Theme | None = None,
    ) -> None:
        self._backend = backend
        self._settings = settings or Settings()
        self._task_runner = task_runner
        self._theme = theme or get_theme(self._settings.theme)
        self._queue: asyncio.Queue[Event] = asyncio.Queue()
        self._timers: set[asyncio.TimerHandle] = set()
        self._task: asyncio.Task[None] | None = None
        self.state: SessionState | None = None

    def post(self, event: Event) -> None:
        """Enqueue an event; safe to call from callbacks on the running loop."""
        self._queue.put_nowait(event)

    @property
    def pending_timers(self) -> int:
        return len(self._timers)

    @property
    def task_running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def run(self) -> SessionState:
        """Run until a quit action; returns the final state."""

        state, action = initialize(self._settings)
        with log_context(session=uuid4().hex[:8]):
            self._backend.start(self.post)
            log_event(
                logger,
                "session.start",
                spinner=self._settings.spinner,
                tick_interval=self._settings.tick_interval,
                task_delay=self._settings.task_delay,
            )
            try:
                self._draw(state)
                done = self._dispatch(action)
                while not done:
                    event = await self._queue.get()
                    state, action = handle(state, event)
                    self._draw(state)
                    done = self._dispatch(action)
                log_event(logger, "session.quit", counter=state.counter, busy=state.busy)
            finally:
                await self._shutdown()
                self._backend.close()
                log_event(logger, "session.stop")
        return state

    def _draw(self, state: SessionState) -> None:
        self.state = state
        self._backend.draw(render(state, theme=self._theme, color_system=self._backend.color_system))

    def _dispatch(self, action: Action | None) -> bool:
        """Execute actions in order; returns True when the session should stop."""
        for item in iter_actions(action):
            if isinstance(item, Quit):
                return True
            if isinstance(item, Schedule):
                self._schedule(item.delay, item.event)
            elif isinstance(item, StartTask):
                self._start_task(item)
        return False

    def _schedule(self, delay: float, event: Event) -> None:
        loop = asyncio.get_running_loop()

        def _fire() -> None:
            self._timers.discard(handle)
            self.post(event)

        handle = loop.call_later(delay, _fire)
        self._timers.add(handle)

    def _start_task(self, action: StartTask) -> None:
        if self.task_running:
            log_event(logger, "task.rejected", level=logging.WARNING, reason="task already running")
            return
        self._task = asyncio.create_task(self._run_task(action.payload, action.delay))

    async def _run_task(self, payload: str, delay: float) -> None:
        log_event(logger, "task.start", chars=len(payload), delay=delay)
        try:
            result = await self._task_runner(payload, delay=delay)
        except Exception as exc:  # noqa: BLE001
            logger.exception("Background task crashed")
            log_event(logger, "task.crashed", level=logging.ERROR, error=type(exc).__name__)
            result = AsyncResult.failure(str(exc) or type(exc).__name__)
        log_event(logger, "task.finish", outcome=result.outcome)
        self.post(result)

    async def _shutdown(self) -> None:
        for timer in self._timers:
            timer.cancel()
        self._timers.clear()
        if self._task is not None and not self._task.done():
            self._task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._task
        self._task = None


async def run_session(backend: Backend, settings: Settings | None = None) -> SessionState:
    return await SessionRunner(backend, settings).run()


__all__ = ["Backend", "SessionRunner", "TaskRunner", "run_session"]
