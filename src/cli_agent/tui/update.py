"""Pure state transitions for the interactive session.

``handle`` never blocks and never performs I/O: anything with latency is
returned as an action for the runner to execute, and its outcome comes back
later as another event.
"""

from __future__ import annotations

from dataclasses import replace

from cli_agent.config import Settings
from cli_agent.tui.events import (
    Action,
    AsyncResult,
    Event,
    KeyPress,
    Quit,
    Resize,
    Schedule,
    SpinnerTick,
    StartTask,
    TimerTick,
    batch,
)
from cli_agent.tui.input_field import InputField
from cli_agent.tui.spinner import Spinner
from cli_agent.tui.state import DEMO_MESSAGES, SessionState

Transition = tuple[SessionState, Action | None]

# Characters stripped from a submission before it is interpreted.
SUBMIT_STRIP = " \n"


def initialize(settings: Settings | None = None) -> Transition:
    """Build the starting state and schedule the first timer tick."""

    settings = settings or Settings()
    state = SessionState(
        settings=settings,
        input=InputField(prompt=settings.prompt, placeholder=settings.placeholder),
        spinner=Spinner.named(settings.spinner),
        messages=DEMO_MESSAGES[-settings.max_messages :] if settings.demo_messages else (),
    )
    return state, _next_tick(settings)


def handle(state: SessionState, event: Event) -> Transition:
    if isinstance(event, Resize):
        return replace(state, width=event.width, height=event.height), None
    if isinstance(event, KeyPress):
        return _handle_key(state, event)
    if isinstance(event, TimerTick):
        return replace(state, counter=state.counter + 1), _next_tick(state.settings)
    if isinstance(event, SpinnerTick):
        return _handle_spinner_tick(state, event)
    if isinstance(event, AsyncResult):
        return _handle_result(state, event)
    raise TypeError(f"Unsupported event: {event!r}")


def _handle_key(state: SessionState, event: KeyPress) -> Transition:
    if event.key == "quit":
        return state, Quit()
    if event.key == "clear":
        return replace(state, input=state.input.reset()), None
    if event.key == "submit":
        return _submit(state)
    return replace(state, input=state.input.apply(event)), None


def _submit(state: SessionState) -> Transition:
    value = state.input.value.strip(SUBMIT_STRIP)
    if value == state.settings.quit_command:
        return state, Quit()
    if state.busy:
        return state, None

    spinner = state.spinner.restart()
    next_state = replace(
        state,
        input=state.input.reset(),
        busy=True,
        status=state.settings.working_status,
        status_kind="working",
        spinner=spinner,
        messages=state.with_message("user", value),
    )
    return next_state, batch(
        StartTask(payload=value, delay=state.settings.task_delay),
        Schedule(spinner.interval, SpinnerTick(spinner.tag)),
    )


def _handle_spinner_tick(state: SessionState, event: SpinnerTick) -> Transition:
    if not state.busy or event.tag != state.spinner.tag:
        return state, None
    spinner = state.spinner.advance()
    return replace(state, spinner=spinner), Schedule(spinner.interval, SpinnerTick(spinner.tag))


def _handle_result(state: SessionState, event: AsyncResult) -> Transition:
    settings = state.settings
    if event.ok:
        status, kind, role = settings.success_status, "success", "agent"
    else:
        status, kind, role = settings.failure_status, "failure", "error"
    next_state = replace(
        state,
        busy=False,
        last_result=event.text,
        status=status,
        status_kind=kind,
        messages=state.with_message(role, event.text),
    )
    return next_state, None


def _next_tick(settings: Settings) -> Action:
    return Schedule(settings.tick_interval, TimerTick())
