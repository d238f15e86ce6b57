"""Events consumed by the session reducer and actions it asks the runner to perform."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, TypeAlias, Union

Key = Literal[
    "quit",
    "clear",
    "submit",
    "characters",
    "backspace",
    "delete",
    "left",
    "right",
    "home",
    "end",
    "kill_before",
    "kill_after",
    "delete_word",
]
Outcome = Literal["success", "failure"]


@dataclass(frozen=True)
class Resize:
    width: int
    height: int


@dataclass(frozen=True)
class KeyPress:
    """A logical key. ``text`` carries the inserted characters for ``characters``."""

    key: Key
    text: str = ""

    @classmethod
    def chars(cls, text: str) -> "KeyPress":
        return cls("characters", text)


@dataclass(frozen=True)
class TimerTick:
    pass


@dataclass(frozen=True)
class SpinnerTick:
    """Spinner animation step; ``tag`` identifies the busy period that scheduled it."""

    tag: int


@dataclass(frozen=True)
class AsyncResult:
    outcome: Outcome
    text: str

    @classmethod
    def success(cls, text: str) -> "AsyncResult":
        return cls("success", text)

    @classmethod
    def failure(cls, message: str) -> "AsyncResult":
        return cls("failure", message)

    @property
    def ok(self) -> bool:
        return self.outcome == "success"


Event: TypeAlias = Union[Resize, KeyPress, TimerTick, SpinnerTick, AsyncResult]


@dataclass(frozen=True)
class Quit:
    pass


@dataclass(frozen=True)
class Schedule:
    """Post ``event`` back onto the queue after ``delay`` seconds."""

    delay: float
    event: Event


@dataclass(frozen=True)
class StartTask:
    """Run the background task for ``payload``; its result arrives as an AsyncResult."""

    payload: str
    delay: float


@dataclass(frozen=True)
class Batch:
    actions: tuple["Action", ...]


Action: TypeAlias = Union[Quit, Schedule, StartTask, Batch]


def batch(*actions: Action | None) -> Action | None:
    """Combine actions, dropping Nones and flattening nested batches."""

    flat: list[Action] = []
    for action in actions:
        if action is None:
            continue
        if isinstance(action, Batch):
            flat.extend(action.actions)
        else:
            flat.append(action)
    if not flat:
        return None
    if len(flat) == 1:
        return flat[0]
    return Batch(tuple(flat))


def iter_actions(action: Action | None) -> list[Action]:
    """Flatten an action tree into the order it should be executed."""

    if action is None:
        return []
    if isinstance(action, Batch):
        result: list[Action] = []
        for child in action.actions:
            result.extend(iter_actions(child))
        return result
    return [action]


__all__ = [
    "Action",
    "AsyncResult",
    "Batch",
    "Event",
    "Key",
    "KeyPress",
    "Outcome",
    "Quit",
    "Resize",
    "Schedule",
    "SpinnerTick",
    "StartTask",
    "TimerTick",
    "batch",
    "iter_actions",
]
