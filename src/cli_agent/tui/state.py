"""Session state values owned by the event loop."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal

from cli_agent.config import Settings
from cli_agent.tui.input_field import InputField
from cli_agent.tui.spinner import Spinner

Role = Literal["user", "agent", "error"]
StatusKind = Literal["", "working", "success", "failure"]


@dataclass(frozen=True)
class Message:
    role: Role
    content: str


DEMO_MESSAGES: tuple[Message, ...] = (
    Message("user", "Hello, who are you?"),
    Message("agent", "I am an AI assistant. How can I help you today?"),
    Message("user", "Can you tell me a joke?"),
    Message("agent", "Sure! Why don't scientists trust atoms? Because they make up everything."),
)


@dataclass(frozen=True)
class SessionState:
    """Everything the reducer and renderer need for one session.

    Instances are never mutated; each transition builds a new one with
    ``dataclasses.replace``.
    """

    settings: Settings = field(default_factory=Settings)
    width: int = 0
    height: int = 0
    input: InputField = field(default_factory=InputField)
    busy: bool = False
    status: str = ""
    status_kind: StatusKind = ""
    last_result: str = ""
    counter: int = 0
    spinner: Spinner = field(default_factory=lambda: Spinner.named("dot"))
    messages: tuple[Message, ...] = ()

    def with_message(self, role: Role, content: str) -> tuple[Message, ...]:
        """Return the transcript with a new message, trimmed to the configured bound."""
        messages = (*self.messages, Message(role, content))
        return messages[-self.settings.max_messages :]
