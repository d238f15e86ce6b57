"""Single-line text input field: buffer, cursor editing and view."""

from __future__ import annotations

from dataclasses import dataclass, replace

from prompt_toolkit.utils import get_cwidth  # type: ignore
from rich.text import Text

from cli_agent.tui.events import KeyPress


@dataclass(frozen=True)
class InputField:
    """Immutable input buffer with a cursor.

    ``cursor`` is an index into ``value`` in the range ``0..len(value)``.
    Editing methods return a new field.
    """

    value: str = ""
    cursor: int = 0
    prompt: str = "❯ "
    placeholder: str = ""

    def reset(self) -> "InputField":
        return replace(self, value="", cursor=0)

    def insert(self, text: str) -> "InputField":
        text = _sanitize(text)
        if not text:
            return self
        value = self.value[: self.cursor] + text + self.value[self.cursor :]
        return replace(self, value=value, cursor=self.cursor + len(text))

    def backspace(self) -> "InputField":
        if self.cursor == 0:
            return self
        value = self.value[: self.cursor - 1] + self.value[self.cursor :]
        return replace(self, value=value, cursor=self.cursor - 1)

    def delete(self) -> "InputField":
        if self.cursor >= len(self.value):
            return self
        return replace(self, value=self.value[: self.cursor] + self.value[self.cursor + 1 :])

    def move(self, offset: int) -> "InputField":
        return self.move_to(self.cursor + offset)

    def move_to(self, position: int) -> "InputField":
        return replace(self, cursor=max(0, min(position, len(self.value))))

    def kill_before(self) -> "InputField":
        return replace(self, value=self.value[self.cursor :], cursor=0)

    def kill_after(self) -> "InputField":
        return replace(self, value=self.value[: self.cursor])

    def delete_word(self) -> "InputField":
        """Delete the word before the cursor, plus any whitespace after it."""
        head = self.value[: self.cursor]
        stripped = head.rstrip()
        start = len(stripped)
        while start > 0 and not stripped[start - 1].isspace():
            start -= 1
        return replace(self, value=self.value[:start] + self.value[self.cursor :], cursor=start)

    def apply(self, event: KeyPress) -> "InputField":
        """Apply an editing key; keys the field does not handle are ignored."""
        key = event.key
        if key == "characters":
            return self.insert(event.text)
        if key == "backspace":
            return self.backspace()
        if key == "delete":
            return self.delete()
        if key == "left":
            return self.move(-1)
        if key == "right":
            return self.move(1)
        if key == "home":
            return self.move_to(0)
        if key == "end":
            return self.move_to(len(self.value))
        if key == "kill_before":
            return self.kill_before()
        if key == "kill_after":
            return self.kill_after()
        if key == "delete_word":
            return self.delete_word()
        return self

    def view(self, width: int, *, prompt_style: str = "", placeholder_style: str = "", cursor_style: str = "reverse") -> Text:
        """Render prompt, visible text window and cursor into ``width`` cells."""
        width = max(width, 1)
        line = Text(self.prompt, style=prompt_style)
        room = max(width - get_cwidth(self.prompt), 1)
        if not self.value:
            if self.placeholder:
                line.append(self.placeholder[0], style=cursor_style)
                line.append(self.placeholder[1:], style=placeholder_style)
            else:
                line.append(" ", style=cursor_style)
        else:
            start = _window_start(self.value, self.cursor, room)
            visible = self.value[start:]
            cursor = self.cursor - start
            line.append(visible[:cursor])
            line.append(visible[cursor : cursor + 1] or " ", style=cursor_style)
            line.append(visible[cursor + 1 :])
        line.truncate(width, overflow="crop", pad=True)
        return line


def _sanitize(text: str) -> str:
    # Single-line field: control characters (including newlines) are dropped.
    return "".join(ch for ch in text if ch.isprintable())


def _window_start(value: str, cursor: int, room: int) -> int:
    """First visible index so the cursor cell stays inside ``room`` cells."""
    used = 1  # cursor cell
    start = cursor
    while start > 0:
        cell = get_cwidth(value[start - 1])
        if used + cell > room:
            break
        used += cell
        start -= 1
    return start
