"""Render session state into a terminal frame."""

from __future__ import annotations

from dataclasses import dataclass
from io import StringIO
from typing import Iterable, Literal, Optional

from rich.console import Console
from rich.text import Text

from cli_agent.tui.state import Message, SessionState
from cli_agent.tui.theme import Theme, get_theme

ColorSystem = Optional[Literal["standard", "256", "truecolor"]]

ROOT_PADDING_X = 2
ROOT_PADDING_Y = 1
INPUT_BORDER = 2
# Rows outside the message area: padding, title, busy, status, input box, help.
CHROME_HEIGHT = ROOT_PADDING_Y * 2 + 1 + 1 + 1 + (1 + INPUT_BORDER) + 1


@dataclass(frozen=True)
class Layout:
    frame_width: int
    content_width: int
    message_height: int

    @property
    def row_width(self) -> int:
        """Width of the widest row (the bordered input field)."""
        return self.content_width + INPUT_BORDER


def compute_layout(width: int, height: int) -> Layout:
    return Layout(
        frame_width=max(width, 1),
        content_width=max(width - ROOT_PADDING_X * 2 - INPUT_BORDER, 1),
        message_height=max(height - CHROME_HEIGHT, 1),
    )


def help_text(quit_command: str) -> str:
    return f"Enter: run async task   Esc: clear   {quit_command}: quit"


def render(state: SessionState, *, theme: Theme | None = None, color_system: ColorSystem = "truecolor") -> str:
    """Project ``state`` to the frame text; never mutates ``state``."""

    theme = theme or get_theme(state.settings.theme)
    layout = compute_layout(state.width, state.height)
    console = _make_console(max(layout.frame_width, ROOT_PADDING_X + layout.row_width), color_system)

    rows: list[Text] = [Text()] * ROOT_PADDING_Y
    rows.append(_title_line(state, theme))
    rows.extend(_message_area(state, theme, layout, console))
    rows.append(_busy_line(state, theme))
    rows.append(_status_line(state, theme))
    rows.extend(_input_box(state, theme, layout))
    rows.append(Text(help_text(state.settings.quit_command), style=theme.help))
    rows.extend([Text()] * ROOT_PADDING_Y)
    return _print_rows(console, rows, layout)


def _make_console(width: int, color_system: ColorSystem) -> Console:
    return Console(
        file=StringIO(),
        width=width,
        force_terminal=True,
        color_system=color_system,
        markup=False,
        highlight=False,
        emoji=False,
        legacy_windows=False,
    )


def _title_line(state: SessionState, theme: Theme) -> Text:
    line = Text(state.settings.title, style=theme.title)
    line.append("  ")
    line.append(f"Count: {state.counter}", style=theme.counter)
    return line


def _message_text(message: Message, state: SessionState, theme: Theme) -> Text:
    if message.role == "user":
        return Text(f"{state.settings.prompt}{message.content}", style=theme.user)
    if message.role == "error":
        return Text(message.content, style=theme.error)
    return Text(message.content, style=theme.agent)


def _wrap_messages(messages: Iterable[Message], state: SessionState, theme: Theme, width: int, console: Console) -> list[Text]:
    lines: list[Text] = []
    for message in messages:
        lines.extend(_message_text(message, state, theme).wrap(console, width, overflow="fold"))
    return lines


def _message_area(state: SessionState, theme: Theme, layout: Layout, console: Console) -> list[Text]:
    """Newest transcript lines that fit, padded to the area size."""
    height, width = layout.message_height, layout.content_width
    # Only the newest `height` messages can be visible, each taking at least one line.
    lines = _wrap_messages(state.messages[-height:], state, theme, width, console)[-height:]
    lines.extend(Text() for _ in range(height - len(lines)))
    area: list[Text] = []
    for line in lines:
        row = Text(style=theme.messages)
        row.append_text(line)
        row.truncate(width, overflow="crop", pad=True)
        area.append(row)
    return area


def _busy_line(state: SessionState, theme: Theme) -> Text:
    if not state.busy:
        return Text()
    line = Text(state.spinner.view(), style=theme.spinner)
    line.append("  Processing...")
    return line


def _status_line(state: SessionState, theme: Theme) -> Text:
    styles = {"working": theme.working, "success": theme.success, "failure": theme.error}
    return Text(state.status, style=styles.get(state.status_kind, ""))


def _input_box(state: SessionState, theme: Theme, layout: Layout) -> list[Text]:
    width = layout.content_width
    field = state.input.view(
        width,
        prompt_style=theme.prompt,
        placeholder_style=theme.placeholder,
        cursor_style=theme.cursor,
    )
    middle = Text("│", style=theme.border)
    middle.append_text(field)
    middle.append("│", style=theme.border)
    return [
        Text(f"┌{'─' * width}┐", style=theme.border),
        middle,
        Text(f"└{'─' * width}┘", style=theme.border),
    ]


def _print_rows(console: Console, rows: list[Text], layout: Layout) -> str:
    width = max(layout.frame_width, ROOT_PADDING_X + layout.row_width)
    with console.capture() as capture:
        for row in rows:
            line = Text(" " * ROOT_PADDING_X)
            line.append_text(row)
            line.truncate(width, overflow="crop", pad=True)
            console.print(line, soft_wrap=True)
    return capture.get().rstrip("\n")
