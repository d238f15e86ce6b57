"""prompt_toolkit terminal backend: raw-mode key input, resize signals, frame output."""

from __future__ import annotations

import asyncio
import contextlib
import logging
import os
import signal
import sys
from typing import Callable

from prompt_toolkit.input import Input, create_input  # type: ignore
from prompt_toolkit.key_binding import KeyPress as TerminalKeyPress  # type: ignore
from prompt_toolkit.keys import Keys  # type: ignore
from prompt_toolkit.output import ColorDepth, Output, create_output  # type: ignore

from cli_agent.errors import StartupError
from cli_agent.tui.events import Event, Key, KeyPress, Resize
from cli_agent.tui.view import ColorSystem

logger = logging.getLogger(__name__)

# How long a lone escape byte waits for the rest of an escape sequence.
ESCAPE_FLUSH_TIMEOUT = 0.05

KEY_MAP: dict[str, Key] = {
    Keys.ControlC: "quit",
    Keys.Escape: "clear",
    Keys.ControlM: "submit",
    Keys.ControlJ: "submit",
    Keys.ControlH: "backspace",
    Keys.Delete: "delete",
    Keys.Left: "left",
    Keys.ControlB: "left",
    Keys.Right: "right",
    Keys.ControlF: "right",
    Keys.Home: "home",
    Keys.ControlA: "home",
    Keys.End: "end",
    Keys.ControlE: "end",
    Keys.ControlU: "kill_before",
    Keys.ControlK: "kill_after",
    Keys.ControlW: "delete_word",
}

COLOR_SYSTEMS: dict[ColorDepth, ColorSystem] = {
    ColorDepth.DEPTH_1_BIT: None,
    ColorDepth.DEPTH_4_BIT: "standard",
    ColorDepth.DEPTH_8_BIT: "256",
    ColorDepth.DEPTH_24_BIT: "truecolor",
}


def translate_key(key_press: TerminalKeyPress) -> KeyPress | None:
    """Map a prompt_toolkit key press to a logical key, or None to ignore it."""

    key = key_press.key
    if key == Keys.BracketedPaste:
        text = key_press.data.replace("\r", " ").replace("\n", " ")
        return KeyPress.chars(text) if text else None
    if isinstance(key, Keys):
        logical = KEY_MAP.get(key)
        return KeyPress(logical) if logical else None
    if key.isprintable():
        return KeyPress.chars(key)
    return None


def detect_color_system(output: Output) -> ColorSystem:
    """Colour support of ``output``; NO_COLOR and PROMPT_TOOLKIT_COLOR_DEPTH win."""
    depth = ColorDepth.from_env()
    if depth is None:
        depth = output.get_default_color_depth()
        if depth == ColorDepth.DEFAULT and os.environ.get("COLORTERM", "").lower() in {"truecolor", "24bit"}:
            depth = ColorDepth.DEPTH_24_BIT
    return COLOR_SYSTEMS.get(depth, "standard")


class TerminalBackend:
    """Owns the terminal while a session runs.

    ``start`` enters raw mode (and the alternate screen when enabled),
    attaches key input to the running event loop and posts the initial size;
    ``close`` restores everything in reverse order.
    """

    def __init__(self, *, alt_screen: bool = True, stdin=None, stdout=None) -> None:
        stdin = stdin or sys.stdin
        stdout = stdout or sys.stdout
        if not (stdin.isatty() and stdout.isatty()):
            raise StartupError("terminal not available: stdin and stdout must be a TTY")
        try:
            self._input: Input = create_input(stdin)
            self._output: Output = create_output(stdout)
        except Exception as exc:  # noqa: BLE001
            raise StartupError(f"terminal not available: {exc}") from exc
        self._alt_screen = alt_screen
        self._stack = contextlib.ExitStack()
        self._post: Callable[[Event], None] | None = None
        self._flush_handle: asyncio.TimerHandle | None = None
        self._last_size: tuple[int, int] | None = None
        self.color_system: ColorSystem = detect_color_system(self._output)

    def size(self) -> tuple[int, int]:
        size = self._output.get_size()
        return size.columns, size.rows

    def start(self, post: Callable[[Event], None]) -> None:
        self._post = post
        loop = asyncio.get_running_loop()
        try:
            self._stack.enter_context(self._input.raw_mode())
            self._stack.enter_context(self._input.attach(self._on_input_ready))
        except Exception as exc:  # noqa: BLE001
            self._stack.close()
            raise StartupError(f"failed to enter raw mode: {exc}") from exc
        self._stack.callback(self._restore_output)
        if self._alt_screen:
            self._output.enter_alternate_screen()
        self._output.hide_cursor()
        self._output.enable_bracketed_paste()
        self._output.flush()
        if hasattr(signal, "SIGWINCH"):
            with contextlib.suppress(NotImplementedError, RuntimeError):
                loop.add_signal_handler(signal.SIGWINCH, self._on_resize)
                self._stack.callback(loop.remove_signal_handler, signal.SIGWINCH)
        self._on_resize()

    def draw(self, frame: str) -> None:
        out = self._output
        out.cursor_goto(0, 0)
        lines = frame.split("\n")
        for index, line in enumerate(lines):
            out.write_raw(line)
            out.erase_end_of_line()
            if index < len(lines) - 1:
                out.write_raw("\r\n")
        out.erase_down()
        out.flush()

    def close(self) -> None:
        if self._flush_handle is not None:
            self._flush_handle.cancel()
            self._flush_handle = None
        self._stack.close()
        self._post = None

    def _restore_output(self) -> None:
        out = self._output
        out.disable_bracketed_paste()
        out.show_cursor()
        out.reset_attributes()
        if self._alt_screen:
            out.quit_alternate_screen()
        out.flush()

    def _emit(self, event: Event) -> None:
        if self._post is not None:
            self._post(event)

    def _on_resize(self) -> None:
        size = self.size()
        if size != self._last_size:
            self._last_size = size
            self._emit(Resize(*size))

    def _on_input_ready(self) -> None:
        self._dispatch_keys(self._input.read_keys())
        if self._input.closed:
            logger.info("Terminal input closed")
            self._emit(KeyPress("quit"))
            return
        if self._flush_handle is not None:
            self._flush_handle.cancel()
        self._flush_handle = asyncio.get_running_loop().call_later(ESCAPE_FLUSH_TIMEOUT, self._flush_keys)

    def _flush_keys(self) -> None:
        self._flush_handle = None
        self._dispatch_keys(self._input.flush_keys())

    def _dispatch_keys(self, key_presses: list[TerminalKeyPress]) -> None:
        for key_press in key_presses:
            event = translate_key(key_press)
            if event is not None:
                self._emit(event)
