from __future__ import annotations

import io
from unittest.mock import MagicMock

import pytest
from prompt_toolkit.data_structures import Size
from prompt_toolkit.key_binding import KeyPress as TerminalKeyPress
from prompt_toolkit.keys import Keys
from prompt_toolkit.output import ColorDepth

from cli_agent.errors import StartupError
from cli_agent.tui import terminal
from cli_agent.tui.events import KeyPress, Resize
from cli_agent.tui.terminal import TerminalBackend, detect_color_system, translate_key


@pytest.mark.parametrize(
    ("key", "expected"),
    [
        (Keys.ControlC, KeyPress("quit")),
        (Keys.Escape, KeyPress("clear")),
        (Keys.ControlM, KeyPress("submit")),
        (Keys.ControlJ, KeyPress("submit")),
        (Keys.ControlH, KeyPress("backspace")),
        (Keys.Left, KeyPress("left")),
        (Keys.ControlE, KeyPress("end")),
        (Keys.ControlW, KeyPress("delete_word")),
        (Keys.Tab, None),
        (Keys.Up, None),
    ],
)
def test_translate_special_keys(key: Keys, expected: KeyPress | None) -> None:
    assert translate_key(TerminalKeyPress(key, "")) == expected


def test_translate_printable_characters() -> None:
    assert translate_key(TerminalKeyPress("a", "a")) == KeyPress.chars("a")
    assert translate_key(TerminalKeyPress("é", "é")) == KeyPress.chars("é")
    assert translate_key(TerminalKeyPress("\x07", "\x07")) is None


def test_translate_bracketed_paste_flattens_newlines() -> None:
    event = translate_key(TerminalKeyPress(Keys.BracketedPaste, "one\r\ntwo\nthree"))
    assert event == KeyPress.chars("one  two three")
    assert translate_key(TerminalKeyPress(Keys.BracketedPaste, "")) is None


@pytest.fixture
def clean_color_env(monkeypatch):
    for name in ("NO_COLOR", "PROMPT_TOOLKIT_COLOR_DEPTH", "COLORTERM"):
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


def _output(depth: ColorDepth) -> MagicMock:
    output = MagicMock()
    output.get_default_color_depth.return_value = depth
    output.get_size.return_value = Size(rows=24, columns=80)
    return output


@pytest.mark.parametrize(
    ("depth", "expected"),
    [
        (ColorDepth.DEPTH_1_BIT, None),
        (ColorDepth.DEPTH_4_BIT, "standard"),
        (ColorDepth.DEPTH_8_BIT, "256"),
        (ColorDepth.DEPTH_24_BIT, "truecolor"),
    ],
)
def test_color_system_follows_output_depth(clean_color_env, depth, expected) -> None:
    assert detect_color_system(_output(depth)) == expected


def test_colorterm_upgrades_default_depth(clean_color_env) -> None:
    clean_color_env.setenv("COLORTERM", "truecolor")
    assert detect_color_system(_output(ColorDepth.DEFAULT)) == "truecolor"


def test_no_color_disables_colour(clean_color_env) -> None:
    clean_color_env.setenv("NO_COLOR", "1")
    assert detect_color_system(_output(ColorDepth.DEPTH_24_BIT)) is None


def test_backend_requires_a_tty() -> None:
    with pytest.raises(StartupError, match="terminal not available"):
        TerminalBackend(stdin=io.StringIO(), stdout=io.StringIO())


@pytest.fixture
def fake_terminal(clean_color_env):
    tty = MagicMock()
    tty.isatty.return_value = True
    term_input = MagicMock()
    term_input.closed = False
    term_output = _output(ColorDepth.DEPTH_24_BIT)
    clean_color_env.setattr(terminal, "create_input", lambda stdin: term_input)
    clean_color_env.setattr(terminal, "create_output", lambda stdout: term_output)
    backend = TerminalBackend(stdin=tty, stdout=tty)
    return backend, term_input, term_output


@pytest.mark.asyncio
async def test_start_posts_size_and_close_restores(fake_terminal) -> None:
    backend, term_input, term_output = fake_terminal
    events = []

    backend.start(events.append)

    assert backend.color_system == "truecolor"
    assert events == [Resize(80, 24)]
    term_input.raw_mode.assert_called_once()
    term_input.attach.assert_called_once()
    term_output.enter_alternate_screen.assert_called_once()
    term_output.hide_cursor.assert_called_once()

    backend.close()

    term_output.show_cursor.assert_called_once()
    term_output.quit_alternate_screen.assert_called_once()
    term_output.disable_bracketed_paste.assert_called_once()


@pytest.mark.asyncio
async def test_resize_only_posts_changes(fake_terminal) -> None:
    backend, _, term_output = fake_terminal
    events = []
    backend.start(events.append)

    backend._on_resize()
    term_output.get_size.return_value = Size(rows=30, columns=100)
    backend._on_resize()
    backend.close()

    assert events == [Resize(80, 24), Resize(100, 30)]


@pytest.mark.asyncio
async def test_input_keys_are_translated_and_posted(fake_terminal) -> None:
    backend, term_input, _ = fake_terminal
    events = []
    backend.start(events.append)
    term_input.read_keys.return_value = [
        TerminalKeyPress("h", "h"),
        TerminalKeyPress(Keys.Up, ""),
        TerminalKeyPress(Keys.ControlM, "\r"),
    ]

    backend._on_input_ready()
    backend.close()

    assert events[1:] == [KeyPress.chars("h"), KeyPress("submit")]


@pytest.mark.asyncio
async def test_closed_input_posts_quit(fake_terminal) -> None:
    backend, term_input, _ = fake_terminal
    events = []
    backend.start(events.append)
    term_input.read_keys.return_value = []
    term_input.closed = True

    backend._on_input_ready()
    backend.close()

    assert events[-1] == KeyPress("quit")


def test_draw_writes_each_line_from_home(fake_terminal) -> None:
    backend, _, term_output = fake_terminal

    backend.draw("one\ntwo\nthree")

    term_output.cursor_goto.assert_called_once_with(0, 0)
    written = [call.args[0] for call in term_output.write_raw.call_args_list]
    assert written == ["one", "\r\n", "two", "\r\n", "three"]
    assert term_output.erase_end_of_line.call_count == 3
    term_output.erase_down.assert_called_once()
    term_output.flush.assert_called()
