"""Static style tables consumed only by the renderer.

Styles are rich style strings; the state machine never sees them.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Theme:
    title: str
    counter: str
    help: str
    border: str
    prompt: str
    placeholder: str
    cursor: str
    messages: str
    user: str
    agent: str
    error: str
    success: str
    working: str
    spinner: str


_ERROR = "bold #ef4444"
_SUCCESS = "#22c55e"

DARK = Theme(
    title="bold #7AA2F7",
    counter="#34D399",
    help="#9CA3AF",
    border="#7AA2F7",
    prompt="#7AA2F7",
    placeholder="#9CA3AF",
    cursor="reverse",
    messages="on #333333",
    user="bold #34D399",
    agent="default",
    error=_ERROR,
    success=_SUCCESS,
    working="#9CA3AF",
    spinner="#7AA2F7",
)

LIGHT = Theme(
    title="bold #2D5BFF",
    counter="#059669",
    help="#6B7280",
    border="#2D5BFF",
    prompt="#2D5BFF",
    placeholder="#6B7280",
    cursor="reverse",
    messages="on #E5E7EB",
    user="bold #059669",
    agent="default",
    error=_ERROR,
    success=_SUCCESS,
    working="#6B7280",
    spinner="#2D5BFF",
)

THEMES: dict[str, Theme] = {"dark": DARK, "light": LIGHT}


def get_theme(name: str) -> Theme:
    return THEMES.get(name, DARK)
