"""Spinner presets and the immutable spinner value held in session state."""

from __future__ import annotations

from dataclasses import dataclass, replace


@dataclass(frozen=True)
class SpinnerPreset:
    frames: tuple[str, ...]
    interval: float


SPINNERS: dict[str, SpinnerPreset] = {
    "line": SpinnerPreset(("|", "/", "-", "\\"), 1 / 10),
    "dot": SpinnerPreset(("⣾ ", "⣽ ", "⣻ ", "⢿ ", "⡿ ", "⣟ ", "⣯ ", "⣷ "), 1 / 10),
    "minidot": SpinnerPreset(("⠋", "⠙", "⠹", "⠸", "⠼", "⠴", "⠦", "⠧", "⠇", "⠏"), 1 / 12),
    "jump": SpinnerPreset(("⢄", "⢂", "⢁", "⡁", "⡈", "⡐", "⡠"), 1 / 10),
    "pulse": SpinnerPreset(("█", "▓", "▒", "░"), 1 / 8),
    "points": SpinnerPreset(("∙∙∙", "●∙∙", "∙●∙", "∙∙●"), 1 / 7),
    "meter": SpinnerPreset(("▱▱▱", "▰▱▱", "▰▰▱", "▰▰▰", "▰▰▱", "▰▱▱", "▱▱▱"), 1 / 7),
    "hamburger": SpinnerPreset(("☱", "☲", "☴", "☲"), 1 / 3),
    "ellipsis": SpinnerPreset(("", ".", "..", "..."), 1 / 3),
}


@dataclass(frozen=True)
class Spinner:
    """Current animation frame plus the tag of the active tick chain.

    Ticks carry the tag they were scheduled with; a tick whose tag differs
    from ``tag`` belongs to an earlier busy period and is dropped.
    """

    preset: SpinnerPreset
    frame: int = 0
    tag: int = 0

    @classmethod
    def named(cls, name: str) -> "Spinner":
        return cls(SPINNERS[name])

    @property
    def interval(self) -> float:
        return self.preset.interval

    def restart(self) -> "Spinner":
        return replace(self, frame=0, tag=self.tag + 1)

    def advance(self) -> "Spinner":
        return replace(self, frame=(self.frame + 1) % len(self.preset.frames))

    def view(self) -> str:
        return self.preset.frames[self.frame]
