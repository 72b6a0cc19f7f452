"""Abstract GUI-automation steps.

A plan is a flat list of steps addressed to one application. Backends turn a
plan into something executable; ``claunch.automation.applescript`` renders
AppleScript for macOS.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Union


class ScriptingDialect(str, Enum):
    """How text reaches the application."""

    TERMINAL = "terminal"  # Terminal.app ``do script``
    ITERM = "iterm"  # iTerm ``write text`` on the current session
    SYSTEM_EVENTS = "system_events"  # simulated keystrokes


class WaitCondition(str, Enum):
    WINDOW_ABSENT = "window_absent"
    NO_SHEET = "no_sheet"
    WINDOW_PRESENT = "window_present"


@dataclass(frozen=True)
class Shortcut:
    key: str
    modifiers: tuple[str, ...] = ()

    def label(self) -> str:
        names = {"command": "Cmd", "control": "Ctrl", "option": "Opt", "shift": "Shift"}
        return "+".join([*(names.get(m, m) for m in self.modifiers), self.key.upper()])


@dataclass(frozen=True)
class MenuItem:
    menu: str
    item: str


@dataclass(frozen=True)
class Pacing:
    """Split text into bursts with pauses between them."""

    pause: float = 0.1
    per_character: bool = False


@dataclass(frozen=True)
class Activate:
    pass


@dataclass(frozen=True)
class EnsureWindow:
    pass


@dataclass(frozen=True)
class InvokeMenuOrShortcut:
    menu: MenuItem
    fallback: Shortcut


@dataclass(frozen=True)
class PressShortcut:
    shortcut: Shortcut


@dataclass(frozen=True)
class WaitUntil:
    condition: WaitCondition
    target: Optional[str] = None
    attempts: int = 10
    interval: float = 0.5


@dataclass(frozen=True)
class InjectText:
    text: str
    pacing: Optional[Pacing] = None


@dataclass(frozen=True)
class Submit:
    pass


@dataclass(frozen=True)
class Wait:
    seconds: float


Step = Union[
    Activate,
    EnsureWindow,
    InvokeMenuOrShortcut,
    PressShortcut,
    WaitUntil,
    InjectText,
    Submit,
    Wait,
]


@dataclass(frozen=True)
class AutomationPlan:
    app_name: str
    process_name: str
    dialect: ScriptingDialect
    steps: tuple[Step, ...] = field(default_factory=tuple)

    def scripted_delay(self) -> float:
        """Worst-case seconds the plan spends waiting on purpose."""
        total = 0.0
        for step in self.steps:
            if isinstance(step, Wait):
                total += step.seconds
            elif isinstance(step, WaitUntil):
                total += step.attempts * step.interval
            elif isinstance(step, InjectText) and step.pacing is not None:
                total += step.pacing.pause * max(len(text_bursts(step)) - 1, 0)
        return total


def text_bursts(step: InjectText) -> list[str]:
    if step.pacing is not None and step.pacing.per_character:
        return list(step.text)
    return [step.text]
