from __future__ import annotations

from functools import partial
from pathlib import Path
from typing import Iterable, Iterator
from urllib.parse import quote

from ..automation.steps import (
    Activate,
    AutomationPlan,
    EnsureWindow,
    InjectText,
    InvokeMenuOrShortcut,
    MenuItem,
    Pacing,
    PressShortcut,
    ScriptingDialect,
    Shortcut,
    Submit,
    Wait,
    WaitCondition,
    WaitUntil,
)
from ..core.escaping import shell_quote
from ..errors import UnknownApplicationError
from .models import ApplicationDescriptor
from .strategies import (
    CustomCommandStrategy,
    DirectSpawnStrategy,
    ScriptStrategy,
    UrlStrategy,
)

WARP_DELAY = 2.5
# Characters encodeURIComponent leaves alone beyond quote()'s defaults.
_URI_COMPONENT_SAFE = "!~*'()"


def _launch_line(cwd: Path, command: str, *, clear: bool = True) -> str:
    parts = [f"cd {shell_quote(str(cwd))}"]
    if clear:
        parts.append("clear")
    parts.append(command)
    return " && ".join(parts)


def _scripted_terminal_plan(
    dialect: ScriptingDialect, app: ApplicationDescriptor, cwd: Path, command: str
) -> AutomationPlan:
    return AutomationPlan(
        app_name=app.app_name,
        process_name=app.process,
        dialect=dialect,
        steps=(Activate(), EnsureWindow(), InjectText(_launch_line(cwd, command)), Submit()),
    )


def _ghostty_plan(app: ApplicationDescriptor, cwd: Path, command: str) -> AutomationPlan:
    return AutomationPlan(
        app_name=app.app_name,
        process_name=app.process,
        dialect=ScriptingDialect.SYSTEM_EVENTS,
        steps=(
            Activate(),
            Wait(0.5),
            InvokeMenuOrShortcut(MenuItem("Shell", "New Window"), Shortcut("n", ("command",))),
            Wait(0.8),
            InjectText(_launch_line(cwd, command)),
            Submit(),
        ),
    )


def _editor_terminal_plan(
    ready: WaitUntil,
    open_terminal: Shortcut,
    app: ApplicationDescriptor,
    cwd: Path,
    command: str,
) -> AutomationPlan:
    return AutomationPlan(
        app_name=app.app_name,
        process_name=app.process,
        dialect=ScriptingDialect.SYSTEM_EVENTS,
        steps=(
            Activate(),
            Wait(1.0),
            ready,
            Wait(0.5),
            PressShortcut(open_terminal),
            Wait(1.0),
            InjectText(_launch_line(cwd, command, clear=False)),
            Submit(),
        ),
    )


def _warp_plan(app: ApplicationDescriptor, cwd: Path, command: str) -> AutomationPlan:
    # Warp drops characters when a whole line arrives at once.
    return AutomationPlan(
        app_name=app.app_name,
        process_name=app.process,
        dialect=ScriptingDialect.SYSTEM_EVENTS,
        steps=(
            Activate(),
            Wait(2.0),
            WaitUntil(WaitCondition.WINDOW_PRESENT),
            Wait(1.0),
            InjectText("cd ", Pacing(pause=0.1, per_character=True)),
            Wait(0.1),
            InjectText(shell_quote(str(cwd))),
            Wait(0.3),
            Submit(),
            Wait(0.5),
            InjectText(command),
            Submit(),
        ),
    )


def _file_url(scheme: str, cwd: Path) -> str:
    return f"{scheme}://file/{quote(str(cwd), safe=_URI_COMPONENT_SAFE)}"


def _fixed_url(url: str, cwd: Path) -> str:
    return url


TERMINAL = ApplicationDescriptor(
    identifier="terminal",
    display_name="Terminal",
    app_name="Terminal",
    bundle_id="com.apple.Terminal",
    strategy=ScriptStrategy(partial(_scripted_terminal_plan, ScriptingDialect.TERMINAL)),
)

ITERM = ApplicationDescriptor(
    identifier="iterm",
    display_name="iTerm2",
    app_name="iTerm",
    bundle_id="com.googlecode.iterm2",
    strategy=ScriptStrategy(partial(_scripted_terminal_plan, ScriptingDialect.ITERM)),
)

WARP = ApplicationDescriptor(
    identifier="warp",
    display_name="Warp",
    app_name="Warp",
    bundle_id="dev.warp.Warp-Stable",
    custom_delay=WARP_DELAY,
    requires_delay=True,
    strategy=UrlStrategy(
        build_url=partial(_fixed_url, "warp://action/new_window"),
        build_plan=_warp_plan,
        manual_hint="Failed to send command to Warp. Please type it manually.",
    ),
)

CURSOR = ApplicationDescriptor(
    identifier="cursor",
    display_name="Cursor",
    app_name="Cursor",
    bundle_id="com.todesktop.230313mzl4w4u92",
    requires_delay=True,
    strategy=UrlStrategy(
        build_url=partial(_file_url, "cursor"),
        build_plan=partial(
            _editor_terminal_plan,
            WaitUntil(WaitCondition.WINDOW_ABSENT, target="Open External Folder"),
            Shortcut("j", ("command",)),
        ),
        manual_hint="Failed to open terminal in Cursor. Please open it manually with Cmd+J",
        opening_notice="Opening Cursor... Please approve the security dialog if prompted.",
    ),
)

VSCODE = ApplicationDescriptor(
    identifier="vscode",
    display_name="VS Code",
    app_name="Visual Studio Code",
    process_name="Code",
    bundle_id="com.microsoft.VSCode",
    requires_delay=True,
    strategy=UrlStrategy(
        build_url=partial(_file_url, "vscode"),
        build_plan=partial(
            _editor_terminal_plan,
            WaitUntil(WaitCondition.NO_SHEET),
            Shortcut("`", ("control",)),
        ),
        manual_hint="Failed to open terminal in VS Code. Please open it manually with Ctrl+`",
        opening_notice="Opening VS Code... Please approve the security dialog if prompted.",
    ),
)

GHOSTTY = ApplicationDescriptor(
    identifier="ghostty",
    display_name="Ghostty",
    app_name="Ghostty",
    strategy=ScriptStrategy(_ghostty_plan),
)

DIRECT = ApplicationDescriptor(
    identifier="direct",
    display_name="Current terminal",
    app_name="",
    strategy=DirectSpawnStrategy(),
)

CUSTOM = ApplicationDescriptor(
    identifier="custom",
    display_name="Custom command",
    app_name="",
    strategy=CustomCommandStrategy(),
)


class ApplicationRegistry:
    """Read-only catalog of supported target applications."""

    def __init__(self, descriptors: Iterable[ApplicationDescriptor]) -> None:
        self._descriptors: dict[str, ApplicationDescriptor] = {}
        for descriptor in descriptors:
            if descriptor.identifier in self._descriptors:
                raise ValueError(f"Duplicate application identifier: {descriptor.identifier}")
            self._descriptors[descriptor.identifier] = descriptor

    def descriptor_for(self, identifier: str) -> ApplicationDescriptor:
        key = (identifier or "").strip().lower()
        try:
            return self._descriptors[key]
        except KeyError:
            raise UnknownApplicationError(identifier) from None

    def all_descriptors(self) -> list[ApplicationDescriptor]:
        return list(self._descriptors.values())

    def identifiers(self) -> list[str]:
        return list(self._descriptors)

    def __contains__(self, identifier: object) -> bool:
        return isinstance(identifier, str) and identifier.strip().lower() in self._descriptors

    def __iter__(self) -> Iterator[ApplicationDescriptor]:
        return iter(self._descriptors.values())


DEFAULT_REGISTRY = ApplicationRegistry([TERMINAL, ITERM, WARP, CURSOR, VSCODE, GHOSTTY, DIRECT, CUSTOM])


def descriptor_for(identifier: str) -> ApplicationDescriptor:
    return DEFAULT_REGISTRY.descriptor_for(identifier)
