from __future__ import annotations

from ..core.escaping import escape_applescript
from .steps import (
    Activate,
    AutomationPlan,
    EnsureWindow,
    InjectText,
    InvokeMenuOrShortcut,
    PressShortcut,
    ScriptingDialect,
    Shortcut,
    Step,
    Submit,
    Wait,
    WaitCondition,
    WaitUntil,
    text_bursts,
)

INDENT = "    "


def render_applescript(plan: AutomationPlan) -> str:
    """Render ``plan`` as one AppleScript program, one block per step."""
    lines: list[str] = []
    for step in plan.steps:
        lines.extend(_render_step(plan, step))
    return "\n".join(lines) + "\n"


def _render_step(plan: AutomationPlan, step: Step) -> list[str]:
    app = _literal(plan.app_name)
    if isinstance(step, Activate):
        return [f"tell application {app} to activate"]
    if isinstance(step, Wait):
        return [f"delay {_seconds(step.seconds)}"]
    if isinstance(step, EnsureWindow):
        if plan.dialect is ScriptingDialect.ITERM:
            return [f"tell application {app} to create window with default profile"]
        # Terminal's ``do script`` opens its own window; keystroke apps use a menu step.
        return []
    if isinstance(step, InjectText):
        return _render_text(plan, step)
    if isinstance(step, Submit):
        if plan.dialect is ScriptingDialect.SYSTEM_EVENTS:
            return _in_process(plan, ["keystroke return"])
        return []
    if isinstance(step, PressShortcut):
        return _in_process(plan, [_keystroke(step.shortcut)])
    if isinstance(step, InvokeMenuOrShortcut):
        menu = step.menu
        return _in_process(
            plan,
            [
                "try",
                f"{INDENT}click menu item {_literal(menu.item)} of menu {_literal(menu.menu)} of menu bar 1",
                "on error",
                f"{INDENT}{_keystroke(step.fallback)}",
                "end try",
            ],
        )
    if isinstance(step, WaitUntil):
        return _in_process(plan, _render_poll(step))
    raise TypeError(f"Unsupported automation step: {step!r}")


def _render_text(plan: AutomationPlan, step: InjectText) -> list[str]:
    app = _literal(plan.app_name)
    text = _literal(step.text)
    if plan.dialect is ScriptingDialect.TERMINAL:
        return [f"tell application {app} to do script {text}"]
    if plan.dialect is ScriptingDialect.ITERM:
        return [
            f"tell application {app}",
            f"{INDENT}tell current session of current window",
            f"{INDENT * 2}write text {text}",
            f"{INDENT}end tell",
            "end tell",
        ]
    body: list[str] = []
    bursts = text_bursts(step)
    for index, burst in enumerate(bursts):
        if index and step.pacing is not None:
            body.append(f"delay {_seconds(step.pacing.pause)}")
        body.append(f"keystroke {_literal(burst)}")
    return _in_process(plan, body)


def _render_poll(step: WaitUntil) -> list[str]:
    if step.condition is WaitCondition.NO_SHEET:
        check = [
            "try",
            f"{INDENT}if not (exists sheet 1 of window 1) then exit repeat",
            "on error",
            f"{INDENT}exit repeat",
            "end try",
        ]
    elif step.condition is WaitCondition.WINDOW_ABSENT:
        check = [f"if not (exists window {_literal(step.target or '')}) then exit repeat"]
    else:
        window = _literal(step.target) if step.target else "1"
        check = [f"if (exists window {window}) then exit repeat"]
    return [
        f"repeat {int(step.attempts)} times",
        *(f"{INDENT}{line}" for line in check),
        f"{INDENT}delay {_seconds(step.interval)}",
        "end repeat",
    ]


def _in_process(plan: AutomationPlan, body: list[str]) -> list[str]:
    return [
        'tell application "System Events"',
        f"{INDENT}tell process {_literal(plan.process_name)}",
        *(f"{INDENT * 2}{line}" for line in body),
        f"{INDENT}end tell",
        "end tell",
    ]


def _keystroke(shortcut: Shortcut) -> str:
    line = f"keystroke {_literal(shortcut.key)}"
    if shortcut.modifiers:
        modifiers = ", ".join(f"{name} down" for name in shortcut.modifiers)
        line = f"{line} using {{{modifiers}}}"
    return line


def _literal(value: str) -> str:
    return f'"{escape_applescript(value)}"'


def _seconds(value: float) -> str:
    return f"{value:g}"
