"""String escaping for the two contexts a launch command passes through.

Commands are first embedded in a POSIX shell line (``cd "<dir>" && claude``)
and that line is then embedded in an AppleScript string literal
(``do script "..."``). Each helper handles exactly one layer.
"""

from __future__ import annotations

import re

_SHELL_SPECIAL = re.compile(r'([\\"$`])')
_APPLESCRIPT_SPECIAL = re.compile(r'([\\"])')
_SHELL_SAFE = re.compile(r"^[A-Za-z0-9_@%+=:,./-]+$")


def escape_shell(value: str) -> str:
    """Escape ``value`` for use inside a double-quoted shell string."""
    return _SHELL_SPECIAL.sub(r"\\\1", value)


def shell_quote(value: str) -> str:
    """Return ``value`` as a double-quoted shell word."""
    return f'"{escape_shell(value)}"'


def shell_word(value: str) -> str:
    """Quote ``value`` only when it contains characters the shell would split or expand."""
    if value and _SHELL_SAFE.match(value):
        return value
    return shell_quote(value)


def escape_applescript(value: str) -> str:
    """Escape ``value`` for use inside an AppleScript string literal."""
    return _APPLESCRIPT_SPECIAL.sub(r"\\\1", value)
