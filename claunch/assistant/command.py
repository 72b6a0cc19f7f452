from __future__ import annotations

import re

from ..core.escaping import escape_shell, shell_word
from ..errors import InvalidConfigurationError
from .options import DEFAULT_MAX_TURNS, DEFAULT_MODEL, OptionSet, PermissionMode

ASSISTANT_COMMAND = "claude"
CWD_PLACEHOLDER = "{{cwd}}"
# ``{{claude}}`` is the placeholder older config files use.
_PLACEHOLDER_RE = re.compile(r"\{\{(?:cwd|assistant|claude)\}\}")


def build_assistant_command(
    options: OptionSet,
    use_custom_path: bool = False,
    custom_path: str = "",
) -> str:
    """Assemble the assistant invocation. Flag order is fixed."""
    parts: list[str] = []
    override = (custom_path or "").strip()
    parts.append(shell_word(override) if use_custom_path and override else ASSISTANT_COMMAND)

    if options.permission_mode is not PermissionMode.DEFAULT:
        parts.append(f"--permission-mode {options.permission_mode.value}")
    if options.skip_permissions:
        parts.append("--dangerously-skip-permissions")
    if options.allowed_tools:
        parts.append(f"--allowedTools {','.join(options.allowed_tools)}")
    if options.denied_tools:
        parts.append(f"--disallowedTools {','.join(options.denied_tools)}")
    model = (options.model or "").strip()
    if model and model != DEFAULT_MODEL:
        parts.append(f"--model {model}")
    if options.continue_last_session:
        parts.append("--continue")
    if options.max_turns > 0 and options.max_turns != DEFAULT_MAX_TURNS:
        parts.append(f"--max-turns {options.max_turns}")
    if options.verbose:
        parts.append("--verbose")
    for directory in options.additional_directories:
        cleaned = directory.strip()
        if cleaned:
            parts.append(f'--add-dir "{escape_shell(cleaned)}"')
    return " ".join(parts)


def render_custom_command(template: str, cwd: str, assistant_command: str) -> str:
    """Substitute the first ``{{cwd}}`` and the first ``{{assistant}}`` verbatim, in one pass."""
    if not template or not template.strip():
        raise InvalidConfigurationError(
            "Custom command is empty. Set custom_command in claunch.json."
        )
    seen: set[str] = set()

    def substitute(match: re.Match[str]) -> str:
        key = "cwd" if match.group(0) == CWD_PLACEHOLDER else "assistant"
        if key in seen:
            return match.group(0)
        seen.add(key)
        return cwd if key == "cwd" else assistant_command

    return _PLACEHOLDER_RE.sub(substitute, template)
