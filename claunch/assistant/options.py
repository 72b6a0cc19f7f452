from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterable, Mapping, Optional

DEFAULT_MODEL = "default"
DEFAULT_MAX_TURNS = 10

KNOWN_TOOLS = (
    ("Bash", "Run shell commands"),
    ("Edit", "Edit existing files"),
    ("Write", "Create new files"),
    ("MultiEdit", "Make multiple edits"),
    ("WebFetch", "Fetch web content"),
    ("WebSearch", "Search the web"),
    ("NotebookEdit", "Edit Jupyter notebooks"),
)

ACCEPT_EDITS_TOOLS = ("Edit", "MultiEdit", "Write", "NotebookEdit")
BYPASS_PERMISSIONS_TOOLS = (
    "Bash",
    "Edit",
    "Write",
    "MultiEdit",
    "WebFetch",
    "WebSearch",
    "NotebookEdit",
)


class PermissionMode(str, Enum):
    DEFAULT = "default"
    ACCEPT_EDITS = "acceptEdits"
    BYPASS_PERMISSIONS = "bypassPermissions"
    PLAN = "plan"
    CUSTOM = "custom"

    @classmethod
    def parse(cls, raw: Any) -> "PermissionMode":
        if isinstance(raw, cls):
            return raw
        cleaned = str(raw or "").strip()
        for mode in cls:
            if mode.value.lower() == cleaned.lower():
                return mode
        raise ValueError(f"Unknown permission mode: {raw!r}")


@dataclass(frozen=True)
class OptionSet:
    """Flags passed to the assistant CLI for one launch."""

    permission_mode: PermissionMode = PermissionMode.DEFAULT
    skip_permissions: bool = False
    allowed_tools: tuple[str, ...] = ()
    denied_tools: tuple[str, ...] = ()
    model: str = DEFAULT_MODEL
    continue_last_session: bool = False
    max_turns: int = DEFAULT_MAX_TURNS
    verbose: bool = False
    additional_directories: tuple[str, ...] = field(default_factory=tuple)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "OptionSet":
        """Build from the ``assistant`` section of a config file; bad values fall back to defaults."""
        try:
            mode = PermissionMode.parse(data.get("permission_mode", PermissionMode.DEFAULT))
        except ValueError:
            mode = PermissionMode.DEFAULT
        model = data.get("model")
        return cls(
            permission_mode=mode,
            skip_permissions=bool(data.get("skip_permissions", False)),
            allowed_tools=_as_names(data.get("allowed_tools")),
            denied_tools=_as_names(data.get("denied_tools")),
            model=model.strip() if isinstance(model, str) and model.strip() else DEFAULT_MODEL,
            continue_last_session=bool(data.get("continue_last_session", False)),
            max_turns=_as_positive_int(data.get("max_turns")) or DEFAULT_MAX_TURNS,
            verbose=bool(data.get("verbose", False)),
            additional_directories=_as_names(data.get("additional_directories")),
        )

    def to_mapping(self) -> dict[str, Any]:
        return {
            "permission_mode": self.permission_mode.value,
            "skip_permissions": self.skip_permissions,
            "allowed_tools": list(self.allowed_tools),
            "denied_tools": list(self.denied_tools),
            "model": self.model,
            "continue_last_session": self.continue_last_session,
            "max_turns": self.max_turns,
            "verbose": self.verbose,
            "additional_directories": list(self.additional_directories),
        }


def preset_allowed_tools(mode: PermissionMode) -> Optional[tuple[str, ...]]:
    """Tools auto-approved when ``mode`` is selected; ``None`` keeps the current list."""
    if mode is PermissionMode.ACCEPT_EDITS:
        return ACCEPT_EDITS_TOOLS
    if mode is PermissionMode.BYPASS_PERMISSIONS:
        return BYPASS_PERMISSIONS_TOOLS
    if mode is PermissionMode.CUSTOM:
        return None
    return ()


def _as_names(raw: Any) -> tuple[str, ...]:
    if raw is None:
        return ()
    if isinstance(raw, str):
        raw = raw.split(",")
    if not isinstance(raw, Iterable):
        return ()
    return tuple(str(item).strip() for item in raw if str(item).strip())


def _as_positive_int(raw: Any) -> Optional[int]:
    if isinstance(raw, bool):
        return None
    try:
        value = int(raw)
    except (TypeError, ValueError):
        return None
    return value if value > 0 else None
