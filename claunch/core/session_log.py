"""Markdown debug log for launch attempts.

Enabled by the ``debug`` setting: ``true`` or ``"all"`` turns everything on,
``"launch"`` records the dispatcher trace (states, rendered scripts), and a
level name (``error``, ``warn``, ``info``, ``debug``) records that level and
every more severe one. A list combines several of these.
"""

from __future__ import annotations

import json
import traceback
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Iterable

from ..config.paths import ClaunchPaths

LOG_LEVELS = ("error", "warn", "info", "debug")
LOG_TYPE_LAUNCH = "launch"
_ENABLE_ALL = {"all", "true", "1", "yes", "on"}


@dataclass(frozen=True)
class LogSelection:
    enabled_types: frozenset[str]
    enabled_levels: frozenset[str]


def resolve_debug_config(raw: Any) -> LogSelection:
    if raw is True:
        return LogSelection(frozenset({LOG_TYPE_LAUNCH}), frozenset(LOG_LEVELS))
    tokens: Iterable[Any]
    if isinstance(raw, str):
        tokens = [raw]
    elif isinstance(raw, (list, tuple, set)):
        tokens = raw
    else:
        tokens = []

    types: set[str] = set()
    levels: set[str] = set()
    for token in tokens:
        if not isinstance(token, str):
            continue
        name = token.strip().lower()
        if name in _ENABLE_ALL:
            types.add(LOG_TYPE_LAUNCH)
            levels.update(LOG_LEVELS)
        elif name == LOG_TYPE_LAUNCH:
            types.add(LOG_TYPE_LAUNCH)
        elif name in LOG_LEVELS:
            levels.update(LOG_LEVELS[: LOG_LEVELS.index(name) + 1])
    return LogSelection(frozenset(types), frozenset(levels))


class SessionLogger:
    """Appends one Markdown section per event to ``~/.claunch/logs``."""

    def __init__(self, paths: ClaunchPaths, debug_config: Any) -> None:
        self.paths = paths
        self._started_at = datetime.now(timezone.utc)
        self._file: Path | None = None
        self._launch_id: int | None = None
        self._launches = 0
        self.selection = resolve_debug_config(debug_config)
        self.enabled = bool(self.selection.enabled_types or self.selection.enabled_levels)

    def close(self) -> None:
        self.enabled = False

    def start_launch(self, source: str, *, summary: Any | None = None) -> int | None:
        if not self._traces_launches():
            return None
        self._launches += 1
        self._launch_id = self._launches
        self._append(source, "launch.start", LOG_TYPE_LAUNCH, summary)
        return self._launch_id

    def log_transition(self, source: str, state: str, detail: Any | None = None) -> None:
        if self._traces_launches():
            self._append(source, f"state.{state}", LOG_TYPE_LAUNCH, detail)

    def log_script(self, source: str, script: str) -> None:
        if script and self._traces_launches():
            self._append(source, "automation.script", LOG_TYPE_LAUNCH, script)

    def end_launch(self, source: str, *, status: str | None = None) -> None:
        if self._launch_id is not None and self._traces_launches():
            self._append(source, "launch.end", LOG_TYPE_LAUNCH, {"status": status})
        self._launch_id = None

    def log_level(self, source: str, level: str, event: str, content: Any | None = None) -> None:
        if self.enabled and level in self.selection.enabled_levels:
            self._append(source, event, level, content)

    def log_exception(self, source: str, exc: BaseException) -> None:
        self.log_level(
            source,
            "error",
            "exception",
            {
                "type": type(exc).__name__,
                "message": str(exc),
                "traceback": "".join(traceback.format_exception(type(exc), exc, exc.__traceback__)),
            },
        )

    def _traces_launches(self) -> bool:
        return self.enabled and LOG_TYPE_LAUNCH in self.selection.enabled_types

    def _log_file(self) -> Path:
        if self._file is None:
            self.paths.logs_dir.mkdir(parents=True, exist_ok=True)
            stamp = self._started_at.astimezone().strftime("%Y%m%d_%H%M%S")
            self._file = self.paths.logs_dir / f"claunch_session_{stamp}.md"
            if not self._file.exists():
                self._file.write_text(
                    f"# claunch Session Log\n\n- Started: {self._started_at.isoformat()}\n"
                    f"- Workspace: {self.paths.root}\n\n",
                    encoding="utf-8",
                )
        return self._file

    def _append(self, source: str, event: str, kind: str, content: Any) -> None:
        title = f"## {datetime.now(timezone.utc).isoformat()} · {kind}/{source} · {event}"
        if self._launch_id is not None:
            title += f" · launch {self._launch_id}"
        if isinstance(content, (dict, list)):
            block = f"```json\n{json.dumps(content, indent=2, ensure_ascii=False, default=str)}\n```"
        else:
            block = f"```text\n{'' if content is None else str(content).rstrip()}\n```"
        try:
            with self._log_file().open("a", encoding="utf-8") as handle:
                handle.write(f"{title}\n{block}\n\n")
        except OSError:
            # An unwritable log directory must not break a launch.
            self.close()


_active: SessionLogger | None = None


def set_active_logger(logger: SessionLogger | None) -> None:
    global _active
    _active = logger


def get_active_logger() -> SessionLogger | None:
    return _active


def log_exception(source: str, exc: BaseException) -> None:
    if _active is not None:
        _active.log_exception(source, exc)


def log_warn(source: str, event: str, content: Any | None = None) -> None:
    if _active is not None:
        _active.log_level(source, "warn", event, content)


def log_info(source: str, event: str, content: Any | None = None) -> None:
    if _active is not None:
        _active.log_level(source, "info", event, content)


def log_debug(source: str, event: str, content: Any | None = None) -> None:
    if _active is not None:
        _active.log_level(source, "debug", event, content)
