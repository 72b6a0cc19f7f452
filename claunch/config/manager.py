from __future__ import annotations

import json
import os
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

from rich.console import Console
from rich.markup import escape

from .. import __version__
from ..assistant.options import OptionSet, PermissionMode, preset_allowed_tools
from .paths import ClaunchPaths

DEFAULT_ASSISTANT_PATH = "/opt/homebrew/bin/claude"
ASSISTANT_KEY = "assistant"


def _default_terminal_app() -> str:
    return "terminal" if sys.platform == "darwin" else "direct"


def default_config() -> Dict[str, Any]:
    return {
        "terminal_app": _default_terminal_app(),
        "custom_command": "",
        "assistant_path": DEFAULT_ASSISTANT_PATH,
        "use_custom_assistant_path": False,
        "terminal_delay_ms": 1500,
        "automation_timeout_ms": 10000,
        "command_timeout_ms": 30000,
        "spawn_timeout_ms": 0,
        "always_open_vault_root": False,
        "check_application": True,
        "debug": False,
        ASSISTANT_KEY: OptionSet().to_mapping(),
    }


@dataclass
class LauncherSettings:
    terminal_app: str
    custom_command: str
    assistant_path: str
    use_custom_assistant_path: bool
    terminal_delay_ms: int
    automation_timeout_ms: int
    command_timeout_ms: int
    spawn_timeout_ms: int
    always_open_vault_root: bool
    check_application: bool
    debug: Any
    options: OptionSet = field(default_factory=OptionSet)

    @property
    def terminal_delay(self) -> float:
        return self.terminal_delay_ms / 1000

    @property
    def automation_timeout(self) -> float:
        return self.automation_timeout_ms / 1000

    @property
    def command_timeout(self) -> float:
        return self.command_timeout_ms / 1000

    @property
    def spawn_timeout(self) -> Optional[float]:
        return self.spawn_timeout_ms / 1000 if self.spawn_timeout_ms > 0 else None


class ConfigManager:
    """Handles claunch configuration files: global defaults, workspace overrides, environment."""

    def __init__(self, paths: ClaunchPaths, console: Optional[Console] = None) -> None:
        self.paths = paths
        self.console = console or Console()
        self._ensure_home_bootstrap()

    def load_settings(self) -> LauncherSettings:
        """Merge defaults, global config, project config and environment variables."""
        merged = self.load_config()
        merged = self._merge_dicts(merged, self._env_overrides())
        defaults = default_config()
        assistant_cfg = merged.get(ASSISTANT_KEY)
        if not isinstance(assistant_cfg, dict):
            assistant_cfg = {}
        return LauncherSettings(
            terminal_app=str(merged.get("terminal_app") or defaults["terminal_app"]).strip().lower(),
            custom_command=str(merged.get("custom_command") or ""),
            assistant_path=str(merged.get("assistant_path") or defaults["assistant_path"]).strip(),
            use_custom_assistant_path=self._to_bool(merged.get("use_custom_assistant_path")),
            terminal_delay_ms=self._duration(merged, "terminal_delay_ms", defaults),
            automation_timeout_ms=self._duration(merged, "automation_timeout_ms", defaults),
            command_timeout_ms=self._duration(merged, "command_timeout_ms", defaults),
            spawn_timeout_ms=self._duration(merged, "spawn_timeout_ms", defaults),
            always_open_vault_root=self._to_bool(merged.get("always_open_vault_root")),
            check_application=self._to_bool(merged.get("check_application", True)),
            debug=merged.get("debug"),
            options=OptionSet.from_mapping(assistant_cfg),
        )

    def load_config(self) -> Dict[str, Any]:
        merged = self._merge_dicts(default_config(), self._read_json(self.paths.global_config_file))
        return self._merge_dicts(merged, self._read_json(self.paths.config_file))

    def create_config_template(self) -> bool:
        """Write .claunch/claunch.json for this workspace unless it exists. Returns True if created."""
        if self.paths.config_file.exists():
            return False
        self.paths.claunch_dir.mkdir(parents=True, exist_ok=True)
        template = {
            "terminal_app": self.load_config().get("terminal_app", _default_terminal_app()),
            ASSISTANT_KEY: {"permission_mode": PermissionMode.DEFAULT.value},
        }
        self._write_json(self.paths.config_file, template)
        return True

    def set_permission_mode(self, mode: PermissionMode) -> OptionSet:
        """Persist ``mode`` in the workspace config and apply its tool preset."""
        data = self._read_json(self.paths.config_file)
        assistant_cfg = data.get(ASSISTANT_KEY)
        if not isinstance(assistant_cfg, dict):
            assistant_cfg = {}
        assistant_cfg["permission_mode"] = mode.value
        preset = preset_allowed_tools(mode)
        if preset is not None:
            assistant_cfg["allowed_tools"] = list(preset)
            denied = assistant_cfg.get("denied_tools")
            if isinstance(denied, list):
                assistant_cfg["denied_tools"] = [tool for tool in denied if tool not in preset]
        data[ASSISTANT_KEY] = assistant_cfg
        self.paths.claunch_dir.mkdir(parents=True, exist_ok=True)
        self._write_json(self.paths.config_file, data)
        return self.load_settings().options

    def _env_overrides(self) -> Dict[str, Any]:
        overrides: Dict[str, Any] = {}
        terminal_app = os.getenv("CLAUNCH_TERMINAL_APP")
        if terminal_app:
            overrides["terminal_app"] = terminal_app
        assistant_path = os.getenv("CLAUNCH_ASSISTANT_PATH")
        if assistant_path:
            overrides["assistant_path"] = assistant_path
            overrides["use_custom_assistant_path"] = True
        delay = self._to_int(os.getenv("CLAUNCH_TERMINAL_DELAY_MS"))
        if delay is not None:
            overrides["terminal_delay_ms"] = delay
        debug = os.getenv("CLAUNCH_DEBUG")
        if debug:
            overrides["debug"] = debug
        return overrides

    def _duration(self, data: Dict[str, Any], key: str, defaults: Dict[str, Any]) -> int:
        raw = data.get(key)
        value = raw if isinstance(raw, int) and not isinstance(raw, bool) else self._to_int(raw)
        if value is None or value < 0:
            if raw is not None:
                self.console.print(
                    f"[yellow]Ignoring {key}={escape(repr(raw))}: expected a non-negative number of milliseconds.[/yellow]"
                )
            return int(defaults[key])
        return value

    def _merge_dicts(self, base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
        if not override:
            return dict(base)
        merged: Dict[str, Any] = dict(base)
        for key, value in override.items():
            if isinstance(value, dict) and isinstance(merged.get(key), dict):
                merged[key] = self._merge_dicts(merged[key], value)  # type: ignore[arg-type]
            else:
                merged[key] = value
        return merged

    def _read_json(self, path: Path) -> Dict[str, Any]:
        if not path.exists():
            return {}
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except json.JSONDecodeError:
            self.console.print(f"[red]Failed to parse JSON config at {escape(str(path))}. Using defaults.[/red]")
            return {}
        if not isinstance(data, dict):
            self.console.print(f"[yellow]Ignoring {escape(str(path))}: expected an object.[/yellow]")
            return {}
        return data

    def _write_json(self, path: Path, data: Dict[str, Any]) -> None:
        path.write_text(json.dumps(data, indent=2, ensure_ascii=False) + "\n", encoding="utf-8")

    def _ensure_home_bootstrap(self) -> None:
        global_dir = self.paths.global_dir
        if self.paths.global_config_file.exists():
            return
        try:
            global_dir.mkdir(parents=True, exist_ok=True)
            template = default_config()
            template["version"] = __version__
            self._write_json(self.paths.global_config_file, template)
            self.console.print(
                f"[cyan]Created default config at {escape(str(self.paths.global_config_file))}.[/cyan]"
            )
        except PermissionError:
            self.console.print(
                f"[yellow]Cannot write {escape(str(self.paths.global_config_file))}. Please create it manually.[/yellow]"
            )

    def _to_bool(self, value: Any) -> bool:
        if isinstance(value, str):
            return value.strip().lower() in {"1", "true", "yes", "y", "on"}
        return bool(value)

    def _to_int(self, value: Any) -> Optional[int]:
        if value is None or isinstance(value, bool):
            return None
        try:
            return int(value)
        except (TypeError, ValueError):
            return None
