"""Configuration package."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .manager import ConfigManager, LauncherSettings
    from .paths import ClaunchPaths

__all__ = ["ConfigManager", "LauncherSettings", "ClaunchPaths"]


def __getattr__(name: str) -> Any:
    if name in {"ConfigManager", "LauncherSettings"}:
        from .manager import ConfigManager, LauncherSettings

        return {"ConfigManager": ConfigManager, "LauncherSettings": LauncherSettings}[name]
    if name == "ClaunchPaths":
        from .paths import ClaunchPaths

        return ClaunchPaths
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
