"""claunch package initialization."""

from importlib.metadata import PackageNotFoundError, version as pkg_version
from pathlib import Path
import re

__all__ = [
    "assistant",
    "automation",
    "cli",
    "config",
    "core",
    "detection",
    "launch",
    "launcher",
]


def _load_version() -> str:
    try:
        return pkg_version("claunch")
    except PackageNotFoundError:
        pyproject = Path(__file__).resolve().parents[1] / "pyproject.toml"
        if pyproject.exists():
            match = re.search(
                r'^version\s*=\s*"(?P<version>[^"]+)"',
                pyproject.read_text(),
                re.MULTILINE,
            )
            if match:
                return match.group("version")
        return "0.0.0"


# Single source of truth comes from package metadata defined in pyproject.toml
__version__: str = _load_version()
