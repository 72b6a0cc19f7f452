from __future__ import annotations

import asyncio
import os
import shutil
from pathlib import Path
from typing import TYPE_CHECKING, Awaitable, Callable, Iterable, Optional, Sequence

from ..core.escaping import escape_applescript
from ..core.session_log import log_debug, log_info
from .cache import DetectionCache

if TYPE_CHECKING:
    from ..launch.models import ApplicationDescriptor

Probe = Callable[["ApplicationDescriptor"], Awaitable[bool]]

PROBE_TIMEOUT_SECONDS = 5.0
ASSISTANT_EXECUTABLE = "claude"
STANDARD_APP_DIRS = ("/Applications", "~/Applications", "/System/Applications")
ASSISTANT_LOCATIONS = (
    "/opt/homebrew/bin/claude",
    "/usr/local/bin/claude",
    "~/.local/bin/claude",
    "~/.claude/local/claude",
    "/usr/bin/claude",
)


class InstallationDetector:
    """Answers "is this installed?" for target applications and the assistant CLI."""

    def __init__(
        self,
        cache: Optional[DetectionCache] = None,
        *,
        probes: Optional[Sequence[Probe]] = None,
        assistant_locations: Sequence[str] = ASSISTANT_LOCATIONS,
        which: Callable[[str], Optional[str]] = shutil.which,
    ) -> None:
        self.cache = cache if cache is not None else DetectionCache()
        self.probes: list[Probe] = (
            list(probes)
            if probes is not None
            else [probe_bundle_id, probe_standard_dirs, probe_content_index]
        )
        self.assistant_locations = tuple(assistant_locations)
        self._which = which

    async def is_installed(self, descriptor: "ApplicationDescriptor") -> bool:
        if not descriptor.detectable:
            return True
        cached = self.cache.get(descriptor.identifier)
        if cached is not None:
            return cached
        installed = False
        for probe in self.probes:
            try:
                if await probe(descriptor):
                    installed = True
                    break
            except Exception as exc:  # noqa: BLE001
                log_debug(
                    "detector",
                    "probe.failed",
                    {"app": descriptor.identifier, "probe": _probe_name(probe), "error": str(exc)},
                )
        self.cache.set(descriptor.identifier, installed)
        log_info("detector", "app.detected", {"app": descriptor.identifier, "installed": installed})
        return installed

    async def installed_map(
        self, descriptors: Iterable["ApplicationDescriptor"]
    ) -> dict[str, bool]:
        items = list(descriptors)
        results = await asyncio.gather(*(self.is_installed(item) for item in items))
        return {item.identifier: result for item, result in zip(items, results)}

    def refresh(self) -> None:
        self.cache.clear()

    def resolve_assistant_path(self) -> Optional[Path]:
        try:
            found = self._which(ASSISTANT_EXECUTABLE)
        except Exception:  # noqa: BLE001
            found = None
        if found:
            return Path(found)
        for raw in self.assistant_locations:
            candidate = Path(raw).expanduser()
            if self.verify_executable(candidate):
                return candidate
        return None

    def verify_executable(self, path: str | Path | None) -> bool:
        if not path:
            return False
        candidate = Path(path).expanduser()
        try:
            return candidate.is_file() and os.access(candidate, os.X_OK)
        except OSError:
            return False


async def probe_bundle_id(descriptor: "ApplicationDescriptor") -> bool:
    if not descriptor.bundle_id:
        return False
    script = (
        'tell application "Finder" to get application file id '
        f'"{escape_applescript(descriptor.bundle_id)}" as text'
    )
    output = await _probe_output("osascript", "-e", script)
    return bool(output.strip())


async def probe_standard_dirs(descriptor: "ApplicationDescriptor") -> bool:
    for raw in STANDARD_APP_DIRS:
        if (Path(raw).expanduser() / f"{descriptor.app_name}.app").is_dir():
            return True
    return False


async def probe_content_index(descriptor: "ApplicationDescriptor") -> bool:
    name = descriptor.app_name.replace("'", "\\'")
    query = f"kMDItemKind == 'Application' && kMDItemFSName == '{name}.app'"
    output = await _probe_output("mdfind", query)
    return bool(output.strip())


async def _probe_output(*argv: str, timeout: float = PROBE_TIMEOUT_SECONDS) -> str:
    proc = await asyncio.create_subprocess_exec(
        *argv,
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.PIPE,
    )
    try:
        stdout, _ = await asyncio.wait_for(proc.communicate(), timeout=timeout)
    except asyncio.TimeoutError:
        proc.kill()
        await proc.wait()
        raise
    if proc.returncode != 0:
        return ""
    return stdout.decode(errors="replace")


def _probe_name(probe: Probe) -> str:
    return getattr(probe, "__name__", type(probe).__name__)
