from __future__ import annotations

import asyncio
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from ..errors import ApplicationNotFoundError, AutomationTimeoutError

OPEN_URL_TIMEOUT = 10.0


@dataclass(frozen=True)
class ShellResult:
    returncode: int
    stderr: str


async def open_url(url: str, timeout: float = OPEN_URL_TIMEOUT) -> None:
    """Hand ``url`` to the platform's URL handler."""
    opener = "open" if sys.platform == "darwin" else "xdg-open"
    try:
        proc = await asyncio.create_subprocess_exec(
            opener,
            url,
            stdout=asyncio.subprocess.DEVNULL,
            stderr=asyncio.subprocess.PIPE,
        )
    except OSError as exc:
        raise ApplicationNotFoundError(f"Cannot open {url}: {exc}") from exc
    try:
        _, stderr = await asyncio.wait_for(proc.communicate(), timeout=timeout)
    except asyncio.TimeoutError as exc:
        if proc.returncode is None:
            proc.kill()
        await proc.wait()
        raise AutomationTimeoutError(
            f"{opener} did not hand off {url} within {timeout:g}s"
        ) from exc
    if proc.returncode != 0:
        detail = stderr.decode(errors="replace").strip()
        raise ApplicationNotFoundError(
            f"No application accepted {url}", diagnostic=detail or None
        )


async def run_shell(
    command: str,
    *,
    cwd: Path,
    timeout: Optional[float] = None,
    capture: bool = True,
) -> ShellResult:
    """Run ``command`` through the user's shell in ``cwd``; stdio is inherited unless captured."""
    pipe = asyncio.subprocess.PIPE if capture else None
    proc = await asyncio.create_subprocess_shell(
        command,
        cwd=str(cwd),
        stdout=pipe,
        stderr=pipe,
    )
    try:
        _, stderr = await asyncio.wait_for(proc.communicate(), timeout=timeout)
    except asyncio.TimeoutError:
        if proc.returncode is None:
            proc.kill()
        await proc.wait()
        raise
    text = stderr.decode(errors="replace").strip() if stderr else ""
    return ShellResult(returncode=proc.returncode or 0, stderr=text)
