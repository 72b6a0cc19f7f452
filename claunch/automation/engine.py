from __future__ import annotations

import asyncio
from typing import Optional

from ..core.session_log import log_debug
from ..errors import AutomationScriptError, AutomationTimeoutError

DEFAULT_AUTOMATION_TIMEOUT = 10.0
OSASCRIPT = "osascript"


class AutomationScriptEngine:
    """Runs automation scripts through the OS interpreter, one at a time."""

    def __init__(
        self,
        interpreter: str = OSASCRIPT,
        default_timeout: float = DEFAULT_AUTOMATION_TIMEOUT,
    ) -> None:
        self.interpreter = interpreter
        self.default_timeout = default_timeout
        self._lock = asyncio.Lock()

    async def run(self, script: str, timeout: Optional[float] = None) -> None:
        limit = self.default_timeout if timeout is None else timeout
        async with self._lock:
            await self._run_once(script, limit)

    async def _run_once(self, script: str, timeout: float) -> None:
        try:
            proc = await asyncio.create_subprocess_exec(
                self.interpreter,
                stdin=asyncio.subprocess.PIPE,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as exc:
            raise AutomationScriptError(
                f"AppleScript error: cannot start {self.interpreter}: {exc}",
                diagnostic=str(exc),
            ) from exc

        try:
            _, stderr = await asyncio.wait_for(
                proc.communicate(script.encode("utf-8")), timeout=timeout
            )
        except asyncio.TimeoutError as exc:
            if proc.returncode is None:
                proc.kill()
            await proc.wait()
            raise AutomationTimeoutError(
                f"AppleScript execution timed out after {timeout:g}s"
            ) from exc

        if proc.returncode != 0:
            diagnostic = stderr.decode(errors="replace").strip()
            log_debug("automation", "script.failed", {"code": proc.returncode, "stderr": diagnostic})
            raise AutomationScriptError(
                f"AppleScript error: {diagnostic or f'exit code {proc.returncode}'}",
                diagnostic=diagnostic,
            )
