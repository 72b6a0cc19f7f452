from __future__ import annotations

import asyncio
from enum import Enum
from typing import Optional

from ..core.session_log import SessionLogger, log_exception, log_warn
from ..detection.detector import InstallationDetector
from ..errors import (
    ApplicationNotFoundError,
    AssistantNotFoundError,
    AutomationTimeoutError,
    FailureKind,
    LaunchError,
)
from .models import LaunchContext, LaunchKind, LaunchOutcome, LaunchRequest

BUDGET_GRACE_SECONDS = 1.0


class DispatchState(str, Enum):
    IDLE = "idle"
    DETECTING = "detecting"
    SCRIPT = "script"
    URL = "url"
    DIRECT = "direct"
    CUSTOM = "custom"
    COMPLETED = "completed"
    FAILED = "failed"


_STRATEGY_STATES = {
    LaunchKind.SCRIPT: DispatchState.SCRIPT,
    LaunchKind.URL: DispatchState.URL,
    LaunchKind.DIRECT: DispatchState.DIRECT,
    LaunchKind.CUSTOM: DispatchState.CUSTOM,
}


class LaunchDispatcher:
    """Turns one LaunchRequest into exactly one LaunchOutcome."""

    def __init__(
        self,
        detector: InstallationDetector,
        context: LaunchContext,
        *,
        assistant_path: str = "",
        use_custom_assistant_path: bool = False,
        check_application: bool = True,
        grace: float = BUDGET_GRACE_SECONDS,
        session_logger: SessionLogger | None = None,
    ) -> None:
        self.detector = detector
        self.context = context
        self.assistant_path = assistant_path
        self.use_custom_assistant_path = use_custom_assistant_path
        self.check_application = check_application
        self.grace = grace
        self.state = DispatchState.IDLE
        self._session_logger = session_logger

    async def dispatch(self, request: LaunchRequest) -> LaunchOutcome:
        target = request.target
        strategy = target.strategy
        if self._session_logger is not None:
            self._session_logger.start_launch(
                "dispatcher",
                summary={
                    "app": target.identifier,
                    "cwd": str(request.working_directory),
                    "command": request.assistant_command,
                },
            )
        try:
            self._transition(DispatchState.DETECTING)
            if strategy.requires_assistant:
                self._ensure_assistant()
            if self.check_application and not await self.detector.is_installed(target):
                raise ApplicationNotFoundError(f"{target.display_name} is not installed.")
            self._transition(_STRATEGY_STATES[strategy.kind], target.identifier)
            await self._run_bounded(request)
        except LaunchError as exc:
            outcome = LaunchOutcome.failed(
                exc.kind,
                exc.message,
                diagnostic=exc.diagnostic,
                side_effects=exc.side_effects,
            )
        except Exception as exc:  # noqa: BLE001
            log_exception("dispatcher", exc)
            outcome = LaunchOutcome.failed(
                FailureKind.AUTOMATION_SCRIPT_ERROR,
                f"Unexpected error while launching: {exc}",
                side_effects=self.state not in (DispatchState.IDLE, DispatchState.DETECTING),
            )
        else:
            outcome = LaunchOutcome.completed()

        if outcome.ok:
            self._transition(DispatchState.COMPLETED)
        else:
            log_warn("dispatcher", "launch.failed", outcome.failure)
            self._transition(DispatchState.FAILED, outcome.failure)
        if self._session_logger is not None:
            self._session_logger.end_launch("dispatcher", status=outcome.status)
        return outcome

    def _ensure_assistant(self) -> None:
        if self.use_custom_assistant_path:
            if not self.detector.verify_executable(self.assistant_path):
                raise AssistantNotFoundError(
                    f"Claude Code not found at {self.assistant_path or '(empty path)'}. "
                    "Check assistant_path in claunch.json."
                )
            return
        if self.detector.resolve_assistant_path() is None:
            raise AssistantNotFoundError("Claude Code not found. Please install it first.")

    async def _run_bounded(self, request: LaunchRequest) -> None:
        strategy = request.target.strategy
        budget = strategy.time_budget(request, self.context)
        if budget is None:
            await strategy.launch(request, self.context)
            return
        limit = budget + self.grace
        try:
            await asyncio.wait_for(strategy.launch(request, self.context), timeout=limit)
        except asyncio.TimeoutError as exc:
            raise AutomationTimeoutError(
                f"{request.target.display_name} did not respond within {limit:g}s. "
                "Finish the launch manually.",
                side_effects=True,
            ) from exc

    def _transition(self, state: DispatchState, detail: object | None = None) -> None:
        self.state = state
        if self._session_logger is not None:
            self._session_logger.log_transition("dispatcher", state.value, detail)
