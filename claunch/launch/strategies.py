"""Launch strategies, one variant per way of getting the assistant running."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional

from ..assistant.command import render_custom_command
from ..automation.applescript import render_applescript
from ..automation.steps import AutomationPlan
from ..core.session_log import get_active_logger, log_info
from ..errors import CustomCommandError, LaunchError, SpawnError
from . import system
from .models import (
    DEFAULT_ACTIVATION_DELAY,
    ApplicationDescriptor,
    LaunchContext,
    LaunchKind,
    LaunchRequest,
)
from .system import OPEN_URL_TIMEOUT

PlanBuilder = Callable[[ApplicationDescriptor, Path, str], AutomationPlan]
UrlBuilder = Callable[[Path], str]


async def run_plan(plan: AutomationPlan, context: LaunchContext) -> None:
    script = render_applescript(plan)
    logger = get_active_logger()
    if logger is not None:
        logger.log_script("automation", script)
    await context.engine.run(script, timeout=context.script_timeout + plan.scripted_delay())


@dataclass(frozen=True)
class ScriptStrategy:
    """Drive the application directly with one automation script."""

    build_plan: PlanBuilder
    kind: LaunchKind = LaunchKind.SCRIPT
    requires_assistant: bool = True

    async def launch(self, request: LaunchRequest, context: LaunchContext) -> None:
        plan = self.build_plan(request.target, request.working_directory, request.assistant_command)
        await run_plan(plan, context)

    def time_budget(self, request: LaunchRequest, context: LaunchContext) -> Optional[float]:
        plan = self.build_plan(request.target, request.working_directory, request.assistant_command)
        return context.script_timeout + plan.scripted_delay()


@dataclass(frozen=True)
class UrlStrategy:
    """Open a URL, wait for the application to settle, then type into it."""

    build_url: UrlBuilder
    build_plan: PlanBuilder
    manual_hint: str
    opening_notice: Optional[str] = None
    kind: LaunchKind = LaunchKind.URL
    requires_assistant: bool = True

    def activation_delay(self, target: ApplicationDescriptor, context: LaunchContext) -> float:
        if target.custom_delay:
            return target.custom_delay
        if not target.requires_delay:
            return 0.0
        return context.default_delay or DEFAULT_ACTIVATION_DELAY

    async def launch(self, request: LaunchRequest, context: LaunchContext) -> None:
        target = request.target
        url = self.build_url(request.working_directory)
        await context.open_url(url)
        if self.opening_notice:
            context.notify(self.opening_notice, 8.0)

        delay = self.activation_delay(target, context)
        log_info("strategy.url", "followup.scheduled", {"app": target.identifier, "delay": delay})
        await context.sleep(delay)

        plan = self.build_plan(target, request.working_directory, request.assistant_command)
        try:
            await run_plan(plan, context)
        except LaunchError as exc:
            exc.message = f"{exc.message}. {self.manual_hint}"
            exc.side_effects = True
            raise

    def time_budget(self, request: LaunchRequest, context: LaunchContext) -> Optional[float]:
        plan = self.build_plan(request.target, request.working_directory, request.assistant_command)
        return (
            OPEN_URL_TIMEOUT
            + self.activation_delay(request.target, context)
            + context.script_timeout
            + plan.scripted_delay()
        )


@dataclass(frozen=True)
class DirectSpawnStrategy:
    """Run the assistant as a child process in the working directory, no automation."""

    kind: LaunchKind = LaunchKind.DIRECT
    requires_assistant: bool = True

    async def launch(self, request: LaunchRequest, context: LaunchContext) -> None:
        try:
            result = await system.run_shell(
                request.assistant_command,
                cwd=request.working_directory,
                timeout=context.spawn_timeout,
                capture=False,
            )
        except asyncio.TimeoutError as exc:
            raise SpawnError(
                f"Assistant did not exit within {context.spawn_timeout:g}s", side_effects=True
            ) from exc
        except OSError as exc:
            raise SpawnError(f"Cannot start the assistant: {exc}", diagnostic=str(exc)) from exc
        if result.returncode != 0:
            raise SpawnError(
                f"Assistant exited with code {result.returncode}",
                diagnostic=result.stderr or None,
                side_effects=True,
            )

    def time_budget(self, request: LaunchRequest, context: LaunchContext) -> Optional[float]:
        return context.spawn_timeout


@dataclass(frozen=True)
class CustomCommandStrategy:
    """Run the user's command template with ``{{cwd}}`` and ``{{assistant}}`` filled in."""

    kind: LaunchKind = LaunchKind.CUSTOM
    requires_assistant: bool = True

    async def launch(self, request: LaunchRequest, context: LaunchContext) -> None:
        command = render_custom_command(
            context.custom_command,
            str(request.working_directory),
            request.assistant_command,
        )
        log_info("strategy.custom", "command", command)
        try:
            result = await system.run_shell(
                command, cwd=request.working_directory, timeout=context.command_timeout
            )
        except asyncio.TimeoutError as exc:
            raise CustomCommandError(
                f"Custom command failed: timed out after {context.command_timeout:g}s"
            ) from exc
        except OSError as exc:
            raise CustomCommandError(f"Custom command failed: {exc}", diagnostic=str(exc)) from exc
        if result.returncode != 0:
            raise CustomCommandError(
                f"Custom command failed: {result.stderr or f'exit code {result.returncode}'}",
                diagnostic=result.stderr or None,
            )

    def time_budget(self, request: LaunchRequest, context: LaunchContext) -> Optional[float]:
        return context.command_timeout
