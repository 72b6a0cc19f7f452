from __future__ import annotations

from dataclasses import dataclass, replace
from pathlib import Path
from typing import Optional

from .assistant.command import build_assistant_command
from .automation.engine import AutomationScriptEngine
from .config.manager import ConfigManager, LauncherSettings
from .core.notify import ConsoleNotifier, Notifier
from .core.session_log import SessionLogger
from .core.workspace import Workspace
from .detection.detector import InstallationDetector
from .errors import FailureKind, UnknownApplicationError
from .launch.apps import DEFAULT_REGISTRY, ApplicationRegistry
from .launch.dispatcher import LaunchDispatcher
from .launch.models import (
    ApplicationDescriptor,
    LaunchContext,
    LaunchKind,
    LaunchOutcome,
    LaunchRequest,
)

FAILURE_NOTICE_SECONDS = 8.0


@dataclass(frozen=True)
class Diagnostics:
    assistant_path: Optional[Path]
    assistant_ok: bool
    applications: dict[str, bool]
    settings: LauncherSettings


class Launcher:
    """Reads settings and workspace context at invocation time and drives one launch."""

    def __init__(
        self,
        config: ConfigManager,
        workspace: Workspace,
        *,
        registry: ApplicationRegistry = DEFAULT_REGISTRY,
        detector: Optional[InstallationDetector] = None,
        engine: Optional[AutomationScriptEngine] = None,
        notifier: Optional[Notifier] = None,
        session_logger: SessionLogger | None = None,
    ) -> None:
        self.config = config
        self.workspace = workspace
        self.registry = registry
        self.detector = detector or InstallationDetector()
        self.engine = engine or AutomationScriptEngine()
        self.notifier = notifier or ConsoleNotifier(config.console)
        self.session_logger = session_logger

    def assistant_command(self, settings: Optional[LauncherSettings] = None) -> str:
        settings = settings or self.config.load_settings()
        return build_assistant_command(
            settings.options,
            settings.use_custom_assistant_path,
            settings.assistant_path,
        )

    def working_directory(self, settings: LauncherSettings) -> Workspace:
        if settings.always_open_vault_root and not self.workspace.always_open_root:
            return replace(self.workspace, always_open_root=True)
        return self.workspace

    def build_request(
        self, settings: LauncherSettings, app_id: Optional[str] = None
    ) -> LaunchRequest:
        target = self.registry.descriptor_for(app_id or settings.terminal_app)
        workspace = self.working_directory(settings)
        return LaunchRequest(
            target=target,
            working_directory=workspace.active_working_directory(),
            assistant_command=self.assistant_command(settings),
        )

    def dispatcher(self, settings: LauncherSettings) -> LaunchDispatcher:
        context = LaunchContext(
            engine=self.engine,
            notifier=self.notifier,
            default_delay=settings.terminal_delay,
            automation_timeout=settings.automation_timeout,
            command_timeout=settings.command_timeout,
            spawn_timeout=settings.spawn_timeout,
            custom_command=settings.custom_command,
        )
        return LaunchDispatcher(
            self.detector,
            context,
            assistant_path=settings.assistant_path,
            use_custom_assistant_path=settings.use_custom_assistant_path,
            check_application=settings.check_application,
            session_logger=self.session_logger,
        )

    async def open(self, app_id: Optional[str] = None) -> LaunchOutcome:
        settings = self.config.load_settings()
        try:
            request = self.build_request(settings, app_id)
        except UnknownApplicationError as exc:
            outcome = LaunchOutcome.failed(FailureKind.INVALID_CONFIGURATION, exc.message)
            self._report(outcome, None)
            return outcome
        if request.target.kind is LaunchKind.DIRECT:
            self.notifier.notify(f"Starting Claude Code in: {self._display_path(settings)}")
        outcome = await self.dispatcher(settings).dispatch(request)
        self._report(outcome, request.target, settings)
        return outcome

    async def diagnostics(self, *, refresh: bool = True) -> Diagnostics:
        settings = self.config.load_settings()
        if refresh:
            self.detector.refresh()
        if settings.use_custom_assistant_path:
            assistant_path: Optional[Path] = Path(settings.assistant_path).expanduser()
            assistant_ok = self.detector.verify_executable(assistant_path)
        else:
            assistant_path = self.detector.resolve_assistant_path()
            assistant_ok = assistant_path is not None
        applications = await self.detector.installed_map(
            descriptor for descriptor in self.registry if descriptor.detectable
        )
        return Diagnostics(
            assistant_path=assistant_path,
            assistant_ok=assistant_ok,
            applications=applications,
            settings=settings,
        )

    def _report(
        self,
        outcome: LaunchOutcome,
        target: Optional[ApplicationDescriptor],
        settings: Optional[LauncherSettings] = None,
    ) -> None:
        if not outcome.ok and outcome.failure is not None:
            self.notifier.notify(
                f"Failed to open Claude Code: {outcome.failure.message}",
                FAILURE_NOTICE_SECONDS,
            )
            return
        if target is None or settings is None or not _announces_success(target):
            return
        self.notifier.notify(f"Opening Claude Code in: {self._display_path(settings)}")

    def _display_path(self, settings: LauncherSettings) -> str:
        return self.working_directory(settings).display_path()


def _announces_success(target: ApplicationDescriptor) -> bool:
    # Editors already told the user about their security dialog; a direct session has ended.
    if target.kind is LaunchKind.DIRECT:
        return False
    return not getattr(target.strategy, "opening_notice", None)
