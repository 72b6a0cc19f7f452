from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, Awaitable, Callable, Optional, Protocol

from ..errors import FailureKind
from .system import open_url

if TYPE_CHECKING:
    from ..automation.engine import AutomationScriptEngine
    from ..core.notify import Notifier

DEFAULT_ACTIVATION_DELAY = 1.5
DEFAULT_COMMAND_TIMEOUT = 30.0


class LaunchKind(str, Enum):
    SCRIPT = "script"
    URL = "url"
    DIRECT = "direct"
    CUSTOM = "custom"


class LaunchStrategy(Protocol):
    kind: LaunchKind
    requires_assistant: bool

    async def launch(self, request: "LaunchRequest", context: "LaunchContext") -> None: ...

    def time_budget(self, request: "LaunchRequest", context: "LaunchContext") -> Optional[float]: ...


@dataclass(frozen=True)
class ApplicationDescriptor:
    identifier: str
    display_name: str
    app_name: str
    strategy: LaunchStrategy
    bundle_id: Optional[str] = None
    process_name: Optional[str] = None
    custom_delay: Optional[float] = None
    requires_delay: bool = False

    @property
    def kind(self) -> LaunchKind:
        return self.strategy.kind

    @property
    def process(self) -> str:
        return self.process_name or self.app_name

    @property
    def detectable(self) -> bool:
        """Whether there is an installed application to look for."""
        return self.kind in (LaunchKind.SCRIPT, LaunchKind.URL)


@dataclass(frozen=True)
class LaunchRequest:
    target: ApplicationDescriptor
    working_directory: Path
    assistant_command: str


@dataclass(frozen=True)
class LaunchFailure:
    kind: FailureKind
    message: str
    diagnostic: Optional[str] = None


@dataclass(frozen=True)
class LaunchOutcome:
    status: str  # completed|failed
    failure: Optional[LaunchFailure] = None
    side_effects: bool = False

    @property
    def ok(self) -> bool:
        return self.status == "completed"

    @classmethod
    def completed(cls) -> "LaunchOutcome":
        return cls(status="completed")

    @classmethod
    def failed(
        cls,
        kind: FailureKind,
        message: str,
        *,
        diagnostic: Optional[str] = None,
        side_effects: bool = False,
    ) -> "LaunchOutcome":
        return cls(
            status="failed",
            failure=LaunchFailure(kind=kind, message=message, diagnostic=diagnostic),
            side_effects=side_effects,
        )


@dataclass
class LaunchContext:
    """Collaborators and timing knobs shared by every strategy during one launch."""

    engine: "AutomationScriptEngine"
    notifier: Optional["Notifier"] = None
    default_delay: Optional[float] = DEFAULT_ACTIVATION_DELAY
    automation_timeout: Optional[float] = None
    command_timeout: float = DEFAULT_COMMAND_TIMEOUT
    spawn_timeout: Optional[float] = None
    custom_command: str = ""
    open_url: Callable[[str], Awaitable[None]] = field(default=open_url)
    sleep: Callable[[float], Awaitable[None]] = field(default=asyncio.sleep)

    @property
    def script_timeout(self) -> float:
        if self.automation_timeout is not None:
            return self.automation_timeout
        return self.engine.default_timeout

    def notify(self, message: str, duration_hint: Optional[float] = None) -> None:
        if self.notifier is not None:
            self.notifier.notify(message, duration_hint)
