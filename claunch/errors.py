from __future__ import annotations

from enum import Enum


class FailureKind(str, Enum):
    ASSISTANT_NOT_FOUND = "assistant_not_found"
    APPLICATION_NOT_FOUND = "application_not_found"
    AUTOMATION_TIMEOUT = "automation_timeout"
    AUTOMATION_SCRIPT_ERROR = "automation_script_error"
    CUSTOM_COMMAND_FAILURE = "custom_command_failure"
    SPAWN_FAILED = "spawn_failed"
    INVALID_CONFIGURATION = "invalid_configuration"


class LaunchError(Exception):
    """Base class for failures that end a launch attempt."""

    kind: FailureKind = FailureKind.AUTOMATION_SCRIPT_ERROR

    def __init__(
        self,
        message: str,
        *,
        diagnostic: str | None = None,
        side_effects: bool = False,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.diagnostic = diagnostic
        # True when the target application was already opened before the failure.
        self.side_effects = side_effects


class AssistantNotFoundError(LaunchError):
    kind = FailureKind.ASSISTANT_NOT_FOUND


class ApplicationNotFoundError(LaunchError):
    kind = FailureKind.APPLICATION_NOT_FOUND


class AutomationTimeoutError(LaunchError):
    kind = FailureKind.AUTOMATION_TIMEOUT


class AutomationScriptError(LaunchError):
    kind = FailureKind.AUTOMATION_SCRIPT_ERROR


class CustomCommandError(LaunchError):
    kind = FailureKind.CUSTOM_COMMAND_FAILURE


class SpawnError(LaunchError):
    kind = FailureKind.SPAWN_FAILED


class InvalidConfigurationError(LaunchError):
    kind = FailureKind.INVALID_CONFIGURATION


class UnknownApplicationError(InvalidConfigurationError):
    def __init__(self, identifier: str) -> None:
        super().__init__(f"Invalid terminal application selected: {identifier!r}")
        self.identifier = identifier
