"""
Error taxonomy for guard evaluation.

Only a failed command is an expected outcome; it is surfaced as
CommandFailed by the engine-facing run_action() and absorbed into a
boolean by the guard executor. Everything else propagates.
"""

from typing import Optional


class ScriptGuardError(Exception):
    """Base class for all guard evaluation errors."""


class UnsupportedPlatform(ScriptGuardError):
    """No strategy is registered for a (platform, version, interpreter) triple."""

    def __init__(
        self,
        interpreter: str,
        platform: Optional[str] = None,
        version: Optional[str] = None,
        message: Optional[str] = None,
    ):
        self.interpreter = interpreter
        self.platform = platform
        self.version = version
        if message is None:
            message = (
                f"No '{interpreter}' strategy registered for platform "
                f"'{platform}' version '{version}'"
            )
        super().__init__(message)


class CommandFailed(ScriptGuardError):
    """The command ran but did not exit with an expected status."""

    def __init__(
        self,
        unit_name: str,
        exit_code: Optional[int] = None,
        timed_out: bool = False,
        stderr: str = "",
    ):
        self.unit_name = unit_name
        self.exit_code = exit_code
        self.timed_out = timed_out
        self.stderr = stderr
        if timed_out:
            message = f"{unit_name} timed out"
        else:
            message = f"{unit_name} returned {exit_code}"
        super().__init__(message)


class ExecutionUnavailable(ScriptGuardError):
    """The command could not be started at all."""

    def __init__(self, unit_name: str, cause: BaseException):
        self.unit_name = unit_name
        self.cause = cause
        super().__init__(f"{unit_name} could not be executed: {cause}")


class GuardConfigurationError(ScriptGuardError):
    """A guard or execution unit is misconfigured."""


class ArchitectureNotSupported(GuardConfigurationError):
    """The node cannot run code for the requested architecture."""


class UnsupportedOption(GuardConfigurationError):
    """The strategy cannot honour an execution option on this platform."""


class RegistryConfigError(GuardConfigurationError):
    """A strategy registry file is malformed."""
