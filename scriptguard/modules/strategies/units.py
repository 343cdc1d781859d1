"""
Execution units: disposable "run this code" objects.

Each unit writes its code to a temporary script file and runs it with a
platform interpreter. The exit status is compared against the expected
statuses in ``returns``; stdout is never consulted.
"""

import logging
import ntpath
import os
import shutil
import signal
import subprocess
import sys
import tempfile
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional, Union

from scriptguard.modules.api.exceptions import (
    ArchitectureNotSupported,
    CommandFailed,
    ExecutionUnavailable,
    GuardConfigurationError,
    UnsupportedOption,
)
from scriptguard.modules.api.models import Architecture
from scriptguard.modules.api.outcomes import ExecutionError, Failed, GuardOutcome, Succeeded
from scriptguard.modules.events.dispatcher import RunContext

logger = logging.getLogger("scriptguard.executor")
output_logger = logging.getLogger("scriptguard.executor.output")

DEFAULT_TIMEOUT = 3600
SCRIPT_PREFIX = "scriptguard-script-"


def process_is_64bit() -> bool:
    return sys.maxsize > 2**32


class ExecutionUnit:
    """Base class for anything that runs a block of code through an interpreter."""

    resource_name = "script"
    interpreter: Optional[str] = None
    flags: List[str] = []
    script_suffix = ""

    def __init__(self, name: str, run_context: RunContext):
        self.name = name
        self.run_context = run_context

        self.code: Optional[str] = None
        self.architecture: Optional[Architecture] = None
        self.returns: Union[int, List[int]] = 0

        self.user: Optional[str] = None
        self.cwd: Optional[str] = None
        self.group: Optional[str] = None
        self.environment: Optional[Dict[str, str]] = None
        self.timeout: Optional[float] = DEFAULT_TIMEOUT

    def __str__(self) -> str:
        return f"{self.resource_name}[{self.name}]"

    @property
    def node(self):
        return self.run_context.node

    def expected_statuses(self) -> List[int]:
        if isinstance(self.returns, int):
            return [self.returns]
        return list(self.returns)

    def validate(self) -> None:
        """
        Check the unit can be run on its node.

        Raises:
            GuardConfigurationError: If the unit is misconfigured
        """
        if self.code is None:
            raise GuardConfigurationError(f"{self} has no code to run")

        if self.timeout is not None and self.timeout <= 0:
            raise GuardConfigurationError(f"{self} timeout must be positive, got {self.timeout}")

        if self.architecture is not None:
            try:
                architecture = Architecture(self.architecture)
            except ValueError:
                raise ArchitectureNotSupported(
                    f"{self} has unknown architecture '{self.architecture}'"
                ) from None
            if not self.node.supports_architecture(architecture):
                raise ArchitectureNotSupported(
                    f"{self} cannot run {architecture.value} code on node "
                    f"'{self.node.name}' ({self.node.kernel_machine or 'unknown machine'})"
                )

    def script_content(self) -> str:
        return self.code or ""

    def interpreter_command(self) -> List[str]:
        if not self.interpreter:
            raise GuardConfigurationError(f"{self} has no interpreter")
        return [self.interpreter, *self.flags]

    def command_line(self, script_path: str) -> List[str]:
        return [*self.interpreter_command(), script_path]

    def process_kwargs(self) -> Dict[str, Any]:
        kwargs: Dict[str, Any] = {}
        if self.cwd is not None:
            kwargs["cwd"] = self.cwd
        if self.environment:
            env = dict(os.environ)
            env.update({str(k): str(v) for k, v in self.environment.items()})
            kwargs["env"] = env
        return kwargs

    def execute(self) -> GuardOutcome:
        """
        Run the unit and report how it went.

        Non-zero exits and timeouts come back as Failed; a process that
        could not be prepared or started comes back as ExecutionError. Misconfiguration
        raises.
        """
        self.validate()

        events = self.run_context.events
        events.emit("resource_action_start", resource=self, action="run")

        try:
            with self._script_file() as script_path:
                outcome = self._spawn(self.command_line(script_path))
        except ExecutionUnavailable as e:
            logger.warning(f"{self} could not be prepared: {e.cause}")
            outcome = ExecutionError(cause=e.cause)

        if isinstance(outcome, Succeeded):
            events.emit("resource_completed", resource=self, outcome=outcome)
        else:
            events.emit("resource_failed", resource=self, outcome=outcome)
        return outcome

    def run_action(self) -> GuardOutcome:
        """
        Run the unit, raising on failure.

        Raises:
            CommandFailed: If the process exited with an unexpected status or timed out
            ExecutionUnavailable: If the process could not be started
        """
        outcome = self.execute()
        if isinstance(outcome, Failed):
            raise CommandFailed(
                str(self),
                exit_code=outcome.exit_code,
                timed_out=outcome.timed_out,
                stderr=outcome.stderr,
            )
        if isinstance(outcome, ExecutionError):
            raise ExecutionUnavailable(str(self), outcome.cause) from outcome.cause
        return outcome

    @contextmanager
    def _script_file(self) -> Iterator[str]:
        fd, path = tempfile.mkstemp(prefix=SCRIPT_PREFIX, suffix=self.script_suffix)
        try:
            with os.fdopen(fd, "w") as f:
                f.write(self.script_content())
            if self.user is not None or self.group is not None:
                try:
                    shutil.chown(path, user=self.user, group=self.group)
                except (LookupError, OSError) as e:
                    raise ExecutionUnavailable(str(self), e) from e
            yield path
        finally:
            try:
                os.unlink(path)
            except OSError as e:
                logger.debug(f"Could not remove script file {path}: {e}")

    def _spawn(self, argv: List[str]) -> GuardOutcome:
        logger.debug(f"Running {self}: {' '.join(argv)}")

        try:
            process = subprocess.Popen(
                argv,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
                **self.process_kwargs(),
            )
        except OSError as e:
            logger.warning(f"{self} could not be started: {e}")
            return ExecutionError(cause=e)

        try:
            stdout, stderr = process.communicate(timeout=self.timeout)
        except subprocess.TimeoutExpired:
            self._terminate(process)
            stdout, stderr = process.communicate()
            logger.info(f"{self} timed out after {self.timeout}s")
            return Failed(stdout=stdout or "", stderr=stderr or "", timed_out=True)

        self._log_output(stdout, stderr)

        if process.returncode in self.expected_statuses():
            logger.debug(f"{self} exited with status {process.returncode}")
            return Succeeded(exit_code=process.returncode, stdout=stdout, stderr=stderr)

        logger.debug(
            f"{self} exited with status {process.returncode}, "
            f"expected {self.expected_statuses()}"
        )
        return Failed(exit_code=process.returncode, stdout=stdout, stderr=stderr)

    def _terminate(self, process: subprocess.Popen) -> None:
        process.kill()

    def _log_output(self, stdout: str, stderr: str) -> None:
        for stream, text in (("stdout", stdout), ("stderr", stderr)):
            for line in (text or "").splitlines():
                output_logger.info(f"[{self}] {line}", extra={"guard_stream": stream})


class PosixScript(ExecutionUnit):
    """Script unit for POSIX interpreters."""

    def architecture_prefix(self) -> List[str]:
        if self.architecture is None:
            return []
        architecture = Architecture(self.architecture).value
        if "mac_os_x" in (self.node.platform, self.node.platform_family):
            return ["arch", f"-{architecture}"]
        return ["setarch", architecture]

    def command_line(self, script_path: str) -> List[str]:
        return [*self.architecture_prefix(), *super().command_line(script_path)]

    def process_kwargs(self) -> Dict[str, Any]:
        kwargs = super().process_kwargs()
        if self.user is not None:
            kwargs["user"] = self.user
        if self.group is not None:
            kwargs["group"] = self.group
        # Timeouts kill the whole process group
        kwargs["start_new_session"] = True
        return kwargs

    def _terminate(self, process: subprocess.Popen) -> None:
        try:
            os.killpg(process.pid, signal.SIGKILL)
        except (ProcessLookupError, PermissionError):
            process.kill()


class ShScript(PosixScript):
    resource_name = "script"
    interpreter = "/bin/sh"


class BashScript(PosixScript):
    resource_name = "bash"
    interpreter = "bash"


class WindowsScript(ExecutionUnit):
    """
    Script unit for Windows interpreters.

    The interpreter binary is chosen from the system directory matching
    the requested architecture, so a 64-bit agent can evaluate 32-bit
    guards through SysWOW64 and a 32-bit agent can reach the 64-bit
    interpreter through Sysnative.
    """

    executable: List[str] = []

    def validate(self) -> None:
        super().validate()
        if self.user is not None or self.group is not None:
            raise UnsupportedOption(f"{self} does not support running as another user or group")

    def system_directory(self) -> str:
        system_root = os.environ.get("SystemRoot", r"C:\Windows")
        target = Architecture(self.architecture) if self.architecture is not None else None
        is_64bit = process_is_64bit()

        if target == Architecture.I386 and is_64bit:
            folder = "SysWOW64"
        elif target == Architecture.X86_64 and not is_64bit:
            folder = "Sysnative"
        else:
            folder = "System32"
        return ntpath.join(system_root, folder)

    def interpreter_command(self) -> List[str]:
        return [ntpath.join(self.system_directory(), *self.executable), *self.flags]


class BatchScript(WindowsScript):
    resource_name = "batch"
    executable = ["cmd.exe"]
    flags = ["/c"]
    script_suffix = ".bat"


# Exit status rules applied around user code:
# explicit `exit N` wins, an uncaught terminating error exits 1, and a
# failing final statement exits with $LASTEXITCODE (native) or 1 (cmdlet).
POWERSHELL_PREAMBLE = """\
$global:LASTEXITCODE = 0
trap [Exception] { [Console]::Error.WriteLine($_.Exception.Message); exit 1 }
"""

POWERSHELL_EPILOGUE = """
if ($? -ne $true) { if ($LASTEXITCODE -ne 0) { exit $LASTEXITCODE } else { exit 1 } }
exit 0
"""


class PowershellScript(WindowsScript):
    resource_name = "powershell_script"
    executable = ["WindowsPowerShell", "v1.0", "powershell.exe"]
    flags = [
        "-NoLogo",
        "-NonInteractive",
        "-NoProfile",
        "-ExecutionPolicy",
        "Bypass",
        "-InputFormat",
        "None",
        "-File",
    ]
    script_suffix = ".ps1"

    def script_content(self) -> str:
        return POWERSHELL_PREAMBLE + (self.code or "") + POWERSHELL_EPILOGUE


BUILTIN_STRATEGIES = {
    "sh": ShScript,
    "bash": BashScript,
    "batch": BatchScript,
    "powershell_script": PowershellScript,
}
