"""
Outcome types returned by execution units.

An execution either succeeds, fails with a status the guard treats as
false, or could not be attempted at all.
"""

from dataclasses import dataclass
from typing import Optional, Union


@dataclass(frozen=True)
class Succeeded:
    """The process exited with an expected status."""

    exit_code: int = 0
    stdout: str = ""
    stderr: str = ""


@dataclass(frozen=True)
class Failed:
    """The process ran but exited unexpectedly or was killed on timeout."""

    exit_code: Optional[int] = None
    stdout: str = ""
    stderr: str = ""
    timed_out: bool = False

    @property
    def reason(self) -> str:
        if self.timed_out:
            return "timed out"
        return f"exited with status {self.exit_code}"


@dataclass(frozen=True)
class ExecutionError:
    """The process could not be started."""

    cause: BaseException


GuardOutcome = Union[Succeeded, Failed, ExecutionError]
