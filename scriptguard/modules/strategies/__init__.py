"""
Strategies Module - Black Box Interface

Purpose: Platform-specific execution units ("run this code" objects)
Interface: ExecutionUnit.execute(), ExecutionUnit.run_action(), BUILTIN_STRATEGIES
Hidden: Script files, interpreter selection, process groups, timeouts

New interpreters subclass ExecutionUnit and are added to the registry.
"""

from .units import (
    BUILTIN_STRATEGIES,
    DEFAULT_TIMEOUT,
    BashScript,
    BatchScript,
    ExecutionUnit,
    PosixScript,
    PowershellScript,
    ShScript,
    WindowsScript,
)

__all__ = [
    "BUILTIN_STRATEGIES",
    "DEFAULT_TIMEOUT",
    "BashScript",
    "BatchScript",
    "ExecutionUnit",
    "PosixScript",
    "PowershellScript",
    "ShScript",
    "WindowsScript",
]
