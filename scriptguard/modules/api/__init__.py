"""
API Module - Black Box Interface

Purpose: Shared models, outcome types and error taxonomy
Interface: Node, ExecutionOptions, Architecture, GuardOutcome, exceptions
Hidden: Validation rules, host detection details

Every other module speaks in these types.
"""

from .exceptions import (
    ArchitectureNotSupported,
    CommandFailed,
    ExecutionUnavailable,
    GuardConfigurationError,
    RegistryConfigError,
    ScriptGuardError,
    UnsupportedOption,
    UnsupportedPlatform,
)
from .models import Architecture, ExecutionOptions, Node
from .outcomes import ExecutionError, Failed, GuardOutcome, Succeeded

__all__ = [
    "Architecture",
    "ArchitectureNotSupported",
    "CommandFailed",
    "ExecutionError",
    "ExecutionOptions",
    "ExecutionUnavailable",
    "Failed",
    "GuardConfigurationError",
    "GuardOutcome",
    "Node",
    "RegistryConfigError",
    "ScriptGuardError",
    "Succeeded",
    "UnsupportedOption",
    "UnsupportedPlatform",
]
