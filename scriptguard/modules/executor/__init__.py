"""
Executor Module - Black Box Interface

Purpose: Evaluate guard commands and reduce their exit status to a boolean
Interface: GuardCommandExecutor.run_command(), GuardCommandExecutor.for_interpreter()
Hidden: Execution unit naming, option application, run context isolation

Interpreter-agnostic: any registered strategy can back an executor.
"""

from .script_guard import GUARD_NAME_PREFIX, GuardCommandExecutor

__all__ = ["GUARD_NAME_PREFIX", "GuardCommandExecutor"]
