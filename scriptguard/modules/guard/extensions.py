"""
Guard interpreter extensions for resource definitions.

A resource mixes in one or more interpreter extensions to declare guards
written for that interpreter. Every extension follows the same shape:
read the host's architecture if it has one, resolve the interpreter's
strategy for the host's node, and bind an executor to the command.
"""

from typing import Optional, Protocol, runtime_checkable

from scriptguard.modules.api.models import Architecture, Node
from scriptguard.modules.executor.script_guard import GuardCommandExecutor
from scriptguard.modules.resolver.resolver import GuardStrategyResolver


@runtime_checkable
class HasArchitecture(Protocol):
    """Resources that carry a target architecture for their code."""

    architecture: Optional[Architecture]


class GuardInterpreterExtension:
    """
    Base mixin for declaring guards on a resource.

    The host must provide ``name`` and ``node`` attributes. Hosts may set
    ``guard_resolver`` to use a resolver other than the default one.
    """

    name: str
    node: Node
    guard_resolver: Optional[GuardStrategyResolver] = None

    default_guard_interpreter = "script"

    def guard(self, interpreter: str, command: Optional[str] = None) -> Optional[GuardCommandExecutor]:
        """
        Declare a guard for any registered interpreter.

        Returns:
            A configured executor, or None when no command was given

        Raises:
            UnsupportedPlatform: If the node has no strategy for the interpreter
        """
        if not command:
            return None

        architecture = self.architecture if isinstance(self, HasArchitecture) else None
        return GuardCommandExecutor.for_interpreter(
            self.node,
            interpreter,
            self.name,
            command,
            architecture=architecture,
            resolver=self.guard_resolver,
        )

    def script(self, command: Optional[str] = None) -> Optional[GuardCommandExecutor]:
        """Declare a guard for the platform's default interpreter."""
        return self.guard(self.default_guard_interpreter, command)


class PowershellGuard(GuardInterpreterExtension):
    def powershell(self, command: Optional[str] = None) -> Optional[GuardCommandExecutor]:
        return self.guard("powershell_script", command)


class BatchGuard(GuardInterpreterExtension):
    def batch(self, command: Optional[str] = None) -> Optional[GuardCommandExecutor]:
        return self.guard("batch", command)


class BashGuard(GuardInterpreterExtension):
    def bash(self, command: Optional[str] = None) -> Optional[GuardCommandExecutor]:
        return self.guard("bash", command)
