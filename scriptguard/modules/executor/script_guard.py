"""
Guard command executor.

Binds a resolved strategy to a command and evaluates it on demand. Each
evaluation builds a fresh, uniquely named execution unit inside its own
run context, so guard runs leave no trace in the run that declared them.
"""

import logging
from typing import Optional, Type

from scriptguard.modules.api.exceptions import CommandFailed, ExecutionUnavailable
from scriptguard.modules.api.models import Architecture, ExecutionOptions, Node
from scriptguard.modules.api.outcomes import ExecutionError, Failed, GuardOutcome, Succeeded
from scriptguard.modules.events.dispatcher import EventDispatcher, RunContext
from scriptguard.modules.resolver.resolver import GuardStrategyResolver
from scriptguard.modules.strategies.units import ExecutionUnit

logger = logging.getLogger("scriptguard.guard")

GUARD_NAME_PREFIX = "scriptguard"


class GuardCommandExecutor:
    """Evaluates one guard command through one execution strategy."""

    def __init__(
        self,
        strategy_type: Type[ExecutionUnit],
        node: Node,
        parent_name: str,
        command: str,
        architecture: Optional[Architecture] = None,
    ):
        """
        Initialize the executor. Performs no I/O.

        Args:
            strategy_type: Execution unit class that runs the command
            node: Node the guard is evaluated on
            parent_name: Name of the resource declaring the guard
            command: Code to run
            architecture: Optional architecture to run the code under
        """
        self.strategy_type = strategy_type
        self.node = node
        self.parent_name = parent_name
        self.command = command
        self.architecture = architecture

        self.last_result: Optional[bool] = None
        self.last_outcome: Optional[GuardOutcome] = None

    @classmethod
    def for_interpreter(
        cls,
        node: Node,
        interpreter: str,
        parent_name: str,
        command: str,
        architecture: Optional[Architecture] = None,
        resolver: Optional[GuardStrategyResolver] = None,
    ) -> "GuardCommandExecutor":
        """
        Resolve the strategy for an interpreter and build an executor.

        Raises:
            UnsupportedPlatform: If the node has no strategy for the interpreter
        """
        resolver = resolver or GuardStrategyResolver()
        strategy_type = resolver.resolve(node, interpreter)
        return cls(strategy_type, node, parent_name, command, architecture)

    @property
    def unit_name(self) -> str:
        """Name of the execution unit, unique per (parent, strategy) pair."""
        return f"{GUARD_NAME_PREFIX}-{self.strategy_type.resource_name}-{self.parent_name}"

    def run_command(self, options: Optional[ExecutionOptions] = None) -> bool:
        """
        Run the guard command and report whether it succeeded.

        Every call runs the command again; last_result only records the
        most recent answer.

        Args:
            options: Execution settings for this invocation

        Returns:
            True if the command exited with status zero, False otherwise

        Raises:
            ExecutionUnavailable: If the command could not be started
            GuardConfigurationError: If the guard is misconfigured
        """
        outcome = self.evaluate(options)

        if isinstance(outcome, ExecutionError):
            raise ExecutionUnavailable(self.unit_name, outcome.cause) from outcome.cause

        result = isinstance(outcome, Succeeded)
        self.last_result = result
        if not result:
            logger.info(f"Guard {self.unit_name} evaluated false ({outcome.reason})")
        else:
            logger.debug(f"Guard {self.unit_name} evaluated true")
        return result

    def evaluate(self, options: Optional[ExecutionOptions] = None) -> GuardOutcome:
        """Run the guard command and return the raw outcome."""
        options = options or ExecutionOptions()
        run_context = self._new_run_context()
        unit = self._build_unit(run_context, options)
        try:
            outcome = unit.execute()
        except CommandFailed as e:
            logger.debug(f"Guard {self.unit_name} raised {e}")
            outcome = Failed(exit_code=e.exit_code, stderr=e.stderr, timed_out=e.timed_out)
        self.last_outcome = outcome
        return outcome

    def _new_run_context(self) -> RunContext:
        return RunContext(node=self.node, events=EventDispatcher())

    def _build_unit(self, run_context: RunContext, options: ExecutionOptions) -> ExecutionUnit:
        unit = self.strategy_type(self.unit_name, run_context)
        unit.code = self.command
        if self.architecture is not None:
            unit.architecture = self.architecture
        unit.returns = 0

        if options.user is not None:
            unit.user = options.user
        if options.cwd is not None:
            unit.cwd = options.cwd
        if options.group is not None:
            unit.group = options.group
        if options.environment is not None:
            unit.environment = dict(options.environment)
        if options.timeout is not None:
            unit.timeout = options.timeout

        run_context.add_resource(unit)
        return unit
