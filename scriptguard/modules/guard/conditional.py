"""
only_if / not_if wrappers around a single guard.

A Conditional answers one question: should the parent action go ahead?
Combining several conditionals is left to the convergence engine.
"""

import logging
from typing import Any, Callable, Optional, Union

from scriptguard.modules.api.models import ExecutionOptions
from scriptguard.modules.executor.script_guard import GuardCommandExecutor

logger = logging.getLogger("scriptguard.conditional")

Guard = Union[GuardCommandExecutor, Callable[[], Any], None]


class Conditional:
    """A single guard with only_if or not_if polarity."""

    ONLY_IF = "only_if"
    NOT_IF = "not_if"

    def __init__(self, positivity: str, guard: Guard, options: Optional[ExecutionOptions] = None):
        if positivity not in (self.ONLY_IF, self.NOT_IF):
            raise ValueError(f"Unknown conditional type: {positivity}")
        self.positivity = positivity
        self.guard = guard
        self.options = options or ExecutionOptions()

    @classmethod
    def only_if(cls, guard: Guard, **options: Any) -> "Conditional":
        return cls(cls.ONLY_IF, guard, ExecutionOptions(**options))

    @classmethod
    def not_if(cls, guard: Guard, **options: Any) -> "Conditional":
        return cls(cls.NOT_IF, guard, ExecutionOptions(**options))

    def evaluate_guard(self) -> bool:
        """Evaluate the guard itself. A missing guard counts as true."""
        if self.guard is None:
            return True
        if isinstance(self.guard, GuardCommandExecutor):
            return self.guard.run_command(self.options)
        return bool(self.guard())

    def continue_(self) -> bool:
        """Return True when the parent action should run."""
        result = self.evaluate_guard()
        proceed = result if self.positivity == self.ONLY_IF else not result
        if not proceed:
            logger.info(self.skip_reason())
        return proceed

    def description(self) -> str:
        if isinstance(self.guard, GuardCommandExecutor):
            return f'{self.positivity} {self.guard.strategy_type.resource_name} "{self.guard.command}"'
        kind = "block" if self.guard is not None else "nothing"
        return f"{self.positivity} {kind}"

    def skip_reason(self) -> str:
        if self.positivity == self.ONLY_IF:
            return f"{self.description()} evaluated false, skipping"
        return f"{self.description()} evaluated true, skipping"
