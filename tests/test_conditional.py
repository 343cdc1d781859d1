"""
Tests for only_if / not_if conditionals.
"""

from unittest.mock import MagicMock

import pytest
from pydantic import ValidationError

from conftest import posix_only
from scriptguard.modules.api.models import ExecutionOptions
from scriptguard.modules.executor.script_guard import GuardCommandExecutor
from scriptguard.modules.guard.conditional import Conditional
from scriptguard.modules.strategies.units import ShScript


class TestBlockConditionals:
    """Conditionals wrapping plain callables."""

    def test_only_if_false_skips(self):
        assert Conditional.only_if(lambda: False).continue_() is False

    def test_only_if_true_runs(self):
        assert Conditional.only_if(lambda: True).continue_() is True

    def test_not_if_true_skips(self):
        assert Conditional.not_if(lambda: True).continue_() is False

    def test_not_if_false_runs(self):
        assert Conditional.not_if(lambda: False).continue_() is True

    def test_truthy_values(self):
        assert Conditional.only_if(lambda: "yes").continue_() is True
        assert Conditional.only_if(lambda: None).continue_() is False

    def test_missing_guard_counts_as_true(self):
        assert Conditional.only_if(None).continue_() is True
        assert Conditional.not_if(None).continue_() is False

    def test_unknown_positivity(self):
        with pytest.raises(ValueError):
            Conditional("unless", lambda: True)

    def test_skip_reason(self):
        assert Conditional.only_if(lambda: False).skip_reason() == "only_if block evaluated false, skipping"
        assert Conditional.not_if(lambda: True).skip_reason() == "not_if block evaluated true, skipping"


class TestGuardConditionals:
    """Conditionals wrapping guard executors."""

    def test_options_passed_to_guard(self):
        guard = MagicMock(spec=GuardCommandExecutor)
        guard.run_command.return_value = True

        conditional = Conditional.only_if(guard, cwd="/srv", timeout=5)

        assert conditional.continue_() is True
        guard.run_command.assert_called_once_with(ExecutionOptions(cwd="/srv", timeout=5))

    def test_invalid_options_rejected(self):
        guard = MagicMock(spec=GuardCommandExecutor)
        with pytest.raises(ValidationError):
            Conditional.not_if(guard, timeout=-1)

    def test_description(self, linux_node):
        guard = GuardCommandExecutor(ShScript, linux_node, "app", "exit 37")
        assert Conditional.not_if(guard).description() == 'not_if script "exit 37"'

    @posix_only
    def test_not_if_nonzero_exit_runs(self, linux_node):
        guard = GuardCommandExecutor(ShScript, linux_node, "app", "exit 37")
        assert Conditional.not_if(guard).continue_() is True

    @posix_only
    def test_not_if_zero_exit_skips(self, linux_node):
        guard = GuardCommandExecutor(ShScript, linux_node, "app", "exit 0")
        assert Conditional.not_if(guard).continue_() is False

    @posix_only
    def test_only_if_zero_exit_runs(self, linux_node):
        guard = GuardCommandExecutor(ShScript, linux_node, "app", "exit 0")
        assert Conditional.only_if(guard).continue_() is True

    @posix_only
    def test_only_if_uses_cwd(self, linux_node, tmp_path):
        (tmp_path / "marker").write_text("")
        guard = GuardCommandExecutor(ShScript, linux_node, "app", "test -f marker")

        assert Conditional.only_if(guard, cwd=str(tmp_path)).continue_() is True
        assert Conditional.only_if(guard, cwd="/").continue_() is False
