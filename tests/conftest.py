"""
Shared pytest fixtures for ScriptGuard tests.

This module provides common fixtures including:
- PopenMocker: Mock guard subprocess calls with canned exit statuses
- Node fixtures for POSIX, Windows and macOS hosts
- Fresh strategy registries and resolvers
"""

import os
import subprocess
import sys
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional
from unittest.mock import MagicMock, patch

import pytest

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from scriptguard.modules.api.models import Node
from scriptguard.modules.events.dispatcher import EventDispatcher, RunContext
from scriptguard.modules.registry.registry import StrategyRegistry, reset_default_registry
from scriptguard.modules.resolver.resolver import GuardStrategyResolver

posix_only = pytest.mark.skipif(sys.platform == "win32", reason="requires a POSIX host")
windows_only = pytest.mark.skipif(sys.platform != "win32", reason="requires a Windows host")


# =============================================================================
# Subprocess Mocking Infrastructure
# =============================================================================

@dataclass
class ProcessResponse:
    """Represents a mocked child process outcome."""
    returncode: int = 0
    stdout: str = ""
    stderr: str = ""
    timeout: bool = False
    raises: Optional[BaseException] = None


@dataclass
class ProcessCall:
    """Record of a Popen call made during testing."""
    argv: List[str]
    kwargs: Dict[str, Any]
    script: Optional[str] = None


class PopenMocker:
    """
    Mock subprocess.Popen for execution units.

    Usage:
        def test_guard(popen_mocker):
            popen_mocker.respond(ProcessResponse(returncode=37))

            result = executor.run_command()

            assert popen_mocker.calls[0].argv[0] == "/bin/sh"
    """

    def __init__(self):
        self.response = ProcessResponse()
        self.calls: List[ProcessCall] = []
        self.killpg = MagicMock()

    def respond(self, response: ProcessResponse) -> "PopenMocker":
        self.response = response
        return self

    @property
    def last_call(self) -> ProcessCall:
        assert self.calls, "Popen was never called"
        return self.calls[-1]

    def _popen(self, argv, **kwargs):
        script = None
        script_path = argv[-1]
        if os.path.exists(script_path):
            with open(script_path) as f:
                script = f.read()
        self.calls.append(ProcessCall(argv=list(argv), kwargs=kwargs, script=script))

        response = self.response
        if response.raises is not None:
            raise response.raises

        process = MagicMock()
        process.pid = 424242
        process.returncode = None if response.timeout else response.returncode
        if response.timeout:
            process.communicate.side_effect = [
                subprocess.TimeoutExpired(argv, kwargs.get("timeout", 1)),
                (response.stdout, response.stderr),
            ]
        else:
            process.communicate.return_value = (response.stdout, response.stderr)
        return process


@pytest.fixture
def popen_mocker():
    """Patch Popen and killpg used by execution units."""
    mocker = PopenMocker()
    with patch(
        "scriptguard.modules.strategies.units.subprocess.Popen", side_effect=mocker._popen
    ), patch(
        "scriptguard.modules.strategies.units.os.killpg", mocker.killpg, create=True
    ):
        yield mocker


# =============================================================================
# Nodes, registries and contexts
# =============================================================================

@pytest.fixture
def linux_node():
    return Node(
        name="web01",
        platform="ubuntu",
        platform_version="22.04",
        platform_family="debian",
        os="linux",
        os_version="5.15.0",
        kernel_machine="x86_64",
    )


@pytest.fixture
def i386_linux_node():
    return Node(
        name="legacy01",
        platform="debian",
        platform_version="9",
        platform_family="debian",
        os="linux",
        kernel_machine="i686",
    )


@pytest.fixture
def arm_linux_node():
    return Node(
        name="pi01",
        platform="debian",
        platform_version="12",
        platform_family="debian",
        os="linux",
        kernel_machine="aarch64",
    )


@pytest.fixture
def mac_node():
    return Node(
        name="mac01",
        platform="mac_os_x",
        platform_version="13.4",
        platform_family="mac_os_x",
        os="darwin",
        kernel_machine="x86_64",
    )


@pytest.fixture
def windows_node():
    return Node(
        name="win01",
        platform="windows",
        platform_version="10.0.19045",
        platform_family="windows",
        os="windows",
        kernel_machine="AMD64",
    )


@pytest.fixture
def host_node():
    """A node describing the machine the tests run on."""
    return Node.detect()


@pytest.fixture(autouse=True)
def fresh_default_registry():
    """Keep the process-wide registry from leaking between tests."""
    reset_default_registry()
    yield
    reset_default_registry()


@pytest.fixture
def registry():
    return StrategyRegistry()


@pytest.fixture
def resolver(registry):
    return GuardStrategyResolver(registry)


@pytest.fixture
def run_context(linux_node):
    return RunContext(node=linux_node, events=EventDispatcher())
