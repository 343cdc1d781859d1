"""
ScriptGuard shared data models.

These models define the structure of the data passed between the
resolver, the guard executor and its callers.
"""

import platform as host_platform
from enum import Enum
from typing import Dict, FrozenSet, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

# Enums


class Architecture(str, Enum):
    """CPU architectures a guard can be evaluated under."""

    I386 = "i386"
    X86_64 = "x86_64"


# Machine names that identify a 64-bit x86 kernel
_X86_64_MACHINES = {"x86_64", "amd64", "x64"}
_I386_MACHINES = {"i386", "i486", "i586", "i686", "x86"}

# Linux distribution ids folded into a platform family
_FAMILY_BY_DISTRO = {
    "ubuntu": "debian",
    "debian": "debian",
    "linuxmint": "debian",
    "raspbian": "debian",
    "rhel": "rhel",
    "centos": "rhel",
    "rocky": "rhel",
    "almalinux": "rhel",
    "ol": "rhel",
    "fedora": "fedora",
    "amzn": "amazon",
    "opensuse-leap": "suse",
    "opensuse-tumbleweed": "suse",
    "sles": "suse",
    "arch": "arch",
    "alpine": "alpine",
    "gentoo": "gentoo",
}


def normalize_machine(machine: Optional[str]) -> Optional[str]:
    """Map a kernel machine name onto the Architecture value naming it."""
    if not machine:
        return None
    machine = machine.lower()
    if machine in _X86_64_MACHINES:
        return Architecture.X86_64.value
    if machine in _I386_MACHINES:
        return Architecture.I386.value
    return machine


class Node(BaseModel):
    """Read-only facts about the node a guard runs on."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(default="localhost", description="Node name")
    platform: Optional[str] = Field(None, description="Platform, e.g. 'ubuntu' or 'windows'")
    platform_version: Optional[str] = Field(None, description="Platform version string")
    platform_family: Optional[str] = Field(None, description="Platform family, e.g. 'debian'")
    os: Optional[str] = Field(None, description="Kernel/OS name, used when platform is unknown")
    os_version: Optional[str] = Field(None, description="Kernel/OS version")
    kernel_machine: Optional[str] = Field(None, description="Kernel machine, e.g. 'x86_64'")

    @field_validator("kernel_machine")
    @classmethod
    def validate_kernel_machine(cls, v):
        """Normalize machine aliases such as AMD64."""
        return normalize_machine(v)

    @property
    def supported_architectures(self) -> FrozenSet[Architecture]:
        """Architectures code can be executed under on this node."""
        if self.kernel_machine == Architecture.X86_64.value:
            return frozenset({Architecture.I386, Architecture.X86_64})
        if self.kernel_machine == Architecture.I386.value:
            return frozenset({Architecture.I386})
        return frozenset()

    def supports_architecture(self, architecture: Architecture) -> bool:
        return Architecture(architecture) in self.supported_architectures

    @property
    def is_windows(self) -> bool:
        return (self.platform_family or self.platform or self.os) == "windows"

    @classmethod
    def detect(cls, name: Optional[str] = None) -> "Node":
        """
        Build a Node describing the local host.

        This is a convenience for command line use; full platform
        detection belongs to the agent.
        """
        system = host_platform.system()
        machine = host_platform.machine()
        node_name = name or host_platform.node() or "localhost"

        if system == "Windows":
            return cls(
                name=node_name,
                platform="windows",
                platform_version=host_platform.version(),
                platform_family="windows",
                os="windows",
                os_version=host_platform.version(),
                kernel_machine=machine,
            )

        if system == "Darwin":
            version = host_platform.mac_ver()[0]
            return cls(
                name=node_name,
                platform="mac_os_x",
                platform_version=version,
                platform_family="mac_os_x",
                os="darwin",
                os_version=host_platform.release(),
                kernel_machine=machine,
            )

        distro_id = None
        distro_version = None
        if system == "Linux":
            try:
                release = host_platform.freedesktop_os_release()
                distro_id = release.get("ID")
                distro_version = release.get("VERSION_ID")
            except OSError:
                pass

        os_name = system.lower() or None
        return cls(
            name=node_name,
            platform=distro_id or os_name,
            platform_version=distro_version or host_platform.release(),
            platform_family=_FAMILY_BY_DISTRO.get(distro_id or "", os_name),
            os=os_name,
            os_version=host_platform.release(),
            kernel_machine=machine,
        )


class ExecutionOptions(BaseModel):
    """Per-invocation execution settings for a guard command."""

    model_config = ConfigDict(frozen=True)

    user: Optional[str] = Field(None, description="User to run the command as")
    cwd: Optional[str] = Field(None, description="Working directory for the command")
    group: Optional[str] = Field(None, description="Group to run the command as")
    environment: Optional[Dict[str, str]] = Field(
        None, description="Variables merged over the agent's environment"
    )
    timeout: Optional[float] = Field(None, description="Timeout in seconds", gt=0)

    def present(self) -> Dict[str, object]:
        """Return only the options that were actually supplied."""
        return {key: value for key, value in self.model_dump().items() if value is not None}
