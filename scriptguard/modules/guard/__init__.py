"""
Guard Module - Black Box Interface

Purpose: Let resource definitions declare guards in a chosen interpreter
Interface: GuardInterpreterExtension.guard()/script(), PowershellGuard.powershell(),
           BashGuard.bash(), BatchGuard.batch(), Conditional.only_if()/not_if()
Hidden: Architecture inheritance, strategy resolution, executor construction

New interpreters plug in as another mixin calling guard() with their identifier.
"""

from .conditional import Conditional
from .extensions import (
    BashGuard,
    BatchGuard,
    GuardInterpreterExtension,
    HasArchitecture,
    PowershellGuard,
)

__all__ = [
    "BashGuard",
    "BatchGuard",
    "Conditional",
    "GuardInterpreterExtension",
    "HasArchitecture",
    "PowershellGuard",
]
