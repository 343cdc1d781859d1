"""
Registry Module - Black Box Interface

Purpose: Map (platform, version range, interpreter) to an execution strategy
Interface: StrategyRegistry.register()/lookup()/load_from_yaml(), get_default_registry()
Hidden: Precedence rules, version constraint parsing, lazy platform defaults

Populated at agent startup and consulted read-mostly afterwards.
"""

from .registry import (
    POSIX_PLATFORM_FAMILIES,
    RegistryEntry,
    StrategyRegistry,
    VersionConstraint,
    get_default_registry,
    parse_version,
    register_platform_defaults,
    reset_default_registry,
    resolve_strategy_name,
)

__all__ = [
    "POSIX_PLATFORM_FAMILIES",
    "RegistryEntry",
    "StrategyRegistry",
    "VersionConstraint",
    "get_default_registry",
    "parse_version",
    "register_platform_defaults",
    "reset_default_registry",
    "resolve_strategy_name",
]
