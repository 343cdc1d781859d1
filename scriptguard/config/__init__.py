"""
Config Module - Black Box Interface

Purpose: Guard evaluation configuration
Interface: EnvConfigProvider.get_guard_config()
Hidden: Environment parsing and validation

Can be replaced with different config sources by implementing ConfigProvider.
"""

from .provider import ConfigProvider, EnvConfigProvider, GuardConfig

__all__ = ["ConfigProvider", "EnvConfigProvider", "GuardConfig"]
