"""Configuration provider following Black Box Design principles."""
import os
from dataclasses import dataclass
from typing import Optional, Protocol

from scriptguard.modules.strategies.units import DEFAULT_TIMEOUT


@dataclass
class GuardConfig:
    """Guard evaluation configuration."""
    default_timeout: float
    registry_config_path: Optional[str]
    log_level: str
    log_child_output: bool


class ConfigProvider(Protocol):
    """Protocol for configuration providers."""

    def get_guard_config(self) -> GuardConfig:
        """Get guard evaluation configuration."""
        ...


class EnvConfigProvider:
    """Environment-based configuration provider."""

    def get_guard_config(self) -> GuardConfig:
        """Get guard evaluation configuration from environment variables."""
        timeout_env = os.getenv("SCRIPTGUARD_DEFAULT_TIMEOUT", str(DEFAULT_TIMEOUT))
        try:
            default_timeout = float(timeout_env)
        except ValueError:
            raise ValueError(
                f"SCRIPTGUARD_DEFAULT_TIMEOUT must be a number of seconds, got '{timeout_env}'"
            ) from None
        if default_timeout <= 0:
            raise ValueError(
                f"SCRIPTGUARD_DEFAULT_TIMEOUT must be positive, got {default_timeout}"
            )

        return GuardConfig(
            default_timeout=default_timeout,
            registry_config_path=os.getenv("SCRIPTGUARD_REGISTRY_CONFIG") or None,
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
            log_child_output=os.getenv("SCRIPTGUARD_LOG_CHILD_OUTPUT", "false").lower() == "true",
        )
