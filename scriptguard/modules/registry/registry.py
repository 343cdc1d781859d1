"""
Execution strategy registry.

Maps (platform, version range, interpreter) to a factory returning the
execution unit class that runs that interpreter's code on that platform.
Platform defaults are registered lazily on first lookup; deployments can
add or override entries from a YAML file.
"""

import importlib
import logging
import re
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Tuple, Type, Union

import yaml

from scriptguard.modules.api.exceptions import RegistryConfigError, UnsupportedPlatform
from scriptguard.modules.strategies.units import (
    BUILTIN_STRATEGIES,
    BashScript,
    BatchScript,
    ExecutionUnit,
    PowershellScript,
    ShScript,
)

logger = logging.getLogger("scriptguard.registry")

StrategyFactory = Callable[[], Type[ExecutionUnit]]

POSIX_PLATFORM_FAMILIES = (
    "linux",
    "debian",
    "rhel",
    "fedora",
    "suse",
    "arch",
    "alpine",
    "gentoo",
    "amazon",
    "mac_os_x",
    "freebsd",
    "openbsd",
    "netbsd",
    "solaris2",
    "aix",
)

_CLAUSE_RE = re.compile(r"^\s*(>=|<=|!=|==|>|<|~>|=)?\s*([0-9][0-9A-Za-z.\-]*)\s*$")


def parse_version(version: str) -> Tuple[int, ...]:
    """Turn '10.0.19045' or '22.04' into a comparable tuple of ints."""
    parts = []
    for piece in re.split(r"[.\-]", str(version)):
        match = re.match(r"\d+", piece)
        if not match:
            break
        parts.append(int(match.group()))
    return tuple(parts)


def _compare(left: Tuple[int, ...], right: Tuple[int, ...]) -> int:
    width = max(len(left), len(right))
    left = left + (0,) * (width - len(left))
    right = right + (0,) * (width - len(right))
    return (left > right) - (left < right)


class VersionConstraint:
    """
    Comma separated version clauses, e.g. ">= 6.0, < 10".

    "~> 6.1" accepts 6.1 and anything later within the 6 series.
    """

    def __init__(self, expression: str):
        self.expression = expression
        self.clauses: List[Tuple[str, Tuple[int, ...]]] = []
        for raw in expression.split(","):
            match = _CLAUSE_RE.match(raw)
            if not match:
                raise RegistryConfigError(f"Invalid version constraint: '{expression}'")
            operator = match.group(1) or "=="
            if operator == "=":
                operator = "=="
            self.clauses.append((operator, parse_version(match.group(2))))

    def __repr__(self) -> str:
        return f"VersionConstraint({self.expression!r})"

    def __str__(self) -> str:
        return self.expression

    def matches(self, version: Optional[str]) -> bool:
        if not version:
            return False
        candidate = parse_version(version)
        if not candidate:
            return False
        for operator, target in self.clauses:
            cmp = _compare(candidate, target)
            if operator == "==" and cmp != 0:
                return False
            if operator == "!=" and cmp == 0:
                return False
            if operator == ">" and cmp <= 0:
                return False
            if operator == ">=" and cmp < 0:
                return False
            if operator == "<" and cmp >= 0:
                return False
            if operator == "<=" and cmp > 0:
                return False
            if operator == "~>":
                if cmp < 0:
                    return False
                prefix = target[: max(len(target) - 1, 1)]
                if candidate[: len(prefix)] != prefix:
                    return False
        return True


@dataclass(frozen=True)
class RegistryEntry:
    """One registered strategy."""

    platform: str
    interpreter: str
    factory: StrategyFactory
    version: Optional[VersionConstraint] = None

    def matches(self, platforms: Tuple[str, ...], version: Optional[str], interpreter: str) -> bool:
        if self.interpreter != interpreter or self.platform not in platforms:
            return False
        if self.version is not None:
            return self.version.matches(version)
        return True

    def to_dict(self) -> Dict[str, Any]:
        strategy = self.factory()
        return {
            "platform": self.platform,
            "interpreter": self.interpreter,
            "version": str(self.version) if self.version else None,
            "strategy": f"{strategy.__module__}.{strategy.__name__}",
        }


def _constant(strategy: Type[ExecutionUnit]) -> StrategyFactory:
    return lambda: strategy


def resolve_strategy_name(name: str) -> Type[ExecutionUnit]:
    """
    Look up a strategy by built-in name or "package.module:Class" path.

    Raises:
        RegistryConfigError: If the name cannot be resolved to an ExecutionUnit subclass
    """
    if name in BUILTIN_STRATEGIES:
        return BUILTIN_STRATEGIES[name]

    module_name, _, class_name = name.partition(":")
    if not class_name:
        raise RegistryConfigError(
            f"Unknown strategy '{name}' (expected one of {sorted(BUILTIN_STRATEGIES)} "
            f"or 'module:Class')"
        )
    try:
        strategy = getattr(importlib.import_module(module_name), class_name)
    except (ImportError, AttributeError) as e:
        raise RegistryConfigError(f"Cannot import strategy '{name}': {e}") from e

    if not (isinstance(strategy, type) and issubclass(strategy, ExecutionUnit)):
        raise RegistryConfigError(f"Strategy '{name}' is not an ExecutionUnit")
    return strategy


class StrategyRegistry:
    """Process-wide, read-mostly table of execution strategies."""

    def __init__(self, load_defaults: bool = True):
        """
        Initialize registry.

        Args:
            load_defaults: Register platform defaults lazily on first lookup
        """
        self._entries: List[RegistryEntry] = []
        self._lock = threading.RLock()
        self._defaults_loaded = not load_defaults

    def register(
        self,
        platform: str,
        interpreter: str,
        factory: Union[StrategyFactory, Type[ExecutionUnit]],
        version: Optional[str] = None,
    ) -> RegistryEntry:
        """
        Register a strategy for a platform (name or family) and interpreter.

        Later registrations take precedence over earlier ones.
        """
        if isinstance(factory, type) and issubclass(factory, ExecutionUnit):
            factory = _constant(factory)
        entry = RegistryEntry(
            platform=platform,
            interpreter=interpreter,
            factory=factory,
            version=VersionConstraint(version) if version else None,
        )
        with self._lock:
            self._entries.append(entry)
        logger.debug(f"Registered {interpreter} strategy for {platform} {version or ''}".rstrip())
        return entry

    def lookup(
        self,
        platform: str,
        version: Optional[str],
        interpreter: str,
        platform_family: Optional[str] = None,
    ) -> Type[ExecutionUnit]:
        """
        Find the strategy for a platform, version and interpreter.

        Platform-name entries beat family entries, version-constrained
        entries beat unconstrained ones, and later entries beat earlier ones.

        Raises:
            UnsupportedPlatform: If nothing is registered for the triple
        """
        self._ensure_defaults()

        platforms = tuple(p for p in (platform, platform_family) if p)
        with self._lock:
            candidates = [
                (index, entry)
                for index, entry in enumerate(self._entries)
                if entry.matches(platforms, version, interpreter)
            ]

        if not candidates:
            raise UnsupportedPlatform(interpreter, platform, version)

        def rank(item):
            index, entry = item
            return (entry.platform == platform, entry.version is not None, index)

        _, best = max(candidates, key=rank)
        return best.factory()

    def entries(
        self, platform: Optional[str] = None, platform_family: Optional[str] = None
    ) -> List[RegistryEntry]:
        """Registered entries, optionally only those for a platform or family."""
        self._ensure_defaults()
        with self._lock:
            entries = list(self._entries)
        if platform is None and platform_family is None:
            return entries
        wanted = {p for p in (platform, platform_family) if p}
        return [entry for entry in entries if entry.platform in wanted]

    def summary(self) -> Dict[str, Any]:
        """Get current registry summary."""
        entries = self.entries()
        return {
            "entries": len(entries),
            "platforms": sorted({entry.platform for entry in entries}),
            "interpreters": sorted({entry.interpreter for entry in entries}),
        }

    def load_from_yaml(self, config_path: Union[str, Path]) -> int:
        """
        Register strategies listed in a YAML file.

        The file holds a ``strategies`` list of mappings with ``platform``,
        ``interpreter``, ``strategy`` and an optional ``version``. Built-in
        strategy names match the interpreter ids: ``sh``, ``bash``, ``batch``
        and ``powershell_script``.

        Returns:
            Number of entries registered

        Raises:
            RegistryConfigError: If the file is missing or malformed
        """
        path = Path(config_path)
        try:
            with open(path, "r") as f:
                config_data = yaml.safe_load(f) or {}
        except OSError as e:
            raise RegistryConfigError(f"Cannot read registry config {path}: {e}") from e
        except yaml.YAMLError as e:
            raise RegistryConfigError(f"Invalid YAML in registry config {path}: {e}") from e

        items = self._validate_config(config_data, path)

        # Resolve everything before registering so a bad file changes nothing
        pending = []
        for item in items:
            strategy = resolve_strategy_name(str(item["strategy"]))
            version = item.get("version")
            if version is not None:
                VersionConstraint(str(version))
            pending.append((str(item["platform"]), str(item["interpreter"]), strategy, version))

        self._ensure_defaults()
        with self._lock:
            for platform, interpreter, strategy, version in pending:
                self.register(platform, interpreter, strategy, str(version) if version else None)

        logger.info(f"Loaded {len(pending)} strategy registrations from {path}")
        return len(pending)

    def _validate_config(self, config_data: Any, path: Path) -> List[Dict[str, Any]]:
        if not isinstance(config_data, dict):
            raise RegistryConfigError(f"Registry config {path} must be a mapping")

        items = config_data.get("strategies", [])
        if not isinstance(items, list):
            raise RegistryConfigError(f"'strategies' in {path} must be a list")

        for position, item in enumerate(items):
            if not isinstance(item, dict):
                raise RegistryConfigError(f"Entry {position} in {path} must be a mapping")
            missing = [key for key in ("platform", "interpreter", "strategy") if not item.get(key)]
            if missing:
                raise RegistryConfigError(
                    f"Entry {position} in {path} is missing: {', '.join(missing)}"
                )
        return items

    def _ensure_defaults(self) -> None:
        if self._defaults_loaded:
            return
        with self._lock:
            if self._defaults_loaded:
                return
            self._defaults_loaded = True
            # Defaults go first so explicit registrations made earlier still win
            explicit = self._entries
            self._entries = []
            register_platform_defaults(self)
            self._entries.extend(explicit)
        logger.debug("Platform default strategies registered")


def register_platform_defaults(registry: StrategyRegistry) -> None:
    """Register the built-in strategies for POSIX and Windows platforms."""
    for family in POSIX_PLATFORM_FAMILIES:
        registry.register(family, "script", ShScript)
        registry.register(family, "sh", ShScript)
        registry.register(family, "bash", BashScript)

    registry.register("windows", "script", BatchScript)
    registry.register("windows", "batch", BatchScript)
    registry.register("windows", "powershell_script", PowershellScript)


_default_registry: Optional[StrategyRegistry] = None
_default_registry_lock = threading.Lock()


def get_default_registry() -> StrategyRegistry:
    """Return the process-wide registry, creating it on first use."""
    global _default_registry
    with _default_registry_lock:
        if _default_registry is None:
            _default_registry = StrategyRegistry()
        return _default_registry


def reset_default_registry() -> None:
    """Drop the process-wide registry; the next call builds a fresh one."""
    global _default_registry
    with _default_registry_lock:
        _default_registry = None
