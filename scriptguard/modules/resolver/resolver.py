"""Node-aware strategy resolution."""

import logging
from typing import Optional, Tuple, Type

from scriptguard.modules.api.exceptions import UnsupportedPlatform
from scriptguard.modules.api.models import Node
from scriptguard.modules.registry.registry import StrategyRegistry, get_default_registry
from scriptguard.modules.strategies.units import ExecutionUnit

logger = logging.getLogger("scriptguard.resolver")


class GuardStrategyResolver:
    """Resolves interpreter identifiers to strategy classes for a node."""

    def __init__(self, registry: Optional[StrategyRegistry] = None):
        self.registry = registry or get_default_registry()

    @staticmethod
    def platform_and_version(node: Node) -> Tuple[str, Optional[str]]:
        """
        Work out which platform and version a node runs.

        Raises:
            UnsupportedPlatform: If the node carries no platform facts
        """
        platform = node.platform or node.os
        version = node.platform_version or node.os_version
        if not platform:
            raise UnsupportedPlatform(
                interpreter="",
                message=f"Cannot find a platform for node '{node.name}'",
            )
        return platform, version

    def resolve(self, node: Node, interpreter: str) -> Type[ExecutionUnit]:
        """
        Return the strategy class running `interpreter` code on `node`.

        Raises:
            UnsupportedPlatform: If no strategy is registered for the node
        """
        platform, version = self.platform_and_version(node)
        try:
            strategy = self.registry.lookup(
                platform, version, interpreter, platform_family=node.platform_family
            )
        except UnsupportedPlatform:
            logger.error(
                f"No '{interpreter}' strategy for {platform} {version or ''} on node '{node.name}'"
            )
            raise

        logger.debug(f"Resolved '{interpreter}' on {platform} to {strategy.__name__}")
        return strategy
