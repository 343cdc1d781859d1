"""
Resolver Module - Black Box Interface

Purpose: Pick the execution strategy for an interpreter on a given node
Interface: GuardStrategyResolver.resolve(node, interpreter)
Hidden: Platform/version extraction from node facts, registry lookup

Fails fast with UnsupportedPlatform; never guesses a default interpreter.
"""

from .resolver import GuardStrategyResolver

__all__ = ["GuardStrategyResolver"]
