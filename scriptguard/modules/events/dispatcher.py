"""
Event dispatch and run context for execution units.

A RunContext is created for every guard invocation and dropped when the
invocation returns, so nothing an execution unit emits or registers can
reach the run that declared the guard.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Tuple

from scriptguard.modules.api.models import Node

logger = logging.getLogger("scriptguard.events")

EventHandler = Callable[..., None]


class EventDispatcher:
    """Fan events out to subscribed handlers and keep a record of them."""

    def __init__(self):
        self._handlers: List[EventHandler] = []
        self.history: List[Tuple[str, Dict[str, Any]]] = []

    def subscribe(self, handler: EventHandler) -> None:
        self._handlers.append(handler)

    def emit(self, event: str, **payload: Any) -> None:
        self.history.append((event, payload))
        for handler in self._handlers:
            try:
                handler(event, **payload)
            except Exception as e:
                logger.warning(f"Event handler failed for {event}: {e}")

    def events(self) -> List[str]:
        """Names of all emitted events, in order."""
        return [name for name, _ in self.history]


@dataclass
class RunContext:
    """State shared by the execution units of a single run."""

    node: Node
    events: EventDispatcher = field(default_factory=EventDispatcher)
    resource_collection: List[Any] = field(default_factory=list)

    def add_resource(self, resource: Any) -> None:
        """Register a unit, refusing duplicate names within this context."""
        name = getattr(resource, "name", None)
        for existing in self.resource_collection:
            if getattr(existing, "name", None) == name:
                raise ValueError(f"Resource '{name}' is already declared in this run")
        self.resource_collection.append(resource)
