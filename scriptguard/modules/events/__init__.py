"""
Events Module - Black Box Interface

Purpose: Per-invocation event sink and resource namespace
Interface: EventDispatcher.subscribe()/emit(), RunContext
Hidden: Handler fan-out and failure isolation

A new RunContext is built for every guard invocation; there is no
global dispatcher.
"""

from .dispatcher import EventDispatcher, RunContext

__all__ = ["EventDispatcher", "RunContext"]
