"""
ScriptGuard - Guard Command Evaluation

Decides whether a convergence action should run by executing a
platform-specific guard command and reading its exit status as a boolean.

Architecture:
- Each module is self-contained with clear interfaces
- Strategies are looked up through an explicit registry, never by reflection
- Every guard invocation runs in its own throwaway run context
- All communication through defined interfaces

Modules:
- api: Shared models, outcome types and exceptions
- events: Event dispatcher and per-invocation run context
- registry: (platform, version, interpreter) -> strategy table
- resolver: Node-aware strategy resolution
- executor: Execution units and the guard command executor
- guard: Interpreter extensions for resources and only_if/not_if wrappers
"""

__version__ = "1.0.0"
