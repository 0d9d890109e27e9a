"""Alteration hooks: ordered, pure transformation callbacks.

Each hook receives the current value and a read-only context mapping and
returns the (possibly) new value.  Hooks registered for the same point
are composed left to right in registration order.

Hook points used by the core:

- ``punctuation``: ``list[PunctuationEntry]`` for a language
- ``pattern``: the resolved pattern string before token expansion
- ``alias``: the cleaned alias before uniquification
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from types import MappingProxyType
from typing import Any

Hook = Callable[[Any, Mapping[str, Any]], Any]

HOOK_POINTS = frozenset({"punctuation", "pattern", "alias"})


class HookRegistry:
    """Per-instance registry mapping hook points to callback chains.

    Usage::

        hooks = HookRegistry()

        @hooks.register("alias")
        def prefix_blog(alias, context):
            return f"blog/{alias}" if context["entity_type"] == "node" else alias
    """

    def __init__(self) -> None:
        self._hooks: dict[str, list[Hook]] = {point: [] for point in HOOK_POINTS}

    def register(self, point: str, hook: Hook | None = None) -> Any:
        """Register *hook* at *point*; usable directly or as a decorator."""
        if point not in HOOK_POINTS:
            msg = f"Unknown hook point: '{point}'"
            raise ValueError(msg)

        def _add(func: Hook) -> Hook:
            self._hooks[point].append(func)
            return func

        if hook is None:
            return _add
        return _add(hook)

    def apply(self, point: str, value: Any, context: Mapping[str, Any] | None = None) -> Any:
        """Run every hook registered at *point* and return the final value."""
        frozen = MappingProxyType(dict(context or {}))
        for hook in self._hooks[point]:
            value = hook(value, frozen)
        return value

    def list_registered(self, point: str) -> list[Hook]:
        """Return the callbacks registered at *point*, in call order."""
        return list(self._hooks[point])
