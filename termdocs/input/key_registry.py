"""Actions and the table mapping key tokens to them."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum


class Action(Enum):
    """Semantic actions produced by key dispatch."""

    UP = "up"
    DOWN = "down"
    ENTER = "enter"
    BACK = "back"
    TOP = "top"
    BOTTOM = "bottom"
    PAGE_UP = "page_up"
    PAGE_DOWN = "page_down"
    HALF_PAGE_UP = "half_page_up"
    HALF_PAGE_DOWN = "half_page_down"
    SCROLL_UP = "scroll_up"
    SCROLL_DOWN = "scroll_down"
    QUIT = "quit"


@dataclass(frozen=True)
class KeyComboBinding:
    """Mapping from one or more key tokens to a single action.

    ``help_key``/``help_desc`` feed the short-help line; bindings without
    help text are active but not advertised.
    """

    combos: tuple[str, ...]
    action: Action
    help_key: str = ""
    help_desc: str = ""


class KeyComboRegistry:
    """Key token to action table; also remembers each action's help binding."""

    def __init__(self) -> None:
        self._actions: dict[str, Action] = {}
        self._bindings: dict[Action, KeyComboBinding] = {}

    def register_binding(self, binding: KeyComboBinding) -> KeyComboRegistry:
        """Add ``binding``; a combo already bound to another action is rebound."""
        for combo in binding.combos:
            self._actions[combo] = binding.action
        self._bindings[binding.action] = binding
        return self

    def register_bindings(self, *bindings: KeyComboBinding) -> KeyComboRegistry:
        """Add ``bindings`` in order; returns ``self`` so calls can be chained."""
        for binding in bindings:
            self.register_binding(binding)
        return self

    def lookup(self, key: str) -> Action | None:
        """Return the action bound to ``key``, if any."""
        return self._actions.get(key)

    def bindings_for(self, actions: Iterable[Action]) -> list[KeyComboBinding]:
        out: list[KeyComboBinding] = []
        for action in actions:
            binding = self._bindings.get(action)
            if binding is not None:
                out.append(binding)
        return out
