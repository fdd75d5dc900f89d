"""Default key bindings and view-gated action dispatch."""

from __future__ import annotations

from ..state import ViewState
from .key_registry import Action, KeyComboBinding, KeyComboRegistry

UP_BINDING = KeyComboBinding(("UP", "k"), Action.UP, "↑/k", "move up")
DOWN_BINDING = KeyComboBinding(("DOWN", "j"), Action.DOWN, "↓/j", "move down")
QUIT_BINDING = KeyComboBinding(("q", "CTRL_C"), Action.QUIT, "q", "quit")
BACK_BINDING = KeyComboBinding(("ESC",), Action.BACK, "esc", "go back")
ENTER_BINDING = KeyComboBinding(("ENTER",), Action.ENTER, "enter", "open")
TOP_BINDING = KeyComboBinding(("g", "HOME"), Action.TOP, "g", "top")
BOTTOM_BINDING = KeyComboBinding(("G", "END"), Action.BOTTOM, "G", "bottom")
PAGE_DOWN_BINDING = KeyComboBinding(("PGDN", "f", " "), Action.PAGE_DOWN, "f/pgdn", "page down")
PAGE_UP_BINDING = KeyComboBinding(("PGUP", "b"), Action.PAGE_UP, "b/pgup", "page up")
HALF_PAGE_DOWN_BINDING = KeyComboBinding(("d", "CTRL_D"), Action.HALF_PAGE_DOWN, "d", "½ page down")
HALF_PAGE_UP_BINDING = KeyComboBinding(("u", "CTRL_U"), Action.HALF_PAGE_UP, "u", "½ page up")
WHEEL_UP_BINDING = KeyComboBinding(("MOUSE_WHEEL_UP",), Action.SCROLL_UP)
WHEEL_DOWN_BINDING = KeyComboBinding(("MOUSE_WHEEL_DOWN",), Action.SCROLL_DOWN)

# Short help shown in the content footer, in display order.
SHORT_HELP_ACTIONS: tuple[Action, ...] = (Action.UP, Action.DOWN, Action.QUIT, Action.BACK)
LIST_HELP_ACTIONS: tuple[Action, ...] = (Action.UP, Action.DOWN, Action.ENTER, Action.QUIT)

LIST_ACTIONS = frozenset({Action.UP, Action.DOWN, Action.ENTER, Action.QUIT})
CONTENT_ACTIONS = frozenset(
    {
        Action.BACK,
        Action.TOP,
        Action.BOTTOM,
        Action.PAGE_UP,
        Action.PAGE_DOWN,
        Action.HALF_PAGE_UP,
        Action.HALF_PAGE_DOWN,
        Action.SCROLL_UP,
        Action.SCROLL_DOWN,
        Action.QUIT,
    }
)


def build_default_registry() -> KeyComboRegistry:
    return KeyComboRegistry().register_bindings(
        UP_BINDING,
        DOWN_BINDING,
        QUIT_BINDING,
        BACK_BINDING,
        ENTER_BINDING,
        TOP_BINDING,
        BOTTOM_BINDING,
        PAGE_DOWN_BINDING,
        PAGE_UP_BINDING,
        HALF_PAGE_DOWN_BINDING,
        HALF_PAGE_UP_BINDING,
        WHEEL_UP_BINDING,
        WHEEL_DOWN_BINDING,
    )


DEFAULT_REGISTRY = build_default_registry()


def dispatch_key(key: str, view: ViewState, registry: KeyComboRegistry = DEFAULT_REGISTRY) -> Action | None:
    """Map a key token to the action it triggers in ``view``.

    Keys bound to actions that are inactive in the current view map to
    ``None`` so callers treat them as no-ops.
    """
    action = registry.lookup(key)
    if action is None:
        return None
    active = LIST_ACTIONS if view is ViewState.LIST else CONTENT_ACTIONS
    if action not in active:
        return None
    return action
