"""Short-help line built from key bindings.

Rendering helpers here are presentation-only and side-effect free.
"""

from __future__ import annotations

from collections.abc import Iterable

from ..ansi import display_width
from ..input.key_registry import Action, KeyComboRegistry
from ..input.keymap import DEFAULT_REGISTRY
from ..theme import Theme

HELP_SEPARATOR = " • "
HELP_ELLIPSIS = " …"


def short_help(
    actions: Iterable[Action],
    theme: Theme,
    width: int,
    registry: KeyComboRegistry = DEFAULT_REGISTRY,
) -> str:
    """Render ``key desc • key desc`` entries that fit within ``width`` columns.

    Entries that do not fit are dropped from the end and replaced by an
    ellipsis, so the result never exceeds ``width``.
    """
    separator = theme.help_separator.render(HELP_SEPARATOR)
    ellipsis = theme.help_separator.render(HELP_ELLIPSIS)
    out = ""
    for binding in registry.bindings_for(actions):
        if not binding.help_key:
            continue
        item = f"{theme.help_key.render(binding.help_key)} {theme.help_desc.render(binding.help_desc)}"
        candidate = f"{out}{separator}{item}" if out else item
        if display_width(candidate) > width:
            if display_width(out + ellipsis) <= width:
                out += ellipsis
            break
        out = candidate
    return out
