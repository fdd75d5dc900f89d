"""Input-layer public API for key decoding and dispatch.

Low-level byte decoding (``KeyDecoder``) is kept separate from the
view-gated mapping of key tokens to semantic actions (``dispatch_key``).
"""

from .decoder import ESC_SEQUENCE_TIMEOUT_MS, KeyDecoder
from .key_registry import Action, KeyComboBinding, KeyComboRegistry
from .keymap import DEFAULT_REGISTRY, LIST_HELP_ACTIONS, SHORT_HELP_ACTIONS, build_default_registry, dispatch_key

__all__ = [
    "ESC_SEQUENCE_TIMEOUT_MS",
    "KeyDecoder",
    "Action",
    "KeyComboBinding",
    "KeyComboRegistry",
    "DEFAULT_REGISTRY",
    "LIST_HELP_ACTIONS",
    "SHORT_HELP_ACTIONS",
    "build_default_registry",
    "dispatch_key",
]
