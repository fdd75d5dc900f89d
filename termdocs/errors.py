"""Exception types raised at termdocs' collaborator boundaries."""

from __future__ import annotations


class TermdocsError(Exception):
    """Base class for all termdocs errors."""


class ConfigError(TermdocsError):
    """Invalid server configuration."""


class DocumentError(TermdocsError):
    """Listing or reading documents from storage failed."""


class MarkdownRenderError(TermdocsError):
    """Markdown could not be rendered to styled text."""


class DecorError(TermdocsError):
    """Decorative banner art could not be produced."""


class ConnectionClosed(TermdocsError):
    """The remote side went away or the transport failed mid-session."""
