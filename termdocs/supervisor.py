"""Per-connection session setup, event loop and cleanup.

The supervisor sits between a session provider (anything implementing
:class:`Connection`) and the :class:`Session` state machine. Each connection
is driven on its caller's thread; sessions share only the read-only
:class:`SessionServices`.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Protocol, Union

from .decor import EMPTY_DECOR, DecorArt
from .documents import Document
from .errors import ConnectionClosed, DecorError, DocumentError
from .render import RenderSettings
from .session import Session

logger = logging.getLogger(__name__)

NO_TERMINAL_MESSAGE = "no active terminal, skipping"


@dataclass(frozen=True)
class KeyEvent:
    key: str


@dataclass(frozen=True)
class ResizeEvent:
    width: int
    height: int


@dataclass(frozen=True)
class DisconnectEvent:
    reason: str = ""


SessionEvent = Union[KeyEvent, ResizeEvent, DisconnectEvent]


class Connection(Protocol):
    """What the session provider hands over for one remote terminal."""

    peer: str

    @property
    def has_terminal(self) -> bool: ...

    @property
    def width(self) -> int: ...

    @property
    def height(self) -> int: ...

    def next_event(self) -> SessionEvent:
        """Block until the next key, resize or disconnect event."""
        ...

    def write(self, frame: str) -> None:
        """Paint one full frame; raise :class:`ConnectionClosed` on transport failure."""
        ...

    def fatal(self, message: str) -> None: ...

    def close(self) -> None: ...


@dataclass(frozen=True)
class SessionServices:
    """Collaborators shared read-only by every session in the process."""

    list_documents: Callable[[], list[Document]]
    read_document: Callable[[str], str]
    render_markdown: Callable[[str, int], str]
    load_decor: Callable[[], DecorArt]
    settings: RenderSettings
    strict_decor: bool = False


class SessionSupervisor:
    """Run one isolated session per connection until quit or disconnect."""

    def __init__(self, services: SessionServices) -> None:
        self.services = services

    def on_connect(self, connection: Connection) -> None:
        """Serve ``connection`` to completion and always close it."""
        logger.info("session started for %s", connection.peer)
        reason = "quit"
        try:
            session = self._create_session(connection)
            if session is None:
                reason = "setup failed"
                return
            reason = self._run_event_loop(session, connection)
        except ConnectionClosed as exc:
            reason = "connection lost"
            logger.debug("transport error for %s: %s", connection.peer, exc)
        finally:
            connection.close()
            logger.info("session ended for %s (%s)", connection.peer, reason)

    def _create_session(self, connection: Connection) -> Session | None:
        """Build session state, or report a fatal setup error and return ``None``."""
        services = self.services
        if not connection.has_terminal:
            connection.fatal(NO_TERMINAL_MESSAGE)
            return None

        try:
            documents = services.list_documents()
        except DocumentError as exc:
            logger.error("listing documents failed for %s: %s", connection.peer, exc)
            connection.fatal(f"can't read directory: {exc}")
            return None

        try:
            decor = services.load_decor()
        except DecorError as exc:
            if services.strict_decor:
                logger.error("banner art failed for %s: %s", connection.peer, exc)
                connection.fatal(f"failed to render banner art: {exc}")
                return None
            logger.warning("banner art unavailable, continuing without it: %s", exc)
            decor = EMPTY_DECOR

        return Session.create(
            documents,
            connection.width,
            connection.height,
            services.settings,
            services.read_document,
            services.render_markdown,
            decor=decor,
        )

    def _run_event_loop(self, session: Session, connection: Connection) -> str:
        """Process events one at a time, writing a frame after each; return end reason."""
        session.resize(connection.width, connection.height)
        connection.write(session.frame())
        while True:
            event = connection.next_event()
            if isinstance(event, DisconnectEvent):
                return event.reason or "disconnected"
            if isinstance(event, KeyEvent):
                if session.handle_key(event.key):
                    return "quit"
            elif isinstance(event, ResizeEvent):
                session.resize(event.width, event.height)
            connection.write(session.frame())
