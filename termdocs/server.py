"""SSH session provider built on paramiko.

Each accepted socket gets its own handler thread that performs the SSH
handshake, waits for a shell (or exec) request, and then hands a
:class:`SSHConnection` to the supervisor. A second per-connection thread
decodes channel bytes into key events; window-change requests arrive on
paramiko's transport thread. Both feed the connection's event queue, so
session state is only ever touched by the handler thread.
"""

from __future__ import annotations

import logging
import select
import socket
import threading
import time
from dataclasses import dataclass
from pathlib import Path
from queue import Queue

import paramiko
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PrivateKey

from .errors import ConnectionClosed
from .input import ESC_SEQUENCE_TIMEOUT_MS, KeyDecoder
from .supervisor import DisconnectEvent, KeyEvent, ResizeEvent, SessionEvent, SessionSupervisor

logger = logging.getLogger(__name__)

ACCEPT_POLL_SECONDS = 0.5
HANDSHAKE_TIMEOUT_SECONDS = 30.0
CHANNEL_REQUEST_TIMEOUT_SECONDS = 10.0
RECV_CHUNK_BYTES = 1024
SHUTDOWN_REASON = "server shutdown"

# Alternate screen, hidden cursor, SGR mouse reporting; and the reverse.
ENTER_TUI = "\x1b[?1049h\x1b[?25l\x1b[?1000h\x1b[?1006h"
LEAVE_TUI = "\x1b[?1000l\x1b[?1006l\x1b[?25h\x1b[?1049l"


def load_host_key(path: Path) -> paramiko.PKey:
    """Load the server's Ed25519 host key, generating and saving one if missing."""
    if not path.exists():
        path.parent.mkdir(parents=True, exist_ok=True)
        private_key = Ed25519PrivateKey.generate()
        pem = private_key.private_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PrivateFormat.OpenSSH,
            encryption_algorithm=serialization.NoEncryption(),
        )
        path.write_bytes(pem)
        path.chmod(0o600)
        logger.info("generated new host key at %s", path)
    return paramiko.Ed25519Key.from_private_key_file(str(path))


def paint_frame(frame: str) -> str:
    """Turn a frame into a full-screen repaint for a raw-mode remote terminal."""
    rows = frame.split("\n")
    return "\x1b[H" + "\x1b[K\r\n".join(rows) + "\x1b[K\x1b[J"


@dataclass
class PtyInfo:
    term: str
    width: int
    height: int


class TerminalServerInterface(paramiko.ServerInterface):
    """Per-transport SSH policy: open access, one session channel, pty tracking."""

    def __init__(self) -> None:
        self.pty: PtyInfo | None = None
        self.session_requested = threading.Event()
        self.connection: SSHConnection | None = None

    def get_allowed_auths(self, username: str) -> str:
        return "none,publickey"

    def check_auth_none(self, username: str) -> int:
        return paramiko.AUTH_SUCCESSFUL

    def check_auth_publickey(self, username: str, key: paramiko.PKey) -> int:
        return paramiko.AUTH_SUCCESSFUL

    def check_channel_request(self, kind: str, chanid: int) -> int:
        if kind == "session":
            return paramiko.OPEN_SUCCEEDED
        return paramiko.OPEN_FAILED_ADMINISTRATIVELY_PROHIBITED

    def check_channel_pty_request(self, channel, term, width, height, pixelwidth, pixelheight, modes) -> bool:
        if isinstance(term, bytes):
            term = term.decode("ascii", errors="replace")
        self.pty = PtyInfo(term=str(term), width=width, height=height)
        return True

    def check_channel_shell_request(self, channel) -> bool:
        self.session_requested.set()
        return True

    def check_channel_exec_request(self, channel, command) -> bool:
        # Accepted so clients without a pty get the fatal message instead of a hang.
        self.session_requested.set()
        return True

    def check_channel_window_change_request(self, channel, width, height, pixelwidth, pixelheight) -> bool:
        if self.pty is not None:
            self.pty.width = width
            self.pty.height = height
        if self.connection is not None:
            self.connection.post(ResizeEvent(width=width, height=height))
        return True


class SSHConnection:
    """One remote terminal, exposed through the supervisor's ``Connection`` shape."""

    def __init__(self, channel: paramiko.Channel, pty: PtyInfo | None, peer: str) -> None:
        self.channel = channel
        self.pty = pty
        self.peer = peer
        self._events: Queue[SessionEvent] = Queue()
        self._decoder = KeyDecoder()
        self._lock = threading.Lock()
        self._tui_active = False
        self._closed = False
        self._reader: threading.Thread | None = None

    @property
    def has_terminal(self) -> bool:
        return self.pty is not None

    @property
    def width(self) -> int:
        return self.pty.width if self.pty is not None else 0

    @property
    def height(self) -> int:
        return self.pty.height if self.pty is not None else 0

    def start_reader(self) -> None:
        self._reader = threading.Thread(target=self._read_loop, name=f"termdocs-reader-{self.peer}", daemon=True)
        self._reader.start()

    def _read_loop(self) -> None:
        """Decode channel input into key events until EOF or transport failure."""
        escape_timeout = ESC_SEQUENCE_TIMEOUT_MS / 1000.0
        while True:
            # No channel timeout here: paramiko applies it to sendall as well.
            if self._decoder.has_pending:
                try:
                    readable, _, _ = select.select([self.channel], [], [], escape_timeout)
                except (OSError, ValueError) as exc:
                    logger.debug("wait failed for %s: %s", self.peer, exc)
                    self.post(DisconnectEvent("connection lost"))
                    return
                if not readable:
                    for key in self._decoder.flush():
                        self.post(KeyEvent(key))
                    continue
            try:
                data = self.channel.recv(RECV_CHUNK_BYTES)
            except OSError as exc:
                logger.debug("read failed for %s: %s", self.peer, exc)
                self.post(DisconnectEvent("connection lost"))
                return
            if not data:
                self.post(DisconnectEvent("disconnected"))
                return
            for key in self._decoder.feed(data):
                self.post(KeyEvent(key))

    def post(self, event: SessionEvent) -> None:
        self._events.put(event)

    def next_event(self) -> SessionEvent:
        return self._events.get()

    def _send(self, text: str) -> None:
        if self._closed or self.channel.closed:
            raise ConnectionClosed("channel closed")
        try:
            self.channel.sendall(text.encode("utf-8", errors="replace"))
        except (OSError, EOFError) as exc:
            raise ConnectionClosed(str(exc)) from exc

    def write(self, frame: str) -> None:
        with self._lock:
            prefix = ""
            if not self._tui_active:
                prefix = ENTER_TUI
                self._tui_active = True
            self._send(prefix + paint_frame(frame))

    def fatal(self, message: str) -> None:
        with self._lock:
            try:
                self.channel.sendall_stderr((message + "\r\n").encode("utf-8", errors="replace"))
                self.channel.send_exit_status(1)
            except (OSError, EOFError) as exc:
                logger.debug("could not deliver fatal message to %s: %s", self.peer, exc)

    def close(self) -> None:
        """Restore the remote terminal and close the channel; safe to call twice."""
        with self._lock:
            if self._closed:
                return
            try:
                if self._tui_active and not self.channel.closed:
                    self.channel.sendall(LEAVE_TUI.encode("ascii"))
                    self.channel.send_exit_status(0)
            except (OSError, EOFError) as exc:
                logger.debug("could not restore terminal for %s: %s", self.peer, exc)
            finally:
                self._closed = True
                self._tui_active = False
                self.channel.close()


class TerminalServer:
    """Accept SSH clients concurrently and drain them on shutdown."""

    def __init__(self, host: str, port: int, host_key: paramiko.PKey, supervisor: SessionSupervisor) -> None:
        self.host = host
        self.port = port
        self.host_key = host_key
        self.supervisor = supervisor
        self._stopping = threading.Event()
        self._listener: socket.socket | None = None
        self._lock = threading.Lock()
        self._handlers: dict[threading.Thread, tuple[paramiko.Transport, SSHConnection | None]] = {}

    @property
    def address(self) -> tuple[str, int]:
        if self._listener is not None:
            return self._listener.getsockname()[:2]
        return self.host, self.port

    def bind(self) -> None:
        """Open the listening socket; raises ``OSError`` when the address is unavailable."""
        self._listener = socket.create_server((self.host, self.port))
        self._listener.settimeout(ACCEPT_POLL_SECONDS)
        host, port = self.address
        logger.info("Starting SSH server host=%s port=%s", host, port)

    def serve_forever(self) -> None:
        if self._listener is None:
            self.bind()
        assert self._listener is not None
        while not self._stopping.is_set():
            try:
                client, addr = self._listener.accept()
            except socket.timeout:
                continue
            except OSError:
                if self._stopping.is_set():
                    break
                raise
            self._spawn_handler(client, addr)

    def _spawn_handler(self, client: socket.socket, addr: tuple) -> None:
        peer = f"{addr[0]}:{addr[1]}"
        client.settimeout(None)
        transport = paramiko.Transport(client)
        transport.add_server_key(self.host_key)
        handler = threading.Thread(
            target=self._handle_client,
            args=(transport, peer),
            name=f"termdocs-session-{peer}",
            daemon=True,
        )
        with self._lock:
            self._handlers[handler] = (transport, None)
        handler.start()

    def _handle_client(self, transport: paramiko.Transport, peer: str) -> None:
        me = threading.current_thread()
        try:
            interface = TerminalServerInterface()
            try:
                transport.start_server(server=interface)
            except (paramiko.SSHException, EOFError, OSError) as exc:
                logger.info("SSH handshake failed for %s: %s", peer, exc)
                return
            channel = transport.accept(HANDSHAKE_TIMEOUT_SECONDS)
            if channel is None:
                logger.info("no session channel opened by %s", peer)
                return
            if not interface.session_requested.wait(CHANNEL_REQUEST_TIMEOUT_SECONDS):
                logger.info("no shell request from %s", peer)
                channel.close()
                return
            connection = SSHConnection(channel, interface.pty, peer)
            interface.connection = connection
            with self._lock:
                self._handlers[me] = (transport, connection)
            if self._stopping.is_set():
                connection.post(DisconnectEvent(SHUTDOWN_REASON))
            connection.start_reader()
            self.supervisor.on_connect(connection)
        except Exception:
            logger.exception("session handler for %s crashed", peer)
        finally:
            transport.close()
            with self._lock:
                self._handlers.pop(me, None)

    def active_sessions(self) -> int:
        with self._lock:
            return len(self._handlers)

    def shutdown(self, timeout: float) -> bool:
        """Stop accepting, ask sessions to finish, and force-close after ``timeout``.

        Returns ``True`` when every session ended within the deadline.
        """
        logger.info("Stopping SSH server")
        self._stopping.set()
        if self._listener is not None:
            self._listener.close()
        with self._lock:
            handlers = list(self._handlers.items())
        for _handler, (_transport, connection) in handlers:
            if connection is not None:
                connection.post(DisconnectEvent(SHUTDOWN_REASON))

        deadline = time.monotonic() + timeout
        for handler, _entry in handlers:
            handler.join(max(0.0, deadline - time.monotonic()))

        with self._lock:
            leftovers = list(self._handlers.values())
        if not leftovers:
            return True
        logger.error("could not stop server cleanly: %d sessions still open after %.0fs", len(leftovers), timeout)
        for transport, connection in leftovers:
            if connection is not None:
                connection.close()
            transport.close()
        return False
