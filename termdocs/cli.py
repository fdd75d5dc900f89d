"""Command-line front door for termdocs.

Parses CLI options, resolves configuration, and either serves the document
browser over SSH or prints a listing/rendered document for inspection.
"""

from __future__ import annotations

import argparse
import logging
import shutil
import signal
import sys
import threading
from functools import partial

from .config import ServerConfig, load_server_config
from .decor import load_decor
from .documents import list_documents, read_document, strip_metadata
from .errors import ConfigError, DocumentError, MarkdownRenderError
from .logs import configure_logging
from .markdown import render_markdown
from .render import RenderSettings
from .server import TerminalServer, load_host_key
from .supervisor import SessionServices, SessionSupervisor
from .theme import available_theme_names, resolve_theme

logger = logging.getLogger(__name__)


def _positive_int(value: str) -> int:
    """argparse type for positive integer values."""
    try:
        parsed = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid integer value: {value!r}") from exc
    if parsed <= 0:
        raise argparse.ArgumentTypeError("value must be >= 1")
    return parsed


def _non_negative_float(value: str) -> float:
    try:
        parsed = float(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid number: {value!r}") from exc
    if parsed < 0:
        raise argparse.ArgumentTypeError("value must be >= 0")
    return parsed


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Serve a directory of markdown documents over SSH.")
    parser.add_argument("--host", default=None, help="Listen address (default: 0.0.0.0).")
    parser.add_argument("--port", type=_positive_int, default=None, help="Listen port (default: 23234).")
    parser.add_argument("--docs", dest="docs_dir", default=None, help="Directory holding the *.md documents.")
    parser.add_argument(
        "--theme",
        default=None,
        help=f"UI and markdown theme ({', '.join(available_theme_names())}).",
    )
    parser.add_argument(
        "--host-key-dir",
        default=None,
        help="Directory for the SSH host key (default: $SSH_FOLDER_PATH or .ssh).",
    )
    parser.add_argument(
        "--drain-timeout",
        type=_non_negative_float,
        default=None,
        help="Seconds to let sessions finish on shutdown (default: 300).",
    )
    parser.add_argument(
        "--strict-decor",
        action="store_true",
        default=None,
        help="Refuse sessions when banner art cannot be generated.",
    )
    parser.add_argument("--log-level", default=None, help="Logging level (default: $TERMDOCS_LOG_LEVEL or INFO).")
    parser.add_argument("--list", action="store_true", help="Print the document listing and exit.")
    parser.add_argument("--render", metavar="NAME", help="Print document NAME rendered as in the viewer and exit.")
    return parser


def build_services(config: ServerConfig) -> SessionServices:
    """Bind collaborators to the configuration once for the process lifetime."""
    theme = resolve_theme(config.theme)
    settings = RenderSettings(theme=theme, banner_title=config.banner_title, intro_text=config.intro_text)
    return SessionServices(
        list_documents=partial(list_documents, config.docs_dir),
        read_document=partial(read_document, config.docs_dir),
        render_markdown=partial(render_markdown, theme_name=theme.markdown_style),
        load_decor=partial(load_decor, config.logo_path, config.logo_height, config.qr_url, config.decor_padding),
        settings=settings,
        strict_decor=config.strict_decor,
    )


def print_listing(config: ServerConfig) -> None:
    for document in list_documents(config.docs_dir):
        sys.stdout.write(f"{document.name}\t{document.description}\n")


def print_rendered(config: ServerConfig, name: str) -> None:
    body = strip_metadata(read_document(config.docs_dir, name))
    width = shutil.get_terminal_size((80, 24)).columns
    rendered = render_markdown(body, width, theme_name=resolve_theme(config.theme).markdown_style)
    sys.stdout.write(rendered if rendered.endswith("\n") else rendered + "\n")


def serve(config: ServerConfig) -> int:
    """Run the SSH server until SIGINT/SIGTERM, then drain sessions."""
    supervisor = SessionSupervisor(build_services(config))
    server = TerminalServer(config.host, config.port, load_host_key(config.host_key_path), supervisor)
    try:
        server.bind()
    except OSError as exc:
        logger.error("could not start server: %s", exc)
        return 1

    done = threading.Event()
    failed = threading.Event()

    def request_stop(_signum: int, _frame: object) -> None:
        done.set()

    def run() -> None:
        try:
            server.serve_forever()
        except OSError as exc:
            logger.error("could not start server: %s", exc)
            failed.set()
            done.set()

    signal.signal(signal.SIGINT, request_stop)
    signal.signal(signal.SIGTERM, request_stop)
    acceptor = threading.Thread(target=run, name="termdocs-accept", daemon=True)
    acceptor.start()
    while not done.wait(1.0):
        pass
    drained = server.shutdown(config.drain_timeout)
    acceptor.join(timeout=5.0)
    if failed.is_set() or not drained:
        return 1
    return 0


def main(argv: list[str] | None = None) -> None:
    """Parse CLI arguments and run the requested mode."""
    args = build_parser().parse_args(argv)
    configure_logging(args.log_level)

    overrides = {
        "host": args.host,
        "port": args.port,
        "docs_dir": args.docs_dir,
        "theme": args.theme,
        "host_key_dir": args.host_key_dir,
        "drain_timeout": args.drain_timeout,
        "strict_decor": args.strict_decor,
    }
    try:
        config = load_server_config(overrides)
    except ConfigError as exc:
        raise SystemExit(f"invalid configuration: {exc}") from exc

    if args.list or args.render is not None:
        try:
            if args.list:
                print_listing(config)
            else:
                print_rendered(config, args.render)
        except (DocumentError, MarkdownRenderError) as exc:
            raise SystemExit(str(exc)) from exc
        return

    raise SystemExit(serve(config))


if __name__ == "__main__":
    main()
