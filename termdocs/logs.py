"""Process-wide logging setup."""

from __future__ import annotations

import logging
import os
import sys

ENV_LOG_LEVEL = "TERMDOCS_LOG_LEVEL"
LOG_FORMAT = "%(asctime)s %(levelname)-5s %(name)s: %(message)s"


def configure_logging(level: str | None = None) -> None:
    """Install one stderr handler on the root logger.

    ``level`` overrides ``TERMDOCS_LOG_LEVEL``; unknown names fall back to
    ``INFO``. paramiko's transport chatter stays at ``WARNING`` unless the
    server itself runs at ``DEBUG``.
    """
    name = (level or os.environ.get(ENV_LOG_LEVEL) or "INFO").upper()
    numeric = logging.getLevelName(name)
    if not isinstance(numeric, int):
        numeric = logging.INFO
    logging.basicConfig(level=numeric, format=LOG_FORMAT, stream=sys.stderr, force=True)
    logging.getLogger("paramiko").setLevel(logging.DEBUG if numeric <= logging.DEBUG else logging.WARNING)
