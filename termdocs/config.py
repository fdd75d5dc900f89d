"""Server configuration: defaults, JSON config file and environment overrides.

Precedence is CLI flags > environment > config file > defaults. The config
file and environment are handled defensively: a missing, unreadable or
malformed file, or a value of the wrong type or out of range, is logged and
falls back to the lower-precedence value. Only bad command-line values abort
startup with :class:`ConfigError`.
"""

from __future__ import annotations

import json
import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass, fields, replace
from pathlib import Path

from platformdirs import user_config_dir

from .errors import ConfigError
from .theme import available_theme_names

logger = logging.getLogger(__name__)

APP_NAME = "termdocs"
CONFIG_FILENAME = "config.json"
CONFIG_PATH = Path(user_config_dir(APP_NAME, appauthor=False)) / CONFIG_FILENAME

DEFAULT_HOST = "0.0.0.0"
DEFAULT_PORT = 23234
HOST_KEY_FILENAME = "term_info_ed25519"
DEFAULT_DRAIN_TIMEOUT_SECONDS = 300.0

ENV_HOST_KEY_DIR = "SSH_FOLDER_PATH"
ENV_DOCS_DIR = "TERMDOCS_DOCS_DIR"
ENV_THEME = "TERMDOCS_THEME"


@dataclass(frozen=True)
class ServerConfig:
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    docs_dir: Path = Path("directory")
    host_key_dir: Path = Path(".ssh")
    theme: str = "dark"
    logo_path: Path = Path("logo.jpeg")
    logo_height: int = 15
    qr_url: str = "https://discord.gg/WW2sttvbVG"
    decor_padding: int = 2
    strict_decor: bool = False
    drain_timeout: float = DEFAULT_DRAIN_TIMEOUT_SECONDS
    banner_title: str = " termdocs "
    intro_text: str = "Browse the documents below. Press enter to read one, esc to come back."

    @property
    def host_key_path(self) -> Path:
        return self.host_key_dir / HOST_KEY_FILENAME

    def validate(self) -> ServerConfig:
        """Return ``self`` or raise :class:`ConfigError` for unusable values."""
        for f in fields(self):
            problem = value_problem(f.name, getattr(self, f.name))
            if problem is not None:
                raise ConfigError(problem)
        return self


def value_problem(key: str, value: object) -> str | None:
    """Describe why ``value`` is unusable for field ``key``; ``None`` if it is fine."""
    if key == "port" and not 0 < value < 65536:
        return f"port out of range: {value}"
    if key == "drain_timeout" and value < 0:
        return f"drain timeout must be >= 0: {value}"
    if key == "theme" and value not in available_theme_names():
        return f"unknown theme {value!r} (choose from {', '.join(available_theme_names())})"
    return None


def load_config_file(path: Path | None = None) -> dict[str, object]:
    """Load the JSON config object.

    Returns an empty dict when the file is missing, unreadable, malformed, or
    does not decode to a top-level JSON object.
    """
    config_path = CONFIG_PATH if path is None else path
    try:
        data = json.loads(config_path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return {}
    except (OSError, ValueError) as exc:
        logger.warning("ignoring unreadable config %s: %s", config_path, exc)
        return {}
    return data if isinstance(data, dict) else {}


def _coerce(value: object, default: object) -> object | None:
    """Convert a raw JSON/env value to the type of ``default``; ``None`` if invalid."""
    if isinstance(default, bool):
        if isinstance(value, bool):
            return value
        if isinstance(value, str) and value.strip().lower() in {"1", "true", "yes", "on", "0", "false", "no", "off"}:
            return value.strip().lower() in {"1", "true", "yes", "on"}
        return None
    if isinstance(default, int):
        if isinstance(value, bool):
            return None
        if isinstance(value, int):
            return value
        if isinstance(value, str) and value.strip().isdigit():
            return int(value.strip())
        return None
    if isinstance(default, float):
        if isinstance(value, bool) or not isinstance(value, (int, float, str)):
            return None
        try:
            return float(value)
        except ValueError:
            return None
    if isinstance(default, Path):
        if isinstance(value, Path):
            return value
        return Path(value).expanduser() if isinstance(value, str) and value else None
    if isinstance(default, str):
        return value if isinstance(value, str) else None
    return None


def apply_overrides(
    config: ServerConfig,
    overrides: Mapping[str, object],
    source: str,
    strict: bool = False,
) -> ServerConfig:
    """Return ``config`` with every valid, known key of ``overrides`` applied.

    Invalid values are logged and skipped, or raise :class:`ConfigError`
    when ``strict`` is set.
    """
    defaults = {f.name: getattr(config, f.name) for f in fields(ServerConfig)}
    changes: dict[str, object] = {}
    for key, raw in overrides.items():
        if key not in defaults or raw is None:
            continue
        value = _coerce(raw, defaults[key])
        problem = f"invalid value {raw!r}" if value is None else value_problem(key, value)
        if problem is not None:
            if strict:
                raise ConfigError(f"{source} {key}: {problem}")
            logger.warning("ignoring %s value for %s: %s", source, key, problem)
            continue
        changes[key] = value
    return replace(config, **changes) if changes else config


def environment_overrides(environ: Mapping[str, str] | None = None) -> dict[str, object]:
    env = os.environ if environ is None else environ
    overrides: dict[str, object] = {}
    if env.get(ENV_HOST_KEY_DIR):
        overrides["host_key_dir"] = env[ENV_HOST_KEY_DIR]
    if env.get(ENV_DOCS_DIR):
        overrides["docs_dir"] = env[ENV_DOCS_DIR]
    if env.get(ENV_THEME):
        overrides["theme"] = env[ENV_THEME]
    return overrides


def load_server_config(
    cli_overrides: Mapping[str, object] | None = None,
    *,
    config_path: Path | None = None,
    environ: Mapping[str, str] | None = None,
) -> ServerConfig:
    """Resolve the effective configuration; bad command-line values raise :class:`ConfigError`."""
    config = ServerConfig()
    config = apply_overrides(config, load_config_file(config_path), "config file")
    config = apply_overrides(config, environment_overrides(environ), "environment")
    config = apply_overrides(config, cli_overrides or {}, "command line", strict=True)
    return config.validate()
