"""Document storage: listing markdown files and reading their text.

Documents are ``*.md`` files directly under one directory. Each file starts
with a small metadata block (a description line and a separator line) that
feeds the list view and is stripped before the body is rendered.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from pathlib import Path

from .errors import DocumentError

logger = logging.getLogger(__name__)

DOCUMENT_SUFFIX = ".md"
METADATA_HEADER_LINES = 2
DESCRIPTION_MAX_CHARS = 96

_CONTROL_RE = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f-\x9f]")
_DESCRIPTION_KEY_RE = re.compile(r"^description\s*:\s*", re.IGNORECASE)


@dataclass(frozen=True)
class Document:
    name: str
    description: str


def read_text(path: Path) -> str:
    for encoding in ("utf-8", "utf-8-sig", "latin-1"):
        try:
            return path.read_text(encoding=encoding)
        except UnicodeDecodeError:
            continue
    return path.read_bytes().decode("utf-8", errors="replace")


def sanitize_terminal_text(source: str) -> str:
    """Replace control bytes (other than newline, CR and tab) with visible ``\\xNN`` escapes."""
    if _CONTROL_RE.search(source) is None:
        return source

    out: list[str] = []
    for ch in source:
        code = ord(ch)
        if ch in {"\n", "\r", "\t"}:
            out.append(ch)
            continue
        # C0 controls + DEL + C1 controls.
        if code < 32 or code == 127 or 0x80 <= code <= 0x9F:
            out.append(f"\\x{code:02x}")
            continue
        out.append(ch)
    return "".join(out)


def normalize_description(line: str, fallback: str) -> str:
    """Reduce a metadata line to one safe, short description."""
    candidate = line.strip().lstrip("#").strip()
    candidate = _DESCRIPTION_KEY_RE.sub("", candidate)
    candidate = sanitize_terminal_text(" ".join(candidate.split()))
    if not candidate:
        return fallback
    if len(candidate) > DESCRIPTION_MAX_CHARS:
        return candidate[: DESCRIPTION_MAX_CHARS - 3].rstrip() + "..."
    return candidate


def strip_metadata(raw: str, header_lines: int = METADATA_HEADER_LINES) -> str:
    """Drop the leading metadata block from a document's raw text."""
    return "\n".join(raw.split("\n")[header_lines:])


def _resolve_document_path(root: Path, name: str) -> Path:
    if not name or Path(name).name != name or name in {".", ".."}:
        raise DocumentError(f"invalid document name: {name!r}")
    return root / name


def list_documents(root: Path | str) -> list[Document]:
    """Return the documents under ``root`` ordered by file name.

    Raises :class:`DocumentError` when the directory cannot be read.
    """
    root_path = Path(root)
    try:
        candidates = sorted(
            (entry for entry in root_path.iterdir() if entry.is_file() and entry.suffix == DOCUMENT_SUFFIX),
            key=lambda entry: entry.name,
        )
    except OSError as exc:
        raise DocumentError(str(exc)) from exc

    documents: list[Document] = []
    for path in candidates:
        try:
            first_line = read_text(path).split("\n", 1)[0]
        except OSError as exc:
            logger.warning("skipping unreadable document %s: %s", path, exc)
            continue
        documents.append(Document(name=path.name, description=normalize_description(first_line, path.name)))
    logger.debug("listed %d documents in %s", len(documents), root_path)
    return documents


def read_document(root: Path | str, name: str) -> str:
    """Return the raw text of document ``name``; raises :class:`DocumentError`."""
    path = _resolve_document_path(Path(root), name)
    try:
        return read_text(path)
    except OSError as exc:
        raise DocumentError(str(exc)) from exc


__all__ = [
    "Document",
    "DOCUMENT_SUFFIX",
    "METADATA_HEADER_LINES",
    "list_documents",
    "normalize_description",
    "read_document",
    "read_text",
    "sanitize_terminal_text",
    "strip_metadata",
]
