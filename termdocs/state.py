from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from .decor import EMPTY_DECOR, DecorArt
from .documents import Document
from .viewport import Viewport


class ViewState(Enum):
    LIST = "list"
    CONTENT = "content"


@dataclass
class SessionState:
    documents: list[Document]
    terminal_width: int
    terminal_height: int
    decor: DecorArt = EMPTY_DECOR
    cursor: int = 0
    view: ViewState = ViewState.LIST
    selected_document: Document | None = None
    raw_content: str = ""
    rendered_content: str = ""
    content_error: str = ""
    viewport: Viewport = field(default_factory=Viewport)
    ready: bool = False
    list_offset: int = 0
    content_width: int = 0
