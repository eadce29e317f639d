from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional, Union

# DOCX drawing unit: 914400 EMU per inch
EMU_PER_INCH = 914400


@dataclass
class SourceDocument:
    id: str
    name: str
    created_time: datetime


@dataclass
class InlineImage:
    blob: bytes
    width: Optional[int] = None  # EMU
    height: Optional[int] = None  # EMU
    filename: str = "image.png"


@dataclass
class TextRun:
    text: str = ""
    bold: bool = False
    italic: bool = False
    underline: bool = False
    link: Optional[str] = None
    image: Optional[InlineImage] = None


@dataclass
class Paragraph:
    runs: List[TextRun] = field(default_factory=list)
    # 0 = title, 1..9 = heading level, None = body text
    heading_level: Optional[int] = None

    @property
    def text(self) -> str:
        return "".join(r.text for r in self.runs)

    @property
    def images(self) -> List[InlineImage]:
        return [r.image for r in self.runs if r.image is not None]


@dataclass
class ListItem:
    runs: List[TextRun] = field(default_factory=list)
    level: int = 0
    ordered: bool = False

    @property
    def text(self) -> str:
        return "".join(r.text for r in self.runs)


@dataclass
class TableCell:
    content: List["ContentNode"] = field(default_factory=list)

    @property
    def text(self) -> str:
        return "\n".join(getattr(n, "text", "") for n in self.content)


@dataclass
class Table:
    rows: List[List[TableCell]] = field(default_factory=list)

    @property
    def column_count(self) -> int:
        return max((len(r) for r in self.rows), default=0)


@dataclass
class HorizontalRule:
    pass


@dataclass
class PageBreak:
    pass


@dataclass
class Unsupported:
    marker: str


@dataclass
class Unknown:
    text: str
    kind: str = "unknown"


ContentNode = Union[
    Paragraph,
    ListItem,
    Table,
    InlineImage,
    HorizontalRule,
    PageBreak,
    Unsupported,
    Unknown,
]


def plain_paragraph(text: str, heading_level: Optional[int] = None) -> Paragraph:
    """Build a single-run paragraph; an empty string gives a blank line."""
    runs = [TextRun(text=text)] if text else []
    return Paragraph(runs=runs, heading_level=heading_level)
