"""Document layer: content model and DOCX reading/writing.

Exposes:
- Data model: SourceDocument and the ContentNode variants
- Buffer manager: BufferManager (stores temporary documents under config/buffer)
- Reader: read_docx (DOCX → ContentNode sequence)
- Target: DocxTargetDocument (index-addressed insertion into a .docx body)
"""

from .model import (
    ContentNode,
    HorizontalRule,
    InlineImage,
    ListItem,
    PageBreak,
    Paragraph,
    SourceDocument,
    Table,
    TableCell,
    TextRun,
    Unknown,
    Unsupported,
    plain_paragraph,
)
from .buffer import BufferManager
from .docx_io import read_docx
from .target import DocxTargetDocument

__all__ = [
    "ContentNode",
    "HorizontalRule",
    "InlineImage",
    "ListItem",
    "PageBreak",
    "Paragraph",
    "SourceDocument",
    "Table",
    "TableCell",
    "TextRun",
    "Unknown",
    "Unsupported",
    "plain_paragraph",
    "BufferManager",
    "read_docx",
    "DocxTargetDocument",
]
