"""Narrow interfaces to the document service, the property store and the target."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Optional, Protocol, runtime_checkable

from notesmerge.docs.model import (
    ContentNode,
    InlineImage,
    ListItem,
    Paragraph,
    SourceDocument,
    Table,
)

# Interchange format used for normalization (word-processing-markup package)
DOCX_MIME = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"

PROCESSED = "processed"


@dataclass(frozen=True)
class Folder:
    id: str
    name: str


@dataclass
class ExportResponse:
    status_code: int
    content: bytes = b""

    @property
    def ok(self) -> bool:
        return self.status_code == 200


@runtime_checkable
class DocumentStore(Protocol):
    """Storage and conversion service holding the source documents."""

    def find_folder(self, name: str) -> Optional[Folder]:
        """Return the folder with exactly this name, or None."""

    def list_documents(self, folder: Folder) -> List[SourceDocument]:
        """Return descriptors of every document of the expected type in `folder`."""

    def export(self, doc_id: str) -> ExportResponse:
        """Export a document to DOCX; a non-200 status means failure."""

    def create(self, name: str, blob: bytes) -> str:
        """Create a temporary document from DOCX bytes and return its id."""

    def read(self, doc_id: str) -> List[ContentNode]:
        """Return the top-level content nodes of a document, in order."""

    def delete(self, doc_id: str) -> None:
        """Delete a document; raises on failure."""


@runtime_checkable
class PropertyStore(Protocol):
    """Persistent string key/value store scoped to the target document."""

    def get(self, key: str) -> Optional[str]:
        ...

    def set(self, key: str, value: str) -> None:
        ...

    def delete(self, key: str) -> None:
        ...

    def keys(self) -> Iterable[str]:
        ...


@runtime_checkable
class TargetDocument(Protocol):
    """Document receiving the merged content; only ever inserted into."""

    def __len__(self) -> int:
        ...

    def insert_paragraph(self, index: int, node: Paragraph) -> None:
        ...

    def insert_list_item(self, index: int, node: ListItem) -> None:
        ...

    def insert_table(self, index: int, node: Table) -> None:
        ...

    def insert_image(self, index: int, image: InlineImage) -> None:
        ...

    def insert_horizontal_rule(self, index: int) -> None:
        ...

    def insert_page_break(self, index: int) -> None:
        ...

    def save(self) -> str:
        ...
