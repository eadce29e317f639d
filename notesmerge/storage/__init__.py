"""Adapters for the external collaborators of the merge pipeline.

Exposes:
- Protocols: DocumentStore, PropertyStore, TargetDocument
- Backends: LocalDocumentStore (folder of .docx files), DriveDocumentStore (Google Drive)
- JsonPropertyStore: processed markers scoped to one target document
"""

from .base import (
    DOCX_MIME,
    PROCESSED,
    DocumentStore,
    ExportResponse,
    Folder,
    PropertyStore,
    TargetDocument,
)
from .drive import DriveDocumentStore
from .local import LocalDocumentStore
from .properties import JsonPropertyStore

__all__ = [
    "DOCX_MIME",
    "PROCESSED",
    "DocumentStore",
    "ExportResponse",
    "Folder",
    "PropertyStore",
    "TargetDocument",
    "DriveDocumentStore",
    "LocalDocumentStore",
    "JsonPropertyStore",
]
