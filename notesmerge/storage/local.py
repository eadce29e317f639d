from __future__ import annotations

import logging
import os
from datetime import datetime, timezone
from typing import List, Optional

from notesmerge.docs.buffer import BufferManager
from notesmerge.docs.docx_io import read_docx
from notesmerge.docs.model import ContentNode, SourceDocument

from .base import ExportResponse, Folder

logger = logging.getLogger(__name__)


class LocalDocumentStore:
    """Document store over a directory tree of .docx files.

    Folders are sub-directories of `root`; a document id is the absolute path of
    its file. Files carry no portable creation time, so the modification time
    stands in for it. Temporary documents are written to the buffer session.
    """

    def __init__(self, root: str, buffer: BufferManager) -> None:
        self.root = os.path.abspath(root)
        self.buffer = buffer

    def find_folder(self, name: str) -> Optional[Folder]:
        path = os.path.join(self.root, name)
        if not os.path.isdir(path):
            return None
        return Folder(id=path, name=name)

    def list_documents(self, folder: Folder) -> List[SourceDocument]:
        docs: List[SourceDocument] = []
        for entry in os.scandir(folder.id):
            if not entry.is_file() or not entry.name.lower().endswith(".docx"):
                continue
            if entry.name.startswith("~$"):
                continue  # Word lock files
            stem = os.path.splitext(entry.name)[0]
            created = datetime.fromtimestamp(entry.stat().st_mtime, tz=timezone.utc)
            docs.append(SourceDocument(id=os.path.abspath(entry.path), name=stem, created_time=created))
        return docs

    def export(self, doc_id: str) -> ExportResponse:
        try:
            with open(doc_id, "rb") as f:
                return ExportResponse(status_code=200, content=f.read())
        except FileNotFoundError:
            return ExportResponse(status_code=404)
        except PermissionError:
            return ExportResponse(status_code=403)

    def create(self, name: str, blob: bytes) -> str:
        return self.buffer.write(name, blob)

    def read(self, doc_id: str) -> List[ContentNode]:
        return read_docx(doc_id)

    def delete(self, doc_id: str) -> None:
        os.remove(doc_id)
