"""Exception taxonomy for the merge pipeline.

Only `FolderNotFoundError` and `ConfigError` abort a run; `ExportError` and
`ConvertError` are caught at the per-candidate boundary.
"""

from __future__ import annotations

from typing import Optional


class MergeError(Exception):
    """Base class for all notesmerge errors."""


class ConfigError(MergeError):
    """Settings file is invalid or a required credential is missing."""


class FolderNotFoundError(MergeError):
    def __init__(self, folder_name: str) -> None:
        super().__init__(f"Source folder not found: {folder_name!r}")
        self.folder_name = folder_name


class ExportError(MergeError):
    """The document service did not return the interchange export."""

    def __init__(self, doc_id: str, status_code: int, message: Optional[str] = None) -> None:
        detail = message or f"export returned HTTP {status_code}"
        super().__init__(f"{detail} (doc_id={doc_id})")
        self.doc_id = doc_id
        self.status_code = status_code


class ConvertError(MergeError):
    """The temporary document could not be created or read back."""

    def __init__(self, doc_id: str, message: str) -> None:
        super().__init__(f"{message} (doc_id={doc_id})")
        self.doc_id = doc_id
