"""Google Drive v3 backend over plain REST calls.

Doxygen:
- Authentication is a bearer token supplied by the caller; token refresh is
  left to whatever produced it.
- Source documents are native Google Docs; temporary documents are created by
  uploading the exported DOCX with conversion to a Google Doc, and read back by
  exporting them again.
"""

from __future__ import annotations

import json
import logging
import uuid
from datetime import datetime
from typing import Any, Dict, List, Optional

import httpx

from notesmerge.docs.docx_io import read_docx
from notesmerge.docs.model import ContentNode, SourceDocument

from .base import DOCX_MIME, ExportResponse, Folder

logger = logging.getLogger(__name__)

DRIVE_API = "https://www.googleapis.com/drive/v3"
DRIVE_UPLOAD_API = "https://www.googleapis.com/upload/drive/v3"
FOLDER_MIME = "application/vnd.google-apps.folder"
GOOGLE_DOC_MIME = "application/vnd.google-apps.document"


def _quote(value: str) -> str:
    """Escape a literal for the Drive query language."""
    return value.replace("\\", "\\\\").replace("'", "\\'")


def _parse_time(raw: str) -> datetime:
    # Drive returns RFC 3339 with a trailing Z
    return datetime.fromisoformat(raw.replace("Z", "+00:00"))


class DriveDocumentStore:
    def __init__(self, client: httpx.Client) -> None:
        self._client = client

    @classmethod
    def from_token(cls, token: str, timeout: Optional[float] = None) -> "DriveDocumentStore":
        """Create a store with an authenticated client.

        Doxygen:
        - @param token: OAuth2 access token with Drive scope.
        - @param timeout: Per-request timeout in seconds; None disables timeouts.
        """
        client = httpx.Client(
            headers={"Authorization": f"Bearer {token}"},
            timeout=timeout,
        )
        return cls(client)

    def close(self) -> None:
        self._client.close()

    def _list_files(self, query: str) -> List[Dict[str, Any]]:
        files: List[Dict[str, Any]] = []
        params: Dict[str, str] = {
            "q": query,
            "fields": "nextPageToken, files(id, name, createdTime)",
            "pageSize": "100",
        }
        while True:
            resp = self._client.get(f"{DRIVE_API}/files", params=params)
            resp.raise_for_status()
            payload = resp.json()
            files.extend(payload.get("files", []))
            token = payload.get("nextPageToken")
            if not token:
                return files
            params["pageToken"] = token

    def find_folder(self, name: str) -> Optional[Folder]:
        query = f"mimeType = '{FOLDER_MIME}' and name = '{_quote(name)}' and trashed = false"
        files = self._list_files(query)
        if not files:
            return None
        if len(files) > 1:
            logger.warning("%d folders named %r; using the first one (%s)", len(files), name, files[0]["id"])
        return Folder(id=files[0]["id"], name=files[0]["name"])

    def list_documents(self, folder: Folder) -> List[SourceDocument]:
        query = f"'{_quote(folder.id)}' in parents and mimeType = '{GOOGLE_DOC_MIME}' and trashed = false"
        return [
            SourceDocument(id=f["id"], name=f["name"], created_time=_parse_time(f["createdTime"]))
            for f in self._list_files(query)
        ]

    def export(self, doc_id: str) -> ExportResponse:
        resp = self._client.get(f"{DRIVE_API}/files/{doc_id}/export", params={"mimeType": DOCX_MIME})
        if resp.status_code != 200:
            logger.debug("Export of %s failed: %s", doc_id, resp.text[:200])
            return ExportResponse(status_code=resp.status_code)
        return ExportResponse(status_code=200, content=resp.content)

    def create(self, name: str, blob: bytes) -> str:
        boundary = f"notesmerge-{uuid.uuid4().hex}"
        metadata = json.dumps({"name": name, "mimeType": GOOGLE_DOC_MIME})
        body = b"".join(
            [
                f"--{boundary}\r\nContent-Type: application/json; charset=UTF-8\r\n\r\n".encode("utf-8"),
                metadata.encode("utf-8"),
                f"\r\n--{boundary}\r\nContent-Type: {DOCX_MIME}\r\n\r\n".encode("utf-8"),
                blob,
                f"\r\n--{boundary}--\r\n".encode("utf-8"),
            ]
        )
        resp = self._client.post(
            f"{DRIVE_UPLOAD_API}/files",
            params={"uploadType": "multipart", "fields": "id"},
            content=body,
            headers={"Content-Type": f"multipart/related; boundary={boundary}"},
        )
        resp.raise_for_status()
        return resp.json()["id"]

    def read(self, doc_id: str) -> List[ContentNode]:
        exported = self.export(doc_id)
        if not exported.ok:
            raise RuntimeError(f"Could not read back document {doc_id}: HTTP {exported.status_code}")
        return read_docx(exported.content)

    def delete(self, doc_id: str) -> None:
        resp = self._client.delete(f"{DRIVE_API}/files/{doc_id}")
        resp.raise_for_status()
