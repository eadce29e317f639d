from __future__ import annotations

import logging
from typing import List

from notesmerge.docs.model import ContentNode, SourceDocument
from notesmerge.errors import ConvertError, ExportError
from notesmerge.storage.base import DocumentStore

logger = logging.getLogger(__name__)


class FormatNormalizer:
    """Round-trip a source document through DOCX and read the result back.

    Generated documents carry structure that reads badly when walked directly;
    the exported-and-reimported copy is uniform. The temporary copy is always
    deleted before `normalize` returns, and a failed deletion is only logged.
    """

    def __init__(self, store: DocumentStore, temp_prefix: str = "tmp-") -> None:
        self._store = store
        self._temp_prefix = temp_prefix

    def normalize(self, source: SourceDocument) -> List[ContentNode]:
        response = self._store.export(source.id)
        if not response.ok:
            raise ExportError(source.id, response.status_code)
        if not response.content:
            raise ExportError(source.id, response.status_code, "export returned an empty body")

        try:
            temp_id = self._store.create(f"{self._temp_prefix}{source.name}", response.content)
        except Exception as exc:
            raise ConvertError(source.id, f"could not create temporary document: {exc}") from exc
        logger.debug("Temporary document %s created for %s", temp_id, source.id)

        try:
            nodes = self._store.read(temp_id)
        except Exception as exc:
            raise ConvertError(source.id, f"could not read temporary document {temp_id}: {exc}") from exc
        finally:
            self._discard(temp_id)

        if not nodes:
            logger.info("No content in %s (%s); nothing to merge", source.name, source.id)
        return nodes

    def _discard(self, temp_id: str) -> None:
        try:
            self._store.delete(temp_id)
        except Exception as exc:
            logger.warning("Could not delete temporary document %s: %s", temp_id, exc)
