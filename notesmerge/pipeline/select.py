"""Candidate selection: folder scan, naming filter, processed filter, ordering."""

from __future__ import annotations

import logging
import re
from typing import List

from notesmerge.docs.model import SourceDocument
from notesmerge.errors import FolderNotFoundError
from notesmerge.storage.base import PROCESSED, DocumentStore, PropertyStore

logger = logging.getLogger(__name__)

_TRAILING_DASH_RE = re.compile(r"\s*-\s*$")


def is_candidate_name(name: str, prefix: str, suffix: str) -> bool:
    """Naming contract `^<prefix>.*<suffix>$`."""
    return name.startswith(prefix) and name.endswith(suffix)


def clean_title(name: str, suffix: str) -> str:
    """Human-readable title: drop the trailing suffix and a trailing dash, then trim.

    Only the suffix at the end of the name is removed; the same words earlier
    in the name are kept.

    >>> clean_title("TRT-2024-01-02-Notes by Gemini", "Notes by Gemini")
    'TRT-2024-01-02'
    """
    title = name.strip()
    if suffix and title.endswith(suffix):
        title = title[: -len(suffix)]
    return _TRAILING_DASH_RE.sub("", title).strip()


def select_candidates(
    store: DocumentStore,
    folder_name: str,
    target_id: str,
    processed: PropertyStore,
    prefix: str,
    suffix: str,
) -> List[SourceDocument]:
    """Return unprocessed candidate documents, oldest first.

    Doxygen:
    - @param store: Document service holding the source folder.
    - @param folder_name: Exact name of the source folder.
    - @param target_id: Id of the target document, never selected.
    - @param processed: Property store with the processed markers.
    - @param prefix: Required name prefix.
    - @param suffix: Required name suffix.
    - @return: Candidates sorted ascending by creation time. Inserting each one
      at the top of the target in this order leaves the newest on top.
    - @throws FolderNotFoundError: If no folder with that name exists.
    """
    folder = store.find_folder(folder_name)
    if folder is None:
        raise FolderNotFoundError(folder_name)

    documents = store.list_documents(folder)
    candidates: List[SourceDocument] = []
    for doc in documents:
        if not is_candidate_name(doc.name, prefix, suffix):
            continue
        if doc.id == target_id:
            continue
        if processed.get(doc.id) == PROCESSED:
            logger.debug("Already processed: %s (%s)", doc.name, doc.id)
            continue
        candidates.append(doc)

    candidates.sort(key=lambda d: d.created_time)
    logger.info(
        "Folder %r: %d document(s), %d candidate(s)",
        folder_name,
        len(documents),
        len(candidates),
    )
    return candidates
