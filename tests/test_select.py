from datetime import datetime, timedelta, timezone

import pytest

from notesmerge.docs.model import SourceDocument
from notesmerge.errors import FolderNotFoundError
from notesmerge.pipeline.select import clean_title, is_candidate_name, select_candidates
from notesmerge.storage.base import Folder

PREFIX = "TRT"
SUFFIX = "Notes by Gemini"
BASE = datetime(2024, 1, 1, 9, 0, tzinfo=timezone.utc)


class FolderStore:
    def __init__(self, documents, folder_name="Meet Recordings"):
        self.documents = documents
        self.folder_name = folder_name

    def find_folder(self, name):
        return Folder(id="folder-1", name=name) if name == self.folder_name else None

    def list_documents(self, folder):
        return list(self.documents)


class DictProperties(dict):
    def set(self, key, value):
        self[key] = value

    def delete(self, key):
        self.pop(key, None)


def _doc(doc_id, name, hours):
    return SourceDocument(id=doc_id, name=name, created_time=BASE + timedelta(hours=hours))


def test_clean_title_strips_suffix_and_trailing_dash():
    assert clean_title("TRT-2024-01-02-Notes by Gemini", SUFFIX) == "TRT-2024-01-02"
    assert clean_title("TRT - Weekly sync - Notes by Gemini", SUFFIX) == "TRT - Weekly sync"
    assert clean_title("  TRT standup Notes by Gemini  ", SUFFIX) == "TRT standup"


def test_clean_title_keeps_suffix_words_inside_the_name():
    assert clean_title("TRT Notes by Gemini review - Notes by Gemini", SUFFIX) == "TRT Notes by Gemini review"
    assert clean_title("TRT Notes by Gemini follow-up", SUFFIX) == "TRT Notes by Gemini follow-up"


def test_is_candidate_name():
    assert is_candidate_name("TRT-2024-01-01-Notes by Gemini", PREFIX, SUFFIX)
    assert not is_candidate_name("TRT-2024-01-01-Notes by Gemini (1)", PREFIX, SUFFIX)
    assert not is_candidate_name("ABC-2024-01-01-Notes by Gemini", PREFIX, SUFFIX)


def test_select_filters_and_orders_oldest_first():
    store = FolderStore(
        [
            _doc("c", "TRT-2024-01-03-Notes by Gemini", 48),
            _doc("a", "TRT-2024-01-01-Notes by Gemini", 0),
            _doc("x", "Other meeting - Notes by Gemini", 5),
            _doc("y", "TRT-2024-01-01-Transcript", 6),
            _doc("b", "TRT-2024-01-02-Notes by Gemini", 24),
            _doc("done", "TRT-2023-12-31-Notes by Gemini", -24),
            _doc("target", "TRT running Notes by Gemini", 100),
        ]
    )
    processed = DictProperties({"done": "processed"})

    result = select_candidates(store, "Meet Recordings", "target", processed, PREFIX, SUFFIX)

    assert [d.id for d in result] == ["a", "b", "c"]


def test_non_processed_status_does_not_exclude():
    store = FolderStore([_doc("a", "TRT-1-Notes by Gemini", 0)])
    processed = DictProperties({"a": "pending"})
    result = select_candidates(store, "Meet Recordings", "target", processed, PREFIX, SUFFIX)
    assert [d.id for d in result] == ["a"]


def test_missing_folder_is_fatal():
    store = FolderStore([], folder_name="Somewhere else")
    with pytest.raises(FolderNotFoundError) as exc_info:
        select_candidates(store, "Meet Recordings", "target", DictProperties(), PREFIX, SUFFIX)
    assert exc_info.value.folder_name == "Meet Recordings"


def test_empty_folder_yields_no_candidates():
    result = select_candidates(FolderStore([]), "Meet Recordings", "t", DictProperties(), PREFIX, SUFFIX)
    assert result == []
