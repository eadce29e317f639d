import logging
from datetime import datetime, timezone

import pytest

from notesmerge.docs.model import SourceDocument, plain_paragraph
from notesmerge.errors import ConvertError, ExportError
from notesmerge.pipeline.normalize import FormatNormalizer
from notesmerge.storage.base import ExportResponse


class FakeStore:
    def __init__(self, export=None, nodes=None, fail_create=False, fail_read=False, fail_delete=False):
        self._export = export or ExportResponse(200, b"docx-bytes")
        self._nodes = [plain_paragraph("body")] if nodes is None else nodes
        self.fail_create = fail_create
        self.fail_read = fail_read
        self.fail_delete = fail_delete
        self.created = {}
        self.deleted = []

    def export(self, doc_id):
        return self._export

    def create(self, name, blob):
        if self.fail_create:
            raise RuntimeError("quota exceeded")
        temp_id = f"temp-{len(self.created) + 1}"
        self.created[temp_id] = (name, blob)
        return temp_id

    def read(self, doc_id):
        if self.fail_read:
            raise RuntimeError("corrupt package")
        return list(self._nodes)

    def delete(self, doc_id):
        if self.fail_delete:
            raise OSError("permission denied")
        self.deleted.append(doc_id)


def _source():
    return SourceDocument(id="doc-1", name="TRT-2024-01-01-Notes by Gemini", created_time=datetime(2024, 1, 1, tzinfo=timezone.utc))


def test_normalize_returns_nodes_and_deletes_temp():
    store = FakeStore()
    nodes = FormatNormalizer(store).normalize(_source())

    assert [n.text for n in nodes] == ["body"]
    assert list(store.created) == ["temp-1"]
    assert store.created["temp-1"] == ("tmp-TRT-2024-01-01-Notes by Gemini", b"docx-bytes")
    assert store.deleted == ["temp-1"]


def test_non_200_export_raises_and_creates_nothing():
    store = FakeStore(export=ExportResponse(403))
    with pytest.raises(ExportError) as exc_info:
        FormatNormalizer(store).normalize(_source())

    assert exc_info.value.status_code == 403
    assert exc_info.value.doc_id == "doc-1"
    assert store.created == {}


def test_create_failure_is_convert_error():
    store = FakeStore(fail_create=True)
    with pytest.raises(ConvertError):
        FormatNormalizer(store).normalize(_source())
    assert store.deleted == []


def test_read_failure_still_deletes_temp():
    store = FakeStore(fail_read=True)
    with pytest.raises(ConvertError):
        FormatNormalizer(store).normalize(_source())
    assert store.deleted == ["temp-1"]


def test_delete_failure_is_logged_not_raised(caplog):
    store = FakeStore(fail_delete=True)
    with caplog.at_level(logging.WARNING):
        nodes = FormatNormalizer(store, temp_prefix="merge-").normalize(_source())

    assert len(nodes) == 1
    assert "Could not delete temporary document temp-1" in caplog.text
    assert store.created["temp-1"][0].startswith("merge-")


def test_empty_content_is_a_logged_noop(caplog):
    store = FakeStore(nodes=[])
    with caplog.at_level(logging.INFO):
        nodes = FormatNormalizer(store).normalize(_source())

    assert nodes == []
    assert store.deleted == ["temp-1"]
    assert "nothing to merge" in caplog.text
