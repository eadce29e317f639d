import io
import json

import httpx
import pytest
from docx import Document as DocxDocument

from notesmerge.storage.base import DOCX_MIME, Folder
from notesmerge.storage.drive import DriveDocumentStore


def _docx_bytes(*lines):
    doc = DocxDocument()
    for line in lines:
        doc.add_paragraph(line)
    buf = io.BytesIO()
    doc.save(buf)
    return buf.getvalue()


def _store(handler):
    return DriveDocumentStore(httpx.Client(transport=httpx.MockTransport(handler)))


def test_find_folder_queries_by_exact_name():
    seen = {}

    def handler(request):
        seen["q"] = request.url.params["q"]
        return httpx.Response(200, json={"files": [{"id": "f1", "name": "Meet Recordings"}]})

    folder = _store(handler).find_folder("Meet Recordings")
    assert folder == Folder(id="f1", name="Meet Recordings")
    assert "name = 'Meet Recordings'" in seen["q"]
    assert "application/vnd.google-apps.folder" in seen["q"]


def test_find_folder_missing_returns_none():
    store = _store(lambda request: httpx.Response(200, json={"files": []}))
    assert store.find_folder("Nope") is None


def test_list_documents_follows_pages():
    def handler(request):
        if request.url.params.get("pageToken") == "p2":
            return httpx.Response(
                200,
                json={"files": [{"id": "b", "name": "TRT-2", "createdTime": "2024-01-02T10:00:00.000Z"}]},
            )
        return httpx.Response(
            200,
            json={
                "files": [{"id": "a", "name": "TRT-1", "createdTime": "2024-01-01T10:00:00.000Z"}],
                "nextPageToken": "p2",
            },
        )

    docs = _store(handler).list_documents(Folder(id="f1", name="Meet Recordings"))
    assert [d.id for d in docs] == ["a", "b"]
    assert docs[0].created_time < docs[1].created_time
    assert docs[0].created_time.tzinfo is not None


def test_export_reports_status_without_raising():
    def handler(request):
        assert request.url.path == "/drive/v3/files/doc-1/export"
        assert request.url.params["mimeType"] == DOCX_MIME
        return httpx.Response(403, text="forbidden")

    response = _store(handler).export("doc-1")
    assert response.status_code == 403
    assert not response.ok
    assert response.content == b""


def test_create_uploads_multipart_and_returns_id():
    captured = {}

    def handler(request):
        captured["content_type"] = request.headers["content-type"]
        captured["body"] = request.content
        captured["params"] = dict(request.url.params)
        return httpx.Response(200, json={"id": "temp-9"})

    temp_id = _store(handler).create("tmp-TRT-1", b"DOCXDATA")

    assert temp_id == "temp-9"
    assert captured["content_type"].startswith("multipart/related; boundary=")
    assert captured["params"]["uploadType"] == "multipart"
    assert b"DOCXDATA" in captured["body"]
    metadata = json.dumps({"name": "tmp-TRT-1", "mimeType": "application/vnd.google-apps.document"})
    assert metadata.encode("utf-8") in captured["body"]


def test_read_exports_and_parses_docx():
    payload = _docx_bytes("hello", "world")
    store = _store(lambda request: httpx.Response(200, content=payload))
    assert [n.text for n in store.read("temp-9")] == ["hello", "world"]


def test_delete_raises_on_error():
    calls = []

    def handler(request):
        calls.append(request.method)
        return httpx.Response(404)

    with pytest.raises(httpx.HTTPStatusError):
        _store(handler).delete("temp-9")
    assert calls == ["DELETE"]


def test_from_token_sets_bearer_header():
    store = DriveDocumentStore.from_token("secret", timeout=None)
    try:
        assert store._client.headers["Authorization"] == "Bearer secret"
    finally:
        store.close()
