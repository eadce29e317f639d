import io
import os

import pytest
from docx import Document as DocxDocument
from PIL import Image


def _png_bytes(width=20, height=10, color=(200, 30, 30)):
    buf = io.BytesIO()
    Image.new("RGB", (width, height), color).save(buf, format="PNG")
    return buf.getvalue()


def _write_notes_doc(path, lines, mtime=None):
    doc = DocxDocument()
    for line in lines:
        doc.add_paragraph(line)
    doc.save(path)
    if mtime is not None:
        os.utime(path, (mtime, mtime))
    return path


@pytest.fixture
def png_bytes():
    return _png_bytes


@pytest.fixture
def write_notes_doc():
    return _write_notes_doc
