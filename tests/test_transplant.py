import logging

from notesmerge.docs.model import (
    HorizontalRule,
    InlineImage,
    ListItem,
    PageBreak,
    Paragraph,
    Table,
    TableCell,
    TextRun,
    Unknown,
    Unsupported,
    plain_paragraph,
)
from notesmerge.pipeline.transplant import transplant


class RecordingTarget:
    """In-memory target keeping (kind, payload) tuples in body order."""

    def __init__(self, initial=None, fail_on=()):
        self.body = list(initial or [])
        self.fail_on = set(fail_on)

    def __len__(self):
        return len(self.body)

    def _insert(self, index, kind, payload):
        if kind in self.fail_on:
            raise RuntimeError(f"cannot insert {kind}")
        self.body.insert(index, (kind, payload))

    def insert_paragraph(self, index, node):
        self._insert(index, "paragraph", node.text)

    def insert_list_item(self, index, node):
        self._insert(index, "list", node.text)

    def insert_table(self, index, node):
        self._insert(index, "table", node.rows[0][0].text)

    def insert_image(self, index, image):
        self._insert(index, "image", image.filename)

    def insert_horizontal_rule(self, index):
        self._insert(index, "hr", None)

    def insert_page_break(self, index):
        self._insert(index, "pagebreak", None)

    def save(self):
        return "memory"


def _image(name):
    return InlineImage(blob=b"png", filename=name)


def test_transplant_preserves_source_order_at_offset():
    target = RecordingTarget([("paragraph", "heading"), ("paragraph", "older notes")])
    nodes = [
        plain_paragraph("one"),
        ListItem(runs=[TextRun("two")]),
        Table(rows=[[TableCell([plain_paragraph("three")])]]),
        HorizontalRule(),
        PageBreak(),
        plain_paragraph("six"),
    ]

    inserted = transplant(nodes, target, 1)

    assert inserted == 6
    assert target.body == [
        ("paragraph", "heading"),
        ("paragraph", "one"),
        ("list", "two"),
        ("table", "three"),
        ("hr", None),
        ("pagebreak", None),
        ("paragraph", "six"),
        ("paragraph", "older notes"),
    ]


def test_transplant_into_empty_target_at_zero():
    target = RecordingTarget()
    transplant([plain_paragraph("a"), plain_paragraph("b"), plain_paragraph("c")], target, 0)
    assert [p for _, p in target.body] == ["a", "b", "c"]


def test_image_paragraph_keeps_only_first_image(caplog):
    target = RecordingTarget()
    para = Paragraph(runs=[TextRun(image=_image("first.png")), TextRun(image=_image("second.png"))])

    with caplog.at_level(logging.WARNING):
        transplant([para], target, 0)

    assert target.body == [("image", "first.png")]
    assert "only the first image is kept" in caplog.text


def test_single_image_paragraph_is_inserted_as_image_without_warning(caplog):
    target = RecordingTarget()
    para = Paragraph(runs=[TextRun(image=_image("chart.png"))])

    with caplog.at_level(logging.WARNING):
        transplant([para, _image("standalone.png")], target, 0)

    assert target.body == [("image", "chart.png"), ("image", "standalone.png")]
    assert caplog.text == ""


def test_unsupported_dropped_and_unknown_text_becomes_paragraph(caplog):
    target = RecordingTarget()
    nodes = [
        plain_paragraph("keep"),
        Unsupported(marker="oMathPara"),
        Unknown(text="chip text", kind="sdt"),
        Unknown(text="   ", kind="customXml"),
    ]

    with caplog.at_level(logging.WARNING):
        inserted = transplant(nodes, target, 0)

    assert inserted == 2
    assert target.body == [("paragraph", "keep"), ("paragraph", "chip text")]
    assert "oMathPara" in caplog.text
    assert "customXml" in caplog.text


def test_failing_node_does_not_stop_the_rest(caplog):
    target = RecordingTarget(fail_on={"table"})
    nodes = [
        plain_paragraph("before"),
        Table(rows=[[TableCell([plain_paragraph("x")])]]),
        plain_paragraph("after"),
    ]

    with caplog.at_level(logging.ERROR):
        inserted = transplant(nodes, target, 0)

    assert inserted == 2
    assert target.body == [("paragraph", "before"), ("paragraph", "after")]
    assert "Could not insert Table" in caplog.text


def test_transplant_of_nothing_is_a_noop():
    target = RecordingTarget([("paragraph", "x")])
    assert transplant([], target, 1) == 0
    assert target.body == [("paragraph", "x")]
