"""DOCX target document with insertion at a body offset.

python-docx only appends to the body, so every insert builds the new block
with the regular `add_*` API and then moves the element in front of the block
currently sitting at the requested index.
"""

from __future__ import annotations

import io
import logging
import os
from contextlib import contextmanager
from typing import List, Optional

from docx import Document as DocxDocument
from docx.enum.text import WD_BREAK
from docx.opc.constants import RELATIONSHIP_TYPE as RT
from docx.oxml import OxmlElement
from docx.oxml.ns import qn
from docx.shared import Emu

from .model import ContentNode, InlineImage, ListItem, Paragraph, Table, TextRun

logger = logging.getLogger(__name__)


def _apply_style(paragraph, style_name: str) -> None:
    try:
        paragraph.style = style_name
    except KeyError:
        logger.warning("Style %r not defined in target document; keeping default style", style_name)


def _heading_style(level: int) -> str:
    return "Title" if level == 0 else f"Heading {min(max(level, 1), 9)}"


def _list_style(item: ListItem) -> str:
    base = "List Number" if item.ordered else "List Bullet"
    # Stock template defines nesting up to level 3
    depth = min(item.level, 2)
    return base if depth == 0 else f"{base} {depth + 1}"


class DocxTargetDocument:
    """Mutable target document backed by a .docx file on disk."""

    def __init__(self, path: str) -> None:
        self.path = path
        if os.path.exists(path):
            self._doc = DocxDocument(path)
        else:
            logger.info("Target %s does not exist yet; starting an empty document", path)
            self._doc = DocxDocument()

    @property
    def document(self):
        return self._doc

    def _blocks(self) -> List:
        body = self._doc.element.body
        return [el for el in body.iterchildren() if el.tag in (qn("w:p"), qn("w:tbl"))]

    def __len__(self) -> int:
        return len(self._blocks())

    def _place(self, element, index: int, blocks: List) -> None:
        # `blocks` is the body snapshot taken before `element` was appended
        if index < 0:
            raise IndexError(f"Negative insert index: {index}")
        if index < len(blocks):
            blocks[index].addprevious(element)

    def _available_width(self) -> int:
        section = self._doc.sections[0]
        return int(section.page_width - section.left_margin - section.right_margin)

    def _fit(self, image: InlineImage):
        """Return (width, height) Emu clamped to the text column, or (None, None) for native size."""
        if not image.width:
            return None, None
        width, height = image.width, image.height
        avail = self._available_width()
        if width > avail:
            if height:
                height = int(height * avail / width)
            width = avail
        return Emu(width), (Emu(height) if height else None)

    def _add_runs(self, paragraph, runs: List[TextRun]) -> None:
        for tr in runs:
            if tr.image is not None:
                width, height = self._fit(tr.image)
                paragraph.add_run().add_picture(io.BytesIO(tr.image.blob), width=width, height=height)
                continue
            if not tr.text:
                continue
            if tr.link:
                self._add_hyperlink(paragraph, tr)
                continue
            run = paragraph.add_run(tr.text)
            run.bold = tr.bold or None
            run.italic = tr.italic or None
            run.underline = tr.underline or None

    def _add_hyperlink(self, paragraph, tr: TextRun) -> None:
        r_id = paragraph.part.relate_to(tr.link, RT.HYPERLINK, is_external=True)
        hyperlink = OxmlElement("w:hyperlink")
        hyperlink.set(qn("r:id"), r_id)
        run = paragraph.add_run(tr.text)
        run.bold = tr.bold or None
        run.italic = tr.italic or None
        run.underline = True
        hyperlink.append(run._r)
        paragraph._p.append(hyperlink)

    # -- insert operations -------------------------------------------------

    @contextmanager
    def _staged(self, index: int, create):
        """Yield a freshly appended block, then move it to `index`.

        If filling the block raises, the half-built element is removed from
        the body so nothing stray is left at the end of the document.
        """
        blocks = self._blocks()
        block = create()
        element = block._element
        try:
            yield block
        except Exception:
            element.getparent().remove(element)
            raise
        self._place(element, index, blocks)

    def insert_paragraph(self, index: int, node: Paragraph) -> None:
        with self._staged(index, self._doc.add_paragraph) as p:
            if node.heading_level is not None:
                _apply_style(p, _heading_style(node.heading_level))
            self._add_runs(p, node.runs)

    def insert_list_item(self, index: int, node: ListItem) -> None:
        with self._staged(index, self._doc.add_paragraph) as p:
            _apply_style(p, _list_style(node))
            self._add_runs(p, node.runs)

    def insert_table(self, index: int, node: Table) -> None:
        rows, cols = len(node.rows), node.column_count
        if rows == 0 or cols == 0:
            logger.info("Skipping empty table")
            return
        with self._staged(index, lambda: self._doc.add_table(rows=rows, cols=cols)) as table:
            _apply_style(table, "Table Grid")
            for r_idx, row in enumerate(node.rows):
                for c_idx, cell in enumerate(row):
                    self._fill_cell(table.cell(r_idx, c_idx), cell.content)

    def insert_image(self, index: int, image: InlineImage) -> None:
        with self._staged(index, self._doc.add_paragraph) as p:
            width, height = self._fit(image)
            p.add_run().add_picture(io.BytesIO(image.blob), width=width, height=height)

    def insert_horizontal_rule(self, index: int) -> None:
        with self._staged(index, self._doc.add_paragraph) as p:
            pPr = p._p.get_or_add_pPr()
            pBdr = OxmlElement("w:pBdr")
            bottom = OxmlElement("w:bottom")
            bottom.set(qn("w:val"), "single")
            bottom.set(qn("w:sz"), "6")
            bottom.set(qn("w:space"), "1")
            bottom.set(qn("w:color"), "auto")
            pBdr.append(bottom)
            pPr.append(pBdr)

    def insert_page_break(self, index: int) -> None:
        with self._staged(index, self._doc.add_paragraph) as p:
            p.add_run().add_break(WD_BREAK.PAGE)

    def _fill_cell(self, cell, content: List[ContentNode]) -> None:
        # A new cell holds one empty paragraph; reuse it for the first text block
        first: Optional[object] = cell.paragraphs[0]
        for node in content:
            if isinstance(node, (Paragraph, ListItem)):
                p = first if first is not None else cell.add_paragraph()
                first = None
                if isinstance(node, ListItem):
                    _apply_style(p, _list_style(node))
                elif node.heading_level is not None:
                    _apply_style(p, _heading_style(node.heading_level))
                self._add_runs(p, node.runs)
            elif isinstance(node, Table):
                if node.column_count == 0:
                    continue
                nested = cell.add_table(rows=len(node.rows), cols=node.column_count)
                for r_idx, row in enumerate(node.rows):
                    for c_idx, nested_cell in enumerate(row):
                        self._fill_cell(nested.cell(r_idx, c_idx), nested_cell.content)
                first = None
            elif isinstance(node, InlineImage):
                p = first if first is not None else cell.add_paragraph()
                first = None
                width, height = self._fit(node)
                p.add_run().add_picture(io.BytesIO(node.blob), width=width, height=height)
            else:
                text = getattr(node, "text", "")
                if text:
                    p = first if first is not None else cell.add_paragraph()
                    first = None
                    p.add_run(text)
                else:
                    logger.debug("Dropping %s inside table cell", type(node).__name__)

    def save(self, path: Optional[str] = None) -> str:
        out_path = path or self.path
        parent = os.path.dirname(os.path.abspath(out_path))
        os.makedirs(parent, exist_ok=True)
        self._doc.save(out_path)
        return out_path
