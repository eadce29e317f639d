from __future__ import annotations

import io
import logging
import re
from typing import BinaryIO, Dict, List, Optional, Tuple, Union

from docx import Document as DocxDocument
from docx.oxml.ns import qn
from docx.table import Table as DocxTable, _Cell
from docx.text.hyperlink import Hyperlink
from docx.text.paragraph import Paragraph as DocxParagraph
from docx.text.run import Run
from PIL import Image

from .model import (
    EMU_PER_INCH,
    ContentNode,
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
)

logger = logging.getLogger(__name__)

_R_EMBED = "{http://schemas.openxmlformats.org/officeDocument/2006/relationships}embed"

_HEADING_RE = re.compile(r"^heading\s*(\d)$", re.IGNORECASE)
_LIST_STYLE_RE = re.compile(r"^list (bullet|number)(?:\s+(\d))?$", re.IGNORECASE)

# Block-level markup with no content of its own
_IGNORED_TAGS = {
    "sectPr",
    "tcPr",
    "bookmarkStart",
    "bookmarkEnd",
    "proofErr",
    "permStart",
    "permEnd",
    "commentRangeStart",
    "commentRangeEnd",
}
# Block-level content that cannot be carried over into another document
_UNSUPPORTED_TAGS = {"altChunk", "oMathPara", "oMath", "object"}


def _local_name(tag: str) -> str:
    return tag.rsplit("}", 1)[-1]


def _native_extent(blob: bytes) -> Tuple[Optional[int], Optional[int]]:
    """Return the (width, height) in EMU of an image at its own DPI, if Pillow can read it."""
    try:
        with Image.open(io.BytesIO(blob)) as img:
            w_px, h_px = img.size
            dpi = img.info.get("dpi") or (96, 96)
    except (OSError, ValueError):
        return None, None
    xdpi = float(dpi[0]) or 96.0
    ydpi = float(dpi[1]) or 96.0
    return int(w_px / xdpi * EMU_PER_INCH), int(h_px / ydpi * EMU_PER_INCH)


def _extract_images_from_run(run: Run) -> List[InlineImage]:
    """Return the images embedded in this run (if any), with their drawn extent."""
    images: List[InlineImage] = []
    r = run._r
    for drawing in r.xpath(".//w:drawing"):
        blips = list(drawing.iter(qn("a:blip")))
        if not blips:
            continue
        rId = blips[0].get(_R_EMBED)
        if not rId:
            continue
        try:
            part = run.part.related_parts[rId]
        except KeyError:
            logger.warning("Image relationship %s is missing; image dropped", rId)
            continue
        blob = part.blob
        width: Optional[int] = None
        height: Optional[int] = None
        extents = list(drawing.iter(qn("wp:extent")))
        if extents:
            width = int(extents[0].get("cx") or 0) or None
            height = int(extents[0].get("cy") or 0) or None
        if width is None or height is None:
            width, height = _native_extent(blob)
        filename = getattr(part, "filename", None) or "image.png"
        images.append(InlineImage(blob=blob, width=width, height=height, filename=filename))
    return images


def _convert_run(run: Run, link: Optional[str] = None) -> List[TextRun]:
    out: List[TextRun] = []
    for image in _extract_images_from_run(run):
        out.append(TextRun(image=image))
    if run.text:
        out.append(
            TextRun(
                text=run.text,
                bold=bool(run.bold),
                italic=bool(run.italic),
                underline=bool(run.underline),
                link=link,
            )
        )
    return out


def _paragraph_runs(para: DocxParagraph) -> List[TextRun]:
    # Walk runs and hyperlinks in document order to keep text and inline images interleaved
    runs: List[TextRun] = []
    for item in para.iter_inner_content():
        if isinstance(item, Hyperlink):
            for run in item.runs:
                runs.extend(_convert_run(run, link=item.url or None))
        else:
            runs.extend(_convert_run(item))
    return runs


def _style_name(para: DocxParagraph) -> str:
    style = para.style
    return (style.name or "") if style is not None else ""


def _heading_level(style_name: str) -> Optional[int]:
    if style_name.lower() == "title":
        return 0
    m = _HEADING_RE.match(style_name)
    return int(m.group(1)) if m else None


def _page_break_leads(p_element) -> bool:
    """True when the first page break of a paragraph comes before any text or drawing."""
    for el in p_element.iter(qn("w:t"), qn("w:drawing"), qn("w:br")):
        if el.tag == qn("w:br"):
            if el.get(qn("w:type")) == "page":
                return True
        elif el.tag == qn("w:drawing") or (el.text or "").strip():
            return False
    return False


class _DocxReader:
    """Converts one python-docx document into ContentNode sequences."""

    def __init__(self, document) -> None:
        self._document = document
        self._numbering_cache: Dict[Tuple[str, int], Optional[str]] = {}

    def read(self) -> List[ContentNode]:
        return self._convert_blocks(self._document.element.body, self._document)

    def _convert_blocks(self, container, parent) -> List[ContentNode]:
        nodes: List[ContentNode] = []
        for child in container.iterchildren():
            if not isinstance(child.tag, str):
                continue  # xml comments and processing instructions
            if child.tag == qn("w:p"):
                nodes.extend(self._convert_paragraph(DocxParagraph(child, parent)))
            elif child.tag == qn("w:tbl"):
                nodes.append(self._convert_table(child, parent))
            else:
                name = _local_name(child.tag)
                if name in _IGNORED_TAGS:
                    continue
                if name in _UNSUPPORTED_TAGS:
                    nodes.append(Unsupported(marker=name))
                    continue
                text = "".join(t.text or "" for t in child.iter(qn("w:t"))).strip()
                nodes.append(Unknown(text=text, kind=name) if text else Unsupported(marker=name))
        return nodes

    def _convert_paragraph(self, para: DocxParagraph) -> List[ContentNode]:
        el = para._p
        runs = _paragraph_runs(para)
        text = "".join(r.text for r in runs)
        has_content = bool(text.strip()) or any(r.image is not None for r in runs)
        has_page_break = bool(el.xpath('./w:r/w:br[@w:type="page"]'))

        if has_page_break and not has_content:
            return [PageBreak()]
        if not has_content and el.xpath("./w:pPr/w:pBdr/w:bottom"):
            return [HorizontalRule()]

        style_name = _style_name(para)
        list_info = self._list_info(el, style_name)
        node: ContentNode
        if list_info is not None:
            level, ordered = list_info
            node = ListItem(runs=runs, level=level, ordered=ordered)
        else:
            node = Paragraph(runs=runs, heading_level=_heading_level(style_name))

        if has_page_break:
            if _page_break_leads(el):
                return [PageBreak(), node]
            return [node, PageBreak()]
        return [node]

    def _list_info(self, el, style_name: str) -> Optional[Tuple[int, bool]]:
        num_ids = el.xpath("./w:pPr/w:numPr/w:numId/@w:val")
        if num_ids and num_ids[0] != "0":
            levels = el.xpath("./w:pPr/w:numPr/w:ilvl/@w:val")
            level = int(levels[0]) if levels else 0
            fmt = self._numbering_format(num_ids[0], level)
            return level, fmt is not None and fmt not in ("bullet", "none")
        m = _LIST_STYLE_RE.match(style_name)
        if m:
            level = int(m.group(2)) - 1 if m.group(2) else 0
            return level, m.group(1).lower() == "number"
        return None

    def _numbering_format(self, num_id: str, level: int) -> Optional[str]:
        key = (num_id, level)
        if key in self._numbering_cache:
            return self._numbering_cache[key]
        fmt: Optional[str] = None
        try:
            numbering = self._document.part.numbering_part.element
        except (KeyError, NotImplementedError):
            numbering = None
        if numbering is not None:
            abstract = numbering.xpath(f'./w:num[@w:numId="{num_id}"]/w:abstractNumId/@w:val')
            if abstract:
                found = numbering.xpath(
                    f'./w:abstractNum[@w:abstractNumId="{abstract[0]}"]'
                    f'/w:lvl[@w:ilvl="{level}"]/w:numFmt/@w:val'
                )
                fmt = found[0] if found else None
        self._numbering_cache[key] = fmt
        return fmt

    def _convert_table(self, tbl, parent) -> Table:
        table = DocxTable(tbl, parent)
        rows: List[List[TableCell]] = []
        for tr in tbl.tr_lst:
            cells: List[TableCell] = []
            for tc in tr.tc_lst:
                cell = _Cell(tc, table)
                cells.append(TableCell(content=self._convert_blocks(tc, cell)))
            rows.append(cells)
        return Table(rows=rows)


def read_docx(source: Union[str, bytes, BinaryIO]) -> List[ContentNode]:
    """Read the top-level body of a DOCX package as ContentNodes, in document order."""
    if isinstance(source, (bytes, bytearray)):
        source = io.BytesIO(source)
    document = DocxDocument(source)
    return _DocxReader(document).read()
