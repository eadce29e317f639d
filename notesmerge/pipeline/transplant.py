"""Copy ContentNodes into a target document at a fixed body offset.

Every insert at a fixed index pushes what is already there down, so nodes are
inserted last-first; once all are in, they read in their original order
starting at the index.
"""

from __future__ import annotations

import logging
from typing import Sequence

from notesmerge.docs.model import (
    ContentNode,
    HorizontalRule,
    InlineImage,
    ListItem,
    PageBreak,
    Paragraph,
    Table,
    Unknown,
    Unsupported,
    plain_paragraph,
)
from notesmerge.storage.base import TargetDocument

logger = logging.getLogger(__name__)


def _insert_paragraph(node: Paragraph, target: TargetDocument, index: int) -> None:
    images = node.images
    if not images:
        target.insert_paragraph(index, node)
        return
    # Image-bearing paragraphs are carried as their first image only
    if len(images) > 1 or node.text.strip():
        logger.warning(
            "Paragraph holds %d image(s) and %d character(s) of text; only the first image is kept",
            len(images),
            len(node.text.strip()),
        )
    target.insert_image(index, images[0])


def insert_node(node: ContentNode, target: TargetDocument, index: int) -> bool:
    """Insert one node at `index`; return False when the node was dropped."""
    if isinstance(node, Paragraph):
        _insert_paragraph(node, target, index)
    elif isinstance(node, ListItem):
        target.insert_list_item(index, node)
    elif isinstance(node, Table):
        target.insert_table(index, node)
    elif isinstance(node, InlineImage):
        target.insert_image(index, node)
    elif isinstance(node, HorizontalRule):
        target.insert_horizontal_rule(index)
    elif isinstance(node, PageBreak):
        target.insert_page_break(index)
    elif isinstance(node, Unsupported):
        logger.warning("Unsupported element %r cannot be copied; dropped", node.marker)
        return False
    else:
        text = getattr(node, "text", "")
        if not isinstance(text, str) or not text.strip():
            kind = node.kind if isinstance(node, Unknown) else type(node).__name__
            logger.warning("Element %r has no extractable text; dropped", kind)
            return False
        target.insert_paragraph(index, plain_paragraph(text))
    return True


def transplant(nodes: Sequence[ContentNode], target: TargetDocument, insert_index: int) -> int:
    """Insert `nodes` into `target` so they read in order starting at `insert_index`.

    A node that fails to insert is logged and skipped. Returns the number of
    nodes inserted.
    """
    inserted = 0
    total = len(nodes)
    for position in range(total - 1, -1, -1):
        node = nodes[position]
        try:
            if insert_node(node, target, insert_index):
                inserted += 1
        except Exception as exc:
            logger.error(
                "Could not insert %s (element %d of %d): %s",
                type(node).__name__,
                position + 1,
                total,
                exc,
            )
    return inserted
