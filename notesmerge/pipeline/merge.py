"""High-level pipeline: select candidates → normalize → transplant → mark.

This module orchestrates one merge run and provides `run_merge` as the single
entry point used by the CLI.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List

from notesmerge.config import Settings, get_access_token
from notesmerge.docs.buffer import BufferManager
from notesmerge.docs.model import SourceDocument, plain_paragraph
from notesmerge.docs.target import DocxTargetDocument
from notesmerge.storage.base import PROCESSED, DocumentStore, PropertyStore, TargetDocument
from notesmerge.storage.drive import DriveDocumentStore
from notesmerge.storage.local import LocalDocumentStore
from notesmerge.storage.properties import JsonPropertyStore

from .normalize import FormatNormalizer
from .select import clean_title, select_candidates
from .transplant import transplant

logger = logging.getLogger(__name__)

# Offsets in the target body: the heading goes on top, the body right under it
HEADING_INDEX = 0
BODY_INDEX = 1


@dataclass
class MergeReport:
    candidates: List[str] = field(default_factory=list)
    processed: List[str] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)
    failed: List[str] = field(default_factory=list)

    @property
    def count(self) -> int:
        return len(self.processed)


def _merge_one(
    doc: SourceDocument,
    normalizer: FormatNormalizer,
    target: TargetDocument,
    report: MergeReport,
    settings: Settings,
) -> None:
    try:
        nodes = normalizer.normalize(doc)
    except Exception as exc:
        logger.error("Skipping %s (%s): %s", doc.name, doc.id, exc)
        report.failed.append(doc.id)
        return

    if not nodes:
        # Left unmarked so the document is retried on the next run
        logger.info("No-op for %s (%s): empty content, not marked as processed", doc.name, doc.id)
        report.skipped.append(doc.id)
        return

    try:
        heading = settings.heading_text(clean_title(doc.name, settings.suffix))
        target.insert_paragraph(HEADING_INDEX, plain_paragraph(heading, settings.heading_level))
        inserted = transplant(nodes, target, BODY_INDEX)
        target.insert_paragraph(HEADING_INDEX, plain_paragraph(""))
    except Exception as exc:
        logger.error("Failed to merge %s (%s): %s", doc.name, doc.id, exc)
        report.failed.append(doc.id)
        return

    logger.info("Merged %s (%s): %d of %d element(s)", doc.name, doc.id, inserted, len(nodes))
    report.processed.append(doc.id)


def _mark_processed(properties: PropertyStore, report: MergeReport) -> None:
    for doc_id in list(report.processed):
        try:
            properties.set(doc_id, PROCESSED)
        except Exception as exc:
            # Content is already saved; without the marker the next run merges it again
            logger.error("Could not mark %s as processed: %s", doc_id, exc)
            report.processed.remove(doc_id)
            report.failed.append(doc_id)


def merge_notes(
    store: DocumentStore,
    target: TargetDocument,
    properties: PropertyStore,
    settings: Settings,
) -> MergeReport:
    """Merge every unprocessed candidate into `target`, newest ending on top.

    Markers are written only after the target has been saved, so a failed
    save leaves every candidate eligible for the next run.

    Doxygen:
    - @param store: Document service with the source folder.
    - @param target: Target document, saved once at the end.
    - @param properties: Processed markers scoped to the target.
    - @param settings: Naming convention, folder and heading settings.
    - @return: MergeReport with processed/skipped/failed ids.
    - @throws FolderNotFoundError: If the source folder does not exist.
    """
    candidates = select_candidates(
        store,
        settings.folder_name,
        settings.target_id or "",
        properties,
        settings.prefix,
        settings.suffix,
    )
    normalizer = FormatNormalizer(store, temp_prefix=settings.temp_prefix)
    report = MergeReport(candidates=[d.id for d in candidates])

    for doc in candidates:
        _merge_one(doc, normalizer, target, report, settings)

    try:
        saved = target.save()
    except Exception as exc:
        logger.error("Could not save target document; no candidate marked as processed: %s", exc)
        report.failed.extend(report.processed)
        report.processed = []
        return report

    _mark_processed(properties, report)
    logger.info(
        "Processed %d of %d candidate(s) into %s (%d skipped, %d failed)",
        report.count,
        len(candidates),
        saved,
        len(report.skipped),
        len(report.failed),
    )
    return report


def run_merge(settings: Settings) -> MergeReport:
    """Build the collaborators described by `settings` and run one merge."""
    buffer = BufferManager(debug=settings.debug_buffer)
    drive = None
    try:
        if settings.backend == "drive":
            drive = DriveDocumentStore.from_token(get_access_token(settings), timeout=settings.timeout)
            store: DocumentStore = drive
        else:
            store = LocalDocumentStore(settings.storage_root, buffer)
        target = DocxTargetDocument(settings.target_document)
        properties = JsonPropertyStore(settings.properties_path, scope=settings.target_id or settings.target_document)
        return merge_notes(store, target, properties, settings)
    finally:
        if drive is not None:
            drive.close()
        buffer.cleanup()
