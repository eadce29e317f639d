"""
Entry point and facade for the meeting-notes merge pipeline.

Running `python main.py` merges every new notes document from the configured
folder into the top of the target document. All settings come from
config/settings.json; the flags below are optional.

Packages:
- notesmerge.docs: content model, DOCX reader, DOCX target document
- notesmerge.storage: document store backends (local folder, Google Drive) and processed markers
- notesmerge.pipeline: candidate selection, normalization, transplantation, orchestration
"""

from __future__ import annotations

import logging

from notesmerge.config import CONFIG_PATH, Settings, configure_logging, load_settings
from notesmerge.docs.docx_io import read_docx
from notesmerge.docs.target import DocxTargetDocument
from notesmerge.errors import ConfigError, FolderNotFoundError
from notesmerge.pipeline import (
    FormatNormalizer,
    MergeReport,
    clean_title,
    merge_notes,
    run_merge,
    select_candidates,
    transplant,
)

__all__ = [
    # config
    "CONFIG_PATH",
    "Settings",
    "load_settings",
    "configure_logging",
    # documents
    "read_docx",
    "DocxTargetDocument",
    # pipeline
    "FormatNormalizer",
    "MergeReport",
    "clean_title",
    "merge_notes",
    "run_merge",
    "select_candidates",
    "transplant",
]

logger = logging.getLogger("notesmerge")


def _cli() -> int:
    """CLI for a single merge run.

    --config / -c: Path to settings JSON (default: config/settings.json)
    --log-level: Logging level (default: INFO)
    """
    import argparse

    parser = argparse.ArgumentParser(description="Merge new meeting-notes documents into the running notes document.")
    parser.add_argument("--config", "-c", type=str, default=CONFIG_PATH, help="Path to settings JSON (default: config/settings.json)")
    parser.add_argument("--log-level", type=str, default="INFO", choices=["DEBUG", "INFO", "WARNING", "ERROR"], help="Logging level (default: INFO)")
    args = parser.parse_args()

    configure_logging(level=args.log_level)
    try:
        settings = load_settings(args.config)
    except ConfigError as e:
        logger.error("%s", e)
        return 1
    configure_logging(settings.log_file, level=args.log_level)

    try:
        report = run_merge(settings)
    except (FolderNotFoundError, ConfigError) as e:
        logger.critical("Run aborted: %s", e)
        return 1

    logger.info("Done: %d document(s) merged", report.count)
    return 0


if __name__ == "__main__":
    raise SystemExit(_cli())
