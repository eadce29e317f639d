"""Merge pipeline: candidate selection, DOCX normalization, transplantation."""

from .merge import MergeReport, merge_notes, run_merge
from .normalize import FormatNormalizer
from .select import clean_title, is_candidate_name, select_candidates
from .transplant import insert_node, transplant

__all__ = [
    "MergeReport",
    "merge_notes",
    "run_merge",
    "FormatNormalizer",
    "clean_title",
    "is_candidate_name",
    "select_candidates",
    "insert_node",
    "transplant",
]
