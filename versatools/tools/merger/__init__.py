"""PDF merge engine."""

from __future__ import annotations

from .merge import MergeOptions, PdfMerger, load_reader, merge_pdf_documents

__all__ = ["PdfMerger", "MergeOptions", "merge_pdf_documents", "load_reader"]
