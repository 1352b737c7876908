"""Codec backends for pdfrestruct."""

from .base import PDFBackend, SourceDocument, WorkingDocument
from .pypdf_backend import PypdfBackend, PypdfSourceDocument, PypdfWorkingDocument

__all__ = [
    "PDFBackend",
    "SourceDocument",
    "WorkingDocument",
    "PypdfBackend",
    "PypdfSourceDocument",
    "PypdfWorkingDocument",
]
