"""
Custom exceptions for pdfrestruct.

Every error carries a stable machine-readable ``code`` alongside its
human-readable message so host runtimes can map failures without parsing
text.
"""

from __future__ import annotations

from typing import Dict


class PDFRestructError(Exception):
    """Base exception for all pdfrestruct errors."""

    code = "PDF_RESTRUCT_ERROR"

    def __init__(self, message: str = "") -> None:
        super().__init__(message or self.default_message)
        self.message = message or self.default_message

    @property
    def default_message(self) -> str:
        return "An unknown PDF restructuring error occurred."

    def to_dict(self) -> Dict[str, str]:
        return {"code": self.code, "message": self.message}


class DecodeError(PDFRestructError):
    """Raised when input bytes are not a well-formed PDF document."""

    code = "INVALID_PDF"

    @property
    def default_message(self) -> str:
        return "Invalid or corrupted PDF document."


class InvalidRangeError(PDFRestructError):
    """Raised when a page range specification is malformed or out of bounds."""

    code = "INVALID_PAGE_RANGE"

    @property
    def default_message(self) -> str:
        return "Invalid page range specification."


class NoBookmarksError(PDFRestructError):
    """Raised when a document has no bookmarks usable for splitting."""

    code = "NO_BOOKMARKS"

    @property
    def default_message(self) -> str:
        return "PDF document does not contain any bookmarks."


class MergeError(PDFRestructError):
    """Raised when merging fails during transform, serialization or emission."""

    code = "PDF_MERGE_ERROR"

    @property
    def default_message(self) -> str:
        return "Failed to merge PDF documents."


class SplitError(PDFRestructError):
    """Raised when splitting fails during transform, serialization or emission."""

    code = "PDF_SPLIT_ERROR"

    @property
    def default_message(self) -> str:
        return "Failed to split PDF document."


class InvalidRequestError(PDFRestructError):
    """Raised when an operation request violates its input constraints."""

    code = "INVALID_REQUEST"

    @property
    def default_message(self) -> str:
        return "Invalid operation request."


__all__ = [
    "PDFRestructError",
    "DecodeError",
    "InvalidRangeError",
    "NoBookmarksError",
    "MergeError",
    "SplitError",
    "InvalidRequestError",
]
