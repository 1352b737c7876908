"""
Type definitions and dataclasses for pdfrestruct.

This module defines the data structures exchanged between the engine, the
codec backends and the host runtime.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Sequence

from pypdf import PaperSize

PDF_CONTENT_TYPE = "application/pdf"


class PageSizePolicy(str, Enum):
    """Page geometry standardization applied while merging."""

    KEEP_ORIGINAL = "KEEP_ORIGINAL"
    A4 = "A4"
    USE_FIRST = "USE_FIRST"
    USE_LARGEST = "USE_LARGEST"

    @classmethod
    def coerce(cls, value: "PageSizePolicy | str") -> "PageSizePolicy":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().upper())
        except ValueError as exc:
            choices = ", ".join(policy.value for policy in cls)
            raise ValueError(
                f"Unknown page size policy {value!r}. Expected one of: {choices}"
            ) from exc


class SplitMethod(str, Enum):
    BY_PAGE = "BY_PAGE"
    BY_RANGE = "BY_RANGE"
    BY_BOOKMARK = "BY_BOOKMARK"
    BY_SIZE = "BY_SIZE"


@dataclass(frozen=True)
class PageRange:
    """Inclusive, 1-indexed page range."""

    start: int
    end: int

    def __post_init__(self) -> None:
        if self.start < 1:
            raise ValueError("Page numbers must be positive integers")
        if self.start > self.end:
            raise ValueError("Page range start must be less than or equal to end")

    @property
    def page_count(self) -> int:
        return self.end - self.start + 1

    def __str__(self) -> str:
        if self.start == self.end:
            return str(self.start)
        return f"{self.start}-{self.end}"


@dataclass(frozen=True)
class PageGeometry:
    """
    Rectangular page dimensions in PDF user-space units.

    Attributes:
        width: Width of the media box
        height: Height of the media box
        left: Lower-left x coordinate of the media box
        bottom: Lower-left y coordinate of the media box
    """

    width: float
    height: float
    left: float = 0.0
    bottom: float = 0.0

    @property
    def area(self) -> float:
        return self.width * self.height

    def as_box(self) -> tuple[float, float, float, float]:
        return (self.left, self.bottom, self.left + self.width, self.bottom + self.height)

    @classmethod
    def a4(cls) -> "PageGeometry":
        return cls(width=float(PaperSize.A4.width), height=float(PaperSize.A4.height))


@dataclass
class BookmarkNode:
    """
    One entry of a document outline.

    The page index is resolved lazily: codecs attach a ``resolver`` callable
    that is only invoked the first time :meth:`resolve_page_index` runs.
    Nodes built in a target index space carry ``page_index`` directly.
    """

    title: str
    page_index: Optional[int] = None
    children: List["BookmarkNode"] = field(default_factory=list)
    resolver: Optional[Callable[[], Optional[int]]] = field(
        default=None, repr=False, compare=False
    )

    def resolve_page_index(self) -> Optional[int]:
        if self.resolver is not None:
            resolver, self.resolver = self.resolver, None
            resolved = resolver()
            self.page_index = resolved if resolved is not None and resolved >= 0 else None
        return self.page_index

    def walk(self) -> List["BookmarkNode"]:
        """Return this node and all descendants in depth-first order."""

        nodes = [self]
        for child in self.children:
            nodes.extend(child.walk())
        return nodes


@dataclass(frozen=True)
class BookmarkSection:
    """Page span (0-indexed, inclusive) derived from a top-level bookmark."""

    title: str
    start_page: int
    end_page: int


@dataclass(frozen=True)
class InputDocument:
    """A binary document blob supplied by the host runtime."""

    content: bytes
    filename: Optional[str] = None
    content_type: str = PDF_CONTENT_TYPE


@dataclass(frozen=True)
class OutputDocument:
    """A binary document produced by an operation and handed to a sink."""

    content: bytes
    filename: str
    content_type: str = PDF_CONTENT_TYPE

    @property
    def size(self) -> int:
        return len(self.content)


@dataclass(frozen=True)
class MergeResult:
    """
    Result of a merge operation.

    Attributes:
        merged_document: Handle returned by the sink for the merged file
        total_pages: Sum of the page counts of all sources
        source_document_count: Number of merged sources
        file_size_bytes: Byte length of the serialized merged document
    """

    merged_document: Any
    total_pages: int
    source_document_count: int
    file_size_bytes: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "mergedDocument": self.merged_document,
            "totalPages": self.total_pages,
            "sourceDocumentCount": self.source_document_count,
            "fileSizeBytes": self.file_size_bytes,
        }


@dataclass(frozen=True)
class SplitResult:
    """
    Result of a split operation.

    Attributes:
        split_documents: Sink handles for each chunk, in output order
        total_files: Number of chunks produced
        original_pages: Page count of the source document
        split_method: Strategy used to partition the source
    """

    split_documents: Sequence[Any]
    total_files: int
    original_pages: int
    split_method: SplitMethod

    def to_dict(self) -> Dict[str, Any]:
        return {
            "splitDocuments": list(self.split_documents),
            "totalFiles": self.total_files,
            "originalPages": self.original_pages,
            "splitMethod": self.split_method.value,
        }


__all__ = [
    "PDF_CONTENT_TYPE",
    "PageSizePolicy",
    "SplitMethod",
    "PageRange",
    "PageGeometry",
    "BookmarkNode",
    "BookmarkSection",
    "InputDocument",
    "OutputDocument",
    "MergeResult",
    "SplitResult",
]
