"""Backend protocol for PDF decoding, assembly and serialization."""

from __future__ import annotations

from typing import Any, List, Optional, Protocol

from ..types import BookmarkNode, PageGeometry


class SourceDocument(Protocol):
    """A decoded, read-only document owned by a single operation."""

    @property
    def page_count(self) -> int:
        """Number of pages in the document."""

    def page(self, index: int) -> Any:
        """Return the backend page object at 0-based ``index``."""

    def page_geometry(self, index: int) -> PageGeometry:
        """Return the media box geometry of the page at ``index``."""

    def outline(self) -> Optional[List[BookmarkNode]]:
        """Return the bookmark forest, or ``None`` when the document has none."""

    def close(self) -> None:
        """Release the memory held by the decoded document."""

    def __enter__(self) -> "SourceDocument":
        ...

    def __exit__(self, *exc_info: object) -> None:
        ...


class WorkingDocument(Protocol):
    """A mutable document accumulating imported pages and bookmarks."""

    @property
    def page_count(self) -> int:
        """Number of pages imported so far."""

    def import_page(self, page: Any, geometry: Optional[PageGeometry] = None) -> int:
        """Append ``page`` and return its index in this document."""

    def add_bookmark(
        self, title: str, page_index: Optional[int], parent: Any = None
    ) -> Any:
        """Append an outline entry under ``parent`` and return its handle."""

    def serialize(self) -> bytes:
        """Return the document as PDF bytes."""

    def close(self) -> None:
        """Discard the document and its pages."""

    def __enter__(self) -> "WorkingDocument":
        ...

    def __exit__(self, *exc_info: object) -> None:
        ...


class PDFBackend(Protocol):
    """Protocol defining the codec operations the engine relies on."""

    def decode(self, data: bytes) -> SourceDocument:
        """Decode ``data`` into a source document, raising ``DecodeError``."""

    def new_document(self) -> WorkingDocument:
        """Return an empty working document."""
