"""pypdf backend implementation for pdfrestruct."""

from __future__ import annotations

import io
import logging
from functools import partial
from typing import Any, List, Optional, Sequence

from pypdf import PageObject, PdfReader, PdfWriter
from pypdf.errors import PdfReadError
from pypdf.generic import (
    ArrayObject,
    Destination,
    IndirectObject,
    NullObject,
    RectangleObject,
)

from ..exceptions import DecodeError
from ..types import BookmarkNode, PageGeometry
from .base import PDFBackend

LOGGER = logging.getLogger("pdfrestruct.backends.pypdf")


def _goto_action_destination(destination: Any) -> Optional[ArrayObject]:
    """Return the ``/D`` array of a ``/GoTo`` action attached to an outline node."""

    node = getattr(destination, "node", None)
    if node is None:
        return None
    action = node.get("/A")
    if action is None:
        return None
    action = action.get_object()
    if action.get("/S") != "/GoTo":
        return None
    target = action.get("/D")
    if target is None:
        return None
    target = target.get_object()
    if isinstance(target, ArrayObject) and len(target) > 0:
        return target
    return None


class PypdfSourceDocument:
    """Read-only document backed by a :class:`pypdf.PdfReader`."""

    def __init__(self, reader: PdfReader, stream: io.BytesIO) -> None:
        self._reader: Optional[PdfReader] = reader
        self._stream = stream

    @property
    def reader(self) -> PdfReader:
        if self._reader is None:
            raise ValueError("Source document is closed")
        return self._reader

    @property
    def page_count(self) -> int:
        return len(self.reader.pages)

    def page(self, index: int) -> PageObject:
        return self.reader.pages[index]

    def page_geometry(self, index: int) -> PageGeometry:
        box = self.reader.pages[index].mediabox
        return PageGeometry(
            width=float(box.width),
            height=float(box.height),
            left=float(box.left),
            bottom=float(box.bottom),
        )

    def outline(self) -> Optional[List[BookmarkNode]]:
        items = self.reader.outline
        if not items:
            return None
        nodes = self._build_nodes(items)
        return nodes or None

    def _build_nodes(self, items: Sequence[Any]) -> List[BookmarkNode]:
        # pypdf lists a node's children as a nested list right after the node.
        nodes: List[BookmarkNode] = []
        for item in items:
            if isinstance(item, list):
                children = self._build_nodes(item)
                if nodes:
                    nodes[-1].children.extend(children)
                else:
                    nodes.extend(children)
                continue
            title = item.title
            nodes.append(
                BookmarkNode(
                    title=str(title) if title is not None else "",
                    resolver=partial(self.resolve_page_index, item),
                )
            )
        return nodes

    def resolve_page_index(self, destination: Any) -> Optional[int]:
        """Resolve the 0-based page index an outline destination points at."""

        index = self._page_index_for(destination)
        if index is None:
            action_target = _goto_action_destination(destination)
            if action_target is not None:
                index = self._page_index_for(action_target)
        return index

    def _page_index_for(self, destination: Any) -> Optional[int]:
        if isinstance(destination, ArrayObject):
            target = destination[0] if len(destination) > 0 else None
        else:
            target = destination.get("/Page")
        if target is None or isinstance(target, NullObject):
            return None

        if isinstance(target, int):
            return int(target) if target >= 0 else None

        if isinstance(destination, Destination):
            number = self.reader.get_destination_page_number(destination)
            if number is not None and number >= 0:
                return number

        target_id = target.idnum if isinstance(target, IndirectObject) else None
        if target_id is None:
            target_ref = getattr(target, "indirect_reference", None)
            target_id = getattr(target_ref, "idnum", None)
        if target_id is None:
            return None
        for index, page in enumerate(self.reader.pages):
            reference = page.indirect_reference
            if reference is not None and reference.idnum == target_id:
                return index
        return None

    def close(self) -> None:
        self._reader = None
        self._stream.close()

    def __enter__(self) -> "PypdfSourceDocument":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


class PypdfWorkingDocument:
    """Mutable document backed by a :class:`pypdf.PdfWriter`."""

    def __init__(self) -> None:
        self._writer: Optional[PdfWriter] = PdfWriter()

    @property
    def writer(self) -> PdfWriter:
        if self._writer is None:
            raise ValueError("Working document is closed")
        return self._writer

    @property
    def page_count(self) -> int:
        return len(self.writer.pages)

    def import_page(self, page: PageObject, geometry: Optional[PageGeometry] = None) -> int:
        imported = self.writer.add_page(page)
        if geometry is not None:
            imported.mediabox = RectangleObject(geometry.as_box())
        return self.page_count - 1

    def add_bookmark(self, title: str, page_index: Optional[int], parent: Any = None) -> Any:
        if page_index is not None and not 0 <= page_index < self.page_count:
            raise IndexError(
                f"Bookmark page {page_index} outside document of {self.page_count} pages"
            )
        return self.writer.add_outline_item(title, page_index, parent=parent)

    def serialize(self) -> bytes:
        buffer = io.BytesIO()
        self.writer.write(buffer)
        return buffer.getvalue()

    def close(self) -> None:
        self._writer = None

    def __enter__(self) -> "PypdfWorkingDocument":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


class PypdfBackend(PDFBackend):
    """Backend implementation that uses `pypdf` under the hood."""

    def decode(self, data: bytes) -> PypdfSourceDocument:
        if not data:
            raise DecodeError("PDF document is empty")

        stream = io.BytesIO(data)
        try:
            reader = PdfReader(stream)
            encrypted = reader.is_encrypted
            page_count = 0 if encrypted else len(reader.pages)
        except PdfReadError as exc:
            stream.close()
            raise DecodeError(f"Corrupted or invalid PDF document. Error: {exc}") from exc
        except Exception as exc:
            stream.close()
            raise DecodeError(f"Unexpected error reading PDF document. Error: {exc}") from exc

        if encrypted:
            stream.close()
            raise DecodeError("Encrypted PDF documents are not supported.")

        LOGGER.debug("Decoded PDF document: %d pages, %d bytes", page_count, len(data))
        return PypdfSourceDocument(reader, stream)

    def new_document(self) -> PypdfWorkingDocument:
        return PypdfWorkingDocument()


__all__ = ["PypdfBackend", "PypdfSourceDocument", "PypdfWorkingDocument"]
