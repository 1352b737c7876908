"""Size-bounded page packing used by split-by-size."""

from __future__ import annotations

import logging
from typing import List, Optional

from .backends.base import PDFBackend, SourceDocument, WorkingDocument
from .exceptions import InvalidRequestError

LOGGER = logging.getLogger("pdfrestruct.packer")


def pack_by_size(
    document: SourceDocument,
    max_bytes: int,
    backend: PDFBackend,
) -> List[bytes]:
    """Greedily pack the pages of ``document`` into PDFs of at most ``max_bytes``.

    Pages are appended one by one to an accumulator that is re-serialized
    after every addition to measure its real size. When a page pushes the
    accumulator over the limit, the previous measurement (the accumulator
    without that page) becomes a chunk and the page seeds the next
    accumulator. A page that is over the limit on its own still forms a
    chunk of one page.

    Returns:
        The serialized chunks in page order. Every chunk holds at least one
        page and every page appears in exactly one chunk.
    """

    if max_bytes < 1:
        raise InvalidRequestError(f"Maximum chunk size must be >= 1 byte, got {max_bytes}")

    chunks: List[bytes] = []
    accumulator: Optional[WorkingDocument] = None
    last_probe = b""
    try:
        accumulator = backend.new_document()
        for index in range(document.page_count):
            page = document.page(index)
            accumulator.import_page(page)
            probe = accumulator.serialize()
            LOGGER.debug(
                "Page %d: accumulator holds %d page(s), %d bytes",
                index + 1,
                accumulator.page_count,
                len(probe),
            )

            if len(probe) > max_bytes and accumulator.page_count > 1:
                chunks.append(last_probe)
                LOGGER.debug("Chunk %d closed at %d bytes", len(chunks), len(last_probe))
                accumulator.close()
                accumulator = backend.new_document()
                accumulator.import_page(page)
                probe = accumulator.serialize()

            if len(probe) > max_bytes:
                LOGGER.warning(
                    "Page %d alone is %d bytes, above the %d byte limit",
                    index + 1,
                    len(probe),
                    max_bytes,
                )
            last_probe = probe

        if accumulator.page_count > 0:
            chunks.append(last_probe)
    finally:
        if accumulator is not None:
            accumulator.close()

    return chunks


__all__ = ["pack_by_size"]
