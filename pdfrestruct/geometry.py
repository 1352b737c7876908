"""Page size standardization helpers used while merging."""

from __future__ import annotations

import logging
from typing import Optional, Sequence

from .backends.base import SourceDocument
from .types import PageGeometry, PageSizePolicy

LOGGER = logging.getLogger("pdfrestruct.geometry")


def reconcile_page_size(
    documents: Sequence[SourceDocument],
    policy: PageSizePolicy | str,
) -> Optional[PageGeometry]:
    """Return the page geometry every merged page should be resized to.

    Only the first page of each document is inspected and documents without
    pages are skipped. ``None`` means pages keep their own geometry, either
    because the policy asks for it or because no document has a page.
    Failures while reading geometry fall back to A4.
    """

    policy = PageSizePolicy.coerce(policy)
    if policy is PageSizePolicy.KEEP_ORIGINAL:
        return None
    if policy is PageSizePolicy.A4:
        return PageGeometry.a4()

    first: Optional[PageGeometry] = None
    largest: Optional[PageGeometry] = None
    try:
        for document in documents:
            if document.page_count == 0:
                continue
            geometry = document.page_geometry(0)
            if first is None:
                first = geometry
            if largest is None or geometry.area > largest.area:
                largest = geometry
    except Exception as exc:
        LOGGER.warning("Failed to determine page size, using A4: %s", exc)
        return PageGeometry.a4()

    selected = first if policy is PageSizePolicy.USE_FIRST else largest
    LOGGER.debug("Page size policy %s selected %s", policy.value, selected)
    return selected


__all__ = ["reconcile_page_size"]
