from __future__ import annotations

from io import BytesIO
from pathlib import Path
from typing import Callable, Optional, Sequence, Tuple, Union
import sys

import pytest
from pypdf import PdfReader, PdfWriter

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

# (title, page index or None, children)
Bookmark = Tuple[str, Optional[int], Sequence["Bookmark"]]
PageSpec = Union[int, Sequence[Tuple[float, float]]]


def build_pdf(pages: PageSpec = 1, bookmarks: Sequence[Bookmark] = ()) -> bytes:
    """Return the bytes of a PDF with blank pages and an optional outline.

    ``pages`` is either a page count (200x200 pages) or a list of
    ``(width, height)`` tuples, one per page.
    """

    sizes = [(200, 200)] * pages if isinstance(pages, int) else list(pages)
    writer = PdfWriter()
    for width, height in sizes:
        writer.add_blank_page(width=width, height=height)

    def _add(items: Sequence[Bookmark], parent=None) -> None:
        for title, page_index, children in items:
            handle = writer.add_outline_item(title, page_index, parent=parent)
            _add(children, handle)

    _add(bookmarks)
    buffer = BytesIO()
    writer.write(buffer)
    return buffer.getvalue()


def page_widths(content: bytes) -> list[float]:
    return [float(page.mediabox.width) for page in PdfReader(BytesIO(content)).pages]


def page_count(content: bytes) -> int:
    return len(PdfReader(BytesIO(content)).pages)


@pytest.fixture()
def pdf_factory() -> Callable[..., bytes]:
    return build_pdf


@pytest.fixture()
def five_page_pdf() -> bytes:
    return build_pdf(5)


@pytest.fixture()
def ten_page_pdf() -> bytes:
    return build_pdf(10)


@pytest.fixture()
def bookmarked_pdf() -> bytes:
    """Ten pages with root bookmarks on pages 0 and 5, the first one nested."""

    return build_pdf(
        10,
        bookmarks=[
            ("Chapter 1", 0, [("Section 1.1", 2, [])]),
            ("Chapter 2", 5, []),
        ],
    )


@pytest.fixture()
def sample_pdf(tmp_path: Path, five_page_pdf: bytes) -> Path:
    pdf_path = tmp_path / "sample.pdf"
    pdf_path.write_bytes(five_page_pdf)
    return pdf_path


@pytest.fixture()
def bookmarked_pdf_path(tmp_path: Path, bookmarked_pdf: bytes) -> Path:
    pdf_path = tmp_path / "bookmarked.pdf"
    pdf_path.write_bytes(bookmarked_pdf)
    return pdf_path
