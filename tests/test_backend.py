from __future__ import annotations

from io import BytesIO

import pytest
from pypdf import PdfReader, PdfWriter
from pypdf.generic import (
    ArrayObject,
    DictionaryObject,
    NameObject,
    NumberObject,
    TextStringObject,
)

from pdfrestruct.backends import PypdfBackend
from pdfrestruct.exceptions import DecodeError
from pdfrestruct.outline import extract_bookmark_sections
from pdfrestruct.types import BookmarkSection, PageGeometry

from conftest import build_pdf


def test_decode_reports_pages_and_geometry(pdf_factory) -> None:
    data = pdf_factory([(100, 150), (300, 400)])
    with PypdfBackend().decode(data) as source:
        assert source.page_count == 2
        assert source.page_geometry(1) == PageGeometry(width=300.0, height=400.0)
        assert source.outline() is None


def test_decode_empty_bytes_fails() -> None:
    with pytest.raises(DecodeError) as excinfo:
        PypdfBackend().decode(b"")
    assert excinfo.value.code == "INVALID_PDF"


def test_decode_garbage_fails() -> None:
    with pytest.raises(DecodeError):
        PypdfBackend().decode(b"this is not a pdf document")


def test_decode_encrypted_document_fails() -> None:
    writer = PdfWriter()
    writer.add_blank_page(width=72, height=72)
    writer.encrypt("secret")
    buffer = BytesIO()
    writer.write(buffer)

    with pytest.raises(DecodeError, match="Encrypted"):
        PypdfBackend().decode(buffer.getvalue())


def test_outline_nests_children_and_resolves_pages(bookmarked_pdf: bytes) -> None:
    with PypdfBackend().decode(bookmarked_pdf) as source:
        roots = source.outline()
        assert [node.title for node in roots] == ["Chapter 1", "Chapter 2"]
        assert [child.title for child in roots[0].children] == ["Section 1.1"]
        assert roots[0].resolve_page_index() == 0
        assert roots[0].children[0].resolve_page_index() == 2
        assert roots[1].resolve_page_index() == 5


def test_bookmark_without_destination_is_unresolved() -> None:
    data = build_pdf(2, bookmarks=[("Cover", None, []), ("Body", 1, [])])
    with PypdfBackend().decode(data) as source:
        cover, body = source.outline()
        assert cover.resolve_page_index() is None
        assert body.resolve_page_index() == 1


def test_closed_source_rejects_access(five_page_pdf: bytes) -> None:
    source = PypdfBackend().decode(five_page_pdf)
    source.close()
    with pytest.raises(ValueError):
        source.page_count


def test_working_document_imports_resizes_and_serializes(five_page_pdf: bytes) -> None:
    backend = PypdfBackend()
    with backend.decode(five_page_pdf) as source, backend.new_document() as working:
        assert working.import_page(source.page(0)) == 0
        assert working.import_page(source.page(1), PageGeometry(300, 500)) == 1
        working.add_bookmark("Second", 1)
        content = working.serialize()

    reader = PdfReader(BytesIO(content))
    assert len(reader.pages) == 2
    assert float(reader.pages[0].mediabox.width) == 200
    assert float(reader.pages[1].mediabox.height) == 500
    assert reader.outline[0].title == "Second"
    assert reader.get_destination_page_number(reader.outline[0]) == 1


def test_working_document_rejects_bookmark_past_last_page() -> None:
    with PypdfBackend().new_document() as working:
        with pytest.raises(IndexError):
            working.add_bookmark("Nowhere", 0)


def _goto_action(target) -> DictionaryObject:
    return DictionaryObject(
        {
            NameObject("/S"): NameObject("/GoTo"),
            NameObject("/D"): ArrayObject([target, NameObject("/Fit")]),
        }
    )


def _pdf_with_goto_bookmark(target_for) -> bytes:
    """Six pages, a plain bookmark on page 0 and a GoTo-action bookmark without /Dest."""

    writer = PdfWriter()
    for _ in range(6):
        writer.add_blank_page(width=200, height=200)
    writer.add_outline_item("A", 0)
    writer.add_outline_item_dict(
        DictionaryObject(
            {
                NameObject("/Title"): TextStringObject("B"),
                NameObject("/A"): _goto_action(target_for(writer)),
            }
        )
    )
    buffer = BytesIO()
    writer.write(buffer)
    return buffer.getvalue()


def test_goto_action_with_page_reference_resolves() -> None:
    data = _pdf_with_goto_bookmark(lambda writer: writer.pages[3].indirect_reference)
    with PypdfBackend().decode(data) as source:
        roots = source.outline()
        assert [(node.title, node.resolve_page_index()) for node in roots] == [("A", 0), ("B", 3)]
        assert extract_bookmark_sections(roots, source.page_count) == [
            BookmarkSection("A", 0, 2),
            BookmarkSection("B", 3, 5),
        ]


def test_goto_action_with_integer_page_resolves() -> None:
    data = _pdf_with_goto_bookmark(lambda writer: NumberObject(4))
    with PypdfBackend().decode(data) as source:
        assert [node.resolve_page_index() for node in source.outline()] == [0, 4]


class DetachedDestination:
    """Destination without a usable /Page whose outline node carries a GoTo action."""

    def __init__(self, node: DictionaryObject) -> None:
        self.node = node

    def get(self, key, default=None):
        return None


def test_action_fallback_scans_pages_for_reference(five_page_pdf: bytes) -> None:
    with PypdfBackend().decode(five_page_pdf) as source:
        reference = source.reader.pages[3].indirect_reference
        node = DictionaryObject({NameObject("/A"): _goto_action(reference)})
        assert source.resolve_page_index(DetachedDestination(node)) == 3

        empty = DictionaryObject({NameObject("/A"): DictionaryObject({NameObject("/S"): NameObject("/URI")})})
        assert source.resolve_page_index(DetachedDestination(empty)) is None
