from __future__ import annotations

from io import BytesIO
from typing import Any, Optional

import pytest
from pypdf import PdfReader

from pdfrestruct.backends import PypdfBackend
from pdfrestruct.exceptions import NoBookmarksError
from pdfrestruct.outline import (
    copy_outline,
    extract_bookmark_sections,
    map_outline_node,
    prefixed_title,
)
from pdfrestruct.types import BookmarkNode, BookmarkSection


def _failing() -> Optional[int]:
    raise RuntimeError("dangling destination")


class RecordingTarget:
    """Working document stand-in that refuses selected titles."""

    def __init__(self, page_count: int, refuse: tuple[str, ...] = ()) -> None:
        self.page_count = page_count
        self.refuse = refuse
        self.added: list[tuple[str, Optional[int], Any]] = []

    def add_bookmark(self, title: str, page_index: Optional[int], parent: Any = None) -> Any:
        if title in self.refuse:
            raise RuntimeError("cannot add")
        self.added.append((title, page_index, parent))
        return title


class OutlineSource:
    def __init__(self, roots, page_count: int) -> None:
        self.roots = roots
        self.page_count = page_count

    def outline(self):
        return self.roots


def test_prefixed_title() -> None:
    assert prefixed_title("Intro", "a.pdf") == "a.pdf - Intro"
    assert prefixed_title("Intro", "") == "Intro"
    assert prefixed_title("Intro", None) == "Intro"


def test_map_outline_node_applies_offset_and_prefix() -> None:
    node = BookmarkNode("Chapter", 1, [BookmarkNode("Section", 2)])
    mapped = map_outline_node(
        node, title_prefix="b.pdf", page_offset=3, source_page_count=3, target_page_count=6
    )
    assert mapped.title == "b.pdf - Chapter"
    assert mapped.page_index == 4
    assert mapped.children[0].title == "b.pdf - Section"
    assert mapped.children[0].page_index == 5


def test_map_outline_node_drops_out_of_range_destination() -> None:
    mapped = map_outline_node(
        BookmarkNode("Dangling", 7), title_prefix=None, page_offset=0,
        source_page_count=3, target_page_count=3,
    )
    assert mapped.title == "Dangling"
    assert mapped.page_index is None


def test_failing_node_is_dropped_without_aborting_siblings() -> None:
    parent = BookmarkNode(
        "Parent",
        0,
        [BookmarkNode("Broken", resolver=_failing), BookmarkNode("Healthy", 1)],
    )
    mapped = map_outline_node(
        parent, title_prefix=None, page_offset=0, source_page_count=2, target_page_count=2
    )
    assert [child.title for child in mapped.children] == ["Healthy"]


def test_copy_outline_writes_children_under_their_parent() -> None:
    roots = [
        BookmarkNode("One", 0, [BookmarkNode("One.a", 1)]),
        BookmarkNode("Two", 1),
    ]
    target = RecordingTarget(page_count=4)
    written = copy_outline(OutlineSource(roots, 2), target, "doc.pdf", page_offset=2)

    assert written == 3
    assert target.added == [
        ("doc.pdf - One", 2, None),
        ("doc.pdf - One.a", 3, "doc.pdf - One"),
        ("doc.pdf - Two", 3, None),
    ]


def test_copy_outline_skips_subtree_that_cannot_be_attached() -> None:
    roots = [BookmarkNode("Bad", 0, [BookmarkNode("Child", 0)]), BookmarkNode("Good", 0)]
    target = RecordingTarget(page_count=1, refuse=("Bad",))
    assert copy_outline(OutlineSource(roots, 1), target) == 1
    assert [title for title, _, _ in target.added] == ["Good"]


def test_copy_outline_between_pypdf_documents(bookmarked_pdf: bytes, five_page_pdf: bytes) -> None:
    backend = PypdfBackend()
    with backend.decode(five_page_pdf) as first, backend.decode(bookmarked_pdf) as second:
        with backend.new_document() as merged:
            for index in range(first.page_count):
                merged.import_page(first.page(index))
            offset = merged.page_count
            for index in range(second.page_count):
                merged.import_page(second.page(index))
            assert copy_outline(second, merged, "book.pdf", offset) == 3
            content = merged.serialize()

    reader = PdfReader(BytesIO(content))
    chapter_one, children, chapter_two = reader.outline
    assert chapter_one.title == "book.pdf - Chapter 1"
    assert reader.get_destination_page_number(chapter_one) == 5
    assert children[0].title == "book.pdf - Section 1.1"
    assert reader.get_destination_page_number(children[0]) == 7
    assert reader.get_destination_page_number(chapter_two) == 10


def test_sections_from_root_bookmarks() -> None:
    outline = [BookmarkNode("A", 0), BookmarkNode("B", 5)]
    assert extract_bookmark_sections(outline, 10) == [
        BookmarkSection("A", 0, 4),
        BookmarkSection("B", 5, 9),
    ]


def test_sections_ignore_nested_bookmarks_regardless_of_flag() -> None:
    outline = [BookmarkNode("A", 0, [BookmarkNode("A.1", 3)]), BookmarkNode("B", 6)]
    expected = [BookmarkSection("A", 0, 5), BookmarkSection("B", 6, 7)]
    assert extract_bookmark_sections(outline, 8, top_level_only=True) == expected
    assert extract_bookmark_sections(outline, 8, top_level_only=False) == expected


def test_sections_end_before_next_resolvable_root() -> None:
    outline = [
        BookmarkNode("A", 0),
        BookmarkNode("Unresolved"),
        BookmarkNode("Broken", resolver=_failing),
        BookmarkNode("B", 4),
    ]
    assert extract_bookmark_sections(outline, 6) == [
        BookmarkSection("A", 0, 3),
        BookmarkSection("B", 4, 5),
    ]


@pytest.mark.parametrize("outline", [None, []])
def test_missing_outline_raises(outline) -> None:
    with pytest.raises(NoBookmarksError) as excinfo:
        extract_bookmark_sections(outline, 5)
    assert excinfo.value.code == "NO_BOOKMARKS"


def test_unresolvable_roots_raise() -> None:
    with pytest.raises(NoBookmarksError):
        extract_bookmark_sections([BookmarkNode("Nowhere")], 5)


def test_walk_is_depth_first() -> None:
    tree = BookmarkNode("A", 0, [BookmarkNode("A.1", 1, [BookmarkNode("A.1.a", 1)]), BookmarkNode("A.2", 2)])
    assert [node.title for node in tree.walk()] == ["A", "A.1", "A.1.a", "A.2"]
