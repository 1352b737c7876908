"""Bookmark (outline) remapping and bookmark-based sectioning.

Outlines are handled as forests of :class:`~pdfrestruct.types.BookmarkNode`.
Copying an outline between documents happens in two passes: each source node
is first mapped into a detached node living in the target's page index space
(``page_offset`` + source index), then the surviving nodes are written into
the target document. Both passes isolate failures per node, so one broken
bookmark only loses its own subtree.
"""

from __future__ import annotations

import logging
from typing import Any, List, Optional, Sequence

from .backends.base import SourceDocument, WorkingDocument
from .exceptions import NoBookmarksError
from .types import BookmarkNode, BookmarkSection

LOGGER = logging.getLogger("pdfrestruct.outline")


def prefixed_title(title: Optional[str], prefix: Optional[str]) -> str:
    title = title or ""
    if prefix:
        return f"{prefix} - {title}"
    return title


def map_outline_node(
    node: BookmarkNode,
    *,
    title_prefix: Optional[str],
    page_offset: int,
    source_page_count: int,
    target_page_count: int,
) -> Optional[BookmarkNode]:
    """Return ``node`` rebuilt in the target index space, or ``None`` on failure."""

    try:
        target_index: Optional[int] = None
        source_index = node.resolve_page_index()
        if source_index is not None and 0 <= source_index < source_page_count:
            candidate = page_offset + source_index
            if 0 <= candidate < target_page_count:
                target_index = candidate

        children: List[BookmarkNode] = []
        for child in node.children:
            mapped = map_outline_node(
                child,
                title_prefix=title_prefix,
                page_offset=page_offset,
                source_page_count=source_page_count,
                target_page_count=target_page_count,
            )
            if mapped is not None:
                children.append(mapped)

        return BookmarkNode(
            title=prefixed_title(node.title, title_prefix),
            page_index=target_index,
            children=children,
        )
    except Exception as exc:
        LOGGER.warning("Failed to map outline item '%s': %s", node.title, exc)
        return None


def _attach(target: WorkingDocument, node: BookmarkNode, parent: Any) -> int:
    try:
        handle = target.add_bookmark(node.title, node.page_index, parent)
    except Exception as exc:
        LOGGER.warning("Failed to add bookmark '%s': %s", node.title, exc)
        return 0

    written = 1
    for child in node.children:
        written += _attach(target, child, handle)
    return written


def copy_outline(
    source: SourceDocument,
    target: WorkingDocument,
    title_prefix: Optional[str] = None,
    page_offset: int = 0,
) -> int:
    """Copy the outline of ``source`` into ``target``.

    Args:
        source: Document whose bookmarks are copied. It is only read.
        target: Document receiving the bookmarks. Its pages for ``source``
            must already be imported.
        title_prefix: When non-empty, every title becomes
            ``"<prefix> - <title>"``.
        page_offset: Index in ``target`` of the first page imported from
            ``source``.

    Returns:
        The number of bookmarks written into ``target``.
    """

    try:
        roots = source.outline()
    except Exception as exc:
        LOGGER.warning("Failed to read bookmarks from %s: %s", title_prefix, exc)
        return 0
    if not roots:
        return 0

    source_page_count = source.page_count
    target_page_count = target.page_count
    written = 0
    for root in roots:
        mapped = map_outline_node(
            root,
            title_prefix=title_prefix,
            page_offset=page_offset,
            source_page_count=source_page_count,
            target_page_count=target_page_count,
        )
        if mapped is not None:
            written += _attach(target, mapped, None)

    LOGGER.debug(
        "Copied %d bookmark(s) with page offset %d (prefix=%r)",
        written,
        page_offset,
        title_prefix,
    )
    return written


def extract_bookmark_sections(
    outline: Optional[Sequence[BookmarkNode]],
    total_pages: int,
    top_level_only: bool = True,
) -> List[BookmarkSection]:
    """Derive page sections from the root bookmarks of ``outline``.

    Each resolvable root bookmark starts a section that ends one page before
    the next resolvable root, or on the last page of the document. Roots
    whose page cannot be resolved are skipped. Only root siblings are
    scanned, whatever the value of ``top_level_only``.

    Raises:
        NoBookmarksError: If the outline is missing or yields no section.
    """

    if not outline:
        raise NoBookmarksError("PDF document does not contain any bookmarks")
    if not top_level_only:
        LOGGER.debug("Nested bookmarks are not traversed; using root bookmarks only")

    starts: List[tuple[str, int]] = []
    for node in outline:
        try:
            start = node.resolve_page_index()
        except Exception as exc:
            LOGGER.warning("Failed to process bookmark '%s': %s", node.title, exc)
            continue
        if start is None:
            LOGGER.debug("Skipping bookmark '%s' without a resolvable page", node.title)
            continue
        starts.append((node.title or "", start))

    sections: List[BookmarkSection] = []
    for position, (title, start) in enumerate(starts):
        if position + 1 < len(starts):
            end = starts[position + 1][1] - 1
        else:
            end = total_pages - 1
        sections.append(BookmarkSection(title=title, start_page=start, end_page=end))

    if not sections:
        raise NoBookmarksError("No valid bookmarks found in PDF document")
    return sections


__all__ = [
    "copy_outline",
    "extract_bookmark_sections",
    "map_outline_node",
    "prefixed_title",
]
