"""Merge and split operations for :mod:`pdfrestruct`.

Every operation runs the same pipeline: decode the input document(s), build
new documents in memory, serialize them, and only then hand the resulting
buffers to a :class:`~pdfrestruct.sink.DocumentSink`. Nothing is emitted for
an operation that fails, and every decoded or working document is closed on
all exit paths. The engine keeps no per-call state, so one instance can be
shared between threads.
"""

from __future__ import annotations

import logging
import re
from contextlib import ExitStack, contextmanager
from dataclasses import dataclass
from typing import Any, Iterable, Iterator, List, Mapping, Optional, Sequence, Tuple, Type, Union

from .backends.base import PDFBackend, SourceDocument
from .backends.pypdf_backend import PypdfBackend
from .config import (
    DEFAULT_BOOKMARK_PATTERN,
    DEFAULT_MERGE_FILENAME,
    DEFAULT_PAGE_PATTERN,
    DEFAULT_RANGE_PATTERN,
    DEFAULT_SIZE_PATTERN,
    default_page_size_policy,
    default_preserve_bookmarks,
)
from .exceptions import (
    InvalidRequestError,
    MergeError,
    PDFRestructError,
    SplitError,
)
from .geometry import reconcile_page_size
from .outline import copy_outline, extract_bookmark_sections
from .packer import pack_by_size
from .ranges import parse_page_ranges
from .sink import DocumentSink, MemorySink
from .types import (
    PDF_CONTENT_TYPE,
    InputDocument,
    MergeResult,
    PageSizePolicy,
    SplitMethod,
    SplitResult,
)

LOGGER = logging.getLogger("pdfrestruct.engine")

BYTES_PER_MB = 1024 * 1024
MAX_FILE_SIZE_MB = 100

DocumentRef = Union[InputDocument, bytes, bytearray, Mapping[str, Any]]

_UNSAFE_FILENAME_CHARS = re.compile(r"[^a-zA-Z0-9.-]")


def as_input_document(ref: DocumentRef) -> InputDocument:
    """Normalise a document reference into an :class:`InputDocument`."""

    if isinstance(ref, InputDocument):
        return ref
    if isinstance(ref, (bytes, bytearray)):
        return InputDocument(content=bytes(ref))
    if isinstance(ref, Mapping) and "content" in ref:
        return InputDocument(
            content=bytes(ref["content"]),
            filename=ref.get("filename"),
            content_type=ref.get("content_type", PDF_CONTENT_TYPE),
        )
    raise InvalidRequestError(f"Unsupported document reference: {type(ref).__name__}")


def _require_text(value: Optional[str], field_name: str) -> None:
    if value is None or not str(value).strip():
        raise InvalidRequestError(f"{field_name} must not be blank")


def _require_int(value: object, field_name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidRequestError(f"{field_name} must be an integer, got {value!r}")
    return value


def render_filename(pattern: str, **values: object) -> str:
    """Replace ``{name}`` tokens in ``pattern``; unknown tokens stay verbatim."""

    rendered = pattern
    for key, value in values.items():
        rendered = rendered.replace("{" + key + "}", str(value))
    return rendered


def sanitize_filename(name: Optional[str]) -> str:
    return _UNSAFE_FILENAME_CHARS.sub("_", name or "")


@dataclass(frozen=True)
class MergeRequest:
    documents: Sequence[InputDocument]
    output_filename: str = DEFAULT_MERGE_FILENAME
    preserve_bookmarks: Optional[bool] = None
    page_size_policy: Optional[Union[PageSizePolicy, str]] = None

    def __post_init__(self) -> None:
        if not self.documents:
            raise InvalidRequestError("At least one document is required for merging")
        documents = tuple(as_input_document(document) for document in self.documents)
        object.__setattr__(self, "documents", documents)
        _require_text(self.output_filename, "outputFilename")
        if self.page_size_policy is not None:
            try:
                policy = PageSizePolicy.coerce(self.page_size_policy)
            except ValueError as exc:
                raise InvalidRequestError(str(exc)) from exc
            object.__setattr__(self, "page_size_policy", policy)


@dataclass(frozen=True)
class SplitByPageRequest:
    document: InputDocument
    pages_per_file: int = 1
    output_pattern: str = DEFAULT_PAGE_PATTERN

    def __post_init__(self) -> None:
        object.__setattr__(self, "document", as_input_document(self.document))
        if _require_int(self.pages_per_file, "pagesPerFile") < 1:
            raise InvalidRequestError(
                f"pagesPerFile must be >= 1, got {self.pages_per_file}"
            )
        _require_text(self.output_pattern, "outputPattern")


@dataclass(frozen=True)
class SplitByRangeRequest:
    document: InputDocument
    page_ranges: str
    output_pattern: str = DEFAULT_RANGE_PATTERN

    def __post_init__(self) -> None:
        object.__setattr__(self, "document", as_input_document(self.document))
        _require_text(self.page_ranges, "pageRanges")
        _require_text(self.output_pattern, "outputPattern")


@dataclass(frozen=True)
class SplitByBookmarkRequest:
    document: InputDocument
    top_level_only: bool = True
    output_pattern: str = DEFAULT_BOOKMARK_PATTERN

    def __post_init__(self) -> None:
        object.__setattr__(self, "document", as_input_document(self.document))
        _require_text(self.output_pattern, "outputPattern")


@dataclass(frozen=True)
class SplitBySizeRequest:
    document: InputDocument
    max_file_size_mb: int
    output_pattern: str = DEFAULT_SIZE_PATTERN

    def __post_init__(self) -> None:
        object.__setattr__(self, "document", as_input_document(self.document))
        if not 1 <= _require_int(self.max_file_size_mb, "maxFileSizeMb") <= MAX_FILE_SIZE_MB:
            raise InvalidRequestError(
                f"maxFileSizeMb must be between 1 and {MAX_FILE_SIZE_MB}, "
                f"got {self.max_file_size_mb}"
            )
        _require_text(self.output_pattern, "outputPattern")


@contextmanager
def _failures_as(error_class: Type[PDFRestructError], action: str) -> Iterator[None]:
    try:
        yield
    except PDFRestructError:
        raise
    except Exception as exc:
        LOGGER.error("Failed to %s: %s", action, exc)
        raise error_class(f"Failed to {action}: {exc}") from exc


class RestructuringEngine:
    """Run merge and split operations against a codec backend."""

    def __init__(self, backend: Optional[PDFBackend] = None) -> None:
        self.backend: PDFBackend = backend or PypdfBackend()

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    def _extract(self, source: SourceDocument, page_indices: Iterable[int]) -> bytes:
        with self.backend.new_document() as working:
            for index in page_indices:
                working.import_page(source.page(index))
            LOGGER.debug("Serializing document with %d page(s)", working.page_count)
            return working.serialize()

    @staticmethod
    def _emit(sink: DocumentSink, outputs: Sequence[Tuple[bytes, str]]) -> List[Any]:
        return [sink.create(content, filename, PDF_CONTENT_TYPE) for content, filename in outputs]

    # ------------------------------------------------------------------
    # Merge
    # ------------------------------------------------------------------
    def merge(self, request: MergeRequest, sink: DocumentSink) -> MergeResult:
        preserve_bookmarks = (
            default_preserve_bookmarks()
            if request.preserve_bookmarks is None
            else request.preserve_bookmarks
        )
        policy = (
            default_page_size_policy()
            if request.page_size_policy is None
            else PageSizePolicy.coerce(request.page_size_policy)
        )
        documents = request.documents
        LOGGER.info(
            "Merging %d PDF documents (bookmarks=%s, page size=%s)",
            len(documents),
            preserve_bookmarks,
            policy.value,
        )

        with ExitStack() as stack:
            sources = [
                stack.enter_context(self.backend.decode(document.content))
                for document in documents
            ]
            with _failures_as(MergeError, "merge PDF documents"):
                target_geometry = reconcile_page_size(sources, policy)
                merged = stack.enter_context(self.backend.new_document())
                total_pages = 0
                for document, source in zip(documents, sources):
                    page_offset = merged.page_count
                    for index in range(source.page_count):
                        merged.import_page(source.page(index), target_geometry)
                    total_pages += source.page_count
                    LOGGER.debug(
                        "Imported %d page(s) from %s at offset %d",
                        source.page_count,
                        document.filename,
                        page_offset,
                    )
                    if preserve_bookmarks:
                        copy_outline(source, merged, document.filename, page_offset)

                content = merged.serialize()
                (handle,) = self._emit(sink, [(content, request.output_filename)])

        LOGGER.info(
            "Successfully merged %d documents into %d pages", len(documents), total_pages
        )
        return MergeResult(
            merged_document=handle,
            total_pages=total_pages,
            source_document_count=len(documents),
            file_size_bytes=len(content),
        )

    # ------------------------------------------------------------------
    # Split
    # ------------------------------------------------------------------
    def split_by_page(self, request: SplitByPageRequest, sink: DocumentSink) -> SplitResult:
        pages_per_file = request.pages_per_file
        LOGGER.info("Splitting PDF by %d pages per file", pages_per_file)

        with self.backend.decode(request.document.content) as source:
            total_pages = source.page_count
            with _failures_as(SplitError, "split PDF by page"):
                outputs: List[Tuple[bytes, str]] = []
                for number, start in enumerate(range(0, total_pages, pages_per_file), start=1):
                    end = min(start + pages_per_file, total_pages)
                    content = self._extract(source, range(start, end))
                    outputs.append((content, render_filename(request.output_pattern, index=number)))
                handles = self._emit(sink, outputs)

        LOGGER.info("Split %d pages into %d files", total_pages, len(handles))
        return SplitResult(handles, len(handles), total_pages, SplitMethod.BY_PAGE)

    def split_by_range(self, request: SplitByRangeRequest, sink: DocumentSink) -> SplitResult:
        LOGGER.info("Splitting PDF by ranges: %s", request.page_ranges)

        with self.backend.decode(request.document.content) as source:
            total_pages = source.page_count
            ranges = parse_page_ranges(request.page_ranges, total_pages=total_pages)
            with _failures_as(SplitError, "split PDF by range"):
                outputs: List[Tuple[bytes, str]] = []
                for number, page_range in enumerate(ranges, start=1):
                    content = self._extract(source, range(page_range.start - 1, page_range.end))
                    filename = render_filename(
                        request.output_pattern,
                        index=number,
                        start=page_range.start,
                        end=page_range.end,
                    )
                    outputs.append((content, filename))
                handles = self._emit(sink, outputs)

        LOGGER.info("Split %d pages into %d range-based files", total_pages, len(handles))
        return SplitResult(handles, len(handles), total_pages, SplitMethod.BY_RANGE)

    def split_by_bookmark(
        self, request: SplitByBookmarkRequest, sink: DocumentSink
    ) -> SplitResult:
        LOGGER.info("Splitting PDF by bookmarks (top-level only: %s)", request.top_level_only)

        with self.backend.decode(request.document.content) as source:
            total_pages = source.page_count
            with _failures_as(SplitError, "split PDF by bookmarks"):
                sections = extract_bookmark_sections(
                    source.outline(), total_pages, request.top_level_only
                )
                outputs: List[Tuple[bytes, str]] = []
                for number, section in enumerate(sections, start=1):
                    pages = [
                        index
                        for index in range(section.start_page, section.end_page + 1)
                        if index < total_pages
                    ]
                    content = self._extract(source, pages)
                    filename = render_filename(
                        request.output_pattern,
                        bookmark=sanitize_filename(section.title),
                        index=number,
                    )
                    outputs.append((content, filename))
                handles = self._emit(sink, outputs)

        LOGGER.info("Split PDF into %d bookmark-based files", len(handles))
        return SplitResult(handles, len(handles), total_pages, SplitMethod.BY_BOOKMARK)

    def split_by_size(self, request: SplitBySizeRequest, sink: DocumentSink) -> SplitResult:
        max_bytes = request.max_file_size_mb * BYTES_PER_MB
        LOGGER.info("Splitting PDF by max size: %s MB", request.max_file_size_mb)

        with self.backend.decode(request.document.content) as source:
            total_pages = source.page_count
            with _failures_as(SplitError, "split PDF by size"):
                chunks = pack_by_size(source, max_bytes, self.backend)
                outputs = [
                    (content, render_filename(request.output_pattern, index=number))
                    for number, content in enumerate(chunks, start=1)
                ]
                handles = self._emit(sink, outputs)

        LOGGER.info("Split %d pages into %d size-based files", total_pages, len(handles))
        return SplitResult(handles, len(handles), total_pages, SplitMethod.BY_SIZE)


_default_engine = RestructuringEngine()


def merge_pdfs(request: MergeRequest, sink: Optional[DocumentSink] = None) -> MergeResult:
    """Merge using the default pypdf engine, collecting output in memory by default."""

    return _default_engine.merge(request, sink if sink is not None else MemorySink())


def split_by_page(request: SplitByPageRequest, sink: Optional[DocumentSink] = None) -> SplitResult:
    return _default_engine.split_by_page(request, sink if sink is not None else MemorySink())


def split_by_range(
    request: SplitByRangeRequest, sink: Optional[DocumentSink] = None
) -> SplitResult:
    return _default_engine.split_by_range(request, sink if sink is not None else MemorySink())


def split_by_bookmark(
    request: SplitByBookmarkRequest, sink: Optional[DocumentSink] = None
) -> SplitResult:
    return _default_engine.split_by_bookmark(request, sink if sink is not None else MemorySink())


def split_by_size(request: SplitBySizeRequest, sink: Optional[DocumentSink] = None) -> SplitResult:
    return _default_engine.split_by_size(request, sink if sink is not None else MemorySink())


__all__ = [
    "BYTES_PER_MB",
    "MergeRequest",
    "SplitByPageRequest",
    "SplitByRangeRequest",
    "SplitByBookmarkRequest",
    "SplitBySizeRequest",
    "RestructuringEngine",
    "as_input_document",
    "render_filename",
    "sanitize_filename",
    "merge_pdfs",
    "split_by_page",
    "split_by_range",
    "split_by_bookmark",
    "split_by_size",
]
