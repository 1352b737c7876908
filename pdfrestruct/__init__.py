"""
pdfrestruct - Merge and split PDF documents.

Merge several PDFs into one while keeping their bookmarks and reconciling
page sizes, or split one PDF by page count, page ranges, top-level
bookmarks or serialized file size.

Quick Start:
    >>> from pdfrestruct import SplitByRangeRequest, split_by_range
    >>> result = split_by_range(SplitByRangeRequest(document=data, page_ranges="1-3,4"))
    >>> [doc.filename for doc in result.split_documents]
    ['range-1.pdf', 'range-2.pdf']

Host runtimes dispatch by operation id through :func:`pdfrestruct.operations.execute`.

For CLI usage, use the 'pdfrestruct' command after installation.
"""

__version__ = "1.0.0"

# Engine and requests
from pdfrestruct.engine import (
    MergeRequest,
    RestructuringEngine,
    SplitByBookmarkRequest,
    SplitByPageRequest,
    SplitByRangeRequest,
    SplitBySizeRequest,
    merge_pdfs,
    split_by_bookmark,
    split_by_page,
    split_by_range,
    split_by_size,
)

# Data types
from pdfrestruct.types import (
    BookmarkNode,
    BookmarkSection,
    InputDocument,
    MergeResult,
    OutputDocument,
    PageGeometry,
    PageRange,
    PageSizePolicy,
    SplitMethod,
    SplitResult,
)

# Exceptions
from pdfrestruct.exceptions import (
    DecodeError,
    InvalidRangeError,
    InvalidRequestError,
    MergeError,
    NoBookmarksError,
    PDFRestructError,
    SplitError,
)

# Sinks
from pdfrestruct.sink import DirectorySink, DocumentSink, MemorySink

__all__ = [
    # Engine
    "RestructuringEngine",
    "MergeRequest",
    "SplitByPageRequest",
    "SplitByRangeRequest",
    "SplitByBookmarkRequest",
    "SplitBySizeRequest",
    "merge_pdfs",
    "split_by_page",
    "split_by_range",
    "split_by_bookmark",
    "split_by_size",
    # Data types
    "BookmarkNode",
    "BookmarkSection",
    "InputDocument",
    "OutputDocument",
    "MergeResult",
    "SplitResult",
    "PageGeometry",
    "PageRange",
    "PageSizePolicy",
    "SplitMethod",
    # Exceptions
    "PDFRestructError",
    "DecodeError",
    "InvalidRangeError",
    "NoBookmarksError",
    "MergeError",
    "SplitError",
    "InvalidRequestError",
    # Sinks
    "DocumentSink",
    "MemorySink",
    "DirectorySink",
    # Version info
    "__version__",
]
