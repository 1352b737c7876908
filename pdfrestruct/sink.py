"""Output document sinks.

A sink receives every document an operation produces and returns a handle
that is placed in the operation result. Host runtimes provide their own
implementation; :class:`MemorySink` and :class:`DirectorySink` cover library
and command-line use.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, List, Protocol, Union

from .types import PDF_CONTENT_TYPE, OutputDocument

LOGGER = logging.getLogger("pdfrestruct.sink")


class DocumentSink(Protocol):
    def create(self, content: bytes, filename: str, content_type: str = PDF_CONTENT_TYPE) -> Any:
        """Persist ``content`` under ``filename`` and return a handle to it."""


class MemorySink:
    """Keep produced documents in memory, in creation order."""

    def __init__(self) -> None:
        self.documents: List[OutputDocument] = []

    def create(
        self, content: bytes, filename: str, content_type: str = PDF_CONTENT_TYPE
    ) -> OutputDocument:
        document = OutputDocument(content=content, filename=filename, content_type=content_type)
        self.documents.append(document)
        return document


class DirectorySink:
    """Write produced documents as files into ``directory``."""

    def __init__(self, directory: Union[str, Path]) -> None:
        self.directory = Path(directory).expanduser().resolve()

    def create(
        self, content: bytes, filename: str, content_type: str = PDF_CONTENT_TYPE
    ) -> Path:
        destination = self.directory / filename
        destination.parent.mkdir(parents=True, exist_ok=True)
        with destination.open("wb") as handle:
            handle.write(content)
        LOGGER.info("Wrote %s (%d bytes)", destination, len(content))
        return destination


__all__ = ["DocumentSink", "MemorySink", "DirectorySink"]
