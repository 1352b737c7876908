"""Operation registry binding host payloads to engine requests.

Host runtimes address operations by id (``mergePdfs``, ``splitByPage``,
``splitByRange``, ``splitByBookmark``, ``splitBySize``) and exchange
camelCase payloads. Each operation is a small class registered under its id;
it validates the payload, builds the typed request and delegates to the
:class:`~pdfrestruct.engine.RestructuringEngine`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, Mapping, Optional

from .config import (
    DEFAULT_BOOKMARK_PATTERN,
    DEFAULT_MERGE_FILENAME,
    DEFAULT_PAGE_PATTERN,
    DEFAULT_RANGE_PATTERN,
    DEFAULT_SIZE_PATTERN,
    parse_flag,
)
from .engine import (
    MergeRequest,
    RestructuringEngine,
    SplitByBookmarkRequest,
    SplitByPageRequest,
    SplitByRangeRequest,
    SplitBySizeRequest,
)
from .exceptions import InvalidRequestError
from .sink import DocumentSink
from .types import MergeResult, SplitResult


@dataclass
class OperationContext:
    """Holds the inputs of a single operation invocation."""

    payload: Mapping[str, Any]
    sink: DocumentSink
    engine: RestructuringEngine = field(default_factory=RestructuringEngine)

    def require(self, key: str) -> Any:
        value = self.payload.get(key)
        if value is None:
            raise InvalidRequestError(f"Missing required field '{key}'")
        return value

    def optional(self, key: str, default: Any = None) -> Any:
        value = self.payload.get(key)
        return default if value is None else value

    def integer(self, key: str, default: Optional[int] = None) -> int:
        value = self.payload.get(key, default)
        if value is None:
            raise InvalidRequestError(f"Missing required field '{key}'")
        if isinstance(value, bool):
            raise InvalidRequestError(f"Field '{key}' must be an integer, got {value!r}")
        try:
            return int(value)
        except (TypeError, ValueError) as exc:
            raise InvalidRequestError(f"Field '{key}' must be an integer, got {value!r}") from exc

    def boolean(self, key: str, default: Optional[bool] = None) -> Optional[bool]:
        value = self.payload.get(key)
        if value is None:
            return default
        flag = parse_flag(value)
        if flag is None:
            raise InvalidRequestError(f"Field '{key}' must be a boolean, got {value!r}")
        return flag


class BaseOperation:
    """Base class for all registered operations."""

    name: str

    def __init__(self, context: OperationContext) -> None:
        self.context = context

    def run(self) -> MergeResult | SplitResult:  # pragma: no cover - implemented by subclasses
        raise NotImplementedError


class OperationRegistry:
    """Registry storing available operations by id."""

    def __init__(self) -> None:
        self._operations: Dict[str, type[BaseOperation]] = {}

    def register(self, name: str, operation_class: type[BaseOperation]) -> None:
        if name in self._operations:
            raise ValueError(f"Operation '{name}' is already registered")
        self._operations[name] = operation_class

    def create(self, name: str, context: OperationContext) -> BaseOperation:
        try:
            operation_class = self._operations[name]
        except KeyError as exc:
            raise KeyError(f"Operation '{name}' is not registered") from exc
        return operation_class(context)

    def names(self) -> Iterable[str]:
        return sorted(self._operations.keys())

    def get(self, name: str) -> type[BaseOperation] | None:
        return self._operations.get(name)


registry = OperationRegistry()


def register_operation(name: str) -> Callable[[type[BaseOperation]], type[BaseOperation]]:
    def decorator(cls: type[BaseOperation]) -> type[BaseOperation]:
        cls.name = name
        registry.register(name, cls)
        return cls

    return decorator


@register_operation("mergePdfs")
class MergePdfsOperation(BaseOperation):
    def run(self) -> MergeResult:
        context = self.context
        documents = context.require("documents")
        if isinstance(documents, (bytes, bytearray, Mapping)):
            raise InvalidRequestError("Field 'documents' must be a list of documents")
        request = MergeRequest(
            documents=list(documents),
            output_filename=context.optional("outputFilename", DEFAULT_MERGE_FILENAME),
            preserve_bookmarks=context.boolean("preserveBookmarks"),
            page_size_policy=context.optional("pageSizeStandardization"),
        )
        return context.engine.merge(request, context.sink)


@register_operation("splitByPage")
class SplitByPageOperation(BaseOperation):
    def run(self) -> SplitResult:
        context = self.context
        request = SplitByPageRequest(
            document=context.require("document"),
            pages_per_file=context.integer("pagesPerFile", 1),
            output_pattern=context.optional("outputPattern", DEFAULT_PAGE_PATTERN),
        )
        return context.engine.split_by_page(request, context.sink)


@register_operation("splitByRange")
class SplitByRangeOperation(BaseOperation):
    def run(self) -> SplitResult:
        context = self.context
        request = SplitByRangeRequest(
            document=context.require("document"),
            page_ranges=context.require("pageRanges"),
            output_pattern=context.optional("outputPattern", DEFAULT_RANGE_PATTERN),
        )
        return context.engine.split_by_range(request, context.sink)


@register_operation("splitByBookmark")
class SplitByBookmarkOperation(BaseOperation):
    def run(self) -> SplitResult:
        context = self.context
        request = SplitByBookmarkRequest(
            document=context.require("document"),
            top_level_only=context.boolean("topLevelOnly", True),
            output_pattern=context.optional("outputPattern", DEFAULT_BOOKMARK_PATTERN),
        )
        return context.engine.split_by_bookmark(request, context.sink)


@register_operation("splitBySize")
class SplitBySizeOperation(BaseOperation):
    def run(self) -> SplitResult:
        context = self.context
        request = SplitBySizeRequest(
            document=context.require("document"),
            max_file_size_mb=context.integer("maxFileSizeMb"),
            output_pattern=context.optional("outputPattern", DEFAULT_SIZE_PATTERN),
        )
        return context.engine.split_by_size(request, context.sink)


def execute(
    operation_id: str,
    payload: Mapping[str, Any],
    sink: DocumentSink,
    *,
    engine: Optional[RestructuringEngine] = None,
) -> Dict[str, Any]:
    """Run ``operation_id`` with a camelCase ``payload`` and return the response dict."""

    context = OperationContext(
        payload=payload,
        sink=sink,
        engine=engine if engine is not None else RestructuringEngine(),
    )
    result = registry.create(operation_id, context).run()
    return result.to_dict()


__all__ = [
    "OperationContext",
    "BaseOperation",
    "OperationRegistry",
    "registry",
    "register_operation",
    "execute",
]
