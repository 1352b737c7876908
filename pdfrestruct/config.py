"""Environment-driven defaults for :mod:`pdfrestruct`.

Values are read on every call so that host processes can change them
without reloading the package.
"""

from __future__ import annotations

import logging
import os
from typing import Optional

from .types import PageSizePolicy

LOGGER = logging.getLogger("pdfrestruct.config")

PAGE_SIZE_POLICY_ENV = "PDFRESTRUCT_PAGE_SIZE_POLICY"
PRESERVE_BOOKMARKS_ENV = "PDFRESTRUCT_PRESERVE_BOOKMARKS"

DEFAULT_PAGE_SIZE_POLICY = PageSizePolicy.USE_LARGEST
DEFAULT_PRESERVE_BOOKMARKS = False

DEFAULT_MERGE_FILENAME = "merged.pdf"
DEFAULT_PAGE_PATTERN = "split-{index}.pdf"
DEFAULT_RANGE_PATTERN = "range-{index}.pdf"
DEFAULT_BOOKMARK_PATTERN = "{bookmark}.pdf"
DEFAULT_SIZE_PATTERN = "part-{index}.pdf"

_TRUTHY = {"1", "true", "yes", "on"}
_FALSY = {"0", "false", "no", "off"}


def default_page_size_policy() -> PageSizePolicy:
    value = os.getenv(PAGE_SIZE_POLICY_ENV)
    if value is None or not value.strip():
        return DEFAULT_PAGE_SIZE_POLICY
    try:
        return PageSizePolicy.coerce(value)
    except ValueError:
        LOGGER.warning(
            "Ignoring invalid %s=%r, using %s",
            PAGE_SIZE_POLICY_ENV,
            value,
            DEFAULT_PAGE_SIZE_POLICY.value,
        )
        return DEFAULT_PAGE_SIZE_POLICY


def parse_flag(value: object) -> Optional[bool]:
    """Interpret ``value`` as a boolean, returning ``None`` when it is not one."""

    if isinstance(value, bool):
        return value
    normalised = str(value).strip().lower()
    if normalised in _TRUTHY:
        return True
    if normalised in _FALSY:
        return False
    return None


def default_preserve_bookmarks() -> bool:
    value = os.getenv(PRESERVE_BOOKMARKS_ENV)
    if value is None:
        return DEFAULT_PRESERVE_BOOKMARKS
    flag = parse_flag(value)
    if flag is not None:
        return flag
    LOGGER.warning("Ignoring invalid %s=%r", PRESERVE_BOOKMARKS_ENV, value)
    return DEFAULT_PRESERVE_BOOKMARKS


__all__ = [
    "PAGE_SIZE_POLICY_ENV",
    "PRESERVE_BOOKMARKS_ENV",
    "DEFAULT_MERGE_FILENAME",
    "DEFAULT_PAGE_PATTERN",
    "DEFAULT_RANGE_PATTERN",
    "DEFAULT_BOOKMARK_PATTERN",
    "DEFAULT_SIZE_PATTERN",
    "default_page_size_policy",
    "default_preserve_bookmarks",
    "parse_flag",
]
