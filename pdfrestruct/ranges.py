"""Page range parsing for :mod:`pdfrestruct`."""

from __future__ import annotations

import re
from typing import List

from .exceptions import InvalidRangeError
from .types import PageRange

_RANGE_TOKEN = re.compile(r"([0-9]+)(?:-([0-9]+))?")


def parse_page_ranges(ranges: str, *, total_pages: int) -> List[PageRange]:
    """Parse ``ranges`` into a list of :class:`PageRange` instances.

    Args:
        ranges: Comma-separated range specification such as ``"1-3,5,7-9"``.
            Pages are 1-indexed and both bounds are inclusive.
        total_pages: Total number of pages in the source PDF, used to validate
            the upper bound of every range.

    Raises:
        InvalidRangeError: If a token is malformed, starts below page 1, ends
            past ``total_pages`` or has its start after its end.

    Returns:
        A list of :class:`PageRange` objects in the order they were supplied.
        Overlapping ranges are returned as given.
    """

    if ranges is None:
        raise InvalidRangeError("Page range specification cannot be empty")

    parsed: List[PageRange] = []
    for raw_token in ranges.split(","):
        token = raw_token.strip()
        match = _RANGE_TOKEN.fullmatch(token)
        if match is None:
            raise InvalidRangeError(f"Invalid page range format: '{token}'")

        start = int(match.group(1))
        end = int(match.group(2)) if match.group(2) is not None else start
        if start < 1 or end > total_pages or start > end:
            raise InvalidRangeError(
                f"Invalid page range: {token} (document has {total_pages} pages)"
            )
        parsed.append(PageRange(start, end))

    return parsed


__all__ = ["parse_page_ranges"]
