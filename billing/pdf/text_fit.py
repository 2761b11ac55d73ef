from __future__ import annotations

from typing import Optional

from billing.pdf.measure import DEFAULT_MEASURE, TextMeasure

ELLIPSIS = "…"


def truncate_to_width(
    text: Optional[str],
    max_width: float,
    font: str,
    size: float,
    measure: TextMeasure = DEFAULT_MEASURE,
) -> str:
    """Longest prefix of `text` plus an ellipsis that fits `max_width`.

    Text that already fits is returned unchanged. Binary search relies on
    prefix width growing with prefix length. If not even the ellipsis fits,
    the result is empty.
    """
    if not text:
        return ""
    if measure.width(text, font, size) <= max_width:
        return text
    if measure.width(ELLIPSIS, font, size) > max_width:
        return ""
    lo, hi = 0, len(text)
    while lo < hi:
        mid = (lo + hi + 1) // 2
        if measure.width(text[:mid] + ELLIPSIS, font, size) <= max_width:
            lo = mid
        else:
            hi = mid - 1
    return text[:lo] + ELLIPSIS


def shrink_font_to_height(
    text: Optional[str],
    max_height: float,
    box_width: float,
    start_size: int,
    min_size: int,
    font: str,
    measure: TextMeasure = DEFAULT_MEASURE,
) -> int:
    """Largest size from start_size down to min_size whose wrapped text fits max_height.

    Stops at min_size even if the text still overflows.
    """
    size = start_size
    while size > min_size and measure.height(text or "", box_width, font, size) > max_height:
        size -= 1
    return size


def shrink_font_to_width(
    text: Optional[str],
    max_width: float,
    start_size: int,
    min_size: int,
    font: str,
    measure: TextMeasure = DEFAULT_MEASURE,
) -> int:
    """Single-line variant of shrink_font_to_height."""
    size = start_size
    while size > min_size and measure.width(text or "", font, size) > max_width:
        size -= 1
    return size
