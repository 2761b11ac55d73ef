from __future__ import annotations

import math
from dataclasses import dataclass, asdict
from typing import Dict, Tuple

from reportlab.lib.pagesizes import A4

# ===== Layout constants (points) =====
PAGE_WIDTH, PAGE_HEIGHT = A4
MARGIN = 36

GAP = 8
TITLE_GAP = GAP * 1.2
COMPANY_BOX_H = 86

# Bill-to / invoice-details row
PARTY_ROW_H = 74
PARTY_SPLIT = 0.55
PARTY_GUTTER = 12

# Items table gets what is left after reserving the bottom blocks, but never less than this
TABLE_MIN_H = 80
BOTTOM_RESERVED = 200  # totals + words + bank/signature
FOOTER_RESERVED = 30

TOTALS_W_RATIO = 0.36
TOTALS_H = 76
WORDS_H = 56
WORDS_GUTTER = 16

BANK_BOX_H = 100
BANK_PAD = 12
FOOTER_H = 12


@dataclass(frozen=True)
class Rect:
    x: float
    y: float
    width: float
    height: float

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height

    def contains(self, other: "Rect") -> bool:
        return (
            other.x >= self.x
            and other.y >= self.y
            and other.right <= self.right + 1e-6
            and other.bottom <= self.bottom + 1e-6
        )


@dataclass(frozen=True)
class PageSpec:
    width: float = PAGE_WIDTH
    height: float = PAGE_HEIGHT
    margin: float = MARGIN

    @property
    def left(self) -> float:
        return self.margin

    @property
    def top(self) -> float:
        return self.margin

    @property
    def content_width(self) -> float:
        return self.width - 2 * self.margin

    @property
    def content(self) -> Rect:
        return Rect(self.margin, self.margin, self.content_width, self.height - 2 * self.margin)


A4_PAGE = PageSpec()


@dataclass(frozen=True)
class PageGeometry:
    title: Rect
    company: Rect
    bill_to: Rect
    details: Rect
    items: Rect
    totals: Rect
    words: Rect
    bank_signature: Rect
    bank: Rect
    signature: Rect
    footer: Rect

    def regions(self) -> Dict[str, Rect]:
        return {name: Rect(**r) for name, r in asdict(self).items()}


def _stack(page: PageSpec, cursor: float, height: float, gap: float) -> Tuple[Rect, float]:
    """Full-width region at `cursor`; returns it with the cursor for the next region."""
    rect = Rect(page.left, cursor, page.content_width, height)
    return rect, rect.bottom + gap


def _party_row(page: PageSpec, cursor: float) -> Tuple[Rect, Rect, float]:
    row, nxt = _stack(page, cursor, PARTY_ROW_H, GAP)
    left_w = math.floor(row.width * PARTY_SPLIT)
    bill_to = Rect(row.x, row.y, left_w, row.height)
    details = Rect(row.x + left_w + PARTY_GUTTER, row.y, row.width - left_w - PARTY_GUTTER, row.height)
    return bill_to, details, nxt


def _items_table(page: PageSpec, cursor: float) -> Tuple[Rect, float]:
    bottom_limit = page.height - page.margin - BOTTOM_RESERVED - FOOTER_RESERVED
    return _stack(page, cursor, max(TABLE_MIN_H, bottom_limit - cursor), GAP)


def _summary_row(page: PageSpec, cursor: float) -> Tuple[Rect, Rect, float]:
    w = page.content_width
    totals_w = math.floor(w * TOTALS_W_RATIO)
    totals = Rect(page.left + w - totals_w, cursor, totals_w, TOTALS_H)
    words = Rect(page.left, cursor, w - totals_w - WORDS_GUTTER, WORDS_H)
    return totals, words, cursor + max(TOTALS_H, WORDS_H) + GAP


def _bank_signature(page: PageSpec, cursor: float) -> Tuple[Rect, Rect, Rect, float]:
    frame, nxt = _stack(page, cursor, BANK_BOX_H, GAP)
    # equal halves inside the padding, 1pt reserved for the divider
    half = math.floor((frame.width - 2 * BANK_PAD - 1) / 2)
    bank = Rect(frame.x + BANK_PAD, frame.y, half, frame.height)
    signature = Rect(bank.right + 1, frame.y, half, frame.height)
    return frame, bank, signature, nxt


def plan_page(page: PageSpec, title_height: float) -> PageGeometry:
    """Reserve every region of the single invoice page top-down.

    Fixed-height blocks are placed first; the items table is the only elastic
    region and receives whatever height remains above the reserved bottom
    blocks (at least TABLE_MIN_H). The cursor is threaded through each step as
    a returned value.
    """
    title, cursor = _stack(page, page.top, title_height, TITLE_GAP)
    company, cursor = _stack(page, cursor, COMPANY_BOX_H, GAP)
    bill_to, details, cursor = _party_row(page, cursor)
    items, cursor = _items_table(page, cursor)
    totals, words, cursor = _summary_row(page, cursor)
    frame, bank, signature, _ = _bank_signature(page, cursor)
    footer = Rect(page.left, page.height - page.margin - FOOTER_H, page.content_width, FOOTER_H)
    return PageGeometry(
        title=title,
        company=company,
        bill_to=bill_to,
        details=details,
        items=items,
        totals=totals,
        words=words,
        bank_signature=frame,
        bank=bank,
        signature=signature,
        footer=footer,
    )
