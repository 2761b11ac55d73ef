# billing/pdf/table_layout.py
from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Callable, Dict, List, Sequence, Tuple

from billing.core.currency import fmt_money
from billing.core.errors import LayoutOverflowError
from billing.core.invoice import LineItem
from billing.core.tax import TaxRegime
from billing.core.totals import line_amounts
from billing.pdf.geometry import Rect
from billing.pdf.measure import DEFAULT_MEASURE, TextMeasure
from billing.pdf.primitives import Box, Line, Primitive, Text
from billing.pdf.text_fit import shrink_font_to_height, shrink_font_to_width, truncate_to_width

logger = logging.getLogger(__name__)

FONT = "Helvetica"
FONT_BOLD = "Helvetica-Bold"
FONT_ITALIC = "Helvetica-Oblique"

HEADER_H = 20
HEADER_TEXT_TOP = 6
ROW_PADDING = 8     # kept free inside the frame below the header
ROW_TOP_GAP = 6     # first row starts this far below the header divider
MIN_ROW_H = 10
MAX_ROW_H = 18
BASE_FONT = 9
MIN_FONT = 6
CELL_PAD = 6
PLACEHOLDER_INSET = 8

# Grid line weights
W_FRAME = 0.5
W_SEPARATOR = 0.25
W_DIVIDER = 0.5

OVERFLOW_DRAW = "draw"
OVERFLOW_FAIL = "fail"


def _fmt_qty(qty: float) -> str:
    """Format quantity with up to 3 decimals, no trailing zeros."""
    s = f"{float(qty):.3f}".rstrip("0").rstrip(".")
    return s if s else "0"


def _rate(value: float | None) -> str:
    return f"{(value or 0.0):.2f}"


@dataclass(frozen=True)
class Column:
    key: str
    title: str
    percent: int
    align: str
    value: Callable[[int, LineItem], str]
    # "height": shrink font until wrapped text fits the row, "width": until it fits one line
    shrink: str = ""


_SNO = Column("sno", "SNo", 6, "center", lambda i, it: str(i + 1))
_HSN = Column("hsn_sac", "HSN/SAC", 12, "center", lambda i, it: it.hsn_sac)
_QTY = Column("quantity", "Qty", 6, "right", lambda i, it: _fmt_qty(it.quantity))
_PRICE = Column("unit_price", "Unit Price", 12, "right", lambda i, it: f"{it.unit_price:.2f}")


def _description(percent: int) -> Column:
    return Column("description", "Description", percent, "left", lambda i, it: it.label, shrink="height")


def _amount(percent: int) -> Column:
    # recomputed from quantity, price and rates rather than trusting a stored line_total
    return Column(
        "amount", "Amount", percent, "right",
        lambda i, it: fmt_money(line_amounts(it).total),
        shrink="width",
    )


REGIME_COLUMNS: Dict[TaxRegime, Tuple[Column, ...]] = {
    TaxRegime.SPLIT: (
        _SNO,
        _description(32),
        _HSN,
        _QTY,
        _PRICE,
        Column("cgst_rate", "CGST%", 9, "right", lambda i, it: _rate(it.cgst_rate)),
        Column("sgst_rate", "SGST%", 9, "right", lambda i, it: _rate(it.sgst_rate)),
        _amount(14),
    ),
    TaxRegime.UNIFIED: (
        _SNO,
        _description(34),
        _HSN,
        _QTY,
        _PRICE,
        Column("igst_rate", "IGST%", 10, "right", lambda i, it: _rate(it.igst_rate)),
        _amount(20),
    ),
}


def columns_for(regime: TaxRegime) -> Tuple[Column, ...]:
    return REGIME_COLUMNS[regime]


def column_widths(columns: Sequence[Column], table_width: float) -> List[float]:
    return [math.floor(c.percent / 100 * table_width) for c in columns]


@dataclass(frozen=True)
class RowMetrics:
    """One row height and font size shared by every row of the table."""

    row_height: int
    font_size: int
    capacity: int
    item_count: int

    @property
    def overflow(self) -> int:
        return max(0, self.item_count - self.capacity)


def row_metrics(table_height: float, item_count: int) -> RowMetrics:
    available = table_height - HEADER_H - ROW_PADDING
    ideal = math.floor(available / item_count) if item_count > 0 else MAX_ROW_H
    row_h = min(MAX_ROW_H, max(MIN_ROW_H, ideal))
    font = min(BASE_FONT, max(MIN_FONT, math.floor(BASE_FONT * row_h / MAX_ROW_H)))
    capacity = max(0, math.floor(available / row_h))
    return RowMetrics(row_height=row_h, font_size=font, capacity=capacity, item_count=item_count)


@dataclass(frozen=True)
class TableLayout:
    rect: Rect
    regime: TaxRegime
    columns: Tuple[Column, ...]
    widths: Tuple[float, ...]
    metrics: RowMetrics
    ops: Tuple[Primitive, ...]

    def row_top(self, index: int) -> float:
        return row_top(self.rect, self.metrics, index)


def row_top(rect: Rect, metrics: RowMetrics, index: int) -> float:
    return rect.y + HEADER_H + ROW_TOP_GAP + index * metrics.row_height


def _header_ops(rect: Rect, columns: Sequence[Column], widths: Sequence[float], measure: TextMeasure) -> List[Primitive]:
    ops: List[Primitive] = []
    x = rect.x
    last = len(columns) - 1
    for i, (col, w) in enumerate(zip(columns, widths)):
        inner = w - 2 * CELL_PAD
        title = truncate_to_width(col.title, inner, FONT_BOLD, BASE_FONT, measure)
        ops.append(Text(x + CELL_PAD, rect.y + HEADER_TEXT_TOP, title, FONT_BOLD, BASE_FONT, width=inner, align="center"))
        # separators between columns only, spanning the full table height
        if i < last:
            ops.append(Line(x + w, rect.y, x + w, rect.bottom, W_SEPARATOR))
        x += w
    ops.append(Line(rect.x, rect.y + HEADER_H, rect.right, rect.y + HEADER_H, W_DIVIDER))
    return ops


def _cell_size(col: Column, value: str, inner: float, row_h: float, size: int, measure: TextMeasure) -> int:
    if col.shrink == "height":
        return shrink_font_to_height(value, row_h, inner, size, MIN_FONT, FONT, measure)
    if col.shrink == "width":
        return shrink_font_to_width(value, inner, size, MIN_FONT, FONT, measure)
    return size


def _row_ops(
    top: float,
    x0: float,
    index: int,
    item: LineItem,
    columns: Sequence[Column],
    widths: Sequence[float],
    metrics: RowMetrics,
    measure: TextMeasure,
) -> List[Primitive]:
    ops: List[Primitive] = []
    x = x0
    row_h = metrics.row_height
    for col, w in zip(columns, widths):
        inner = w - 2 * CELL_PAD
        value = col.value(index, item)
        size = _cell_size(col, value, inner, row_h, metrics.font_size, measure)
        # cells are single-line; whatever still does not fit is cut at the cell width
        text = truncate_to_width(value, inner, FONT, size, measure)
        if text:
            ops.append(Text(x + CELL_PAD, top + (row_h - size) / 2, text, FONT, size, width=inner, align=col.align))
        x += w
    return ops


def layout_table(
    rect: Rect,
    items: Sequence[LineItem],
    regime: TaxRegime,
    measure: TextMeasure = DEFAULT_MEASURE,
    overflow_policy: str = OVERFLOW_DRAW,
) -> TableLayout:
    """Lay out the items table inside `rect`.

    All rows share one height and font size derived from the item count. When
    there are more items than rows at MIN_ROW_H, the "draw" policy keeps going
    below the frame (logged) and "fail" raises LayoutOverflowError.
    """
    columns = columns_for(regime)
    widths = column_widths(columns, rect.width)
    metrics = row_metrics(rect.height, len(items))
    if metrics.overflow:
        if overflow_policy == OVERFLOW_FAIL:
            raise LayoutOverflowError(len(items), metrics.capacity)
        logger.warning(
            "Items table holds %s rows; %s of %s rows are drawn below its frame",
            metrics.capacity, metrics.overflow, len(items),
        )

    ops: List[Primitive] = [Box(rect.x, rect.y, rect.width, rect.height, W_FRAME)]
    ops.extend(_header_ops(rect, columns, widths, measure))

    if not items:
        ops.append(Text(rect.x + PLACEHOLDER_INSET, rect.y + HEADER_H + PLACEHOLDER_INSET, "No items", FONT_ITALIC, BASE_FONT))
    for i, item in enumerate(items):
        ops.extend(_row_ops(row_top(rect, metrics, i), rect.x, i, item, columns, widths, metrics, measure))

    return TableLayout(rect, regime, columns, tuple(widths), metrics, tuple(ops))
