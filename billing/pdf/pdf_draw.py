from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, BinaryIO, Mapping, Optional, Protocol, Union

from reportlab.lib import colors
from reportlab.lib.utils import ImageReader
from reportlab.pdfgen.canvas import Canvas

from billing.core.errors import OutputError, RenderResourceError, ValidationError
from billing.core.invoice import Invoice
from billing.core.paths import invoice_output_path
from billing.core.settings import CompanyProfile
from billing.core.totals import fill_totals
from billing.pdf.geometry import A4_PAGE, PageSpec
from billing.pdf.layout import LayoutOptions, layout_invoice
from billing.pdf.measure import DEFAULT_MEASURE, TextMeasure
from billing.pdf.primitives import Box, Image, Line, PageDescription, Text

logger = logging.getLogger(__name__)

# Approximate ascent fraction of font size above baseline (Helvetica)
ASCENT_RATIO = 0.72
TEXT_COLOR = colors.black
RULE_COLOR = colors.black
PLACEHOLDER_LINE_W = 0.4

Sink = Union[str, os.PathLike, BinaryIO]


class Surface(Protocol):
    """Where a page description ends up. Coordinates are top-down points."""

    def draw_text(self, op: Text) -> None: ...

    def stroke_rect(self, op: Box) -> None: ...

    def stroke_line(self, op: Line) -> None: ...

    def draw_image(self, op: Image) -> None:
        """Raise RenderResourceError if the image cannot be read."""
        ...

    def finish(self) -> None: ...


class CanvasSurface:
    """Surface backed by a ReportLab canvas (origin bottom-left, y up)."""

    def __init__(self, canvas: Canvas, page_height: float) -> None:
        self.c = canvas
        self.page_height = page_height
        self.c.setFillColor(TEXT_COLOR)
        self.c.setStrokeColor(RULE_COLOR)

    def _y(self, y: float) -> float:
        return self.page_height - y

    def draw_text(self, op: Text) -> None:
        c = self.c
        c.setFont(op.font, op.size)
        c.setFillColor(colors.HexColor(op.color) if op.color else TEXT_COLOR)
        baseline = self._y(op.y + op.size * ASCENT_RATIO)
        if op.align == "right" and op.width is not None:
            c.drawRightString(op.x + op.width, baseline, op.text)
        elif op.align == "center" and op.width is not None:
            c.drawCentredString(op.x + op.width / 2, baseline, op.text)
        else:
            c.drawString(op.x, baseline, op.text)

    def stroke_rect(self, op: Box) -> None:
        self.c.setLineWidth(op.line_width)
        bottom = self._y(op.y + op.height)
        if op.radius:
            self.c.roundRect(op.x, bottom, op.width, op.height, op.radius, stroke=1, fill=0)
        else:
            self.c.rect(op.x, bottom, op.width, op.height, stroke=1, fill=0)

    def stroke_line(self, op: Line) -> None:
        self.c.setLineWidth(op.width)
        self.c.line(op.x1, self._y(op.y1), op.x2, self._y(op.y2))

    def draw_image(self, op: Image) -> None:
        try:
            reader = ImageReader(op.path)
            reader.getSize()
        except Exception as e:
            raise RenderResourceError(f"Cannot read image {op.path}: {e}") from e
        self.c.drawImage(
            reader,
            op.x,
            self._y(op.y + op.height),
            width=op.width,
            height=op.height,
            preserveAspectRatio=True,
            anchor="nw",
            mask="auto",
        )

    def finish(self) -> None:
        self.c.showPage()
        self.c.save()


def emit(page: PageDescription, surface: Surface) -> None:
    """Draw every block in order and finalize exactly one page."""
    for block in page:
        for op in block.ops:
            if isinstance(op, Text):
                surface.draw_text(op)
            elif isinstance(op, Box):
                surface.stroke_rect(op)
            elif isinstance(op, Line):
                surface.stroke_line(op)
            elif isinstance(op, Image):
                try:
                    surface.draw_image(op)
                except RenderResourceError:
                    logger.warning("Logo unavailable, drawing placeholder: %s", op.path)
                    surface.stroke_rect(Box(op.x, op.y, op.width, op.height, PLACEHOLDER_LINE_W))
    surface.finish()


def _draw_to(stream: Any, page: PageDescription, invoice: Invoice, company: CompanyProfile) -> None:
    c = Canvas(stream, pagesize=(page.width, page.height))
    c.setAuthor(company.name or "Billing")
    c.setTitle(f"Invoice {invoice.invoice_number}")
    emit(page, CanvasSurface(c, page.height))


def prepare_invoice(invoice: Union[Invoice, Mapping[str, Any]]) -> Invoice:
    """Validate an invoice for rendering and fill any missing aggregates."""
    if not isinstance(invoice, Invoice):
        invoice = Invoice.from_dict(invoice)
    if not invoice.items:
        raise ValidationError(f"Invoice {invoice.invoice_number or '(unnumbered)'} has no items")
    return fill_totals(invoice)


# ===== Public API =====
def layout_and_render(
    invoice: Union[Invoice, Mapping[str, Any]],
    company: CompanyProfile,
    sink: Sink,
    *,
    options: Optional[LayoutOptions] = None,
    page: PageSpec = A4_PAGE,
    measure: TextMeasure = DEFAULT_MEASURE,
) -> Union[Path, BinaryIO]:
    """Render a single-page invoice PDF into `sink` (a path or a binary stream).

    Validation and layout happen before the output is opened, so a
    ValidationError or LayoutOverflowError leaves no file behind. A sink path
    that cannot be opened raises OutputError. Returns the path written, or the
    stream itself.
    """
    invoice = prepare_invoice(invoice)
    description = layout_invoice(invoice, company, page=page, measure=measure, options=options)

    if not isinstance(sink, (str, os.PathLike)):
        _draw_to(sink, description, invoice, company)
        return sink

    out = Path(sink)
    try:
        out.parent.mkdir(parents=True, exist_ok=True)
        fh = out.open("wb")
    except OSError as e:
        raise OutputError(f"Cannot open {out} for writing: {e}") from e
    with fh:
        _draw_to(fh, description, invoice, company)
    logger.info("Invoice %s rendered to %s", invoice.invoice_number, out)
    return out


def generate_and_save_pdf(
    invoice: Union[Invoice, Mapping[str, Any]],
    company: CompanyProfile,
    root: Union[str, Path],
    *,
    options: Optional[LayoutOptions] = None,
) -> Path:
    """Render into <root>/<date>/<customer>/<number>.pdf and return that path."""
    if not isinstance(invoice, Invoice):
        invoice = Invoice.from_dict(invoice)
    out = invoice_output_path(invoice, root)
    layout_and_render(invoice, company, out, options=options)
    return out
