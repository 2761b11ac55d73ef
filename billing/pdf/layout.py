from __future__ import annotations

import math
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from billing.core.currency import amount_in_words, fmt_inr
from billing.core.invoice import Invoice
from billing.core.settings import DEFAULT_FOOTER_NOTE, CompanyProfile, Settings
from billing.core.tax import HOME_STATE_PREFIX, detect_regime, regime_for_tax_id
from billing.core.totals import Totals, totals_of
from billing.pdf.geometry import A4_PAGE, PageGeometry, PageSpec, Rect, plan_page
from billing.pdf.measure import DEFAULT_MEASURE, TextMeasure
from billing.pdf.primitives import Block, Box, Image, Line, PageDescription, Primitive, Text
from billing.pdf.table_layout import FONT, FONT_BOLD, MIN_FONT, OVERFLOW_DRAW, layout_table
from billing.pdf.text_fit import shrink_font_to_height, shrink_font_to_width, truncate_to_width

TITLE = "TAX INVOICE"
TITLE_SIZE = 18
COMPANY_NAME_SIZE = 12
NORMAL_SIZE = 9
SMALL_SIZE = 7
BOX_RADIUS = 6
MUTED = "#666666"

LOGO_MAX_W = 130
LOGO_MAX_H = 60
LOGO_INSET = 12

CHALLAN_PREFIX = "CH"


@dataclass(frozen=True)
class LayoutOptions:
    overflow_policy: str = OVERFLOW_DRAW
    currency_unit: str = "RUPEES"
    words_lang: str = "en_IN"
    home_state_prefix: str = HOME_STATE_PREFIX

    @classmethod
    def from_settings(cls, settings: Settings) -> "LayoutOptions":
        return cls(
            overflow_policy=settings.overflow_policy,
            currency_unit=settings.currency_unit,
            words_lang=settings.words_lang,
            home_state_prefix=settings.home_state_prefix,
        )


def challan_number(invoice_number: str) -> str:
    return f"{CHALLAN_PREFIX}{invoice_number[-4:]}" if invoice_number else ""


def _line(x: float, y: float, text: str, width: float, font: str, size: float,
          measure: TextMeasure, **kw) -> Text:
    """Single-line text cut to the slot width."""
    return Text(x, y, truncate_to_width(text, width, font, size, measure), font, size, width=width, **kw)


def _paragraph(x: float, y: float, text: str, width: float, height: float, font: str,
               start_size: int, measure: TextMeasure) -> List[Text]:
    """Wrapped text shrunk to fit `height`; lines beyond it are dropped and the last one cut."""
    size = shrink_font_to_height(text, height, width, start_size, MIN_FONT, font, measure)
    lines = measure.wrap(text, width, font, size)
    lead = measure.line_height(size)
    room = max(1, math.floor(height / lead))
    if len(lines) > room:
        rest = " ".join(lines[room - 1:])
        lines = lines[:room - 1] + [truncate_to_width(rest, width, font, size, measure)]
    return [Text(x, y + i * lead, ln, font, size, width=width) for i, ln in enumerate(lines)]


def _title_block(geo: PageGeometry) -> Block:
    r = geo.title
    return Block("title", (Text(r.x, r.y, TITLE, FONT_BOLD, TITLE_SIZE, width=r.width, align="center"),))


def _logo_rect(r: Rect) -> Rect:
    w = min(LOGO_MAX_W, math.floor(r.width * 0.16))
    h = min(LOGO_MAX_H, r.height - 2 * LOGO_INSET)
    return Rect(r.x + LOGO_INSET, r.y + LOGO_INSET, w, h)


def _company_block(geo: PageGeometry, company: CompanyProfile, measure: TextMeasure) -> Block:
    r = geo.company
    ops: List[Primitive] = [Box(r.x, r.y, r.width, r.height, 0.7, BOX_RADIUS)]

    logo = _logo_rect(r)
    if company.logo_path and Path(company.logo_path).is_file():
        ops.append(Image(str(company.logo_path), logo.x, logo.y, logo.width, logo.height))
    else:
        # keep the reserved logo area visible so nothing shifts when there is no logo
        ops.append(Box(logo.x, logo.y, logo.width, logo.height, 0.4))

    tx = logo.right + 5
    tw = r.right - tx - 12
    ops.append(_line(tx, r.y + 12, company.name, tw, FONT_BOLD, COMPANY_NAME_SIZE, measure))
    addr_size = shrink_font_to_width(company.address, tw, NORMAL_SIZE, MIN_FONT, FONT, measure)
    ops.append(_line(tx, r.y + 30, company.address, tw, FONT, addr_size, measure))
    ops.append(_line(tx, r.y + 42, f"Email: {company.email}", tw, FONT, NORMAL_SIZE, measure))
    ops.append(_line(tx, r.y + 54, f"Mobile: {company.mobile}", tw, FONT, NORMAL_SIZE, measure))
    ops.append(_line(tx, r.bottom - 15, f"GSTIN: {company.tax_id}", tw, FONT_BOLD, COMPANY_NAME_SIZE - 2, measure))
    return Block("company", tuple(ops))


def _bill_to_block(geo: PageGeometry, invoice: Invoice, measure: TextMeasure) -> Block:
    r = geo.bill_to
    x, w = r.x + 10, r.width - 20
    ops: List[Primitive] = [
        Box(r.x, r.y, r.width, r.height, 0.5, BOX_RADIUS),
        Text(x, r.y + 8, "Bill To:", FONT_BOLD, NORMAL_SIZE + 1),
        _line(x, r.y + 26, f"Name: {invoice.customer_name}", w, FONT_BOLD, NORMAL_SIZE, measure),
        Text(x, r.y + 44, "Address:", FONT_BOLD, NORMAL_SIZE),
    ]
    ops.extend(_paragraph(x + 42, r.y + 44, invoice.customer_address, r.width - 72, 18, FONT, NORMAL_SIZE, measure))
    ops.append(_line(x, r.y + 62, f"GSTIN: {invoice.customer_gst}", w, FONT_BOLD, NORMAL_SIZE, measure))
    return Block("bill_to", tuple(ops))


def _details_block(geo: PageGeometry, invoice: Invoice, measure: TextMeasure) -> Block:
    r = geo.details
    x, w = r.x + 10, r.width - 20
    rows = (
        f"Invoice No: {invoice.invoice_number}",
        f"Date: {invoice.invoice_date}",
        f"Challan No: {challan_number(invoice.invoice_number)}",
    )
    ops: List[Primitive] = [
        Box(r.x, r.y, r.width, r.height, 0.5, BOX_RADIUS),
        Text(x, r.y + 8, "Invoice Details:", FONT_BOLD, NORMAL_SIZE + 1),
    ]
    ops.extend(_line(x, r.y + 26 + 18 * i, text, w, FONT, NORMAL_SIZE, measure) for i, text in enumerate(rows))
    return Block("details", tuple(ops))


def _totals_block(geo: PageGeometry, totals: Totals) -> Block:
    r = geo.totals
    x, w = r.x + 10, r.width - 20
    round_off = totals.round_off
    rows = (
        ("Subtotal", fmt_inr(totals.subtotal), FONT),
        ("Total GST", fmt_inr(totals.total_tax), FONT),
        ("Round Off", ("+" if round_off >= 0 else "") + fmt_inr(round_off), FONT),
        ("Grand Total", fmt_inr(totals.rounded_total), FONT_BOLD),
    )
    ops: List[Primitive] = [Box(r.x, r.y, r.width, r.height, 0.6, BOX_RADIUS)]
    for i, (label, value, font) in enumerate(rows):
        y = r.y + 10 + 18 * i
        ops.append(Text(x, y, label, font, NORMAL_SIZE, width=w))
        ops.append(Text(x, y, value, font, NORMAL_SIZE, width=w, align="right"))
    return Block("totals", tuple(ops))


def _words_block(geo: PageGeometry, totals: Totals, options: LayoutOptions, measure: TextMeasure) -> Block:
    r = geo.words
    x, w = r.x + 12, r.width - 24
    words = amount_in_words(totals.rounded_total, options.currency_unit, options.words_lang)
    ops: List[Primitive] = [
        Box(r.x, r.y, r.width, r.height, 0.6, BOX_RADIUS),
        Text(x, r.y + 12, "Amount (in words):", FONT_BOLD, NORMAL_SIZE),
    ]
    ops.extend(_paragraph(x, r.y + 28, words, w, r.height - 28 - 4, FONT_BOLD, NORMAL_SIZE, measure))
    return Block("words", tuple(ops))


def _bank_block(geo: PageGeometry, company: CompanyProfile, measure: TextMeasure) -> Block:
    frame, r = geo.bank_signature, geo.bank
    top = frame.y + 12
    bank = company.bank
    lines = (
        f"Bank Name: {bank.name}",
        f"A/C No: {bank.account_number}",
        f"IFSC: {bank.routing_code}",
        f"Branch: {bank.branch}",
        f"Beneficiary: {bank.beneficiary}",
    )
    ops: List[Primitive] = [
        Box(frame.x, frame.y, frame.width, frame.height, 0.7, BOX_RADIUS),
        Line(r.right, frame.y + 2, r.right, frame.bottom - 2, 0.8),
        Text(r.x, top, "Bank Details:", FONT_BOLD, NORMAL_SIZE + 0.5),
    ]
    ops.extend(_line(r.x, top + 18 + 14 * i, ln, r.width - 8, FONT, SMALL_SIZE, measure) for i, ln in enumerate(lines))
    return Block("bank", tuple(ops))


def _signature_block(geo: PageGeometry, company: CompanyProfile, measure: TextMeasure) -> Block:
    frame, r = geo.bank_signature, geo.signature
    top = frame.y + 12
    sig_y = top + 54
    return Block("signature", (
        _line(r.x + 18, top, f"For {company.name}", r.width - 24, FONT_BOLD, NORMAL_SIZE + 1, measure),
        Line(r.x + 24, sig_y, r.right - 6, sig_y, 0.7),
        Text(r.x, frame.bottom - 22, "Authorised Signatory", FONT, NORMAL_SIZE, width=r.width - 8, align="right"),
    ))


def _footer_block(geo: PageGeometry, company: CompanyProfile, measure: TextMeasure) -> Block:
    r = geo.footer
    note = company.footer_note or DEFAULT_FOOTER_NOTE
    return Block("footer", (_line(r.x, r.y, note, r.width, FONT, SMALL_SIZE, measure, align="center", color=MUTED),))


def layout_invoice(
    invoice: Invoice,
    company: CompanyProfile,
    *,
    page: PageSpec = A4_PAGE,
    measure: TextMeasure = DEFAULT_MEASURE,
    options: Optional[LayoutOptions] = None,
) -> PageDescription:
    """Compute the complete single-page description of an invoice.

    Nothing is drawn here; every size comes from `measure`. Blocks are returned
    in drawing order: title, company, bill-to, invoice details, items table,
    totals, amount in words, bank details, signature, footer.
    """
    options = options or LayoutOptions()
    totals = totals_of(invoice)
    regime = detect_regime(invoice.items, fallback=regime_for_tax_id(invoice.customer_gst, options.home_state_prefix))
    geo = plan_page(page, measure.height(TITLE, page.content_width, FONT_BOLD, TITLE_SIZE))
    table = layout_table(geo.items, invoice.items, regime, measure, options.overflow_policy)

    blocks = (
        _title_block(geo),
        _company_block(geo, company, measure),
        _bill_to_block(geo, invoice, measure),
        _details_block(geo, invoice, measure),
        Block("items", table.ops),
        _totals_block(geo, totals),
        _words_block(geo, totals, options, measure),
        _bank_block(geo, company, measure),
        _signature_block(geo, company, measure),
        _footer_block(geo, company, measure),
    )
    return PageDescription(page.width, page.height, blocks)
