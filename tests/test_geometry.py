from __future__ import annotations

import math

from billing.pdf.geometry import A4_PAGE, TABLE_MIN_H, PageSpec, plan_page

# measured height of "TAX INVOICE" at 18 pt on A4
TITLE_H = 18 * 1.16


def test_regions_inside_page_content() -> None:
    geo = plan_page(A4_PAGE, TITLE_H)
    content = A4_PAGE.content
    for name, r in geo.regions().items():
        assert content.contains(r), name


def test_regions_stack_top_down_without_overlap() -> None:
    geo = plan_page(A4_PAGE, TITLE_H)
    column = [geo.title, geo.company, geo.bill_to, geo.items, geo.totals, geo.bank_signature, geo.footer]
    for upper, lower in zip(column, column[1:]):
        assert upper.bottom <= lower.y
    assert geo.bill_to.right < geo.details.x
    assert geo.bill_to.y == geo.details.y
    assert geo.words.right < geo.totals.x
    assert geo.words.y == geo.totals.y
    assert geo.bank.right < geo.signature.x
    assert geo.bank_signature.contains(geo.bank)
    assert geo.bank_signature.contains(geo.signature)


def test_party_row_split() -> None:
    geo = plan_page(A4_PAGE, TITLE_H)
    assert geo.bill_to.width == math.floor(A4_PAGE.content_width * 0.55)
    assert math.isclose(geo.details.right, A4_PAGE.left + A4_PAGE.content_width)


def test_items_table_takes_remaining_height() -> None:
    geo = plan_page(A4_PAGE, TITLE_H)
    assert geo.items.y == geo.bill_to.bottom + 8
    assert math.isclose(geo.items.height, 333.41, abs_tol=0.01)
    assert math.isclose(geo.footer.y, A4_PAGE.height - 36 - 12)


def test_items_table_never_below_minimum() -> None:
    small = PageSpec(width=400, height=500)
    geo = plan_page(small, TITLE_H)
    assert geo.items.height == TABLE_MIN_H


def test_taller_title_shrinks_table() -> None:
    short = plan_page(A4_PAGE, TITLE_H)
    tall = plan_page(A4_PAGE, TITLE_H * 2)
    assert tall.items.height < short.items.height
    assert tall.totals.y == short.totals.y
