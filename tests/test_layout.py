from decimal import Decimal

import pytest
from reportlab.lib.units import mm

from conftest import make_item, make_request
from invoice_engine.core.money import compute_invoice_totals
from invoice_engine.models import ChargeSet, Party, SignatureOptions, SignerName
from invoice_engine.services.drawing import ImageRun, Line, TextRun, text_width
from invoice_engine.services.layout_service import (
    CELL_PADDING, COLUMNS, LEFT, PAGE_HEIGHT, TABLE_BREAK_Y, TABLE_FONT_SIZE, _cell_x, layout_invoice, totals_rows,
)
from invoice_engine.services.pdf_service import render_document


def _layout(request, company):
    totals = compute_invoice_totals(request.items, request.charges, request.gst_enabled)
    return layout_invoice(request, totals, company)


def _texts(page):
    return [command.text for command in page.commands if isinstance(command, TextRun)]


def _images(page, asset):
    return [command for command in page.commands if isinstance(command, ImageRun) and command.asset == asset]


def _many_items(count):
    return [make_item(f"Product {i:02d}", quantity="2", price="10", rate="5") for i in range(1, count + 1)]


def test_layout_is_deterministic(customer, company, scenario_a_items, assets):
    request = make_request(customer, scenario_a_items, lorry_number="TN-38-AB-1234")

    first, second = _layout(request, company), _layout(request, company)
    assert first == second
    assert render_document(first, assets) == render_document(second, assets)


def test_totals_rows_scenario_a(scenario_a_items):
    totals = compute_invoice_totals(scenario_a_items, ChargeSet(), gst_enabled=True)
    rows = totals_rows(totals, ChargeSet())

    assert [(row.label, row.value) for row in rows] == [
        ("Subtotal", "250.00"),
        ("SGST (2.5%)", "5.00"),
        ("CGST (2.5%)", "5.00"),
        ("Round Off", "+0.00"),
        ("Grand Total", "260.00"),
    ]
    assert rows[-1].style == "grand"


def test_totals_rows_show_only_positive_charges():
    items = [make_item(quantity="1", price="199.60")]
    charges = ChargeSet(transport=Decimal("50"), packaging=Decimal("0"), other=Decimal("0"))
    totals = compute_invoice_totals(items, charges, gst_enabled=False)

    labels = [row.label for row in totals_rows(totals, charges)]
    assert labels == ["Subtotal", "Transport", "Round Off", "Grand Total"]


def test_empty_invoice_has_no_gst_rows(customer, company):
    totals = compute_invoice_totals([], ChargeSet(), gst_enabled=True)
    labels = [row.label for row in totals_rows(totals, ChargeSet())]
    assert labels == ["Subtotal", "Round Off", "Grand Total"]

    document = _layout(make_request(customer), company)
    assert document.page_count == 1


def test_gst_disabled_invoice(customer, company, scenario_a_items):
    document = _layout(make_request(customer, scenario_a_items, gst_enabled=False), company)
    texts = _texts(document.pages[0])

    assert "INVOICE" in texts
    assert "TAX INVOICE" not in texts
    assert not any(text.startswith(("SGST", "CGST")) for text in texts)
    assert "Amount in words: Two Hundred Fifty Rupees only" in texts


def test_single_page_invoice_contents(customer, company, scenario_a_items):
    document = _layout(make_request(customer, scenario_a_items, lorry_number="TN-38-AB-1234"), company)
    assert document.page_count == 1
    texts = _texts(document.pages[0])

    for expected in (
        "TAX INVOICE", "No: INV-2025-00001", "Date: 01-04-2025", "BILL TO", "SHIP TO",
        "Green Leaf Nursery", "Coimbatore, Tamil Nadu - 641001", "GSTIN: ", "33ABCDE1234F1Z5",
        "SGST (2.5%)", "Grand Total", "260.00",
        "Amount in words: Two Hundred Sixty Rupees only", "Lorry/Vehicle No: TN-38-AB-1234",
        "Terms & Conditions:", "For AYESHA Coco Pith", "Authorized Signatory",
    ):
        assert expected in texts


def test_vehicle_line_omitted_without_lorry_number(customer, company, scenario_a_items):
    document = _layout(make_request(customer, scenario_a_items), company)
    assert not any(text.startswith("Lorry/Vehicle No") for text in _texts(document.pages[0]))


def test_empty_party_fields_are_omitted(company, scenario_a_items):
    party = Party(shop_name="Green Leaf Nursery")
    document = _layout(make_request(party, scenario_a_items), company)
    page = document.pages[0]

    # only the company contact line carries icons
    assert len(_images(page, "phone")) == 1
    assert len(_images(page, "email")) == 1
    assert "GSTIN: " not in _texts(page)


def test_party_contact_icons(customer, company, scenario_a_items):
    document = _layout(make_request(customer, scenario_a_items), company)
    # company header plus both party boxes
    assert len(_images(document.pages[0], "phone")) == 3


def test_footer_is_pinned_to_the_bottom(customer, company, scenario_a_items):
    document = _layout(make_request(customer, scenario_a_items), company)
    terms = [
        command for command in document.pages[0].commands
        if isinstance(command, TextRun) and command.text == "Terms & Conditions:"
    ]
    assert len(terms) == 1
    assert terms[0].y == pytest.approx(PAGE_HEIGHT - 42 * mm + 4 * mm)


def test_signature_is_composited_when_enabled(customer, company, scenario_a_items):
    signed = make_request(
        customer, scenario_a_items, signature=SignatureOptions(enabled=True, signer=SignerName.MANAGER),
    )
    page = _layout(signed, company).pages[-1]
    assert len(_images(page, "signature_manager")) == 1

    unsigned = _layout(make_request(customer, scenario_a_items), company).pages[-1]
    assert not any(
        isinstance(command, ImageRun) and command.asset.startswith("signature_") for command in unsigned.commands
    )


def test_long_invoice_spans_pages(customer, company):
    document = _layout(make_request(customer, _many_items(30)), company)
    assert document.page_count == 2

    for page in document.pages:
        texts = _texts(page)
        assert len(_images(page, "logo")) == 1
        assert "No: INV-2025-00001" in texts
        assert "Description" in texts

    serials = [
        command.text
        for page in document.pages
        for command in page.commands
        if isinstance(command, TextRun) and command.size == TABLE_FONT_SIZE and command.x == _cell_x(COLUMNS[0])
    ]
    assert serials == [str(i) for i in range(1, 31)]

    assert "Grand Total" in _texts(document.pages[-1])
    assert "Grand Total" not in _texts(document.pages[0])


def test_rows_never_cross_the_table_break(customer, company):
    document = _layout(make_request(customer, _many_items(60)), company)
    row_rules = [
        command
        for page in document.pages
        for command in page.commands
        if isinstance(command, Line) and command.x1 == LEFT and command.width == 0.3
    ]
    assert len(row_rules) == 60
    assert all(rule.y1 <= TABLE_BREAK_Y for rule in row_rules)


def test_totals_move_to_a_new_page_when_short_of_space(customer, company):
    document = _layout(make_request(customer, _many_items(18)), company)
    assert document.page_count == 2

    first, second = (_texts(page) for page in document.pages)
    assert "Product 18" in first
    assert "Subtotal" not in first
    assert "Subtotal" in second
    # no rows remain, so the table header is not repeated
    assert "Description" not in second
    assert "No: INV-2025-00001" in second


def test_footer_moves_to_a_new_page_when_it_would_cross_the_bottom(customer, company):
    charges = ChargeSet(transport=Decimal("150"), packaging=Decimal("40"), other=Decimal("10"))
    request = make_request(customer, _many_items(16), charges=charges, lorry_number="TN-38-AB-1234")
    document = _layout(request, company)
    assert document.page_count == 2

    first, last = document.pages
    assert "Lorry/Vehicle No: TN-38-AB-1234" in _texts(first)
    assert "Terms & Conditions:" not in _texts(first)
    assert "Authorized Signatory" not in _texts(first)

    texts = _texts(last)
    assert len(_images(last, "logo")) == 1
    assert "No: INV-2025-00001" in texts
    assert "Terms & Conditions:" in texts
    assert "Authorized Signatory" in texts
    # only the footer continues, so neither the table nor the totals repeat
    assert "Description" not in texts
    assert "Grand Total" not in texts


def test_large_amounts_shrink_instead_of_truncating(customer, company):
    request = make_request(customer, [make_item("Bulk Contract", quantity="1", price="100000000000")])
    page = _layout(request, company).pages[0]

    amount = "1,00,00,00,00,000.00"
    cells = {
        command.x: command
        for command in page.commands
        if isinstance(command, TextRun) and command.text == amount and command.size <= TABLE_FONT_SIZE
    }
    for column in (COLUMNS[4], COLUMNS[5]):
        cell = cells[_cell_x(column)]
        assert cell.size < TABLE_FONT_SIZE
        assert text_width(cell.text, cell.font, cell.size) <= column.width - 2 * CELL_PADDING + 0.01
    assert not any(text.endswith("...") and text.startswith("1,00") for text in _texts(page))
