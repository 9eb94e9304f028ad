import datetime
from decimal import Decimal

import pytest
from pydantic import ValidationError

from invoice_engine.core.assembly import assemble_invoice, autofill_line, find_product
from invoice_engine.core.errors import InvalidAmount
from invoice_engine.models import InvoiceDraft, LineDraft, LineItem, Party


def test_find_product_ignores_case_and_spaces():
    assert find_product("  Grow BAG ")["name"] == "Grow Bag"
    assert find_product("Banana Fibre") is None


def test_autofill_from_catalog():
    item = autofill_line(LineDraft(product_name="grow bag", quantity=Decimal("2")))

    assert item.product_name == "Grow Bag"
    assert item.hsn == "53050040"
    assert item.unit_price == Decimal("120.00")
    assert item.gst_rate == Decimal("12")
    assert item.unit == "piece"


def test_draft_values_win_over_catalog():
    draft = LineDraft(product_name="Grow Bag", quantity=Decimal("1"), unit_price=Decimal("99"), gst_rate=Decimal("5"))
    item = autofill_line(draft)

    assert item.unit_price == Decimal("99")
    assert item.gst_rate == Decimal("5")


def test_unknown_product_needs_a_price():
    with pytest.raises(InvalidAmount):
        autofill_line(LineDraft(product_name="Banana Fibre", quantity=Decimal("1")))

    item = autofill_line(LineDraft(product_name="Banana Fibre", quantity=Decimal("1"), unit_price=Decimal("15")))
    assert item.product_name == "Banana Fibre"
    assert item.hsn == ""
    assert item.gst_rate == 0


def test_piece_units_need_whole_quantities():
    with pytest.raises(ValidationError):
        autofill_line(LineDraft(product_name="Grow Bag", quantity=Decimal("1.5")))

    item = autofill_line(LineDraft(product_name="Coco Peat Loose", quantity=Decimal("2.75")))
    assert item.quantity == Decimal("2.75")
    assert item.unit == "kg"


def test_line_item_without_unit_accepts_fractions():
    item = LineItem(product_name="Sample", quantity=Decimal("0.5"), unit_price=Decimal("10"))
    assert item.quantity == Decimal("0.5")


def test_party_needs_a_name():
    with pytest.raises(ValidationError):
        Party(phone="9876543210")
    assert Party(name="Ravi").shop_name is None


def test_assemble_invoice_defaults(customer):
    draft = InvoiceDraft(
        bill_to=customer,
        lorry_number="   ",
        items=[LineDraft(product_name="Coir Doormat", quantity=Decimal("3"))],
    )
    invoice = assemble_invoice(draft, "INV-2025-00007", today=datetime.date(2025, 6, 30))

    assert invoice.header.invoice_number == "INV-2025-00007"
    assert invoice.header.bill_date == datetime.date(2025, 6, 30)
    assert invoice.header.lorry_number is None
    assert invoice.ship_to == customer
    assert invoice.items[0].product_name == "Coir Doormat"


def test_assemble_invoice_keeps_given_values(customer):
    warehouse = Party(shop_name="Green Leaf Warehouse", city="Pollachi")
    draft = InvoiceDraft(
        bill_date=datetime.date(2025, 1, 15),
        bill_to=customer,
        ship_to=warehouse,
        lorry_number=" TN-38-AB-1234 ",
        gst_enabled=False,
    )
    invoice = assemble_invoice(draft, "INV-2025-00001", today=datetime.date(2025, 6, 30))

    assert invoice.header.bill_date == datetime.date(2025, 1, 15)
    assert invoice.header.lorry_number == "TN-38-AB-1234"
    assert invoice.ship_to == warehouse
    assert invoice.items == ()
    assert not invoice.gst_enabled
