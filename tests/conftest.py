import datetime
from decimal import Decimal

import pytest

from invoice_engine.config import ASSET_DIR
from invoice_engine.models import (
    ChargeSet, CompanyProfile, InvoiceHeader, InvoiceRequest, LineItem, Party, SignatureOptions,
)
from invoice_engine.services.asset_service import load_assets


@pytest.fixture(scope="session")
def assets():
    return load_assets(ASSET_DIR)


@pytest.fixture
def company():
    return CompanyProfile(
        name="AYESHA Coco Pith",
        tagline="Premium Coir Products",
        address="123 Garden Street, Chennai - 600001",
        phone="+91 98765 43210",
        email="info@ayeshacoco.com",
        terms=(
            "1. Payment due within 30 days of the bill date.",
            "2. Goods once sold cannot be returned or exchanged.",
            "3. Subject to Chennai jurisdiction only.",
        ),
    )


@pytest.fixture
def customer():
    return Party(
        name="Ravi Kumar",
        shop_name="Green Leaf Nursery",
        phone="9876543210",
        email="ravi@greenleaf.in",
        gstin="33ABCDE1234F1Z5",
        address="45 Market Road",
        city="Coimbatore",
        state="Tamil Nadu",
        postal_code="641001",
    )


def make_item(name="Coco Pith Block 5kg", quantity="1", price="100", rate="0", unit=None, hsn="53050040"):
    return LineItem(
        product_name=name,
        hsn=hsn,
        quantity=Decimal(quantity),
        unit_price=Decimal(price),
        gst_rate=Decimal(rate),
        unit=unit,
    )


def make_request(party, items=(), charges=None, gst_enabled=True, lorry_number=None, signature=None, ship_to=None):
    return InvoiceRequest(
        header=InvoiceHeader(
            invoice_number="INV-2025-00001",
            bill_date=datetime.date(2025, 4, 1),
            lorry_number=lorry_number,
        ),
        bill_to=party,
        ship_to=ship_to or party,
        items=tuple(items),
        charges=charges or ChargeSet(),
        gst_enabled=gst_enabled,
        signature=signature or SignatureOptions(),
    )


@pytest.fixture
def scenario_a_items():
    return [
        make_item("Item1", quantity="2", price="100", rate="5"),
        make_item("Item2", quantity="1", price="50", rate="0"),
    ]
