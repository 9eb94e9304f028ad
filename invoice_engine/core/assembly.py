# invoice_engine/core/assembly.py

from datetime import date
from decimal import Decimal
from typing import Dict, Optional

from invoice_engine.config import product_db
from invoice_engine.core.errors import InvalidAmount
from invoice_engine.models import InvoiceDraft, InvoiceHeader, InvoiceRequest, LineDraft, LineItem


def find_product(product_name: str, catalog: Dict[str, dict] = product_db) -> Optional[dict]:
    """Looks a product up in the catalog by case-insensitive name."""
    return catalog.get(product_name.lower().strip())


def autofill_line(line: LineDraft, catalog: Dict[str, dict] = product_db) -> LineItem:
    """
    Completes a draft line from the product catalog. Values given in the
    draft always win over catalog values.

    Raises:
        InvalidAmount: if no unit price is given and the product is not in the catalog.
    """
    product = find_product(line.product_name, catalog) or {}
    unit_price = line.unit_price if line.unit_price is not None else product.get("unit_price")
    if unit_price is None:
        raise InvalidAmount(f"No price given for '{line.product_name}' and it is not in the catalog.")

    gst_rate = line.gst_rate if line.gst_rate is not None else product.get("gst_rate", "0")
    return LineItem(
        product_name=product.get("name", line.product_name.strip()),
        hsn=line.hsn if line.hsn is not None else product.get("hsn", ""),
        quantity=line.quantity,
        unit_price=Decimal(str(unit_price)),
        gst_rate=Decimal(str(gst_rate)),
        unit=line.unit or product.get("unit"),
    )


def assemble_invoice(
    draft: InvoiceDraft,
    invoice_number: str,
    catalog: Dict[str, dict] = product_db,
    today: Optional[date] = None,
) -> InvoiceRequest:
    """
    Turns a draft from the billing form into a complete invoice.

    The shipping party defaults to the billing party, the bill date to today,
    and a blank lorry number is dropped.

    Args:
        draft (InvoiceDraft): The invoice as entered.
        invoice_number (str): The number assigned by the store.
        catalog (dict): Product catalog used to autofill lines.
        today (date, optional): Date used when the draft has none.

    Returns:
        InvoiceRequest: The immutable record handed to the rendering core.
    """
    lorry_number = (draft.lorry_number or "").strip() or None
    header = InvoiceHeader(
        invoice_number=invoice_number,
        bill_date=draft.bill_date or today or date.today(),
        lorry_number=lorry_number,
    )
    return InvoiceRequest(
        header=header,
        bill_to=draft.bill_to,
        ship_to=draft.ship_to or draft.bill_to,
        items=tuple(autofill_line(line, catalog) for line in draft.items),
        charges=draft.charges,
        gst_enabled=draft.gst_enabled,
        signature=draft.signature,
    )
