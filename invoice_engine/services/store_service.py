# invoice_engine/services/store_service.py

import logging
import re
import uuid
from datetime import date, datetime
from typing import Dict, List, Optional

from invoice_engine.core.assembly import assemble_invoice
from invoice_engine.core.money import compute_invoice_totals
from invoice_engine.models import InvoiceDraft, PurchaseDraft, StoredInvoice, StoredPurchase
from invoice_engine.services.purchase_service import settle_payment

logger = logging.getLogger(__name__)

INVOICE_NUMBER_PATTERN = re.compile(r"^INV-(\d{4})-(\d+)$")


class InMemoryInvoiceStore:
    """
    Volatile storage for invoices and purchase bills. Everything is lost when
    the process exits; swap in a real database for anything beyond a demo.
    """
    def __init__(self):
        self._invoices: Dict[str, StoredInvoice] = {}
        self._purchases: Dict[str, StoredPurchase] = {}

    def next_invoice_number(self, today: Optional[date] = None) -> str:
        """
        The next number of the year-scoped sequence, INV-<year>-<5-digit seq>.
        """
        year = (today or date.today()).year
        issued = [
            int(match.group(2))
            for match in (INVOICE_NUMBER_PATTERN.match(number) for number in self._invoices)
            if match and int(match.group(1)) == year
        ]
        return f"INV-{year}-{max(issued, default=0) + 1:05d}"

    def create_invoice(self, draft: InvoiceDraft, today: Optional[date] = None) -> StoredInvoice:
        """
        Assigns the next invoice number, assembles the draft and stores it
        together with its totals.

        Raises:
            InvalidAmount: if any amount in the draft is invalid; nothing is stored then.
        """
        today = today or date.today()
        invoice = assemble_invoice(draft, self.next_invoice_number(today), today=today)
        totals = compute_invoice_totals(invoice.items, invoice.charges, invoice.gst_enabled)
        stored = StoredInvoice(
            id=str(uuid.uuid4()),
            invoice=invoice,
            totals=totals,
            created_at=datetime.now(),
        )
        self._invoices[invoice.header.invoice_number] = stored
        logger.info("Created invoice %s (grand total %s)", invoice.header.invoice_number, totals.rounded_total)
        return stored

    def get_invoice(self, invoice_number: str) -> Optional[StoredInvoice]:
        return self._invoices.get(invoice_number)

    def list_invoices(self) -> List[StoredInvoice]:
        return sorted(self._invoices.values(), key=lambda stored: stored.created_at, reverse=True)

    def create_purchase(self, draft: PurchaseDraft) -> StoredPurchase:
        totals = compute_invoice_totals(draft.items, draft.charges, draft.gst_enabled)
        payment = settle_payment(totals.rounded_total, draft.payment, draft.bill_date)
        stored = StoredPurchase(
            id=str(uuid.uuid4()),
            purchase=draft,
            totals=totals,
            payment=payment,
            created_at=datetime.now(),
        )
        self._purchases[stored.id] = stored
        logger.info(
            "Recorded purchase bill %s (%s, balance %s)",
            draft.supplier_bill_number, payment.status.value, payment.balance,
        )
        return stored

    def get_purchase(self, purchase_id: str) -> Optional[StoredPurchase]:
        return self._purchases.get(purchase_id)

    def pending_purchases(self) -> List[StoredPurchase]:
        """Purchase bills that still carry a credit balance."""
        return [stored for stored in self._purchases.values() if stored.payment.balance > 0]


invoice_store = InMemoryInvoiceStore()
