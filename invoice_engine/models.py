# invoice_engine/models.py

from pydantic import BaseModel, ConfigDict, Field, model_validator
from typing import List, Optional, Tuple
from decimal import Decimal
from enum import Enum
import datetime

# Units sold by weight; every other unit is counted in whole pieces.
WEIGHT_UNITS = {"kg"}


class Party(BaseModel):
    """
    A billing, shipping or supplier party as printed on a bill.
    Every field is optional, but a party must carry a contact name or a shop name.
    """
    model_config = ConfigDict(frozen=True)

    name: Optional[str] = Field(None, description="Contact person name.")
    shop_name: Optional[str] = Field(None, description="Shop / business name.")
    phone: Optional[str] = Field(None, description="Phone number.")
    email: Optional[str] = Field(None, description="Email address.")
    gstin: Optional[str] = Field(None, description="GST identification number.")
    address: Optional[str] = Field(None, description="Free-text street address.")
    city: Optional[str] = None
    state: Optional[str] = None
    postal_code: Optional[str] = None

    @model_validator(mode="after")
    def _require_identity(self) -> "Party":
        if not (self.name or "").strip() and not (self.shop_name or "").strip():
            raise ValueError("A party needs at least a contact name or a shop name.")
        return self


class InvoiceHeader(BaseModel):
    model_config = ConfigDict(frozen=True)

    invoice_number: str = Field(..., min_length=1, description="Pre-assigned invoice number, e.g. INV-2025-00001.")
    bill_date: datetime.date = Field(..., description="Date the bill was issued.")
    lorry_number: Optional[str] = Field(None, description="Lorry / vehicle identifier carrying the goods.")


class LineItem(BaseModel):
    """
    A single product line. Amounts are not range-checked here; the arithmetic
    layer rejects negative or non-finite values with InvalidAmount.
    """
    model_config = ConfigDict(frozen=True)

    product_name: str = Field(..., description="Product name printed in the description column.")
    hsn: str = Field("", description="HSN classification code.")
    quantity: Decimal = Field(..., description="Quantity; fractional only for weight-based units.")
    unit_price: Decimal = Field(..., description="Price per unit.")
    gst_rate: Decimal = Field(Decimal("0"), description="GST rate in percent.")
    unit: Optional[str] = Field(None, description="Selling unit, e.g. 'kg' or 'piece'.")

    @model_validator(mode="after")
    def _check_quantity_step(self) -> "LineItem":
        if self.unit and self.unit.lower() not in WEIGHT_UNITS and self.quantity.is_finite():
            if self.quantity != self.quantity.to_integral_value():
                raise ValueError(f"Quantity for '{self.product_name}' must be a whole number of {self.unit}.")
        return self


class ChargeSet(BaseModel):
    """Surcharges added on top of the line items. Not subject to GST."""
    model_config = ConfigDict(frozen=True)

    transport: Decimal = Decimal("0")
    packaging: Decimal = Decimal("0")
    other: Decimal = Decimal("0")


class SignerName(str, Enum):
    PROPRIETOR = "proprietor"
    MANAGER = "manager"


class SignatureOptions(BaseModel):
    model_config = ConfigDict(frozen=True)

    enabled: bool = False
    signer: Optional[SignerName] = None

    @model_validator(mode="after")
    def _require_signer(self) -> "SignatureOptions":
        if self.enabled and self.signer is None:
            raise ValueError("A signer must be selected when the signature is enabled.")
        return self


class InvoiceRequest(BaseModel):
    """
    Everything needed to render one invoice: the input contract of the core.
    """
    model_config = ConfigDict(frozen=True)

    header: InvoiceHeader
    bill_to: Party
    ship_to: Party
    items: Tuple[LineItem, ...] = ()
    charges: ChargeSet = ChargeSet()
    gst_enabled: bool = True
    signature: SignatureOptions = SignatureOptions()


class InvoiceTotals(BaseModel):
    """
    Totals derived from the line items and charges. Never stored on its own.
    """
    model_config = ConfigDict(frozen=True)

    line_totals: Tuple[Decimal, ...]
    line_gst: Tuple[Decimal, ...]
    subtotal: Decimal
    charges_total: Decimal
    gst_amount: Decimal
    sgst_amount: Decimal
    cgst_amount: Decimal
    gst_rates: Tuple[Decimal, ...] = Field(..., description="Distinct non-zero line GST rates, halved, ascending.")
    grand_total: Decimal
    rounded_total: Decimal
    round_off: Decimal
    gst_enabled: bool
    line_count: int

    @property
    def gst_label(self) -> str:
        """Rate label shared by the SGST and CGST rows, e.g. '2.5%, 6%'."""
        if not self.gst_rates:
            return "0%"
        return ", ".join(f"{rate:f}%" for rate in self.gst_rates)


class CompanyProfile(BaseModel):
    """The seller printed in the header and footer of every page."""
    model_config = ConfigDict(frozen=True)

    name: str
    tagline: Optional[str] = None
    address: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    terms: Tuple[str, ...] = ()


class RenderResult(BaseModel):
    """The output contract: the finished PDF plus its suggested file name."""
    file_name: str
    content: bytes
    success: bool
    page_count: int
    archived_as: Optional[str] = None


# --- Drafts accepted by the API before assembly ---

class LineDraft(BaseModel):
    """
    A line as entered by the user. Missing catalog fields are autofilled from product_db.
    """
    product_name: str
    quantity: Decimal
    unit_price: Optional[Decimal] = None
    hsn: Optional[str] = None
    gst_rate: Optional[Decimal] = None
    unit: Optional[str] = None


class InvoiceDraft(BaseModel):
    bill_date: Optional[datetime.date] = Field(None, description="Defaults to today.")
    lorry_number: Optional[str] = None
    bill_to: Party
    ship_to: Optional[Party] = Field(None, description="Defaults to the billing party.")
    items: List[LineDraft] = Field(default_factory=list)
    charges: ChargeSet = ChargeSet()
    gst_enabled: bool = True
    signature: SignatureOptions = SignatureOptions()


class StoredInvoice(BaseModel):
    id: str
    invoice: InvoiceRequest
    totals: InvoiceTotals
    created_at: datetime.datetime


# --- Purchase bills ---

class PaymentStatus(str, Enum):
    FULL_PAID = "full_paid"
    FULL_CREDIT = "full_credit"
    PARTIAL_PAID = "partial_paid"


class PaymentMethod(str, Enum):
    CASH = "cash"
    ONLINE = "online"
    PARTIAL = "partial"  # split between cash and online


class PaymentDetails(BaseModel):
    status: PaymentStatus
    method: Optional[PaymentMethod] = None
    payment_date: Optional[datetime.date] = Field(None, description="Defaults to the bill date.")
    paid_amount: Optional[Decimal] = None
    cash_amount: Optional[Decimal] = None
    online_amount: Optional[Decimal] = None


class PaymentSummary(BaseModel):
    model_config = ConfigDict(frozen=True)

    status: PaymentStatus
    method: Optional[PaymentMethod]
    payment_date: datetime.date
    payable: Decimal
    paid: Decimal
    balance: Decimal


class PurchaseDraft(BaseModel):
    supplier_bill_number: str = Field(..., min_length=1, description="Bill number printed by the supplier.")
    bill_date: datetime.date
    supplier: Party
    items: List[LineItem] = Field(default_factory=list)
    charges: ChargeSet = ChargeSet()
    gst_enabled: bool = True
    payment: PaymentDetails


class StoredPurchase(BaseModel):
    id: str
    purchase: PurchaseDraft
    totals: InvoiceTotals
    payment: PaymentSummary
    created_at: datetime.datetime
