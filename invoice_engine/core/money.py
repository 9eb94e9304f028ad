# invoice_engine/core/money.py

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Iterable, Optional, Tuple, Union

from invoice_engine.core.errors import InvalidAmount
from invoice_engine.models import ChargeSet, InvoiceTotals, LineItem

Number = Union[Decimal, int, float, str]

ZERO = Decimal("0")
HUNDRED = Decimal("100")
CENT = Decimal("0.01")
WHOLE = Decimal("1")


def to_amount(value: Number, field: str = "amount") -> Decimal:
    """
    Converts a quantity, price, rate or charge to Decimal.

    Floats go through str() so that 33.33 stays 33.33 instead of its binary
    expansion. Booleans, non-numeric strings, NaN, infinities and negative
    values raise InvalidAmount.
    """
    if isinstance(value, bool):
        raise InvalidAmount(f"{field} must be a number, got {value!r}.")
    if isinstance(value, Decimal):
        amount = value
    elif isinstance(value, (int, float, str)):
        try:
            amount = Decimal(str(value).strip())
        except InvalidOperation:
            raise InvalidAmount(f"{field} must be a number, got {value!r}.")
    else:
        raise InvalidAmount(f"{field} must be a number, got {type(value).__name__}.")

    if not amount.is_finite():
        raise InvalidAmount(f"{field} must be finite, got {value!r}.")
    if amount < 0:
        raise InvalidAmount(f"{field} cannot be negative, got {value!r}.")
    return amount


def compute_line_total(quantity: Number, unit_price: Number) -> Decimal:
    """quantity × unit_price at full precision; rounding happens only for display."""
    return to_amount(quantity, "quantity") * to_amount(unit_price, "unit price")


def compute_line_gst(total: Number, gst_rate: Number, gst_enabled: bool) -> Decimal:
    total = to_amount(total, "line total")
    rate = to_amount(gst_rate, "GST rate")
    if not gst_enabled or rate == 0:
        return ZERO
    return total * rate / HUNDRED


def round_off(grand_total: Number) -> Tuple[Decimal, Decimal]:
    """
    Rounds a grand total to the nearest whole rupee, half away from zero.

    Returns (rounded_total, delta) where rounded_total == grand_total + delta.
    """
    grand_total = to_amount(grand_total, "grand total")
    rounded = grand_total.quantize(WHOLE, rounding=ROUND_HALF_UP)
    return rounded, rounded - grand_total


def _display_rate(rate: Decimal) -> Decimal:
    # 6.00 -> 6, 2.50 -> 2.5, and never an exponent form such as 6E+1
    rate = rate.normalize()
    if rate == rate.to_integral_value():
        return rate.quantize(WHOLE)
    return rate


def halved_gst_rates(items: Iterable[LineItem]) -> Tuple[Decimal, ...]:
    """Distinct non-zero line GST rates, each halved for the SGST/CGST label, ascending."""
    rates = {to_amount(item.gst_rate, "GST rate") for item in items}
    return tuple(sorted(_display_rate(rate / 2) for rate in rates if rate != 0))


def compute_invoice_totals(items: Iterable[LineItem], charges: ChargeSet, gst_enabled: bool) -> InvoiceTotals:
    """
    Computes every invoice total from the line items and charges.

    The aggregate GST is split into two equal halves (SGST and CGST). The rate
    label only lists the halved distinct line rates; the amount itself is not
    apportioned by rate.
    """
    items = list(items)
    line_totals = tuple(compute_line_total(item.quantity, item.unit_price) for item in items)
    line_gst = tuple(
        compute_line_gst(total, item.gst_rate, gst_enabled)
        for item, total in zip(items, line_totals)
    )

    subtotal = sum(line_totals, ZERO)
    charges_total = (
        to_amount(charges.transport, "transport")
        + to_amount(charges.packaging, "packaging")
        + to_amount(charges.other, "other charges")
    )
    gst_amount = sum(line_gst, ZERO) if gst_enabled else ZERO
    grand_total = subtotal + charges_total + gst_amount
    rounded_total, delta = round_off(grand_total)
    half = gst_amount / 2

    return InvoiceTotals(
        line_totals=line_totals,
        line_gst=line_gst,
        subtotal=subtotal,
        charges_total=charges_total,
        gst_amount=gst_amount,
        sgst_amount=half,
        cgst_amount=half,
        gst_rates=halved_gst_rates(items),
        grand_total=grand_total,
        rounded_total=rounded_total,
        round_off=delta,
        gst_enabled=gst_enabled,
        line_count=len(items),
    )


def format_amount(value: Number) -> str:
    """
    Two decimals with Indian digit grouping: 1234567.5 -> '12,34,567.50'.
    Signed values are accepted here since this only formats.
    """
    amount = Decimal(str(value)) if not isinstance(value, Decimal) else value
    amount = amount.quantize(CENT, rounding=ROUND_HALF_UP)
    sign = "-" if amount < 0 else ""
    whole, _, fraction = f"{abs(amount):f}".partition(".")

    if len(whole) > 3:
        head, tail = whole[:-3], whole[-3:]
        groups = []
        while len(head) > 2:
            groups.insert(0, head[-2:])
            head = head[:-2]
        if head:
            groups.insert(0, head)
        whole = ",".join(groups + [tail])
    return f"{sign}{whole}.{fraction}"


def format_signed(value: Number) -> str:
    """Round-off style formatting: explicit '+' when non-negative ('+0.40', '-0.25')."""
    amount = Decimal(str(value)) if not isinstance(value, Decimal) else value
    amount = amount.quantize(CENT, rounding=ROUND_HALF_UP)
    if amount >= 0:
        return f"+{abs(amount):.2f}"
    return f"-{abs(amount):.2f}"


def format_quantity(quantity: Decimal, unit: Optional[str] = None) -> str:
    text = f"{_display_rate(quantity):f}"
    return f"{text} {unit}" if unit else text
