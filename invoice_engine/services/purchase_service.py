# invoice_engine/services/purchase_service.py

import datetime
from decimal import Decimal

from invoice_engine.core.errors import InvalidPayment
from invoice_engine.core.money import ZERO, to_amount
from invoice_engine.models import PaymentDetails, PaymentMethod, PaymentStatus, PaymentSummary


def _split_total(payment: PaymentDetails) -> Decimal:
    if payment.cash_amount is None or payment.online_amount is None:
        raise InvalidPayment("A split payment needs both a cash amount and an online amount.")
    return to_amount(payment.cash_amount, "cash amount") + to_amount(payment.online_amount, "online amount")


def settle_payment(payable: Decimal, payment: PaymentDetails, bill_date: datetime.date) -> PaymentSummary:
    """
    Validates the payment recorded against a purchase bill and works out the
    outstanding balance.

    - full_credit: nothing paid, the whole payable stays on credit.
    - full_paid: cash or online covers the payable; a split payment must add
      up to exactly the payable.
    - partial_paid: something strictly between zero and the payable is paid,
      the rest stays on credit.

    Raises:
        InvalidPayment: if the amounts do not fit the chosen status.
    """
    payable = to_amount(payable, "payable")
    payment_date = payment.payment_date or bill_date

    if payment.status == PaymentStatus.FULL_CREDIT:
        paid = ZERO
        method = None
    elif payment.status == PaymentStatus.FULL_PAID:
        method = payment.method or PaymentMethod.CASH
        if method == PaymentMethod.PARTIAL and _split_total(payment) != payable:
            raise InvalidPayment(f"Cash and online amounts must add up to {payable}.")
        paid = payable
    else:
        method = payment.method or PaymentMethod.CASH
        if method == PaymentMethod.PARTIAL:
            paid = _split_total(payment)
        elif payment.paid_amount is not None:
            paid = to_amount(payment.paid_amount, "paid amount")
        else:
            raise InvalidPayment("A partial payment needs a paid amount.")
        if not ZERO < paid < payable:
            raise InvalidPayment(f"A partial payment must be more than 0 and less than {payable}.")

    return PaymentSummary(
        status=payment.status,
        method=method,
        payment_date=payment_date,
        payable=payable,
        paid=paid,
        balance=payable - paid,
    )
