# invoice_engine/core/words.py

"""
Rupee amounts in words using the Indian numbering system
(crore = 1,00,00,000; lakh = 1,00,000; thousand = 1,000; hundred = 100).

    >>> to_words(1234567)
    'Twelve Lakh Thirty Four Thousand Five Hundred Sixty Seven Rupees'
"""

from decimal import ROUND_HALF_UP

from invoice_engine.core.money import CENT, Number, to_amount

ONES = [
    "", "One", "Two", "Three", "Four", "Five", "Six", "Seven", "Eight", "Nine",
    "Ten", "Eleven", "Twelve", "Thirteen", "Fourteen", "Fifteen", "Sixteen",
    "Seventeen", "Eighteen", "Nineteen",
]
TENS = ["", "", "Twenty", "Thirty", "Forty", "Fifty", "Sixty", "Seventy", "Eighty", "Ninety"]

CRORE = 10_000_000
LAKH = 100_000
THOUSAND = 1_000
HUNDRED = 100


def two_digit_words(n: int) -> str:
    """0-99 in words; 0 gives an empty string so callers can skip it."""
    if n < 20:
        return ONES[n]
    tens, ones = divmod(n, 10)
    return f"{TENS[tens]} {ONES[ones]}".strip()


def integer_words(n: int) -> str:
    """A whole number in Indian-system words, without currency. Empty for 0."""
    crore, n = divmod(n, CRORE)
    lakh, n = divmod(n, LAKH)
    thousand, n = divmod(n, THOUSAND)
    hundred, rest = divmod(n, HUNDRED)

    parts = []
    if crore:
        # above 99 crore the crore count itself needs lakh/thousand grouping
        crore_words = two_digit_words(crore) if crore < 100 else integer_words(crore)
        parts.append(f"{crore_words} Crore")
    if lakh:
        parts.append(f"{two_digit_words(lakh)} Lakh")
    if thousand:
        parts.append(f"{two_digit_words(thousand)} Thousand")
    if hundred:
        parts.append(f"{ONES[hundred]} Hundred")
    if rest:
        parts.append(two_digit_words(rest))
    return " ".join(parts)


def to_words(amount: Number) -> str:
    """
    Converts a non-negative rupee amount to words.

    Paise are the fractional part rounded half-up to two places and are only
    mentioned when non-zero:

        to_words(0)      -> 'Zero'
        to_words(100)    -> 'One Hundred Rupees'
        to_words(100.50) -> 'One Hundred Rupees and Fifty Paise'

    Raises InvalidAmount for negative or non-finite input.
    """
    value = to_amount(amount, "amount").quantize(CENT, rounding=ROUND_HALF_UP)
    if value == 0:
        return "Zero"

    rupees = int(value)
    paise = int((value - rupees) * 100)

    words = f"{integer_words(rupees) or 'Zero'} Rupees"
    if paise:
        words += f" and {two_digit_words(paise)} Paise"
    return " ".join(words.split())
