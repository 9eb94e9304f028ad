from decimal import Decimal

import pytest

from invoice_engine.core.errors import InvalidAmount
from invoice_engine.core.words import integer_words, to_words


@pytest.mark.parametrize("amount, expected", [
    (0, "Zero"),
    (1, "One Rupees"),
    (15, "Fifteen Rupees"),
    (100, "One Hundred Rupees"),
    (260, "Two Hundred Sixty Rupees"),
    (1001, "One Thousand One Rupees"),
    (100000, "One Lakh Rupees"),
    (1234567, "Twelve Lakh Thirty Four Thousand Five Hundred Sixty Seven Rupees"),
    (10000000, "One Crore Rupees"),
    (123456789, "Twelve Crore Thirty Four Lakh Fifty Six Thousand Seven Hundred Eighty Nine Rupees"),
])
def test_whole_rupees(amount, expected):
    assert to_words(amount) == expected


def test_paise_are_appended_when_non_zero():
    assert to_words(Decimal("100.50")) == "One Hundred Rupees and Fifty Paise"
    assert to_words("45.07") == "Forty Five Rupees and Seven Paise"
    assert to_words(Decimal("100.00")) == "One Hundred Rupees"


def test_paise_round_half_up():
    assert to_words(Decimal("10.005")) == "Ten Rupees and One Paise"
    assert to_words(Decimal("0.004")) == "Zero"


def test_amount_below_one_rupee():
    assert to_words(Decimal("0.75")) == "Zero Rupees and Seventy Five Paise"


def test_hundreds_of_crores():
    assert integer_words(1_250_000_000) == "One Hundred Twenty Five Crore"


def test_no_double_spaces():
    for amount in (20, 101, 110000, 20000020, 999999999):
        words = to_words(amount)
        assert "  " not in words
        assert words == words.strip()


@pytest.mark.parametrize("amount", [-1, Decimal("-0.01"), float("inf"), "twelve"])
def test_invalid_amounts(amount):
    with pytest.raises(InvalidAmount):
        to_words(amount)
