import re

import pytest

from pointart_api.services.invoices import (
    calculate_invoice_total,
    calculate_line_amount,
    format_currency,
    generate_invoice_number,
    generate_reference_number,
    number_to_words,
)
from pointart_api.schemas.invoices import InvoiceItemIn


@pytest.mark.parametrize(
    "amount, words",
    [
        (0, "Zero Shillings Only"),
        (1, "One Shillings Only"),
        (15, "Fifteen Shillings Only"),
        (40, "Forty Shillings Only"),
        (115, "One Hundred Fifteen Shillings Only"),
        (150000, "One Hundred Fifty Thousand Shillings Only"),
        (1_000_001, "One Million One Shillings Only"),
        (2_500_000_000, "Two Billion Five Hundred Million Shillings Only"),
        (1_000_000_000_000, "One Thousand Billion Shillings Only"),
    ],
)
def test_number_to_words(amount, words):
    assert number_to_words(amount) == words


def test_number_to_words_rounds_half_up():
    assert number_to_words(0.5) == "One Shillings Only"
    assert number_to_words(1499.49) == "One Thousand Four Hundred Ninety Nine Shillings Only"


def test_number_to_words_never_contains_digits():
    for amount in list(range(0, 2000, 7)) + [999_999, 1_234_567, 987_654_321_012]:
        assert not re.search(r"\d", number_to_words(amount))


def test_number_to_words_rejects_negative_and_nan():
    with pytest.raises(ValueError):
        number_to_words(-1)
    with pytest.raises(ValueError):
        number_to_words(float("nan"))


def test_format_currency():
    assert format_currency(1500) == "UGX 1,500"
    assert format_currency(1234.5) == "UGX 1,234.5"
    assert format_currency(None) == "UGX 0"
    assert format_currency(0) == "UGX 0"


def test_line_and_invoice_totals():
    assert calculate_line_amount(3, 333.333) == 1000.0
    items = [InvoiceItemIn(particulars="Frame", quantity=2, rate=15000), {"quantity": 1.5, "rate": 1000}]
    assert calculate_invoice_total(items) == 31500.0


def test_generated_numbers_have_fixed_width():
    assert re.fullmatch(r"\d{5}", generate_invoice_number())
    assert re.fullmatch(r"\d{10}", generate_reference_number())
