from decimal import Decimal

import pytest

from src.daycare_system.daycare_system.billing.invoicing import apply_discount, format_invoice_number
from src.daycare_system.daycare_system.core.enums import DiscountKind
from src.daycare_system.daycare_system.core.exceptions import ValidationError


def test_percentage_discount():
    assert apply_discount(Decimal("100"), "percentage", Decimal("20")) == Decimal("80")


def test_fixed_discount():
    assert apply_discount(Decimal("100"), DiscountKind.FIXED, Decimal("30")) == Decimal("70")


def test_discount_never_goes_below_zero():
    assert apply_discount(Decimal("50"), "fixed", Decimal("60")) == Decimal("0")
    assert apply_discount(Decimal("50"), "percentage", Decimal("150")) == Decimal("0")


def test_unknown_discount_kind_is_rejected():
    with pytest.raises(ValidationError):
        apply_discount(Decimal("100"), "coupon", Decimal("10"))


def test_negative_discount_is_rejected():
    with pytest.raises(ValidationError):
        apply_discount(Decimal("100"), "fixed", Decimal("-5"))


def test_invoice_number_is_zero_padded():
    assert format_invoice_number(1) == "INV-000001"
    assert format_invoice_number(123456) == "INV-123456"
