from datetime import date, timedelta
from decimal import Decimal

import pytest

from app.models.enums.invoice_status import InvoiceStatus, CurrencyCode
from app.services.billing.invoice_service import (
    calculate_vat,
    default_vat_rate,
    derive_invoice_status,
)

TODAY = date(2025, 6, 15)
D = Decimal


def test_vat_rounds_half_up_to_cents():
    assert calculate_vat(D("1000.00"), D("5")) == D("50.00")
    assert calculate_vat(D("10.10"), D("5")) == D("0.51")
    assert calculate_vat(D("999.99"), D("0")) == D("0.00")


def test_default_vat_rate_only_applies_to_aed():
    assert default_vat_rate(CurrencyCode.AED) == D("5")
    assert default_vat_rate(CurrencyCode.USD) == D("0")
    assert default_vat_rate(CurrencyCode.CAD) == D("0")


@pytest.mark.parametrize(
    "current, paid, due, expected",
    [
        (InvoiceStatus.draft, "0", None, InvoiceStatus.draft),
        (InvoiceStatus.sent, "0", None, InvoiceStatus.sent),
        (InvoiceStatus.partially_paid, "0", None, InvoiceStatus.sent),
        (InvoiceStatus.fully_paid, "0", None, InvoiceStatus.sent),
        (InvoiceStatus.draft, "400", None, InvoiceStatus.partially_paid),
        (InvoiceStatus.sent, "1050", None, InvoiceStatus.fully_paid),
        (InvoiceStatus.sent, "400", TODAY - timedelta(days=1), InvoiceStatus.overdue),
        (InvoiceStatus.sent, "1050", TODAY - timedelta(days=1), InvoiceStatus.fully_paid),
        (InvoiceStatus.sent, "400", TODAY, InvoiceStatus.partially_paid),
        (InvoiceStatus.draft, "0", TODAY - timedelta(days=3), InvoiceStatus.overdue),
        (InvoiceStatus.cancelled, "1050", None, InvoiceStatus.cancelled),
        (InvoiceStatus.cancelled, "0", TODAY - timedelta(days=3), InvoiceStatus.cancelled),
    ],
)
def test_derive_invoice_status(current, paid, due, expected):
    assert derive_invoice_status(current, D("1050.00"), D(paid), due, today=TODAY) == expected


def test_refund_back_to_zero_reopens_as_sent():
    status = derive_invoice_status(InvoiceStatus.fully_paid, D("1050.00"), D("0.00"), None, today=TODAY)
    assert status == InvoiceStatus.sent
