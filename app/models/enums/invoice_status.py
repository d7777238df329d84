from enum import Enum


class InvoiceStatus(str, Enum):
    draft = "draft"
    sent = "sent"
    viewed = "viewed"
    partially_paid = "partially_paid"
    fully_paid = "fully_paid"
    overdue = "overdue"
    cancelled = "cancelled"


# Statuses that never count as outstanding
SETTLED_INVOICE_STATUSES = frozenset({InvoiceStatus.fully_paid, InvoiceStatus.cancelled})


class PaymentMethod(str, Enum):
    cash = "cash"
    bank_transfer = "bank_transfer"
    check = "check"
    credit_card = "credit_card"
    other = "other"


class CurrencyCode(str, Enum):
    USD = "USD"
    CAD = "CAD"
    AED = "AED"
