from enum import Enum


class ErrorCode(str, Enum):
    # ---------------- GENERIC ----------------
    VALIDATION_ERROR = "VALIDATION_ERROR"
    UNAUTHORIZED = "UNAUTHORIZED"
    PERMISSION_DENIED = "PERMISSION_DENIED"
    NOT_FOUND = "NOT_FOUND"
    CONFLICT = "CONFLICT"
    INTERNAL_ERROR = "INTERNAL_ERROR"

    # ---------------- PROFILES ----------------
    PROFILE_NOT_FOUND = "PROFILE_NOT_FOUND"
    PROFILE_INACTIVE = "PROFILE_INACTIVE"
    PROFILE_VERSION_CONFLICT = "PROFILE_VERSION_CONFLICT"

    # ---------------- VEHICLES ----------------
    VEHICLE_NOT_FOUND = "VEHICLE_NOT_FOUND"
    VEHICLE_VIN_EXISTS = "VEHICLE_VIN_EXISTS"
    VEHICLE_VERSION_CONFLICT = "VEHICLE_VERSION_CONFLICT"
    VEHICLE_SALE_PRICE_MISSING = "VEHICLE_SALE_PRICE_MISSING"

    # ---------------- EXPENSES ----------------
    EXPENSE_NOT_FOUND = "EXPENSE_NOT_FOUND"

    # ---------------- CUSTOMERS ----------------
    CUSTOMER_NOT_FOUND = "CUSTOMER_NOT_FOUND"
    CUSTOMER_EMAIL_EXISTS = "CUSTOMER_EMAIL_EXISTS"
    CUSTOMER_VERSION_CONFLICT = "CUSTOMER_VERSION_CONFLICT"

    # ---------------- INQUIRIES ----------------
    INQUIRY_NOT_FOUND = "INQUIRY_NOT_FOUND"

    # ---------------- COMMUNICATIONS ----------------
    COMMUNICATION_NOT_FOUND = "COMMUNICATION_NOT_FOUND"

    # ---------------- INVOICES ----------------
    INVOICE_NOT_FOUND = "INVOICE_NOT_FOUND"
    INVOICE_INVALID_STATE = "INVOICE_INVALID_STATE"
    INVOICE_VERSION_CONFLICT = "INVOICE_VERSION_CONFLICT"
    INVOICE_HAS_PAYMENTS = "INVOICE_HAS_PAYMENTS"

    # ---------------- PAYMENTS ----------------
    PAYMENT_NOT_FOUND = "PAYMENT_NOT_FOUND"
    PAYMENT_OVERPAYMENT = "PAYMENT_OVERPAYMENT"
    PAYMENT_CURRENCY_MISMATCH = "PAYMENT_CURRENCY_MISMATCH"
    PAYMENT_REFUND_EXCEEDS_ORIGINAL = "PAYMENT_REFUND_EXCEEDS_ORIGINAL"
    PAYMENT_HAS_REFUNDS = "PAYMENT_HAS_REFUNDS"
