from enum import Enum


class ActivityCode(str, Enum):
    # Profiles
    UPDATE_PROFILE = "UPDATE_PROFILE"
    UPDATE_USER_ROLE = "UPDATE_USER_ROLE"
    DEACTIVATE_USER = "DEACTIVATE_USER"
    REACTIVATE_USER = "REACTIVATE_USER"

    # Vehicles
    CREATE_VEHICLE = "CREATE_VEHICLE"
    UPDATE_VEHICLE = "UPDATE_VEHICLE"
    DELETE_VEHICLE = "DELETE_VEHICLE"
    UPDATE_VEHICLE_STATUS = "UPDATE_VEHICLE_STATUS"

    # Expenses
    CREATE_EXPENSE = "CREATE_EXPENSE"
    UPDATE_EXPENSE = "UPDATE_EXPENSE"
    DELETE_EXPENSE = "DELETE_EXPENSE"

    # Customers
    CREATE_CUSTOMER = "CREATE_CUSTOMER"
    UPDATE_CUSTOMER = "UPDATE_CUSTOMER"
    DEACTIVATE_CUSTOMER = "DEACTIVATE_CUSTOMER"

    # Inquiries
    CREATE_INQUIRY = "CREATE_INQUIRY"
    UPDATE_INQUIRY = "UPDATE_INQUIRY"
    DELETE_INQUIRY = "DELETE_INQUIRY"
    ASSIGN_INQUIRY = "ASSIGN_INQUIRY"
    RESOLVE_INQUIRY = "RESOLVE_INQUIRY"
    BULK_UPDATE_INQUIRIES = "BULK_UPDATE_INQUIRIES"

    # Communications
    LOG_COMMUNICATION = "LOG_COMMUNICATION"
    DELETE_COMMUNICATION = "DELETE_COMMUNICATION"

    # Invoices
    CREATE_INVOICE = "CREATE_INVOICE"
    UPDATE_INVOICE = "UPDATE_INVOICE"
    SEND_INVOICE = "SEND_INVOICE"
    CANCEL_INVOICE = "CANCEL_INVOICE"
    DELETE_INVOICE = "DELETE_INVOICE"
    MARK_INVOICE_OVERDUE = "MARK_INVOICE_OVERDUE"

    # Payments
    ADD_PAYMENT = "ADD_PAYMENT"
    UPDATE_PAYMENT = "UPDATE_PAYMENT"
    DELETE_PAYMENT = "DELETE_PAYMENT"
    REFUND_PAYMENT = "REFUND_PAYMENT"
