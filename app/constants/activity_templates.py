from app.constants.activity_codes import ActivityCode


ACTIVITY_TEMPLATES = {
    # ---------------- PROFILES ----------------
    ActivityCode.UPDATE_PROFILE:
        "{actor_role} ({actor_email}) updated their profile: {changes}",

    ActivityCode.UPDATE_USER_ROLE:
        "{actor_role} ({actor_email}) changed role of {target_email} to {target_role}",

    ActivityCode.DEACTIVATE_USER:
        "{actor_role} ({actor_email}) deactivated user {target_email}",

    ActivityCode.REACTIVATE_USER:
        "{actor_role} ({actor_email}) reactivated user {target_email}",

    # ---------------- VEHICLES ----------------
    ActivityCode.CREATE_VEHICLE:
        "{actor_role} ({actor_email}) added vehicle {target_name} (VIN {vin})",

    ActivityCode.UPDATE_VEHICLE:
        "{actor_role} ({actor_email}) updated vehicle {target_name}: {changes}",

    ActivityCode.DELETE_VEHICLE:
        "{actor_role} ({actor_email}) deleted vehicle {target_name} (VIN {vin})",

    ActivityCode.UPDATE_VEHICLE_STATUS:
        "{actor_role} ({actor_email}) moved vehicle {target_name} from {old_status} to {new_status}",

    # ---------------- EXPENSES ----------------
    ActivityCode.CREATE_EXPENSE:
        "{actor_role} ({actor_email}) recorded {category} expense of {amount} {currency}",

    ActivityCode.UPDATE_EXPENSE:
        "{actor_role} ({actor_email}) updated expense #{target_id}: {changes}",

    ActivityCode.DELETE_EXPENSE:
        "{actor_role} ({actor_email}) deleted expense #{target_id}",

    # ---------------- CUSTOMERS ----------------
    ActivityCode.CREATE_CUSTOMER:
        "{actor_role} ({actor_email}) created customer {target_name}",

    ActivityCode.UPDATE_CUSTOMER:
        "{actor_role} ({actor_email}) updated customer {target_name}: {changes}",

    ActivityCode.DEACTIVATE_CUSTOMER:
        "{actor_role} ({actor_email}) deactivated customer {target_name}",

    # ---------------- INQUIRIES ----------------
    ActivityCode.CREATE_INQUIRY:
        "{actor_role} ({actor_email}) logged inquiry #{target_id} for {target_name}",

    ActivityCode.UPDATE_INQUIRY:
        "{actor_role} ({actor_email}) updated inquiry #{target_id}: {changes}",

    ActivityCode.DELETE_INQUIRY:
        "{actor_role} ({actor_email}) deleted inquiry #{target_id}",

    ActivityCode.ASSIGN_INQUIRY:
        "{actor_role} ({actor_email}) assigned inquiry #{target_id} to {assignee}",

    ActivityCode.RESOLVE_INQUIRY:
        "{actor_role} ({actor_email}) resolved inquiry #{target_id}",

    ActivityCode.BULK_UPDATE_INQUIRIES:
        "{actor_role} ({actor_email}) set {count} inquiries to {new_status}",

    # ---------------- COMMUNICATIONS ----------------
    ActivityCode.LOG_COMMUNICATION:
        "{actor_role} ({actor_email}) logged {direction} {type} with {target_name}",

    ActivityCode.DELETE_COMMUNICATION:
        "{actor_role} ({actor_email}) deleted communication #{target_id}",

    # ---------------- INVOICES ----------------
    ActivityCode.CREATE_INVOICE:
        "{actor_role} ({actor_email}) created invoice {target_name}",

    ActivityCode.UPDATE_INVOICE:
        "{actor_role} ({actor_email}) updated invoice {target_name}: {changes}",

    ActivityCode.SEND_INVOICE:
        "{actor_role} ({actor_email}) sent invoice {target_name}",

    ActivityCode.CANCEL_INVOICE:
        "{actor_role} ({actor_email}) cancelled invoice {target_name}",

    ActivityCode.DELETE_INVOICE:
        "{actor_role} ({actor_email}) deleted invoice {target_name}",

    ActivityCode.MARK_INVOICE_OVERDUE:
        "{actor_role} marked invoice {target_name} overdue (due {due_date})",

    # ---------------- PAYMENTS ----------------
    ActivityCode.ADD_PAYMENT:
        "{actor_role} ({actor_email}) recorded payment of {amount} {currency} on invoice {target_name}",

    ActivityCode.UPDATE_PAYMENT:
        "{actor_role} ({actor_email}) updated payment #{target_id} on invoice {target_name}",

    ActivityCode.DELETE_PAYMENT:
        "{actor_role} ({actor_email}) deleted payment #{target_id} on invoice {target_name}",

    ActivityCode.REFUND_PAYMENT:
        "{actor_role} ({actor_email}) refunded {amount} {currency} of payment #{target_id} on invoice {target_name}",
}
