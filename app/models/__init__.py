# Users
from app.models.users.user_models import Profile
from app.models.support.activity_models import UserActivity

# Inventory
from app.models.inventory.vehicle_models import Vehicle, VehicleStatusHistory
from app.models.inventory.expense_models import Expense

# CRM
from app.models.crm.customer_models import Customer
from app.models.crm.inquiry_models import Inquiry
from app.models.crm.communication_models import Communication

# Billing
from app.models.billing.invoice_models import Invoice, InvoiceItem
from app.models.billing.payment_models import Payment
