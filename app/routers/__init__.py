# app/routers/__init__.py

from .users.profile_router import router as profile_router
from .support.activity_router import router as activity_router

from .inventory.vehicle_router import router as vehicle_router
from .inventory.expense_router import router as expense_router
from .public.public_router import router as public_router

from .crm.customer_router import router as customer_router
from .crm.inquiry_router import router as inquiry_router
from .crm.communication_router import router as communication_router

from .billing.invoice_router import router as invoice_router
from .billing.payment_router import router as payment_router


__all__ = [
"profile_router",
"activity_router",

"vehicle_router",
"expense_router",
"public_router",

"customer_router",
"inquiry_router",
"communication_router",

"invoice_router",
"payment_router",
]
