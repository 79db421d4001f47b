# routers/__init__.py

from .health import router as health_router
from .companies import router as companies_router
from .auth import router as auth_router
from .permissions import router as permissions_router
from .admin import router as admin_router
from .warehouse_managers import router as warehouse_managers_router
from .categories import router as categories_router
from .products import router as products_router
from .orders import router as orders_router
from .payments import router as payments_router
from .customer import router as customer_router
from .suppliers import router as suppliers_router
from .supplier_payments import router as supplier_payments_router
from .leads import router as leads_router
from .invoices import router as invoices_router
from .cart import router as cart_router
from .purchase_invoices import router as purchase_invoices_router
from .warehouses import router as warehouses_router


ALL_ROUTERS = [
    health_router,
    companies_router,
    auth_router,
    permissions_router,
    admin_router,
    warehouse_managers_router,
    categories_router,
    products_router,
    orders_router,
    payments_router,
    customer_router,
    suppliers_router,
    supplier_payments_router,
    leads_router,
    invoices_router,
    cart_router,
    purchase_invoices_router,
    warehouses_router,
]

__all__ = ["ALL_ROUTERS"]
