# -------------------------
# Enums
# -------------------------
from .enums import (
    Role,
    ModuleCode,
    OrderStatus,
    PaymentStatus,
    SupplierPaymentStatus,
    LeadStage,
    LeadPriority,
    LeadSource,
    GuardState,
)

# -------------------------
# Tenant / access
# -------------------------
from .company import CompanyRead, CompanyRegister, CompanyContext
from .access import (
    Permission,
    AccessSnapshot,
    MenuNode,
    SidebarGroup,
    ModuleConfig,
    NavigationResponse,
    GuardDecision,
)
from .auth import LoginRequest, TokenResponse, ProfileUpdate, UserRolesUpdate

# -------------------------
# Catalog / orders / payments
# -------------------------
from .catalog import CategoryCreate, CategoryUpdate, ProductCreate, ProductUpdate
from .cart import CartItemAdd, CartItemUpdate
from .order import OrderItemCreate, OrderCreate, OrderStatusUpdate, OrderCancel
from .payment import PaymentIntentCreate, PaymentIntentResponse

# -------------------------
# Procurement / sales
# -------------------------
from .supplier import (
    SupplierBankAccount,
    SupplierCreate,
    SupplierUpdate,
    SupplierPaymentCreate,
    SupplierPaymentUpdate,
    PurchaseInvoiceItem,
    PurchaseInvoiceCreate,
)
from .lead import LeadCreate, LeadUpdate, LeadCallLog
from .warehouse import WarehouseCreate, WarehouseUpdate
from .warehouse_manager import WarehouseManagerAssign
