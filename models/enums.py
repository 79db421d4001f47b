from enum import Enum


class BaseStrEnum(str, Enum):
    """
    Base enum that serializes cleanly to a string
    and provides a .list() method for UI dropdowns.
    """

    def __str__(self):
        return str(self.value)

    @classmethod
    def list(cls):
        return [item.value for item in cls]


# -----------------------------------------------------
# ROLE
# -----------------------------------------------------
class Role(BaseStrEnum):
    """Per-company role labels. ``admin`` overrides every role check."""

    admin = "admin"
    sales = "sales"
    accounts = "accounts"
    warehouse_manager = "warehouse_manager"
    procurement = "procurement"
    user = "user"


# -----------------------------------------------------
# MODULE
# -----------------------------------------------------
class ModuleCode(BaseStrEnum):
    """Functional areas a company can enable."""

    ecommerce = "ecommerce"
    sales = "sales"
    inventory = "inventory"
    procurement = "procurement"
    accounting = "accounting"
    reports = "reports"
    pos = "pos"
    settings = "settings"


# -----------------------------------------------------
# ORDER STATUS
# -----------------------------------------------------
class OrderStatus(BaseStrEnum):
    pending = "pending"
    processing = "processing"
    shipped = "shipped"
    delivered = "delivered"
    cancelled = "cancelled"


# -----------------------------------------------------
# PAYMENT STATUS (order-level)
# -----------------------------------------------------
class PaymentStatus(BaseStrEnum):
    """Database values; the UI sends full_payment / partial_payment / full_credit."""

    pending = "pending"
    paid = "paid"
    partial = "partial"
    credit = "credit"
    failed = "failed"
    refunded = "refunded"


# -----------------------------------------------------
# SUPPLIER PAYMENT STATUS
# -----------------------------------------------------
class SupplierPaymentStatus(BaseStrEnum):
    pending = "pending"
    processing = "processing"
    completed = "completed"
    failed = "failed"
    cancelled = "cancelled"


# -----------------------------------------------------
# LEADS
# -----------------------------------------------------
class LeadStage(BaseStrEnum):
    new = "new"
    contacted = "contacted"
    qualified = "qualified"
    proposal = "proposal"
    negotiation = "negotiation"
    won = "won"
    lost = "lost"


class LeadPriority(BaseStrEnum):
    low = "low"
    medium = "medium"
    high = "high"
    urgent = "urgent"


class LeadSource(BaseStrEnum):
    website = "website"
    referral = "referral"
    cold_call = "cold_call"
    email = "email"
    social_media = "social_media"
    trade_show = "trade_show"
    other = "other"


# -----------------------------------------------------
# ROUTE GUARD STATE
# -----------------------------------------------------
class GuardState(BaseStrEnum):
    loading = "loading"
    unauthenticated = "unauthenticated"
    unauthorized = "unauthorized"
    authorized = "authorized"
