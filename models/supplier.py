# models/supplier.py

from typing import List, Optional
from datetime import date
from pydantic import BaseModel, Field

from models.enums import SupplierPaymentStatus


class SupplierBankAccount(BaseModel):
    bank_name: str
    account_number: str
    ifsc_code: Optional[str] = None
    account_holder_name: Optional[str] = None
    is_primary: bool = False


class SupplierBase(BaseModel):
    """Base supplier model."""
    name: str = Field(..., min_length=1, description="Supplier name (required)")
    supplier_code: Optional[str] = None
    contact_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    country: Optional[str] = None
    postal_code: Optional[str] = None
    tax_id: Optional[str] = None
    payment_terms: Optional[str] = None
    notes: Optional[str] = None


class SupplierCreate(SupplierBase):
    bank_accounts: List[SupplierBankAccount] = []


class SupplierUpdate(BaseModel):
    """All fields optional."""
    name: Optional[str] = None
    supplier_code: Optional[str] = None
    contact_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    country: Optional[str] = None
    postal_code: Optional[str] = None
    tax_id: Optional[str] = None
    payment_terms: Optional[str] = None
    notes: Optional[str] = None
    is_active: Optional[bool] = None


# -----------------------------------------------------
# Supplier payments
# -----------------------------------------------------
class SupplierPaymentCreate(BaseModel):
    purchase_invoice_id: str
    supplier_id: str
    payment_date: date
    payment_method: str
    amount: float = Field(..., gt=0, description="Payment amount must be greater than 0")
    reference_number: Optional[str] = None
    bank_name: Optional[str] = None
    cheque_number: Optional[str] = None
    transaction_id: Optional[str] = None
    notes: Optional[str] = None


class SupplierPaymentUpdate(BaseModel):
    status: Optional[SupplierPaymentStatus] = None
    amount: Optional[float] = Field(None, gt=0)
    payment_date: Optional[date] = None
    payment_method: Optional[str] = None
    reference_number: Optional[str] = None
    transaction_id: Optional[str] = None
    notes: Optional[str] = None



# -----------------------------------------------------
# Purchase invoices
# -----------------------------------------------------
class PurchaseInvoiceItem(BaseModel):
    product_id: str = Field(..., min_length=1)
    quantity: float = Field(..., gt=0)
    unit_price: float = Field(..., ge=0)
    tax_percentage: Optional[float] = Field(None, ge=0)
    discount_amount: float = Field(0, ge=0)
    unit: Optional[str] = None


class PurchaseInvoiceCreate(BaseModel):
    supplier_id: str = Field(..., min_length=1)
    invoice_date: date
    due_date: Optional[date] = None
    supplier_invoice_number: Optional[str] = None
    purchase_order_id: Optional[str] = None
    subtotal: Optional[float] = Field(None, ge=0)
    tax_amount: Optional[float] = Field(None, ge=0)
    discount_amount: float = Field(0, ge=0)
    notes: Optional[str] = None
    items: List[PurchaseInvoiceItem] = []
