# models/company.py

from typing import Optional
from datetime import datetime
from pydantic import BaseModel, Field, EmailStr


class CompanyRead(BaseModel):
    """Public view of a tenant."""
    id: str
    name: str
    slug: str
    is_active: bool = True
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class CompanyRegister(BaseModel):
    """Self-service registration: creates the company and its first admin."""
    company_name: str = Field(..., min_length=1)
    company_slug: Optional[str] = Field(None, description="Subdomain; derived from company_name when omitted")
    email: EmailStr
    password: str = Field(..., min_length=6)
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    phone: Optional[str] = None


class CompanyContext(BaseModel):
    """Tenant resolved for the current request."""
    company_id: str
    company_slug: str
