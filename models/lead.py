# models/lead.py

from typing import Optional
from datetime import date, datetime
from pydantic import BaseModel, Field

from models.enums import LeadStage, LeadPriority, LeadSource


class LeadBase(BaseModel):
    contact_name: str = Field(..., min_length=1)
    title: str = Field(..., min_length=1)
    company_name: Optional[str] = None
    contact_email: Optional[str] = None
    contact_phone: Optional[str] = None
    contact_position: Optional[str] = None
    description: Optional[str] = None
    source: LeadSource = LeadSource.other
    estimated_value: float = 0
    currency: str = "USD"
    stage: LeadStage = LeadStage.new
    priority: LeadPriority = LeadPriority.medium
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    country: Optional[str] = None
    postal_code: Optional[str] = None
    website: Optional[str] = None
    notes: Optional[str] = None
    expected_close_date: Optional[date] = None
    next_follow_up: Optional[datetime] = None


class LeadCreate(LeadBase):
    pass


class LeadUpdate(BaseModel):
    contact_name: Optional[str] = None
    title: Optional[str] = None
    company_name: Optional[str] = None
    contact_email: Optional[str] = None
    contact_phone: Optional[str] = None
    description: Optional[str] = None
    source: Optional[LeadSource] = None
    estimated_value: Optional[float] = None
    stage: Optional[LeadStage] = None
    priority: Optional[LeadPriority] = None
    notes: Optional[str] = None
    expected_close_date: Optional[date] = None
    next_follow_up: Optional[datetime] = None


class LeadCallLog(BaseModel):
    note: Optional[str] = None
