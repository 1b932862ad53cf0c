"""Pydantic schemas for credit data validation."""

from datetime import date
from decimal import Decimal
from typing import List, Optional
from pydantic import BaseModel, Field


class Credit(BaseModel):
    """Schema for credit response."""
    id: int
    contract_number: str
    account_number: Optional[str] = None
    debtor_id: int
    credit_type: str
    plafond: Decimal
    outstanding: Decimal
    interest_rate: Decimal
    tenor_months: int
    start_date: date
    maturity_date: date
    purpose: Optional[str] = None
    status: str
    collectibility: str
    last_payment_date: Optional[date] = None
    days_past_due: int
    is_active: bool

    class Config:
        from_attributes = True


class CreditStatusUpdate(BaseModel):
    """Schema for a single credit status change."""
    status: str
    collectibility: str
    days_past_due: int = Field(0, ge=0)
    last_payment_date: Optional[date] = None


class BulkStatusUpdate(BaseModel):
    """Schema for a bulk status change."""
    ids: List[int] = Field(..., min_length=1)
    status: str
    collectibility: Optional[str] = None
    last_payment_date: Optional[date] = None


class BulkStatusResult(BaseModel):
    updated: int
    requested: int


class BulkDeleteRequest(BaseModel):
    ids: List[int] = Field(..., min_length=1)


class BulkDeleteResult(BaseModel):
    requested: int
    deleted: int
    skipped: int
