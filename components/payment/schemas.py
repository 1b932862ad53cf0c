"""Pydantic schemas for payment data validation."""

from datetime import date, datetime
from decimal import Decimal
from typing import Optional
from pydantic import BaseModel

from components.credit.schemas import Credit


class PaymentCreate(BaseModel):
    """Schema for recording a payment against a credit."""
    credit_id: int
    amount: Decimal
    principal_amount: Optional[Decimal] = None
    interest_amount: Optional[Decimal] = None
    penalty_amount: Optional[Decimal] = None
    payment_date: date
    channel: Optional[str] = None
    reference_number: Optional[str] = None
    notes: Optional[str] = None


class Payment(BaseModel):
    """Schema for payment response."""
    id: int
    credit_id: int
    amount: Decimal
    principal_amount: Optional[Decimal] = None
    interest_amount: Optional[Decimal] = None
    penalty_amount: Optional[Decimal] = None
    payment_date: date
    channel: Optional[str] = None
    reference_number: Optional[str] = None
    notes: Optional[str] = None
    is_active: bool
    created_at: datetime

    class Config:
        from_attributes = True


class PaymentWithCredit(BaseModel):
    """Schema for a ledger operation result."""
    payment: Payment
    credit: Credit
