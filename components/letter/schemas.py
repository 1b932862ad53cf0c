"""Pydantic schemas for outgoing letters."""

from datetime import date, datetime
from typing import Optional
from pydantic import BaseModel, Field


class LetterNumber(BaseModel):
    """Allocated (or previewed) letter number."""
    sequence_number: int
    year: int
    letter_number: str


class LetterCreate(BaseModel):
    """Schema for letter creation. The number is allocated by the server."""
    letter_type: str
    subject: str = Field(..., min_length=1, max_length=500)
    recipient: str = Field(..., min_length=1, max_length=300)
    recipient_address: Optional[str] = None
    letter_date: date
    content: Optional[str] = None
    notes: Optional[str] = None
    debtor_id: Optional[int] = None
    credit_id: Optional[int] = None


class Letter(BaseModel):
    """Schema for letter response."""
    id: int
    letter_number: str
    sequence_number: int
    letter_type: str
    year: int
    subject: str
    recipient: str
    recipient_address: Optional[str] = None
    letter_date: date
    content: Optional[str] = None
    notes: Optional[str] = None
    status: str
    debtor_id: Optional[int] = None
    credit_id: Optional[int] = None
    is_active: bool
    created_at: datetime

    class Config:
        from_attributes = True
