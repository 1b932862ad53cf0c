"""Pydantic schemas for import results."""

from typing import Any, Dict, List
from pydantic import BaseModel, Field


class ImportRowError(BaseModel):
    """Schema for a rejected import row."""
    row: int  # spreadsheet row number, header is row 1
    data: Dict[str, Any]
    error: str


class ImportResult(BaseModel):
    """Counts and errors of one import run."""
    success: int = 0
    failed: int = 0
    errors: List[ImportRowError] = Field(default_factory=list)


class ImportResponse(BaseModel):
    """Schema for import upload response."""
    success: bool
    message: str
    data: ImportResult
