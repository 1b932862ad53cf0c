"""Outgoing letter endpoints for the API."""

from datetime import date
from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from components.core.config import get_settings
from components.core.init_db import get_db
from components.letter import schemas
from components.letter.repository import LetterRepository
from components.letter.sequence import SequenceAllocator

router = APIRouter(
    prefix="/outgoing-letters",
    tags=["outgoing-letters"],
    responses={404: {"description": "Not found"}},
)


@router.get("/next-number/{letter_type}", response_model=schemas.LetterNumber)
async def next_letter_number(
    letter_type: str,
    unit_code: Optional[str] = Query(None, description="Issuing unit, defaults to the configured unit"),
    db: AsyncSession = Depends(get_db)
):
    """
    Preview the number the next letter of this type would get.

    Nothing is reserved; the number is only final once the letter is created.
    """
    allocator = SequenceAllocator(db)
    return await allocator.preview(
        letter_type,
        date.today().year,
        unit_code or get_settings().LETTER_UNIT_CODE,
    )


@router.post("/", response_model=schemas.Letter, status_code=status.HTTP_201_CREATED)
async def create_letter(
    letter_in: schemas.LetterCreate,
    db: AsyncSession = Depends(get_db)
):
    """Create a letter and give it the next number of the current year."""
    repo = LetterRepository(db)
    return await repo.create(letter_in, date.today().year, get_settings().LETTER_UNIT_CODE)


@router.get("/", response_model=List[schemas.Letter])
async def read_letters(
    year: Optional[int] = Query(None, description="Filter by year"),
    letter_type: Optional[str] = Query(None, description="Filter by letter type"),
    skip: int = Query(0, ge=0, description="Number of records to skip"),
    limit: int = Query(10, ge=1, le=100, description="Number of records to return"),
    db: AsyncSession = Depends(get_db)
):
    """Get list of active letters."""
    repo = LetterRepository(db)
    return await repo.list_letters(year=year, letter_type=letter_type, skip=skip, limit=limit)


@router.get("/{letter_id}", response_model=schemas.Letter)
async def read_letter(
    letter_id: int,
    db: AsyncSession = Depends(get_db)
):
    """Get a specific letter by ID."""
    repo = LetterRepository(db)
    letter = await repo.get_by_id(letter_id)
    if letter is None:
        raise HTTPException(status_code=404, detail="Letter not found")
    return letter


@router.delete("/{letter_id}")
async def delete_letter(
    letter_id: int,
    db: AsyncSession = Depends(get_db)
):
    """Soft-delete a letter. Its number stays taken."""
    repo = LetterRepository(db)
    await repo.delete(letter_id)
    return {"message": "Letter deleted successfully"}
