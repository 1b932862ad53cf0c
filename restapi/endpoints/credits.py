"""Credit endpoints for the API."""

from typing import List, Optional
from fastapi import APIRouter, Depends, File, HTTPException, Query, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from components.core.config import get_settings
from components.core.init_db import get_db
from components.credit import schemas
from components.credit.repository import CreditRepository
from components.imports.pipeline import CreditImporter
from components.imports.reader import read_upload
from components.imports.schemas import ImportResponse

router = APIRouter(
    prefix="/credits",
    tags=["credits"],
    responses={404: {"description": "Not found"}},
)


@router.get("/", response_model=List[schemas.Credit])
async def read_credits(
    status: Optional[str] = Query(None, description="Filter by credit status"),
    skip: int = Query(0, ge=0, description="Number of records to skip"),
    limit: int = Query(100, ge=1, le=100, description="Number of records to return"),
    db: AsyncSession = Depends(get_db)
):
    """Get list of active credits."""
    repo = CreditRepository(db)
    return await repo.list_credits(status=status, skip=skip, limit=limit)


@router.patch("/bulk-status", response_model=schemas.BulkStatusResult)
async def bulk_update_status(
    update: schemas.BulkStatusUpdate,
    db: AsyncSession = Depends(get_db)
):
    """
    Set status of several credits.

    Setting Lunas also zeroes outstanding and days past due. Credits are
    updated one at a time; a failure keeps the credits updated before it.
    """
    repo = CreditRepository(db)
    return await repo.set_status(
        update.ids,
        update.status,
        collectibility=update.collectibility,
        last_payment_date=update.last_payment_date,
    )


@router.post("/bulk-delete", response_model=schemas.BulkDeleteResult)
async def bulk_delete_credits(
    request: schemas.BulkDeleteRequest,
    db: AsyncSession = Depends(get_db)
):
    """Soft-delete credits. Only Lunas credits are deleted, others are skipped."""
    repo = CreditRepository(db)
    return await repo.bulk_delete(request.ids)


@router.post("/import", response_model=ImportResponse)
async def import_credits(
    file: UploadFile = File(...),
    db: AsyncSession = Depends(get_db)
):
    """
    Import credits from an Excel or CSV file.

    Both the application template ("No. Kontrak", "Kode Debitur", ...) and
    the core banking export ("REKENING", "CIF", "NO PERJANJIAN", ...) are
    accepted. Rows are imported independently: rejected rows are listed in
    the response, the other rows stay imported.
    """
    rows = await read_upload(file, get_settings().MAX_UPLOAD_SIZE)
    result = await CreditImporter(db).import_rows(rows)
    return ImportResponse(
        success=True,
        message=f"Import completed: {result.success} succeeded, {result.failed} failed",
        data=result,
    )


@router.get("/{credit_id}", response_model=schemas.Credit)
async def read_credit(
    credit_id: int,
    db: AsyncSession = Depends(get_db)
):
    """Get a specific credit by ID."""
    repo = CreditRepository(db)
    credit = await repo.get_by_id(credit_id)
    if credit is None:
        raise HTTPException(status_code=404, detail="Credit not found")
    return credit


@router.patch("/{credit_id}/status", response_model=schemas.Credit)
async def update_credit_status(
    credit_id: int,
    update: schemas.CreditStatusUpdate,
    db: AsyncSession = Depends(get_db)
):
    """Set status and collectibility of one credit."""
    repo = CreditRepository(db)
    return await repo.update_status(
        credit_id,
        update.status,
        update.collectibility,
        days_past_due=update.days_past_due,
        last_payment_date=update.last_payment_date,
    )


@router.delete("/{credit_id}")
async def delete_credit(
    credit_id: int,
    db: AsyncSession = Depends(get_db)
):
    """Soft-delete a credit. Only allowed once the credit is Lunas."""
    repo = CreditRepository(db)
    await repo.delete(credit_id)
    return {"message": "Credit deleted successfully"}
