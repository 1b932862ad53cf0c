"""Payment endpoints for the API."""

from typing import List, Optional
from fastapi import APIRouter, Depends, File, HTTPException, Query, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession

from components.core.config import get_settings
from components.core.init_db import get_db
from components.imports.pipeline import PaymentImporter
from components.imports.reader import read_upload
from components.imports.schemas import ImportResponse
from components.credit.schemas import Credit
from components.payment import schemas
from components.payment.ledger import LedgerReconciler
from components.payment.repository import PaymentRepository

router = APIRouter(
    prefix="/payments",
    tags=["payments"],
    responses={404: {"description": "Not found"}},
)


def import_response(result) -> ImportResponse:
    return ImportResponse(
        success=True,
        message=f"Import completed: {result.success} succeeded, {result.failed} failed",
        data=result,
    )


@router.get("/", response_model=List[schemas.Payment])
async def read_payments(
    credit_id: Optional[int] = Query(None, description="Only payments of this credit"),
    skip: int = Query(0, ge=0, description="Number of records to skip"),
    limit: int = Query(20, ge=1, le=100, description="Number of records to return"),
    db: AsyncSession = Depends(get_db)
):
    """Get active payments, newest first."""
    repo = PaymentRepository(db)
    return await repo.list_payments(credit_id=credit_id, skip=skip, limit=limit)


@router.post("/", response_model=schemas.PaymentWithCredit, status_code=status.HTTP_201_CREATED)
async def create_payment(
    payment_in: schemas.PaymentCreate,
    db: AsyncSession = Depends(get_db)
):
    """
    Record a payment and reduce the credit's outstanding.

    Validations:
    - Amount must be greater than 0
    - Principal, interest and penalty cannot be negative
    - Principal (defaults to the amount) cannot exceed the outstanding
    - Principal + interest + penalty cannot exceed the amount

    When the outstanding reaches 0 the credit becomes Lunas.
    """
    payment, credit = await LedgerReconciler(db).apply(payment_in)
    return schemas.PaymentWithCredit(
        payment=schemas.Payment.model_validate(payment),
        credit=Credit.model_validate(credit),
    )


@router.get("/{payment_id}", response_model=schemas.Payment)
async def read_payment(
    payment_id: int,
    db: AsyncSession = Depends(get_db)
):
    """Get a specific payment by ID."""
    repo = PaymentRepository(db)
    payment = await repo.get_by_id(payment_id)
    if payment is None:
        raise HTTPException(status_code=404, detail="Payment not found")
    return payment


@router.delete("/{payment_id}", response_model=schemas.PaymentWithCredit)
async def delete_payment(
    payment_id: int,
    db: AsyncSession = Depends(get_db)
):
    """
    Soft-delete a payment and add its principal back to the outstanding.

    The credit status is not changed, a credit that was Lunas stays Lunas.
    """
    payment, credit = await LedgerReconciler(db).reverse(payment_id)
    return schemas.PaymentWithCredit(
        payment=schemas.Payment.model_validate(payment),
        credit=Credit.model_validate(credit),
    )


@router.post("/import", response_model=ImportResponse)
async def import_payments(
    file: UploadFile = File(...),
    db: AsyncSession = Depends(get_db)
):
    """
    Import payments from an Excel or CSV file.

    Columns: No. Kontrak, Tanggal, Nominal, and optionally Pokok, Bunga,
    Denda, Catatan.
    """
    rows = await read_upload(file, get_settings().MAX_UPLOAD_SIZE)
    result = await PaymentImporter(db).import_rows(rows)
    return import_response(result)


@router.post("/import/{credit_id}", response_model=ImportResponse)
async def import_credit_payments(
    credit_id: int,
    file: UploadFile = File(...),
    db: AsyncSession = Depends(get_db)
):
    """Import payments of one credit from a file without a contract column."""
    rows = await read_upload(file, get_settings().MAX_UPLOAD_SIZE)
    result = await PaymentImporter(db).import_rows_for_credit(credit_id, rows)
    return import_response(result)
