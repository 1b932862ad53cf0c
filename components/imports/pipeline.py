"""
Spreadsheet imports of credits and payments.

Rows are processed one by one and each successful row is committed on its
own. A failing row is rolled back, recorded with its spreadsheet row number
and the import moves on, so a file can end up partly loaded. There is no
batch-level rollback.
"""

import logging
from typing import Any, Awaitable, Callable, Optional, Sequence
from sqlalchemy.ext.asyncio import AsyncSession

from components.core.config import get_settings
from components.core.exceptions import NotFoundError, ValidationError
from components.credit.models import Credit
from components.credit.repository import CreditRepository
from components.debtor.models import Debtor
from components.debtor.repository import DebtorRepository
from components.imports.formats import (
    CREDIT_ROW_PARSERS,
    CreditRecord,
    ImportFormat,
    PaymentRecord,
    Row,
    detect_format,
    parse_payment_row,
)
from components.imports.schemas import ImportResult, ImportRowError
from components.payment.ledger import LedgerReconciler
from components.payment.schemas import PaymentCreate

logger = logging.getLogger(__name__)

# Spreadsheet row of rows[0]: the header takes row 1
FIRST_DATA_ROW = 2


async def import_each(
    session: AsyncSession,
    rows: Sequence[Row],
    handle_row: Callable[[Row], Awaitable[Any]],
    batch_size: int,
    label: str
) -> ImportResult:
    """Run handle_row for every row, isolating failures per row."""
    result = ImportResult()
    total = len(rows)
    logger.info("Starting %s import of %d rows", label, total)

    for index, row in enumerate(rows):
        row_number = index + FIRST_DATA_ROW
        try:
            await handle_row(row)
        except Exception as exc:
            await session.rollback()
            result.failed += 1
            result.errors.append(ImportRowError(row=row_number, data=dict(row), error=str(exc)))
            logger.warning("%s import: row %d rejected: %s", label, row_number, exc)
        else:
            result.success += 1

        processed = index + 1
        if processed % batch_size == 0 or processed == total:
            logger.info(
                "%s import progress: %d/%d - success: %d, failed: %d",
                label, processed, total, result.success, result.failed,
            )

    return result


class CreditImporter:
    """Creates or updates credits from a credit spreadsheet."""

    def __init__(
        self,
        session: AsyncSession,
        debtors: Optional[DebtorRepository] = None,
        batch_size: Optional[int] = None
    ):
        self.session = session
        self.debtors = debtors or DebtorRepository(session)
        self.credits = CreditRepository(session)
        self.batch_size = batch_size or get_settings().IMPORT_BATCH_SIZE

    async def import_rows(
        self,
        rows: Sequence[Row],
        import_format: Optional[ImportFormat] = None
    ) -> ImportResult:
        """
        Import credit rows of a single file.

        Args:
            rows: Rows keyed by column header
            import_format: Layout of the file, detected from the header when omitted

        Returns:
            ImportResult with success/failed counts and the rejected rows
        """
        if import_format is None:
            import_format = detect_format(rows[0].keys() if rows else ())
        parse_row = CREDIT_ROW_PARSERS[import_format]
        logger.info("Credit file layout: %s", import_format.value)

        async def handle_row(row: Row) -> None:
            await self._import_record(parse_row(row), import_format)

        return await import_each(self.session, rows, handle_row, self.batch_size, "credit")

    async def _resolve_debtor(self, record: CreditRecord, import_format: ImportFormat) -> Debtor:
        debtor = await self.debtors.get_by_code(record.debtor_code)
        if debtor is None:
            # Only the bank export carries enough to register a new debtor
            if import_format is ImportFormat.BANK_EXPORT and record.debtor_name:
                logger.info("Registering debtor %s from credit import", record.debtor_code)
                return await self.debtors.create(
                    record.debtor_code,
                    record.debtor_name,
                    notes="Auto-created from credit import (bank export); KTP = CIF (temporary)",
                )
            raise NotFoundError(f"Debtor with code {record.debtor_code} not found")

        if record.debtor_name:
            provided = record.debtor_name.strip().lower()
            existing = (debtor.full_name or "").strip().lower()
            if existing and provided != existing:
                raise ValidationError(
                    f'Debtor name does not match for code {record.debtor_code} '
                    f'(file: "{record.debtor_name}", data: "{debtor.full_name}")',
                    field="debtor_name",
                )

        if not debtor.ktp_number:
            debtor.ktp_number = record.debtor_code
        return debtor

    async def _import_record(self, record: CreditRecord, import_format: ImportFormat) -> Credit:
        debtor = await self._resolve_debtor(record, import_format)

        fields = record.credit_fields()
        credit = await self.credits.get_by_contract_number(record.contract_number, active_only=False)
        if credit is None:
            credit = Credit(debtor_id=debtor.id, **fields)
            self.session.add(credit)
        else:
            for name, value in fields.items():
                setattr(credit, name, value)
            credit.debtor_id = debtor.id

        if credit.is_paid_off:
            credit.outstanding = 0
            credit.days_past_due = 0

        await self.session.commit()
        return credit


class PaymentImporter:
    """Records payments from a payment spreadsheet through the ledger."""

    def __init__(self, session: AsyncSession, batch_size: Optional[int] = None):
        self.session = session
        self.ledger = LedgerReconciler(session)
        self.credits = CreditRepository(session)
        self.batch_size = batch_size or get_settings().IMPORT_BATCH_SIZE

    async def import_rows(self, rows: Sequence[Row]) -> ImportResult:
        """Import payments of a file that names the contract on every row."""

        async def handle_row(row: Row) -> None:
            record = parse_payment_row(row)
            credit = await self.credits.get_by_contract_number(record.contract_number)
            if credit is None:
                raise NotFoundError(f"Credit with contract {record.contract_number} not found")
            await self._apply(credit.id, record)

        return await import_each(self.session, rows, handle_row, self.batch_size, "payment")

    async def import_rows_for_credit(self, credit_id: int, rows: Sequence[Row]) -> ImportResult:
        """Import payments of a file that belongs to a single credit."""
        if await self.credits.get_by_id(credit_id) is None:
            raise NotFoundError(f"Credit {credit_id} not found")

        async def handle_row(row: Row) -> None:
            await self._apply(credit_id, parse_payment_row(row, with_contract=False))

        return await import_each(self.session, rows, handle_row, self.batch_size, "payment")

    async def _apply(self, credit_id: int, record: PaymentRecord) -> None:
        await self.ledger.apply(PaymentCreate(
            credit_id=credit_id,
            amount=record.amount,
            principal_amount=record.principal,
            interest_amount=record.interest,
            penalty_amount=record.penalty,
            payment_date=record.payment_date,
            notes=record.notes,
        ))
