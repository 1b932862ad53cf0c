"""Repository for credit operations and status transitions."""

import logging
from datetime import date
from typing import Dict, Iterable, List, Optional
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.exc import StaleDataError

from components.core.exceptions import ConflictError, NotFoundError, ValidationError
from components.credit.models import (
    BEST_COLLECTIBILITY,
    COLLECTIBILITY_CODES,
    CREDIT_STATUSES,
    STATUS_PAID_OFF,
    Credit,
)

logger = logging.getLogger(__name__)


def check_status(status: str, collectibility: Optional[str] = None) -> None:
    """Reject statuses and collectibility codes outside the known sets."""
    if status not in CREDIT_STATUSES:
        raise ValidationError(f"Invalid status: {status}", field="status")
    if collectibility is not None and collectibility not in COLLECTIBILITY_CODES:
        raise ValidationError(f"Invalid collectibility: {collectibility}", field="collectibility")


class CreditRepository:
    """Repository for credit operations."""

    def __init__(self, session: AsyncSession):
        """Initialize repository with database session."""
        self.session = session

    async def get_by_id(self, credit_id: int) -> Optional[Credit]:
        """Get active credit by ID."""
        result = await self.session.execute(
            select(Credit).where(Credit.id == credit_id, Credit.is_active.is_(True))
        )
        return result.scalar_one_or_none()

    async def get_for_update(self, credit_id: int) -> Credit:
        """
        Load an active credit for a read-modify-write.

        The row is locked where the backend supports FOR UPDATE and always
        reloaded from the database, so a session that was rolled back never
        works from stale attributes.
        """
        result = await self.session.execute(
            select(Credit)
            .where(Credit.id == credit_id, Credit.is_active.is_(True))
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        credit = result.scalar_one_or_none()
        if credit is None:
            raise NotFoundError(f"Credit {credit_id} not found")
        return credit

    async def get_by_contract_number(self, contract_number: str, active_only: bool = True) -> Optional[Credit]:
        """Get credit by its contract number."""
        query = select(Credit).where(Credit.contract_number == contract_number)
        if active_only:
            query = query.where(Credit.is_active.is_(True))
        result = await self.session.execute(query.execution_options(populate_existing=True))
        return result.scalar_one_or_none()

    async def list_credits(
        self,
        status: Optional[str] = None,
        skip: int = 0,
        limit: int = 100
    ) -> List[Credit]:
        """Get active credits with optional status filter."""
        query = select(Credit).where(Credit.is_active.is_(True))
        if status:
            query = query.where(Credit.status == status)
        query = query.order_by(Credit.id).offset(skip).limit(limit)
        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def _get_active_many(self, ids: Iterable[int]) -> List[Credit]:
        result = await self.session.execute(
            select(Credit)
            .where(Credit.id.in_(list(ids)), Credit.is_active.is_(True))
            .order_by(Credit.id)
        )
        credits = list(result.scalars().all())
        if not credits:
            raise NotFoundError("No active credits found for provided ids")
        return credits

    async def commit(self, credit: Credit) -> None:
        """Commit the session, turning a version mismatch on credit into ConflictError."""
        contract_number = credit.contract_number
        try:
            await self.session.commit()
        except StaleDataError as exc:
            await self.session.rollback()
            raise ConflictError(
                f"Credit {contract_number} was modified concurrently, reload and retry"
            ) from exc

    async def update_status(
        self,
        credit_id: int,
        status: str,
        collectibility: str,
        days_past_due: int = 0,
        last_payment_date: Optional[date] = None
    ) -> Credit:
        """Set status of a single credit."""
        check_status(status, collectibility)
        credit = await self.get_for_update(credit_id)

        credit.status = status
        credit.collectibility = collectibility
        credit.days_past_due = days_past_due
        credit.last_payment_date = last_payment_date
        if status == STATUS_PAID_OFF:
            credit.outstanding = 0
            credit.days_past_due = 0

        await self.commit(credit)
        return credit

    async def set_status(
        self,
        ids: List[int],
        status: str,
        collectibility: Optional[str] = None,
        last_payment_date: Optional[date] = None
    ) -> Dict[str, int]:
        """
        Apply a status change to every active credit in ids.

        Each credit is committed on its own. When one of them fails the
        earlier ones stay updated and the rest are left untouched.

        A transition to Lunas also zeroes outstanding and days past due,
        and defaults collectibility to the best tier.
        """
        check_status(status, collectibility)
        if collectibility is None and status == STATUS_PAID_OFF:
            collectibility = BEST_COLLECTIBILITY

        credits = await self._get_active_many(ids)

        updated = 0
        for credit in credits:
            credit.status = status
            credit.last_payment_date = last_payment_date
            if collectibility is not None:
                credit.collectibility = collectibility
            if status == STATUS_PAID_OFF:
                credit.outstanding = 0
                credit.days_past_due = 0
            await self.commit(credit)
            updated += 1

        logger.info("Set status %s on %d of %d credit(s)", status, updated, len(ids))
        return {"updated": updated, "requested": len(ids)}

    async def bulk_delete(self, ids: List[int]) -> Dict[str, int]:
        """Soft-delete the paid-off credits in ids; the others are skipped."""
        credits = await self._get_active_many(ids)

        deleted = 0
        skipped = 0
        for credit in credits:
            if credit.is_paid_off:
                credit.is_active = False
                await self.commit(credit)
                deleted += 1
            else:
                skipped += 1

        logger.info("Bulk delete: %d deleted, %d skipped", deleted, skipped)
        return {"requested": len(ids), "deleted": deleted, "skipped": skipped}

    async def delete(self, credit_id: int) -> None:
        """Soft-delete a single credit. Only paid-off credits can be deleted."""
        credit = await self.get_for_update(credit_id)
        if not credit.is_paid_off:
            raise ValidationError(
                "Cannot delete credit unless status is Lunas", field="status"
            )
        credit.is_active = False
        await self.commit(credit)
