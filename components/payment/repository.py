"""Repository for payment queries."""

from typing import List, Optional
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from components.payment.models import Payment


class PaymentRepository:
    """Repository for payment operations. Writes go through LedgerReconciler."""

    def __init__(self, session: AsyncSession):
        """Initialize repository with database session."""
        self.session = session

    async def get_by_id(self, payment_id: int) -> Optional[Payment]:
        """Get active payment by ID."""
        result = await self.session.execute(
            select(Payment).where(Payment.id == payment_id, Payment.is_active.is_(True))
        )
        return result.scalar_one_or_none()

    async def list_payments(
        self,
        credit_id: Optional[int] = None,
        skip: int = 0,
        limit: int = 20
    ) -> List[Payment]:
        """Get active payments, newest first, optionally for one credit."""
        query = select(Payment).where(Payment.is_active.is_(True))
        if credit_id is not None:
            query = query.where(Payment.credit_id == credit_id)
        query = query.order_by(Payment.payment_date.desc(), Payment.id.desc()).offset(skip).limit(limit)
        result = await self.session.execute(query)
        return list(result.scalars().all())
