"""
Ledger reconciliation between payments and credit outstanding balances.

A payment reduces the outstanding principal of exactly one credit. When the
outstanding reaches zero the credit moves to Lunas. Soft-deleting a payment
adds its principal back but leaves the status alone, so a credit that was
paid off by the deleted payment stays Lunas with a positive outstanding until
someone changes its status explicitly.

Both directions run as a single commit guarded by the credit's version
counter: two writers that read the same balance cannot both win.
"""

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional, Tuple
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from components.core.exceptions import (
    BreakdownExceedsAmount,
    InvalidAmount,
    NegativeComponent,
    NotFoundError,
    PrincipalExceedsOutstanding,
)
from components.credit.models import Credit
from components.credit.repository import CreditRepository
from components.payment.models import Payment
from components.payment.schemas import PaymentCreate

logger = logging.getLogger(__name__)

ZERO = Decimal("0")


@dataclass(frozen=True)
class PaymentBreakdown:
    amount: Decimal
    principal: Decimal
    interest: Decimal
    penalty: Decimal


def validate_payment(
    amount: Decimal,
    principal: Optional[Decimal],
    interest: Optional[Decimal],
    penalty: Optional[Decimal],
    current_outstanding: Decimal
) -> PaymentBreakdown:
    """
    Check a payment breakdown against the credit's current outstanding.

    Args:
        amount: Total paid
        principal: Portion applied to principal, defaults to amount
        interest: Portion applied to interest, defaults to 0
        penalty: Portion applied to penalty, defaults to 0
        current_outstanding: Outstanding principal before this payment

    Returns:
        The breakdown with defaults filled in

    Raises:
        InvalidAmount: amount is not positive
        NegativeComponent: a breakdown component is negative
        PrincipalExceedsOutstanding: principal is more than what is owed
        BreakdownExceedsAmount: components add up to more than amount
    """
    amount = Decimal(amount)
    if amount <= ZERO:
        raise InvalidAmount(f"Amount must be greater than 0 (got {amount})", field="amount")

    principal = amount if principal is None else Decimal(principal)
    interest = ZERO if interest is None else Decimal(interest)
    penalty = ZERO if penalty is None else Decimal(penalty)

    for field, value in (
        ("principal_amount", principal),
        ("interest_amount", interest),
        ("penalty_amount", penalty),
    ):
        if value < ZERO:
            raise NegativeComponent(f"{field} must not be negative (got {value})", field=field)

    outstanding = Decimal(current_outstanding)
    if principal > outstanding:
        raise PrincipalExceedsOutstanding(
            f"Principal ({principal}) exceeds outstanding ({outstanding})",
            field="principal_amount",
        )

    breakdown_sum = principal + interest + penalty
    if breakdown_sum > amount:
        raise BreakdownExceedsAmount(
            f"Breakdown (principal+interest+penalty = {breakdown_sum}) exceeds amount ({amount})",
            field="amount",
        )

    return PaymentBreakdown(amount=amount, principal=principal, interest=interest, penalty=penalty)


class LedgerReconciler:
    """Applies and reverses payments against credit outstanding balances."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.credits = CreditRepository(session)

    async def apply(self, payment_in: PaymentCreate) -> Tuple[Payment, Credit]:
        """
        Record a payment and reduce the credit's outstanding by its principal.

        Validation happens before anything is added to the session, so a
        rejected payment leaves no trace.
        """
        credit = await self.credits.get_for_update(payment_in.credit_id)
        breakdown = validate_payment(
            payment_in.amount,
            payment_in.principal_amount,
            payment_in.interest_amount,
            payment_in.penalty_amount,
            credit.outstanding,
        )

        payment = Payment(
            credit_id=credit.id,
            amount=breakdown.amount,
            principal_amount=payment_in.principal_amount,
            interest_amount=payment_in.interest_amount,
            penalty_amount=payment_in.penalty_amount,
            payment_date=payment_in.payment_date,
            channel=payment_in.channel,
            reference_number=payment_in.reference_number,
            notes=payment_in.notes,
        )
        self.session.add(payment)

        new_outstanding = max(ZERO, Decimal(credit.outstanding) - breakdown.principal)
        credit.outstanding = new_outstanding
        credit.last_payment_date = payment_in.payment_date
        if new_outstanding == ZERO:
            credit.mark_paid_off()

        await self.credits.commit(credit)
        logger.info(
            "Applied payment %s to credit %s: principal %s, outstanding now %s",
            payment.id, credit.contract_number, breakdown.principal, new_outstanding,
        )
        if new_outstanding == ZERO:
            logger.info("Credit %s is paid off", credit.contract_number)
        return payment, credit

    async def reverse(self, payment_id: int) -> Tuple[Payment, Credit]:
        """Soft-delete a payment and add its principal back to the credit."""
        result = await self.session.execute(
            select(Payment)
            .where(Payment.id == payment_id, Payment.is_active.is_(True))
            .execution_options(populate_existing=True)
        )
        payment = result.scalar_one_or_none()
        if payment is None:
            raise NotFoundError(f"Payment {payment_id} not found")

        try:
            credit = await self.credits.get_for_update(payment.credit_id)
        except NotFoundError as exc:
            raise NotFoundError("Related credit not found") from exc

        principal = Decimal(payment.applied_principal)
        payment.is_active = False
        credit.outstanding = Decimal(credit.outstanding) + principal

        await self.credits.commit(credit)
        logger.info(
            "Reversed payment %s on credit %s: outstanding back to %s (status %s kept)",
            payment.id, credit.contract_number, credit.outstanding, credit.status,
        )
        return payment, credit
