"""Tests for credit status transitions and soft deletion."""

from datetime import date
from decimal import Decimal

import pytest

from components.core.exceptions import ConflictError, NotFoundError, ValidationError
from components.credit.repository import CreditRepository


class TestSetStatus:
    """Tests for bulk status transitions."""

    async def test_paid_off_zeroes_balances(self, session, make_credit):
        first = await make_credit("PK-001", outstanding="500000", days_past_due=30, collectibility="3")
        second = await make_credit("PK-002", outstanding="750000")

        result = await CreditRepository(session).set_status(
            [first.id, second.id], "Lunas", last_payment_date=date(2024, 7, 1)
        )

        assert result == {"updated": 2, "requested": 2}
        for credit in (first, second):
            assert credit.status == "Lunas"
            assert credit.outstanding == 0
            assert credit.days_past_due == 0
            assert credit.collectibility == "1"
            assert credit.last_payment_date == date(2024, 7, 1)

    async def test_other_status_keeps_outstanding(self, session, make_credit):
        credit = await make_credit(outstanding="500000")

        await CreditRepository(session).set_status([credit.id], "Macet", collectibility="5")

        assert credit.status == "Macet"
        assert credit.collectibility == "5"
        assert credit.outstanding == Decimal("500000")

    async def test_unknown_and_inactive_ids_are_skipped(self, session, make_credit):
        credit = await make_credit("PK-001")
        inactive = await make_credit("PK-002", is_active=False)

        result = await CreditRepository(session).set_status([credit.id, inactive.id, 999], "Lancar")

        assert result == {"updated": 1, "requested": 3}

    async def test_failure_keeps_earlier_credits_updated(self, session, session_factory, make_credit):
        first = await make_credit("PK-001")
        second = await make_credit("PK-002")
        third = await make_credit("PK-003")

        # Another writer changes the second credit, this session still holds version 1
        async with session_factory() as other:
            concurrent = await CreditRepository(other).get_for_update(second.id)
            concurrent.days_past_due = 10
            await other.commit()

        with pytest.raises(ConflictError):
            await CreditRepository(session).set_status(
                [first.id, second.id, third.id], "Macet", collectibility="5"
            )

        for credit in (first, second, third):
            await session.refresh(credit)
        assert (first.status, first.collectibility) == ("Macet", "5")
        assert (second.status, second.days_past_due) == ("Lancar", 10)
        assert (third.status, third.collectibility) == ("Lancar", "1")

    async def test_no_active_credit(self, session):
        with pytest.raises(NotFoundError):
            await CreditRepository(session).set_status([1, 2], "Lancar")

    @pytest.mark.parametrize("status,collectibility,field", [
        ("Sehat", None, "status"),
        ("Lancar", "7", "collectibility"),
    ])
    async def test_invalid_values(self, session, make_credit, status, collectibility, field):
        credit = await make_credit()
        with pytest.raises(ValidationError) as exc_info:
            await CreditRepository(session).set_status([credit.id], status, collectibility=collectibility)
        assert exc_info.value.field == field


class TestUpdateStatus:
    async def test_single_update(self, session, make_credit):
        credit = await make_credit()

        updated = await CreditRepository(session).update_status(
            credit.id, "Kurang Lancar", "3", days_past_due=95
        )

        assert updated.status == "Kurang Lancar"
        assert updated.days_past_due == 95
        assert updated.version == 2


class TestDelete:
    """Tests for single and bulk soft deletion."""

    async def test_bulk_delete_only_paid_off(self, session, make_credit):
        paid = await make_credit("PK-001", outstanding="0", status="Lunas")
        open_credit = await make_credit("PK-002")
        repo = CreditRepository(session)

        result = await repo.bulk_delete([paid.id, open_credit.id])

        assert result == {"requested": 2, "deleted": 1, "skipped": 1}
        assert await repo.get_by_id(paid.id) is None
        assert await repo.get_by_id(open_credit.id) is not None

    async def test_delete_requires_paid_off(self, session, make_credit):
        credit = await make_credit()
        with pytest.raises(ValidationError) as exc_info:
            await CreditRepository(session).delete(credit.id)
        assert exc_info.value.field == "status"

    async def test_delete_paid_off(self, session, make_credit):
        credit = await make_credit(outstanding="0", status="Lunas")
        repo = CreditRepository(session)

        await repo.delete(credit.id)

        assert await repo.get_by_id(credit.id) is None
        assert await repo.list_credits() == []
