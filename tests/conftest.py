"""Pytest fixtures: an in-memory database and small record factories."""

from datetime import date
from decimal import Decimal

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from components.core.database import Base
from components.credit.models import Credit
from components.debtor.models import Debtor
# Register every table on Base.metadata
import components.letter.models
import components.payment.models


@pytest_asyncio.fixture
async def engine():
    """Create a fresh in-memory database per test."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)


@pytest_asyncio.fixture
async def session(session_factory):
    """Create async test database session."""
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def debtor(session):
    """Create a test debtor."""
    debtor = Debtor(debtor_code="CIF001", full_name="Budi Santoso", ktp_number="3201010101010001")
    session.add(debtor)
    await session.commit()
    return debtor


@pytest.fixture
def make_credit(session, debtor):
    """Factory for credits of the test debtor."""

    async def make(contract_number="PK-001", outstanding="1000000", **overrides):
        values = dict(
            contract_number=contract_number,
            debtor_id=debtor.id,
            credit_type="KUR Mikro",
            plafond=Decimal("1000000"),
            outstanding=Decimal(outstanding),
            interest_rate=Decimal("6.00"),
            tenor_months=12,
            start_date=date(2024, 1, 1),
            maturity_date=date(2025, 1, 1),
            status="Lancar",
            collectibility="1",
        )
        values.update(overrides)
        credit = Credit(**values)
        session.add(credit)
        await session.commit()
        return credit

    return make
