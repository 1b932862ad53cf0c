"""Repository for debtor lookups used by the credit import."""

from typing import Optional
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from components.debtor.models import Debtor


class DebtorRepository:
    """Repository for debtor operations."""

    def __init__(self, session: AsyncSession):
        """Initialize repository with database session."""
        self.session = session

    async def get_by_code(self, debtor_code: str) -> Optional[Debtor]:
        """Get debtor by its code (CIF)."""
        result = await self.session.execute(
            select(Debtor)
            .where(Debtor.debtor_code == debtor_code)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def create(self, debtor_code: str, full_name: str, notes: Optional[str] = None) -> Debtor:
        """Add a debtor to the session; the caller owns the commit."""
        debtor = Debtor(
            debtor_code=debtor_code,
            full_name=full_name,
            ktp_number=debtor_code,
            notes=notes,
        )
        self.session.add(debtor)
        await self.session.flush()
        return debtor
