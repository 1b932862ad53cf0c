"""Repository for outgoing letter operations."""

from typing import List, Optional
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from components.core.exceptions import ConflictError, NotFoundError
from components.letter.models import OutgoingLetter
from components.letter.schemas import LetterCreate
from components.letter.sequence import SequenceAllocator


class LetterRepository:
    """Repository for outgoing letter operations."""

    def __init__(self, session: AsyncSession):
        """Initialize repository with database session."""
        self.session = session
        self.allocator = SequenceAllocator(session)

    async def create(self, letter_in: LetterCreate, year: int, unit_code: str) -> OutgoingLetter:
        """Create a letter with the next number of its (type, year) partition."""
        numbering = await self.allocator.allocate(letter_in.letter_type, year, unit_code)

        letter = OutgoingLetter(
            **letter_in.model_dump(),
            letter_number=numbering.letter_number,
            sequence_number=numbering.sequence_number,
            year=numbering.year,
        )
        self.session.add(letter)
        try:
            await self.session.commit()
        except IntegrityError as exc:
            await self.session.rollback()
            raise ConflictError(
                f"Letter number {numbering.letter_number} is already taken"
            ) from exc
        return letter

    async def get_by_id(self, letter_id: int) -> Optional[OutgoingLetter]:
        """Get active letter by ID."""
        result = await self.session.execute(
            select(OutgoingLetter).where(
                OutgoingLetter.id == letter_id,
                OutgoingLetter.is_active.is_(True),
            )
        )
        return result.scalar_one_or_none()

    async def list_letters(
        self,
        year: Optional[int] = None,
        letter_type: Optional[str] = None,
        skip: int = 0,
        limit: int = 10
    ) -> List[OutgoingLetter]:
        """Get active letters, newest number first."""
        query = select(OutgoingLetter).where(OutgoingLetter.is_active.is_(True))
        if year:
            query = query.where(OutgoingLetter.year == year)
        if letter_type:
            query = query.where(OutgoingLetter.letter_type == letter_type)
        query = query.order_by(
            OutgoingLetter.year.desc(), OutgoingLetter.sequence_number.desc()
        ).offset(skip).limit(limit)
        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def delete(self, letter_id: int) -> None:
        """Soft-delete a letter. Its number is not handed out again."""
        letter = await self.get_by_id(letter_id)
        if letter is None:
            raise NotFoundError(f"Letter {letter_id} not found")
        letter.is_active = False
        await self.session.commit()
