"""Sequence numbers for outgoing letters, unique per (letter type, year)."""

import logging
from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from components.core.exceptions import ConflictError, ValidationError
from components.letter.models import LETTER_TYPE_CODES, LetterSequence, OutgoingLetter
from components.letter.schemas import LetterNumber

logger = logging.getLogger(__name__)


def format_letter_number(sequence: int, category: str, unit_code: str, year: int) -> str:
    """Build the printed number, e.g. 001/S.Eks/AOPK/C.2/2026."""
    return f"{sequence:03d}/{LETTER_TYPE_CODES[category]}/{unit_code}/{year}"


def check_category(category: str) -> None:
    if category not in LETTER_TYPE_CODES:
        raise ValidationError(f"Invalid letter type: {category}", field="letter_type")


class SequenceAllocator:
    """
    Hands out sequence numbers from a counter row per (category, year).

    The counter is bumped with a single UPDATE and read back inside the same
    transaction, so two allocations for one partition never see the same
    value. The allocator does not commit: the number only becomes final
    together with the record that carries it.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def _highest_issued(self, category: str, year: int) -> int:
        # Inactive letters count too, their numbers stay taken
        result = await self.session.execute(
            select(func.max(OutgoingLetter.sequence_number)).where(
                OutgoingLetter.letter_type == category,
                OutgoingLetter.year == year,
            )
        )
        return result.scalar() or 0

    async def _current_value(self, category: str, year: int):
        result = await self.session.execute(
            select(LetterSequence.last_value).where(
                LetterSequence.category == category,
                LetterSequence.year == year,
            )
        )
        return result.scalar_one_or_none()

    async def allocate(self, category: str, year: int, unit_code: str) -> LetterNumber:
        """Reserve the next number of the (category, year) partition."""
        check_category(category)

        result = await self.session.execute(
            update(LetterSequence)
            .where(LetterSequence.category == category, LetterSequence.year == year)
            .values(last_value=LetterSequence.last_value + 1)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            first_value = await self._highest_issued(category, year) + 1
            self.session.add(LetterSequence(category=category, year=year, last_value=first_value))
            try:
                await self.session.flush()
            except IntegrityError as exc:
                await self.session.rollback()
                raise ConflictError(
                    f"Sequence for {category}/{year} was created concurrently"
                ) from exc

        sequence = await self._current_value(category, year)
        letter_number = format_letter_number(sequence, category, unit_code, year)
        logger.info("Allocated letter number %s", letter_number)
        return LetterNumber(sequence_number=sequence, year=year, letter_number=letter_number)

    async def preview(self, category: str, year: int, unit_code: str) -> LetterNumber:
        """Number the next allocation would return, without reserving it."""
        check_category(category)
        current = await self._current_value(category, year)
        if current is None:
            current = await self._highest_issued(category, year)
        sequence = current + 1
        return LetterNumber(
            sequence_number=sequence,
            year=year,
            letter_number=format_letter_number(sequence, category, unit_code, year),
        )
