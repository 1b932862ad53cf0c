"""Outgoing letter and sequence counter models."""

from sqlalchemy import (
    Boolean,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)

from components.core.database import Base, utcnow

LETTER_TYPE_CODES = {
    "eksternal": "S.Eks",
    "internal": "S.Int",
}

LETTER_STATUSES = ("draft", "sent", "archived")

class LetterSequence(Base):
    """Last issued sequence number of one (letter type, year) partition."""
    __tablename__ = "letter_sequences"

    category = Column(String(20), primary_key=True)
    year = Column(Integer, primary_key=True)
    last_value = Column(Integer, nullable=False)

class OutgoingLetter(Base):
    """Outgoing correspondence numbered per type and year."""
    __tablename__ = "outgoing_letters"
    __table_args__ = (
        UniqueConstraint("letter_type", "year", "sequence_number", name="uq_letter_partition_sequence"),
    )

    id = Column(Integer, primary_key=True, index=True)
    letter_number = Column(String(100), unique=True, nullable=False)  # e.g. 001/S.Eks/AOPK/C.2/2026
    sequence_number = Column(Integer, nullable=False)
    letter_type = Column(String(20), nullable=False, index=True)
    year = Column(Integer, nullable=False, index=True)
    subject = Column(String(500), nullable=False)
    recipient = Column(String(300), nullable=False)
    recipient_address = Column(Text, nullable=True)
    letter_date = Column(Date, nullable=False)
    content = Column(Text, nullable=True)
    notes = Column(Text, nullable=True)
    status = Column(String(20), nullable=False, default="draft")
    debtor_id = Column(Integer, ForeignKey("debtors.id"), nullable=True)
    credit_id = Column(Integer, ForeignKey("credits.id"), nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, nullable=False, default=utcnow)
