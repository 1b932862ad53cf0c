"""Debtor model for the database."""

from sqlalchemy import Boolean, Column, Integer, String, Text
from sqlalchemy.orm import relationship

from components.core.database import Base


class Debtor(Base):
    """Debtor (counterparty) that credits are issued to."""
    __tablename__ = "debtors"

    id = Column(Integer, primary_key=True, index=True)
    debtor_code = Column(String(20), unique=True, nullable=False, index=True)  # CIF
    full_name = Column(String(100), nullable=False)
    ktp_number = Column(String(20), nullable=True)
    notes = Column(Text, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)

    # Relationships
    credits = relationship("Credit", back_populates="debtor")
