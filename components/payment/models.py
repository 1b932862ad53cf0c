"""Payment model for the database."""

from decimal import Decimal

from sqlalchemy import Boolean, Column, Date, DateTime, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.orm import relationship

from components.core.database import Base, utcnow


class Payment(Base):
    """Payment model for storing loan payments."""
    __tablename__ = "payments"

    id = Column(Integer, primary_key=True, index=True)
    credit_id = Column(Integer, ForeignKey("credits.id"), nullable=False, index=True)
    amount = Column(Numeric(15, 2), nullable=False)
    # Breakdown is optional; a missing principal means the whole amount
    principal_amount = Column(Numeric(15, 2), nullable=True)
    interest_amount = Column(Numeric(15, 2), nullable=True)
    penalty_amount = Column(Numeric(15, 2), nullable=True)
    payment_date = Column(Date, nullable=False, index=True)
    channel = Column(String(50), nullable=True)
    reference_number = Column(String(100), nullable=True)
    notes = Column(Text, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, nullable=False, default=utcnow)

    # Relationships
    credit = relationship("Credit", back_populates="payments")

    @property
    def applied_principal(self) -> Decimal:
        """Principal this payment took off the outstanding balance."""
        if self.principal_amount is not None:
            return self.principal_amount
        return self.amount
