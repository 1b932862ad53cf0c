"""Credit model for the database."""

from sqlalchemy import Boolean, Column, Date, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.orm import relationship

from components.core.database import Base

STATUS_CURRENT = "Lancar"
STATUS_SPECIAL_MENTION = "Dalam Perhatian Khusus"
STATUS_SUBSTANDARD = "Kurang Lancar"
STATUS_DOUBTFUL = "Diragukan"
STATUS_LOSS = "Macet"
STATUS_PAID_OFF = "Lunas"

CREDIT_STATUSES = (
    STATUS_CURRENT,
    STATUS_SPECIAL_MENTION,
    STATUS_SUBSTANDARD,
    STATUS_DOUBTFUL,
    STATUS_LOSS,
    STATUS_PAID_OFF,
)

COLLECTIBILITY_CODES = ("1", "2", "3", "4", "5")
BEST_COLLECTIBILITY = "1"


class Credit(Base):
    """Credit contract with its outstanding principal."""
    __tablename__ = "credits"

    id = Column(Integer, primary_key=True, index=True)
    contract_number = Column(String(50), unique=True, nullable=False, index=True)
    account_number = Column(String(50), nullable=True)
    debtor_id = Column(Integer, ForeignKey("debtors.id"), nullable=False, index=True)
    credit_type = Column(String(100), nullable=False)
    plafond = Column(Numeric(15, 2), nullable=False)
    outstanding = Column(Numeric(15, 2), nullable=False)
    interest_rate = Column(Numeric(5, 2), nullable=False)
    tenor_months = Column(Integer, nullable=False)
    start_date = Column(Date, nullable=False)
    maturity_date = Column(Date, nullable=False)
    purpose = Column(Text, nullable=True)
    status = Column(String(30), nullable=False, default=STATUS_CURRENT, index=True)
    collectibility = Column(String(1), nullable=False, default=BEST_COLLECTIBILITY)
    last_payment_date = Column(Date, nullable=True)
    days_past_due = Column(Integer, nullable=False, default=0)
    is_active = Column(Boolean, nullable=False, default=True)
    version = Column(Integer, nullable=False)

    # Every UPDATE checks and bumps the version, a stale writer gets StaleDataError
    __mapper_args__ = {"version_id_col": version}

    # Relationships
    debtor = relationship("Debtor", back_populates="credits")
    payments = relationship("Payment", back_populates="credit")

    @property
    def is_paid_off(self) -> bool:
        return self.status == STATUS_PAID_OFF

    def mark_paid_off(self) -> None:
        """Move the credit to the terminal paid-off state."""
        self.status = STATUS_PAID_OFF
        self.collectibility = BEST_COLLECTIBILITY
        self.days_past_due = 0
