from decimal import Decimal
from sqlalchemy import Integer, String, DateTime, Numeric, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column
from datetime import datetime, timezone
from aeroledger.db.session import Base

CHARGE = "CHARGE"
DEPOSIT = "DEPOSIT"
FUEL_CREDIT = "FUEL_CREDIT"
TRANSACTION_TYPES = (CHARGE, DEPOSIT, FUEL_CREDIT)

class Transaction(Base):
    """Ledger entry. Charges are negative, deposits and fuel credits positive."""

    __tablename__ = "transactions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id"), index=True)
    monto: Mapped[Decimal] = mapped_column(Numeric(14, 2))
    tipo: Mapped[str] = mapped_column(String(20), index=True)

    flight_id: Mapped[int | None] = mapped_column(Integer, ForeignKey("flights.id"), nullable=True, index=True)
    deposit_id: Mapped[int | None] = mapped_column(Integer, nullable=True, index=True)
    fuel_log_id: Mapped[int | None] = mapped_column(Integer, nullable=True, index=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
