from decimal import Decimal
from sqlalchemy import Integer, String, DateTime, Numeric, Text, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column
from datetime import datetime, timezone
from aeroledger.db.session import Base
from aeroledger.models.deposit import PENDIENTE, APROBADO  # noqa: F401

class FuelLog(Base):
    __tablename__ = "fuel_logs"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id"), index=True)
    fecha: Mapped[datetime] = mapped_column(DateTime, index=True)  # purchase date, drives the credit cutoff
    litros: Mapped[Decimal] = mapped_column(Numeric(10, 2))
    monto: Mapped[Decimal] = mapped_column(Numeric(14, 2))
    detalle: Mapped[str | None] = mapped_column(Text, nullable=True)
    estado: Mapped[str] = mapped_column(String(20), default=PENDIENTE, index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
