from decimal import Decimal
from sqlalchemy import Integer, String, DateTime, Numeric, Text, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column
from datetime import datetime, timezone
from aeroledger.db.session import Base

PENDIENTE = "PENDIENTE"
APROBADO = "APROBADO"

class Deposit(Base):
    __tablename__ = "deposits"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id"), index=True)
    fecha: Mapped[datetime] = mapped_column(DateTime)
    monto: Mapped[Decimal] = mapped_column(Numeric(14, 2))
    detalle: Mapped[str | None] = mapped_column(Text, nullable=True)
    estado: Mapped[str] = mapped_column(String(20), default=PENDIENTE, index=True)  # PENDIENTE, APROBADO
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
