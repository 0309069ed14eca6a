from decimal import Decimal
from sqlalchemy import Integer, String, DateTime, Boolean, Numeric
from sqlalchemy.orm import Mapped, mapped_column
from datetime import datetime, timezone
from aeroledger.db.session import Base

class User(Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    email: Mapped[str] = mapped_column(String(320), unique=True, index=True)
    full_name: Mapped[str] = mapped_column(String(200), default="")
    role: Mapped[str] = mapped_column(String(30), index=True, default="pilot")  # pilot, admin, superadmin
    codigo: Mapped[str | None] = mapped_column(String(20), unique=True, nullable=True)  # paying client code
    tarifa_hora: Mapped[Decimal | None] = mapped_column(Numeric(12, 2), nullable=True)  # suggested hourly rate
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
