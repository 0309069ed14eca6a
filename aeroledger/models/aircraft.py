from decimal import Decimal
from sqlalchemy import String, DateTime, Numeric
from sqlalchemy.orm import Mapped, mapped_column
from datetime import datetime, timezone
from aeroledger.db.session import Base

class Aircraft(Base):
    __tablename__ = "aircraft"

    matricula: Mapped[str] = mapped_column(String(20), primary_key=True)  # e.g. CC-AQI
    modelo: Mapped[str] = mapped_column(String(80), default="")

    # Counter store: equal to the finals of the latest approved flight (or a corrected baseline)
    hobbs_actual: Mapped[Decimal] = mapped_column(Numeric(10, 2), default=Decimal("0"))
    tach_actual: Mapped[Decimal] = mapped_column(Numeric(10, 2), default=Decimal("0"))

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )
