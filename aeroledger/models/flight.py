from decimal import Decimal
from sqlalchemy import Integer, String, DateTime, Numeric, Text, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column
from datetime import datetime, timezone
from aeroledger.db.session import Base

class Flight(Base):
    __tablename__ = "flights"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    fecha: Mapped[datetime] = mapped_column(DateTime, index=True)

    hobbs_inicio: Mapped[Decimal] = mapped_column(Numeric(10, 2))
    hobbs_fin: Mapped[Decimal] = mapped_column(Numeric(10, 2))
    tach_inicio: Mapped[Decimal] = mapped_column(Numeric(10, 2))
    tach_fin: Mapped[Decimal] = mapped_column(Numeric(10, 2))
    diff_hobbs: Mapped[Decimal] = mapped_column(Numeric(10, 2))
    diff_tach: Mapped[Decimal] = mapped_column(Numeric(10, 2))

    costo: Mapped[Decimal] = mapped_column(Numeric(14, 2))
    tarifa: Mapped[Decimal] = mapped_column(Numeric(12, 2))
    instructor_rate: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=Decimal("0"))

    # Component hours after this flight (null when the component had no baseline)
    airframe_hours: Mapped[Decimal | None] = mapped_column(Numeric(10, 1), nullable=True)
    engine_hours: Mapped[Decimal | None] = mapped_column(Numeric(10, 1), nullable=True)
    propeller_hours: Mapped[Decimal | None] = mapped_column(Numeric(10, 1), nullable=True)

    cliente: Mapped[str | None] = mapped_column(String(20), nullable=True)
    copiloto: Mapped[str | None] = mapped_column(String(200), nullable=True)
    detalle: Mapped[str | None] = mapped_column(Text, nullable=True)
    ruta: Mapped[str | None] = mapped_column(String(200), nullable=True)

    piloto_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id"), index=True)
    aircraft_id: Mapped[str] = mapped_column(String(20), ForeignKey("aircraft.matricula"), index=True)
    submission_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("flight_submissions.id"), unique=True, nullable=True
    )

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
