from decimal import Decimal
from sqlalchemy import Integer, String, DateTime, Numeric, Text, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column
from datetime import datetime, timezone
from aeroledger.db.session import Base

PENDIENTE = "PENDIENTE"
ESPERANDO_APROBACION = "ESPERANDO_APROBACION"
COMPLETADO = "COMPLETADO"
CANCELADO = "CANCELADO"
ERROR = "ERROR"

class FlightSubmission(Base):
    __tablename__ = "flight_submissions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    piloto_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id"), index=True)
    aircraft_id: Mapped[str] = mapped_column(String(20), ForeignKey("aircraft.matricula"), index=True)

    estado: Mapped[str] = mapped_column(String(30), default=PENDIENTE, index=True)
    error_message: Mapped[str | None] = mapped_column(Text, nullable=True)

    fecha_vuelo: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    hobbs_final: Mapped[Decimal | None] = mapped_column(Numeric(10, 2), nullable=True)
    tach_final: Mapped[Decimal | None] = mapped_column(Numeric(10, 2), nullable=True)

    copiloto: Mapped[str | None] = mapped_column(String(200), nullable=True)  # co-pilot or instructor
    detalle: Mapped[str | None] = mapped_column(Text, nullable=True)
    ruta: Mapped[str | None] = mapped_column(String(200), nullable=True)
    cliente: Mapped[str | None] = mapped_column(String(20), nullable=True)

    # Filled in at approval time
    rate: Mapped[Decimal | None] = mapped_column(Numeric(12, 2), nullable=True)
    instructor_rate: Mapped[Decimal | None] = mapped_column(Numeric(12, 2), nullable=True)
    flight_id: Mapped[int | None] = mapped_column(Integer, nullable=True, index=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )
