from decimal import Decimal
from datetime import datetime
from sqlalchemy import Integer, String, DateTime, Numeric, Text, ForeignKey, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column
from aeroledger.db.session import Base

AIRFRAME = "AIRFRAME"
ENGINE = "ENGINE"
PROPELLER = "PROPELLER"
COMPONENT_TYPES = (AIRFRAME, ENGINE, PROPELLER)

# Column on Flight that snapshots the resulting hours of each component type
FLIGHT_HOURS_FIELD = {
    AIRFRAME: "airframe_hours",
    ENGINE: "engine_hours",
    PROPELLER: "propeller_hours",
}

class Component(Base):
    __tablename__ = "components"
    __table_args__ = (
        UniqueConstraint("aircraft_id", "tipo", name="uq_component_aircraft_tipo"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    aircraft_id: Mapped[str] = mapped_column(String(20), ForeignKey("aircraft.matricula"), index=True)
    tipo: Mapped[str] = mapped_column(String(12))  # AIRFRAME|ENGINE|PROPELLER

    # Cached rollup; null means no baseline was ever recorded
    horas_acumuladas: Mapped[Decimal | None] = mapped_column(Numeric(10, 1), nullable=True)
    limite_tbo: Mapped[Decimal | None] = mapped_column(Numeric(10, 1), nullable=True)

    # ENGINE/PROPELLER hours count from the airframe reading of the last overhaul
    last_overhaul_airframe: Mapped[Decimal | None] = mapped_column(Numeric(10, 1), nullable=True)
    last_overhaul_date: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    overhaul_notes: Mapped[str | None] = mapped_column(Text, nullable=True)
