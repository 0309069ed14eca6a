"""
Counter Service

Aircraft HOBBS/TACH counters and the per-component hour rollups derived from
them. The rollups are caches of the flight log: approval moves them forward
by the flight's TACH delta, cancellation/correction resets them from the
previous flight's snapshot.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP, InvalidOperation
from typing import Any

from sqlalchemy import select
from sqlalchemy.orm import Session

from aeroledger.models.aircraft import Aircraft
from aeroledger.models.component import Component, FLIGHT_HOURS_FIELD
from aeroledger.models.flight import Flight
from aeroledger.services.audit_service import log_audit
from aeroledger.services.errors import NotFoundError, InvalidStateError, ValidationError

logger = logging.getLogger(__name__)

ONE_DECIMAL = Decimal("0.1")


@dataclass(frozen=True)
class Baseline:
    hobbs: Decimal
    tach: Decimal
    flight_id: int | None = None  # None when taken from the aircraft counters


def to_decimal(value: Any) -> Decimal | None:
    """Coerce a numeric input to Decimal; None, NaN and garbage become None."""
    if value is None:
        return None
    try:
        d = value if isinstance(value, Decimal) else Decimal(str(value))
    except (InvalidOperation, ValueError):
        return None
    if d.is_nan() or d.is_infinite():
        return None
    return d


def round_hours(value: Decimal) -> Decimal:
    return Decimal(value).quantize(ONE_DECIMAL, rounding=ROUND_HALF_UP)


def latest_flight(db: Session, aircraft_id: str, exclude_flight_id: int | None = None) -> Flight | None:
    """Most recent flight of an aircraft by flight date, then creation time.

    Flights can be back-dated during corrections, so autoincrement order is
    not a reliable notion of "latest".
    """
    q = select(Flight).where(Flight.aircraft_id == aircraft_id)
    if exclude_flight_id is not None:
        q = q.where(Flight.id != exclude_flight_id)
    q = q.order_by(Flight.fecha.desc(), Flight.created_at.desc(), Flight.id.desc()).limit(1)
    return db.execute(q).scalars().first()


def resolve_baseline(db: Session, aircraft: Aircraft) -> Baseline:
    last = latest_flight(db, aircraft.matricula)
    if last is not None:
        return Baseline(hobbs=Decimal(last.hobbs_fin), tach=Decimal(last.tach_fin), flight_id=last.id)
    return Baseline(hobbs=Decimal(aircraft.hobbs_actual or 0), tach=Decimal(aircraft.tach_actual or 0))


def get_aircraft(db: Session, matricula: str, lock: bool = False) -> Aircraft:
    q = select(Aircraft).where(Aircraft.matricula == matricula)
    if lock:
        q = q.with_for_update()
    aircraft = db.execute(q).scalar_one_or_none()
    if not aircraft:
        raise NotFoundError("aircraft", matricula)
    return aircraft


def get_components(db: Session, aircraft_id: str, lock: bool = False) -> list[Component]:
    q = select(Component).where(Component.aircraft_id == aircraft_id).order_by(Component.id)
    if lock:
        q = q.with_for_update()
    return list(db.execute(q).scalars().all())


def derive_component_hours(components: list[Component], diff_tach: Decimal) -> dict[str, Decimal | None]:
    """New hours per component type. A component without a baseline stays null."""
    result: dict[str, Decimal | None] = {}
    for c in components:
        if c.horas_acumuladas is None:
            result[c.tipo] = None
        else:
            result[c.tipo] = round_hours(Decimal(c.horas_acumuladas) + diff_tach)
    return result


def apply_flight_counters(
    aircraft: Aircraft,
    components: list[Component],
    hobbs_fin: Decimal,
    tach_fin: Decimal,
    component_hours: dict[str, Decimal | None],
) -> None:
    aircraft.hobbs_actual = hobbs_fin
    aircraft.tach_actual = tach_fin
    for c in components:
        c.horas_acumuladas = component_hours.get(c.tipo)


def rollback_counters(
    db: Session,
    aircraft: Aircraft,
    components: list[Component],
    removed_flight: Flight | None = None,
) -> Flight | None:
    """Reset counters after a flight was removed. Returns the new latest flight.

    With a remaining previous flight, counters and component hours take its
    final values. Without one, the removed flight's starting values are
    restored; with nothing removed either, the stored counters are kept.
    """
    exclude_id = removed_flight.id if removed_flight is not None else None
    previous = latest_flight(db, aircraft.matricula, exclude_flight_id=exclude_id)

    if previous is not None:
        aircraft.hobbs_actual = previous.hobbs_fin
        aircraft.tach_actual = previous.tach_fin
        for c in components:
            snapshot = getattr(previous, FLIGHT_HOURS_FIELD[c.tipo], None)
            if snapshot is not None:
                c.horas_acumuladas = snapshot
            else:
                _subtract_removed_delta(c, removed_flight)
        logger.info(
            "Counters of %s reset to flight %s: hobbs=%s tach=%s",
            aircraft.matricula, previous.id, previous.hobbs_fin, previous.tach_fin,
        )
        return previous

    if removed_flight is not None:
        aircraft.hobbs_actual = removed_flight.hobbs_inicio
        aircraft.tach_actual = removed_flight.tach_inicio
        for c in components:
            _subtract_removed_delta(c, removed_flight)
        logger.info(
            "No previous flight for %s; counters restored to start of removed flight %s",
            aircraft.matricula, removed_flight.id,
        )
    return None


def _subtract_removed_delta(component: Component, removed_flight: Flight | None) -> None:
    if removed_flight is None or component.horas_acumuladas is None:
        return
    # only components that were moved forward by the removed flight
    if getattr(removed_flight, FLIGHT_HOURS_FIELD[component.tipo], None) is None:
        return
    component.horas_acumuladas = round_hours(
        Decimal(component.horas_acumuladas) - Decimal(removed_flight.diff_tach)
    )


def set_aircraft_baseline(
    db: Session,
    matricula: str,
    hobbs: Any,
    tach: Any,
    component_hours: dict[str, Any] | None = None,
    actor: str = "admin",
) -> Aircraft:
    """Initial counters of an aircraft with no flight log yet.

    Once flights exist the baseline is the latest flight's finals, so the
    correction has to go through that flight (see
    cancellation_service.correct_flight_counters).
    """
    hobbs_d, tach_d = to_decimal(hobbs), to_decimal(tach)
    if hobbs_d is None or tach_d is None:
        raise ValidationError("HOBBS and TACH are required", field="hobbs" if hobbs_d is None else "tach")
    if hobbs_d < 0 or tach_d < 0:
        raise ValidationError("Counters cannot be negative")

    try:
        aircraft = get_aircraft(db, matricula, lock=True)
        last = latest_flight(db, matricula)
        if last is not None:
            raise InvalidStateError(
                "flown",
                "correct the baseline",
                message=f"{matricula} already has flights; correct the counters of flight {last.id} instead",
            )
        aircraft.hobbs_actual = hobbs_d
        aircraft.tach_actual = tach_d
        if component_hours:
            by_type = {c.tipo: c for c in get_components(db, matricula, lock=True)}
            for tipo, hours in component_hours.items():
                c = by_type.get(tipo)
                if c is None:
                    raise NotFoundError("component", f"{matricula}/{tipo}")
                h = to_decimal(hours)
                c.horas_acumuladas = round_hours(h) if h is not None else None
        log_audit(db, actor, "aircraft.baseline", "aircraft", matricula, {
            "hobbs": hobbs_d,
            "tach": tach_d,
            "componentHours": component_hours or {},
        })
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(aircraft)
    logger.info("Baseline of %s corrected to hobbs=%s tach=%s", matricula, hobbs_d, tach_d)
    return aircraft


def component_status(db: Session, matricula: str) -> list[dict]:
    get_aircraft(db, matricula)
    items = []
    for c in get_components(db, matricula):
        hours = Decimal(c.horas_acumuladas) if c.horas_acumuladas is not None else None
        tbo = Decimal(c.limite_tbo) if c.limite_tbo is not None else None
        remaining = percent = None
        if hours is not None and tbo:
            remaining = round_hours(tbo - hours)
            percent = (hours / tbo * 100).quantize(ONE_DECIMAL, rounding=ROUND_HALF_UP)
        items.append({
            "tipo": c.tipo,
            "horas": hours,
            "limiteTbo": tbo,
            "horasRestantes": remaining,
            "porcentajeTbo": percent,
            "ultimoOverhaulAirframe": c.last_overhaul_airframe,
            "ultimoOverhaulFecha": c.last_overhaul_date.isoformat() if c.last_overhaul_date else None,
        })
    return items


def last_counters(db: Session, matricula: str) -> dict:
    """Counters a pilot should start from on the next report."""
    aircraft = get_aircraft(db, matricula)
    last = latest_flight(db, matricula)
    if last is None:
        return {
            "hobbs": aircraft.hobbs_actual,
            "tach": aircraft.tach_actual,
            "airframe": None,
            "engine": None,
            "propeller": None,
            "fecha": None,
        }
    return {
        "hobbs": last.hobbs_fin,
        "tach": last.tach_fin,
        "airframe": last.airframe_hours,
        "engine": last.engine_hours,
        "propeller": last.propeller_hours,
        "fecha": last.fecha.isoformat() if isinstance(last.fecha, datetime) else None,
    }
