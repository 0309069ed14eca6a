"""
Cancellation Service

Inverse of approval: removes a flight together with its CHARGE entry and
resets the aircraft counters and component hours from the newest remaining
flight of the same aircraft.

If another flight was approved after the one being removed, the reset target
is that newer flight, so the result is consistent but not an exact inverse of
the removed approval.

The same module holds the other manual corrections of the flight log: editing
a flight's counters and registering a component overhaul.
"""

import logging
from datetime import datetime
from decimal import Decimal
from typing import Any

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from aeroledger.models.component import COMPONENT_TYPES, ENGINE, PROPELLER, FLIGHT_HOURS_FIELD
from aeroledger.models.flight import Flight
from aeroledger.models.flight_submission import FlightSubmission, COMPLETADO, CANCELADO
from aeroledger.models.transaction import Transaction, CHARGE
from aeroledger.services import counter_service, notification_service
from aeroledger.services.audit_service import log_audit
from aeroledger.services.approval_service import flight_cost
from aeroledger.services.errors import LedgerError, NotFoundError, IncompleteDataError, ValidationError
from aeroledger.services.submission_service import get_submission, ensure_transition

logger = logging.getLogger(__name__)


def _remove_flight(db: Session, flight: Flight) -> Flight | None:
    """Delete a flight and its ledger entries, then roll the counters back. Returns the new latest flight."""
    aircraft = counter_service.get_aircraft(db, flight.aircraft_id, lock=True)
    components = counter_service.get_components(db, aircraft.matricula, lock=True)

    db.execute(delete(Transaction).where(Transaction.flight_id == flight.id))
    db.delete(flight)
    db.flush()

    return counter_service.rollback_counters(db, aircraft, components, removed_flight=flight)


def _linked_flight(db: Session, submission: FlightSubmission) -> Flight | None:
    q = select(Flight).where(Flight.submission_id == submission.id)
    if submission.flight_id is not None:
        q = select(Flight).where(Flight.id == submission.flight_id)
    return db.execute(q.with_for_update()).scalar_one_or_none()


def _cancel(db: Session, submission_id: int, reason: str | None, actor: str) -> FlightSubmission:
    submission = get_submission(db, submission_id, lock=True)
    if submission.estado == COMPLETADO and submission.flight_id is not None:
        if db.get(Flight, submission.flight_id) is None:
            logger.warning(
                "Submission %s is COMPLETADO but flight %s no longer exists; leaving it untouched",
                submission.id, submission.flight_id,
            )
    ensure_transition(submission, CANCELADO)

    flight = _linked_flight(db, submission)
    previous = None
    removed_id = None
    if flight is not None:
        removed_id = flight.id
        previous = _remove_flight(db, flight)
        submission.flight_id = None

    submission.estado = CANCELADO
    submission.error_message = f"Cancelado: {reason}" if reason else "Cancelado por administrador"

    log_audit(db, actor, "submission.cancel", "submission", submission.id, {
        "reason": reason or "",
        "removedFlightId": removed_id,
        "resetToFlightId": previous.id if previous is not None else None,
    })
    return submission


def cancel_flight_submission(db: Session, submission_id: int, reason: str | None = None, actor: str = "admin") -> dict:
    """Cancel a submission. Returns {"success": True} or {"success": False, "error", "code"}."""
    try:
        submission = _cancel(db, submission_id, reason, actor)
        db.commit()
    except LedgerError as e:
        db.rollback()
        logger.warning("Cancellation of submission %s rejected: %s", submission_id, e.message)
        return {"success": False, "error": e.message, "code": e.code}
    except Exception:
        db.rollback()
        logger.exception("Error cancelling submission %s", submission_id)
        return {"success": False, "error": "Unexpected error while cancelling the submission", "code": "INTERNAL_ERROR"}

    logger.info("Submission %s cancelled", submission_id)
    notification_service.notify_submission_cancelled(db, submission)
    return {"success": True}


def delete_flight(db: Session, flight_id: int, actor: str = "admin") -> dict:
    """Manual correction: remove an approved flight and roll the counters back.

    A COMPLETADO submission keeps its status and link; the resulting
    COMPLETADO-without-flight state is logged, not repaired.
    """
    try:
        flight = db.execute(select(Flight).where(Flight.id == flight_id).with_for_update()).scalar_one_or_none()
        if flight is None:
            raise NotFoundError("flight", flight_id)

        submission = None
        if flight.submission_id is not None:
            submission = db.get(FlightSubmission, flight.submission_id)

        previous = _remove_flight(db, flight)
        if submission is not None:
            if submission.estado == COMPLETADO:
                logger.warning(
                    "Flight %s deleted while submission %s is COMPLETADO; submission now has no flight",
                    flight_id, submission.id,
                )
            else:
                submission.flight_id = None

        log_audit(db, actor, "flight.delete", "flight", flight_id, {
            "submissionId": submission.id if submission is not None else None,
            "resetToFlightId": previous.id if previous is not None else None,
        })
        db.commit()
    except LedgerError as e:
        db.rollback()
        logger.warning("Deletion of flight %s rejected: %s", flight_id, e.message)
        return {"success": False, "error": e.message, "code": e.code}
    except Exception:
        db.rollback()
        logger.exception("Error deleting flight %s", flight_id)
        return {"success": False, "error": "Unexpected error while deleting the flight", "code": "INTERNAL_ERROR"}

    logger.info("Flight %s deleted", flight_id)
    return {"success": True}


def find_orphaned_submissions(db: Session) -> list[FlightSubmission]:
    """COMPLETADO submissions whose flight was deleted by a manual correction."""
    rows = db.execute(
        select(FlightSubmission)
        .outerjoin(Flight, Flight.id == FlightSubmission.flight_id)
        .where(FlightSubmission.estado == COMPLETADO, Flight.id.is_(None))
        .order_by(FlightSubmission.id)
    ).scalars().all()
    for s in rows:
        logger.warning("Inconsistent submission %s: COMPLETADO without a flight", s.id)
    return list(rows)


def _correct_counters(db: Session, flight_id: int, values: dict[str, Any], actor: str) -> Flight:
    counters = {name: counter_service.to_decimal(v) for name, v in values.items()}
    missing = [name for name, v in counters.items() if v is None]
    if missing:
        raise IncompleteDataError("HOBBS and TACH start and end values are required", fields=missing)
    hobbs_inicio, hobbs_fin = counters["hobbs_inicio"], counters["hobbs_fin"]
    tach_inicio, tach_fin = counters["tach_inicio"], counters["tach_fin"]
    if hobbs_fin <= hobbs_inicio:
        raise ValidationError("HOBBS final must be greater than HOBBS inicio", field="hobbs_fin")
    if tach_fin <= tach_inicio:
        raise ValidationError("TACH final must be greater than TACH inicio", field="tach_fin")

    flight = db.execute(select(Flight).where(Flight.id == flight_id).with_for_update()).scalar_one_or_none()
    if flight is None:
        raise NotFoundError("flight", flight_id)
    aircraft = counter_service.get_aircraft(db, flight.aircraft_id, lock=True)
    components = counter_service.get_components(db, aircraft.matricula, lock=True)
    latest = counter_service.latest_flight(db, aircraft.matricula)
    is_latest = latest is not None and latest.id == flight.id

    diff_hobbs = hobbs_fin - hobbs_inicio
    diff_tach = tach_fin - tach_inicio
    adjustment = diff_tach - Decimal(flight.diff_tach)
    for field in FLIGHT_HOURS_FIELD.values():
        snapshot = getattr(flight, field)
        if snapshot is not None:
            setattr(flight, field, counter_service.round_hours(Decimal(snapshot) + adjustment))

    previous_costo = flight.costo
    flight.hobbs_inicio, flight.hobbs_fin = hobbs_inicio, hobbs_fin
    flight.tach_inicio, flight.tach_fin = tach_inicio, tach_fin
    flight.diff_hobbs, flight.diff_tach = diff_hobbs, diff_tach
    flight.costo = flight_cost(diff_hobbs, Decimal(flight.tarifa), Decimal(flight.instructor_rate or 0))

    charges = db.execute(
        select(Transaction).where(Transaction.flight_id == flight.id, Transaction.tipo == CHARGE)
    ).scalars().all()
    for txn in charges:
        txn.monto = -flight.costo

    # Later flights keep their own snapshots; only the newest one drives the counters
    if is_latest:
        aircraft.hobbs_actual = hobbs_fin
        aircraft.tach_actual = tach_fin
        for c in components:
            snapshot = getattr(flight, FLIGHT_HOURS_FIELD[c.tipo])
            if snapshot is not None:
                c.horas_acumuladas = snapshot

    log_audit(db, actor, "flight.correct_counters", "flight", flight.id, {
        **counters,
        "tachAdjustment": adjustment,
        "costoAnterior": previous_costo,
        "costo": flight.costo,
        "updatedAircraft": is_latest,
    })
    return flight


def correct_flight_counters(
    db: Session,
    flight_id: int,
    hobbs_inicio: Any,
    hobbs_fin: Any,
    tach_inicio: Any,
    tach_fin: Any,
    actor: str = "admin",
) -> dict:
    """Manual correction of a flight's HOBBS/TACH readings.

    Diffs, cost and the flight's CHARGE follow the new readings; component
    snapshots move by the TACH adjustment. The aircraft counters and component
    rollups are rewritten only when the flight is the newest of its aircraft.
    """
    values = {
        "hobbs_inicio": hobbs_inicio,
        "hobbs_fin": hobbs_fin,
        "tach_inicio": tach_inicio,
        "tach_fin": tach_fin,
    }
    try:
        flight = _correct_counters(db, flight_id, values, actor)
        summary = (flight.hobbs_inicio, flight.hobbs_fin, flight.tach_inicio, flight.tach_fin, flight.costo)
        db.commit()
    except LedgerError as e:
        db.rollback()
        logger.warning("Counter correction of flight %s rejected: %s", flight_id, e.message)
        return {"success": False, "error": e.message, "code": e.code}
    except Exception:
        db.rollback()
        logger.exception("Error correcting counters of flight %s", flight_id)
        return {"success": False, "error": "Unexpected error while correcting the flight counters", "code": "INTERNAL_ERROR"}

    logger.info(
        "Flight %s counters corrected: hobbs %s->%s tach %s->%s costo=%s",
        flight_id, *summary,
    )
    return {"success": True, "flightId": flight_id}


def _register_overhaul(
    db: Session,
    aircraft_id: str,
    tipo: str,
    overhaul_airframe_hours: Any,
    overhaul_date: datetime,
    notes: str | None,
    actor: str,
) -> tuple[Decimal, int]:
    if tipo not in COMPONENT_TYPES:
        raise ValidationError(f"Unknown component type {tipo}", field="tipo")
    at_airframe = counter_service.to_decimal(overhaul_airframe_hours)
    if at_airframe is None or at_airframe <= 0:
        raise ValidationError("Overhaul airframe hours must be greater than 0", field="airframe_hours")
    at_airframe = counter_service.round_hours(at_airframe)

    aircraft = counter_service.get_aircraft(db, aircraft_id, lock=True)
    component = next((c for c in counter_service.get_components(db, aircraft.matricula, lock=True) if c.tipo == tipo), None)
    if component is None:
        raise NotFoundError("component", f"{aircraft.matricula}/{tipo}")

    last = counter_service.latest_flight(db, aircraft.matricula)
    if last is None or last.airframe_hours is None:
        raise ValidationError(f"{aircraft.matricula} has no flights with airframe hours")
    current_airframe = Decimal(last.airframe_hours)
    if at_airframe > current_airframe:
        raise ValidationError(
            f"Overhaul airframe hours ({at_airframe}) cannot exceed the current ones ({current_airframe})",
            field="airframe_hours",
        )

    component.last_overhaul_airframe = at_airframe
    component.last_overhaul_date = overhaul_date
    component.overhaul_notes = notes or None

    # AIRFRAME is the stable reference: TACH restarts when an engine is overhauled
    recalculated = 0
    if tipo in (ENGINE, PROPELLER):
        field = FLIGHT_HOURS_FIELD[tipo]
        flights = db.execute(
            select(Flight)
            .where(Flight.aircraft_id == aircraft.matricula, Flight.airframe_hours >= at_airframe)
            .order_by(Flight.fecha.asc(), Flight.created_at.asc(), Flight.id.asc())
            .with_for_update()
        ).scalars().all()
        for f in flights:
            setattr(f, field, counter_service.round_hours(Decimal(f.airframe_hours) - at_airframe))
        recalculated = len(flights)
        component.horas_acumuladas = counter_service.round_hours(current_airframe - at_airframe)

    log_audit(db, actor, "component.overhaul", "component", component.id, {
        "aircraftId": aircraft.matricula,
        "tipo": tipo,
        "airframeHours": at_airframe,
        "fecha": overhaul_date,
        "recalculatedFlights": recalculated,
    })
    return current_airframe - at_airframe, recalculated


def register_overhaul(
    db: Session,
    aircraft_id: str,
    tipo: str,
    overhaul_airframe_hours: Any,
    overhaul_date: datetime,
    notes: str | None = None,
    actor: str = "admin",
) -> dict:
    """Record a component overhaul at a given airframe reading.

    ENGINE and PROPELLER hours restart from that reading on every flight at or
    after it, and the component rollup takes the value of the newest flight.
    """
    try:
        since, recalculated = _register_overhaul(
            db, aircraft_id, tipo, overhaul_airframe_hours, overhaul_date, notes, actor,
        )
        db.commit()
    except LedgerError as e:
        db.rollback()
        logger.warning("Overhaul of %s/%s rejected: %s", aircraft_id, tipo, e.message)
        return {"success": False, "error": e.message, "code": e.code}
    except Exception:
        db.rollback()
        logger.exception("Error registering overhaul of %s/%s", aircraft_id, tipo)
        return {"success": False, "error": "Unexpected error while registering the overhaul", "code": "INTERNAL_ERROR"}

    logger.info("Overhaul of %s on %s registered; %s flights recalculated", tipo, aircraft_id, recalculated)
    return {"success": True, "hoursSinceOverhaul": since, "recalculatedFlights": recalculated}
