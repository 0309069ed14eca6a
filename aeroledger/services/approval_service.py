"""
Approval Service

Turns a pending flight submission into an approved Flight. Every effect
(flight row, aircraft counters, component hours, CHARGE transaction,
submission status) is written in one database transaction; notifications run
only after it commits.
"""

import logging
from datetime import datetime
from decimal import Decimal
from typing import Any

from sqlalchemy.orm import Session

from aeroledger.models.component import AIRFRAME, ENGINE, PROPELLER
from aeroledger.models.flight import Flight
from aeroledger.models.flight_submission import FlightSubmission, COMPLETADO
from aeroledger.models.transaction import CHARGE
from aeroledger.services import counter_service, ledger_service, notification_service
from aeroledger.services.audit_service import log_audit
from aeroledger.services.errors import LedgerError, IncompleteDataError, ValidationError
from aeroledger.services.submission_service import get_submission, ensure_transition

logger = logging.getLogger(__name__)

CENTS = Decimal("0.01")


def flight_cost(diff_hobbs: Decimal, rate: Decimal, instructor_rate: Decimal) -> Decimal:
    """HOBBS hours billed at the aircraft rate plus the instructor/safety-pilot rate."""
    return (diff_hobbs * (rate + instructor_rate)).quantize(CENTS)


def _rate(value: Any, field: str) -> Decimal:
    d = counter_service.to_decimal(value)
    if d is None:
        return Decimal("0")
    if d < 0:
        raise ValidationError(f"{field} cannot be negative", field=field)
    return d


def _approve(db: Session, submission_id: int, rate: Any, instructor_rate: Any, actor: str) -> tuple[FlightSubmission, Flight]:
    # Status is re-read under a row lock so a concurrent approval or
    # cancellation of the same submission waits and then fails the check.
    submission = get_submission(db, submission_id, lock=True)
    ensure_transition(submission, COMPLETADO)

    hobbs_fin = counter_service.to_decimal(submission.hobbs_final)
    tach_fin = counter_service.to_decimal(submission.tach_final)
    missing = [name for name, v in (("hobbs_final", hobbs_fin), ("tach_final", tach_fin)) if v is None]
    if missing:
        raise IncompleteDataError(f"Submission {submission.id} has no HOBBS/TACH values", fields=missing)

    rate_d = _rate(rate, "rate")
    instructor_d = _rate(instructor_rate, "instructor_rate")

    aircraft = counter_service.get_aircraft(db, submission.aircraft_id, lock=True)
    components = counter_service.get_components(db, aircraft.matricula, lock=True)
    baseline = counter_service.resolve_baseline(db, aircraft)

    # Monotonicity was checked when the pilot submitted; it is not re-checked here.
    diff_hobbs = hobbs_fin - baseline.hobbs
    diff_tach = tach_fin - baseline.tach
    costo = flight_cost(diff_hobbs, rate_d, instructor_d)
    hours = counter_service.derive_component_hours(components, diff_tach)

    flight = Flight(
        fecha=submission.fecha_vuelo or datetime.now(),
        hobbs_inicio=baseline.hobbs,
        hobbs_fin=hobbs_fin,
        tach_inicio=baseline.tach,
        tach_fin=tach_fin,
        diff_hobbs=diff_hobbs,
        diff_tach=diff_tach,
        costo=costo,
        tarifa=rate_d,
        instructor_rate=instructor_d,
        airframe_hours=hours.get(AIRFRAME),
        engine_hours=hours.get(ENGINE),
        propeller_hours=hours.get(PROPELLER),
        cliente=submission.cliente,
        copiloto=submission.copiloto,
        detalle=submission.detalle,
        ruta=submission.ruta,
        piloto_id=submission.piloto_id,
        aircraft_id=aircraft.matricula,
        submission_id=submission.id,
    )
    db.add(flight)
    db.flush()

    counter_service.apply_flight_counters(aircraft, components, hobbs_fin, tach_fin, hours)
    ledger_service.post_transaction(db, submission.piloto_id, -costo, CHARGE, flight_id=flight.id)

    submission.estado = COMPLETADO
    submission.rate = rate_d
    submission.instructor_rate = instructor_d
    submission.flight_id = flight.id

    log_audit(db, actor, "submission.approve", "submission", submission.id, {
        "flightId": flight.id,
        "baselineFlightId": baseline.flight_id,
        "diffHobbs": diff_hobbs,
        "diffTach": diff_tach,
        "rate": rate_d,
        "instructorRate": instructor_d,
        "costo": costo,
    })
    return submission, flight


def approve_flight_submission(
    db: Session,
    submission_id: int,
    rate: Any,
    instructor_rate: Any,
    actor: str = "admin",
) -> dict:
    """Approve a submission. Returns {"success", "flightId"} or {"success": False, "error", "code"}."""
    try:
        submission, flight = _approve(db, submission_id, rate, instructor_rate, actor)
        summary = (flight.id, flight.diff_hobbs, flight.diff_tach, flight.costo)
        db.commit()
    except LedgerError as e:
        db.rollback()
        logger.warning("Approval of submission %s rejected: %s", submission_id, e.message)
        return {"success": False, "error": e.message, "code": e.code}
    except Exception:
        db.rollback()
        logger.exception("Error approving submission %s", submission_id)
        return {"success": False, "error": "Unexpected error while approving the submission", "code": "INTERNAL_ERROR"}

    logger.info(
        "Submission %s approved as flight %s: diff_hobbs=%s diff_tach=%s costo=%s", submission_id, *summary,
    )
    notification_service.notify_flight_approved(db, submission, flight)
    return {"success": True, "flightId": summary[0]}
