"""
Flight submission workflow.

    PENDIENTE ──► ESPERANDO_APROBACION ──► COMPLETADO
        │                  │
        └──────────────────┴──────────────► CANCELADO

COMPLETADO, CANCELADO and ERROR are terminal. ERROR is reserved for
automated validation and is never produced here.
"""

import logging
from datetime import datetime
from typing import Any

from sqlalchemy import select
from sqlalchemy.orm import Session

from aeroledger.core.config import settings
from aeroledger.models.flight_submission import (
    FlightSubmission,
    PENDIENTE,
    ESPERANDO_APROBACION,
    COMPLETADO,
    CANCELADO,
    ERROR,
)
from aeroledger.models.user import User
from aeroledger.services import counter_service
from aeroledger.services.errors import NotFoundError, InvalidStateError, IncompleteDataError, ValidationError

logger = logging.getLogger(__name__)

TERMINAL_STATES = frozenset({COMPLETADO, CANCELADO, ERROR})

TRANSITIONS: dict[str, frozenset[str]] = {
    PENDIENTE: frozenset({ESPERANDO_APROBACION, COMPLETADO, CANCELADO}),
    ESPERANDO_APROBACION: frozenset({COMPLETADO, CANCELADO}),
    COMPLETADO: frozenset(),
    CANCELADO: frozenset(),
    ERROR: frozenset(),
}

_OPERATION = {
    ESPERANDO_APROBACION: "send for approval",
    COMPLETADO: "approve",
    CANCELADO: "cancel",
}


def can_transition(current: str, target: str) -> bool:
    return target in TRANSITIONS.get(current, frozenset())


def ensure_transition(submission: FlightSubmission, target: str) -> None:
    if not can_transition(submission.estado, target):
        raise InvalidStateError(
            submission.estado,
            _OPERATION.get(target, f"move to {target}"),
            message=f"Submission {submission.id} is {submission.estado}; cannot move to {target}",
        )


def get_submission(db: Session, submission_id: int, lock: bool = False) -> FlightSubmission:
    q = select(FlightSubmission).where(FlightSubmission.id == submission_id)
    if lock:
        q = q.with_for_update()
    submission = db.execute(q).scalar_one_or_none()
    if not submission:
        raise NotFoundError("submission", submission_id)
    return submission


def create_flight_submission(
    db: Session,
    piloto_id: int,
    hobbs_final: Any,
    tach_final: Any,
    fecha_vuelo: datetime | None = None,
    aircraft_id: str | None = None,
    copiloto: str | None = None,
    detalle: str | None = None,
    ruta: str | None = None,
    cliente: str | None = None,
) -> FlightSubmission:
    """Record a pilot's report. Counters are validated against the current baseline here, not at approval."""
    hobbs = counter_service.to_decimal(hobbs_final)
    tach = counter_service.to_decimal(tach_final)
    missing = [name for name, v in (("hobbs_final", hobbs), ("tach_final", tach)) if v is None]
    if missing:
        raise IncompleteDataError("HOBBS and TACH final values are required", fields=missing)

    pilot = db.get(User, piloto_id)
    if not pilot or not pilot.is_active:
        raise NotFoundError("pilot", piloto_id)

    aircraft = counter_service.get_aircraft(db, aircraft_id or settings.DEFAULT_AIRCRAFT)
    baseline = counter_service.resolve_baseline(db, aircraft)
    if hobbs <= baseline.hobbs or tach <= baseline.tach:
        raise ValidationError(
            f"Counters must be greater than the current ones (Hobbs: {baseline.hobbs}, Tach: {baseline.tach})",
            details={"hobbs": str(baseline.hobbs), "tach": str(baseline.tach)},
        )

    submission = FlightSubmission(
        piloto_id=pilot.id,
        aircraft_id=aircraft.matricula,
        estado=PENDIENTE,
        fecha_vuelo=fecha_vuelo or datetime.now(),
        hobbs_final=hobbs,
        tach_final=tach,
        copiloto=copiloto or None,
        detalle=detalle or None,
        ruta=ruta or None,
        cliente=cliente or pilot.codigo,
    )
    db.add(submission)
    db.commit()
    db.refresh(submission)
    logger.info(
        "Submission %s created by pilot %s for %s: hobbs=%s tach=%s",
        submission.id, pilot.id, aircraft.matricula, hobbs, tach,
    )
    return submission


def mark_awaiting_approval(db: Session, submission_id: int) -> FlightSubmission:
    submission = get_submission(db, submission_id, lock=True)
    ensure_transition(submission, ESPERANDO_APROBACION)
    submission.estado = ESPERANDO_APROBACION
    db.commit()
    db.refresh(submission)
    return submission


def list_submissions(db: Session, estado: str | None = None, piloto_id: int | None = None, limit: int = 200) -> list[FlightSubmission]:
    q = select(FlightSubmission)
    if estado:
        q = q.where(FlightSubmission.estado == estado)
    if piloto_id is not None:
        q = q.where(FlightSubmission.piloto_id == piloto_id)
    q = q.order_by(FlightSubmission.created_at.desc(), FlightSubmission.id.desc()).limit(min(max(limit, 1), 1000))
    return list(db.execute(q).scalars().all())
