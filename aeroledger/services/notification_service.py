"""Post-commit pilot notifications. Best effort: failures are logged, never raised."""

import logging
from decimal import Decimal
from typing import Callable

from sqlalchemy.orm import Session

from aeroledger.models.flight import Flight
from aeroledger.models.flight_submission import FlightSubmission
from aeroledger.models.user import User
from aeroledger.services.email_service import queue_email

logger = logging.getLogger(__name__)


def _fmt_clp(value) -> str:
    return f"${Decimal(value):,.0f}".replace(",", ".")


def _send(db: Session, build: Callable[[], tuple[int, str, str, str]]) -> None:
    """`build` returns (user_id, subject, body, related_ref). It runs inside the
    guard because reading expired attributes after commit hits the database."""
    user_id = None
    try:
        user_id, subject, body, related_ref = build()
        user = db.get(User, user_id)
        if not user or not user.email:
            return
        queue_email(db, user.email, subject, body, related_ref=related_ref)
    except Exception:
        db.rollback()
        logger.exception("Notification for user %s could not be queued", user_id)


def notify_flight_approved(db: Session, submission: FlightSubmission, flight: Flight) -> None:
    def build():
        body = (
            f"Tu vuelo del {flight.fecha:%d-%m-%Y} en {flight.aircraft_id} fue aprobado.\n\n"
            f"HOBBS: {flight.hobbs_inicio} -> {flight.hobbs_fin} ({flight.diff_hobbs} h)\n"
            f"TACH: {flight.tach_inicio} -> {flight.tach_fin} ({flight.diff_tach} h)\n"
            f"Cargo: {_fmt_clp(flight.costo)}\n"
        )
        return submission.piloto_id, f"Vuelo aprobado #{flight.id}", body, f"submission:{submission.id}"

    _send(db, build)


def notify_submission_cancelled(db: Session, submission: FlightSubmission) -> None:
    def build():
        body = (
            f"Tu reporte de vuelo #{submission.id} fue cancelado.\n\n"
            f"{submission.error_message or ''}\n"
        )
        return submission.piloto_id, f"Reporte de vuelo #{submission.id} cancelado", body, f"submission:{submission.id}"

    _send(db, build)


def notify_credit_posted(db: Session, user_id: int, kind: str, monto, record_id: int) -> None:
    label = "Depósito" if kind == "deposit" else "Combustible"

    def build():
        return user_id, f"{label} aprobado", f"{label} #{record_id} aprobado por {_fmt_clp(monto)}.\n", f"{kind}:{record_id}"

    _send(db, build)
