"""
Deposit and fuel approvals.

Single-record operations: they raise LedgerError subclasses and let the caller
report them.
"""

import logging
from datetime import datetime
from typing import Any

from sqlalchemy import select
from sqlalchemy.orm import Session

from aeroledger.core.config import settings
from aeroledger.models.deposit import Deposit, PENDIENTE, APROBADO
from aeroledger.models.fuel_log import FuelLog
from aeroledger.models.transaction import DEPOSIT, FUEL_CREDIT
from aeroledger.models.user import User
from aeroledger.services import ledger_service, notification_service
from aeroledger.services.audit_service import log_audit
from aeroledger.services.counter_service import to_decimal
from aeroledger.services.errors import NotFoundError, AlreadyApprovedError, InvalidStateError, ValidationError

logger = logging.getLogger(__name__)


def fuel_generates_credit(fecha: datetime) -> bool:
    """Fuel bought before the billing-policy change is approved without a ledger credit."""
    return fecha >= settings.FUEL_CREDIT_CUTOFF


def _locked(db: Session, model, record_id: int, entity: str):
    row = db.execute(select(model).where(model.id == record_id).with_for_update()).scalar_one_or_none()
    if row is None:
        raise NotFoundError(entity, record_id)
    return row


def _positive_amount(value: Any, field: str = "monto"):
    d = to_decimal(value)
    if d is None or d <= 0:
        raise ValidationError(f"{field} must be a positive number", field=field)
    return d


def _ensure_pilot(db: Session, user_id: int) -> User:
    user = db.get(User, user_id)
    if not user:
        raise NotFoundError("pilot", user_id)
    return user


def create_deposit(db: Session, user_id: int, fecha: datetime, monto: Any, detalle: str | None = None) -> Deposit:
    _ensure_pilot(db, user_id)
    deposit = Deposit(user_id=user_id, fecha=fecha, monto=_positive_amount(monto), detalle=detalle or None, estado=PENDIENTE)
    db.add(deposit)
    db.commit()
    db.refresh(deposit)
    return deposit


def create_fuel_log(db: Session, user_id: int, fecha: datetime, litros: Any, monto: Any, detalle: str | None = None) -> FuelLog:
    _ensure_pilot(db, user_id)
    fuel = FuelLog(
        user_id=user_id,
        fecha=fecha,
        litros=_positive_amount(litros, "litros"),
        monto=_positive_amount(monto),
        detalle=detalle or None,
        estado=PENDIENTE,
    )
    db.add(fuel)
    db.commit()
    db.refresh(fuel)
    return fuel


def approve_deposit(db: Session, deposit_id: int, actor: str = "admin") -> None:
    try:
        deposit = _locked(db, Deposit, deposit_id, "deposit")
        if deposit.estado == APROBADO:
            raise AlreadyApprovedError("deposit", deposit_id)
        deposit.estado = APROBADO
        ledger_service.post_transaction(db, deposit.user_id, deposit.monto, DEPOSIT, deposit_id=deposit.id)
        log_audit(db, actor, "deposit.approve", "deposit", deposit.id, {"monto": deposit.monto})
        db.commit()
    except Exception:
        db.rollback()
        raise
    logger.info("Deposit %s approved for user %s", deposit.id, deposit.user_id)
    notification_service.notify_credit_posted(db, deposit.user_id, "deposit", deposit.monto, deposit.id)


def approve_fuel(db: Session, fuel_log_id: int, actor: str = "admin") -> None:
    try:
        fuel = _locked(db, FuelLog, fuel_log_id, "fuel log")
        if fuel.estado == APROBADO:
            raise AlreadyApprovedError("fuel log", fuel_log_id)
        fuel.estado = APROBADO
        credited = fuel_generates_credit(fuel.fecha)
        if credited:
            ledger_service.post_transaction(db, fuel.user_id, fuel.monto, FUEL_CREDIT, fuel_log_id=fuel.id)
        log_audit(db, actor, "fuel.approve", "fuel_log", fuel.id, {"monto": fuel.monto, "credited": credited})
        db.commit()
    except Exception:
        db.rollback()
        raise
    if credited:
        logger.info("Fuel log %s approved and credited to user %s", fuel.id, fuel.user_id)
        notification_service.notify_credit_posted(db, fuel.user_id, "fuel", fuel.monto, fuel.id)
    else:
        logger.info("Fuel log %s approved without credit (dated before %s)", fuel.id, settings.FUEL_CREDIT_CUTOFF)


def _reject(db: Session, model, record_id: int, entity: str, actor: str) -> None:
    try:
        row = _locked(db, model, record_id, entity)
        if row.estado == APROBADO:
            raise InvalidStateError(APROBADO, "reject", message=f"{entity} {record_id} is already approved")
        log_audit(db, actor, f"{entity.replace(' ', '_')}.reject", entity.replace(" ", "_"), record_id, {
            "userId": row.user_id,
            "monto": row.monto,
        })
        db.delete(row)
        db.commit()
    except Exception:
        db.rollback()
        raise
    logger.info("%s %s rejected and deleted", entity, record_id)


def reject_deposit(db: Session, deposit_id: int, actor: str = "admin") -> None:
    _reject(db, Deposit, deposit_id, "deposit", actor)


def reject_fuel(db: Session, fuel_log_id: int, actor: str = "admin") -> None:
    _reject(db, FuelLog, fuel_log_id, "fuel log", actor)


def list_pending(db: Session) -> dict:
    deposits = db.execute(
        select(Deposit).where(Deposit.estado == PENDIENTE).order_by(Deposit.fecha.asc(), Deposit.id.asc())
    ).scalars().all()
    fuel = db.execute(
        select(FuelLog).where(FuelLog.estado == PENDIENTE).order_by(FuelLog.fecha.asc(), FuelLog.id.asc())
    ).scalars().all()
    return {"deposits": list(deposits), "fuelLogs": list(fuel)}
