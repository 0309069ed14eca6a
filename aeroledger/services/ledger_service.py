"""
Ledger Service

Pilot balances are always derived from the transactions table. Nothing here
writes a balance anywhere.
"""

import logging
from decimal import Decimal

from sqlalchemy import select, func, case
from sqlalchemy.orm import Session

from aeroledger.models.transaction import Transaction, CHARGE, DEPOSIT, FUEL_CREDIT
from aeroledger.models.user import User
from aeroledger.services.errors import NotFoundError

logger = logging.getLogger(__name__)


def _dec(value) -> Decimal:
    # SQLite hands back floats for aggregates
    return value if isinstance(value, Decimal) else Decimal(str(value))


def _sum_for(tipo: str):
    return func.coalesce(func.sum(case((Transaction.tipo == tipo, Transaction.monto), else_=0)), 0)


def post_transaction(
    db: Session,
    user_id: int,
    monto: Decimal,
    tipo: str,
    flight_id: int | None = None,
    deposit_id: int | None = None,
    fuel_log_id: int | None = None,
) -> Transaction:
    """Add a ledger entry to the current unit of work. The caller commits."""
    txn = Transaction(
        user_id=user_id,
        monto=monto,
        tipo=tipo,
        flight_id=flight_id,
        deposit_id=deposit_id,
        fuel_log_id=fuel_log_id,
    )
    db.add(txn)
    return txn


def balance_for(db: Session, user_id: int) -> Decimal:
    """sum(deposits) + sum(fuel credits) - sum(charges); charges are stored negative."""
    total = db.execute(
        select(func.coalesce(func.sum(Transaction.monto), 0)).where(Transaction.user_id == user_id)
    ).scalar_one()
    return _dec(total)


def balance_breakdown(db: Session, user_id: int) -> dict:
    row = db.execute(
        select(_sum_for(DEPOSIT), _sum_for(FUEL_CREDIT), _sum_for(CHARGE))
        .where(Transaction.user_id == user_id)
    ).one()
    deposits, fuel, charges = (_dec(v) for v in row)
    return {
        "deposits": deposits,
        "fuelCredits": fuel,
        "charges": -charges,
        "balance": deposits + fuel + charges,
    }


def account_statement(db: Session, user_id: int) -> dict:
    """Chronological ledger entries with a running balance."""
    user = db.get(User, user_id)
    if not user:
        raise NotFoundError("pilot", user_id)
    rows = db.execute(
        select(Transaction)
        .where(Transaction.user_id == user_id)
        .order_by(Transaction.created_at.asc(), Transaction.id.asc())
    ).scalars().all()

    running = Decimal("0")
    entries = []
    for t in rows:
        running += _dec(t.monto)
        entries.append({
            "id": t.id,
            "tipo": t.tipo,
            "monto": _dec(t.monto),
            "flightId": t.flight_id,
            "depositId": t.deposit_id,
            "fuelLogId": t.fuel_log_id,
            "createdAt": t.created_at.isoformat() if t.created_at else None,
            "saldo": running,
        })
    return {
        "pilotId": user.id,
        "codigo": user.codigo,
        "nombre": user.full_name,
        **balance_breakdown(db, user_id),
        "entries": entries,
    }


def balances_by_pilot(db: Session) -> list[dict]:
    rows = db.execute(
        select(User.id, User.codigo, User.full_name, func.coalesce(func.sum(Transaction.monto), 0))
        .outerjoin(Transaction, Transaction.user_id == User.id)
        .where(User.role == "pilot")
        .group_by(User.id, User.codigo, User.full_name)
        .order_by(User.full_name.asc())
    ).all()
    return [
        {"pilotId": uid, "codigo": codigo, "nombre": name, "balance": _dec(total)}
        for uid, codigo, name, total in rows
    ]
