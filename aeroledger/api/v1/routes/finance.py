from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from aeroledger.db.session import get_db
from aeroledger.api.deps import require_roles, http_error
from aeroledger.models.user import User
from aeroledger.schemas.finance import PendingRecordOut, AccountOut, PilotBalanceOut
from aeroledger.services import finance_service, ledger_service
from aeroledger.services.errors import LedgerError

router = APIRouter(tags=["finance"])

def _pending_out(row, litros=None) -> PendingRecordOut:
    return PendingRecordOut(
        id=row.id,
        userId=row.user_id,
        fecha=row.fecha.isoformat(),
        monto=row.monto,
        litros=litros,
        detalle=row.detalle,
        estado=row.estado,
    )

@router.get("/admin/finance/pending")
def pending(db: Session = Depends(get_db), me: User = Depends(require_roles("admin","superadmin"))):
    rows = finance_service.list_pending(db)
    return {
        "deposits": [_pending_out(d) for d in rows["deposits"]],
        "fuelLogs": [_pending_out(f, litros=f.litros) for f in rows["fuelLogs"]],
    }

@router.post("/admin/deposits/{deposit_id}/approve")
def approve_deposit(deposit_id: int, db: Session = Depends(get_db), me: User = Depends(require_roles("admin","superadmin"))):
    try:
        finance_service.approve_deposit(db, deposit_id, actor=me.email)
    except LedgerError as e:
        raise http_error(e.code, e.message)
    return {"ok": True}

@router.post("/admin/deposits/{deposit_id}/reject")
def reject_deposit(deposit_id: int, db: Session = Depends(get_db), me: User = Depends(require_roles("admin","superadmin"))):
    try:
        finance_service.reject_deposit(db, deposit_id, actor=me.email)
    except LedgerError as e:
        raise http_error(e.code, e.message)
    return {"ok": True}

@router.post("/admin/fuel-logs/{fuel_log_id}/approve")
def approve_fuel(fuel_log_id: int, db: Session = Depends(get_db), me: User = Depends(require_roles("admin","superadmin"))):
    try:
        finance_service.approve_fuel(db, fuel_log_id, actor=me.email)
    except LedgerError as e:
        raise http_error(e.code, e.message)
    return {"ok": True}

@router.post("/admin/fuel-logs/{fuel_log_id}/reject")
def reject_fuel(fuel_log_id: int, db: Session = Depends(get_db), me: User = Depends(require_roles("admin","superadmin"))):
    try:
        finance_service.reject_fuel(db, fuel_log_id, actor=me.email)
    except LedgerError as e:
        raise http_error(e.code, e.message)
    return {"ok": True}

@router.get("/admin/pilots/{pilot_id}/account", response_model=AccountOut)
def pilot_account(pilot_id: int, db: Session = Depends(get_db), me: User = Depends(require_roles("admin","superadmin"))):
    try:
        return ledger_service.account_statement(db, pilot_id)
    except LedgerError as e:
        raise http_error(e.code, e.message)

@router.get("/admin/balances", response_model=list[PilotBalanceOut])
def balances(db: Session = Depends(get_db), me: User = Depends(require_roles("admin","superadmin"))):
    return ledger_service.balances_by_pilot(db)
