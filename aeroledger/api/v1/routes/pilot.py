from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from aeroledger.db.session import get_db
from aeroledger.api.deps import require_roles, http_error
from aeroledger.core.config import settings
from aeroledger.models.user import User
from aeroledger.schemas.flights import SubmissionCreate, SubmissionOut
from aeroledger.schemas.finance import DepositCreate, FuelLogCreate, AccountOut
from aeroledger.services import counter_service, finance_service, ledger_service, submission_service
from aeroledger.services.errors import LedgerError
from aeroledger.api.v1.routes.submissions import submission_out

router = APIRouter(tags=["pilot"])

@router.post("/pilot/submissions", response_model=SubmissionOut)
def create_submission(body: SubmissionCreate, db: Session = Depends(get_db), me: User = Depends(require_roles("pilot"))):
    try:
        s = submission_service.create_flight_submission(
            db,
            piloto_id=me.id,
            hobbs_final=body.hobbsFinal,
            tach_final=body.tachFinal,
            fecha_vuelo=body.fecha,
            aircraft_id=body.aircraftId,
            copiloto=body.copiloto,
            detalle=body.detalle,
            ruta=body.ruta,
            cliente=body.cliente,
        )
    except LedgerError as e:
        raise http_error(e.code, e.message)
    return submission_out(s)

@router.get("/pilot/submissions", response_model=list[SubmissionOut])
def my_submissions(db: Session = Depends(get_db), me: User = Depends(require_roles("pilot"))):
    return [submission_out(s) for s in submission_service.list_submissions(db, piloto_id=me.id)]

@router.get("/pilot/last-counters")
def my_last_counters(aircraftId: str = "", db: Session = Depends(get_db), me: User = Depends(require_roles("pilot"))):
    try:
        return counter_service.last_counters(db, aircraftId or settings.DEFAULT_AIRCRAFT)
    except LedgerError as e:
        raise http_error(e.code, e.message)

@router.get("/pilot/account", response_model=AccountOut)
def my_account(db: Session = Depends(get_db), me: User = Depends(require_roles("pilot"))):
    return ledger_service.account_statement(db, me.id)

@router.post("/pilot/deposits")
def create_deposit(body: DepositCreate, db: Session = Depends(get_db), me: User = Depends(require_roles("pilot"))):
    try:
        d = finance_service.create_deposit(db, me.id, body.fecha, body.monto, body.detalle)
    except LedgerError as e:
        raise http_error(e.code, e.message)
    return {"ok": True, "id": d.id, "estado": d.estado}

@router.post("/pilot/fuel-logs")
def create_fuel_log(body: FuelLogCreate, db: Session = Depends(get_db), me: User = Depends(require_roles("pilot"))):
    try:
        f = finance_service.create_fuel_log(db, me.id, body.fecha, body.litros, body.monto, body.detalle)
    except LedgerError as e:
        raise http_error(e.code, e.message)
    return {"ok": True, "id": f.id, "estado": f.estado}
