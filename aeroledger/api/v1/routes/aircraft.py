from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from aeroledger.db.session import get_db
from aeroledger.api.deps import require_roles, http_error
from aeroledger.models.user import User
from aeroledger.schemas.flights import BaselineIn, OverhaulIn
from aeroledger.services import counter_service
from aeroledger.services.cancellation_service import register_overhaul
from aeroledger.services.errors import LedgerError

router = APIRouter(tags=["aircraft"])

@router.get("/admin/aircraft/{matricula}")
def aircraft_detail(matricula: str, db: Session = Depends(get_db), me: User = Depends(require_roles("admin","superadmin"))):
    try:
        a = counter_service.get_aircraft(db, matricula)
        return {
            "matricula": a.matricula,
            "modelo": a.modelo,
            "hobbsActual": a.hobbs_actual,
            "tachActual": a.tach_actual,
            "components": counter_service.component_status(db, matricula),
            "lastFlight": counter_service.last_counters(db, matricula),
        }
    except LedgerError as e:
        raise http_error(e.code, e.message)

@router.put("/admin/aircraft/{matricula}/baseline")
def correct_baseline(matricula: str, body: BaselineIn, db: Session = Depends(get_db), me: User = Depends(require_roles("admin","superadmin"))):
    try:
        a = counter_service.set_aircraft_baseline(
            db, matricula, body.hobbs, body.tach, body.componentHours, actor=me.email,
        )
    except LedgerError as e:
        raise http_error(e.code, e.message)
    return {"ok": True, "hobbsActual": a.hobbs_actual, "tachActual": a.tach_actual}

@router.post("/admin/aircraft/{matricula}/components/{tipo}/overhaul")
def component_overhaul(matricula: str, tipo: str, body: OverhaulIn, db: Session = Depends(get_db), me: User = Depends(require_roles("admin","superadmin"))):
    result = register_overhaul(db, matricula, tipo.upper(), body.airframeHours, body.fecha, body.notas, actor=me.email)
    if not result["success"]:
        raise http_error(result.get("code"), result["error"])
    return result
