from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.orm import Session

from aeroledger.db.session import get_db
from aeroledger.api.deps import require_roles, http_error
from aeroledger.models.flight import Flight
from aeroledger.models.user import User
from aeroledger.schemas.flights import FlightOut, FlightCountersIn, OperationResult
from aeroledger.services.cancellation_service import delete_flight, correct_flight_counters

router = APIRouter(tags=["flights"])

def flight_out(f: Flight) -> FlightOut:
    return FlightOut(
        id=f.id,
        fecha=f.fecha.isoformat(),
        aircraftId=f.aircraft_id,
        pilotoId=f.piloto_id,
        submissionId=f.submission_id,
        hobbsInicio=f.hobbs_inicio,
        hobbsFin=f.hobbs_fin,
        tachInicio=f.tach_inicio,
        tachFin=f.tach_fin,
        diffHobbs=f.diff_hobbs,
        diffTach=f.diff_tach,
        costo=f.costo,
        tarifa=f.tarifa,
        instructorRate=f.instructor_rate,
        airframeHours=f.airframe_hours,
        engineHours=f.engine_hours,
        propellerHours=f.propeller_hours,
        cliente=f.cliente,
        copiloto=f.copiloto,
        detalle=f.detalle,
        ruta=f.ruta,
    )

@router.get("/admin/flights", response_model=list[FlightOut])
def list_flights(aircraftId: str = "", pilotoId: int | None = None, limit: int = 200,
                 db: Session = Depends(get_db), me: User = Depends(require_roles("admin","superadmin"))):
    q = select(Flight)
    if aircraftId:
        q = q.where(Flight.aircraft_id == aircraftId)
    if pilotoId is not None:
        q = q.where(Flight.piloto_id == pilotoId)
    q = q.order_by(Flight.fecha.desc(), Flight.created_at.desc(), Flight.id.desc()).limit(min(max(limit, 1), 1000))
    return [flight_out(f) for f in db.execute(q).scalars().all()]

@router.delete("/admin/flights/{flight_id}", response_model=OperationResult)
def remove_flight(flight_id: int, db: Session = Depends(get_db), me: User = Depends(require_roles("admin","superadmin"))):
    result = delete_flight(db, flight_id, actor=me.email)
    if not result["success"]:
        raise http_error(result.get("code"), result["error"])
    return result

@router.put("/admin/flights/{flight_id}/counters", response_model=OperationResult)
def correct_counters(flight_id: int, body: FlightCountersIn, db: Session = Depends(get_db), me: User = Depends(require_roles("admin","superadmin"))):
    result = correct_flight_counters(
        db, flight_id, body.hobbsInicio, body.hobbsFin, body.tachInicio, body.tachFin, actor=me.email,
    )
    if not result["success"]:
        raise http_error(result.get("code"), result["error"])
    return result
