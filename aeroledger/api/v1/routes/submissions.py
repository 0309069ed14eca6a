from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from aeroledger.db.session import get_db
from aeroledger.api.deps import require_roles, http_error
from aeroledger.models.flight_submission import FlightSubmission
from aeroledger.models.user import User
from aeroledger.schemas.flights import SubmissionOut, ApproveIn, CancelIn, OperationResult
from aeroledger.services import submission_service
from aeroledger.services.approval_service import approve_flight_submission
from aeroledger.services.cancellation_service import cancel_flight_submission
from aeroledger.services.errors import LedgerError

router = APIRouter(tags=["submissions"])

def submission_out(s: FlightSubmission) -> SubmissionOut:
    return SubmissionOut(
        id=s.id,
        estado=s.estado,
        pilotoId=s.piloto_id,
        aircraftId=s.aircraft_id,
        fechaVuelo=s.fecha_vuelo.isoformat() if s.fecha_vuelo else None,
        hobbsFinal=s.hobbs_final,
        tachFinal=s.tach_final,
        copiloto=s.copiloto,
        detalle=s.detalle,
        ruta=s.ruta,
        cliente=s.cliente,
        rate=s.rate,
        instructorRate=s.instructor_rate,
        flightId=s.flight_id,
        errorMessage=s.error_message,
        createdAt=s.created_at.isoformat() if s.created_at else None,
    )

@router.get("/admin/submissions", response_model=list[SubmissionOut])
def list_submissions(estado: str = "", pilotoId: int | None = None, limit: int = 200,
                     db: Session = Depends(get_db), me: User = Depends(require_roles("admin","superadmin"))):
    rows = submission_service.list_submissions(db, estado=estado or None, piloto_id=pilotoId, limit=limit)
    return [submission_out(s) for s in rows]

@router.post("/admin/submissions/{submission_id}/await", response_model=SubmissionOut)
def send_for_approval(submission_id: int, db: Session = Depends(get_db), me: User = Depends(require_roles("admin","superadmin"))):
    try:
        s = submission_service.mark_awaiting_approval(db, submission_id)
    except LedgerError as e:
        db.rollback()
        raise http_error(e.code, e.message)
    return submission_out(s)

@router.post("/admin/submissions/{submission_id}/approve", response_model=OperationResult)
def approve(submission_id: int, body: ApproveIn, db: Session = Depends(get_db), me: User = Depends(require_roles("admin","superadmin"))):
    result = approve_flight_submission(db, submission_id, body.rate, body.instructorRate, actor=me.email)
    if not result["success"]:
        raise http_error(result.get("code"), result["error"])
    return result

@router.post("/admin/submissions/{submission_id}/cancel", response_model=OperationResult)
def cancel(submission_id: int, body: CancelIn | None = None, db: Session = Depends(get_db), me: User = Depends(require_roles("admin","superadmin"))):
    reason = body.reason if body else None
    result = cancel_flight_submission(db, submission_id, reason, actor=me.email)
    if not result["success"]:
        raise http_error(result.get("code"), result["error"])
    return result
