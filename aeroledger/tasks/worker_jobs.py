from sqlalchemy.orm import Session
from sqlalchemy.exc import ProgrammingError, OperationalError

from aeroledger.db.session import SessionLocal
from aeroledger.services.email_service import process_pending_emails
from aeroledger.services.cancellation_service import find_orphaned_submissions


def process_email_queue(limit: int = 50) -> dict:
    """Process queued/failed emails (retry send). Run periodically via Celery beat."""
    db: Session = SessionLocal()
    try:
        try:
            return process_pending_emails(db, limit=limit)
        except (ProgrammingError, OperationalError):
            # DB not migrated yet; don't crash the worker.
            db.rollback()
            return {"skipped": True, "reason": "missing_tables"}
    finally:
        db.close()


def check_orphaned_submissions() -> dict:
    """Report COMPLETADO submissions left without a flight by manual deletions."""
    db: Session = SessionLocal()
    try:
        try:
            rows = find_orphaned_submissions(db)
        except (ProgrammingError, OperationalError):
            db.rollback()
            return {"skipped": True, "reason": "missing_tables"}
        return {"orphaned": [s.id for s in rows]}
    finally:
        db.close()
