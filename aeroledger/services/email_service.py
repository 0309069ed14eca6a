from datetime import datetime, timedelta, timezone
import logging
import smtplib
from email.message import EmailMessage
from sqlalchemy import or_
from sqlalchemy.orm import Session
import requests

from aeroledger.core.config import settings
from aeroledger.models.email_log import EmailLog

logger = logging.getLogger(__name__)


def queue_email(db: Session, to_email: str, subject: str, body: str, related_ref: str = "") -> int:
    """Queue and attempt immediate send. Body is stored so the worker can retry on failure."""
    log = EmailLog(
        to_email=to_email,
        subject=subject,
        body=body,
        status="queued",
        related_ref=related_ref,
    )
    db.add(log)
    db.commit()
    _attempt(log)
    db.commit()
    return log.id


def retry_delay(attempts: int) -> timedelta:
    """Exponential backoff: base, 2x base, 4x base, ..."""
    return timedelta(seconds=settings.EMAIL_RETRY_BASE_SECONDS * (2 ** max(attempts - 1, 0)))


def _attempt(log: EmailLog) -> bool:
    log.attempts = (log.attempts or 0) + 1
    try:
        send_email(log.to_email, log.subject, log.body or "")
    except Exception as e:
        log.last_error = str(e)[:1000]
        if log.attempts >= settings.EMAIL_MAX_ATTEMPTS:
            log.status = "dead"
            log.next_attempt_at = None
            logger.error("Giving up on email %s to %s after %s attempts: %s", log.id, log.to_email, log.attempts, e)
        else:
            log.status = "failed"
            log.next_attempt_at = datetime.now(timezone.utc) + retry_delay(log.attempts)
            logger.warning("Email %s to %s failed (attempt %s): %s", log.id, log.to_email, log.attempts, e)
        return False
    log.status = "sent"
    log.sent_at = datetime.now(timezone.utc)
    log.next_attempt_at = None
    return True


def send_email(to_email: str, subject: str, body: str):
    """Send email via SendGrid if configured, otherwise SMTP (MailHog recommended for local)."""

    if settings.SENDGRID_API_KEY:
        _send_via_sendgrid(to_email, subject, body)
        return

    msg = EmailMessage()
    msg["From"] = settings.SMTP_FROM
    msg["To"] = to_email
    msg["Subject"] = subject
    msg.set_content(body)

    with smtplib.SMTP(settings.SMTP_HOST, settings.SMTP_PORT, timeout=10) as smtp:
        if settings.SMTP_USERNAME:
            smtp.login(settings.SMTP_USERNAME, settings.SMTP_PASSWORD)
        smtp.send_message(msg)


def _send_via_sendgrid(to_email: str, subject: str, body: str):
    from_email = settings.SENDGRID_FROM_EMAIL or settings.SMTP_FROM
    payload = {
        "personalizations": [{"to": [{"email": to_email}]}],
        "from": {"email": from_email},
        "subject": subject,
        "content": [{"type": "text/plain", "value": body}],
    }
    r = requests.post(
        "https://api.sendgrid.com/v3/mail/send",
        json=payload,
        headers={"Authorization": f"Bearer {settings.SENDGRID_API_KEY}"},
        timeout=20,
    )
    if r.status_code >= 400:
        raise RuntimeError(f"SendGrid error {r.status_code}: {r.text}")


def process_pending_emails(db: Session, limit: int = 50) -> dict:
    """Retry queued or failed emails whose backoff has elapsed. Returns counts."""
    now = datetime.now(timezone.utc)
    pending = (
        db.query(EmailLog)
        .filter(
            EmailLog.status.in_(["queued", "failed"]),
            EmailLog.body.isnot(None),
            EmailLog.body != "",
            or_(EmailLog.next_attempt_at.is_(None), EmailLog.next_attempt_at <= now),
        )
        .order_by(EmailLog.created_at.asc())
        .limit(limit)
        .all()
    )
    sent, failed = 0, 0
    for log in pending:
        if _attempt(log):
            sent += 1
        else:
            failed += 1
    if pending:
        db.commit()
    return {"processed": len(pending), "sent": sent, "failed": failed}
