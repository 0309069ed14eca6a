"""
Tests for the notification outbox and its retry backoff.
"""

from datetime import datetime, timedelta, timezone

from aeroledger.core.config import settings
from aeroledger.models.email_log import EmailLog
from aeroledger.services import email_service


def _failing(*args, **kwargs):
    raise RuntimeError("connection refused")


class TestRetryDelay:

    def test_exponential(self):
        base = settings.EMAIL_RETRY_BASE_SECONDS
        assert email_service.retry_delay(1) == timedelta(seconds=base)
        assert email_service.retry_delay(2) == timedelta(seconds=2 * base)
        assert email_service.retry_delay(4) == timedelta(seconds=8 * base)


class TestQueueEmail:

    def test_sent_immediately(self, db, sent_emails):
        log_id = email_service.queue_email(db, "a@b.cl", "Hola", "cuerpo", related_ref="submission:1")

        log = db.get(EmailLog, log_id)
        assert log.status == "sent"
        assert log.attempts == 1
        assert sent_emails == [{"to": "a@b.cl", "subject": "Hola", "body": "cuerpo"}]

    def test_failure_schedules_retry(self, db, monkeypatch):
        monkeypatch.setattr(email_service, "send_email", _failing)

        log = db.get(EmailLog, email_service.queue_email(db, "a@b.cl", "Hola", "cuerpo"))

        assert log.status == "failed"
        assert "connection refused" in log.last_error
        assert log.next_attempt_at is not None


class TestProcessPendingEmails:

    def test_retries_due_messages(self, db, sent_emails):
        db.add(EmailLog(to_email="a@b.cl", subject="s", body="b", status="failed", attempts=1))
        db.commit()

        result = email_service.process_pending_emails(db)

        assert result == {"processed": 1, "sent": 1, "failed": 0}
        assert len(sent_emails) == 1

    def test_gives_up_after_max_attempts(self, db, monkeypatch):
        monkeypatch.setattr(email_service, "send_email", _failing)
        log = EmailLog(to_email="a@b.cl", subject="s", body="b", status="failed",
                       attempts=settings.EMAIL_MAX_ATTEMPTS - 1)
        db.add(log)
        db.commit()

        email_service.process_pending_emails(db)

        db.refresh(log)
        assert log.status == "dead"
        assert log.next_attempt_at is None

    def test_skips_messages_still_backing_off(self, db, sent_emails):
        later = datetime.now(timezone.utc) + timedelta(hours=1)
        db.add(EmailLog(to_email="a@b.cl", subject="s", body="b", status="failed", attempts=1, next_attempt_at=later))
        db.commit()

        assert email_service.process_pending_emails(db)["processed"] == 0
        assert sent_emails == []
