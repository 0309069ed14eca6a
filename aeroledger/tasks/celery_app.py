from urllib.parse import urlparse, urlunparse, parse_qs, urlencode

from celery import Celery
from aeroledger.core.config import settings


def _redis_url_for_celery(url: str) -> str:
    """Celery requires ssl_cert_reqs for rediss:// (e.g. Upstash TLS)."""
    if not url or not url.strip().lower().startswith("rediss://"):
        return url
    parsed = urlparse(url)
    qs = parse_qs(parsed.query)
    if "ssl_cert_reqs" not in qs:
        qs["ssl_cert_reqs"] = ["CERT_NONE"]
        return urlunparse(parsed._replace(query=urlencode(qs, doseq=True)))
    return url


_redis_url = _redis_url_for_celery(settings.REDIS_URL)

celery = Celery(
    "aeroledger",
    broker=_redis_url,
    backend=_redis_url,
    include=["aeroledger.tasks.jobs"],
)

celery.conf.timezone = "America/Santiago"

celery.conf.beat_schedule = {
    "process-email-queue-every-2-minutes": {
        "task": "aeroledger.tasks.jobs.process_email_queue",
        "schedule": 120.0,
        "kwargs": {"limit": 50},
    },
    "check-orphaned-submissions-daily": {
        "task": "aeroledger.tasks.jobs.check_orphaned_submissions",
        "schedule": 86400.0,
    },
}
