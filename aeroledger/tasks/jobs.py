from aeroledger.tasks.celery_app import celery
from aeroledger.tasks import worker_jobs


@celery.task(name="aeroledger.tasks.jobs.process_email_queue")
def process_email_queue(limit: int = 50):
    return worker_jobs.process_email_queue(limit=limit)


@celery.task(name="aeroledger.tasks.jobs.check_orphaned_submissions")
def check_orphaned_submissions():
    return worker_jobs.check_orphaned_submissions()
