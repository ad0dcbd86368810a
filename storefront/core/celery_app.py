"""Celery application for periodic maintenance jobs.

Run a worker with beat:
  celery -A storefront.core.celery_app worker --beat --loglevel=info
"""
from celery import Celery
from celery.signals import setup_logging as celery_setup_logging

from storefront.core.config import settings
from storefront.core.logger import setup_logging

celery_app = Celery(
    "storefront",
    broker=settings.CELERY_BROKER_URL,
    include=["storefront.tasks.session_tasks"],
)

celery_app.conf.update(
    timezone="UTC",
    enable_utc=True,
    task_acks_late=True,
    beat_schedule={
        "sweep-expired-sessions": {
            "task": "storefront.tasks.session_tasks.sweep_expired_sessions",
            "schedule": float(settings.SESSION_SWEEP_INTERVAL_SECONDS),
        },
    },
)


@celery_setup_logging.connect
def configure_worker_logging(**kwargs):
    setup_logging()
