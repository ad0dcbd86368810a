from celery import shared_task
import logging

from storefront.core.config import settings
from storefront.core.database import Database
from storefront.services.session_service import SessionService

logger = logging.getLogger(__name__)


@shared_task(bind=True, max_retries=3)
def sweep_expired_sessions(self):
    """
    Delete sessions past their expiry.
    Scheduled every SESSION_SWEEP_INTERVAL_SECONDS via Celery Beat.
    """
    database = Database.from_settings(settings)
    try:
        with database.session() as db:
            swept = SessionService.sweep_expired(db)
        logger.info(f"Session sweep finished: {swept} removed")
        return swept
    except Exception as e:
        logger.error(f"Error in sweep_expired_sessions: {e}")
        raise self.retry(exc=e, countdown=60)
    finally:
        database.dispose()
