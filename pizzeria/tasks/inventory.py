"""Celery tasks for inventory monitoring."""

import logging

from sqlalchemy.orm import Session

from pizzeria.celery_app import app as celery_app
from pizzeria.database import SessionLocal
from pizzeria.services.email_service import EmailService
from pizzeria.services.inventory_monitor import run_inventory_check

logger = logging.getLogger(__name__)


@celery_app.task
def check_inventory_levels() -> dict:
    """Run one inventory check from celery-beat.

    Used by deployments that set INVENTORY_MONITOR_ENABLED=false on the API
    and run the check in a worker instead.

    Returns:
        dict with the low/out-of-stock counts and availability updates
    """
    db: Session = SessionLocal()
    email_service = EmailService()
    email_service.start()

    try:
        result = run_inventory_check(db, email_service)
        stats = {
            **result["summary"],
            "availability_updates": result["availability_updates"],
            "alert_sent": result["alert_sent"],
        }
        logger.info(f"Scheduled inventory check complete: {stats}")
        return stats

    except Exception as e:
        logger.error(f"Error in inventory check task: {e}", exc_info=True)
        db.rollback()
        raise

    finally:
        email_service.close()
        db.close()
