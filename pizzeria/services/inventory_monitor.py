"""Periodic inventory check with admin alerts."""

import asyncio
import logging
from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from typing import Any

from sqlalchemy.orm import Session

from pizzeria.models.enums import UserRole
from pizzeria.models.user import User
from pizzeria.services.email_service import EmailService
from pizzeria.services.inventory import InventoryService

logger = logging.getLogger(__name__)


def admin_emails(db: Session) -> list[str]:
    return [email for (email,) in db.query(User.email).filter(User.role == UserRole.ADMIN).all()]


def run_inventory_check(db: Session, email_service: EmailService) -> dict[str, Any]:
    """One inventory pass.

    Partitions catalog rows into low and out of stock, emails one alert to
    every admin, then clears ``is_available`` on zero-stock rows that still
    carry it. Running it again without stock changes reports the same
    buckets and updates nothing.
    """
    inventory = InventoryService(db)
    timestamp = datetime.now(UTC)

    low_stock, out_of_stock = inventory.find_stock_alerts()

    alert_sent = False
    if low_stock or out_of_stock:
        recipients = admin_emails(db)
        if recipients:
            try:
                alert_sent = email_service.send_stock_alert(low_stock, out_of_stock, recipients)
            except Exception as e:
                logger.warning(f"Failed to send stock alert: {e}")
        else:
            logger.warning("Stock alert skipped: no admin users")

    availability_updates = inventory.mark_unavailable(out_of_stock)

    logger.info(
        f"Inventory check: {len(low_stock)} low, {len(out_of_stock)} out, "
        f"{availability_updates} marked unavailable"
    )
    return {
        "success": True,
        "timestamp": timestamp,
        "low_stock_items": low_stock,
        "out_of_stock_items": out_of_stock,
        "summary": {
            "total_low_stock": len(low_stock),
            "total_out_of_stock": len(out_of_stock),
        },
        "availability_updates": availability_updates,
        "alert_sent": alert_sent,
    }


class InventoryMonitor:
    """Runs the inventory check on an interval inside the API process."""

    def __init__(
        self,
        session_factory: Callable[[], Session],
        email_service: EmailService,
        interval_minutes: int = 30,
    ) -> None:
        self.session_factory = session_factory
        self.email_service = email_service
        self.interval_minutes = interval_minutes
        self.last_check: datetime | None = None
        self._task: asyncio.Task | None = None

    @property
    def is_monitoring(self) -> bool:
        return self._task is not None and not self._task.done()

    async def start(self) -> None:
        """Start the loop; the first check runs immediately."""
        if self.is_monitoring:
            logger.info("Inventory monitoring is already running")
            return
        self._task = asyncio.create_task(self._run())
        logger.info(f"Inventory monitoring started (every {self.interval_minutes} minutes)")

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        logger.info("Inventory monitoring stopped")

    async def _run(self) -> None:
        while True:
            try:
                await asyncio.to_thread(self._check_with_new_session)
            except Exception as e:
                logger.error(f"Inventory check failed: {e}", exc_info=True)
            await asyncio.sleep(self.interval_minutes * 60)

    def _check_with_new_session(self) -> dict[str, Any]:
        db = self.session_factory()
        try:
            return self.check_inventory(db)
        finally:
            db.close()

    def check_inventory(self, db: Session) -> dict[str, Any]:
        result = run_inventory_check(db, self.email_service)
        self.last_check = result["timestamp"]
        return result

    def manual_check(self, db: Session) -> dict[str, Any]:
        """Admin-triggered check, independent of the schedule."""
        logger.info("Manual inventory check triggered")
        return self.check_inventory(db)

    def get_status(self) -> dict[str, Any]:
        next_check = None
        if self.is_monitoring and self.last_check:
            next_check = self.last_check + timedelta(minutes=self.interval_minutes)
        return {
            "is_monitoring": self.is_monitoring,
            "last_check": self.last_check,
            "check_interval_minutes": self.interval_minutes,
            "next_check": next_check,
        }
