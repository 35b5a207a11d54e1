"""Transactional email over SMTP.

Every send is best-effort: failures are logged and reported as ``False`` and
never propagate into the caller's transaction.
"""

import logging
import smtplib
from datetime import UTC, datetime
from email.message import EmailMessage
from typing import Any

from pizzeria.config import Settings, get_settings
from pizzeria.models.order import Order
from pizzeria.models.user import User
from pizzeria.services import email_templates

logger = logging.getLogger(__name__)


class EmailService:
    """Sends templated emails. Constructed once per process and injected."""

    def __init__(self, settings: Settings | None = None) -> None:
        self.settings = settings or get_settings()
        self._enabled = False

    @property
    def enabled(self) -> bool:
        return self._enabled

    def start(self) -> None:
        """Enable sending if SMTP is configured."""
        if self.settings.smtp_host:
            self._enabled = True
            logger.info(
                f"Email service initialized ({self.settings.smtp_host}:{self.settings.smtp_port})"
            )
        else:
            logger.info("SMTP host not configured, email disabled")

    def close(self) -> None:
        """Stop sending."""
        self._enabled = False

    def send_email(self, to: str | list[str], subject: str, body: str) -> bool:
        """Send one message. Returns True if the SMTP server accepted it."""
        recipients = [to] if isinstance(to, str) else list(to)
        if not recipients:
            return False
        if not self._enabled:
            logger.info(f"Email disabled, not sending '{subject}' to {recipients}")
            return False

        message = EmailMessage()
        message["From"] = f"{self.settings.from_name} <{self.settings.from_email}>"
        message["To"] = ", ".join(recipients)
        message["Subject"] = subject
        message.set_content(body)

        try:
            with smtplib.SMTP(self.settings.smtp_host, self.settings.smtp_port, timeout=30) as smtp:
                if self.settings.smtp_use_tls:
                    smtp.starttls()
                if self.settings.smtp_user and self.settings.smtp_password:
                    smtp.login(self.settings.smtp_user, self.settings.smtp_password)
                smtp.send_message(message)
        except (smtplib.SMTPException, OSError) as e:
            logger.warning(f"Failed to send email '{subject}' to {recipients}: {e}")
            return False

        logger.info(f"Email '{subject}' sent to {recipients}")
        return True

    # --- Templated senders ---

    def _url(self, path: str) -> str:
        return f"{self.settings.client_url.rstrip('/')}{path}"

    def send_welcome(self, user: User) -> bool:
        subject, body = email_templates.welcome_email(
            user.name,
            self._url(f"/verify-email?token={user.email_verification_token}"),
            self.settings.support_email,
        )
        return self.send_email(user.email, subject, body)

    def send_order_confirmation(self, order: Order, user: User) -> bool:
        subject, body = email_templates.order_confirmation_email(
            user.name,
            order.order_id,
            order.total_amount,
            [
                {
                    "quantity": item.quantity,
                    "size": item.size.value,
                    "item_price": item.item_price,
                    "ingredients": item.ingredients,
                }
                for item in order.items
            ],
            order.estimated_delivery_time,
            self._url(f"/orders/{order.id}/track"),
            self.settings.support_email,
        )
        return self.send_email(user.email, subject, body)

    def send_order_status_update(self, order: Order, user: User, status_message: str) -> bool:
        subject, body = email_templates.order_status_email(
            user.name,
            order.order_id,
            order.status.display,
            status_message,
            self._url(f"/orders/{order.id}/track"),
            self.settings.support_email,
        )
        return self.send_email(user.email, subject, body)

    def send_order_delivered(self, order: Order, user: User) -> bool:
        subject, body = email_templates.order_delivered_email(
            user.name,
            order.order_id,
            order.actual_delivery_time or datetime.now(UTC),
            order.total_amount,
            self._url(f"/orders/{order.id}/track"),
            self.settings.support_email,
        )
        return self.send_email(user.email, subject, body)

    def send_stock_alert(
        self,
        low_stock_items: list[dict[str, Any]],
        out_of_stock_items: list[dict[str, Any]],
        admin_emails: list[str],
    ) -> bool:
        if not low_stock_items and not out_of_stock_items:
            return False
        subject, body = email_templates.stock_alert_email(
            low_stock_items,
            out_of_stock_items,
            datetime.now(UTC),
            self._url("/admin/inventory"),
        )
        return self.send_email(admin_emails, subject, body)

    def send_password_reset(self, user: User, reset_token: str) -> bool:
        subject, body = email_templates.password_reset_email(
            user.name,
            self._url(f"/reset-password?token={reset_token}"),
            self.settings.support_email,
        )
        return self.send_email(user.email, subject, body)
