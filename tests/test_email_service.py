"""Tests for SMTP email delivery and templates."""

import smtplib
from datetime import UTC, datetime
from decimal import Decimal
from unittest.mock import MagicMock, patch

import pytest

from pizzeria.config import Settings
from pizzeria.models.enums import IngredientType, OrderStatus
from pizzeria.services.email_service import EmailService


@pytest.fixture
def smtp_settings():
    return Settings(
        smtp_host="smtp.test.local",
        smtp_port=2525,
        smtp_user="mailer",
        smtp_password="secret",  # noqa: S106
        client_url="https://pizza.example.com/",
    )


@pytest.fixture
def service(smtp_settings):
    email_service = EmailService(smtp_settings)
    email_service.start()
    return email_service


@pytest.fixture
def mock_smtp():
    with patch("pizzeria.services.email_service.smtplib.SMTP") as smtp_cls:
        yield smtp_cls.return_value.__enter__.return_value


@pytest.fixture
def customer():
    user = MagicMock()
    user.name = "Asha"
    user.email = "asha@example.com"
    user.email_verification_token = "verify123"
    return user


def sent_message(mock_smtp):
    return mock_smtp.send_message.call_args[0][0]


class TestSendEmail:
    def test_disabled_without_smtp_host(self, mock_smtp):
        email_service = EmailService(Settings(smtp_host=None))
        email_service.start()

        assert email_service.enabled is False
        assert email_service.send_email("a@example.com", "Hi", "Body") is False
        mock_smtp.send_message.assert_not_called()

    def test_sends_with_tls_and_login(self, service, mock_smtp):
        assert service.send_email(["a@example.com", "b@example.com"], "Hello", "Body") is True

        mock_smtp.starttls.assert_called_once()
        mock_smtp.login.assert_called_once_with("mailer", "secret")
        message = sent_message(mock_smtp)
        assert message["To"] == "a@example.com, b@example.com"
        assert message["Subject"] == "Hello"
        assert message["From"] == "Pizza Order <noreply@pizzaorder.com>"

    def test_smtp_failure_returns_false(self, service, mock_smtp):
        mock_smtp.send_message.side_effect = smtplib.SMTPException("rejected")

        assert service.send_email("a@example.com", "Hello", "Body") is False

    def test_connection_failure_returns_false(self, service):
        with patch(
            "pizzeria.services.email_service.smtplib.SMTP", side_effect=ConnectionRefusedError()
        ):
            assert service.send_email("a@example.com", "Hello", "Body") is False

    def test_no_recipients(self, service, mock_smtp):
        assert service.send_email([], "Hello", "Body") is False

    def test_close_disables_sending(self, service, mock_smtp):
        service.close()
        assert service.send_email("a@example.com", "Hello", "Body") is False


class TestTemplatedEmails:
    def test_welcome_links_to_verification(self, service, mock_smtp, customer):
        service.send_welcome(customer)

        message = sent_message(mock_smtp)
        assert message["Subject"] == "Welcome to Pizza Ordering System!"
        assert "https://pizza.example.com/verify-email?token=verify123" in message.get_content()

    def test_status_update(self, service, mock_smtp, customer):
        order = MagicMock(id=5, order_id="PZ202610180001", status=OrderStatus.OUT_FOR_DELIVERY)

        service.send_order_status_update(order, customer, "Rider is on the way")

        message = sent_message(mock_smtp)
        assert message["Subject"] == "Order Update - PZ202610180001: Out For Delivery"
        assert "Rider is on the way" in message.get_content()

    def test_delivered(self, service, mock_smtp, customer):
        order = MagicMock(
            id=5,
            order_id="PZ202610180001",
            total_amount=Decimal("1066.00"),
            actual_delivery_time=datetime(2026, 10, 18, 19, 30, tzinfo=UTC),
        )

        service.send_order_delivered(order, customer)

        message = sent_message(mock_smtp)
        assert message["Subject"] == (
            "Order Delivered - PZ202610180001 - How was your experience?"
        )
        content = message.get_content()
        assert "₹1066.00" in content
        assert "2026-10-18 19:30" in content

    def test_stock_alert_subject_and_sections(self, service, mock_smtp):
        low = [
            {"type": IngredientType.SAUCE, "name": "Pesto", "category": None, "stock": 3, "threshold": 10},
            {"type": IngredientType.CHEESE, "name": "Cheddar", "category": "Hard", "stock": 10, "threshold": 10},
        ]
        out = [
            {"type": IngredientType.BASE, "name": "Thick", "category": None, "stock": 0, "threshold": 10},
        ]

        assert service.send_stock_alert(low, out, ["admin@example.com"]) is True

        message = sent_message(mock_smtp)
        assert message["Subject"] == "Inventory Alert - 1 Out of Stock, 2 Low Stock"
        content = message.get_content()
        assert "OUT OF STOCK ITEMS (1):" in content
        assert "LOW STOCK ITEMS (2):" in content
        assert "- cheese: Cheddar (Hard)" in content
        assert "https://pizza.example.com/admin/inventory" in content

    def test_stock_alert_skipped_when_nothing_to_report(self, service, mock_smtp):
        assert service.send_stock_alert([], [], ["admin@example.com"]) is False
        mock_smtp.send_message.assert_not_called()

    def test_password_reset_link(self, service, mock_smtp, customer):
        service.send_password_reset(customer, "reset456")

        content = sent_message(mock_smtp).get_content()
        assert "https://pizza.example.com/reset-password?token=reset456" in content
