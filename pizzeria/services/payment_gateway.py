"""Payment gateway adapter for a Razorpay-compatible REST API."""

import hashlib
import hmac
import logging
from typing import Any

import httpx

from pizzeria.config import Settings, get_settings
from pizzeria.exceptions import PaymentGatewayError

logger = logging.getLogger(__name__)


def compute_signature(secret: str, payload: str | bytes) -> str:
    """Hex HMAC-SHA256 of payload under secret."""
    if isinstance(payload, str):
        payload = payload.encode("utf-8")
    return hmac.new(secret.encode("utf-8"), payload, hashlib.sha256).hexdigest()


class PaymentGateway:
    """Creates payment intents and verifies gateway signatures."""

    def __init__(self, settings: Settings | None = None) -> None:
        self.settings = settings or get_settings()
        self.base_url = self.settings.payment_api_base_url.rstrip("/")
        self.key_id = self.settings.payment_key_id
        self.currency = self.settings.payment_currency
        self.timeout = self.settings.payment_timeout_seconds

    async def create_intent(
        self,
        amount_minor: int,
        receipt: str,
        notes: dict[str, str] | None = None,
        currency: str | None = None,
    ) -> dict[str, Any]:
        """Register a remote payment intent for amount_minor.

        Returns the gateway payload, which carries at least ``id``,
        ``amount`` and ``currency``.
        """
        payload = {
            "amount": amount_minor,
            "currency": currency or self.currency,
            "receipt": receipt,
            "notes": notes or {},
        }
        try:
            async with httpx.AsyncClient(
                timeout=self.timeout,
                auth=(self.key_id, self.settings.payment_key_secret),
            ) as client:
                response = await client.post(f"{self.base_url}/orders", json=payload)
                response.raise_for_status()
                data = response.json()
        except httpx.HTTPError as e:
            logger.error(f"HTTP error creating payment intent: {e}")
            raise PaymentGatewayError("Payment service unavailable, please try again") from e

        if "id" not in data:
            logger.error(f"Payment gateway returned no intent id: {data}")
            raise PaymentGatewayError("Payment service returned an invalid response")

        logger.info(f"Created payment intent {data['id']} for {amount_minor} {payload['currency']}")
        return data

    def expected_signature(self, intent_id: str, payment_id: str) -> str:
        """Signature the gateway attaches to a successful checkout callback."""
        return compute_signature(self.settings.payment_key_secret, f"{intent_id}|{payment_id}")

    def verify_signature(self, intent_id: str, payment_id: str, signature: str) -> bool:
        """Check a checkout callback signature in constant time."""
        expected = self.expected_signature(intent_id, payment_id)
        return hmac.compare_digest(expected, signature or "")

    def verify_webhook_signature(self, body: bytes, signature: str | None) -> bool:
        """Check the signature header of a raw webhook body."""
        if not signature:
            return False
        expected = compute_signature(self.settings.payment_webhook_secret, body)
        return hmac.compare_digest(expected, signature)
