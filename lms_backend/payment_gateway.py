import hashlib
import hmac
import logging

import razorpay

from lms_backend.exceptions import ExternalServiceError

logger = logging.getLogger(__name__)


def compute_signature(order_id: str, payment_id: str, key_secret: str) -> str:
    """HMAC-SHA256 over ``order_id|payment_id``, hex encoded, as Razorpay signs it."""
    message = f"{order_id}|{payment_id}"
    return hmac.new(key_secret.encode(), message.encode(), hashlib.sha256).hexdigest()


class RazorpayGateway:
    def __init__(self, key_id: str, key_secret: str, client=None):
        self.key_id = key_id
        self.key_secret = key_secret
        self._client = client

    @property
    def client(self):
        if self._client is None:
            self._client = razorpay.Client(auth=(self.key_id, self.key_secret))
        return self._client

    def create_order(self, amount: int, currency: str, receipt: str, notes: dict | None = None) -> dict:
        """
        Create a gateway order. ``amount`` is in the smallest currency unit (paise).
        """
        if not self.key_id or not self.key_secret:
            raise ExternalServiceError("Payment gateway is not configured.")
        data = {
            "amount": amount,
            "currency": currency,
            "receipt": receipt,
            "payment_capture": 1,
        }
        if notes:
            data["notes"] = notes
        try:
            order = self.client.order.create(data=data)
        except Exception as exc:
            logger.error(f"Razorpay order creation failed for receipt {receipt}: {exc}", exc_info=True)
            raise ExternalServiceError("Failed to create payment order.") from exc
        logger.info("Razorpay order %s created for receipt %s", order.get("id"), receipt)
        return order

    def verify_signature(self, order_id: str, payment_id: str, signature: str) -> bool:
        if not self.key_secret or not signature:
            return False
        expected = compute_signature(order_id, payment_id, self.key_secret)
        return hmac.compare_digest(expected, signature)
