import hashlib
import hmac

import requests
from flask import current_app

from ..utils.errors import GatewayError, GatewayNotConfigured


def generate_signature(order_id: str, payment_id: str, secret: str) -> str:
    """HMAC-SHA256 of "order_id|payment_id", as Razorpay signs checkout receipts."""
    message = f"{order_id}|{payment_id}".encode("utf-8")
    return hmac.new(secret.encode("utf-8"), message, hashlib.sha256).hexdigest()


def verify_payment_signature(order_id: str, payment_id: str, signature: str, secret: str) -> bool:
    if not (order_id and payment_id and signature and secret):
        return False
    expected = generate_signature(order_id, payment_id, secret)
    return hmac.compare_digest(expected.encode("utf-8"), str(signature).encode("utf-8"))


class RazorpayClient:
    def __init__(self, key_id: str | None, key_secret: str | None,
                 api_base: str = "https://api.razorpay.com/v1", timeout: float = 10):
        self.key_id = key_id
        self.key_secret = key_secret
        self.api_base = api_base.rstrip("/")
        self.timeout = timeout

    @classmethod
    def from_config(cls, config) -> "RazorpayClient":
        return cls(
            key_id=config.get("RAZORPAY_KEY_ID"),
            key_secret=config.get("RAZORPAY_KEY_SECRET"),
            api_base=config.get("RAZORPAY_API_BASE", "https://api.razorpay.com/v1"),
            timeout=float(config.get("RAZORPAY_TIMEOUT", 10)),
        )

    @property
    def configured(self) -> bool:
        return bool(self.key_id and self.key_secret)

    def create_order(self, amount: int, currency: str, receipt: str, notes: dict | None = None) -> dict:
        if not self.configured:
            raise GatewayNotConfigured(
                "Payment gateway not configured. Please add RAZORPAY_KEY_ID and RAZORPAY_KEY_SECRET."
            )

        payload = {
            "amount": amount,
            "currency": currency,
            "receipt": receipt,
            "notes": notes or {},
        }
        try:
            response = requests.post(
                f"{self.api_base}/orders",
                json=payload,
                auth=(self.key_id, self.key_secret),
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            current_app.logger.error(f"Razorpay order request failed: {e}")
            raise GatewayError() from e

        if response.status_code not in (200, 201):
            current_app.logger.error(f"Razorpay order error {response.status_code}: {response.text}")
            raise GatewayError()

        try:
            order = response.json()
        except ValueError as e:
            current_app.logger.error(f"Razorpay returned a non-JSON order body: {response.text}")
            raise GatewayError() from e

        if not order.get("id"):
            current_app.logger.error(f"Razorpay order response missing id: {order}")
            raise GatewayError()
        return order
