import logging
from typing import Any, Dict, Optional

import razorpay
import requests

from boutique.config import settings

logger = logging.getLogger(__name__)


class GatewayNotConfigured(Exception):
    """Raised when the Razorpay key pair is missing from the environment."""


class PaymentGatewayError(Exception):
    """Raised when the Razorpay API call fails."""


def to_minor_units(amount: int) -> int:
    # Razorpay expects the smallest currency unit (paise for INR)
    return int(round(amount * 100))


class PaymentGateway:
    def __init__(self, key_id: Optional[str] = None, key_secret: Optional[str] = None):
        self.key_id = key_id
        self.key_secret = key_secret
        self._client = None

    @property
    def client(self) -> razorpay.Client:
        if self._client is None:
            missing = [
                name
                for name, value in (
                    ("RAZORPAY_KEY_ID", self.key_id),
                    ("RAZORPAY_KEY_SECRET", self.key_secret),
                )
                if not value
            ]
            if missing:
                logger.error(f"Missing Razorpay environment variables: {', '.join(missing)}")
                raise GatewayNotConfigured("Payment gateway not configured")
            self._client = razorpay.Client(auth=(self.key_id, self.key_secret))
        return self._client

    def create_order(
        self,
        amount: int,
        currency: str,
        receipt: str,
        notes: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """Create the gateway-side order for ``amount`` whole currency units."""
        options = {
            "amount": to_minor_units(amount),
            "currency": currency,
            "receipt": receipt,
            "notes": notes or {},
        }
        client = self.client

        try:
            razorpay_order = client.order.create(options)
        except (
            razorpay.errors.BadRequestError,
            razorpay.errors.GatewayError,
            razorpay.errors.ServerError,
            requests.RequestException,
        ) as e:
            logger.error(f"Razorpay order creation failed for receipt {receipt}: {e}")
            raise PaymentGatewayError(str(e) or "Failed to create payment order") from e

        logger.info(f"Razorpay order {razorpay_order['id']} created for {options['amount']} {currency}")
        return razorpay_order


def get_payment_gateway() -> PaymentGateway:
    return PaymentGateway(settings.RAZORPAY_KEY_ID, settings.RAZORPAY_KEY_SECRET)
