"""
Razorpay signature checks.

Two messages are signed, both verified through the SDK's ``utility`` helpers:

* client checkout callback: ``"{razorpay_order_id}|{razorpay_payment_id}"``
  with the API key secret
* webhooks: the raw request body exactly as received, with the webhook secret

Webhook bodies must never be parsed and re-serialized before verification;
key order and whitespace are part of the signed bytes.
"""
import logging
from typing import Optional

import razorpay
from razorpay.errors import SignatureVerificationError

logger = logging.getLogger(__name__)


def _utility(secret: str):
    # verify_payment_signature reads the secret from the client auth pair
    return razorpay.Client(auth=("", secret)).utility


def _usable(secret: Optional[str], signature: Optional[str]) -> bool:
    # the SDK compares str digests, which rejects non-ASCII input with TypeError
    return bool(secret) and bool(signature) and signature.isascii()


def verify_payment_signature(
    secret: Optional[str],
    razorpay_order_id: str,
    razorpay_payment_id: str,
    signature: Optional[str],
) -> bool:
    if not _usable(secret, signature):
        return False
    try:
        _utility(secret).verify_payment_signature({
            "razorpay_order_id": razorpay_order_id,
            "razorpay_payment_id": razorpay_payment_id,
            "razorpay_signature": signature,
        })
    except SignatureVerificationError:
        return False
    return True


def verify_webhook_signature(
    secret: Optional[str], raw_body: bytes, signature: Optional[str]
) -> bool:
    if not _usable(secret, signature):
        return False
    try:
        body = raw_body.decode("utf-8")
    except UnicodeDecodeError:
        logger.warning("Webhook body is not valid UTF-8")
        return False
    try:
        _utility(secret).verify_webhook_signature(body, signature, secret)
    except SignatureVerificationError:
        return False
    return True
