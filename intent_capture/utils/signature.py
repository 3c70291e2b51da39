# intent_capture/utils/signature.py
"""HMAC verification for post-call webhooks."""

import hashlib
import hmac
import logging
import time
from typing import Optional, Union

logger = logging.getLogger(__name__)

DEFAULT_TOLERANCE_SECONDS = 30 * 60

def compute_signature(secret: str, timestamp: str, body: Union[bytes, str]) -> str:
    """Hex HMAC-SHA256 of "<timestamp>.<body>", prefixed with v0=."""
    if isinstance(body, str):
        body = body.encode("utf-8")
    message = timestamp.encode("utf-8") + b"." + body
    digest = hmac.new(secret.encode("utf-8"), message, hashlib.sha256).hexdigest()
    return f"v0={digest}"

def parse_signature_header(signature: str) -> tuple[Optional[str], Optional[str]]:
    """Split "t=<unix>,v0=<hex>" into (timestamp, "v0=<hex>")."""
    timestamp = None
    digest = None
    for part in signature.split(","):
        part = part.strip()
        if part.startswith("t="):
            timestamp = part[2:]
        elif part.startswith("v0="):
            digest = part
    return timestamp, digest

def verify_webhook_signature(signature: Optional[str], timestamp: Optional[str], body: Union[bytes, str],
                             secret: str, tolerance_seconds: int = DEFAULT_TOLERANCE_SECONDS,
                             now: Optional[float] = None) -> bool:
    """True when the signature header is well formed, fresh and matches the body.

    A timestamp header, when sent, must equal the signature's t= value.
    """
    if not signature:
        logger.info("Webhook signature header missing")
        return False

    sig_timestamp, sig_digest = parse_signature_header(signature)
    if not sig_timestamp or not sig_digest:
        return False

    if timestamp and timestamp.strip() != sig_timestamp:
        logger.info("Webhook timestamp header does not match signature")
        return False

    try:
        issued_at = int(sig_timestamp)
    except ValueError:
        return False

    current = time.time() if now is None else now
    if issued_at < current - tolerance_seconds:
        logger.info("Webhook signature expired")
        return False

    expected = compute_signature(secret, sig_timestamp, body)
    return hmac.compare_digest(expected.encode("utf-8"), sig_digest.encode("utf-8"))
