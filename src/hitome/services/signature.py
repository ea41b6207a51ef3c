"""
Webhook signature verification.

LINE signs each webhook body with HMAC-SHA256 using the channel secret and
sends the base64 digest in the ``x-line-signature`` header.
"""

import base64
import hashlib
import hmac
from typing import Optional, Union


def compute_signature(body: Union[bytes, str], secret: str) -> str:
    """Return base64(HMAC-SHA256(secret, body))."""
    if isinstance(body, str):
        body = body.encode("utf-8")
    digest = hmac.new(secret.encode("utf-8"), body, hashlib.sha256).digest()
    return base64.b64encode(digest).decode("utf-8")


def verify_signature(
    body: Union[bytes, str],
    signature: Optional[str],
    secret: Optional[str],
) -> bool:
    """Constant-time check of a webhook signature. Missing inputs never verify."""
    if not signature or not secret:
        return False
    expected = compute_signature(body, secret)
    return hmac.compare_digest(expected.encode("utf-8"), signature.strip().encode("utf-8"))
