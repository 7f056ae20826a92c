"""Webhook signature verification."""

import hashlib
import hmac


def _expected(secret: str, body: bytes, algorithm: str) -> str:
    digest = hmac.new(secret.encode(), body, getattr(hashlib, algorithm)).hexdigest()
    return f"{algorithm}={digest}"


def verify_signature(
    secret: str,
    body: bytes,
    signature_256: str | None = None,
    signature_1: str | None = None,
) -> bool:
    """Check a webhook body against its signature headers.

    ``X-Hub-Signature-256`` is preferred; the legacy SHA1
    ``X-Hub-Signature`` is accepted when it is the only one sent. An empty
    secret disables verification.
    """
    if not secret:
        return True
    if signature_256:
        return hmac.compare_digest(_expected(secret, body, "sha256"), signature_256)
    if signature_1:
        return hmac.compare_digest(_expected(secret, body, "sha1"), signature_1)
    return False
