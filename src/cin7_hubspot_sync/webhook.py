"""HubSpot webhook signature verification (v3 scheme).

Security contract:
- Signature = base64(HMAC-SHA256(secret, method + uri + body + timestamp))
- Timestamp (epoch millis) must be within 5 minutes of now, either direction
- Comparison is constant-time; length mismatch fails before comparing contents
- Callers only learn "Invalid timestamp" or "Invalid signature"
"""

import base64
import hashlib
import hmac
import logging
import math
import time
from dataclasses import dataclass
from typing import Optional
from urllib.parse import unquote

logger = logging.getLogger(__name__)

SIGNATURE_HEADER = "x-hubspot-signature-v3"
TIMESTAMP_HEADER = "x-hubspot-request-timestamp"

# Max clock difference (milliseconds) before a request counts as replayed
TIMESTAMP_TOLERANCE_MS = 5 * 60 * 1000

INVALID_TIMESTAMP = "Invalid timestamp"
INVALID_SIGNATURE = "Invalid signature"


@dataclass
class VerificationResult:
    """Outcome of verifying one request."""

    ok: bool
    reason: Optional[str] = None


def decode_request_uri(path: str, query: str = "") -> str:
    """Percent-decoded path plus query string, as HubSpot signs it."""
    uri = f"{path}?{query}" if query else path
    return unquote(uri)


def compute_signature(secret: str, method: str, uri: str, body: bytes, timestamp: str) -> str:
    """
    Base64 HMAC-SHA256 over the exact concatenation method + uri + body + timestamp.
    Invalid UTF-8 in the body is replaced with U+FFFD, as HubSpot's reference handlers read it.
    """
    source = f"{method}{uri}{body.decode('utf-8', errors='replace')}{timestamp}"
    digest = hmac.new(secret.encode("utf-8"), source.encode("utf-8"), hashlib.sha256).digest()
    return base64.b64encode(digest).decode("ascii")


def timestamp_is_fresh(
    timestamp: Optional[str],
    now_ms: Optional[float] = None,
    tolerance_ms: int = TIMESTAMP_TOLERANCE_MS,
) -> bool:
    """False for missing, non-numeric or zero timestamps, and for any outside the window."""
    if not timestamp:
        return False
    try:
        ts = float(timestamp)
    except ValueError:
        return False
    if not math.isfinite(ts) or ts == 0:
        return False
    if now_ms is None:
        now_ms = time.time() * 1000
    return abs(now_ms - ts) <= tolerance_ms


def signatures_match(expected: str, supplied: Optional[str]) -> bool:
    """Constant-time comparison; differing lengths fail without reading contents."""
    if not supplied:
        return False
    a = expected.encode("utf-8")
    b = supplied.encode("utf-8")
    if len(a) != len(b):
        return False
    return hmac.compare_digest(a, b)


def verify_request(
    secret: str,
    method: str,
    uri: str,
    body: bytes,
    signature: Optional[str],
    timestamp: Optional[str],
    now_ms: Optional[float] = None,
) -> VerificationResult:
    """
    Verify a HubSpot v3 signed request.

    Args:
        secret: HubSpot app client secret
        method: HTTP method, e.g. "POST"
        uri: Decoded request URI (path + query), see decode_request_uri
        body: Raw request body bytes
        signature: Value of the x-hubspot-signature-v3 header
        timestamp: Value of the x-hubspot-request-timestamp header (epoch millis)

    Returns:
        VerificationResult with ok=True only if both checks pass
    """
    if not timestamp_is_fresh(timestamp, now_ms):
        logger.warning("HubSpot webhook rejected: stale or missing timestamp %r", timestamp)
        return VerificationResult(ok=False, reason=INVALID_TIMESTAMP)

    expected = compute_signature(secret, method, uri, body, timestamp)
    if not signatures_match(expected, signature):
        logger.warning("HubSpot webhook rejected: signature mismatch for %s %s", method, uri)
        return VerificationResult(ok=False, reason=INVALID_SIGNATURE)

    return VerificationResult(ok=True)
