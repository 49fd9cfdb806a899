"""Short-lived admin session tokens

Token format: ``<company_id>:<unix timestamp>:<hex signature>`` where the
signature is HMAC-SHA256 of ``<company_id>.<timestamp>`` keyed by the app secret.
"""
import hashlib
import hmac
import time
from typing import Optional, Tuple

MAX_SKEW_SECONDS = 300


def _signature(subject: str, timestamp: int, secret: str) -> str:
    message = f"{subject}.{timestamp}".encode("utf-8")
    return hmac.new(secret.encode("utf-8"), message, hashlib.sha256).hexdigest()


def create_admin_session_token(company_id: str, secret: str, timestamp: Optional[int] = None) -> str:
    if timestamp is None:
        timestamp = int(time.time())
    return f"{company_id}:{timestamp}:{_signature(company_id, timestamp, secret)}"


def verify_admin_session_token(
    token: Optional[str],
    secret: Optional[str],
    now: Optional[int] = None
) -> Tuple[bool, Optional[str]]:
    """
    Verify an admin session token

    Returns:
        (valid, company_id) - company_id is None when the token is invalid
    """
    if not token or not secret:
        return False, None

    parts = token.split(":")
    if len(parts) != 3:
        return False, None
    company_id, ts_str, signature = parts
    try:
        timestamp = int(ts_str)
    except ValueError:
        return False, None
    if not company_id or not signature:
        return False, None

    if now is None:
        now = int(time.time())
    if abs(now - timestamp) > MAX_SKEW_SECONDS:
        return False, None

    if hmac.compare_digest(_signature(company_id, timestamp, secret), signature):
        return True, company_id
    return False, None
