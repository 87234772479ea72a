"""
Keyed digest for identity providers that bind requests to a client secret
"""
import base64
import hashlib
import hmac
from typing import Optional


def compute_secret_hash(username: str, client_id: str, client_secret: Optional[str]) -> Optional[str]:
    """
    Base64 HMAC-SHA256 of username + client_id keyed with the client secret.

    Returns None when no secret is configured; callers then omit the
    parameter from the request entirely.
    """
    if not client_secret:
        return None
    message = f"{username}{client_id}".encode("utf-8")
    digest = hmac.new(client_secret.encode("utf-8"), message, hashlib.sha256).digest()
    return base64.b64encode(digest).decode("ascii")
