"""Signed session tokens for the HTTP API.

A token is ``<payload>.<signature>``: the payload is base64url JSON holding
the user id (``sub``) and an expiry in unix seconds (``exp``); the signature
is HMAC-SHA256 over the encoded payload. Without ``SESSION_SECRET_KEY`` a
random key is generated per process, so tokens stop working on restart.
"""

import base64
import json
import os
import time
from typing import Optional

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import hashes, hmac

from ...infrastructure.config.settings import get_settings

_PROCESS_KEY = os.urandom(32)


def _signing_key() -> bytes:
    secret = get_settings().SESSION_SECRET_KEY
    return secret.encode("utf-8") if secret else _PROCESS_KEY


def _b64encode(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("ascii")


def _b64decode(data: str) -> bytes:
    return base64.urlsafe_b64decode(data + "=" * (-len(data) % 4))


def _mac(payload: str) -> hmac.HMAC:
    mac = hmac.HMAC(_signing_key(), hashes.SHA256())
    mac.update(payload.encode("ascii"))
    return mac


def issue_token(user_id: str, ttl_seconds: Optional[int] = None, now: Optional[float] = None) -> str:
    ttl = get_settings().SESSION_TOKEN_TTL_SECONDS if ttl_seconds is None else ttl_seconds
    issued_at = time.time() if now is None else now
    claims = {"sub": user_id, "exp": int(issued_at + ttl)}
    payload = _b64encode(json.dumps(claims, separators=(",", ":")).encode("utf-8"))
    return f"{payload}.{_b64encode(_mac(payload).finalize())}"


def read_token(token: str, now: Optional[float] = None) -> Optional[str]:
    """Return the user id carried by ``token``, or None if it is malformed, forged or expired."""
    try:
        payload, signature = token.split(".")
        _mac(payload).verify(_b64decode(signature))
        claims = json.loads(_b64decode(payload))
    except (ValueError, InvalidSignature):
        return None

    if not isinstance(claims, dict):
        return None
    user_id, expires_at = claims.get("sub"), claims.get("exp")
    if not isinstance(user_id, str) or not isinstance(expires_at, int):
        return None
    if expires_at <= (time.time() if now is None else now):
        return None
    return user_id
