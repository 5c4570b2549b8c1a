from __future__ import annotations

import base64
import binascii
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
import hashlib
import hmac
import json
from typing import Any


@dataclass(frozen=True)
class AccessTokenClaims:
    subject: str
    email: str | None
    role: str
    expires_at: datetime


def issue_access_token(
    *,
    subject: str,
    secret_key: str,
    email: str | None = None,
    role: str = "authenticated",
    ttl_minutes: int = 60,
) -> str:
    issued_at = datetime.now(UTC)
    expires_at = issued_at + timedelta(minutes=ttl_minutes)
    payload: dict[str, Any] = {
        "sub": subject,
        "role": role,
        "iat": int(issued_at.timestamp()),
        "exp": int(expires_at.timestamp()),
    }
    if email:
        payload["email"] = email

    payload_segment = _b64url_encode(
        json.dumps(payload, separators=(",", ":"), sort_keys=True).encode("utf-8"),
    )
    return f"{payload_segment}.{_sign(payload_segment, secret_key)}"


def verify_access_token(token: str, secret_key: str) -> AccessTokenClaims | None:
    payload_segment, separator, signature_segment = token.strip().partition(".")
    if not separator or not payload_segment or not signature_segment:
        return None
    expected_signature = _sign(payload_segment, secret_key).encode("ascii")
    if not hmac.compare_digest(expected_signature, signature_segment.encode("utf-8")):
        return None

    try:
        payload = json.loads(_b64url_decode(payload_segment).decode("utf-8"))
    except (binascii.Error, ValueError):
        return None
    if not isinstance(payload, dict):
        return None

    subject = payload.get("sub")
    raw_expiration = payload.get("exp")
    if not isinstance(subject, str) or not subject.strip():
        return None
    if not isinstance(raw_expiration, int):
        return None
    expires_at = datetime.fromtimestamp(raw_expiration, UTC)
    if expires_at < datetime.now(UTC):
        return None

    raw_email = payload.get("email")
    raw_role = payload.get("role")
    return AccessTokenClaims(
        subject=subject.strip(),
        email=raw_email if isinstance(raw_email, str) and raw_email.strip() else None,
        role=raw_role if isinstance(raw_role, str) and raw_role.strip() else "authenticated",
        expires_at=expires_at,
    )


def _sign(payload_segment: str, secret_key: str) -> str:
    signature = hmac.new(
        secret_key.encode("utf-8"),
        payload_segment.encode("utf-8"),
        hashlib.sha256,
    ).digest()
    return _b64url_encode(signature)


def _b64url_encode(value: bytes) -> str:
    return base64.urlsafe_b64encode(value).decode("ascii").rstrip("=")


def _b64url_decode(value: str) -> bytes:
    padding_size = (-len(value)) % 4
    return base64.urlsafe_b64decode(f"{value}{'=' * padding_size}".encode("ascii"))
