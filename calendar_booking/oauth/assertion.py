"""Compact JWT client assertions for the OAuth2 JWT-bearer grant.

The assertion is three base64url segments joined by dots::

    base64url(header) . base64url(payload) . base64url(signature)

where the signature is RSASSA-PKCS1-v1_5 with SHA-256 over the first two
segments, computed with the service account's private key.
"""

from __future__ import annotations

import base64
import json
import logging
from typing import Union

from google.auth import crypt

from calendar_booking.errors import AuthenticationError

logger = logging.getLogger(__name__)

JWT_HEADER = {"alg": "RS256", "typ": "JWT"}
ASSERTION_LIFETIME_SECONDS = 300


def base64url(data: Union[bytes, str]) -> str:
    """Unpadded URL-safe base64 (RFC 7515 section 2)."""
    if isinstance(data, str):
        data = data.encode("utf-8")
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("ascii")


def _compact_json(obj: dict) -> str:
    return json.dumps(obj, separators=(",", ":"))


def _load_signer(private_key: str) -> crypt.RSASigner:
    # Keys passed through env vars often arrive with literal "\n" sequences.
    pem = private_key.replace("\\n", "\n")
    try:
        return crypt.RSASigner.from_string(pem)
    except Exception as exc:
        raise AuthenticationError(f"Invalid service account private key: {exc}") from exc


def build_jwt_assertion(
    *,
    client_email: str,
    private_key: str,
    scope: str,
    audience: str,
    issued_at: int,
) -> str:
    """Build and sign a JWT-bearer assertion valid for five minutes.

    Args:
        client_email: Service account email, used as ``iss``.
        private_key: PEM-encoded RSA private key.
        scope: Space-separated OAuth scopes requested.
        audience: Token endpoint URL, used as ``aud``.
        issued_at: ``iat`` in whole seconds since the epoch.

    Returns:
        The compact serialization ``header.payload.signature``.

    Raises:
        AuthenticationError: the key is malformed or cannot sign.
    """
    payload = {
        "iss": client_email,
        "scope": scope,
        "aud": audience,
        "iat": issued_at,
        "exp": issued_at + ASSERTION_LIFETIME_SECONDS,
    }
    signing_input = f"{base64url(_compact_json(JWT_HEADER))}.{base64url(_compact_json(payload))}"

    signer = _load_signer(private_key)
    try:
        signature = signer.sign(signing_input.encode("ascii"))
    except Exception as exc:
        raise AuthenticationError(f"Could not sign JWT assertion: {exc}") from exc

    logger.debug("Signed JWT assertion for %s (iat=%d)", client_email, issued_at)
    return f"{signing_input}.{base64url(signature)}"
