# SPDX-License-Identifier: BSL-1.1
# Copyright (c) 2026 MuVeraAI Corporation

"""PASETO ``v4.public`` signing and verification shared by VCs and VPs.

Tokens have the form ``v4.public.<base64url(message || signature)>``: the
JSON claim set is readable by anyone, and its integrity is protected by an
Ed25519 signature. Both credential and presentation tokens are produced and
checked here; the protocol modules only build and interpret claim sets.
"""

from __future__ import annotations

import base64
import binascii
import json
import re
from datetime import datetime, timezone
from typing import Any

import pyseto
from cryptography.hazmat.primitives.serialization import (
    Encoding,
    NoEncryption,
    PrivateFormat,
    PublicFormat,
)
from pyseto import Key

from .keys import load_private_key, load_public_key
from .types import MalformedTokenError, SignatureInvalidError

TOKEN_HEADER = "v4.public."

_SIGNATURE_SIZE = 64

_FRACTION = re.compile(r"\.(\d+)")


def sign_claims(private_key: bytes, claims: dict[str, Any]) -> str:
    """Serialize *claims* and sign them as a ``v4.public`` token.

    Raises
    ------
    InvalidKeyMaterialError
        If *private_key* is not a valid 64-byte Ed25519 private key.
    """
    key = load_private_key(private_key)
    pem = key.private_bytes(Encoding.PEM, PrivateFormat.PKCS8, NoEncryption())
    signing_key = Key.new(version=4, purpose="public", key=pem)

    payload = json.dumps(claims, separators=(",", ":"), ensure_ascii=False).encode("utf-8")
    token = pyseto.encode(signing_key, payload)
    return token.decode("ascii") if isinstance(token, bytes) else token


def verify_token(token: str, public_key: bytes) -> dict[str, Any]:
    """Verify a ``v4.public`` token and return its decoded claim set.

    Raises
    ------
    InvalidKeyMaterialError
        If *public_key* is not a raw 32-byte Ed25519 public key.
    SignatureInvalidError
        If the signature does not verify against *public_key*.
    MalformedTokenError
        If the token is not a ``v4.public`` token or its payload is not a
        JSON object.
    """
    key = load_public_key(public_key)
    pem = key.public_bytes(Encoding.PEM, PublicFormat.SubjectPublicKeyInfo)
    verifying_key = Key.new(version=4, purpose="public", key=pem)

    if not isinstance(token, str) or not token.startswith(TOKEN_HEADER):
        raise MalformedTokenError("verify_token: not a v4.public token")

    try:
        decoded = pyseto.decode(verifying_key, token)
    except pyseto.VerifyError as exc:
        raise SignatureInvalidError(f"verify_token: {exc}") from exc
    except (pyseto.PysetoError, ValueError) as exc:
        raise MalformedTokenError(f"verify_token: {exc}") from exc

    return _load_claims(decoded.payload)


def peek_claims(token: str) -> dict[str, Any]:
    """Return the claim set of a ``v4.public`` token WITHOUT verifying it.

    Only use the result to decide which key to verify with, for example to
    read the issuer DID of an embedded credential.
    """
    if not isinstance(token, str) or not token.startswith(TOKEN_HEADER):
        raise MalformedTokenError("peek_claims: not a v4.public token")

    body = token[len(TOKEN_HEADER):].split(".", 1)[0]
    try:
        raw = base64.urlsafe_b64decode(body + "=" * (-len(body) % 4))
    except (binascii.Error, ValueError) as exc:
        raise MalformedTokenError(f"peek_claims: invalid base64url body: {exc}") from exc

    if len(raw) <= _SIGNATURE_SIZE:
        raise MalformedTokenError("peek_claims: token body too short")
    return _load_claims(raw[:-_SIGNATURE_SIZE])


def _load_claims(payload: bytes) -> dict[str, Any]:
    try:
        claims = json.loads(payload)
    except (UnicodeDecodeError, ValueError) as exc:
        raise MalformedTokenError(f"token payload is not JSON: {exc}") from exc
    if not isinstance(claims, dict):
        raise MalformedTokenError("token payload is not a JSON object")
    return claims


# ------------------------------------------------------------------
# Claim helpers
# ------------------------------------------------------------------


def format_timestamp(dt: datetime) -> str:
    """Format a datetime as an RFC 3339 UTC string ending with ``Z``."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def parse_timestamp(value: str) -> datetime:
    """Parse an RFC 3339 / ISO 8601 string to a timezone-aware ``datetime``.

    Fractional seconds of any length are padded or truncated to
    microseconds, so nanosecond timestamps parse on Python 3.10 too.
    """
    value = value.replace("Z", "+00:00").replace("z", "+00:00")
    value = _FRACTION.sub(lambda m: "." + m.group(1).ljust(6, "0")[:6], value)
    dt = datetime.fromisoformat(value)
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def as_utc(dt: datetime | None) -> datetime:
    """Return *dt* as an aware datetime; ``None`` means now, naive means UTC."""
    if dt is None:
        return utc_now()
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt


def utc_now() -> datetime:
    """Current UTC time truncated to the second precision tokens carry."""
    return datetime.now(tz=timezone.utc).replace(microsecond=0)


def require_str(claims: dict[str, Any], name: str) -> str:
    value = claims.get(name)
    if not isinstance(value, str):
        raise MalformedTokenError(f"claim {name!r} is missing or not a string")
    return value


def require_timestamp(claims: dict[str, Any], name: str) -> datetime:
    value = require_str(claims, name)
    try:
        return parse_timestamp(value)
    except ValueError as exc:
        raise MalformedTokenError(f"claim {name!r} is not a timestamp: {value!r}") from exc
