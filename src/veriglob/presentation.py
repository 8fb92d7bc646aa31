# SPDX-License-Identifier: BSL-1.1
# Copyright (c) 2026 MuVeraAI Corporation

"""Verifiable Presentations: holder-signed bundles of credential tokens.

A presentation binds one or more credential tokens to a verifier (``aud``)
and a challenge (``nonce``) and expires fifteen minutes after creation.
Embedded credentials are carried as opaque strings and are not verified
here; see :func:`verification.verify_presentation_token` for the full
verifier flow.
"""

from __future__ import annotations

import logging
import secrets
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from . import config
from .tokens import (
    as_utc,
    format_timestamp,
    require_str,
    require_timestamp,
    sign_claims,
    utc_now,
    verify_token,
)
from .types import (
    AudienceMismatchError,
    EmptyCredentialSetError,
    MalformedTokenError,
    NonceMismatchError,
    PresentationExpiredError,
)

log = logging.getLogger(__name__)

_PRESENTATION_TYPE = "VerifiablePresentation"


@dataclass(frozen=True)
class PresentationPayload:
    """The ``vp`` claim of a presentation token."""

    holder: str
    verifiable_credential: list[str]
    id: str = ""
    context: list[str] = field(default_factory=lambda: list(config.VC_CONTEXT))
    type: list[str] = field(default_factory=lambda: [_PRESENTATION_TYPE])

    def to_dict(self) -> dict[str, Any]:
        doc: dict[str, Any] = {
            "@context": list(self.context),
            "type": list(self.type),
        }
        if self.id:
            doc["id"] = self.id
        doc["holder"] = self.holder
        doc["verifiableCredential"] = list(self.verifiable_credential)
        return doc


@dataclass(frozen=True)
class PresentationClaims:
    """Claims recovered from a verified presentation token."""

    issuer: str
    subject: str
    audience: str
    nonce: str
    issued_at: datetime
    expires_at: datetime
    presentation: PresentationPayload


def generate_nonce() -> str:
    """Return a fresh 32-byte challenge, hex encoded (64 characters)."""
    return secrets.token_hex(32)


def create_presentation(
    holder_did: str,
    holder_private_key: bytes,
    credentials: list[str],
    audience: str,
    nonce: str,
) -> str:
    """Wrap credential tokens in a holder-signed presentation token.

    Parameters
    ----------
    holder_did:
        The holder's DID; used as ``iss``, ``sub`` and ``vp.holder``.
    holder_private_key:
        Raw 64-byte Ed25519 private key of the holder.
    credentials:
        Credential tokens to present, in order. Must not be empty.
    audience:
        The verifier the presentation is meant for (usually its DID).
    nonce:
        The verifier's challenge, e.g. from :func:`generate_nonce`.

    Raises
    ------
    EmptyCredentialSetError
        If *credentials* is empty.
    InvalidKeyMaterialError
        If *holder_private_key* is not a valid Ed25519 private key.
    """
    if not credentials:
        raise EmptyCredentialSetError("at least one credential is required")

    now = utc_now()
    payload = PresentationPayload(
        holder=holder_did,
        verifiable_credential=list(credentials),
        id=f"urn:uuid:{uuid.uuid4()}",
    )
    claims = {
        "iss": holder_did,
        "sub": holder_did,
        "aud": audience,
        "nonce": nonce,
        "iat": format_timestamp(now),
        "exp": format_timestamp(now + config.PRESENTATION_VALIDITY),
        "vp": payload.to_dict(),
    }

    token = sign_claims(holder_private_key, claims)
    log.debug(
        f"Created presentation {payload.id} from {holder_did} "
        f"with {len(credentials)} credential(s) for {audience}"
    )
    return token


def verify_presentation(
    token: str,
    holder_public_key: bytes,
    expected_audience: str = "",
    expected_nonce: str = "",
    *,
    now: datetime | None = None,
) -> PresentationClaims:
    """Verify a presentation token and return its claims.

    An empty *expected_audience* or *expected_nonce* skips that comparison.
    Expiry is always enforced.

    Raises
    ------
    SignatureInvalidError
        The signature does not verify against *holder_public_key*.
    MalformedTokenError
        The token is malformed or lacks ``aud``/``nonce``/``vp``.
    AudienceMismatchError
        The ``aud`` claim differs from *expected_audience*.
    NonceMismatchError
        The ``nonce`` claim differs from *expected_nonce*.
    PresentationExpiredError
        The presentation is past its ``exp`` claim.
    """
    raw = verify_token(token, holder_public_key)

    issuer = require_str(raw, "iss")
    subject = require_str(raw, "sub")
    audience = require_str(raw, "aud")
    nonce = require_str(raw, "nonce")
    issued_at = require_timestamp(raw, "iat")
    expires_at = require_timestamp(raw, "exp")

    if expected_audience and audience != expected_audience:
        raise AudienceMismatchError(
            f"audience mismatch: expected {expected_audience!r}, got {audience!r}"
        )
    if expected_nonce and nonce != expected_nonce:
        raise NonceMismatchError("nonce mismatch")

    if as_utc(now) > expires_at:
        raise PresentationExpiredError(f"presentation expired at {expires_at.isoformat()}")

    claims = PresentationClaims(
        issuer=issuer,
        subject=subject,
        audience=audience,
        nonce=nonce,
        issued_at=issued_at,
        expires_at=expires_at,
        presentation=_parse_presentation_payload(raw.get("vp")),
    )
    log.debug(f"Verified presentation {claims.presentation.id} from {issuer}")
    return claims


def _parse_presentation_payload(vp: object) -> PresentationPayload:
    if not isinstance(vp, dict):
        raise MalformedTokenError('presentation token has no "vp" object')

    credentials = vp.get("verifiableCredential")
    if not isinstance(credentials, list) or not all(isinstance(c, str) for c in credentials):
        raise MalformedTokenError('"vp.verifiableCredential" must be a list of tokens')

    holder = vp.get("holder")
    if not isinstance(holder, str):
        raise MalformedTokenError('"vp.holder" is missing or not a string')

    context_raw = vp.get("@context", [])
    type_raw = vp.get("type", [])
    return PresentationPayload(
        holder=holder,
        verifiable_credential=list(credentials),
        id=str(vp.get("id", "")),
        context=[str(c) for c in context_raw] if isinstance(context_raw, list) else [str(context_raw)],
        type=[str(t) for t in type_raw] if isinstance(type_raw, list) else [str(type_raw)],
    )
