# SPDX-License-Identifier: BSL-1.1
# Copyright (c) 2026 MuVeraAI Corporation

"""Verifiable Credential issuance and verification as PASETO tokens.

A credential is a ``v4.public`` token whose claim set is::

    {
      "iss": <issuer DID>,
      "sub": <subject DID>,
      "jti": <credential id>,              # only when an id was given
      "iat": <RFC 3339>, "exp": <RFC 3339>,
      "vc": {
        "id": <credential id>,              # only when an id was given
        "type": ["VerifiableCredential", <subject tag>],
        "credentialSubject": {...},
        "credentialStatus": {"id": <credential id>,
                             "type": "RevocationRegistry2024"}  # ditto
      }
    }

Credentials are valid for one year from issuance. For the verifier-side
pipeline (key discovery, revocation lookup), see :mod:`verification`.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from . import config
from .subjects import (
    CredentialSubject,
    credential_type_from_types,
    parse_subject,
    subject_to_dict,
)
from .tokens import (
    as_utc,
    format_timestamp,
    require_str,
    require_timestamp,
    sign_claims,
    utc_now,
    verify_token,
)
from .types import CredentialExpiredError, MalformedTokenError

log = logging.getLogger(__name__)

# The type array must always begin with "VerifiableCredential".
_BASE_TYPE = "VerifiableCredential"


@dataclass(frozen=True)
class CredentialStatus:
    """Pointer from a credential to its revocation registry entry."""

    id: str
    type: str = config.REVOCATION_STATUS_TYPE


@dataclass(frozen=True)
class CredentialPayload:
    """The ``vc`` claim of a credential token."""

    type: list[str]
    credential_subject: CredentialSubject
    id: str = ""
    credential_status: CredentialStatus | None = None

    def to_dict(self) -> dict[str, Any]:
        doc: dict[str, Any] = {}
        if self.id:
            doc["id"] = self.id
        doc["type"] = list(self.type)
        doc["credentialSubject"] = subject_to_dict(self.credential_subject)
        if self.credential_status is not None:
            doc["credentialStatus"] = {
                "id": self.credential_status.id,
                "type": self.credential_status.type,
            }
        return doc


@dataclass(frozen=True)
class CredentialClaims:
    """Claims recovered from a verified credential token."""

    issuer: str
    subject: str
    issued_at: datetime
    expires_at: datetime
    credential: CredentialPayload
    # The "jti" claim; empty when the credential was issued without an id.
    token_id: str = ""


def issue_credential(
    issuer_did: str,
    subject_did: str,
    issuer_private_key: bytes,
    subject: CredentialSubject,
    credential_id: str = "",
) -> str:
    """Build and sign a credential token.

    Parameters
    ----------
    issuer_did:
        DID placed in the ``iss`` claim.
    subject_did:
        DID placed in the ``sub`` claim.
    issuer_private_key:
        Raw 64-byte Ed25519 private key (seed followed by public key).
    subject:
        One of the credential subject variants from :mod:`subjects`.
    credential_id:
        Optional globally unique id, e.g. from
        :func:`revocation.generate_credential_id`. When given it is written to
        ``jti``, ``vc.id`` and ``vc.credentialStatus`` so verifiers can look
        the credential up in a revocation registry.

    Returns
    -------
    str
        A ``v4.public.`` token.

    Raises
    ------
    InvalidKeyMaterialError
        If *issuer_private_key* is not a valid 64-byte Ed25519 private key.
    """
    now = utc_now()
    payload = CredentialPayload(
        type=[_BASE_TYPE, subject.credential_type.value],
        credential_subject=subject,
        id=credential_id,
        credential_status=CredentialStatus(id=credential_id) if credential_id else None,
    )

    claims: dict[str, Any] = {
        "iss": issuer_did,
        "sub": subject_did,
        "iat": format_timestamp(now),
        "exp": format_timestamp(now + config.CREDENTIAL_VALIDITY),
    }
    if credential_id:
        claims["jti"] = credential_id
    claims["vc"] = payload.to_dict()

    token = sign_claims(issuer_private_key, claims)
    log.debug(f"Issued {subject.credential_type.value} from {issuer_did} to {subject_did}")
    return token


def verify_credential(
    token: str,
    issuer_public_key: bytes,
    *,
    enforce_expiry: bool | None = None,
    now: datetime | None = None,
) -> CredentialClaims:
    """Verify a credential token and return its claims.

    Parameters
    ----------
    token:
        The ``v4.public.`` credential token.
    issuer_public_key:
        Raw 32-byte Ed25519 public key of the issuer.
    enforce_expiry:
        Reject credentials past their ``exp`` claim. Defaults to
        ``config.ENFORCE_CREDENTIAL_EXPIRY``.
    now:
        Reference time for the expiry check; defaults to the current time.
        A naive value is taken as UTC.

    Raises
    ------
    SignatureInvalidError
        The signature does not verify against *issuer_public_key*.
    MalformedTokenError
        The token or its claim set is malformed.
    CredentialExpiredError
        Expiry is enforced and the credential has expired.
    """
    raw = verify_token(token, issuer_public_key)
    claims = _parse_credential_claims(raw)

    if enforce_expiry is None:
        enforce_expiry = config.ENFORCE_CREDENTIAL_EXPIRY
    if enforce_expiry and is_expired(claims, now=now):
        raise CredentialExpiredError(claims.expires_at)

    log.debug(f"Verified credential from {claims.issuer} for {claims.subject}")
    return claims


def get_credential_id(claims: CredentialClaims) -> str:
    """Return the id used for revocation lookups, or ``""`` when untracked."""
    if claims.token_id:
        return claims.token_id
    return claims.credential.id


def is_expired(claims: CredentialClaims, now: datetime | None = None) -> bool:
    """Return ``True`` when *now* is past the credential's expiry."""
    return as_utc(now) > claims.expires_at


def _parse_credential_claims(raw: dict[str, Any]) -> CredentialClaims:
    vc = raw.get("vc")
    if not isinstance(vc, dict):
        raise MalformedTokenError('credential token has no "vc" object')

    vc_type = vc.get("type")
    if not isinstance(vc_type, list) or _BASE_TYPE not in vc_type:
        raise MalformedTokenError(
            '"vc.type" must be a list containing "VerifiableCredential"'
        )
    subject = parse_subject(credential_type_from_types(vc_type), vc.get("credentialSubject"))

    status: CredentialStatus | None = None
    status_raw = vc.get("credentialStatus")
    if isinstance(status_raw, dict):
        status = CredentialStatus(
            id=str(status_raw.get("id", "")),
            type=str(status_raw.get("type", config.REVOCATION_STATUS_TYPE)),
        )

    token_id = raw.get("jti", "")
    if not isinstance(token_id, str):
        raise MalformedTokenError('claim "jti" is not a string')

    return CredentialClaims(
        issuer=require_str(raw, "iss"),
        subject=require_str(raw, "sub"),
        issued_at=require_timestamp(raw, "iat"),
        expires_at=require_timestamp(raw, "exp"),
        credential=CredentialPayload(
            type=[str(t) for t in vc_type],
            credential_subject=subject,
            id=str(vc.get("id", "")),
            credential_status=status,
        ),
        token_id=token_id,
    )
