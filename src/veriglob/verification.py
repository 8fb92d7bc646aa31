# SPDX-License-Identifier: BSL-1.1
# Copyright (c) 2026 MuVeraAI Corporation

"""Verifier pipeline — key discovery, signature, expiry and revocation.

This module is the *consumption* counterpart to :mod:`credential` and
:mod:`presentation`. It provides three entry points:

``verify_credential_token``
    Full verification of one credential: obtains the issuer key (explicit
    key, explicit DID, or the token's own ``iss`` claim), checks the
    signature, runs :func:`check_expiry`, and looks the credential up in a
    revocation registry when one is given.

``verify_presentation_token``
    Verifies a presentation (audience, nonce, expiry) and then every
    embedded credential, in order.

``check_expiry``
    Lightweight expiry check on already-verified claims.

Key resolution is entirely offline: only ``did:key`` issuers are
supported, and their public key is decoded from the DID string itself.
"""

from __future__ import annotations

import logging
from datetime import datetime

from .credential import CredentialClaims, get_credential_id, is_expired, verify_credential
from .did import resolve_did
from .presentation import verify_presentation
from .revocation import RevocationRegistry
from .tokens import peek_claims
from .types import (
    DIDResolutionError,
    EntryNotFoundError,
    PresentationVerificationResult,
    VerificationError,
    VerificationResult,
)

log = logging.getLogger(__name__)


def verify_credential_token(
    token: str,
    *,
    issuer_did: str | None = None,
    public_key: bytes | None = None,
    registry: RevocationRegistry | None = None,
    now: datetime | None = None,
) -> VerificationResult:
    """Verify a credential token end to end.

    This function:

    1. Determines the issuer public key: *public_key* if given, else the key
       encoded in *issuer_did*, else the key encoded in the token's
       (unverified) ``iss`` claim.
    2. Verifies the signature and decodes the claims.
    3. Runs an expiry check via :func:`check_expiry`.
    4. Looks the credential id up in *registry*, if any.

    Parameters
    ----------
    token:
        The ``v4.public.`` credential token.
    issuer_did:
        did:key of the expected issuer.
    public_key:
        Raw 32-byte issuer public key; takes precedence over *issuer_did*.
    registry:
        Revocation registry to consult. A credential missing from the
        registry is still valid, with status ``"not in registry"``.
    now:
        Reference time for the expiry check.

    Returns
    -------
    VerificationResult
        This function never raises on a bad credential; failures are
        returned as ``VerificationResult(valid=False, reason=...)``.
    """

    def failure(reason: str, **extra: object) -> VerificationResult:
        log.warning(f"Credential rejected: {reason}")
        return VerificationResult(valid=False, reason=reason, **extra)

    # --- Step 1: Issuer key. ---
    if public_key is None:
        try:
            did = issuer_did or _peek_issuer(token)
            public_key = resolve_did(did)
        except (DIDResolutionError, VerificationError) as exc:
            return failure(f"issuer key resolution failed: {exc}", issuer_did=issuer_did or "")

    # --- Step 2: Signature and structure. ---
    try:
        claims = verify_credential(token, public_key, enforce_expiry=False)
    except VerificationError as exc:
        return failure(f"signature verification failed: {exc}", issuer_did=issuer_did or "")

    if issuer_did and claims.issuer != issuer_did:
        return failure(
            f"issuer mismatch: token issued by {claims.issuer!r}",
            issuer_did=claims.issuer,
            claims=claims,
        )

    # --- Step 3: Expiry. ---
    expiry_result = check_expiry(claims, now=now)
    if not expiry_result.valid:
        log.warning(f"Credential rejected: {expiry_result.reason}")
        return expiry_result

    # --- Step 4: Revocation. ---
    credential_id = get_credential_id(claims)
    status = "not tracked"
    if credential_id and registry is not None:
        try:
            entry = registry.check_status(credential_id)
        except EntryNotFoundError:
            status = "not in registry"
        else:
            status = entry.status.value
            if entry.is_revoked:
                return failure(
                    f"credential revoked: {entry.reason}" if entry.reason else "credential revoked",
                    issuer_did=claims.issuer,
                    credential_id=credential_id,
                    subject_id=claims.subject,
                    expires_at=claims.expires_at,
                    status=status,
                    claims=claims,
                )

    return VerificationResult(
        valid=True,
        issuer_did=claims.issuer,
        credential_id=credential_id,
        subject_id=claims.subject,
        expires_at=claims.expires_at,
        status=status,
        claims=claims,
    )


def verify_presentation_token(
    token: str,
    *,
    holder_did: str | None = None,
    holder_public_key: bytes | None = None,
    expected_audience: str = "",
    expected_nonce: str = "",
    registry: RevocationRegistry | None = None,
    now: datetime | None = None,
) -> PresentationVerificationResult:
    """Verify a presentation and every credential embedded in it.

    The presentation itself must verify: holder signature, audience,
    nonce and expiry errors from :func:`presentation.verify_presentation`
    propagate. Each embedded credential is then checked with
    :func:`verify_credential_token` using the key of its own ``iss`` claim;
    their outcomes are collected, not raised.

    Raises
    ------
    DIDResolutionError
        If *holder_did* is given without a key and cannot be resolved.
    ValueError
        If neither *holder_did* nor *holder_public_key* is given.
    """
    if holder_public_key is None:
        if not holder_did:
            raise ValueError("verify_presentation_token: holder_did or holder_public_key required")
        holder_public_key = resolve_did(holder_did)

    claims = verify_presentation(
        token,
        holder_public_key,
        expected_audience,
        expected_nonce,
        now=now,
    )
    results = [
        verify_credential_token(credential, registry=registry, now=now)
        for credential in claims.presentation.verifiable_credential
    ]
    return PresentationVerificationResult(claims=claims, credentials=results)


def check_expiry(claims: CredentialClaims, now: datetime | None = None) -> VerificationResult:
    """Check whether verified credential claims have expired.

    This is a pure function with no I/O and no cryptography.

    Returns
    -------
    VerificationResult
        ``valid=True`` while the credential is within its validity window,
        ``valid=False`` with ``reason="credential has expired"`` after it.
    """
    expired = is_expired(claims, now=now)
    return VerificationResult(
        valid=not expired,
        issuer_did=claims.issuer,
        credential_id=get_credential_id(claims),
        subject_id=claims.subject,
        expires_at=claims.expires_at,
        reason="credential has expired" if expired else None,
        claims=claims,
    )


def _peek_issuer(token: str) -> str:
    issuer = peek_claims(token).get("iss")
    if not isinstance(issuer, str) or not issuer:
        raise VerificationError('token has no "iss" claim to resolve')
    return issuer
