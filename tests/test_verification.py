"""Tests for the end-to-end verifier pipeline."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from veriglob.credential import issue_credential, verify_credential
from veriglob.presentation import create_presentation, generate_nonce
from veriglob.revocation import RevocationRegistry, generate_credential_id
from veriglob.verification import (
    check_expiry,
    verify_credential_token,
    verify_presentation_token,
)
from veriglob.types import (
    AudienceMismatchError,
    NonceMismatchError,
    UnsupportedDIDMethodError,
)


@pytest.fixture
def registry() -> RevocationRegistry:
    return RevocationRegistry()


@pytest.fixture
def tracked_credential(issuer, holder, identity_subject, registry) -> tuple[str, str]:
    credential_id = generate_credential_id()
    token = issue_credential(
        issuer.did, holder.did, issuer.private_key, identity_subject, credential_id
    )
    registry.register(credential_id, issuer.did, holder.did)
    return credential_id, token


def test_valid_credential_resolves_issuer_from_token(issuer, holder, registry, tracked_credential) -> None:
    credential_id, token = tracked_credential
    result = verify_credential_token(token, registry=registry)

    assert result.valid
    assert result.reason is None
    assert result.issuer_did == issuer.did
    assert result.subject_id == holder.did
    assert result.credential_id == credential_id
    assert result.status == "active"
    assert result.claims.credential.credential_subject.given_name == "Ada"


def test_explicit_issuer_did_and_public_key(issuer, tracked_credential) -> None:
    _, token = tracked_credential
    assert verify_credential_token(token, issuer_did=issuer.did).valid
    assert verify_credential_token(token, public_key=issuer.public_key).valid


def test_revoked_credential_is_invalid(registry, tracked_credential) -> None:
    credential_id, token = tracked_credential
    registry.revoke(credential_id, "fraud detected")

    result = verify_credential_token(token, registry=registry)
    assert not result.valid
    assert result.status == "revoked"
    assert "fraud detected" in result.reason


def test_untracked_credentials(issuer, holder, identity_subject, registry) -> None:
    token = issue_credential(issuer.did, holder.did, issuer.private_key, identity_subject)
    result = verify_credential_token(token, registry=registry)
    assert result.valid
    assert result.status == "not tracked"

    tracked = issue_credential(
        issuer.did, holder.did, issuer.private_key, identity_subject, "urn:uuid:unregistered"
    )
    result = verify_credential_token(tracked, registry=registry)
    assert result.valid
    assert result.status == "not in registry"


def test_wrong_key_is_reported_not_raised(holder, tracked_credential) -> None:
    _, token = tracked_credential
    result = verify_credential_token(token, public_key=holder.public_key)
    assert not result.valid
    assert "signature" in result.reason


def test_issuer_did_mismatch(holder, tracked_credential, issuer) -> None:
    _, token = tracked_credential
    result = verify_credential_token(token, issuer_did=holder.did)
    assert not result.valid

    result = verify_credential_token(token, issuer_did=holder.did, public_key=issuer.public_key)
    assert not result.valid
    assert "issuer mismatch" in result.reason


def test_unresolvable_issuer(holder, identity_subject, issuer) -> None:
    token = issue_credential(
        "did:web:example.com", holder.did, issuer.private_key, identity_subject
    )
    result = verify_credential_token(token)
    assert not result.valid
    assert "resolution failed" in result.reason


def test_garbage_token() -> None:
    result = verify_credential_token("definitely not a token")
    assert not result.valid


def test_expired_credential(tracked_credential, registry) -> None:
    _, token = tracked_credential
    later = datetime.now(tz=timezone.utc) + timedelta(days=400)
    result = verify_credential_token(token, registry=registry, now=later)
    assert not result.valid
    assert result.reason == "credential has expired"


def test_check_expiry(issuer, tracked_credential) -> None:
    _, token = tracked_credential
    claims = verify_credential(token, issuer.public_key)

    assert check_expiry(claims).valid
    expired = check_expiry(claims, now=claims.expires_at + timedelta(seconds=1))
    assert not expired.valid
    assert expired.expires_at == claims.expires_at


def test_presentation_pipeline(issuer, holder, verifier, all_subjects, registry) -> None:
    tokens = []
    ids = []
    for subject in all_subjects[:3]:
        credential_id = generate_credential_id()
        ids.append(credential_id)
        registry.register(credential_id, issuer.did, holder.did)
        tokens.append(
            issue_credential(issuer.did, holder.did, issuer.private_key, subject, credential_id)
        )
    registry.revoke(ids[1], "superseded")

    nonce = generate_nonce()
    token = create_presentation(
        holder.did, holder.private_key, tokens, verifier.did, nonce
    )
    result = verify_presentation_token(
        token,
        holder_did=holder.did,
        expected_audience=verifier.did,
        expected_nonce=nonce,
        registry=registry,
    )

    assert result.claims.presentation.holder == holder.did
    assert [r.credential_id for r in result.credentials] == ids
    assert [r.valid for r in result.credentials] == [True, False, True]
    assert not result.valid


def test_presentation_pipeline_all_valid(issuer, holder, verifier, identity_subject) -> None:
    credential = issue_credential(issuer.did, holder.did, issuer.private_key, identity_subject)
    token = create_presentation(holder.did, holder.private_key, [credential], verifier.did, "n")
    result = verify_presentation_token(token, holder_public_key=holder.public_key)
    assert result.valid
    assert len(result.credentials) == 1


def test_presentation_pipeline_propagates_binding_errors(issuer, holder, verifier, identity_subject) -> None:
    credential = issue_credential(issuer.did, holder.did, issuer.private_key, identity_subject)
    token = create_presentation(holder.did, holder.private_key, [credential], verifier.did, "n")

    with pytest.raises(AudienceMismatchError):
        verify_presentation_token(token, holder_did=holder.did, expected_audience=issuer.did)
    with pytest.raises(NonceMismatchError):
        verify_presentation_token(token, holder_did=holder.did, expected_nonce="other")


def test_presentation_pipeline_needs_holder_key(holder, verifier, tracked_credential) -> None:
    _, credential = tracked_credential
    token = create_presentation(holder.did, holder.private_key, [credential], verifier.did, "n")
    with pytest.raises(ValueError):
        verify_presentation_token(token)
    with pytest.raises(UnsupportedDIDMethodError):
        verify_presentation_token(token, holder_did="did:web:example.com")
