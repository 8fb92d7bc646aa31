"""Tests for credential issuance and verification."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from veriglob import config
from veriglob.credential import (
    get_credential_id,
    is_expired,
    issue_credential,
    verify_credential,
)
from veriglob.presentation import create_presentation
from veriglob.subjects import IdentitySubject
from veriglob.tokens import format_timestamp, peek_claims, sign_claims, utc_now
from veriglob.types import (
    CredentialExpiredError,
    InvalidKeyMaterialError,
    MalformedTokenError,
    SignatureInvalidError,
)

CREDENTIAL_ID = "urn:uuid:11111111-1111-1111-1111-111111111111"


def test_round_trip_every_subject_variant(issuer, holder, all_subjects) -> None:
    for subject in all_subjects:
        token = issue_credential(
            issuer.did, holder.did, issuer.private_key, subject, CREDENTIAL_ID
        )
        claims = verify_credential(token, issuer.public_key)

        assert claims.issuer == issuer.did
        assert claims.subject == holder.did
        assert claims.credential.type == [
            "VerifiableCredential",
            subject.credential_type.value,
        ]
        assert claims.credential.credential_subject == subject
        assert get_credential_id(claims) == CREDENTIAL_ID


def test_wrong_key_is_rejected(issuer, holder, identity_subject) -> None:
    token = issue_credential(issuer.did, holder.did, issuer.private_key, identity_subject)
    with pytest.raises(SignatureInvalidError):
        verify_credential(token, holder.public_key)


def test_claim_set_layout_with_credential_id(issuer, holder, identity_subject) -> None:
    token = issue_credential(
        issuer.did, holder.did, issuer.private_key, identity_subject, CREDENTIAL_ID
    )
    raw = peek_claims(token)

    assert set(raw) == {"iss", "sub", "jti", "iat", "exp", "vc"}
    assert raw["jti"] == CREDENTIAL_ID
    assert raw["vc"]["id"] == CREDENTIAL_ID
    assert raw["vc"]["credentialStatus"] == {
        "id": CREDENTIAL_ID,
        "type": "RevocationRegistry2024",
    }
    assert raw["vc"]["credentialSubject"]["givenName"] == "Ada"


def test_claim_set_layout_without_credential_id(issuer, holder, identity_subject) -> None:
    token = issue_credential(issuer.did, holder.did, issuer.private_key, identity_subject)
    raw = peek_claims(token)

    assert "jti" not in raw
    assert "id" not in raw["vc"]
    assert "credentialStatus" not in raw["vc"]

    claims = verify_credential(token, issuer.public_key)
    assert claims.token_id == ""
    assert claims.credential.credential_status is None
    assert get_credential_id(claims) == ""


def test_validity_is_one_year(issuer, holder, identity_subject) -> None:
    before = utc_now()
    token = issue_credential(issuer.did, holder.did, issuer.private_key, identity_subject)
    after = utc_now()

    claims = verify_credential(token, issuer.public_key)
    assert before <= claims.issued_at <= after
    assert claims.expires_at - claims.issued_at == timedelta(days=365)


def test_get_credential_id_falls_back_to_payload_id(issuer, holder, identity_subject) -> None:
    now = utc_now()
    token = sign_claims(
        issuer.private_key,
        {
            "iss": issuer.did,
            "sub": holder.did,
            "iat": format_timestamp(now),
            "exp": format_timestamp(now + timedelta(days=1)),
            "vc": {
                "id": "urn:uuid:payload-only",
                "type": ["VerifiableCredential", "IdentityCredential"],
                "credentialSubject": {
                    "id": holder.did,
                    "givenName": "Ada",
                    "familyName": "Lovelace",
                    "dateOfBirth": "1815-12-10",
                },
            },
        },
    )
    claims = verify_credential(token, issuer.public_key)
    assert claims.token_id == ""
    assert get_credential_id(claims) == "urn:uuid:payload-only"


def test_expired_credential_rejected_by_default(issuer, holder, identity_subject) -> None:
    token = issue_credential(issuer.did, holder.did, issuer.private_key, identity_subject)
    later = datetime.now(tz=timezone.utc) + timedelta(days=366)

    with pytest.raises(CredentialExpiredError) as excinfo:
        verify_credential(token, issuer.public_key, now=later)
    assert excinfo.value.expires_at < later


def test_expiry_enforcement_can_be_disabled(issuer, holder, identity_subject) -> None:
    token = issue_credential(issuer.did, holder.did, issuer.private_key, identity_subject)
    later = datetime.now(tz=timezone.utc) + timedelta(days=366)

    claims = verify_credential(token, issuer.public_key, enforce_expiry=False, now=later)
    assert is_expired(claims, now=later)
    assert not is_expired(claims)


def test_naive_reference_time_is_treated_as_utc(issuer, holder, identity_subject) -> None:
    token = issue_credential(issuer.did, holder.did, issuer.private_key, identity_subject)
    now = datetime.now(tz=timezone.utc).replace(tzinfo=None)

    claims = verify_credential(token, issuer.public_key, now=now)
    assert not is_expired(claims, now=now)
    with pytest.raises(CredentialExpiredError):
        verify_credential(token, issuer.public_key, now=now + timedelta(days=366))


def test_expiry_enforcement_follows_config(monkeypatch, issuer, holder, identity_subject) -> None:
    monkeypatch.setattr(config, "ENFORCE_CREDENTIAL_EXPIRY", False)
    token = issue_credential(issuer.did, holder.did, issuer.private_key, identity_subject)
    later = datetime.now(tz=timezone.utc) + timedelta(days=366)

    claims = verify_credential(token, issuer.public_key, now=later)
    assert claims.issuer == issuer.did
    with pytest.raises(CredentialExpiredError):
        verify_credential(token, issuer.public_key, enforce_expiry=True, now=later)


def test_issue_rejects_bad_private_key(issuer, holder, identity_subject) -> None:
    with pytest.raises(InvalidKeyMaterialError):
        issue_credential(issuer.did, holder.did, issuer.private_key[:32], identity_subject)
    with pytest.raises(InvalidKeyMaterialError):
        issue_credential(issuer.did, holder.did, b"\x00" * 64, identity_subject)


@pytest.mark.parametrize("token", ["", "not-a-token", "v4.public.AAAA"])
def test_malformed_tokens(issuer, token: str) -> None:
    with pytest.raises(SignatureInvalidError):
        verify_credential(token, issuer.public_key)


def test_presentation_token_is_not_a_credential(issuer, holder, identity_subject) -> None:
    credential = issue_credential(issuer.did, holder.did, issuer.private_key, identity_subject)
    presentation = create_presentation(
        holder.did, holder.private_key, [credential], "did:key:z6MkVerifier", "n"
    )
    with pytest.raises(MalformedTokenError):
        verify_credential(presentation, holder.public_key)


def test_unknown_subject_type_is_malformed(issuer, holder) -> None:
    now = utc_now()
    token = sign_claims(
        issuer.private_key,
        {
            "iss": issuer.did,
            "sub": holder.did,
            "iat": format_timestamp(now),
            "exp": format_timestamp(now + timedelta(days=1)),
            "vc": {
                "type": ["VerifiableCredential", "PassportCredential"],
                "credentialSubject": {"id": holder.did},
            },
        },
    )
    with pytest.raises(MalformedTokenError):
        verify_credential(token, issuer.public_key)


def test_missing_timestamp_is_malformed(issuer, holder, identity_subject) -> None:
    token = sign_claims(
        issuer.private_key,
        {
            "iss": issuer.did,
            "sub": holder.did,
            "vc": {
                "type": ["VerifiableCredential", "IdentityCredential"],
                "credentialSubject": {
                    "id": holder.did,
                    "givenName": "A",
                    "familyName": "B",
                    "dateOfBirth": "2000-01-01",
                },
            },
        },
    )
    with pytest.raises(MalformedTokenError, match="iat"):
        verify_credential(token, issuer.public_key)


def test_subject_survives_unicode(issuer, holder) -> None:
    subject = IdentitySubject(
        id=holder.did,
        given_name="Zoë",
        family_name="Ñúñez",
        date_of_birth="1990-01-01",
    )
    token = issue_credential(issuer.did, holder.did, issuer.private_key, subject)
    assert verify_credential(token, issuer.public_key).credential.credential_subject == subject
