# SPDX-License-Identifier: BSL-1.1
# Copyright (c) 2026 MuVeraAI Corporation

"""veriglob — did:key identities, PASETO credentials and revocation.

Quickstart
----------
>>> from veriglob import (
...     IdentitySubject, RevocationRegistry, create_did_key,
...     generate_credential_id, generate_ed25519_keypair,
...     issue_credential, verify_credential_token,
... )
>>> issuer_pub, issuer_priv = generate_ed25519_keypair()
>>> issuer = create_did_key(issuer_pub)
>>> registry = RevocationRegistry()
>>> credential_id = generate_credential_id()
>>> token = issue_credential(
...     issuer.did, "did:key:z6Mk...", issuer_priv,
...     IdentitySubject(id="did:key:z6Mk...", given_name="Ada",
...                     family_name="Lovelace", date_of_birth="1815-12-10"),
...     credential_id,
... )
>>> registry.register(credential_id, issuer.did, "did:key:z6Mk...")
>>> verify_credential_token(token, registry=registry).valid
True
"""

from .credential import (
    CredentialClaims,
    CredentialPayload,
    CredentialStatus,
    get_credential_id,
    is_expired,
    issue_credential,
    verify_credential,
)
from .did import create_did_key, derive_key_did, resolve_did
from .keys import generate_ed25519_keypair
from .presentation import (
    PresentationClaims,
    PresentationPayload,
    create_presentation,
    generate_nonce,
    verify_presentation,
)
from .revocation import RevocationRegistry, generate_credential_id
from .subjects import (
    CredentialSubject,
    CredentialType,
    EducationSubject,
    EmploymentSubject,
    IdentitySubject,
    MembershipSubject,
)
from .types import (
    AlreadyRevokedError,
    AudienceMismatchError,
    CredentialExpiredError,
    DIDDocument,
    DIDKey,
    DIDResolutionError,
    EmptyCredentialSetError,
    EntryNotFoundError,
    InvalidKeyLengthError,
    InvalidKeyMaterialError,
    InvalidTypeTagError,
    MalformedIdentifierError,
    MalformedTokenError,
    NonceMismatchError,
    PersistenceIOError,
    PresentationError,
    PresentationExpiredError,
    PresentationVerificationResult,
    RegistryError,
    RevocationEntry,
    RevocationStatus,
    SignatureInvalidError,
    UnsupportedDIDMethodError,
    VerificationError,
    VerificationResult,
    VeriglobError,
)
from .verification import check_expiry, verify_credential_token, verify_presentation_token

__version__ = "0.1.0"

__all__ = [
    # Keys and identifiers
    "generate_ed25519_keypair",
    "create_did_key",
    "derive_key_did",
    "resolve_did",
    "DIDKey",
    "DIDDocument",
    # Credentials
    "CredentialType",
    "CredentialSubject",
    "IdentitySubject",
    "EducationSubject",
    "EmploymentSubject",
    "MembershipSubject",
    "CredentialClaims",
    "CredentialPayload",
    "CredentialStatus",
    "issue_credential",
    "verify_credential",
    "get_credential_id",
    "is_expired",
    # Presentations
    "PresentationClaims",
    "PresentationPayload",
    "generate_nonce",
    "create_presentation",
    "verify_presentation",
    # Revocation
    "RevocationRegistry",
    "RevocationEntry",
    "RevocationStatus",
    "generate_credential_id",
    # Verifier pipeline
    "VerificationResult",
    "PresentationVerificationResult",
    "verify_credential_token",
    "verify_presentation_token",
    "check_expiry",
    # Exceptions
    "VeriglobError",
    "DIDResolutionError",
    "MalformedIdentifierError",
    "UnsupportedDIDMethodError",
    "InvalidTypeTagError",
    "InvalidKeyLengthError",
    "VerificationError",
    "InvalidKeyMaterialError",
    "SignatureInvalidError",
    "MalformedTokenError",
    "CredentialExpiredError",
    "PresentationError",
    "EmptyCredentialSetError",
    "AudienceMismatchError",
    "NonceMismatchError",
    "PresentationExpiredError",
    "RegistryError",
    "EntryNotFoundError",
    "AlreadyRevokedError",
    "PersistenceIOError",
]
