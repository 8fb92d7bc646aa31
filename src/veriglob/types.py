# SPDX-License-Identifier: BSL-1.1
# Copyright (c) 2026 MuVeraAI Corporation

"""Shared value types and exceptions for the veriglob protocol library."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any


class DIDMethod(str, Enum):
    """Supported DID methods. Only did:key is implemented."""

    KEY = "key"


class VerificationMethodType(str, Enum):
    """Type of a DID verification method."""

    ED25519_2018 = "Ed25519VerificationKey2018"


class RevocationStatus(str, Enum):
    """Lifecycle status of a registered credential."""

    ACTIVE = "active"
    REVOKED = "revoked"


@dataclass(frozen=True)
class VerificationMethod:
    """A single verification method entry in a DID Document."""

    id: str
    type: VerificationMethodType
    controller: str
    public_key_base58: str

    def to_dict(self) -> dict[str, str]:
        return {
            "id": self.id,
            "type": self.type.value,
            "controller": self.controller,
            "publicKeyBase58": self.public_key_base58,
        }


@dataclass(frozen=True)
class DIDDocument:
    """W3C DID Document, derived from a did:key and never persisted."""

    context: list[str]
    id: str
    verification_method: list[VerificationMethod]
    authentication: list[str]
    assertion_method: list[str]

    def to_dict(self) -> dict[str, Any]:
        return {
            "@context": list(self.context),
            "id": self.id,
            "verificationMethod": [vm.to_dict() for vm in self.verification_method],
            "authentication": list(self.authentication),
            "assertionMethod": list(self.assertion_method),
        }

    def to_json(self, indent: int = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent)


@dataclass(frozen=True)
class DIDKey:
    """A did:key identifier together with its key and document."""

    did: str
    # Raw 32-byte Ed25519 public key.
    public_key: bytes
    document: DIDDocument


@dataclass(frozen=True)
class RevocationEntry:
    """Status record for one credential in a revocation registry."""

    credential_id: str
    issuer_did: str
    subject_did: str
    status: RevocationStatus
    issued_at: datetime
    # Only set once the entry is revoked.
    revoked_at: datetime | None = None
    reason: str = ""

    @property
    def is_revoked(self) -> bool:
        return self.status is RevocationStatus.REVOKED


@dataclass(frozen=True)
class VerificationResult:
    """Outcome of running a credential through the verifier pipeline."""

    valid: bool
    issuer_did: str = ""
    credential_id: str = ""
    subject_id: str | None = None
    expires_at: datetime | None = None
    # "active", "revoked", "not in registry" or "not tracked".
    status: str = "not tracked"
    # Populated when valid is False.
    reason: str | None = None
    claims: Any = None


@dataclass(frozen=True)
class PresentationVerificationResult:
    """Verified presentation plus one result per embedded credential."""

    claims: Any
    credentials: list[VerificationResult] = field(default_factory=list)

    @property
    def valid(self) -> bool:
        return all(result.valid for result in self.credentials)


# ------------------------------------------------------------------
# Exceptions
# ------------------------------------------------------------------


class VeriglobError(Exception):
    """Base class for every error raised by this package."""


class DIDResolutionError(VeriglobError):
    """Raised when a DID cannot be resolved to a public key."""


class MalformedIdentifierError(DIDResolutionError):
    """Raised when a DID string is not structurally valid."""


class UnsupportedDIDMethodError(DIDResolutionError):
    """Raised when a DID method is not supported."""


class InvalidTypeTagError(DIDResolutionError):
    """Raised when a did:key does not carry the Ed25519 multicodec prefix."""


class InvalidKeyLengthError(DIDResolutionError):
    """Raised when key bytes are not exactly 32 bytes long."""


class VerificationError(VeriglobError):
    """Raised when a token cannot be produced or verified."""


class InvalidKeyMaterialError(VerificationError):
    """Raised when raw bytes are not a usable Ed25519 key."""


class SignatureInvalidError(VerificationError):
    """Raised when a token signature does not verify against the given key."""


class MalformedTokenError(SignatureInvalidError):
    """Raised when a token or its claim set cannot be parsed."""


class CredentialExpiredError(VerificationError):
    """Raised when a credential is verified after its expiry."""

    def __init__(self, expires_at: datetime) -> None:
        self.expires_at = expires_at
        super().__init__(f"credential expired at {expires_at.isoformat()}")


class PresentationError(VeriglobError):
    """Base class for presentation-specific failures."""


class EmptyCredentialSetError(PresentationError):
    """Raised when a presentation is requested without any credentials."""


class AudienceMismatchError(PresentationError):
    """Raised when the presentation audience differs from the expected one."""


class NonceMismatchError(PresentationError):
    """Raised when the presentation nonce differs from the expected one."""


class PresentationExpiredError(PresentationError):
    """Raised when a presentation is verified after its expiry."""


class RegistryError(VeriglobError):
    """Base class for revocation registry failures."""


class EntryNotFoundError(RegistryError):
    """Raised when a credential id is not in the registry."""

    def __init__(self, credential_id: str) -> None:
        self.credential_id = credential_id
        super().__init__(f"credential not found in registry: {credential_id!r}")


class AlreadyRevokedError(RegistryError):
    """Raised when revoking a credential that is already revoked."""

    def __init__(self, credential_id: str) -> None:
        self.credential_id = credential_id
        super().__init__(f"credential already revoked: {credential_id!r}")


class PersistenceIOError(RegistryError):
    """Raised when the registry file cannot be read, parsed or written.

    After a failed write the in-memory change has already been applied.
    """
