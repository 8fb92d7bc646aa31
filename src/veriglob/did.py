# SPDX-License-Identifier: BSL-1.1
# Copyright (c) 2026 MuVeraAI Corporation

"""did:key derivation, resolution, and DID document utilities."""

from __future__ import annotations

from . import config
from .types import (
    DIDDocument,
    DIDKey,
    DIDMethod,
    InvalidKeyLengthError,
    InvalidTypeTagError,
    MalformedIdentifierError,
    UnsupportedDIDMethodError,
    VerificationMethod,
    VerificationMethodType,
)

_ED25519_KEY_SIZE = 32

# Base58btc alphabet (Bitcoin alphabet)
_BASE58_ALPHABET = "123456789ABCDEFGHJKLMNPQRSTUVWXYZabcdefghijkmnopqrstuvwxyz"
_BASE58_INDEX = {char: index for index, char in enumerate(_BASE58_ALPHABET)}


def encode_base58btc(data: bytes) -> str:
    """Encode bytes as base58btc (Bitcoin alphabet, no multibase prefix)."""
    leading_zeros = len(data) - len(data.lstrip(b"\x00"))

    n = int.from_bytes(data, "big")
    digits: list[str] = []
    while n > 0:
        n, remainder = divmod(n, 58)
        digits.append(_BASE58_ALPHABET[remainder])

    return "1" * leading_zeros + "".join(reversed(digits))


def decode_base58btc(encoded: str) -> bytes:
    """Decode a base58btc string (no multibase prefix) to bytes.

    Raises
    ------
    ValueError
        If *encoded* contains a character outside the base58btc alphabet.
    """
    n = 0
    for char in encoded:
        index = _BASE58_INDEX.get(char)
        if index is None:
            raise ValueError(f"invalid base58btc character: {char!r}")
        n = n * 58 + index

    leading_zeros = len(encoded) - len(encoded.lstrip("1"))
    raw = n.to_bytes((n.bit_length() + 7) // 8, "big") if n > 0 else b""
    return b"\x00" * leading_zeros + raw


def derive_key_did(public_key: bytes) -> str:
    """Derive a did:key DID from a raw 32-byte Ed25519 public key.

    Encoding: ``did:key:z`` + base58btc(0xed01 || public_key_bytes)
    """
    if len(public_key) != _ED25519_KEY_SIZE:
        raise InvalidKeyLengthError(
            f"derive_key_did: expected 32-byte Ed25519 public key, got {len(public_key)}"
        )
    prefixed = config.ED25519_MULTICODEC_PREFIX + bytes(public_key)
    return "did:key:z" + encode_base58btc(prefixed)


def create_did_key(public_key: bytes) -> DIDKey:
    """Derive the did:key identifier and its DID document for *public_key*."""
    did = derive_key_did(public_key)
    return DIDKey(
        did=did,
        public_key=bytes(public_key),
        document=build_key_did_document(did, public_key),
    )


def parse_did_method(did: str) -> DIDMethod:
    """Extract and return the DID method. Only 'key' is supported."""
    parts = did.split(":")
    if len(parts) < 3 or parts[0] != "did":
        raise MalformedIdentifierError(f"parse_did_method: invalid DID: {did!r}")
    method = parts[1]
    if method == DIDMethod.KEY.value:
        return DIDMethod.KEY
    raise UnsupportedDIDMethodError(f"unsupported DID method: {method!r}")


def resolve_did(did: str) -> bytes:
    """Resolve a DID to the raw 32-byte Ed25519 public key it encodes.

    Raises
    ------
    MalformedIdentifierError
        Not a ``did:<method>:<id>`` string, a method-id without the ``z``
        multibase prefix, or invalid base58btc.
    UnsupportedDIDMethodError
        Any method other than ``key``.
    InvalidTypeTagError
        Decoded bytes do not start with the Ed25519 multicodec prefix.
    InvalidKeyLengthError
        The key following the prefix is not 32 bytes.
    """
    parse_did_method(did)
    identifier = did.split(":")[2]
    if not identifier.startswith("z"):
        raise MalformedIdentifierError(
            f"resolve_did: did:key identifier must be base58btc multibase ('z'): {did!r}"
        )

    try:
        decoded = decode_base58btc(identifier[1:])
    except ValueError as exc:
        raise MalformedIdentifierError(f"resolve_did: {exc}") from exc

    prefix_len = len(config.ED25519_MULTICODEC_PREFIX)
    if decoded[:prefix_len] != config.ED25519_MULTICODEC_PREFIX:
        raise InvalidTypeTagError(
            f"resolve_did: unexpected multicodec prefix {decoded[:prefix_len].hex()!r}"
        )

    raw_key = decoded[prefix_len:]
    if len(raw_key) != _ED25519_KEY_SIZE:
        raise InvalidKeyLengthError(
            f"resolve_did: expected 32 key bytes, got {len(raw_key)}"
        )
    return raw_key


def build_key_did_document(did: str, public_key: bytes) -> DIDDocument:
    """Synthesize the DIDDocument for a did:key DID from its raw public key.

    One ``Ed25519VerificationKey2018`` verification method, controlled by the
    DID itself and referenced from both ``authentication`` and
    ``assertionMethod``. No network call is involved.
    """
    if len(public_key) != _ED25519_KEY_SIZE:
        raise InvalidKeyLengthError(
            f"build_key_did_document: expected 32-byte Ed25519 public key, "
            f"got {len(public_key)}"
        )
    vm_id = f"{did}#key-1"

    verification_method = VerificationMethod(
        id=vm_id,
        type=VerificationMethodType.ED25519_2018,
        controller=did,
        public_key_base58=encode_base58btc(bytes(public_key)),
    )

    return DIDDocument(
        context=list(config.DID_CONTEXT),
        id=did,
        verification_method=[verification_method],
        authentication=[vm_id],
        assertion_method=[vm_id],
    )


def extract_public_key_from_document(doc: DIDDocument) -> bytes:
    """Extract the first Ed25519 public key from a DID document."""
    for vm in doc.verification_method:
        if vm.type is not VerificationMethodType.ED25519_2018:
            continue
        try:
            decoded = decode_base58btc(vm.public_key_base58)
        except ValueError as exc:
            raise MalformedIdentifierError(
                f"extract_public_key_from_document: {exc}"
            ) from exc
        if len(decoded) != _ED25519_KEY_SIZE:
            raise InvalidKeyLengthError(
                f"extract_public_key_from_document: unexpected key length {len(decoded)}"
            )
        return decoded

    raise MalformedIdentifierError(
        f"extract_public_key_from_document: no Ed25519VerificationKey2018 "
        f"in document for {doc.id}"
    )
