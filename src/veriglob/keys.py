# SPDX-License-Identifier: BSL-1.1
# Copyright (c) 2026 MuVeraAI Corporation

"""Ed25519 key generation and raw key-material validation.

Private keys travel through the API as 64 raw bytes: the 32-byte seed
followed by the 32-byte public key. Public keys are 32 raw bytes.
"""

from __future__ import annotations

from cryptography.hazmat.primitives.asymmetric.ed25519 import (
    Ed25519PrivateKey,
    Ed25519PublicKey,
)
from cryptography.hazmat.primitives.serialization import (
    Encoding,
    NoEncryption,
    PrivateFormat,
    PublicFormat,
)

from .types import InvalidKeyMaterialError

PUBLIC_KEY_SIZE = 32
PRIVATE_KEY_SIZE = 64


def generate_ed25519_keypair() -> tuple[bytes, bytes]:
    """Generate a fresh Ed25519 key pair.

    Returns
    -------
    tuple[bytes, bytes]
        ``(public_key, private_key)`` as 32 and 64 raw bytes.
    """
    private_key = Ed25519PrivateKey.generate()
    seed = private_key.private_bytes(Encoding.Raw, PrivateFormat.Raw, NoEncryption())
    public = private_key.public_key().public_bytes(Encoding.Raw, PublicFormat.Raw)
    return public, seed + public


def load_private_key(private_key: bytes) -> Ed25519PrivateKey:
    """Load a 64-byte seed-and-public-key Ed25519 private key."""
    if not isinstance(private_key, (bytes, bytearray)) or len(private_key) != PRIVATE_KEY_SIZE:
        size = len(private_key) if isinstance(private_key, (bytes, bytearray)) else None
        raise InvalidKeyMaterialError(
            f"load_private_key: expected {PRIVATE_KEY_SIZE}-byte Ed25519 private key, got {size}"
        )
    try:
        key = Ed25519PrivateKey.from_private_bytes(bytes(private_key[:32]))
    except ValueError as exc:
        raise InvalidKeyMaterialError(f"load_private_key: {exc}") from exc

    derived = key.public_key().public_bytes(Encoding.Raw, PublicFormat.Raw)
    if derived != bytes(private_key[32:]):
        raise InvalidKeyMaterialError(
            "load_private_key: public half does not match the seed"
        )
    return key


def load_public_key(public_key: bytes) -> Ed25519PublicKey:
    """Load a raw 32-byte Ed25519 public key."""
    if not isinstance(public_key, (bytes, bytearray)) or len(public_key) != PUBLIC_KEY_SIZE:
        size = len(public_key) if isinstance(public_key, (bytes, bytearray)) else None
        raise InvalidKeyMaterialError(
            f"load_public_key: expected {PUBLIC_KEY_SIZE}-byte Ed25519 public key, got {size}"
        )
    try:
        return Ed25519PublicKey.from_public_bytes(bytes(public_key))
    except ValueError as exc:
        raise InvalidKeyMaterialError(f"load_public_key: {exc}") from exc


def public_key_from_private(private_key: bytes) -> bytes:
    """Return the raw public key belonging to a 64-byte private key."""
    key = load_private_key(private_key)
    return key.public_key().public_bytes(Encoding.Raw, PublicFormat.Raw)
