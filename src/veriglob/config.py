# SPDX-License-Identifier: BSL-1.1
# Copyright (c) 2026 MuVeraAI Corporation

"""veriglob configuration constants.

Environment-based configuration in two tiers:
- NORMATIVE: Fixed by the protocol, not overridable
- CONFIGURABLE: Defaults that deployments can override via environment
"""
import os
from datetime import timedelta


def _get_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


# =============================================================================
# NORMATIVE
# =============================================================================

# Multicodec prefix for Ed25519 public keys: 0xed 0x01
ED25519_MULTICODEC_PREFIX = bytes([0xED, 0x01])

DID_CONTEXT = ["https://www.w3.org/ns/did/v1"]
VC_CONTEXT = ["https://www.w3.org/2018/credentials/v1"]

CREDENTIAL_VALIDITY = timedelta(days=365)
# Presentations are always short-lived, regardless of the credentials inside.
PRESENTATION_VALIDITY = timedelta(minutes=15)

REVOCATION_STATUS_TYPE = "RevocationRegistry2024"


# =============================================================================
# CONFIGURABLE
# =============================================================================

# Backing file used by RevocationRegistry.open() when no path is given.
REGISTRY_PATH: str = os.getenv("VERIGLOB_REGISTRY_PATH", "revocation_registry.json")

# When false, verify_credential() accepts expired credentials unless the
# caller asks for enforcement explicitly.
ENFORCE_CREDENTIAL_EXPIRY: bool = _get_bool("VERIGLOB_ENFORCE_CREDENTIAL_EXPIRY", True)
