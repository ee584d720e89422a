"""
drand beacon constants.

This module centralizes:
- The scheme identifiers published by drand networks in their chain info
- Hash-to-curve domain separation tags (RFC 9380 ciphersuites)
- Compressed point sizes for BLS12-381 (ZCash serialization)
- Wire/transport defaults shared by the client, config and CLI

Changing any of the DSTs or sizes would make every historical beacon fail
verification; they are fixed by the network, not tunable.
"""

from __future__ import annotations

# -----------------------------
# Scheme identifiers (chain info "schemeID")
# -----------------------------
SCHEME_PEDERSEN_BLS_CHAINED: str = "pedersen-bls-chained"
SCHEME_PEDERSEN_BLS_UNCHAINED: str = "pedersen-bls-unchained"
SCHEME_BLS_UNCHAINED_G1_RFC9380: str = "bls-unchained-g1-rfc9380"

KNOWN_SCHEMES: tuple[str, ...] = (
    SCHEME_PEDERSEN_BLS_CHAINED,
    SCHEME_PEDERSEN_BLS_UNCHAINED,
    SCHEME_BLS_UNCHAINED_G1_RFC9380,
)

# -----------------------------
# Hash-to-curve domain separation tags
# -----------------------------
# Signatures on G2 (public keys on G1): chained and unchained pedersen schemes.
DST_G2: bytes = b"BLS_SIG_BLS12381G2_XMD:SHA-256_SSWU_RO_NUL_"
# Signatures on G1 (public keys on G2): RFC 9380 compliant short-signature scheme.
DST_G1: bytes = b"BLS_SIG_BLS12381G1_XMD:SHA-256_SSWU_RO_NUL_"

# -----------------------------
# Point sizes (compressed, bytes)
# -----------------------------
G1_COMPRESSED_SIZE: int = 48
G2_COMPRESSED_SIZE: int = 96

# Rounds are serialized as unsigned 64-bit big-endian integers.
ROUND_BYTES: int = 8
MAX_ROUND: int = (1 << 64) - 1

# -----------------------------
# Client / transport defaults
# -----------------------------
DEFAULT_BASE_URL: str = "https://api.drand.sh"
DEFAULT_HTTP_TIMEOUT_S: float = 10.0
DEFAULT_HTTP_RETRIES: int = 2
DEFAULT_BACKOFF_BASE_S: float = 0.25

# Aggregating partial signatures may lag the schedule by up to one period.
DEFAULT_LATEST_TOLERANCE_ROUNDS: int = 1

ENV_PREFIX: str = "DRAND_"

__all__ = [
    "SCHEME_PEDERSEN_BLS_CHAINED",
    "SCHEME_PEDERSEN_BLS_UNCHAINED",
    "SCHEME_BLS_UNCHAINED_G1_RFC9380",
    "KNOWN_SCHEMES",
    "DST_G2",
    "DST_G1",
    "G1_COMPRESSED_SIZE",
    "G2_COMPRESSED_SIZE",
    "ROUND_BYTES",
    "MAX_ROUND",
    "DEFAULT_BASE_URL",
    "DEFAULT_HTTP_TIMEOUT_S",
    "DEFAULT_HTTP_RETRIES",
    "DEFAULT_BACKOFF_BASE_S",
    "DEFAULT_LATEST_TOLERANCE_ROUNDS",
    "ENV_PREFIX",
]
