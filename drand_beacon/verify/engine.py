"""
drand_beacon.verify.engine
==========================

Beacon verification: proves a beacon was produced by the chain's signing
group, independently of whichever transport delivered it.

Checks run cheapest first and stop at the first failure:

  1. randomness == sha256(signature)              -> InvalidRandomness
  2. scheme dispatch (closed set of variants)
  3. structural checks
       signature non-empty                       -> InvalidSignatureLength
       chained => previous_signature non-empty   -> ChainedBeaconNeedsPreviousSignature
       signature decodes into its group          -> SignatureFailedVerification
       public key decodes into its group         -> InvalidPublicKey
       key on curve, in subgroup, not identity   -> InvalidPublicKey
  4. e(signature, g) == e(H(digest), public_key) -> SignatureFailedVerification

A malformed signature point is reported exactly like a wrong signature so an
adversarial producer learns nothing about which structural check tripped.

The functions here are pure: no I/O, no logging, no shared state.
"""

from __future__ import annotations

import hashlib
import hmac
from typing import Optional

from ..errors import (
    ChainedBeaconNeedsPreviousSignature,
    InvalidPublicKey,
    InvalidRandomness,
    InvalidSignatureLength,
    SignatureFailedVerification,
    VerificationError,
)
from ..types.core import Beacon, SchemeID
from .bls import G2, Point, PointDecodeError, negate, pairing_check
from .schemes import Scheme, scheme_for

__all__ = ["verify_beacon", "check_beacon", "verify_with_scheme"]


def verify_beacon(scheme_id: SchemeID, public_key: bytes, beacon: Beacon) -> None:
    """
    Verify *beacon* against the chain's *public_key* under *scheme_id*.

    Returns None on success and raises exactly one VerificationError subclass
    otherwise.
    """
    expected = hashlib.sha256(bytes(beacon.signature)).digest()
    if not hmac.compare_digest(expected, bytes(beacon.randomness)):
        raise InvalidRandomness()
    verify_with_scheme(scheme_for(scheme_id), public_key, beacon)


def check_beacon(scheme_id: SchemeID, public_key: bytes, beacon: Beacon) -> Optional[VerificationError]:
    """Like verify_beacon, but return the verdict (None means valid)."""
    try:
        verify_beacon(scheme_id, public_key, beacon)
    except VerificationError as e:
        return e
    return None


def verify_with_scheme(scheme: Scheme, public_key: bytes, beacon: Beacon) -> None:
    """Structural and pairing checks for one scheme variant (no randomness check)."""
    if len(beacon.signature) == 0:
        raise InvalidSignatureLength()

    if scheme.chained and len(beacon.previous_signature) == 0:
        raise ChainedBeaconNeedsPreviousSignature()

    sig_group = scheme.signature_group
    key_group = scheme.key_group

    try:
        signature = sig_group.deserialize(beacon.signature)
    except PointDecodeError:
        raise SignatureFailedVerification() from None
    if not sig_group.in_subgroup(signature):
        raise SignatureFailedVerification()

    try:
        pubkey = key_group.deserialize(public_key)
    except PointDecodeError:
        raise InvalidPublicKey() from None
    if (
        not key_group.is_on_curve(pubkey)
        or key_group.is_identity(pubkey)
        or not key_group.in_subgroup(pubkey)
    ):
        raise InvalidPublicKey()

    message_point = sig_group.hash_to_curve(scheme.digest(beacon), scheme.dst)

    # e(sig, g_key) * e(H(m), -pk) == 1, each pair oriented as (G1, G2)
    pairs = [
        _oriented(scheme, signature, key_group.generator),
        _oriented(scheme, message_point, negate(pubkey)),
    ]
    if not pairing_check(pairs):
        raise SignatureFailedVerification()


def _oriented(scheme: Scheme, sig_side: Point, key_side: Point) -> tuple[Point, Point]:
    if scheme.signature_group is G2:
        return key_side, sig_side
    return sig_side, key_side
