import dataclasses
import hashlib

import pytest

from drand_beacon.errors import (
    ChainedBeaconNeedsPreviousSignature,
    InvalidPublicKey,
    InvalidRandomness,
    InvalidSignatureLength,
    SignatureFailedVerification,
    VerificationError,
)
from drand_beacon.types.core import SchemeID
from drand_beacon.verify import check_beacon, verify_beacon

from .conftest import VECTORS, hb, mk_beacon, vector

G1_IDENTITY = bytes([0xC0]) + bytes(47)
G2_IDENTITY = bytes([0xC0]) + bytes(95)
# 192-byte uncompressed G2 identity: wrong length for a compressed key
G2_IDENTITY_UNCOMPRESSED = bytes([0x40]) + bytes(191)

MAINNET_PK = hb(VECTORS["mainnet_chained"]["chain_info"]["public_key"])


def with_signature(beacon, signature: bytes):
    """Replace the signature and keep randomness consistent with it."""
    return dataclasses.replace(beacon, signature=signature, randomness=hashlib.sha256(signature).digest())


# -------------------------
# Known-good vectors
# -------------------------


@pytest.mark.slow
@pytest.mark.parametrize("name", ["testnet_chained", "testnet_unchained", "g1_rfc9380"])
def test_known_vectors_verify(name: str):
    scheme, pk, beacon = vector(name)
    assert verify_beacon(scheme, pk, beacon) is None
    assert check_beacon(scheme, pk, beacon) is None


@pytest.mark.slow
def test_mainnet_round_2_verifies(mainnet_info, mainnet_beacon):
    verify_beacon(mainnet_info.scheme_id, mainnet_info.public_key, mainnet_beacon)


@pytest.mark.slow
def test_unchained_ignores_previous_signature():
    scheme, pk, beacon = vector("testnet_unchained")
    beacon = dataclasses.replace(beacon, previous_signature=beacon.signature)
    verify_beacon(scheme, pk, beacon)


# -------------------------
# Round binding
# -------------------------


@pytest.mark.slow
@pytest.mark.parametrize("name", ["testnet_chained", "testnet_unchained", "g1_rfc9380"])
def test_wrong_round_fails_pairing(name: str):
    scheme, pk, beacon = vector(name)
    with pytest.raises(SignatureFailedVerification):
        verify_beacon(scheme, pk, dataclasses.replace(beacon, round_number=1))


@pytest.mark.slow
@pytest.mark.parametrize("name", ["testnet_chained", "testnet_unchained", "g1_rfc9380"])
@pytest.mark.parametrize("index,mask", [(-1, 0x01), (20, 0x10)])
def test_flipped_signature_bit_fails_verification(name: str, index: int, mask: int):
    scheme, pk, beacon = vector(name)
    sig = bytearray(beacon.signature)
    sig[index] ^= mask
    with pytest.raises(SignatureFailedVerification):
        verify_beacon(scheme, pk, with_signature(beacon, bytes(sig)))


@pytest.mark.slow
def test_chained_wrong_previous_signature_fails_pairing():
    scheme, pk, beacon = vector("testnet_chained")
    prev = bytearray(beacon.previous_signature)
    prev[-1] ^= 0x01
    with pytest.raises(SignatureFailedVerification):
        verify_beacon(scheme, pk, dataclasses.replace(beacon, previous_signature=bytes(prev)))


@pytest.mark.slow
def test_round_2_with_foreign_signature_fails_pairing():
    # genesis=1595431050, period=30, round 2 with the right previous signature,
    # but a signature from another chain; its SHA-256 is the stated randomness.
    _, _, foreign = vector("testnet_chained")
    mainnet = VECTORS["mainnet_chained"]["beacon"]
    beacon = mk_beacon(
        mainnet,
        signature=foreign.signature,
        randomness=foreign.randomness,
    )
    with pytest.raises(SignatureFailedVerification):
        verify_beacon(SchemeID.PEDERSEN_BLS_CHAINED, MAINNET_PK, beacon)


# -------------------------
# Randomness
# -------------------------


@pytest.mark.parametrize("name", ["testnet_chained", "testnet_unchained", "g1_rfc9380"])
def test_randomness_mismatch_is_reported_first(name: str):
    scheme, _, beacon = vector(name)
    rnd = bytearray(beacon.randomness)
    rnd[0] ^= 0x70
    bad = dataclasses.replace(beacon, randomness=bytes(rnd))
    # even an empty key loses to the randomness check
    with pytest.raises(InvalidRandomness):
        verify_beacon(scheme, b"", bad)


def test_randomness_of_wrong_length_is_invalid():
    scheme, pk, beacon = vector("testnet_unchained")
    with pytest.raises(InvalidRandomness):
        verify_beacon(scheme, pk, dataclasses.replace(beacon, randomness=beacon.randomness[:31]))


# -------------------------
# Structural checks
# -------------------------


def test_empty_signature_is_invalid_length():
    scheme, pk, beacon = vector("testnet_unchained")
    with pytest.raises(InvalidSignatureLength):
        verify_beacon(scheme, pk, with_signature(beacon, b""))


def test_chained_requires_previous_signature():
    scheme, pk, beacon = vector("testnet_chained")
    with pytest.raises(ChainedBeaconNeedsPreviousSignature):
        verify_beacon(scheme, pk, dataclasses.replace(beacon, previous_signature=b""))


def test_signature_in_wrong_group_fails_verification():
    # a 48-byte G1 signature presented to a G2-signature scheme
    _, pk, beacon = vector("testnet_unchained")
    _, _, g1_beacon = vector("g1_rfc9380")
    bad = with_signature(beacon, g1_beacon.signature)
    with pytest.raises(SignatureFailedVerification):
        verify_beacon(SchemeID.PEDERSEN_BLS_UNCHAINED, pk, bad)


def test_undecodable_signature_fails_verification():
    scheme, pk, beacon = vector("testnet_unchained")
    garbage = bytes([0x1F]) + beacon.signature[1:]  # compression flag cleared
    with pytest.raises(SignatureFailedVerification):
        verify_beacon(scheme, pk, with_signature(beacon, garbage))


def g1_key_off_curve() -> bytes:
    """Correctly flagged compressed G1 key whose x has no square root."""
    from py_ecc.optimized_bls12_381 import field_modulus as q

    x = 1
    while True:
        rhs = (x ** 3 + 4) % q
        if pow(rhs, (q - 1) // 2, q) == q - 1:
            break
        x += 1
    return (x | (1 << 383)).to_bytes(48, "big")


def g1_key_outside_subgroup() -> bytes:
    from py_ecc.bls.point_compression import compress_G1
    from py_ecc.optimized_bls12_381 import FQ, curve_order, field_modulus, is_inf, multiply

    q = field_modulus
    x = 1
    while True:
        rhs = (x ** 3 + 4) % q
        y = pow(rhs, (q + 1) // 4, q)
        if y * y % q == rhs:
            point = (FQ(x), FQ(y), FQ(1))
            if not is_inf(multiply(point, curve_order)):
                break
        x += 1
    return int(compress_G1(point)).to_bytes(48, "big")


def g2_key_outside_subgroup() -> bytes:
    from py_ecc.bls.point_compression import compress_G2, modular_squareroot_in_FQ2
    from py_ecc.optimized_bls12_381 import FQ2, b2, curve_order, is_inf, multiply

    k = 1
    while True:
        x = FQ2([k, 1])
        y = modular_squareroot_in_FQ2(x ** 3 + b2)
        if y is not None:
            point = (x, y, FQ2.one())
            if not is_inf(multiply(point, curve_order)):
                break
        k += 1
    z1, z2 = compress_G2(point)
    return int(z1).to_bytes(48, "big") + int(z2).to_bytes(48, "big")


@pytest.mark.parametrize(
    "name,key",
    [
        ("testnet_chained", b""),
        ("testnet_chained", G1_IDENTITY),
        ("testnet_chained", bytes([0x78]) + hb(VECTORS["testnet_chained"]["public_key"])[1:]),
        ("testnet_unchained", b""),
        ("testnet_unchained", G1_IDENTITY),
        ("testnet_unchained", G2_IDENTITY_UNCOMPRESSED),
        ("g1_rfc9380", b""),
        ("g1_rfc9380", G2_IDENTITY),
        ("g1_rfc9380", G2_IDENTITY_UNCOMPRESSED),
        # G1 key for a G2-key scheme
        ("g1_rfc9380", hb(VECTORS["testnet_unchained"]["public_key"])),
    ],
)
def test_bad_public_keys_are_rejected(name: str, key: bytes):
    scheme, _, beacon = vector(name)
    with pytest.raises(InvalidPublicKey):
        verify_beacon(scheme, key, beacon)


@pytest.mark.parametrize("name", ["testnet_chained", "testnet_unchained"])
def test_off_curve_public_key_is_rejected(name: str):
    scheme, _, beacon = vector(name)
    with pytest.raises(InvalidPublicKey):
        verify_beacon(scheme, g1_key_off_curve(), beacon)


@pytest.mark.parametrize(
    "name,make_key",
    [
        ("testnet_chained", g1_key_outside_subgroup),
        ("testnet_unchained", g1_key_outside_subgroup),
        ("g1_rfc9380", g2_key_outside_subgroup),
    ],
)
def test_public_key_outside_subgroup_is_rejected(name: str, make_key):
    scheme, _, beacon = vector(name)
    with pytest.raises(InvalidPublicKey):
        verify_beacon(scheme, make_key(), beacon)


@pytest.mark.slow
def test_valid_key_of_another_chain_fails_pairing():
    scheme, _, beacon = vector("testnet_unchained")
    with pytest.raises(SignatureFailedVerification):
        verify_beacon(scheme, MAINNET_PK, beacon)


# -------------------------
# Verdict plumbing
# -------------------------


def test_check_beacon_returns_verdict_instead_of_raising():
    scheme, pk, beacon = vector("testnet_chained")
    verdict = check_beacon(scheme, pk, dataclasses.replace(beacon, previous_signature=b""))
    assert isinstance(verdict, ChainedBeaconNeedsPreviousSignature)
    assert isinstance(verdict, VerificationError)
    assert verdict.code == "chained_beacon_needs_previous_signature"


def test_scheme_may_be_given_as_wire_string():
    _, pk, beacon = vector("testnet_chained")
    with pytest.raises(ChainedBeaconNeedsPreviousSignature):
        verify_beacon("pedersen-bls-chained", pk, dataclasses.replace(beacon, previous_signature=b""))


def test_verdict_messages_are_stable():
    assert str(InvalidRandomness()) == "the randomness for the beacon did not match the signature"
    assert str(ChainedBeaconNeedsPreviousSignature()) == "chained beacons must have a `previous_signature`"
    assert str(SignatureFailedVerification()) == "signature verification failed"


@pytest.mark.slow
def test_verification_is_deterministic():
    scheme, pk, beacon = vector("g1_rfc9380")
    bad = dataclasses.replace(beacon, round_number=999)
    first = check_beacon(scheme, pk, bad)
    second = check_beacon(scheme, pk, bad)
    assert type(first) is type(second) is SignatureFailedVerification
