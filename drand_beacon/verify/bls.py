"""
drand_beacon.verify.bls
=======================

Thin BLS12-381 wrapper over ``py_ecc`` for beacon verification.

Public API
----------
- G1, G2 : CurveGroup descriptors (point size, generator, codec, hash-to-curve)
- CurveGroup.deserialize(data) / CurveGroup.serialize(point)
- CurveGroup.is_on_curve(P) / CurveGroup.in_subgroup(P) / CurveGroup.is_identity(P)
- CurveGroup.hash_to_curve(message, dst)   (RFC 9380, expand_message_xmd + SSWU)
- pairing_check(pairs) -> bool             (product of e(P_i, Q_i) == 1 in GT)

Notes
-----
- Points use ZCash compressed serialization: 48 bytes in G1, 96 bytes in G2
  (the first 48 bytes of a G2 point hold the c1 coefficient and the flags).
- ``py_ecc.optimized_bls12_381.pairing`` takes (Q in G2, P in G1); this
  wrapper takes pairs in the e(P, Q) order and handles the swap.
- Decoding checks the encoding flags and that a square root exists (the
  point is on the curve); it does not check subgroup membership. Callers do
  that explicitly with ``in_subgroup``.
- Everything here is deterministic pure Python and holds no state.
"""

from __future__ import annotations

import hashlib
from dataclasses import dataclass
from typing import Any, Callable, Iterable, Tuple

from py_ecc.bls.hash_to_curve import hash_to_G1, hash_to_G2
from py_ecc.bls.point_compression import (
    compress_G1,
    compress_G2,
    decompress_G1,
    decompress_G2,
)
from py_ecc.optimized_bls12_381 import (
    FQ12,
    G1 as _G1_GEN,
    G2 as _G2_GEN,
    b as _B1,
    b2 as _B2,
    curve_order as _R,
    final_exponentiate,
    is_inf,
    is_on_curve as _is_on_curve,
    multiply,
    neg,
    pairing as _pairing,
)

from ..constants import G1_COMPRESSED_SIZE, G2_COMPRESSED_SIZE

# Backend point types differ per group (FQ vs FQ2 projective triples); treat
# them as opaque values py_ecc understands.
Point = Any

__all__ = [
    "Point",
    "PointDecodeError",
    "CurveGroup",
    "G1",
    "G2",
    "negate",
    "pairing_check",
]


class PointDecodeError(ValueError):
    """Raised when bytes do not decode to a point of the expected group."""


# -------------------------
# Codecs
# -------------------------


def _decode_g1(data: bytes) -> Point:
    return decompress_G1(int.from_bytes(data, "big"))


def _encode_g1(point: Point) -> bytes:
    return int(compress_G1(point)).to_bytes(G1_COMPRESSED_SIZE, "big")


def _decode_g2(data: bytes) -> Point:
    half = G1_COMPRESSED_SIZE
    z1 = int.from_bytes(data[:half], "big")
    z2 = int.from_bytes(data[half:], "big")
    return decompress_G2((z1, z2))


def _encode_g2(point: Point) -> bytes:
    z1, z2 = compress_G2(point)
    half = G1_COMPRESSED_SIZE
    return int(z1).to_bytes(half, "big") + int(z2).to_bytes(half, "big")


# -------------------------
# Group descriptors
# -------------------------


@dataclass(frozen=True)
class CurveGroup:
    """One of the two BLS12-381 source groups, with its codec and hash-to-curve."""

    name: str
    point_size: int
    generator: Point
    b: Any
    _decode: Callable[[bytes], Point]
    _encode: Callable[[Point], bytes]
    _hash: Callable[..., Point]

    def deserialize(self, data: bytes) -> Point:
        """Decode a compressed point; raise PointDecodeError on any malformed input."""
        if len(data) != self.point_size:
            raise PointDecodeError(f"{self.name} point must be {self.point_size} bytes (got {len(data)})")
        try:
            return self._decode(bytes(data))
        except ValueError as e:
            raise PointDecodeError(f"invalid {self.name} point: {e}") from e

    def serialize(self, point: Point) -> bytes:
        return self._encode(point)

    def is_on_curve(self, point: Point) -> bool:
        return bool(_is_on_curve(point, self.b))

    def in_subgroup(self, point: Point) -> bool:
        """True if r·P is the identity, i.e. P lies in the prime-order subgroup."""
        return bool(is_inf(multiply(point, _R)))

    def is_identity(self, point: Point) -> bool:
        return bool(is_inf(point))

    def hash_to_curve(self, message: bytes, dst: bytes) -> Point:
        return self._hash(message, dst, hashlib.sha256)


G1 = CurveGroup(
    name="G1",
    point_size=G1_COMPRESSED_SIZE,
    generator=_G1_GEN,
    b=_B1,
    _decode=_decode_g1,
    _encode=_encode_g1,
    _hash=hash_to_G1,
)

G2 = CurveGroup(
    name="G2",
    point_size=G2_COMPRESSED_SIZE,
    generator=_G2_GEN,
    b=_B2,
    _decode=_decode_g2,
    _encode=_encode_g2,
    _hash=hash_to_G2,
)


# -------------------------
# Pairing
# -------------------------


def negate(point: Point) -> Point:
    return neg(point)


def pairing_check(pairs: Iterable[Tuple[Point, Point]]) -> bool:
    """
    Return True iff  Π e(P_i, Q_i) == 1  in GT, with P_i in G1 and Q_i in G2.

    Miller loops are multiplied first and a single final exponentiation is
    applied to the product.
    """
    acc = FQ12.one()
    for p, q in pairs:
        acc = acc * _pairing(q, p, final_exponentiate=False)
    return final_exponentiate(acc) == FQ12.one()
