"""
Signature conventions for drand chains.

Each `Scheme` variant fixes two things:

- which BLS12-381 group holds signatures and which holds the public key
  (plus the hash-to-curve domain tag for the signature group), and
- how the signed message is derived from a beacon.

drand signs ``sha256(message)``; the message is ``previous_signature ||
round`` for chained chains and ``round`` alone for unchained ones, with the
round as an unsigned 64-bit big-endian integer.

The set is closed: `scheme_for` maps every `SchemeID` to exactly one variant
and raises for anything else.
"""

from __future__ import annotations

import hashlib
from dataclasses import dataclass
from typing import Dict

from ..constants import DST_G1, DST_G2, ROUND_BYTES
from ..types.core import Beacon, SchemeID
from .bls import G1, G2, CurveGroup

__all__ = [
    "Scheme",
    "PEDERSEN_BLS_CHAINED",
    "PEDERSEN_BLS_UNCHAINED",
    "UNCHAINED_ON_G1_RFC9380",
    "scheme_for",
    "round_to_bytes",
]


def round_to_bytes(round_number: int) -> bytes:
    return int(round_number).to_bytes(ROUND_BYTES, "big", signed=False)


@dataclass(frozen=True)
class Scheme:
    id: SchemeID
    chained: bool
    signature_group: CurveGroup
    key_group: CurveGroup
    dst: bytes

    def message(self, beacon: Beacon) -> bytes:
        """Bytes the network hashes and signs for *beacon* under this scheme."""
        if self.chained:
            return bytes(beacon.previous_signature) + round_to_bytes(beacon.round_number)
        return round_to_bytes(beacon.round_number)

    def digest(self, beacon: Beacon) -> bytes:
        return hashlib.sha256(self.message(beacon)).digest()


PEDERSEN_BLS_CHAINED = Scheme(
    id=SchemeID.PEDERSEN_BLS_CHAINED,
    chained=True,
    signature_group=G2,
    key_group=G1,
    dst=DST_G2,
)

PEDERSEN_BLS_UNCHAINED = Scheme(
    id=SchemeID.PEDERSEN_BLS_UNCHAINED,
    chained=False,
    signature_group=G2,
    key_group=G1,
    dst=DST_G2,
)

# Group roles swapped: short signatures on G1, public key on G2.
UNCHAINED_ON_G1_RFC9380 = Scheme(
    id=SchemeID.UNCHAINED_ON_G1_RFC9380,
    chained=False,
    signature_group=G1,
    key_group=G2,
    dst=DST_G1,
)

_SCHEMES: Dict[SchemeID, Scheme] = {
    s.id: s for s in (PEDERSEN_BLS_CHAINED, PEDERSEN_BLS_UNCHAINED, UNCHAINED_ON_G1_RFC9380)
}


def scheme_for(scheme_id: SchemeID) -> Scheme:
    try:
        return _SCHEMES[SchemeID(scheme_id)]
    except (KeyError, ValueError):
        raise ValueError(f"unsupported scheme: {scheme_id!r}") from None
