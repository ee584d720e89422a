from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import NewType

from ..constants import (
    MAX_ROUND,
    SCHEME_BLS_UNCHAINED_G1_RFC9380,
    SCHEME_PEDERSEN_BLS_CHAINED,
    SCHEME_PEDERSEN_BLS_UNCHAINED,
)
from ..errors import InvalidChainInfo

"""
Core typed records for drand beacons.

These are immutable values handed from the wire/transport layer to the
verification engine and the Round-Time Mapper. They carry no behavior beyond
construction-time validation.

Types provided:
  • RoundNumber       : integer-typed beacon round (starts at 1)
  • SchemeID          : closed set of signature conventions
  • ChainInfoMetadata : free-form labels attached to a chain
  • ChainInfo         : per-network metadata: scheme, key, schedule
  • Beacon            : one round's randomness, signature and link
"""

RoundNumber = NewType("RoundNumber", int)


class SchemeID(str, Enum):
    """Signature convention declared by a chain's ``schemeID``."""

    PEDERSEN_BLS_CHAINED = SCHEME_PEDERSEN_BLS_CHAINED
    PEDERSEN_BLS_UNCHAINED = SCHEME_PEDERSEN_BLS_UNCHAINED
    UNCHAINED_ON_G1_RFC9380 = SCHEME_BLS_UNCHAINED_G1_RFC9380

    @classmethod
    def parse(cls, value: object) -> "SchemeID":
        """Map a wire string to a scheme; anything unknown is an invalid chain."""
        if isinstance(value, SchemeID):
            return value
        if not isinstance(value, str):
            raise InvalidChainInfo(f"schemeID must be a string (got {type(value).__name__})")
        try:
            return cls(value)
        except ValueError:
            known = ", ".join(s.value for s in cls)
            raise InvalidChainInfo(f"unknown schemeID {value!r} (expected one of: {known})") from None

    def __str__(self) -> str:
        return self.value


def _require_bytes(name: str, v: object) -> None:
    if not isinstance(v, (bytes, bytearray)):
        raise TypeError(f"{name} must be bytes")


@dataclass(frozen=True, slots=True)
class ChainInfoMetadata:
    beacon_id: str = "default"


@dataclass(frozen=True, slots=True)
class ChainInfo:
    """
    Metadata describing one drand chain.

    Fields:
      scheme_id     : signature convention for every beacon of this chain
      public_key    : group public key, compressed, in the scheme's key group
      chain_hash    : identifier of the chain (not used by verification)
      group_hash    : identifier of the signing group (not used by verification)
      genesis_time  : Unix seconds at which round 1 is nominally emitted
      period_seconds: spacing between rounds, strictly positive
      metadata      : free-form labels (beacon id)
    """

    scheme_id: SchemeID
    public_key: bytes
    chain_hash: bytes
    group_hash: bytes
    genesis_time: int
    period_seconds: int
    metadata: ChainInfoMetadata = field(default_factory=ChainInfoMetadata)

    def __post_init__(self) -> None:  # type: ignore[override]
        if not isinstance(self.scheme_id, SchemeID):
            raise InvalidChainInfo("scheme_id must be a SchemeID")
        for name in ("public_key", "chain_hash", "group_hash"):
            _require_bytes(name, getattr(self, name))
        if len(self.public_key) == 0:
            raise InvalidChainInfo("public_key must not be empty")
        if not isinstance(self.genesis_time, int) or isinstance(self.genesis_time, bool):
            raise InvalidChainInfo("genesis_time must be an int")
        if self.genesis_time < 0:
            raise InvalidChainInfo(f"genesis_time must be non-negative (got {self.genesis_time})")
        if not isinstance(self.period_seconds, int) or isinstance(self.period_seconds, bool):
            raise InvalidChainInfo("period_seconds must be an int")
        if self.period_seconds <= 0:
            raise InvalidChainInfo(f"period_seconds must be > 0 (got {self.period_seconds})")

    @property
    def is_chained(self) -> bool:
        return self.scheme_id is SchemeID.PEDERSEN_BLS_CHAINED


@dataclass(frozen=True, slots=True)
class Beacon:
    """
    One round's output.

    Fields:
      round_number      : unsigned 64-bit round
      randomness        : claimed SHA-256 of ``signature``
      signature         : threshold signature, compressed point
      previous_signature: previous round's signature (chained schemes only)
    """

    round_number: RoundNumber
    randomness: bytes
    signature: bytes
    previous_signature: bytes = b""

    def __post_init__(self) -> None:  # type: ignore[override]
        if not isinstance(self.round_number, int) or isinstance(self.round_number, bool):
            raise TypeError("round_number must be an int")
        if not 0 <= self.round_number <= MAX_ROUND:
            raise ValueError(f"round_number must fit in an unsigned 64-bit integer (got {self.round_number})")
        for name in ("randomness", "signature", "previous_signature"):
            _require_bytes(name, getattr(self, name))


__all__ = [
    "RoundNumber",
    "SchemeID",
    "ChainInfoMetadata",
    "ChainInfo",
    "Beacon",
]
