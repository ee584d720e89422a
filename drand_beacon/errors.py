"""
drand-beacon errors.

A small, typed hierarchy of exceptions. Callers can catch the base
`BeaconError` to handle every deterministic failure of this package, or catch
a concrete subclass for granular control:

- `VerificationError` and its subclasses are the verdicts of
  :func:`drand_beacon.verify.verify_beacon`. Exactly one is raised per failed
  call; each carries a stable ``code`` usable as a metric label.
- `ScheduleError` subclasses come from the Round-Time Mapper.
- `ClientError` subclasses come from the fetching client.

`TransportError` is kept outside the `BeaconError` tree: it describes the
network, not the beacon, and the client maps it to `NotResponding`.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Union


class BeaconError(Exception):
    """Base class for all drand-beacon errors."""

    code: str = "beacon_error"


# -------------------------
# Verification verdicts
# -------------------------


class VerificationError(BeaconError):
    """Base class for beacon verification failures."""

    code = "verification_failed"
    message = "beacon verification failed"

    def __init__(self, message: Optional[str] = None) -> None:
        super().__init__(message or self.message)


class InvalidRandomness(VerificationError):
    code = "invalid_randomness"
    message = "the randomness for the beacon did not match the signature"


class InvalidSignatureLength(VerificationError):
    code = "invalid_signature_length"
    message = "invalid signature length"


class ChainedBeaconNeedsPreviousSignature(VerificationError):
    code = "chained_beacon_needs_previous_signature"
    message = "chained beacons must have a `previous_signature`"


class InvalidPublicKey(VerificationError):
    code = "invalid_public_key"
    message = "invalid public key"


class SignatureFailedVerification(VerificationError):
    code = "signature_failed_verification"
    message = "signature verification failed"


# -------------------------
# Round-Time Mapper
# -------------------------

Number = Union[int, float]


class ScheduleError(BeaconError):
    """Base class for round/time arithmetic errors."""

    code = "schedule_error"


@dataclass(eq=False)
class RoundBeforeGenesis(ScheduleError):
    """
    Raised when a time does not fall after the chain's genesis.

    Attributes:
        time: The requested instant, in Unix seconds.
        genesis_time: The chain's genesis, in Unix seconds.
    """

    time: Number
    genesis_time: int

    code = "round_before_genesis"

    def __str__(self) -> str:
        return f"RoundBeforeGenesis: time={self.time} <= genesis_time={self.genesis_time}"


@dataclass(eq=False)
class UnexpectedTime(ScheduleError):
    """Raised for instants before the Unix epoch or of an unusable type."""

    value: object

    code = "unexpected_time"

    def __str__(self) -> str:
        return f"UnexpectedTime: {self.value!r}"


# -------------------------
# Client
# -------------------------


class ClientError(BeaconError):
    """Base class for failures surfaced by the fetching client."""

    code = "client_error"


@dataclass(eq=False)
class InvalidRound(ClientError):
    round_number: int

    code = "invalid_round"

    def __str__(self) -> str:
        return f"InvalidRound: round={self.round_number} (rounds start at 1)"


@dataclass(eq=False)
class InvalidBeacon(ClientError):
    """
    Raised when a beacon document cannot be parsed, or when a well-formed and
    verified beacon is not the round the caller asked for (or is too old).
    """

    reason: str

    code = "invalid_beacon"

    def __str__(self) -> str:
        return f"InvalidBeacon: {self.reason}"


@dataclass(eq=False)
class FailedVerification(ClientError):
    """Raised by the client when the engine rejects a fetched beacon."""

    round_number: Optional[int]
    reason_code: str

    code = "failed_verification"

    def __str__(self) -> str:
        return f"FailedVerification: round={self.round_number} reason={self.reason_code}"


@dataclass(eq=False)
class InvalidChainInfo(ClientError):
    """Raised for unusable chain metadata, including configuration errors."""

    reason: str

    code = "invalid_chain_info"

    def __str__(self) -> str:
        return f"InvalidChainInfo: {self.reason}"


@dataclass(eq=False)
class NotResponding(ClientError):
    url: str
    reason: Optional[str] = None

    code = "not_responding"

    def __str__(self) -> str:
        base = f"NotResponding: {self.url}"
        return f"{base} ({self.reason})" if self.reason else base


# -------------------------
# Transport
# -------------------------


class TransportError(Exception):
    """Base class for transport failures."""


@dataclass(eq=False)
class NotFound(TransportError):
    url: str

    def __str__(self) -> str:
        return f"NotFound: {self.url}"


@dataclass(eq=False)
class UnexpectedResponse(TransportError):
    url: str
    status_code: Optional[int] = None
    detail: Optional[str] = None

    def __str__(self) -> str:
        base = f"UnexpectedResponse: {self.url}"
        if self.status_code is not None:
            base += f" status={self.status_code}"
        return f"{base} detail={self.detail}" if self.detail else base


__all__ = [
    "BeaconError",
    "VerificationError",
    "InvalidRandomness",
    "InvalidSignatureLength",
    "ChainedBeaconNeedsPreviousSignature",
    "InvalidPublicKey",
    "SignatureFailedVerification",
    "ScheduleError",
    "RoundBeforeGenesis",
    "UnexpectedTime",
    "ClientError",
    "InvalidRound",
    "InvalidBeacon",
    "FailedVerification",
    "InvalidChainInfo",
    "NotResponding",
    "TransportError",
    "NotFound",
    "UnexpectedResponse",
]
