"""
drand beacon client and verifier.

This package fetches randomness beacons from drand networks and proves each
one was produced by the chain's threshold-signing group:
- verify      : scheme dispatch, message reconstruction, BLS pairing check,
- beacon      : round <-> wall-clock arithmetic,
- client      : fetch-and-verify client over a pluggable transport,
- cli         : `drand-beacon` command line.

Only light, stable exports are surfaced here; the client (and httpx) is
imported from ``drand_beacon.client`` explicitly.
"""

from __future__ import annotations

from .beacon.schedule import round_for_time, time_of_round
from .errors import BeaconError, VerificationError
from .types.core import Beacon, ChainInfo, ChainInfoMetadata, SchemeID
from .verify import check_beacon, verify_beacon
from .version import __version__

__all__ = [
    "__version__",
    "Beacon",
    "BeaconError",
    "ChainInfo",
    "ChainInfoMetadata",
    "SchemeID",
    "VerificationError",
    "check_beacon",
    "round_for_time",
    "time_of_round",
    "verify_beacon",
]
