"""
drand_beacon.tests
------------------
Test package initializer for drand_beacon.

Notes:
- Beacon vectors under tests/fixtures are real drand mainnet/testnet rounds;
  pairing checks run in pure Python and take seconds each (marked ``slow``).
- Nothing here touches the network: HTTP is served by httpx.MockTransport or
  an in-memory Transport.
"""

from __future__ import annotations

__all__: tuple[str, ...] = ()
