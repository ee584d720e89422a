"""
Cryptographic beacon verification.

This package can be used without the client: hand it a scheme, the chain's
public key and a parsed beacon.

    from drand_beacon.verify import verify_beacon
    verify_beacon(info.scheme_id, info.public_key, beacon)
"""

from .engine import check_beacon, verify_beacon, verify_with_scheme
from .schemes import Scheme, scheme_for

__all__ = ["check_beacon", "verify_beacon", "verify_with_scheme", "Scheme", "scheme_for"]
