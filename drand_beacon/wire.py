"""
drand_beacon.wire
-----------------

JSON wire format of drand ``/info`` and ``/public/{round}`` documents.

Only type/field mapping lives here: hex decoding, legacy key aliases, and the
reverse mapping used for printing. Business rules (scheme semantics, round
checks) belong to the engine and the client.

Chain info document::

    {
      "public_key": "868f…",          # hex
      "period": 30,                   # alias: period_seconds
      "genesis_time": 1595431050,
      "hash": "8990…",                # alias: chain_hash
      "groupHash": "176f…",           # alias: group_hash
      "schemeID": "pedersen-bls-chained",   # alias: scheme_id
      "metadata": {"beaconID": "default"}   # alias: beacon_id
    }

Beacon document::

    {"round": 2, "randomness": "e8fe…", "signature": "aa18…", "previous_signature": "8d61…"}

Hex strings may carry a ``0x`` prefix. Unknown keys are ignored.
"""

from __future__ import annotations

import json
from typing import Any, Dict, Mapping, Optional, Sequence, Union

from .errors import InvalidBeacon, InvalidChainInfo
from .types.core import Beacon, ChainInfo, ChainInfoMetadata, SchemeID

Document = Union[Mapping[str, Any], str, bytes, bytearray]

__all__ = [
    "parse_chain_info",
    "parse_beacon",
    "chain_info_to_dict",
    "beacon_to_dict",
]


class _FieldError(ValueError):
    pass


def _load(doc: Document) -> Mapping[str, Any]:
    if isinstance(doc, (bytes, bytearray)):
        doc = doc.decode("utf-8")
    if isinstance(doc, str):
        try:
            doc = json.loads(doc)
        except json.JSONDecodeError as e:
            raise _FieldError(f"invalid json: {e}") from e
    if not isinstance(doc, Mapping):
        raise _FieldError(f"expected a JSON object (got {type(doc).__name__})")
    return doc


def _pick(doc: Mapping[str, Any], keys: Sequence[str], *, required: bool = True) -> Any:
    for k in keys:
        if k in doc:
            return doc[k]
    if required:
        raise _FieldError(f"missing field {keys[0]!r}")
    return None


def _hex_field(doc: Mapping[str, Any], keys: Sequence[str], *, required: bool = True) -> bytes:
    raw = _pick(doc, keys, required=required)
    if raw is None:
        return b""
    if not isinstance(raw, str):
        raise _FieldError(f"field {keys[0]!r} must be a hex string")
    body = raw[2:] if raw.startswith(("0x", "0X")) else raw
    try:
        return bytes.fromhex(body)
    except ValueError as e:
        raise _FieldError(f"field {keys[0]!r} is not valid hex") from e


def _uint_field(doc: Mapping[str, Any], keys: Sequence[str]) -> int:
    raw = _pick(doc, keys)
    if isinstance(raw, bool) or not isinstance(raw, int):
        raise _FieldError(f"field {keys[0]!r} must be an integer")
    if raw < 0:
        raise _FieldError(f"field {keys[0]!r} must be non-negative")
    return raw


def parse_chain_info(doc: Document) -> ChainInfo:
    """Parse a chain info document; any problem raises InvalidChainInfo."""
    try:
        d = _load(doc)
        meta_raw = d.get("metadata") or {}
        if not isinstance(meta_raw, Mapping):
            raise _FieldError("metadata must be an object")
        beacon_id = _pick(meta_raw, ("beaconID", "beacon_id"), required=False)
        if beacon_id is not None and not isinstance(beacon_id, str):
            raise _FieldError("metadata.beaconID must be a string")
        return ChainInfo(
            scheme_id=SchemeID.parse(_pick(d, ("schemeID", "scheme_id"))),
            public_key=_hex_field(d, ("public_key",)),
            chain_hash=_hex_field(d, ("hash", "chain_hash")),
            group_hash=_hex_field(d, ("groupHash", "group_hash")),
            genesis_time=_uint_field(d, ("genesis_time",)),
            period_seconds=_uint_field(d, ("period", "period_seconds")),
            metadata=ChainInfoMetadata(beacon_id=beacon_id or "default"),
        )
    except (_FieldError, UnicodeDecodeError) as e:
        raise InvalidChainInfo(str(e)) from e


def parse_beacon(doc: Document) -> Beacon:
    """Parse a beacon document; any problem raises InvalidBeacon."""
    try:
        d = _load(doc)
        return Beacon(
            round_number=_uint_field(d, ("round", "round_number")),
            randomness=_hex_field(d, ("randomness",)),
            signature=_hex_field(d, ("signature",)),
            previous_signature=_hex_field(d, ("previous_signature",), required=False),
        )
    except (_FieldError, UnicodeDecodeError, ValueError, TypeError) as e:
        raise InvalidBeacon(f"unparsable beacon: {e}") from e


def chain_info_to_dict(info: ChainInfo) -> Dict[str, Any]:
    return {
        "public_key": info.public_key.hex(),
        "period": info.period_seconds,
        "genesis_time": info.genesis_time,
        "hash": info.chain_hash.hex(),
        "groupHash": info.group_hash.hex(),
        "schemeID": info.scheme_id.value,
        "metadata": {"beaconID": info.metadata.beacon_id},
    }


def beacon_to_dict(beacon: Beacon, *, include_empty: bool = False) -> Dict[str, Any]:
    out: Dict[str, Optional[Any]] = {
        "round": beacon.round_number,
        "randomness": beacon.randomness.hex(),
        "signature": beacon.signature.hex(),
    }
    if beacon.previous_signature or include_empty:
        out["previous_signature"] = beacon.previous_signature.hex()
    return out
