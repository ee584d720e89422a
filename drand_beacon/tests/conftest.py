from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List, Mapping

import pytest
from prometheus_client import CollectorRegistry

from drand_beacon.errors import NotFound
from drand_beacon.metrics import Metrics
from drand_beacon.types.core import Beacon, SchemeID
from drand_beacon.wire import parse_beacon, parse_chain_info

FIXTURES = Path(__file__).parent / "fixtures"


def _load_vectors() -> Dict[str, Any]:
    with open(FIXTURES / "vectors.json", "r", encoding="utf-8") as f:
        return json.load(f)


VECTORS = _load_vectors()


def hb(s: str) -> bytes:
    return bytes.fromhex(s[2:] if s.startswith("0x") else s)


def mk_beacon(doc: Mapping[str, Any], **overrides: Any) -> Beacon:
    fields = {
        "round_number": doc["round"],
        "randomness": hb(doc["randomness"]),
        "signature": hb(doc["signature"]),
        "previous_signature": hb(doc.get("previous_signature", "")),
    }
    fields.update(overrides)
    return Beacon(**fields)


def vector(name: str) -> tuple[SchemeID, bytes, Beacon]:
    """(scheme, public key, beacon) for one of the standalone vectors."""
    v = VECTORS[name]
    return SchemeID(v["scheme"]), hb(v["public_key"]), mk_beacon(v["beacon"])


class StaticTransport:
    """In-memory Transport: serves fixed bodies by URL suffix and records requests."""

    def __init__(self, routes: Dict[str, str]) -> None:
        self.routes = routes
        self.requests: List[str] = []
        self.closed = False

    def fetch(self, url: str) -> str:
        self.requests.append(url)
        for suffix, body in self.routes.items():
            if url.endswith(suffix):
                return body
        raise NotFound(url)

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def vectors() -> Dict[str, Any]:
    return VECTORS


@pytest.fixture
def mainnet_info():
    return parse_chain_info(VECTORS["mainnet_chained"]["chain_info"])


@pytest.fixture
def mainnet_beacon() -> Beacon:
    return parse_beacon(VECTORS["mainnet_chained"]["beacon"])


@pytest.fixture
def registry() -> CollectorRegistry:
    return CollectorRegistry()


@pytest.fixture
def metrics(registry: CollectorRegistry) -> Metrics:
    return Metrics(registry=registry)
