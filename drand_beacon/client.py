"""
drand_beacon.client
===================

Fetch-and-verify client for one drand chain.

Responsibilities
----------------
* Fetch the chain info once (``{base}/info``) and keep it for the client's life.
* Fetch beacons (``{base}/public/latest`` or ``{base}/public/{round}``).
* Verify every beacon with the engine before handing it back; the transport
  is never trusted.
* Apply the caller-level round checks: a requested round must be the round
  served, and a "latest" beacon must not lag the clock by more than the
  configured tolerance.

Example
-------
    client = new_http_client("https://api.drand.sh")
    beacon = client.latest_randomness()
    beacon = client.randomness(1000)

Nothing is retried here; network retries live in the transport and trying
another endpoint is the embedder's decision.
"""

from __future__ import annotations

import logging
from typing import Optional

from .beacon.schedule import check_latest_round, current_round
from .config import ClientConfig
from .constants import DEFAULT_LATEST_TOLERANCE_ROUNDS
from .errors import (
    FailedVerification,
    InvalidBeacon,
    InvalidChainInfo,
    InvalidRound,
    NotFound,
    NotResponding,
    TransportError,
    VerificationError,
)
from .metrics import METRICS, Metrics
from .transport import Transport
from .transport.http import HttpTransport
from .types.core import Beacon, ChainInfo
from .verify import verify_beacon
from .wire import parse_beacon, parse_chain_info

logger = logging.getLogger(__name__)

__all__ = ["DrandClient", "fetch_chain_info", "new_http_client"]


def _fetch(transport: Transport, url: str, kind: str, metrics: Metrics) -> str:
    try:
        body = transport.fetch(url)
    except NotFound as e:
        metrics.record_fetch(kind, "not_found")
        raise NotResponding(url, "not found") from e
    except TransportError as e:
        metrics.record_fetch(kind, "unreachable")
        logger.warning("fetch %s failed: %s", url, e)
        raise NotResponding(url, str(e)) from e
    return body


def fetch_chain_info(transport: Transport, base_url: str, *, metrics: Optional[Metrics] = None) -> ChainInfo:
    """
    Fetch ``{base_url}/info``. The chain info holds the public key used to
    verify beacons and the genesis/period used to map rounds to time.
    """
    metrics = metrics or METRICS
    url = f"{base_url.rstrip('/')}/info"
    body = _fetch(transport, url, "info", metrics)
    try:
        info = parse_chain_info(body)
    except InvalidChainInfo:
        metrics.record_fetch("info", "unparsable")
        logger.warning("chain info from %s is invalid", url)
        raise
    metrics.record_fetch("info", "ok")
    logger.debug("chain info %s: scheme=%s period=%ss genesis=%s", url, info.scheme_id, info.period_seconds, info.genesis_time)
    return info


class DrandClient:
    """
    All the state needed to retrieve and validate beacons of one chain.

    Args:
        transport: anything with ``fetch(url) -> str``.
        base_url: chain endpoint (no trailing ``/info``).
        chain_info: metadata of the chain; never mutated.
        latest_tolerance: rounds a "latest" beacon may lag the local clock.
        metrics: Prometheus instruments (default: module singleton).
    """

    def __init__(
        self,
        transport: Transport,
        base_url: str,
        chain_info: ChainInfo,
        *,
        latest_tolerance: int = DEFAULT_LATEST_TOLERANCE_ROUNDS,
        metrics: Optional[Metrics] = None,
    ) -> None:
        self.transport = transport
        self.base_url = base_url.rstrip("/")
        self.chain_info = chain_info
        self.latest_tolerance = int(latest_tolerance)
        self.metrics = metrics or METRICS

    def close(self) -> None:
        close = getattr(self.transport, "close", None)
        if callable(close):
            close()

    def __enter__(self) -> "DrandClient":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def latest_randomness(self, *, now: Optional[float] = None) -> Beacon:
        """
        Fetch, verify and return the latest beacon.

        The expected round is fixed when the request goes out, so fetch and
        verification time do not count against the beacon.
        """
        expected = current_round(self.chain_info, now)
        beacon = self._fetch_beacon_tag("latest")
        check_latest_round(
            self.chain_info,
            beacon.round_number,
            tolerance=self.latest_tolerance,
            expected_round=expected,
        )
        return beacon

    def randomness(self, round_number: int) -> Beacon:
        """Fetch, verify and return the beacon of a specific round."""
        if round_number <= 0:
            raise InvalidRound(round_number)
        beacon = self._fetch_beacon_tag(str(round_number))
        if beacon.round_number != round_number:
            raise InvalidBeacon(f"requested round {round_number} but received round {beacon.round_number}")
        return beacon

    def _fetch_beacon_tag(self, tag: str) -> Beacon:
        url = f"{self.base_url}/public/{tag}"
        body = _fetch(self.transport, url, "beacon", self.metrics)
        try:
            beacon = parse_beacon(body)
        except InvalidBeacon:
            self.metrics.record_fetch("beacon", "unparsable")
            raise
        self.metrics.record_fetch("beacon", "ok")
        self._verify(beacon)
        return beacon

    def _verify(self, beacon: Beacon) -> None:
        scheme = self.chain_info.scheme_id.value
        try:
            with self.metrics.verify_timer():
                verify_beacon(self.chain_info.scheme_id, self.chain_info.public_key, beacon)
        except VerificationError as e:
            self.metrics.record_verification(scheme, e.code)
            logger.info("beacon round=%d rejected: %s", beacon.round_number, e.code)
            raise FailedVerification(beacon.round_number, e.code) from e
        self.metrics.record_verification(scheme, "ok")


def new_http_client(base_url: Optional[str] = None, config: Optional[ClientConfig] = None) -> DrandClient:
    """
    Create a client with an HTTP transport for a chain endpoint, fetching its
    chain info up front. Known endpoints include https://api.drand.sh and
    https://drand.cloudflare.com (append ``/<chain-hash>`` for other chains).
    """
    cfg = config or ClientConfig()
    if base_url is not None:
        cfg = ClientConfig(**{**cfg.to_dict(), "base_url": base_url})
    cfg.validate()

    transport = HttpTransport(
        timeout=cfg.timeout_s,
        retries=cfg.retries,
        backoff_base=cfg.backoff_base_s,
        user_agent=cfg.user_agent,
    )
    try:
        info = fetch_chain_info(transport, cfg.normalized_base_url)
    except Exception:
        transport.close()
        raise
    return DrandClient(transport, cfg.normalized_base_url, info, latest_tolerance=cfg.latest_tolerance_rounds)
