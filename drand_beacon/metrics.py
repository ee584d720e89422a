"""
Prometheus metrics for beacon fetching and verification.

Instruments:
  • verifications_total{scheme,outcome}: verdicts of the engine as seen by the client
  • verify_seconds                     : time spent in verify_beacon
  • fetches_total{kind,outcome}        : chain-info / beacon fetch results

Label vocabularies are small and closed; unknown values collapse to a
catch-all so cardinality stays bounded.

Usage
-----
    from drand_beacon.metrics import METRICS

    with METRICS.verify_timer():
        verify_beacon(...)
    METRICS.record_verification("pedersen-bls-chained", "ok")

Tests and embedders that need isolation pass their own ``CollectorRegistry``.
"""

from __future__ import annotations

from contextlib import contextmanager
from time import perf_counter
from typing import Iterable

from prometheus_client import REGISTRY, Counter, Histogram

from .constants import KNOWN_SCHEMES

_VERIFY_OUTCOMES = (
    "ok",
    "invalid_randomness",
    "invalid_signature_length",
    "chained_beacon_needs_previous_signature",
    "invalid_public_key",
    "signature_failed_verification",
)

_FETCH_KINDS = ("info", "beacon")

_FETCH_OUTCOMES = (
    "ok",
    "not_found",
    "unreachable",
    "unparsable",
)

# Pure-Python pairings take on the order of a second.
_VERIFY_BUCKETS = (0.05, 0.1, 0.25, 0.5, 1.0, 2.0, 4.0, 8.0, 16.0)


class Metrics:
    """
    Container for drand-beacon Prometheus instruments.

    Args:
        namespace: metric namespace (prefix).
        subsystem: metric subsystem.
        registry:  registry to register with (default: the global one).
    """

    def __init__(
        self,
        *,
        namespace: str = "drand",
        subsystem: str = "beacon",
        registry=REGISTRY,
        verify_buckets: Iterable[float] = _VERIFY_BUCKETS,
    ) -> None:
        self.verifications_total = Counter(
            "verifications_total",
            "Beacon verification verdicts, labeled by scheme and outcome.",
            labelnames=("scheme", "outcome"),
            namespace=namespace,
            subsystem=subsystem,
            registry=registry,
        )
        self.fetches_total = Counter(
            "fetches_total",
            "Document fetches, labeled by kind and outcome.",
            labelnames=("kind", "outcome"),
            namespace=namespace,
            subsystem=subsystem,
            registry=registry,
        )
        self.verify_seconds = Histogram(
            "verify_seconds",
            "Time spent verifying a beacon (seconds).",
            buckets=tuple(verify_buckets),
            namespace=namespace,
            subsystem=subsystem,
            registry=registry,
        )

    def record_verification(self, scheme: str, outcome: str) -> None:
        if scheme not in KNOWN_SCHEMES:
            scheme = "unknown"
        if outcome not in _VERIFY_OUTCOMES:
            outcome = "signature_failed_verification"
        self.verifications_total.labels(scheme=scheme, outcome=outcome).inc()

    def record_fetch(self, kind: str, outcome: str) -> None:
        if kind not in _FETCH_KINDS:
            kind = "beacon"
        if outcome not in _FETCH_OUTCOMES:
            outcome = "unreachable"
        self.fetches_total.labels(kind=kind, outcome=outcome).inc()

    @contextmanager
    def verify_timer(self):
        start = perf_counter()
        try:
            yield
        finally:
            self.verify_seconds.observe(perf_counter() - start)


METRICS = Metrics()

__all__ = ["Metrics", "METRICS"]
