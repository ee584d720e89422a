"""
drand_beacon.beacon.schedule
============================

Round-Time Mapper: converts wall-clock instants to drand round numbers and
back, and implements the recency rule used when asking a node for its
"latest" beacon.

The math is purely arithmetic on epoch seconds; callers decide what "now"
means. Round 1 is the first round that exists *after* genesis: at exactly
``genesis_time`` no round has elapsed yet.

Typical usage
-------------
    from drand_beacon.beacon.schedule import round_for_time, time_of_round

    rnd = round_for_time(info, time.time())
    emitted_at = time_of_round(info, rnd)

Layout for a chain with genesis G and period P::

    (G ........ G+P] -> round 1
    (G+P ..... G+2P] -> round 2   (the instant G+P itself already maps to 2)

"""

from __future__ import annotations

import math
import time as _time
from datetime import datetime, timezone
from typing import Optional, Union

from ..constants import DEFAULT_LATEST_TOLERANCE_ROUNDS
from ..errors import InvalidBeacon, InvalidChainInfo, InvalidRound, RoundBeforeGenesis, UnexpectedTime
from ..types.core import ChainInfo

TimeLike = Union[int, float, datetime]

__all__ = [
    "round_for_time",
    "time_of_round",
    "current_round",
    "min_acceptable_latest_round",
    "check_latest_round",
]


def _epoch_seconds(t: TimeLike) -> int:
    """Normalize *t* to whole Unix seconds (floor). Rejects pre-epoch instants."""
    if isinstance(t, bool):
        raise UnexpectedTime(t)
    if isinstance(t, datetime):
        if t.tzinfo is None:
            t = t.replace(tzinfo=timezone.utc)
        seconds = t.timestamp()
    elif isinstance(t, (int, float)):
        seconds = t
    else:
        raise UnexpectedTime(t)
    if (isinstance(seconds, float) and not math.isfinite(seconds)) or seconds < 0:
        raise UnexpectedTime(t)
    return int(seconds)


def _period(info: ChainInfo) -> int:
    period = int(info.period_seconds)
    if period <= 0:
        raise InvalidChainInfo(f"period_seconds must be > 0 (got {period})")
    return period


def round_for_time(info: ChainInfo, t: TimeLike) -> int:
    """
    Round number current at instant *t*.

    Raises RoundBeforeGenesis when ``t <= genesis_time``; otherwise returns
    ``(t - genesis_time) // period_seconds + 1``.
    """
    period = _period(info)
    seconds = _epoch_seconds(t)
    if seconds <= info.genesis_time:
        raise RoundBeforeGenesis(time=seconds, genesis_time=info.genesis_time)
    # at genesis the round is 1, hence the + 1
    return (seconds - info.genesis_time) // period + 1


def time_of_round(info: ChainInfo, round_number: int) -> int:
    """Nominal emission time of *round_number* (round 1 is emitted at genesis)."""
    if round_number < 1:
        raise InvalidRound(round_number)
    return info.genesis_time + (round_number - 1) * _period(info)


def current_round(info: ChainInfo, now: Optional[TimeLike] = None) -> int:
    """Round current at *now* (defaults to the local wall clock)."""
    return round_for_time(info, _time.time() if now is None else now)


def min_acceptable_latest_round(expected_round: int, tolerance: int = DEFAULT_LATEST_TOLERANCE_ROUNDS) -> int:
    """
    Oldest round a "latest" request may return when *expected_round* is current.

    Clamped at 1 so small expected rounds near genesis never underflow.
    """
    if tolerance < 0:
        raise ValueError("tolerance must be >= 0")
    return max(1, expected_round - tolerance)


def check_latest_round(
    info: ChainInfo,
    round_number: int,
    *,
    now: Optional[TimeLike] = None,
    tolerance: int = DEFAULT_LATEST_TOLERANCE_ROUNDS,
    expected_round: Optional[int] = None,
) -> int:
    """
    Apply the recency rule to a beacon served as "latest".

    Nodes may lag by up to *tolerance* periods while aggregating partial
    signatures, so ``round_number >= expected - tolerance`` is accepted.
    Rounds ahead of the local clock are accepted as well (clock skew).
    Pass *expected_round* when the clock was read before the request went
    out; otherwise it is taken from *now*.
    Returns the expected round; raises InvalidBeacon for stale beacons.
    """
    expected = current_round(info, now) if expected_round is None else expected_round
    floor = min_acceptable_latest_round(expected, tolerance)
    if round_number < floor:
        raise InvalidBeacon(
            f"latest beacon is stale: round={round_number} expected>={floor} (current={expected})"
        )
    return expected
