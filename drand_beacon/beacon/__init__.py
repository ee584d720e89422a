"""Round-Time Mapper for drand chains."""

from .schedule import (
    check_latest_round,
    current_round,
    min_acceptable_latest_round,
    round_for_time,
    time_of_round,
)

__all__ = [
    "check_latest_round",
    "current_round",
    "min_acceptable_latest_round",
    "round_for_time",
    "time_of_round",
]
