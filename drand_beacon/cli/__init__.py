"""
drand_beacon.cli
----------------

Command-line access to the client, the verification engine and the
Round-Time Mapper.

Commands:
  - info           : Fetch and print a chain's info document.
  - get            : Fetch, verify and print a beacon (latest if --round is omitted).
  - verify         : Verify saved chain-info and beacon documents offline.
  - round          : Round number at a given time (default: now).
  - time-of-round  : Nominal emission time of a round.

Environment:
  DRAND_BASE_URL and the other DRAND_* variables (see drand_beacon.config)
  provide defaults for the network commands.

Example:
  drand-beacon get --url https://api.drand.sh --round 1000
  drand-beacon verify --chain-info info.json --beacon beacon.json
  drand-beacon round --genesis 1595431050 --period 30
"""

from __future__ import annotations

import json
import logging
import sys
import time
from pathlib import Path
from typing import Any, Dict, Optional, Sequence

import typer

from ..beacon.schedule import round_for_time, time_of_round
from ..config import ClientConfig
from ..errors import BeaconError
from ..types.core import ChainInfo, ChainInfoMetadata, SchemeID
from ..verify import check_beacon
from ..wire import beacon_to_dict, chain_info_to_dict, parse_beacon, parse_chain_info

__all__ = ["app", "main"]

logger = logging.getLogger(__name__)

app = typer.Typer(
    name="drand-beacon",
    help="Fetch and verify drand randomness beacons.",
    no_args_is_help=True,
    add_completion=False,
)


def _emit(obj: Dict[str, Any], pretty: bool = True) -> None:
    typer.echo(json.dumps(obj, indent=2 if pretty else None, sort_keys=True))


def _fail(err: BeaconError) -> None:
    typer.echo(json.dumps({"ok": False, "error": err.code, "detail": str(err)}), err=True)
    raise typer.Exit(code=1)


def _config(url: Optional[str]) -> ClientConfig:
    try:
        cfg = ClientConfig.from_env()
        if url:
            cfg = ClientConfig(**{**cfg.to_dict(), "base_url": url})
            cfg.validate()
    except ValueError as e:
        raise typer.BadParameter(str(e)) from e
    return cfg


def _new_client(cfg: ClientConfig):
    # imported lazily so offline commands do not pull in httpx
    from ..client import new_http_client

    return new_http_client(config=cfg)


@app.callback()
def _root(verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging.")) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@app.command("info")
def cmd_info(
    url: Optional[str] = typer.Option(None, "--url", "-u", help="Chain endpoint (default: DRAND_BASE_URL)."),
    pretty: bool = typer.Option(True, "--pretty/--no-pretty", help="Pretty-print JSON output."),
) -> None:
    """Fetch a chain's info document."""
    try:
        with _new_client(_config(url)) as client:
            _emit(chain_info_to_dict(client.chain_info), pretty)
    except BeaconError as e:
        _fail(e)


@app.command("get")
def cmd_get(
    url: Optional[str] = typer.Option(None, "--url", "-u", help="Chain endpoint (default: DRAND_BASE_URL)."),
    round_number: Optional[int] = typer.Option(None, "--round", "-r", min=1, help="Round to fetch (default: latest)."),
    randomness_only: bool = typer.Option(False, "--randomness-only", help="Print only the randomness (hex)."),
    pretty: bool = typer.Option(True, "--pretty/--no-pretty", help="Pretty-print JSON output."),
) -> None:
    """Fetch a beacon, verify it, and print it."""
    try:
        with _new_client(_config(url)) as client:
            beacon = client.latest_randomness() if round_number is None else client.randomness(round_number)
            logger.debug("beacon round=%d verified against %s", beacon.round_number, client.base_url)
    except BeaconError as e:
        _fail(e)
        return
    if randomness_only:
        typer.echo(beacon.randomness.hex())
        return
    _emit(beacon_to_dict(beacon), pretty)


@app.command("verify")
def cmd_verify(
    chain_info_path: Path = typer.Option(..., "--chain-info", "-c", exists=True, dir_okay=False, help="Chain info JSON."),
    beacon_path: Path = typer.Option(..., "--beacon", "-b", exists=True, dir_okay=False, help="Beacon JSON."),
) -> None:
    """Verify a saved beacon against saved chain info, without network access."""
    try:
        info = parse_chain_info(chain_info_path.read_bytes())
        beacon = parse_beacon(beacon_path.read_bytes())
    except BeaconError as e:
        _fail(e)
        return
    verdict = check_beacon(info.scheme_id, info.public_key, beacon)
    if verdict is not None:
        _emit({"ok": False, "round": beacon.round_number, "error": verdict.code})
        raise typer.Exit(code=1)
    _emit({"ok": True, "round": beacon.round_number, "randomness": beacon.randomness.hex()})


def _schedule_info(
    chain_info_path: Optional[Path], genesis: Optional[int], period: Optional[int]
) -> ChainInfo:
    if chain_info_path is not None:
        return parse_chain_info(chain_info_path.read_bytes())
    if genesis is None or period is None:
        raise typer.BadParameter("pass --chain-info, or both --genesis and --period")
    # Only the schedule is consumed; the key is a placeholder.
    return ChainInfo(
        scheme_id=SchemeID.PEDERSEN_BLS_UNCHAINED,
        public_key=b"\x00",
        chain_hash=b"",
        group_hash=b"",
        genesis_time=genesis,
        period_seconds=period,
        metadata=ChainInfoMetadata(),
    )


@app.command("round")
def cmd_round(
    chain_info_path: Optional[Path] = typer.Option(None, "--chain-info", "-c", exists=True, dir_okay=False),
    genesis: Optional[int] = typer.Option(None, "--genesis", help="Genesis time (Unix seconds)."),
    period: Optional[int] = typer.Option(None, "--period", help="Round period (seconds)."),
    at: Optional[float] = typer.Option(None, "--time", "-t", help="Unix time (default: now)."),
) -> None:
    """Print the round current at a given time."""
    try:
        info = _schedule_info(chain_info_path, genesis, period)
        t = time.time() if at is None else at
        _emit({"round": round_for_time(info, t), "time": int(t)})
    except BeaconError as e:
        _fail(e)


@app.command("time-of-round")
def cmd_time_of_round(
    round_number: int = typer.Argument(..., help="Round number (>= 1)."),
    chain_info_path: Optional[Path] = typer.Option(None, "--chain-info", "-c", exists=True, dir_okay=False),
    genesis: Optional[int] = typer.Option(None, "--genesis", help="Genesis time (Unix seconds)."),
    period: Optional[int] = typer.Option(None, "--period", help="Round period (seconds)."),
) -> None:
    """Print the nominal emission time of a round."""
    try:
        info = _schedule_info(chain_info_path, genesis, period)
        _emit({"round": round_number, "time": time_of_round(info, round_number)})
    except BeaconError as e:
        _fail(e)


def main(argv: Optional[Sequence[str]] = None) -> None:  # pragma: no cover - thin wrapper
    """Entry point for the ``drand-beacon`` console script."""
    try:
        app(args=list(argv) if argv is not None else None, prog_name="drand-beacon")
    except KeyboardInterrupt:
        typer.echo("", err=True)
        sys.exit(130)


if __name__ == "__main__":  # pragma: no cover
    main()
