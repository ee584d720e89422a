import json

import pytest
from typer.testing import CliRunner

import drand_beacon.cli as cli
from drand_beacon.client import DrandClient
from drand_beacon.wire import parse_chain_info

from .conftest import VECTORS, StaticTransport

GENESIS = 1595431050
INFO_DOC = VECTORS["mainnet_chained"]["chain_info"]
BEACON_DOC = VECTORS["mainnet_chained"]["beacon"]

runner = CliRunner()


@pytest.fixture
def info_file(tmp_path):
    p = tmp_path / "info.json"
    p.write_text(json.dumps(INFO_DOC))
    return p


def write_beacon(tmp_path, doc) -> str:
    p = tmp_path / "beacon.json"
    p.write_text(json.dumps(doc))
    return str(p)


@pytest.fixture
def fake_network(monkeypatch, metrics):
    def _new_client(cfg):
        t = StaticTransport({"/public/2": json.dumps(BEACON_DOC)})
        return DrandClient(t, cfg.normalized_base_url, parse_chain_info(INFO_DOC), metrics=metrics)

    monkeypatch.setattr(cli, "_new_client", _new_client)


def test_round_from_genesis_and_period():
    res = runner.invoke(cli.app, ["round", "--genesis", str(GENESIS), "--period", "30", "--time", str(GENESIS + 30)])
    assert res.exit_code == 0, res.output
    assert json.loads(res.output) == {"round": 2, "time": GENESIS + 30}


def test_round_from_chain_info_file(info_file):
    res = runner.invoke(cli.app, ["round", "-c", str(info_file), "-t", str(GENESIS + 95)])
    assert res.exit_code == 0, res.output
    assert json.loads(res.output)["round"] == 4


def test_round_at_genesis_fails():
    res = runner.invoke(cli.app, ["round", "--genesis", str(GENESIS), "--period", "30", "--time", str(GENESIS)])
    assert res.exit_code == 1
    assert "round_before_genesis" in res.output


def test_round_rejects_non_finite_time():
    res = runner.invoke(cli.app, ["round", "--genesis", str(GENESIS), "--period", "30", "--time", "inf"])
    assert res.exit_code == 1
    assert "unexpected_time" in res.output


def test_round_requires_a_schedule():
    res = runner.invoke(cli.app, ["round", "--genesis", "10"])
    assert res.exit_code != 0


def test_time_of_round(info_file):
    res = runner.invoke(cli.app, ["time-of-round", "3", "-c", str(info_file)])
    assert res.exit_code == 0, res.output
    assert json.loads(res.output) == {"round": 3, "time": GENESIS + 60}


def test_verify_rejects_tampered_beacon(tmp_path, info_file):
    doc = {**BEACON_DOC, "previous_signature": ""}
    res = runner.invoke(cli.app, ["verify", "-c", str(info_file), "-b", write_beacon(tmp_path, doc)])
    assert res.exit_code == 1
    out = json.loads(res.output)
    assert out == {"ok": False, "round": 2, "error": "chained_beacon_needs_previous_signature"}


def test_verify_rejects_unparsable_beacon(tmp_path, info_file):
    res = runner.invoke(cli.app, ["verify", "-c", str(info_file), "-b", write_beacon(tmp_path, {"round": "x"})])
    assert res.exit_code == 1
    assert "invalid_beacon" in res.output


@pytest.mark.slow
def test_verify_accepts_genuine_beacon(tmp_path, info_file):
    res = runner.invoke(cli.app, ["verify", "-c", str(info_file), "-b", write_beacon(tmp_path, BEACON_DOC)])
    assert res.exit_code == 0, res.output
    assert json.loads(res.output) == {"ok": True, "round": 2, "randomness": BEACON_DOC["randomness"]}


@pytest.mark.slow
def test_get_round(fake_network):
    res = runner.invoke(cli.app, ["get", "--url", "https://api.drand.test", "--round", "2", "--no-pretty"])
    assert res.exit_code == 0, res.output
    assert json.loads(res.output) == BEACON_DOC


@pytest.mark.slow
def test_get_randomness_only(fake_network):
    res = runner.invoke(cli.app, ["get", "-u", "https://api.drand.test", "-r", "2", "--randomness-only"])
    assert res.exit_code == 0, res.output
    assert res.output.strip() == BEACON_DOC["randomness"]


def test_get_missing_round_reports_not_responding(fake_network):
    res = runner.invoke(cli.app, ["get", "-u", "https://api.drand.test", "-r", "7"])
    assert res.exit_code == 1
    assert "not_responding" in res.output


def test_info(fake_network):
    res = runner.invoke(cli.app, ["info", "-u", "https://api.drand.test"])
    assert res.exit_code == 0, res.output
    assert json.loads(res.output) == INFO_DOC


def test_bad_url_is_a_usage_error(fake_network):
    res = runner.invoke(cli.app, ["info", "-u", "not a url"])
    assert res.exit_code == 2
