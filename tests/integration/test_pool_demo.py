# [TESTER] v1

from __future__ import annotations

import importlib.util
import json
import logging
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[2]


def _load_demo():
    path = ROOT / "tools" / "pool_demo.py"
    spec = importlib.util.spec_from_file_location("pool_demo", path)
    assert spec and spec.loader
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


@pytest.fixture
def demo(monkeypatch):
    monkeypatch.delenv("PAIRSWAP_LOG_LEVEL", raising=False)
    log = logging.getLogger("pairswap")
    level, handlers = log.level, list(log.handlers)
    yield _load_demo()
    log.setLevel(level)
    for h in list(log.handlers):
        if h not in handlers:
            log.removeHandler(h)


def test_default_walkthrough(demo, capsys: pytest.CaptureFixture[str]) -> None:
    assert demo.main([]) == 0
    out = capsys.readouterr().out
    assert "minted 1000 shares" in out
    assert "for 90 TKB" in out
    assert "burned 1000 shares for (1100, 910)" in out
    assert out.count("[pool-demo] event ") == 3
    assert out.rstrip().endswith("[pool-demo] OK")


def test_json_snapshot_of_drained_pool(demo, capsys: pytest.CaptureFixture[str]) -> None:
    assert demo.main(["--json", "--asset-a", "X", "--asset-b", "Y"]) == 0
    lines = capsys.readouterr().out.splitlines()
    snapshot = json.loads(next(line for line in lines if line.startswith("{")))
    assert (snapshot["asset_a"], snapshot["asset_b"]) == ("X", "Y")
    assert snapshot["total_shares"] == 0
    assert snapshot["shares"] == []


def test_rejected_step_exits_non_zero(demo, capsys: pytest.CaptureFixture[str]) -> None:
    assert demo.main(["--swap-in", "1"]) == 1
    assert "FAIL (insufficient_output)" in capsys.readouterr().out


@pytest.mark.parametrize("argv", [["--deposit-a", "-5"], ["--deposit-b", "0"], ["--swap-in", "-1"]])
def test_non_positive_amounts_exit_non_zero(demo, capsys: pytest.CaptureFixture[str], argv) -> None:
    assert demo.main(argv) == 1
    out = capsys.readouterr().out
    assert "FAIL (invalid_amount)" in out
    assert "pool_id=" not in out
