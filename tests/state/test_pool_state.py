# [TESTER] v1

from __future__ import annotations

from dataclasses import replace

import pytest

from pairswap.state.pools import PoolState, compute_pool_id


def _state(**kwargs) -> PoolState:
    return PoolState(pool_id=compute_pool_id("A", "B"), asset_a="A", asset_b="B", **kwargs)


def test_pool_id_is_order_insensitive_and_hex() -> None:
    pid = compute_pool_id("A", "B")
    assert pid == compute_pool_id("B", "A")
    assert pid.startswith("0x")
    assert len(pid) == 66
    assert pid != compute_pool_id("A", "C")


@pytest.mark.parametrize("asset_a, asset_b", [("A", "A"), (None, "B"), ("A", ""), ("  ", "B"), (1, "B")])
def test_invalid_asset_pairs_are_rejected(asset_a, asset_b) -> None:
    with pytest.raises(ValueError):
        compute_pool_id(asset_a, asset_b)


def test_fields_must_be_non_negative_ints() -> None:
    with pytest.raises(ValueError):
        _state(reserve_a=-1)
    with pytest.raises(TypeError):
        _state(total_shares=True)
    with pytest.raises(TypeError):
        _state(reserve_b=1.0)


def test_empty_and_funded_states_satisfy_invariants() -> None:
    assert _state().verify_invariants() == []
    assert _state().is_empty
    funded = _state(reserve_a=100, reserve_b=400, total_shares=200)
    assert funded.verify_invariants() == []
    assert funded.get_constant_product() == 40_000


@pytest.mark.parametrize(
    "reserve_a, reserve_b, total_shares",
    [(0, 1, 1), (1, 0, 1), (1, 1, 0), (0, 0, 5), (3, 0, 0)],
)
def test_emptiness_coupling_violations(reserve_a: int, reserve_b: int, total_shares: int) -> None:
    s = _state(reserve_a=reserve_a, reserve_b=reserve_b, total_shares=total_shares)
    assert s.verify_invariants() == ["emptiness_coupling"]


def test_asset_lookups() -> None:
    s = _state(reserve_a=1, reserve_b=2, total_shares=1)
    assert s.get_reserve("A") == 1
    assert s.get_reserve("B") == 2
    assert s.other_asset("A") == "B"
    assert s.other_asset("B") == "A"
    assert s.has_asset("A") and not s.has_asset("C")
    with pytest.raises(ValueError):
        s.get_reserve("C")
    with pytest.raises(ValueError):
        s.other_asset("C")


def test_state_is_immutable() -> None:
    s = _state()
    with pytest.raises(Exception):
        s.reserve_a = 5  # type: ignore[misc]
    assert replace(s, reserve_a=5, reserve_b=5, total_shares=5).reserve_a == 5
