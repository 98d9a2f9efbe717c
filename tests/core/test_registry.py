# [TESTER] v1

from __future__ import annotations

import pytest

from pairswap.core import (
    InMemoryLedger,
    InvalidConfiguration,
    PoolEngine,
    PoolEngineConfig,
    PoolExists,
    PoolNotFound,
    PoolRegistry,
)


def test_create_and_look_up_in_either_order() -> None:
    reg = PoolRegistry(InMemoryLedger())
    pool = reg.create_pool("ETH", "USDC", created_at=7)
    assert pool.state.created_at == 7
    assert reg.get_pool("ETH", "USDC") is pool
    assert reg.get_pool("USDC", "ETH") is pool
    assert reg.get(pool.pool_id) is pool
    assert pool.pool_id in reg
    assert len(reg) == 1


def test_duplicate_pair_is_rejected_in_either_order() -> None:
    reg = PoolRegistry(InMemoryLedger())
    reg.create_pool("ETH", "USDC")
    with pytest.raises(PoolExists):
        reg.create_pool("USDC", "ETH")
    assert len(reg) == 1


@pytest.mark.parametrize("a, b", [("X", "X"), ("", "Y"), (None, "Y")])
def test_invalid_pairs(a, b) -> None:
    reg = PoolRegistry(InMemoryLedger())
    with pytest.raises(InvalidConfiguration):
        reg.create_pool(a, b)
    with pytest.raises(InvalidConfiguration):
        reg.get_pool(a, b)


def test_unknown_pool() -> None:
    reg = PoolRegistry(InMemoryLedger())
    with pytest.raises(PoolNotFound):
        reg.get("0xdeadbeef")
    with pytest.raises(PoolNotFound):
        reg.get_pool("ETH", "USDC")


def test_pools_share_ledger_and_config_but_not_state() -> None:
    ledger = InMemoryLedger()
    received = []
    cfg = PoolEngineConfig(event_log_capacity=4)
    reg = PoolRegistry(ledger, config=cfg, on_event=received.append)
    p1 = reg.create_pool("A", "B")
    p2 = reg.create_pool("A", "C")
    ledger.mint("alice", "A", 1_000)
    ledger.mint("alice", "B", 1_000)
    ledger.mint("alice", "C", 1_000)

    p1.provision(100, 400, "alice")
    p2.provision(300, 300, "alice")

    assert p1.ledger is p2.ledger is ledger
    assert p1.config is cfg and p2.config is cfg
    assert p1.address != p2.address
    assert p1.reserves == (100, 400)
    assert p2.reserves == (300, 300)
    assert ledger.balance_of("A", p1.address) == 100
    assert ledger.balance_of("A", p2.address) == 300
    assert [e.pool_id for e in received] == [p1.pool_id, p2.pool_id]


def test_iteration_is_sorted_by_pool_id() -> None:
    reg = PoolRegistry(InMemoryLedger())
    for pair in (("A", "B"), ("B", "C"), ("A", "C")):
        reg.create_pool(*pair)
    ids = reg.pool_ids()
    assert ids == sorted(ids)
    assert [p.pool_id for p in reg] == ids


def test_add_existing_engine() -> None:
    ledger = InMemoryLedger()
    reg = PoolRegistry(ledger)
    engine = PoolEngine("A", "B", ledger)
    reg.add(engine)
    assert reg.get_pool("B", "A") is engine
    with pytest.raises(PoolExists):
        reg.add(PoolEngine("B", "A", ledger))
