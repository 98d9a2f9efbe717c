# [TESTER] v1

from __future__ import annotations

import threading
from concurrent.futures import ThreadPoolExecutor

from pairswap.core import EventKind, InMemoryLedger, InsufficientOutput, PoolEngine


TRADERS = 8
SWAPS_PER_TRADER = 50


def test_parallel_swaps_keep_reserves_equal_to_holdings() -> None:
    ledger = InMemoryLedger()
    ledger.mint("lp", "A", 1_000_000)
    ledger.mint("lp", "B", 1_000_000)
    pool = PoolEngine("A", "B", ledger)
    pool.provision(1_000_000, 1_000_000, "lp")

    traders = [f"trader-{i}" for i in range(TRADERS)]
    for t in traders:
        ledger.mint(t, "A", 100_000)
        ledger.mint(t, "B", 100_000)

    start = threading.Barrier(TRADERS)

    def run(idx: int) -> int:
        trader = traders[idx]
        start.wait()
        done = 0
        for j in range(SWAPS_PER_TRADER):
            asset = "A" if (idx + j) % 2 == 0 else "B"
            try:
                pool.swap(1_000 + idx, asset, trader)
            except InsufficientOutput:
                continue
            done += 1
        return done

    with ThreadPoolExecutor(max_workers=TRADERS) as ex:
        completed = sum(ex.map(run, range(TRADERS)))

    assert completed == TRADERS * SWAPS_PER_TRADER
    assert pool.reserves == (ledger.balance_of("A", pool.address), ledger.balance_of("B", pool.address))
    assert len(pool.event_log) == 1 + completed
    assert [e.seq for e in pool.event_log.events()] == list(range(1, completed + 2))
    assert pool.verify_invariants() == []

    total_a = sum(ledger.balance_of("A", h) for h in traders + ["lp", pool.address])
    total_b = sum(ledger.balance_of("B", h) for h in traders + ["lp", pool.address])
    assert (total_a, total_b) == (1_000_000 + TRADERS * 100_000, 1_000_000 + TRADERS * 100_000)


def test_parallel_provisions_on_one_pool() -> None:
    ledger = InMemoryLedger()
    pool = PoolEngine("A", "B", ledger)
    providers = [f"lp-{i}" for i in range(6)]
    for p in providers:
        ledger.mint(p, "A", 4_000)
        ledger.mint(p, "B", 4_000)

    def run(provider: str) -> int:
        return sum(pool.provision(400, 400, provider) for _ in range(10))

    with ThreadPoolExecutor(max_workers=len(providers)) as ex:
        minted = dict(zip(providers, ex.map(run, providers)))

    assert pool.reserves == (24_000, 24_000)
    assert pool.total_shares == sum(minted.values()) == 24_000
    assert pool.shares() == minted


def test_event_log_can_be_read_while_another_thread_trades() -> None:
    ledger = InMemoryLedger()
    ledger.mint("lp", "A", 1_000_000)
    ledger.mint("lp", "B", 1_000_000)
    ledger.mint("bob", "A", 10_000_000)
    ledger.mint("bob", "B", 10_000_000)
    pool = PoolEngine("A", "B", ledger)
    pool.provision(1_000_000, 1_000_000, "lp")

    stop = threading.Event()
    errors = []

    def trade() -> None:
        try:
            for j in range(5_000):
                pool.swap(500, "A" if j % 2 == 0 else "B", "bob")
        except Exception as exc:  # pragma: no cover - surfaced by the assert below
            errors.append(exc)
        finally:
            stop.set()

    writer = threading.Thread(target=trade)
    writer.start()
    try:
        while not stop.is_set():
            swaps = pool.event_log.events(EventKind.SWAP)
            assert all(e.kind is EventKind.SWAP for e in swaps)
            seqs = [e.seq for e in pool.event_log.events()]
            assert seqs == sorted(seqs)
            assert len(pool.event_log) <= pool.event_log.capacity
    except Exception as exc:
        errors.append(exc)
    finally:
        writer.join()

    assert errors == []
    assert len(pool.event_log) == pool.event_log.capacity
    assert pool.event_log.events()[-1].seq == 5_001
