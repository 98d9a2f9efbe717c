#!/usr/bin/env python3
"""
Offline pool walkthrough: provision, swap, withdraw against an in-memory ledger.

Prints reserves, balances and the emitted events after each step. Exits
non-zero if any step is rejected.
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import List, Optional, Sequence

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from pairswap.core import InMemoryLedger, PoolError, PoolEvent, PoolRegistry  # noqa: E402
from pairswap.integration.config import configure_logging, load_config_from_env  # noqa: E402
from pairswap.integration.snapshot import snapshot_from_engine  # noqa: E402


def _parse_args(argv: Optional[Sequence[str]]) -> argparse.Namespace:
    p = argparse.ArgumentParser(description=__doc__.strip().splitlines()[0])
    p.add_argument("--asset-a", default="TKA")
    p.add_argument("--asset-b", default="TKB")
    p.add_argument("--deposit-a", type=int, default=1000)
    p.add_argument("--deposit-b", type=int, default=1000)
    p.add_argument("--swap-in", type=int, default=100)
    p.add_argument("--log-level", default=None)
    p.add_argument("--json", action="store_true", help="print the final pool snapshot as JSON")
    return p.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = _parse_args(argv)
    configure_logging(args.log_level)

    for flag, value in (("--deposit-a", args.deposit_a), ("--deposit-b", args.deposit_b), ("--swap-in", args.swap_in)):
        if value <= 0:
            print(f"[pool-demo] FAIL (invalid_amount): {flag} must be positive, got {value}")
            return 1

    events: List[PoolEvent] = []
    ledger = InMemoryLedger()
    registry = PoolRegistry(ledger, config=load_config_from_env(), on_event=events.append)

    lp = "alice"
    trader = "bob"
    ledger.mint(lp, args.asset_a, args.deposit_a)
    ledger.mint(lp, args.asset_b, args.deposit_b)
    ledger.mint(trader, args.asset_a, args.swap_in)

    pool = registry.create_pool(args.asset_a, args.asset_b)
    print(f"[pool-demo] pool_id={pool.pool_id}")

    try:
        minted = pool.provision(args.deposit_a, args.deposit_b, lp)
        print(f"[pool-demo] provision: {lp} minted {minted} shares; reserves={pool.reserves}")

        out = pool.swap(args.swap_in, args.asset_a, trader)
        print(f"[pool-demo] swap: {trader} sold {args.swap_in} {args.asset_a} for {out} {args.asset_b}; reserves={pool.reserves}")

        amount_a, amount_b = pool.withdraw(minted, lp)
        print(f"[pool-demo] withdraw: {lp} burned {minted} shares for ({amount_a}, {amount_b}); reserves={pool.reserves}")
    except PoolError as exc:
        print(f"[pool-demo] FAIL ({exc.code}): {exc}")
        return 1

    for event in events:
        print(f"[pool-demo] event {json.dumps(event.to_dict(), sort_keys=True)}")
    print(f"[pool-demo] balances: {lp}=({ledger.balance_of(args.asset_a, lp)}, {ledger.balance_of(args.asset_b, lp)}) "
          f"{trader}=({ledger.balance_of(args.asset_a, trader)}, {ledger.balance_of(args.asset_b, trader)})")

    snap = snapshot_from_engine(pool)
    if args.json:
        print(snap.canonical_bytes().decode("utf-8"))
    print(f"[pool-demo] snapshot commitment={snap.commitment_hex()}")
    print("[pool-demo] OK")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
