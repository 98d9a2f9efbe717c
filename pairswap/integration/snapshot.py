"""
Pool snapshot encoding.

Goals:
- Deterministic JSON serialization for hashing / persistence.
- Round-trippable into a `PoolEngine` bound to a caller-supplied ledger.
- Explicit versioning.
"""

from __future__ import annotations

import hashlib
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional

from ..core.events import EventListener
from ..core.ledger import Ledger
from ..core.pool import PoolEngine, PoolEngineConfig
from ..state.canonical import canonical_json_bytes, domain_sep_bytes, sha256_hex
from ..state.lp import ShareTable
from ..state.pools import PoolState


POOL_SNAPSHOT_VERSION = 1


def _require_str(value: Any, *, name: str, max_len: int = 4096) -> str:
    if not isinstance(value, str):
        raise TypeError(f"{name} must be a string")
    if not value:
        raise ValueError(f"{name} must be non-empty")
    if len(value) > max_len:
        raise ValueError(f"{name} too large")
    return value


def _require_int(value: Any, *, name: str) -> int:
    if not isinstance(value, int) or isinstance(value, bool):
        raise TypeError(f"{name} must be an int")
    if value < 0:
        raise ValueError(f"{name} must be non-negative")
    return int(value)


@dataclass(frozen=True)
class PoolSnapshot:
    """
    Versioned snapshot of one pool's bookkeeping.

    The commitment is not stored inside `data` to avoid self-reference.
    """

    version: int
    data: Dict[str, Any]

    def canonical_bytes(self) -> bytes:
        return canonical_json_bytes(self.data)

    def commitment_bytes(self) -> bytes:
        payload = domain_sep_bytes("pool_snapshot", version=self.version) + self.canonical_bytes()
        return hashlib.sha256(payload).digest()

    def commitment_hex(self) -> str:
        return sha256_hex(domain_sep_bytes("pool_snapshot", version=self.version) + self.canonical_bytes())


def snapshot_from_engine(engine: PoolEngine, *, version: int = POOL_SNAPSHOT_VERSION) -> PoolSnapshot:
    if not isinstance(version, int) or isinstance(version, bool) or version != POOL_SNAPSHOT_VERSION:
        raise ValueError(f"unsupported snapshot version: {version!r}")

    state, shares = engine.view()

    share_entries = [{"provider": p, "shares": int(s)} for p, s in shares.items()]
    share_entries.sort(key=lambda e: e["provider"])

    data: Dict[str, Any] = {
        "version": int(version),
        "pool_id": state.pool_id,
        "asset_a": state.asset_a,
        "asset_b": state.asset_b,
        "reserve_a": int(state.reserve_a),
        "reserve_b": int(state.reserve_b),
        "total_shares": int(state.total_shares),
        "created_at": int(state.created_at),
        "shares": share_entries,
    }
    return PoolSnapshot(version=version, data=data)


def engine_from_snapshot(
    snapshot: Mapping[str, Any],
    ledger: Ledger,
    *,
    config: Optional[PoolEngineConfig] = None,
    on_event: Optional[EventListener] = None,
) -> PoolEngine:
    """
    Rebuild an engine from `PoolSnapshot.data` (or its parsed JSON).

    Raises:
        TypeError / ValueError: On malformed fields
        PoolInvariantError: If the snapshot violates emptiness coupling or share conservation
        InvalidConfiguration: If pool_id does not match the asset pair
    """
    if not isinstance(snapshot, Mapping):
        raise TypeError("snapshot must be a mapping")
    version = snapshot.get("version")
    if version != POOL_SNAPSHOT_VERSION:
        raise ValueError(f"unsupported snapshot version: {version!r}")

    state = PoolState(
        pool_id=_require_str(snapshot.get("pool_id"), name="pool_id"),
        asset_a=_require_str(snapshot.get("asset_a"), name="asset_a"),
        asset_b=_require_str(snapshot.get("asset_b"), name="asset_b"),
        reserve_a=_require_int(snapshot.get("reserve_a"), name="reserve_a"),
        reserve_b=_require_int(snapshot.get("reserve_b"), name="reserve_b"),
        total_shares=_require_int(snapshot.get("total_shares"), name="total_shares"),
        created_at=_require_int(snapshot.get("created_at", 0), name="created_at"),
    )

    entries = snapshot.get("shares", [])
    if not isinstance(entries, list):
        raise TypeError("shares must be a list")
    table = ShareTable()
    seen = set()
    for i, entry in enumerate(entries):
        if not isinstance(entry, Mapping):
            raise TypeError(f"shares[{i}] must be an object")
        provider = _require_str(entry.get("provider"), name=f"shares[{i}].provider")
        amount = _require_int(entry.get("shares"), name=f"shares[{i}].shares")
        if provider in seen:
            raise ValueError(f"duplicate provider in shares: {provider}")
        seen.add(provider)
        table.mint(provider, amount)

    return PoolEngine.restore(state, table, ledger, config=config, on_event=on_event)
