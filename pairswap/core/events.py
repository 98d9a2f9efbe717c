"""Event records emitted after each committed pool operation.

Events are an audit side channel. They are produced only after the state
change is committed and never influence it.
"""

from __future__ import annotations

import threading
from collections import deque
from dataclasses import dataclass
from enum import Enum, unique
from typing import Any, Callable, Deque, Dict, List, Optional, Tuple


@unique
class EventKind(Enum):
    PROVISION = "Provision"
    SWAP = "Swap"
    WITHDRAW = "Withdraw"


@dataclass(frozen=True)
class PoolEvent:
    """
    `asset_amounts` lists (asset, amount) pairs moved by the operation:
    both deposits for PROVISION, (input, output) for SWAP, both payouts for
    WITHDRAW. `derived_amount` is the shares minted, the output amount, or
    the shares burned respectively.
    """

    kind: EventKind
    pool_id: str
    actor: str
    asset_amounts: Tuple[Tuple[str, int], ...]
    derived_amount: int
    seq: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind.value,
            "pool_id": self.pool_id,
            "actor": self.actor,
            "asset_amounts": [[asset, int(amount)] for asset, amount in self.asset_amounts],
            "derived_amount": int(self.derived_amount),
            "seq": int(self.seq),
        }


EventListener = Callable[[PoolEvent], None]


class EventLog:
    """Bounded in-memory event history. Capacity 0 keeps nothing.

    Safe to read from any thread while a pool appends to it.
    """

    def __init__(self, capacity: int = 1024) -> None:
        if capacity < 0:
            raise ValueError(f"capacity must be non-negative: {capacity}")
        self.capacity = capacity
        self._events: Deque[PoolEvent] = deque(maxlen=capacity or None)
        self._lock = threading.Lock()

    def append(self, event: PoolEvent) -> None:
        if self.capacity == 0:
            return
        with self._lock:
            self._events.append(event)

    def events(self, kind: Optional[EventKind] = None) -> List[PoolEvent]:
        with self._lock:
            snapshot = list(self._events)
        if kind is None:
            return snapshot
        return [e for e in snapshot if e.kind is kind]

    def __len__(self) -> int:
        with self._lock:
            return len(self._events)
