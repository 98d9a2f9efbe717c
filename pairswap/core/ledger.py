"""
Ledger collaborator.

The pool never keeps its own copy of asset balances beyond its two reserve
counters; it asks a ledger to move assets and to report holdings. Any object
with the three methods of `Ledger` can back a pool.
"""

from __future__ import annotations

import logging
import threading
from typing import Callable, Optional, Protocol

from ..state.balances import Amount, AssetId, BalanceTable, Holder

logger = logging.getLogger(__name__)

# (operation, asset, sender, recipient, amount), called before a move is applied.
TransferHook = Callable[[str, AssetId, Holder, Holder, Amount], None]


class Ledger(Protocol):
    def transfer_from(self, asset: AssetId, sender: Holder, recipient: Holder, amount: Amount) -> bool:
        """Move `amount` of `asset` from `sender` to `recipient` on the pool's behalf."""
        ...

    def transfer(self, asset: AssetId, sender: Holder, recipient: Holder, amount: Amount) -> bool:
        """Move `amount` of `asset` out of `sender`'s own holdings (the pool pays)."""
        ...

    def balance_of(self, asset: AssetId, holder: Holder) -> Amount:
        ...


class InMemoryLedger:
    """
    Ledger backed by a `BalanceTable`.

    Moves are all-or-nothing and report failure by returning False. Allowances
    are not modelled: `transfer_from` only checks the sender's balance.
    """

    def __init__(self, balances: Optional[BalanceTable] = None, *, before_transfer: Optional[TransferHook] = None) -> None:
        self.balances = balances if balances is not None else BalanceTable()
        self.before_transfer = before_transfer
        self._lock = threading.Lock()

    def mint(self, holder: Holder, asset: AssetId, amount: Amount) -> None:
        """Credit `amount` out of thin air (test and demo funding)."""
        if amount < 0:
            raise ValueError(f"mint amount must be non-negative: {amount}")
        with self._lock:
            self.balances.add(holder, asset, amount)

    def balance_of(self, asset: AssetId, holder: Holder) -> Amount:
        with self._lock:
            return self.balances.get(holder, asset)

    def transfer_from(self, asset: AssetId, sender: Holder, recipient: Holder, amount: Amount) -> bool:
        return self._move("transfer_from", asset, sender, recipient, amount)

    def transfer(self, asset: AssetId, sender: Holder, recipient: Holder, amount: Amount) -> bool:
        return self._move("transfer", asset, sender, recipient, amount)

    def _move(self, op: str, asset: AssetId, sender: Holder, recipient: Holder, amount: Amount) -> bool:
        if not isinstance(amount, int) or isinstance(amount, bool) or amount < 0:
            logger.debug("%s rejected: bad amount %r", op, amount)
            return False
        if self.before_transfer is not None:
            # Runs outside the lock so a hook may call back into the ledger or a pool.
            self.before_transfer(op, asset, sender, recipient, amount)
        with self._lock:
            if self.balances.get(sender, asset) < amount:
                logger.debug(
                    "%s rejected: %s holds %d %s, needs %d",
                    op, sender, self.balances.get(sender, asset), asset, amount,
                )
                return False
            self.balances.subtract(sender, asset, amount)
            self.balances.add(recipient, asset, amount)
        logger.debug("%s %d %s: %s -> %s", op, amount, asset, sender, recipient)
        return True

    def __repr__(self) -> str:
        return f"InMemoryLedger({self.balances!r})"
