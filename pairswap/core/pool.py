"""
Pool engine: one two-asset constant-product pool.

Each operation (provision, swap, withdraw) is one atomic state transition:
- validate and compute the next `PoolState` from the current one,
- move assets through the ledger, undoing completed moves on failure,
- commit shares and reserves together, then emit an event.

The pool's own bookkeeping is only touched at commit time, after every ledger
call has succeeded, so a failed operation leaves it exactly as it was.
"""

from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from dataclasses import dataclass, replace
from typing import Any, Dict, Iterator, List, Optional, Tuple

from ..kernels.python.cpmm_swap import SwapQuote, get_amount_in
from ..state.balances import Amount, AssetId, Holder
from ..state.lp import ShareTable
from ..state.pools import PoolState, compute_pool_id, validate_asset_pair
from .cpmm import compute_shares_to_mint, compute_swap, compute_withdrawal, require_positive_amount
from .errors import (
    InsufficientLiquidity,
    InsufficientShares,
    InvalidAsset,
    InvalidConfiguration,
    InvalidParty,
    LedgerInconsistency,
    NoLiquidity,
    PoolInvariantError,
    ReentrantCall,
    TransferFailed,
)
from .events import EventKind, EventListener, EventLog, PoolEvent
from .ledger import Ledger

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PoolEngineConfig:
    """Runtime config for a pool engine. The trading fee is fixed and not part of it."""

    # Check emptiness coupling and share conservation on every computed post-state.
    verify_invariants: bool = True
    # In-engine event history size; 0 disables it (listeners still fire).
    event_log_capacity: int = 1024

    def __post_init__(self) -> None:
        if not isinstance(self.event_log_capacity, int) or self.event_log_capacity < 0:
            raise ValueError(f"event_log_capacity must be a non-negative int: {self.event_log_capacity!r}")


def _require_party(name: str, value: object) -> Holder:
    if not isinstance(value, str) or not value.strip():
        raise InvalidParty(f"{name} must be a non-empty string: {value!r}")
    return value


class _MoveJournal:
    """
    Ledger moves made by one operation, undone in reverse order on failure.
    """

    def __init__(self, ledger: Ledger, pool_address: Holder, op: str) -> None:
        self._ledger = ledger
        self._pool = pool_address
        self._op = op
        self._done: List[Tuple[str, AssetId, Holder, Amount]] = []

    def pull(self, asset: AssetId, holder: Holder, amount: Amount) -> None:
        """holder -> pool"""
        if not self._ledger.transfer_from(asset, holder, self._pool, amount):
            logger.warning("%s: transfer_from %s of %d %s failed", self._op, holder, amount, asset)
            raise TransferFailed(f"{self._op}: could not move {amount} {asset} from {holder}")
        self._done.append(("pull", asset, holder, amount))

    def pay(self, asset: AssetId, holder: Holder, amount: Amount) -> None:
        """pool -> holder"""
        if not self._ledger.transfer(asset, self._pool, holder, amount):
            logger.warning("%s: transfer of %d %s to %s failed", self._op, amount, asset, holder)
            raise TransferFailed(f"{self._op}: could not pay {amount} {asset} to {holder}")
        self._done.append(("pay", asset, holder, amount))

    def undo(self) -> None:
        while self._done:
            kind, asset, holder, amount = self._done.pop()
            if kind == "pull":
                ok = self._ledger.transfer(asset, self._pool, holder, amount)
                stranded_with = self._pool
            else:
                ok = self._ledger.transfer_from(asset, holder, self._pool, amount)
                stranded_with = holder
            if not ok:
                logger.error(
                    "%s: could not undo %s of %d %s for %s; amount left with %s",
                    self._op, kind, amount, asset, holder, stranded_with,
                )
                raise LedgerInconsistency(
                    f"{self._op}: rollback of {kind} {amount} {asset} ({holder}) failed",
                    stranded_asset=asset,
                    stranded_amount=amount,
                    holder=stranded_with,
                )
            logger.debug("%s: undid %s of %d %s for %s", self._op, kind, amount, asset, holder)


class PoolEngine:
    """
    Two-asset constant-product pool with a 0.3% fee on input.

    The engine owns its reserves and share ledger. One `threading.Lock` per
    engine serialises operations across threads; a call that re-enters the
    engine from inside one of its own ledger calls fails with `ReentrantCall`.

    `on_event` is called after the lock is released, so with several threads
    operating on one pool a listener may receive events out of `seq` order.
    Sort by `PoolEvent.seq` when order matters; `event_log` is always in
    commit order.

    Example:
        ledger = InMemoryLedger()
        pool = PoolEngine("A", "B", ledger)
        ledger.mint("alice", "A", 100)
        ledger.mint("alice", "B", 400)
        pool.provision(100, 400, "alice")  # -> 200
    """

    def __init__(
        self,
        asset_a: AssetId,
        asset_b: AssetId,
        ledger: Ledger,
        *,
        config: Optional[PoolEngineConfig] = None,
        on_event: Optional[EventListener] = None,
        created_at: int = 0,
    ) -> None:
        try:
            validate_asset_pair(asset_a, asset_b)
        except ValueError as exc:
            raise InvalidConfiguration(str(exc)) from exc
        if ledger is None:
            raise InvalidConfiguration("ledger must not be None")

        self.pool_id = compute_pool_id(asset_a, asset_b)
        self.ledger = ledger
        self.config = config or PoolEngineConfig()
        self.event_log = EventLog(self.config.event_log_capacity)
        self._on_event = on_event
        self._state = PoolState(pool_id=self.pool_id, asset_a=asset_a, asset_b=asset_b, created_at=created_at)
        self._shares = ShareTable()
        self._lock = threading.Lock()
        self._owner: Optional[int] = None
        self._seq = 0

    @classmethod
    def restore(
        cls,
        state: PoolState,
        shares: ShareTable,
        ledger: Ledger,
        *,
        config: Optional[PoolEngineConfig] = None,
        on_event: Optional[EventListener] = None,
    ) -> "PoolEngine":
        """Rebuild an engine from saved bookkeeping (see `integration.snapshot`)."""
        engine = cls(state.asset_a, state.asset_b, ledger, config=config, on_event=on_event, created_at=state.created_at)
        if state.pool_id != engine.pool_id:
            raise InvalidConfiguration(f"pool_id mismatch: {state.pool_id} != {engine.pool_id}")
        violations = state.verify_invariants()
        if not shares.verify_conservation(state.total_shares):
            violations.append("share_conservation")
        if violations:
            raise PoolInvariantError(violations, "restored state")
        engine._state = state
        engine._shares = shares.copy()
        return engine

    # ------------------------------------------------------------------
    # Locking
    # ------------------------------------------------------------------

    @contextmanager
    def _exclusive(self, op: str) -> Iterator[None]:
        me = threading.get_ident()
        if self._owner == me:
            logger.warning("%s rejected: re-entered pool %s mid-operation", op, self.pool_id)
            raise ReentrantCall(f"{op} called while pool {self.pool_id} is mid-operation")
        with self._lock:
            self._owner = me
            try:
                yield
            finally:
                self._owner = None

    @contextmanager
    def _read(self) -> Iterator[None]:
        # The owning thread already holds the lock and sees only committed state.
        if self._owner == threading.get_ident():
            yield
            return
        with self._lock:
            yield

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def address(self) -> Holder:
        """The pool's holder identity on the ledger."""
        return self.pool_id

    @property
    def asset_a(self) -> AssetId:
        return self._state.asset_a

    @property
    def asset_b(self) -> AssetId:
        return self._state.asset_b

    @property
    def state(self) -> PoolState:
        with self._read():
            return self._state

    @property
    def reserves(self) -> Tuple[Amount, Amount]:
        with self._read():
            return self._state.reserve_a, self._state.reserve_b

    @property
    def total_shares(self) -> Amount:
        with self._read():
            return self._state.total_shares

    def share_balance(self, provider: Holder) -> Amount:
        with self._read():
            return self._shares.get(provider)

    def shares(self) -> Dict[Holder, Amount]:
        with self._read():
            return self._shares.get_all_balances()

    def view(self) -> Tuple[PoolState, Dict[Holder, Amount]]:
        """State and share balances read together."""
        with self._read():
            return self._state, self._shares.get_all_balances()

    def share_table(self) -> ShareTable:
        """A copy of the share ledger."""
        with self._read():
            return self._shares.copy()

    def verify_invariants(self) -> List[str]:
        with self._read():
            violations = self._state.verify_invariants()
            if not self._shares.verify_conservation(self._state.total_shares):
                violations.append("share_conservation")
            return violations

    def quote_swap(self, amount_in: Amount, input_asset: AssetId) -> SwapQuote:
        """Price a swap against current reserves without executing it."""
        require_positive_amount("amount_in", amount_in)
        with self._read():
            reserve_in, reserve_out = self._directional_reserves(self._state, input_asset)
        return compute_swap(amount_in, reserve_in, reserve_out)

    def quote_amount_in(self, amount_out: Amount, output_asset: AssetId) -> Amount:
        """Input needed to receive at least `amount_out` of `output_asset`."""
        require_positive_amount("amount_out", amount_out)
        with self._read():
            state = self._state
            if output_asset is None or not state.has_asset(output_asset):
                raise InvalidAsset(f"{output_asset!r} is not an asset of pool {self.pool_id}")
            input_asset = state.other_asset(output_asset)
            reserve_in, reserve_out = state.get_reserve(input_asset), state.get_reserve(output_asset)
        if reserve_in <= 0 or reserve_out <= 0:
            raise InsufficientLiquidity(f"pool has no liquidity: reserves ({reserve_in}, {reserve_out})")
        if amount_out >= reserve_out:
            raise InsufficientLiquidity(f"amount_out ({amount_out}) >= reserve_out ({reserve_out})")
        return get_amount_in(amount_out=amount_out, reserve_in=reserve_in, reserve_out=reserve_out)

    def quote_withdraw(self, shares: Amount) -> Tuple[Amount, Amount]:
        """Payout for burning `shares` at current reserves."""
        require_positive_amount("shares", shares)
        with self._read():
            state = self._state
        if state.total_shares == 0:
            raise NoLiquidity(f"pool {self.pool_id} has no outstanding shares")
        return compute_withdrawal(shares, state.reserve_a, state.reserve_b, state.total_shares)

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def provision(self, amount_a: Amount, amount_b: Amount, provider: Holder) -> Amount:
        """
        Deposit both assets and mint liquidity shares to `provider`.

        Shares are computed from the deposited amounts; reserves are then
        re-synced to the pool's actual ledger holdings, so donated balances
        are absorbed. Any excess of the non-limiting asset is not refunded.

        Returns:
            Shares minted

        Raises:
            InvalidAmount, InsufficientLiquidityMinted, TransferFailed,
            PoolInvariantError, ReentrantCall
        """
        require_positive_amount("amount_a", amount_a)
        require_positive_amount("amount_b", amount_b)
        _require_party("provider", provider)

        with self._exclusive("provision"):
            state = self._state
            shares_minted = compute_shares_to_mint(
                amount_a, amount_b, state.reserve_a, state.reserve_b, state.total_shares
            )

            journal = _MoveJournal(self.ledger, self.address, "provision")
            try:
                journal.pull(state.asset_a, provider, amount_a)
                journal.pull(state.asset_b, provider, amount_b)
                balance_a = self.ledger.balance_of(state.asset_a, self.address)
                balance_b = self.ledger.balance_of(state.asset_b, self.address)
                try:
                    next_state = replace(
                        state,
                        reserve_a=balance_a,
                        reserve_b=balance_b,
                        total_shares=state.total_shares + shares_minted,
                    )
                except (TypeError, ValueError) as exc:
                    raise PoolInvariantError(["ledger_balance"], str(exc)) from exc
                self._verify(next_state, self._shares.total() + shares_minted)
            except Exception:
                journal.undo()
                raise

            self._shares.mint(provider, shares_minted)
            self._state = next_state
            event = self._record(
                EventKind.PROVISION,
                provider,
                ((state.asset_a, amount_a), (state.asset_b, amount_b)),
                shares_minted,
            )

        logger.info(
            "provision pool=%s provider=%s amounts=(%d, %d) shares=%d reserves=(%d, %d)",
            self.pool_id, provider, amount_a, amount_b, shares_minted, next_state.reserve_a, next_state.reserve_b,
        )
        self._emit(event)
        return shares_minted

    def swap(self, amount_in: Amount, input_asset: AssetId, trader: Holder) -> Amount:
        """
        Sell exactly `amount_in` of `input_asset` for the other asset.

        Reserves move by delta: input side += amount_in, output side -= amount_out.

        Returns:
            Output amount paid to `trader`

        Raises:
            InvalidAmount, InvalidAsset, InsufficientOutput, InsufficientLiquidity,
            TransferFailed, PoolInvariantError, ReentrantCall
        """
        require_positive_amount("amount_in", amount_in)
        _require_party("trader", trader)

        with self._exclusive("swap"):
            state = self._state
            reserve_in, reserve_out = self._directional_reserves(state, input_asset)
            output_asset = state.other_asset(input_asset)
            quote = compute_swap(amount_in, reserve_in, reserve_out)
            logger.debug(
                "swap quote pool=%s in=%d %s out=%d %s k=%d->%d",
                self.pool_id, amount_in, input_asset, quote.amount_out, output_asset, quote.k_before, quote.k_after,
            )

            if input_asset == state.asset_a:
                next_state = replace(state, reserve_a=quote.new_reserve_in, reserve_b=quote.new_reserve_out)
            else:
                next_state = replace(state, reserve_a=quote.new_reserve_out, reserve_b=quote.new_reserve_in)
            self._verify(next_state, self._shares.total())

            journal = _MoveJournal(self.ledger, self.address, "swap")
            try:
                journal.pull(input_asset, trader, amount_in)
                journal.pay(output_asset, trader, quote.amount_out)
            except Exception:
                journal.undo()
                raise

            self._state = next_state
            event = self._record(
                EventKind.SWAP,
                trader,
                ((input_asset, amount_in), (output_asset, quote.amount_out)),
                quote.amount_out,
            )

        logger.info(
            "swap pool=%s trader=%s in=%d %s out=%d %s reserves=(%d, %d)",
            self.pool_id, trader, amount_in, input_asset, quote.amount_out, output_asset,
            next_state.reserve_a, next_state.reserve_b,
        )
        self._emit(event)
        return quote.amount_out

    def withdraw(self, shares: Amount, provider: Holder) -> Tuple[Amount, Amount]:
        """
        Burn `shares` held by `provider` and pay out the pro-rata reserves.

        Both payouts complete before shares and reserves are decremented; if
        the second payout fails the first is pulled back and nothing changes.

        Returns:
            (amount_a, amount_b) paid to `provider`

        Raises:
            InvalidAmount, NoLiquidity, InsufficientShares, InsufficientAmounts,
            TransferFailed, PoolInvariantError, ReentrantCall
        """
        require_positive_amount("shares", shares)
        _require_party("provider", provider)

        with self._exclusive("withdraw"):
            state = self._state
            if state.total_shares == 0:
                raise NoLiquidity(f"pool {self.pool_id} has no outstanding shares")
            held = self._shares.get(provider)
            if held < shares:
                raise InsufficientShares(f"{provider} holds {held} shares, needs {shares}")

            amount_a, amount_b = compute_withdrawal(shares, state.reserve_a, state.reserve_b, state.total_shares)
            next_state = replace(
                state,
                reserve_a=state.reserve_a - amount_a,
                reserve_b=state.reserve_b - amount_b,
                total_shares=state.total_shares - shares,
            )
            self._verify(next_state, self._shares.total() - shares)

            journal = _MoveJournal(self.ledger, self.address, "withdraw")
            try:
                journal.pay(state.asset_a, provider, amount_a)
                journal.pay(state.asset_b, provider, amount_b)
            except Exception:
                journal.undo()
                raise

            self._shares.burn(provider, shares)
            self._state = next_state
            event = self._record(
                EventKind.WITHDRAW,
                provider,
                ((state.asset_a, amount_a), (state.asset_b, amount_b)),
                shares,
            )

        logger.info(
            "withdraw pool=%s provider=%s shares=%d amounts=(%d, %d) reserves=(%d, %d)",
            self.pool_id, provider, shares, amount_a, amount_b, next_state.reserve_a, next_state.reserve_b,
        )
        self._emit(event)
        return amount_a, amount_b

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _directional_reserves(self, state: PoolState, input_asset: Any) -> Tuple[Amount, Amount]:
        if input_asset is None or not state.has_asset(input_asset):
            raise InvalidAsset(f"{input_asset!r} is not an asset of pool {self.pool_id}")
        return state.get_reserve(input_asset), state.get_reserve(state.other_asset(input_asset))

    def _verify(self, next_state: PoolState, shares_total_after: Amount) -> None:
        if not self.config.verify_invariants:
            return
        violations = next_state.verify_invariants()
        if next_state.total_shares != shares_total_after:
            violations.append("share_conservation")
        if violations:
            logger.error("pool %s: computed post-state violates %s", self.pool_id, violations)
            raise PoolInvariantError(violations)

    def _record(
        self,
        kind: EventKind,
        actor: Holder,
        asset_amounts: Tuple[Tuple[AssetId, Amount], ...],
        derived_amount: Amount,
    ) -> PoolEvent:
        self._seq += 1
        event = PoolEvent(
            kind=kind,
            pool_id=self.pool_id,
            actor=actor,
            asset_amounts=asset_amounts,
            derived_amount=derived_amount,
            seq=self._seq,
        )
        self.event_log.append(event)
        return event

    def _emit(self, event: PoolEvent) -> None:
        if self._on_event is None:
            return
        try:
            self._on_event(event)
        except Exception:
            # The operation is already committed; a listener cannot undo it.
            logger.exception("event listener failed for %s seq=%d on pool %s", event.kind.value, event.seq, self.pool_id)

    def __repr__(self) -> str:
        return f"PoolEngine({self._state!r})"
