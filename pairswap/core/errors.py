"""Exception types for the pool engine.

Every operation either applies completely or raises one of these with the
pool left exactly as it was.
"""

from __future__ import annotations

from typing import List, Optional


class PoolError(Exception):
    """Base class. `code` is a stable identifier safe to log or return over an API."""

    code = "pool_error"


class InvalidConfiguration(PoolError):
    """Raised at construction for missing or identical asset identifiers."""

    code = "invalid_configuration"


class InvalidAmount(PoolError):
    """Raised when a positive integer amount is required and not given."""

    code = "invalid_amount"


class InvalidAsset(PoolError):
    """Raised when a swap names an asset the pool does not hold."""

    code = "invalid_asset"


class InvalidParty(PoolError):
    """Raised when a provider or trader is not a non-empty string."""

    code = "invalid_party"


class TransferFailed(PoolError):
    """Raised when a ledger move did not succeed."""

    code = "transfer_failed"


class LedgerInconsistency(TransferFailed):
    """Raised when a failed operation could not return an already-moved amount.

    The pool's bookkeeping is unchanged, but `stranded_amount` of
    `stranded_asset` sits with `holder` instead of where it started.
    """

    code = "ledger_inconsistency"

    def __init__(self, message: str, *, stranded_asset: str, stranded_amount: int, holder: str) -> None:
        self.stranded_asset = stranded_asset
        self.stranded_amount = stranded_amount
        self.holder = holder
        super().__init__(message)


class InsufficientLiquidityMinted(PoolError):
    code = "insufficient_liquidity_minted"


class InsufficientOutput(PoolError):
    code = "insufficient_output"


class InsufficientLiquidity(PoolError):
    code = "insufficient_liquidity"


class InsufficientAmounts(PoolError):
    code = "insufficient_amounts"


class InsufficientShares(PoolError):
    code = "insufficient_shares"


class NoLiquidity(PoolError):
    code = "no_liquidity"


class ReentrantCall(PoolError):
    """Raised when a ledger callback re-enters the pool mid-operation."""

    code = "reentrant_call"


class PoolInvariantError(PoolError):
    """Raised when a computed post-state violates one or more invariants."""

    code = "invariant_violation"

    def __init__(self, violations: List[str], detail: Optional[str] = None) -> None:
        self.violations = violations
        msg = f"invariant violations: {', '.join(violations)}"
        if detail:
            msg = f"{msg} ({detail})"
        super().__init__(msg)


class PoolExists(PoolError):
    code = "pool_exists"


class PoolNotFound(PoolError):
    code = "pool_not_found"
