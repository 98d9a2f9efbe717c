"""
Core pool engine
"""

from .cpmm import compute_shares_to_mint, compute_swap, compute_withdrawal
from .errors import (
    InsufficientAmounts,
    InsufficientLiquidity,
    InsufficientLiquidityMinted,
    InsufficientOutput,
    InsufficientShares,
    InvalidAmount,
    InvalidAsset,
    InvalidConfiguration,
    InvalidParty,
    LedgerInconsistency,
    NoLiquidity,
    PoolError,
    PoolExists,
    PoolInvariantError,
    PoolNotFound,
    ReentrantCall,
    TransferFailed,
)
from .events import EventKind, EventLog, PoolEvent
from .ledger import InMemoryLedger, Ledger
from .pool import PoolEngine, PoolEngineConfig
from .registry import PoolRegistry

__all__ = [
    "compute_shares_to_mint",
    "compute_swap",
    "compute_withdrawal",
    "PoolError",
    "InvalidConfiguration",
    "InvalidAmount",
    "InvalidAsset",
    "InvalidParty",
    "TransferFailed",
    "LedgerInconsistency",
    "InsufficientLiquidityMinted",
    "InsufficientOutput",
    "InsufficientLiquidity",
    "InsufficientAmounts",
    "InsufficientShares",
    "NoLiquidity",
    "ReentrantCall",
    "PoolInvariantError",
    "PoolExists",
    "PoolNotFound",
    "EventKind",
    "EventLog",
    "PoolEvent",
    "Ledger",
    "InMemoryLedger",
    "PoolEngine",
    "PoolEngineConfig",
    "PoolRegistry",
]
