"""
State records for pairswap pools
"""

from .balances import BalanceTable
from .lp import ShareTable
from .pools import PoolState, compute_pool_id

__all__ = [
    "BalanceTable",
    "ShareTable",
    "PoolState",
    "compute_pool_id",
]
