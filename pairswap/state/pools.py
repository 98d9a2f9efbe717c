"""
Pool state record for a two-asset constant-product pool.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Tuple

from .balances import AssetId, Amount
from .canonical import canonical_json_bytes, domain_sep_bytes, sha256_hex


def validate_asset_pair(asset_a: object, asset_b: object) -> Tuple[AssetId, AssetId]:
    """
    Check that both identifiers are non-empty strings and distinct.

    Raises:
        ValueError: If either asset is missing or both are the same
    """
    for name, asset in (("asset_a", asset_a), ("asset_b", asset_b)):
        if asset is None:
            raise ValueError(f"{name} must not be None")
        if not isinstance(asset, str) or not asset.strip():
            raise ValueError(f"{name} must be a non-empty string")
    if asset_a == asset_b:
        raise ValueError(f"Pool assets must be distinct: {asset_a!r}")
    return asset_a, asset_b  # type: ignore[return-value]


def compute_pool_id(asset_a: AssetId, asset_b: AssetId) -> str:
    """
    Deterministic pool identifier for an unordered asset pair.

        pool_id = sha256(domain("pool_id") || canonical_json([min(a, b), max(a, b)]))

    (A, B) and (B, A) therefore name the same pool.
    """
    validate_asset_pair(asset_a, asset_b)
    lo, hi = sorted((asset_a, asset_b))
    return sha256_hex(domain_sep_bytes("pool_id") + canonical_json_bytes([lo, hi]))


@dataclass(frozen=True)
class PoolState:
    """
    Immutable view of a pool's bookkeeping.

    Attributes:
        pool_id: Pool identifier (also the pool's ledger address)
        asset_a: First asset, in creation order
        asset_b: Second asset
        reserve_a: Tracked holdings of asset_a
        reserve_b: Tracked holdings of asset_b
        total_shares: Outstanding liquidity shares
        created_at: Caller-supplied creation marker (height, timestamp or 0)
    """
    pool_id: str
    asset_a: AssetId
    asset_b: AssetId
    reserve_a: Amount = 0
    reserve_b: Amount = 0
    total_shares: Amount = 0
    created_at: int = 0

    def __post_init__(self):
        validate_asset_pair(self.asset_a, self.asset_b)
        for name in ("reserve_a", "reserve_b", "total_shares", "created_at"):
            value = getattr(self, name)
            if not isinstance(value, int) or isinstance(value, bool):
                raise TypeError(f"{name} must be an int")
            if value < 0:
                raise ValueError(f"{name} must be non-negative: {value}")

    @property
    def is_empty(self) -> bool:
        return self.total_shares == 0

    def has_asset(self, asset: AssetId) -> bool:
        return asset == self.asset_a or asset == self.asset_b

    def get_reserve(self, asset: AssetId) -> Amount:
        """
        Raises:
            ValueError: If asset is not in this pool
        """
        if asset == self.asset_a:
            return self.reserve_a
        if asset == self.asset_b:
            return self.reserve_b
        raise ValueError(f"Asset {asset} not in pool {self.pool_id}")

    def other_asset(self, asset: AssetId) -> AssetId:
        if asset == self.asset_a:
            return self.asset_b
        if asset == self.asset_b:
            return self.asset_a
        raise ValueError(f"Asset {asset} not in pool {self.pool_id}")

    def get_constant_product(self) -> int:
        return self.reserve_a * self.reserve_b

    def verify_invariants(self) -> List[str]:
        """
        Return the names of violated invariants (empty when the state is sound).

        - reserves_non_negative
        - total_shares_non_negative
        - emptiness_coupling: reserve_a == 0 <=> reserve_b == 0 <=> total_shares == 0
        """
        violations: List[str] = []
        if self.reserve_a < 0 or self.reserve_b < 0:
            violations.append("reserves_non_negative")
        if self.total_shares < 0:
            violations.append("total_shares_non_negative")
        if not ((self.reserve_a == 0) == (self.reserve_b == 0) == (self.total_shares == 0)):
            violations.append("emptiness_coupling")
        return violations

    def __repr__(self) -> str:
        return (
            f"PoolState(pool_id={self.pool_id[:18]}..., "
            f"assets=({self.asset_a}, {self.asset_b}), "
            f"reserves=({self.reserve_a}, {self.reserve_b}), "
            f"total_shares={self.total_shares})"
        )
