"""
Liquidity share tracking for a single pool.

Shares are integer claims on the pool's reserves. They are minted by
provisioning and burned by withdrawal; the table itself never moves shares
between providers.
"""

from __future__ import annotations

from typing import Dict

from .balances import Amount, Holder


class ShareTable:
    """
    Provider -> share balance.

    Notes:
    - Balances are always non-negative.
    - Zero balances are omitted to keep the table sparse.
    - `total()` is maintained alongside the balances so the conservation
      check `sum(balances) == total` is O(n) only when asked for.
    """

    def __init__(self) -> None:
        self._balances: Dict[Holder, Amount] = {}
        self._total: Amount = 0

    def get(self, provider: Holder) -> Amount:
        """Share balance for `provider`. Returns 0 if not found."""
        return self._balances.get(provider, 0)

    def total(self) -> Amount:
        return self._total

    def mint(self, provider: Holder, shares: Amount) -> None:
        if shares < 0:
            raise ValueError(f"Shares to mint must be non-negative: {shares}")
        if shares == 0:
            return
        self._balances[provider] = self.get(provider) + shares
        self._total += shares

    def burn(self, provider: Holder, shares: Amount) -> None:
        if shares < 0:
            raise ValueError(f"Shares to burn must be non-negative: {shares}")
        current = self.get(provider)
        if current < shares:
            raise ValueError(f"Insufficient share balance: {current} < {shares}")
        remaining = current - shares
        if remaining == 0:
            self._balances.pop(provider, None)
        else:
            self._balances[provider] = remaining
        self._total -= shares

    def copy(self) -> "ShareTable":
        out = ShareTable()
        out._balances = dict(self._balances)
        out._total = self._total
        return out

    def get_all_balances(self) -> Dict[Holder, Amount]:
        return dict(self._balances)

    def verify_conservation(self, total_shares: Amount) -> bool:
        """True when the balances sum to `total_shares` and none is negative."""
        if any(amount < 0 for amount in self._balances.values()):
            return False
        return sum(self._balances.values()) == total_shares == self._total

    def __len__(self) -> int:
        return len(self._balances)

    def __repr__(self) -> str:
        return f"ShareTable({len(self._balances)} providers, total={self._total})"
