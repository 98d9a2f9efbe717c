"""
Multi-asset balance tracking used by the in-memory ledger.

Implements BalanceTable[Holder, AssetId] -> Amount
"""

from typing import Dict, Tuple


# Type aliases
Holder = str  # Account or pool address
AssetId = str  # Opaque asset identifier
Amount = int  # Non-negative integer (arbitrary precision)


class BalanceTable:
    """
    Balance table mapping (holder, asset) -> amount.

    Zero balances are dropped so two tables with the same holdings compare
    equal through `get_all_balances()`.
    """

    def __init__(self):
        self._balances: Dict[Tuple[Holder, AssetId], Amount] = {}

    def get(self, holder: Holder, asset: AssetId) -> Amount:
        """Get balance for (holder, asset). Returns 0 if not found."""
        return self._balances.get((holder, asset), 0)

    def set(self, holder: Holder, asset: AssetId, amount: Amount) -> None:
        """
        Set balance for (holder, asset).

        Raises:
            ValueError: If amount is negative
        """
        if amount < 0:
            raise ValueError(f"Balance cannot be negative: {amount}")
        if amount == 0:
            self._balances.pop((holder, asset), None)
        else:
            self._balances[(holder, asset)] = amount

    def add(self, holder: Holder, asset: AssetId, delta: int) -> None:
        """
        Add delta to balance (delta may be negative).

        Raises:
            ValueError: If resulting balance would be negative
        """
        current = self.get(holder, asset)
        new_balance = current + delta
        if new_balance < 0:
            raise ValueError(
                f"Insufficient balance: {current} + {delta} = {new_balance} < 0"
            )
        self.set(holder, asset, new_balance)

    def subtract(self, holder: Holder, asset: AssetId, delta: Amount) -> None:
        """Subtract a non-negative amount from a balance."""
        if delta < 0:
            raise ValueError(f"Delta must be non-negative: {delta}")
        self.add(holder, asset, -delta)

    def get_all_balances(self) -> Dict[Tuple[Holder, AssetId], Amount]:
        return dict(self._balances)

    def get_balances_for_asset(self, asset: AssetId) -> Dict[Holder, Amount]:
        """All non-zero holders of `asset`."""
        return {h: amount for (h, a), amount in self._balances.items() if a == asset}

    def total_supply(self, asset: AssetId) -> Amount:
        return sum(self.get_balances_for_asset(asset).values())

    def __repr__(self) -> str:
        return f"BalanceTable({len(self._balances)} entries)"
