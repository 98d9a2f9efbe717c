"""
Liquidity share math kernel.

Pure integer functions with explicit rounding:
- first provisioning mints floor(sqrt(amount_a * amount_b)),
- later provisioning mints the more dilutive of the two deposit ratios,
- withdrawal pays floor pro-rata amounts.
"""

from __future__ import annotations

from dataclasses import dataclass


def _require_int(name: str, value: int) -> None:
    if not isinstance(value, int) or isinstance(value, bool):
        raise TypeError(f"{name} must be an int")


def isqrt(y: int) -> int:
    """
    Largest z with z * z <= y, by Newton's method seeded at y // 2 + 1.

    The iterate decreases monotonically and stops at the floor root. Share
    amounts depend on this exact truncation, so no float sqrt is used.
    """
    _require_int("y", y)
    if y < 0:
        raise ValueError("isqrt of a negative number")
    if y <= 3:
        return 1 if y != 0 else 0
    z = y
    x = y // 2 + 1
    while x < z:
        z = x
        x = (y // x + x) // 2
    return z


def min_int(a: int, b: int) -> int:
    _require_int("a", a)
    _require_int("b", b)
    return a if a < b else b


@dataclass(frozen=True)
class MintSharesResult:
    shares_minted: int
    shares_from_a: int
    shares_from_b: int
    initial: bool


@dataclass(frozen=True)
class BurnSharesResult:
    amount_a: int
    amount_b: int


def mint_shares(
    *,
    amount_a: int,
    amount_b: int,
    reserve_a: int,
    reserve_b: int,
    total_shares: int,
) -> MintSharesResult:
    """
    Shares minted for a deposit of (amount_a, amount_b).

    The result may be zero; rejecting a zero mint is the caller's job.
    """
    for name, v in (
        ("amount_a", amount_a),
        ("amount_b", amount_b),
        ("reserve_a", reserve_a),
        ("reserve_b", reserve_b),
        ("total_shares", total_shares),
    ):
        _require_int(name, v)

    if amount_a <= 0 or amount_b <= 0:
        raise ValueError("deposit amounts must be positive")
    if reserve_a < 0 or reserve_b < 0 or total_shares < 0:
        raise ValueError("reserves and total_shares must be non-negative")

    if total_shares == 0:
        minted = isqrt(amount_a * amount_b)
        return MintSharesResult(shares_minted=minted, shares_from_a=minted, shares_from_b=minted, initial=True)

    if reserve_a == 0 or reserve_b == 0:
        raise ValueError("outstanding shares against an empty reserve")

    from_a = (amount_a * total_shares) // reserve_a
    from_b = (amount_b * total_shares) // reserve_b
    return MintSharesResult(
        shares_minted=min_int(from_a, from_b),
        shares_from_a=from_a,
        shares_from_b=from_b,
        initial=False,
    )


def burn_shares(
    *,
    shares: int,
    reserve_a: int,
    reserve_b: int,
    total_shares: int,
) -> BurnSharesResult:
    """Floor pro-rata payout for burning `shares` out of `total_shares`."""
    for name, v in (
        ("shares", shares),
        ("reserve_a", reserve_a),
        ("reserve_b", reserve_b),
        ("total_shares", total_shares),
    ):
        _require_int(name, v)

    if shares <= 0:
        raise ValueError("shares must be positive")
    if total_shares <= 0:
        raise ValueError("total_shares must be positive")
    if shares > total_shares:
        raise ValueError("cannot burn more shares than outstanding")
    if reserve_a < 0 or reserve_b < 0:
        raise ValueError("reserves must be non-negative")

    return BurnSharesResult(
        amount_a=(shares * reserve_a) // total_shares,
        amount_b=(shares * reserve_b) // total_shares,
    )
