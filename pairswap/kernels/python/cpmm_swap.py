"""
Constant-product swap kernel with a fixed 0.3% fee on input.

    amount_in_with_fee = amount_in * 997
    amount_out = floor(amount_in_with_fee * reserve_out / (reserve_in * 1000 + amount_in_with_fee))

The whole input is added to the input reserve, so the retained fee makes
reserve_in' * reserve_out' >= reserve_in * reserve_out.
"""

from __future__ import annotations

from dataclasses import dataclass


FEE_NUMERATOR = 997
FEE_DENOMINATOR = 1000


def _require_int(name: str, value: int) -> None:
    if not isinstance(value, int) or isinstance(value, bool):
        raise TypeError(f"{name} must be an int")


@dataclass(frozen=True)
class SwapQuote:
    amount_in: int
    amount_in_with_fee: int
    amount_out: int
    reserve_in: int
    reserve_out: int
    new_reserve_in: int
    new_reserve_out: int
    k_before: int
    k_after: int


def get_amount_out(*, amount_in: int, reserve_in: int, reserve_out: int) -> int:
    """
    Output for an exact input. Returns 0 for trades too small to move the floor.
    """
    for name, v in (("amount_in", amount_in), ("reserve_in", reserve_in), ("reserve_out", reserve_out)):
        _require_int(name, v)
    if amount_in <= 0:
        raise ValueError("amount_in must be positive")
    if reserve_in <= 0 or reserve_out <= 0:
        raise ValueError("cannot price against an empty reserve")

    amount_in_with_fee = amount_in * FEE_NUMERATOR
    numerator = amount_in_with_fee * reserve_out
    denominator = reserve_in * FEE_DENOMINATOR + amount_in_with_fee
    return numerator // denominator


def get_amount_in(*, amount_out: int, reserve_in: int, reserve_out: int) -> int:
    """
    Input that buys at least `amount_out`. Rounds up, so it can exceed the
    minimal input by one unit when the division is exact.
    """
    for name, v in (("amount_out", amount_out), ("reserve_in", reserve_in), ("reserve_out", reserve_out)):
        _require_int(name, v)
    if amount_out <= 0:
        raise ValueError("amount_out must be positive")
    if reserve_in <= 0 or reserve_out <= 0:
        raise ValueError("cannot price against an empty reserve")
    if amount_out >= reserve_out:
        raise ValueError("cannot drain full reserve_out")

    numerator = reserve_in * amount_out * FEE_DENOMINATOR
    denominator = (reserve_out - amount_out) * FEE_NUMERATOR
    return numerator // denominator + 1


def quote_swap(*, amount_in: int, reserve_in: int, reserve_out: int) -> SwapQuote:
    """
    Exact-in quote plus the post-swap reserves it would produce.

    `new_reserve_out` may be zero or the output zero; the pool decides whether
    such a quote is acceptable.
    """
    amount_out = get_amount_out(amount_in=amount_in, reserve_in=reserve_in, reserve_out=reserve_out)
    new_reserve_in = reserve_in + amount_in
    new_reserve_out = reserve_out - amount_out
    return SwapQuote(
        amount_in=amount_in,
        amount_in_with_fee=amount_in * FEE_NUMERATOR,
        amount_out=amount_out,
        reserve_in=reserve_in,
        reserve_out=reserve_out,
        new_reserve_in=new_reserve_in,
        new_reserve_out=new_reserve_out,
        k_before=reserve_in * reserve_out,
        k_after=new_reserve_in * new_reserve_out,
    )
