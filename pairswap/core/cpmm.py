"""
Constant Product Market Maker (CPMM) rules for a single pool.

Wraps the integer kernels with the pool's rejection rules:
- Type: Fixed-Point Integer Arithmetic / Deterministic Rounding
- Time Complexity: O(1) per call (isqrt is O(log n) iterations)
- Invariant: after each swap, reserve_in' * reserve_out' >= reserve_in * reserve_out
"""

from typing import Tuple

from ..kernels.python.cpmm_swap import SwapQuote, quote_swap
from ..kernels.python.lp_math import burn_shares, mint_shares
from ..state.balances import Amount
from .errors import (
    InsufficientAmounts,
    InsufficientLiquidity,
    InsufficientLiquidityMinted,
    InsufficientOutput,
    InsufficientShares,
    InvalidAmount,
    NoLiquidity,
    PoolInvariantError,
)


def require_positive_amount(name: str, value: object) -> int:
    """
    Raises:
        InvalidAmount: If value is not an int (bools excluded) or is not positive
    """
    if not isinstance(value, int) or isinstance(value, bool):
        raise InvalidAmount(f"{name} must be an int: {value!r}")
    if value <= 0:
        raise InvalidAmount(f"{name} must be positive: {value}")
    return value


def compute_shares_to_mint(
    amount_a: Amount,
    amount_b: Amount,
    reserve_a: Amount,
    reserve_b: Amount,
    total_shares: Amount,
) -> Amount:
    """
    Shares minted for a deposit.

    First provisioning (total_shares == 0):
        shares = floor(sqrt(amount_a * amount_b))
    Otherwise:
        shares = min(floor(amount_a * total_shares / reserve_a),
                     floor(amount_b * total_shares / reserve_b))

    The excess of the non-limiting asset stays in the pool without a refund.

    Raises:
        InvalidAmount: If either amount is not positive
        InsufficientLiquidityMinted: If the deposit would mint zero shares
    """
    require_positive_amount("amount_a", amount_a)
    require_positive_amount("amount_b", amount_b)
    res = mint_shares(
        amount_a=amount_a,
        amount_b=amount_b,
        reserve_a=reserve_a,
        reserve_b=reserve_b,
        total_shares=total_shares,
    )
    if res.shares_minted <= 0:
        raise InsufficientLiquidityMinted(
            f"deposit ({amount_a}, {amount_b}) mints no shares against "
            f"reserves ({reserve_a}, {reserve_b}) and supply {total_shares}"
        )
    return res.shares_minted


def compute_swap(amount_in: Amount, reserve_in: Amount, reserve_out: Amount) -> SwapQuote:
    """
    Quote an exact-in swap and enforce the output guards.

    Raises:
        InvalidAmount: If amount_in is not positive
        InsufficientLiquidity: If either reserve is empty, or amount_out >= reserve_out
        InsufficientOutput: If the trade is too small to produce any output
        PoolInvariantError: If the quote would lower the constant product
    """
    require_positive_amount("amount_in", amount_in)
    if reserve_in <= 0 or reserve_out <= 0:
        raise InsufficientLiquidity(f"pool has no liquidity: reserves ({reserve_in}, {reserve_out})")

    quote = quote_swap(amount_in=amount_in, reserve_in=reserve_in, reserve_out=reserve_out)

    if quote.amount_out == 0:
        raise InsufficientOutput(f"amount_in {amount_in} yields zero output")
    if quote.amount_out >= reserve_out:
        raise InsufficientLiquidity(
            f"amount_out ({quote.amount_out}) >= reserve_out ({reserve_out})"
        )
    if quote.k_after < quote.k_before:
        raise PoolInvariantError(["k_non_decrease"], f"{quote.k_after} < {quote.k_before}")
    return quote


def compute_withdrawal(
    shares: Amount,
    reserve_a: Amount,
    reserve_b: Amount,
    total_shares: Amount,
) -> Tuple[Amount, Amount]:
    """
    Pro-rata payout for burning `shares`.

        amount_a = floor(shares * reserve_a / total_shares)
        amount_b = floor(shares * reserve_b / total_shares)

    Raises:
        InvalidAmount: If shares is not positive
        NoLiquidity: If the pool has no outstanding shares
        InsufficientShares: If shares exceed the outstanding supply
        InsufficientAmounts: If either payout rounds down to zero
    """
    require_positive_amount("shares", shares)
    if total_shares <= 0:
        raise NoLiquidity("pool has no outstanding shares")
    if shares > total_shares:
        raise InsufficientShares(f"shares ({shares}) exceed total_shares ({total_shares})")

    res = burn_shares(shares=shares, reserve_a=reserve_a, reserve_b=reserve_b, total_shares=total_shares)
    if res.amount_a == 0 or res.amount_b == 0:
        raise InsufficientAmounts(
            f"burning {shares} shares pays ({res.amount_a}, {res.amount_b})"
        )
    return res.amount_a, res.amount_b
