# [TESTER] v1

from __future__ import annotations

from dataclasses import replace

import pytest

from pairswap.core import cpmm
from pairswap.core.cpmm import compute_shares_to_mint, compute_swap, compute_withdrawal
from pairswap.core.errors import (
    InsufficientAmounts,
    InsufficientLiquidity,
    InsufficientLiquidityMinted,
    InsufficientOutput,
    InsufficientShares,
    InvalidAmount,
    NoLiquidity,
    PoolInvariantError,
)
from pairswap.kernels.python.cpmm_swap import quote_swap


class TestMint:
    def test_first_and_proportional(self) -> None:
        assert compute_shares_to_mint(100, 400, 0, 0, 0) == 200
        assert compute_shares_to_mint(50, 200, 100, 400, 200) == 100

    @pytest.mark.parametrize("amount_a, amount_b", [(0, 1), (1, 0), (-5, 10), (True, 10), (1.0, 10)])
    def test_non_positive_or_non_int_amounts(self, amount_a, amount_b) -> None:
        with pytest.raises(InvalidAmount):
            compute_shares_to_mint(amount_a, amount_b, 0, 0, 0)

    def test_zero_mint_is_rejected(self) -> None:
        with pytest.raises(InsufficientLiquidityMinted):
            compute_shares_to_mint(1, 1000, 1000, 1000, 10)


class TestSwap:
    def test_reference_case(self) -> None:
        q = compute_swap(100, 1000, 1000)
        assert q.amount_out == 90
        assert q.k_after > q.k_before

    def test_zero_input(self) -> None:
        with pytest.raises(InvalidAmount):
            compute_swap(0, 1000, 1000)

    def test_dust_input_has_no_output(self) -> None:
        with pytest.raises(InsufficientOutput):
            compute_swap(1, 1000, 1000)

    def test_empty_pool(self) -> None:
        with pytest.raises(InsufficientLiquidity):
            compute_swap(10, 0, 0)

    def test_output_must_stay_below_reserve(self, monkeypatch: pytest.MonkeyPatch) -> None:
        def _draining_quote(**kwargs):
            q = quote_swap(**kwargs)
            return replace(q, amount_out=kwargs["reserve_out"], new_reserve_out=0)

        monkeypatch.setattr(cpmm, "quote_swap", _draining_quote)
        with pytest.raises(InsufficientLiquidity, match="reserve_out"):
            compute_swap(100, 1000, 1000)

    def test_product_decrease_is_an_invariant_error(self, monkeypatch: pytest.MonkeyPatch) -> None:
        def _bad_quote(**kwargs):
            q = quote_swap(**kwargs)
            return replace(q, k_after=q.k_before - 1)

        monkeypatch.setattr(cpmm, "quote_swap", _bad_quote)
        with pytest.raises(PoolInvariantError) as excinfo:
            compute_swap(100, 1000, 1000)
        assert excinfo.value.violations == ["k_non_decrease"]


class TestWithdrawal:
    def test_reference_case(self) -> None:
        assert compute_withdrawal(100, 150, 600, 300) == (50, 200)

    def test_full_burn_returns_all_reserves(self) -> None:
        assert compute_withdrawal(300, 150, 600, 300) == (150, 600)

    def test_rejections(self) -> None:
        with pytest.raises(InvalidAmount):
            compute_withdrawal(0, 150, 600, 300)
        with pytest.raises(NoLiquidity):
            compute_withdrawal(1, 0, 0, 0)
        with pytest.raises(InsufficientShares):
            compute_withdrawal(301, 150, 600, 300)
        with pytest.raises(InsufficientAmounts):
            compute_withdrawal(1, 1, 1000, 1000)
