"""Swap engine.

Constant product pricing with the fee charged on the input:

    amount_in_with_fee = amount_in * (fee_denominator - fee_numerator)
    amount_out = amount_in_with_fee * reserve_out
                 // (reserve_in * fee_denominator + amount_in_with_fee)

The whole input is added to the input reserve, fee included, so the
product reserve_a * reserve_b never decreases across a swap.
"""

from __future__ import annotations

from decimal import Decimal
from enum import Enum

from cpamm.config import DEFAULT_POOL_CONFIG, PoolConfig
from cpamm.errors import EmptyPoolError, InsufficientLiquidityError
from cpamm.ledger import PoolState
from cpamm.safe_int import S, mul_div


class Direction(str, Enum):
    """Which asset the trader sells into the pool."""

    SELL_A = "sell_a"
    SELL_B = "sell_b"

    @classmethod
    def parse(cls, value: str) -> Direction:
        """Accept "a"/"b" shorthand as well as the enum values."""
        normalized = value.strip().lower()
        if normalized in ("a", cls.SELL_A.value):
            return cls.SELL_A
        if normalized in ("b", cls.SELL_B.value):
            return cls.SELL_B
        raise ValueError(f"Unknown swap direction: {value}")


def select_reserves(state: PoolState, direction: Direction) -> tuple[int, int]:
    """Get reserves ordered as (reserve_in, reserve_out)."""
    if direction is Direction.SELL_A:
        return state.reserve_a, state.reserve_b
    return state.reserve_b, state.reserve_a


def get_amount_out(
    amount_in: int,
    reserve_in: int,
    reserve_out: int,
    config: PoolConfig = DEFAULT_POOL_CONFIG,
) -> int:
    """Calculate output amount using constant product formula.

    Args:
        amount_in: Input token amount
        reserve_in: Reserve of input token in pool
        reserve_out: Reserve of output token in pool
        config: Pool constants (fee rate)

    Returns:
        Output token amount, strictly less than reserve_out

    Raises:
        EmptyPoolError: If either reserve is zero
        InsufficientLiquidityError: If the output would drain reserve_out
    """
    if reserve_in == 0 or reserve_out == 0:
        raise EmptyPoolError(f"Cannot price against reserves ({reserve_in}, {reserve_out})")

    amount_in_with_fee = amount_in * config.fee_multiplier
    denominator = reserve_in * config.fee_denominator + amount_in_with_fee
    amount_out = mul_div(amount_in_with_fee, reserve_out, denominator).value
    if amount_out >= reserve_out:
        raise InsufficientLiquidityError(
            f"Output {amount_out} would drain reserve {reserve_out}"
        )
    return amount_out


def get_amount_in(
    amount_out: int,
    reserve_in: int,
    reserve_out: int,
    config: PoolConfig = DEFAULT_POOL_CONFIG,
) -> int:
    """Calculate required input for desired output.

    Formula: amount_in = (res_in * out * den) // ((res_out - out) * (den - num)) + 1

    The +1 rounds in the pool's favour, so selling the returned amount
    yields at least `amount_out`.

    Raises:
        EmptyPoolError: If either reserve is zero
        InsufficientLiquidityError: If amount_out >= reserve_out
        Uint256Overflow: If the required input exceeds uint256
    """
    if reserve_in == 0 or reserve_out == 0:
        raise EmptyPoolError(f"Cannot price against reserves ({reserve_in}, {reserve_out})")
    if amount_out >= reserve_out:
        raise InsufficientLiquidityError(
            f"Cannot buy {amount_out} from reserve {reserve_out}"
        )

    denominator = (reserve_out - amount_out) * config.fee_multiplier
    amount_in = mul_div(reserve_in * amount_out, config.fee_denominator, denominator)
    return (amount_in + 1).value


def apply_swap(
    state: PoolState,
    direction: Direction,
    amount_in: int,
    config: PoolConfig = DEFAULT_POOL_CONFIG,
) -> tuple[PoolState, int]:
    """Price a swap and build the post-swap ledger.

    Returns:
        Tuple of (new_state, amount_out). The caller decides whether to commit.

    Raises:
        Uint256Overflow: If the input reserve would exceed uint256
    """
    reserve_in, reserve_out = select_reserves(state, direction)
    amount_out = get_amount_out(amount_in, reserve_in, reserve_out, config)

    new_in = (S(reserve_in) + S(amount_in)).value
    new_out = (S(reserve_out) - S(amount_out)).value
    if direction is Direction.SELL_A:
        return state.with_reserves(new_in, new_out), amount_out
    return state.with_reserves(new_out, new_in), amount_out


def spot_price(state: PoolState, direction: Direction) -> Decimal | None:
    """Marginal price of the sold asset in units of the bought one, before fees.

    For display only; pricing always goes through get_amount_out.
    Returns None for an empty pool.
    """
    reserve_in, reserve_out = select_reserves(state, direction)
    if reserve_in == 0:
        return None
    return Decimal(reserve_out) / Decimal(reserve_in)
