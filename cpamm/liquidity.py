"""Liquidity calculator.

Share minting and burning for paired deposits. All functions are pure:
they read a PoolState and return amounts, leaving the commit to the pool.

First mint:    shares = max(amount_a * amount_b // SCALE, minimum_shares)
Later mints:   shares = min(amount_a * total // reserve_a, amount_b * total // reserve_b)
Burn:          amount_x = shares * reserve_x // total

The first-mint formula divides the product by a fixed scale rather than
taking its square root. It is kept exactly as is because changing it would
change how many shares every existing pool handed out.
"""

from cpamm.config import DEFAULT_POOL_CONFIG, PoolConfig
from cpamm.constants import SCALE
from cpamm.ledger import PoolState
from cpamm.safe_int import mul_div


def mint_amount(
    amount_a: int,
    amount_b: int,
    state: PoolState,
    config: PoolConfig = DEFAULT_POOL_CONFIG,
) -> int:
    """Calculate LP shares to mint for a deposit.

    On a non-empty pool the smaller of the two proportional candidates is
    taken, so overstating one side cannot over-mint. Whatever the larger
    side contributed beyond that stays in the pool.

    Args:
        amount_a: Deposit of asset A
        amount_b: Deposit of asset B
        state: Ledger before the deposit
        config: Pool constants (minimum_shares)

    Returns:
        Number of shares to mint

    Raises:
        DivisionByZero: If the pool has shares but a zero reserve
        Uint256Overflow: If the share count exceeds uint256
    """
    if state.is_empty:
        return mul_div(amount_a, amount_b, SCALE).max(config.minimum_shares).value

    shares_a = mul_div(amount_a, state.total_shares, state.reserve_a)
    shares_b = mul_div(amount_b, state.total_shares, state.reserve_b)
    return shares_a.min(shares_b).value


def expected_deposit(amount_a: int, state: PoolState) -> int:
    """Amount of asset B that must accompany `amount_a` at the current ratio.

    Rounded down. A deposit is accepted only if it matches exactly.

    Raises:
        DivisionByZero: If reserve_a is zero (empty pool)
    """
    return mul_div(amount_a, state.reserve_b, state.reserve_a).value


def burn_amounts(shares: int, state: PoolState) -> tuple[int, int]:
    """Calculate (amount_a, amount_b) paid out for burning `shares`.

    Both sides round down, so rounding dust stays with the remaining
    shareholders. Burning the entire supply returns both reserves exactly,
    however large they are.

    Raises:
        DivisionByZero: If the pool has no shares
    """
    amount_a = mul_div(shares, state.reserve_a, state.total_shares)
    amount_b = mul_div(shares, state.reserve_b, state.total_shares)
    return amount_a.value, amount_b.value
