"""Two-asset constant product pool.

The Pool owns the ledger and serializes every operation on it behind a
single lock: each call reads the current PoolState, validates, computes
the new state with the liquidity calculator or swap engine, and commits
it with one assignment. A rejected call commits nothing.

Failures never raise. Validation problems and arithmetic problems alike
come back as a PoolResult carrying a PoolError.
"""

from __future__ import annotations

import threading
from decimal import Decimal

import structlog

from cpamm.config import DEFAULT_POOL_CONFIG, PoolConfig
from cpamm.errors import EmptyPoolError, InsufficientLiquidityError, PoolMathError
from cpamm.ledger import EMPTY_STATE, PoolState
from cpamm.liquidity import burn_amounts, expected_deposit, mint_amount
from cpamm.result import PoolError, PoolResult
from cpamm.safe_int import DivisionByZero, SafeIntError
from cpamm.swap import Direction, apply_swap, spot_price

logger = structlog.get_logger()


def _check_amount(name: str, amount: int) -> PoolResult | None:
    """Reject non-positive amounts. Returns None if the amount is usable."""
    if isinstance(amount, bool) or not isinstance(amount, int):
        raise TypeError(f"{name} must be an int, got {type(amount).__name__}")
    if amount < 0:
        return PoolResult.with_error(PoolError.NEGATIVE_AMOUNT, f"{name}={amount}")
    if amount == 0:
        return PoolResult.with_error(PoolError.ZERO_AMOUNT, f"{name}=0")
    return None


def _arithmetic_failure(exc: ArithmeticError) -> PoolResult:
    """Map a math exception onto the matching rejected result."""
    if isinstance(exc, (EmptyPoolError, DivisionByZero)):
        error = PoolError.EMPTY_POOL
    elif isinstance(exc, InsufficientLiquidityError):
        error = PoolError.INSUFFICIENT_LIQUIDITY
    else:
        error = PoolError.OVERFLOW
    return PoolResult.with_error(error, str(exc))


class Pool:
    """Constant product pool over assets A and B with LP shares.

    Usage:
        pool = Pool()
        pool.add_liquidity(1_000, 1_000)
        result = pool.swap(Direction.SELL_A, 100)
        assert result.amount_out == 90
        pool.get_pool_state()  # PoolState(reserve_a=1100, reserve_b=910, total_shares=1000)

    Args:
        config: Fee rate and first-mint constants (default: 0.3% fee)
        state: Ledger to start from, e.g. one restored from a snapshot
            (default: empty)

    Raises:
        ValueError: If `state` mixes zero and non-zero counters
    """

    def __init__(
        self,
        config: PoolConfig | None = None,
        state: PoolState | None = None,
    ) -> None:
        state = state if state is not None else EMPTY_STATE
        if not state.is_consistent():
            raise ValueError(f"Inconsistent pool state: {state}")
        self._config = config if config is not None else DEFAULT_POOL_CONFIG
        self._state = state
        self._lock = threading.Lock()

    def __repr__(self) -> str:
        return f"Pool(config={self._config!r}, state={self.get_pool_state()!r})"

    @property
    def config(self) -> PoolConfig:
        return self._config

    # --- Liquidity ---

    def add_liquidity(self, amount_a: int, amount_b: int) -> PoolResult:
        """Deposit both assets and mint LP shares.

        The first deposit sets the price. Every later deposit must match
        the current ratio exactly: amount_b == amount_a * reserve_b // reserve_a.

        Args:
            amount_a: Amount of asset A deposited
            amount_b: Amount of asset B deposited

        Returns:
            PoolResult with `shares` minted, or an error:
            ZERO_AMOUNT / NEGATIVE_AMOUNT, UNBALANCED_DEPOSIT, OVERFLOW
        """
        for name, amount in (("amount_a", amount_a), ("amount_b", amount_b)):
            rejected = _check_amount(name, amount)
            if rejected is not None:
                return self._reject("add_liquidity", rejected)

        with self._lock:
            before = self._state
            result = self._deposit(before, amount_a, amount_b)
            after = self._state

        if result.is_error:
            return self._reject("add_liquidity", result)
        logger.info(
            "liquidity_added",
            amount_a=amount_a,
            amount_b=amount_b,
            shares=result.shares,
            initial=before.is_empty,
            total_shares=after.total_shares,
        )
        return result

    def remove_liquidity(self, shares: int) -> PoolResult:
        """Burn LP shares and pay out both assets pro rata (rounded down).

        Burning the whole supply empties the pool.

        Returns:
            PoolResult with `amounts` = (amount_a, amount_b), or INVALID_SHARES
            if shares is not in [1, total_shares]
        """
        if isinstance(shares, bool) or not isinstance(shares, int):
            raise TypeError(f"shares must be an int, got {type(shares).__name__}")

        with self._lock:
            result = self._withdraw(self._state, shares)
            after = self._state

        if result.is_error:
            return self._reject("remove_liquidity", result)
        logger.info(
            "liquidity_removed",
            shares=shares,
            amounts=result.amounts,
            total_shares=after.total_shares,
            emptied=after.is_empty,
        )
        return result

    # --- Swaps ---

    def swap(self, direction: Direction, amount_in: int) -> PoolResult:
        """Sell `amount_in` of one asset for the other.

        No minimum-output protection is applied here; callers that need
        one should quote first or check `amount_out` themselves.

        Returns:
            PoolResult with `amount_out`, or an error:
            ZERO_AMOUNT / NEGATIVE_AMOUNT, EMPTY_POOL, INSUFFICIENT_LIQUIDITY, OVERFLOW
        """
        direction = self._check_direction(direction)
        rejected = _check_amount("amount_in", amount_in)
        if rejected is None:
            with self._lock:
                try:
                    new_state, amount_out = self._price(self._state, direction, amount_in)
                except (SafeIntError, PoolMathError) as e:
                    rejected = _arithmetic_failure(e)
                else:
                    self._state = new_state

        if rejected is not None:
            return self._reject("swap", rejected, direction=direction.value)
        logger.info(
            "swap_executed",
            direction=direction.value,
            amount_in=amount_in,
            amount_out=amount_out,
            reserve_a=new_state.reserve_a,
            reserve_b=new_state.reserve_b,
        )
        return PoolResult.swapped(amount_out)

    def quote(self, direction: Direction, amount_in: int) -> PoolResult:
        """Price a swap against the current reserves without committing it."""
        direction = self._check_direction(direction)
        rejected = _check_amount("amount_in", amount_in)
        if rejected is not None:
            return rejected

        state = self.get_pool_state()
        try:
            _, amount_out = self._price(state, direction, amount_in)
        except (SafeIntError, PoolMathError) as e:
            return _arithmetic_failure(e)
        return PoolResult.swapped(amount_out)

    def spot_price(self, direction: Direction) -> Decimal | None:
        """Current marginal price for `direction`, or None if the pool is empty."""
        return spot_price(self.get_pool_state(), self._check_direction(direction))

    # --- Query ---

    def get_pool_state(self) -> PoolState:
        """Consistent snapshot of (reserve_a, reserve_b, total_shares)."""
        with self._lock:
            return self._state

    # --- Internals ---

    def _deposit(self, state: PoolState, amount_a: int, amount_b: int) -> PoolResult:
        """Validate and commit a deposit. Caller holds the lock."""
        try:
            if not state.is_empty:
                expected_b = expected_deposit(amount_a, state)
                if amount_b != expected_b:
                    return PoolResult.with_error(
                        PoolError.UNBALANCED_DEPOSIT,
                        f"amount_b={amount_b}, expected {expected_b}",
                    )
            minted = mint_amount(amount_a, amount_b, state, self._config)
            new_state = state.with_deposit(amount_a, amount_b, minted)
        except (SafeIntError, PoolMathError) as e:
            return _arithmetic_failure(e)
        self._state = new_state
        return PoolResult.minted(minted)

    def _withdraw(self, state: PoolState, shares: int) -> PoolResult:
        """Validate and commit a burn. Caller holds the lock."""
        if shares <= 0 or shares > state.total_shares:
            return PoolResult.with_error(
                PoolError.INVALID_SHARES,
                f"shares={shares}, total_shares={state.total_shares}",
            )
        try:
            amount_a, amount_b = burn_amounts(shares, state)
            new_state = state.with_withdrawal(amount_a, amount_b, shares)
        except (SafeIntError, PoolMathError) as e:
            return _arithmetic_failure(e)
        self._state = new_state
        return PoolResult.withdrawn(amount_a, amount_b)

    def _price(
        self, state: PoolState, direction: Direction, amount_in: int
    ) -> tuple[PoolState, int]:
        if state.is_empty:
            raise EmptyPoolError("Pool has no liquidity")
        return apply_swap(state, direction, amount_in, self._config)

    @staticmethod
    def _check_direction(direction: Direction) -> Direction:
        if not isinstance(direction, Direction):
            raise TypeError(f"direction must be a Direction, got {type(direction).__name__}")
        return direction

    @staticmethod
    def _reject(operation: str, result: PoolResult, **context: object) -> PoolResult:
        error = result.error
        log = logger.warning if error is not None and error.is_arithmetic else logger.debug
        log(
            f"{operation}_rejected",
            error=error.value if error is not None else None,
            detail=result.error_detail,
            **context,
        )
        return result
