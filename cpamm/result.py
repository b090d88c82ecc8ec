"""Pool operation result types."""

from dataclasses import dataclass
from enum import Enum


class PoolError(Enum):
    """Reasons a pool operation is rejected."""

    # Validation: detected before any computation
    ZERO_AMOUNT = "zero_amount"
    NEGATIVE_AMOUNT = "negative_amount"
    UNBALANCED_DEPOSIT = "unbalanced_deposit"
    INVALID_SHARES = "invalid_shares"

    # Arithmetic: detected while computing the update
    EMPTY_POOL = "empty_pool"
    INSUFFICIENT_LIQUIDITY = "insufficient_liquidity"
    OVERFLOW = "overflow"

    @property
    def is_arithmetic(self) -> bool:
        """True for failures raised by the pricing math rather than input checks."""
        return self in _ARITHMETIC_ERRORS


_ARITHMETIC_ERRORS = frozenset(
    {PoolError.EMPTY_POOL, PoolError.INSUFFICIENT_LIQUIDITY, PoolError.OVERFLOW}
)


@dataclass(frozen=True)
class PoolResult:
    """Result of a pool operation.

    Success and failure are told apart by `error`, never by the payload:
    a swap that legitimately returns zero output is still `ok`.

    Attributes:
        error: If the operation was rejected, why. None on success.
        error_detail: Optional human-readable detail about the error.
        shares: LP shares minted (add_liquidity).
        amounts: (amount_a, amount_b) paid out (remove_liquidity).
        amount_out: Output amount (swap, quote).

    Examples:
        result = pool.swap(Direction.SELL_A, 100)
        if result.ok:
            deliver(result.amount_out)
        else:
            log(result.error)
    """

    error: PoolError | None = None
    error_detail: str | None = None
    shares: int | None = None
    amounts: tuple[int, int] | None = None
    amount_out: int | None = None

    @property
    def ok(self) -> bool:
        """True if the operation succeeded (and was committed, for mutations)."""
        return self.error is None

    @property
    def is_error(self) -> bool:
        """True if the operation was rejected."""
        return self.error is not None

    @classmethod
    def minted(cls, shares: int) -> "PoolResult":
        """Successful add_liquidity."""
        return cls(shares=shares)

    @classmethod
    def withdrawn(cls, amount_a: int, amount_b: int) -> "PoolResult":
        """Successful remove_liquidity."""
        return cls(amounts=(amount_a, amount_b))

    @classmethod
    def swapped(cls, amount_out: int) -> "PoolResult":
        """Successful swap or quote."""
        return cls(amount_out=amount_out)

    @classmethod
    def with_error(cls, error: PoolError, detail: str | None = None) -> "PoolResult":
        """Create a rejected result."""
        return cls(error=error, error_detail=detail)

    def to_dict(self) -> dict[str, object]:
        """JSON-friendly view, omitting unset fields."""
        data: dict[str, object] = {"ok": self.ok}
        if self.error is not None:
            data["error"] = self.error.value
        if self.error_detail is not None:
            data["error_detail"] = self.error_detail
        if self.shares is not None:
            data["shares"] = self.shares
        if self.amounts is not None:
            data["amounts"] = list(self.amounts)
        if self.amount_out is not None:
            data["amount_out"] = self.amount_out
        return data
