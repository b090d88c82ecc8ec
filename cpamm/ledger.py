"""Reserve ledger: the pool's three persistent counters."""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum

from cpamm.constants import UINT256_MAX
from cpamm.safe_int import S


class PoolStatus(str, Enum):
    """Lifecycle state of a pool."""

    EMPTY = "empty"
    ACTIVE = "active"


@dataclass(frozen=True)
class PoolState:
    """Immutable snapshot of the ledger.

    A pool is either wholly empty (all three counters zero) or wholly
    active (all three positive). Operations build a new PoolState and
    commit it in one assignment, so a reader holding a PoolState never
    sees a half-applied update.
    """

    reserve_a: int = 0
    reserve_b: int = 0
    total_shares: int = 0

    def __post_init__(self) -> None:
        for name in ("reserve_a", "reserve_b", "total_shares"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise TypeError(f"{name} must be an int, got {type(value).__name__}")
            if not 0 <= value <= UINT256_MAX:
                raise ValueError(f"{name} out of uint256 range: {value}")

    @property
    def is_empty(self) -> bool:
        return self.total_shares == 0

    @property
    def status(self) -> PoolStatus:
        return PoolStatus.EMPTY if self.is_empty else PoolStatus.ACTIVE

    @property
    def product(self) -> int:
        """Constant-product invariant k = reserve_a * reserve_b."""
        return self.reserve_a * self.reserve_b

    def is_consistent(self) -> bool:
        """True if the counters are all zero or all positive."""
        zeros = (self.reserve_a == 0, self.reserve_b == 0, self.total_shares == 0)
        return all(zeros) or not any(zeros)

    def with_deposit(self, amount_a: int, amount_b: int, minted: int) -> PoolState:
        """Ledger after adding both deposits and minting `minted` shares.

        Raises:
            Uint256Overflow: If a counter would exceed uint256
        """
        return replace(
            self,
            reserve_a=(S(self.reserve_a) + amount_a).value,
            reserve_b=(S(self.reserve_b) + amount_b).value,
            total_shares=(S(self.total_shares) + minted).value,
        )

    def with_withdrawal(self, amount_a: int, amount_b: int, burned: int) -> PoolState:
        """Ledger after paying out both amounts and burning `burned` shares.

        Raises:
            Underflow: If a payout or burn exceeds what the pool holds
        """
        return replace(
            self,
            reserve_a=(S(self.reserve_a) - amount_a).value,
            reserve_b=(S(self.reserve_b) - amount_b).value,
            total_shares=(S(self.total_shares) - burned).value,
        )

    def with_reserves(self, reserve_a: int, reserve_b: int) -> PoolState:
        """Ledger with new reserves and the same share supply.

        Swaps never mint or burn, so only the reserves move.

        Raises:
            Uint256Overflow: If a reserve exceeds uint256
        """
        return replace(
            self,
            reserve_a=S(reserve_a).value,
            reserve_b=S(reserve_b).value,
        )

    def as_tuple(self) -> tuple[int, int, int]:
        """(reserve_a, reserve_b, total_shares)."""
        return self.reserve_a, self.reserve_b, self.total_shares


EMPTY_STATE = PoolState()
