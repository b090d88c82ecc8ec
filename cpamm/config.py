"""Pool configuration."""

import os
from dataclasses import dataclass

from cpamm.constants import FEE_DENOMINATOR, FEE_NUMERATOR, MINIMUM_SHARES


@dataclass(frozen=True)
class PoolConfig:
    """Constants a pool is created with and never changes afterwards.

    Together with the three ledger counters these are exactly the values a
    snapshot persists. The first-mint divisor is the fixed SCALE constant,
    not a per-pool setting.

    Attributes:
        fee_numerator: Fee numerator (default: 3)
        fee_denominator: Fee denominator (default: 1000, so 0.3%)
        minimum_shares: Floor for the first mint (default: 1000)
    """

    fee_numerator: int = FEE_NUMERATOR
    fee_denominator: int = FEE_DENOMINATOR
    minimum_shares: int = MINIMUM_SHARES

    def __post_init__(self) -> None:
        for name in ("fee_numerator", "fee_denominator", "minimum_shares"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise ValueError(f"{name} must be an int, got {type(value).__name__}")
        if self.fee_denominator <= 0:
            raise ValueError(f"fee_denominator must be positive: {self.fee_denominator}")
        if not 0 <= self.fee_numerator < self.fee_denominator:
            raise ValueError(
                f"fee_numerator must be in [0, {self.fee_denominator}): {self.fee_numerator}"
            )
        # A zero first mint would leave reserves with no shares against them
        if self.minimum_shares <= 0:
            raise ValueError(f"minimum_shares must be positive: {self.minimum_shares}")

    @property
    def fee_multiplier(self) -> int:
        """Share of each input that prices the swap (fee_denominator - fee_numerator).

        For the default 3/1000 fee this returns 997.
        """
        return self.fee_denominator - self.fee_numerator

    @classmethod
    def from_env(cls) -> "PoolConfig":
        """Build a config from environment variables with defaults.

        - CPAMM_FEE_NUMERATOR (default: 3)
        - CPAMM_FEE_DENOMINATOR (default: 1000)
        - CPAMM_MINIMUM_SHARES (default: 1000)
        """
        return cls(
            fee_numerator=int(os.environ.get("CPAMM_FEE_NUMERATOR", str(FEE_NUMERATOR))),
            fee_denominator=int(os.environ.get("CPAMM_FEE_DENOMINATOR", str(FEE_DENOMINATOR))),
            minimum_shares=int(os.environ.get("CPAMM_MINIMUM_SHARES", str(MINIMUM_SHARES))),
        )


# Default configuration instance
DEFAULT_POOL_CONFIG = PoolConfig()
