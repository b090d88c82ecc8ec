"""Pool math error classes.

Raised by the swap engine and liquidity calculator; the pool turns
them into rejected PoolResults so they never escape a public operation.
"""


class PoolMathError(ArithmeticError):
    """Base error for pool pricing math."""

    pass


class EmptyPoolError(PoolMathError):
    """Pricing requires positive reserves."""

    pass


class InsufficientLiquidityError(PoolMathError):
    """Output would drain the output reserve."""

    pass


class SnapshotError(ValueError):
    """Persisted pool snapshot is malformed or inconsistent."""

    pass
