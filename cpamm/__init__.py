"""Two-asset constant product liquidity pool."""

from cpamm.config import DEFAULT_POOL_CONFIG, PoolConfig
from cpamm.ledger import PoolState, PoolStatus
from cpamm.pool import Pool
from cpamm.result import PoolError, PoolResult
from cpamm.swap import Direction

__version__ = "0.1.0"
__all__ = [
    "DEFAULT_POOL_CONFIG",
    "Direction",
    "Pool",
    "PoolConfig",
    "PoolError",
    "PoolResult",
    "PoolState",
    "PoolStatus",
    "__version__",
]
