"""Pytest configuration and fixtures."""

from collections.abc import Iterator

import pytest
import structlog

from cpamm.config import PoolConfig
from cpamm.ledger import PoolState
from cpamm.pool import Pool


@pytest.fixture(autouse=True)
def reset_structlog() -> Iterator[None]:
    """Undo any structlog.configure() a test triggered (the CLI configures logging)."""
    yield
    structlog.reset_defaults()


@pytest.fixture
def config() -> PoolConfig:
    """Default 0.3% fee, 1000-share first-mint floor."""
    return PoolConfig()


@pytest.fixture
def empty_pool(config: PoolConfig) -> Pool:
    """A pool with no liquidity."""
    return Pool(config=config)


@pytest.fixture
def balanced_pool(config: PoolConfig) -> Pool:
    """Reserves (1000, 1000) with 1000 shares, as after add_liquidity(1000, 1000)."""
    return Pool(config=config, state=PoolState(reserve_a=1000, reserve_b=1000, total_shares=1000))


@pytest.fixture
def skewed_pool(config: PoolConfig) -> Pool:
    """Reserves (100, 200): one A is worth two B."""
    return Pool(config=config, state=PoolState(reserve_a=100, reserve_b=200, total_shares=1000))


@pytest.fixture
def deep_pool(config: PoolConfig) -> Pool:
    """A pool with realistic 18-decimal reserves: 10,000 A against 25,000,000 B."""
    pool = Pool(config=config)
    result = pool.add_liquidity(10_000 * 10**18, 25_000_000 * 10**18)
    assert result.ok
    return pool
