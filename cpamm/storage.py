"""Pool snapshot persistence.

A snapshot holds exactly what a pool needs to resume: the three ledger
counters and the fee and minimum-share constants. Amounts are written as
decimal strings so values beyond 2^53 survive any JSON reader.

Example document:
    {
      "version": 1,
      "reserveA": "1100",
      "reserveB": "910",
      "totalShares": "1000",
      "feeNumerator": "3",
      "feeDenominator": "1000",
      "minimumShares": "1000"
    }
"""

from __future__ import annotations

import os
import tempfile
from pathlib import Path
from typing import Annotated, Any, Literal

import structlog
from pydantic import (
    BaseModel,
    BeforeValidator,
    Field,
    PlainSerializer,
    ValidationError,
    model_validator,
)

from cpamm.config import PoolConfig
from cpamm.constants import UINT256_MAX
from cpamm.errors import SnapshotError
from cpamm.ledger import PoolState
from cpamm.pool import Pool

logger = structlog.get_logger()

SNAPSHOT_VERSION = 1


def validate_uint256(value: Any) -> int:
    """Validate that a value is a uint256, given as int or decimal string.

    Raises:
        ValueError: If value is not a non-negative integer within uint256 range
    """
    if isinstance(value, bool):
        raise ValueError("Uint256 cannot be a boolean")
    if isinstance(value, str):
        try:
            value = int(value)
        except ValueError as err:
            raise ValueError(f"Uint256 must be a decimal integer string: '{value}'") from err
    if not isinstance(value, int):
        raise ValueError(f"Uint256 must be string or int, got {type(value).__name__}")
    if value < 0:
        raise ValueError(f"Uint256 cannot be negative: {value}")
    if value > UINT256_MAX:
        raise ValueError(f"Uint256 overflow: {value} > 2^256-1")
    return value


# 256-bit unsigned integer, parsed from and written as a decimal string
Uint256 = Annotated[
    int,
    BeforeValidator(validate_uint256),
    PlainSerializer(str, return_type=str),
]


class PoolSnapshot(BaseModel):
    """Persisted form of a pool."""

    version: Literal[1] = SNAPSHOT_VERSION
    reserve_a: Uint256 = Field(alias="reserveA")
    reserve_b: Uint256 = Field(alias="reserveB")
    total_shares: Uint256 = Field(alias="totalShares")
    fee_numerator: Uint256 = Field(alias="feeNumerator")
    fee_denominator: Uint256 = Field(alias="feeDenominator")
    minimum_shares: Uint256 = Field(alias="minimumShares")

    model_config = {"populate_by_name": True}

    @model_validator(mode="after")
    def check_consistency(self) -> PoolSnapshot:
        """Reject snapshots no pool could have produced."""
        if self.fee_denominator == 0 or self.fee_numerator >= self.fee_denominator:
            raise ValueError(f"Invalid fee {self.fee_numerator}/{self.fee_denominator}")
        if self.minimum_shares == 0:
            raise ValueError("minimumShares must be positive")
        if not self.to_state().is_consistent():
            raise ValueError(
                "Reserves and share supply must be all zero or all positive: "
                f"({self.reserve_a}, {self.reserve_b}, {self.total_shares})"
            )
        return self

    @classmethod
    def from_pool(cls, pool: Pool) -> PoolSnapshot:
        state = pool.get_pool_state()
        config = pool.config
        return cls(
            reserve_a=state.reserve_a,
            reserve_b=state.reserve_b,
            total_shares=state.total_shares,
            fee_numerator=config.fee_numerator,
            fee_denominator=config.fee_denominator,
            minimum_shares=config.minimum_shares,
        )

    def to_state(self) -> PoolState:
        return PoolState(
            reserve_a=self.reserve_a,
            reserve_b=self.reserve_b,
            total_shares=self.total_shares,
        )

    def to_config(self) -> PoolConfig:
        return PoolConfig(
            fee_numerator=self.fee_numerator,
            fee_denominator=self.fee_denominator,
            minimum_shares=self.minimum_shares,
        )

    def to_pool(self) -> Pool:
        return Pool(config=self.to_config(), state=self.to_state())


def save(pool: Pool, path: Path | str) -> PoolSnapshot:
    """Write a snapshot of `pool` to `path`.

    The file is replaced atomically: readers see the old or the new
    snapshot, never a partial write.

    Returns:
        The snapshot that was written
    """
    path = Path(path)
    snapshot = PoolSnapshot.from_pool(pool)
    payload = snapshot.model_dump_json(by_alias=True, indent=2)

    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w") as f:
            f.write(payload)
            f.write("\n")
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise

    logger.debug(
        "pool_snapshot_saved",
        path=str(path),
        reserve_a=snapshot.reserve_a,
        reserve_b=snapshot.reserve_b,
        total_shares=snapshot.total_shares,
    )
    return snapshot


def load(path: Path | str) -> Pool:
    """Restore a pool from the snapshot at `path`.

    Raises:
        FileNotFoundError: If no snapshot exists at `path`
        SnapshotError: If the snapshot is malformed or inconsistent
    """
    path = Path(path)
    raw = path.read_text()
    try:
        snapshot = PoolSnapshot.model_validate_json(raw)
    except ValidationError as e:
        logger.warning("pool_snapshot_invalid", path=str(path), error_count=e.error_count())
        raise SnapshotError(f"Invalid pool snapshot {path}: {e}") from e

    logger.debug(
        "pool_snapshot_loaded",
        path=str(path),
        status=snapshot.to_state().status.value,
    )
    return snapshot.to_pool()
