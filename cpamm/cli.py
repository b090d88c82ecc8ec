"""Command line interface over a pool snapshot file.

Each invocation loads the snapshot, applies one operation, saves the
snapshot if the operation changed the pool, and prints the result as JSON.

Usage:
    python -m cpamm --state pool.json init
    python -m cpamm --state pool.json add 1000 1000
    python -m cpamm --state pool.json swap a 100
    python -m cpamm --state pool.json state
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

import structlog

from cpamm import storage
from cpamm.config import PoolConfig
from cpamm.errors import SnapshotError
from cpamm.pool import Pool
from cpamm.result import PoolResult
from cpamm.swap import Direction

logger = structlog.get_logger()

DEFAULT_STATE_FILE = Path("pool.json")


def configure_logging(verbose: bool = False) -> None:
    """Route structlog output to stderr so stdout stays machine-readable."""
    log_level = logging.DEBUG if verbose else logging.INFO
    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
    )


def non_negative_int(value: str) -> int:
    """argparse type for token amounts."""
    try:
        parsed = int(value)
    except ValueError as err:
        raise argparse.ArgumentTypeError(f"not an integer: {value}") from err
    if parsed < 0:
        raise argparse.ArgumentTypeError(f"must be non-negative: {value}")
    return parsed


def direction_arg(value: str) -> Direction:
    """argparse type for swap direction ("a" sells A, "b" sells B)."""
    try:
        return Direction.parse(value)
    except ValueError as err:
        raise argparse.ArgumentTypeError(str(err)) from err


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cpamm",
        description="Operate a two-asset constant product pool stored in a snapshot file",
    )
    parser.add_argument(
        "--state",
        type=Path,
        default=DEFAULT_STATE_FILE,
        help=f"Snapshot file (default: {DEFAULT_STATE_FILE})",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable verbose logging",
    )
    commands = parser.add_subparsers(dest="command", required=True)

    # Unset constants fall back to CPAMM_* env vars, read only when init runs
    init = commands.add_parser("init", help="Create an empty pool snapshot")
    init.add_argument("--fee-numerator", type=non_negative_int)
    init.add_argument("--fee-denominator", type=non_negative_int)
    init.add_argument("--minimum-shares", type=non_negative_int)
    init.add_argument("--force", action="store_true", help="Overwrite an existing snapshot")

    add = commands.add_parser("add", help="Deposit both assets")
    add.add_argument("amount_a", type=non_negative_int)
    add.add_argument("amount_b", type=non_negative_int)

    remove = commands.add_parser("remove", help="Burn LP shares")
    remove.add_argument("shares", type=non_negative_int)

    for name, help_text in (("swap", "Sell one asset for the other"), ("quote", "Price a swap")):
        sub = commands.add_parser(name, help=help_text)
        sub.add_argument("direction", type=direction_arg, help="a or b: the asset sold")
        sub.add_argument("amount_in", type=non_negative_int)

    commands.add_parser("state", help="Print reserves and share supply")
    return parser


def _state_payload(pool: Pool) -> dict[str, object]:
    state = pool.get_pool_state()
    return {
        "reserve_a": state.reserve_a,
        "reserve_b": state.reserve_b,
        "total_shares": state.total_shares,
        "status": state.status.value,
    }


def _emit(payload: dict[str, object]) -> None:
    print(json.dumps(payload, indent=2))


def _init_config(args: argparse.Namespace) -> PoolConfig:
    """Command line constants, with PoolConfig.from_env() filling the gaps.

    Raises:
        ValueError: If an env var is not an integer or the result is invalid
    """
    defaults = PoolConfig.from_env()
    return PoolConfig(
        fee_numerator=_pick(args.fee_numerator, defaults.fee_numerator),
        fee_denominator=_pick(args.fee_denominator, defaults.fee_denominator),
        minimum_shares=_pick(args.minimum_shares, defaults.minimum_shares),
    )


def _pick(value: int | None, default: int) -> int:
    return default if value is None else value


def _run_init(args: argparse.Namespace) -> int:
    if args.state.exists() and not args.force:
        print(f"Error: snapshot already exists: {args.state} (use --force)", file=sys.stderr)
        return 1
    try:
        config = _init_config(args)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    pool = Pool(config=config)
    storage.save(pool, args.state)
    logger.info(
        "pool_initialized",
        path=str(args.state),
        fee=f"{config.fee_numerator}/{config.fee_denominator}",
    )
    _emit(_state_payload(pool))
    return 0


def _apply(args: argparse.Namespace, pool: Pool) -> tuple[PoolResult, bool]:
    """Run the requested operation. Returns (result, mutates)."""
    if args.command == "add":
        return pool.add_liquidity(args.amount_a, args.amount_b), True
    if args.command == "remove":
        return pool.remove_liquidity(args.shares), True
    if args.command == "swap":
        return pool.swap(args.direction, args.amount_in), True
    return pool.quote(args.direction, args.amount_in), False


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.verbose)

    if args.command == "init":
        return _run_init(args)

    try:
        pool = storage.load(args.state)
    except FileNotFoundError:
        print(f"Error: snapshot not found: {args.state} (run init first)", file=sys.stderr)
        return 1
    except SnapshotError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if args.command == "state":
        _emit(_state_payload(pool))
        return 0

    result, mutates = _apply(args, pool)
    if result.ok and mutates:
        storage.save(pool, args.state)

    payload = result.to_dict()
    payload["state"] = _state_payload(pool)
    _emit(payload)
    return 0 if result.ok else 1


if __name__ == "__main__":
    sys.exit(main())
