"""Tests for the command line interface."""

import json

import pytest

from cpamm import storage
from cpamm.cli import build_parser, main


@pytest.fixture
def state_file(tmp_path):
    """Path for a snapshot that does not exist yet."""
    return tmp_path / "pool.json"


def run(capsys, *argv):
    """Run the CLI and return (exit_code, parsed stdout)."""
    code = main(list(argv))
    out = capsys.readouterr().out
    return code, (json.loads(out) if out.strip() else None)


class TestInit:
    """Tests for `cpamm init`."""

    def test_creates_empty_snapshot(self, capsys, state_file):
        """init writes an empty pool with the default fee."""
        code, payload = run(capsys, "--state", str(state_file), "init")
        assert code == 0
        assert payload["status"] == "empty"
        pool = storage.load(state_file)
        assert pool.get_pool_state().is_empty
        assert pool.config.fee_numerator == 3

    def test_custom_constants(self, capsys, state_file):
        """Fee and floor can be set on init."""
        code, _ = run(
            capsys,
            "--state",
            str(state_file),
            "init",
            "--fee-numerator",
            "25",
            "--fee-denominator",
            "10000",
            "--minimum-shares",
            "10",
        )
        assert code == 0
        config = storage.load(state_file).config
        assert (config.fee_numerator, config.fee_denominator, config.minimum_shares) == (
            25,
            10_000,
            10,
        )

    def test_refuses_overwrite(self, capsys, state_file):
        """init does not clobber an existing pool without --force."""
        run(capsys, "--state", str(state_file), "init")
        run(capsys, "--state", str(state_file), "add", "1000", "1000")
        code, _ = run(capsys, "--state", str(state_file), "init")
        assert code == 1
        assert not storage.load(state_file).get_pool_state().is_empty

        code, _ = run(capsys, "--state", str(state_file), "init", "--force")
        assert code == 0
        assert storage.load(state_file).get_pool_state().is_empty

    def test_env_defaults(self, capsys, state_file, monkeypatch):
        """Constants not given on the command line come from CPAMM_* variables."""
        monkeypatch.setenv("CPAMM_FEE_NUMERATOR", "25")
        monkeypatch.setenv("CPAMM_FEE_DENOMINATOR", "10000")
        monkeypatch.delenv("CPAMM_MINIMUM_SHARES", raising=False)
        code, _ = run(capsys, "--state", str(state_file), "init", "--minimum-shares", "10")
        assert code == 0
        config = storage.load(state_file).config
        assert (config.fee_numerator, config.fee_denominator, config.minimum_shares) == (
            25,
            10_000,
            10,
        )

    def test_malformed_env(self, capsys, state_file, monkeypatch):
        """A non-integer env var fails init with an error, not a traceback."""
        monkeypatch.setenv("CPAMM_FEE_NUMERATOR", "three")
        code, payload = run(capsys, "--state", str(state_file), "init")
        assert code == 1
        assert payload is None
        assert not state_file.exists()

    def test_invalid_fee(self, capsys, state_file):
        """An impossible fee is reported and nothing is written."""
        code, _ = run(capsys, "--state", str(state_file), "init", "--fee-numerator", "1000")
        assert code == 1
        assert not state_file.exists()


class TestOperations:
    """Tests for the mutating commands."""

    def test_reference_session(self, capsys, state_file):
        """add, swap and remove persist between invocations."""
        run(capsys, "--state", str(state_file), "init")

        code, payload = run(capsys, "--state", str(state_file), "add", "1000", "1000")
        assert code == 0
        assert payload["shares"] == 1000

        code, payload = run(capsys, "--state", str(state_file), "swap", "a", "100")
        assert code == 0
        assert payload["amount_out"] == 90
        assert payload["state"]["reserve_a"] == 1100
        assert payload["state"]["reserve_b"] == 910

        code, payload = run(capsys, "--state", str(state_file), "remove", "1000")
        assert code == 0
        assert payload["amounts"] == [1100, 910]
        assert payload["state"]["status"] == "empty"
        assert storage.load(state_file).get_pool_state().is_empty

    def test_rejection_not_saved(self, capsys, state_file):
        """A rejected operation exits 1 and leaves the snapshot alone."""
        run(capsys, "--state", str(state_file), "init")
        run(capsys, "--state", str(state_file), "add", "100", "200")
        before = state_file.read_text()

        code, payload = run(capsys, "--state", str(state_file), "add", "10", "19")
        assert code == 1
        assert payload["ok"] is False
        assert payload["error"] == "unbalanced_deposit"
        assert state_file.read_text() == before

    def test_quote_does_not_save(self, capsys, state_file):
        """quote prices without changing the snapshot."""
        run(capsys, "--state", str(state_file), "init")
        run(capsys, "--state", str(state_file), "add", "1000", "1000")
        before = state_file.read_text()

        code, payload = run(capsys, "--state", str(state_file), "quote", "b", "100")
        assert code == 0
        assert payload["amount_out"] == 90
        assert state_file.read_text() == before

    def test_state(self, capsys, state_file):
        """state prints the counters."""
        run(capsys, "--state", str(state_file), "init")
        run(capsys, "--state", str(state_file), "add", "100", "200")
        code, payload = run(capsys, "--state", str(state_file), "state")
        assert code == 0
        assert payload == {
            "reserve_a": 100,
            "reserve_b": 200,
            "total_shares": 1000,
            "status": "active",
        }

    def test_swap_on_empty_pool(self, capsys, state_file):
        """Swapping an empty pool is reported, not raised."""
        run(capsys, "--state", str(state_file), "init")
        code, payload = run(capsys, "--state", str(state_file), "swap", "a", "100")
        assert code == 1
        assert payload["error"] == "empty_pool"


class TestErrors:
    """Tests for CLI error paths."""

    def test_missing_snapshot(self, capsys, state_file):
        """Commands other than init need an existing snapshot."""
        code, payload = run(capsys, "--state", str(state_file), "state")
        assert code == 1
        assert payload is None

    def test_malformed_env_ignored_outside_init(self, capsys, state_file, monkeypatch):
        """Only init reads the environment."""
        run(capsys, "--state", str(state_file), "init")
        monkeypatch.setenv("CPAMM_FEE_NUMERATOR", "three")
        code, payload = run(capsys, "--state", str(state_file), "state")
        assert code == 0
        assert payload["status"] == "empty"

    def test_corrupt_snapshot(self, capsys, state_file):
        """A corrupt snapshot is reported."""
        state_file.write_text("{}")
        code, _ = run(capsys, "--state", str(state_file), "state")
        assert code == 1

    @pytest.mark.parametrize(
        "argv",
        [["add", "-5", "10"], ["add", "x", "10"], ["swap", "c", "10"], []],
    )
    def test_usage_errors(self, argv):
        """Bad arguments exit with argparse's usage error."""
        with pytest.raises(SystemExit) as exc_info:
            build_parser().parse_args(argv)
        assert exc_info.value.code == 2
