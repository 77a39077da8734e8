"""
Integration tests: whole games against the simulated market.

Tests cover:
1. Ledger consistency after every market tick
2. Deterministic outcomes for a fixed seed
3. Trips completed and scored
4. The command line interface
"""

import logging

import pytest
from click.testing import CliRunner

from tripbid.cli.main import cli
from tripbid.core.config import EngineConfig
from tripbid.sim import GameDriver
from tripbid.utils.logger import setup_logging


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def driver():
    return GameDriver(seed=11, config=EngineConfig(seed=11))


# =============================================================================
# Game Tests
# =============================================================================


class TestSimulatedGame:
    """Full games driven tick by tick."""

    def test_allocation_consistent_every_tick(self, driver):
        driver.start()
        driver.policy.verify_allocation()
        while driver.step():
            driver.policy.verify_allocation()
        driver.policy.verify_allocation()

    def test_owned_never_negative(self, driver):
        driver.start()
        while driver.step():
            assert all(q >= 0 for q in driver.market.owned.values())

    def test_credited_within_owned(self, driver):
        """No client is credited with a unit the agent does not hold."""
        driver.start()
        while driver.step():
            for auction in driver.flights + driver.hotels:
                credited = sum(1 for c in driver.policy.clients if auction in c.owned)
                assert credited <= driver.market.own(auction)

    def test_all_hotels_closed_at_end(self, driver):
        driver.start()
        while driver.step():
            pass
        assert all(driver.market.is_closed(a) for a in driver.hotels)

    def test_run_scores_game(self, driver):
        result = driver.run()
        assert 0 < result.fulfilled <= 8
        assert len(result.clients) == 8
        assert result.spent > 0
        assert not driver.policy.running

    def test_deterministic(self):
        first = GameDriver(seed=5).run()
        second = GameDriver(seed=5).run()
        assert first.score == second.score
        assert first.clients == second.clients

    @pytest.mark.parametrize("seed", [1, 2, 3])
    def test_fulfilled_clients_keep_their_trips(self, seed):
        driver = GameDriver(seed=seed)
        driver.start()
        done = {}
        while driver.step():
            for client in driver.policy.clients:
                if client.fulfilled:
                    done.setdefault(client.client, client.selected)
                    assert client.selected == done[client.client]
                    assert not client.wanted()


# =============================================================================
# CLI Tests
# =============================================================================


class TestCli:
    """Command line entry points."""

    @pytest.fixture(autouse=True)
    def restore_logging(self):
        """The CLI binds log output to the runner's stream."""
        yield
        setup_logging(logging.WARNING)

    def test_simulate(self):
        runner = CliRunner()
        result = runner.invoke(cli, ["simulate", "--games", "2", "--seed", "3"])
        assert result.exit_code == 0, result.output
        assert "Game 1:" in result.output
        assert "Average score over 2 games" in result.output

    def test_simulate_verbose(self):
        runner = CliRunner()
        result = runner.invoke(cli, ["simulate", "--seed", "4", "-v"])
        assert result.exit_code == 0, result.output
        assert "#0:" in result.output

    def test_log_file(self, tmp_path, monkeypatch):
        """--log-file writes under the configured log_dir."""
        monkeypatch.setenv("TRIPBID_LOG_DIR", str(tmp_path / "logs"))
        runner = CliRunner()
        result = runner.invoke(cli, ["--log-file", "config"])
        assert result.exit_code == 0, result.output
        assert (tmp_path / "logs" / "tripbid.log").exists()

    def test_config(self):
        runner = CliRunner()
        result = runner.invoke(cli, ["config"])
        assert result.exit_code == 0, result.output
        assert '"flight_ceiling": 1000.0' in result.output
