"""
tripbid CLI - Command Line Interface for the trip bidding engine

Main entry point for all CLI commands.
"""

import json
from dataclasses import asdict

import click

from tripbid.utils.logger import setup_logging


@click.group()
@click.option("--debug", is_flag=True, help="Enable debug logging")
@click.option("--env-file", default=None, help="dotenv file with TRIPBID_* settings")
@click.option("--log-file", is_flag=True, help="Also write logs to <log_dir>/tripbid.log")
@click.version_option(version="0.1.0")
@click.pass_context
def cli(ctx, debug, env_file, log_file):
    """Trip allocation and bidding engine for the travel auction game"""
    import logging
    from tripbid.core.config import load_config

    config = load_config(env_file)
    level = logging.DEBUG if debug else logging.WARNING
    setup_logging(level=level, log_dir=str(config.log_dir), log_to_file=log_file)

    ctx.ensure_object(dict)
    ctx.obj["config"] = config


# =============================================================================
# Simulation Commands
# =============================================================================

@cli.command("simulate")
@click.option("--games", default=1, type=int, help="Number of games to play")
@click.option("--seed", default=None, type=int, help="Seed for the first game")
@click.option("--tick", default=10, type=int, help="Seconds between market updates")
@click.option("--verbose", "-v", is_flag=True, help="Show every client's trip")
@click.pass_context
def simulate(ctx, games, seed, tick, verbose):
    """Play simulated games against the in-memory market"""
    from dataclasses import replace
    from tripbid.sim import GameDriver

    config = ctx.obj["config"]
    scores = []

    for game in range(games):
        game_seed = None if seed is None else seed + game
        driver = GameDriver(
            seed=game_seed,
            config=replace(config, seed=game_seed),
            tick_ms=tick * 1000,
        )
        result = driver.run()
        scores.append(result.score)

        click.echo(f"Game {game + 1}: score={result.score:.0f} "
                   f"utility={result.utility:.0f} spent={result.spent:.0f} "
                   f"revenue={result.revenue:.0f} fulfilled={result.fulfilled}/{len(result.clients)}")

        if verbose:
            for client in result.clients:
                click.echo(f"  #{client['client']}: {client['trip']:<22} {client['state']:<9} "
                           f"missing={client['missing']} tickets={client['tickets']} "
                           f"bonus={client['entertainment_bonus']:.0f}")

    if games > 1:
        click.echo("-" * 40)
        click.echo(f"Average score over {games} games: {sum(scores) / games:.0f}")


# =============================================================================
# Config Commands
# =============================================================================

@cli.command("config")
@click.pass_context
def show_config(ctx):
    """Print the effective engine configuration"""
    data = asdict(ctx.obj["config"])
    data["log_dir"] = str(data["log_dir"])
    click.echo(json.dumps(data, indent=2))


if __name__ == "__main__":
    cli()
