"""In-memory market and game driver for tests and the CLI"""
from tripbid.sim.market import SimulatedMarket, random_preferences, DEFAULT_GAME_LENGTH_MS
from tripbid.sim.runner import GameDriver, GameResult

__all__ = [
    "SimulatedMarket",
    "random_preferences",
    "DEFAULT_GAME_LENGTH_MS",
    "GameDriver",
    "GameResult",
]
