"""
Engine configuration parameters for tripbid.

Defines the utility model constants, price seeds and bidding limits.
None of these are load-bearing contracts; they are tuning knobs.
"""

import os
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Optional, Tuple

from dotenv import load_dotenv

ENV_PREFIX = "TRIPBID_"


@dataclass(frozen=True)
class EngineConfig:
    """Engine-wide configuration parameters"""

    # Utility model
    base_utility: float = 1000.0  # Value of a feasible trip before costs
    travel_penalty: float = 100.0  # Per day of deviation from preferred dates
    entertainment_factor: float = 0.5  # Weight of the top-N entertainment heuristic

    # Price seeds, used until a quote is observed (indexed by day 1..4).
    # Hotel seeds stay below travel_penalty so an unpriced stay is never shortened.
    seed_flight_estimate: float = 350.0
    seed_cheap_hotel: Tuple[float, ...] = (50.0, 70.0, 70.0, 50.0)
    seed_good_hotel: Tuple[float, ...] = (80.0, 95.0, 95.0, 80.0)
    hotel_margin: float = 50.0  # Added on top of ask + max observed delta

    # Bid limits
    flight_ceiling: float = 1000.0  # Maximum price ever bid for a flight
    hotel_ceiling: float = 1000.0  # Maximum price ever bid for a hotel night
    compulsory_hotel_price: float = 1.0  # Price of the always-present hotel claim
    compulsory_hotel_units: int = 1  # Base demand per hotel auction

    # Entertainment trading
    entertainment_bid_low: float = 0.5  # Buy price as a fraction of marginal bonus
    entertainment_bid_high: float = 0.8
    entertainment_sell_markup: float = 20.0  # Over the current ask
    entertainment_reserve_start: float = 200.0  # Sell reserve at game start
    entertainment_reserve_end: float = 80.0  # Sell reserve at game end

    # Game clock (milliseconds)
    game_length_ms: int = 540_000
    warmup_ms: int = 20_000  # Initial bid sweep waits for this much game time
    failsafe_ms: int = 30_000  # Ceiling bids for unmet needs inside this window

    # Misc
    num_clients: int = 8
    seed: Optional[int] = None
    log_dir: Path = field(default=Path("logs"))

    def __post_init__(self):
        """Validate parameter ranges"""
        if len(self.seed_cheap_hotel) != 4 or len(self.seed_good_hotel) != 4:
            raise ValueError("Hotel seed estimates must cover days 1..4")
        if not 0.0 <= self.entertainment_bid_low <= self.entertainment_bid_high <= 1.0:
            raise ValueError(
                f"Entertainment bid range must satisfy 0 <= low <= high <= 1, "
                f"got ({self.entertainment_bid_low}, {self.entertainment_bid_high})"
            )
        if self.compulsory_hotel_units < 0:
            raise ValueError(f"compulsory_hotel_units must be >= 0, got {self.compulsory_hotel_units}")
        if self.game_length_ms <= 0:
            raise ValueError(f"game_length_ms must be positive, got {self.game_length_ms}")
        if self.warmup_ms < 0 or self.failsafe_ms < 0:
            raise ValueError("warmup_ms and failsafe_ms must be >= 0")
        if self.num_clients <= 0:
            raise ValueError(f"num_clients must be positive, got {self.num_clients}")

    def seed_hotel(self, good: bool, day: int) -> float:
        """Seed estimate for a hotel night before any quote."""
        seeds = self.seed_good_hotel if good else self.seed_cheap_hotel
        return seeds[day - 1]


# Global config instance (can be overridden)
config = EngineConfig()


def _parse_value(name: str, raw: str, default):
    """Convert an environment string to the type of the field default."""
    try:
        if name == "seed":
            return int(raw) if raw.strip() else None
        if isinstance(default, bool):
            return raw.strip().lower() in ("1", "true", "yes", "on")
        if isinstance(default, int):
            return int(raw)
        if isinstance(default, float):
            return float(raw)
        if isinstance(default, tuple):
            return tuple(float(part) for part in raw.split(","))
        if isinstance(default, Path):
            return Path(raw)
    except ValueError as e:
        raise ValueError(f"Invalid value for {ENV_PREFIX}{name.upper()}: {raw!r}") from e
    return raw


def load_config(env_file: Optional[str] = None, base: Optional[EngineConfig] = None) -> EngineConfig:
    """
    Load configuration from the environment or use defaults.

    Variables are named ``TRIPBID_<FIELD>``, e.g. ``TRIPBID_FLIGHT_CEILING``.
    An optional ``.env`` file is loaded first without overriding variables
    already set in the process environment.

    Args:
        env_file: Optional path to a dotenv file
        base: Configuration to override (defaults to EngineConfig())

    Returns:
        EngineConfig instance
    """
    load_dotenv(dotenv_path=env_file, override=False)

    base = base or EngineConfig()
    overrides = {}
    for f in fields(EngineConfig):
        raw = os.environ.get(f"{ENV_PREFIX}{f.name.upper()}")
        if raw is None:
            continue
        overrides[f.name] = _parse_value(f.name, raw, getattr(base, f.name))

    return replace(base, **overrides)
