"""
PriceModel - running cost estimates per auction.

Only the current ask is ever visible, never the clearing price, so the
estimates are forecasts:

- Flights: the last observed ask. Flights sell at the ask immediately,
  so the ask is the price.
- Hotels: ask + largest single rise ever seen + a fixed margin. Hotel asks
  only climb toward the unknown clearing price, so the steepest past rise
  is a cheap upper-bound forecast of the next one. The estimate is a
  ratchet and never decreases.
- Closed auctions: a sentinel cost that no trip can afford.

Entertainment tickets are valued by the EntertainmentAssignor, not here.
"""

from dataclasses import dataclass
from typing import Dict, Optional

from tripbid.core.config import EngineConfig
from tripbid.core.market.auction import AuctionCatalog, Category, HotelTier
from tripbid.utils.logger import get_logger

logger = get_logger("pricing")


# =============================================================================
# Constants
# =============================================================================

# Cost of a resource that can no longer be bought. Finite so that trips
# with fewer unavailable resources still compare as better.
UNAVAILABLE_COST = 1_000_000.0


@dataclass
class PriceRecord:
    """Observation history for one auction."""
    last_ask: Optional[float] = None
    previous_ask: Optional[float] = None
    max_delta: float = 0.0
    estimate: Optional[float] = None
    observations: int = 0
    closed: bool = False


class PriceModel:
    """
    Cache of derived cost estimates, keyed by auction id.

    Mutated only by observe() and close(); everything else reads.
    """

    def __init__(self, catalog: AuctionCatalog, config: Optional[EngineConfig] = None):
        self.catalog = catalog
        self.config = config or EngineConfig()
        self._records: Dict[int, PriceRecord] = {a.auction_id: PriceRecord() for a in catalog}

    # =========================================================================
    # Updates
    # =========================================================================

    def observe(self, auction: int, ask_price: float, closed: bool = False) -> None:
        """
        Record a quote for an auction.

        Quotes for closed auctions are ignored; a quote carrying the closed
        flag closes the auction.
        """
        record = self._records[auction]
        if record.closed:
            return
        if closed:
            self.close(auction)
            return

        record.previous_ask = record.last_ask
        record.last_ask = float(ask_price)
        record.observations += 1

        if record.previous_ask is not None:
            record.max_delta = max(record.max_delta, record.last_ask - record.previous_ask)

        category = self.catalog.get(auction).category
        if category == Category.HOTEL:
            forecast = record.last_ask + record.max_delta + self.config.hotel_margin
            if record.estimate is None or forecast > record.estimate:
                record.estimate = forecast
        else:
            record.estimate = record.last_ask

    def close(self, auction: int) -> None:
        """Mark an auction closed; its estimate becomes the sentinel for good."""
        record = self._records[auction]
        if record.closed:
            return
        record.closed = True
        record.estimate = UNAVAILABLE_COST
        logger.debug(f"Auction {auction} closed, estimate pinned to sentinel")

    # =========================================================================
    # Queries
    # =========================================================================

    def estimate(self, auction: int) -> float:
        """
        Current cost estimate for one unit.

        Before any quote arrives the configured seed is returned.
        """
        record = self._records[auction]
        if record.estimate is not None:
            return record.estimate
        return self._seed(auction)

    def _seed(self, auction: int) -> float:
        info = self.catalog.get(auction)
        if info.category == Category.FLIGHT:
            return self.config.seed_flight_estimate
        if info.category == Category.HOTEL:
            return self.config.seed_hotel(info.kind == HotelTier.GOOD, info.day)
        return 0.0

    def last_ask(self, auction: int) -> Optional[float]:
        return self._records[auction].last_ask

    def max_delta(self, auction: int) -> float:
        return self._records[auction].max_delta

    def is_rising(self, auction: int) -> bool:
        """True when the latest quote is above the one before it."""
        record = self._records[auction]
        if record.last_ask is None or record.previous_ask is None:
            return False
        return record.last_ask > record.previous_ask

    def is_closed(self, auction: int) -> bool:
        return self._records[auction].closed

    def has_observed(self, auction: int) -> bool:
        return self._records[auction].observations > 0
