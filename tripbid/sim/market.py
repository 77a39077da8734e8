"""
Simulated Market - in-memory auction collaborator.

Implements MarketView on plain dictionaries so that a BiddingPolicy can
be exercised without a game server. Tests drive it by hand (set_ask,
grant, close, advance); GameDriver drives it with random dynamics.
"""

import random
from collections import defaultdict
from typing import Dict, List, Optional, Sequence, Set, Tuple

from tripbid.core.market.auction import AuctionCatalog
from tripbid.core.market.bid import Bid
from tripbid.core.trip.preferences import ClientPreferences
from tripbid.utils.logger import get_logger
from tripbid.utils.validation import validate_bid

logger = get_logger("sim")

DEFAULT_GAME_LENGTH_MS = 540_000


def random_preferences(rng: random.Random, num_clients: int = 8) -> List[ClientPreferences]:
    """Draw client preferences the way the travel game does."""
    prefs = []
    for client in range(num_clients):
        arrival = rng.randint(1, 4)
        departure = rng.randint(arrival + 1, 5)
        prefs.append(ClientPreferences(
            client=client,
            arrival=arrival,
            departure=departure,
            hotel_bonus=rng.randint(50, 150),
            alligator_wrestling=rng.randint(0, 200),
            amusement=rng.randint(0, 200),
            museum=rng.randint(0, 200),
        ))
    return prefs


class SimulatedMarket:
    """
    MarketView backed by dictionaries.

    Attributes:
        catalog: Auction catalog
        preferences: Client preferences, by client index
        now: Elapsed game time in ms
        asks: Current ask per auction
        owned: Owned units per auction
        closed: Closed auction ids
        active: Latest bid per auction
        submitted: Every bid accepted, in order
        rejected: (bid, reason) for bids refused by the market
        spent / revenue: Money paid for purchases / received for sales
    """

    def __init__(
        self,
        preferences: Sequence[ClientPreferences],
        game_length_ms: int = DEFAULT_GAME_LENGTH_MS,
    ):
        self.catalog = AuctionCatalog()
        self.preferences = list(preferences)
        self.length = game_length_ms
        self.now = 0
        self.asks: Dict[int, float] = {a.auction_id: 0.0 for a in self.catalog}
        self.owned: Dict[int, int] = defaultdict(int)
        self.hqw: Dict[int, int] = defaultdict(int)
        self.closed: Set[int] = set()
        self.active: Dict[int, Bid] = {}
        self.submitted: List[Bid] = []
        self.rejected: List[Tuple[Bid, str]] = []
        self.spent = 0.0
        self.revenue = 0.0

    # =========================================================================
    # MarketView
    # =========================================================================

    def game_time(self) -> int:
        return self.now

    def game_time_left(self) -> int:
        return max(0, self.length - self.now)

    def game_length(self) -> int:
        return self.length

    def ask_price(self, auction: int) -> float:
        return self.asks[auction]

    def own(self, auction: int) -> int:
        return self.owned[auction]

    def is_closed(self, auction: int) -> bool:
        return auction in self.closed

    def hypothetical_quantity_won(self, auction: int) -> int:
        return self.hqw[auction]

    def client_preferences(self, client: int) -> ClientPreferences:
        return self.preferences[client]

    def submit_bid(self, bid: Bid) -> None:
        valid, err = validate_bid(bid, len(self.catalog))
        if not valid:
            raise ValueError(f"Invalid bid {bid}: {err}")
        if bid.auction in self.closed:
            self.rejected.append((bid, "auction closed"))
            return
        self.submitted.append(bid)
        self.active[bid.auction] = bid

    # =========================================================================
    # Controls
    # =========================================================================

    def advance(self, ms: int) -> None:
        self.now = min(self.length, self.now + ms)

    def set_time(self, ms: int) -> None:
        self.now = ms

    def set_ask(self, auction: int, price: float) -> None:
        self.asks[auction] = float(price)

    def grant(self, auction: int, quantity: int = 1, price: Optional[float] = None) -> None:
        """Give the agent units of an auction (a purchase if price is set)."""
        self.owned[auction] += quantity
        if price is not None:
            self.spent += price * quantity

    def take(self, auction: int, quantity: int = 1, price: Optional[float] = None) -> None:
        """Remove units from the agent (a sale if price is set)."""
        if quantity > self.owned[auction]:
            raise ValueError(f"Cannot take {quantity} of auction {auction}, own {self.owned[auction]}")
        self.owned[auction] -= quantity
        if price is not None:
            self.revenue += price * quantity

    def close(self, auction: int) -> None:
        self.closed.add(auction)
        self.active.pop(auction, None)

    def bids_for(self, auction: int) -> List[Bid]:
        """Every bid submitted to one auction."""
        return [b for b in self.submitted if b.auction == auction]
