"""
Game Driver - plays one simulated game against a BiddingPolicy.

Market dynamics are deliberately simple and fully seeded:
- Flights: each flight follows a random walk with a hidden drift and sells
  instantly at the ask to any bid point at or above it.
- Hotels: asks climb as unseen competitors bid; from minute one, a random
  open hotel closes every minute and bid points at or above the closing
  ask win at that price.
- Entertainment: asks wander around a per-auction level; buy points at or
  above the ask buy one ticket per tick, sell points at or below the ask
  sell one.
"""

import random
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from tripbid.core.config import EngineConfig
from tripbid.core.market.auction import Category
from tripbid.core.policy import BiddingPolicy
from tripbid.core.trip.catalog import travel_penalty, hotel_bonus
from tripbid.sim.market import SimulatedMarket, random_preferences
from tripbid.utils.logger import get_logger

logger = get_logger("sim")

HOTEL_ROOMS = 16
CLOSE_INTERVAL_MS = 60_000


@dataclass
class GameResult:
    """Outcome of one simulated game."""
    score: float
    utility: float
    spent: float
    revenue: float
    fulfilled: int
    clients: List[Dict[str, Any]] = field(default_factory=list)


class GameDriver:
    """
    Runs a SimulatedMarket forward in fixed ticks, feeding every quote,
    trade and close to the policy.
    """

    def __init__(
        self,
        seed: Optional[int] = None,
        config: Optional[EngineConfig] = None,
        tick_ms: int = 10_000,
    ):
        self.rng = random.Random(seed)
        self.config = config or EngineConfig(seed=seed)
        self.tick_ms = tick_ms

        prefs = random_preferences(self.rng, self.config.num_clients)
        self.market = SimulatedMarket(prefs, self.config.game_length_ms)
        self.policy = BiddingPolicy(self.market, self.config)

        catalog = self.market.catalog
        self.flights = [a.auction_id for a in catalog.by_category(Category.FLIGHT)]
        self.hotels = [a.auction_id for a in catalog.by_category(Category.HOTEL)]
        self.events = [a.auction_id for a in catalog.by_category(Category.ENTERTAINMENT)]

        self._drift = {a: self.rng.uniform(-10, 30) for a in self.flights}
        self._level = {a: self.rng.uniform(40, 120) for a in self.events}
        self._next_close = CLOSE_INTERVAL_MS

        for a in self.flights:
            self.market.set_ask(a, round(self.rng.uniform(250, 400), 2))
        for a in self.events:
            self.market.set_ask(a, round(self._level[a], 2))
            self.market.grant(a, self.rng.randint(0, 2))

    # =========================================================================
    # Dynamics
    # =========================================================================

    def _move_prices(self) -> None:
        progress = self.market.now / self.market.length
        for a in self.flights:
            drift = self._drift[a] * progress
            step = self.rng.uniform(min(-10.0, drift), max(10.0, drift))
            self.market.set_ask(a, round(min(800.0, max(150.0, self.market.asks[a] + step)), 2))
        for a in self.hotels:
            if a not in self.market.closed:
                self.market.set_ask(a, round(self.market.asks[a] + self.rng.uniform(0, 12), 2))
        for a in self.events:
            wander = self._level[a] + self.rng.uniform(-15, 15)
            self.market.set_ask(a, round(max(5.0, wander), 2))

    def _update_hqw(self) -> None:
        """Units each open hotel bid would win if the auction closed now."""
        for a in self.hotels:
            bid = self.market.active.get(a)
            if bid is None or a in self.market.closed:
                self.market.hqw[a] = 0
                continue
            ask = self.market.asks[a]
            won = sum(p.quantity for p in bid.points if p.quantity > 0 and p.price >= ask)
            self.market.hqw[a] = min(won, HOTEL_ROOMS)

    def _fill_flights(self) -> None:
        for a in self.flights:
            bid = self.market.active.get(a)
            if bid is None:
                continue
            ask = self.market.asks[a]
            won = sum(p.quantity for p in bid.points if p.quantity > 0 and p.price >= ask)
            del self.market.active[a]
            if won > 0:
                self.market.grant(a, won, ask)
                self.policy.on_transaction(a, won, ask)

    def _trade_entertainment(self) -> None:
        for a in self.events:
            bid = self.market.active.get(a)
            if bid is None or a in self.market.closed:
                continue
            ask = self.market.asks[a]
            for point in bid.points:
                if point.quantity > 0 and point.price >= ask:
                    del self.market.active[a]
                    self.market.grant(a, 1, ask)
                    self.policy.on_transaction(a, 1, ask)
                    break
                if point.quantity < 0 and point.price <= ask and self.market.own(a) > 0:
                    del self.market.active[a]
                    self.market.take(a, 1, ask)
                    self.policy.on_transaction(a, -1, ask)
                    break

    def _close_hotel(self, auction: int) -> None:
        bid = self.market.active.get(auction)
        price = self.market.asks[auction]
        won = 0
        if bid is not None:
            won = sum(p.quantity for p in bid.points if p.quantity > 0 and p.price >= price)
            won = min(won, HOTEL_ROOMS)
        self.market.close(auction)
        if won > 0:
            self.market.grant(auction, won, price)
            self.policy.on_transaction(auction, won, price)
        self.policy.on_auction_closed(auction)

    def _forward_rejections(self) -> None:
        while self.market.rejected:
            bid, reason = self.market.rejected.pop(0)
            self.policy.on_bid_rejected(bid, reason)

    # =========================================================================
    # Game Loop
    # =========================================================================

    def start(self) -> None:
        self.policy.on_game_started()

    def step(self) -> bool:
        """
        Advance the market one tick and deliver its events.

        Returns:
            True while the game has time left
        """
        if self.market.game_time_left() > 0:
            self.market.advance(self.tick_ms)
            self._move_prices()
            self._update_hqw()

            for a in self.flights + self.hotels + self.events:
                if a not in self.market.closed:
                    self.policy.on_quote(a, self.market.asks[a])
            for category in (Category.FLIGHT, Category.HOTEL, Category.ENTERTAINMENT):
                self.policy.on_category_quote(category)

            self._fill_flights()
            self._trade_entertainment()
            self._forward_rejections()

            if self.market.now >= self._next_close or self.market.game_time_left() == 0:
                open_hotels = [a for a in self.hotels if a not in self.market.closed]
                if self.market.game_time_left() == 0:
                    closing = open_hotels
                else:
                    closing = [self.rng.choice(open_hotels)] if open_hotels else []
                for auction in closing:
                    self._close_hotel(auction)
                self._next_close += CLOSE_INTERVAL_MS
            self._forward_rejections()

        return self.market.game_time_left() > 0

    def run(self) -> GameResult:
        """Play the whole game and score it."""
        self.start()
        while self.step():
            pass
        result = self.score()
        self.policy.on_game_stopped()
        return result

    def score(self) -> GameResult:
        """
        Score the game: value of every complete trip plus its entertainment
        bonus, minus money spent, plus money earned from sales.
        """
        utility = 0.0
        fulfilled = 0
        for client in self.policy.clients:
            if not client.fulfilled:
                continue
            fulfilled += 1
            trip = client.selected
            utility += (
                self.config.base_utility
                - travel_penalty(trip, client.prefs, self.config.travel_penalty)
                + hotel_bonus(trip, client.prefs)
                + self.policy.tickets.bonus.get(client.client, 0.0)
            )

        score = utility - self.market.spent + self.market.revenue
        logger.info(f"Game scored {score:.0f} ({fulfilled} clients fulfilled)")
        return GameResult(
            score=round(score, 2),
            utility=round(utility, 2),
            spent=round(self.market.spent, 2),
            revenue=round(self.market.revenue, 2),
            fulfilled=fulfilled,
            clients=self.policy.report(),
        )
