"""
Bidding Policy - event-driven controller for one game.

Events from the auction collaborator arrive one at a time and each is
handled to completion before the next:

    on_game_started / on_game_stopped
    on_quote(auction, ask, closed)     per-auction price update
    on_category_quote(category)        all quotes of a category refreshed
    on_auction_closed(auction)
    on_transaction(auction, qty, price)
    on_bid_rejected / on_bid_error

Handling an event updates the PriceModel, lets the clients reselect
their trips (which moves client demand in the AllocationTable), credits
newly owned units, and only then submits bids.
"""

import random
from collections import defaultdict
from typing import Any, Dict, List, Optional

from tripbid.core.allocation.client import ClientAgent
from tripbid.core.allocation.table import AllocationDriftError, AllocationTable
from tripbid.core.config import EngineConfig
from tripbid.core.entertainment import EntertainmentAssignor, TicketAssignment
from tripbid.core.market.auction import Category
from tripbid.core.market.bid import Bid
from tripbid.core.market.view import MarketView
from tripbid.core.pricing import PriceModel
from tripbid.utils.logger import get_logger
from tripbid.utils.validation import validate_bid, validate_quote

logger = get_logger("policy")


class BiddingPolicy:
    """
    Allocation and bidding engine for one game at a time.

    Attributes:
        market: The auction collaborator
        config: Engine configuration
        prices: Price estimates (reset every game)
        table: Shared allocation ledger (reset every game)
        clients: One ClientAgent per client slot
        tickets: Latest entertainment ticket placement
    """

    def __init__(self, market: MarketView, config: Optional[EngineConfig] = None):
        self.market = market
        self.config = config or EngineConfig()
        self.catalog = market.catalog
        self.rng = random.Random(self.config.seed)
        self.assignor = EntertainmentAssignor(self.catalog)

        self.flights = [a.auction_id for a in self.catalog.by_category(Category.FLIGHT)]
        self.hotels = [a.auction_id for a in self.catalog.by_category(Category.HOTEL)]
        self.events = [a.auction_id for a in self.catalog.by_category(Category.ENTERTAINMENT)]

        self.running = False
        self._reset()

    def _reset(self) -> None:
        self.prices = PriceModel(self.catalog, self.config)
        self.table = AllocationTable()
        self.clients: List[ClientAgent] = []
        self.tickets = TicketAssignment()
        self.active_bids: Dict[int, Bid] = {}
        self._paid: Dict[int, List[float]] = defaultdict(list)
        self.initialized = False
        self.failsafe = False

    # =========================================================================
    # Game Lifecycle
    # =========================================================================

    def on_game_started(self) -> None:
        """Create clients, seed the ledger and place owned tickets."""
        self._reset()
        self.running = True

        for auction in self.hotels:
            self.table.set_base(auction, self.config.compulsory_hotel_units)

        for index in range(self.config.num_clients):
            prefs = self.market.client_preferences(index)
            self.clients.append(
                ClientAgent(prefs, self.catalog, self.prices, self.table, self.config)
            )

        self._settle()
        self._update_entertainment()
        logger.info(f"Game started with {len(self.clients)} clients")

    def on_game_stopped(self) -> None:
        """Discard all per-game state."""
        if self.running:
            fulfilled = sum(1 for c in self.clients if c.fulfilled)
            logger.info(f"Game stopped: {fulfilled}/{len(self.clients)} clients fulfilled")
        self.running = False
        self._reset()

    # =========================================================================
    # Market Events
    # =========================================================================

    def on_quote(self, auction: int, ask_price: float, closed: bool = False) -> None:
        """
        Handle a price quote for one auction.

        Flights are bought as soon as their price starts rising, hotels
        only get the compulsory claim here (real hotel bids wait for the
        category refresh), entertainment is traded against the ledger.
        """
        if not self.running:
            return
        valid, err = validate_quote(auction, ask_price, len(self.catalog))
        if not valid:
            logger.warning(f"Dropping invalid quote: {err}")
            return

        closed = closed or self.market.is_closed(auction)
        if closed or self.prices.is_closed(auction):
            if not self.prices.is_closed(auction):
                self.on_auction_closed(auction)
            return

        self.prices.observe(auction, ask_price)
        category = self.catalog.get(auction).category

        if category == Category.FLIGHT:
            need = self._need(auction)
            if need > 0 and self.prices.is_rising(auction):
                self._submit(Bid(auction).add_point(need, self.config.flight_ceiling))
        elif category == Category.HOTEL:
            if auction not in self.active_bids:
                self._bid_compulsory(auction)
        else:
            self._bid_entertainment(auction)

        self._failsafe_sweep()

    def on_category_quote(self, category: Category) -> None:
        """Handle a refresh of every quote in a category."""
        if not self.running:
            return

        if category == Category.HOTEL:
            self._reselect_all()
            for auction in self.hotels:
                self._bid_hotel(auction)
        elif category == Category.FLIGHT:
            if not self.initialized and self.market.game_time() >= self.config.warmup_ms:
                self._initial_sweep()
        else:
            self._update_entertainment()
            for auction in self.events:
                self._bid_entertainment(auction)

        self._failsafe_sweep()

    def on_auction_closed(self, auction: int) -> None:
        """
        Handle an auction closing for good.

        Owned units are credited first, then every open client moves away
        from the closed auction if it still needed it.
        """
        if not self.running:
            return

        self.prices.close(auction)
        self.active_bids.pop(auction, None)
        logger.info(f"Auction {auction} ({self.catalog.get(auction).describe()}) closed, "
                    f"own={self.market.own(auction)}")

        self._settle()
        self._reselect_all(closed_auction=auction)
        self._update_entertainment()
        self._failsafe_sweep()

    def on_transaction(self, auction: int, quantity: int, price: float) -> None:
        """
        Handle a completed trade.

        The paid price becomes the cost basis of the units credited next.
        A flight purchase changes trip costs, so every client reselects.
        """
        if not self.running:
            return
        if quantity > 0:
            self._paid[auction].extend([float(price)] * quantity)

        category = self.catalog.get(auction).category
        logger.debug(f"Transaction: auction={auction} qty={quantity} price={price:g}")

        if category == Category.FLIGHT:
            self.active_bids.pop(auction, None)
            self._settle()
            self._reselect_all()
        elif category == Category.HOTEL:
            self._settle()
        else:
            self.active_bids.pop(auction, None)
            self._update_entertainment()
            self._bid_entertainment(auction)

    def on_bid_rejected(self, bid: Bid, reason: str = "") -> None:
        """Log a rejected bid; the next relevant event will bid again."""
        logger.warning(f"Bid rejected: {bid} reason={reason}")
        self._forget(bid)

    def on_bid_error(self, bid: Bid, status: Any = None) -> None:
        """Log a bid error; the next relevant event will bid again."""
        logger.warning(f"Bid error in auction {bid.auction}: {status}")
        self._forget(bid)

    def _forget(self, bid: Bid) -> None:
        active = self.active_bids.get(bid.auction)
        if active is not None and active.signature() == bid.signature():
            del self.active_bids[bid.auction]

    # =========================================================================
    # Allocation
    # =========================================================================

    def _credited(self, auction: int) -> int:
        return sum(1 for c in self.clients if auction in c.owned)

    def _pool(self, auction: int) -> int:
        """Owned units not credited to any client."""
        return self.market.own(auction) - self._credited(auction)

    def _need(self, auction: int) -> int:
        """Units clients still want beyond what the pool can cover."""
        return max(0, self.table.client_demand(auction) - max(0, self._pool(auction)))

    def _basis(self, auction: int) -> float:
        """Cost basis for the next credited unit of an auction."""
        if self._paid[auction]:
            return self._paid[auction].pop(0)
        ask = self.prices.last_ask(auction)
        if ask is not None:
            return ask
        if self.prices.is_closed(auction):
            return 0.0
        return self.prices.estimate(auction)

    def _distribute_pool(self) -> None:
        """Credit unassigned owned flights and hotels to waiting clients."""
        for auction in self.flights + self.hotels:
            pool = self._pool(auction)
            if pool < 0:
                logger.warning(f"Auction {auction}: {self._credited(auction)} credited "
                               f"but only {self.market.own(auction)} owned")
                continue
            for client in self.clients:
                if pool <= 0:
                    break
                if not client.wants(auction):
                    continue
                client.assign(auction, self._basis(auction))
                pool -= 1

    def _settle(self) -> None:
        """Credit owned units, then check which clients are complete."""
        self._distribute_pool()
        for client in self.clients:
            client.evaluate_fulfillment()

    def _reselect_all(self, closed_auction: Optional[int] = None) -> None:
        for client in self.clients:
            if not client.fulfilled:
                client.reselect(closed_auction)
        self._settle()
        self.table.check()

    def _initial_sweep(self) -> None:
        """One-time trip refresh and bids once flight prices are known."""
        self.initialized = True
        logger.info(f"Initial bid sweep at t={self.market.game_time() / 1000:.0f}s")

        self._reselect_all()
        self._update_entertainment()

        for auction in self.flights:
            need = self._need(auction)
            if need > 0 and not self.prices.is_closed(auction):
                self._submit(Bid(auction).add_point(need, self.config.flight_ceiling))
        for auction in self.hotels:
            self._bid_hotel(auction)
        for auction in self.events:
            self._bid_entertainment(auction)

    # =========================================================================
    # Entertainment
    # =========================================================================

    def _update_entertainment(self) -> None:
        """Re-place owned tickets and refresh entertainment targets."""
        owned = {a: self.market.own(a) for a in self.events}
        self.tickets = self.assignor.reassign(self.clients, owned)

        for auction in self.events:
            target = self.tickets.assigned_count(auction)
            if not self.prices.is_closed(auction):
                gain, _ = self.assignor.marginal_bonus(self.clients, self.tickets, auction)
                if gain > 0:
                    target += 1
            self.table.set_base(auction, target)

    def _sell_reserve(self) -> float:
        progress = min(1.0, self.market.game_time() / max(1, self.market.game_length()))
        start = self.config.entertainment_reserve_start
        end = self.config.entertainment_reserve_end
        return start + (end - start) * progress

    def _bid_entertainment(self, auction: int) -> None:
        if self.prices.is_closed(auction):
            return
        delta = self.table.get(auction) - self.market.own(auction)
        if delta == 0:
            return

        bid = Bid(auction)
        if delta < 0:
            ask = self.prices.last_ask(auction)
            if ask is None:
                ask = self.market.ask_price(auction)
            price = max(ask + self.config.entertainment_sell_markup, self._sell_reserve())
            bid.add_point(delta, price)
        else:
            gain, _ = self.assignor.marginal_bonus(self.clients, self.tickets, auction)
            if gain <= 0:
                return
            discount = self.rng.uniform(
                self.config.entertainment_bid_low, self.config.entertainment_bid_high
            )
            bid.add_point(delta, gain * discount)
        self._submit(bid)

    # =========================================================================
    # Hotels
    # =========================================================================

    def _covered(self, auction: int) -> bool:
        """True when the active bid would already win every wanted unit."""
        return self.market.hypothetical_quantity_won(auction) >= self.table.get(auction)

    def _bid_compulsory(self, auction: int) -> None:
        if self._covered(auction):
            return
        base = self.table.base_demand(auction)
        if base > 0:
            self._submit(Bid(auction).add_point(base, self.config.compulsory_hotel_price))

    def _bid_hotel(self, auction: int, at_ceiling: bool = False) -> None:
        """
        One point per client wanting the night, priced at what the night is
        worth to that client, plus the compulsory claim.
        """
        if self.prices.is_closed(auction) or self._covered(auction):
            return

        bid = Bid(auction)
        for client in self.clients:
            if not client.wants(auction):
                continue
            if at_ceiling:
                price = self.config.hotel_ceiling
            else:
                value = client.trips.marginal_value(
                    client.selected, auction, self.prices, client.owned
                )
                price = min(value, self.config.hotel_ceiling)
            bid.add_point(1, price)

        base = self.table.base_demand(auction)
        if base > 0:
            bid.add_point(base, self.config.compulsory_hotel_price)
        if bid.points:
            self._submit(bid)

    # =========================================================================
    # Failsafe
    # =========================================================================

    def _failsafe_sweep(self) -> None:
        """Near the end, secure every missing flight and hotel at any price."""
        if self.market.game_time_left() > self.config.failsafe_ms:
            return
        if not self.failsafe:
            self.failsafe = True
            logger.warning("Entering failsafe mode: bidding ceiling prices for unmet needs")

        for auction in self.flights:
            need = self._need(auction)
            if need > 0 and not self.prices.is_closed(auction):
                self._submit(Bid(auction).add_point(need, self.config.flight_ceiling))
        for auction in self.hotels:
            if self.table.client_demand(auction) > 0:
                self._bid_hotel(auction, at_ceiling=True)

    # =========================================================================
    # Submission
    # =========================================================================

    def _submit(self, bid: Bid) -> bool:
        """
        Validate and send a bid, skipping exact repeats of the active bid.

        Returns:
            True if the bid was sent
        """
        valid, err = validate_bid(bid, len(self.catalog))
        if not valid:
            logger.error(f"Not submitting invalid bid {bid}: {err}")
            return False

        active = self.active_bids.get(bid.auction)
        if active is not None and active.signature() == bid.signature():
            return False

        self.market.submit_bid(bid)
        self.active_bids[bid.auction] = bid
        logger.debug(f"Submitted {bid}")
        return True

    # =========================================================================
    # Diagnostics
    # =========================================================================

    def verify_allocation(self) -> None:
        """
        Recompute client demand from the clients and compare to the ledger.

        Raises:
            AllocationDriftError: on any mismatch
        """
        expected: Dict[int, int] = defaultdict(int)
        for client in self.clients:
            if client.fulfilled:
                continue
            for auction in client.wanted():
                expected[auction] += 1
        for auction in self.catalog:
            a = auction.auction_id
            if self.table.client_demand(a) != expected.get(a, 0):
                raise AllocationDriftError(
                    f"Auction {a}: ledger has {self.table.client_demand(a)}, "
                    f"clients want {expected.get(a, 0)}"
                )
        self.table.check()

    def report(self) -> List[Dict[str, Any]]:
        """Per-client summary of trip, state and expected value."""
        return [
            {
                "client": c.client,
                "trip": repr(c.selected),
                "state": c.state.name,
                "owned": sorted(c.owned),
                "missing": c.wanted(),
                "tickets": self.tickets.tickets(c.client),
                "entertainment_bonus": self.tickets.bonus.get(c.client, 0.0),
                "utility": round(c.utility(), 2),
            }
            for c in self.clients
        ]
