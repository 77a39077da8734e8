"""
Unit tests for the auction catalog, bids and the simulated market.
"""

import pytest

from tripbid.core.market import (
    AUCTION_COUNT,
    AuctionCatalog,
    Bid,
    BidPoint,
    Category,
    EventType,
    FlightType,
    HotelTier,
)
from tripbid.sim.market import SimulatedMarket, random_preferences


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def catalog():
    return AuctionCatalog()


# =============================================================================
# Catalog Tests
# =============================================================================


class TestAuctionCatalog:
    """Stable auction ids."""

    def test_size(self, catalog):
        assert len(catalog) == AUCTION_COUNT == 28

    @pytest.mark.parametrize("day", [1, 2, 3, 4])
    def test_ids_per_day(self, catalog, day):
        assert catalog.inbound(day) == day - 1
        assert catalog.outbound(day + 1) == day + 3
        assert catalog.hotel(HotelTier.CHEAP, day) == 7 + day
        assert catalog.hotel(HotelTier.GOOD, day) == 11 + day

    def test_entertainment_ids(self, catalog):
        assert catalog.entertainment(EventType.ALLIGATOR_WRESTLING, 1) == 16
        assert catalog.entertainment(EventType.AMUSEMENT, 1) == 20
        assert catalog.entertainment(EventType.MUSEUM, 4) == 27

    def test_reverse_lookup(self, catalog):
        auction = catalog.get(13)
        assert auction.category == Category.HOTEL
        assert auction.kind == HotelTier.GOOD
        assert auction.day == 2
        assert auction.describe() == "HOTEL/GOOD day 2"

        flight = catalog.get(0)
        assert flight.is_flight
        assert flight.kind == FlightType.INBOUND

    def test_unknown(self, catalog):
        with pytest.raises(KeyError):
            catalog.get(28)
        with pytest.raises(ValueError):
            catalog.inbound(5)
        with pytest.raises(ValueError):
            catalog.outbound(1)

    def test_by_category(self, catalog):
        assert len(catalog.by_category(Category.FLIGHT)) == 8
        assert len(catalog.by_category(Category.HOTEL)) == 8
        assert len(catalog.by_category(Category.ENTERTAINMENT)) == 12


# =============================================================================
# Bid Tests
# =============================================================================


class TestBid:
    """Bid point bookkeeping."""

    def test_points_sorted_by_price(self):
        bid = Bid(12).add_point(1, 50).add_point(1, 140).add_point(1, 1)
        assert [p.price for p in bid.points] == [140.0, 50.0, 1.0]
        assert bid.quantity == 3

    def test_same_price_merged(self):
        bid = Bid(12).add_point(1, 140.0).add_point(1, 140.004)
        assert bid.points == [BidPoint(2, 140.0)]

    def test_cancelling_points_removed(self):
        bid = Bid(20).add_point(2, 80.0).add_point(-2, 80.0)
        assert bid.points == []
        assert Bid(20).add_point(0, 80.0).points == []

    def test_sell(self):
        bid = Bid(24).add_point(-1, 150.0)
        assert bid.is_sell
        assert bid.quantity == -1

    def test_signature(self):
        first = Bid(12).add_point(2, 140.0).add_point(1, 1.0)
        second = Bid(12).add_point(1, 1.0).add_point(2, 140.0)
        assert first.signature() == second.signature()
        assert first.signature() != Bid(13).add_point(2, 140.0).signature()


# =============================================================================
# Simulated Market Tests
# =============================================================================


class TestSimulatedMarket:
    """In-memory market bookkeeping."""

    @pytest.fixture
    def market(self):
        import random
        return SimulatedMarket(random_preferences(random.Random(7)))

    def test_random_preferences_valid(self):
        import random
        prefs = random_preferences(random.Random(3), 8)
        assert [p.client for p in prefs] == list(range(8))
        assert all(p.arrival < p.departure for p in prefs)

    def test_clock(self, market):
        market.advance(100_000)
        assert market.game_time() == 100_000
        assert market.game_time_left() == 440_000
        market.advance(1_000_000)
        assert market.game_time_left() == 0

    def test_grant_and_take(self, market):
        market.grant(16, 2, 50.0)
        market.take(16, 1, 90.0)
        assert market.own(16) == 1
        assert market.spent == 100.0
        assert market.revenue == 90.0
        with pytest.raises(ValueError):
            market.take(16, 2)

    def test_submit(self, market):
        bid = Bid(0).add_point(1, 400.0)
        market.submit_bid(bid)
        assert market.active[0] is bid
        assert market.bids_for(0) == [bid]

    def test_invalid_bid_raises(self, market):
        with pytest.raises(ValueError):
            market.submit_bid(Bid(0))

    def test_closed_auction_rejects(self, market):
        market.close(12)
        market.submit_bid(Bid(12).add_point(1, 100.0))
        assert market.is_closed(12)
        assert market.submitted == []
        assert len(market.rejected) == 1
