"""
Unit tests for client preferences, trip enumeration and trip utility.

Tests cover:
1. Preference validation
2. Trip enumeration order and resources
3. Utility terms and the full utility formula
4. Optimal trip selection, with and without exclusions
5. Marginal value of a trip resource
"""

import pytest
from pydantic import ValidationError

from tripbid.core.config import EngineConfig
from tripbid.core.market import AuctionCatalog, EventType, HotelTier
from tripbid.core.pricing import PriceModel, UNAVAILABLE_COST
from tripbid.core.trip import (
    ClientPreferences,
    TripCatalog,
    entertainment_heuristic,
    make_trip,
    sunk_cost,
    travel_penalty,
)


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def catalog():
    return AuctionCatalog()


@pytest.fixture
def config():
    return EngineConfig()


@pytest.fixture
def prices(catalog, config):
    return PriceModel(catalog, config)


@pytest.fixture
def prefs():
    """Client wanting days 1..3, a good hotel and two kinds of fun."""
    return ClientPreferences(
        client=0, arrival=1, departure=3, hotel_bonus=150,
        alligator_wrestling=120, amusement=80, museum=40,
    )


@pytest.fixture
def trips(prefs, catalog, config):
    return TripCatalog(prefs, catalog, config)


def find(trips, arrival, departure, tier):
    return next(
        t for t in trips
        if (t.arrival, t.departure, t.tier) == (arrival, departure, tier)
    )


# =============================================================================
# Preference Tests
# =============================================================================


class TestClientPreferences:
    """Validation of stated preferences."""

    def test_arrival_must_precede_departure(self):
        with pytest.raises(ValidationError):
            ClientPreferences(client=0, arrival=3, departure=3, hotel_bonus=50)

    def test_day_bounds(self):
        with pytest.raises(ValidationError):
            ClientPreferences(client=0, arrival=0, departure=2, hotel_bonus=50)
        with pytest.raises(ValidationError):
            ClientPreferences(client=0, arrival=1, departure=6, hotel_bonus=50)

    def test_negative_bonus_rejected(self):
        with pytest.raises(ValidationError):
            ClientPreferences(client=0, arrival=1, departure=2, hotel_bonus=-1)

    def test_frozen(self, prefs):
        """Preferences cannot be modified once created."""
        with pytest.raises(ValidationError):
            prefs.hotel_bonus = 10

    def test_ranked_bonuses(self, prefs):
        ranked = prefs.ranked_event_bonuses()
        assert [e for e, _ in ranked] == [
            EventType.ALLIGATOR_WRESTLING, EventType.AMUSEMENT, EventType.MUSEUM,
        ]
        assert prefs.event_bonus(EventType.MUSEUM) == 40
        assert prefs.nights == 2


# =============================================================================
# Enumeration Tests
# =============================================================================


class TestEnumeration:
    """Trips shrink the preferred stay, never extend it."""

    def test_count_and_order(self, trips):
        listed = [(t.arrival, t.departure, t.tier) for t in trips]
        assert listed == [
            (1, 3, HotelTier.GOOD), (1, 3, HotelTier.CHEAP),
            (1, 2, HotelTier.GOOD), (1, 2, HotelTier.CHEAP),
            (2, 3, HotelTier.GOOD), (2, 3, HotelTier.CHEAP),
        ]

    def test_resources(self, trips):
        """Exact good trip needs inbound 1, outbound 3 and good nights 1, 2."""
        first = trips.trips[0]
        assert first.resources == (0, 5, 12, 13)
        assert first.nights == 2
        assert first.covers(1) and first.covers(2)
        assert not first.covers(3)

    def test_single_night_stay(self, catalog, config):
        prefs = ClientPreferences(client=1, arrival=4, departure=5, hotel_bonus=60)
        trips = TripCatalog(prefs, catalog, config)
        assert len(trips) == 2

    def test_full_week_count(self, catalog, config):
        prefs = ClientPreferences(client=1, arrival=1, departure=5, hotel_bonus=60)
        assert len(TripCatalog(prefs, catalog, config)) == 20

    def test_make_trip_rejects_empty_stay(self, catalog):
        with pytest.raises(ValueError):
            make_trip(catalog, 3, 3, HotelTier.CHEAP)


# =============================================================================
# Utility Tests
# =============================================================================


class TestUtility:
    """Utility formula and its terms."""

    def test_travel_penalty(self, trips, prefs):
        assert travel_penalty(find(trips, 1, 3, HotelTier.GOOD), prefs, 100) == 0
        assert travel_penalty(find(trips, 1, 2, HotelTier.GOOD), prefs, 100) == 100
        assert travel_penalty(find(trips, 2, 3, HotelTier.CHEAP), prefs, 100) == 100

    def test_entertainment_heuristic(self, prefs):
        """Top min(3, nights) bonuses, halved."""
        assert entertainment_heuristic(prefs, 1, 0.5) == 60
        assert entertainment_heuristic(prefs, 2, 0.5) == 100
        assert entertainment_heuristic(prefs, 4, 0.5) == 120

    def test_seeded_utilities(self, trips, prices):
        """Utilities with seed prices only."""
        assert trips.utility(find(trips, 1, 3, HotelTier.GOOD), prices) == 375
        assert trips.utility(find(trips, 1, 3, HotelTier.CHEAP), prices) == 280
        assert trips.utility(find(trips, 1, 2, HotelTier.GOOD), prices) == 330
        assert trips.utility(find(trips, 2, 3, HotelTier.GOOD), prices) == 315

    def test_owned_resources_are_free(self, trips, prices):
        trip = find(trips, 1, 3, HotelTier.GOOD)
        assert trips.utility(trip, prices, {0: 320.0}) == 375 + 350

    def test_unused_owned_items_are_sunk(self, trips, prices):
        """Owning the cheap night 1 costs the good trip its basis."""
        trip = find(trips, 1, 3, HotelTier.GOOD)
        assert sunk_cost(trip, {8: 45.0}) == 45.0
        assert trips.utility(trip, prices, {8: 45.0}) == 375 - 45

    def test_closed_resource_uses_sentinel(self, trips, prices, catalog):
        prices.close(catalog.hotel(HotelTier.GOOD, 2))
        trip = find(trips, 1, 3, HotelTier.GOOD)
        assert trips.utility(trip, prices) == 375 + 95 - UNAVAILABLE_COST
        assert len(trips) == 6


# =============================================================================
# Selection Tests
# =============================================================================


class TestOptimal:
    """Choosing the best trip."""

    def test_exact_good_trip_wins(self, trips, prices):
        assert trips.optimal(prices) == find(trips, 1, 3, HotelTier.GOOD)

    @pytest.mark.parametrize("bonus", [0, 54, 55, 56, 150])
    def test_tier_choice(self, catalog, config, prices, bonus):
        """Good tier is kept while its bonus covers the 55 seed difference."""
        prefs = ClientPreferences(client=0, arrival=1, departure=3, hotel_bonus=bonus)
        trips = TripCatalog(prefs, catalog, config)
        expected = HotelTier.GOOD if bonus >= 55 else HotelTier.CHEAP
        assert trips.optimal(prices).tier == expected

    def test_excluding_hotel(self, trips, prices):
        assert trips.optimal(prices, excluding=13) == find(trips, 1, 2, HotelTier.GOOD)

    def test_excluding_inbound(self, trips, prices):
        assert trips.optimal(prices, excluding=0) == find(trips, 2, 3, HotelTier.GOOD)

    def test_nothing_avoids_exclusion(self, catalog, config, prices):
        prefs = ClientPreferences(client=0, arrival=1, departure=2, hotel_bonus=100)
        trips = TripCatalog(prefs, catalog, config)
        assert trips.optimal(prices, excluding=0) is None

    def test_expensive_flight_shortens_trip(self, trips, prices, catalog):
        prices.observe(catalog.outbound(3), 900.0)
        assert trips.optimal(prices) == find(trips, 1, 2, HotelTier.GOOD)


class TestMarginalValue:
    """Most a client should pay for a resource of its trip."""

    def test_hotel_night(self, trips, prices):
        trip = find(trips, 1, 3, HotelTier.GOOD)
        assert trips.marginal_value(trip, 13, prices) == 140

    def test_no_fallback(self, catalog, config, prices):
        """Without an alternative the whole utility plus estimate is at stake."""
        prefs = ClientPreferences(client=0, arrival=1, departure=2, hotel_bonus=100)
        trips = TripCatalog(prefs, catalog, config)
        trip = trips.optimal(prices)
        assert trips.marginal_value(trip, 0, prices) == (
            prices.estimate(0) + trips.utility(trip, prices)
        )
