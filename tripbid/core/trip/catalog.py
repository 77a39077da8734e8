"""
Trip Catalog - itinerary enumeration and the trip utility model.

A trip is an (arrival, departure, hotel tier) triple. Its resources are
one inbound flight, one outbound flight and one hotel night per day of
the stay. Utility is never stored: prices and ownership move all game,
so it is recomputed on every comparison.

    utility = BASE
            - travel penalty
            - flight cost          (zero for legs the client already owns)
            - hotel cost           (zero for nights the client already owns)
            + hotel bonus          (good tier only)
            + entertainment heuristic
            - sunk cost of owned items the trip does not use
"""

from dataclasses import dataclass
from typing import List, Mapping, Optional, Tuple

from tripbid.core.config import EngineConfig
from tripbid.core.market.auction import AuctionCatalog, HotelTier
from tripbid.core.pricing import PriceModel
from tripbid.core.trip.preferences import ClientPreferences
from tripbid.utils.logger import get_logger

logger = get_logger("trips")

# Maximum number of entertainment tickets a client can use on one trip
MAX_EVENTS_PER_TRIP = 3


# =============================================================================
# Trip
# =============================================================================


@dataclass(frozen=True)
class Trip:
    """
    A candidate itinerary.

    Attributes:
        arrival: Arrival day (inbound flight day)
        departure: Departure day (outbound flight day), > arrival
        tier: Hotel tier for every night
        inbound: Inbound flight auction id
        outbound: Outbound flight auction id
        hotels: Hotel auction id per night, in day order
    """
    arrival: int
    departure: int
    tier: HotelTier
    inbound: int
    outbound: int
    hotels: Tuple[int, ...]

    @property
    def nights(self) -> int:
        return self.departure - self.arrival

    @property
    def resources(self) -> Tuple[int, ...]:
        """Every auction this trip needs one unit of."""
        return (self.inbound, self.outbound) + self.hotels

    def uses(self, auction: int) -> bool:
        return auction in self.resources

    def covers(self, day: int) -> bool:
        """True if the client is in town (has a hotel night) on this day."""
        return self.arrival <= day < self.departure

    def __repr__(self) -> str:
        return f"Trip({self.arrival}->{self.departure}, {self.tier.name})"


def make_trip(catalog: AuctionCatalog, arrival: int, departure: int, tier: HotelTier) -> Trip:
    """Build a trip, resolving its resource auctions."""
    if arrival >= departure:
        raise ValueError(f"arrival ({arrival}) must be before departure ({departure})")
    return Trip(
        arrival=arrival,
        departure=departure,
        tier=tier,
        inbound=catalog.inbound(arrival),
        outbound=catalog.outbound(departure),
        hotels=tuple(catalog.hotel(tier, day) for day in range(arrival, departure)),
    )


# =============================================================================
# Utility Terms
# =============================================================================


def travel_penalty(trip: Trip, prefs: ClientPreferences, per_day: float) -> float:
    """Penalty for arriving late and leaving early."""
    late = max(0, trip.arrival - prefs.arrival)
    early = max(0, prefs.departure - trip.departure)
    return per_day * (late + early)


def hotel_bonus(trip: Trip, prefs: ClientPreferences) -> float:
    return prefs.hotel_bonus if trip.tier == HotelTier.GOOD else 0.0


def entertainment_heuristic(prefs: ClientPreferences, nights: int, factor: float) -> float:
    """
    Closed-form stand-in for the entertainment value of a stay.

    Sums the client's top min(3, nights) event bonuses and scales the sum
    by factor. Real ticket placement is done by the EntertainmentAssignor;
    how well this tracks it is unknown.
    """
    slots = min(MAX_EVENTS_PER_TRIP, nights)
    bonuses = [bonus for _, bonus in prefs.ranked_event_bonuses()]
    return factor * sum(bonuses[:slots])


def resource_cost(trip: Trip, prices: PriceModel, owned: Mapping[int, float]) -> float:
    """Cost of the flights and hotel nights the client does not own yet."""
    return sum(prices.estimate(a) for a in trip.resources if a not in owned)


def sunk_cost(trip: Trip, owned: Mapping[int, float]) -> float:
    """Cost basis of owned items this trip would leave unused."""
    return sum(basis for a, basis in owned.items() if not trip.uses(a))


# =============================================================================
# Trip Catalog
# =============================================================================


class TripCatalog:
    """
    All feasible trips for one client, plus the utility function.

    Trips only ever shrink the preferred stay. They are enumerated by
    arrival ascending, departure descending, good tier first, so the
    exact-preference good-tier trip comes first and wins ties.
    """

    def __init__(
        self,
        prefs: ClientPreferences,
        catalog: AuctionCatalog,
        config: Optional[EngineConfig] = None,
    ):
        self.prefs = prefs
        self.catalog = catalog
        self.config = config or EngineConfig()
        self.trips: List[Trip] = self._enumerate()

    def _enumerate(self) -> List[Trip]:
        trips = []
        for arrival in range(self.prefs.arrival, self.prefs.departure):
            for departure in range(self.prefs.departure, arrival, -1):
                for tier in (HotelTier.GOOD, HotelTier.CHEAP):
                    trips.append(make_trip(self.catalog, arrival, departure, tier))
        return trips

    def __len__(self) -> int:
        return len(self.trips)

    def __iter__(self):
        return iter(self.trips)

    def utility(
        self,
        trip: Trip,
        prices: PriceModel,
        owned: Optional[Mapping[int, float]] = None,
    ) -> float:
        """
        Utility of a trip under current estimates.

        Args:
            trip: Trip to score
            prices: Current price estimates
            owned: Auctions the client holds a unit of, mapped to cost basis

        Returns:
            Estimated utility (value minus remaining cost)
        """
        owned = owned or {}
        return (
            self.config.base_utility
            - travel_penalty(trip, self.prefs, self.config.travel_penalty)
            - resource_cost(trip, prices, owned)
            + hotel_bonus(trip, self.prefs)
            + entertainment_heuristic(self.prefs, trip.nights, self.config.entertainment_factor)
            - sunk_cost(trip, owned)
        )

    def optimal(
        self,
        prices: PriceModel,
        owned: Optional[Mapping[int, float]] = None,
        excluding: Optional[int] = None,
    ) -> Optional[Trip]:
        """
        Trip of strictly maximal utility (first one wins ties).

        Args:
            prices: Current price estimates
            owned: Client's owned items (auction -> cost basis)
            excluding: Only consider trips that do not use this auction

        Returns:
            Best trip, or None if every trip uses the excluded auction
        """
        best: Optional[Trip] = None
        best_utility = 0.0
        for trip in self.trips:
            if excluding is not None and trip.uses(excluding):
                continue
            value = self.utility(trip, prices, owned)
            if best is None or value > best_utility:
                best = trip
                best_utility = value
        return best

    def marginal_value(
        self,
        trip: Trip,
        auction: int,
        prices: PriceModel,
        owned: Optional[Mapping[int, float]] = None,
    ) -> float:
        """
        Most the client should pay for one unit of an auction of its trip.

        The estimate already priced into the trip, plus the utility lost by
        falling back to the best trip that avoids the auction.
        """
        value = prices.estimate(auction) + self.utility(trip, prices, owned)
        fallback = self.optimal(prices, owned, excluding=auction)
        if fallback is None:
            return value
        return value - self.utility(fallback, prices, owned)
