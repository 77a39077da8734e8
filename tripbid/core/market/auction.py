"""
Auction catalog - the fixed set of auctions in one travel game.

Every game runs 28 auctions:
- Flights: inbound days 1..4, outbound days 2..5
- Hotels: cheap and good tier, nights 1..4
- Entertainment: three event types, days 1..4

Auction ids are stable across games so the engine can key all of its
per-auction state by plain integers.
"""

from dataclasses import dataclass
from enum import IntEnum
from typing import Dict, Iterator, List, Tuple


# =============================================================================
# Enums
# =============================================================================


class Category(IntEnum):
    """Resource category of an auction."""
    FLIGHT = 0
    HOTEL = 1
    ENTERTAINMENT = 2


class FlightType(IntEnum):
    """Direction of a flight."""
    OUTBOUND = 0      # Leaves town on the departure day
    INBOUND = 1       # Arrives in town on the arrival day


class HotelTier(IntEnum):
    """Hotel tier."""
    CHEAP = 0
    GOOD = 1


class EventType(IntEnum):
    """Entertainment ticket kind."""
    ALLIGATOR_WRESTLING = 1
    AMUSEMENT = 2
    MUSEUM = 3


# =============================================================================
# Constants
# =============================================================================

NIGHTS = (1, 2, 3, 4)
INBOUND_DAYS = (1, 2, 3, 4)
OUTBOUND_DAYS = (2, 3, 4, 5)
AUCTION_COUNT = 28


# =============================================================================
# Auction
# =============================================================================


@dataclass(frozen=True)
class Auction:
    """
    Immutable description of one auction.

    Attributes:
        auction_id: Stable integer id (0..27)
        category: Resource category
        kind: FlightType, HotelTier or EventType depending on category
        day: Day the resource is used on
    """
    auction_id: int
    category: Category
    kind: int
    day: int

    @property
    def is_flight(self) -> bool:
        return self.category == Category.FLIGHT

    @property
    def is_hotel(self) -> bool:
        return self.category == Category.HOTEL

    @property
    def is_entertainment(self) -> bool:
        return self.category == Category.ENTERTAINMENT

    def describe(self) -> str:
        """Human readable name, e.g. 'HOTEL/GOOD day 2'."""
        if self.is_flight:
            kind = FlightType(self.kind).name
        elif self.is_hotel:
            kind = HotelTier(self.kind).name
        else:
            kind = EventType(self.kind).name
        return f"{self.category.name}/{kind} day {self.day}"

    def __repr__(self) -> str:
        return f"Auction({self.auction_id}, {self.describe()})"


# =============================================================================
# Catalog
# =============================================================================


class AuctionCatalog:
    """
    Lookup table between auction ids and (category, kind, day).
    """

    def __init__(self):
        self._auctions: List[Auction] = []
        self._index: Dict[Tuple[int, int, int], int] = {}

        for day in INBOUND_DAYS:
            self._add(Category.FLIGHT, FlightType.INBOUND, day)
        for day in OUTBOUND_DAYS:
            self._add(Category.FLIGHT, FlightType.OUTBOUND, day)
        for tier in (HotelTier.CHEAP, HotelTier.GOOD):
            for day in NIGHTS:
                self._add(Category.HOTEL, tier, day)
        for event in EventType:
            for day in NIGHTS:
                self._add(Category.ENTERTAINMENT, event, day)

    def _add(self, category: Category, kind: int, day: int) -> None:
        auction = Auction(len(self._auctions), category, int(kind), day)
        self._auctions.append(auction)
        self._index[(int(category), int(kind), day)] = auction.auction_id

    def __len__(self) -> int:
        return len(self._auctions)

    def __iter__(self) -> Iterator[Auction]:
        return iter(self._auctions)

    def get(self, auction_id: int) -> Auction:
        """Get auction metadata by id."""
        if not 0 <= auction_id < len(self._auctions):
            raise KeyError(f"Unknown auction id {auction_id}")
        return self._auctions[auction_id]

    def auction_for(self, category: Category, kind: int, day: int) -> int:
        """
        Reverse lookup of an auction id.

        Raises:
            ValueError: if no auction sells that resource
        """
        key = (int(category), int(kind), day)
        if key not in self._index:
            raise ValueError(f"No auction for category={category!r} kind={kind} day={day}")
        return self._index[key]

    def inbound(self, day: int) -> int:
        return self.auction_for(Category.FLIGHT, FlightType.INBOUND, day)

    def outbound(self, day: int) -> int:
        return self.auction_for(Category.FLIGHT, FlightType.OUTBOUND, day)

    def hotel(self, tier: HotelTier, day: int) -> int:
        return self.auction_for(Category.HOTEL, tier, day)

    def entertainment(self, event: EventType, day: int) -> int:
        return self.auction_for(Category.ENTERTAINMENT, event, day)

    def by_category(self, category: Category) -> List[Auction]:
        """All auctions of one category, in id order."""
        return [a for a in self._auctions if a.category == category]
