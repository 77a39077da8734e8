"""Client preferences, trip enumeration and utility"""
from tripbid.core.trip.preferences import ClientPreferences
from tripbid.core.trip.catalog import (
    Trip,
    TripCatalog,
    make_trip,
    travel_penalty,
    hotel_bonus,
    entertainment_heuristic,
    resource_cost,
    sunk_cost,
    MAX_EVENTS_PER_TRIP,
)

__all__ = [
    "ClientPreferences",
    "Trip",
    "TripCatalog",
    "make_trip",
    "travel_penalty",
    "hotel_bonus",
    "entertainment_heuristic",
    "resource_cost",
    "sunk_cost",
    "MAX_EVENTS_PER_TRIP",
]
