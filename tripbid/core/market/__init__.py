"""Auction catalog, bids and the collaborator protocol"""
from tripbid.core.market.auction import (
    Auction,
    AuctionCatalog,
    Category,
    FlightType,
    HotelTier,
    EventType,
    AUCTION_COUNT,
    NIGHTS,
)
from tripbid.core.market.bid import Bid, BidPoint
from tripbid.core.market.view import MarketView

__all__ = [
    "Auction",
    "AuctionCatalog",
    "Category",
    "FlightType",
    "HotelTier",
    "EventType",
    "AUCTION_COUNT",
    "NIGHTS",
    "Bid",
    "BidPoint",
    "MarketView",
]
