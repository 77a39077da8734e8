"""
Bids - the only thing the engine ever sends to the auction collaborator.

A bid targets one auction and carries one or more (quantity, price)
points. A negative quantity offers owned units for sale.
"""

from dataclasses import dataclass, field
from typing import List, Tuple


@dataclass(frozen=True)
class BidPoint:
    """One (quantity, price) step of a bid."""
    quantity: int
    price: float


@dataclass
class Bid:
    """
    A bid submission for a single auction.

    Attributes:
        auction: Target auction id
        points: Bid points, merged so every price appears once
    """
    auction: int
    points: List[BidPoint] = field(default_factory=list)

    def add_point(self, quantity: int, price: float) -> "Bid":
        """Add a point, merging with an existing point at the same price."""
        if quantity == 0:
            return self
        price = round(float(price), 2)
        for i, point in enumerate(self.points):
            if point.price == price:
                merged = point.quantity + quantity
                if merged == 0:
                    del self.points[i]
                else:
                    self.points[i] = BidPoint(merged, price)
                return self
        self.points.append(BidPoint(quantity, price))
        self.points.sort(key=lambda p: -p.price)
        return self

    @property
    def quantity(self) -> int:
        """Net quantity over all points."""
        return sum(p.quantity for p in self.points)

    @property
    def is_sell(self) -> bool:
        return any(p.quantity < 0 for p in self.points)

    def signature(self) -> Tuple[int, Tuple[Tuple[int, float], ...]]:
        """Hashable summary, used to suppress duplicate submissions."""
        return self.auction, tuple((p.quantity, p.price) for p in self.points)

    def __repr__(self) -> str:
        pts = ", ".join(f"{p.quantity}@{p.price:g}" for p in self.points)
        return f"Bid(auction={self.auction}, [{pts}])"
