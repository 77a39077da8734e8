"""
Allocation Table - the shared ledger of wanted quantities.

For every auction the table holds how many more units the clients want:

    table[a] = sum over clients of (1 if a is in the client's selected trip
               and the client does not own a unit of a)
             + base demand of a

Client demand moves only through add()/remove(), called in matched pairs
by ClientAgent. Base demand (compulsory hotel claims, entertainment
targets) is set directly by the bidding policy.
"""

from collections import defaultdict
from typing import Dict, Iterable

from tripbid.utils.logger import get_logger

logger = get_logger("allocation")


class AllocationDriftError(RuntimeError):
    """A ledger entry would go negative: add/remove calls are unbalanced."""


class AllocationTable:
    """
    Per-auction wanted quantities, split into client demand and base demand.
    """

    def __init__(self):
        self._client: Dict[int, int] = defaultdict(int)
        self._base: Dict[int, int] = defaultdict(int)

    # =========================================================================
    # Client Demand
    # =========================================================================

    def add(self, auctions: Iterable[int]) -> None:
        """Add one unit of client demand per auction."""
        for auction in auctions:
            self._client[auction] += 1

    def remove(self, auctions: Iterable[int]) -> None:
        """
        Remove one unit of client demand per auction.

        Raises:
            AllocationDriftError: if an entry would drop below zero
        """
        auctions = list(auctions)
        for auction in auctions:
            if self._client[auction] <= 0:
                raise AllocationDriftError(
                    f"Allocation for auction {auction} would go negative"
                )
        for auction in auctions:
            self._client[auction] -= 1

    def client_demand(self, auction: int) -> int:
        """Units clients want and do not own yet."""
        return self._client.get(auction, 0)

    # =========================================================================
    # Base Demand
    # =========================================================================

    def set_base(self, auction: int, quantity: int) -> None:
        """Set the client-independent demand for an auction."""
        if quantity < 0:
            raise AllocationDriftError(
                f"Base demand for auction {auction} must be >= 0, got {quantity}"
            )
        self._base[auction] = quantity

    def base_demand(self, auction: int) -> int:
        return self._base.get(auction, 0)

    # =========================================================================
    # Queries
    # =========================================================================

    def get(self, auction: int) -> int:
        """Total wanted quantity (client + base)."""
        return self.client_demand(auction) + self.base_demand(auction)

    def __getitem__(self, auction: int) -> int:
        return self.get(auction)

    def snapshot(self) -> Dict[int, int]:
        """Non-zero totals, for diagnostics and tests."""
        keys = set(self._client) | set(self._base)
        return {a: self.get(a) for a in sorted(keys) if self.get(a)}

    def check(self) -> None:
        """
        Verify no entry is negative.

        Raises:
            AllocationDriftError: on a negative entry
        """
        for auction, quantity in list(self._client.items()) + list(self._base.items()):
            if quantity < 0:
                raise AllocationDriftError(f"Negative allocation {quantity} for auction {auction}")

    def clear(self) -> None:
        self._client.clear()
        self._base.clear()
