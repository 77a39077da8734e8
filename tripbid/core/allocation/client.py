"""
Client Agent - one itinerary holder and its claim on the shared ledger.

Each client keeps a selected trip and the set of auctions it has been
credited with. It is the only writer of client demand in the
AllocationTable: every change of selected trip removes the old trip's
unowned resources and adds the new trip's, in one place (reselect).

States:
    BUILDING  -> has a selected trip, still missing resources
    FULFILLED -> owns every resource of its trip (terminal for the game)
"""

from enum import IntEnum
from typing import Dict, List, Optional

from tripbid.core.allocation.table import AllocationTable
from tripbid.core.config import EngineConfig
from tripbid.core.market.auction import AuctionCatalog
from tripbid.core.pricing import PriceModel
from tripbid.core.trip.catalog import Trip, TripCatalog
from tripbid.core.trip.preferences import ClientPreferences
from tripbid.utils.logger import get_logger

logger = get_logger("client")


class ClientState(IntEnum):
    """Lifecycle state of a client."""
    BUILDING = 0
    FULFILLED = 1


class ClientAgent:
    """
    Trip selection and ownership for one client.

    Attributes:
        prefs: The client's stated preferences
        trips: Enumerated trips and the utility function
        selected: Currently selected trip
        owned: Auctions credited to this client, mapped to cost basis
        state: BUILDING or FULFILLED
    """

    def __init__(
        self,
        prefs: ClientPreferences,
        catalog: AuctionCatalog,
        prices: PriceModel,
        table: AllocationTable,
        config: Optional[EngineConfig] = None,
    ):
        self.prefs = prefs
        self.prices = prices
        self.table = table
        self.trips = TripCatalog(prefs, catalog, config)
        self.owned: Dict[int, float] = {}
        self.state = ClientState.BUILDING

        self.selected: Trip = self.trips.optimal(prices, self.owned)
        self.table.add(self.wanted())
        logger.debug(f"Client {self.client} starts with {self.selected}")

    @property
    def client(self) -> int:
        return self.prefs.client

    @property
    def fulfilled(self) -> bool:
        return self.state == ClientState.FULFILLED

    def wanted(self) -> List[int]:
        """Resources of the selected trip not owned yet."""
        return [a for a in self.selected.resources if a not in self.owned]

    def wants(self, auction: int) -> bool:
        return not self.fulfilled and self.selected.uses(auction) and auction not in self.owned

    def utility(self) -> float:
        """Estimated utility of the selected trip."""
        return self.trips.utility(self.selected, self.prices, self.owned)

    # =========================================================================
    # Trip Selection
    # =========================================================================

    def reselect(self, closed_auction: Optional[int] = None) -> List[int]:
        """
        Re-pick the optimal trip under current prices and ownership.

        Args:
            closed_auction: An auction that just closed. If the selected trip
                needs it and it is not owned, the best trip avoiding it is
                preferred.

        Returns:
            Auctions released back to the shared pool
        """
        if self.fulfilled:
            return []

        self.table.remove(self.wanted())

        best = None
        if closed_auction is not None and self.wants(closed_auction):
            best = self.trips.optimal(self.prices, self.owned, excluding=closed_auction)
            if best is None:
                logger.warning(
                    f"Client {self.client}: no trip avoids closed auction {closed_auction}"
                )
        if best is None:
            best = self.trips.optimal(self.prices, self.owned)

        lost = [a for a in best.resources if a not in self.owned and self.prices.is_closed(a)]
        if lost:
            logger.warning(
                f"Client {self.client}: best trip {best} still needs closed auctions {lost}"
            )

        if best != self.selected:
            logger.info(f"Client {self.client}: {self.selected} -> {best}")
        self.selected = best

        released = [a for a in list(self.owned) if not best.uses(a)]
        for auction in released:
            self.release(auction)

        self.table.add(self.wanted())
        return released

    # =========================================================================
    # Ownership
    # =========================================================================

    def assign(self, auction: int, basis: float) -> bool:
        """
        Credit a won unit to this client.

        Only accepted when the selected trip needs the auction and the
        client does not hold a unit yet.

        Returns:
            True if the unit was credited
        """
        if not self.wants(auction):
            return False
        self.owned[auction] = basis
        self.table.remove([auction])
        logger.debug(f"Client {self.client} credited with auction {auction} (basis {basis:g})")
        return True

    def release(self, auction: int) -> float:
        """Give up a credited unit; returns its cost basis."""
        basis = self.owned.pop(auction)
        logger.debug(f"Client {self.client} released auction {auction}")
        return basis

    def evaluate_fulfillment(self) -> bool:
        """
        Check whether every resource of the selected trip is owned.

        On the first success the client becomes FULFILLED and drops any
        credited item its trip does not use.

        Returns:
            True if the client is fulfilled
        """
        if self.fulfilled:
            return True
        if self.wanted():
            return False

        self.state = ClientState.FULFILLED
        for auction in [a for a in self.owned if not self.selected.uses(a)]:
            self.release(auction)
        logger.info(f"Client {self.client} fulfilled with {self.selected}")
        return True
