"""
Entertainment Assignor - places owned tickets on clients.

Rules of use: a client attends at most one event per day, at most one
event of each type, and at most min(3, nights) events per trip, all on
days its selected trip covers.

Placement is greedy. Tickets are offered one unit at a time, type by type
in day order. Each ticket goes to the first client (highest bonus for its
type first) that can use it, either in a free slot or by displacing a
lower-bonus ticket. Displaced tickets are offered again. Every
displacement strictly raises the total bonus, so the loop terminates.
"""

from collections import deque
from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

from tripbid.core.allocation.client import ClientAgent
from tripbid.core.market.auction import AuctionCatalog, EventType, NIGHTS
from tripbid.core.trip.catalog import MAX_EVENTS_PER_TRIP
from tripbid.utils.logger import get_logger

logger = get_logger("entertainment")


@dataclass
class TicketAssignment:
    """
    Result of one placement pass.

    Attributes:
        held: client -> {day: auction}
        bonus: client -> realized entertainment bonus
        unassigned: auction -> owned units nobody can use
    """
    held: Dict[int, Dict[int, int]] = field(default_factory=dict)
    bonus: Dict[int, float] = field(default_factory=dict)
    unassigned: Dict[int, int] = field(default_factory=dict)

    def assigned_count(self, auction: int) -> int:
        return sum(1 for days in self.held.values() for a in days.values() if a == auction)

    def tickets(self, client: int) -> List[int]:
        return sorted(self.held.get(client, {}).values())

    @property
    def total_bonus(self) -> float:
        return sum(self.bonus.values())


class EntertainmentAssignor:
    """
    Greedy ticket placement and marginal ticket valuation.
    """

    def __init__(self, catalog: AuctionCatalog):
        self.catalog = catalog

    def _slots(self, client: ClientAgent) -> int:
        return min(MAX_EVENTS_PER_TRIP, client.selected.nights)

    def _event(self, auction: int) -> Tuple[EventType, int]:
        info = self.catalog.get(auction)
        return EventType(info.kind), info.day

    def _gain(
        self,
        client: ClientAgent,
        held: Dict[int, int],
        event: EventType,
        day: int,
    ) -> Tuple[float, Optional[int]]:
        """
        Bonus gained by giving the client one ticket for (event, day).

        Returns:
            (gain, day of the ticket that would be displaced or None)
        """
        bonus = client.prefs.event_bonus(event)
        if bonus <= 0 or not client.selected.covers(day):
            return 0.0, None
        if any(self._event(a)[0] == event for a in held.values()):
            return 0.0, None

        def value(d: int) -> float:
            return client.prefs.event_bonus(self._event(held[d])[0])

        if day in held:
            if value(day) < bonus:
                return bonus - value(day), day
            return 0.0, None
        if len(held) < self._slots(client):
            return bonus, None
        weakest = min(held, key=value)
        if value(weakest) < bonus:
            return bonus - value(weakest), weakest
        return 0.0, None

    def reassign(
        self,
        clients: Sequence[ClientAgent],
        owned: Mapping[int, int],
    ) -> TicketAssignment:
        """
        Place every owned ticket.

        Args:
            clients: All clients of the game, in index order
            owned: Owned units per entertainment auction

        Returns:
            TicketAssignment with per-client tickets and realized bonus
        """
        held: Dict[int, Dict[int, int]] = {c.client: {} for c in clients}
        unassigned: Dict[int, int] = {}

        queue = deque()
        for event in EventType:
            for day in NIGHTS:
                auction = self.catalog.entertainment(event, day)
                queue.extend([auction] * max(0, owned.get(auction, 0)))

        while queue:
            auction = queue.popleft()
            event, day = self._event(auction)
            ranked = sorted(clients, key=lambda c: -c.prefs.event_bonus(event))

            for client in ranked:
                gain, displaced_day = self._gain(client, held[client.client], event, day)
                if gain <= 0:
                    continue
                if displaced_day is not None:
                    queue.append(held[client.client].pop(displaced_day))
                held[client.client][day] = auction
                break
            else:
                unassigned[auction] = unassigned.get(auction, 0) + 1

        bonus = {
            c.client: sum(c.prefs.event_bonus(self._event(a)[0]) for a in held[c.client].values())
            for c in clients
        }
        return TicketAssignment(held=held, bonus=bonus, unassigned=unassigned)

    def marginal_bonus(
        self,
        clients: Sequence[ClientAgent],
        assignment: TicketAssignment,
        auction: int,
    ) -> Tuple[float, Optional[int]]:
        """
        Value of one more ticket from an auction to the best-fit client.

        Returns:
            (bonus gain, client index or None if no client gains)
        """
        event, day = self._event(auction)
        best_gain, best_client = 0.0, None
        for client in clients:
            gain, _ = self._gain(client, assignment.held.get(client.client, {}), event, day)
            if gain > best_gain:
                best_gain, best_client = gain, client.client
        return best_gain, best_client
