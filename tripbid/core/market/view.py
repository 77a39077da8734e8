"""
MarketView - what the engine needs from the auction collaborator.

The transport and session layer (bid submission, quote polling, game
lifecycle) lives outside the engine. Anything that satisfies this
protocol can drive a BiddingPolicy: a real game client or the in-memory
SimulatedMarket used by the tests and the CLI.
"""

from typing import TYPE_CHECKING, Protocol, runtime_checkable

from tripbid.core.market.auction import AuctionCatalog
from tripbid.core.market.bid import Bid

if TYPE_CHECKING:
    from tripbid.core.trip.preferences import ClientPreferences


@runtime_checkable
class MarketView(Protocol):
    """Read-only game state plus the single write: submit_bid."""

    catalog: AuctionCatalog

    def game_time(self) -> int:
        """Milliseconds since the game started."""
        ...

    def game_time_left(self) -> int:
        """Milliseconds until the game ends."""
        ...

    def game_length(self) -> int:
        """Total game length in milliseconds."""
        ...

    def ask_price(self, auction: int) -> float:
        """Current ask price of an auction."""
        ...

    def own(self, auction: int) -> int:
        """Units of an auction the agent currently owns."""
        ...

    def is_closed(self, auction: int) -> bool:
        ...

    def hypothetical_quantity_won(self, auction: int) -> int:
        """Units the active bid would win if the auction closed now."""
        ...

    def client_preferences(self, client: int) -> "ClientPreferences":
        ...

    def submit_bid(self, bid: Bid) -> None:
        """Submit (or replace) the agent's bid in an auction."""
        ...
