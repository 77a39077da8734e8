"""
Client preferences - the stated wishes of one itinerary holder.

Preferences arrive from the auction collaborator once per game and never
change afterwards, so the model is frozen.
"""

from typing import List, Tuple

from pydantic import BaseModel, ConfigDict, Field, model_validator

from tripbid.core.market.auction import EventType


class ClientPreferences(BaseModel):
    """
    Read-only view over a client's preferences.

    Attributes:
        client: Client slot (0..7)
        arrival: Preferred arrival day
        departure: Preferred departure day
        hotel_bonus: Extra value of staying in the good hotel
        alligator_wrestling / amusement / museum: Entertainment bonuses
    """
    model_config = ConfigDict(frozen=True)

    client: int = Field(ge=0)
    arrival: int = Field(ge=1, le=4)
    departure: int = Field(ge=2, le=5)
    hotel_bonus: float = Field(ge=0)
    alligator_wrestling: float = Field(default=0, ge=0)
    amusement: float = Field(default=0, ge=0)
    museum: float = Field(default=0, ge=0)

    @model_validator(mode="after")
    def check_stay(self):
        if self.arrival >= self.departure:
            raise ValueError(
                f"arrival ({self.arrival}) must be before departure ({self.departure})"
            )
        return self

    def event_bonus(self, event: EventType) -> float:
        """Bonus for attending one event of this type."""
        if event == EventType.ALLIGATOR_WRESTLING:
            return self.alligator_wrestling
        if event == EventType.AMUSEMENT:
            return self.amusement
        return self.museum

    def ranked_event_bonuses(self) -> List[Tuple[EventType, float]]:
        """Event types ordered by bonus, highest first (ties in type order)."""
        return sorted(
            ((event, self.event_bonus(event)) for event in EventType),
            key=lambda item: -item[1],
        )

    @property
    def nights(self) -> int:
        return self.departure - self.arrival
