"""
Input Validation - Sanity checks for data handed over by the auction
collaborator.

The engine never trusts quote or bid data blindly: a malformed quote is
logged and dropped instead of corrupting price estimates. Every validator
returns an ``(is_valid, error_message)`` pair rather than raising.
"""

import math
from typing import Any, Tuple

# =============================================================================
# Constants
# =============================================================================

MIN_PRICE = 0.0
MAX_PRICE = 100_000.0
MAX_BID_POINTS = 32
MAX_BID_QUANTITY = 64
MAX_GAME_LENGTH_MS = 24 * 60 * 60 * 1000


# =============================================================================
# Validation Functions
# =============================================================================


def validate_integer(
    value: Any,
    name: str,
    min_val: int,
    max_val: int,
) -> Tuple[bool, str]:
    """
    Validate integer within bounds.

    Args:
        value: Value to validate
        name: Field name for errors
        min_val: Minimum allowed value
        max_val: Maximum allowed value

    Returns:
        (is_valid, error_message)
    """
    if isinstance(value, bool) or not isinstance(value, int):
        return False, f"{name} must be int, got {type(value).__name__}"

    if value < min_val:
        return False, f"{name} must be >= {min_val}, got {value}"

    if value > max_val:
        return False, f"{name} must be <= {max_val}, got {value}"

    return True, ""


def validate_price(value: Any, name: str = "price") -> Tuple[bool, str]:
    """Validate a finite, non-negative price."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False, f"{name} must be a number, got {type(value).__name__}"

    if not math.isfinite(value):
        return False, f"{name} must be finite, got {value}"

    if value < MIN_PRICE or value > MAX_PRICE:
        return False, f"{name} must be within [{MIN_PRICE}, {MAX_PRICE}], got {value}"

    return True, ""


def validate_auction_id(auction: Any, auction_count: int) -> Tuple[bool, str]:
    """Validate an auction id against the catalog size."""
    return validate_integer(auction, "auction", 0, auction_count - 1)


def validate_game_time(elapsed_ms: Any) -> Tuple[bool, str]:
    """Validate an elapsed game time in milliseconds."""
    return validate_integer(elapsed_ms, "game_time", 0, MAX_GAME_LENGTH_MS)


def validate_quote(auction: Any, ask_price: Any, auction_count: int) -> Tuple[bool, str]:
    """Validate a single-auction quote."""
    valid, err = validate_auction_id(auction, auction_count)
    if not valid:
        return False, err
    return validate_price(ask_price, "ask_price")


# =============================================================================
# Composite Validators
# =============================================================================


def validate_bid(bid: Any, auction_count: int) -> Tuple[bool, str]:
    """
    Validate an outgoing bid before it reaches the collaborator.

    A bid must target a known auction, carry at least one point, and every
    point must have a non-zero quantity and a valid price.
    """
    if not hasattr(bid, "auction") or not hasattr(bid, "points"):
        return False, "Bid must have auction and points"

    valid, err = validate_auction_id(bid.auction, auction_count)
    if not valid:
        return False, err

    if not bid.points:
        return False, "Bid has no points"

    if len(bid.points) > MAX_BID_POINTS:
        return False, f"Bid exceeds {MAX_BID_POINTS} points, got {len(bid.points)}"

    for point in bid.points:
        valid, err = validate_integer(
            point.quantity, "quantity", -MAX_BID_QUANTITY, MAX_BID_QUANTITY
        )
        if not valid:
            return False, err
        if point.quantity == 0:
            return False, "Bid point quantity must be non-zero"
        valid, err = validate_price(point.price)
        if not valid:
            return False, err

    return True, ""


# =============================================================================
# Module Exports
# =============================================================================

__all__ = [
    "validate_integer",
    "validate_price",
    "validate_auction_id",
    "validate_game_time",
    "validate_quote",
    "validate_bid",
    "MIN_PRICE",
    "MAX_PRICE",
    "MAX_BID_POINTS",
    "MAX_BID_QUANTITY",
]
