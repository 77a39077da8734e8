"""
tripbid

Allocation and bidding engine for the travel auction game:
- Trip enumeration and utility model per client
- Shared allocation ledger across clients
- Momentum-based hotel price forecasts
- Event-driven bidding for flights, hotels and entertainment
"""

__version__ = "0.1.0"
