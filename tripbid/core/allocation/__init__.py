"""Shared allocation ledger and per-client agents"""
from tripbid.core.allocation.table import AllocationTable, AllocationDriftError
from tripbid.core.allocation.client import ClientAgent, ClientState

__all__ = [
    "AllocationTable",
    "AllocationDriftError",
    "ClientAgent",
    "ClientState",
]
