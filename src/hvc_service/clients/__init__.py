"""
Persistence clients
"""

from .memory_store import (
    InMemoryPassengerRepository,
    InMemoryFlightRepository,
    InMemoryInteractionRepository,
    InMemoryStateStore,
)
from .supabase_client import (
    SupabaseClient,
    SupabasePassengerRepository,
    SupabaseFlightRepository,
    SupabaseInteractionRepository,
)

__all__ = [
    "InMemoryPassengerRepository",
    "InMemoryFlightRepository",
    "InMemoryInteractionRepository",
    "InMemoryStateStore",
    "SupabaseClient",
    "SupabasePassengerRepository",
    "SupabaseFlightRepository",
    "SupabaseInteractionRepository",
]
