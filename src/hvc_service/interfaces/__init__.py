"""
Interface definitions for HVC service components
"""

from .repositories import (
    PassengerRepositoryInterface,
    FlightRepositoryInterface,
    InteractionRepositoryInterface,
)
from .passenger_matcher import PassengerMatcherInterface
from .state_store import StateStoreInterface

__all__ = [
    "PassengerRepositoryInterface",
    "FlightRepositoryInterface",
    "InteractionRepositoryInterface",
    "PassengerMatcherInterface",
    "StateStoreInterface",
]
