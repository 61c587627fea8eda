"""
Persistence interface definitions
"""

from abc import ABC, abstractmethod
from typing import List, Optional, Tuple
from datetime import date, datetime
from ..types import (
    Passenger,
    PassengerCreate,
    PassengerUpdate,
    Flight,
    FlightPassenger,
    FlightStatus,
    Interaction,
    InteractionCreate
)


class PassengerRepositoryInterface(ABC):
    """Interface for passenger storage scoped by airport"""

    @abstractmethod
    async def get_by_id(self, passenger_id: str) -> Passenger:
        """Get passenger by id, raising NotFoundError if unknown"""
        pass

    @abstractmethod
    async def search(self, query: str, airport_id: str) -> List[Passenger]:
        """Search passengers by name or document within an airport"""
        pass

    @abstractmethod
    async def create(self, passenger: PassengerCreate) -> Passenger:
        """Create passenger, raising ConflictError on a duplicate document"""
        pass

    @abstractmethod
    async def update(self, passenger_id: str, updates: PassengerUpdate) -> Passenger:
        """Apply edits to a passenger"""
        pass

    @abstractmethod
    async def list_by_airport(self, airport_id: str) -> List[Passenger]:
        """List every passenger of an airport"""
        pass


class FlightRepositoryInterface(ABC):
    """Interface for flights and their passenger links"""

    @abstractmethod
    async def find_or_create(
        self,
        code: str,
        flight_date: date,
        airport_id: str,
        destination: str
    ) -> Flight:
        """Return the flight for (code, date, airport), creating it once"""
        pass

    @abstractmethod
    async def ensure_passenger(
        self,
        flight_id: str,
        passenger_id: str,
        status: FlightStatus,
        seat: Optional[str] = None
    ) -> Tuple[FlightPassenger, bool]:
        """Link passenger to flight once; returns (link, created)"""
        pass

    @abstractmethod
    async def list_by_date(self, flight_date: date, airport_id: str) -> List[Flight]:
        """List flights of an airport on a date"""
        pass


class InteractionRepositoryInterface(ABC):
    """Interface for interaction storage"""

    @abstractmethod
    async def create(self, interaction: InteractionCreate) -> Interaction:
        """Record an interaction"""
        pass

    @abstractmethod
    async def list_by_airport(
        self,
        airport_id: str,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None
    ) -> List[Interaction]:
        """List interactions of an airport's passengers, optionally windowed"""
        pass

    @abstractmethod
    async def list_by_passenger(self, passenger_id: str) -> List[Interaction]:
        """List interactions of one passenger"""
        pass
