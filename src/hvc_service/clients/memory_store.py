"""
In-memory persistence for development and testing
"""

import asyncio
import uuid
from collections import defaultdict
from datetime import date, datetime
from typing import Dict, List, Optional, Tuple

from ..interfaces.repositories import (
    FlightRepositoryInterface, InteractionRepositoryInterface, PassengerRepositoryInterface
)
from ..interfaces.state_store import StateStoreInterface
from ..types import (
    ConflictError, Flight, FlightPassenger, FlightStatus, Interaction, InteractionCreate,
    NotFoundError, Passenger, PassengerCreate, PassengerUpdate
)
from ..utils.dates import to_utc
from ..utils.validators import normalize_name

SEARCH_LIMIT = 10


def _new_id() -> str:
    return uuid.uuid4().hex


class InMemoryPassengerRepository(PassengerRepositoryInterface):
    """Passenger store enforcing document uniqueness per airport"""

    def __init__(self):
        self._passengers: Dict[str, Passenger] = {}
        self._lock = asyncio.Lock()

    async def get_by_id(self, passenger_id: str) -> Passenger:
        if passenger_id not in self._passengers:
            raise NotFoundError("Passenger", passenger_id)
        return self._passengers[passenger_id]

    async def search(self, query: str, airport_id: str) -> List[Passenger]:
        needle = normalize_name(query)
        matches = [
            p for p in self._passengers.values()
            if p.airport_id == airport_id and (
                needle in normalize_name(p.name) or needle in normalize_name(p.document_number)
            )
        ]
        return sorted(matches, key=lambda p: p.name)[:SEARCH_LIMIT]

    async def create(self, passenger: PassengerCreate) -> Passenger:
        async with self._lock:
            for existing in self._passengers.values():
                if (existing.airport_id == passenger.airport_id
                        and existing.document_number == passenger.document_number):
                    raise ConflictError(
                        f"Document {passenger.document_number} already registered at airport {passenger.airport_id}"
                    )
            stored = Passenger(id=_new_id(), **passenger.model_dump())
            self._passengers[stored.id] = stored
            return stored

    async def update(self, passenger_id: str, updates: PassengerUpdate) -> Passenger:
        async with self._lock:
            current = await self.get_by_id(passenger_id)
            changes = updates.model_dump(exclude_unset=True, exclude_none=True)
            updated = Passenger(**{**current.model_dump(), **changes})
            self._passengers[passenger_id] = updated
            return updated

    async def list_by_airport(self, airport_id: str) -> List[Passenger]:
        return [p for p in self._passengers.values() if p.airport_id == airport_id]


class InMemoryFlightRepository(FlightRepositoryInterface):
    """Flight store keyed by (code, date, airport) with one link per passenger"""

    def __init__(self):
        self._flights: Dict[Tuple[str, date, str], Flight] = {}
        self._links: Dict[Tuple[str, str], FlightPassenger] = {}
        self._lock = asyncio.Lock()

    async def find_or_create(self, code: str, flight_date: date, airport_id: str, destination: str) -> Flight:
        key = (code.upper(), flight_date, airport_id)
        async with self._lock:
            if key not in self._flights:
                self._flights[key] = Flight(
                    id=_new_id(),
                    code=key[0],
                    destination=destination,
                    date=flight_date,
                    airport_id=airport_id
                )
            return self._flights[key]

    async def ensure_passenger(
        self,
        flight_id: str,
        passenger_id: str,
        status: FlightStatus,
        seat: Optional[str] = None
    ) -> Tuple[FlightPassenger, bool]:
        key = (flight_id, passenger_id)
        async with self._lock:
            if key in self._links:
                return self._links[key], False
            link = FlightPassenger(flight_id=flight_id, passenger_id=passenger_id, status=status, seat=seat)
            self._links[key] = link
            return link, True

    async def list_by_date(self, flight_date: date, airport_id: str) -> List[Flight]:
        flights = [
            f for (_, day, airport), f in self._flights.items()
            if day == flight_date and airport == airport_id
        ]
        return sorted(flights, key=lambda f: f.code)

    def links_for(self, flight_id: str) -> List[FlightPassenger]:
        return [link for (fid, _), link in self._links.items() if fid == flight_id]


class InMemoryInteractionRepository(InteractionRepositoryInterface):
    """Interaction store; airport scope comes from the owning passenger"""

    def __init__(self, passenger_repository: InMemoryPassengerRepository):
        self._interactions: Dict[str, Interaction] = {}
        self._passengers = passenger_repository

    async def create(self, interaction: InteractionCreate) -> Interaction:
        stored = Interaction(id=_new_id(), **interaction.model_dump())
        self._interactions[stored.id] = stored
        return stored

    async def list_by_airport(
        self,
        airport_id: str,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None
    ) -> List[Interaction]:
        members = {p.id for p in await self._passengers.list_by_airport(airport_id)}
        selected = [
            i for i in self._interactions.values()
            if i.passenger_id in members
            and (start is None or to_utc(i.timestamp) >= to_utc(start))
            and (end is None or to_utc(i.timestamp) <= to_utc(end))
        ]
        return sorted(selected, key=lambda i: to_utc(i.timestamp), reverse=True)

    async def list_by_passenger(self, passenger_id: str) -> List[Interaction]:
        selected = [i for i in self._interactions.values() if i.passenger_id == passenger_id]
        return sorted(selected, key=lambda i: to_utc(i.timestamp), reverse=True)


class InMemoryStateStore(StateStoreInterface):
    """Process-local counters, sets and checklist states"""

    def __init__(self):
        self._counters: Dict[str, Dict[str, int]] = defaultdict(dict)
        # dict keys keep insertion order for set members
        self._sets: Dict[str, Dict[str, None]] = defaultdict(dict)
        self._items: Dict[Tuple[str, str], Dict[int, bool]] = defaultdict(dict)

    def increment(self, namespace: str, key: str, amount: int = 1) -> int:
        bucket = self._counters[namespace]
        bucket[key] = bucket.get(key, 0) + amount
        return bucket[key]

    def counters(self, namespace: str) -> Dict[str, int]:
        return dict(self._counters.get(namespace, {}))

    def toggle_member(self, namespace: str, key: str) -> bool:
        members = self._sets[namespace]
        if key in members:
            del members[key]
            return False
        members[key] = None
        return True

    def members(self, namespace: str) -> List[str]:
        return list(self._sets.get(namespace, {}))

    def set_item_state(self, namespace: str, key: str, index: int, completed: bool) -> None:
        self._items[(namespace, key)][index] = completed

    def item_states(self, namespace: str, key: str) -> Dict[int, bool]:
        return dict(self._items.get((namespace, key), {}))
