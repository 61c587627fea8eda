"""
Supabase (PostgREST) persistence client

Maps the hosted tables (passengers, flights, flight_passengers, interactions)
onto the repository interfaces. Creation paths are check-then-create with a
re-read on conflict so concurrent agents converge on a single row.
"""

import re
from datetime import date, datetime
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

import httpx

from ..config import config
from ..interfaces.repositories import (
    FlightRepositoryInterface, InteractionRepositoryInterface, PassengerRepositoryInterface
)
from ..types import (
    ConflictError, Flight, FlightPassenger, FlightStatus, Interaction, InteractionCreate,
    NotFoundError, Passenger, PassengerCreate, PassengerLikes, PassengerUpdate, PersistenceError
)
from ..utils.dates import to_utc
from ..utils.logger import get_logger

Params = Union[Dict[str, Any], Sequence[Tuple[str, Any]]]

SEARCH_LIMIT = 10

logger = get_logger("supabase_client")


class SupabaseClient:
    """HTTP client for the Supabase REST endpoint"""

    def __init__(self, base_url: str = None, api_key: str = None, timeout: float = None,
                 transport: httpx.AsyncBaseTransport = None):
        self.base_url = (base_url or config.persistence.supabase_url).rstrip("/")
        self.api_key = api_key or config.persistence.supabase_key or ""
        self.timeout = timeout or config.persistence.timeout

        self.client = httpx.AsyncClient(
            base_url=f"{self.base_url}/rest/v1",
            timeout=self.timeout,
            transport=transport,
            headers={
                "apikey": self.api_key,
                "Authorization": f"Bearer {self.api_key}",
                "Content-Type": "application/json",
                "Prefer": "return=representation",
            }
        )

    async def select(self, table: str, params: Params) -> List[Dict[str, Any]]:
        return await self._request("GET", table, params=params)

    async def insert(self, table: str, row: Dict[str, Any]) -> Dict[str, Any]:
        rows = await self._request("POST", table, json=row)
        return rows[0]

    async def update(self, table: str, params: Params, changes: Dict[str, Any]) -> List[Dict[str, Any]]:
        return await self._request("PATCH", table, params=params, json=changes)

    async def _request(self, method: str, table: str, params: Params = None, json: Any = None) -> List[Dict[str, Any]]:
        try:
            response = await self.client.request(method, f"/{table}", params=params, json=json)
        except httpx.RequestError as e:
            logger.error("supabase_connection_error", table=table, method=method, error=str(e))
            raise PersistenceError(f"Connection error: {str(e)}", 503)

        if response.status_code == 409:
            raise ConflictError(f"Conflict writing to {table}: {response.text}")
        if response.status_code >= 400:
            logger.error("supabase_http_error", table=table, method=method, status=response.status_code)
            raise PersistenceError(f"HTTP error {response.status_code} on {table}", response.status_code)

        return response.json() if response.content else []

    async def close(self):
        """Close the HTTP client"""
        await self.client.aclose()


def _eq(value: Any) -> str:
    return f"eq.{value}"


def _search_term(query: str) -> str:
    # PostgREST or= syntax reserves commas, parentheses and asterisks
    return re.sub(r"[,()*]", " ", query).strip()


def passenger_from_row(row: Dict[str, Any]) -> Passenger:
    likes = row.get("preferencias")
    return Passenger(
        id=str(row["id"]),
        name=row["nombre"],
        document_number=row["dni_pasaporte"],
        category=row["categoria"],
        airport_id=str(row["aeropuerto_id"]),
        birth_date=row.get("fecha_nacimiento"),
        likes=PassengerLikes(**likes) if likes else None
    )


def passenger_to_row(passenger: Union[PassengerCreate, PassengerUpdate]) -> Dict[str, Any]:
    data = passenger.model_dump(mode="json", exclude_none=True)
    columns = {
        "name": "nombre",
        "document_number": "dni_pasaporte",
        "category": "categoria",
        "airport_id": "aeropuerto_id",
        "birth_date": "fecha_nacimiento",
        "likes": "preferencias",
    }
    return {columns[key]: value for key, value in data.items() if key in columns}


def flight_from_row(row: Dict[str, Any]) -> Flight:
    return Flight(
        id=str(row["id"]),
        code=row["numero_vuelo"],
        destination=row["destino"],
        date=row["fecha"],
        airport_id=str(row["aeropuerto_id"])
    )


def link_from_row(row: Dict[str, Any]) -> FlightPassenger:
    return FlightPassenger(
        flight_id=str(row["vuelo_id"]),
        passenger_id=str(row["pasajero_id"]),
        status=row["estatus"],
        seat=row.get("asiento")
    )


def interaction_from_row(row: Dict[str, Any]) -> Interaction:
    return Interaction(
        id=str(row["id"]),
        passenger_id=str(row["pasajero_id"]),
        agent_name=row.get("agente_nombre") or "",
        timestamp=row["fecha"],
        score=row.get("calificacion_medallia"),
        feedback=row.get("feedback"),
        incident=row.get("incidentes"),
        recovery_action=row.get("acciones_recuperacion"),
        services_used=row.get("servicios_utilizados") or [],
        travel_reason=row.get("motivo_viaje"),
        birthday=bool(row.get("cumpleanos"))
    )


def interaction_to_row(interaction: InteractionCreate) -> Dict[str, Any]:
    data = interaction.model_dump(mode="json")
    return {
        "pasajero_id": data["passenger_id"],
        "agente_nombre": data["agent_name"],
        "fecha": data["timestamp"],
        "calificacion_medallia": data["score"],
        "feedback": data["feedback"],
        "incidentes": data["incident"],
        "acciones_recuperacion": data["recovery_action"],
        "servicios_utilizados": data["services_used"],
        "motivo_viaje": data["travel_reason"],
        "cumpleanos": data["birthday"],
    }


class SupabasePassengerRepository(PassengerRepositoryInterface):

    def __init__(self, client: SupabaseClient):
        self.client = client

    async def get_by_id(self, passenger_id: str) -> Passenger:
        rows = await self.client.select("passengers", {"id": _eq(passenger_id), "select": "*"})
        if not rows:
            raise NotFoundError("Passenger", passenger_id)
        return passenger_from_row(rows[0])

    async def search(self, query: str, airport_id: str) -> List[Passenger]:
        term = _search_term(query)
        rows = await self.client.select("passengers", {
            "select": "*",
            "aeropuerto_id": _eq(airport_id),
            "or": f"(nombre.ilike.*{term}*,dni_pasaporte.ilike.*{term}*)",
            "order": "nombre",
            "limit": SEARCH_LIMIT,
        })
        return [passenger_from_row(row) for row in rows]

    async def create(self, passenger: PassengerCreate) -> Passenger:
        row = await self.client.insert("passengers", passenger_to_row(passenger))
        return passenger_from_row(row)

    async def update(self, passenger_id: str, updates: PassengerUpdate) -> Passenger:
        rows = await self.client.update("passengers", {"id": _eq(passenger_id)}, passenger_to_row(updates))
        if not rows:
            raise NotFoundError("Passenger", passenger_id)
        return passenger_from_row(rows[0])

    async def list_by_airport(self, airport_id: str) -> List[Passenger]:
        rows = await self.client.select("passengers", {
            "select": "*",
            "aeropuerto_id": _eq(airport_id),
            "order": "created_at.desc",
        })
        return [passenger_from_row(row) for row in rows]


class SupabaseFlightRepository(FlightRepositoryInterface):

    def __init__(self, client: SupabaseClient):
        self.client = client

    async def _find(self, code: str, flight_date: date, airport_id: str) -> Optional[Flight]:
        rows = await self.client.select("flights", {
            "select": "*",
            "numero_vuelo": _eq(code),
            "fecha": _eq(flight_date.isoformat()),
            "aeropuerto_id": _eq(airport_id),
        })
        return flight_from_row(rows[0]) if rows else None

    async def find_or_create(self, code: str, flight_date: date, airport_id: str, destination: str) -> Flight:
        code = code.upper()
        flight = await self._find(code, flight_date, airport_id)
        if flight:
            return flight

        try:
            row = await self.client.insert("flights", {
                "numero_vuelo": code,
                "destino": destination,
                "fecha": flight_date.isoformat(),
                "aeropuerto_id": airport_id,
            })
            return flight_from_row(row)
        except ConflictError:
            # Another agent created it first
            flight = await self._find(code, flight_date, airport_id)
            if flight is None:
                raise
            return flight

    async def _find_link(self, flight_id: str, passenger_id: str) -> Optional[FlightPassenger]:
        rows = await self.client.select("flight_passengers", {
            "select": "*",
            "vuelo_id": _eq(flight_id),
            "pasajero_id": _eq(passenger_id),
        })
        return link_from_row(rows[0]) if rows else None

    async def ensure_passenger(
        self,
        flight_id: str,
        passenger_id: str,
        status: FlightStatus,
        seat: Optional[str] = None
    ) -> Tuple[FlightPassenger, bool]:
        link = await self._find_link(flight_id, passenger_id)
        if link:
            return link, False

        try:
            row = await self.client.insert("flight_passengers", {
                "vuelo_id": flight_id,
                "pasajero_id": passenger_id,
                "estatus": status.value,
                "asiento": seat,
            })
            return link_from_row(row), True
        except ConflictError:
            link = await self._find_link(flight_id, passenger_id)
            if link is None:
                raise
            return link, False

    async def list_by_date(self, flight_date: date, airport_id: str) -> List[Flight]:
        rows = await self.client.select("flights", {
            "select": "*",
            "fecha": _eq(flight_date.isoformat()),
            "aeropuerto_id": _eq(airport_id),
            "order": "numero_vuelo",
        })
        return [flight_from_row(row) for row in rows]


class SupabaseInteractionRepository(InteractionRepositoryInterface):

    def __init__(self, client: SupabaseClient):
        self.client = client

    async def create(self, interaction: InteractionCreate) -> Interaction:
        row = await self.client.insert("interactions", interaction_to_row(interaction))
        return interaction_from_row(row)

    async def list_by_airport(
        self,
        airport_id: str,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None
    ) -> List[Interaction]:
        params = [
            ("select", "*,passengers!inner(aeropuerto_id)"),
            ("passengers.aeropuerto_id", _eq(airport_id)),
            ("order", "fecha.desc"),
        ]
        if start is not None:
            params.append(("fecha", f"gte.{to_utc(start).isoformat()}"))
        if end is not None:
            params.append(("fecha", f"lte.{to_utc(end).isoformat()}"))

        rows = await self.client.select("interactions", params)
        return [interaction_from_row(row) for row in rows]

    async def list_by_passenger(self, passenger_id: str) -> List[Interaction]:
        rows = await self.client.select("interactions", {
            "select": "*",
            "pasajero_id": _eq(passenger_id),
            "order": "fecha.desc",
        })
        return [interaction_from_row(row) for row in rows]
