"""
Manifest processing: flights, passenger reconciliation and flight links

Processing is best-effort and non-transactional. A failed line is reported
in the summary and the remaining lines still run; nothing already written is
rolled back.
"""

from datetime import date
from typing import Dict, List, Optional, Set, Tuple

from ..interfaces.passenger_matcher import PassengerMatcherInterface
from ..interfaces.repositories import FlightRepositoryInterface, PassengerRepositoryInterface
from ..types import (
    ConflictError, DuplicateEntry, Flight, HVCServiceError, ManifestLine, MatchedPassenger, NewPassenger,
    Passenger, ProcessingSummary
)
from ..utils.logger import get_logger
from .passenger_matcher import NamePassengerMatcher


class ManifestProcessor:
    """Applies parsed manifest lines to the passenger and flight stores"""

    def __init__(
        self,
        passenger_repository: PassengerRepositoryInterface,
        flight_repository: FlightRepositoryInterface,
        matcher: PassengerMatcherInterface = None
    ):
        self.passengers = passenger_repository
        self.flights = flight_repository
        self.matcher = matcher or NamePassengerMatcher()

    async def process(
        self,
        parsed_lines: List[ManifestLine],
        flight_date: date,
        airport_id: str
    ) -> ProcessingSummary:
        """
        Process parsed lines for one date and airport.

        Args:
            parsed_lines: Output of ManifestParser
            flight_date: Date of the flights in the manifest
            airport_id: Owning airport

        Returns:
            Summary with processed/created/found counters, cross-history
            duplicates and per-line errors
        """
        logger = get_logger("manifest_processor", airport_id=airport_id, flight_date=str(flight_date))
        summary = ProcessingSummary()

        try:
            known = list(await self.passengers.list_by_airport(airport_id))
        except HVCServiceError as e:
            logger.warning("passenger_snapshot_failed", error=str(e))
            for line in parsed_lines:
                self._record_failure(summary, line, e)
            return summary

        # Identity key -> passenger id for names already resolved in this run
        resolved: Dict[str, str] = {}
        handled: Set[Tuple[str, str]] = set()
        created_ids: Set[str] = set()

        for code, lines in self._group_by_flight(parsed_lines).items():
            try:
                flight = await self.flights.find_or_create(code, flight_date, airport_id, lines[0].destination)
            except HVCServiceError as e:
                logger.warning("flight_resolution_failed", flight_code=code, error=str(e))
                for line in lines:
                    self._record_failure(summary, line, e)
                continue

            for line in lines:
                try:
                    await self._process_line(
                        line, flight, airport_id, known, resolved, handled, created_ids, summary
                    )
                except HVCServiceError as e:
                    logger.warning(
                        "manifest_line_failed",
                        flight_code=code,
                        line_number=line.line_number,
                        error_type=type(e).__name__,
                        error=str(e)
                    )
                    self._record_failure(summary, line, e)

        logger.info(
            "manifest_processed",
            processed=summary.processed,
            created=summary.created,
            found=summary.found,
            links_created=summary.links_created,
            duplicates=len(summary.duplicates),
            errors=len(summary.errors)
        )
        return summary

    async def _process_line(
        self,
        line: ManifestLine,
        flight: Flight,
        airport_id: str,
        known: List[Passenger],
        resolved: Dict[str, str],
        handled: Set[Tuple[str, str]],
        created_ids: Set[str],
        summary: ProcessingSummary
    ) -> None:
        key = self.matcher.identity_key(line.name)
        passenger_id = resolved.get(key)

        if passenger_id is None:
            result = self.matcher.match(line, known, airport_id)
            if isinstance(result, NewPassenger):
                try:
                    passenger = await self.passengers.create(result.record)
                    known.append(passenger)
                    passenger_id = passenger.id
                    created_ids.add(passenger_id)
                except ConflictError:
                    # Another agent created the passenger after the snapshot was taken
                    result = await self._rematch(line, known, airport_id)
                    if result is None:
                        raise
            if isinstance(result, MatchedPassenger):
                passenger_id = result.passenger_id
                summary.duplicates.append(DuplicateEntry(
                    manifest_name=line.name,
                    existing_name=result.existing_name,
                    existing_document=result.existing_document
                ))
            resolved[key] = passenger_id

        pair = (flight.id, passenger_id)
        if pair in handled:
            return

        _, link_created = await self.flights.ensure_passenger(flight.id, passenger_id, line.status, line.seat)
        handled.add(pair)
        summary.processed += 1
        if passenger_id in created_ids:
            summary.created += 1
        else:
            summary.found += 1
        if link_created:
            summary.links_created += 1

    async def _rematch(
        self,
        line: ManifestLine,
        known: List[Passenger],
        airport_id: str
    ) -> Optional[MatchedPassenger]:
        known[:] = await self.passengers.list_by_airport(airport_id)
        result = self.matcher.match(line, known, airport_id)
        return result if isinstance(result, MatchedPassenger) else None

    @staticmethod
    def _group_by_flight(lines: List[ManifestLine]) -> Dict[str, List[ManifestLine]]:
        groups: Dict[str, List[ManifestLine]] = {}
        for line in lines:
            groups.setdefault(line.flight_code, []).append(line)
        return groups

    @staticmethod
    def _record_failure(summary: ProcessingSummary, line: ManifestLine, error: Exception) -> None:
        summary.errors.append(f"Line {line.line_number} ({line.name}): {error}")
