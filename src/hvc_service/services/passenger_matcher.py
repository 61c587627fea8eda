"""
Name-based passenger reconciliation

Manifests carry no document number, so identity is decided on the
normalized full name only. Two different travelers with the same
normalized name will be merged; keep callers on PassengerMatcherInterface
so a document-first strategy can replace this one.
"""

from typing import Iterable, Set

from ..interfaces.passenger_matcher import PassengerMatcherInterface
from ..types import ManifestLine, MatchResult, MatchedPassenger, NewPassenger, Passenger, PassengerCreate
from ..utils.validators import normalize_name, document_base

SUFFIX_WIDTH = 4


class NamePassengerMatcher(PassengerMatcherInterface):
    """Exact match on case/diacritic/whitespace-normalized names"""

    def identity_key(self, name: str) -> str:
        return normalize_name(name)

    def match(self, line: ManifestLine, existing: Iterable[Passenger], airport_id: str) -> MatchResult:
        key = self.identity_key(line.name)
        candidates = list(existing)

        for passenger in candidates:
            if self.identity_key(passenger.name) == key:
                return MatchedPassenger(
                    passenger_id=passenger.id,
                    existing_name=passenger.name,
                    existing_document=passenger.document_number
                )

        taken = {p.document_number for p in candidates}
        return NewPassenger(
            record=PassengerCreate(
                name=line.name,
                document_number=self.synthetic_document(key, taken),
                category=line.category,
                airport_id=airport_id,
            )
        )

    @staticmethod
    def synthetic_document(normalized_name: str, taken: Set[str]) -> str:
        """
        Derive a document number from the normalized name plus the smallest
        free numeric suffix, e.g. "JUANPEREZ0001".
        """
        base = document_base(normalized_name) or "PAX"
        suffix = 1
        while f"{base}{suffix:0{SUFFIX_WIDTH}d}" in taken:
            suffix += 1
        return f"{base}{suffix:0{SUFFIX_WIDTH}d}"
