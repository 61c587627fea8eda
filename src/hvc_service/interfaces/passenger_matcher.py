"""
Passenger matcher interface definitions
"""

from abc import ABC, abstractmethod
from typing import Iterable
from ..types import ManifestLine, MatchResult, Passenger


class PassengerMatcherInterface(ABC):
    """Interface for reconciling manifest lines against known passengers"""

    @abstractmethod
    def match(self, line: ManifestLine, existing: Iterable[Passenger], airport_id: str) -> MatchResult:
        """Resolve a manifest line against the airport's passengers"""
        pass

    @abstractmethod
    def identity_key(self, name: str) -> str:
        """Key under which two names are treated as the same person"""
        pass
