"""
Validation and normalization utilities
"""

import re
import unicodedata
from typing import Any, Optional

from ..types import Category, FlightStatus


def normalize_name(name: str) -> str:
    """
    Normalize a passenger name for identity comparison.
    Strips diacritics, case-folds and collapses whitespace:
    "JOSÉ   GARCÍA" -> "jose garcia"
    """
    if not name:
        return ""

    decomposed = unicodedata.normalize("NFKD", name)
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return " ".join(stripped.casefold().split())


def normalize_token(value: str) -> str:
    """Upper-case a manifest token and collapse internal whitespace"""
    if not value:
        return ""
    return " ".join(value.upper().split())


def parse_category(value: str) -> Optional[Category]:
    """Return the Category for a raw manifest value, or None if unknown"""
    token = normalize_token(value)
    try:
        return Category(token)
    except ValueError:
        return None


def parse_flight_status(value: str) -> Optional[FlightStatus]:
    """Return the FlightStatus for a raw manifest value, or None if unknown"""
    token = normalize_token(value)
    try:
        return FlightStatus(token)
    except ValueError:
        return None


def is_valid_score(score: Any) -> bool:
    """
    Validate satisfaction score.
    Score must be an integer between 1 and 10 (booleans rejected)
    """
    if isinstance(score, bool) or not isinstance(score, int):
        return False
    return 1 <= score <= 10


def document_base(normalized_name: str) -> str:
    """Build the document-number stem for a passenger created from a manifest"""
    return re.sub(r"[^A-Z0-9]", "", normalized_name.upper())
