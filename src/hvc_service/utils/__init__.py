"""
Utility modules for the HVC service
"""

from .logger import get_logger, setup_logging
from .validators import normalize_name, parse_category, parse_flight_status, is_valid_score
from .dates import to_utc, local_date, is_birthday, period_range

__all__ = [
    "get_logger",
    "setup_logging",
    "normalize_name",
    "parse_category",
    "parse_flight_status",
    "is_valid_score",
    "to_utc",
    "local_date",
    "is_birthday",
    "period_range",
]
