"""
Flight manifest parsing and line-level validation
"""

from typing import List, Optional, Tuple

from ..types import Category, FlightStatus, ManifestLine, ParseResult
from ..utils.logger import get_logger
from ..utils.validators import parse_category, parse_flight_status

MANIFEST_FIELDS = ("FLIGHT", "DESTINATION", "NAME", "CATEGORY", "STATUS", "SEAT")
REQUIRED_FIELDS = ("FLIGHT", "DESTINATION", "NAME", "CATEGORY", "STATUS")

logger = get_logger("manifest_parser")


class ManifestParser:
    """
    Parses free-text manifests, one passenger per line:

        FLIGHT,DESTINATION,NAME,CATEGORY,STATUS,SEAT

    A bad line never aborts parsing. Each non-blank line ends up either in
    ``data`` or as exactly one entry in ``errors``.
    """

    def parse(self, manifest_text: str) -> ParseResult:
        data: List[ManifestLine] = []
        errors: List[str] = []

        for index, raw_line in enumerate((manifest_text or "").splitlines(), start=1):
            line = raw_line.strip()
            if not line:
                continue

            parsed, error = self.parse_line(line, index)
            if error:
                errors.append(f"Line {index}: {error}")
            else:
                data.append(parsed)

        logger.info(
            "manifest_parsed",
            valid_lines=len(data),
            invalid_lines=len(errors)
        )

        return ParseResult(success=not errors, data=data, errors=errors)

    def parse_line(self, line: str, line_number: int) -> Tuple[Optional[ManifestLine], Optional[str]]:
        """Parse one trimmed line; returns (record, None) or (None, error)"""
        parts = [part.strip() for part in line.split(",")]

        if len(parts) != len(MANIFEST_FIELDS):
            return None, (
                f"expected {len(MANIFEST_FIELDS)} fields "
                f"({', '.join(MANIFEST_FIELDS)}), got {len(parts)}"
            )

        fields = dict(zip(MANIFEST_FIELDS, parts))
        missing = [name for name in REQUIRED_FIELDS if not fields[name]]
        if missing:
            return None, f"missing required field(s): {', '.join(missing)}"

        category = parse_category(fields["CATEGORY"])
        if category is None:
            valid = ", ".join(c.value for c in Category)
            return None, f'invalid category "{fields["CATEGORY"]}". Valid: {valid}'

        status = parse_flight_status(fields["STATUS"])
        if status is None:
            valid = ", ".join(s.value for s in FlightStatus)
            return None, f'invalid status "{fields["STATUS"]}". Valid: {valid}'

        return ManifestLine(
            line_number=line_number,
            flight_code=fields["FLIGHT"].upper(),
            destination=fields["DESTINATION"].upper(),
            name=" ".join(fields["NAME"].split()),
            category=category,
            status=status,
            seat=fields["SEAT"].upper() or None
        ), None


def parse_manifest(manifest_text: str) -> ParseResult:
    """Convenience wrapper around ManifestParser.parse"""
    return ManifestParser().parse(manifest_text)
