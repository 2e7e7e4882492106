"""Date grammar for feed timestamps (RFC 2822 and ISO 8601)."""

from datetime import UTC, datetime
from email.utils import format_datetime, parsedate_to_datetime

from dateutil import parser as date_parser

from .errors import DateParseError


def parse_date(value: str) -> datetime:
    """Parse an RFC 2822 or ISO 8601 date string.

    Naive results are treated as UTC so that dates from different feeds can
    be compared.

    Args:
        value: Date string as found in pubDate or lastBuildDate

    Returns:
        Timezone-aware datetime

    Raises:
        DateParseError: If the string matches neither grammar
    """
    text = (value or "").strip()
    if not text:
        raise DateParseError(value)

    try:
        parsed = parsedate_to_datetime(text)
    except (TypeError, ValueError, IndexError):
        parsed = None

    if parsed is None:
        try:
            parsed = date_parser.isoparse(text)
        except (ValueError, OverflowError):
            raise DateParseError(value)

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


def is_valid_date(value: str) -> bool:
    try:
        parse_date(value)
    except DateParseError:
        return False
    return True


def format_rfc2822(moment: datetime) -> str:
    """Format a datetime the way RSS 2.0 pubDate expects."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=UTC)
    return format_datetime(moment)
