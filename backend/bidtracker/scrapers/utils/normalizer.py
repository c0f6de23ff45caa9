"""Data normalization utilities for titles, prices and source timestamps."""

import re
from datetime import datetime, timedelta, timezone
from decimal import Decimal, InvalidOperation
from typing import Any, Iterable, Optional

import structlog

logger = structlog.get_logger()


# CJK Unified Ideographs; Card Hobby titles mix Chinese and English text
CJK_PATTERN = re.compile(r"[\u4e00-\u9fff]+")
WHITESPACE_PATTERN = re.compile(r"\s+")

# Formats seen in source payloads, tried in order after ISO-8601
SOURCE_DATETIME_FORMATS = (
    "%Y-%m-%d %H:%M:%S",
    "%Y/%m/%d %H:%M:%S",
    "%Y-%m-%d %H:%M",
    "%Y/%m/%d %H:%M",
)


def clean_title(raw: Optional[str], fallback: str = "Unknown Item") -> str:
    """Strip CJK ideographs from a title and collapse whitespace.

    Args:
        raw: Raw title from the source
        fallback: Returned when nothing printable is left

    Returns:
        Cleaned title
    """
    if not raw:
        return fallback
    cleaned = CJK_PATTERN.sub(" ", raw)
    cleaned = WHITESPACE_PATTERN.sub(" ", cleaned).strip()
    return cleaned or fallback


class PriceNormalizer:
    """Price parsing utilities.

    Sources send prices either as JSON numbers or as display strings
    such as "$1,234.50"; both end up as Decimal.
    """

    @staticmethod
    def clean_price_string(raw: str) -> Optional[Decimal]:
        """Parse a price string and extract numeric value.

        Handles various formats:
        - "$12.99" -> 12.99
        - "C $1,234" -> 1234
        - "1234.56" -> 1234.56

        Args:
            raw: Raw price string

        Returns:
            Decimal price value, or None if parsing fails
        """
        if not raw:
            return None

        # Remove thousand separators, then anything that is not part of a number
        cleaned = raw.replace(",", "")
        cleaned = re.sub(r"[^\d.]", "", cleaned)

        if not cleaned:
            return None

        try:
            return Decimal(cleaned)
        except InvalidOperation:
            return None

    @classmethod
    def to_decimal(cls, value: Any) -> Optional[Decimal]:
        """Convert a JSON number or price string to Decimal.

        Booleans are rejected even though they are ints in Python.
        """
        if value is None or isinstance(value, bool):
            return None
        if isinstance(value, (int, float)):
            return Decimal(str(value))
        if isinstance(value, str):
            return cls.clean_price_string(value)
        return None


def parse_source_datetime(
    raw: Any,
    offset_hours: float = 0,
    formats: Iterable[str] = SOURCE_DATETIME_FORMATS,
) -> Optional[datetime]:
    """Parse a source timestamp into an aware UTC datetime.

    ISO-8601 strings are tried first, then each of ``formats``. Values
    with a timezone are converted to UTC unchanged. Values without one are
    read as UTC and then shifted back by ``offset_hours``, which corrects
    sources that report local times without saying so.

    Args:
        raw: Timestamp string from the payload
        offset_hours: Hours to subtract from values without a timezone
        formats: strptime formats to try after ISO-8601

    Returns:
        Aware UTC datetime, or None if the value could not be parsed
    """
    if not isinstance(raw, str) or not raw.strip():
        return None

    text = raw.strip()
    parsed: Optional[datetime] = None
    try:
        parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError:
        for fmt in formats:
            try:
                parsed = datetime.strptime(text, fmt)
                break
            except ValueError:
                continue

    if parsed is None:
        logger.debug("unparseable_source_datetime", value=text)
        return None

    if parsed.tzinfo is not None:
        # An explicit zone is trusted as-is; the offset only corrects naive source times
        return parsed.astimezone(timezone.utc)

    return parsed.replace(tzinfo=timezone.utc) - timedelta(hours=offset_hours)


def default_close_time(hours: float = 24) -> datetime:
    """Closing time used when a source does not report one."""
    return datetime.now(timezone.utc) + timedelta(hours=hours)
