"""
Utility functions for value normalisation, date handling, hashing and text escaping.
"""

import hashlib
import json
from datetime import date, datetime
from typing import Any, Dict, Optional


DEFAULT_TIMEZONE = 'Asia/Riyadh'


def to_raw(value: Any) -> str:
    """
    Normalise a submitted value to the raw string kept on the record.

    Args:
        value: Form or JSON value (None, str, int, date, ...)

    Returns:
        String form of the value ('' for None)
    """
    if value is None:
        return ''
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return 'true' if value else 'false'
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    return str(value)


def parse_date(value: Any) -> date:
    """
    Parse a date value.

    Accepts date/datetime objects, 'YYYY-MM-DD' and ISO datetime strings.

    Raises:
        ValueError: If the value is not a recognisable date
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value

    str_value = str(value).strip()
    try:
        return datetime.strptime(str_value, '%Y-%m-%d').date()
    except ValueError:
        pass
    return datetime.fromisoformat(str_value.replace('Z', '+00:00')).date()


def format_date(date_value: Any) -> str:
    """
    Format a date value for display (DD Month YYYY).

    Unparseable values are returned unchanged.
    """
    if date_value is None or date_value == '':
        return ''
    try:
        return parse_date(date_value).strftime('%d %B %Y')
    except (ValueError, TypeError):
        return str(date_value)


def format_timestamp(timestamp: Optional[datetime], timezone: str = DEFAULT_TIMEZONE) -> str:
    """
    Format a timestamp in the display timezone.

    Naive timestamps are treated as UTC.
    """
    if timestamp is None:
        return ''

    from zoneinfo import ZoneInfo
    if timestamp.tzinfo is None:
        timestamp = timestamp.replace(tzinfo=ZoneInfo('UTC'))
    local_time = timestamp.astimezone(ZoneInfo(timezone))
    return local_time.strftime('%d %B %Y at %I:%M %p %Z')


def canonical_json(data: Dict[str, Any]) -> str:
    """Serialize a payload with stable key ordering."""
    return json.dumps(data, sort_keys=True, ensure_ascii=False, separators=(',', ':'))


def calculate_sha256(data: bytes) -> str:
    """
    Calculate SHA256 hash of data.

    Args:
        data: Bytes to hash

    Returns:
        Hexadecimal hash string
    """
    return hashlib.sha256(data).hexdigest()


def short_hash(full_hash: str, length: int = 12) -> str:
    """Shortened hash for display."""
    if not full_hash:
        return ''
    return full_hash[:length]


def escape_text(text: str) -> str:
    """
    Escape special characters in text for safe PDF rendering.

    Args:
        text: Input text

    Returns:
        Escaped text safe for ReportLab
    """
    if not text:
        return ''

    # ReportLab uses XML-like escaping for special characters
    replacements = [
        ('&', '&amp;'),
        ('<', '&lt;'),
        ('>', '&gt;'),
        ('"', '&quot;'),
        ("'", '&apos;'),
    ]

    result = text
    for old, new in replacements:
        result = result.replace(old, new)

    return result
