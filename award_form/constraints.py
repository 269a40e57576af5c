"""
Field constraint catalog.

Each constraint is a small, pure rule evaluated against a single coerced
field value and the date the validation runs on. Constraints never read the
clock themselves; the caller passes ``today`` explicitly.

Constraint Rules:
=================

- Required: value must be present and non-blank
- Length: string length within optional min/max bounds
- Range: numeric value within inclusive bounds
- Pattern: string must fully match a regular expression
- Url: optional absolute http/https/ftp URL
- NotFutureDate: date must not be after today
- MinimumServiceYears: date must be at least N days before today (730 = 2 years)
- PublicationYearWithinLastFive: year within [today.year - 5, today.year]

Every constraint except Required treats an empty value as passing, so a
missing required field yields a single 'required' failure.
"""

import re
from datetime import date
from typing import Any, Optional
from urllib.parse import urlparse


MIN_SERVICE_DAYS = 730
PUBLICATION_WINDOW_YEARS = 5
URL_SCHEMES = ('http', 'https', 'ftp')


def is_empty(value: Any) -> bool:
    """True for None and blank strings."""
    if value is None:
        return True
    if isinstance(value, str) and value.strip() == '':
        return True
    return False


class Constraint:
    """Base class for a single field rule."""

    code = 'invalid'
    applies_to_empty = False
    default_message = 'Invalid value'

    def __init__(self, message: Optional[str] = None):
        self._message = message

    def check(self, value: Any, today: date) -> bool:
        raise NotImplementedError

    def message_for(self, today: date) -> str:
        return self._message or self.default_message

    def __repr__(self):
        return f'<{self.__class__.__name__}>'


class Required(Constraint):
    code = 'required'
    applies_to_empty = True
    default_message = 'This field is required'

    def check(self, value: Any, today: date) -> bool:
        return not is_empty(value)


class Length(Constraint):
    code = 'length'

    def __init__(self, min_length: Optional[int] = None, max_length: Optional[int] = None,
                 message: Optional[str] = None):
        super().__init__(message)
        self.min_length = min_length
        self.max_length = max_length

    @property
    def default_message(self) -> str:
        if self.min_length is not None and self.max_length is not None:
            return f'Must be between {self.min_length} and {self.max_length} characters'
        if self.max_length is not None:
            return f'Maximum {self.max_length} characters allowed'
        return f'Minimum {self.min_length} characters required'

    def check(self, value: Any, today: date) -> bool:
        length = len(str(value))
        if self.min_length is not None and length < self.min_length:
            return False
        if self.max_length is not None and length > self.max_length:
            return False
        return True


class Range(Constraint):
    code = 'range'

    def __init__(self, minimum: int, maximum: int, message: Optional[str] = None):
        super().__init__(message)
        self.minimum = minimum
        self.maximum = maximum

    @property
    def default_message(self) -> str:
        return f'Must be between {self.minimum} and {self.maximum}'

    def check(self, value: Any, today: date) -> bool:
        return self.minimum <= value <= self.maximum


class Pattern(Constraint):
    code = 'format'
    default_message = 'Invalid format'

    def __init__(self, regex: str, message: Optional[str] = None):
        super().__init__(message)
        self.regex = re.compile(regex)

    def check(self, value: Any, today: date) -> bool:
        return self.regex.fullmatch(str(value)) is not None

    def __repr__(self):
        return f'<Pattern {self.regex.pattern!r}>'


class Url(Constraint):
    code = 'url'
    default_message = 'Please enter a valid URL'

    def check(self, value: Any, today: date) -> bool:
        text = str(value).strip()
        if any(ch.isspace() for ch in text):
            return False
        parsed = urlparse(text)
        return parsed.scheme.lower() in URL_SCHEMES and bool(parsed.netloc)


class NotFutureDate(Constraint):
    code = 'future_date'
    default_message = 'Date cannot be in the future.'

    def check(self, value: date, today: date) -> bool:
        return value <= today


class MinimumServiceYears(Constraint):
    code = 'min_service'
    default_message = 'Minimum of 2-year service is required.'

    def __init__(self, days: int = MIN_SERVICE_DAYS, message: Optional[str] = None):
        super().__init__(message)
        self.days = days

    def check(self, value: date, today: date) -> bool:
        return (today - value).days >= self.days


class PublicationYearWithinLastFive(Constraint):
    code = 'year_window'
    default_message = 'Publication year must be within the last 5 years'

    def check(self, value: int, today: date) -> bool:
        return today.year - PUBLICATION_WINDOW_YEARS <= value <= today.year

    def message_for(self, today: date) -> str:
        base = self._message or self.default_message
        return f'{base} ({today.year - PUBLICATION_WINDOW_YEARS} to {today.year})'
