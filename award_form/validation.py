"""
Validation engine for award application records.

Validation Rules Documentation:
===============================

1. RESEARCHER (Section 2)
   - Affiliation, ResearchActiveYears, HighestQualification: required only
     (option-set membership is not enforced)
   - Name: required, 3-100 chars
   - Discipline, PresentAppointment: required, max 100 chars
   - DateOfJoining: required, valid date, not in the future,
     at least 730 days before the validation date
   - SpecialisationArea: required, max 500 chars

2. REPEATABLE SECTIONS (Section 3)
   - Each section holds between 1 and 10 entries; a missing or empty
     section is reported on the section path
   - Every entry is validated independently; one entry's failures never
     affect another's
   - Publication and book years carry two independent checks: the fixed
     2020-2025 range and the rolling five-year window. Both are reported.
   - Optional link fields (PaperLink, AbstractLink) are only checked when
     filled in

Engine Guarantees:
==================
- Every constraint of every field is evaluated; nothing short-circuits
  except that a value which cannot be read as its kind (int/date) reports
  a single 'type' failure for that field
- Never raises; coercion or evaluation problems become failures
- Deterministic for a given (record, today); failure order follows the
  schema order
- Field paths: 'Name', 'ScientificPublications[2].Title'
"""

from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, List, Optional

from award_form.constraints import is_empty
from award_form.schema import (
    ApplicationRecord, FieldSpec, SectionItem, RESEARCHER_FIELDS, SECTIONS, MAX_SECTION_ITEMS
)
from award_form.utils import parse_date


RESEARCHER_SECTION = 'researcher'
GENERAL_SECTION = 'general'

MIN_ITEMS_MESSAGE = 'Please add at least one entry.'
MAX_ITEMS_MESSAGE = f'You can add a maximum of {MAX_SECTION_ITEMS} entries.'

TYPE_MESSAGES = {
    'int': '{label} must be a whole number',
    'date': 'Please enter a valid date (YYYY-MM-DD)',
}


@dataclass
class ValidationError:
    """Represents a single validation error with precise field path."""
    field: str
    message: str
    code: str
    section: str = ''  # For grouping errors by section


@dataclass
class ValidationResult:
    """Container for validation results."""
    errors: List[ValidationError] = field(default_factory=list)
    is_valid: bool = True

    def add_error(self, field: str, message: str, code: str = 'invalid', section: str = ''):
        """Add a validation error."""
        self.errors.append(ValidationError(field, message, code, section))
        self.is_valid = False

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON response."""
        return {
            'ok': self.is_valid,
            'errors': [
                {'field': e.field, 'message': e.message, 'code': e.code, 'section': e.section}
                for e in self.errors
            ]
        }

    def get_errors_by_section(self) -> Dict[str, List[ValidationError]]:
        """Group errors by section for UI display."""
        by_section = {}
        for error in self.errors:
            section = error.section or GENERAL_SECTION
            if section not in by_section:
                by_section[section] = []
            by_section[section].append(error)
        return by_section

    def messages_for(self, path: str) -> List[str]:
        """All messages reported against one field path."""
        return [e.message for e in self.errors if e.field == path]

    @property
    def general_errors(self) -> List[ValidationError]:
        """Errors not tied to any field (e.g. processing failures)."""
        return [e for e in self.errors if not e.field]


def coerce_to_int(value: Any) -> Optional[int]:
    """Coerce various inputs to integer."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            return None
    return None


def coerce_value(spec: FieldSpec, raw: Any) -> Any:
    """
    Convert a raw field value to the type its constraints expect.

    Returns None for empty values.

    Raises:
        ValueError: If the value cannot be read as the field's kind
    """
    if is_empty(raw):
        return None
    if spec.kind == 'int':
        coerced = coerce_to_int(raw)
        if coerced is None:
            raise ValueError(f'{raw!r} is not a whole number')
        return coerced
    if spec.kind == 'date':
        return parse_date(raw)
    return str(raw).strip()


def field_path(name: str, section_name: Optional[str] = None, index: Optional[int] = None) -> str:
    """Build a field path: 'Name' or 'Books[1].ISBN'."""
    if section_name is None:
        return name
    return f'{section_name}[{index}].{name}'


def validate_field(spec: FieldSpec, raw: Any, path: str, result: ValidationResult,
                   today: date, section: str = '') -> bool:
    """
    Validate one field against its full constraint list.

    Returns:
        True if no constraint failed
    """
    try:
        value = coerce_value(spec, raw)
    except (ValueError, TypeError, OverflowError):
        message = TYPE_MESSAGES.get(spec.kind, 'Invalid value').format(label=spec.label)
        result.add_error(path, message, 'type', section)
        return False

    passed = True
    for constraint in spec.constraints:
        if value is None and not constraint.applies_to_empty:
            continue
        try:
            ok = constraint.check(value, today)
        except (ValueError, TypeError, OverflowError):
            ok = False
        if not ok:
            result.add_error(path, constraint.message_for(today), constraint.code, section)
            passed = False
    return passed


def validate_item(item: SectionItem, section_name: str, index: int,
                  result: ValidationResult, today: date) -> bool:
    """Validate every field of one section entry."""
    passed = True
    for spec in item.FIELDS:
        path = field_path(spec.name, section_name, index)
        if not validate_field(spec, item.value_of(spec), path, result, today, section=section_name):
            passed = False
    return passed


def validate_record(record: ApplicationRecord, today: date,
                    result: Optional[ValidationResult] = None) -> ValidationResult:
    """
    Main validation entry point for a bound record.

    Args:
        record: The application record
        today: Date the validation is evaluated on
        result: Existing result to append to (optional)

    Returns:
        ValidationResult with errors if any
    """
    if result is None:
        result = ValidationResult()

    for spec in RESEARCHER_FIELDS:
        validate_field(spec, record.value_of(spec), spec.name, result, today, section=RESEARCHER_SECTION)

    for section in SECTIONS:
        items = record.items(section)
        if not items:
            result.add_error(section.name, MIN_ITEMS_MESSAGE, 'min_items', section.name)
        elif len(items) > MAX_SECTION_ITEMS:
            result.add_error(section.name, MAX_ITEMS_MESSAGE, 'max_items', section.name)
        for index, item in enumerate(items):
            validate_item(item, section.name, index, result, today)

    return result


def validate_payload(payload: Dict[str, Any], today: date) -> ValidationResult:
    """
    Validate a nested payload (JSON shape or bound form data).

    Args:
        payload: {'Name': ..., 'Books': [{...}], ...}
        today: Date the validation is evaluated on

    Returns:
        ValidationResult with errors if any
    """
    result = ValidationResult()

    if not isinstance(payload, dict):
        result.add_error('', 'Payload must be a JSON object', 'type', GENERAL_SECTION)
        return result

    for section in SECTIONS:
        entries = payload.get(section.name)
        if entries is not None and not isinstance(entries, list):
            result.add_error(section.name, 'Entries must be submitted as a list', 'type', section.name)

    return validate_record(ApplicationRecord.from_dict(payload), today, result)
