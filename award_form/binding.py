"""
Form binding.

Turns flat form posts keyed by field path ('Name',
'ScientificPublications[0].Title') into the nested payload the schema and
validation engine consume, and back again for rendering.

Section indices must run contiguously from 0. Binding stops at the first
missing index, so entries after a gap are not bound.
"""

import re
from typing import Any, Dict, Iterable, List, Mapping, Tuple

from award_form.schema import RESEARCHER_FIELDS, SECTIONS, get_section


FIELD_PATH_PATTERN = re.compile(r'^(?P<section>[A-Za-z]+)\[(?P<index>\d+)\]\.(?P<field>[A-Za-z]+)$')
ELEMENT_ID_PATTERN = re.compile(r'[\[\]\.]')


def parse_field_path(path: str) -> Tuple[str, int, str]:
    """
    Split an indexed field path.

    Returns:
        (section name, index, field name)

    Raises:
        ValueError: If the path is not of the form 'Section[i].Field'
    """
    match = FIELD_PATH_PATTERN.match(path)
    if not match:
        raise ValueError(f'Not an indexed field path: {path!r}')
    return match.group('section'), int(match.group('index')), match.group('field')


def field_id(path: str) -> str:
    """Element id for a field path ('Books[0].ISBN' -> 'Books_0__ISBN')."""
    return ELEMENT_ID_PATTERN.sub('_', path)


def _contiguous(entries: Dict[int, Dict[str, Any]]) -> List[Dict[str, Any]]:
    ordered = []
    index = 0
    while index in entries:
        ordered.append(entries[index])
        index += 1
    return ordered


def bind_form(form: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Build a nested payload from flat form fields.

    Unknown keys (CSRF token, buttons, unknown sections) are ignored.

    Args:
        form: Mapping of field path -> value (e.g. request.form)

    Returns:
        Nested payload dictionary
    """
    researcher_names = {spec.name for spec in RESEARCHER_FIELDS}
    payload: Dict[str, Any] = {}
    sections: Dict[str, Dict[int, Dict[str, Any]]] = {}

    for key in form.keys():
        value = form.get(key)
        if key in researcher_names:
            payload[key] = value
            continue
        try:
            section_name, index, field_name = parse_field_path(key)
        except ValueError:
            continue
        section = get_section(section_name)
        if section is None:
            continue
        known_fields = {spec.name for spec in section.item_type.FIELDS}
        if field_name not in known_fields:
            continue
        sections.setdefault(section_name, {}).setdefault(index, {})[field_name] = value

    for section in SECTIONS:
        if section.name in sections:
            payload[section.name] = _contiguous(sections[section.name])

    return payload


def flatten_payload(payload: Mapping[str, Any]) -> Iterable[Tuple[str, Any]]:
    """Yield (field path, value) pairs for a nested payload."""
    for spec in RESEARCHER_FIELDS:
        if spec.name in payload:
            yield spec.name, payload[spec.name]
    for section in SECTIONS:
        for index, entry in enumerate(payload.get(section.name) or []):
            if not isinstance(entry, Mapping):
                continue
            for spec in section.item_type.FIELDS:
                if spec.name in entry:
                    yield f'{section.name}[{index}].{spec.name}', entry[spec.name]
