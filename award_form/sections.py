"""
Dynamic Section Controller

Models the rendered item blocks of each repeatable section and the
add-entry behaviour the browser script (static/js/site.js) performs on the
page:

- Clone the first block's structure (not its values)
- Clear every value and strip is-valid / is-invalid markers
- Renumber the heading to the new entry count
- Rewrite the index in every name / id / label target / message target
  so it matches the new position (0-indexed)
- Append, and focus the first field

Sections only grow, capped at MAX_SECTION_ITEMS. Field names produced here
are the same field paths the validation engine reports against.
"""

import copy
import re
from collections import OrderedDict
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from award_form.binding import field_id
from award_form.schema import (
    ApplicationRecord, FieldSpec, SectionItem, SectionSpec, RESEARCHER_FIELDS, SECTIONS, MAX_SECTION_ITEMS,
    dropdown_options
)
from award_form.validation import MAX_ITEMS_MESSAGE, ValidationResult, field_path


CAP_MESSAGE = MAX_ITEMS_MESSAGE

VALID_CLASS = 'is-valid'
INVALID_CLASS = 'is-invalid'

NAME_INDEX_PATTERN = re.compile(r'\[\d+\]')
ID_INDEX_PATTERN = re.compile(r'_\d+_')
HEADING_NUMBER_PATTERN = re.compile(r'\d+')


class SectionCapReached(Exception):
    """Raised when an entry is added to a section that is already full."""

    def __init__(self, section_name: str, limit: int = MAX_SECTION_ITEMS):
        super().__init__(CAP_MESSAGE)
        self.section_name = section_name
        self.limit = limit


@dataclass
class FieldElement:
    """One input/select/textarea inside an item block."""
    tag: str
    kind: str
    label: str
    name: str
    element_id: str
    label_for: str
    valmsg_for: str
    value: str = ''
    required: bool = False
    options: List[str] = field(default_factory=list)
    css_classes: List[str] = field(default_factory=list)
    messages: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict:
        return {
            'tag': self.tag,
            'kind': self.kind,
            'label': self.label,
            'name': self.name,
            'id': self.element_id,
            'label_for': self.label_for,
            'valmsg_for': self.valmsg_for,
            'value': self.value,
            'required': self.required,
            'options': list(self.options),
            'css_classes': list(self.css_classes),
        }


@dataclass
class ItemBlock:
    """A rendered entry of a repeatable section."""
    heading: str
    fields: List[FieldElement] = field(default_factory=list)

    def to_dict(self) -> Dict:
        return {'heading': self.heading, 'fields': [f.to_dict() for f in self.fields]}


TAG_BY_KIND = {
    'select': 'select',
    'textarea': 'textarea',
}


def _options_for(spec: FieldSpec, options: Dict[str, List[str]]) -> List[str]:
    if spec.option_set is None:
        return []
    return list(options.get(spec.option_set, []))


def build_block(section: SectionSpec, item: SectionItem, index: int,
                result: Optional[ValidationResult] = None,
                options: Optional[Dict[str, List[str]]] = None) -> ItemBlock:
    """
    Build the block for one entry.

    When a validation result is supplied, fields with failures are marked
    is-invalid and the remaining fields is-valid. Select fields take their
    choices from options (defaults to the schema option sets).
    """
    if options is None:
        options = dropdown_options()
    heading = HEADING_NUMBER_PATTERN.sub(str(index + 1), section.heading, count=1)
    block = ItemBlock(heading=heading)
    for spec in item.FIELDS:
        path = field_path(spec.name, section.name, index)
        css_classes = []
        messages = []
        if result is not None:
            messages = result.messages_for(path)
            css_classes.append(INVALID_CLASS if messages else VALID_CLASS)
        element_id = field_id(path)
        block.fields.append(FieldElement(
            tag=TAG_BY_KIND.get(spec.kind, 'input'),
            kind=spec.kind,
            label=spec.label,
            name=path,
            element_id=element_id,
            label_for=element_id,
            valmsg_for=path,
            value=item.value_of(spec),
            required=spec.required,
            options=_options_for(spec, options),
            css_classes=css_classes,
            messages=messages,
        ))
    return block


def reindex_block(block: ItemBlock, new_index: int):
    """Point every field of a block at position new_index."""
    for element in block.fields:
        if element.name:
            element.name = NAME_INDEX_PATTERN.sub(f'[{new_index}]', element.name, count=1)
        if element.valmsg_for:
            element.valmsg_for = NAME_INDEX_PATTERN.sub(f'[{new_index}]', element.valmsg_for, count=1)
        if element.element_id:
            element.element_id = ID_INDEX_PATTERN.sub(f'_{new_index}_', element.element_id, count=1)
        if element.label_for:
            element.label_for = ID_INDEX_PATTERN.sub(f'_{new_index}_', element.label_for, count=1)


class SectionController:
    """Live, ordered list of item blocks for one repeatable section."""

    def __init__(self, section: SectionSpec, blocks: Optional[List[ItemBlock]] = None,
                 limit: int = MAX_SECTION_ITEMS):
        self.section = section
        self.blocks = blocks if blocks is not None else []
        self.limit = limit
        self.focus_id: Optional[str] = None

    @classmethod
    def from_items(cls, section: SectionSpec, items: List[SectionItem],
                   result: Optional[ValidationResult] = None,
                   options: Optional[Dict[str, List[str]]] = None) -> 'SectionController':
        if not items:
            items = [section.item_type(id=1)]
        if options is None:
            options = dropdown_options()
        blocks = [build_block(section, item, index, result, options) for index, item in enumerate(items)]
        return cls(section, blocks)

    @property
    def count(self) -> int:
        return len(self.blocks)

    @property
    def can_add(self) -> bool:
        return self.count < self.limit

    def add_item(self) -> ItemBlock:
        """
        Append a blank copy of the first block.

        Raises:
            SectionCapReached: If the section already holds the maximum number
                of entries (no state change)
        """
        if not self.can_add:
            raise SectionCapReached(self.section.name, self.limit)

        new_index = self.count
        if self.blocks:
            template = copy.deepcopy(self.blocks[0])
        else:
            template = build_block(self.section, self.section.item_type(), 0)

        template.heading = HEADING_NUMBER_PATTERN.sub(str(new_index + 1), template.heading, count=1)
        for element in template.fields:
            element.value = ''
            element.messages = []
            element.css_classes = [
                c for c in element.css_classes if c not in (VALID_CLASS, INVALID_CLASS)
            ]
        reindex_block(template, new_index)

        self.blocks.append(template)
        self.focus_id = template.fields[0].element_id if template.fields else None
        return template

    def field_names(self) -> List[str]:
        return [element.name for block in self.blocks for element in block.fields]


def build_researcher_fields(record: ApplicationRecord,
                            result: Optional[ValidationResult] = None,
                            options: Optional[Dict[str, List[str]]] = None) -> List[FieldElement]:
    """Field elements for the non-repeating researcher fields."""
    if options is None:
        options = dropdown_options()
    elements = []
    for spec in RESEARCHER_FIELDS:
        messages = result.messages_for(spec.name) if result is not None else []
        css_classes = []
        if result is not None:
            css_classes.append(INVALID_CLASS if messages else VALID_CLASS)
        elements.append(FieldElement(
            tag=TAG_BY_KIND.get(spec.kind, 'input'),
            kind=spec.kind,
            label=spec.label,
            name=spec.name,
            element_id=field_id(spec.name),
            label_for=field_id(spec.name),
            valmsg_for=spec.name,
            value=record.value_of(spec),
            required=spec.required,
            options=_options_for(spec, options),
            css_classes=css_classes,
            messages=messages,
        ))
    return elements


def build_section_controllers(record: ApplicationRecord,
                              result: Optional[ValidationResult] = None,
                              options: Optional[Dict[str, List[str]]] = None) -> Dict[str, SectionController]:
    """Controllers for every section of the page, in display order."""
    if options is None:
        options = dropdown_options()
    controllers = OrderedDict()
    for section in SECTIONS:
        controllers[section.name] = SectionController.from_items(section, record.items(section), result, options)
    return controllers
