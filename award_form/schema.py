"""
Record Schema Module

Declares the application record: researcher fields, the ten repeatable
sections and the closed option sets used to render the dropdowns.

Every field is described by a FieldSpec carrying its wire name (also used in
field paths such as ``ScientificPublications[2].Title``), the Python
attribute that holds it, its display label, its kind (drives coercion and
rendering) and its ordered constraint list.

Values are held raw, as submitted, so a rejected record re-displays exactly
what the user typed. Coercion to int/date happens during validation.
"""

import dataclasses
from dataclasses import dataclass, field
from typing import Any, ClassVar, Dict, List, Optional

from award_form.constraints import (
    Constraint, Required, Length, Range, Pattern, Url,
    NotFutureDate, MinimumServiceYears, PublicationYearWithinLastFive
)
from award_form.utils import to_raw


MAX_SECTION_ITEMS = 10

# Explicit year bounds applied alongside the rolling five-year window
PUBLICATION_YEAR_MIN = 2020
PUBLICATION_YEAR_MAX = 2025


# Dropdown option sets
AFFILIATION_OPTIONS = [
    'Office of the Vice President for Administrative and Financial Affairs',
    'Office of the Vice President for Academic Affairs',
    'College of Medicine',
    'College of Dentistry',
    'College of Nursing',
    'College of Applied Medical Sciences',
    'College of Clinical Pharmacy',
    'College of Public Health',
    'College of Applied Medical Sciences – Jubail',
    'College of Architecture and Planning',
    'College of Design',
    'College of Engineering',
    'College of Applied Studies and Community Service',
    'College of Business Administration',
    'College of Computer Science and Information Technology',
    'College of Science',
    'Applied College',
    'College of Arts',
    'College of Education',
    'College of Science and Humanities – Jubail',
    'College of Sharia and Law',
    'Deanship of Preparatory year',
    'Office of the Vice President for Scientific Research and Innovation',
    'Office of the Vice President for Development and Community Partnership',
]
RESEARCH_ACTIVE_YEARS_OPTIONS = ['<10 years', '10-15 years', '15-20 years', '>20 years']
QUALIFICATION_OPTIONS = ['Master', 'PhD']
AUTHOR_CONTRIBUTION_OPTIONS = [
    'Q1 and first author/corresponding author',
    'Q1 and co-author',
    'Q2 and first author/corresponding author',
    'Q2 and co-author',
]
NATURE_AUTHOR_CONTRIBUTION_OPTIONS = [
    'Corresponding author affiliation',
    'First author affiliation (second author affiliation if the first author '
    'affiliation is the same as corresponding author affiliation)',
    'Next author affiliation',
    'Other author affiliations',
]
QUARTILE_OPTIONS = ['Q1', 'Q2', 'Q3', 'Q4']
PARTICIPATION_TYPES = ['Oral', 'Poster']
AWARD_CLASSES = ['A-class', 'B-class', 'C-class']
GRANT_TYPES = ['External', 'Internal', 'Other']
GRANT_ROLES = ['PI', 'Co-PI', 'Contributor Researcher']
INVENTOR_ROLES = ['First Inventor', 'Co-Inventor']
SUPERVISION_TYPES = ["Ph.D. thesis", "Master's thesis", 'Bachelor dissertation', 'Others']

# Regex patterns (matched in full)
QUARTILE_PATTERN = r'Q1|Q2|Q3|Q4'
ISBN_PATTERN = (
    r'(?:ISBN(?:-1[03])?:? )?'
    r'(?=[0-9X]{10}$|(?=(?:[0-9]+[- ]){3})[- 0-9X]{13}$|97[89][0-9]{10}$|(?=(?:[0-9]+[- ]){4})[- 0-9]{17}$)'
    r'(?:97[89][- ]?)?[0-9]{1,5}[- ]?[0-9]+[- ]?[0-9]+[- ]?[0-9X]'
)
PARTICIPATION_PATTERN = r'Oral|Poster'
AWARD_CLASS_PATTERN = r'A-class|B-class|C-class'
GRANT_TYPE_PATTERN = r'External|Internal|Other'
GRANT_ROLE_PATTERN = r'PI|Co-PI|Contributor Researcher'
INVENTOR_ROLE_PATTERN = r'First Inventor|Co-Inventor'
SUPERVISION_TYPE_PATTERN = r"Ph\.D\. thesis|Master's thesis|Bachelor dissertation|Others"


@dataclass
class FieldSpec:
    """One scalar field of the record."""
    name: str
    attr: str
    label: str
    kind: str = 'text'
    constraints: List[Constraint] = field(default_factory=list)
    option_set: Optional[str] = None

    @property
    def required(self) -> bool:
        return any(isinstance(c, Required) for c in self.constraints)


def _year_constraints(label: str) -> List[Constraint]:
    return [
        Required(f'{label} is required'),
        Range(PUBLICATION_YEAR_MIN, PUBLICATION_YEAR_MAX,
              f'{label} must be between {PUBLICATION_YEAR_MIN} and {PUBLICATION_YEAR_MAX}'),
        PublicationYearWithinLastFive(f'{label} must be within the last 5 years'),
    ]


def _publication_fields(contribution_set: str) -> List[FieldSpec]:
    """Field layout shared by regular and Nature/Science publications."""
    return [
        FieldSpec('Title', 'title', 'Publication Title', 'text', [
            Required('Publication title is required'),
            Length(5, 200, 'Publication title must be between 5 and 200 characters'),
        ]),
        FieldSpec('JournalTitle', 'journal_title', 'Journal Title', 'text', [
            Required('Journal title is required'),
            Length(max_length=200, message='Journal title must not exceed 200 characters'),
        ]),
        FieldSpec('Quartile', 'quartile', 'Quartile', 'select', [
            Required('Quartile is required'),
            Pattern(QUARTILE_PATTERN, 'Quartile must be Q1, Q2, Q3, or Q4'),
        ], 'quartile'),
        FieldSpec('PublicationYear', 'publication_year', 'Publication Year', 'int',
                  _year_constraints('Publication year')),
        FieldSpec('AuthorList', 'author_list', 'Author List', 'textarea', [
            Required('Author list is required'),
            Length(max_length=500, message='Author list must not exceed 500 characters'),
        ]),
        FieldSpec('PaperLink', 'paper_link', 'Paper Link', 'url', [
            Url('Please enter a valid URL'),
        ]),
        FieldSpec('AuthorContribution', 'author_contribution', 'Author Contribution', 'select', [
            Required('Author contribution is required'),
        ], contribution_set),
    ]


RESEARCHER_FIELDS = [
    FieldSpec('Affiliation', 'affiliation', 'Researcher Affiliation', 'select', [
        Required('Please select your affiliation'),
    ], 'affiliation'),
    FieldSpec('Name', 'name', 'Researcher Name', 'text', [
        Required('Researcher name is required'),
        Length(3, 100, 'Name must be between 3 and 100 characters'),
    ]),
    FieldSpec('Discipline', 'discipline', 'Discipline/Subject Category', 'text', [
        Required('Discipline/Subject Category is required'),
        Length(max_length=100, message='Discipline must not exceed 100 characters'),
    ]),
    FieldSpec('PresentAppointment', 'present_appointment', 'Present Appointment', 'text', [
        Required('Present Appointment is required'),
        Length(max_length=100, message='Present Appointment must not exceed 100 characters'),
    ]),
    FieldSpec('DateOfJoining', 'date_of_joining', 'Date of Joining', 'date', [
        Required('Date of Joining is required'),
        NotFutureDate('Date of joining cannot be in the future'),
        MinimumServiceYears(message='Minimum of 2-year service is required'),
    ]),
    FieldSpec('ResearchActiveYears', 'research_active_years',
              'How long have you been active in research', 'select', [
                  Required('Please select how long you have been active in research'),
              ], 'research_active_years'),
    FieldSpec('HighestQualification', 'highest_qualification', 'Highest Qualification', 'select', [
        Required('Please select your highest qualification'),
    ], 'qualification'),
    FieldSpec('SpecialisationArea', 'specialisation_area',
              'Area of Specialisation/Research Interest', 'textarea', [
                  Required('Area of Specialisation/Research Interest is required'),
                  Length(max_length=500, message='Area of Specialisation must not exceed 500 characters'),
              ]),
]


@dataclass
class SectionItem:
    """Base for one entry of a repeatable section."""
    id: int = 0

    FIELDS: ClassVar[List[FieldSpec]] = []

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]], position: int = 0) -> 'SectionItem':
        if not isinstance(data, dict):
            return cls(id=position + 1)
        values = {spec.attr: to_raw(data.get(spec.name)) for spec in cls.FIELDS}
        return cls(id=position + 1, **values)

    def to_dict(self) -> Dict[str, str]:
        return {spec.name: getattr(self, spec.attr) for spec in self.FIELDS}

    def value_of(self, spec: FieldSpec) -> str:
        return getattr(self, spec.attr)

    def is_blank(self) -> bool:
        return all(not str(getattr(self, spec.attr)).strip() for spec in self.FIELDS)


@dataclass
class ScientificPublication(SectionItem):
    title: str = ''
    journal_title: str = ''
    quartile: str = ''
    publication_year: str = ''
    author_list: str = ''
    paper_link: str = ''
    author_contribution: str = ''

    FIELDS: ClassVar[List[FieldSpec]] = _publication_fields('author_contribution')


@dataclass
class NatureSciencePublication(SectionItem):
    title: str = ''
    journal_title: str = ''
    quartile: str = ''
    publication_year: str = ''
    author_list: str = ''
    paper_link: str = ''
    author_contribution: str = ''

    FIELDS: ClassVar[List[FieldSpec]] = _publication_fields('nature_author_contribution')


@dataclass
class Book(SectionItem):
    title: str = ''
    publisher: str = ''
    year: str = ''
    isbn: str = ''
    link_or_pdf: str = ''

    FIELDS: ClassVar[List[FieldSpec]] = [
        FieldSpec('Title', 'title', 'Book Title', 'text', [
            Required('Book title is required'),
            Length(3, 200, 'Book title must be between 3 and 200 characters'),
        ]),
        FieldSpec('Publisher', 'publisher', 'Publisher', 'text', [
            Required('Publisher is required'),
            Length(max_length=100, message='Publisher must not exceed 100 characters'),
        ]),
        FieldSpec('Year', 'year', 'Year', 'int', _year_constraints('Year')),
        FieldSpec('ISBN', 'isbn', 'ISBN', 'text', [
            Required('ISBN is required'),
            Pattern(ISBN_PATTERN, 'Please enter a valid ISBN'),
        ]),
        FieldSpec('LinkOrPdf', 'link_or_pdf', 'Link or PDF', 'text'),
    ]


@dataclass
class ResearchAbstract(SectionItem):
    title: str = ''
    conference_details: str = ''
    investigators: str = ''
    participation_type: str = ''
    abstract_link: str = ''

    FIELDS: ClassVar[List[FieldSpec]] = [
        FieldSpec('Title', 'title', 'Research Abstract Title', 'text', [
            Required('Research abstract title is required'),
            Length(5, 200, 'Research abstract title must be between 5 and 200 characters'),
        ]),
        FieldSpec('ConferenceDetails', 'conference_details',
                  'Scientific Conference Name, Location and Date', 'textarea', [
                      Required('Scientific Conference details are required'),
                      Length(max_length=300, message='Conference details must not exceed 300 characters'),
                  ]),
        FieldSpec('Investigators', 'investigators', 'Investigator(s)', 'text', [
            Required('Investigator(s) is required'),
            Length(max_length=300, message='Investigators must not exceed 300 characters'),
        ]),
        FieldSpec('ParticipationType', 'participation_type', 'Type of Participation (Oral, Poster)', 'select', [
            Required('Type of Participation is required'),
            Pattern(PARTICIPATION_PATTERN, "Participation type must be either 'Oral' or 'Poster'"),
        ], 'participation_type'),
        FieldSpec('AbstractLink', 'abstract_link', 'Abstract Link', 'url', [
            Url('Please enter a valid URL'),
        ]),
    ]


@dataclass
class ExcellenceAward(SectionItem):
    award_details: str = ''
    award_class: str = ''

    FIELDS: ClassVar[List[FieldSpec]] = [
        FieldSpec('AwardDetails', 'award_details', 'Award Details', 'textarea', [
            Required('Award details are required'),
            Length(5, 300, 'Award details must be between 5 and 300 characters'),
        ]),
        FieldSpec('AwardClass', 'award_class', 'Award Class', 'select', [
            Required('Award class is required'),
            Pattern(AWARD_CLASS_PATTERN, 'Award class must be A-class, B-class, or C-class'),
        ], 'award_class'),
    ]


@dataclass
class ResearchGrant(SectionItem):
    title: str = ''
    awarding_body: str = ''
    grant_type: str = ''
    role: str = ''

    FIELDS: ClassVar[List[FieldSpec]] = [
        FieldSpec('Title', 'title', 'Grant Title', 'text', [
            Required('Grant title is required'),
            Length(5, 200, 'Grant title must be between 5 and 200 characters'),
        ]),
        FieldSpec('AwardingBody', 'awarding_body', 'Awarding Body', 'text', [
            Required('Awarding body is required'),
            Length(max_length=100, message='Awarding body must not exceed 100 characters'),
        ]),
        FieldSpec('GrantType', 'grant_type', 'Grant Type (External/Internal/Other)', 'select', [
            Required('Grant type is required'),
            Pattern(GRANT_TYPE_PATTERN, 'Grant type must be External, Internal, or Other'),
        ], 'grant_type'),
        FieldSpec('Role', 'role', 'PI, Co-PI or Contributor Researcher', 'select', [
            Required('Role is required'),
            Pattern(GRANT_ROLE_PATTERN, 'Role must be PI, Co-PI, or Contributor Researcher'),
        ], 'grant_role'),
    ]


@dataclass
class Patent(SectionItem):
    patent_details: str = ''
    inventor_role: str = ''

    FIELDS: ClassVar[List[FieldSpec]] = [
        FieldSpec('PatentDetails', 'patent_details', 'Patent Details', 'textarea', [
            Required('Patent details are required'),
            Length(10, 500, 'Patent details must be between 10 and 500 characters'),
        ]),
        FieldSpec('InventorRole', 'inventor_role', 'Inventor Role', 'select', [
            Required('Inventor role is required'),
            Pattern(INVENTOR_ROLE_PATTERN, 'Inventor role must be First Inventor or Co-Inventor'),
        ], 'inventor_role'),
    ]


@dataclass
class ResearchPrize(SectionItem):
    prize_details: str = ''

    FIELDS: ClassVar[List[FieldSpec]] = [
        FieldSpec('PrizeDetails', 'prize_details', 'Prize/Award Details', 'textarea', [
            Required('Prize/Award details are required'),
            Length(10, 500, 'Prize/Award details must be between 10 and 500 characters'),
        ]),
    ]


@dataclass
class StudentSupervision(SectionItem):
    supervision_details: str = ''
    supervision_type: str = ''

    FIELDS: ClassVar[List[FieldSpec]] = [
        FieldSpec('SupervisionDetails', 'supervision_details', 'Supervision Details', 'textarea', [
            Required('Supervision details are required'),
            Length(10, 500, 'Supervision details must be between 10 and 500 characters'),
        ]),
        FieldSpec('SupervisionType', 'supervision_type', 'Supervision Type', 'select', [
            Required('Supervision type is required'),
            Pattern(SUPERVISION_TYPE_PATTERN,
                    "Supervision type must be Ph.D. thesis, Master's thesis, "
                    "Bachelor dissertation, or Others"),
        ], 'supervision_type'),
    ]


@dataclass
class OtherScientificExcellence(SectionItem):
    achievement_details: str = ''

    FIELDS: ClassVar[List[FieldSpec]] = [
        FieldSpec('AchievementDetails', 'achievement_details', 'Achievement Details', 'textarea', [
            Required('Achievement details are required'),
            Length(10, 500, 'Achievement details must be between 10 and 500 characters'),
        ]),
    ]


@dataclass(frozen=True)
class SectionSpec:
    """A repeatable section: wire name, record attribute and page wiring."""
    name: str
    attr: str
    item_type: type
    title: str
    heading: str
    button_id: str
    container_id: str


SECTIONS = [
    SectionSpec('ScientificPublications', 'scientific_publications', ScientificPublication,
                'A. Scientific Publications', 'Publication 1',
                'addScientificPublication', 'scientificPublicationsContainer'),
    SectionSpec('NatureSciencePublications', 'nature_science_publications', NatureSciencePublication,
                'B. Publications in Nature or Science', 'Publication 1',
                'addNatureSciencePublication', 'natureSciencePublicationsContainer'),
    SectionSpec('Books', 'books', Book,
                'C. Books', 'Book 1',
                'addBook', 'booksContainer'),
    SectionSpec('ResearchAbstracts', 'research_abstracts', ResearchAbstract,
                'Scientific Research Abstracts', 'Abstract 1',
                'addResearchAbstract', 'researchAbstractsContainer'),
    SectionSpec('ExcellenceAwards', 'excellence_awards', ExcellenceAward,
                'Excellence Awards', 'Award 1',
                'addExcellenceAward', 'excellenceAwardsContainer'),
    SectionSpec('ResearchGrants', 'research_grants', ResearchGrant,
                'Research Grants', 'Grant 1',
                'addResearchGrant', 'researchGrantsContainer'),
    SectionSpec('Patents', 'patents', Patent,
                'Patents', 'Patent 1',
                'addPatent', 'patentsContainer'),
    SectionSpec('ResearchPrizes', 'research_prizes', ResearchPrize,
                'Research-Related Prizes/Awards', 'Prize 1',
                'addResearchPrize', 'researchPrizesContainer'),
    SectionSpec('StudentSupervisions', 'student_supervisions', StudentSupervision,
                "Students' Research Supervision", 'Supervision 1',
                'addStudentSupervision', 'studentSupervisionsContainer'),
    SectionSpec('OtherScientificExcellences', 'other_scientific_excellences', OtherScientificExcellence,
                'Other Scientific Excellence Related Practices', 'Achievement 1',
                'addOtherExcellence', 'otherExcellencesContainer'),
]

_SECTIONS_BY_NAME = {section.name: section for section in SECTIONS}


def get_section(name: str) -> Optional[SectionSpec]:
    """Look up a section by its wire name."""
    return _SECTIONS_BY_NAME.get(name)


@dataclass
class ApplicationRecord:
    """One award application, as submitted."""
    affiliation: str = ''
    name: str = ''
    discipline: str = ''
    present_appointment: str = ''
    date_of_joining: str = ''
    research_active_years: str = ''
    highest_qualification: str = ''
    specialisation_area: str = ''

    scientific_publications: List[ScientificPublication] = field(default_factory=list)
    nature_science_publications: List[NatureSciencePublication] = field(default_factory=list)
    books: List[Book] = field(default_factory=list)
    research_abstracts: List[ResearchAbstract] = field(default_factory=list)
    excellence_awards: List[ExcellenceAward] = field(default_factory=list)
    research_grants: List[ResearchGrant] = field(default_factory=list)
    patents: List[Patent] = field(default_factory=list)
    research_prizes: List[ResearchPrize] = field(default_factory=list)
    student_supervisions: List[StudentSupervision] = field(default_factory=list)
    other_scientific_excellences: List[OtherScientificExcellence] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> 'ApplicationRecord':
        if not data:
            return cls()
        values = {spec.attr: to_raw(data.get(spec.name)) for spec in RESEARCHER_FIELDS}
        for section in SECTIONS:
            entries = data.get(section.name)
            if not isinstance(entries, list):
                entries = []
            values[section.attr] = [
                section.item_type.from_dict(entry, position)
                for position, entry in enumerate(entries)
            ]
        return cls(**values)

    def to_dict(self) -> Dict[str, Any]:
        result = {spec.name: getattr(self, spec.attr) for spec in RESEARCHER_FIELDS}
        for section in SECTIONS:
            result[section.name] = [item.to_dict() for item in self.items(section)]
        return result

    def value_of(self, spec: FieldSpec) -> str:
        return getattr(self, spec.attr)

    def items(self, section: SectionSpec) -> List[SectionItem]:
        return getattr(self, section.attr)

    def entry_counts(self) -> Dict[str, int]:
        """Number of entries per section, blank placeholders excluded."""
        return {
            section.name: sum(1 for item in self.items(section) if not item.is_blank())
            for section in SECTIONS
        }


def new_record() -> ApplicationRecord:
    """Blank record for a fresh form: one placeholder entry per section."""
    return ensure_sections(ApplicationRecord())


def ensure_sections(record: ApplicationRecord) -> ApplicationRecord:
    """
    Return a record in which every empty section holds one placeholder entry.

    The input record is left untouched; populated sections keep their order
    and length.
    """
    padding = {
        section.attr: [section.item_type(id=1)]
        for section in SECTIONS
        if not record.items(section)
    }
    if not padding:
        return record
    return dataclasses.replace(record, **padding)


def dropdown_options() -> Dict[str, List[str]]:
    """All option sets needed to render the form, keyed by FieldSpec.option_set."""
    return {
        'affiliation': AFFILIATION_OPTIONS,
        'research_active_years': RESEARCH_ACTIVE_YEARS_OPTIONS,
        'qualification': QUALIFICATION_OPTIONS,
        'author_contribution': AUTHOR_CONTRIBUTION_OPTIONS,
        'nature_author_contribution': NATURE_AUTHOR_CONTRIBUTION_OPTIONS,
        'quartile': QUARTILE_OPTIONS,
        'participation_type': PARTICIPATION_TYPES,
        'award_class': AWARD_CLASSES,
        'grant_type': GRANT_TYPES,
        'grant_role': GRANT_ROLES,
        'inventor_role': INVENTOR_ROLES,
        'supervision_type': SUPERVISION_TYPES,
    }
