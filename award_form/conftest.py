"""Shared pytest fixtures: a fixed validation date and a fully valid application payload."""

import copy
from datetime import date

import pytest

from award_form import create_app


TODAY = date(2025, 6, 15)

VALID_PAYLOAD = {
    'Affiliation': 'College of Engineering',
    'Name': 'Ali Researcher',
    'Discipline': 'Civil Engineering',
    'PresentAppointment': 'Associate Professor',
    'DateOfJoining': '2019-09-01',
    'ResearchActiveYears': '10-15 years',
    'HighestQualification': 'PhD',
    'SpecialisationArea': 'Structural health monitoring of coastal infrastructure',
    'ScientificPublications': [{
        'Title': 'Corrosion sensing in marine concrete',
        'JournalTitle': 'Journal of Structural Engineering',
        'Quartile': 'Q1',
        'PublicationYear': '2023',
        'AuthorList': 'A. Researcher, B. Colleague',
        'PaperLink': 'https://doi.org/10.1000/xyz123',
        'AuthorContribution': 'Q1 and first author/corresponding author',
    }],
    'NatureSciencePublications': [{
        'Title': 'Coastal infrastructure under climate stress',
        'JournalTitle': 'Nature',
        'Quartile': 'Q1',
        'PublicationYear': '2024',
        'AuthorList': 'C. Author, A. Researcher',
        'PaperLink': '',
        'AuthorContribution': 'Next author affiliation',
    }],
    'Books': [{
        'Title': 'Marine Concrete',
        'Publisher': 'Academic Press',
        'Year': '2022',
        'ISBN': '978-3-16-148410-0',
        'LinkOrPdf': '',
    }],
    'ResearchAbstracts': [{
        'Title': 'Sensor arrays for piers',
        'ConferenceDetails': 'International Bridge Conference, Dubai, March 2024',
        'Investigators': 'A. Researcher',
        'ParticipationType': 'Oral',
        'AbstractLink': '',
    }],
    'ExcellenceAwards': [{
        'AwardDetails': 'Excellence in research 2023',
        'AwardClass': 'A-class',
    }],
    'ResearchGrants': [{
        'Title': 'Smart coastal structures',
        'AwardingBody': 'National Research Fund',
        'GrantType': 'External',
        'Role': 'PI',
    }],
    'Patents': [{
        'PatentDetails': 'Embedded chloride sensor, patent no. 12345',
        'InventorRole': 'First Inventor',
    }],
    'ResearchPrizes': [{
        'PrizeDetails': 'Best paper award, Structures Congress 2023',
    }],
    'StudentSupervisions': [{
        'SupervisionDetails': 'Supervised thesis on fibre reinforced polymers',
        'SupervisionType': "Master's thesis",
    }],
    'OtherScientificExcellences': [{
        'AchievementDetails': 'Editorial board member of a Q1 journal',
    }],
}


@pytest.fixture
def today():
    return TODAY


@pytest.fixture
def valid_payload():
    return copy.deepcopy(VALID_PAYLOAD)


@pytest.fixture
def app():
    return create_app({
        'TESTING': True,
        'SECRET_KEY': 'test-secret',
        'WTF_CSRF_ENABLED': False,
        'RATELIMIT_ENABLED': False,
    })


@pytest.fixture
def client(app):
    return app.test_client()
