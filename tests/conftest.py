"""
Pytest configuration and fixtures
"""
import pytest
import sys
from pathlib import Path
from unittest.mock import MagicMock

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from communitywatch.accounts.models import User
from communitywatch.core.geo_utils import Coordinates
from communitywatch.crowdsource.report_handler import Report


@pytest.fixture
def home_coords():
    """User position in Johannesburg CBD."""
    return Coordinates(lat=-26.2041, lng=28.0473)


@pytest.fixture
def sample_report_documents():
    """Report documents as Firestore returns them."""
    return [
        {
            "id": "r1",
            "userId": "u1",
            "name": "Thandi",
            "reportType": "Crime",
            "description": "Car window smashed outside the shop",
            "location": "Braamfontein",
            "date": "19-10-26",
            "time": "09:15:00 GMT+0200 (South Africa Standard Time)",
            "coords": {"lat": -26.1929, "lng": 28.0305},
        },
        {
            "id": "r2",
            "userId": "u2",
            "name": "Pieter",
            "reportType": "Suspicious Activity",
            "description": "Someone checking car doors",
            "location": "Melville",
            "date": "19-10-26",
            "time": "11:40:00 GMT+0200 (South Africa Standard Time)",
            "coords": {"lat": -26.1750, "lng": 28.0080},
        },
        {
            "id": "r3",
            "userId": "u3",
            "name": "Lerato",
            "reportType": "Be Alert",
            "description": "Power outage, street lights off",
            "location": "Sandton",
            "date": "19-10-26",
            "time": "10:05:00 GMT+0200 (South Africa Standard Time)",
            "coords": {"lat": -26.1076, "lng": 28.0567},
        },
    ]


@pytest.fixture
def sample_reports(sample_report_documents):
    return [Report.from_document(d) for d in sample_report_documents]


@pytest.fixture
def sample_user():
    return User(
        id="u1",
        first_name="Thandi",
        last_name="Mokoena",
        email="thandi@example.com",
        trust_points=3,
        verified=False,
        date_joined="Oct 2026",
        locations=["Braamfontein"],
    )


@pytest.fixture
def sample_user_document(sample_user):
    return sample_user.to_document()


@pytest.fixture
def mock_service():
    """Stand-in for FirebaseService."""
    return MagicMock()
