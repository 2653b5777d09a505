"""
Tests for API endpoints
"""
import pytest
from unittest.mock import patch, MagicMock

from fastapi.testclient import TestClient

from communitywatch.api import main
from communitywatch.core.constants import ALERT_MESSAGES
from communitywatch.ingestion.nominatim_client import GeocodingError, LocationSuggestion
from communitywatch.services.firebase_service import (
    AuthenticationError,
    AuthSession,
    DocumentNotFoundError,
    FirebaseServiceError,
)


@pytest.fixture
def firebase(sample_user_document):
    """Firebase service mock with one stored user."""
    service = MagicMock()
    service.fetch_document.return_value = sample_user_document
    service.is_email_verified.return_value = False
    return service


@pytest.fixture
def geocoder():
    return MagicMock()


@pytest.fixture
def client(firebase, geocoder):
    main._map_stores.clear()
    with patch.object(main, "_firebase", firebase), patch.object(main, "_geocoder", geocoder):
        yield TestClient(main.app)
    main._map_stores.clear()


class TestSystemEndpoints:
    """Test suite for system endpoints."""

    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["version"] == main.API_VERSION
        assert "firebase" in data["modules"]


class TestAuthEndpoints:
    """Test suite for account endpoints."""

    def test_sign_up(self, client, firebase, sample_user_document):
        firebase.sign_up.return_value = sample_user_document

        response = client.post("/api/v1/auth/signup", json={
            "first_name": "Thandi",
            "last_name": "Mokoena",
            "email": "thandi@example.com",
            "password": "Abcde1!",
            "confirm_password": "Abcde1!",
        })

        assert response.status_code == 200
        assert response.json()["id"] == "u1"
        profile, password = firebase.sign_up.call_args[0]
        assert profile["firstName"] == "Thandi"
        assert password == "Abcde1!"

    def test_sign_up_weak_password(self, client, firebase):
        response = client.post("/api/v1/auth/signup", json={
            "first_name": "Thandi",
            "last_name": "Mokoena",
            "email": "thandi@example.com",
            "password": "password",
        })

        assert response.status_code == 400
        assert response.json()["detail"] == ALERT_MESSAGES["weak_password"]
        firebase.sign_up.assert_not_called()

    def test_sign_up_email_taken(self, client, firebase):
        firebase.sign_up.side_effect = AuthenticationError("SignUp Error: EMAIL_EXISTS")

        response = client.post("/api/v1/auth/signup", json={
            "first_name": "Thandi",
            "last_name": "Mokoena",
            "email": "thandi@example.com",
            "password": "Abcde1!",
        })

        assert response.status_code == 400

    def test_sign_in(self, client, firebase):
        firebase.sign_in.return_value = AuthSession(
            uid="u1", email="thandi@example.com", id_token="tok", refresh_token="ref", expires_in=3600
        )

        response = client.post("/api/v1/auth/signin", json={
            "email": "thandi@example.com",
            "password": "Abcde1!",
        })

        assert response.status_code == 200
        data = response.json()
        assert data["id_token"] == "tok"
        assert data["user"]["first_name"] == "Thandi"

    def test_sign_in_wrong_password(self, client, firebase):
        firebase.sign_in.side_effect = AuthenticationError("SignIn Error: INVALID_PASSWORD")

        response = client.post("/api/v1/auth/signin", json={
            "email": "thandi@example.com",
            "password": "nope",
        })

        assert response.status_code == 401

    def test_sign_out(self, client, firebase):
        response = client.post("/api/v1/auth/signout", json={"user_id": "u1"})

        assert response.status_code == 200
        firebase.sign_out.assert_called_once_with("u1")

    def test_delete_account(self, client, firebase):
        response = client.delete("/api/v1/auth/account", params={"user_id": "u1"})

        assert response.status_code == 200
        firebase.delete_account.assert_called_once_with("u1")

    def test_verify_email(self, client, firebase):
        response = client.post("/api/v1/auth/verify-email", json={"user_id": "u1", "id_token": "tok"})

        assert response.status_code == 200
        assert response.json()["message"] == ALERT_MESSAGES["verification_sent"]
        firebase.send_email_verification.assert_called_once_with("tok")


class TestUserEndpoints:
    """Test suite for profile endpoints."""

    def test_get_user(self, client):
        response = client.get("/api/v1/users/u1")

        assert response.status_code == 200
        assert response.json()["locations"] == ["Braamfontein"]

    def test_get_unknown_user(self, client, firebase):
        firebase.fetch_document.side_effect = DocumentNotFoundError("FetchDocument Error: Document does not exist.")

        response = client.get("/api/v1/users/ghost")

        assert response.status_code == 404

    def test_add_locations(self, client, firebase):
        response = client.post("/api/v1/users/u1/locations", json={"locations": ["Melville"]})

        assert response.status_code == 200
        assert response.json()["locations"] == ["Braamfontein", "Melville"]
        firebase.array_union.assert_called_once_with("users", "u1", "locations", ["Melville"])

    def test_remove_location(self, client, firebase):
        response = client.delete("/api/v1/users/u1/locations", params={"location": "Braamfontein"})

        assert response.status_code == 200
        assert response.json()["locations"] == []


class TestReportEndpoints:
    """Test suite for report endpoints."""

    def report_payload(self, **overrides):
        payload = {
            "user_id": "u1",
            "report_type": "Crime",
            "location": "Braamfontein",
            "description": "Phone snatched at the taxi rank",
            "latitude": -26.1929,
            "longitude": 28.0305,
        }
        payload.update(overrides)
        return payload

    def test_create_report(self, client, firebase):
        firebase.create_document.return_value = "r9"
        main.get_map_store("u1").set_map_state("Pin")

        response = client.post("/api/v1/reports", json=self.report_payload())

        assert response.status_code == 200
        data = response.json()
        assert data["id"] == "r9"
        assert data["name"] == "Thandi"
        assert main.get_map_store("u1").map_state.value == "HeatMap"

    def test_create_incomplete_report(self, client, firebase):
        response = client.post("/api/v1/reports", json=self.report_payload(location=""))

        assert response.status_code == 400
        assert response.json()["detail"] == ALERT_MESSAGES["report_incomplete"]
        firebase.create_document.assert_not_called()

    def test_create_report_backend_failure(self, client, firebase):
        firebase.create_document.side_effect = FirebaseServiceError("CreateDocument Error: denied")

        response = client.post("/api/v1/reports", json=self.report_payload())

        assert response.status_code == 502
        assert response.json()["detail"] == ALERT_MESSAGES["report_failed"]

    def test_create_report_invalid_latitude(self, client):
        response = client.post("/api/v1/reports", json=self.report_payload(latitude=120))

        assert response.status_code == 422

    def test_todays_reports_ranked(self, client, firebase, sample_report_documents):
        firebase.query_documents.return_value = sample_report_documents

        response = client.get("/api/v1/reports/today")

        assert response.status_code == 200
        data = response.json()
        assert data["count"] == 3
        assert data["error"] is None
        assert [r["id"] for r in data["reports"]] == ["r2", "r3", "r1"]

    def test_todays_reports_for_subscriptions(self, client, firebase, sample_report_documents):
        firebase.query_documents.return_value = sample_report_documents[:1]

        response = client.get("/api/v1/reports/today", params={"user_id": "u1"})

        assert response.status_code == 200
        filters = firebase.query_documents.call_args[0][1]
        assert ("location", "in", ["Braamfontein"]) in filters

    def test_todays_reports_search_and_limit(self, client, firebase, sample_report_documents):
        firebase.query_documents.return_value = sample_report_documents

        response = client.get("/api/v1/reports/today", params={"q": "car", "limit": 1})

        assert [r["id"] for r in response.json()["reports"]] == ["r2"]

    def test_todays_reports_unavailable(self, client, firebase):
        firebase.query_documents.side_effect = FirebaseServiceError("QueryDocuments Error: offline")

        response = client.get("/api/v1/reports/today")

        assert response.status_code == 200
        data = response.json()
        assert data["reports"] == []
        assert data["error"] == ALERT_MESSAGES["reports_unavailable"]


class TestLocationEndpoints:
    """Test suite for location search endpoints."""

    def test_search(self, client, geocoder):
        geocoder.search.return_value = [
            LocationSuggestion(name="Braamfontein", full_address="Braamfontein, Johannesburg",
                               latitude=-26.19, longitude=28.03),
        ]

        response = client.get("/api/v1/locations/search", params={"q": "Braam"})

        assert response.status_code == 200
        assert response.json()[0]["name"] == "Braamfontein"

    def test_search_failure(self, client, geocoder):
        geocoder.search.side_effect = GeocodingError("")

        response = client.get("/api/v1/locations/search", params={"q": "Braam"})

        assert response.status_code == 502
        assert response.json()["detail"] == ALERT_MESSAGES["locations_failed"]

    def test_reverse(self, client, geocoder):
        geocoder.reverse_geocode.return_value = "Braamfontein"

        response = client.get("/api/v1/locations/reverse", params={"latitude": -26.19, "longitude": 28.03})

        assert response.json()["location"] == "Braamfontein"


class TestMapEndpoints:
    """Test suite for map endpoints."""

    def test_default_state(self, client):
        response = client.get("/api/v1/map/state", params={"user_id": "u1"})

        assert response.json() == {"map_state": "HeatMap", "pin": {"lat": 0.0, "lng": 0.0}}

    def test_set_state_and_pin(self, client):
        client.put("/api/v1/map/state", json={"user_id": "u1", "map_state": "Pin"})
        response = client.put("/api/v1/map/pin", json={"user_id": "u1", "latitude": -26.19, "longitude": 28.03})

        assert response.json() == {"map_state": "Pin", "pin": {"lat": -26.19, "lng": 28.03}}

    def test_unknown_state_shows_heat_map(self, client):
        response = client.put("/api/v1/map/state", json={"user_id": "u1", "map_state": "Satellite"})

        assert response.json()["map_state"] == "HeatMap"

    def test_invalid_pin_resets(self, client):
        response = client.put("/api/v1/map/pin", json={"user_id": "u1", "latitude": 95.0, "longitude": 28.03})

        assert response.json()["pin"] == {"lat": 0.0, "lng": 0.0}

    def test_reading_state_does_not_store_unknown_users(self, client):
        for i in range(20):
            response = client.get("/api/v1/map/state", params={"user_id": f"visitor-{i}"})
            assert response.json()["map_state"] == "HeatMap"

        assert main._map_stores == {}

    def test_set_state_for_unknown_user(self, client, firebase):
        firebase.fetch_document.side_effect = DocumentNotFoundError("FetchDocument Error: Document does not exist.")

        state = client.put("/api/v1/map/state", json={"user_id": "ghost", "map_state": "Pin"})
        pin = client.put("/api/v1/map/pin", json={"user_id": "ghost", "latitude": -26.19, "longitude": 28.03})

        assert state.status_code == 404
        assert pin.status_code == 404
        assert "ghost" not in main._map_stores

    def test_heat_map_with_partial_position_centers_on_reports(self, client, firebase, sample_report_documents):
        firebase.query_documents.return_value = sample_report_documents

        with patch.object(main, "create_heat_map", wraps=main.create_heat_map) as render:
            response = client.get("/api/v1/map/heatmap", params={"latitude": -26.2})

        assert response.status_code == 200
        assert render.call_args[1]["center"] is None

    def test_heat_map_html(self, client, firebase, sample_report_documents):
        firebase.query_documents.return_value = sample_report_documents

        response = client.get("/api/v1/map/heatmap", params={"latitude": -26.2, "longitude": 28.04})

        assert response.status_code == 200
        assert "text/html" in response.headers["content-type"]


class TestFeedbackEndpoints:
    """Test suite for feedback endpoint."""

    def test_post_feedback(self, client, firebase):
        response = client.post("/api/v1/feedback", json={"user_id": "u1", "feedback": "Great app"})

        assert response.status_code == 200
        assert response.json()["id"]
        firebase.send_document.assert_called_once()

    def test_empty_feedback(self, client):
        response = client.post("/api/v1/feedback", json={"user_id": "u1", "feedback": "  "})

        assert response.status_code == 400
